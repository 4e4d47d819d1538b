#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Tests for configuration loading, validation and run settings.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import pytest
import yaml

from taxleak.config import DEFAULT_CONFIG, LeakageSettings, load_config, save_config_template, validate_config
from taxleak.core.gene_counters import UndefinedPolicy
from taxleak.core.scan import MalformedPolicy
from taxleak.errors import InputUnreadable


class TestLoadConfig:
    """Test YAML loading and merging."""

    def test_defaults_without_file(self):
        config = load_config()
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_defaults_not_mutated(self):
        config = load_config()
        config['filtering']['min_mapq'] = 30
        assert DEFAULT_CONFIG['filtering']['min_mapq'] == 4

    def test_partial_override_is_merged(self, temp_output_dir):
        path = temp_output_dir / "config.yaml"
        path.write_text("filtering:\n  min_mapq: 20\nmasking:\n  min_genes: 10\n")

        config = load_config(path)

        assert config['filtering']['min_mapq'] == 20
        assert config['masking']['min_genes'] == 10
        assert config['masking']['leak_threshold'] == 10.0
        assert config['normalization']['on_undefined'] == 'skip'

    def test_empty_file_gives_defaults(self, temp_output_dir):
        path = temp_output_dir / "empty.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULT_CONFIG

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(InputUnreadable):
            load_config(temp_output_dir / "nope.yaml")

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "bad.yaml"
        path.write_text("filtering: [unclosed\n")
        with pytest.raises(InputUnreadable):
            load_config(path)

    def test_non_mapping(self, temp_output_dir):
        path = temp_output_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InputUnreadable):
            load_config(path)

    def test_template_round_trip(self, temp_output_dir):
        path = temp_output_dir / "template.yaml"
        save_config_template(path)

        with open(path) as f:
            assert yaml.safe_load(f) == DEFAULT_CONFIG
        assert validate_config(load_config(path)) == []


class TestValidateConfig:

    def test_defaults_valid(self):
        assert validate_config(load_config()) == []

    @pytest.mark.parametrize("section,key,value", [
        ('filtering', 'min_mapq', -1),
        ('filtering', 'min_mapq', 256),
        ('filtering', 'min_mapq', 'high'),
        ('records', 'on_malformed', 'ignore'),
        ('normalization', 'on_undefined', 'nan'),
        ('ranking', 'leak_threshold', -0.5),
        ('masking', 'min_genes', 2.5),
        ('logging', 'level', 'LOUD'),
    ])
    def test_invalid_values(self, section, key, value):
        config = load_config()
        config[section][key] = value
        errors = validate_config(config)
        assert len(errors) == 1
        assert key in errors[0]

    def test_missing_section(self):
        config = load_config()
        del config['masking']
        assert validate_config(config) == ["Missing configuration section: masking"]


class TestLeakageSettings:

    def test_defaults(self):
        settings = LeakageSettings()
        assert settings.min_mapq == 4
        assert settings.on_malformed is MalformedPolicy.SKIP
        assert settings.on_undefined is UndefinedPolicy.SKIP

    def test_policy_strings_coerced(self):
        settings = LeakageSettings(on_malformed='ABORT', on_undefined='zero')
        assert settings.on_malformed is MalformedPolicy.ABORT
        assert settings.on_undefined is UndefinedPolicy.ZERO

    @pytest.mark.parametrize("kwargs", [
        {'min_mapq': -1},
        {'min_mapq': 300},
        {'on_malformed': 'maybe'},
        {'on_undefined': 'nan'},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            LeakageSettings(**kwargs)

    def test_from_config_with_override(self):
        config = load_config()
        config['normalization']['on_undefined'] = 'zero'

        settings = LeakageSettings.from_config(config, min_mapq=0)

        assert settings.min_mapq == 0
        assert settings.on_undefined is UndefinedPolicy.ZERO
        assert settings.report_cross_gene is True

# taxleak v0.1.0
# Any usage is subject to this software's license.
