"""
taxleak v0.1.0

Configuration schema for taxleak.

Defines all available configuration parameters with defaults and validation.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..errors import InputUnreadable


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Record Filtering
    # ========================================================================
    'filtering': {
        'min_mapq': 4,  # Records strictly below are ignored
    },

    # ========================================================================
    # Malformed Input
    # ========================================================================
    'records': {
        'on_malformed': 'skip',  # 'skip' (count and continue), 'abort'
    },

    # ========================================================================
    # Normalization
    # ========================================================================
    'normalization': {
        'on_undefined': 'skip',  # 'skip' (drop contribution), 'zero' (touch gene, add 0)
    },

    # ========================================================================
    # Diagnostics
    # ========================================================================
    'diagnostics': {
        'report_cross_gene': True,  # Log reads assigned to a different gene id
    },

    # ========================================================================
    # Ranking
    # ========================================================================
    'ranking': {
        'leak_threshold': 0.0,  # Gene is leaked on iff incoming > threshold
        'worst_first': True,
    },

    # ========================================================================
    # Masking
    # ========================================================================
    'masking': {
        'leak_threshold': 10.0,  # Tolerated incoming leakage per gene
        'min_genes': 60,  # Minimum unmasked genes to keep a taxon
    },

    # ========================================================================
    # Logging
    # ========================================================================
    'logging': {
        'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
        'log_file': None,
    },
}

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        InputUnreadable: if the file exists but is not valid YAML
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise InputUnreadable(f"Configuration file not found: {config_path}")
        try:
            with open(config_path) as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InputUnreadable(f"Invalid YAML in config file {config_path}: {e}") from e

        if user_config:
            if not isinstance(user_config, dict):
                raise InputUnreadable(f"Config file {config_path} must contain a mapping")
            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path):
    """
    Save the default configuration to a YAML file.

    Args:
        output_path: Output file path
    """
    with open(output_path, 'w') as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    for section in DEFAULT_CONFIG:
        if not isinstance(config.get(section), dict):
            errors.append(f"Missing configuration section: {section}")
    if errors:
        return errors

    min_mapq = config['filtering'].get('min_mapq')
    if not isinstance(min_mapq, int) or isinstance(min_mapq, bool) or not 0 <= min_mapq <= 255:
        errors.append(f"filtering.min_mapq must be an integer in [0, 255], got {min_mapq!r}")

    if config['records'].get('on_malformed') not in ('skip', 'abort'):
        errors.append(f"Invalid records.on_malformed: {config['records'].get('on_malformed')!r}")

    if config['normalization'].get('on_undefined') not in ('skip', 'zero'):
        errors.append(f"Invalid normalization.on_undefined: {config['normalization'].get('on_undefined')!r}")

    for section in ('ranking', 'masking'):
        threshold = config[section].get('leak_threshold')
        if not isinstance(threshold, (int, float)) or isinstance(threshold, bool) or threshold < 0:
            errors.append(f"{section}.leak_threshold must be a non-negative number, got {threshold!r}")

    min_genes = config['masking'].get('min_genes')
    if not isinstance(min_genes, int) or isinstance(min_genes, bool) or min_genes < 0:
        errors.append(f"masking.min_genes must be a non-negative integer, got {min_genes!r}")

    level = str(config['logging'].get('level', '')).upper()
    if level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid logging.level: {config['logging'].get('level')!r}")

    return errors
