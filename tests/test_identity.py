#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Tests for identity resolution and record filtering.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging

import pytest

from taxleak.config.settings import LeakageSettings
from taxleak.core.identity import FromTo, is_correct, parse_identifier, resolve
from taxleak.core.scan import MalformedPolicy, ScanStats, iter_resolved
from taxleak.errors import MalformedIdentifier


class TestParseIdentifier:

    def test_two_fields(self):
        assert parse_identifier("3_4") == (3, 4)

    def test_extra_fields_ignored(self):
        assert parse_identifier("1046_12_read7_x") == (1046, 12)

    def test_zero_ids(self):
        assert parse_identifier("0_0") == (0, 0)

    @pytest.mark.parametrize("token", ["3", "", "a_4", "3_b", "3_", "_4", "3_-4", "-3_4", " 3_4", "3.0_4"])
    def test_malformed(self, token):
        with pytest.raises(MalformedIdentifier):
            parse_identifier(token)


class TestResolve:

    def test_correct_when_identities_equal(self, make_record):
        fromto = resolve(make_record("1_2_r", "1_2"))
        assert fromto == FromTo(1, 2, 1, 2)
        assert fromto.correct
        assert is_correct(make_record("1_2", "1_2"))

    def test_same_taxon_other_gene_is_incorrect(self, make_record):
        fromto = resolve(make_record("1_2", "1_3"))
        assert not fromto.correct
        assert fromto.cross_gene

    def test_other_taxon_same_gene_is_not_cross_gene(self, make_record):
        fromto = resolve(make_record("1_2", "5_2"))
        assert not fromto.correct
        assert not fromto.cross_gene

    def test_malformed_reference(self, make_record):
        with pytest.raises(MalformedIdentifier):
            resolve(make_record("1_2", "chr1"))


class TestIterResolved:

    def test_filters_low_mapq_and_unaligned(self, make_record, settings):
        records = [
            make_record("1_2", "1_2", 10),
            make_record("1_2", "3_4", 3),
            make_record("1_2", "*", 0),
            make_record("1_2", "3_4", 4),
        ]
        stats = ScanStats()

        resolved = list(iter_resolved(records, settings, stats))

        assert resolved == [FromTo(1, 2, 1, 2), FromTo(1, 2, 3, 4)]
        assert stats.records == 4
        assert stats.low_mapq == 1
        assert stats.unaligned == 1
        assert stats.correct == 1
        assert stats.incorrect == 1
        assert stats.accepted == 2

    def test_skip_policy_counts_malformed_names(self, make_record, settings):
        records = [make_record("bad", "1_2"), make_record("1_2", "1_2")]
        stats = ScanStats()

        resolved = list(iter_resolved(records, settings, stats))

        assert len(resolved) == 1
        assert stats.malformed_identifiers == 1

    def test_abort_policy_raises(self, make_record):
        settings = LeakageSettings(on_malformed=MalformedPolicy.ABORT)
        with pytest.raises(MalformedIdentifier):
            list(iter_resolved([make_record("bad", "1_2")], settings))

    def test_cross_gene_logged(self, make_record, settings, caplog):
        caplog.set_level(logging.DEBUG, logger="taxleak.core.scan")
        stats = ScanStats()

        list(iter_resolved([make_record("1_2", "3_4")], settings, stats))

        assert stats.cross_gene == 1
        assert "Gene mismatch" in caplog.text

    def test_stats_merge(self):
        a = ScanStats(records=2, correct=1)
        b = ScanStats(records=3, incorrect=2, cross_gene=1)
        a.merge(b)
        assert a.records == 5
        assert a.accepted == 3
        assert a.to_dict()["cross_gene"] == 1

# taxleak v0.1.0
# Any usage is subject to this software's license.
