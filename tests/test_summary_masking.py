#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Tests for the gene-agnostic summary and gene masking.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import pytest

from taxleak.core.masking import mask_genes
from taxleak.core.summary import LeakageCounter, summarize_taxa, undirected_key
from taxleak.core.taxon_ledger import GeneLeaks


class TestSummarizeTaxa:

    def test_scenario(self, scenario_records, settings):
        summary = summarize_taxa(scenario_records, settings)

        one, three = summary.taxa[1], summary.taxa[3]
        assert (one.total, one.correct, one.out_incorrect, one.in_incorrect) == (2, 1, 1, 1)
        assert (three.total, three.correct, three.out_incorrect, three.in_incorrect) == (1, 0, 1, 1)
        assert one.correct_fraction == pytest.approx(0.5)
        assert summary.pair_events[(1, 3)] == 2

    def test_receiving_only_taxon_has_no_fractions(self, make_record, settings):
        summary = summarize_taxa([make_record("1_0", "8_0")], settings)

        receiver = summary.taxa[8]
        assert receiver.total == 0
        assert receiver.in_incorrect == 1
        assert receiver.incoming_fraction is None
        assert receiver.correct_fraction is None

    def test_own_reads_partition(self, make_record, settings):
        records = [
            make_record("1_0", "1_0"),
            make_record("1_0", "1_1"),
            make_record("1_0", "2_0"),
            make_record("2_0", "1_0"),
        ]
        summary = summarize_taxa(records, settings)

        for counter in summary.taxa.values():
            assert counter.correct + counter.out_incorrect == counter.total

    def test_top_pairs(self, make_record, settings):
        records = (
            [make_record("4_0", "2_0")] * 3
            + [make_record("1_0", "9_0")] * 3
            + [make_record("5_0", "6_0")]
        )
        summary = summarize_taxa(records, settings)

        assert summary.top_pairs(2) == [((1, 9), 3), ((2, 4), 3)]

    def test_undirected_key(self):
        assert undirected_key(5, 2) == undirected_key(2, 5) == (2, 5)

    def test_fraction_of_empty_counter(self):
        assert LeakageCounter().fraction(0) is None


class TestMaskGenes:

    @pytest.fixture
    def ledger(self):
        ledger = GeneLeaks()
        # taxon 1: 4 genes, gene 2 heavily leaked on
        for gene in range(4):
            ledger.count_correct(1, gene)
        ledger.count_incorrect(1, 2, True, 12.0)
        # taxon 2: 2 genes, both leaked on
        ledger.count_incorrect(2, 0, True, 20.0)
        ledger.count_incorrect(2, 1, True, 15.0)
        return ledger

    def test_masked_genes_and_keep(self, ledger):
        decisions = {d.taxon: d for d in mask_genes(ledger, leak_threshold=10.0, min_genes=3)}

        assert decisions[1].masked == [2]
        assert decisions[1].good_genes == 3
        assert decisions[1].keep
        assert decisions[2].masked == [0, 1]
        assert decisions[2].good_genes == 0
        assert not decisions[2].keep

    def test_worst_first(self, ledger):
        assert [d.taxon for d in mask_genes(ledger, 10.0, 0)] == [2, 1]

    def test_threshold_above_all_leaks_masks_nothing(self, ledger):
        decisions = mask_genes(ledger, leak_threshold=100.0, min_genes=0)
        assert all(d.masked == [] and d.keep for d in decisions)

    @pytest.mark.parametrize("kwargs", [{"leak_threshold": -1.0}, {"min_genes": -1}])
    def test_negative_arguments(self, ledger, kwargs):
        with pytest.raises(ValueError):
            mask_genes(ledger, **kwargs)

# taxleak v0.1.0
# Any usage is subject to this software's license.
