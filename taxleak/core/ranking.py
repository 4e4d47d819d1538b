#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Deterministic orderings of taxa and taxon pairs by leakage severity.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from typing import Dict, List, Tuple

from .gene_counters import Genes, NormGenes
from .pairwise import LeakagePair, PairwiseLeakage
from .taxon_ledger import GeneLeaks, TaxonLeaks


def rank_taxa(ledger: GeneLeaks, threshold: float = 0.0) -> List[TaxonLeaks]:
    """
    Order taxa worst first.

    Key: most leaked-on genes, then largest total incoming leakage, then
    ascending taxon id.
    """
    return sorted(
        ledger.values(),
        key=lambda s: (-s.num_leaked_on_genes(threshold), -s.total_incoming_leaks(threshold), s.id),
    )


def rank_pairs(table: PairwiseLeakage) -> List[Tuple[LeakagePair, Genes]]:
    """Group pairs by target taxon, smallest leak total first within a group."""
    return sorted(
        table.items(),
        key=lambda item: (item[0].to_taxon, item[1].total(), item[0].from_taxon),
    )


def rank_normalized(profiles: Dict[int, NormGenes]) -> List[Tuple[int, NormGenes]]:
    """Order normalized incoming profiles by ascending total, then taxon id."""
    return sorted(profiles.items(), key=lambda item: (item[1].total(), item[0]))

# taxleak v0.1.0
# Any usage is subject to this software's license.
