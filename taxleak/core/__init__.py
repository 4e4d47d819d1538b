"""
taxleak v0.1.0

Leakage accounting engine.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from .identity import FromTo, parse_identifier, resolve, is_correct
from .gene_counters import Genes, NormGenes, UndefinedPolicy, safe_ratio
from .scan import MalformedPolicy, ScanStats, iter_resolved, require_reiterable
from .pairwise import LeakagePair, PairwiseLeakage
from .taxon_ledger import (
    Leaks,
    TaxonLeaks,
    GeneLeaks,
    count_gene_leaks,
    count_query_totals,
    count_fractional_gene_leaks,
)
from .ranking import rank_taxa, rank_pairs, rank_normalized
from .summary import LeakageCounter, TaxonSummary, summarize_taxa
from .masking import MaskDecision, mask_genes

__all__ = [
    # Identity
    "FromTo",
    "parse_identifier",
    "resolve",
    "is_correct",

    # Counters
    "Genes",
    "NormGenes",
    "UndefinedPolicy",
    "safe_ratio",

    # Scanning
    "MalformedPolicy",
    "ScanStats",
    "iter_resolved",
    "require_reiterable",

    # Pair-centric mode
    "LeakagePair",
    "PairwiseLeakage",

    # Taxon-centric mode
    "Leaks",
    "TaxonLeaks",
    "GeneLeaks",
    "count_gene_leaks",
    "count_query_totals",
    "count_fractional_gene_leaks",

    # Ranking and derived outputs
    "rank_taxa",
    "rank_pairs",
    "rank_normalized",
    "LeakageCounter",
    "TaxonSummary",
    "summarize_taxa",
    "MaskDecision",
    "mask_genes",
]
