#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Gene masking decisions derived from the per-taxon ledger.

A gene is masked when more than ``leak_threshold`` of incoming leakage
lands on it. A taxon is kept only if at least ``min_genes`` of its genes
survive masking.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .ranking import rank_taxa
from .taxon_ledger import GeneLeaks

logger = logging.getLogger(__name__)


@dataclass
class MaskDecision:
    """Masking outcome for a single taxon."""
    taxon: int
    keep: bool
    good_genes: int
    leaked_genes: int
    masked: List[int] = field(default_factory=list)


def mask_genes(ledger: GeneLeaks, leak_threshold: float = 10.0, min_genes: int = 60) -> List[MaskDecision]:
    """
    Decide which genes to mask and which taxa to drop.

    Args:
        ledger: Per-taxon ledger
        leak_threshold: Incoming leakage tolerated on a gene before masking it
        min_genes: Minimum number of unmasked genes for a taxon to be kept

    Returns:
        One MaskDecision per taxon, worst leaked taxa first
    """
    if leak_threshold < 0:
        raise ValueError(f"leak_threshold must be non-negative, got {leak_threshold}")
    if min_genes < 0:
        raise ValueError(f"min_genes must be non-negative, got {min_genes}")

    decisions = []
    for taxon in rank_taxa(ledger, leak_threshold):
        masked = taxon.leaked_on_genes(leak_threshold)
        good = taxon.num_genes() - len(masked)
        decisions.append(MaskDecision(
            taxon=taxon.id,
            keep=good >= min_genes,
            good_genes=good,
            leaked_genes=len(masked),
            masked=masked,
        ))

    dropped = sum(1 for d in decisions if not d.keep)
    logger.info(
        f"Masking: {sum(len(d.masked) for d in decisions):,} genes masked, "
        f"{dropped:,} of {len(decisions):,} taxa below {min_genes} good genes"
    )
    return decisions

# taxleak v0.1.0
# Any usage is subject to this software's license.
