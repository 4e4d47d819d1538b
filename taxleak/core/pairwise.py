#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Pairwise leak table and its aggregations.

The table maps an ordered (from, to) taxon pair to a Genes counter of
mis-assignment events: a read truly from ``from`` that the aligner placed
on gene ``g`` of ``to`` increments slot ``g`` of the (from, to) counter.
Correct assignments are not filed here.

Aggregations:
  1. total_outgoing: per source taxon, every leak leaving it, by gene.
  2. normalize_incoming: per target taxon, the fraction of each source's
     outgoing activity that lands on it, by gene.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..errors import LeakageInvariantError
from .gene_counters import Genes, NormGenes, UndefinedPolicy
from .scan import ScanStats, iter_resolved

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class LeakagePair:
    """Ordered taxon pair; ``from_taxon`` is the true source of the read."""
    from_taxon: int
    to_taxon: int


class PairwiseLeakage:
    """Leak events keyed by ordered (from, to) taxon pair."""

    def __init__(self):
        self.map: Dict[LeakagePair, Genes] = {}

    @classmethod
    def from_records(
        cls,
        source: Iterable,
        settings,
        stats: Optional[ScanStats] = None,
    ) -> 'PairwiseLeakage':
        """
        Build the table in a single pass over alignment records.

        Args:
            source: Alignment records (or an AlignmentSource)
            settings: LeakageSettings
            stats: Optional tallies to update
        """
        table = cls()
        for fromto in iter_resolved(source, settings, stats):
            if fromto.correct:
                continue
            table.add(fromto.query, fromto.reference, fromto.reference_gene)
        logger.debug(f"Pairwise table built with {len(table.map):,} taxon pairs")
        return table

    def add(self, from_taxon: int, to_taxon: int, gene: int) -> None:
        """File one event: a read from ``from_taxon`` landed on ``gene`` of ``to_taxon``."""
        self.counter(from_taxon, to_taxon).increment(gene)

    def counter(self, from_taxon: int, to_taxon: int) -> Genes:
        """Return the counter for a pair, creating an empty one if needed."""
        key = LeakagePair(from_taxon, to_taxon)
        genes = self.map.get(key)
        if genes is None:
            genes = Genes()
            self.map[key] = genes
        return genes

    def get(self, from_taxon: int, to_taxon: int) -> Optional[Genes]:
        return self.map.get(LeakagePair(from_taxon, to_taxon))

    def items(self) -> Iterator[Tuple[LeakagePair, Genes]]:
        return iter(self.map.items())

    def merge_from(self, other: 'PairwiseLeakage') -> None:
        """Fold another table (e.g. from a different shard) into this one."""
        for pair, genes in other.items():
            self.counter(pair.from_taxon, pair.to_taxon).merge_from(genes)

    def total_outgoing(self) -> Dict[int, Genes]:
        """Per source taxon, the gene-resolved sum of leaks over all targets."""
        result: Dict[int, Genes] = {}
        for pair, genes in self.map.items():
            result.setdefault(pair.from_taxon, Genes()).merge_from(genes)
        return result

    def normalize_incoming(
        self,
        policy: UndefinedPolicy = UndefinedPolicy.SKIP,
        stats: Optional[ScanStats] = None,
    ) -> Dict[int, NormGenes]:
        """
        Per target taxon, incoming leaks normalized by each source's outgoing total.

        Raises:
            LeakageInvariantError: if a pair's source has no outgoing total
        """
        total_out = self.total_outgoing()
        result: Dict[int, NormGenes] = {}

        for pair, genes in self.map.items():
            normalizer = total_out.get(pair.from_taxon)
            if normalizer is None:
                raise LeakageInvariantError(
                    f"No outgoing total for source taxon {pair.from_taxon}"
                )
            entry = result.setdefault(pair.to_taxon, NormGenes())
            undefined = entry.merge_normalized_from_counts(genes, normalizer, policy)
            if stats is not None:
                stats.undefined_normalizations += undefined

        return result

    def __len__(self) -> int:
        return len(self.map)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PairwiseLeakage):
            return NotImplemented
        return self.map == other.map

# taxleak v0.1.0
# Any usage is subject to this software's license.
