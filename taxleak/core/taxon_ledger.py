#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Per-taxon leak ledger (taxon-centric mode).

Every taxon holds a sparse sequence of per-gene leak triples:
  - correct:  reads from this gene assigned back to it
  - incoming: reads from elsewhere assigned to this gene
  - outgoing: reads from this gene assigned elsewhere

Two counting schemes fill the ledger and must not be mixed in one report:
  1. count_gene_leaks: raw counts, every accepted read weighs 1.
  2. count_fractional_gene_leaks: each read weighs 1 / (number of reads
     originating from the gene it is credited against), which needs a
     prior pass (count_query_totals) over the same input.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import UndefinedNormalization
from .gene_counters import Genes, UndefinedPolicy, safe_ratio
from .scan import ScanStats, iter_resolved, require_reiterable

logger = logging.getLogger(__name__)


@dataclass
class Leaks:
    """Leak triple for one (taxon, gene)."""
    correct: float = 0.0
    incoming: float = 0.0
    outgoing: float = 0.0


class TaxonLeaks:
    """Sparse per-gene leak triples of a single taxon."""

    def __init__(self, taxon: int):
        self.id = taxon
        self.leaks: List[Optional[Leaks]] = []

    def get(self, gene: int) -> Leaks:
        """Return the triple for ``gene``, growing and initializing on first touch."""
        if gene < 0:
            raise ValueError(f"Gene id must be non-negative, got {gene}")
        if gene >= len(self.leaks):
            self.leaks.extend([None] * (gene + 1 - len(self.leaks)))
        if self.leaks[gene] is None:
            self.leaks[gene] = Leaks()
        return self.leaks[gene]

    def peek(self, gene: int) -> Optional[Leaks]:
        """Return the triple for ``gene`` without touching it."""
        if gene < 0 or gene >= len(self.leaks):
            return None
        return self.leaks[gene]

    def touched(self) -> Iterator[Tuple[int, Leaks]]:
        for gene, leaks in enumerate(self.leaks):
            if leaks is not None:
                yield gene, leaks

    def add_correct(self, gene: int, weight: float = 1.0) -> None:
        self.get(gene).correct += weight

    def add_incorrect(self, gene: int, incoming: bool, weight: float = 1.0) -> None:
        leaks = self.get(gene)
        if incoming:
            leaks.incoming += weight
        else:
            leaks.outgoing += weight

    def num_genes(self) -> int:
        return sum(1 for _ in self.touched())

    def leaked_on_genes(self, threshold: float = 0.0) -> List[int]:
        """Gene ids whose incoming leakage exceeds ``threshold``."""
        return [gene for gene, leaks in self.touched() if leaks.incoming > threshold]

    def num_leaked_on_genes(self, threshold: float = 0.0) -> int:
        return len(self.leaked_on_genes(threshold))

    def num_good_genes(self, threshold: float = 0.0) -> int:
        return self.num_genes() - self.num_leaked_on_genes(threshold)

    def total_incoming_leaks(self, threshold: float = 0.0) -> float:
        return sum(leaks.incoming for _, leaks in self.touched() if leaks.incoming > threshold)

    def __repr__(self) -> str:
        return f"TaxonLeaks(id={self.id}, genes={self.num_genes()})"


class GeneLeaks:
    """Ledger of TaxonLeaks keyed by taxon id."""

    def __init__(self):
        self.species: Dict[int, TaxonLeaks] = {}

    def taxon(self, taxon: int) -> TaxonLeaks:
        entry = self.species.get(taxon)
        if entry is None:
            entry = TaxonLeaks(taxon)
            self.species[taxon] = entry
        return entry

    def count_correct(self, taxon: int, gene: int, weight: float = 1.0) -> None:
        self.taxon(taxon).add_correct(gene, weight)

    def count_incorrect(self, taxon: int, gene: int, incoming: bool, weight: float = 1.0) -> None:
        self.taxon(taxon).add_incorrect(gene, incoming, weight)

    def touch(self, taxon: int, gene: int) -> None:
        """Mark a gene as observed without crediting anything."""
        self.taxon(taxon).get(gene)

    def __contains__(self, taxon: int) -> bool:
        return taxon in self.species

    def __getitem__(self, taxon: int) -> TaxonLeaks:
        return self.species[taxon]

    def __len__(self) -> int:
        return len(self.species)

    def values(self):
        return self.species.values()


def count_gene_leaks(
    source: Iterable,
    settings,
    stats: Optional[ScanStats] = None,
) -> GeneLeaks:
    """
    Raw-count ledger: every accepted read adds 1.

    A correct read credits its own gene's ``correct``; a leaked read
    credits the reference gene's ``incoming`` and the query gene's
    ``outgoing``.
    """
    ledger = GeneLeaks()
    for fromto in iter_resolved(source, settings, stats):
        if fromto.correct:
            ledger.count_correct(fromto.query, fromto.query_gene)
        else:
            ledger.count_incorrect(fromto.reference, fromto.reference_gene, True)
            ledger.count_incorrect(fromto.query, fromto.query_gene, False)
    return ledger


def count_query_totals(
    source: Iterable,
    settings,
    stats: Optional[ScanStats] = None,
) -> Dict[int, Genes]:
    """
    First pass of the fractional scheme: accepted reads per query (taxon, gene).

    Returns:
        Mapping taxon -> Genes, slot g holding the number of reads whose
        query identity is (taxon, g)

    Raises:
        TypeError: if ``source`` is a one-shot iterator; the second pass
            would see nothing
    """
    require_reiterable(source, "count_query_totals")
    totals: Dict[int, Genes] = {}
    for fromto in iter_resolved(source, settings, stats):
        totals.setdefault(fromto.query, Genes()).increment(fromto.query_gene)
    return totals


def _lookup_total(totals: Dict[int, Genes], taxon: int, gene: int) -> Optional[int]:
    genes = totals.get(taxon)
    return genes.get(gene) if genes is not None else None


def count_fractional_gene_leaks(
    source: Iterable,
    totals: Dict[int, Genes],
    settings,
    stats: Optional[ScanStats] = None,
) -> GeneLeaks:
    """
    Second pass of the fractional scheme: per-read weighted ledger.

    For a correct read, ``1 / total(query)`` goes to the query gene's
    ``correct``. For a leaked read, ``1 / total(query)`` goes to the
    reference gene's ``incoming`` and ``1 / total(reference)`` to the query
    gene's ``outgoing``. ``total`` is the lookup built by
    ``count_query_totals``; a missing or zero total is handled by
    ``settings.on_undefined``.
    """
    require_reiterable(source, "count_fractional_gene_leaks")
    if stats is None:
        stats = ScanStats()
    ledger = GeneLeaks()

    def credit(target_taxon, target_gene, total_taxon, total_gene, apply):
        try:
            weight = safe_ratio(1.0, _lookup_total(totals, total_taxon, total_gene), total_gene)
        except UndefinedNormalization as e:
            stats.undefined_normalizations += 1
            logger.debug(f"Taxon {total_taxon}: {e}")
            if settings.on_undefined is UndefinedPolicy.ZERO:
                ledger.touch(target_taxon, target_gene)
            return
        apply(weight)

    for fromto in iter_resolved(source, settings, stats):
        q, qg, r, rg = fromto.query, fromto.query_gene, fromto.reference, fromto.reference_gene
        if fromto.correct:
            credit(q, qg, q, qg, lambda w: ledger.count_correct(q, qg, w))
        else:
            credit(r, rg, q, qg, lambda w: ledger.count_incorrect(r, rg, True, w))
            credit(q, qg, r, rg, lambda w: ledger.count_incorrect(q, qg, False, w))

    return ledger

# taxleak v0.1.0
# Any usage is subject to this software's license.
