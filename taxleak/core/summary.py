#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Gene-agnostic per-taxon leakage summary.

Collapses genes away and reports, per taxon, how many of its own reads
were assigned correctly or leaked out, and how many foreign reads leaked
in. Also counts leak events per unordered taxon pair.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .scan import ScanStats, iter_resolved


@dataclass
class LeakageCounter:
    """Read tallies for one taxon."""
    total: int = 0           # reads originating from this taxon
    correct: int = 0
    out_incorrect: int = 0
    in_incorrect: int = 0    # foreign reads assigned here

    def fraction(self, value: int) -> Optional[float]:
        """``value`` as a fraction of own reads; None when the taxon has none."""
        if self.total == 0:
            return None
        return value / self.total

    @property
    def correct_fraction(self) -> Optional[float]:
        return self.fraction(self.correct)

    @property
    def outgoing_fraction(self) -> Optional[float]:
        return self.fraction(self.out_incorrect)

    @property
    def incoming_fraction(self) -> Optional[float]:
        return self.fraction(self.in_incorrect)


@dataclass
class TaxonSummary:
    """Per-taxon counters plus unordered pair event counts."""
    taxa: Dict[int, LeakageCounter] = field(default_factory=dict)
    pair_events: Counter = field(default_factory=Counter)

    def counter(self, taxon: int) -> LeakageCounter:
        entry = self.taxa.get(taxon)
        if entry is None:
            entry = LeakageCounter()
            self.taxa[taxon] = entry
        return entry

    def top_pairs(self, n: int = 10) -> List[Tuple[Tuple[int, int], int]]:
        """Most frequent unordered leak pairs, ties broken by pair ids."""
        return sorted(self.pair_events.items(), key=lambda item: (-item[1], item[0]))[:n]


def undirected_key(a: int, b: int) -> Tuple[int, int]:
    return (min(a, b), max(a, b))


def summarize_taxa(
    source: Iterable,
    settings,
    stats: Optional[ScanStats] = None,
) -> TaxonSummary:
    """Tally own/correct/outgoing/incoming reads per taxon in one pass."""
    summary = TaxonSummary()
    for fromto in iter_resolved(source, settings, stats):
        origin = summary.counter(fromto.query)
        origin.total += 1
        if fromto.correct:
            origin.correct += 1
            continue
        origin.out_incorrect += 1
        summary.counter(fromto.reference).in_incorrect += 1
        summary.pair_events[undirected_key(fromto.query, fromto.reference)] += 1
    return summary

# taxleak v0.1.0
# Any usage is subject to this software's license.
