#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Record filtering shared by every accounting pass.

Each pass walks the alignment records once, drops unaligned and low-mapq
records, resolves identities and keeps tallies of what was seen so the
run can report them at the end.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Iterable, Iterator, Optional

from ..errors import MalformedIdentifier
from .identity import FromTo, resolve

logger = logging.getLogger(__name__)

# Malformed input beyond this many occurrences is logged at DEBUG only
MAX_MALFORMED_WARNINGS = 5


class MalformedPolicy(Enum):
    """Handling of records or identifiers that cannot be parsed."""
    SKIP = "skip"      # count, warn, continue
    ABORT = "abort"    # raise on first occurrence


@dataclass
class ScanStats:
    """Tallies collected while streaming alignment records."""
    records: int = 0
    unaligned: int = 0
    low_mapq: int = 0
    malformed_records: int = 0
    malformed_identifiers: int = 0
    correct: int = 0
    incorrect: int = 0
    cross_gene: int = 0
    undefined_normalizations: int = 0

    @property
    def accepted(self) -> int:
        return self.correct + self.incorrect

    @property
    def malformed(self) -> int:
        return self.malformed_records + self.malformed_identifiers

    def merge(self, other: 'ScanStats') -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def to_dict(self) -> dict:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result['accepted'] = self.accepted
        return result

    def log_summary(self, label: str = "scan") -> None:
        logger.info(
            f"{label}: {self.records:,} records, {self.accepted:,} accepted "
            f"({self.correct:,} correct, {self.incorrect:,} leaked), "
            f"{self.unaligned:,} unaligned, {self.low_mapq:,} below mapq"
        )
        if self.malformed:
            logger.warning(
                f"{label}: skipped {self.malformed_records:,} malformed records and "
                f"{self.malformed_identifiers:,} malformed identifiers"
            )
        if self.cross_gene:
            logger.info(f"{label}: {self.cross_gene:,} cross-gene assignments")
        if self.undefined_normalizations:
            logger.warning(
                f"{label}: {self.undefined_normalizations:,} contributions had an "
                f"undefined normalizer"
            )


def note_malformed(stats: ScanStats, error: Exception, kind: str) -> None:
    """Count a malformed record/identifier and warn about the first few."""
    if kind == 'record':
        stats.malformed_records += 1
        seen = stats.malformed_records
    else:
        stats.malformed_identifiers += 1
        seen = stats.malformed_identifiers

    if seen <= MAX_MALFORMED_WARNINGS:
        logger.warning(f"Skipping malformed {kind}: {error}")
        if seen == MAX_MALFORMED_WARNINGS:
            logger.warning(f"Further malformed {kind} messages are logged at DEBUG level")
    else:
        logger.debug(f"Skipping malformed {kind}: {error}")


def require_reiterable(source: Iterable, operation: str) -> None:
    """
    Reject one-shot iterators where a pass must be repeated.

    Raises:
        TypeError: if iterating ``source`` twice would see it only once
    """
    if iter(source) is source:
        raise TypeError(
            f"{operation} needs a re-iterable source (an AlignmentSource or a list), "
            f"got a one-shot {type(source).__name__}"
        )


def _iter_records(source, stats: ScanStats) -> Iterator:
    # Readers that know how to count malformed lines get the stats object
    if hasattr(source, 'iter_records'):
        return source.iter_records(stats)
    return iter(source)


def iter_resolved(
    source: Iterable,
    settings,
    stats: Optional[ScanStats] = None,
) -> Iterator[FromTo]:
    """
    Yield resolved identities of the records that pass the filters.

    Args:
        source: Iterable of alignment records (``qname``, ``rname``,
            ``mapq`` and ``is_aligned()``)
        settings: LeakageSettings providing ``min_mapq``, ``on_malformed``
            and ``report_cross_gene``
        stats: Optional tallies to update

    Raises:
        MalformedIdentifier: on the first bad name when the malformed
            policy is ABORT
    """
    if stats is None:
        stats = ScanStats()

    for record in _iter_records(source, stats):
        stats.records += 1

        if not record.is_aligned():
            stats.unaligned += 1
            continue
        if record.mapq < settings.min_mapq:
            stats.low_mapq += 1
            continue

        try:
            fromto = resolve(record)
        except MalformedIdentifier as e:
            if settings.on_malformed is MalformedPolicy.ABORT:
                raise
            note_malformed(stats, e, 'identifier')
            continue

        if fromto.correct:
            stats.correct += 1
        else:
            stats.incorrect += 1
            if fromto.cross_gene:
                stats.cross_gene += 1
                if settings.report_cross_gene:
                    logger.debug(
                        f"Gene mismatch for query taxon {fromto.query} gene {fromto.query_gene} "
                        f"to reference taxon {fromto.reference} gene {fromto.reference_gene}"
                    )

        yield fromto

# taxleak v0.1.0
# Any usage is subject to this software's license.
