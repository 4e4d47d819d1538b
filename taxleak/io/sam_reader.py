#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Alignment record source backed by pysam.

Reads SAM, gzip-compressed SAM or BAM through ``pysam.AlignmentFile`` and
yields a slim SamRecord per alignment (query name, flag, reference name,
mapping quality). The accounting passes only need those four fields, and
a plain record keeps them usable with in-memory alignments too.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

import pysam

from ..core.scan import MalformedPolicy, ScanStats, note_malformed
from ..errors import InputUnreadable, MalformedRecord

logger = logging.getLogger(__name__)

UNALIGNED_REFERENCE = "*"
FLAG_UNMAPPED = 0x4

# htslib does not resynchronise on a damaged stream; after this many
# consecutive failed records the file is treated as unreadable
MAX_CONSECUTIVE_FAILURES = 100


@dataclass
class SamRecord:
    """The alignment fields leakage accounting reads."""
    qname: str
    flag: int
    rname: str
    mapq: int

    @classmethod
    def from_segment(cls, segment) -> 'SamRecord':
        """
        Convert a ``pysam.AlignedSegment``.

        Raises:
            MalformedRecord: if the segment has no query name
        """
        if not segment.query_name:
            raise MalformedRecord("alignment without a query name")
        return cls(
            qname=segment.query_name,
            flag=segment.flag,
            rname=segment.reference_name or UNALIGNED_REFERENCE,
            mapq=segment.mapping_quality,
        )

    @property
    def is_unmapped(self) -> bool:
        return bool(self.flag & FLAG_UNMAPPED)

    def is_aligned(self) -> bool:
        return not self.is_unmapped and self.rname != UNALIGNED_REFERENCE


def _alignment_mode(filepath: Path) -> str:
    return "rb" if filepath.suffix == ".bam" else "r"


def read_sam(
    filepath: Union[str, Path],
    on_malformed: MalformedPolicy = MalformedPolicy.SKIP,
    stats: Optional[ScanStats] = None,
) -> Iterator[SamRecord]:
    """
    Stream SamRecord objects from a SAM, SAM.gz or BAM file.

    Args:
        filepath: Path to the alignment file
        on_malformed: Skip-and-count or abort on a record pysam rejects
        stats: Optional tallies; malformed records are counted here

    Yields:
        SamRecord objects in file order

    Raises:
        InputUnreadable: if the file cannot be opened, is not SAM/BAM or
            its stream is damaged
        MalformedRecord: on a bad record when the policy is ABORT
    """
    filepath = Path(filepath)
    if stats is None:
        stats = ScanStats()

    try:
        samfile = pysam.AlignmentFile(str(filepath), _alignment_mode(filepath), check_sq=False)
    except (OSError, ValueError) as e:
        raise InputUnreadable(f"Cannot open alignments {filepath}: {e}") from e

    with samfile:
        segments = samfile.fetch(until_eof=True)
        failures = 0
        while True:
            try:
                segment = next(segments)
                record = SamRecord.from_segment(segment)
            except StopIteration:
                break
            except OSError as e:
                raise InputUnreadable(f"Cannot read alignments from {filepath}: {e}") from e
            except (ValueError, MalformedRecord) as e:
                error = e if isinstance(e, MalformedRecord) else MalformedRecord(str(e))
                if on_malformed is MalformedPolicy.ABORT:
                    if error is e:
                        raise
                    raise error from e
                failures += 1
                if failures > MAX_CONSECUTIVE_FAILURES:
                    raise InputUnreadable(
                        f"Cannot read alignments from {filepath}: "
                        f"{failures} consecutive records failed"
                    ) from e
                note_malformed(stats, error, 'record')
                continue
            failures = 0
            yield record


class AlignmentSource:
    """
    Re-iterable alignment records backed by a file.

    Every iteration reopens the file, so the two-pass fractional scheme can
    walk the same input twice without holding it in memory.
    """

    def __init__(self, filepath: Union[str, Path], on_malformed: MalformedPolicy = MalformedPolicy.SKIP):
        self.filepath = Path(filepath)
        self.on_malformed = on_malformed
        if not self.filepath.exists():
            raise InputUnreadable(f"Alignment file not found: {self.filepath}")

    def iter_records(self, stats: Optional[ScanStats] = None) -> Iterator[SamRecord]:
        logger.debug(f"Reading alignments from {self.filepath}")
        return read_sam(self.filepath, self.on_malformed, stats)

    def __iter__(self) -> Iterator[SamRecord]:
        return self.iter_records()

    def __repr__(self) -> str:
        return f"AlignmentSource(filepath={self.filepath})"

# taxleak v0.1.0
# Any usage is subject to this software's license.
