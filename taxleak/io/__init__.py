"""
taxleak v0.1.0

Input/output for leakage accounting: alignment reader, report writers,
pairwise snapshot loader and taxon label maps.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from .sam_reader import SamRecord, AlignmentSource, read_sam
from .files import READ_ERRORS, open_file, is_gzipped
from .reports import (
    UNSET_TOKEN,
    format_value,
    write_pairwise,
    write_normalized,
    load_pairwise,
    taxon_lines,
    write_taxa,
    write_summary,
    write_mask,
)
from .labels import read_labels

__all__ = [
    # Alignment input
    "SamRecord",
    "AlignmentSource",
    "read_sam",

    # Tables
    "READ_ERRORS",
    "open_file",
    "is_gzipped",

    # Reports
    "UNSET_TOKEN",
    "format_value",
    "write_pairwise",
    "write_normalized",
    "load_pairwise",
    "taxon_lines",
    "write_taxa",
    "write_summary",
    "write_mask",

    # Labels
    "read_labels",
]
