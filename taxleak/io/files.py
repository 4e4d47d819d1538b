#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Plain/gzip text file helpers for the tab-separated tables (pairwise
snapshots, label maps).

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import gzip
import zlib
from pathlib import Path
from typing import TextIO, Union

# Everything a damaged or undecodable text file can raise while reading.
# A corrupt deflate stream surfaces as zlib.error, which is not an OSError.
READ_ERRORS = (OSError, EOFError, UnicodeDecodeError, zlib.error)


def is_gzipped(filepath: Union[str, Path]) -> bool:
    """Check if file is gzipped based on extension."""
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open a text table, decompressing transparently when gzipped.

    Args:
        filepath: Path to file
        mode: 'r' or 'w'
    """
    filepath = Path(filepath)
    if is_gzipped(filepath):
        return gzip.open(filepath, 'rt' if 'r' in mode else 'wt')
    return open(filepath, mode)

# taxleak v0.1.0
# Any usage is subject to this software's license.
