#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Taxon id to species label map.

The map file is tab-separated with the numeric taxon id in column 2 and a
``;``-separated lineage in column 4; the label is the last lineage rank,
e.g. ``s__Escherichia coli``.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
from pathlib import Path
from typing import Dict, Union

from ..errors import InputUnreadable
from .files import READ_ERRORS, open_file

logger = logging.getLogger(__name__)


def read_labels(filepath: Union[str, Path]) -> Dict[int, str]:
    """
    Load taxon labels.

    Lines with too few columns or a non-numeric id are skipped with a
    warning.

    Raises:
        InputUnreadable: if the file cannot be opened or decoded
    """
    filepath = Path(filepath)
    labels: Dict[int, str] = {}
    skipped = 0

    try:
        with open_file(filepath, 'r') as handle:
            for line in handle:
                tokens = line.rstrip('\r\n').split('\t')
                if len(tokens) < 4 or not tokens[1].strip().isdigit():
                    skipped += 1
                    continue
                labels[int(tokens[1])] = tokens[3].split(';')[-1].strip()
    except READ_ERRORS as e:
        raise InputUnreadable(f"Cannot read label map {filepath}: {e}") from e

    if skipped:
        logger.warning(f"Skipped {skipped:,} invalid lines in {filepath}")
    logger.debug(f"Loaded {len(labels):,} taxon labels from {filepath}")
    return labels

# taxleak v0.1.0
# Any usage is subject to this software's license.
