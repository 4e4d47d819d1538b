#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Identity resolution: decode read/reference names into (taxon, gene) pairs.

Names follow ``<taxon>_<gene>[_anything]``; only the first two fields are
read and both must be non-negative integers.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from dataclasses import dataclass
from typing import Tuple

from ..errors import MalformedIdentifier


def parse_identifier(token: str) -> Tuple[int, int]:
    """
    Split a name token into (taxon id, gene id).

    Args:
        token: Read or reference name, e.g. ``"1046_12_read7"``

    Returns:
        Tuple of (taxon, gene)

    Raises:
        MalformedIdentifier: if fewer than two fields exist or either field
            is not a non-negative integer

    Example:
        >>> parse_identifier("3_4_extra")
        (3, 4)
    """
    parts = token.split('_', 2)
    if len(parts) < 2:
        raise MalformedIdentifier(token, "expected at least two '_'-separated fields")

    ids = []
    for field_name, text in zip(("taxon", "gene"), parts[:2]):
        # int() tolerates whitespace and signs; identifiers must be plain digits
        if not (text.isascii() and text.isdigit()):
            raise MalformedIdentifier(token, f"{field_name} field {text!r} is not a non-negative integer")
        ids.append(int(text))

    return ids[0], ids[1]


@dataclass(frozen=True)
class FromTo:
    """Resolved identities of one alignment record."""
    query: int
    query_gene: int
    reference: int
    reference_gene: int

    @property
    def correct(self) -> bool:
        """True when the read was assigned to the (taxon, gene) it came from."""
        return self.query == self.reference and self.query_gene == self.reference_gene

    @property
    def cross_gene(self) -> bool:
        return self.query_gene != self.reference_gene


def resolve(record) -> FromTo:
    """
    Resolve the query and reference identities of an alignment record.

    Args:
        record: Any object exposing ``qname`` and ``rname``

    Raises:
        MalformedIdentifier: if either name cannot be decoded
    """
    query, query_gene = parse_identifier(record.qname)
    reference, reference_gene = parse_identifier(record.rname)
    return FromTo(query, query_gene, reference, reference_gene)


def is_correct(record) -> bool:
    return resolve(record).correct

# taxleak v0.1.0
# Any usage is subject to this software's license.
