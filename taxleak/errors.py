#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Exception hierarchy for leakage accounting.

Author: taxleak Development Team
License: MIT - See LICENSE
"""


class TaxLeakError(Exception):
    """Base class for all taxleak errors."""
    pass


class InputUnreadable(TaxLeakError):
    """Raised when an alignment or table file cannot be opened or decoded."""
    pass


class MalformedRecord(TaxLeakError):
    """Raised when an alignment line violates the minimum-field contract."""

    def __init__(self, message: str, line_number: int = 0):
        super().__init__(message)
        self.line_number = line_number


class MalformedIdentifier(TaxLeakError):
    """Raised when a name token is not of the form <taxon>_<gene>[_...]."""

    def __init__(self, token: str, reason: str):
        super().__init__(f"Malformed identifier {token!r}: {reason}")
        self.token = token
        self.reason = reason


class UndefinedNormalization(TaxLeakError):
    """Raised when a ratio is requested against a zero or absent normalizer."""

    def __init__(self, gene: int, normalizer=None):
        super().__init__(
            f"Undefined normalization for gene {gene} (normalizer={normalizer})"
        )
        self.gene = gene
        self.normalizer = normalizer


class LeakageInvariantError(TaxLeakError):
    """Raised when derived leakage tables are internally inconsistent."""
    pass

# taxleak v0.1.0
# Any usage is subject to this software's license.
