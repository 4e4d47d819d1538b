#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Run settings: the validated subset of the configuration that the
accounting passes read.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..core.gene_counters import UndefinedPolicy
from ..core.scan import MalformedPolicy


@dataclass
class LeakageSettings:
    """
    Parameters shared by every accounting pass of one run.

    Attributes:
        min_mapq: Records with mapping quality strictly below this are ignored
        on_malformed: Skip-and-count or abort on unparseable input
        on_undefined: Skip or zero-fill ratios with a zero/absent normalizer
        report_cross_gene: Log every assignment to a different gene id
    """
    min_mapq: int = 4
    on_malformed: Union[MalformedPolicy, str] = MalformedPolicy.SKIP
    on_undefined: Union[UndefinedPolicy, str] = UndefinedPolicy.SKIP
    report_cross_gene: bool = True

    def __post_init__(self):
        """Coerce policy names and validate ranges."""
        if isinstance(self.on_malformed, str):
            self.on_malformed = _parse_policy(MalformedPolicy, self.on_malformed, 'on_malformed')
        if isinstance(self.on_undefined, str):
            self.on_undefined = _parse_policy(UndefinedPolicy, self.on_undefined, 'on_undefined')
        if not isinstance(self.min_mapq, int) or not 0 <= self.min_mapq <= 255:
            raise ValueError(f"min_mapq must be an integer between 0 and 255, got {self.min_mapq}")

    @classmethod
    def from_config(cls, config: Dict[str, Any], min_mapq: Optional[int] = None) -> 'LeakageSettings':
        """
        Build settings from a configuration dictionary.

        Args:
            config: Configuration as returned by ``load_config``
            min_mapq: CLI override for ``filtering.min_mapq``
        """
        return cls(
            min_mapq=min_mapq if min_mapq is not None else config['filtering']['min_mapq'],
            on_malformed=config['records']['on_malformed'],
            on_undefined=config['normalization']['on_undefined'],
            report_cross_gene=config['diagnostics']['report_cross_gene'],
        )


def _parse_policy(enum_cls, value: str, name: str):
    try:
        return enum_cls(value.lower())
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {name} policy {value!r} (expected one of: {valid})")

# taxleak v0.1.0
# Any usage is subject to this software's license.
