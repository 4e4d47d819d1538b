#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Sparse per-gene counters.

Two counter flavours share one slot discipline:
  1. Genes: integer event counts, one slot per gene id.
  2. NormGenes: floating-point accumulators fed with per-gene ratios.

A slot is either unset (None, the gene was never touched) or holds a value.
Growing a counter to reach a new gene id fills the intermediate slots with
None, never with zero, so "never observed" stays distinguishable from
"observed zero times". Counters never shrink.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

import logging
import math
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ..errors import UndefinedNormalization

logger = logging.getLogger(__name__)


class UndefinedPolicy(Enum):
    """What to do with a ratio whose normalizer is zero or unset."""
    SKIP = "skip"    # drop the contribution, leave the slot untouched
    ZERO = "zero"    # touch the slot, add nothing


def _grow(slots: list, gene: int) -> None:
    """Extend ``slots`` with unset entries so that ``gene`` is addressable."""
    if gene < 0:
        raise ValueError(f"Gene id must be non-negative, got {gene}")
    if gene >= len(slots):
        slots.extend([None] * (gene + 1 - len(slots)))


def safe_ratio(count: float, normalizer: Optional[float], gene: int = 0) -> float:
    """
    Divide ``count`` by ``normalizer``.

    Raises:
        UndefinedNormalization: if the normalizer is unset, zero, negative
            or the result would not be finite.
    """
    if normalizer is None or normalizer <= 0:
        raise UndefinedNormalization(gene, normalizer)
    value = count / normalizer
    if not math.isfinite(value):
        raise UndefinedNormalization(gene, normalizer)
    return value


class Genes:
    """Gene-indexed integer counter with explicit unset slots."""

    def __init__(self):
        self.data: List[Optional[int]] = []

    @classmethod
    def from_slots(cls, slots: Iterable[Optional[int]]) -> 'Genes':
        """Build a counter from raw slot values (None = unset)."""
        genes = cls()
        for value in slots:
            if value is not None and value < 0:
                raise ValueError(f"Gene counts must be non-negative, got {value}")
            genes.data.append(value)
        return genes

    def increment(self, gene: int) -> None:
        _grow(self.data, gene)
        if self.data[gene] is None:
            self.data[gene] = 0
        self.data[gene] += 1

    def get(self, gene: int) -> Optional[int]:
        """Return the count for ``gene`` or None if it was never touched."""
        if gene < 0 or gene >= len(self.data):
            return None
        return self.data[gene]

    def is_set(self, gene: int) -> bool:
        return self.get(gene) is not None

    def items(self) -> Iterator[Tuple[int, int]]:
        """Iterate over (gene, count) for set slots only."""
        for gene, count in enumerate(self.data):
            if count is not None:
                yield gene, count

    def total(self) -> int:
        return sum(count for _, count in self.items())

    def merge_from(self, other: 'Genes') -> None:
        """Add every set slot of ``other`` into this counter."""
        for gene, count in other.items():
            _grow(self.data, gene)
            if self.data[gene] is None:
                self.data[gene] = 0
            self.data[gene] += count

    def copy(self) -> 'Genes':
        return Genes.from_slots(self.data)

    def to_array(self) -> np.ndarray:
        """Slots as a float array with NaN marking unset genes."""
        return np.array(
            [np.nan if count is None else float(count) for count in self.data],
            dtype=float,
        )

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Genes):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"Genes(total={self.total()}, slots={len(self.data)})"


class NormGenes:
    """Gene-indexed floating-point accumulator with explicit unset slots."""

    def __init__(self):
        self.data: List[Optional[float]] = []

    def add(self, gene: int, value: float) -> None:
        """Touch ``gene`` (0.0 if unset) and add ``value`` to it."""
        _grow(self.data, gene)
        if self.data[gene] is None:
            self.data[gene] = 0.0
        self.data[gene] += value

    def get(self, gene: int) -> Optional[float]:
        if gene < 0 or gene >= len(self.data):
            return None
        return self.data[gene]

    def items(self) -> Iterator[Tuple[int, float]]:
        for gene, value in enumerate(self.data):
            if value is not None:
                yield gene, value

    def merge_normalized_from_counts(
        self,
        counts: Genes,
        normalizer: Genes,
        policy: UndefinedPolicy = UndefinedPolicy.SKIP,
    ) -> int:
        """
        Accumulate ``counts[g] / normalizer[g]`` for every set gene of ``counts``.

        Args:
            counts: Event counts to normalize
            normalizer: Per-gene denominators
            policy: Handling of zero or unset denominators

        Returns:
            Number of contributions whose ratio was undefined
        """
        undefined = 0
        for gene, count in counts.items():
            try:
                ratio = safe_ratio(count, normalizer.get(gene), gene)
            except UndefinedNormalization as e:
                undefined += 1
                logger.debug(f"{e} (policy={policy.value})")
                if policy is UndefinedPolicy.ZERO:
                    self.add(gene, 0.0)
                continue
            self.add(gene, ratio)
        return undefined

    def total(self) -> float:
        """Sum of set, finite, non-negative slots."""
        values = self.to_array()
        usable = values[np.isfinite(values) & (values >= 0)]
        return max(float(usable.sum()), 0.0)

    def to_array(self) -> np.ndarray:
        return np.array(
            [np.nan if value is None else value for value in self.data],
            dtype=float,
        )

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"NormGenes(total={self.total():.4f}, slots={len(self.data)})"

# taxleak v0.1.0
# Any usage is subject to this software's license.
