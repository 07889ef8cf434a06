#!filepath: fulfillment_kpi/engines/statistics_engine.py
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence


def median(values: Sequence[float]) -> Optional[float]:
    """
    Odd n  -> middle element
    Even n -> mean of the two middle elements
    n == 0 -> None (undefined, not 0)
    """
    if not values:
        return None
    s = sorted(values)
    m = len(s) // 2
    if len(s) % 2:
        return s[m]
    return (s[m - 1] + s[m]) / 2


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return math.fsum(values) / len(values)


def quantize(value: Optional[float], precision: int) -> Optional[Decimal]:
    """float -> fixed-point Decimal (half-up). None stays None."""
    if value is None:
        return None
    exp = Decimal(1).scaleb(-precision)
    return Decimal(repr(value)).quantize(exp, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StatsSummary:
    count: int
    median: Optional[Decimal]
    average: Optional[Decimal]

    @property
    def empty(self) -> bool:
        return self.count == 0

    def value_of(self, metric: str) -> Optional[Decimal]:
        return getattr(self, metric)


class StreamingStatistics:
    """
    Observation accumulator (consumer side of the scan).

    - accumulate(): append in insertion order, full precision
    - finalize():   count / median / average, rounded ONLY here

    Holds the observation list of a single window; the order stream
    itself is never materialized.
    """

    def __init__(self, precision: int = 2):
        if precision < 0:
            raise ValueError(f"precision must be >= 0 (got {precision})")
        self.precision = precision
        self._values: List[float] = []

    def __len__(self) -> int:
        return len(self._values)

    @property
    def observations(self) -> List[float]:
        return list(self._values)

    def accumulate(self, value: float) -> None:
        self._values.append(value)

    def extend(self, values: Iterable[float]) -> None:
        for v in values:
            self.accumulate(v)

    def finalize(self) -> StatsSummary:
        return StatsSummary(
            count=len(self._values),
            median=quantize(median(self._values), self.precision),
            average=quantize(mean(self._values), self.precision),
        )
