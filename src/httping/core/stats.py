"""Latency statistics over the totals of a run."""

import math
import statistics
from collections.abc import Iterable, Sequence

from ..constants import PERCENTILES
from ..models import LatencySummary


def percentile(sorted_values: Sequence[float], pct: float) -> float:
    """Linearly interpolated percentile of an ascending, non-empty sequence.

    The rank is ``pct / 100 * (n - 1)``; between two neighbours the value
    is interpolated, so the 50th percentile of [10, 20, 30, 40, 50] is 30.
    """
    if not sorted_values:
        raise ValueError("percentile of an empty sequence")
    if not 0 <= pct <= 100:
        raise ValueError(f"percentile out of range: {pct}")
    index = (len(sorted_values) - 1) * (pct / 100.0)
    low = math.floor(index)
    high = math.ceil(index)
    if low == high:
        return float(sorted_values[low])
    fraction = index - low
    return float(sorted_values[low] * (1.0 - fraction) + sorted_values[high] * fraction)


class StatsAggregator:
    """Accumulates request totals (ms) and summarizes them."""

    def __init__(self, values: Iterable[float] = ()) -> None:
        self._values: list[float] = list(values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> list[float]:
        """Observed totals in the order they were added."""
        return list(self._values)

    @property
    def empty(self) -> bool:
        """True when no total qualified; there is nothing to summarize."""
        return not self._values

    def add(self, total_ms: float) -> None:
        self._values.append(total_ms)

    def summarize(self, percentiles: Iterable[int] = PERCENTILES) -> LatencySummary | None:
        """Compute min, max, mean and percentiles.

        Returns:
            The summary, or None when no totals were observed
        """
        if self.empty:
            return None
        ordered = sorted(self._values)
        return LatencySummary(
            count=len(ordered),
            min_ms=ordered[0],
            max_ms=ordered[-1],
            mean_ms=statistics.fmean(ordered),
            percentiles={pct: percentile(ordered, pct) for pct in percentiles},
        )
