"""Bounded-memory numeric summary with reservoir sampling.

:class:`NumericSummary` keeps exact running ``count``, ``total``, ``min`` and
``max``, a Welford variance accumulator, plus a fixed-capacity reservoir of
observed values for order statistics. Memory is O(capacity) regardless of
how many values are observed.

Reservoir sampling follows Algorithm R: the first ``capacity`` values are
kept verbatim; afterwards the n-th value replaces a uniformly chosen slot
with probability ``capacity / n``. Every observed value therefore has the
same probability of being retained, and percentiles computed from the
reservoir are unbiased estimates of the stream's percentiles.

Approximation error: with k retained values, the rank error of an estimated
p-quantile has standard deviation of roughly ``sqrt(p * (1 - p) / k)``
(e.g. about 1.6 percentile points at p=0.5 for k=1000). Callers that need
exact percentiles set the capacity at or above the number of observations;
``DistributionSnapshot.exact`` reports whether that held.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence

import numpy as np

from loadstats.errors import AggregationStateError
from loadstats.results.snapshot import DistributionSnapshot


class NumericSummary:
    """Streaming summary of one numeric metric.

    Args:
        capacity: Maximum number of values retained for percentile estimation.
        percentiles: Percentiles (0-100) computed at finalize.
        rng: Random source driving reservoir replacement. Pass a seeded
            instance for reproducible results.
    """

    def __init__(
        self,
        capacity: int,
        percentiles: Sequence[float] = (50.0, 90.0),
        rng: Optional[random.Random] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.percentiles = tuple(float(p) for p in percentiles)
        self._rng = rng if rng is not None else random.Random()

        self.count = 0
        self.total = 0
        self.min: Optional[float] = None
        self.max: Optional[float] = None
        self._mean = 0.0
        self._m2 = 0.0
        self._reservoir: List[float] = []
        self._snapshot: Optional[DistributionSnapshot] = None

    @property
    def finalized(self) -> bool:
        return self._snapshot is not None

    @property
    def retained(self) -> int:
        return len(self._reservoir)

    @property
    def exact(self) -> bool:
        """True while the reservoir still holds every observed value."""
        return self.count == len(self._reservoir)

    def add(self, value: float) -> None:
        """Observe one value."""
        if self._snapshot is not None:
            raise AggregationStateError("Cannot add values to a finalized summary")

        self.count += 1
        self.total += value
        if self.min is None or value < self.min:
            self.min = value
        if self.max is None or value > self.max:
            self.max = value

        delta = value - self._mean
        self._mean += delta / self.count
        self._m2 += delta * (value - self._mean)

        if len(self._reservoir) < self.capacity:
            self._reservoir.append(value)
        else:
            slot = self._rng.randrange(self.count)
            if slot < self.capacity:
                self._reservoir[slot] = value

    def check_mergeable(self, other: "NumericSummary") -> None:
        """Raise if ``other`` cannot be folded into this summary.

        Raises:
            AggregationStateError: If either summary is finalized, or ``other``
                is this summary.
            ValueError: If capacities or percentiles differ.
        """
        if other is self:
            raise AggregationStateError("Cannot merge a summary into itself")
        if self._snapshot is not None or other._snapshot is not None:
            raise AggregationStateError("Cannot merge finalized summaries")
        if other.capacity != self.capacity or other.percentiles != self.percentiles:
            raise ValueError(
                "Cannot merge summaries with different capacity or percentiles"
            )

    def merge(self, other: "NumericSummary") -> None:
        """Fold the state of ``other`` into this summary.

        Exact statistics combine directly (Chan et al. for the variance).
        Reservoirs combine by a count-weighted split: the number of merged
        slots drawn from each side follows the hypergeometric distribution
        of drawing ``capacity`` observations from the union, so every
        observation of either shard keeps the same retention probability.

        Raises:
            AggregationStateError: If either summary is already finalized, or
                ``other`` is this summary.
            ValueError: If capacities or percentiles differ.
        """
        self.check_mergeable(other)
        if other.count == 0:
            return
        if self.count == 0:
            self._adopt(other)
            return

        n_a, n_b = self.count, other.count
        n = n_a + n_b
        delta = other._mean - self._mean
        self._m2 = self._m2 + other._m2 + delta * delta * n_a * n_b / n
        self._mean = self._mean + delta * n_b / n
        self.count = n
        self.total += other.total
        self.min = min(self.min, other.min)
        self.max = max(self.max, other.max)

        if len(self._reservoir) + len(other._reservoir) <= self.capacity:
            self._reservoir = self._reservoir + other._reservoir
            return

        from_other = self._draw_share(n_a, n_b)
        self._reservoir = self._rng.sample(
            self._reservoir, self.capacity - from_other
        ) + self._rng.sample(other._reservoir, from_other)

    def _draw_share(self, n_a: int, n_b: int) -> int:
        # Hypergeometric draw: how many of `capacity` picks come from the b side
        taken = 0
        for _ in range(self.capacity):
            if self._rng.random() * (n_a + n_b) < n_b:
                n_b -= 1
                taken += 1
            else:
                n_a -= 1
        return taken

    def _adopt(self, other: "NumericSummary") -> None:
        self.count = other.count
        self.total = other.total
        self.min = other.min
        self.max = other.max
        self._mean = other._mean
        self._m2 = other._m2
        self._reservoir = list(other._reservoir)

    def finalize(self) -> DistributionSnapshot:
        """Freeze the summary and return its snapshot.

        The reservoir is sorted as a copy, so calling this again returns the
        same snapshot without further changes to the summary.
        """
        if self._snapshot is not None:
            return self._snapshot

        if self.count == 0:
            self._snapshot = DistributionSnapshot(count=0, retained=0, exact=True)
            return self._snapshot

        values = np.sort(np.asarray(self._reservoir, dtype=float))
        if self.percentiles:
            computed = np.percentile(values, self.percentiles, method="linear")
            percentiles = {
                p: float(v) for p, v in zip(self.percentiles, np.atleast_1d(computed))
            }
        else:
            percentiles = {}

        self._snapshot = DistributionSnapshot(
            count=self.count,
            total=self.total,
            min=self.min,
            max=self.max,
            mean=self.total / self.count,
            stdev=math.sqrt(max(self._m2, 0.0) / self.count),
            percentiles=percentiles,
            values=tuple(values.tolist()),
            retained=len(self._reservoir),
            exact=self.exact,
        )
        return self._snapshot
