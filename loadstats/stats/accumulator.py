"""Per-group running statistics."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from loadstats.errors import AggregationStateError, InvariantViolation
from loadstats.model.sample import Sample
from loadstats.results.snapshot import GroupSnapshot
from loadstats.stats.summary import NumericSummary


class Accumulator:
    """Mutable statistics for one group.

    Counts are exact. Duration and size distributions are bounded by
    ``max_samples`` retained values each. Once :meth:`finalize` has been
    called the accumulator is read-only.

    Args:
        name: Group name reported in the snapshot.
        max_samples: Reservoir capacity of each numeric summary.
        percentiles: Percentiles computed at finalize.
        duration_rng: Random source for the duration reservoir.
        size_rng: Random source for the size reservoir.
    """

    def __init__(
        self,
        name: str,
        max_samples: int,
        percentiles: Sequence[float] = (50.0, 90.0),
        duration_rng: Optional[random.Random] = None,
        size_rng: Optional[random.Random] = None,
    ) -> None:
        self.name = name
        self.total_count = 0
        self.success_count = 0
        self.error_count = 0
        self.duration = NumericSummary(max_samples, percentiles, duration_rng)
        self.size = NumericSummary(max_samples, percentiles, size_rng)
        self.start_timestamp: Optional[int] = None
        self.end_timestamp: Optional[int] = None
        self._snapshot: Optional[GroupSnapshot] = None

    @property
    def finalized(self) -> bool:
        return self._snapshot is not None

    def ingest(self, sample: Sample) -> None:
        """Count one sample into this group."""
        if self._snapshot is not None:
            raise AggregationStateError(
                f"Accumulator '{self.name}' is finalized and cannot ingest samples"
            )

        self.total_count += 1
        if sample.success:
            self.success_count += 1
        else:
            self.error_count += 1

        self.duration.add(sample.elapsed)
        self.size.add(sample.bytes)

        end = sample.timestamp + sample.elapsed
        if self.start_timestamp is None or sample.timestamp < self.start_timestamp:
            self.start_timestamp = sample.timestamp
        if self.end_timestamp is None or end > self.end_timestamp:
            self.end_timestamp = end

    def merge(self, other: "Accumulator") -> None:
        """Fold another shard's accumulator for the same group into this one.

        Every precondition is checked before any state changes, so a rejected
        merge leaves both accumulators untouched.

        Raises:
            AggregationStateError: If either accumulator is finalized, or
                ``other`` is this accumulator.
            ValueError: If reservoir capacities or percentiles differ.
        """
        if other is self:
            raise AggregationStateError(
                f"Cannot merge accumulator '{self.name}' into itself"
            )
        if self._snapshot is not None or other._snapshot is not None:
            raise AggregationStateError("Cannot merge finalized accumulators")
        self.duration.check_mergeable(other.duration)
        self.size.check_mergeable(other.size)
        other.check_invariants()

        self.total_count += other.total_count
        self.success_count += other.success_count
        self.error_count += other.error_count
        self.duration.merge(other.duration)
        self.size.merge(other.size)

        if other.start_timestamp is not None:
            if (
                self.start_timestamp is None
                or other.start_timestamp < self.start_timestamp
            ):
                self.start_timestamp = other.start_timestamp
        if other.end_timestamp is not None:
            if self.end_timestamp is None or other.end_timestamp > self.end_timestamp:
                self.end_timestamp = other.end_timestamp

        self.check_invariants()

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the internal counts disagree."""
        if self.total_count != self.success_count + self.error_count:
            raise InvariantViolation(
                f"Accumulator '{self.name}': total {self.total_count} != "
                f"success {self.success_count} + errors {self.error_count}"
            )
        counts = (self.duration.count, self.size.count)
        if counts != (self.total_count, self.total_count):
            raise InvariantViolation(
                f"Accumulator '{self.name}': summary counts {counts} "
                f"!= total {self.total_count}"
            )

    def finalize(self) -> GroupSnapshot:
        """Freeze the accumulator and return its snapshot.

        Repeated calls return the same snapshot.
        """
        if self._snapshot is not None:
            return self._snapshot

        self.check_invariants()
        self._snapshot = GroupSnapshot(
            name=self.name,
            count=self.total_count,
            success_count=self.success_count,
            error_count=self.error_count,
            duration=self.duration.finalize(),
            size=self.size.finalize(),
            start_timestamp=self.start_timestamp,
            end_timestamp=self.end_timestamp,
        )
        return self._snapshot
