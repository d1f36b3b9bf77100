"""Immutable finalized statistics.

The field names of :class:`GroupSnapshot` and :class:`DistributionSnapshot`,
and the keys produced by their ``to_dict()`` methods, are the contract
consumed by report renderers:

- ``DistributionSnapshot``: ``count``, ``total``, ``min``, ``max``, ``mean``,
  ``stdev``, ``percentiles`` (keyed ``p50``, ``p90``, ...), ``values``,
  ``retained``, ``exact``
- ``GroupSnapshot``: ``name``, ``count``, ``success_count``, ``error_count``,
  ``error_rate``, ``start_timestamp``, ``end_timestamp``, ``throughput``,
  ``duration``, ``size``

Statistics over zero observations are ``None``, never zero, so that "no
data" stays distinguishable from "all-zero data".
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from loadstats.errors import InvariantViolation


def format_percentile_key(percentile: float) -> str:
    """Return the renderer key for a percentile, e.g. 50 -> "p50", 99.9 -> "p99.9".

    Non-integral percentiles keep full float precision, so distinct
    percentiles always map to distinct keys.
    """
    value = float(percentile)
    if value.is_integer():
        return f"p{int(value)}"
    return f"p{value!r}"


def parse_percentile_key(key: str) -> float:
    """Inverse of :func:`format_percentile_key`."""
    if not key.startswith("p"):
        raise ValueError(f"Invalid percentile key '{key}'")
    return float(key[1:])


@dataclass(frozen=True)
class DistributionSnapshot:
    """Finalized summary of one numeric metric (duration or size).

    ``min``, ``max``, ``mean``, ``stdev`` and ``total`` are exact over every
    observed value. ``percentiles`` are computed from the retained reservoir
    by linear interpolation between adjacent ranks; they are exact only when
    ``exact`` is True, i.e. when the reservoir never had to discard a value.

    Attributes:
        count: Number of observed values.
        total: Sum of observed values, or None if count is 0.
        min: Smallest observed value, or None.
        max: Largest observed value, or None.
        mean: Arithmetic mean, or None.
        stdev: Population standard deviation, or None.
        percentiles: Read-only mapping from percentile (0-100) to value.
        values: Retained reservoir values in ascending order, at most
            ``max_samples`` of them. Chart and CSV series are built from these.
        retained: Number of values held by the reservoir at finalize time.
        exact: True when every observed value was retained.
    """

    count: int = 0
    total: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    stdev: Optional[float] = None
    percentiles: Mapping[float, float] = field(default_factory=dict)
    values: Tuple[float, ...] = ()
    retained: int = 0
    exact: bool = True

    def __post_init__(self) -> None:
        frozen = MappingProxyType(
            {float(p): v for p, v in sorted(self.percentiles.items())}
        )
        object.__setattr__(self, "percentiles", frozen)
        object.__setattr__(self, "values", tuple(sorted(self.values)))

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    @property
    def median(self) -> Optional[float]:
        """The 50th percentile if it was computed and data exists."""
        return self.percentiles.get(50.0)

    def percentile(self, percentile: float) -> Optional[float]:
        """Return a computed percentile value.

        Args:
            percentile: Percentile in [0, 100] that was requested at configuration.

        Returns:
            The value, or None when no data was observed.

        Raises:
            KeyError: If data exists but the percentile was not configured.
        """
        if self.is_empty:
            return None
        try:
            return self.percentiles[float(percentile)]
        except KeyError:
            raise KeyError(
                f"Percentile {percentile:g} was not computed; "
                f"available: {[f'{p:g}' for p in self.percentiles]}"
            ) from None

    def value_counts(self) -> Dict[float, int]:
        """Occurrences of each retained value, in ascending value order."""
        return dict(sorted(Counter(self.values).items()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "stdev": self.stdev,
            "percentiles": {
                format_percentile_key(p): v for p, v in self.percentiles.items()
            },
            "values": list(self.values),
            "retained": self.retained,
            "exact": self.exact,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DistributionSnapshot":
        """Construct a DistributionSnapshot from a dictionary produced by to_dict()."""
        percentiles = {
            parse_percentile_key(k): float(v)
            for k, v in (data.get("percentiles") or {}).items()
        }
        return cls(
            count=int(data.get("count", 0)),
            total=data.get("total"),
            min=data.get("min"),
            max=data.get("max"),
            mean=data.get("mean"),
            stdev=data.get("stdev"),
            percentiles=percentiles,
            values=tuple(float(v) for v in data.get("values") or ()),
            retained=int(data.get("retained", 0)),
            exact=bool(data.get("exact", True)),
        )


@dataclass(frozen=True)
class GroupSnapshot:
    """Finalized statistics of one group (or of the global totals).

    Attributes:
        name: Group name, or the reserved global key.
        count: Number of samples counted in this group.
        success_count: Samples flagged successful.
        error_count: Samples flagged failed.
        duration: Elapsed-time distribution in milliseconds.
        size: Response-size distribution in bytes.
        start_timestamp: Earliest sample timestamp (epoch ms), or None.
        end_timestamp: Latest sample completion (timestamp + elapsed, epoch ms),
            or None.
    """

    name: str
    count: int = 0
    success_count: int = 0
    error_count: int = 0
    duration: DistributionSnapshot = field(default_factory=DistributionSnapshot)
    size: DistributionSnapshot = field(default_factory=DistributionSnapshot)
    start_timestamp: Optional[int] = None
    end_timestamp: Optional[int] = None

    def __post_init__(self) -> None:
        if self.count != self.success_count + self.error_count:
            raise InvariantViolation(
                f"Group '{self.name}': count {self.count} != "
                f"success {self.success_count} + errors {self.error_count}"
            )

    @property
    def error_rate(self) -> Optional[float]:
        """Fraction of failed samples in [0, 1], or None without samples."""
        if self.count == 0:
            return None
        return self.error_count / self.count

    @property
    def success_rate(self) -> Optional[float]:
        if self.count == 0:
            return None
        return self.success_count / self.count

    @property
    def window_ms(self) -> Optional[int]:
        """Span from first sample start to last sample completion."""
        if self.start_timestamp is None or self.end_timestamp is None:
            return None
        return self.end_timestamp - self.start_timestamp

    @property
    def throughput(self) -> Optional[float]:
        """Samples per second over the observed window, or None for an empty window."""
        window = self.window_ms
        if not window or window <= 0:
            return None
        return self.count / (window / 1000.0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "count": self.count,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "error_rate": self.error_rate,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "throughput": self.throughput,
            "duration": self.duration.to_dict(),
            "size": self.size.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupSnapshot":
        """Construct a GroupSnapshot from a dictionary produced by to_dict().

        Derived keys (``error_rate``, ``throughput``) are ignored and recomputed.
        """
        return cls(
            name=str(data["name"]),
            count=int(data.get("count", 0)),
            success_count=int(data.get("success_count", 0)),
            error_count=int(data.get("error_count", 0)),
            duration=DistributionSnapshot.from_dict(data.get("duration") or {}),
            size=DistributionSnapshot.from_dict(data.get("size") or {}),
            start_timestamp=data.get("start_timestamp"),
            end_timestamp=data.get("end_timestamp"),
        )
