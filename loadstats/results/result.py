"""Finalized output of one aggregation run."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from loadstats.model.rules import GLOBAL_GROUP
from loadstats.results.snapshot import GroupSnapshot, format_percentile_key


class AggregationResult(Mapping[str, GroupSnapshot]):
    """Read-only mapping from group name to :class:`GroupSnapshot`.

    Iteration follows first-seen order. The global totals are always present
    under :data:`GLOBAL_GROUP` and come first.

    Attributes:
        partial: True when the sample stream failed before exhaustion.
        error: The exception that ended a partial run, if any.
    """

    def __init__(
        self,
        snapshots: Mapping[str, GroupSnapshot],
        partial: bool = False,
        error: Optional[BaseException] = None,
    ) -> None:
        if GLOBAL_GROUP not in snapshots:
            raise ValueError(f"Result must contain the '{GLOBAL_GROUP}' entry")
        ordered = {GLOBAL_GROUP: snapshots[GLOBAL_GROUP]}
        ordered.update((k, v) for k, v in snapshots.items() if k != GLOBAL_GROUP)
        self._snapshots = MappingProxyType(ordered)
        self.partial = partial
        self.error = error

    def __getitem__(self, name: str) -> GroupSnapshot:
        return self._snapshots[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __repr__(self) -> str:
        return (
            f"AggregationResult(groups={list(self.group_names)}, "
            f"count={self.total.count}, partial={self.partial})"
        )

    @property
    def total(self) -> GroupSnapshot:
        """Statistics over every ingested sample."""
        return self._snapshots[GLOBAL_GROUP]

    @property
    def group_names(self) -> List[str]:
        """Rule-defined groups that received samples, in first-seen order."""
        return [name for name in self._snapshots if name != GLOBAL_GROUP]

    def groups(self) -> List[Tuple[str, GroupSnapshot]]:
        """(name, snapshot) pairs for rule-defined groups only."""
        return [(name, self._snapshots[name]) for name in self.group_names]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary.

        Returns:
            ``{"partial": bool, "error": str | None, "groups": {name: snapshot_dict}}``
        """
        return {
            "partial": self.partial,
            "error": str(self.error) if self.error is not None else None,
            "groups": {name: snap.to_dict() for name, snap in self._snapshots.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregationResult":
        """Construct an AggregationResult from a dictionary produced by to_dict().

        The original exception is not recoverable; only ``partial`` is restored.
        """
        snapshots = {
            name: GroupSnapshot.from_dict(snap)
            for name, snap in (data.get("groups") or {}).items()
        }
        return cls(snapshots, partial=bool(data.get("partial", False)))

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view with one row per group, indexed by group name.

        Columns: ``count``, ``success_count``, ``error_count``, ``error_rate``,
        ``throughput``, then ``duration_*`` and ``size_*`` statistics including
        one column per computed percentile (e.g. ``duration_p90``).
        Missing statistics are NaN.
        """
        rows = []
        for name, snap in self._snapshots.items():
            row: Dict[str, Any] = {
                "group": name,
                "count": snap.count,
                "success_count": snap.success_count,
                "error_count": snap.error_count,
                "error_rate": snap.error_rate,
                "throughput": snap.throughput,
            }
            for prefix, dist in (("duration", snap.duration), ("size", snap.size)):
                row[f"{prefix}_min"] = dist.min
                row[f"{prefix}_max"] = dist.max
                row[f"{prefix}_mean"] = dist.mean
                row[f"{prefix}_stdev"] = dist.stdev
                for p, value in dist.percentiles.items():
                    row[f"{prefix}_{format_percentile_key(p)}"] = value
            rows.append(row)

        df = pd.DataFrame(rows).set_index("group")
        # None in object columns -> NaN so numeric consumers can aggregate
        return df.apply(pd.to_numeric, errors="coerce")
