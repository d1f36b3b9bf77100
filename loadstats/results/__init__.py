"""Finalized, read-only aggregation output consumed by renderers."""

from loadstats.results.result import AggregationResult
from loadstats.results.snapshot import DistributionSnapshot, GroupSnapshot

__all__ = [
    "AggregationResult",
    "DistributionSnapshot",
    "GroupSnapshot",
]
