"""loadstats: streaming aggregation of load-test results.

loadstats turns a stream of request/response samples (as decoded from a
JMeter-style results log) into per-group statistics for report renderers.
Samples are classified into named groups by label rules; each group keeps
exact counts and bounded-memory duration/size distributions.

Primary API:
    aggregate() - One-off aggregation of a sample iterable
    AggregationDriver - Single-use driver with push-style ingest/finalize
    AggregationConfig - Group rules, reservoir capacity, percentiles, seed
    AggregationResult - Ordered, read-only mapping of group name to GroupSnapshot

Example:
    from loadstats import Sample, aggregate

    samples = [
        Sample(timestamp=0, label="/main", elapsed=100),
        Sample(timestamp=5, label="/main/sub", elapsed=300),
        Sample(timestamp=9, label="/other", elapsed=50, success=False),
    ]
    result = aggregate(samples, rules={"page": "/main", "blob": "/main/**"})
    result.total.error_count   # 1
    result["blob"].count       # 2
"""

from __future__ import annotations

from loadstats import logging
from loadstats._version import __version__
from loadstats.config import AggregationConfig
from loadstats.dsl.loader import load_config_file, load_config_yaml
from loadstats.engine.driver import AggregationDriver, DriverState, aggregate
from loadstats.errors import (
    AggregationStateError,
    ConfigurationError,
    DecodeError,
    InvariantViolation,
    LoadStatsError,
)
from loadstats.matching.matcher import GroupMatcher
from loadstats.model.rules import GLOBAL_GROUP, GroupRule
from loadstats.model.sample import Sample
from loadstats.results.result import AggregationResult
from loadstats.results.snapshot import DistributionSnapshot, GroupSnapshot
from loadstats.stats.accumulator import Accumulator
from loadstats.stats.summary import NumericSummary

__all__ = [
    # Version
    "__version__",
    # Model
    "Sample",
    "GroupRule",
    "GLOBAL_GROUP",
    # Configuration
    "AggregationConfig",
    "load_config_yaml",
    "load_config_file",
    # Engine (primary API)
    "aggregate",
    "AggregationDriver",
    "DriverState",
    "GroupMatcher",
    "Accumulator",
    "NumericSummary",
    # Results
    "AggregationResult",
    "GroupSnapshot",
    "DistributionSnapshot",
    # Errors
    "LoadStatsError",
    "ConfigurationError",
    "DecodeError",
    "InvariantViolation",
    "AggregationStateError",
    # Utilities
    "logging",
]
