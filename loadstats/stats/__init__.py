"""Streaming statistics: bounded numeric summaries and per-group accumulators."""

from loadstats.stats.accumulator import Accumulator
from loadstats.stats.summary import NumericSummary

__all__ = ["Accumulator", "NumericSummary"]
