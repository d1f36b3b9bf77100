"""Aggregation driver: one pass over a sample stream."""

from loadstats.engine.driver import AggregationDriver, DriverState, aggregate

__all__ = ["AggregationDriver", "DriverState", "aggregate"]
