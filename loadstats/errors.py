"""Exception types raised by the aggregation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from loadstats.results.result import AggregationResult


class LoadStatsError(Exception):
    """Base class for all loadstats errors."""


class ConfigurationError(LoadStatsError, ValueError):
    """Invalid group rules or aggregation settings.

    Raised while building configuration, before any sample is ingested.
    """


class DecodeError(LoadStatsError, RuntimeError):
    """The sample stream cannot continue.

    Decoders raise this when the underlying log is malformed or truncated.
    When it escapes :meth:`AggregationDriver.run`, ``partial_result`` holds
    the statistics finalized from the samples ingested before the failure.
    """

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.partial_result: Optional["AggregationResult"] = None


class InvariantViolation(LoadStatsError, AssertionError):
    """Internal accounting is inconsistent. Indicates a programming defect."""


class AggregationStateError(LoadStatsError, RuntimeError):
    """A driver or accumulator was used outside its lifecycle."""


__all__ = [
    "LoadStatsError",
    "ConfigurationError",
    "DecodeError",
    "InvariantViolation",
    "AggregationStateError",
]
