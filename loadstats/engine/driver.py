"""Single-pass aggregation of a sample stream into per-group statistics.

The driver pulls samples from a decoder exactly once, resolves each sample's
groups, and feeds the global accumulator plus every matched group's
accumulator. Accumulators are created lazily and kept in first-seen order,
which is the order of the finalized :class:`AggregationResult`.

Example:
    from loadstats import Sample, aggregate

    result = aggregate(
        samples,
        rules={"page": "/main", "blob": "/main/**"},
        max_samples=1000,
    )
    result["blob"].duration.percentile(90)
"""

from __future__ import annotations

from enum import IntEnum
from time import perf_counter
from typing import Dict, Iterable, List, Optional, Sequence

from loadstats.config import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_PERCENTILES,
    DEFAULT_SEED,
    AggregationConfig,
)
from loadstats.errors import AggregationStateError, DecodeError
from loadstats.logging import get_logger
from loadstats.matching.matcher import GroupMatcher
from loadstats.model.rules import GLOBAL_GROUP, RulesInput
from loadstats.model.sample import Sample
from loadstats.results.result import AggregationResult
from loadstats.stats.accumulator import Accumulator
from loadstats.utils.seed_manager import SeedManager

logger = get_logger(__name__)


class DriverState(IntEnum):
    """Lifecycle of an :class:`AggregationDriver`."""

    IDLE = 1
    RUNNING = 2
    FINALIZED = 3


class AggregationDriver:
    """Consumes one sample stream and produces an :class:`AggregationResult`.

    A driver is single-use: after :meth:`finalize` (or :meth:`run`) it rejects
    further samples. Create a new driver to aggregate another stream.

    Args:
        config: Group rules, reservoir capacity, percentiles and seed.
    """

    def __init__(self, config: Optional[AggregationConfig] = None) -> None:
        self.config = config if config is not None else AggregationConfig()
        self.matcher = GroupMatcher(self.config.rules)
        self._seeds = SeedManager(self.config.seed)
        self._state = DriverState.IDLE
        self._global = self._new_accumulator(GLOBAL_GROUP)
        self._groups: Dict[str, Accumulator] = {}
        self._result: Optional[AggregationResult] = None

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def samples_seen(self) -> int:
        return self._global.total_count

    def _new_accumulator(self, name: str) -> Accumulator:
        return Accumulator(
            name,
            max_samples=self.config.max_samples,
            percentiles=self.config.percentiles,
            duration_rng=self._seeds.create_random_state("reservoir", name, "duration"),
            size_rng=self._seeds.create_random_state("reservoir", name, "size"),
        )

    def ingest(self, sample: Sample) -> None:
        """Count one sample into the global group and every matching group.

        Raises:
            AggregationStateError: If the driver has been finalized.
        """
        if self._state is DriverState.FINALIZED:
            raise AggregationStateError("Driver is finalized; create a new driver")
        self._state = DriverState.RUNNING

        self._global.ingest(sample)
        for name in self.matcher.resolve_groups(sample.label):
            acc = self._groups.get(name)
            if acc is None:
                logger.debug(f"Creating accumulator for group '{name}'")
                acc = self._new_accumulator(name)
                self._groups[name] = acc
            acc.ingest(sample)

    def run(self, samples: Iterable[Sample]) -> AggregationResult:
        """Aggregate a whole stream in one forward pass.

        If the stream raises :class:`DecodeError`, the samples ingested so far
        are finalized into a partial result, which is attached to the error as
        ``partial_result`` before the error is re-raised.

        Args:
            samples: Finite, forward-only iterable of samples.

        Returns:
            Finalized result.

        Raises:
            DecodeError: The stream failed; see ``partial_result``.
            AggregationStateError: If the driver was already finalized.
        """
        if self._state is DriverState.FINALIZED:
            raise AggregationStateError("Driver is finalized; create a new driver")

        started = perf_counter()
        logger.debug(
            f"Starting aggregation with {len(self.matcher)} group rule(s), "
            f"max_samples={self.config.max_samples}"
        )

        try:
            for sample in samples:
                self.ingest(sample)
        except DecodeError as exc:
            logger.warning(
                f"Sample stream failed after {self.samples_seen} sample(s): {exc}; "
                "reporting partial results"
            )
            exc.partial_result = self._finalize(partial=True, error=exc)
            raise

        result = self.finalize()
        logger.info(
            f"Aggregated {result.total.count} sample(s) into "
            f"{len(result.group_names)} group(s) in {perf_counter() - started:.3f} s"
        )
        return result

    def finalize(self) -> AggregationResult:
        """Freeze all accumulators and build the result.

        Calling it again returns the same result.
        """
        if self._result is not None:
            return self._result
        return self._finalize(partial=False, error=None)

    def _finalize(
        self, partial: bool, error: Optional[BaseException]
    ) -> AggregationResult:
        snapshots = {GLOBAL_GROUP: self._global.finalize()}
        for name, acc in self._groups.items():
            snapshots[name] = acc.finalize()

        self._state = DriverState.FINALIZED
        self._result = AggregationResult(snapshots, partial=partial, error=error)
        return self._result

    def merge(self, other: "AggregationDriver") -> None:
        """Fold another shard's driver into this one.

        Both drivers must share the same configuration and neither may be
        finalized. Groups seen only by ``other`` are appended in its order.
        ``other`` must not be used afterwards.

        Raises:
            AggregationStateError: If either driver is finalized, or ``other``
                is this driver.
            ValueError: If the configurations differ.
        """
        if other is self:
            raise AggregationStateError("Cannot merge a driver into itself")
        if DriverState.FINALIZED in (self._state, other._state):
            raise AggregationStateError("Cannot merge finalized drivers")
        if other.config != self.config:
            raise ValueError("Cannot merge drivers with different configurations")

        self._global.merge(other._global)
        for name, acc in other._groups.items():
            mine = self._groups.get(name)
            if mine is None:
                self._groups[name] = acc
            else:
                mine.merge(acc)
        if other._state is DriverState.RUNNING:
            self._state = DriverState.RUNNING
        other._state = DriverState.FINALIZED

    def group_names(self) -> List[str]:
        """Groups that have received samples so far, in first-seen order."""
        return list(self._groups)


def aggregate(
    samples: Iterable[Sample],
    rules: RulesInput = None,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    percentiles: Sequence[float] = DEFAULT_PERCENTILES,
    seed: Optional[int] = DEFAULT_SEED,
) -> AggregationResult:
    """Aggregate a sample stream with a one-off driver.

    Configuration is validated before the first sample is pulled.

    Args:
        samples: Finite iterable of samples.
        rules: Group rules (mapping ``name -> pattern`` or list).
        max_samples: Reservoir capacity per distribution.
        percentiles: Percentiles to compute.
        seed: Master seed for reservoir sampling.

    Returns:
        Finalized result.

    Raises:
        ConfigurationError: If the configuration is invalid.
        DecodeError: If the stream fails; carries ``partial_result``.
    """
    config = AggregationConfig.build(
        rules=rules, max_samples=max_samples, percentiles=percentiles, seed=seed
    )
    return AggregationDriver(config).run(samples)
