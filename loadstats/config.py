"""Configuration for aggregation runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from loadstats.errors import ConfigurationError
from loadstats.model.rules import GroupRule, RulesInput, check_unique_names, parse_rules

#: Reservoir capacity used when none is configured.
DEFAULT_MAX_SAMPLES = 1000

#: Percentiles reported for every distribution by default.
DEFAULT_PERCENTILES: Tuple[float, ...] = (50.0, 90.0, 95.0, 99.0)

#: Master seed for reservoir sampling; None makes runs non-reproducible.
DEFAULT_SEED: Optional[int] = 0


@dataclass(frozen=True)
class AggregationConfig:
    """Settings fixed for the lifetime of one aggregation run.

    Attributes:
        rules: Group rules in declaration order.
        max_samples: Reservoir capacity per distribution (>= 1). Bounds memory,
            never caps counts.
        percentiles: Percentiles in [0, 100] computed at finalize.
        seed: Master seed for reservoir sampling.
    """

    rules: Tuple[GroupRule, ...] = ()
    max_samples: int = DEFAULT_MAX_SAMPLES
    percentiles: Tuple[float, ...] = DEFAULT_PERCENTILES
    seed: Optional[int] = DEFAULT_SEED

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "percentiles", tuple(self.percentiles))
        self.validate()
        object.__setattr__(
            self, "percentiles", tuple(float(p) for p in self.percentiles)
        )

    def validate(self) -> None:
        """Check all settings.

        Raises:
            ConfigurationError: If any setting is invalid.
        """
        for rule in self.rules:
            if not isinstance(rule, GroupRule):
                raise ConfigurationError(
                    f"rules must contain GroupRule objects, got {type(rule).__name__}"
                )
        check_unique_names(self.rules)

        if isinstance(self.max_samples, bool) or not isinstance(self.max_samples, int):
            raise ConfigurationError(
                f"max_samples must be an integer, got {self.max_samples!r}"
            )
        if self.max_samples < 1:
            raise ConfigurationError(
                f"max_samples must be >= 1, got {self.max_samples}"
            )

        for p in self.percentiles:
            if isinstance(p, bool) or not isinstance(p, (int, float)):
                raise ConfigurationError(f"Percentile must be a number, got {p!r}")
            if not 0 <= p <= 100:
                raise ConfigurationError(
                    f"Percentile must be between 0 and 100, got {p}"
                )
        if len(set(self.percentiles)) != len(self.percentiles):
            raise ConfigurationError(f"Duplicate percentiles in {self.percentiles}")

        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, int)
        ):
            raise ConfigurationError(
                f"seed must be an integer or None, got {self.seed!r}"
            )

    @classmethod
    def build(
        cls,
        rules: RulesInput = None,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        percentiles: Sequence[float] = DEFAULT_PERCENTILES,
        seed: Optional[int] = DEFAULT_SEED,
    ) -> "AggregationConfig":
        """Create a config from loosely typed rule definitions.

        Args:
            rules: Mapping ``name -> pattern`` or list of rules/dicts; see
                :func:`loadstats.model.rules.parse_rules`.
            max_samples: Reservoir capacity.
            percentiles: Percentiles to compute.
            seed: Master seed.
        """
        return cls(
            rules=tuple(parse_rules(rules)),
            max_samples=max_samples,
            percentiles=tuple(percentiles),
            seed=seed,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AggregationConfig":
        """Construct a config from a plain dictionary.

        Recognized keys: ``request_groups`` (mapping or list), ``max_samples``,
        ``percentiles``, ``seed``. Missing keys take the defaults.
        """
        return cls.build(
            rules=data.get("request_groups"),
            max_samples=data.get("max_samples", DEFAULT_MAX_SAMPLES),
            percentiles=data.get("percentiles", DEFAULT_PERCENTILES),
            seed=data.get("seed", DEFAULT_SEED),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "request_groups": {rule.name: rule.pattern for rule in self.rules},
            "max_samples": self.max_samples,
            "percentiles": list(self.percentiles),
            "seed": self.seed,
        }

