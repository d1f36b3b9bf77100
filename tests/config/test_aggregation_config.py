"""Tests for `loadstats.config` focusing on validation and defaults."""

from __future__ import annotations

import pytest

from loadstats.config import (
    DEFAULT_MAX_SAMPLES,
    DEFAULT_PERCENTILES,
    AggregationConfig,
)
from loadstats.errors import ConfigurationError
from loadstats.model.rules import GroupRule


def test_defaults() -> None:
    config = AggregationConfig()
    assert config.rules == ()
    assert config.max_samples == DEFAULT_MAX_SAMPLES == 1000
    assert config.percentiles == DEFAULT_PERCENTILES
    assert config.seed == 0


def test_build_from_mapping_keeps_order_and_floats_percentiles() -> None:
    config = AggregationConfig.build(
        rules={"page": "/main", "blob": "/main/**"}, percentiles=[50, 99]
    )
    assert [r.name for r in config.rules] == ["page", "blob"]
    assert config.percentiles == (50.0, 99.0)
    assert all(isinstance(p, float) for p in config.percentiles)


@pytest.mark.parametrize("max_samples", [0, -3, 1.5, True, "10"])
def test_invalid_max_samples(max_samples) -> None:
    with pytest.raises(ConfigurationError):
        AggregationConfig(max_samples=max_samples)


@pytest.mark.parametrize("percentiles", [(101.0,), (-1.0,), (50.0, 50.0), ("p50",)])
def test_invalid_percentiles(percentiles) -> None:
    with pytest.raises(ConfigurationError):
        AggregationConfig(percentiles=percentiles)


def test_duplicate_rule_names() -> None:
    with pytest.raises(ConfigurationError, match="Duplicate"):
        AggregationConfig(rules=(GroupRule("a", "/x"), GroupRule("a", "/y")))


def test_rules_must_be_group_rules() -> None:
    with pytest.raises(ConfigurationError):
        AggregationConfig(
            rules=({"name": "a", "pattern": "/x"},)  # type: ignore[arg-type]
        )


def test_invalid_seed() -> None:
    with pytest.raises(ConfigurationError):
        AggregationConfig(seed="abc")  # type: ignore[arg-type]
    assert AggregationConfig(seed=None).seed is None


def test_configuration_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        AggregationConfig(max_samples=0)


def test_from_dict_and_to_dict() -> None:
    config = AggregationConfig.from_dict(
        {
            "request_groups": [{"name": "page", "pattern": "/main"}],
            "max_samples": 10,
            "percentiles": [90],
            "seed": 5,
        }
    )
    assert config.to_dict() == {
        "request_groups": {"page": "/main"},
        "max_samples": 10,
        "percentiles": [90.0],
        "seed": 5,
    }
    assert AggregationConfig.from_dict(config.to_dict()) == config


def test_config_is_frozen() -> None:
    config = AggregationConfig()
    with pytest.raises(AttributeError):
        config.max_samples = 5  # type: ignore[misc]
