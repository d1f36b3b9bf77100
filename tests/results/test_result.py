"""Tests for finalized snapshots and the aggregation result mapping."""

from __future__ import annotations

import json
import math

import pandas as pd
import pytest

from loadstats.engine.driver import aggregate
from loadstats.errors import InvariantViolation
from loadstats.model.rules import GLOBAL_GROUP
from loadstats.results.result import AggregationResult
from loadstats.results.snapshot import (
    DistributionSnapshot,
    GroupSnapshot,
    format_percentile_key,
    parse_percentile_key,
)


@pytest.fixture
def result(page_blob_samples, page_blob_rules) -> AggregationResult:
    return aggregate(page_blob_samples, rules=page_blob_rules, percentiles=(50, 90))


class TestDistributionSnapshot:
    def test_percentiles_are_read_only(self) -> None:
        snap = DistributionSnapshot(count=1, percentiles={50: 1.0})
        with pytest.raises(TypeError):
            snap.percentiles[90.0] = 2.0  # type: ignore[index]

    def test_unconfigured_percentile_raises_key_error(self) -> None:
        snap = DistributionSnapshot(count=2, percentiles={50.0: 1.5})
        assert snap.percentile(50) == 1.5
        with pytest.raises(KeyError):
            snap.percentile(75)

    def test_percentile_keys(self) -> None:
        assert format_percentile_key(50.0) == "p50"
        assert format_percentile_key(99.9) == "p99.9"
        assert parse_percentile_key("p99.9") == pytest.approx(99.9)
        with pytest.raises(ValueError):
            parse_percentile_key("50")

    def test_close_percentiles_get_distinct_keys(self) -> None:
        assert format_percentile_key(99.99999) == "p99.99999"
        assert format_percentile_key(99.99999) != format_percentile_key(100.0)
        assert format_percentile_key(100) == "p100"
        assert parse_percentile_key(format_percentile_key(12.3456789)) == 12.3456789

    def test_close_percentiles_survive_to_dict(self) -> None:
        snap = DistributionSnapshot(
            count=3, percentiles={99.99999: 2.0, 100.0: 3.0}, values=(1.0, 2.0, 3.0)
        )
        data = snap.to_dict()
        assert len(data["percentiles"]) == 2
        assert DistributionSnapshot.from_dict(data) == snap

    def test_values_sorted_and_serialized(self) -> None:
        snap = DistributionSnapshot(count=3, values=(3.0, 1.0, 2.0), retained=3)
        assert snap.values == (1.0, 2.0, 3.0)
        assert snap.to_dict()["values"] == [1.0, 2.0, 3.0]
        data = json.loads(json.dumps(snap.to_dict()))
        restored = DistributionSnapshot.from_dict(data)
        assert restored.values == snap.values


class TestGroupSnapshot:
    def test_count_invariant_enforced(self) -> None:
        with pytest.raises(InvariantViolation):
            GroupSnapshot(name="g", count=3, success_count=1, error_count=1)

    def test_empty_snapshot_rates_are_none(self) -> None:
        snap = GroupSnapshot(name="g")
        assert snap.error_rate is None
        assert snap.success_rate is None
        assert snap.window_ms is None
        assert snap.throughput is None


class TestAggregationResult:
    def test_global_entry_first(self) -> None:
        snaps = {
            "page": GroupSnapshot(name="page"),
            GLOBAL_GROUP: GroupSnapshot(name=GLOBAL_GROUP),
        }
        res = AggregationResult(snaps)
        assert list(res) == [GLOBAL_GROUP, "page"]
        assert res.groups() == [("page", snaps["page"])]

    def test_missing_global_entry_rejected(self) -> None:
        with pytest.raises(ValueError):
            AggregationResult({"page": GroupSnapshot(name="page")})

    def test_mapping_is_read_only(self, result: AggregationResult) -> None:
        with pytest.raises(TypeError):
            result["new"] = GroupSnapshot(name="new")  # type: ignore[index]

    def test_to_dict_is_json_serializable(self, result: AggregationResult) -> None:
        data = result.to_dict()
        text = json.dumps(data)
        assert data["partial"] is False
        assert data["error"] is None
        assert list(data["groups"]) == [GLOBAL_GROUP, "page", "blob"]
        blob = data["groups"]["blob"]
        assert blob["count"] == 3
        assert set(blob["duration"]["percentiles"]) == {"p50", "p90"}
        assert "throughput" in blob
        assert json.loads(text) == data

    def test_from_dict_restores_snapshots(self, result: AggregationResult) -> None:
        restored = AggregationResult.from_dict(result.to_dict())
        assert list(restored) == list(result)
        assert restored["blob"] == result["blob"]
        assert restored.total == result.total

    def test_group_series_for_renderers(self, result: AggregationResult) -> None:
        assert result["blob"].duration.values == (100.0, 200.0, 300.0)
        assert result["blob"].size.values == (1000.0, 2000.0, 3000.0)
        assert result["page"].duration.value_counts() == {100.0: 1, 200.0: 1}
        assert result.total.duration.values == (50.0, 100.0, 200.0, 300.0)

    def test_to_dataframe(self, result: AggregationResult) -> None:
        df = result.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.index) == [GLOBAL_GROUP, "page", "blob"]
        assert df.loc["blob", "count"] == 3
        assert df.loc[GLOBAL_GROUP, "error_count"] == 1
        assert df.loc["page", "duration_p50"] == pytest.approx(150.0)
        assert "size_p90" in df.columns

    def test_to_dataframe_empty_run_uses_nan(self) -> None:
        df = aggregate([]).to_dataframe()
        assert list(df.index) == [GLOBAL_GROUP]
        assert df.loc[GLOBAL_GROUP, "count"] == 0
        assert math.isnan(df.loc[GLOBAL_GROUP, "duration_mean"])
        assert math.isnan(df.loc[GLOBAL_GROUP, "error_rate"])
