from __future__ import annotations

from datetime import datetime, timezone

import pytest

from loadstats.model.sample import Sample


def test_sample_is_immutable() -> None:
    s = Sample(timestamp=0, label="/a", elapsed=1)
    with pytest.raises(AttributeError):
        s.elapsed = 2  # type: ignore[misc]


def test_defaults() -> None:
    s = Sample(timestamp=0, label="/a", elapsed=1)
    assert s.bytes == 0
    assert s.success is True


@pytest.mark.parametrize("field,value", [("elapsed", -1), ("bytes", -5)])
def test_negative_values_rejected(field: str, value: int) -> None:
    kwargs = {"timestamp": 0, "label": "/a", "elapsed": 1, "bytes": 0}
    kwargs[field] = value
    with pytest.raises(ValueError):
        Sample(**kwargs)


def test_time_property_is_utc_datetime() -> None:
    s = Sample(timestamp=1_323_960_909_000, label="/a", elapsed=1)
    assert s.time == datetime(2011, 12, 15, 14, 55, 9, tzinfo=timezone.utc)


def test_from_dict_with_jtl_attributes() -> None:
    s = Sample.from_dict(
        {
            "t": "125",
            "lt": "100",
            "ts": "1323960909000",
            "s": "false",
            "lb": "/main",
            "by": "4321",
        }
    )
    assert s == Sample(
        timestamp=1_323_960_909_000,
        label="/main",
        elapsed=125,
        bytes=4321,
        success=False,
    )


def test_from_dict_with_field_names_and_missing_bytes() -> None:
    s = Sample.from_dict({"timestamp": 5, "label": "/x", "elapsed": 7, "success": True})
    assert s.bytes == 0
    assert s.success is True


def test_from_dict_missing_required_field() -> None:
    with pytest.raises(ValueError, match="missing"):
        Sample.from_dict({"lb": "/x", "t": "1"})


def test_from_dict_bad_success_flag() -> None:
    with pytest.raises(ValueError):
        Sample.from_dict({"ts": 0, "lb": "/x", "t": 1, "s": "maybe"})
