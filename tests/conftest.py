"""Shared fixtures for the loadstats test suite."""

from __future__ import annotations

from typing import Callable, List

import pytest

from loadstats.model.sample import Sample


@pytest.fixture
def make_sample() -> Callable[..., Sample]:
    """Factory producing samples with sensible defaults and increasing timestamps."""
    counter = {"ts": 1_000_000}

    def _make(
        label: str = "/main",
        elapsed: int = 100,
        bytes: int = 0,
        success: bool = True,
        timestamp: int | None = None,
    ) -> Sample:
        if timestamp is None:
            counter["ts"] += 10
            timestamp = counter["ts"]
        return Sample(
            timestamp=timestamp,
            label=label,
            elapsed=elapsed,
            bytes=bytes,
            success=success,
        )

    return _make


@pytest.fixture
def page_blob_samples(make_sample) -> List[Sample]:
    """Two /main successes, one /main/sub success, one /other failure."""
    return [
        make_sample("/main", elapsed=100, bytes=1000),
        make_sample("/main", elapsed=200, bytes=2000),
        make_sample("/main/sub", elapsed=300, bytes=3000),
        make_sample("/other", elapsed=50, bytes=0, success=False),
    ]


@pytest.fixture
def page_blob_rules() -> dict[str, str]:
    return {"page": "/main", "blob": "/main/**"}
