"""Tests for label to group resolution."""

from __future__ import annotations

import pytest

from loadstats.errors import ConfigurationError
from loadstats.matching.matcher import GroupMatcher
from loadstats.model.rules import GroupRule, parse_rules


@pytest.fixture
def matcher(page_blob_rules) -> GroupMatcher:
    return GroupMatcher(parse_rules(page_blob_rules))


def test_overlapping_rules_all_returned(matcher: GroupMatcher) -> None:
    assert matcher.resolve_groups("/main") == ("page", "blob")


@pytest.mark.parametrize("label", ["/main/x", "/main/x/y"])
def test_nested_labels_only_match_wildcard(matcher: GroupMatcher, label: str) -> None:
    assert matcher.resolve_groups(label) == ("blob",)


@pytest.mark.parametrize("label", ["/mainX", "/other", ""])
def test_unmatched_labels_yield_empty(matcher: GroupMatcher, label: str) -> None:
    assert matcher.resolve_groups(label) == ()


def test_result_follows_declaration_order() -> None:
    m = GroupMatcher(parse_rules({"blob": "/main/**", "page": "/main"}))
    assert m.resolve_groups("/main") == ("blob", "page")


def test_no_rules() -> None:
    m = GroupMatcher([])
    assert len(m) == 0
    assert m.resolve_groups("/main") == ()


def test_repeated_calls_are_deterministic(matcher: GroupMatcher) -> None:
    first = matcher.resolve_groups("/main/a")
    for _ in range(3):
        assert matcher.resolve_groups("/main/a") == first


def test_many_distinct_labels_still_resolve() -> None:
    m = GroupMatcher([GroupRule("api", "/api/**")])
    for i in range(5000):
        assert m.resolve_groups(f"/api/item/{i}") == ("api",)
    assert m.resolve_groups("/static/x") == ()


def test_duplicate_names_rejected() -> None:
    with pytest.raises(ConfigurationError):
        GroupMatcher([GroupRule("a", "/x"), GroupRule("a", "/y/**")])


def test_group_names(matcher: GroupMatcher) -> None:
    assert matcher.group_names == ["page", "blob"]
