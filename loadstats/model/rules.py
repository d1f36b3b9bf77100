"""Group rules that select samples by label.

A rule pattern is either an exact label (``/main``) or a prefix followed by
the recursive wildcard suffix ``/**`` (``/main/**``), which selects the prefix
itself and every label nested beneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Union

from loadstats.errors import ConfigurationError

#: Result key holding statistics over every sample, matched or not.
GLOBAL_GROUP = "__all__"

#: Recursive wildcard suffix for prefix rules.
WILDCARD_SUFFIX = "/**"

PATH_SEPARATOR = "/"


@dataclass(frozen=True)
class GroupRule:
    """A named matching directive.

    Attributes:
        name: Unique group identifier.
        pattern: Exact label or ``<prefix>/**``.
        is_wildcard: True for recursive wildcard rules (derived).
        prefix: Label prefix for wildcard rules, the full pattern otherwise (derived).
    """

    name: str
    pattern: str
    is_wildcard: bool = field(init=False)
    prefix: str = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("Group rule name must be a non-empty string")
        if self.name == GLOBAL_GROUP:
            raise ConfigurationError(
                f"Group rule name '{GLOBAL_GROUP}' is reserved for global totals"
            )
        if not isinstance(self.pattern, str) or not self.pattern:
            raise ConfigurationError(
                f"Group rule '{self.name}' must have a non-empty string pattern"
            )

        is_wildcard = self.pattern.endswith(WILDCARD_SUFFIX) or self.pattern == "**"
        # "**" and "/**" leave an empty prefix, which selects every label
        prefix = self.pattern[: -len(WILDCARD_SUFFIX)] if is_wildcard else self.pattern
        if "**" in prefix:
            raise ConfigurationError(
                f"Group rule '{self.name}': '**' is only allowed as a trailing "
                f"'{WILDCARD_SUFFIX}' suffix, got '{self.pattern}'"
            )

        object.__setattr__(self, "is_wildcard", is_wildcard)
        object.__setattr__(self, "prefix", prefix)

    def matches(self, label: str) -> bool:
        """Return True if ``label`` is selected by this rule."""
        if not self.is_wildcard:
            return label == self.prefix
        if not self.prefix:
            return True
        return label == self.prefix or label.startswith(self.prefix + PATH_SEPARATOR)


RulesInput = Union[
    Mapping[str, str], Iterable[Union[GroupRule, Mapping[str, Any]]], None
]


def parse_rules(raw: RulesInput) -> List[GroupRule]:
    """Normalize rule definitions into an ordered list of GroupRule.

    Args:
        raw: Either an ordered mapping ``name -> pattern``, or an iterable of
            GroupRule objects or ``{"name": ..., "pattern": ...}`` dicts.
            None yields no rules.

    Returns:
        Rules in declaration order.

    Raises:
        ConfigurationError: On malformed entries or duplicate names.
    """
    if raw is None:
        return []

    rules: List[GroupRule] = []
    if isinstance(raw, Mapping):
        for name, pattern in raw.items():
            rules.append(GroupRule(name=name, pattern=pattern))
    else:
        for entry in raw:
            if isinstance(entry, GroupRule):
                rules.append(entry)
            elif isinstance(entry, Mapping):
                if "name" not in entry or "pattern" not in entry:
                    raise ConfigurationError(
                        "Each group rule must have 'name' and 'pattern'"
                    )
                rules.append(GroupRule(name=entry["name"], pattern=entry["pattern"]))
            else:
                raise ConfigurationError(
                    "Group rule must be a GroupRule or dict, "
                    f"got {type(entry).__name__}"
                )

    check_unique_names(rules)
    return rules


def check_unique_names(rules: Iterable[GroupRule]) -> None:
    """Raise ConfigurationError if two rules share a name."""
    seen: set[str] = set()
    for rule in rules:
        if rule.name in seen:
            raise ConfigurationError(f"Duplicate group rule name '{rule.name}'")
        seen.add(rule.name)
