"""Label to group resolution.

Membership is multi-label: every rule whose pattern selects a label
contributes its group, so an exact ``/main`` rule and a ``/main/**`` rule both
count a sample labeled ``/main``.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from loadstats.model.rules import GroupRule, check_unique_names

# Labels embedding request ids are unbounded; stop caching past this size
_MAX_CACHED_LABELS = 4096


class GroupMatcher:
    """Resolves sample labels to the ordered group names they belong to.

    Rules are evaluated in declaration order and the returned names follow
    that order. Results are cached per label since load-test logs repeat a
    small set of labels many times.
    """

    def __init__(self, rules: Iterable[GroupRule]) -> None:
        self._rules: Tuple[GroupRule, ...] = tuple(rules)
        check_unique_names(self._rules)
        self._cache: dict[str, Tuple[str, ...]] = {}

    @property
    def rules(self) -> Tuple[GroupRule, ...]:
        return self._rules

    @property
    def group_names(self) -> List[str]:
        """Configured group names in declaration order."""
        return [rule.name for rule in self._rules]

    def resolve_groups(self, label: str) -> Tuple[str, ...]:
        """Return the names of all groups that select ``label``.

        Args:
            label: Sample label.

        Returns:
            Matching group names in rule declaration order; empty if none match.
        """
        cached = self._cache.get(label)
        if cached is not None:
            return cached

        names = tuple(rule.name for rule in self._rules if rule.matches(label))
        if len(self._cache) < _MAX_CACHED_LABELS:
            self._cache[label] = names
        return names

    def __len__(self) -> int:
        return len(self._rules)
