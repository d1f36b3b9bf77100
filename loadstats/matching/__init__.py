"""Group membership resolution for sample labels."""

from loadstats.matching.matcher import GroupMatcher

__all__ = ["GroupMatcher"]
