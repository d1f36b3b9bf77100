"""Input data model: samples and group rules."""

from loadstats.model.rules import GLOBAL_GROUP, GroupRule, parse_rules
from loadstats.model.sample import Sample

__all__ = [
    "GLOBAL_GROUP",
    "GroupRule",
    "Sample",
    "parse_rules",
]
