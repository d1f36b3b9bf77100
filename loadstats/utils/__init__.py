"""Utility helpers used across loadstats.

This package contains small, self-contained utilities that do not depend on
project internals.
"""

from loadstats.utils.seed_manager import SeedManager
from loadstats.utils.yaml_utils import normalize_yaml_dict_keys

__all__ = [
    "SeedManager",
    "normalize_yaml_dict_keys",
]
