"""Utilities for handling YAML parsing quirks in configuration files."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Normalize dictionary keys from YAML parsing to ensure consistent string keys.

    Group names such as ``yes``, ``off`` or ``404`` come back from YAML 1.1 as
    ``True``, ``False`` or ``404``. This converts every key to a string while
    preserving insertion order, which defines report ordering.

    Args:
        data: Mapping produced by ``yaml.safe_load``.

    Returns:
        Dictionary with all keys converted to strings.

    Examples:
        >>> normalize_yaml_dict_keys({True: "/a", 404: "/b", "page": "/main"})
        {'True': '/a', '404': '/b', 'page': '/main'}
    """
    normalized: Dict[str, V] = {}
    for key, value in data.items():
        normalized[str(key)] = value
    return normalized
