"""YAML loader + schema validation for aggregation configuration.

Provides a single entrypoint to parse a YAML string, normalize keys where
needed, validate against the packaged JSON schema, and return an
:class:`AggregationConfig`.

Example document::

    max_samples: 1000
    percentiles: [50, 90, 95, 99]
    seed: 42
    request_groups:
      page: /main
      blob: /main/**
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Union

import jsonschema
import yaml

from loadstats.config import AggregationConfig
from loadstats.errors import ConfigurationError
from loadstats.logging import get_logger
from loadstats.utils.yaml_utils import normalize_yaml_dict_keys

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def _config_schema() -> Dict[str, Any]:
    with (
        resources.files("loadstats.schemas")
        .joinpath("config.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


def load_config_dict(yaml_str: str) -> Dict[str, Any]:
    """Parse, normalize, and validate a configuration YAML string.

    Returns:
        Canonical dictionary with string group names, in declaration order.

    Raises:
        ConfigurationError: On YAML syntax errors or schema violations.
    """
    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid configuration YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "The provided YAML must map to a dictionary at top-level."
        )

    # Group names like "yes" or "404" must stay strings
    if isinstance(data.get("request_groups"), dict):
        data["request_groups"] = normalize_yaml_dict_keys(data["request_groups"])

    try:
        jsonschema.validate(data, _config_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ConfigurationError(
            f"Invalid configuration at '{location}': {exc.message}"
        ) from exc

    return data


def load_config_yaml(yaml_str: str) -> AggregationConfig:
    """Load an :class:`AggregationConfig` from a YAML string.

    Raises:
        ConfigurationError: If the document or any setting is invalid.
    """
    config = AggregationConfig.from_dict(load_config_dict(yaml_str))
    logger.debug(
        f"Loaded configuration with {len(config.rules)} group rule(s), "
        f"max_samples={config.max_samples}"
    )
    return config


def load_config_file(path: Union[str, Path]) -> AggregationConfig:
    """Read a YAML configuration file and load it.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the document or any setting is invalid.
    """
    text = Path(path).read_text(encoding="utf-8")
    return load_config_yaml(text)
