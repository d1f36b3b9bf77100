"""Configuration document loading."""

from loadstats.dsl.loader import load_config_dict, load_config_file, load_config_yaml

__all__ = ["load_config_dict", "load_config_file", "load_config_yaml"]
