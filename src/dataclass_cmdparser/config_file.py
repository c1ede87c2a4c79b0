"""Loading of default option values from YAML or JSON files."""

import json
import os
from typing import Any, Union

import yaml


def load_config_file(config_path: Union[str, os.PathLike]) -> dict[str, dict[str, Any]]:
    """
    Load configuration from a YAML or JSON file.

    The file must contain a mapping of command names to mappings of option
    names to values.

    Args:
        config_path (Union[str, os.PathLike]): Path to the configuration file.

    Returns:
        dict[str, dict[str, Any]]: The option values per command. An empty file
        gives an empty dict.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the file format is not supported or invalid.
    """
    config_path = os.fspath(config_path)
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    file_ext = os.path.splitext(config_path)[1].lower()

    with open(config_path, "r") as f:
        if file_ext in [".yaml", ".yml"]:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML file: {e}")
        elif file_ext == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON file: {e}")
        else:
            raise ValueError(
                f"Unsupported file format: {file_ext}. "
                "Supported formats are: .yaml, .yml, .json"
            )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration file must contain a mapping of command names, got {type(data).__name__}"
        )

    config: dict[str, dict[str, Any]] = {}
    for command_name, section in data.items():
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ValueError(
                f"Section '{command_name}' must be a mapping of option names to values, "
                f"got {type(section).__name__}"
            )
        config[str(command_name)] = {str(key): value for key, value in section.items()}
    return config
