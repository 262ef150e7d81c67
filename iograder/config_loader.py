"""
Configuration loader for iograder.

Handles parsing and validation of YAML (or TOML) configuration files into
a backend RunnerConfig.
"""

import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .backends import BACKENDS, RunnerConfig
from .config import TOML_SUFFIXES
from .errors import ConfigError


def _describe_validation_error(section: str, error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or section
        if detail["type"] == "missing":
            problems.append(f"Missing \"{field}\" field")
        else:
            problems.append(f"{field}: {detail['msg']}")
    return f"Invalid [{section}] configuration: " + "; ".join(problems)


def config_from_mapping(data: Any) -> RunnerConfig:
    """
    Build a RunnerConfig from an already parsed configuration document.

    The document must have exactly one top-level section, named after the
    backend to use (see ``BACKENDS``).

    Args:
        data: Parsed document, e.g. ``{"python": {"name": ..., ...}}``.

    Returns:
        The validated backend configuration.

    Raises:
        ConfigError: If the document is malformed or any field is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError("The config file should contain a table of settings")
    if len(data) != 1:
        raise ConfigError(
            f"The config file should have exactly one section, found {len(data)}"
        )

    section, values = next(iter(data.items()))
    backend = BACKENDS.get(section)
    if backend is None:
        known = ", ".join(sorted(BACKENDS))
        raise ConfigError(f"Unrecognized config type: {section} (expected one of: {known})")
    if not isinstance(values, dict):
        raise ConfigError(f"The [{section}] section should be a table of settings")

    try:
        return backend.model_validate(values)
    except ValidationError as e:
        raise ConfigError(_describe_validation_error(section, e)) from e


def _read_document(config_path: Path) -> Any:
    suffix = config_path.suffix.lower()
    try:
        if suffix in TOML_SUFFIXES:
            with open(config_path, "rb") as f:
                return tomllib.load(f)
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e


def load_config(config_path: Path) -> RunnerConfig:
    """
    Load configuration from a YAML or TOML file.

    Files ending in .toml are read as TOML; .yml, .yaml and anything else as
    YAML. Relative ``tests_dir`` and ``target_dir`` values are resolved
    against the directory holding the config file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        RunnerConfig for the backend named in the file.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid.
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    config_data = _read_document(config_path)

    # Resolve paths relative to the config file location
    config_dir = config_path.parent
    if isinstance(config_data, dict):
        for values in config_data.values():
            if not isinstance(values, dict):
                continue
            for path_field in ("tests_dir", "target_dir"):
                if isinstance(values.get(path_field), str):
                    path = Path(values[path_field])
                    if not path.is_absolute():
                        values[path_field] = str(config_dir / path)

    return config_from_mapping(config_data)
