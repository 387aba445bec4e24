"""Configuration loading.

Settings come from the ``[tool.vtl]`` table of ``pyproject.toml`` when
the project has one, overridden by explicit values (CLI options and
environment variables, resolved by the CLI layer).
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vtl.config.models import VtlConfig
from vtl.exceptions import ConfigNotFoundError, ConfigValidationError

PYPROJECT_FILENAME = "pyproject.toml"
TOOL_KEY = "vtl"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PYPROJECT_FILENAME
        if candidate.is_file():
            return candidate

    raise ConfigNotFoundError(f"No {PYPROJECT_FILENAME} found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_vtl_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.vtl]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            current = merged.get(key)
            merged[key] = _merge(current if isinstance(current, dict) else {}, value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None, overrides: dict[str, Any] | None = None) -> VtlConfig:
    """Load configuration.

    Args:
        path: Project directory or pyproject.toml to read ``[tool.vtl]`` from.
              A missing pyproject.toml is not an error.
        overrides: Values taking precedence over the file; None values are ignored

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If the merged configuration is invalid
    """
    data: dict[str, Any] = {}

    if path is not None and path.is_file():
        data = extract_vtl_config(load_pyproject_toml(path))
    else:
        try:
            pyproject_path = find_pyproject_toml(path)
        except ConfigNotFoundError:
            pass
        else:
            data = extract_vtl_config(load_pyproject_toml(pyproject_path))

    data = _merge(data, overrides or {})

    try:
        return VtlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration:\n{e}") from e
