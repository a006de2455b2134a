"""Layered configuration for specctx.

A setting is taken from the first source that defines it:

1. command-line options
2. ``SPECCTX_*`` environment variables
3. the nearest ``.specctxrc`` (TOML, top-level keys)
4. the nearest ``pyproject.toml`` (``[tool.specctx]`` table)
5. the defaults on SpecctxConfig

Config files are looked up from the start directory towards the
filesystem root. Unreadable or malformed files are skipped with a warning.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path, PurePath
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)

RC_FILENAME = ".specctxrc"
PYPROJECT_FILENAME = "pyproject.toml"
ENV_PREFIX = "SPECCTX_"


@dataclass
class SpecctxConfig:
    """Names that make up the on-disk workspace layout.

    Attributes:
        workspace_dir: Workspace directory below the project root (default: ".specctx")
        specs_dir: Directory holding spec and plan documents (default: "specs")
        logs_dir: Directory for run logs (default: "logs")
        config_name: Project settings file in the workspace (default: "config.toml")
    """

    workspace_dir: str = ".specctx"
    specs_dir: str = "specs"
    logs_dir: str = "logs"
    config_name: str = "config.toml"

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{f.name} must be a non-empty string")
            # Every location must stay below the project root.
            path = PurePath(value)
            if path.is_absolute() or ".." in path.parts:
                raise ValueError(f"{f.name} must be a relative path inside the project: {value}")

        if not self.config_name.endswith(".toml"):
            raise ValueError("config_name must end with .toml")

    def get_workspace_path(self, base_path: Path | None = None) -> Path:
        """Return the workspace directory below ``base_path`` (default: cwd)."""
        return (base_path or Path.cwd()) / self.workspace_dir

    def get_specs_path(self, base_path: Path | None = None) -> Path:
        return self.get_workspace_path(base_path) / self.specs_dir

    def get_logs_path(self, base_path: Path | None = None) -> Path:
        return self.get_workspace_path(base_path) / self.logs_dir

    def get_config_path(self, base_path: Path | None = None) -> Path:
        return self.get_workspace_path(base_path) / self.config_name


def _known_keys(values: dict[str, Any]) -> dict[str, Any]:
    """Drop keys that are not SpecctxConfig fields, and unset values."""
    names = {f.name for f in fields(SpecctxConfig)}
    return {k: v for k, v in values.items() if k in names and v is not None}


def find_config_file(filename: str = RC_FILENAME, start_dir: Path | None = None) -> Path | None:
    """Find the closest file called ``filename`` in start_dir or its ancestors.

    Args:
        filename: File name to look for.
        start_dir: Where the search begins. Defaults to the current directory.

    Returns:
        Path of the first match, or None when the filesystem root is reached.
    """
    directory = (start_dir or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / filename
        if candidate.is_file():
            return candidate
    return None


def load_toml_file(path: Path) -> dict[str, Any]:
    """Parse a TOML file.

    Raises:
        OSError: If the file cannot be read.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        data: dict[str, Any] = tomllib.load(f)
        return data


def _load_file_layer(
    filename: str, table: tuple[str, ...], start_dir: Path | None
) -> dict[str, Any]:
    """Read the settings table of the nearest ``filename``.

    Args:
        filename: Config file to search for.
        table: Key path of the settings table, empty for the top level.
        start_dir: Where the search begins.

    Returns:
        Known settings from that table, or an empty dict.
    """
    path = find_config_file(filename, start_dir)
    if path is None:
        return {}

    try:
        data: Any = load_toml_file(path)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring config file %s: %s", path, e)
        return {}

    for key in table:
        data = data.get(key, {}) if isinstance(data, dict) else {}
    if not isinstance(data, dict):
        return {}
    return _known_keys(data)


def _load_env_layer() -> dict[str, Any]:
    """Collect ``SPECCTX_<FIELD>`` variables, e.g. SPECCTX_SPECS_DIR."""
    return _known_keys(
        {
            f.name: os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            for f in fields(SpecctxConfig)
        }
    )


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> SpecctxConfig:
    """Resolve the effective configuration.

    Args:
        cli_overrides: Values given on the command line. None values and
            unknown keys are ignored.
        start_dir: Directory from which config files are searched.

    Returns:
        The resolved SpecctxConfig.

    Raises:
        ValueError: If a resolved value is invalid.
    """
    layers = [
        _load_file_layer(PYPROJECT_FILENAME, ("tool", "specctx"), start_dir),
        _load_file_layer(RC_FILENAME, (), start_dir),
        _load_env_layer(),
        _known_keys(cli_overrides or {}),
    ]

    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    logger.debug("Resolved config: %s", merged)
    return SpecctxConfig(**merged)
