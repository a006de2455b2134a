"""Shared plumbing for the specctx commands.

- exit code conventions and styled status messages
- locating the project root that holds the workspace directory
- turning command-line options into a resolved SpecctxConfig
- logging setup for --verbose
- reusable Typer option factories
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

import typer

from specctx.config import SpecctxConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad input, missing workspace, unreadable file)
EXIT_VALIDATION_FAILED = 2  # Validation ran and found errors


class WorkspaceRootNotFoundError(Exception):
    """No ancestor of the start directory contains the workspace marker."""

    def __init__(self, start_dir: Path, marker: str = ".specctx") -> None:
        self.start_dir = start_dir
        self.marker = marker
        super().__init__(
            f"Could not find workspace root (no '{marker}/' directory found). "
            f"Searched from: {start_dir}"
        )


# -----------------------------------------------------------------------------
# Status Messages
# -----------------------------------------------------------------------------


def _echo(label: str, color: str, msg: str, *, err: bool) -> None:
    prefix = typer.style(f"{label}:", fg=color, bold=True)
    typer.echo(f"{prefix} {msg}", err=err)


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Report a failure on stderr and stop the command.

    Args:
        msg: What went wrong.
        exit_code: Process exit code (default: EXIT_USER_ERROR).

    Raises:
        typer.Exit: Always.
    """
    _echo("Error", typer.colors.RED, msg, err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    _echo("Warning", typer.colors.YELLOW, msg, err=True)


def success(msg: str) -> None:
    _echo("Success", typer.colors.GREEN, msg, err=False)


# -----------------------------------------------------------------------------
# Workspace Root Lookup
# -----------------------------------------------------------------------------


def find_workspace_root(
    start_dir: Path | None = None,
    marker: str = ".specctx",
) -> Path:
    """Return the closest directory at or above start_dir that holds ``marker/``.

    Args:
        start_dir: Where the search begins. Defaults to the current directory.
        marker: Workspace directory name to look for.

    Raises:
        WorkspaceRootNotFoundError: If the filesystem root is reached first.
    """
    start = (start_dir or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / marker).is_dir():
            return candidate
    raise WorkspaceRootNotFoundError(start, marker)


# -----------------------------------------------------------------------------
# Config Wiring
# -----------------------------------------------------------------------------


def wire_config(
    workspace_dir: str | None = None,
    start_dir: Path | None = None,
) -> SpecctxConfig:
    """Resolve the configuration for a command.

    Args:
        workspace_dir: Value of --workspace-dir, if given.
        start_dir: Directory from which config files are searched.

    Returns:
        The resolved SpecctxConfig.

    Raises:
        typer.Exit: With EXIT_USER_ERROR if any resolved value is invalid.
    """
    try:
        return load_config(cli_overrides={"workspace_dir": workspace_dir}, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}")


def configure_logging(level: int = logging.DEBUG) -> None:
    """Send library log records to stderr."""
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


# -----------------------------------------------------------------------------
# Typer Option Factories
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs its own instance.


def workspace_dir_option() -> Any:
    """--workspace-dir / -w, defaulting to None so config files still apply."""
    return typer.Option(
        None,
        "--workspace-dir",
        "-w",
        help="Override workspace directory name (default: .specctx).",
    )


def json_option() -> Any:
    return typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    )


def quiet_option() -> Any:
    return typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output for CI.",
    )
