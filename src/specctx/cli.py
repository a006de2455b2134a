"""specctx CLI Tool - Main entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from specctx import __version__
from specctx.cli_utils import (
    EXIT_USER_ERROR,
    EXIT_VALIDATION_FAILED,
    WorkspaceRootNotFoundError,
    configure_logging,
    error,
    find_workspace_root,
    json_option,
    quiet_option,
    success,
    warning,
    wire_config,
    workspace_dir_option,
)
from specctx.config import SpecctxConfig
from specctx.plans import Plan
from specctx.reporter import format_summary, render_report
from specctx.specs import Category
from specctx.storage import FileSystemWorkspace, WorkspaceInitError, WorkspaceLoadError
from specctx.validators import validate_workspace

app = typer.Typer(
    name="specctx",
    help="specctx - Validate spec-driven development workspaces.",
    add_completion=False,
)

# Rich console for output
console = Console()


def _resolve_root(path: str | None, config: SpecctxConfig) -> Path:
    """Use PATH as the workspace root, or search upward from the cwd."""
    if path is not None:
        return Path(path).resolve()
    return find_workspace_root(marker=config.workspace_dir)


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"specctx version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log loading and validation details to stderr.",
    ),
) -> None:
    """specctx - Validate spec-driven development workspaces."""
    if verbose:
        configure_logging()


# -----------------------------------------------------------------------------
# Init Command
# -----------------------------------------------------------------------------


@app.command()
def init(
    path: str | None = typer.Argument(
        None,
        help="Project root to initialize. Defaults to current directory.",
    ),
    name: str | None = typer.Option(
        None,
        "--name",
        "-n",
        help="Project name (default: name of the project directory).",
    ),
    description: str = typer.Option(
        "",
        "--description",
        "-d",
        help="Short project description.",
    ),
    category: Category = typer.Option(
        Category.FEATURE,
        "--category",
        help="Default category for new specs.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Re-initialize an existing workspace, overwriting config.toml.",
    ),
    workspace_dir: str | None = workspace_dir_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Initialize a specctx workspace.

    Creates the workspace directory with its specs/ and logs/ directories
    and a config.toml holding the project settings.
    """
    root = Path(path).resolve() if path is not None else Path.cwd()
    if not root.is_dir():
        error(f"Project root is not a directory: {root}")

    config = wire_config(workspace_dir=workspace_dir, start_dir=root)
    workspace = FileSystemWorkspace(root, config)
    existed = workspace.exists()

    try:
        workspace_path = workspace.init(
            name or root.name,
            description=description,
            category=category,
            force=force,
        )
    except WorkspaceInitError as e:
        if json_output:
            console.print_json(json.dumps({"success": False, "error": str(e)}))
        error(str(e))

    if json_output:
        result: dict[str, Any] = {
            "success": True,
            "workspace_path": str(workspace_path),
            "reinitialized": existed,
        }
        console.print_json(json.dumps(result))
        return

    if quiet:
        return
    if existed:
        warning(f"Re-initialized existing workspace at {workspace_path}")
    else:
        success(f"Initialized workspace at {workspace_path}")


# -----------------------------------------------------------------------------
# Validate Command
# -----------------------------------------------------------------------------


@app.command()
def validate(
    path: str | None = typer.Argument(
        None,
        help="Project root containing the workspace. Searched upward from cwd if omitted.",
    ),
    workspace_dir: str | None = workspace_dir_option(),
    parallel: bool = typer.Option(
        False,
        "--parallel",
        help="Run validators concurrently.",
    ),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Validate the workspace layout, specs, plans and their dependencies.

    Exits with code 2 if validation fails (errors found).
    Warnings and info do not cause validation failure.
    """
    try:
        config = wire_config(
            workspace_dir=workspace_dir,
            start_dir=Path(path) if path is not None else None,
        )
        root = _resolve_root(path, config)
        report = validate_workspace(root, config, parallel=parallel)
    except (WorkspaceRootNotFoundError, WorkspaceLoadError) as e:
        if json_output:
            console.print_json(json.dumps({"valid": False, "error": str(e)}))
        error(str(e))

    if json_output:
        console.print_json(json.dumps({"workspace_path": str(root), **report.to_dict()}))
    elif quiet:
        console.print(format_summary(report), markup=False)
    else:
        render_report(report, console)

    if not report.is_valid():
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)


# -----------------------------------------------------------------------------
# List Command
# -----------------------------------------------------------------------------


def _plan_progress(plan: Plan | None) -> dict[str, int] | None:
    if plan is None:
        return None
    return {"completed": plan.completed_steps(), "total": plan.step_count()}


@app.command("list")
def list_specs(
    path: str | None = typer.Argument(
        None,
        help="Project root containing the workspace. Searched upward from cwd if omitted.",
    ),
    workspace_dir: str | None = workspace_dir_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """List specs with their state, dependencies and plan progress."""
    try:
        config = wire_config(
            workspace_dir=workspace_dir,
            start_dir=Path(path) if path is not None else None,
        )
        root = _resolve_root(path, config)
        workspace = FileSystemWorkspace(root, config)
        if not workspace.exists():
            error(
                f"Workspace not found: {workspace.workspace_dir}. Run 'specctx init' first.",
                exit_code=EXIT_USER_ERROR,
            )
        settings = workspace.load_project_settings()
        specs = workspace.load_specs()
        plans = {plan.spec_id_str(): plan for plan in workspace.load_plans()}
    except (WorkspaceRootNotFoundError, WorkspaceLoadError) as e:
        if json_output:
            console.print_json(json.dumps({"error": str(e)}))
        error(str(e))

    rows = [
        {
            "id": spec.id_str(),
            "title": spec.title,
            "category": spec.metadata.category.value,
            "state": spec.lifecycle_state(),
            "dependencies": len(spec.dependencies),
            "plan": _plan_progress(plans.get(spec.id_str())),
        }
        for spec in sorted(specs, key=lambda s: s.id)
    ]

    if json_output:
        console.print_json(json.dumps({"specs": rows}))
        return

    if not rows:
        if not quiet:
            console.print("No specs found.")
        return

    if quiet:
        for row in rows:
            console.print(row["id"], markup=False)
        return

    project = settings.get("project")
    project_name = project.get("name") if isinstance(project, dict) else None
    title = f"Specs: {project_name}" if isinstance(project_name, str) and project_name else "Specs"
    table = Table(title=escape(title))
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Category")
    table.add_column("State")
    table.add_column("Deps", justify="right")
    table.add_column("Plan", justify="right")

    for row in rows:
        plan = row["plan"]
        table.add_row(
            escape(row["id"]),
            escape(row["title"]) or "-",
            row["category"],
            row["state"],
            str(row["dependencies"]),
            f"{plan['completed']}/{plan['total']}" if plan is not None else "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
