"""Rich rendering of validation reports."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from specctx.validators.base import Severity, ValidationIssue, ValidationReport

# Section heading and colour per severity, in display order
_SECTIONS: list[tuple[Severity, str, str]] = [
    (Severity.ERROR, "ERRORS", "red"),
    (Severity.WARNING, "WARNINGS", "yellow"),
    (Severity.INFO, "INFO", "cyan"),
]


def format_issue(issue: ValidationIssue) -> str:
    """Format a single issue as ``[field] message`` (plain text)."""
    if issue.field is not None:
        return f"[{issue.field}] {issue.message}"
    return issue.message


def format_summary(report: ValidationReport) -> str:
    status = "PASSED" if report.is_valid() else "FAILED"
    return (
        f"Status: {status} | Errors: {report.error_count()} | "
        f"Warnings: {report.warning_count()} | Info: {report.info_count()}"
    )


def render_report(report: ValidationReport, console: Console) -> None:
    """Print a validation report grouped by severity.

    Args:
        report: The report to render.
        console: Rich console to print to.
    """
    if report.is_empty():
        console.print("[green]No issues found. Workspace is valid.[/green]")
        return

    for severity, heading, color in _SECTIONS:
        issues = [issue for issue in report if issue.severity == severity]
        if not issues:
            continue
        console.print(f"[bold {color}]{heading} ({len(issues)}):[/bold {color}]")
        for issue in issues:
            console.print(f"  {escape(format_issue(issue))}")
        console.print()

    color = "green" if report.is_valid() else "red"
    console.print(f"[{color}]{escape(format_summary(report))}[/{color}]")
