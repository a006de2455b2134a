"""Tests for specctx.reporter module."""

from __future__ import annotations

from rich.console import Console

from specctx.reporter import format_issue, format_summary, render_report
from specctx.validators import ValidationIssue, ValidationReport


def _render(report: ValidationReport) -> str:
    console = Console(record=True, width=200, color_system=None)
    render_report(report, console)
    return console.export_text()


class TestFormatting:
    """Tests for plain-text formatting helpers."""

    def test_issue_with_field(self) -> None:
        issue = ValidationIssue.error("Title cannot be empty").with_field("[1000-a] metadata.title")
        assert format_issue(issue) == "[[1000-a] metadata.title] Title cannot be empty"

    def test_issue_without_field(self) -> None:
        assert format_issue(ValidationIssue.info("note")) == "note"

    def test_summary(self) -> None:
        report = ValidationReport()
        report.add_error("e")
        report.add_warning("w")
        report.add_warning("w2")
        assert format_summary(report) == "Status: FAILED | Errors: 1 | Warnings: 2 | Info: 0"

    def test_summary_passed_with_warnings(self) -> None:
        report = ValidationReport()
        report.add_warning("w")
        assert format_summary(report).startswith("Status: PASSED")


class TestRenderReport:
    """Tests for rich rendering."""

    def test_empty_report(self) -> None:
        assert "No issues found. Workspace is valid." in _render(ValidationReport())

    def test_sections_in_severity_order(self) -> None:
        report = ValidationReport()
        report.add_info("an info")
        report.add_warning("a warning", field=".specctx/logs")
        report.add_error("an error", field="[1000-a] dependencies")

        output = _render(report)
        assert output.index("ERRORS (1):") < output.index("WARNINGS (1):") < output.index("INFO (1):")
        assert "  [[1000-a] dependencies] an error" in output
        assert "  [.specctx/logs] a warning" in output
        assert "Status: FAILED | Errors: 1 | Warnings: 1 | Info: 1" in output

    def test_empty_sections_omitted(self) -> None:
        report = ValidationReport()
        report.add_warning("only warning")
        output = _render(report)
        assert "ERRORS" not in output
        assert "INFO" not in output
        assert "Status: PASSED" in output
