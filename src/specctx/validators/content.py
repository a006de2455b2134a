"""Content validators.

Bridge the per-document rule sets into the workspace report. Every issue is
re-attributed to its source document by prefixing the field with the spec ID.
"""

from __future__ import annotations

from specctx.validators.base import BaseValidator, ValidationIssue, ValidationReport
from specctx.validators.context import ValidationContext


def _attribute(issue: ValidationIssue, prefix: str) -> ValidationIssue:
    if issue.field is None:
        return issue.with_field(prefix)
    return issue.with_field(f"{prefix} {issue.field}")


class SpecContentValidator(BaseValidator[ValidationContext]):
    """Runs each spec's own content validation and merges the results."""

    name = "spec-content"

    def validate(self, target: ValidationContext) -> ValidationReport:
        report = ValidationReport()
        for spec in target.specs:
            prefix = f"[{spec.id_str()}]"
            for issue in spec.validate_content():
                report.add_issue(_attribute(issue, prefix))
        return report


class PlanContentValidator(BaseValidator[ValidationContext]):
    """Runs each plan's own content validation and merges the results."""

    name = "plan-content"

    def validate(self, target: ValidationContext) -> ValidationReport:
        report = ValidationReport()
        for plan in target.plans:
            spec_id = plan.spec_id_str()
            for issue in plan.validate_content():
                if issue.field is None:
                    report.add_issue(issue.with_field(f"[{spec_id}] plan"))
                else:
                    report.add_issue(issue.with_field(f"[{spec_id}] plan.{issue.field}"))
        return report
