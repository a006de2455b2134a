"""Directory structure validator.

Checks the workspace layout reported by the storage collaborator:
- Workspace directory exists (error, other checks skipped when missing)
- Required locations exist (error)
- Optional locations exist (warning)
"""

from __future__ import annotations

from specctx.validators.base import BaseValidator, ValidationReport
from specctx.validators.context import ValidationContext


class DirectoryStructureValidator(BaseValidator[ValidationContext]):
    """Validates the workspace directory layout.

    The first layout location is the workspace directory itself. When it is
    missing, no further locations are checked.
    """

    name = "directory-structure"

    def validate(self, target: ValidationContext) -> ValidationReport:
        report = ValidationReport()
        if not target.layout:
            return report

        root, *children = target.layout
        if not root.exists:
            report.add_error(f"Missing required directory: {root.path}", field=root.path)
            return report

        for location in children:
            if location.exists:
                continue
            noun = "directory" if location.kind == "dir" else "file"
            if location.required:
                report.add_error(f"Missing required {noun}: {location.path}", field=location.path)
            else:
                report.add_warning(
                    f"Missing optional {noun}: {location.path}", field=location.path
                )

        return report
