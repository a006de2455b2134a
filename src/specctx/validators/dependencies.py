"""Dependency validator.

Validates cross-spec dependency relationships in the workspace:
- Duplicate spec IDs (identifiers must be unique)
- Broken references (dependency target does not exist)
- Circular dependencies among ordering links (A -> B -> A or longer)

Self-references are left to the per-spec rule set and are not reported here.
"""

from __future__ import annotations

from collections import Counter

from specctx.graph import DependencyGraph
from specctx.validators.base import BaseValidator, ValidationReport
from specctx.validators.context import ValidationContext


class DependencyValidator(BaseValidator[ValidationContext]):
    """Validates cross-spec dependencies in the workspace.

    Specs are checked in ascending ID order and their dependencies in
    declared order, so the same workspace always yields the same report.
    """

    name = "dependencies"

    def validate(self, target: ValidationContext) -> ValidationReport:
        report = ValidationReport()
        if not target.specs:
            return report

        specs = sorted(target.specs, key=lambda s: s.id_str())
        id_counts = Counter(spec.id_str() for spec in specs)

        for spec_id, count in sorted(id_counts.items()):
            if count > 1:
                report.add_error(
                    f"Spec ID '{spec_id}' is used by {count} specs",
                    field=f"[{spec_id}] id",
                )

        for spec in specs:
            spec_id = spec.id_str()
            reported: set[str] = set()
            for dep_id in spec.dependency_ids():
                if dep_id == spec_id or dep_id in id_counts or dep_id in reported:
                    continue
                reported.add(dep_id)
                report.add_error(
                    f"Spec '{spec_id}' depends on non-existent spec '{dep_id}'",
                    field=f"[{spec_id}] dependencies",
                )

        for cycle in DependencyGraph.from_specs(specs).find_cycles():
            chain = " -> ".join([*cycle, cycle[0]])
            report.add_error(
                f"Circular dependency detected: {chain}",
                field=f"[{cycle[0]}] dependencies",
            )

        return report
