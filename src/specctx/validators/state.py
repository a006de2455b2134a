"""State transition validator.

Validates that each specification has the artifacts its lifecycle state
requires, and that plans agree with the state of their spec:
- Active and done specs must have a plan (error)
- Done specs must have a completed plan (error)
- A spec may have at most one plan (error)
- Plans without steps, plans for unknown specs and completed plans of
  specs that are still in draft are reported as warnings
"""

from __future__ import annotations

from collections import defaultdict

from specctx.validators.base import BaseValidator, ValidationReport
from specctx.validators.context import ValidationContext
from specctx.validators.protocols import ValidatablePlan

# States past "draft" that require an implementation plan. Blocked,
# cancelled and archived specs may legitimately never have been planned.
PLAN_REQUIRED_STATES = frozenset({"active", "done"})


class StateTransitionValidator(BaseValidator[ValidationContext]):
    """Validates workspace consistency between spec states and their plans."""

    name = "state-transition"

    def validate(self, target: ValidationContext) -> ValidationReport:
        report = ValidationReport()

        plans_by_spec: dict[str, list[ValidatablePlan]] = defaultdict(list)
        for plan in target.plans:
            plans_by_spec[plan.spec_id_str()].append(plan)

        spec_ids = {spec.id_str() for spec in target.specs}

        for spec in sorted(target.specs, key=lambda s: s.id_str()):
            spec_id = spec.id_str()
            state = spec.lifecycle_state()
            plans = plans_by_spec.get(spec_id, [])

            if len(plans) > 1:
                report.add_error(
                    f"Spec '{spec_id}' has {len(plans)} plans, expected at most one",
                    field=f"[{spec_id}] plan",
                )

            if not plans:
                if state in PLAN_REQUIRED_STATES:
                    report.add_error(
                        f"Spec '{spec_id}' is '{state}' but has no plan",
                        field=f"[{spec_id}] plan",
                    )
                continue

            plan = plans[0]
            if plan.step_count() == 0:
                report.add_warning(
                    f"Spec '{spec_id}' has a plan with no steps",
                    field=f"[{spec_id}] plan.steps",
                )

            if state == "done" and not plan.is_completed():
                report.add_error(
                    f"Spec '{spec_id}' is 'done' but its plan has incomplete steps",
                    field=f"[{spec_id}] plan.steps",
                )
            elif plan.is_completed() and state == "draft":
                report.add_warning(
                    f"Spec '{spec_id}' is still 'draft' but its plan is complete",
                    field=f"[{spec_id}] state",
                )
            elif plan.is_completed() and state == "active":
                report.add_info(
                    f"Spec '{spec_id}' has a complete plan, consider marking it 'done'",
                    field=f"[{spec_id}] state",
                )

        for plan_spec_id in sorted(plans_by_spec):
            if plan_spec_id not in spec_ids:
                report.add_warning(
                    f"Plan references non-existent spec '{plan_spec_id}'",
                    field=f"[{plan_spec_id}] plan",
                )

        return report
