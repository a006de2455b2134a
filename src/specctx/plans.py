"""Implementation plan domain model and rule set.

A plan belongs to exactly one specification and holds an ordered list of
steps. Plan completion is derived from the steps, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from specctx.specs import SpecId
from specctx.validators.base import ValidationReport

MAX_STEP_TITLE_LENGTH = 100


class PlanError(ValueError):
    """Raised when a plan or step cannot be constructed or updated."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


class Complexity(str, Enum):
    TRIVIAL = "trivial"
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"

    def __str__(self) -> str:
        return self.value


@dataclass
class PlanStep:
    """A single implementation step.

    Attributes:
        index: Zero-based position of the step in its plan.
        title: Short step title.
        description: What the step involves.
        complexity: Optional complexity estimate.
        status: Completion status.
        notes: Free-form notes (e.g., the reason a step is blocked).
    """

    index: int
    title: str
    description: str = ""
    complexity: Complexity = Complexity.MEDIUM
    status: StepStatus = StepStatus.PENDING
    notes: str | None = None

    def complete(self, notes: str | None = None) -> None:
        self.status = StepStatus.COMPLETED
        self.notes = notes

    def is_completed(self) -> bool:
        return self.status is StepStatus.COMPLETED

    def is_blocked(self) -> bool:
        return self.status is StepStatus.BLOCKED


@dataclass
class Plan:
    """Implementation plan for a specification.

    Implements the ValidatablePlan protocol.
    """

    spec_id: SpecId
    approach: str = ""
    steps: list[PlanStep] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()

    def add_step(self, step: PlanStep) -> None:
        self.steps.append(step)
        self.touch()

    def complete_step(self, index: int, notes: str | None = None) -> None:
        """Mark the step at ``index`` as completed.

        Raises:
            PlanError: If the index is out of bounds.
        """
        if not 0 <= index < len(self.steps):
            raise PlanError(f"step index {index} out of bounds (total: {len(self.steps)})")
        self.steps[index].complete(notes)
        self.touch()

    def completed_steps(self) -> int:
        return sum(1 for s in self.steps if s.is_completed())

    def completion_percentage(self) -> int:
        if not self.steps:
            return 100
        return (self.completed_steps() * 100) // len(self.steps)

    def is_blocked(self) -> bool:
        return any(s.is_blocked() for s in self.steps)

    def current_step(self) -> PlanStep | None:
        """Return the first step that is neither completed nor skipped."""
        for step in self.steps:
            if step.status not in (StepStatus.COMPLETED, StepStatus.SKIPPED):
                return step
        return None

    # ValidatablePlan

    def spec_id_str(self) -> str:
        return self.spec_id.value

    def step_count(self) -> int:
        return len(self.steps)

    def is_completed(self) -> bool:
        return bool(self.steps) and all(s.is_completed() for s in self.steps)

    def validate_content(self) -> ValidationReport:
        return validate_plan(self)


class StepBuilder:
    """Builder for PlanStep instances. Index and title are required."""

    def __init__(self) -> None:
        self._index: int | None = None
        self._title: str | None = None
        self._description = ""
        self._complexity = Complexity.MEDIUM

    def index(self, index: int) -> StepBuilder:
        self._index = index
        return self

    def title(self, title: str) -> StepBuilder:
        self._title = title
        return self

    def description(self, description: str) -> StepBuilder:
        self._description = description
        return self

    def complexity(self, complexity: Complexity) -> StepBuilder:
        self._complexity = complexity
        return self

    def build(self) -> PlanStep:
        if self._index is None:
            raise PlanError("missing required field: index")
        if not self._title:
            raise PlanError("missing required field: title")
        return PlanStep(
            index=self._index,
            title=self._title,
            description=self._description,
            complexity=self._complexity,
        )


class PlanBuilder:
    """Builder for Plan instances. Requires a spec ID and at least one step."""

    def __init__(self) -> None:
        self._spec_id: SpecId | None = None
        self._approach = ""
        self._steps: list[PlanStep] = []

    def spec_id(self, spec_id: SpecId | str) -> PlanBuilder:
        self._spec_id = spec_id if isinstance(spec_id, SpecId) else SpecId.parse(spec_id)
        return self

    def approach(self, approach: str) -> PlanBuilder:
        self._approach = approach
        return self

    def step(self, step: PlanStep) -> PlanBuilder:
        self._steps.append(step)
        return self

    def steps(self, steps: list[PlanStep]) -> PlanBuilder:
        self._steps.extend(steps)
        return self

    def build(self) -> Plan:
        if self._spec_id is None:
            raise PlanError("missing required field: spec_id")
        if not self._steps:
            raise PlanError("plan must have at least one step")
        return Plan(spec_id=self._spec_id, approach=self._approach, steps=list(self._steps))


# -----------------------------------------------------------------------------
# Rule Set
# -----------------------------------------------------------------------------


def validate_plan(plan: Plan) -> ValidationReport:
    """Validate an implementation plan.

    Checks:
    1. Approach text is present (error)
    2. Plan has at least one step (warning)
    3. Step indices are sequential from 0 and unique (error)
    4. Step titles are present and reasonably short
    5. Steps have descriptions (info) and blocked steps have notes (warning)

    Args:
        plan: The plan to validate.

    Returns:
        ValidationReport for this plan. Field paths are relative to the plan.
    """
    report = ValidationReport()

    if not plan.approach.strip():
        report.add_error("Approach cannot be empty", field="approach")

    if not plan.steps:
        report.add_warning("Plan has no steps", field="steps")
        return report

    _check_step_indices(plan, report)
    _check_step_content(plan, report)
    return report


def _check_step_indices(plan: Plan, report: ValidationReport) -> None:
    seen: set[int] = set()
    for position, step in enumerate(plan.steps):
        if step.index in seen:
            report.add_error(f"Duplicate step index: {step.index}", field=f"steps[{position}].index")
        elif step.index != position:
            report.add_error(
                f"Step has index {step.index} but expected {position}",
                field=f"steps[{position}].index",
            )
        seen.add(step.index)


def _check_step_content(plan: Plan, report: ValidationReport) -> None:
    for position, step in enumerate(plan.steps):
        path = f"steps[{position}]"
        if not step.title.strip():
            report.add_error("Step title cannot be empty", field=f"{path}.title")
        elif len(step.title) > MAX_STEP_TITLE_LENGTH:
            report.add_warning(
                f"Step title is very long ({len(step.title)} characters)",
                field=f"{path}.title",
            )

        if not step.description.strip():
            report.add_info("Step has no description", field=f"{path}.description")

        if step.is_blocked() and not step.notes:
            report.add_warning("Blocked step has no notes explaining the blocker", field=path)
