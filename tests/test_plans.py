"""Tests for specctx.plans module."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from specctx.plans import (
    Complexity,
    Plan,
    PlanBuilder,
    PlanError,
    PlanStep,
    StepBuilder,
    StepStatus,
    validate_plan,
)
from specctx.specs import SpecId
from specctx.validators import Severity, ValidatablePlan

PlanFactory = Callable[..., Plan]


class TestBuilders:
    """Tests for StepBuilder and PlanBuilder."""

    def test_step_builder(self) -> None:
        step = (
            StepBuilder()
            .index(0)
            .title("Setup")
            .description("Create the module skeleton")
            .complexity(Complexity.SIMPLE)
            .build()
        )
        assert step.index == 0
        assert step.complexity is Complexity.SIMPLE
        assert step.status is StepStatus.PENDING

    def test_step_builder_requires_index_and_title(self) -> None:
        with pytest.raises(PlanError, match="index"):
            StepBuilder().title("Setup").build()
        with pytest.raises(PlanError, match="title"):
            StepBuilder().index(0).build()

    def test_plan_builder(self) -> None:
        plan = (
            PlanBuilder()
            .spec_id("1737734400-user-auth")
            .approach("Incremental")
            .step(PlanStep(0, "Setup"))
            .steps([PlanStep(1, "Implement"), PlanStep(2, "Test")])
            .build()
        )
        assert plan.spec_id == SpecId("1737734400-user-auth")
        assert plan.step_count() == 3

    def test_plan_builder_requires_spec_id(self) -> None:
        with pytest.raises(PlanError, match="spec_id"):
            PlanBuilder().step(PlanStep(0, "Setup")).build()

    def test_plan_builder_requires_steps(self) -> None:
        with pytest.raises(PlanError, match="at least one step"):
            PlanBuilder().spec_id("1737734400-user-auth").build()


class TestPlanProgress:
    """Tests for derived plan progress."""

    def test_satisfies_protocol(self, make_plan: PlanFactory) -> None:
        assert isinstance(make_plan(), ValidatablePlan)

    def test_complete_step(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=2)
        plan.complete_step(0, notes="done early")
        assert plan.steps[0].is_completed()
        assert plan.steps[0].notes == "done early"
        assert plan.completed_steps() == 1
        assert plan.completion_percentage() == 50
        assert not plan.is_completed()

        plan.complete_step(1)
        assert plan.is_completed()
        assert plan.current_step() is None

    def test_complete_step_out_of_bounds(self, make_plan: PlanFactory) -> None:
        with pytest.raises(PlanError, match="out of bounds"):
            make_plan(steps=2).complete_step(2)

    def test_plan_without_steps_is_not_completed(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=0)
        assert not plan.is_completed()
        assert plan.completion_percentage() == 100

    def test_current_step_skips_skipped(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=3)
        plan.steps[0].status = StepStatus.SKIPPED
        assert plan.current_step() is plan.steps[1]

    def test_is_blocked(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=2)
        assert not plan.is_blocked()
        plan.steps[1].status = StepStatus.BLOCKED
        assert plan.is_blocked()


class TestValidatePlan:
    """Tests for the per-plan rule set."""

    def test_valid_plan_has_no_issues(self, make_plan: PlanFactory) -> None:
        assert validate_plan(make_plan()).is_empty()

    def test_empty_approach(self, make_plan: PlanFactory) -> None:
        report = validate_plan(make_plan(approach=" "))
        [issue] = report.errors()
        assert issue.field == "approach"

    def test_no_steps_warns(self, make_plan: PlanFactory) -> None:
        report = validate_plan(make_plan(steps=0))
        assert report.is_valid()
        [issue] = report.warnings()
        assert issue.field == "steps"

    def test_non_sequential_index(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=2)
        plan.steps[1].index = 5
        [issue] = validate_plan(plan).errors()
        assert issue.field == "steps[1].index"
        assert "expected 1" in issue.message

    def test_duplicate_index(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=2)
        plan.steps[1].index = 0
        [issue] = validate_plan(plan).errors()
        assert issue.message == "Duplicate step index: 0"

    def test_empty_step_title(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=1)
        plan.steps[0].title = ""
        [issue] = validate_plan(plan).errors()
        assert issue.field == "steps[0].title"

    def test_long_step_title_warns(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=1)
        plan.steps[0].title = "t" * 101
        report = validate_plan(plan)
        assert report.is_valid()
        assert report.warnings()[0].field == "steps[0].title"

    def test_missing_description_is_info(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=1)
        plan.steps[0].description = ""
        [issue] = validate_plan(plan).issues
        assert issue.severity is Severity.INFO
        assert issue.field == "steps[0].description"

    def test_blocked_step_without_notes_warns(self, make_plan: PlanFactory) -> None:
        plan = make_plan(steps=1, status=StepStatus.BLOCKED)
        [issue] = validate_plan(plan).warnings()
        assert issue.field == "steps[0]"

        plan.steps[0].notes = "Waiting on the session store"
        assert validate_plan(plan).is_empty()
