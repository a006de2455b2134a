"""Pytest configuration and fixtures for specctx tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

from specctx.plans import Plan, PlanStep, StepStatus  # noqa: E402
from specctx.specs import (  # noqa: E402
    Dependency,
    LifecycleState,
    Spec,
    SpecId,
    SpecMetadata,
)
from specctx.storage import FileSystemWorkspace  # noqa: E402

SpecFactory = Callable[..., Spec]
PlanFactory = Callable[..., Plan]


@pytest.fixture(autouse=True)
def _clean_specctx_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SPECCTX_* variables from the outer environment out of tests."""
    for var in list(os.environ):
        if var.startswith("SPECCTX_"):
            monkeypatch.delenv(var)


@pytest.fixture
def make_spec() -> SpecFactory:
    """Factory for valid specs that individual tests can then break."""

    def factory(
        spec_id: str = "1737734400-user-auth",
        *,
        title: str = "User Authentication",
        description: str = "Implement the OAuth2 login flow for users",
        state: LifecycleState = LifecycleState.DRAFT,
        dependencies: list[Dependency] | None = None,
        content: str = "# User Authentication\n\nDetails.",
    ) -> Spec:
        metadata = SpecMetadata(
            title=title,
            description=description,
            state=state,
            dependencies=list(dependencies or []),
        )
        return Spec(id=SpecId(spec_id), metadata=metadata, content=content)

    return factory


@pytest.fixture
def make_plan() -> PlanFactory:
    """Factory for valid plans with ``steps`` steps in the given status."""

    def factory(
        spec_id: str = "1737734400-user-auth",
        *,
        steps: int = 2,
        status: StepStatus = StepStatus.PENDING,
        approach: str = "Incremental implementation",
    ) -> Plan:
        return Plan(
            spec_id=SpecId(spec_id),
            approach=approach,
            steps=[
                PlanStep(
                    index=i,
                    title=f"Step {i}",
                    description=f"Do part {i}",
                    status=status,
                )
                for i in range(steps)
            ],
        )

    return factory


@pytest.fixture
def workspace(tmp_path: Path) -> FileSystemWorkspace:
    """An initialized, empty workspace below tmp_path."""
    ws = FileSystemWorkspace(tmp_path)
    ws.init("demo", description="Demo project")
    return ws
