"""Capability interfaces consumed by the workspace validators.

Workspace validators never import the concrete spec or plan types. Any
document type that implements these protocols can take part in workspace
validation.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from specctx.validators.base import ValidationReport


@runtime_checkable
class ValidatableSpec(Protocol):
    """Read-only view of a specification used by workspace validators."""

    def id_str(self) -> str:
        """Return the specification identifier as text."""
        ...

    def dependency_ids(self) -> list[str]:
        """Return every declared dependency target, in declared order."""
        ...

    def dependency_links(self) -> list[tuple[str, str]]:
        """Return ``(target_id, kind)`` pairs, in declared order.

        ``kind`` is one of "blocked_by", "related_to", "child_of" or "parent_of".
        """
        ...

    def lifecycle_state(self) -> str:
        """Return the lifecycle state name (e.g., "draft", "done")."""
        ...

    def is_completed(self) -> bool:
        ...

    def validate_content(self) -> ValidationReport:
        """Validate the document against its own rule set."""
        ...


@runtime_checkable
class ValidatablePlan(Protocol):
    """Read-only view of an implementation plan used by workspace validators."""

    def spec_id_str(self) -> str:
        """Return the identifier of the specification this plan belongs to."""
        ...

    def step_count(self) -> int:
        ...

    def is_completed(self) -> bool:
        """Return True when the plan has steps and all of them are completed."""
        ...

    def validate_content(self) -> ValidationReport:
        ...
