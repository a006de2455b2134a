"""Validation context shared by the workspace validators.

A context is an immutable snapshot of one loaded workspace. Each validation
run builds its own context, so concurrent runs never share state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from specctx.validators.protocols import ValidatablePlan, ValidatableSpec

LocationKind = Literal["dir", "file"]


@dataclass(frozen=True)
class LayoutLocation:
    """An expected location in the workspace layout.

    Attributes:
        path: Path relative to the workspace root (e.g., ".specctx/specs").
        kind: Whether the location is a directory or a file.
        required: Missing required locations are errors, optional ones warnings.
        exists: Whether the storage collaborator found the location.
    """

    path: str
    kind: LocationKind
    required: bool
    exists: bool


@dataclass(frozen=True)
class ValidationContext:
    """Snapshot of a workspace handed to every workspace validator.

    Attributes:
        workspace_path: Root directory of the workspace.
        layout: Expected layout locations, root directory first.
        specs: Loaded specifications.
        plans: Loaded plans.
    """

    workspace_path: Path
    layout: Sequence[LayoutLocation] = field(default_factory=tuple)
    specs: Sequence[ValidatableSpec] = field(default_factory=tuple)
    plans: Sequence[ValidatablePlan] = field(default_factory=tuple)
