"""Validation framework for specification workspaces.

Provides the issue/report model, the validator contract and the workspace
validators that check layout, content, dependencies and lifecycle state.
"""

from __future__ import annotations

from specctx.validators.base import (
    BaseValidator,
    Severity,
    ValidationIssue,
    ValidationReport,
    validate_all,
)
from specctx.validators.content import PlanContentValidator, SpecContentValidator
from specctx.validators.context import LayoutLocation, ValidationContext
from specctx.validators.dependencies import DependencyValidator
from specctx.validators.protocols import ValidatablePlan, ValidatableSpec
from specctx.validators.runner import default_validators, run_validators, validate_workspace
from specctx.validators.state import StateTransitionValidator
from specctx.validators.structure import DirectoryStructureValidator

__all__ = [
    # Base types
    "BaseValidator",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "validate_all",
    # Capabilities
    "LayoutLocation",
    "ValidatablePlan",
    "ValidatableSpec",
    "ValidationContext",
    # Validators
    "DependencyValidator",
    "DirectoryStructureValidator",
    "PlanContentValidator",
    "SpecContentValidator",
    "StateTransitionValidator",
    # Runner
    "default_validators",
    "run_validators",
    "validate_workspace",
]
