"""Validation runner for orchestrating the workspace validators.

Loads a workspace once, runs every workspace validator against the same
context and merges the results into a single report. Validators may run
in parallel, but their reports are always merged in the same fixed order.
"""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from specctx.validators.base import BaseValidator, ValidationReport
from specctx.validators.content import PlanContentValidator, SpecContentValidator
from specctx.validators.context import ValidationContext
from specctx.validators.dependencies import DependencyValidator
from specctx.validators.state import StateTransitionValidator
from specctx.validators.structure import DirectoryStructureValidator

if TYPE_CHECKING:
    from specctx.config import SpecctxConfig

logger = logging.getLogger(__name__)


def default_validators() -> list[BaseValidator[ValidationContext]]:
    """Return fresh instances of the workspace validators in run order."""
    return [
        DirectoryStructureValidator(),
        SpecContentValidator(),
        PlanContentValidator(),
        DependencyValidator(),
        StateTransitionValidator(),
    ]


def run_validators(
    validators: Sequence[BaseValidator[ValidationContext]],
    context: ValidationContext,
    parallel: bool = False,
) -> ValidationReport:
    """Run validators against a loaded context and merge their reports.

    Args:
        validators: Validators to run, in merge order.
        context: Loaded workspace snapshot.
        parallel: Whether to run validators in a thread pool.

    Returns:
        The merged ValidationReport.
    """
    if parallel and len(validators) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(validators)) as executor:
            futures = [executor.submit(v.validate, context) for v in validators]
            reports = [future.result() for future in futures]
    else:
        reports = [v.validate(context) for v in validators]

    merged = ValidationReport()
    for validator, report in zip(validators, reports):
        logger.debug(
            "%s: %d error(s), %d warning(s), %d info",
            validator.name,
            report.error_count(),
            report.warning_count(),
            report.info_count(),
        )
        merged.merge(report)
    return merged


def validate_workspace(
    workspace_path: Path,
    config: SpecctxConfig | None = None,
    *,
    parallel: bool = False,
) -> ValidationReport:
    """Load a workspace and run all workspace validators against it.

    Content problems never raise; they are returned as issues. Failing to
    read or parse a spec or plan file is not a content problem and aborts
    the run.

    Args:
        workspace_path: Project root containing the workspace directory.
        config: Layout configuration. Defaults to SpecctxConfig().
        parallel: Whether to run validators in a thread pool.

    Returns:
        The combined ValidationReport.

    Raises:
        WorkspaceLoadError: If a spec or plan file cannot be loaded.
    """
    from specctx.storage import FileSystemWorkspace

    workspace = FileSystemWorkspace(workspace_path, config)
    context = workspace.load()
    logger.info(
        "Validating %s: %d spec(s), %d plan(s)",
        workspace.workspace_dir,
        len(context.specs),
        len(context.plans),
    )

    report = run_validators(default_validators(), context, parallel=parallel)
    logger.info(
        "Validation finished with %d error(s) and %d warning(s)",
        report.error_count(),
        report.warning_count(),
    )
    return report
