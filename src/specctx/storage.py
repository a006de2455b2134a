"""File system storage for specification workspaces.

A workspace lives in a single directory under the project root:

    .specctx/
        config.toml                 # project settings
        specs/
            <spec-id>.yaml          # one specification per file
            <spec-id>.plan.yaml     # implementation plan for <spec-id>
        logs/

Documents are YAML mappings. Loading is strict about syntax and types so
that validation only ever sees well-formed documents; content problems such
as an empty title are left for the validators to report.
"""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from specctx.config import SpecctxConfig
from specctx.plans import Complexity, Plan, PlanStep, StepStatus
from specctx.specs import (
    Category,
    Dependency,
    DependencyKind,
    LifecycleState,
    Spec,
    SpecId,
    SpecMetadata,
)
from specctx.validators.context import LayoutLocation, ValidationContext

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)

SPEC_SUFFIX = ".yaml"
PLAN_SUFFIX = ".plan.yaml"


class WorkspaceError(Exception):
    """Base exception for workspace storage errors."""


class WorkspaceLoadError(WorkspaceError):
    """Raised when a workspace document cannot be read or parsed.

    Attributes:
        path: The file that failed to load.
        reason: Human-readable description of the failure.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class WorkspaceInitError(WorkspaceError):
    """Raised when a workspace cannot be initialized."""


# -----------------------------------------------------------------------------
# Document conversion
# -----------------------------------------------------------------------------


def _mapping(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _string(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _timestamp(data: dict[str, Any], key: str) -> datetime:
    value = data.get(key)
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if not isinstance(value, datetime):
        raise TypeError(f"'{key}' must be a timestamp, got {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _dependency_from_dict(data: Any) -> Dependency:
    entry = _mapping(data, "dependency")
    spec_id = entry.get("spec_id")
    if not isinstance(spec_id, str):
        raise TypeError("dependency 'spec_id' must be a string")
    return Dependency(spec_id, DependencyKind(entry.get("kind", DependencyKind.RELATED_TO.value)))


def spec_from_dict(data: Any, default_id: str | None = None) -> Spec:
    """Build a Spec from a parsed YAML document.

    Args:
        data: Parsed document.
        default_id: Identifier to use when the document has no ``id``.

    Returns:
        The Spec.

    Raises:
        TypeError: If the document or one of its fields has the wrong type.
        ValueError: If an identifier, enum value or timestamp is invalid.
    """
    document = _mapping(data, "spec document")
    raw_id = document.get("id", default_id)
    if not isinstance(raw_id, str):
        raise TypeError("'id' must be a string")

    raw_meta = document.get("metadata")
    meta = _mapping({} if raw_meta is None else raw_meta, "'metadata'")
    raw_dependencies = meta.get("dependencies")
    if raw_dependencies is None:
        raw_dependencies = []
    if not isinstance(raw_dependencies, list):
        raise TypeError("'dependencies' must be a list")

    metadata = SpecMetadata(
        title=_string(meta, "title"),
        description=_string(meta, "description"),
        category=Category(meta.get("category", Category.FEATURE.value)),
        state=LifecycleState(meta.get("state", LifecycleState.DRAFT.value)),
        dependencies=[_dependency_from_dict(d) for d in raw_dependencies],
        created_at=_timestamp(meta, "created_at"),
        updated_at=_timestamp(meta, "updated_at"),
    )
    return Spec(id=SpecId.parse(raw_id), metadata=metadata, content=_string(document, "content"))


def spec_to_dict(spec: Spec) -> dict[str, Any]:
    meta = spec.metadata
    return {
        "id": spec.id.value,
        "metadata": {
            "title": meta.title,
            "description": meta.description,
            "category": meta.category.value,
            "state": meta.state.value,
            "dependencies": [
                {"spec_id": d.spec_id, "kind": d.kind.value} for d in meta.dependencies
            ],
            "created_at": meta.created_at.isoformat(),
            "updated_at": meta.updated_at.isoformat(),
        },
        "content": spec.content,
    }


def _step_from_dict(data: Any, position: int) -> PlanStep:
    entry = _mapping(data, "step")
    index = entry.get("index", position)
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError("step 'index' must be an integer")
    notes = entry.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise TypeError("step 'notes' must be a string")

    return PlanStep(
        index=index,
        title=_string(entry, "title"),
        description=_string(entry, "description"),
        complexity=Complexity(entry.get("complexity", Complexity.MEDIUM.value)),
        status=StepStatus(entry.get("status", StepStatus.PENDING.value)),
        notes=notes,
    )


def plan_from_dict(data: Any, default_spec_id: str | None = None) -> Plan:
    """Build a Plan from a parsed YAML document.

    Steps without an ``index`` take their position in the list.

    Raises:
        TypeError: If the document or one of its fields has the wrong type.
        ValueError: If an identifier, enum value or timestamp is invalid.
    """
    document = _mapping(data, "plan document")
    raw_spec_id = document.get("spec_id", default_spec_id)
    if not isinstance(raw_spec_id, str):
        raise TypeError("'spec_id' must be a string")

    raw_steps = document.get("steps")
    if raw_steps is None:
        raw_steps = []
    if not isinstance(raw_steps, list):
        raise TypeError("'steps' must be a list")

    return Plan(
        spec_id=SpecId.parse(raw_spec_id),
        approach=_string(document, "approach"),
        steps=[_step_from_dict(s, i) for i, s in enumerate(raw_steps)],
        created_at=_timestamp(document, "created_at"),
        updated_at=_timestamp(document, "updated_at"),
    )


def plan_to_dict(plan: Plan) -> dict[str, Any]:
    return {
        "spec_id": plan.spec_id.value,
        "approach": plan.approach,
        "steps": [
            {
                "index": step.index,
                "title": step.title,
                "description": step.description,
                "complexity": step.complexity.value,
                "status": step.status.value,
                "notes": step.notes,
            }
            for step in plan.steps
        ],
        "created_at": plan.created_at.isoformat(),
        "updated_at": plan.updated_at.isoformat(),
    }


_TOML_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\t": "\\t"}


def _toml_string(value: str) -> str:
    """Quote ``value`` as a TOML basic string."""
    escaped = "".join(
        _TOML_ESCAPES.get(c)
        or (f"\\u{ord(c):04x}" if ord(c) < 0x20 or ord(c) == 0x7F else c)
        for c in value
    )
    return f'"{escaped}"'


# -----------------------------------------------------------------------------
# Workspace
# -----------------------------------------------------------------------------


class FileSystemWorkspace:
    """Reads and writes a workspace below a project root.

    Args:
        root: Project root containing the workspace directory.
        config: Layout configuration. Defaults to SpecctxConfig().
    """

    def __init__(self, root: Path, config: SpecctxConfig | None = None) -> None:
        self.root = root
        self.config = config or SpecctxConfig()

    @property
    def workspace_dir(self) -> Path:
        return self.config.get_workspace_path(self.root)

    @property
    def specs_dir(self) -> Path:
        return self.config.get_specs_path(self.root)

    @property
    def logs_dir(self) -> Path:
        return self.config.get_logs_path(self.root)

    @property
    def config_path(self) -> Path:
        return self.config.get_config_path(self.root)

    def exists(self) -> bool:
        return self.workspace_dir.is_dir()

    def spec_path(self, spec_id: SpecId | str) -> Path:
        return self.specs_dir / f"{spec_id}{SPEC_SUFFIX}"

    def plan_path(self, spec_id: SpecId | str) -> Path:
        return self.specs_dir / f"{spec_id}{PLAN_SUFFIX}"

    def layout(self) -> list[LayoutLocation]:
        """Report the expected workspace locations and whether they exist.

        The workspace directory always comes first.
        """

        def relative(path: Path) -> str:
            return path.relative_to(self.root).as_posix()

        return [
            LayoutLocation(relative(self.workspace_dir), "dir", True, self.workspace_dir.is_dir()),
            LayoutLocation(relative(self.specs_dir), "dir", True, self.specs_dir.is_dir()),
            LayoutLocation(relative(self.config_path), "file", True, self.config_path.is_file()),
            LayoutLocation(relative(self.logs_dir), "dir", False, self.logs_dir.is_dir()),
        ]

    def _document_paths(self, suffix: str) -> list[Path]:
        if not self.specs_dir.is_dir():
            return []
        try:
            paths = sorted(p for p in self.specs_dir.iterdir() if p.is_file())
        except OSError as e:
            raise WorkspaceLoadError(self.specs_dir, str(e)) from e

        if suffix == PLAN_SUFFIX:
            return [p for p in paths if p.name.endswith(PLAN_SUFFIX)]
        return [
            p for p in paths if p.name.endswith(SPEC_SUFFIX) and not p.name.endswith(PLAN_SUFFIX)
        ]

    def _read_document(self, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise WorkspaceLoadError(path, f"invalid YAML: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise WorkspaceLoadError(path, str(e)) from e

    def load_specs(self) -> list[Spec]:
        """Load every spec document, in file name order.

        Files whose name is not a valid spec ID are skipped.

        Raises:
            WorkspaceLoadError: If a spec file cannot be read or parsed.
        """
        specs: list[Spec] = []
        for path in self._document_paths(SPEC_SUFFIX):
            stem = path.name[: -len(SPEC_SUFFIX)]
            if not SpecId.is_valid(stem):
                logger.warning("Skipping %s: file name is not a valid spec ID", path)
                continue

            try:
                spec = spec_from_dict(self._read_document(path), default_id=stem)
            except (TypeError, ValueError) as e:
                raise WorkspaceLoadError(path, str(e)) from e

            if spec.id_str() != stem:
                logger.warning("Spec %s is stored in %s", spec.id_str(), path.name)
            specs.append(spec)

        logger.debug("Loaded %d spec(s) from %s", len(specs), self.specs_dir)
        return specs

    def load_plans(self) -> list[Plan]:
        """Load every plan document, in file name order.

        Raises:
            WorkspaceLoadError: If a plan file cannot be read or parsed.
        """
        plans: list[Plan] = []
        for path in self._document_paths(PLAN_SUFFIX):
            stem = path.name[: -len(PLAN_SUFFIX)]
            if not SpecId.is_valid(stem):
                logger.warning("Skipping %s: file name is not a valid spec ID", path)
                continue

            try:
                plan = plan_from_dict(self._read_document(path), default_spec_id=stem)
            except (TypeError, ValueError) as e:
                raise WorkspaceLoadError(path, str(e)) from e

            if plan.spec_id_str() != stem:
                logger.warning("Plan for %s is stored in %s", plan.spec_id_str(), path.name)
            plans.append(plan)

        logger.debug("Loaded %d plan(s) from %s", len(plans), self.specs_dir)
        return plans

    def load(self) -> ValidationContext:
        """Load a snapshot of the workspace for validation.

        Raises:
            WorkspaceLoadError: If any document cannot be read or parsed.
        """
        return ValidationContext(
            workspace_path=self.root,
            layout=tuple(self.layout()),
            specs=tuple(self.load_specs()),
            plans=tuple(self.load_plans()),
        )

    def load_project_settings(self) -> dict[str, Any]:
        """Read the workspace config.toml.

        Returns:
            Parsed settings, or an empty dict if the file does not exist.

        Raises:
            WorkspaceLoadError: If the file exists but is not valid TOML.
        """
        if not self.config_path.is_file():
            return {}
        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            raise WorkspaceLoadError(self.config_path, str(e)) from e

    def save_spec(self, spec: Spec) -> Path:
        """Write a spec to its document file, creating the specs directory."""
        self.specs_dir.mkdir(parents=True, exist_ok=True)
        path = self.spec_path(spec.id)
        path.write_text(
            yaml.safe_dump(spec_to_dict(spec), sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        return path

    def save_plan(self, plan: Plan) -> Path:
        """Write a plan next to its spec, creating the specs directory."""
        self.specs_dir.mkdir(parents=True, exist_ok=True)
        path = self.plan_path(plan.spec_id)
        path.write_text(
            yaml.safe_dump(plan_to_dict(plan), sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        return path

    def init(
        self,
        name: str,
        description: str = "",
        category: Category = Category.FEATURE,
        force: bool = False,
    ) -> Path:
        """Create the workspace layout and its config.toml.

        Args:
            name: Project name written to config.toml.
            description: Project description written to config.toml.
            category: Default category for new specs.
            force: Re-create missing parts and overwrite config.toml when the
                workspace already exists.

        Returns:
            Path to the workspace directory.

        Raises:
            WorkspaceInitError: If the workspace exists and force is False, or
                if the directories cannot be created.
        """
        if self.workspace_dir.exists() and not force:
            raise WorkspaceInitError(
                f"Workspace already exists: {self.workspace_dir}. Use --force to re-initialize."
            )

        config_toml = (
            "[project]\n"
            f"name = {_toml_string(name)}\n"
            f"description = {_toml_string(description)}\n"
            "\n"
            "[defaults]\n"
            f"category = {_toml_string(category.value)}\n"
        )

        try:
            self.specs_dir.mkdir(parents=True, exist_ok=True)
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(config_toml, encoding="utf-8")
        except OSError as e:
            raise WorkspaceInitError(f"Cannot create workspace {self.workspace_dir}: {e}") from e

        logger.info("Initialized workspace at %s", self.workspace_dir)
        return self.workspace_dir
