"""Specification domain model and rule set.

Provides:
- SpecId: ``{unix-timestamp}-{slug}`` identifiers
- Spec / SpecMetadata: the specification document and its metadata
- SpecBuilder: builder enforcing required fields
- validate_spec: structural and content rules for a single spec
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from specctx.validators.base import ValidationReport

MAX_SLUG_LENGTH = 50
MAX_TITLE_LENGTH = 200
MIN_DESCRIPTION_LENGTH = 20

_SPEC_ID_PATTERN = re.compile(r"^(\d+)-(.+)$")


class SpecError(ValueError):
    """Raised when a specification cannot be constructed."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Category(str, Enum):
    """Kind of work a specification represents."""

    FEATURE = "feature"
    ENHANCEMENT = "enhancement"
    BUGFIX = "bugfix"
    REFACTOR = "refactor"
    DOCUMENTATION = "documentation"
    INFRASTRUCTURE = "infrastructure"

    def __str__(self) -> str:
        return self.value


class LifecycleState(str, Enum):
    """Lifecycle state of a specification."""

    DRAFT = "draft"
    ACTIVE = "active"
    DONE = "done"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"

    def __str__(self) -> str:
        return self.value

    def is_terminal(self) -> bool:
        return self in (LifecycleState.DONE, LifecycleState.CANCELLED, LifecycleState.ARCHIVED)


class DependencyKind(str, Enum):
    """Relationship between two specifications.

    BLOCKED_BY, CHILD_OF and PARENT_OF imply ordering or hierarchy.
    RELATED_TO is informational only.
    """

    BLOCKED_BY = "blocked_by"
    RELATED_TO = "related_to"
    CHILD_OF = "child_of"
    PARENT_OF = "parent_of"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class SpecId:
    """Unique specification identifier in ``{timestamp}-{slug}`` form."""

    value: str

    @classmethod
    def new(cls, timestamp: int, slug: str) -> SpecId:
        """Create an identifier from a Unix timestamp and a slug.

        Raises:
            SpecError: If the slug is empty or longer than MAX_SLUG_LENGTH.
        """
        _validate_slug(slug)
        return cls(f"{timestamp}-{slug}")

    @classmethod
    def parse(cls, value: str) -> SpecId:
        """Parse an identifier string.

        Raises:
            SpecError: If the string is not ``{timestamp}-{slug}``.
        """
        match = _SPEC_ID_PATTERN.match(value)
        if match is None:
            raise SpecError(f"invalid spec ID '{value}': format must be {{timestamp}}-{{slug}}")
        _validate_slug(match.group(2))
        return cls(value)

    @classmethod
    def is_valid(cls, value: str) -> bool:
        try:
            cls.parse(value)
        except SpecError:
            return False
        return True

    @property
    def timestamp(self) -> int:
        return int(self.value.split("-", 1)[0])

    @property
    def slug(self) -> str:
        return self.value.split("-", 1)[1]

    def __str__(self) -> str:
        return self.value


def _validate_slug(slug: str) -> None:
    if not slug:
        raise SpecError("invalid spec ID: slug cannot be empty")
    if len(slug) > MAX_SLUG_LENGTH:
        raise SpecError(
            f"invalid spec ID: slug exceeds maximum length of {MAX_SLUG_LENGTH} characters"
        )


@dataclass(frozen=True)
class Dependency:
    """A declared relationship to another specification."""

    spec_id: str
    kind: DependencyKind = DependencyKind.RELATED_TO

    @classmethod
    def blocked_by(cls, spec_id: SpecId | str) -> Dependency:
        return cls(str(spec_id), DependencyKind.BLOCKED_BY)

    @classmethod
    def related_to(cls, spec_id: SpecId | str) -> Dependency:
        return cls(str(spec_id), DependencyKind.RELATED_TO)

    @classmethod
    def child_of(cls, spec_id: SpecId | str) -> Dependency:
        return cls(str(spec_id), DependencyKind.CHILD_OF)

    @classmethod
    def parent_of(cls, spec_id: SpecId | str) -> Dependency:
        return cls(str(spec_id), DependencyKind.PARENT_OF)


@dataclass
class SpecMetadata:
    """Descriptive metadata of a specification."""

    title: str
    description: str = ""
    category: Category = Category.FEATURE
    state: LifecycleState = LifecycleState.DRAFT
    dependencies: list[Dependency] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()


@dataclass
class Spec:
    """A tracked unit of requested work.

    Implements the ValidatableSpec protocol so that workspace validators
    can check it without knowing this type.
    """

    id: SpecId
    metadata: SpecMetadata
    content: str = ""

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def description(self) -> str:
        return self.metadata.description

    @property
    def state(self) -> LifecycleState:
        return self.metadata.state

    @property
    def dependencies(self) -> list[Dependency]:
        return list(self.metadata.dependencies)

    # Domain operations

    def set_title(self, title: str) -> None:
        self.metadata.title = title
        self.metadata.touch()

    def set_description(self, description: str) -> None:
        self.metadata.description = description
        self.metadata.touch()

    def set_content(self, content: str) -> None:
        self.content = content
        self.metadata.touch()

    def add_dependency(self, dependency: Dependency) -> None:
        self.metadata.dependencies.append(dependency)
        self.metadata.touch()

    def remove_dependency(self, spec_id: SpecId | str) -> None:
        target = str(spec_id)
        self.metadata.dependencies = [
            d for d in self.metadata.dependencies if d.spec_id != target
        ]
        self.metadata.touch()

    def transition_to(self, state: LifecycleState) -> None:
        self.metadata.state = state
        self.metadata.touch()

    # ValidatableSpec

    def id_str(self) -> str:
        return self.id.value

    def dependency_ids(self) -> list[str]:
        return [d.spec_id for d in self.metadata.dependencies]

    def dependency_links(self) -> list[tuple[str, str]]:
        return [(d.spec_id, d.kind.value) for d in self.metadata.dependencies]

    def lifecycle_state(self) -> str:
        return self.metadata.state.value

    def is_completed(self) -> bool:
        return self.metadata.state is LifecycleState.DONE

    def validate_content(self) -> ValidationReport:
        return validate_spec(self)


def generate_slug(title: str) -> str:
    """Generate a URL-safe slug from a title.

    Non-alphanumeric characters become hyphens, repeated hyphens collapse,
    and the result is truncated at a word boundary to MAX_SLUG_LENGTH.

    Args:
        title: Title to slugify.

    Returns:
        The slug, or "spec" if nothing usable remains.
    """
    slug = "".join(c.lower() if c.isascii() and c.isalnum() else "-" for c in title)
    slug = re.sub(r"-+", "-", slug).strip("-")

    if len(slug) > MAX_SLUG_LENGTH:
        cut = slug.rfind("-", 0, MAX_SLUG_LENGTH)
        slug = slug[:cut] if cut > 0 else slug[:MAX_SLUG_LENGTH]

    return slug or "spec"


class SpecBuilder:
    """Builder for Spec instances.

    Only the title is required. The identifier is derived from the current
    time and a slug of the title unless one is given explicitly.
    """

    def __init__(self) -> None:
        self._id: SpecId | None = None
        self._title: str | None = None
        self._description = ""
        self._category = Category.FEATURE
        self._state = LifecycleState.DRAFT
        self._dependencies: list[Dependency] = []
        self._content = ""

    def id(self, spec_id: SpecId | str) -> SpecBuilder:
        self._id = spec_id if isinstance(spec_id, SpecId) else SpecId.parse(spec_id)
        return self

    def title(self, title: str) -> SpecBuilder:
        self._title = title
        return self

    def description(self, description: str) -> SpecBuilder:
        self._description = description
        return self

    def category(self, category: Category) -> SpecBuilder:
        self._category = category
        return self

    def state(self, state: LifecycleState) -> SpecBuilder:
        self._state = state
        return self

    def dependency(self, dependency: Dependency) -> SpecBuilder:
        self._dependencies.append(dependency)
        return self

    def dependencies(self, dependencies: list[Dependency]) -> SpecBuilder:
        self._dependencies.extend(dependencies)
        return self

    def content(self, content: str) -> SpecBuilder:
        self._content = content
        return self

    def build(self) -> Spec:
        """Build the spec.

        Raises:
            SpecError: If the title is missing or empty.
        """
        if self._title is None:
            raise SpecError("missing required field: title")
        if not self._title.strip():
            raise SpecError("missing required field: title cannot be empty")

        spec_id = self._id
        if spec_id is None:
            spec_id = SpecId.new(int(_now().timestamp()), generate_slug(self._title))

        metadata = SpecMetadata(
            title=self._title,
            description=self._description,
            category=self._category,
            state=self._state,
            dependencies=list(self._dependencies),
        )
        return Spec(id=spec_id, metadata=metadata, content=self._content)


# -----------------------------------------------------------------------------
# Rule Set
# -----------------------------------------------------------------------------


def validate_spec(spec: Spec) -> ValidationReport:
    """Validate a specification and return every issue found.

    Missing title or description and self-references are errors. Length,
    whitespace, empty content and duplicate dependencies are warnings.

    Args:
        spec: The specification to validate.

    Returns:
        ValidationReport for this spec. Field paths are relative to the spec.
    """
    report = ValidationReport()
    _check_title(spec, report)
    _check_description(spec, report)
    _check_content(spec, report)
    _check_dependencies(spec, report)
    return report


def _check_title(spec: Spec, report: ValidationReport) -> None:
    title = spec.metadata.title
    if not title.strip():
        report.add_error("Title cannot be empty", field="metadata.title")
        return

    if len(title) > MAX_TITLE_LENGTH:
        report.add_warning(
            f"Title is very long ({len(title)} characters), consider shortening",
            field="metadata.title",
        )
    if title != title.strip():
        report.add_warning("Title has leading or trailing whitespace", field="metadata.title")


def _check_description(spec: Spec, report: ValidationReport) -> None:
    description = spec.metadata.description.strip()
    if not description:
        report.add_error("Description cannot be empty", field="metadata.description")
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        report.add_warning(
            f"Description is short ({len(description)} characters), consider adding details",
            field="metadata.description",
        )


def _check_content(spec: Spec, report: ValidationReport) -> None:
    if not spec.content.strip():
        report.add_warning("Content is empty, consider adding documentation", field="content")


def _check_dependencies(spec: Spec, report: ValidationReport) -> None:
    own_id = spec.id_str()
    seen: set[str] = set()

    for idx, dep in enumerate(spec.metadata.dependencies):
        path = f"metadata.dependencies[{idx}]"

        if dep.spec_id == own_id:
            report.add_error(f"Spec cannot depend on itself ({dep.kind})", field=path)
        elif not SpecId.is_valid(dep.spec_id):
            report.add_warning(f"Dependency '{dep.spec_id}' is not a valid spec ID", field=path)

        if dep.spec_id in seen:
            report.add_warning(f"Duplicate dependency: {dep.spec_id}", field=path)
        seen.add(dep.spec_id)
