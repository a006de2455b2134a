"""Base validator classes and models for the specctx validation framework.

Provides the issue/report data model shared by every validator and the
generic validator contract used to compose them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Severity(IntEnum):
    """Severity of a validation issue.

    Ordered so that ``INFO < WARNING < ERROR``. Only errors affect validity.
    """

    INFO = 0
    WARNING = 1
    ERROR = 2

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding.

    Attributes:
        severity: Severity level of the issue.
        message: Human-readable description of the issue.
        field: Optional dotted path of the offending attribute
            (e.g., "metadata.title").
    """

    severity: Severity
    message: str
    field: str | None = None

    @classmethod
    def error(cls, message: str) -> ValidationIssue:
        return cls(Severity.ERROR, message)

    @classmethod
    def warning(cls, message: str) -> ValidationIssue:
        return cls(Severity.WARNING, message)

    @classmethod
    def info(cls, message: str) -> ValidationIssue:
        return cls(Severity.INFO, message)

    def with_field(self, field: str) -> ValidationIssue:
        """Return a copy of this issue attached to the given field path."""
        return ValidationIssue(self.severity, self.message, field)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"severity": str(self.severity), "message": self.message}
        if self.field is not None:
            data["field"] = self.field
        return data

    def __str__(self) -> str:
        if self.field is not None:
            return f"[{self.severity}] {self.field}: {self.message}"
        return f"[{self.severity}] {self.message}"


@dataclass
class ValidationReport:
    """Ordered, mergeable collection of validation issues.

    Issues keep their insertion order so that output is deterministic.
    A report is valid when it holds no error-severity issues; warnings
    and info never block validity.
    """

    _issues: list[ValidationIssue] = field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> ValidationReport:
        return cls(list(issues))

    def add_issue(self, issue: ValidationIssue) -> None:
        self._issues.append(issue)

    def add_error(self, message: str, field: str | None = None) -> None:
        self._issues.append(ValidationIssue(Severity.ERROR, message, field))

    def add_warning(self, message: str, field: str | None = None) -> None:
        self._issues.append(ValidationIssue(Severity.WARNING, message, field))

    def add_info(self, message: str, field: str | None = None) -> None:
        self._issues.append(ValidationIssue(Severity.INFO, message, field))

    def merge(self, other: ValidationReport) -> ValidationReport:
        """Append all issues of ``other`` to this report.

        Args:
            other: Report whose issues are appended.

        Returns:
            This report, to allow chaining.
        """
        self._issues.extend(other._issues)
        return self

    def merge_all(self, others: Iterable[ValidationReport]) -> ValidationReport:
        for other in others:
            self.merge(other)
        return self

    @property
    def issues(self) -> list[ValidationIssue]:
        return list(self._issues)

    def is_valid(self) -> bool:
        return self.error_count() == 0

    def is_empty(self) -> bool:
        return not self._issues

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self._issues if issue.severity == severity)

    def issue_count(self) -> int:
        return len(self._issues)

    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    def info_count(self) -> int:
        return self.count(Severity.INFO)

    def errors(self) -> list[ValidationIssue]:
        return [i for i in self._issues if i.severity == Severity.ERROR]

    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self._issues if i.severity == Severity.WARNING]

    def infos(self) -> list[ValidationIssue]:
        return [i for i in self._issues if i.severity == Severity.INFO]

    def sorted_issues(self) -> list[ValidationIssue]:
        """Return issues ordered errors first, keeping insertion order within a level."""
        return sorted(self._issues, key=lambda issue: -issue.severity)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the report for JSON output."""
        return {
            "valid": self.is_valid(),
            "summary": {
                "total_issues": self.issue_count(),
                "errors": self.error_count(),
                "warnings": self.warning_count(),
                "infos": self.info_count(),
            },
            "issues": [issue.to_dict() for issue in self._issues],
        }

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[ValidationIssue]:
        return iter(self._issues)


class BaseValidator(ABC, Generic[T]):
    """Abstract base class for all validators.

    A validator checks a single target of type ``T`` and reports every
    constraint violation it finds as an issue. ``validate`` must not raise
    for content problems; it returns them inside the report.

    Attributes:
        name: Short identifier of the validator (e.g., "dependencies").
    """

    name: str = "validator"

    @abstractmethod
    def validate(self, target: T) -> ValidationReport:
        """Run validation checks against ``target``.

        Args:
            target: The object to validate.

        Returns:
            ValidationReport containing any issues found.
        """


def validate_all(validators: Iterable[BaseValidator[T]], target: T) -> ValidationReport:
    """Run validators sharing a target type and merge their reports.

    Equivalent to calling each validator in turn and merging the results.
    An empty sequence yields an empty report.

    Args:
        validators: Validators to run.
        target: Target passed to every validator.

    Returns:
        The merged ValidationReport.
    """
    report = ValidationReport()
    for validator in validators:
        report.merge(validator.validate(target))
    return report
