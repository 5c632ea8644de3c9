"""Models describing issues reported by validators and validation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from validate_page.validator.errors import ResultInconsistencyError

__all__ = [
    "Severity",
    "FileType",
    "Issue",
    "ValidationResult",
    "AmpFilesResult",
]


class Severity(Enum):
    """Severity of an issue."""

    # An actual problem, e.g. an unclosed HTML tag or invalid CSS property.
    ERROR = "Error"
    # A minor issue, e.g. a vendor-prefixed CSS property.
    WARNING = "Warning"

    def __str__(self) -> str:
        return self.value


class FileType(Enum):
    """Declared type of a document submitted to the CSS validator.

    The CSS validation service reports success for mistyped input, so callers
    must always choose one explicitly.
    """

    STYLESHEET = "text/css"
    HTML_DOC = "text/html"


class Issue(BaseModel):
    """A single problem reported by a validator.

    Attributes:
        severity: Seriousness of the issue.
        line: 1-indexed line number, or 0 if unknown.
        column: 1-indexed column number, or 0 if unknown.
        message: Description of the issue. May contain newlines.
        context: Optional excerpt of the document near the issue.
        code: Optional machine-readable error code (AMP only).
        url: Optional URL documenting the issue (AMP only).
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.ERROR
    line: int = Field(default=0, ge=0)
    column: int = Field(default=0, ge=0)
    message: str = ""
    context: str = ""
    code: str = ""
    url: str = ""

    def __str__(self) -> str:
        s = f"{self.line}:{self.column} {self.severity}: {self.message}"
        if self.context:
            s += f" ({self.context})"
        return s


def _has_error(issues: list[Issue]) -> bool:
    return any(issue.severity is Severity.ERROR for issue in issues)


@dataclass(frozen=True)
class ValidationResult:
    """Issues parsed from a validator's output.

    Attributes:
        issues: Issues in the order the validator reported them.
        raw: Raw output returned by the validator (an HTML page for the
            HTML and CSS validators, JSON for the AMP validator).
        inconsistency: Set if the validator's success signal disagreed with
            the parsed issues. The issues are still usable but may be
            incomplete.
    """

    issues: list[Issue] = field(default_factory=list)
    raw: bytes = b""
    inconsistency: ResultInconsistencyError | None = None

    @property
    def ok(self) -> bool:
        """True if no errors were reported and the result is consistent."""
        return self.inconsistency is None and not _has_error(self.issues)

    def raise_for_inconsistency(self) -> None:
        """Raise the attached ResultInconsistencyError, if any."""
        if self.inconsistency is not None:
            raise self.inconsistency


@dataclass(frozen=True)
class AmpFilesResult:
    """Issues parsed from a batch amphtml-validator run.

    Attributes:
        issues_by_path: Issues for each input path, in the validator's
            output order.
        raw: Raw JSON printed by the validator.
        inconsistency: Set if the validator's exit status or per-file
            statuses disagreed with the parsed issues.
    """

    issues_by_path: dict[str, list[Issue]] = field(default_factory=dict)
    raw: bytes = b""
    inconsistency: ResultInconsistencyError | None = None

    @property
    def issues(self) -> list[Issue]:
        """All issues across all files."""
        return [issue for issues in self.issues_by_path.values() for issue in issues]

    @property
    def ok(self) -> bool:
        """True if no errors were reported and the result is consistent."""
        return self.inconsistency is None and not _has_error(self.issues)

    def raise_for_inconsistency(self) -> None:
        """Raise the attached ResultInconsistencyError, if any."""
        if self.inconsistency is not None:
            raise self.inconsistency
