"""Validation of AMP HTML documents using amphtml-validator.

There don't appear to be any online AMP validators that can be called
programmatically, so the amphtml-validator Node.js program must be installed
locally. See
https://amp.dev/documentation/guides-and-tutorials/learn/validation-workflow/validate_amp/#command-line-tool

amphtml-validator prints a JSON object that maps from the filenames passed
to it (or "-" for stdin) to each file's results. The results are a subset of
ValidationResult in
https://github.com/ampproject/amphtml/blob/main/validator/validator.proto.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from validate_page.validator.check import check_response
from validate_page.validator.errors import (
    ResponseParseError,
    ResultInconsistencyError,
    ToolExitMismatchError,
)
from validate_page.validator.models import (
    AmpFilesResult,
    Issue,
    Severity,
    ValidationResult,
)
from validate_page.validator.process import CommandRunner

__all__ = [
    "AMP_EXECUTABLE",
    "STDIN_ID",
    "AmpError",
    "AmpFileResult",
    "normalize_code",
    "validate_amp",
    "validate_amp_files",
    "parse_amp_output",
]

AMP_EXECUTABLE = "amphtml-validator"

# Identifier used by amphtml-validator for input read from stdin.
STDIN_ID = "-"

log = logging.getLogger(__name__)


class AmpError(BaseModel):
    """A single error record printed by amphtml-validator."""

    severity: str = ""  # UNKNOWN_SEVERITY, ERROR, WARNING
    line: int = 0
    col: int = 0
    message: str = ""
    # amphtml-validator changed at some point (May 2021?) such that this is a
    # number (e.g. 5) rather than a string (e.g. "MANDATORY_ATTR_MISSING").
    code: StrictStr | StrictInt | None = None
    spec_url: str = Field(default="", alias="specUrl")

    @field_validator("severity", "line", "col", "message", "spec_url", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _drop_unknown_code(cls, value: Any) -> Any:
        # Booleans are ints as far as Python is concerned.
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            return None
        return value

    def to_issue(self) -> Issue:
        """Convert the record to an Issue."""
        return Issue(
            severity=Severity.WARNING if self.severity == "WARNING" else Severity.ERROR,
            line=max(self.line, 0),
            column=max(self.col + 1, 0),  # amphtml-validator's columns are 0-indexed
            message=self.message,
            code=normalize_code(self.code),
            url=self.spec_url,
        )


def normalize_code(code: str | int | None) -> str:
    """Return an error code as a string, whichever form it was reported in."""
    if code is None:
        return ""
    return str(code)


class AmpFileResult(BaseModel):
    """amphtml-validator's results for a single file."""

    status: str = ""  # UNKNOWN, PASS, FAIL
    errors: list[AmpError] = Field(default_factory=list)

    @field_validator("status", "errors", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return value


_OUTPUT_ADAPTER = TypeAdapter(dict[str, AmpFileResult])


def validate_amp(
    document: bytes,
    runner: CommandRunner,
    executable: str = AMP_EXECUTABLE,
    cancel: threading.Event | None = None,
) -> ValidationResult:
    """Validate an AMP HTML document by running amphtml-validator.

    Args:
        document: The AMP HTML document to validate.
        runner: Used to run amphtml-validator.
        executable: Name of the amphtml-validator program.
        cancel: Optional event that kills the validator when set.

    Returns:
        Parsed issues and the raw JSON printed by the validator.

    Raises:
        ExecutableNotFoundError: If the validator isn't in $PATH.
        ProcessLaunchError: If the validator couldn't be run.
        ResponseParseError: If the validator's output couldn't be parsed.
        ValidationCancelledError: If cancel was set before the validator exited.
    """
    result = _run_amp(runner, executable, [STDIN_ID], document, cancel)
    return ValidationResult(
        issues=result.issues_by_path.get(STDIN_ID, []),
        raw=result.raw,
        inconsistency=result.inconsistency,
    )


def validate_amp_files(
    paths: list[str],
    runner: CommandRunner,
    executable: str = AMP_EXECUTABLE,
    cancel: threading.Event | None = None,
) -> AmpFilesResult:
    """Validate multiple AMP HTML files with a single amphtml-validator run.

    This may be much faster than calling validate_amp for each file, since the
    WebAssembly-based validator can take a long time to start:
    https://github.com/ampproject/amphtml/issues/37585.

    Args:
        paths: Paths of the files to validate.
        runner: Used to run amphtml-validator.
        executable: Name of the amphtml-validator program.
        cancel: Optional event that kills the validator when set.

    Returns:
        Parsed issues keyed by the paths from the paths argument.

    Raises:
        ExecutableNotFoundError: If the validator isn't in $PATH.
        ProcessLaunchError: If the validator couldn't be run.
        ResponseParseError: If the validator's output couldn't be parsed.
        ValidationCancelledError: If cancel was set before the validator exited.
    """
    return _run_amp(runner, executable, list(paths), None, cancel)


def _run_amp(
    runner: CommandRunner,
    executable: str,
    file_args: list[str],
    stdin: bytes | None,
    cancel: threading.Event | None,
) -> AmpFilesResult:
    # amphtml-validator exits with 1 if it finds errors (but not just warnings),
    # so the exit status isn't treated as a failure here.
    output = runner.run(
        executable, ["--format=json", *file_args], stdin, cancel=cancel
    )
    return parse_amp_output(output.stdout, output.returncode, executable)


def parse_amp_output(
    stdout: bytes,
    returncode: int = 0,
    executable: str = AMP_EXECUTABLE,
) -> AmpFilesResult:
    """Parse the JSON printed by amphtml-validator --format=json.

    Args:
        stdout: The validator's output.
        returncode: The validator's exit status.
        executable: Name of the validator, used in messages.

    Raises:
        ResponseParseError: If stdout isn't the expected JSON object.
    """
    try:
        results = _OUTPUT_ADAPTER.validate_json(stdout)
    except ValidationError as e:
        raise ResponseParseError(f"failed to parse {executable} output: {e}") from e

    all_passed = True
    all_issues: list[Issue] = []
    issues_by_path: dict[str, list[Issue]] = {}
    for path, res in results.items():
        issues = [err.to_issue() for err in res.errors]
        issues_by_path[path] = issues
        all_issues.extend(issues)
        if res.status != "PASS":
            all_passed = False

    inconsistency: ResultInconsistencyError | None = None
    if all_passed and returncode != 0:
        inconsistency = ToolExitMismatchError(
            f"{executable} reported pass but exited with status {returncode}"
        )
    else:
        try:
            check_response(all_passed, all_issues)
        except ResultInconsistencyError as e:
            inconsistency = e

    if inconsistency is not None:
        log.warning("%s results are inconsistent: %s", executable, inconsistency)
    return AmpFilesResult(
        issues_by_path=issues_by_path, raw=stdout, inconsistency=inconsistency
    )
