"""Consistency checks for validator results."""

import logging
from collections.abc import Iterable

from validate_page.validator.errors import ResultInconsistencyError
from validate_page.validator.models import Issue, Severity, ValidationResult

__all__ = ["check_response", "checked_result"]

log = logging.getLogger(__name__)


def check_response(success: bool, issues: Iterable[Issue]) -> None:
    """Check that a validator's report of success agrees with its issues.

    Validators signal success separately from the issues they list (e.g. with a
    fixed message in a results page). If the two disagree, the results format
    has most likely changed and the parsed issues can't be trusted.

    Args:
        success: Whether the validator reported success.
        issues: Issues parsed from the validator's output.

    Raises:
        ResultInconsistencyError: If success is True but an error was found, or
            success is False but no errors were found. Warnings are ignored.
    """
    got_error = any(issue.severity is Severity.ERROR for issue in issues)

    if not success and not got_error:
        raise ResultInconsistencyError("got neither errors nor success message")
    if success and got_error:
        raise ResultInconsistencyError("got both errors and success message")


def checked_result(success: bool, issues: list[Issue], raw: bytes) -> ValidationResult:
    """Build a ValidationResult, attaching any inconsistency found by check_response.

    The inconsistency is logged rather than raised so that callers still get
    the issues and raw output, which are usually still useful.
    """
    try:
        check_response(success, issues)
    except ResultInconsistencyError as e:
        log.warning("Validator results are inconsistent: %s", e)
        return ValidationResult(issues=issues, raw=raw, inconsistency=e)
    return ValidationResult(issues=issues, raw=raw)
