"""Exceptions raised while talking to external validators."""

__all__ = [
    "ValidatorError",
    "TransportError",
    "ExecutableNotFoundError",
    "ProcessLaunchError",
    "ResponseParseError",
    "ValidationCancelledError",
    "ResultInconsistencyError",
    "ToolExitMismatchError",
]


class ValidatorError(Exception):
    """Base class for all errors raised by this package."""


class TransportError(ValidatorError):
    """The POST to a validation service could not be completed."""


class ExecutableNotFoundError(ValidatorError):
    """A required validator program is not present in $PATH."""

    def __init__(self, executable: str):
        super().__init__(f"{executable} not found in $PATH")
        self.executable = executable


class ProcessLaunchError(ValidatorError):
    """A validator program could not be run to completion.

    This is distinct from the program exiting with a non-zero status after
    reporting issues, which is how amphtml-validator signals errors.
    """


class ResponseParseError(ValidatorError):
    """The validator's HTML or JSON output could not be parsed."""


class ValidationCancelledError(ValidatorError):
    """The caller cancelled a validation before the validator finished."""


class ResultInconsistencyError(ValidatorError):
    """The validator's success signal disagrees with the parsed issues.

    This usually means that the service's results format changed. It is
    attached to results rather than raised from validation calls so that the
    issues that were parsed are still available.
    """


class ToolExitMismatchError(ResultInconsistencyError):
    """amphtml-validator reported that every file passed but exited non-zero."""
