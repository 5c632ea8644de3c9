"""Clients for external HTML, CSS and AMP validators."""

from .amp import validate_amp, validate_amp_files
from .check import check_response
from .client import DocumentValidator
from .config import ValidatorConfig
from .css import validate_css
from .errors import (
    ExecutableNotFoundError,
    ProcessLaunchError,
    ResponseParseError,
    ResultInconsistencyError,
    ToolExitMismatchError,
    TransportError,
    ValidationCancelledError,
    ValidatorError,
)
from .html import validate_html
from .models import AmpFilesResult, FileType, Issue, Severity, ValidationResult

__all__ = [
    # Types
    "AmpFilesResult",
    "FileType",
    "Issue",
    "Severity",
    "ValidationResult",
    "ValidatorConfig",
    # Validators
    "DocumentValidator",
    "validate_amp",
    "validate_amp_files",
    "validate_css",
    "validate_html",
    "check_response",
    # Errors
    "ExecutableNotFoundError",
    "ProcessLaunchError",
    "ResponseParseError",
    "ResultInconsistencyError",
    "ToolExitMismatchError",
    "TransportError",
    "ValidationCancelledError",
    "ValidatorError",
]
