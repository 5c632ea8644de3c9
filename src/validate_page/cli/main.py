"""Main entry point for the validate-page CLI."""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from validate_page.cli.sniff import DocType, infer_doc_type
from validate_page.validator import (
    DocumentValidator,
    FileType,
    ValidationResult,
    ValidatorConfig,
    ValidatorError,
)
from validate_page.validator.browser import launch_browser, make_amp_results_page

logger = logging.getLogger(__name__)


def _setup_logging(log_level: str) -> None:
    """Configure logging based on level.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description=(
            "Validate an HTML or CSS document. "
            "If FILE isn't supplied, reads from stdin."
        ),
    )
    parser.add_argument(
        "file",
        nargs="?",
        metavar="FILE",
        help="Document to validate",
    )
    parser.add_argument(
        "--type",
        dest="doc_type",
        choices=[t.value for t in DocType],
        default=None,
        help=(
            'File type: "amp", "css", "html", "htmlcss" (validate CSS in HTML); '
            "inferred if unset"
        ),
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        help="Display validation issues in browser (printed to stdout otherwise)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def _read_input(path: Path | None) -> bytes:
    if path is None:
        return sys.stdin.buffer.read()
    return path.read_bytes()


def _validate(
    validator: DocumentValidator, doc_type: DocType, data: bytes, browser: bool
) -> tuple[ValidationResult, bytes]:
    """Validate data and return the result and the page to display."""
    if doc_type == DocType.AMP:
        result = validator.amp(data)
        # amphtml-validator doesn't generate a results page, so make our own.
        page = make_amp_results_page(result.issues) if browser else b""
        return result, page
    if doc_type == DocType.CSS:
        result = validator.css(data, FileType.STYLESHEET)
    elif doc_type == DocType.HTML_CSS:
        result = validator.css(data, FileType.HTML_DOC)
    else:
        result = validator.html(data)
    return result, result.raw


def main(argv: list[str] | None = None) -> int:
    """Main entry point for validate-page.

    Returns:
        Exit code: 0 for success, 1 if validation failed, 2 for usage errors.
    """
    args = _parse_args(argv)
    _setup_logging(args.log_level)

    path = Path(args.file) if args.file else None
    try:
        data = _read_input(path)
    except OSError as e:
        print(f"Failed to open input file: {e}", file=sys.stderr)
        return 1

    if args.doc_type:
        doc_type = DocType(args.doc_type)
    else:
        inferred = infer_doc_type(path, data)
        if inferred is None:
            print("Unable to infer file type; pass --type", file=sys.stderr)
            return 1
        doc_type = inferred
        logger.info("Inferred file type %s", doc_type.value)

    try:
        config = ValidatorConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        with DocumentValidator(config) as validator:
            result, page = _validate(validator, doc_type, data, args.browser)
    except ValidatorError as e:
        print(f"Validation request failed: {e}", file=sys.stderr)
        return 1

    if args.browser:
        try:
            launch_browser(page)
        except (OSError, subprocess.CalledProcessError) as e:
            print(f"Failed to display results in browser: {e}", file=sys.stderr)
            return 1
    else:
        for issue in result.issues:
            print(issue)

    if result.inconsistency is not None:
        print(f"Validation request failed: {result.inconsistency}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
