"""A single entry point for validating documents with shared settings."""

from __future__ import annotations

import threading

import httpx

from validate_page.validator.amp import validate_amp, validate_amp_files
from validate_page.validator.config import ValidatorConfig
from validate_page.validator.css import validate_css
from validate_page.validator.html import validate_html
from validate_page.validator.models import AmpFilesResult, FileType, ValidationResult
from validate_page.validator.process import CommandRunner
from validate_page.validator.transport import MultipartPoster

__all__ = [
    "DocumentValidator",
]


class DocumentValidator:
    """Validates documents with a shared HTTP client and configuration.

    Each call is independent; the only state kept between calls is the HTTP
    client's connection pool. Every method accepts an optional cancel event:
    setting it from another thread abandons the upload or kills
    amphtml-validator, and the call raises ValidationCancelledError.
    """

    def __init__(
        self,
        config: ValidatorConfig | None = None,
        client: httpx.Client | None = None,
        runner: CommandRunner | None = None,
    ):
        """Initialize the validator.

        Args:
            config: Service locations and timeouts (defaults if None).
            client: Optional httpx.Client to use (if None, creates one internally).
            runner: Optional CommandRunner used to run amphtml-validator.
        """
        self.config = config or ValidatorConfig()
        self._poster = MultipartPoster(
            client=client,
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
        )
        self._runner = runner or CommandRunner(timeout=self.config.timeout)

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        self._poster.close()

    def __enter__(self) -> DocumentValidator:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def html(
        self, document: bytes, cancel: threading.Event | None = None
    ) -> ValidationResult:
        """Validate an HTML document using the Nu Html Checker."""
        return validate_html(
            document, self._poster, url=self.config.html_url, cancel=cancel
        )

    def css(
        self,
        document: bytes,
        file_type: FileType,
        cancel: threading.Event | None = None,
    ) -> ValidationResult:
        """Validate a stylesheet or the CSS in an HTML document."""
        return validate_css(
            document, file_type, self._poster, url=self.config.css_url, cancel=cancel
        )

    def amp(
        self, document: bytes, cancel: threading.Event | None = None
    ) -> ValidationResult:
        """Validate an AMP HTML document using amphtml-validator."""
        return validate_amp(
            document,
            self._runner,
            executable=self.config.amp_executable,
            cancel=cancel,
        )

    def amp_files(
        self, paths: list[str], cancel: threading.Event | None = None
    ) -> AmpFilesResult:
        """Validate AMP HTML files using a single amphtml-validator run."""
        return validate_amp_files(
            paths,
            self._runner,
            executable=self.config.amp_executable,
            cancel=cancel,
        )
