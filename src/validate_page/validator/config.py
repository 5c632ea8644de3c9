"""Configuration for talking to validation services."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from validate_page.validator.amp import AMP_EXECUTABLE
from validate_page.validator.css import CSS_VALIDATOR_URL
from validate_page.validator.html import HTML_VALIDATOR_URL

__all__ = ["ValidatorConfig"]

DEFAULT_USER_AGENT = "validate-page"


@dataclass(frozen=True)
class ValidatorConfig:
    """Locations of the validators and how long to wait for them.

    Attributes:
        html_url: URL of the Nu Html Checker.
        css_url: URL of the CSS Validation Service.
        amp_executable: Name or path of the amphtml-validator program.
        timeout: Seconds to wait for a service to respond or for
            amphtml-validator to exit. None waits forever.
        user_agent: User-Agent header sent to the services.
    """

    html_url: str = HTML_VALIDATOR_URL
    css_url: str = CSS_VALIDATOR_URL
    amp_executable: str = AMP_EXECUTABLE
    timeout: float | None = 60
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ValidatorConfig:
        """Create config from VALIDATE_PAGE_* environment variables.

        Unset or empty variables keep their defaults. A timeout of 0 waits
        forever.

        Raises:
            ValueError: If VALIDATE_PAGE_TIMEOUT isn't a number.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        timeout = defaults.timeout
        if raw_timeout := env.get("VALIDATE_PAGE_TIMEOUT"):
            try:
                timeout = float(raw_timeout) or None
            except ValueError as e:
                raise ValueError(
                    f"Invalid VALIDATE_PAGE_TIMEOUT {raw_timeout!r}: {e}"
                ) from e

        return cls(
            html_url=env.get("VALIDATE_PAGE_HTML_URL") or defaults.html_url,
            css_url=env.get("VALIDATE_PAGE_CSS_URL") or defaults.css_url,
            amp_executable=(
                env.get("VALIDATE_PAGE_AMP_EXECUTABLE") or defaults.amp_executable
            ),
            timeout=timeout,
            user_agent=env.get("VALIDATE_PAGE_USER_AGENT") or defaults.user_agent,
        )
