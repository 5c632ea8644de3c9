"""Displaying results pages returned by validators."""

from __future__ import annotations

import html
import logging
import os
import subprocess
import tempfile
from pathlib import Path

from validate_page.validator.models import Issue

__all__ = [
    "launch_browser",
    "make_amp_results_page",
    "write_results",
]

log = logging.getLogger(__name__)


def launch_browser(page: bytes) -> None:
    """Display an HTML results page.

    If X isn't running, the page is piped into w3m. Otherwise it's written to
    a temporary file and opened in the user's preferred browser.

    Raises:
        OSError: If the page couldn't be written or the viewer couldn't be run.
        subprocess.CalledProcessError: If the viewer exited unsuccessfully.
    """
    if not os.environ.get("DISPLAY"):
        log.debug("DISPLAY unset; piping results into w3m")
        subprocess.run(["w3m", "-T", "text/html"], input=page, check=True)
        return

    path = write_results(page)
    log.debug("Opening %s", path)
    subprocess.run(["xdg-open", str(path)], check=True)


def write_results(page: bytes) -> Path:
    """Write page to a new temporary file and return its path."""
    with tempfile.NamedTemporaryFile(
        prefix="validate.", suffix=".html", delete=False
    ) as f:
        f.write(page)
    return Path(f.name)


def make_amp_results_page(issues: list[Issue]) -> bytes:
    """Generate a minimal HTML page listing issues.

    amphtml-validator doesn't generate a results page, so this is used to
    display its issues in a browser.
    """
    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "  <head>",
        '    <meta charset="utf-8">',
        "    <title>AMP validation results</title>",
        "  </head>",
        "  <body>",
    ]
    if not issues:
        lines.append("    No issues found.")
    for issue in issues:
        code = html.escape(issue.code)
        if issue.url:
            code = f'<a href="{html.escape(issue.url)}">{code}</a>'
        lines.append(
            f"    {issue.line}:{issue.column} {issue.severity} "
            f"{html.escape(issue.message)} {code}<br>"
        )
    lines += ["  </body>", "</html>", ""]
    return "\n".join(lines).encode("utf-8")
