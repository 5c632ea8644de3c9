"""Pytest configuration for validator tests.

Uploads made by integration_test.py are recorded with pytest-recording so
that later runs replay them instead of hitting the W3C services. Cassettes
live under the user cache directory and are re-recorded once they're older
than CASSETTE_MAX_AGE_DAYS, so changes to the services' results pages are
still noticed.
"""

from __future__ import annotations

import os
from contextlib import suppress
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import pytest

CASSETTE_MAX_AGE_DAYS = 7


def _cassette_dir() -> Path:
    cache = os.environ.get("XDG_CACHE_HOME")
    base = Path(cache) if cache else Path.home() / ".cache"
    return base / "validate-page" / "cassettes" / "validator"


def _expire(cassette: Path) -> None:
    if not cassette.exists():
        return
    age = datetime.now() - datetime.fromtimestamp(cassette.stat().st_mtime)
    if age > timedelta(days=CASSETTE_MAX_AGE_DAYS):
        with suppress(OSError):
            cassette.unlink()


@pytest.fixture
def vcr_config(vcr_cassette_name: str):
    """Record each upload once, then replay it until the cassette expires.

    Run pytest --record-mode=rewrite to re-record everything.
    """
    cassette_dir = _cassette_dir()
    cassette_dir.mkdir(parents=True, exist_ok=True)
    _expire(cassette_dir / f"{vcr_cassette_name}.yaml")

    return {
        "cassette_library_dir": str(cassette_dir),
        # Multipart boundaries are random, so bodies can't be matched.
        "match_on": ["method", "uri"],
        "record_mode": "once",
        "decode_compressed_response": True,
    }


@pytest.fixture
def vcr_cassette_name(request) -> str:
    """Name cassettes <module>/<test>, e.g. integration_test/test_html_valid."""
    return f"{request.module.__name__.split('.')[-1]}/{request.node.name}"


@pytest.fixture
def http_client(vcr):
    """Provide an HTTP client whose requests are recorded or replayed."""
    with httpx.Client(follow_redirects=True, timeout=60) as client:
        yield client
