"""Multipart form uploads to validation services."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from validate_page.validator.errors import TransportError, ValidationCancelledError

__all__ = [
    "FilePart",
    "MultipartPoster",
]

log = logging.getLogger(__name__)

# Seconds between checks of a cancellation event.
_CANCEL_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class FilePart:
    """A file uploaded as part of a multipart/form-data body.

    The content type is always sent explicitly: the W3C CSS validator keys its
    behavior off the declared type rather than sniffing the content.
    """

    field: str
    filename: str
    content_type: str
    content: bytes


class MultipartPoster:
    """Posts multipart/form-data bodies using a shared httpx.Client."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float | None = 30,
        user_agent: str | None = None,
    ):
        """Initialize the poster.

        Args:
            client: Optional httpx.Client to use (if None, creates one internally).
            timeout: Timeout in seconds for the internally-created client.
            user_agent: Optional User-Agent header for the internally-created client.
        """
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.user_agent = user_agent

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"User-Agent": self.user_agent} if self.user_agent else None
            self._client = httpx.Client(
                follow_redirects=True, timeout=self.timeout, headers=headers
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> MultipartPoster:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def post(
        self,
        url: str,
        fields: dict[str, str],
        files: list[FilePart],
        cancel: threading.Event | None = None,
    ) -> bytes:
        """POST fields and files to url and return the response body.

        Args:
            url: The URL to post to.
            fields: Non-file form fields.
            files: Files to upload.
            cancel: Optional event that abandons the request when set.

        Returns:
            The raw response body.

        Raises:
            TransportError: If the request failed or returned an HTTP error status.
            ValidationCancelledError: If cancel was set before a response arrived.
        """
        client = self._get_client()
        log.debug("Posting %d file(s) to %s", len(files), url)

        def send() -> httpx.Response:
            return client.post(
                url,
                data=fields,
                files=[
                    (f.field, (f.filename, f.content, f.content_type)) for f in files
                ],
            )

        try:
            if cancel is None:
                resp = send()
            else:
                resp = self._send_cancellable(send, url, cancel)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"POST to {url} failed: {e}") from e
        log.debug("Got %d-byte response from %s", len(resp.content), url)
        return resp.content

    def _send_cancellable(
        self,
        send: Callable[[], httpx.Response],
        url: str,
        cancel: threading.Event,
    ) -> httpx.Response:
        """Run send on a worker thread, giving up on it if cancel is set.

        httpx has no way to interrupt a blocking request, so a cancelled
        request is left to finish (or time out) on its daemon thread. An owned
        client is closed so that its connections aren't reused.
        """
        if cancel.is_set():
            raise ValidationCancelledError(f"POST to {url} was cancelled")

        done = threading.Event()
        outcome: dict[str, Any] = {}

        def _worker() -> None:
            try:
                outcome["response"] = send()
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        threading.Thread(target=_worker, daemon=True).start()
        while not done.wait(_CANCEL_POLL_INTERVAL):
            if cancel.is_set():
                log.debug("Abandoning POST to %s", url)
                self.close()
                raise ValidationCancelledError(f"POST to {url} was cancelled")

        if "error" in outcome:
            raise outcome["error"]
        return outcome["response"]
