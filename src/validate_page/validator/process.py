"""Running locally-installed validator programs."""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass

from validate_page.validator.errors import (
    ExecutableNotFoundError,
    ProcessLaunchError,
    ValidationCancelledError,
)

__all__ = [
    "CommandOutput",
    "CommandRunner",
]

log = logging.getLogger(__name__)

# Seconds between checks of a cancellation event.
_CANCEL_POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class CommandOutput:
    """Output captured from a program that ran to completion."""

    stdout: bytes
    returncode: int


class CommandRunner:
    """Runs external programs and captures their output.

    A non-zero exit status is not treated as a failure: some validators use it
    to report that they found errors. Only failures to run the program are
    raised.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize the runner.

        Args:
            timeout: Optional number of seconds to wait for programs to exit.
        """
        self.timeout = timeout

    def which(self, executable: str) -> str:
        """Return the full path to executable.

        Raises:
            ExecutableNotFoundError: If executable isn't in $PATH.
        """
        path = shutil.which(executable)
        if path is None:
            raise ExecutableNotFoundError(executable)
        return path

    def run(
        self,
        executable: str,
        args: list[str],
        stdin: bytes | None = None,
        cancel: threading.Event | None = None,
    ) -> CommandOutput:
        """Run executable with args, optionally feeding it stdin.

        Args:
            executable: Name or path of the program.
            args: Arguments passed to the program.
            stdin: Optional data written to the program's stdin.
            cancel: Optional event that kills the program when set.

        Raises:
            ExecutableNotFoundError: If executable isn't in $PATH.
            ProcessLaunchError: If the program couldn't be started, timed out,
                or was killed by a signal.
            ValidationCancelledError: If cancel was set before the program exited.
        """
        path = self.which(executable)
        if cancel is not None and cancel.is_set():
            raise ValidationCancelledError(f"{executable} was cancelled before starting")

        log.debug("Running %s %s", path, " ".join(args))
        try:
            proc = subprocess.Popen(
                [path, *args],
                stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessLaunchError(f"failed to run {executable}: {e}") from e

        stdout, stderr = self._communicate(proc, executable, stdin, cancel)

        if proc.returncode < 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ProcessLaunchError(
                f"{executable} was killed by signal {-proc.returncode}: {message}"
            )
        log.debug("%s exited with status %d", executable, proc.returncode)
        return CommandOutput(stdout=stdout, returncode=proc.returncode)

    def _communicate(
        self,
        proc: subprocess.Popen,
        executable: str,
        stdin: bytes | None,
        cancel: threading.Event | None,
    ) -> tuple[bytes, bytes]:
        """Wait for proc to exit, killing it on timeout or cancellation."""
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        data = stdin
        while True:
            wait = _CANCEL_POLL_INTERVAL if cancel is not None else None
            if deadline is not None:
                remaining = max(deadline - time.monotonic(), 0)
                wait = remaining if wait is None else min(wait, remaining)
            try:
                return proc.communicate(data, timeout=wait)
            except subprocess.TimeoutExpired:
                # Input can only be sent on the first call; output isn't lost.
                data = None

            if cancel is not None and cancel.is_set():
                _kill(proc)
                raise ValidationCancelledError(f"{executable} was cancelled")
            if deadline is not None and time.monotonic() >= deadline:
                _kill(proc)
                raise ProcessLaunchError(
                    f"{executable} didn't exit within {self.timeout} seconds"
                )


def _kill(proc: subprocess.Popen) -> None:
    proc.kill()
    proc.communicate()
