"""Tests for process.py - running external programs."""

import sys
import threading
import time

import pytest

from validate_page.validator.errors import (
    ExecutableNotFoundError,
    ProcessLaunchError,
    ValidationCancelledError,
)
from validate_page.validator.process import CommandOutput, CommandRunner

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX signals")


def test_which_finds_python():
    assert CommandRunner().which(sys.executable)


def test_which_missing_executable():
    with pytest.raises(ExecutableNotFoundError) as exc_info:
        CommandRunner().which("no-such-validator-program")
    assert exc_info.value.executable == "no-such-validator-program"


def test_run_captures_stdout_and_nonzero_status():
    script = "import sys; sys.stdout.write(sys.stdin.read().upper()); sys.exit(1)"
    out = CommandRunner().run(sys.executable, ["-c", script], b"hello")
    assert out == CommandOutput(stdout=b"HELLO", returncode=1)


def test_run_without_stdin():
    out = CommandRunner().run(sys.executable, ["-c", "print('hi')"])
    assert out.stdout.strip() == b"hi"
    assert out.returncode == 0


@posix_only
def test_run_killed_by_signal():
    script = "import os, signal; os.kill(os.getpid(), signal.SIGKILL)"
    with pytest.raises(ProcessLaunchError, match="killed by signal"):
        CommandRunner().run(sys.executable, ["-c", script])


def test_run_timeout():
    runner = CommandRunner(timeout=0.5)
    with pytest.raises(ProcessLaunchError, match="didn't exit"):
        runner.run(sys.executable, ["-c", "import time; time.sleep(30)"])


def test_run_missing_executable():
    with pytest.raises(ExecutableNotFoundError):
        CommandRunner().run("no-such-validator-program", [])


def test_run_with_cancel_event_keeps_all_input():
    # Larger than a pipe buffer, and read only after several cancellation checks.
    data = b"x" * 200_000
    script = (
        "import sys, time; time.sleep(0.5); "
        "sys.stdout.write(str(len(sys.stdin.buffer.read())))"
    )
    out = CommandRunner().run(
        sys.executable, ["-c", script], data, cancel=threading.Event()
    )
    assert out == CommandOutput(stdout=b"200000", returncode=0)


def test_run_cancelled_while_waiting():
    cancel = threading.Event()
    timer = threading.Timer(0.3, cancel.set)
    timer.start()
    start = time.monotonic()
    try:
        with pytest.raises(ValidationCancelledError):
            CommandRunner().run(
                sys.executable, ["-c", "import time; time.sleep(30)"], cancel=cancel
            )
    finally:
        timer.cancel()
    assert time.monotonic() - start < 10


def test_run_already_cancelled_does_not_start(tmp_path):
    marker = tmp_path / "started"
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ValidationCancelledError):
        CommandRunner().run(
            sys.executable, ["-c", f"open({str(marker)!r}, 'w')"], cancel=cancel
        )
    assert not marker.exists()


def test_run_timeout_with_cancel_event():
    runner = CommandRunner(timeout=0.5)
    with pytest.raises(ProcessLaunchError, match="didn't exit"):
        runner.run(
            sys.executable,
            ["-c", "import time; time.sleep(30)"],
            cancel=threading.Event(),
        )
