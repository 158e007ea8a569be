"""Shared pytest fixtures."""

from __future__ import annotations

import io
from collections.abc import Callable

import pytest

from rsynctask.rsync import ExitError, PipeError, SpawnError


class FakeProcess:
    """In-memory stand-in for Command.

    Streams are BytesIO objects filled with the given output; start()
    and wait() can be made to fail.
    """

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        exit_code: int = 0,
        fail_stdout_pipe: bool = False,
        fail_stderr_pipe: bool = False,
        fail_start: bool = False,
    ) -> None:
        self.stdout = io.BytesIO(stdout)
        self.stderr = io.BytesIO(stderr)
        self.exit_code = exit_code
        self.fail_stdout_pipe = fail_stdout_pipe
        self.fail_stderr_pipe = fail_stderr_pipe
        self.fail_start = fail_start
        self.calls: list[str] = []

    def stdout_pipe(self) -> io.BytesIO:
        self.calls.append("stdout_pipe")
        if self.fail_stdout_pipe:
            raise PipeError("cannot create stdout pipe")
        return self.stdout

    def stderr_pipe(self) -> io.BytesIO:
        self.calls.append("stderr_pipe")
        if self.fail_stderr_pipe:
            raise PipeError("cannot create stderr pipe")
        return self.stderr

    def start(self) -> None:
        self.calls.append("start")
        if self.fail_start:
            raise SpawnError("cannot start rsync: No such file or directory")

    def wait(self) -> None:
        self.calls.append("wait")
        if self.exit_code != 0:
            raise ExitError(self.exit_code)

    def close(self) -> None:
        self.calls.append("close")

    def terminate(self) -> None:
        self.calls.append("terminate")


@pytest.fixture
def make_process() -> Callable[..., FakeProcess]:
    """Factory for FakeProcess instances."""
    return FakeProcess
