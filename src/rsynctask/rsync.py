"""Process wrapper for rsync.

This module provides:
- RsyncError, PipeError, SpawnError, ExitError: Exception classes
- Command: Subprocess whose output pipes are handed out before it starts
- Rsync: Command building its arguments from RsyncOptions
"""

from __future__ import annotations

import contextlib
import logging
import os
import signal
import subprocess
from collections.abc import Sequence
from typing import BinaryIO

from rsynctask.core.config import RsyncOptions

logger = logging.getLogger(__name__)


class RsyncError(Exception):
    """Base exception for rsync process errors."""


class PipeError(RsyncError):
    """Failed to acquire an output pipe."""


class SpawnError(RsyncError):
    """Failed to start the process."""


class ExitError(RsyncError):
    """Process exited with a non-zero status.

    Attributes:
        code: Exit status; negative when the process was killed by a signal.
        signal: Signal number that terminated the process, if any.
    """

    def __init__(self, code: int) -> None:
        self.code = code
        self.signal = -code if code < 0 else None
        if self.signal is not None:
            try:
                name = signal.Signals(self.signal).name
            except ValueError:
                name = str(self.signal)
            message = f"process terminated by signal {name}"
        else:
            message = f"process exited with status {code}"
        super().__init__(message)


class Command:
    """A subprocess with separately acquired stdout/stderr pipes.

    Pipes must be requested before start(). Streams that were never
    requested are discarded.

    Usage:
        command = Command(["rsync", "-a", "src/", "dst/"])
        stdout = command.stdout_pipe()
        command.start()
        for line in stdout:
            ...
        command.wait()
    """

    def __init__(self, args: Sequence[str]) -> None:
        self.args = list(args)
        self._process: subprocess.Popen[bytes] | None = None
        self._stdout_fd: int | None = None
        self._stderr_fd: int | None = None
        self._acquired: set[str] = set()

    @property
    def pid(self) -> int | None:
        """Get the process id, or None before start."""
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> int | None:
        """Get the exit status, or None while running or before start."""
        return self._process.returncode if self._process else None

    def stdout_pipe(self) -> BinaryIO:
        """Get a stream connected to the process's standard output.

        Raises:
            PipeError: If the pipe cannot be created, was already
                acquired, or the process has started.
        """
        reader, self._stdout_fd = self._open_pipe("stdout")
        return reader

    def stderr_pipe(self) -> BinaryIO:
        """Get a stream connected to the process's standard error.

        Raises:
            PipeError: If the pipe cannot be created, was already
                acquired, or the process has started.
        """
        reader, self._stderr_fd = self._open_pipe("stderr")
        return reader

    def _open_pipe(self, name: str) -> tuple[BinaryIO, int]:
        if self._process is not None:
            raise PipeError(f"{name} pipe requested after process started")
        if name in self._acquired:
            raise PipeError(f"{name} pipe already acquired")
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise PipeError(f"cannot create {name} pipe: {e}") from e
        try:
            reader = os.fdopen(read_fd, "rb")
        except (OSError, ValueError) as e:
            os.close(read_fd)
            os.close(write_fd)
            raise PipeError(f"cannot open {name} pipe: {e}") from e
        self._acquired.add(name)
        return reader, write_fd

    def close(self) -> None:
        """Release pipe write ends held for a process that will not start.

        Read ends handed out by stdout_pipe() and stderr_pipe() belong to
        the caller and are not closed here.
        """
        self._close_write_ends()

    def start(self) -> None:
        """Start the process.

        The write ends of the pipes are closed in this process whether
        or not the spawn succeeds, so readers see end of stream once the
        child is gone.

        Raises:
            SpawnError: If the process cannot be started or was already
                started.
        """
        if self._process is not None:
            raise SpawnError("process already started")
        if not self.args:
            self._close_write_ends()
            raise SpawnError("empty command")

        try:
            self._process = subprocess.Popen(
                self.args,
                stdin=subprocess.DEVNULL,
                stdout=self._stdout_fd if self._stdout_fd is not None else subprocess.DEVNULL,
                stderr=self._stderr_fd if self._stderr_fd is not None else subprocess.DEVNULL,
            )
        except (OSError, ValueError) as e:
            raise SpawnError(f"cannot start {self.args[0]}: {e}") from e
        finally:
            self._close_write_ends()

        logger.debug(f"Started pid {self._process.pid}: {' '.join(self.args)}")

    def _close_write_ends(self) -> None:
        for fd in (self._stdout_fd, self._stderr_fd):
            if fd is not None:
                with contextlib.suppress(OSError):
                    os.close(fd)
        self._stdout_fd = None
        self._stderr_fd = None

    def wait(self) -> None:
        """Wait for the process to exit.

        Raises:
            RsyncError: If the process was never started.
            ExitError: If the process exited with a non-zero status.
        """
        if self._process is None:
            raise RsyncError("process not started")

        code = self._process.wait()
        if code != 0:
            raise ExitError(code)

    def terminate(self) -> None:
        """Ask a running process to stop (SIGTERM)."""
        if self._process is not None and self._process.poll() is None:
            logger.info(f"Terminating pid {self._process.pid}")
            self._process.terminate()


class Rsync(Command):
    """rsync invocation copying source to destination."""

    def __init__(
        self,
        source: str,
        destination: str,
        options: RsyncOptions | None = None,
        executable: str = "rsync",
    ) -> None:
        self.source = source
        self.destination = destination
        self.options = options or RsyncOptions()
        super().__init__([executable, *self.options.to_args(), source, destination])
