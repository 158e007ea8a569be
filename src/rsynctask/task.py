"""High-level rsync task with live progress.

This module provides:
- Task: Runs rsync and tracks its progress and raw output
- process_stdout, process_stderr: Reader loops run on worker threads
- parse_remain_total, parse_speed: Field extraction from matched lines

Usage:
    task = Task.create("src/", "host:dst/", RsyncOptions(delete=True))
    thread = threading.Thread(target=task.run)
    thread.start()
    while thread.is_alive():
        print(task.state().percent)
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator, Sequence
from dataclasses import replace
from typing import IO, TYPE_CHECKING, Any, AnyStr

from rsynctask.core.config import RsyncOptions
from rsynctask.core.matcher import PROGRESS_MATCHER, SPEED_MATCHER
from rsynctask.core.types import TaskLog, TaskPhase, TaskState
from rsynctask.rsync import Rsync

if TYPE_CHECKING:
    from rsynctask.rsync import Command

logger = logging.getLogger(__name__)

MAX_PERCENT = 100.0
MIN_DIVIDER = 1.0


class Task:
    """Runs one rsync process and exposes its progress.

    Progress and raw output are updated by two reader threads while
    run() blocks; state() and log() may be called from any thread at
    any time and return copies. A task runs once.

    Args:
        process: Object providing stdout_pipe(), stderr_pipe(), start(),
            wait() and close(), such as a Command.
    """

    def __init__(self, process: Command) -> None:
        self.process = process
        self._state = TaskState()
        self._log = TaskLog()
        self._phase = TaskPhase.CREATED
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        source: str,
        destination: str,
        options: RsyncOptions | None = None,
        executable: str = "rsync",
    ) -> Task:
        """Create a task copying source to destination.

        Human-readable output, partial transfers, progress and archive
        mode are always enabled: progress parsing depends on the lines
        they produce.

        Args:
            source: rsync source argument.
            destination: rsync destination argument.
            options: Additional options; not modified.
            executable: rsync binary to run.

        Returns:
            A new task, not yet running.
        """
        options = replace(
            options or RsyncOptions(),
            human_readable=True,
            partial=True,
            progress=True,
            archive=True,
        )
        return cls(Rsync(source, destination, options, executable=executable))

    @property
    def phase(self) -> TaskPhase:
        """Get the current lifecycle phase."""
        with self._lock:
            return self._phase

    def state(self) -> TaskState:
        """Get a snapshot of the progress state."""
        with self._lock:
            return replace(self._state)

    def log(self) -> TaskLog:
        """Get a snapshot of the raw stdout and stderr output."""
        with self._lock:
            return replace(self._log)

    def _set_phase(self, phase: TaskPhase) -> None:
        with self._lock:
            self._phase = phase

    def run(self) -> None:
        """Run rsync and block until it exits and its output is drained.

        Raises:
            RuntimeError: If the task has already been run.
            PipeError: If an output stream cannot be acquired.
            SpawnError: If rsync cannot be started.
            ExitError: If rsync exits with a non-zero status.
        """
        with self._lock:
            if self._phase is not TaskPhase.CREATED:
                raise RuntimeError(f"Task already run (phase: {self._phase.value})")
            self._phase = TaskPhase.RUNNING

        try:
            stdout, stderr = self._acquire_streams()
        except Exception:
            self._set_phase(TaskPhase.FAILED)
            raise

        readers = [
            threading.Thread(
                target=process_stdout,
                args=(self, stdout),
                name="rsync-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=process_stderr,
                args=(self, stderr),
                name="rsync-stderr",
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()

        try:
            self.process.start()
        except Exception as e:
            logger.warning(f"rsync failed to start: {e}")
            # Closing the streams ends the readers
            _close_stream(stdout)
            _close_stream(stderr)
            for reader in readers:
                reader.join()
            self._set_phase(TaskPhase.SPAWN_FAILED)
            raise

        self._set_phase(TaskPhase.DRAINING)
        for reader in readers:
            reader.join()

        try:
            self.process.wait()
        except Exception as e:
            logger.info(f"rsync failed: {e}")
            raise
        else:
            logger.info("rsync finished")
        finally:
            _close_stream(stdout)
            _close_stream(stderr)
            self._set_phase(TaskPhase.EXITED)

    def _acquire_streams(self) -> tuple[IO[Any], IO[Any]]:
        stderr = self.process.stderr_pipe()
        try:
            stdout = self.process.stdout_pipe()
        except Exception:
            _close_stream(stderr)
            self.process.close()
            raise
        return stdout, stderr

    def _record_stdout(self, line: str) -> None:
        """Apply one stdout line to the progress state and log."""
        with self._lock:
            state = self._state
            if PROGRESS_MATCHER.match(line):
                groups = PROGRESS_MATCHER.extract(line)
                state.remaining, state.total = parse_remain_total(groups[0] if groups else "")
                copied = float(state.total - state.remaining)
                state.percent = copied / max(float(state.total), MIN_DIVIDER) * MAX_PERCENT

            if SPEED_MATCHER.match(line):
                occurrences = SPEED_MATCHER.extract_all(line, 2)
                speed = parse_speed(occurrences)
                if not speed and len(occurrences) == 1:
                    # A plain "120.00kB/s ... to-chk=50/100" line must still
                    # report its speed; parse_speed alone would give "".
                    speed = occurrences[0][1]
                state.speed = speed

            self._log.stdout += line + "\n"

    def _record_stderr(self, line: str) -> None:
        with self._lock:
            self._log.stderr += line + "\n"


def process_stdout(task: Task, stream: IO[Any]) -> None:
    """Parse progress lines from rsync's stdout until end of stream.

    Extracts data from lines such as:
            999,999 99%  999.99kB/s    0:00:59 (xfr#9, to-chk=999/9999)
    """
    logger.debug("stdout reader started")
    for line in _read_lines(stream):
        task._record_stdout(line)
    logger.debug("stdout reader finished")


def process_stderr(task: Task, stream: IO[Any]) -> None:
    """Collect rsync's stderr until end of stream."""
    logger.debug("stderr reader started")
    for line in _read_lines(stream):
        task._record_stderr(line)
    logger.debug("stderr reader finished")


def parse_remain_total(value: str) -> tuple[int, int]:
    """Split "REMAIN/TOTAL" into two integers.

    Malformed input never raises: a missing separator gives (0, 0) and
    a part that is not an integer gives 0 for that part.
    """
    parts = value.split("/")
    if len(parts) < 2:
        return 0, 0
    return _to_int(parts[0]), _to_int(parts[1])


def parse_speed(groups: Sequence[Sequence[str]]) -> str:
    """Pick the speed from the second match of SPEED_MATCHER.extract_all.

    Returns:
        The first capture group of the second match, or "" if there is
        no second match.
    """
    if len(groups) < 2 or len(groups[1]) < 2:
        return ""
    return groups[1][1]


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _read_lines(stream: IO[AnyStr]) -> Iterator[str]:
    """Yield complete lines, each ending with its newline.

    Stops at end of stream or on any read error, including reads from
    a stream closed by another thread. Text after the last newline is
    not yielded.
    """
    while True:
        try:
            raw = stream.readline()
        except (OSError, ValueError):
            return
        if not raw:
            return
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        if not line.endswith("\n"):
            return
        yield line


def _close_stream(stream: IO[Any]) -> None:
    with contextlib.suppress(OSError, ValueError):
        stream.close()
