"""Shared types for rsynctask.

This module defines the records exposed by a running task:
- TaskPhase: Lifecycle of a single task
- TaskState: Progress parsed from rsync output
- TaskLog: Raw stdout and stderr text
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class TaskPhase(str, Enum):
    """Lifecycle phase of a task.

    CREATED -> RUNNING -> SPAWN_FAILED, or
    CREATED -> RUNNING -> DRAINING -> EXITED.
    FAILED is reached when the output streams cannot be acquired.
    """

    CREATED = "created"
    RUNNING = "running"
    SPAWN_FAILED = "spawn_failed"
    DRAINING = "draining"
    EXITED = "exited"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if the task can no longer change phase."""
        return self in (TaskPhase.SPAWN_FAILED, TaskPhase.EXITED, TaskPhase.FAILED)


@dataclass
class TaskState:
    """Progress information about an rsync task.

    Attributes:
        remaining: Files left to check, from the last "to-chk" fragment.
        total: Total files to check, from the last "to-chk" fragment.
        speed: Last transfer speed as printed by rsync (e.g. "120.00kB/s").
        percent: Share of files already checked, 0-100.
    """

    remaining: int = 0
    total: int = 0
    speed: str = ""
    percent: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)


@dataclass
class TaskLog:
    """Raw output of an rsync task, one line per newline."""

    stdout: str = ""
    stderr: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-serializable dictionary."""
        return {"stdout": self.stdout, "stderr": self.stderr}
