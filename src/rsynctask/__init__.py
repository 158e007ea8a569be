"""rsynctask - Run rsync and follow its progress."""

from rsynctask.core import RsyncOptions, TaskLog, TaskPhase, TaskState
from rsynctask.rsync import Command, ExitError, PipeError, Rsync, RsyncError, SpawnError
from rsynctask.task import Task

__version__ = "0.1.0"

__all__ = [
    "Command",
    "ExitError",
    "PipeError",
    "Rsync",
    "RsyncError",
    "RsyncOptions",
    "SpawnError",
    "Task",
    "TaskLog",
    "TaskPhase",
    "TaskState",
]
