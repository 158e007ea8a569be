"""Core module - Options, line matching, and task records."""

from rsynctask.core.config import RsyncOptions
from rsynctask.core.matcher import PROGRESS_MATCHER, SPEED_MATCHER, Matcher
from rsynctask.core.types import TaskLog, TaskPhase, TaskState

__all__ = [
    # Config
    "RsyncOptions",
    # Matching
    "Matcher",
    "PROGRESS_MATCHER",
    "SPEED_MATCHER",
    # Types
    "TaskLog",
    "TaskPhase",
    "TaskState",
]
