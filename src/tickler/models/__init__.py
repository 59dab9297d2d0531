"""SQLAlchemy models package."""

from tickler.models.base import TimestampMixin
from tickler.models.channel import ChannelType
from tickler.models.owners import Note, Task, TaskStatus
from tickler.models.reminder import Reminder, TargetKind

__all__ = [
    "TimestampMixin",
    "ChannelType",
    "Reminder",
    "TargetKind",
    "Note",
    "Task",
    "TaskStatus",
]
