"""Minimal Note and Task models.

Full CRUD for notes and tasks lives in the main application; these mappings
only carry the columns the reminder subsystem reads: the single reminder slot
and, for tasks, the status and due date used by the daily sweep.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tickler.db.session import Base
from tickler.errors import InvalidArgument
from tickler.models.base import TimestampMixin, ensure_utc, new_uuid
from tickler.models.reminder import Reminder, TargetKind


class TaskStatus(enum.StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReminderOwnerMixin:
    """Single-slot reminder association shared by notes and tasks."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("id", new_uuid())
        super().__init__(**kwargs)

    def attach_reminder(self, reminder: Reminder | None, now: datetime | None = None) -> Reminder:
        """Validate and attach a reminder, replacing any previous one."""
        if reminder is None:
            raise InvalidArgument("Reminder cannot be null")
        reminder.validate_schedulable(now)
        reminder.target_id = self.id
        reminder.target_kind = self.target_kind
        self.reminder = reminder
        self.reminder_id = reminder.id
        return reminder

    def teardown(self) -> None:
        """Detach the reminder so the flush deletes it along with the owner."""
        self.reminder = None
        self.reminder_id = None


class Note(ReminderOwnerMixin, Base, TimestampMixin):
    __tablename__ = "notes"
    target_kind = TargetKind.NOTE

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    reminder_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("reminders.id", ondelete="SET NULL"), unique=True
    )

    # The owner holds its reminder exclusively; orphans are deleted on flush.
    reminder: Mapped[Reminder | None] = relationship(
        lazy="selectin", cascade="all, delete-orphan", single_parent=True
    )

    def __repr__(self) -> str:
        return f"<Note {self.title[:30]!r} id={self.id!r}>"


class Task(ReminderOwnerMixin, Base, TimestampMixin):
    __tablename__ = "tasks"
    target_kind = TargetKind.TASK

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=TaskStatus.PENDING,
        nullable=False,
        index=True,
    )
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    reminder_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("reminders.id", ondelete="SET NULL"), unique=True
    )

    reminder: Mapped[Reminder | None] = relationship(
        lazy="selectin", cascade="all, delete-orphan", single_parent=True
    )

    @validates("due_at")
    def _due_at_utc(self, key: str, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    def __repr__(self) -> str:
        return f"<Task {self.id!r} status={self.status!r}>"
