"""Reminder model: a scheduled notification attached to a note or task."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from tickler.db.session import Base
from tickler.errors import AlreadyDelivered, InvalidSchedule
from tickler.models.base import TimestampMixin, ensure_utc, new_uuid, utcnow
from tickler.models.channel import ChannelType


class TargetKind(enum.StrEnum):
    NOTE = "note"
    TASK = "task"


class Reminder(Base, TimestampMixin):
    """A schedulable reminder.

    ``target_id``/``target_kind`` are a weak reference to the owning note or
    task. The scheduler only records them for message context and uses
    ``target_id`` as the recipient identifier; it never loads the owner.

    Two cancel operations exist:

    * :meth:`cancel` resets ``delivered`` so the reminder fires again on the
      next tick while ``due_at`` is still due (snooze/undo).
    * ``ReminderScheduler.cancel_reminder`` deletes the row (hard removal).
    """

    __tablename__ = "reminders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    target_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    target_kind: Mapped[TargetKind] = mapped_column(
        Enum(TargetKind, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    channel: Mapped[ChannelType] = mapped_column(
        Enum(ChannelType, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    message: Mapped[str | None] = mapped_column(Text)
    delivered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("id", new_uuid())
        kwargs.setdefault("delivered", False)
        super().__init__(**kwargs)

    @validates("due_at", "delivered_at")
    def _store_as_utc(self, key: str, value: datetime | None) -> datetime | None:
        # DateTime columns keep wall-clock time only; keep every instant in UTC.
        return ensure_utc(value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def validate_schedulable(self, now: datetime | None = None) -> None:
        """Raise InvalidSchedule unless ``due_at`` is strictly after now."""
        _require_future(self.due_at, now, self.id, "Scheduled time must be in the future")

    def cancel(self) -> None:
        """Reset the delivered flag. The reminder stays in the store."""
        self.delivered = False
        self.delivered_at = None

    def reschedule(self, new_time: datetime | None, now: datetime | None = None) -> None:
        _require_future(new_time, now, self.id, "New time must be in the future")
        self.due_at = new_time
        self.delivered = False
        self.delivered_at = None

    def mark_delivered(self, now: datetime | None = None) -> None:
        if self.delivered:
            raise AlreadyDelivered(self.id)
        self.delivered = True
        self.delivered_at = now or utcnow()

    # ------------------------------------------------------------------

    @property
    def due_at_utc(self) -> datetime | None:
        return ensure_utc(self.due_at)

    def is_due(self, now: datetime | None = None) -> bool:
        due = self.due_at_utc
        return due is not None and not self.delivered and due <= (now or utcnow())

    def body(self) -> str:
        """Message text, falling back to the owner reference when unset."""
        if self.message:
            return self.message
        return f"{self.target_kind} {self.target_id}"

    def __repr__(self) -> str:
        return f"<Reminder id={self.id!r} due_at={self.due_at!r} delivered={self.delivered!r}>"


def _require_future(
    when: datetime | None, now: datetime | None, reminder_id: str | None, message: str
) -> None:
    when = ensure_utc(when)
    if when is None or when <= ensure_utc(now or utcnow()):
        raise InvalidSchedule(message, reminder_id)
