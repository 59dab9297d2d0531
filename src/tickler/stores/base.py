"""Store interfaces consumed by the scheduler."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from tickler.models.owners import Task
from tickler.models.reminder import Reminder


class ReminderStore(Protocol):
    async def save(self, reminder: Reminder) -> Reminder: ...

    async def delete(self, reminder: Reminder) -> bool: ...

    async def find_by_id(self, reminder_id: str) -> Reminder | None: ...

    async def find_pending(self, now: datetime) -> list[Reminder]:
        """Reminders with ``due_at <= now`` and ``delivered`` false."""
        ...

    async def claim_delivery(self, reminder_id: str, now: datetime) -> bool:
        """Atomically flip ``delivered`` false→true. True only for the winner."""
        ...

    async def release_delivery(self, reminder_id: str) -> None:
        """Undo a claim after a failed send."""
        ...


class TaskStore(Protocol):
    async def find_due_pending(self, now: datetime) -> list[Task]: ...
