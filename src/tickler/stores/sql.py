"""SQLAlchemy-backed reminder and task stores."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tickler.db.repository import Repository
from tickler.db.session import get_session_factory
from tickler.models.base import ensure_utc
from tickler.models.owners import Task, TaskStatus
from tickler.models.reminder import Reminder

logger = logging.getLogger(__name__)


class SqlReminderStore:
    """Reminder persistence. Every call runs in its own short session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        batch_size: int = 500,
    ) -> None:
        self._factory = session_factory or get_session_factory()
        self.batch_size = batch_size

    async def save(self, reminder: Reminder) -> Reminder:
        async with self._factory() as session:
            saved = await Repository(Reminder, session).add(reminder)
            await session.commit()
            return saved

    async def delete(self, reminder: Reminder) -> bool:
        async with self._factory() as session:
            result = await session.execute(delete(Reminder).where(Reminder.id == reminder.id))
            await session.commit()
        return bool(result.rowcount)

    async def find_by_id(self, reminder_id: str) -> Reminder | None:
        async with self._factory() as session:
            return await Repository(Reminder, session).get(reminder_id)

    async def find_pending(self, now: datetime) -> list[Reminder]:
        now = ensure_utc(now)
        async with self._factory() as session:
            result = await session.execute(
                select(Reminder)
                .where(Reminder.due_at <= now, Reminder.delivered.is_(False))
                .order_by(Reminder.due_at.asc())
                .limit(self.batch_size)
            )
            return list(result.scalars().all())

    async def claim_delivery(self, reminder_id: str, now: datetime) -> bool:
        now = ensure_utc(now)
        async with self._factory() as session:
            result = await session.execute(
                update(Reminder)
                .where(Reminder.id == reminder_id, Reminder.delivered.is_(False))
                .values(delivered=True, delivered_at=now)
            )
            await session.commit()
        claimed = result.rowcount == 1
        if not claimed:
            logger.debug("Delivery claim lost for reminder %s", reminder_id)
        return claimed

    async def release_delivery(self, reminder_id: str) -> None:
        async with self._factory() as session:
            await session.execute(
                update(Reminder)
                .where(Reminder.id == reminder_id, Reminder.delivered.is_(True))
                .values(delivered=False, delivered_at=None)
            )
            await session.commit()


class SqlTaskStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._factory = session_factory or get_session_factory()

    async def find_due_pending(self, now: datetime) -> list[Task]:
        now = ensure_utc(now)
        async with self._factory() as session:
            result = await session.execute(
                select(Task)
                .where(
                    Task.status == TaskStatus.PENDING,
                    Task.due_at.is_not(None),
                    Task.due_at <= now,
                )
                .order_by(Task.due_at.asc())
            )
            return list(result.scalars().all())
