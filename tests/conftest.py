"""Shared fixtures: an in-memory reminder store and recording channels."""

from __future__ import annotations

import asyncio
import copy
from datetime import UTC, datetime, timedelta

import pytest

from tickler.channels.base import BaseChannel, ChannelRegistry, DeliveryResult
from tickler.models.channel import ChannelType
from tickler.models.reminder import Reminder, TargetKind

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class MemoryReminderStore:
    """Dict-backed store. Hands out copies so callers never share rows."""

    def __init__(self) -> None:
        self.rows: dict[str, Reminder] = {}
        self._lock = asyncio.Lock()
        self.saves = 0

    async def save(self, reminder: Reminder) -> Reminder:
        self.saves += 1
        self.rows[reminder.id] = _clone(reminder)
        return reminder

    async def delete(self, reminder: Reminder) -> bool:
        return self.rows.pop(reminder.id, None) is not None

    async def find_by_id(self, reminder_id: str) -> Reminder | None:
        row = self.rows.get(reminder_id)
        return _clone(row) if row else None

    async def find_pending(self, now: datetime) -> list[Reminder]:
        return [_clone(r) for r in self.rows.values() if r.is_due(now)]

    async def claim_delivery(self, reminder_id: str, now: datetime) -> bool:
        async with self._lock:
            row = self.rows.get(reminder_id)
            if row is None or row.delivered:
                return False
            row.delivered = True
            row.delivered_at = now
            return True

    async def release_delivery(self, reminder_id: str) -> None:
        async with self._lock:
            row = self.rows.get(reminder_id)
            if row is not None:
                row.delivered = False
                row.delivered_at = None


class MemoryTaskStore:
    def __init__(self, tasks=None) -> None:
        self.tasks = list(tasks or [])

    async def find_due_pending(self, now: datetime):
        return [t for t in self.tasks if t.due_at is not None and t.due_at <= now]


class RecordingChannel(BaseChannel):
    """Records every send; yields to the loop once so races can interleave."""

    def __init__(self, channel_type: ChannelType, fail_with: str | None = None) -> None:
        self.channel_type = channel_type
        self.fail_with = fail_with
        self.sent: list[tuple[str, str]] = []

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        await asyncio.sleep(0)
        self.sent.append((message, recipient))
        if self.fail_with:
            return self._failed(recipient, self.fail_with)
        return self._ok(recipient)


def _clone(reminder: Reminder) -> Reminder:
    return Reminder(
        id=reminder.id,
        target_id=reminder.target_id,
        target_kind=reminder.target_kind,
        due_at=copy.copy(reminder.due_at),
        channel=reminder.channel,
        message=reminder.message,
        delivered=reminder.delivered,
        delivered_at=reminder.delivered_at,
    )


def make_reminder(
    due_in: timedelta = timedelta(hours=1),
    channel: ChannelType = ChannelType.EMAIL,
    message: str | None = "Call the dentist",
    now: datetime = NOW,
    **kwargs,
) -> Reminder:
    return Reminder(
        target_id=kwargs.pop("target_id", "note-1"),
        target_kind=kwargs.pop("target_kind", TargetKind.NOTE),
        due_at=kwargs.pop("due_at", now + due_in),
        channel=channel,
        message=message,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    from tickler.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryReminderStore:
    return MemoryReminderStore()


@pytest.fixture
def task_store() -> MemoryTaskStore:
    return MemoryTaskStore()


@pytest.fixture
def channels() -> dict[ChannelType, RecordingChannel]:
    return {t: RecordingChannel(t) for t in ChannelType}


@pytest.fixture
def registry(channels) -> ChannelRegistry:
    reg = ChannelRegistry()
    for ch in channels.values():
        reg.register(ch)
    return reg


@pytest.fixture
def scheduler(store, task_store, registry, clock):
    from tickler.core.scheduler import ReminderScheduler

    return ReminderScheduler(store, task_store, registry, clock=clock)
