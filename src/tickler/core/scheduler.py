"""Reminder scheduler: schedule, cancel, deliver, and the periodic passes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from tickler.channels.base import ChannelRegistry, DeliveryResult
from tickler.errors import (
    AlreadyDelivered,
    ChannelUnregistered,
    DeliveryFailed,
    InvalidArgument,
    ReminderNotFound,
)
from tickler.models.base import utcnow
from tickler.models.channel import ChannelType
from tickler.models.owners import Task
from tickler.models.reminder import Reminder
from tickler.stores.base import ReminderStore, TaskStore

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Per-reminder outcome of one tick."""

    delivered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.delivered) + len(self.skipped) + len(self.failed)


class ReminderScheduler:
    """Core orchestrator for reminder delivery.

    ``deliver_notification`` is the idempotency boundary. The delivered flag
    is claimed with a single conditional update in the store before any
    channel is contacted, so a tick and a direct call racing on the same
    reminder produce exactly one send. A failed send releases the claim.
    """

    def __init__(
        self,
        reminders: ReminderStore,
        tasks: TaskStore,
        registry: ChannelRegistry,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.reminders = reminders
        self.tasks = tasks
        self.registry = registry
        self.clock = clock

    async def schedule_reminder(self, reminder: Reminder | None) -> Reminder:
        if reminder is None:
            logger.warning("Attempted to schedule null reminder")
            raise InvalidArgument("Reminder cannot be null")
        reminder.validate_schedulable(self.clock())
        saved = await self.reminders.save(reminder)
        logger.info("Scheduled reminder %s for %s", saved.id, saved.due_at)
        return saved

    async def cancel_reminder(self, reminder_id: str | None) -> None:
        """Delete a reminder from the store (hard removal)."""
        if not reminder_id:
            logger.warning("Attempted to cancel reminder with null ID")
            raise InvalidArgument("Reminder ID cannot be null")
        reminder = await self.reminders.find_by_id(reminder_id)
        if reminder is None:
            logger.warning("Reminder not found: %s", reminder_id)
            raise ReminderNotFound(reminder_id)
        await self.reminders.delete(reminder)
        logger.info("Cancelled reminder %s", reminder_id)

    async def reschedule_reminder(self, reminder_id: str | None, new_time: datetime) -> Reminder:
        if not reminder_id:
            raise InvalidArgument("Reminder ID cannot be null")
        reminder = await self.reminders.find_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFound(reminder_id)
        reminder.reschedule(new_time, self.clock())
        saved = await self.reminders.save(reminder)
        logger.info("Rescheduled reminder %s to %s", reminder_id, new_time)
        return saved

    async def deliver_notification(self, reminder: Reminder | None) -> DeliveryResult:
        if reminder is None:
            logger.warning("Attempted to deliver null reminder")
            raise InvalidArgument("Reminder cannot be null")
        if reminder.delivered:
            logger.warning("Attempted to deliver already-delivered reminder: %s", reminder.id)
            raise AlreadyDelivered(reminder.id)

        now = self.clock()
        if not await self.reminders.claim_delivery(reminder.id, now):
            if await self.reminders.find_by_id(reminder.id) is None:
                raise ReminderNotFound(reminder.id)
            raise AlreadyDelivered(reminder.id)

        try:
            result = await self.registry.dispatch(reminder)
        except Exception:
            await self._release(reminder.id)
            raise

        if not result.ok:
            await self._release(reminder.id)
            if result.unregistered:
                raise ChannelUnregistered(str(reminder.channel), reminder.id)
            raise DeliveryFailed(str(reminder.channel), result.error or "unknown error", reminder.id)

        reminder.mark_delivered(now)
        logger.info("Delivered reminder %s via %s channel", reminder.id, reminder.channel)
        return result

    async def _release(self, reminder_id: str) -> None:
        # Never mask the delivery error with a release error.
        try:
            await self.reminders.release_delivery(reminder_id)
        except Exception:
            logger.exception(
                "Could not release delivery claim for reminder %s; it stays marked delivered",
                reminder_id,
            )

    async def tick(self) -> TickReport:
        """Deliver every due, undelivered reminder. Never raises per item."""
        report = TickReport()
        pending = await self.reminders.find_pending(self.clock())
        if pending:
            logger.debug("Found %d pending reminders to deliver", len(pending))

        for reminder in pending:
            try:
                await self.deliver_notification(reminder)
            except (AlreadyDelivered, ReminderNotFound) as exc:
                logger.info("Skipping reminder %s: %s", reminder.id, exc)
                report.skipped.append(reminder.id)
            except Exception as exc:
                logger.error("Failed to deliver reminder %s: %s", reminder.id, exc, exc_info=True)
                report.failed.append(reminder.id)
            else:
                report.delivered.append(reminder.id)
        return report

    async def sweep_due_tasks(self) -> list[Task]:
        """Post an in-app notice for each overdue pending task with no reminder.

        Observational only: no Reminder is created.
        """
        due = await self.tasks.find_due_pending(self.clock())
        if not due:
            logger.debug("No due tasks found for daily notification")
            return []

        unreminded = [t for t in due if t.reminder_id is None]
        logger.info("Sending notices for %d due tasks", len(unreminded))
        in_app = self.registry.resolve(ChannelType.IN_APP)
        for task in unreminded:
            notice = f"Task due: {task.title}"
            if in_app is None:
                logger.info("IN_APP notification: %s", notice)
                continue
            try:
                result = await in_app.send(notice, task.id)
            except Exception:
                logger.exception("Due-task notice failed for task %s", task.id)
                continue
            if not result.ok:
                logger.warning("Due-task notice for task %s not sent: %s", task.id, result.error)
        return unreminded
