"""Reminder daemon: owns the tick loop and the daily task sweep."""

from __future__ import annotations

import asyncio
import signal
import time

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tickler.channels.base import ChannelRegistry, build_registry
from tickler.config import Settings, get_settings
from tickler.core.cron import build_cron_trigger, describe_cron
from tickler.core.scheduler import ReminderScheduler
from tickler.stores.sql import SqlReminderStore, SqlTaskStore

logger = structlog.get_logger(__name__)


def build_scheduler(
    settings: Settings | None = None, registry: ChannelRegistry | None = None
) -> ReminderScheduler:
    """Wire the SQL stores and channel registry into a scheduler."""
    settings = settings or get_settings()
    return ReminderScheduler(
        reminders=SqlReminderStore(batch_size=settings.reminder_batch_size),
        tasks=SqlTaskStore(),
        registry=registry or build_registry(settings),
    )


class ReminderDaemon:
    """
    The reminder daemon.

    On startup:
      1. Builds the channel registry once
      2. Registers the daily due-task sweep on a cron trigger
      3. Enters the tick loop, delivering due reminders every interval
    """

    def __init__(
        self, settings: Settings | None = None, scheduler: ReminderScheduler | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.scheduler = scheduler or build_scheduler(self.settings)
        self.cron = AsyncIOScheduler(timezone="UTC")
        self._running = False
        self._stop = asyncio.Event()
        self._start_time: float = 0.0
        self.ticks = 0

    async def start(self) -> None:
        logger.info("Reminder daemon starting", tick_seconds=self.settings.reminder_tick_seconds)
        self._start_time = time.monotonic()

        health = await self.scheduler.registry.health()
        for name, healthy in health.items():
            if not healthy:
                logger.warning("Channel not ready", channel=name)

        self.cron.add_job(
            self._sweep,
            trigger=build_cron_trigger(self.settings.task_sweep_cron),
            id="sweep-due-tasks",
            replace_existing=True,
        )
        self.cron.start()
        logger.info("Due-task sweep scheduled", schedule=describe_cron(self.settings.task_sweep_cron))

        self._running = True
        try:
            await self._run_forever()
        finally:
            await self.shutdown()

    async def _run_forever(self) -> None:
        interval = self.settings.reminder_tick_seconds
        while self._running:
            await self.run_tick()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=interval)
            except TimeoutError:
                pass

    async def run_tick(self) -> None:
        try:
            report = await self.scheduler.tick()
        except Exception:
            # store unreachable for the listing query; retry next interval
            logger.exception("Reminder tick failed")
            return
        self.ticks += 1
        if report.total:
            logger.info(
                "Tick complete",
                delivered=len(report.delivered),
                skipped=len(report.skipped),
                failed=len(report.failed),
            )

    async def _sweep(self) -> None:
        try:
            tasks = await self.scheduler.sweep_due_tasks()
        except Exception:
            logger.exception("Due-task sweep failed")
            return
        logger.info("Due-task sweep complete", notices=len(tasks))

    @property
    def uptime_seconds(self) -> float:
        if not self._start_time:
            return 0.0
        return time.monotonic() - self._start_time

    async def shutdown(self) -> None:
        logger.info("Reminder daemon shutting down")
        self._running = False
        self._stop.set()
        if self.cron.running:
            self.cron.shutdown(wait=False)
        logger.info("Reminder daemon stopped", ticks=self.ticks)

    def handle_signal(self, sig: int) -> None:
        logger.info("Received signal, shutting down gracefully", signal=sig)
        self._running = False
        self._stop.set()


async def run_daemon() -> None:
    daemon = ReminderDaemon()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: daemon.handle_signal(s))
    await daemon.start()
