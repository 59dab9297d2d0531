"""Celery workers: run scheduler passes outside the daemon."""

from __future__ import annotations

import asyncio
import logging

from celery import shared_task

from tickler.db.session import reset_engine

logger = logging.getLogger(__name__)


async def _run_tick() -> dict[str, list[str]]:
    from tickler.core.loop import build_scheduler

    report = await build_scheduler().tick()
    return {"delivered": report.delivered, "skipped": report.skipped, "failed": report.failed}


async def _run_sweep() -> list[str]:
    from tickler.core.loop import build_scheduler

    tasks = await build_scheduler().sweep_due_tasks()
    return [t.id for t in tasks]


@shared_task(name="reminders.tick")
def run_tick() -> dict[str, list[str]]:
    # Engine pools are bound to the loop they were created on.
    reset_engine()
    result = asyncio.run(_run_tick())
    logger.info(
        "Tick finished: %d delivered, %d skipped, %d failed",
        len(result["delivered"]),
        len(result["skipped"]),
        len(result["failed"]),
    )
    return result


@shared_task(name="reminders.sweep_due_tasks")
def sweep_due_tasks() -> list[str]:
    reset_engine()
    task_ids = asyncio.run(_run_sweep())
    logger.info("Due-task sweep finished: %d notices", len(task_ids))
    return task_ids
