"""Celery application configuration.

An alternative to the in-process daemon: beat triggers the tick and the
daily sweep, workers run them.
"""

from celery import Celery
from celery.schedules import crontab

from tickler.config import get_settings


def _crontab(expression: str) -> crontab:
    minute, hour, day, month, dow = expression.split()
    return crontab(minute=minute, hour=hour, day_of_month=day, month_of_year=month, day_of_week=dow)


def create_celery_app() -> Celery:
    settings = get_settings()

    app = Celery("tickler")
    app.config_from_object(
        {
            "broker_url": settings.effective_celery_broker,
            "result_backend": settings.effective_celery_backend,
            "task_serializer": "json",
            "result_serializer": "json",
            "accept_content": ["json"],
            "timezone": "UTC",
            "enable_utc": True,
            "task_acks_late": True,
            "worker_prefetch_multiplier": 1,
            "task_routes": {
                "reminders.tick": {"queue": "reminders"},
                "reminders.sweep_due_tasks": {"queue": "reminders"},
            },
            "beat_schedule": {
                "reminders-tick": {
                    "task": "reminders.tick",
                    "schedule": float(settings.reminder_tick_seconds),
                },
                "reminders-sweep-due-tasks": {
                    "task": "reminders.sweep_due_tasks",
                    "schedule": _crontab(settings.task_sweep_cron),
                },
            },
        }
    )
    app.autodiscover_tasks(["tickler.queue"], related_name="workers")
    return app


celery_app = create_celery_app()
