"""Cron helpers for the daily task sweep."""

from __future__ import annotations

from apscheduler.triggers.cron import CronTrigger

_FIELDS = ("minute", "hour", "day", "month", "day_of_week")


def build_cron_trigger(expression: str, timezone: str = "UTC") -> CronTrigger:
    """Build an APScheduler trigger from a 5-part cron expression."""
    parts = expression.strip().split()
    if len(parts) != 5:
        raise ValueError(
            f"Expected 5 fields (minute hour day month weekday), got {len(parts)}: {expression!r}"
        )
    return CronTrigger(timezone=timezone, **dict(zip(_FIELDS, parts, strict=True)))


def validate_cron_expression(expression: str) -> tuple[bool, str]:
    """Returns (is_valid, error_message)."""
    try:
        build_cron_trigger(expression)
    except (ValueError, KeyError) as exc:
        return False, f"Invalid cron expression: {exc}"
    return True, ""


def describe_cron(expression: str) -> str:
    """Short human description for the common daily/weekday forms."""
    parts = expression.strip().split()
    if len(parts) != 5:
        return expression
    minute, hour, day, month, dow = parts
    if day != "*" or month != "*":
        return expression
    try:
        time_str = f"{int(hour):d}:{int(minute):02d} UTC"
    except ValueError:
        return expression
    if dow == "*":
        return f"Every day at {time_str}"
    if dow == "1-5":
        return f"Weekdays at {time_str}"
    return expression
