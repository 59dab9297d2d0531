"""Tests for tickler.core.cron."""

import pytest
from apscheduler.triggers.cron import CronTrigger

from tickler.core.cron import build_cron_trigger, describe_cron, validate_cron_expression


def test_build_cron_trigger_daily():
    trigger = build_cron_trigger("0 9 * * *")
    assert isinstance(trigger, CronTrigger)
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["hour"] == "9"
    assert fields["minute"] == "0"


@pytest.mark.parametrize("expr", ["", "0 9 * *", "0 9 * * * *"])
def test_build_cron_trigger_wrong_field_count(expr):
    with pytest.raises(ValueError, match="Expected 5 fields"):
        build_cron_trigger(expr)


def test_validate_cron_expression():
    assert validate_cron_expression("*/15 * * * *") == (True, "")
    ok, err = validate_cron_expression("99 9 * * *")
    assert not ok
    assert err.startswith("Invalid cron expression")


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ("0 9 * * *", "Every day at 9:00 UTC"),
        ("30 7 * * 1-5", "Weekdays at 7:30 UTC"),
        ("0 9 1 * *", "0 9 1 * *"),
        ("*/5 * * * *", "*/5 * * * *"),
        ("bogus", "bogus"),
    ],
)
def test_describe_cron(expr, expected):
    assert describe_cron(expr) == expected
