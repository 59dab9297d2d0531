"""Tests for tickler.channels.base (ChannelRegistry, BaseChannel, factory)."""

import logging
from datetime import timedelta

import pytest
from conftest import NOW, RecordingChannel, make_reminder

from tickler.channels.base import (
    CHANNEL_UNREGISTERED,
    BaseChannel,
    ChannelRegistry,
    DeliveryResult,
    build_registry,
    create_channel,
    create_channel_by_name,
    format_message,
)
from tickler.channels.email import EmailChannel
from tickler.channels.in_app import InAppChannel
from tickler.channels.push import PushChannel
from tickler.channels.sms import SmsChannel
from tickler.config import Settings
from tickler.errors import InvalidArgument
from tickler.models.channel import ChannelType


class BrokenHealthChannel(BaseChannel):
    channel_type = ChannelType.PUSH

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        return self._ok(recipient)

    async def health_check(self) -> bool:
        raise RuntimeError("gateway down")


# ── register / resolve ────────────────────────────────────────────────────────


def test_register_and_resolve():
    reg = ChannelRegistry()
    ch = RecordingChannel(ChannelType.EMAIL)
    reg.register(ch)
    assert reg.resolve(ChannelType.EMAIL) is ch
    assert reg.resolve("email") is ch
    assert len(reg) == 1


def test_resolve_missing_and_unknown():
    reg = ChannelRegistry()
    assert reg.resolve(ChannelType.SMS) is None
    assert reg.resolve("carrier-pigeon") is None


def test_register_same_type_last_write_wins():
    reg = ChannelRegistry()
    first = RecordingChannel(ChannelType.PUSH)
    second = RecordingChannel(ChannelType.PUSH)
    reg.register(first)
    reg.register(second)
    assert reg.resolve(ChannelType.PUSH) is second
    assert reg.channel_types() == [ChannelType.PUSH]


def test_channel_reports_its_type():
    assert RecordingChannel(ChannelType.IN_APP).type() is ChannelType.IN_APP


# ── dispatch ──────────────────────────────────────────────────────────────────


def test_format_message():
    r = make_reminder(message="Water the plants")
    assert format_message(r) == (
        f"Reminder: Water the plants (scheduled for {(NOW + timedelta(hours=1)).isoformat()})"
    )


async def test_dispatch_routes_to_reminder_channel(registry, channels):
    r = make_reminder(channel=ChannelType.SMS, target_id="user-42")

    result = await registry.dispatch(r)

    assert result.ok
    assert channels[ChannelType.SMS].sent == [(format_message(r), "user-42")]
    assert channels[ChannelType.EMAIL].sent == []


async def test_dispatch_unregistered_warns_without_sending(caplog):
    reg = ChannelRegistry()
    email = RecordingChannel(ChannelType.EMAIL)
    reg.register(email)
    r = make_reminder(channel=ChannelType.SMS)

    with caplog.at_level(logging.WARNING, logger="tickler.channels.base"):
        result = await reg.dispatch(r)

    assert not result.ok
    assert result.error == CHANNEL_UNREGISTERED
    assert result.unregistered
    assert email.sent == []
    assert "No channel registered for type sms" in caplog.text


async def test_dispatch_passes_through_channel_failure():
    reg = ChannelRegistry()
    reg.register(RecordingChannel(ChannelType.EMAIL, fail_with="smtp timeout"))
    result = await reg.dispatch(make_reminder())
    assert not result.ok
    assert not result.unregistered
    assert result.error == "smtp timeout"


# ── broadcast ─────────────────────────────────────────────────────────────────


async def test_broadcast_skips_unregistered_channels():
    reg = ChannelRegistry()
    email = RecordingChannel(ChannelType.EMAIL)
    push = RecordingChannel(ChannelType.PUSH)
    reg.register(email)
    reg.register(push)

    results = await reg.broadcast(
        "Standup in 5", "user-1", [ChannelType.EMAIL, ChannelType.SMS, ChannelType.PUSH]
    )

    assert [r.channel_type for r in results] == [ChannelType.EMAIL, ChannelType.PUSH]
    assert email.sent == [("Standup in 5", "user-1")]
    assert push.sent == [("Standup in 5", "user-1")]


async def test_broadcast_empty_list():
    assert await ChannelRegistry().broadcast("x", "y", []) == []


# ── health ────────────────────────────────────────────────────────────────────


async def test_health_reports_failures_as_unhealthy():
    reg = ChannelRegistry()
    reg.register(RecordingChannel(ChannelType.EMAIL))
    reg.register(BrokenHealthChannel())
    assert await reg.health() == {"email": True, "push": False}


# ── factory ───────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("kind", "cls"),
    [
        (ChannelType.EMAIL, EmailChannel),
        (ChannelType.PUSH, PushChannel),
        (ChannelType.SMS, SmsChannel),
        (ChannelType.IN_APP, InAppChannel),
    ],
)
def test_create_channel(kind, cls):
    ch = create_channel(kind, Settings())
    assert isinstance(ch, cls)
    assert ch.type() is kind


@pytest.mark.parametrize("name", ["Email", "PUSH", " sms ", "in_app", "IN_APP"])
def test_create_channel_by_name_case_insensitive(name):
    assert create_channel_by_name(name, Settings()).type() == name.strip().lower()


@pytest.mark.parametrize("name", [None, "", "   "])
def test_create_channel_by_name_empty(name):
    with pytest.raises(InvalidArgument, match="cannot be null or empty"):
        create_channel_by_name(name)


def test_create_channel_by_name_unknown():
    with pytest.raises(InvalidArgument, match="Unknown channel name: fax"):
        create_channel_by_name("fax")


def test_create_channel_none():
    with pytest.raises(InvalidArgument):
        create_channel(None)


def test_build_registry_from_settings_ignores_unknown():
    reg = build_registry(Settings(enabled_channels=["email", "fax", "in_app"]))
    assert reg.channel_types() == [ChannelType.EMAIL, ChannelType.IN_APP]


def test_build_registry_defaults_to_all_channels():
    reg = build_registry(Settings())
    assert set(reg.channel_types()) == set(ChannelType)
