"""BaseChannel interface and the channel registry."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tickler.errors import InvalidArgument
from tickler.models.channel import ChannelType

if TYPE_CHECKING:
    from tickler.config import Settings
    from tickler.models.reminder import Reminder

logger = logging.getLogger(__name__)

CHANNEL_UNREGISTERED = "channel_unregistered"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a single send. Channels report failures here instead of raising."""

    channel_type: str
    recipient: str
    ok: bool = True
    error: str | None = None

    @classmethod
    def failed(cls, channel_type: str, recipient: str, error: str) -> DeliveryResult:
        return cls(channel_type=channel_type, recipient=recipient, ok=False, error=error)

    @property
    def unregistered(self) -> bool:
        return not self.ok and self.error == CHANNEL_UNREGISTERED


class BaseChannel(ABC):
    """Abstract base for all notification channels."""

    channel_type: ChannelType

    @abstractmethod
    async def send(self, message: str, recipient: str) -> DeliveryResult:
        """Send a message to a recipient. Must not raise for transport errors."""
        ...

    def type(self) -> ChannelType:
        return self.channel_type

    async def health_check(self) -> bool:
        """Return True if the channel is usable.

        Subclasses should override with transport-specific checks.
        """
        return True

    def _ok(self, recipient: str) -> DeliveryResult:
        return DeliveryResult(channel_type=self.channel_type, recipient=recipient)

    def _failed(self, recipient: str, error: str) -> DeliveryResult:
        return DeliveryResult.failed(self.channel_type, recipient, error)


def format_message(reminder: Reminder) -> str:
    due = reminder.due_at_utc
    return f"Reminder: {reminder.body()} (scheduled for {due.isoformat() if due else 'unscheduled'})"


class ChannelRegistry:
    """Maps each channel type to one channel instance and routes sends.

    Populated once at startup and read-only afterwards.
    """

    def __init__(self) -> None:
        self._channels: dict[ChannelType, BaseChannel] = {}

    def register(self, channel: BaseChannel) -> None:
        self._channels[ChannelType(channel.channel_type)] = channel
        logger.debug("Registered channel: %s", channel.channel_type)

    def resolve(self, channel_type: ChannelType | str) -> BaseChannel | None:
        try:
            return self._channels.get(ChannelType(channel_type))
        except ValueError:
            return None

    def channel_types(self) -> list[ChannelType]:
        return list(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    async def dispatch(self, reminder: Reminder) -> DeliveryResult:
        """Format and send a reminder through its channel.

        An unregistered channel type is logged and reported as a failed
        result; it is never raised from here.
        """
        channel = self.resolve(reminder.channel)
        if channel is None:
            logger.warning(
                "No channel registered for type %s (reminder %s)", reminder.channel, reminder.id
            )
            return DeliveryResult.failed(
                str(reminder.channel), reminder.target_id, CHANNEL_UNREGISTERED
            )
        return await channel.send(format_message(reminder), reminder.target_id)

    async def broadcast(
        self, message: str, recipient: str, channel_types: Iterable[ChannelType | str]
    ) -> list[DeliveryResult]:
        results: list[DeliveryResult] = []
        for channel_type in channel_types:
            channel = self.resolve(channel_type)
            if channel is None:
                continue
            results.append(await channel.send(message, recipient))
        return results

    async def health(self) -> dict[str, bool]:
        status: dict[str, bool] = {}
        for channel_type, channel in self._channels.items():
            try:
                status[channel_type.value] = await channel.health_check()
            except Exception:
                logger.exception("Channel health check failed: %s", channel_type)
                status[channel_type.value] = False
        return status


def create_channel(channel_type: ChannelType | str | None, settings: Settings | None = None) -> BaseChannel:
    """Instantiate the channel implementation for a type."""
    if channel_type is None:
        raise InvalidArgument("Channel type cannot be null")
    try:
        kind = ChannelType(channel_type)
    except ValueError as exc:
        raise InvalidArgument(f"Unsupported channel type: {channel_type}") from exc

    if kind is ChannelType.EMAIL:
        from tickler.channels.email import EmailChannel

        return EmailChannel(settings)
    if kind is ChannelType.PUSH:
        from tickler.channels.push import PushChannel

        return PushChannel(settings)
    if kind is ChannelType.SMS:
        from tickler.channels.sms import SmsChannel

        return SmsChannel(settings)
    from tickler.channels.in_app import InAppChannel

    return InAppChannel(settings)


def create_channel_by_name(name: str | None, settings: Settings | None = None) -> BaseChannel:
    """Case-insensitive lookup, e.g. ``"Email"`` or ``"IN_APP"``."""
    if not name or not name.strip():
        raise InvalidArgument("Channel name cannot be null or empty")
    try:
        kind = ChannelType(name.strip().lower())
    except ValueError as exc:
        raise InvalidArgument(f"Unknown channel name: {name}") from exc
    return create_channel(kind, settings)


def build_registry(settings: Settings | None = None) -> ChannelRegistry:
    """Instantiate and register every enabled channel."""
    from tickler.config import get_settings

    settings = settings or get_settings()
    registry = ChannelRegistry()
    for name in settings.enabled_channels:
        try:
            registry.register(create_channel_by_name(name, settings))
        except ValueError:
            logger.warning("Ignoring unknown channel in enabled_channels: %s", name)
    logger.info("Channel registry built with %d channels", len(registry))
    return registry

