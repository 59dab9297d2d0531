"""Reminder error taxonomy.

Public scheduler operations raise these directly; the periodic tick and the
daily sweep catch them per item and log.
"""

from __future__ import annotations


class ReminderError(Exception):
    """Base class for all reminder subsystem errors."""

    def __init__(self, message: str, reminder_id: str | None = None) -> None:
        super().__init__(message)
        self.reminder_id = reminder_id


class InvalidArgument(ReminderError, ValueError):
    """A required reminder or identifier was missing."""


class InvalidSchedule(ReminderError, ValueError):
    """The requested due time is unset or not strictly in the future."""


class AlreadyDelivered(ReminderError):
    """The reminder was already delivered in its current episode."""

    def __init__(self, reminder_id: str | None = None) -> None:
        super().__init__(f"Reminder already delivered: {reminder_id}", reminder_id)


class ReminderNotFound(ReminderError, LookupError):
    def __init__(self, reminder_id: str | None = None) -> None:
        super().__init__(f"Reminder not found: {reminder_id}", reminder_id)


class ChannelUnregistered(ReminderError):
    """No channel is registered for the reminder's channel type."""

    def __init__(self, channel_type: str, reminder_id: str | None = None) -> None:
        super().__init__(f"No channel registered for type {channel_type}", reminder_id)
        self.channel_type = channel_type


class DeliveryFailed(ReminderError):
    """A registered channel reported a transport failure."""

    def __init__(self, channel_type: str, error: str, reminder_id: str | None = None) -> None:
        super().__init__(f"Delivery via {channel_type} failed: {error}", reminder_id)
        self.channel_type = channel_type
        self.error = error
