"""Notification channel types."""

import enum


class ChannelType(enum.StrEnum):
    EMAIL = "email"
    PUSH = "push"
    SMS = "sms"
    IN_APP = "in_app"
