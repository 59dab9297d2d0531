"""SMS channel: sends text messages through an HTTP SMS gateway."""

from __future__ import annotations

import logging

import httpx

from tickler.channels.base import BaseChannel, DeliveryResult
from tickler.config import Settings, get_settings
from tickler.models.channel import ChannelType

logger = logging.getLogger(__name__)

# Gateways commonly cap a single message body; longer text is truncated.
MAX_SMS_LENGTH = 1600


class SmsChannel(BaseChannel):
    channel_type = ChannelType.SMS

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        s = self.settings
        if not s.sms_gateway_url or not s.sms_account_sid:
            logger.warning("SMS channel not configured")
            return self._failed(recipient, "sms gateway not configured")

        data = {"To": recipient, "Body": message[:MAX_SMS_LENGTH]}
        if s.sms_from_number:
            data["From"] = s.sms_from_number

        try:
            async with httpx.AsyncClient(timeout=s.http_timeout_seconds) as client:
                resp = await client.post(
                    s.sms_gateway_url,
                    data=data,
                    auth=(s.sms_account_sid, s.sms_auth_token or ""),
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("SMS to %s failed: %s", recipient, exc)
            return self._failed(recipient, str(exc))
        return self._ok(recipient)

    async def health_check(self) -> bool:
        return bool(self.settings.sms_gateway_url and self.settings.sms_account_sid)
