"""Push channel: posts notifications to an HTTP push gateway."""

from __future__ import annotations

import logging

import httpx

from tickler.channels.base import BaseChannel, DeliveryResult
from tickler.config import Settings, get_settings
from tickler.models.channel import ChannelType

logger = logging.getLogger(__name__)


class PushChannel(BaseChannel):
    channel_type = ChannelType.PUSH

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        s = self.settings
        if not s.push_gateway_url:
            logger.warning("Push channel not configured")
            return self._failed(recipient, "push gateway not configured")

        headers = {}
        if s.push_gateway_token:
            headers["Authorization"] = f"Bearer {s.push_gateway_token}"
        payload = {"recipient": recipient, "title": s.app_name, "body": message}

        try:
            async with httpx.AsyncClient(timeout=s.http_timeout_seconds) as client:
                resp = await client.post(s.push_gateway_url, json=payload, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Push to %s failed: %s", recipient, exc)
            return self._failed(recipient, str(exc))
        return self._ok(recipient)

    async def health_check(self) -> bool:
        return bool(self.settings.push_gateway_url)
