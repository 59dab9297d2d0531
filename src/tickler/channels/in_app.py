"""In-app channel: publishes notifications over Redis pub/sub.

The web tier subscribes to ``{prefix}:{recipient}`` and forwards messages to
the user's open WebSocket sessions.
"""

from __future__ import annotations

import json
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from tickler.channels.base import BaseChannel, DeliveryResult
from tickler.config import Settings, get_settings
from tickler.models.base import utcnow
from tickler.models.channel import ChannelType

logger = logging.getLogger(__name__)


class InAppChannel(BaseChannel):
    channel_type = ChannelType.IN_APP

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client: aioredis.Redis | None = None

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self.settings.redis_url, encoding="utf-8", decode_responses=True
            )
        return self._client

    def redis_channel(self, recipient: str) -> str:
        return f"{self.settings.in_app_channel_prefix}:{recipient}"

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        payload = {
            "type": "notification",
            "recipient": recipient,
            "content": message,
            "sent_at": utcnow().isoformat(),
        }
        try:
            receivers = await self._get_client().publish(
                self.redis_channel(recipient), json.dumps(payload)
            )
        except (RedisError, OSError) as exc:
            logger.warning("In-app publish for %s failed: %s", recipient, exc)
            return self._failed(recipient, str(exc))
        logger.debug("In-app notification for %s reached %s subscribers", recipient, receivers)
        return self._ok(recipient)

    async def health_check(self) -> bool:
        try:
            return bool(await self._get_client().ping())
        except (RedisError, OSError):
            return False
