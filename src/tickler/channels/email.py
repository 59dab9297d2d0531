"""Email channel (SMTP)."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from tickler.channels.base import BaseChannel, DeliveryResult
from tickler.config import Settings, get_settings
from tickler.models.channel import ChannelType

logger = logging.getLogger(__name__)


class EmailChannel(BaseChannel):
    channel_type = ChannelType.EMAIL

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return bool(self.settings.email_smtp_host and self.settings.email_username)

    async def send(self, message: str, recipient: str) -> DeliveryResult:
        s = self.settings
        if not self.configured:
            logger.warning("Email channel not configured")
            return self._failed(recipient, "email channel not configured")

        msg = MIMEText(message)
        msg["Subject"] = s.email_subject
        msg["From"] = s.email_from or s.email_username
        msg["To"] = recipient

        try:
            await asyncio.get_running_loop().run_in_executor(None, self._smtp_send, msg, recipient)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Email send to %s failed: %s", recipient, exc)
            return self._failed(recipient, str(exc))
        logger.info("Email sent to %s", recipient)
        return self._ok(recipient)

    def _smtp_send(self, msg: MIMEText, to: str) -> None:
        s = self.settings
        with smtplib.SMTP(s.email_smtp_host, s.email_smtp_port) as server:
            server.starttls()
            server.login(s.email_username, s.email_password or "")
            server.sendmail(msg["From"], to, msg.as_string())

    async def health_check(self) -> bool:
        return self.configured
