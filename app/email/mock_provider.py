from __future__ import annotations

import logging
import uuid

from app.email.base import EmailProvider, EmailSendResult, OutgoingEmail, mask_email

logger = logging.getLogger(__name__)


class MockEmailProvider(EmailProvider):
    name = "mock"

    def __init__(self) -> None:
        self.outbox: list[OutgoingEmail] = []

    def is_configured(self) -> bool:
        return True

    def send(self, message: OutgoingEmail) -> EmailSendResult:
        self.outbox.append(message)
        logger.info(
            "mock email recipients=%s first=%s subject=%s",
            len(message.to),
            mask_email(message.to[0]) if message.to else None,
            message.subject,
        )
        return EmailSendResult(status="sent", provider_message_id=f"mock-{uuid.uuid4().hex[:10]}")
