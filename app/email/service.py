from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core import config
from app.email.base import EmailProvider, EmailSendResult, OutgoingEmail, record_send
from app.email.mock_provider import MockEmailProvider
from app.email.resend_provider import ResendEmailProvider
from app.email.smtp_provider import SmtpEmailProvider

logger = logging.getLogger(__name__)

TRANSPORTS = ("resend", "smtp")


class EmailService:
    def __init__(
        self,
        *,
        resend_provider: EmailProvider | None = None,
        smtp_provider: EmailProvider | None = None,
        mock_provider: EmailProvider | None = None,
    ) -> None:
        self._providers: dict[str, EmailProvider] = {
            "resend": resend_provider or ResendEmailProvider(),
            "smtp": smtp_provider or SmtpEmailProvider(),
        }
        self._mock_provider = mock_provider or MockEmailProvider()

    @property
    def mock_provider(self) -> EmailProvider:
        return self._mock_provider

    def _select_provider(self, transport: str) -> EmailProvider:
        if transport not in self._providers:
            raise ValueError(f"Unknown email transport: {transport}")
        provider = self._providers[transport]
        if provider.is_configured():
            return provider
        if config.IS_PROD:
            # Let the real provider fail loudly so the send is logged as failed.
            return provider
        logger.info("email transport %s not configured, using mock", transport)
        return self._mock_provider

    def send(
        self,
        db: Session,
        *,
        kind: str,
        message: OutgoingEmail,
        transport: str = "resend",
    ) -> EmailSendResult:
        provider = self._select_provider(transport)
        result = provider.send(message)
        record_send(
            db,
            provider=provider.name,
            kind=kind,
            recipients=message.to,
            subject=message.subject,
            result=result,
        )
        if result.ok:
            logger.info("email sent kind=%s provider=%s recipients=%s", kind, provider.name, len(message.to))
        else:
            logger.warning(
                "email failed kind=%s provider=%s recipients=%s error=%s",
                kind,
                provider.name,
                len(message.to),
                result.error,
            )
        return result


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
