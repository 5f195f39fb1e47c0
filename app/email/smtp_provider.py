from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from app.core import config
from app.email.base import EmailProvider, EmailSendResult, OutgoingEmail

logger = logging.getLogger(__name__)


class SmtpEmailProvider(EmailProvider):
    """Bulk marketing mail through an authenticated SMTP account (Gmail by default)."""

    name = "smtp"
    TIMEOUT_SECONDS = 30.0

    def is_configured(self) -> bool:
        return bool(config.GMAIL_USER and config.GMAIL_PASS)

    def _build_message(self, message: OutgoingEmail) -> EmailMessage:
        mail = EmailMessage()
        mail["From"] = formataddr((config.RESTAURANT_NAME, config.GMAIL_USER))
        mail["To"] = config.GMAIL_USER if message.bcc else ", ".join(message.to)
        mail["Subject"] = message.subject
        mail["Message-ID"] = make_msgid()
        mail.set_content("This message requires an HTML capable email client.")
        mail.add_alternative(message.html, subtype="html")
        return mail

    def send(self, message: OutgoingEmail) -> EmailSendResult:
        if not self.is_configured():
            return EmailSendResult(status="failed", error="GMAIL_USER/GMAIL_PASS are not configured")

        # Bcc recipients only travel in the envelope, never in the headers.
        envelope = [config.GMAIL_USER, *message.to] if message.bcc else list(message.to)
        try:
            # Header values with CR/LF raise ValueError while the message is built.
            mail = self._build_message(message)
            with smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, timeout=self.TIMEOUT_SECONDS) as smtp:
                smtp.login(config.GMAIL_USER, config.GMAIL_PASS)
                smtp.send_message(mail, from_addr=config.GMAIL_USER, to_addrs=envelope)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            logger.warning("smtp send failed recipients=%s error=%s", len(message.to), exc)
            return EmailSendResult(status="failed", error=str(exc) or exc.__class__.__name__)

        return EmailSendResult(status="sent", provider_message_id=mail["Message-ID"])
