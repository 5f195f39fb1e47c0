from __future__ import annotations

import logging

import httpx

from app.core import config
from app.email.base import EmailProvider, EmailSendResult, OutgoingEmail, mask_email

logger = logging.getLogger(__name__)


class ResendEmailProvider(EmailProvider):
    """Transactional email through the Resend HTTP API."""

    name = "resend"
    TIMEOUT_SECONDS = 20.0

    def is_configured(self) -> bool:
        return bool(config.RESEND_API_KEY)

    def send(self, message: OutgoingEmail) -> EmailSendResult:
        if not self.is_configured():
            return EmailSendResult(status="failed", error="RESEND_API_KEY is not configured")

        if message.bcc:
            payload = {"from": config.RESEND_FROM, "to": [config.RESEND_FROM], "bcc": message.to}
        else:
            payload = {"from": config.RESEND_FROM, "to": message.to}
        payload.update({"subject": message.subject, "html": message.html})

        headers = {
            "Authorization": f"Bearer {config.RESEND_API_KEY}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self.TIMEOUT_SECONDS) as client:
                response = client.post(config.RESEND_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("resend request failed to=%s error=%s", mask_email(message.to[0]), exc)
            return EmailSendResult(status="failed", error=str(exc) or exc.__class__.__name__)

        body = _safe_json(response)
        if response.status_code >= 400:
            error = body.get("message") or body.get("error") or f"HTTP {response.status_code}"
            logger.warning(
                "resend rejected email to=%s status=%s error=%s",
                mask_email(message.to[0]),
                response.status_code,
                error,
            )
            return EmailSendResult(status="failed", error=str(error))

        return EmailSendResult(status="sent", provider_message_id=body.get("id"))


def _safe_json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
