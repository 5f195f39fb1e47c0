from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from sqlalchemy.orm import Session

from app.models.email_message_log import EmailMessageLog


@dataclass
class OutgoingEmail:
    to: list[str]
    subject: str
    html: str
    # Recipients go in Bcc and the sender in To, so subscribers never see each other.
    bcc: bool = False


@dataclass
class EmailSendResult:
    status: str
    provider_message_id: str | None = None
    error: str | None = None
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "sent"


class EmailProvider(Protocol):
    name: str

    def is_configured(self) -> bool:
        ...

    def send(self, message: OutgoingEmail) -> EmailSendResult:
        ...


def mask_email(address: str | None) -> str | None:
    if not address or "@" not in address:
        return address
    local, _, domain = address.partition("@")
    if len(local) <= 2:
        return f"{local[:1]}***@{domain}"
    return f"{local[:2]}***@{domain}"


def record_send(
    db: Session,
    *,
    provider: str,
    kind: str,
    recipients: Sequence[str],
    subject: str,
    result: EmailSendResult,
) -> EmailMessageLog:
    log_entry = EmailMessageLog(
        provider=provider,
        kind=kind,
        to_email=recipients[0] if len(recipients) == 1 else None,
        recipients_count=len(recipients),
        subject=subject,
        status=result.status,
        error=result.error,
        provider_message_id=result.provider_message_id,
    )
    db.add(log_entry)
    db.commit()
    return log_entry
