from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.orm import Session

from app.email.base import EmailSendResult, OutgoingEmail
from app.email.service import get_email_service
from app.services.email_templates import render_email

logger = logging.getLogger(__name__)

RESERVATION_EMAIL_STATUSES = ("approved", "cancelled")


@dataclass
class BulkSendSummary:
    sent: int
    failed: int


def send_reservation_status_email(
    db: Session,
    *,
    email: str,
    name: str,
    status: str,
    date: str | None = None,
    time: str | None = None,
) -> EmailSendResult:
    if status not in RESERVATION_EMAIL_STATUSES:
        raise ValueError(f"Unsupported reservation email status: {status}")
    schedule = f" for {date} at {time}" if date and time else ""
    subject, html = render_email(f"reservation_{status}", {"name": name, "schedule": schedule})
    return get_email_service().send(
        db,
        kind=f"reservation_{status}",
        message=OutgoingEmail(to=[email], subject=subject, html=html),
    )


def send_reservation_confirmation_email(
    db: Session,
    *,
    email: str,
    name: str,
    date: str,
    time: str,
    guests: int | str,
) -> EmailSendResult:
    subject, html = render_email(
        "reservation_confirmation",
        {"name": name, "date": date, "time": time, "guests": guests},
    )
    return get_email_service().send(
        db,
        kind="reservation_confirmation",
        message=OutgoingEmail(to=[email], subject=subject, html=html),
    )


def notify_reservation_status(db: Session, reservation, status: str) -> EmailSendResult | None:
    """Best-effort notification after a status change; never raises."""
    try:
        return send_reservation_status_email(
            db,
            email=reservation.email,
            name=reservation.name,
            status=status,
            date=reservation.date.isoformat() if reservation.date else None,
            time=reservation.time,
        )
    except Exception:
        logger.exception("reservation email failed reservation_id=%s status=%s", reservation.id, status)
        db.rollback()
        return None


def send_marketing_email(db: Session, *, recipients: Sequence[str], subject: str, content: str) -> EmailSendResult:
    rendered_subject, html = render_email("marketing", {"subject": subject, "content": content})
    return get_email_service().send(
        db,
        kind="marketing",
        message=OutgoingEmail(to=list(recipients), subject=rendered_subject, html=html, bcc=True),
        transport="smtp",
    )


def send_offer_emails(db: Session, *, recipients: Sequence[str], subject: str, message: str) -> BulkSendSummary:
    rendered_subject, html = render_email("offer", {"subject": subject, "message": message})
    service = get_email_service()
    sent = failed = 0
    for recipient in recipients:
        result = service.send(
            db,
            kind="offer",
            message=OutgoingEmail(to=[recipient], subject=rendered_subject, html=html),
        )
        if result.ok:
            sent += 1
        else:
            failed += 1
    return BulkSendSummary(sent=sent, failed=failed)
