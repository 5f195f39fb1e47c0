from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import require_director, require_staff
from app.email.base import EmailSendResult
from app.models.user import User
from app.routers.subscriptions import list_subscriber_emails
from app.services.audit import log_action
from app.services.email_outbound import (
    RESERVATION_EMAIL_STATUSES,
    send_marketing_email,
    send_offer_emails,
    send_reservation_confirmation_email,
    send_reservation_status_email,
)

router = APIRouter(prefix="/api/email", tags=["email"])
logger = logging.getLogger(__name__)


class ReservationEmailPayload(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None


class ConfirmationEmailPayload(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    guests: Optional[int] = Field(None, ge=1)


class MarketingEmailPayload(BaseModel):
    subject: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None


class OfferEmailPayload(BaseModel):
    subject: Optional[str] = Field(None, max_length=200)
    message: Optional[str] = None


def _require_fields(payload: BaseModel, *names: str) -> dict:
    values = {name: getattr(payload, name) for name in names}
    missing = [name for name, value in values.items() if value is None or (isinstance(value, str) and not value.strip())]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required fields: {', '.join(missing)}",
        )
    return {name: value.strip() if isinstance(value, str) else value for name, value in values.items()}


def _send_failed(result: EmailSendResult) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Failed to send email", "error": result.error},
    )


@router.post("/reservation")
def send_reservation_email(
    payload: ReservationEmailPayload,
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    fields = _require_fields(payload, "email", "name", "status")
    if fields["status"] not in RESERVATION_EMAIL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status. Use one of: {', '.join(RESERVATION_EMAIL_STATUSES)}",
        )

    result = send_reservation_status_email(db, email=fields["email"], name=fields["name"], status=fields["status"])
    if not result.ok:
        return _send_failed(result)
    return {"message": "Email sent successfully"}


@router.post("/confirm")
def send_confirmation_email(
    payload: ConfirmationEmailPayload,
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    fields = _require_fields(payload, "email", "name", "date", "time", "guests")
    result = send_reservation_confirmation_email(db, **fields)
    if not result.ok:
        return _send_failed(result)
    return {"success": True}


@router.post("/marketing")
def send_marketing(
    payload: MarketingEmailPayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    fields = _require_fields(payload, "subject", "content")
    recipients = list_subscriber_emails(db)
    if not recipients:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No subscribers found")

    result = send_marketing_email(db, recipients=recipients, subject=fields["subject"], content=fields["content"])
    log_action(
        db,
        user_id=user.id,
        action="marketing_email_sent" if result.ok else "marketing_email_failed",
        entity_type="email",
        meta={"subject": fields["subject"], "recipients": len(recipients)},
    )
    db.commit()
    if not result.ok:
        return _send_failed(result)
    return {"message": f"Marketing email sent to {len(recipients)} subscribers", "recipients": len(recipients)}


@router.post("/offers")
def send_offers(
    payload: OfferEmailPayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_director),
):
    fields = _require_fields(payload, "subject", "message")
    recipients = list_subscriber_emails(db)
    if not recipients:
        return {"message": "No subscribers found", "sent": 0, "failed": 0}

    summary = send_offer_emails(db, recipients=recipients, subject=fields["subject"], message=fields["message"])
    log_action(
        db,
        user_id=user.id,
        action="offer_emails_sent",
        entity_type="email",
        meta={"subject": fields["subject"], "sent": summary.sent, "failed": summary.failed},
    )
    db.commit()
    logger.info("offer emails sent=%s failed=%s", summary.sent, summary.failed)
    return {"message": "Offer emails sent successfully!", "sent": summary.sent, "failed": summary.failed}
