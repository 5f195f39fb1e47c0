from __future__ import annotations

import logging
from datetime import date as date_type
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import require_staff
from app.models.reservation import Reservation
from app.models.user import User
from app.services.audit import log_action
from app.services.email_outbound import notify_reservation_status, send_reservation_confirmation_email
from app.services.reservation_stats import reservation_stats, reservation_summary, reservation_trend

router = APIRouter(prefix="/api/reservations", tags=["reservations"])
legacy_router = APIRouter(prefix="/api", tags=["reservations-legacy"])
logger = logging.getLogger(__name__)

ReservationStatus = Literal["pending", "confirmed", "cancelled", "completed"]

# Status changes that notify the guest, mapped to the email template variant.
STATUS_EMAILS = {"confirmed": "approved", "cancelled": "cancelled"}


class ReservationOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    date: str
    time: str
    guests: int
    reservationStatus: str
    notes: str
    createdAt: Optional[str] = None


class ReservationListOut(BaseModel):
    reservations: List[ReservationOut]


class ReservationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=3, max_length=40)
    guests: int = Field(..., ge=1, le=100)
    date: date_type
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    notes: str = Field("", max_length=2000)


class ReservationUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reservation_status: Optional[ReservationStatus] = Field(None, alias="reservationStatus")
    notes: Optional[str] = Field(None, max_length=2000)


class StatsOut(BaseModel):
    total: int
    pending: int
    completed: int


class TrendPoint(BaseModel):
    date: str
    count: int


def _reservation_to_dict(reservation: Reservation) -> dict:
    return {
        "id": reservation.id,
        "name": reservation.name,
        "email": reservation.email,
        "phone": reservation.phone,
        "date": reservation.date.isoformat() if reservation.date else "",
        "time": reservation.time,
        "guests": reservation.guests,
        "reservationStatus": reservation.reservation_status,
        "notes": reservation.notes or "",
        "createdAt": reservation.created_at.isoformat() if reservation.created_at else None,
    }


def _get_reservation_or_404(db: Session, reservation_id: int) -> Reservation:
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return reservation


def _set_status(db: Session, reservation: Reservation, new_status: str, user: User) -> str:
    previous = reservation.reservation_status
    reservation.reservation_status = new_status
    log_action(
        db,
        user_id=user.id,
        action="reservation_status_changed",
        entity_type="reservation",
        entity_id=reservation.id,
        meta={"from": previous, "to": new_status},
    )
    return previous


@router.get("", response_model=ReservationListOut)
def list_reservations(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    query = db.query(Reservation)
    if status_filter is not None:
        query = query.filter(Reservation.reservation_status == status_filter)
    reservations = query.order_by(Reservation.created_at.desc(), Reservation.id.desc()).all()
    return {"reservations": [_reservation_to_dict(item) for item in reservations]}


@router.post("", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
def create_reservation(payload: ReservationCreate, db: Session = Depends(get_db)):
    reservation = Reservation(
        name=payload.name.strip(),
        email=payload.email.strip().lower(),
        phone=payload.phone.strip(),
        guests=payload.guests,
        date=payload.date,
        time=payload.time,
        notes=payload.notes,
        reservation_status="pending",
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    logger.info("reservation booked id=%s guests=%s date=%s", reservation.id, reservation.guests, reservation.date)
    return _reservation_to_dict(reservation)


@router.get("/stats", response_model=StatsOut)
def get_reservation_stats(
    range_key: str = Query("all", alias="range"),
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    return reservation_stats(db, range_key)


@router.get("/summary", response_model=StatsOut)
def get_reservation_summary(
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    return reservation_summary(db)


@router.get("/trend", response_model=List[TrendPoint])
def get_reservation_trend(
    range_key: str = Query("all", alias="range"),
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    return reservation_trend(db, range_key)


@router.get("/{reservation_id}", response_model=ReservationOut)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    return _reservation_to_dict(_get_reservation_or_404(db, reservation_id))


@router.put("/{reservation_id}", response_model=ReservationOut)
def update_reservation(
    reservation_id: int,
    payload: ReservationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    reservation = _get_reservation_or_404(db, reservation_id)
    new_status = changes.get("reservation_status")
    if new_status is not None:
        _set_status(db, reservation, new_status, user)
    if "notes" in changes:
        reservation.notes = changes["notes"]

    db.commit()
    db.refresh(reservation)

    if new_status in STATUS_EMAILS:
        notify_reservation_status(db, reservation, STATUS_EMAILS[new_status])
    return _reservation_to_dict(reservation)


@router.delete("/{reservation_id}")
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    snapshot = _reservation_to_dict(reservation)
    db.delete(reservation)
    log_action(
        db,
        user_id=user.id,
        action="reservation_deleted",
        entity_type="reservation",
        entity_id=reservation_id,
        meta={"email": snapshot["email"], "date": snapshot["date"]},
    )
    db.commit()
    return {"message": "Reservation deleted", "reservation": snapshot}


def _approve(db: Session, reservation_id: int, user: User) -> dict:
    reservation = _get_reservation_or_404(db, reservation_id)
    _set_status(db, reservation, "confirmed", user)
    db.commit()
    db.refresh(reservation)

    result = notify_reservation_status(db, reservation, "approved")
    if result is not None and result.ok:
        return {"success": True, "message": "Reservation approved and email sent", "emailSent": True}
    return {"success": True, "message": "Reservation approved but email could not be sent", "emailSent": False}


@router.post("/{reservation_id}/approve")
def approve_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    return _approve(db, reservation_id, user)


@legacy_router.post("/approve/{reservation_id}")
def approve_reservation_legacy(
    reservation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    return _approve(db, reservation_id, user)


@router.post("/{reservation_id}/send-confirmation")
def send_confirmation(
    reservation_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_staff),
):
    reservation = _get_reservation_or_404(db, reservation_id)
    result = send_reservation_confirmation_email(
        db,
        email=reservation.email,
        name=reservation.name,
        date=reservation.date.isoformat(),
        time=reservation.time,
        guests=reservation.guests,
    )
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send email")
    return {"success": True, "message": "Confirmation email sent"}
