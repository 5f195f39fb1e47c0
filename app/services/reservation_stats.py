from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.core.database import utcnow
from app.models.reservation import Reservation

STATS_RANGES = ("today", "week", "month", "all")


def _one_month_back(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def resolve_range(range_key: str | None, now: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Return the ``[start, end)`` creation window for a range key; unknown keys mean no filter."""
    now = now or utcnow()
    key = (range_key or "all").strip().lower()
    if key == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=1)
    if key == "week":
        return now - timedelta(days=7), None
    if key == "month":
        return _one_month_back(now), None
    return None, None


def _apply_window(query: Query, start: Optional[datetime], end: Optional[datetime]) -> Query:
    if start is not None:
        query = query.filter(Reservation.created_at >= start)
    if end is not None:
        query = query.filter(Reservation.created_at < end)
    return query


def _count(db: Session, start, end, status: str | None = None) -> int:
    query = _apply_window(db.query(func.count(Reservation.id)), start, end)
    if status is not None:
        query = query.filter(Reservation.reservation_status == status)
    return int(query.scalar() or 0)


def reservation_stats(db: Session, range_key: str | None, now: Optional[datetime] = None) -> dict[str, int]:
    start, end = resolve_range(range_key, now)
    return {
        "total": _count(db, start, end),
        "pending": _count(db, start, end, "pending"),
        "completed": _count(db, start, end, "completed"),
    }


def reservation_summary(db: Session) -> dict[str, int]:
    # Dashboard cards treat confirmed bookings as done.
    return {
        "total": _count(db, None, None),
        "pending": _count(db, None, None, "pending"),
        "completed": _count(db, None, None, "confirmed"),
    }


def reservation_trend(db: Session, range_key: str | None, now: Optional[datetime] = None) -> list[dict]:
    start, end = resolve_range(range_key, now)
    day = func.date(Reservation.created_at)
    query = _apply_window(db.query(day.label("day"), func.count(Reservation.id)), start, end)
    rows = query.group_by(day).order_by(day.asc()).all()
    return [{"date": str(row_day)[:10], "count": int(count)} for row_day, count in rows if row_day is not None]
