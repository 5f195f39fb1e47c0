from datetime import date, datetime

from app.models.reservation import Reservation
from app.services.reservation_stats import reservation_stats, reservation_trend, resolve_range

NOW = datetime(2026, 3, 31, 15, 45)


def _add(db, created_at: datetime, status: str = "pending") -> None:
    db.add(
        Reservation(
            name="Guest",
            email="guest@example.com",
            phone="555-0100",
            guests=2,
            date=date(2026, 4, 10),
            time="20:00",
            reservation_status=status,
            notes="",
            created_at=created_at,
        )
    )


def test_resolve_range_windows():
    assert resolve_range("today", NOW) == (datetime(2026, 3, 31), datetime(2026, 4, 1))
    assert resolve_range("week", NOW) == (datetime(2026, 3, 24, 15, 45), None)
    # February has no 31st; the window clamps to the last day of the month.
    assert resolve_range("month", NOW) == (datetime(2026, 2, 28, 15, 45), None)
    assert resolve_range("all", NOW) == (None, None)
    assert resolve_range("fortnight", NOW) == (None, None)
    assert resolve_range(None, NOW) == (None, None)


def test_month_window_crosses_year_boundary():
    start, _ = resolve_range("month", datetime(2026, 1, 15, 9, 0))

    assert start == datetime(2025, 12, 15, 9, 0)


def test_stats_count_only_the_requested_window(db_session):
    _add(db_session, datetime(2026, 3, 31, 9, 0))
    _add(db_session, datetime(2026, 3, 31, 11, 0), status="completed")
    _add(db_session, datetime(2026, 3, 27, 12, 0), status="completed")
    _add(db_session, datetime(2026, 1, 5, 12, 0))
    db_session.commit()

    assert reservation_stats(db_session, "today", NOW) == {"total": 2, "pending": 1, "completed": 1}
    assert reservation_stats(db_session, "week", NOW) == {"total": 3, "pending": 1, "completed": 2}
    assert reservation_stats(db_session, "all", NOW) == {"total": 4, "pending": 2, "completed": 2}


def test_trend_groups_by_creation_day(db_session):
    _add(db_session, datetime(2026, 3, 30, 9, 0))
    _add(db_session, datetime(2026, 3, 31, 9, 0))
    _add(db_session, datetime(2026, 3, 31, 18, 0))
    db_session.commit()

    assert reservation_trend(db_session, "week", NOW) == [
        {"date": "2026-03-30", "count": 1},
        {"date": "2026-03-31", "count": 2},
    ]


def test_stats_on_empty_table_are_zero(db_session):
    assert reservation_stats(db_session, "month", NOW) == {"total": 0, "pending": 0, "completed": 0}
    assert reservation_trend(db_session, "all", NOW) == []
