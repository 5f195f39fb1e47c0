from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import DASHBOARD_DATABASE_URL, RESTAURANT_DATABASE_URL

# Dashboard database: users, staff, menu, reviews and back-office logs.
DashboardBase = declarative_base()
# Restaurant database: customer-facing reservations and newsletter subscriptions.
RestaurantBase = declarative_base()


def _build_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_dashboard_engine() -> Engine:
    return _build_engine(DASHBOARD_DATABASE_URL)


@lru_cache(maxsize=1)
def get_restaurant_engine() -> Engine:
    return _build_engine(RESTAURANT_DATABASE_URL)


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        binds={
            DashboardBase: get_dashboard_engine(),
            RestaurantBase: get_restaurant_engine(),
        },
    )


def SessionLocal() -> Session:
    return _session_factory()()


def create_all_tables() -> None:
    DashboardBase.metadata.create_all(bind=get_dashboard_engine())
    RestaurantBase.metadata.create_all(bind=get_restaurant_engine())


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how every ``created_at`` column is stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
