import os

# Settings are read at import time, so they must be in place before any app module loads.
os.environ["ENV"] = "test"
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("DASHBOARD_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("RESTAURANT_DATABASE_URL", "sqlite+pysqlite:///:memory:")
for _name in ("RESEND_API_KEY", "GMAIL_USER", "GMAIL_PASS", "DEV_DIRECTOR_PASSWORD"):
    os.environ[_name] = ""

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.core.database import DashboardBase, RestaurantBase  # noqa: E402
from app.core.metrics import request_metrics  # noqa: E402
from app.email import service as email_service_module  # noqa: E402
from app.email.mock_provider import MockEmailProvider  # noqa: E402
from app.email.service import EmailService  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DashboardBase.metadata.create_all(bind=engine)
    RestaurantBase.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def mock_mailer(monkeypatch):
    """Routes every send through an inspectable in-memory provider."""
    provider = MockEmailProvider()
    monkeypatch.setattr(email_service_module, "_email_service", EmailService(mock_provider=provider))
    return provider


@pytest.fixture(autouse=True)
def _reset_metrics():
    request_metrics.reset()
    yield
    request_metrics.reset()
