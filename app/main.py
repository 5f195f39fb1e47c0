import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import CORS_ORIGINS
from app.core.database import SessionLocal, create_all_tables
from app.core.errors import register_exception_handlers
from app.core.logging_setup import configure_logging
from app.core.startup_checks import validate_database_environment
from app.middleware.observability import ObservabilityMiddleware
from app.middleware.session import DashboardSessionMiddleware
import app.models  # registers every model on its metadata before create_all

from app.services.user_bootstrap import find_user_by_email, reset_password, upsert_user
from app.routers.auth import router as auth_router
from app.routers.reservations import legacy_router as reservations_legacy_router, router as reservations_router
from app.routers.uploads import router as uploads_router
from app.routers.menu import router as menu_router
from app.routers.staff import router as staff_router
from app.routers.reviews import router as reviews_router
from app.routers.subscriptions import router as subscriptions_router
from app.routers.email import router as email_router
from app.routers.internal_metrics import router as internal_metrics_router

configure_logging()

logger = logging.getLogger(__name__)
BOOTSTRAP_PREFIX = "[DIRECTOR_BOOTSTRAP]"
DEFAULT_DIRECTOR_EMAIL = "director@maloof.com"
DEFAULT_DIRECTOR_NAME = "Director"
RESET_DIRECTOR_PASSWORD = os.getenv("RESET_DIRECTOR_PASSWORD", "").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Maloof's Restaurant Dashboard API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(DashboardSessionMiddleware)
app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)


def _director_settings() -> tuple[str, str, str]:
    email = os.getenv("DEV_DIRECTOR_EMAIL", DEFAULT_DIRECTOR_EMAIL).strip() or DEFAULT_DIRECTOR_EMAIL
    name = os.getenv("DEV_DIRECTOR_NAME", DEFAULT_DIRECTOR_NAME).strip() or DEFAULT_DIRECTOR_NAME
    password = os.getenv("DEV_DIRECTOR_PASSWORD", "").strip()
    return email, name, password


def _bootstrap_initial_director() -> None:
    email, name, password = _director_settings()
    if not password:
        logger.warning("%s skipped: configure DEV_DIRECTOR_PASSWORD.", BOOTSTRAP_PREFIX)
        return

    db = SessionLocal()
    try:
        existing = find_user_by_email(db, email)
        if existing:
            logger.info("%s exists id=%s email=%s", BOOTSTRAP_PREFIX, existing.id, existing.email)
            return
        director, _ = upsert_user(db, email=email, name=name, role="director", password=password)
        logger.info("%s created id=%s email=%s", BOOTSTRAP_PREFIX, director.id, director.email)
    except Exception:
        logger.exception("%s ERROR bootstrap failed", BOOTSTRAP_PREFIX)
        raise
    finally:
        db.close()


def _reset_director_password_if_enabled() -> None:
    if not RESET_DIRECTOR_PASSWORD:
        return

    email, _, password = _director_settings()
    if not password:
        logger.info("%s reset enabled but DEV_DIRECTOR_PASSWORD missing", BOOTSTRAP_PREFIX)
        return

    db = SessionLocal()
    try:
        if reset_password(db, email=email, password=password) is None:
            logger.error("%s director not found for reset email=%s", BOOTSTRAP_PREFIX, email)
            return
        logger.info("%s director password reset success", BOOTSTRAP_PREFIX)
    except Exception:
        logger.exception("%s reset failed", BOOTSTRAP_PREFIX)
        raise
    finally:
        db.close()


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        create_all_tables()
        _reset_director_password_if_enabled()
        _bootstrap_initial_director()
    except Exception:
        logger.exception("%s ERROR startup failed", BOOTSTRAP_PREFIX)
        raise


# Routers
app.include_router(auth_router)
app.include_router(reservations_router)
app.include_router(reservations_legacy_router)
app.include_router(uploads_router)
app.include_router(menu_router)
app.include_router(staff_router)
app.include_router(reviews_router)
app.include_router(subscriptions_router)
app.include_router(email_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
