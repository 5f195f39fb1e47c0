from __future__ import annotations

import logging

from app.core.config import DASHBOARD_DATABASE_URL, IS_PROD, RESTAURANT_DATABASE_URL

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def validate_database_environment() -> None:
    if not IS_PROD:
        return
    for name, url in (
        ("DASHBOARD_DATABASE_URL", DASHBOARD_DATABASE_URL),
        ("RESTAURANT_DATABASE_URL", RESTAURANT_DATABASE_URL),
    ):
        if url.startswith("sqlite"):
            logger.critical("%s SQLite is forbidden in production (%s)", STARTUP_PREFIX, name)
            raise RuntimeError(f"SQLite is forbidden in production environment ({name})")
