#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.core.config import IS_DEV  # noqa: E402
from app.core.database import SessionLocal, create_all_tables, get_dashboard_engine  # noqa: E402
from app.models.user import USER_ROLES  # noqa: E402
from app.services.user_bootstrap import ensure_users_table, upsert_user  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update a dashboard user.")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--password", help="Password (required when creating)")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--role", default="employee", choices=USER_ROLES, help="Dashboard role")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before writing the user",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.create_tables:
        create_all_tables()
    try:
        ensure_users_table(get_dashboard_engine())
    except RuntimeError as exc:
        print(str(exc))
        return 1

    db = SessionLocal()
    try:
        user, created = upsert_user(
            db,
            email=args.email,
            name=args.name,
            role=args.role,
            password=args.password,
        )
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()

    action = "created" if created else "updated"
    print(f"User {action}: email={user.email} role={user.role}")
    if IS_DEV:
        password_info = args.password if args.password else "<unchanged>"
        print(f"DEV summary -> Email: {user.email} | Role: {user.role} | Password: {password_info}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
