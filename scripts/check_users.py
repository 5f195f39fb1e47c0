#!/usr/bin/env python3
"""List dashboard users and flag accounts whose stored password is not a bcrypt hash."""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.core.database import SessionLocal, get_dashboard_engine  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth import password_looks_hashed  # noqa: E402
from app.services.user_bootstrap import ensure_users_table  # noqa: E402


def main() -> int:
    try:
        ensure_users_table(get_dashboard_engine())
    except RuntimeError as exc:
        print(str(exc))
        return 1

    db = SessionLocal()
    try:
        users = db.query(User).order_by(User.id.asc()).all()
    finally:
        db.close()

    if not users:
        print("No users found.")
        return 1

    unhashed = 0
    for user in users:
        hashed = password_looks_hashed(user.password_hash or "")
        if not hashed:
            unhashed += 1
        print(f"{user.id:>4}  {user.email:<32} {user.role:<9} hashed={'yes' if hashed else 'NO'}")
    return 1 if unhashed else 0


if __name__ == "__main__":
    raise SystemExit(main())
