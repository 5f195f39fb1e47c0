from __future__ import annotations

from sqlalchemy import func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.models.user import USER_ROLES, User
from app.services.auth import hash_password, password_looks_hashed


def ensure_users_table(engine: Engine) -> None:
    if not inspect(engine).has_table("users"):
        raise RuntimeError("Table 'users' not found. Start the API once or run create_all first.")


def find_user_by_email(db: Session, email: str) -> User | None:
    normalized = (email or "").strip().lower()
    return db.query(User).filter(func.lower(User.email) == normalized).first()


def _resolve_password_hash(password: str) -> str:
    if password_looks_hashed(password):
        return password
    return hash_password(password)


def upsert_user(
    db: Session,
    *,
    email: str,
    name: str,
    role: str,
    password: str | None,
) -> tuple[User, bool]:
    role = (role or "").strip().lower()
    if role not in USER_ROLES:
        raise ValueError(f"Invalid role '{role}'. Use one of: {', '.join(USER_ROLES)}.")

    existing = find_user_by_email(db, email)
    if existing:
        existing.name = name
        existing.role = role
        if password:
            existing.password_hash = _resolve_password_hash(password)
        db.commit()
        db.refresh(existing)
        return existing, False

    if not password:
        raise ValueError("A password is required to create a new user.")

    user = User(
        email=email.strip().lower(),
        name=name,
        password_hash=_resolve_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def reset_password(db: Session, *, email: str, password: str) -> User | None:
    user = find_user_by_email(db, email)
    if user is None:
        return None
    user.password_hash = _resolve_password_hash(password)
    db.commit()
    return user
