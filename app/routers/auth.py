# app/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.deps import get_current_user
from app.models.user import User
from app.services.audit import log_action
from app.services.auth import create_access_token, verify_password
from app.services.login_attempts import check_login_lock, clear_login_attempts, register_failed_login
from app.services.session import (
    build_session_cookie_options,
    clear_session_cookie,
    create_session_token,
    set_session_cookie,
)
from app.services.user_bootstrap import find_user_by_email

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)

TOO_MANY_ATTEMPTS = "Too many attempts. Try again in a few minutes."
INVALID_CREDENTIALS = "Invalid credentials"


class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str


def _user_to_dict(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


def _authenticate(db: Session, email: str, password: str) -> User:
    """Credential check shared by the cookie and token flows, with lockout bookkeeping."""
    normalized_email = email.strip().lower()

    locked, _ = check_login_lock(db, normalized_email)
    user = find_user_by_email(db, normalized_email)
    if locked:
        log_action(
            db,
            user_id=user.id if user else 0,
            action="login_locked",
            entity_type="user",
            entity_id=user.id if user else None,
            meta={"email": normalized_email},
        )
        db.commit()
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=TOO_MANY_ATTEMPTS)

    if not user or not verify_password(password, user.password_hash):
        _, locked_after = register_failed_login(db, normalized_email)
        log_action(
            db,
            user_id=user.id if user else 0,
            action="login_failed",
            entity_type="user",
            entity_id=user.id if user else None,
            meta={"email": normalized_email},
        )
        if locked_after:
            log_action(
                db,
                user_id=user.id if user else 0,
                action="login_locked",
                entity_type="user",
                entity_id=user.id if user else None,
                meta={"email": normalized_email},
            )
        db.commit()
        if locked_after:
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=TOO_MANY_ATTEMPTS)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    clear_login_attempts(db, normalized_email)
    log_action(db, user_id=user.id, action="login_success", entity_type="user", entity_id=user.id)
    db.commit()
    return user


@router.post("/login", response_model=UserRead)
def login(
    payload: LoginPayload,
    response: Response,
    request: Request,
    db: Session = Depends(get_db),
):
    user = _authenticate(db, payload.email, payload.password)

    token = create_session_token({"user_id": user.id, "role": user.role})
    cookie_options = build_session_cookie_options(request)
    logger.info(
        "[AUTH_COOKIE] setting session domain=%s samesite=%s secure=%s",
        cookie_options.get("domain") or "host-only",
        cookie_options["samesite"],
        cookie_options["secure"],
    )
    set_session_cookie(response, token, request)
    return _user_to_dict(user)


@router.post("/logout")
def logout(response: Response, request: Request):
    clear_session_cookie(response, request)
    return {"ok": True}


@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return _user_to_dict(user)


@router.post("/token")
def issue_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = _authenticate(db, form_data.username, form_data.password)
    access_token = create_access_token(user.id, extra={"role": user.role})
    return {"access_token": access_token, "token_type": "bearer"}
