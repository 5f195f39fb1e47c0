# app/deps.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.request_context import set_request_context
from app.models.user import User
from app.services.auth import decode_access_token
from app.services.session import SESSION_COOKIE_NAME, decode_session_token

# Swagger "Authorize" posts the password form here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

logger = logging.getLogger(__name__)


def _extract_user_id(payload: Dict[str, Any]) -> Optional[int]:
    raw = payload.get("user_id", payload.get("sub"))
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def _session_payload(request: Request) -> Optional[Dict[str, Any]]:
    if hasattr(request.state, "session_payload"):
        return request.state.session_payload
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return decode_session_token(token) if token else None


def _payload_from_bearer(token: str) -> Dict[str, Any]:
    try:
        return decode_access_token(token)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the staff member from the session cookie, falling back to a bearer token."""
    payload = _session_payload(request)
    if payload is None:
        if request.cookies.get(SESSION_COOKIE_NAME) and not token:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        payload = _payload_from_bearer(token)

    user_id = _extract_user_id(payload)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    request.state.user = user
    set_request_context(user_id=str(user.id))
    return user


def _normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def _log_access_denied(*, reason: str, user: User, request: Request) -> None:
    logger.warning(
        "Access denied (%s): user_id=%s user_role=%s endpoint=%s %s",
        reason,
        getattr(user, "id", None),
        getattr(user, "role", None),
        request.method,
        request.url.path,
    )


def require_role(roles: Iterable[str]):
    """Dependency factory: directors always pass, everyone else must hold one of ``roles``."""
    allowed = {_normalize_role(role) for role in roles}
    allowed.add("director")

    def _dependency(request: Request, user: User = Depends(get_current_user)) -> User:
        if _normalize_role(user.role) not in allowed:
            _log_access_denied(reason="role_denied", user=user, request=request)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _dependency


require_staff = require_role(["employee", "director"])
require_director = require_role(["director"])
