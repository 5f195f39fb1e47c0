from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from app.services.session import SESSION_COOKIE_NAME, decode_session_token


class DashboardSessionMiddleware(BaseHTTPMiddleware):
    """Decodes the dashboard session cookie once per request."""

    async def dispatch(self, request, call_next):
        request.state.session_payload = None

        if request.url.path.startswith("/api") or request.url.path.startswith("/internal"):
            token = request.cookies.get(SESSION_COOKIE_NAME)
            if token:
                request.state.session_payload = decode_session_token(token)

        return await call_next(request)
