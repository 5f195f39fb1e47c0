from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.request_context import get_request_id

logger = logging.getLogger(__name__)


def _describe_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    described = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in {"body", "query", "path", "form"}]
        described.append(
            {
                "field": ".".join(location) or None,
                "message": str(error.get("msg", "invalid value")),
                "type": error.get("type"),
            }
        )
    return described


async def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = _describe_errors(exc.errors()) if isinstance(exc, RequestValidationError) else []
    first = errors[0] if errors else None
    if first and first["field"]:
        detail = f"Invalid value for '{first['field']}': {first['message']}"
    else:
        detail = first["message"] if first else "Invalid request"
    logger.info("validation failed path=%s detail=%s", request.url.path, detail)
    return JSONResponse(status_code=400, content={"detail": detail, "errors": errors})


def _request_id(request: Request) -> str | None:
    # The observability middleware has already cleared the context by the time this runs.
    return getattr(request.state, "request_id", None) or get_request_id()


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error path=%s method=%s", request.url.path, request.method, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "request_id": _request_id(request)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map request validation failures to 400 and unexpected errors to a JSON 500.

    ``HTTPException`` keeps FastAPI's default ``{"detail": ...}`` body.
    """
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
