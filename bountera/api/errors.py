"""
bountera.api.errors — Response envelope & exception mapping
============================================================

Every endpoint answers with ``{"success": true, "data": ...}`` or
``{"success": false, "error": "..."}``.  Domain errors carry their own
status code; anything unexpected becomes a generic 500 and the details go
to the server log only.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bountera.errors import BounteraError

logger = logging.getLogger(__name__)


def ok(data: Any, **extra: Any) -> dict[str, Any]:
    """Wrap *data* in the success envelope."""
    return {"success": True, "data": data, **extra}


def fail(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
    msg = first.get("msg", "invalid value")
    return f"{field}: {msg}" if field else msg


def install_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-producing handlers on *app*."""

    @app.exception_handler(BounteraError)
    async def _domain_error(request: Request, exc: BounteraError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s %s",
                request.method, request.url.path, exc.message, exc.details,
            )
        else:
            logger.debug(
                "%s %s -> %d %s %s",
                request.method, request.url.path, exc.status_code, exc.message, exc.details,
            )
        return fail(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return fail(_first_validation_message(exc), status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return fail(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return fail("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
