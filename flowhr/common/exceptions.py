"""Custom exceptions and the JSON error handlers that render them.

Every error leaving the gateway is a JSON object with an ``error`` string,
except upstream errors relayed verbatim under the passthrough policy.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from flowhr.common.constants import (
    MSG_CONNECT_FAILED,
    MSG_HTML_RESPONSE,
    MSG_INTERNAL_ERROR,
    MSG_INVALID_RESPONSE,
    MSG_UNAUTHORIZED,
    REQUEST_ID_HEADER,
)

logger = logging.getLogger(__name__)


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → ``{"error": detail}``."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.detail}
        if self.errors:
            body["errors"] = self.errors
        return body


class BadRequestException(AppException):
    """400 — malformed or out-of-range input."""

    def __init__(self, detail: str, errors: Optional[dict[str, Any]] = None) -> None:
        super().__init__(status_code=400, detail=detail, errors=errors)


class UnauthorizedException(AppException):
    """401 — no bearer credential on the request."""

    def __init__(self, detail: str = MSG_UNAUTHORIZED) -> None:
        super().__init__(status_code=401, detail=detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            detail=f"{entity_type} '{entity_id}' does not exist.",
        )


class UpstreamException(AppException):
    """Backend answered with a non-2xx status; ``body`` is what we relay."""

    def __init__(self, status_code: int, body: dict[str, Any]) -> None:
        self.body = body
        detail = body.get("error") if isinstance(body.get("error"), str) else ""
        super().__init__(status_code=status_code, detail=detail or "")

    def to_body(self) -> dict[str, Any]:
        return self.body


class UpstreamUnavailableException(AppException):
    """500 — the backend could not be reached at all."""

    def __init__(self, detail: str = MSG_CONNECT_FAILED) -> None:
        super().__init__(status_code=500, detail=detail)


class UpstreamResponseException(AppException):
    """500 — the backend answered with something other than JSON."""

    def __init__(self, detail: str = MSG_INVALID_RESPONSE) -> None:
        super().__init__(status_code=500, detail=detail)


class UpstreamHTMLException(UpstreamResponseException):
    """500 — the backend answered with an HTML error page."""

    def __init__(self) -> None:
        super().__init__(detail=MSG_HTML_RESPONSE)


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=400,
        content={"error": "Request validation failed", "errors": field_errors},
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Runs outside the request-tracking middleware, so the id is re-attached here
    request_id = (
        getattr(request.state, "request_id", None)
        or request.headers.get(REQUEST_ID_HEADER)
        or uuid.uuid4().hex
    )
    logger.exception(
        "Unhandled error on %s %s (request_id=%s)",
        request.method, request.url.path, request_id,
    )
    return JSONResponse(
        status_code=500,
        content={"error": MSG_INTERNAL_ERROR},
        headers={REQUEST_ID_HEADER: request_id},
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
