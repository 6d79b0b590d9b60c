"""Logging setup and the request-tracking middleware."""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request

from flowhr.common.constants import REQUEST_ID_HEADER
from flowhr.config import settings

logger = logging.getLogger("flowhr.access")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the ``flowhr`` logger tree."""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logging.getLogger("flowhr").setLevel(getattr(logging, level_name, logging.INFO))


async def request_tracking_middleware(request: Request, call_next):
    """Tag each request with an id, echo it back, and log the outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    start = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        logger.info(
            "%s %s -> 500 (%.1fms) request_id=%s",
            request.method, request.url.path,
            (time.perf_counter() - start) * 1000, request_id,
        )
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "%s %s -> %d (%.1fms) request_id=%s",
        request.method, request.url.path, response.status_code, duration_ms, request_id,
    )
    return response
