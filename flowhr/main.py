"""FlowHR Gateway — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from flowhr.common.constants import (
    APP_VERSION,
    UPSTREAM_CONNECT_TIMEOUT_SECONDS,
    UPSTREAM_TIMEOUT_SECONDS,
)
from flowhr.common.exceptions import register_exception_handlers
from flowhr.common.rate_limit import limiter
from flowhr.common.request_tracking import configure_logging, request_tracking_middleware
from flowhr.config import settings
from flowhr.i18n.router import router as i18n_router
from flowhr.proxy.router import router as proxy_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pooled upstream client on startup, close it on shutdown."""
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(UPSTREAM_TIMEOUT_SECONDS, connect=UPSTREAM_CONNECT_TIMEOUT_SECONDS),
    )
    logger.info("Forwarding API routes to %s", settings.api_base_url)
    yield
    await app.state.http_client.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="FlowHR Gateway",
        description="Authenticated API gateway for FlowHR — users, leave, attendance, payroll",
        version=APP_VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers ({"error": ...} bodies)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request id + access log (outermost)
    app.middleware("http")(request_tracking_middleware)

    # Health check (no auth)
    @app.get("/api/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "backend_url": settings.api_base_url,
        }

    # Register routers
    app.include_router(i18n_router, prefix="/api/i18n", tags=["i18n"])
    app.include_router(proxy_router, prefix="/api")

    return app


app = create_app()
