"""FastAPI application for the mediatracker API."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from mediatracker import __version__
from mediatracker.api.exception_handlers import register_exception_handlers
from mediatracker.api.middleware.request_id import RequestIdMiddleware
from mediatracker.api.routers import auth, entries, health, tags
from mediatracker.config.database import db_manager
from mediatracker.config.settings import settings

logger = logging.getLogger(__name__)

# Paths whose request details are never logged
SENSITIVE_PATHS: frozenset[str] = frozenset({"/api/v1/auth"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    if settings.db_create_all:
        logger.info("Creating database tables")
        await db_manager.create_tables()
    yield
    await db_manager.close()


app = FastAPI(
    title="mediatracker API",
    description="Per-user tracking of movies and series with tags, ratings and notes",
    version=__version__,
    lifespan=lifespan,
)


def _is_sensitive_path(path: str) -> bool:
    return any(path.startswith(sensitive) for sensitive in SENSITIVE_PATHS)


def _get_client_ip(request: Request) -> str:
    """Client IP, honouring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


@app.middleware("http")
async def log_requests(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """
    Log each request and its response.

    Responses log at INFO for 2xx/3xx, WARNING for 4xx and ERROR for 5xx.
    Auth endpoints are logged without their path.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path
    shown_path = "[sensitive endpoint]" if _is_sensitive_path(path) else path

    logger.info("Request: %s %s from %s", method, shown_path, _get_client_ip(request))

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    status_code = response.status_code
    if status_code >= 500:
        log_level = logging.ERROR
    elif status_code >= 400:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    logger.log(
        log_level,
        "Response: %s %s - %d (%.3fs)",
        method,
        shown_path,
        status_code,
        duration,
    )
    return response


# Wraps log_requests so request log lines carry the id
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Location"],
)

register_exception_handlers(app)

# Mount routers under /api/v1 prefix
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(auth.router, prefix="/api/v1")
app.include_router(entries.router, prefix="/api/v1")
app.include_router(tags.router, prefix="/api/v1")
