"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository.file import FileVerificationStore
from src.adapters.repository.postgres import PostgresVerificationStore, run_migrations
from src.adapters.smtp.console import ConsoleNotificationDispatcher
from src.adapters.smtp.relay import SmtpNotificationDispatcher
from src.api.models import HealthResponse
from src.api.routes import router
from src.config.settings import Settings, get_settings
from src.domain.exceptions import StorageError
from src.domain.ports import NotificationDispatcher

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "verification",
        "description": "Email verification - send links, confirm addresses, query status",
    },
]


def create_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Build the dispatcher selected by DISPATCHER_BACKEND."""
    if settings.dispatcher_backend == "console":
        return ConsoleNotificationDispatcher()
    return SmtpNotificationDispatcher(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        from_address=settings.smtp_from_address,
        subject=settings.smtp_subject,
        timeout=settings.smtp_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the verification store (file, or Postgres pool + migrations)
    - Creates the notification dispatcher
    - Closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        statement_timeout_ms = int(settings.store_timeout_seconds * 1000)
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            kwargs={"options": f"-c statement_timeout={statement_timeout_ms}"},
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.store = PostgresVerificationStore(pool, timeout=settings.store_timeout_seconds)
    else:
        logger.info("Using verified emails file %s", settings.verified_emails_path)
        app.state.store = FileVerificationStore(
            settings.verified_emails_path,
            lock_timeout=settings.store_timeout_seconds,
        )

    app.state.dispatcher = create_dispatcher(settings)
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 instead of FastAPI's default 422."""
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body"},
    )


app = FastAPI(
    title="email-verifier",
    description="Email Verification API - Send verification links and record confirmed addresses",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    allow_credentials=True,
)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.include_router(router)


@app.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint with store validation.

    Returns 200 OK if the application and verification store are healthy,
    503 if the store cannot be reached.
    """
    try:
        request.app.state.store.ping()
    except StorageError as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Verification store unavailable",
        ) from None
    return HealthResponse(status="healthy")
