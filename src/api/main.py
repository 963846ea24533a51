"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryRecordStore, InMemoryUserDirectory
from src.adapters.repository.postgres import (
    PostgresRecordStore,
    PostgresUserDirectory,
    run_migrations,
)
from src.api.dependencies import build_options
from src.api.errors import install_error_handlers
from src.api.middleware import WaitlistGateMiddleware
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Waitlist API v1 - Join the waitlist, verify invites, administer entries",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Builds waitlist options from settings
    - Creates database connection pool and runs migrations (postgres backend)
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    app.state.options = build_options(settings)
    app.state.pool = None

    if settings.store_backend == "memory":
        logger.info("Using in-memory waitlist store")
        app.state.store = InMemoryRecordStore()
        app.state.users = InMemoryUserDirectory()
    else:
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pool = pool
        app.state.store = PostgresRecordStore(pool)
        app.state.users = PostgresUserDirectory(pool, table=settings.users_table)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if app.state.pool is not None:
        app.state.pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="waitlist-gate",
    description="Waitlist API - Invitation and approval gate in front of user registration",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

install_error_handlers(app)
app.add_middleware(WaitlistGateMiddleware)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
