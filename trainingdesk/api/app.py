# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the TrainingDesk
reports API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trainingdesk import __version__
from trainingdesk.api.middleware.auth import AuthMiddleware
from trainingdesk.api.routes import health
from trainingdesk.api.v1 import router as v1_router
from trainingdesk.core.config import get_settings
from trainingdesk.infrastructure.database import (
    DatabaseError,
    close_database,
    init_database,
)
from trainingdesk.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and opens the database engine on startup, and
    disposes of the engine on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting TrainingDesk API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except DatabaseError as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    yield

    await close_database()
    logger.info("Shutting down TrainingDesk API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="TrainingDesk API",
        description="Training enrollment reports and PDF exports",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Redirects from /path to /path/ drop the Authorization header
        redirect_slashes=False,
    )

    # Middleware (order matters - last added is first executed)
    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
        expose_headers=["Content-Disposition"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
