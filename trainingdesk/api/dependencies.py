# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated users and check their role
- Get service instances

Example:
    @router.post("/export")
    async def export_report(
        service: ReportExportService = Depends(get_export_service),
        current_user: CurrentUser = Depends(require_manager),
    ):
        ...
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from trainingdesk.api.middleware.auth import CurrentUser, get_current_user
from trainingdesk.core.config import ReportSettings, get_settings
from trainingdesk.domains.reports.repository import ReportsRepository
from trainingdesk.domains.reports.service import ReportExportService
from trainingdesk.infrastructure.database import get_session
from trainingdesk.services.pdf import TemplateLoader, TemplateRenderer

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session.

    Yields:
        AsyncSession for the reports database.
    """
    async with get_session() as session:
        yield session


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_manager(request: Request) -> CurrentUser:
    """Require a user with the admin or manager role.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated or lacking the role.
    """
    user = require_auth(request)
    if not user.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Manager access required",
        )
    return user


def get_report_settings() -> ReportSettings:
    return get_settings().reports


@lru_cache
def _template_loader(directory: Path) -> TemplateLoader:
    return TemplateLoader(directory)


def get_template_renderer(
    settings: ReportSettings = Depends(get_report_settings),
) -> TemplateRenderer:
    """Get a renderer over the shared (cached) template loader."""
    return TemplateRenderer(_template_loader(settings.templates_dir))


def get_reports_repository(
    db: AsyncSession = Depends(get_db),
    settings: ReportSettings = Depends(get_report_settings),
) -> ReportsRepository:
    return ReportsRepository(
        db,
        export_limit=settings.export_limit,
        default_limit=settings.default_page_limit,
    )


def get_export_service(
    repository: ReportsRepository = Depends(get_reports_repository),
    renderer: TemplateRenderer = Depends(get_template_renderer),
    settings: ReportSettings = Depends(get_report_settings),
) -> ReportExportService:
    """Get the report export service for this request."""
    return ReportExportService(repository, renderer, settings)
