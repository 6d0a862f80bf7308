# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment report API endpoints.

This module provides endpoints for the report screen:
- GET / - One page of enrollment rows for the table
- POST /export - Render the selected rows as a PDF

Both endpoints require the admin or manager role.

Example:
    POST /api/v1/reports/export
    {
        "report_type": "certification",
        "select_all_matching": true,
        "deselected_keys": ["12-7"],
        "filter": {"id_center": [3]}
    }
"""

import logging
from datetime import date
from typing import Annotated, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from starlette.requests import ClientDisconnect
from starlette.types import Receive, Scope, Send

from trainingdesk.api.dependencies import (
    get_export_service,
    get_report_settings,
    get_reports_repository,
    require_manager,
)
from trainingdesk.api.middleware.auth import CurrentUser
from trainingdesk.core.config import ReportSettings
from trainingdesk.domains.reports.exceptions import (
    InvalidRowKeyError,
    TemplateNotFoundError,
    UnknownReportTypeError,
)
from trainingdesk.domains.reports.repository import ReportsRepository
from trainingdesk.domains.reports.service import ReportExportService
from trainingdesk.infrastructure.database import DatabaseError
from trainingdesk.models.reports import (
    ReportExportRequest,
    ReportFilter,
    ReportPage,
    SortOrder,
)
from trainingdesk.utils.logging import clear_context

logger = logging.getLogger(__name__)

router = APIRouter()


def _database_unavailable(e: DatabaseError) -> HTTPException:
    logger.error("Report query failed: %s", e)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": "database_unavailable", "message": "Report data is unavailable"},
    )


class DocumentStreamingResponse(StreamingResponse):
    """Streams a fully rendered document in fixed-size chunks.

    Delivered bytes are counted so a client that disconnects mid-download
    is logged whether the server reports it by raising from ``send`` or by
    cancelling the stream. The aborted download is not retried.
    """

    def __init__(
        self,
        content: bytes,
        filename: str,
        chunk_size: int,
        media_type: str = "application/pdf",
    ) -> None:
        self.filename = filename
        self.total_bytes = len(content)
        self.sent_bytes = 0
        super().__init__(
            self._iter_chunks(content, chunk_size),
            media_type=media_type,
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Content-Length": str(len(content)),
            },
        )

    async def _iter_chunks(self, content: bytes, chunk_size: int) -> AsyncIterator[bytes]:
        for start in range(0, len(content), chunk_size):
            chunk = content[start:start + chunk_size]
            yield chunk
            # resumed only once the previous chunk was sent
            self.sent_bytes += len(chunk)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except (ClientDisconnect, OSError):
            self._log_disconnect()
            return
        if self.sent_bytes < self.total_bytes:
            self._log_disconnect()

    def _log_disconnect(self) -> None:
        logger.warning(
            "Client disconnected during %s download after %d of %d bytes",
            self.filename,
            self.sent_bytes,
            self.total_bytes,
        )


@router.get(
    "",
    response_model=ReportPage,
    summary="List report rows",
)
async def list_report_rows(
    current_user: Annotated[CurrentUser, Depends(require_manager)],
    repository: Annotated[ReportsRepository, Depends(get_reports_repository)],
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    id_company: Annotated[list[int] | None, Query()] = None,
    id_center: Annotated[list[int] | None, Query()] = None,
    id_course: int | None = None,
    id_group: Annotated[list[int] | None, Query()] = None,
    id_role: int | None = None,
    search: str | None = Query(None, max_length=200),
    start_date: date | None = None,
    end_date: date | None = None,
    completion_percentage: float | None = Query(None, ge=0, le=100),
    sort_field: str | None = None,
    sort_order: SortOrder = "asc",
) -> ReportPage:
    """Return one page of rows matching the filter.

    Returns:
        ReportPage with the rows and pagination totals.

    Raises:
        HTTPException: 503 if the database query fails.
    """
    report_filter = ReportFilter(
        page=page,
        limit=limit,
        id_company=id_company,
        id_center=id_center,
        id_course=id_course,
        id_group=id_group,
        id_role=id_role,
        search=search,
        start_date=start_date,
        end_date=end_date,
        completion_percentage=completion_percentage,
        sort_field=sort_field,
        sort_order=sort_order,
    )
    try:
        return await repository.get_report_rows(report_filter)
    except DatabaseError as e:
        raise _database_unavailable(e) from e


@router.post(
    "/export",
    summary="Export report as PDF",
    response_class=StreamingResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_report(
    data: ReportExportRequest,
    current_user: Annotated[CurrentUser, Depends(require_manager)],
    service: Annotated[ReportExportService, Depends(get_export_service)],
    settings: Annotated[ReportSettings, Depends(get_report_settings)],
) -> StreamingResponse:
    """Render the requested rows and stream the PDF back.

    Args:
        data: Export payload (selection intent, report type, options).
        current_user: Authenticated manager.
        service: Export service.
        settings: Report settings.

    Returns:
        StreamingResponse with the PDF attachment.

    Raises:
        HTTPException: 422 for malformed keys, 500 for template errors,
            503 if the database is unavailable.
    """
    logger.debug("Export requested by user %s", current_user.id)
    try:
        result = await service.export(data)
    except InvalidRowKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "invalid_row_key", "message": e.message, **e.details},
        ) from e
    except UnknownReportTypeError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "unknown_report_type", "message": e.message, **e.details},
        ) from e
    except TemplateNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "template_error", "message": e.message, **e.details},
        ) from e
    except DatabaseError as e:
        raise _database_unavailable(e) from e
    finally:
        clear_context()

    return DocumentStreamingResponse(
        result.content,
        result.filename,
        settings.stream_chunk_size,
        media_type=result.media_type,
    )
