# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report export service.

This module provides the ReportExportService that handles:
- Resolving the export row set from the client's selection intent
- Grouping rows per report type
- Rendering the PDF document with the organization branding

Row resolution follows the intent, in priority order:
1. explicit selected keys, looked up exactly (the filter is ignored)
2. select-all-matching: the unpaginated filter query minus deselected keys
3. the unpaginated filter query

Example:
    >>> service = ReportExportService(repository, renderer, settings.reports)
    >>> result = await service.export(ReportExportRequest(report_type="certification"))
    >>> result.filename
    'report-certification.pdf'
"""

import asyncio
import html
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Union

from trainingdesk.core.config.settings import ReportSettings
from trainingdesk.domains.reports.branding import Branding, load_branding
from trainingdesk.domains.reports.exceptions import UnknownReportTypeError
from trainingdesk.domains.reports.grouping import (
    BonificationGroup,
    ReportGroup,
    build_groups,
    summarize_bonification,
)
from trainingdesk.domains.reports.keys import row_key
from trainingdesk.domains.reports.repository import ReportsRepository
from trainingdesk.infrastructure.database.connection import DatabaseError
from trainingdesk.infrastructure.database.models import OrganizationSettings
from trainingdesk.models.reports import ReportExportRequest, ReportFilter, ReportRow, ReportType
from trainingdesk.services.pdf.renderer import TemplateRenderer
from trainingdesk.services.pdf.writer import PageWriter
from trainingdesk.utils.datetime import (
    format_long_date,
    format_short_date,
    format_time_spent,
    utc_now,
)
from trainingdesk.utils.logging import bind_context

logger = logging.getLogger(__name__)

DEDICATION_TEMPLATE = "dedication-v1"
CERTIFICATION_TEMPLATE = "certification-v1"

_HTML_TAG = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class ExplicitKeys:
    """Export exactly these row keys."""

    keys: tuple[str, ...]

    strategy = "selected_keys"


@dataclass(frozen=True)
class MatchingExcept:
    """Export every row matching the filter except the excluded keys."""

    report_filter: ReportFilter
    excluded: frozenset[str] = field(default_factory=frozenset)

    strategy = "select_all_matching"


@dataclass(frozen=True)
class FilterOnly:
    """Export every row matching the filter."""

    report_filter: ReportFilter

    strategy = "filter"


ExportIntent = Union[ExplicitKeys, MatchingExcept, FilterOnly]


@dataclass(frozen=True)
class ExportResult:
    """A rendered report ready to stream."""

    content: bytes
    filename: str
    row_count: int
    group_count: int
    media_type: str = "application/pdf"


def parse_intent(request: ReportExportRequest) -> ExportIntent:
    """Decide how the export rows will be resolved.

    Args:
        request: Export payload.

    Returns:
        The intent variant with the highest priority the payload supports.
    """
    if request.selected_keys:
        return ExplicitKeys(tuple(dict.fromkeys(request.selected_keys)))

    report_filter = request.filter or ReportFilter()
    if request.select_all_matching:
        return MatchingExcept(report_filter, frozenset(request.deselected_keys or ()))
    return FilterOnly(report_filter)


def format_percentage(value: float | None) -> str:
    """Render a completion percentage like "75%" or "62.5%"."""
    return f"{float(value or 0):g}%"


def strip_html(text: str) -> str:
    """Reduce course contents HTML to plain text."""
    return html.unescape(_HTML_TAG.sub("", text)).strip()


def row_context(row: ReportRow) -> dict[str, Any]:
    """Flatten a row for template tables, adding printable labels."""
    data = row.model_dump()
    data["employee"] = row.display_name
    data["time_spent_label"] = format_time_spent(row.time_spent)
    data["completion_label"] = format_percentage(row.completion_percentage)
    return data


class ReportExportService:
    """Service producing report PDFs from export requests.

    Attributes:
        _repository: Row source.
        _renderer: Template renderer.
        _settings: Report settings (page geometry, asset dirs, limits).
    """

    def __init__(
        self,
        repository: ReportsRepository,
        renderer: TemplateRenderer,
        settings: ReportSettings,
    ) -> None:
        self._repository = repository
        self._renderer = renderer
        self._settings = settings

    async def resolve_rows(self, intent: ExportIntent) -> list[ReportRow]:
        """Resolve the authoritative row set for an intent.

        Args:
            intent: Parsed export intent.

        Returns:
            Rows to export. Stale explicit keys are silently dropped.

        Raises:
            InvalidRowKeyError: If an explicit key is malformed.
            DatabaseError: If a query fails.
        """
        if isinstance(intent, ExplicitKeys):
            return await self._repository.get_rows_by_keys(intent.keys)

        page = await self._repository.get_report_rows(intent.report_filter, paginate=False)
        if page.total > len(page.data) and page.total > self._settings.export_limit:
            logger.warning(
                "Export truncated to %d rows of %d matching",
                self._settings.export_limit,
                page.total,
            )

        if isinstance(intent, MatchingExcept) and intent.excluded:
            return [row for row in page.data if row_key(row) not in intent.excluded]
        return page.data

    async def _load_organization(self) -> OrganizationSettings | None:
        try:
            return await self._repository.get_organization()
        except DatabaseError as e:
            logger.warning("Could not load organization settings for report header: %s", e)
            return None

    async def export(self, request: ReportExportRequest, today: date | None = None) -> ExportResult:
        """Resolve, group and render a report.

        The document is rendered completely before returning, so every
        failure surfaces here rather than mid-stream.

        Args:
            request: Export payload.
            today: Issue date printed on the report; defaults to today (UTC).

        Returns:
            ExportResult with the PDF bytes.

        Raises:
            TemplateNotFoundError: If a template cannot be loaded.
            UnknownReportTypeError: If the report type has no renderer.
            InvalidRowKeyError: If an explicit key is malformed.
            DatabaseError: If a row query fails.
        """
        report_type = request.report_type
        intent = parse_intent(request)
        bind_context(report_type=report_type, strategy=intent.strategy)

        if report_type not in ("dedication", "certification", "bonification"):
            raise UnknownReportTypeError(report_type)

        issued_on = today or utc_now().date()
        rows = await self.resolve_rows(intent)

        if report_type == "bonification":
            summary = summarize_bonification(rows)
            logger.info(
                "Exporting bonification report: strategy=%s rows=%d groups=%d",
                intent.strategy,
                len(rows),
                len(summary),
            )
            content = await asyncio.to_thread(self.render_bonification, summary, issued_on)
            return ExportResult(content, self.filename(report_type), len(rows), len(summary))

        branding = await load_branding(await self._load_organization(), self._settings)
        groups = build_groups(rows, report_type)
        logger.info(
            "Exporting %s report: strategy=%s rows=%d groups=%d",
            report_type,
            intent.strategy,
            len(rows),
            len(groups),
        )

        if report_type == "certification":
            course_ids = [g.first.id_course for g in groups if g.first.id_course is not None]
            contents = await self._repository.get_course_contents(course_ids)
            content = await asyncio.to_thread(
                self.render_certification, groups, branding, contents, issued_on
            )
        else:
            content = await asyncio.to_thread(
                self.render_dedication, groups, branding, request.include_passwords, issued_on
            )

        return ExportResult(content, self.filename(report_type), len(rows), len(groups))

    @staticmethod
    def filename(report_type: ReportType) -> str:
        return f"report-{report_type}.pdf"

    def _new_writer(self, title: str) -> PageWriter:
        return PageWriter(
            page_size=self._settings.page_size,
            margin=self._settings.margin,
            line_height=self._settings.line_height,
            reserved_footer=self._settings.reserved_footer,
            title=title,
        )

    def render_dedication(
        self,
        groups: list[ReportGroup],
        branding: Branding,
        include_passwords: bool,
        issued_on: date,
    ) -> bytes:
        """Render one section per (center, course) into a single PDF."""
        writer = self._new_writer("Informe de dedicación")
        for index, group in enumerate(groups):
            if index > 0:
                writer.new_page()
            self._renderer.render(
                writer,
                DEDICATION_TEMPLATE,
                {
                    "center_name": group.center_name,
                    "course_name": group.course_name,
                    "issue_date": format_short_date(issued_on),
                    "issuer": branding.issuer,
                    "logo": branding.logo,
                    "include_passwords": include_passwords,
                    "show_time_spent": branding.show_time_spent,
                    "rows": [row_context(row) for row in group.rows],
                },
            )
        return writer.finish()

    def render_certification(
        self,
        groups: list[ReportGroup],
        branding: Branding,
        contents: dict[int, str],
        issued_on: date,
    ) -> bytes:
        """Render one certificate per group, followed by the course
        contents page when the course has a syllabus."""
        writer = self._new_writer("Certificado de asistencia")
        for index, group in enumerate(groups):
            if index > 0:
                writer.new_page()
            first = group.first
            self._renderer.render(
                writer,
                CERTIFICATION_TEMPLATE,
                {
                    "rows": [row_context(row) for row in group.rows],
                    "issuer": branding.issuer,
                    "logo": branding.logo,
                    "signature": branding.signature,
                    "center_name": group.center_name,
                    "course_name": group.course_name,
                    "start_date": format_short_date(first.group_start_date),
                    "end_date": format_short_date(first.group_end_date),
                    "company_name": first.company_name or "",
                    "company_city": branding.company_city or group.center_name,
                    "hours": first.hours if first.hours is not None else "",
                    "modality": first.modality or "",
                    "issue_date": format_long_date(issued_on),
                },
            )

            syllabus = contents.get(first.id_course) if first.id_course is not None else None
            plain = strip_html(syllabus) if syllabus else ""
            if plain:
                writer.new_page()
                writer.write_text("Contenidos del curso", font_size=16, color="#0033CC")
                writer.move_down(0.5)
                writer.write_text(plain, font_size=11)
        return writer.finish()

    def render_bonification(self, summary: list[BonificationGroup], issued_on: date) -> bytes:
        """Render student counts per group, company and center."""
        writer = self._new_writer("Informe de bonificación")
        issue_date = format_short_date(issued_on)
        for index, group in enumerate(summary):
            if index > 0:
                writer.new_page()
            writer.write_text(f"Informe de Bonificación ({issue_date})", font_size=14, color="#7E1515")
            writer.move_down(0.3)
            writer.write_text(
                f"Grupo: {group.group_name}", font="Helvetica-Bold", font_size=14, color="#0033CC"
            )
            writer.move_down(0.4)

            for company in group.companies:
                writer.write_text(
                    f"Empresa: {company.company_name}",
                    font="Helvetica-Bold",
                    font_size=11,
                    color="#333333",
                )
                for center in company.centers:
                    writer.write_text(f"Centro: {center.center_name}", font_size=10, indent=20)
                    writer.write_text(f"Alumnos: {center.students}", font_size=10, indent=40)
                writer.write_text(
                    f"Total Empresa {company.company_name}: {company.total}",
                    font="Helvetica-Bold",
                    font_size=10,
                    color="#666666",
                    indent=20,
                )
                writer.move_down(0.2)

            writer.move_down(0.3)
            writer.write_text(
                f"Total Grupo {group.group_name}: {group.total}",
                font="Helvetica-Bold",
                font_size=12,
                color="#7E1515",
            )
            writer.move_down(0.6)
        return writer.finish()
