# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report API request and response models.

This module defines Pydantic models for the enrollment report:
- ReportFilter: Query filter shared by the listing and the export
- ReportRow: One (user, group) enrollment fact
- ReportPage: Paginated listing response
- ReportExportRequest: Export payload (selection intent + filter)
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ReportType = Literal["dedication", "certification", "bonification"]
SortOrder = Literal["asc", "desc"]


class ReportFilter(BaseModel):
    """Filter applied to the enrollment rows.

    Multi-select pickers (company, center, group) accept a list of ids; a
    single scalar id is accepted as a one-element list.
    """

    model_config = ConfigDict(extra="ignore")

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    limit: int | None = Field(default=None, ge=1, description="Rows per page")
    id_company: list[int] = Field(default_factory=list)
    id_center: list[int] = Field(default_factory=list)
    id_course: int | None = None
    id_group: list[int] = Field(default_factory=list)
    id_role: int | None = None
    search: str | None = Field(default=None, max_length=200)
    start_date: date | None = Field(default=None, description="Group start date lower bound")
    end_date: date | None = Field(default=None, description="Group end date upper bound")
    completion_percentage: float | None = Field(
        default=None, ge=0, le=100, description="Minimum completion percentage"
    )
    sort_field: str | None = None
    sort_order: SortOrder = "asc"

    @field_validator("id_company", "id_center", "id_group", mode="before")
    @classmethod
    def _coerce_id_list(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, (int, str)):
            return [value]
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _strip_search(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class ReportRow(BaseModel):
    """Immutable snapshot of one enrollment returned by the row source."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id_user: int | None = None
    id_group: int | None = None
    id_course: int | None = None
    id_center: int | None = None
    id_company: int | None = None
    moodle_id: int | None = None

    name: str | None = None
    first_surname: str | None = None
    second_surname: str | None = None
    dni: str | None = None
    email: str | None = None
    phone: str | None = None

    center_name: str | None = None
    employer_number: str | None = None
    company_name: str | None = None
    company_cif: str | None = None
    group_name: str | None = None
    group_start_date: date | None = None
    group_end_date: date | None = None
    course_name: str | None = None
    course_moodle_id: int | None = None
    hours: int | None = None
    modality: str | None = None
    role_shortname: str | None = None

    completion_percentage: float | None = None
    time_spent: int | None = None

    moodle_username: str | None = None
    moodle_password: str | None = None

    @property
    def display_name(self) -> str:
        """Name as printed on reports: "SURNAME1 SURNAME2, Name"."""
        first = (self.first_surname or "").upper()
        second = (self.second_surname or "").upper()
        return f"{first} {second}, {self.name or ''}".strip()


class ReportPage(BaseModel):
    """One page of report rows."""

    data: list[ReportRow]
    total: int
    page: int
    limit: int
    total_pages: int


class ReportExportRequest(BaseModel):
    """Export payload sent by the report screen.

    Exactly one of the selection shapes is honored, in this order:
    non-empty selected_keys, then select_all_matching, then the bare filter.
    """

    model_config = ConfigDict(extra="ignore")

    filter: ReportFilter | None = None
    report_type: ReportType = "dedication"
    include_passwords: bool = False
    format: Literal["pdf"] = "pdf"
    selected_keys: list[str] | None = None
    select_all_matching: bool = False
    deselected_keys: list[str] | None = None
