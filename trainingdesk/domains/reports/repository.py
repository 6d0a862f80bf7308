# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Row source for the enrollment report.

One row per (user, group) enrollment, joined with the user's main center
and company, the course, the LMS account and the course-level progress.

Example:
    >>> repo = ReportsRepository(db, export_limit=100_000)
    >>> page = await repo.get_report_rows(ReportFilter(search="garcia"))
    >>> rows = await repo.get_rows_by_keys(["12-4", "13-4"])
"""

import logging
import math
from typing import Any, Sequence

from sqlalchemy import Select, and_, case, func, or_, select, tuple_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from trainingdesk.domains.reports.keys import (
    ParsedKey,
    dedupe_by_key,
    fallback_key,
    parse_row_key,
    row_key,
)
from trainingdesk.infrastructure.database.connection import DatabaseError
from trainingdesk.infrastructure.database.models import (
    Center,
    Company,
    Course,
    Group,
    MoodleUser,
    OrganizationSettings,
    User,
    UserCenter,
    UserCourse,
    UserGroup,
    UserRole,
)
from trainingdesk.models.reports import ReportFilter, ReportPage, ReportRow

logger = logging.getLogger(__name__)

# asyncpg caps bind parameters at 32767 per statement
KEY_LOOKUP_CHUNK = 5000

_COMPLETION = func.coalesce(UserGroup.completion_percentage, UserCourse.completion_percentage)

ROW_COLUMNS = (
    User.id_user.label("id_user"),
    UserGroup.id_group.label("id_group"),
    Course.id_course.label("id_course"),
    Center.id_center.label("id_center"),
    Company.id_company.label("id_company"),
    func.coalesce(MoodleUser.moodle_id, UserCourse.id_moodle_user).label("moodle_id"),
    User.name,
    User.first_surname,
    User.second_surname,
    User.dni,
    User.email,
    User.phone,
    Center.center_name,
    Center.employer_number,
    Company.company_name,
    Company.cif.label("company_cif"),
    Group.group_name,
    Group.start_date.label("group_start_date"),
    Group.end_date.label("group_end_date"),
    Course.course_name,
    Course.moodle_id.label("course_moodle_id"),
    Course.hours,
    Course.modality,
    UserRole.role_shortname,
    _COMPLETION.label("completion_percentage"),
    func.coalesce(UserGroup.time_spent, UserCourse.time_spent).label("time_spent"),
    MoodleUser.moodle_username,
    MoodleUser.moodle_password,
)

SORTABLE_COLUMNS: dict[str, Any] = {
    "name": User.name,
    "first_surname": User.first_surname,
    "second_surname": User.second_surname,
    "dni": User.dni,
    "email": User.email,
    "phone": User.phone,
    "center_name": Center.center_name,
    "employer_number": Center.employer_number,
    "company_name": Company.company_name,
    "company_cif": Company.cif,
    "group_name": Group.group_name,
    "group_start_date": Group.start_date,
    "group_end_date": Group.end_date,
    "role_shortname": UserRole.role_shortname,
    "completion_percentage": UserGroup.completion_percentage,
    "course_name": Course.course_name,
    "moodle_id": MoodleUser.moodle_id,
    "moodle_username": MoodleUser.moodle_username,
}

_DATE_SORT_FIELDS = frozenset({"group_start_date", "group_end_date"})


def _join_enrollments(stmt: Select, with_lookups: bool = True) -> Select:
    """Apply the enrollment joins to a statement selecting from user_group."""
    stmt = (
        stmt.select_from(UserGroup)
        .join(User, UserGroup.id_user == User.id_user)
        .join(Group, UserGroup.id_group == Group.id_group)
        .join(Course, Group.id_course == Course.id_course)
    )
    if with_lookups:
        stmt = stmt.outerjoin(UserRole, UserGroup.id_role == UserRole.id_role)
    stmt = stmt.outerjoin(
        UserCourse,
        and_(UserCourse.id_user == User.id_user, UserCourse.id_course == Course.id_course),
    )
    if with_lookups:
        stmt = stmt.outerjoin(MoodleUser, MoodleUser.id_user == User.id_user)
    return (
        stmt.outerjoin(
            UserCenter,
            and_(UserCenter.id_user == User.id_user, UserCenter.is_main_center.is_(True)),
        )
        .outerjoin(Center, UserCenter.id_center == Center.id_center)
        .outerjoin(Company, Center.id_company == Company.id_company)
    )


def _accent_insensitive_like(column: Any, term: str) -> Any:
    return func.unaccent(func.lower(column)).like(func.unaccent(func.lower(term)))


def build_conditions(report_filter: ReportFilter) -> list[Any]:
    """Translate a filter into WHERE conditions.

    Args:
        report_filter: Validated report filter.

    Returns:
        List of SQLAlchemy boolean expressions, ANDed by the caller.
    """
    conditions: list[Any] = []

    if report_filter.id_company:
        conditions.append(Company.id_company.in_(report_filter.id_company))
    if report_filter.id_center:
        conditions.append(Center.id_center.in_(report_filter.id_center))
    if report_filter.id_course is not None:
        conditions.append(Course.id_course == report_filter.id_course)
    if report_filter.id_group:
        conditions.append(Group.id_group.in_(report_filter.id_group))
    if report_filter.id_role is not None:
        conditions.append(UserGroup.id_role == report_filter.id_role)

    if report_filter.start_date is not None:
        conditions.append(Group.start_date >= report_filter.start_date)
    if report_filter.end_date is not None:
        conditions.append(Group.end_date <= report_filter.end_date)

    if report_filter.completion_percentage is not None:
        conditions.append(func.coalesce(_COMPLETION, 0) >= report_filter.completion_percentage)

    if report_filter.search:
        term = f"%{report_filter.search}%"
        full_name = (
            User.name
            + " "
            + func.coalesce(User.first_surname, "")
            + " "
            + func.coalesce(User.second_surname, "")
        )
        conditions.append(
            or_(
                *(
                    _accent_insensitive_like(column, term)
                    for column in (
                        User.name,
                        User.first_surname,
                        User.second_surname,
                        full_name,
                        User.dni,
                        User.email,
                        User.phone,
                        Center.employer_number,
                    )
                )
            )
        )

    return conditions


def build_order_by(report_filter: ReportFilter) -> list[Any]:
    """Build ORDER BY clauses from a whitelisted sort field.

    Unknown fields fall back to id_user. Group dates treat NULL as the
    oldest value: first when ascending, last when descending.
    """
    column = SORTABLE_COLUMNS.get(report_filter.sort_field or "")
    if column is None:
        return [User.id_user]

    descending = report_filter.sort_order == "desc"
    if report_filter.sort_field in _DATE_SORT_FIELDS:
        if descending:
            return [case((column.is_(None), 1), else_=0), column.desc()]
        return [case((column.is_(None), 0), else_=1), column.asc()]

    return [column.desc() if descending else column.asc()]


class ReportsRepository:
    """Queries behind the report listing and export.

    Attributes:
        _db: Async database session.
        _export_limit: Row cap when pagination is disabled.
        _default_limit: Page size when the filter has none.
    """

    def __init__(
        self,
        db: AsyncSession,
        export_limit: int = 100_000,
        default_limit: int = 100,
    ) -> None:
        self._db = db
        self._export_limit = export_limit
        self._default_limit = default_limit

    async def _execute(self, stmt: Any) -> Any:
        try:
            return await self._db.execute(stmt)
        except SQLAlchemyError as e:
            raise DatabaseError("Report query failed", e) from e

    async def get_report_rows(
        self,
        report_filter: ReportFilter | None = None,
        paginate: bool = True,
    ) -> ReportPage:
        """Fetch one page of report rows.

        Args:
            report_filter: Filter to apply. None matches everything.
            paginate: When False, page 1 is fetched with the export limit.

        Returns:
            ReportPage with rows deduplicated by row key.

        Raises:
            DatabaseError: If a query fails.
        """
        report_filter = report_filter or ReportFilter()
        if paginate:
            page = report_filter.page
            limit = report_filter.limit or self._default_limit
        else:
            page = 1
            limit = self._export_limit
        offset = (page - 1) * limit

        conditions = build_conditions(report_filter)

        count_stmt = _join_enrollments(select(func.count()), with_lookups=False)
        if conditions:
            count_stmt = count_stmt.where(and_(*conditions))
        total = int((await self._execute(count_stmt)).scalar() or 0)

        stmt = _join_enrollments(select(*ROW_COLUMNS))
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(*build_order_by(report_filter)).limit(limit).offset(offset)

        result = await self._execute(stmt)
        rows = dedupe_by_key(ReportRow.model_validate(dict(r._mapping)) for r in result.all())

        return ReportPage(
            data=rows,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )

    async def get_rows_by_keys(self, keys: Sequence[str]) -> list[ReportRow]:
        """Fetch the rows identified by explicit row keys.

        Keys that no longer match a row are dropped; rows may have been
        deleted since the operator selected them.

        Args:
            keys: Row keys as sent by the client.

        Returns:
            Matching rows, deduplicated, in query order.

        Raises:
            InvalidRowKeyError: If a key is malformed.
            DatabaseError: If a query fails.
        """
        parsed: list[ParsedKey] = [parse_row_key(key) for key in dict.fromkeys(keys)]
        wanted = {key.raw for key in parsed}
        numeric = [key for key in parsed if key.is_numeric]
        fallback = [key for key in parsed if not key.is_numeric]

        found: list[ReportRow] = []

        for start in range(0, len(numeric), KEY_LOOKUP_CHUNK):
            chunk = numeric[start:start + KEY_LOOKUP_CHUNK]
            pairs = [(key.id_user, key.id_group) for key in chunk]
            stmt = _join_enrollments(select(*ROW_COLUMNS)).where(
                tuple_(UserGroup.id_user, UserGroup.id_group).in_(pairs)
            )
            result = await self._execute(stmt)
            found.extend(ReportRow.model_validate(dict(r._mapping)) for r in result.all())

        if fallback:
            dnis = sorted({key.dni for key in fallback if key.dni})
            moodle_ids = sorted({key.moodle_id for key in fallback if key.moodle_id is not None})
            lookups: list[Any] = []
            if dnis:
                lookups.append(User.dni.in_(dnis))
            if moodle_ids:
                lookups.append(MoodleUser.moodle_id.in_(moodle_ids))
            if lookups:
                stmt = _join_enrollments(select(*ROW_COLUMNS)).where(or_(*lookups))
                result = await self._execute(stmt)
                found.extend(ReportRow.model_validate(dict(r._mapping)) for r in result.all())

        # fallback keys identify a row by (dni, moodle_id) even when its ids are set
        rows = dedupe_by_key(
            row for row in found if row_key(row) in wanted or fallback_key(row) in wanted
        )

        missing = len(wanted) - len(rows)
        if missing > 0:
            logger.debug("Dropped %d stale row keys", missing)

        return rows

    async def get_course_contents(self, course_ids: Sequence[int]) -> dict[int, str]:
        """Fetch the syllabus text of the given courses.

        Courses without contents are omitted.
        """
        ids = sorted(set(course_ids))
        if not ids:
            return {}
        stmt = select(Course.id_course, Course.contents).where(
            Course.id_course.in_(ids), Course.contents.is_not(None)
        )
        result = await self._execute(stmt)
        return {id_course: contents for id_course, contents in result.all() if contents}

    async def get_organization(self) -> OrganizationSettings | None:
        """Fetch the organization settings row, if configured."""
        stmt = select(OrganizationSettings).order_by(OrganizationSettings.id).limit(1)
        result = await self._execute(stmt)
        return result.scalar_one_or_none()
