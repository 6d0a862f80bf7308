# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Row grouping for report documents.

Rows are sorted into a total order and then split in a single forward
scan: a new group starts whenever the (center, course, group) triple
differs from the previous row. Concatenating the groups reproduces the
sorted input exactly.

Order per report type:
    dedication:    center, course, completion % descending, surnames, name, ids
    certification: center, course, id_group ascending, surnames, name, id_user

Dedication sections are per (center, course); all groups of a course are
printed in one table.
"""

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from trainingdesk.models.reports import ReportRow, ReportType

CENTER_PLACEHOLDER = "Sin centro"
COURSE_PLACEHOLDER = "Sin curso"
GROUP_PLACEHOLDER = "Sin grupo"
COMPANY_PLACEHOLDER = "Sin empresa"


@dataclass
class ReportGroup:
    """Rows rendered together as one document section."""

    center_name: str
    course_name: str
    group_id: int | None
    rows: list[ReportRow] = field(default_factory=list)

    @property
    def first(self) -> ReportRow:
        return self.rows[0]


@dataclass
class CenterCount:
    center_name: str
    students: int


@dataclass
class CompanySummary:
    company_name: str
    centers: list[CenterCount]

    @property
    def total(self) -> int:
        return sum(center.students for center in self.centers)


@dataclass
class BonificationGroup:
    """Distinct student counts of one LMS group, by company and center."""

    group_name: str
    companies: list[CompanySummary]

    @property
    def total(self) -> int:
        return sum(company.total for company in self.companies)


def collation_key(value: str | None) -> tuple[str, str]:
    """Sort key approximating Spanish locale order.

    Accents and case are ignored first; the raw value breaks ties so the
    order stays total.
    """
    text = value or ""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return folded, text


def center_label(row: ReportRow) -> str:
    return row.center_name if row.center_name is not None else CENTER_PLACEHOLDER


def course_label(row: ReportRow) -> str:
    return row.course_name if row.course_name is not None else COURSE_PLACEHOLDER


def _dedication_key(row: ReportRow) -> tuple[Any, ...]:
    return (
        collation_key(center_label(row)),
        collation_key(course_label(row)),
        -(row.completion_percentage or 0.0),
        collation_key(row.first_surname),
        collation_key(row.second_surname),
        collation_key(row.name),
        row.id_user or 0,
        row.id_group or 0,
    )


def _certification_key(row: ReportRow) -> tuple[Any, ...]:
    return (
        collation_key(center_label(row)),
        collation_key(course_label(row)),
        row.id_group or 0,
        collation_key(row.first_surname),
        collation_key(row.second_surname),
        collation_key(row.name),
        row.id_user or 0,
    )


_SORT_KEYS: dict[str, Callable[[ReportRow], tuple[Any, ...]]] = {
    "dedication": _dedication_key,
    "certification": _certification_key,
}


def sort_rows(rows: Iterable[ReportRow], report_type: ReportType) -> list[ReportRow]:
    """Sort rows into the deterministic order used for grouping.

    Args:
        rows: Rows to sort.
        report_type: "dedication" or "certification".

    Returns:
        A new sorted list. The sort is stable.

    Raises:
        KeyError: If the report type has no row order.
    """
    return sorted(rows, key=_SORT_KEYS[report_type])


def group_rows(rows: Sequence[ReportRow], by_group: bool) -> list[ReportGroup]:
    """Split already-sorted rows into consecutive groups.

    Args:
        rows: Rows in grouping order.
        by_group: Whether id_group is part of the grouping triple.

    Returns:
        Groups in input order.
    """
    groups: list[ReportGroup] = []
    for row in rows:
        center = center_label(row)
        course = course_label(row)
        group_id = row.id_group if by_group else None

        last = groups[-1] if groups else None
        if (
            last is not None
            and last.center_name == center
            and last.course_name == course
            and last.group_id == group_id
        ):
            last.rows.append(row)
        else:
            groups.append(ReportGroup(center, course, group_id, [row]))
    return groups


def build_groups(rows: Iterable[ReportRow], report_type: ReportType) -> list[ReportGroup]:
    """Sort and group rows for a dedication or certification document."""
    ordered = sort_rows(rows, report_type)
    return group_rows(ordered, by_group=report_type == "certification")


def summarize_bonification(rows: Iterable[ReportRow]) -> list[BonificationGroup]:
    """Count distinct students per group, company and center.

    Students are identified by id_user, falling back to email then DNI.
    Rows with none of these are not counted.
    """
    tree: dict[str, dict[str, dict[str, set[str]]]] = {}
    for row in rows:
        group_name = row.group_name if row.group_name is not None else GROUP_PLACEHOLDER
        company = row.company_name if row.company_name is not None else COMPANY_PLACEHOLDER
        center = center_label(row)
        students = tree.setdefault(group_name, {}).setdefault(company, {}).setdefault(center, set())

        if row.id_user is not None:
            students.add(str(row.id_user))
        elif row.email:
            students.add(row.email)
        elif row.dni:
            students.add(row.dni)

    summary: list[BonificationGroup] = []
    for group_name in sorted(tree, key=collation_key):
        companies = []
        for company in sorted(tree[group_name], key=collation_key):
            centers = tree[group_name][company]
            companies.append(
                CompanySummary(
                    company_name=company,
                    centers=[
                        CenterCount(center, len(centers[center]))
                        for center in sorted(centers, key=collation_key)
                    ],
                )
            )
        summary.append(BonificationGroup(group_name=group_name, companies=companies))
    return summary
