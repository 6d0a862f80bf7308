# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for report row ordering and grouping."""

import pytest

from trainingdesk.domains.reports.grouping import (
    CENTER_PLACEHOLDER,
    COURSE_PLACEHOLDER,
    build_groups,
    collation_key,
    group_rows,
    sort_rows,
    summarize_bonification,
)


class TestSortRows:
    """Tests for sort_rows."""

    def test_dedication_orders_by_completion_descending(self, make_row) -> None:
        low = make_row(id_user=1, completion_percentage=10)
        high = make_row(id_user=2, completion_percentage=90)
        unknown = make_row(id_user=3, completion_percentage=None)

        assert sort_rows([low, unknown, high], "dedication") == [high, low, unknown]

    def test_certification_orders_by_group_then_surname(self, make_row) -> None:
        a = make_row(id_user=1, id_group=2, first_surname="Zubiri")
        b = make_row(id_user=2, id_group=1, first_surname="Zubiri")
        c = make_row(id_user=3, id_group=1, first_surname="Álvarez")

        assert sort_rows([a, b, c], "certification") == [c, b, a]

    def test_accents_and_case_do_not_split_order(self, make_row) -> None:
        """Test that Ávila sorts with A, not after Z."""
        avila = make_row(id_user=1, center_name="Ávila")
        zamora = make_row(id_user=2, center_name="Zamora")
        burgos = make_row(id_user=3, center_name="burgos")

        ordered = sort_rows([zamora, burgos, avila], "dedication")

        assert [r.center_name for r in ordered] == ["Ávila", "burgos", "Zamora"]

    def test_collation_key_is_total(self) -> None:
        assert collation_key("Ana") != collation_key("ana")
        assert collation_key(None) == ("", "")


class TestBuildGroups:
    """Tests for build_groups."""

    def test_concatenation_reproduces_sorted_rows(self, make_row) -> None:
        rows = [
            make_row(id_user=i, id_group=g, center_name=c, course_name=k, completion_percentage=i)
            for i, (g, c, k) in enumerate(
                [
                    (1, "Norte", "PRL"),
                    (2, "Sur", "PRL"),
                    (1, "Norte", "Excel"),
                    (2, "Norte", "PRL"),
                    (1, None, "PRL"),
                    (3, "Sur", None),
                ]
            )
        ]

        for report_type in ("dedication", "certification"):
            groups = build_groups(rows, report_type)
            flattened = [row for group in groups for row in group.rows]

            assert flattened == sort_rows(rows, report_type)
            assert len(flattened) == len(rows)

    def test_dedication_groups_per_center_and_course(self, make_row) -> None:
        rows = [
            make_row(id_user=1, id_group=1),
            make_row(id_user=2, id_group=2),
            make_row(id_user=3, id_group=1, course_name="Excel"),
        ]

        groups = build_groups(rows, "dedication")

        assert [(g.course_name, g.group_id, len(g.rows)) for g in groups] == [
            ("Excel", None, 1),
            ("Prevención de riesgos", None, 2),
        ]

    def test_certification_splits_by_group(self, make_row) -> None:
        rows = [make_row(id_user=1, id_group=1), make_row(id_user=2, id_group=2)]

        groups = build_groups(rows, "certification")

        assert [g.group_id for g in groups] == [1, 2]

    def test_missing_names_use_placeholders(self, make_row) -> None:
        groups = build_groups([make_row(center_name=None, course_name=None)], "dedication")

        assert groups[0].center_name == CENTER_PLACEHOLDER
        assert groups[0].course_name == COURSE_PLACEHOLDER

    def test_group_rows_only_merges_consecutive_rows(self, make_row) -> None:
        a1 = make_row(id_user=1, center_name="A")
        b = make_row(id_user=2, center_name="B")
        a2 = make_row(id_user=3, center_name="A")

        groups = group_rows([a1, b, a2], by_group=False)

        assert [g.center_name for g in groups] == ["A", "B", "A"]

    @pytest.mark.parametrize("report_type", ["dedication", "certification"])
    def test_grouping_ignores_input_order(self, make_row, report_type: str) -> None:
        """Rows tied on every printed column still come out in one order."""
        rows = [
            make_row(id_user=2, name="Juan"),
            make_row(id_user=1, name="Ana"),
            make_row(id_user=4, name="Ana", completion_percentage=50),
            make_row(id_user=3, name="Ana", completion_percentage=50),
            make_row(id_user=6, name=None, first_surname=None, second_surname=None),
            make_row(id_user=5, name=None, first_surname=None, second_surname=None),
        ]

        def order(batch: list) -> list[int]:
            return [r.id_user for g in build_groups(batch, report_type) for r in g.rows]

        expected = order(rows)
        assert order(list(reversed(rows))) == expected
        assert order(rows[2:] + rows[:2]) == expected
        assert expected.index(1) < expected.index(2)
        assert expected.index(3) < expected.index(4)
        assert expected.index(5) < expected.index(6)


class TestSummarizeBonification:
    """Tests for summarize_bonification."""

    def test_counts_distinct_students(self, make_row) -> None:
        rows = [
            make_row(id_user=1, company_name="Beta", center_name="Sur"),
            make_row(id_user=1, company_name="Beta", center_name="Sur"),
            make_row(id_user=2, company_name="Beta", center_name="Sur"),
            make_row(id_user=3, company_name="Alfa", center_name="Norte"),
            make_row(id_user=None, email="x@example.com", company_name="Alfa", center_name="Norte"),
        ]

        summary = summarize_bonification(rows)

        assert len(summary) == 1
        group = summary[0]
        assert [c.company_name for c in group.companies] == ["Alfa", "Beta"]
        assert [c.total for c in group.companies] == [2, 2]
        assert group.total == 4

    def test_missing_group_and_company_use_placeholders(self, make_row) -> None:
        summary = summarize_bonification([make_row(group_name=None, company_name=None)])

        assert summary[0].group_name == "Sin grupo"
        assert summary[0].companies[0].company_name == "Sin empresa"
