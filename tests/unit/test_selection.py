# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the report table selection reducer."""

import pytest

from trainingdesk.domains.reports.selection import (
    Explicit,
    FilterChanged,
    PageSelectionChanged,
    SelectAllMatching,
    ToggleAllVisible,
    ToggleRow,
    count,
    encode_intent,
    is_selected,
    reduce,
    resolve_visible_keys,
)
from trainingdesk.models.reports import ReportFilter

PAGE_1 = tuple(f"{i}-1" for i in range(1, 101))
PAGE_2 = tuple(f"{i}-1" for i in range(101, 201))


class TestSelectAllMatching:
    """Tests for the header checkbox and the select-all-matching mode."""

    def test_header_select_with_more_pages_selects_all_matching(self) -> None:
        """Header select-all on page 1 of 250 rows selects everything matching."""
        state = reduce(Explicit(), ToggleAllVisible(True, PAGE_1, total=250, loaded=100))

        assert state == SelectAllMatching()
        assert count(state, 250) == 250

    def test_unchecking_a_row_adds_an_exception(self) -> None:
        """Unchecking one visible row leaves 249 selected."""
        state = reduce(Explicit(), ToggleAllVisible(True, PAGE_1, total=250, loaded=100))
        state = reduce(state, ToggleRow("7-1", selected=False))

        assert state == SelectAllMatching(frozenset({"7-1"}))
        assert count(state, 250) == 249
        assert not is_selected(state, "7-1")
        assert is_selected(state, "8-1")

    def test_count_follows_exceptions(self) -> None:
        """100 matching, 3 exceptions, then one re-included."""
        state = reduce(Explicit(), ToggleAllVisible(True, PAGE_1[:20], total=100, loaded=20))
        assert count(state, 100) == 100

        for key in ("1-1", "2-1", "3-1"):
            state = reduce(state, ToggleRow(key, selected=False))
        assert count(state, 100) == 97

        state = reduce(state, ToggleRow("2-1", selected=True))
        assert count(state, 100) == 98

    def test_header_deselect_reverts_to_empty_explicit(self) -> None:
        state = SelectAllMatching(frozenset({"1-1"}))

        state = reduce(state, ToggleAllVisible(False, PAGE_1, total=250, loaded=100))

        assert state == Explicit()

    def test_header_select_with_everything_loaded_reincludes_visible(self) -> None:
        state = SelectAllMatching(frozenset({"1-1", "150-1"}))

        state = reduce(state, ToggleAllVisible(True, PAGE_1, total=100, loaded=100))

        assert state == SelectAllMatching(frozenset({"150-1"}))

    def test_page_selection_marks_unchecked_visible_rows_as_exceptions(self) -> None:
        state = SelectAllMatching(frozenset({"150-1"}))
        visible = PAGE_1[:3]

        state = reduce(state, PageSelectionChanged(visible, selected_visible_keys=visible[:1]))

        assert state == SelectAllMatching(frozenset({"150-1", visible[1], visible[2]}))

    def test_resolve_visible_keys_hides_exceptions(self) -> None:
        state = SelectAllMatching(frozenset({"2-1"}))

        assert resolve_visible_keys(state, ["1-1", "2-1", "3-1"]) == ["1-1", "3-1"]


class TestExplicitSelection:
    """Tests for explicit row selection."""

    def test_rows_across_pages_then_filter_change(self) -> None:
        """Five rows across two pages, then the search text changes."""
        state = Explicit()
        for key in (PAGE_1[0], PAGE_1[5], PAGE_1[9], PAGE_2[0], PAGE_2[1]):
            state = reduce(state, ToggleRow(key, selected=True))

        assert isinstance(state, Explicit)
        assert len(state.keys) == 5
        assert count(state, 250) == 5

        state = reduce(state, FilterChanged())

        assert state == Explicit()
        assert count(state, 37) == 37

    def test_toggle_row_off(self) -> None:
        state = reduce(Explicit(frozenset({"1-1", "2-1"})), ToggleRow("1-1", selected=False))

        assert state == Explicit(frozenset({"2-1"}))

    def test_header_select_with_everything_loaded_is_page_toggle(self) -> None:
        state = reduce(Explicit(frozenset({"x-1"})), ToggleAllVisible(True, ("1-1", "2-1"), 2, 2))
        assert state == Explicit(frozenset({"x-1", "1-1", "2-1"}))

        state = reduce(state, ToggleAllVisible(False, ("1-1", "2-1"), 2, 2))
        assert state == Explicit(frozenset({"x-1"}))

    def test_page_selection_replaces_only_visible_keys(self) -> None:
        state = Explicit(frozenset({"1-1", "150-1"}))

        state = reduce(state, PageSelectionChanged(("1-1", "2-1"), selected_visible_keys=("2-1",)))

        assert state == Explicit(frozenset({"150-1", "2-1"}))

    def test_transitions_do_not_mutate_previous_state(self) -> None:
        before = Explicit(frozenset({"1-1"}))

        reduce(before, ToggleRow("2-1", selected=True))

        assert before.keys == frozenset({"1-1"})

    def test_unknown_action_raises(self) -> None:
        with pytest.raises(TypeError):
            reduce(Explicit(), object())  # type: ignore[arg-type]


class TestEncodeIntent:
    """Tests for the export payload encoder."""

    def test_select_all_matching_shape(self) -> None:
        report_filter = ReportFilter(id_center=[3], search="garcia")
        state = SelectAllMatching(frozenset({"9-1", "2-1"}))

        payload = encode_intent(state, report_filter)

        assert payload["select_all_matching"] is True
        assert payload["deselected_keys"] == ["2-1", "9-1"]
        assert payload["filter"]["id_center"] == [3]
        assert payload["filter"]["search"] == "garcia"

    def test_explicit_shape(self) -> None:
        payload = encode_intent(Explicit(frozenset({"b-2", "a-1"})), ReportFilter())

        assert payload == {"selected_keys": ["a-1", "b-2"]}

    def test_untouched_selection_sends_filter(self) -> None:
        payload = encode_intent(Explicit(), {"id_group": [4]})

        assert payload == {"filter": {"id_group": [4]}}
