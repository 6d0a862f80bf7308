# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Selection reconciler for the paginated report table.

The operator may select rows across pages the client never loads in full.
The selection is therefore kept as one of two shapes:

- Explicit(keys): exactly the checked row keys, accumulated across pages.
- SelectAllMatching(exceptions): every row matching the active filter
  except the unchecked keys.

All transitions are pure: reduce() returns a new state and never mutates
the old one. Any filter change resets to an empty Explicit selection.

Example:
    >>> state = reduce(Explicit(), ToggleAllVisible(True, page_keys, total=250, loaded=100))
    >>> state = reduce(state, ToggleRow("7-3", selected=False))
    >>> count(state, 250)
    249
    >>> encode_intent(state, report_filter)
    {'select_all_matching': True, 'deselected_keys': ['7-3'], 'filter': {...}}
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Union

from pydantic import BaseModel


@dataclass(frozen=True)
class Explicit:
    """Operator-curated set of row keys."""

    keys: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class SelectAllMatching:
    """All rows matching the filter, minus the exception keys."""

    exceptions: frozenset[str] = field(default_factory=frozenset)


SelectionState = Union[Explicit, SelectAllMatching]


@dataclass(frozen=True)
class ToggleRow:
    """A single row checkbox changed."""

    key: str
    selected: bool


@dataclass(frozen=True)
class ToggleAllVisible:
    """The header checkbox changed.

    Attributes:
        selected: New header checkbox value.
        visible_keys: Keys of the rows currently rendered.
        total: Number of rows matching the filter.
        loaded: Number of rows the client has loaded.
    """

    selected: bool
    visible_keys: tuple[str, ...]
    total: int
    loaded: int


@dataclass(frozen=True)
class PageSelectionChanged:
    """The table reported the full checked set of the visible page."""

    visible_keys: tuple[str, ...]
    selected_visible_keys: tuple[str, ...]


@dataclass(frozen=True)
class FilterChanged:
    """Search text, date range or any picker changed."""


SelectionAction = Union[ToggleRow, ToggleAllVisible, PageSelectionChanged, FilterChanged]


def reduce(state: SelectionState, action: SelectionAction) -> SelectionState:
    """Apply one action to a selection state.

    Args:
        state: Current selection.
        action: Operator action.

    Returns:
        The new selection state.

    Raises:
        TypeError: If the action type is not recognized.
    """
    if isinstance(action, FilterChanged):
        return Explicit()

    if isinstance(action, ToggleRow):
        if isinstance(state, SelectAllMatching):
            if action.selected:
                return SelectAllMatching(state.exceptions - {action.key})
            return SelectAllMatching(state.exceptions | {action.key})
        if action.selected:
            return Explicit(state.keys | {action.key})
        return Explicit(state.keys - {action.key})

    if isinstance(action, ToggleAllVisible):
        visible = frozenset(action.visible_keys)
        if action.selected and action.total > action.loaded:
            return SelectAllMatching()
        if isinstance(state, SelectAllMatching):
            if not action.selected:
                return Explicit()
            # every row is loaded: re-include the visible exceptions
            return SelectAllMatching(state.exceptions - visible)
        if action.selected:
            return Explicit(state.keys | visible)
        return Explicit(state.keys - visible)

    if isinstance(action, PageSelectionChanged):
        visible = frozenset(action.visible_keys)
        checked = frozenset(action.selected_visible_keys) & visible
        if isinstance(state, SelectAllMatching):
            return SelectAllMatching((state.exceptions - visible) | (visible - checked))
        return Explicit((state.keys - visible) | checked)

    raise TypeError(f"Unsupported selection action: {type(action).__name__}")


def resolve_visible_keys(state: SelectionState, page_keys: Iterable[str]) -> list[str]:
    """Return the keys whose checkbox should render as checked.

    In SelectAllMatching mode these are the page keys not excepted, in
    page order. In Explicit mode the explicit set is returned as is.
    """
    if isinstance(state, SelectAllMatching):
        return [key for key in page_keys if key not in state.exceptions]
    return sorted(state.keys)


def is_selected(state: SelectionState, key: str) -> bool:
    if isinstance(state, SelectAllMatching):
        return key not in state.exceptions
    return key in state.keys


def count(state: SelectionState, total: int) -> int:
    """Number of rows an export of this state would contain.

    An untouched (empty Explicit) selection exports everything matching.
    """
    if isinstance(state, SelectAllMatching):
        return max(0, total - len(state.exceptions))
    if state.keys:
        return len(state.keys)
    return total


def encode_intent(state: SelectionState, report_filter: BaseModel | dict[str, Any] | None) -> dict[str, Any]:
    """Serialize a selection and the active filter into an export payload.

    Args:
        state: Current selection.
        report_filter: Active filter, as a model or plain mapping.

    Returns:
        One of {"selected_keys"}, {"select_all_matching", "deselected_keys",
        "filter"} or {"filter"}.
    """
    if isinstance(report_filter, BaseModel):
        filter_payload: dict[str, Any] = report_filter.model_dump(mode="json", exclude_none=True)
    else:
        filter_payload = dict(report_filter or {})

    if isinstance(state, SelectAllMatching):
        return {
            "select_all_matching": True,
            "deselected_keys": sorted(state.exceptions),
            "filter": filter_payload,
        }
    if state.keys:
        return {"selected_keys": sorted(state.keys)}
    return {"filter": filter_payload}
