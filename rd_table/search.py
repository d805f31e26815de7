"""Free-text search and categorical filtering over rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Sequence, TypeVar

from rd_table.paths import ABSENT, is_absent, resolve_path

T = TypeVar("T")


def _stringify(value: Any) -> str:
    if is_absent(value):
        return ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return " ".join(_stringify(item) for item in value)
    try:
        return str(value)
    except Exception:
        return ""


def row_matches(row: Any, needle: str, fields: Sequence[str]) -> bool:
    """True when any field's text contains ``needle`` (already case-folded)."""
    for path in fields:
        text = _stringify(resolve_path(row, path))
        if text and needle in text.casefold():
            return True
    return False


def search_rows(rows: Iterable[T], query: str | None, fields: Sequence[str]) -> list[T]:
    """Case-insensitive substring search; an empty query keeps every row."""
    items = list(rows)
    needle = (query or "").strip().casefold()
    if not needle:
        return items
    return [row for row in items if row_matches(row, needle, fields)]


def active_filters(filter_state: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys whose value means "no constraint" (None or empty string)."""
    return {
        key: value
        for key, value in filter_state.items()
        if value is not None and value != ""
    }


def filter_rows(rows: Iterable[T], filter_state: Mapping[str, Any]) -> list[T]:
    """Exact-match filter; every active key must match (AND)."""
    items = list(rows)
    constraints = active_filters(filter_state)
    if not constraints:
        return items
    return [row for row in items if _matches_all(row, constraints)]


def _matches_all(row: Any, constraints: Mapping[str, Any]) -> bool:
    for key, expected in constraints.items():
        value = resolve_path(row, key)
        if value is ABSENT or value != expected:
            return False
    return True
