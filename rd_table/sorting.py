"""Stable sorting of rows over nested key paths.

Values are mapped to comparable tuples so that mixed or missing data never
raises: absent values rank lowest, then numbers, then points in time, then
text, then anything else (compared by its string form). Python's sort is
stable in both directions, so ties always keep their input order.
"""

from __future__ import annotations

import locale
import math
import numbers
import unicodedata
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Collection, Iterable, Sequence, TypeVar

from rd_table.formatters import coerce_datetime
from rd_table.models import SortState
from rd_table.paths import is_absent, resolve_path

T = TypeVar("T")

_ABSENT_RANK = 0
_NUMBER_RANK = 1
_TIME_RANK = 2
_TEXT_RANK = 3
_OTHER_RANK = 4


def _base_letters(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _collate(text: str) -> str:
    try:
        return locale.strxfrm(text)
    except (ValueError, OSError):
        return text


def _text_key(text: str) -> tuple[Any, ...]:
    # Accents only break ties, so "Émile" sorts with the E's even under the C locale.
    folded = text.casefold()
    return (_TEXT_RANK, _collate(_base_letters(text)), _collate(folded), text)


def sort_key(value: Any, *, temporal: bool = False) -> tuple[Any, ...]:
    """Comparable key for a single resolved value.

    With ``temporal`` set, ISO-8601 strings and numeric timestamps are
    compared chronologically as well.
    """
    if is_absent(value):
        return (_ABSENT_RANK,)
    if isinstance(value, (datetime, date)):
        moment = coerce_datetime(value)
        return (_TIME_RANK, moment.timestamp()) if moment else (_ABSENT_RANK,)
    if temporal and isinstance(value, (str, int, float)) and not isinstance(value, bool):
        moment = coerce_datetime(value)
        if moment is not None:
            return (_TIME_RANK, moment.timestamp())
    if isinstance(value, (numbers.Real, Decimal)):
        if isinstance(value, float) and math.isnan(value):
            return (_ABSENT_RANK,)
        if isinstance(value, Decimal) and value.is_nan():
            return (_ABSENT_RANK,)
        return (_NUMBER_RANK, value)
    if isinstance(value, str):
        return _text_key(value)
    try:
        return (_OTHER_RANK, str(value))
    except Exception:
        return (_OTHER_RANK, "")


def sort_rows(
    rows: Iterable[T],
    state: SortState,
    *,
    temporal: bool = False,
) -> list[T]:
    """Return a new list ordered by ``state``; a null key keeps input order."""
    ordered = list(rows)
    if not state.key:
        return ordered
    key_path = state.key
    ordered.sort(
        key=lambda row: sort_key(resolve_path(row, key_path), temporal=temporal),
        reverse=state.descending,
    )
    return ordered


def sort_rows_multi(
    rows: Iterable[T],
    states: Sequence[SortState],
    *,
    temporal_keys: Collection[str] = (),
) -> list[T]:
    """Stable multi-column sort; ``states[0]`` has the highest precedence."""
    ordered = list(rows)
    for state in reversed(states):
        ordered = sort_rows(ordered, state, temporal=state.key in temporal_keys)
    return ordered


def toggle_sort(current: SortState, key: str) -> SortState:
    """Same key flips the direction; a new key starts ascending."""
    if current.key == key:
        return SortState(key=key, direction="desc" if current.direction == "asc" else "asc")
    return SortState(key=key, direction="asc")
