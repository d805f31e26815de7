"""Safe lookup of dot-separated key paths on schema-less rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final


class _Absent:
    """Marker for a key path that does not resolve to a value."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


def split_path(path: str) -> tuple[str, ...]:
    """Split a key path into its segments, rejecting empty paths."""
    if not isinstance(path, str) or not path.strip():
        raise ValueError(f"Key path must be a non-empty string, got {path!r}")
    return tuple(part for part in path.strip().split(".") if part)


def _step(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment, ABSENT)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return value[int(segment)]
        except (ValueError, IndexError):
            return ABSENT
    return getattr(value, segment, ABSENT)


def resolve_path(row: Any, path: str) -> Any:
    """Return the value at ``path`` on ``row`` or ``ABSENT``.

    Mappings are indexed by key, sequences by integer segment and any other
    object by attribute. ``None`` anywhere on the way counts as absent.
    """
    value = row
    for segment in split_path(path):
        if value is None or value is ABSENT:
            return ABSENT
        value = _step(value, segment)
    if value is None:
        return ABSENT
    return value


def is_absent(value: Any) -> bool:
    return value is ABSENT or value is None
