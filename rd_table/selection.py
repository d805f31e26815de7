"""Row selection scoped to the visible page."""

from __future__ import annotations

import logging
from typing import Any, Hashable, Iterable, Iterator

logger = logging.getLogger(__name__)


class SelectionSet:
    """Ordered set of selected row ids.

    "All selected" and "indeterminate" are always evaluated against the ids
    of the page the user is looking at, never the whole dataset. Ids keep
    the order in which they were selected so bulk actions see a stable list.
    """

    def __init__(self, ids: Iterable[Hashable] = ()) -> None:
        self._ids: dict[Hashable, None] = dict.fromkeys(ids)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._ids

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._ids)!r})"

    def ids(self) -> list[Hashable]:
        return list(self._ids)

    def is_selected(self, row_id: Hashable) -> bool:
        return row_id in self._ids

    def select(self, row_id: Hashable) -> None:
        self._ids.setdefault(row_id, None)

    def deselect(self, row_id: Hashable) -> None:
        self._ids.pop(row_id, None)

    def toggle(self, row_id: Hashable) -> bool:
        """Flip one id; returns the new selected state."""
        if row_id in self._ids:
            del self._ids[row_id]
            return False
        self._ids[row_id] = None
        return True

    def select_all_visible(self, visible_ids: Iterable[Hashable]) -> None:
        for row_id in visible_ids:
            self._ids.setdefault(row_id, None)

    def clear_all_visible(self, visible_ids: Iterable[Hashable]) -> None:
        for row_id in visible_ids:
            self._ids.pop(row_id, None)

    def set_all_visible(self, visible_ids: Iterable[Hashable], checked: bool) -> None:
        """Header checkbox handler."""
        if checked:
            self.select_all_visible(visible_ids)
        else:
            self.clear_all_visible(visible_ids)

    def is_all_selected(self, visible_ids: Iterable[Hashable]) -> bool:
        visible = list(visible_ids)
        return bool(visible) and all(row_id in self._ids for row_id in visible)

    def is_indeterminate(self, visible_ids: Iterable[Hashable]) -> bool:
        visible = list(visible_ids)
        selected = sum(1 for row_id in visible if row_id in self._ids)
        return 0 < selected < len(visible)

    def clear(self) -> None:
        self._ids.clear()

    def reconcile(self, snapshot_ids: Iterable[Any]) -> list[Hashable]:
        """Drop ids missing from the new snapshot; returns the pruned ids."""
        present = set(snapshot_ids)
        stale = [row_id for row_id in self._ids if row_id not in present]
        for row_id in stale:
            del self._ids[row_id]
        if stale:
            logger.debug("Pruned %d stale selected ids", len(stale))
        return stale
