"""Bulk actions run once over the selected row ids."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from rd_common.errors import UnknownBulkActionError
from rd_table.selection import SelectionSet

logger = logging.getLogger(__name__)

BulkCallback = Callable[[list[Hashable]], Any]


@dataclass(frozen=True)
class BulkAction:
    name: str
    action: BulkCallback
    label: str = ""
    variant: str = "default"

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").title()


class BulkActionDispatcher:
    """Registry of named bulk actions.

    Dispatch passes the current id list to the action and clears the
    selection afterwards no matter what the action did. Results (including
    awaitables) are handed back untouched; nothing is awaited or retried.
    """

    def __init__(self) -> None:
        self._actions: dict[str, BulkAction] = {}

    def register(
        self,
        name: str,
        action: BulkCallback,
        *,
        label: str = "",
        variant: str = "default",
    ) -> BulkAction:
        if not name:
            raise ValueError("Bulk action name must be non-empty")
        if not callable(action):
            raise TypeError(f"Bulk action {name!r} is not callable")
        entry = BulkAction(name=name, action=action, label=label, variant=variant)
        self._actions[name] = entry
        return entry

    def unregister(self, name: str) -> None:
        self._actions.pop(name, None)

    def actions(self) -> list[BulkAction]:
        return list(self._actions.values())

    def get(self, name: str) -> BulkAction:
        try:
            return self._actions[name]
        except KeyError:
            raise UnknownBulkActionError(
                f"Unknown bulk action {name!r}",
                context={"action": name, "available": sorted(self._actions)},
            ) from None

    def dispatch(self, name: str, selection: SelectionSet) -> Any:
        entry = self.get(name)
        ids = selection.ids()
        logger.info("Dispatching bulk action %s for %d ids", name, len(ids))
        try:
            return entry.action(ids)
        finally:
            selection.clear()
