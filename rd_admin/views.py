"""Shared plumbing for the admin screens built on the table engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Mapping

from rd_common.errors import BulkActionPartialFailure, UnknownBulkActionError
from rd_table.columns import Column
from rd_table.controller import ExportScope, TableController
from rd_table.export import FileSink, default_export_filename, export_csv
from rd_table.paths import is_absent, resolve_path
from rd_table.settings import TableSettings

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
RowCallback = Callable[[Row], Any]


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass
class AdminView:
    """Column set, search fields, filter choices and export layout of a screen."""

    name: str
    title: str
    columns: list[Column]
    search_fields: list[str]
    export_headers: dict[str, str]
    export_prefix: str
    filters: dict[str, list[FilterOption]] = field(default_factory=dict)
    description: str = ""
    export_getters: dict[str, RowCallback] = field(default_factory=dict)

    def filter_values(self, key: str) -> list[str]:
        return [option.value for option in self.filters.get(key, []) if option.value]


@dataclass
class AdminTable:
    """A configured controller plus the per-row callbacks of one screen."""

    view: AdminView
    controller: TableController
    row_actions: dict[str, RowCallback] = field(default_factory=dict)

    def run_row_action(self, name: str, row_id: Hashable) -> Any:
        try:
            action = self.row_actions[name]
        except KeyError:
            raise UnknownBulkActionError(
                f"Unknown row action {name!r}",
                context={"action": name, "available": sorted(self.row_actions)},
            ) from None
        rows = self.controller.rows_for_ids([row_id])
        if not rows:
            logger.debug("Row action %s skipped: id %r not in snapshot", name, row_id)
            return None
        return action(rows[0])

    def export(
        self,
        sink: FileSink,
        *,
        scope: ExportScope = "filtered",
        filename: str | None = None,
    ) -> Any:
        """Export with the screen's own headers and dated filename."""
        return export_view(self.controller, self.view, sink, scope=scope, filename=filename)


def export_view(
    controller: TableController,
    view: AdminView,
    sink: FileSink,
    *,
    scope: ExportScope = "filtered",
    filename: str | None = None,
) -> Any:
    rows = controller.export_rows(scope)
    name = filename or default_export_filename(view.export_prefix)
    logger.info("Exporting %d %s rows to %s", len(rows), view.name, name)
    return export_csv(
        rows,
        view.export_headers,
        sink,
        name,
        getters=view.export_getters,
        delimiter=controller.settings.csv_delimiter,
        line_terminator=controller.settings.csv_line_terminator,
    )


def apply_to_rows(
    controller: TableController,
    ids: Iterable[Hashable],
    callback: RowCallback | None,
    *,
    action: str,
    skip: Callable[[Row], bool] | None = None,
) -> list[Hashable]:
    """Call ``callback`` for each selected row and return the ids it touched.

    Rows for which ``skip`` is true are left alone. Failures do not stop the
    loop; once every row was tried they are reported together.
    """
    done: list[Hashable] = []
    failed: list[Hashable] = []
    first_error: Exception | None = None
    for row in controller.rows_for_ids(list(ids)):
        if skip is not None and skip(row):
            continue
        row_id = controller.row_id(row)
        if callback is None:
            continue
        try:
            callback(row)
        except Exception as exc:
            logger.warning("Bulk %s failed for %r: %s", action, row_id, exc)
            failed.append(row_id)
            first_error = first_error or exc
            continue
        done.append(row_id)
    if failed:
        raise BulkActionPartialFailure(
            f"Bulk {action} failed for {len(failed)} row(s)",
            failed_ids=failed,
            context={"action": action, "succeeded": done},
            cause=first_error,
        )
    return done


def build_table(
    view: AdminView,
    rows: Iterable[Row],
    *,
    settings: TableSettings | None = None,
    row_actions: Mapping[str, RowCallback | None] | None = None,
) -> AdminTable:
    controller = TableController(
        view.columns,
        rows,
        search_fields=view.search_fields,
        settings=settings,
        export_prefix=view.export_prefix,
    )
    actions = {name: cb for name, cb in (row_actions or {}).items() if cb is not None}
    return AdminTable(view=view, controller=controller, row_actions=actions)


def value_at(row: Any, path: str) -> Any:
    """Value at ``path`` on a mapping or object row; None when absent."""
    value = resolve_path(row, path)
    return None if is_absent(value) else value


def text(value: Any, fallback: str = "") -> str:
    if is_absent(value) or value == "":
        return fallback
    return str(value)
