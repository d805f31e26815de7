"""Table controller: one derivation pipeline over an in-memory snapshot.

Every state change re-runs Filter -> Search -> Sort -> Paginate -> Render and
publishes an immutable :class:`~rd_table.models.TableView`. Sort, search and
filter changes return to the first page; a page-size change keeps the first
visible row on screen. Selection is reconciled against each new snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Iterable, Literal, Mapping, Sequence

from rd_common.errors import ConfigurationError, MalformedColumnPath
from rd_table.bulk import BulkAction, BulkActionDispatcher, BulkCallback
from rd_table.columns import Column, header_map, validate_columns
from rd_table.export import FileSink, default_export_filename, export_csv
from rd_table.models import Direction, PageState, SearchState, SortState, TableView
from rd_table.pagination import (
    anchored_page,
    clamp_page,
    page_range,
    page_window,
    paginate,
    total_pages,
)
from rd_table.paths import is_absent, resolve_path
from rd_table.search import active_filters, filter_rows, search_rows
from rd_table.selection import SelectionSet
from rd_table.settings import TableSettings
from rd_table.sorting import sort_rows, toggle_sort

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
ExportScope = Literal["filtered", "page", "selected", "all"]
SortListener = Callable[[SortState], None]
SelectListener = Callable[[list[Hashable]], None]


class TableController:
    """Session-local UI state for one table plus the derived view."""

    def __init__(
        self,
        columns: Iterable[Column],
        rows: Iterable[Row] = (),
        *,
        search_fields: Sequence[str] | None = None,
        settings: TableSettings | None = None,
        id_field: str | None = None,
        page_size: int | None = None,
        loading: bool = False,
        export_prefix: str = "export",
    ) -> None:
        self._columns = validate_columns(columns)
        if not self._columns:
            raise ConfigurationError("A table needs at least one column")
        self._settings = settings or TableSettings()
        self._id_fields = [id_field] if id_field else list(self._settings.id_fields)
        if search_fields is None:
            search_fields = [c.key_path for c in self._columns if c.key_path]
        self._search_fields = tuple(search_fields)
        self._page_size = page_size if page_size is not None else self._settings.page_size
        total_pages(0, self._page_size)
        self.export_prefix = export_prefix

        self._rows: list[Row] = []
        self._row_ids: list[Hashable | None] = []
        self._id_set: set[Hashable] = set()
        self._loading = loading
        self._sort = SortState()
        self._query = ""
        self._filters: dict[str, Any] = {}
        self._page = 1
        self._missing: list[Column] = []
        self._ordered: list[Row] = []

        self.selection = SelectionSet()
        self.bulk = BulkActionDispatcher()
        self._sort_listeners: list[SortListener] = []
        self._select_listeners: list[SelectListener] = []
        self._view: TableView | None = None

        self.set_rows(rows, loading=loading)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    @property
    def settings(self) -> TableSettings:
        return self._settings

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    @property
    def sort(self) -> SortState:
        return self._sort

    @property
    def query(self) -> str:
        return self._query

    @property
    def search_fields(self) -> tuple[str, ...]:
        return self._search_fields

    @property
    def filters(self) -> dict[str, Any]:
        return dict(self._filters)

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def view(self) -> TableView:
        if self._view is None:
            self._refresh()
        assert self._view is not None
        return self._view

    def column(self, key: str) -> Column | None:
        for column in self._columns:
            if key in (column.key, column.key_path):
                return column
        return None

    def row_id(self, row: Row) -> Hashable | None:
        """First non-empty, hashable id field of ``row``; None when it has none."""
        for field in self._id_fields:
            value = resolve_path(row, field)
            if is_absent(value) or value == "":
                continue
            try:
                hash(value)
            except TypeError:
                logger.debug("Ignoring unhashable id in field %r: %r", field, value)
                continue
            return value
        return None

    def filtered_rows(self) -> list[Row]:
        """Rows after filter, search and sort, across every page."""
        if self._view is None:
            self._refresh()
        return list(self._ordered)

    def rows_for_ids(self, ids: Iterable[Hashable]) -> list[Row]:
        """Snapshot rows for ``ids``, in the order the ids are given."""
        by_id = {
            row_id: row
            for row_id, row in zip(self._row_ids, self._rows)
            if row_id is not None
        }
        return [by_id[row_id] for row_id in ids if row_id in by_id]

    def missing_columns(self) -> list[Column]:
        """Columns whose key path resolves on no row of the current snapshot."""
        return list(self._missing)

    # ------------------------------------------------------------------
    # Row source
    # ------------------------------------------------------------------

    def set_rows(self, rows: Iterable[Row], *, loading: bool = False) -> TableView:
        """Replace the snapshot, prune stale selections and re-derive."""
        self._rows = list(rows)
        self._row_ids = [self.row_id(row) for row in self._rows]
        self._id_set = {row_id for row_id in self._row_ids if row_id is not None}
        self._loading = loading
        stale = self.selection.reconcile(i for i in self._row_ids if i is not None)
        self._missing = self._detect_missing_columns()
        view = self._refresh()
        if stale:
            self._notify_select()
        return view

    def set_loading(self, loading: bool) -> TableView:
        self._loading = loading
        return self._refresh()

    def _detect_missing_columns(self) -> list[Column]:
        if not self._rows:
            return []
        missing = [
            column
            for column in self._columns
            if column.key_path
            and all(is_absent(resolve_path(row, column.key_path)) for row in self._rows)
        ]
        for column in missing:
            warning = MalformedColumnPath(
                f"Column {column.title or column.key_path!r} resolves on no row",
                context={"key_path": column.key_path, "rows": len(self._rows)},
            )
            logger.warning("%s", warning, extra={"error": warning.to_dict()})
        return missing

    # ------------------------------------------------------------------
    # Sort / search / filter
    # ------------------------------------------------------------------

    def toggle_sort(self, key: str) -> SortState:
        """Header click: flip direction on the same column, else ascending."""
        column = self.column(key)
        if column is None or not column.is_sortable:
            logger.debug("Ignoring sort request for non-sortable column %r", key)
            return self._sort
        self._apply_sort(toggle_sort(self._sort, column.key_path))
        return self._sort

    def set_sort(self, key: str | None, direction: Direction = "asc") -> SortState:
        column = self.column(key) if key else None
        path = column.key_path if column is not None and column.key_path else key
        self._apply_sort(SortState(key=path or None, direction=direction))
        return self._sort

    def clear_sort(self) -> SortState:
        self._apply_sort(SortState())
        return self._sort

    def _apply_sort(self, state: SortState) -> None:
        self._sort = state
        self._page = 1
        self._refresh()
        for listener in list(self._sort_listeners):
            listener(state)

    def set_search(self, query: str | None) -> TableView:
        self._query = query or ""
        self._page = 1
        return self._refresh()

    def set_search_fields(self, fields: Sequence[str]) -> TableView:
        self._search_fields = tuple(fields)
        self._page = 1
        return self._refresh()

    def set_filter(self, key: str, value: Any) -> TableView:
        """Constrain ``key`` to ``value``; None or "" removes the constraint."""
        if value is None or value == "":
            self._filters.pop(key, None)
        else:
            self._filters[key] = value
        self._page = 1
        return self._refresh()

    def clear_filter(self, key: str) -> TableView:
        return self.set_filter(key, None)

    def clear_filters(self) -> TableView:
        self._filters.clear()
        self._page = 1
        return self._refresh()

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def set_page(self, page: int) -> TableView:
        self._page = int(page)
        return self._refresh()

    def next_page(self) -> TableView:
        return self.set_page(self._page + 1)

    def previous_page(self) -> TableView:
        return self.set_page(self._page - 1)

    def set_page_size(self, page_size: int) -> TableView:
        """Change rows per page keeping the previous first row in view."""
        self._page = anchored_page(self._page, self._page_size, page_size)
        self._page_size = page_size
        return self._refresh()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def is_selected(self, row_id: Hashable) -> bool:
        return self.selection.is_selected(row_id)

    def selected_ids(self) -> list[Hashable]:
        return self.selection.ids()

    def selected_rows(self) -> list[Row]:
        return self.rows_for_ids(self.selection.ids())

    def toggle_row(self, row_id: Hashable) -> bool:
        """Flip one row; ids outside the snapshot are ignored."""
        if row_id is None or row_id not in self._id_set:
            logger.debug("Ignoring selection of unknown row id %r", row_id)
            return False
        selected = self.selection.toggle(row_id)
        self._after_selection()
        return selected

    def set_all_visible(self, checked: bool) -> TableView:
        self.selection.set_all_visible(self._visible_ids(), checked)
        return self._after_selection()

    def select_all_visible(self) -> TableView:
        return self.set_all_visible(True)

    def clear_all_visible(self) -> TableView:
        return self.set_all_visible(False)

    def clear_selection(self) -> TableView:
        self.selection.clear()
        return self._after_selection()

    def _visible_ids(self) -> list[Hashable]:
        return list(self.view.row_ids)

    def _after_selection(self) -> TableView:
        view = self._refresh()
        self._notify_select()
        return view

    def _notify_select(self) -> None:
        ids = self.selection.ids()
        for listener in list(self._select_listeners):
            listener(ids)

    # ------------------------------------------------------------------
    # Bulk actions / export
    # ------------------------------------------------------------------

    def register_bulk_action(
        self,
        name: str,
        action: BulkCallback,
        *,
        label: str = "",
        variant: str = "default",
    ) -> BulkAction:
        return self.bulk.register(name, action, label=label, variant=variant)

    def bulk_actions(self) -> list[BulkAction]:
        return self.bulk.actions()

    def run_bulk_action(self, name: str) -> Any:
        """Run ``name`` with the selected ids; selection is cleared regardless."""
        try:
            return self.bulk.dispatch(name, self.selection)
        finally:
            self._after_selection()

    def export_rows(self, scope: ExportScope = "filtered") -> list[Row]:
        if scope == "filtered":
            return self.filtered_rows()
        if scope == "page":
            return list(self.view.rows)
        if scope == "selected":
            selected = set(self.selection.ids())
            return [
                row
                for row_id, row in zip(self._row_ids, self._rows)
                if row_id is not None and row_id in selected
            ]
        if scope == "all":
            return list(self._rows)
        raise ValueError(f"Unknown export scope {scope!r}")

    def export_csv(
        self,
        sink: FileSink,
        filename: str | None = None,
        *,
        scope: ExportScope = "filtered",
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Serialize rows of ``scope`` and hand the text to ``sink``."""
        headers = dict(headers) if headers is not None else header_map(self._columns)
        getters = {}
        for key in headers:
            column = self.column(key)
            if column is not None:
                getters[key] = column.export_value
        rows = self.export_rows(scope)
        name = filename or default_export_filename(self.export_prefix)
        logger.info("Exporting %d rows (%s) to %s", len(rows), scope, name)
        return export_csv(
            rows,
            headers,
            sink,
            name,
            getters=getters,
            delimiter=self._settings.csv_delimiter,
            line_terminator=self._settings.csv_line_terminator,
        )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_sort(self, listener: SortListener) -> SortListener:
        self._sort_listeners.append(listener)
        return listener

    def on_select(self, listener: SelectListener) -> SelectListener:
        self._select_listeners.append(listener)
        return listener

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _temporal(self, key: str | None) -> bool:
        if not key:
            return False
        column = self.column(key)
        return column is not None and column.type == "date"

    def _refresh(self) -> TableView:
        filtered = filter_rows(self._rows, self._filters)
        searched = search_rows(filtered, self._query, self._search_fields)
        ordered = sort_rows(searched, self._sort, temporal=self._temporal(self._sort.key))
        self._ordered = ordered

        pages = total_pages(len(ordered), self._page_size)
        self._page = clamp_page(self._page, pages)
        page = paginate(ordered, PageState(current_page=self._page, page_size=self._page_size))

        placeholder = self._settings.placeholder
        cells = [[column.cell(row, placeholder) for column in self._columns] for row in page.rows]
        page_ids = [self.row_id(row) for row in page.rows]
        visible_ids = [row_id for row_id in page_ids if row_id is not None]
        first, last = page_range(page.current_page, self._page_size, len(ordered))

        self._view = TableView(
            columns=list(self._columns),
            rows=page.rows,
            row_ids=visible_ids,
            cells=cells,
            current_page=page.current_page,
            page_size=self._page_size,
            total_pages=pages,
            page_window=page_window(page.current_page, pages, self._settings.window_size),
            first_index=first,
            last_index=last,
            filtered_count=len(ordered),
            total_count=len(self._rows),
            sort=self._sort,
            search=SearchState(query=self._query, fields=self._search_fields),
            filters=active_filters(self._filters),
            selected_ids=self.selection.ids(),
            is_all_selected=self.selection.is_all_selected(visible_ids),
            is_indeterminate=self.selection.is_indeterminate(visible_ids),
            loading=self._loading,
            empty_message=self._settings.empty_message,
            selected_on_page=[i for i in visible_ids if self.selection.is_selected(i)],
            page_ids=page_ids,
        )
        return self._view
