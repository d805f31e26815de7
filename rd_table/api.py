"""Public API surface for rd_table."""

from rd_table.bulk import BulkAction, BulkActionDispatcher
from rd_table.columns import Column, header_map
from rd_table.controller import TableController
from rd_table.export import (
    DirectoryFileSink,
    FileSink,
    MemoryFileSink,
    default_export_filename,
    export_csv,
    to_csv,
)
from rd_table.formatters import (
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_status,
)
from rd_table.models import Page, PageState, SearchState, SortState, TableView
from rd_table.pagination import page_range, page_window, paginate
from rd_table.paths import ABSENT, resolve_path
from rd_table.search import filter_rows, search_rows
from rd_table.selection import SelectionSet
from rd_table.settings import TableSettings
from rd_table.sorting import sort_rows, sort_rows_multi, toggle_sort

__all__ = [
    "ABSENT",
    "BulkAction",
    "BulkActionDispatcher",
    "Column",
    "DirectoryFileSink",
    "FileSink",
    "MemoryFileSink",
    "Page",
    "PageState",
    "SearchState",
    "SelectionSet",
    "SortState",
    "TableController",
    "TableSettings",
    "TableView",
    "default_export_filename",
    "export_csv",
    "filter_rows",
    "format_currency",
    "format_date",
    "format_datetime",
    "format_number",
    "format_status",
    "header_map",
    "page_range",
    "page_window",
    "paginate",
    "resolve_path",
    "search_rows",
    "sort_rows",
    "sort_rows_multi",
    "to_csv",
    "toggle_sort",
]
