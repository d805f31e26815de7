"""Render-agnostic tabular data engine.

Search, categorical filters, stable sorting, pagination, page-scoped
selection, bulk actions and CSV export over an in-memory row snapshot.
"""

from rd_table.api import (
    Column,
    SelectionSet,
    SortState,
    TableController,
    TableSettings,
    TableView,
    to_csv,
)

__all__ = [
    "Column",
    "SelectionSet",
    "SortState",
    "TableController",
    "TableSettings",
    "TableView",
    "to_csv",
]
