"""State and view models shared by the table engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Sequence

Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class SortState:
    """Sort key path and direction; ``key=None`` keeps source order."""

    key: str | None = None
    direction: Direction = "asc"

    def __post_init__(self) -> None:
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {self.direction!r}")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class PageState:
    current_page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class Page:
    """One slice of a row sequence."""

    rows: list[Any]
    current_page: int
    total_pages: int
    page_size: int
    total_count: int


@dataclass(frozen=True)
class TableView:
    """Everything a renderer needs after one pipeline run."""

    columns: Sequence[Any]
    rows: list[Mapping[str, Any]]
    row_ids: list[Any]
    cells: list[list[Any]]
    current_page: int
    page_size: int
    total_pages: int
    page_window: list[int]
    first_index: int
    last_index: int
    filtered_count: int
    total_count: int
    sort: SortState
    search: SearchState
    filters: Mapping[str, Any]
    selected_ids: list[Any]
    is_all_selected: bool
    is_indeterminate: bool
    loading: bool = False
    empty_message: str = "No data available"
    selected_on_page: list[Any] = field(default_factory=list)
    page_ids: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """No rows after filtering and search (and not merely loading)."""
        return not self.loading and self.filtered_count == 0

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def summary(self) -> str:
        if self.filtered_count == 0:
            return "Showing 0 results"
        return (
            f"Showing {self.first_index} to {self.last_index} "
            f"of {self.filtered_count} results"
        )
