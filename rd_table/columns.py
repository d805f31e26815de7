"""Column definitions: a declared, renderable projection of a row."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence, get_args

from rd_common.errors import ColumnDefinitionError
from rd_table.formatters import format_currency, format_date
from rd_table.paths import ABSENT, is_absent, resolve_path, split_path

ColumnType = Literal["text", "date", "currency"]
Row = Mapping[str, Any]
Renderer = Callable[[Row], Any]

COLUMN_TYPES: tuple[str, ...] = get_args(ColumnType)


@dataclass(frozen=True)
class Column:
    """Declarative column.

    ``key_path`` drives sorting, default rendering and export; ``render``
    replaces the default presentation. A column needs at least one of them.
    ``name`` identifies columns that have no key path (e.g. action buttons).
    """

    key_path: str = ""
    title: str = ""
    sortable: bool = True
    width: str | None = None
    type: ColumnType = "text"
    render: Renderer | None = None
    export: Renderer | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if not self.key_path and self.render is None:
            raise ColumnDefinitionError(
                "Column needs a key_path or a render function",
                context={"title": self.title, "name": self.name},
            )
        if self.key_path:
            try:
                split_path(self.key_path)
            except ValueError as exc:
                raise ColumnDefinitionError(
                    f"Invalid key path {self.key_path!r}",
                    context={"title": self.title},
                    cause=exc,
                ) from exc
        if self.type not in COLUMN_TYPES:
            raise ColumnDefinitionError(
                f"Unknown column type {self.type!r}",
                context={"title": self.title, "allowed": COLUMN_TYPES},
            )
        if self.render is not None and not callable(self.render):
            raise ColumnDefinitionError(
                "Column render must be callable", context={"title": self.title}
            )

    @property
    def key(self) -> str:
        return self.name or self.key_path

    @property
    def is_sortable(self) -> bool:
        return self.sortable and bool(self.key_path)

    def value(self, row: Row) -> Any:
        if not self.key_path:
            return ABSENT
        return resolve_path(row, self.key_path)

    def cell(self, row: Row, placeholder: str = "-") -> Any:
        """Presentation value for ``row``."""
        if self.render is not None:
            return self.render(row)
        value = self.value(row)
        if is_absent(value):
            return placeholder
        if self.type == "date":
            return format_date(value)
        if self.type == "currency":
            return format_currency(value)
        return str(value)

    def export_value(self, row: Row) -> Any:
        if self.export is not None:
            return self.export(row)
        return self.value(row)


def validate_columns(columns: Iterable[Column]) -> list[Column]:
    """Return the columns as a list, rejecting duplicate keys."""
    result = list(columns)
    seen: set[str] = set()
    for column in result:
        if not isinstance(column, Column):
            raise ColumnDefinitionError(
                f"Expected Column, got {type(column).__name__}"
            )
        key = column.key
        if key and key in seen:
            raise ColumnDefinitionError(
                f"Duplicate column key {key!r}", context={"title": column.title}
            )
        if key:
            seen.add(key)
    return result


def header_map(columns: Sequence[Column]) -> dict[str, str]:
    """Key -> title mapping of the columns that carry data."""
    return {column.key: column.title or column.key for column in columns if column.key_path}
