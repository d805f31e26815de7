"""Rich rendering of a derived table view."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Sequence

from rich import box
from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rd_table.models import TableView

CHECKED = "[x]"
UNCHECKED = "[ ]"
PARTIAL = "[-]"

CHECKBOX_WIDTH = 3
MIN_COLUMN_WIDTH = 4
MIN_TABLE_WIDTH = 40
PX_PER_CHAR = 8

_WIDTH_HINT = re.compile(r"\s*(\d+)\s*(px|ch)?\s*")


@dataclass
class TableModel:
    title: str
    columns: list[str]
    rows: list[list[str]]
    footer: list[str] = field(default_factory=list)
    checkbox: bool = False
    # One entry per data column, in characters.
    width_hints: list[int | None] = field(default_factory=list)


def width_hint_chars(width: str | None) -> int | None:
    """Character width for a column hint such as ``"100px"`` or ``"12ch"``."""
    if not width:
        return None
    match = _WIDTH_HINT.fullmatch(width)
    if match is None:
        return None
    size = int(match.group(1))
    if match.group(2) == "px":
        size //= PX_PER_CHAR
    return max(MIN_COLUMN_WIDTH, size)


def _header_checkbox(view: TableView) -> str:
    if view.is_all_selected:
        return CHECKED
    if view.is_indeterminate:
        return PARTIAL
    return UNCHECKED


def _sort_marker(view: TableView, key_path: str) -> str:
    if not key_path or view.sort.key != key_path:
        return ""
    return " ▲" if view.sort.direction == "asc" else " ▼"


def pager_text(view: TableView) -> str:
    """``‹ 1 [2] 3 4 5 ›`` style pager line."""
    if view.total_pages <= 1:
        return ""
    parts = ["‹"] if view.has_previous else []
    for page in view.page_window:
        parts.append(f"[{page}]" if page == view.current_page else str(page))
    if view.has_next:
        parts.append("›")
    return " ".join(parts)


def table_model_from_view(view: TableView, *, title: str, selectable: bool = True) -> TableModel:
    """Flatten a view into strings; loading and empty states become a footer."""
    columns = [f"{col.title}{_sort_marker(view, col.key_path)}" for col in view.columns]
    if selectable:
        columns.insert(0, _header_checkbox(view))

    rows: list[list[str]] = []
    for row_id, cells in zip(view.page_ids, view.cells):
        rendered = [str(cell) for cell in cells]
        if selectable:
            mark = CHECKED if row_id in view.selected_on_page else UNCHECKED
            rendered.insert(0, mark if row_id is not None else "")
        rows.append(rendered)

    footer: list[str] = []
    if view.loading:
        footer.append("Loading…")
    elif view.is_empty:
        footer.append(view.empty_message)
    else:
        footer.append(view.summary())
        pager = pager_text(view)
        if pager:
            footer.append(pager)
    if view.selected_ids:
        footer.append(f"{len(view.selected_ids)} selected")
    return TableModel(
        title=title,
        columns=columns,
        rows=rows,
        footer=footer,
        checkbox=selectable,
        width_hints=[width_hint_chars(getattr(col, "width", None)) for col in view.columns],
    )


def _natural_widths(model: TableModel) -> list[int]:
    offset = 1 if model.checkbox else 0
    widths: list[int] = []
    for index in range(offset, len(model.columns)):
        hint = model.width_hints[index - offset] if index - offset < len(model.width_hints) else None
        if hint:
            widths.append(hint)
            continue
        values = [model.columns[index], *(row[index] for row in model.rows if index < len(row))]
        longest = max((cell_len(line) for value in values for line in value.splitlines()), default=0)
        widths.append(max(MIN_COLUMN_WIDTH, longest))
    return widths


def fit_widths(natural: Sequence[int], available: int, minimum: int = MIN_COLUMN_WIDTH) -> list[int]:
    """Column widths that add up to ``available`` characters.

    Columns narrower than an even share keep their width; the space they
    leave is split among the wider ones. No column drops below ``minimum``,
    and spare space goes to the widest column.
    """
    widths = list(natural)
    if sum(widths) > available:
        remaining = available
        narrowest_first = sorted(range(len(widths)), key=lambda i: natural[i])
        for position, index in enumerate(narrowest_first):
            share = max(minimum, remaining // (len(widths) - position))
            widths[index] = min(natural[index], share)
            remaining -= widths[index]
    spare = available - sum(widths)
    if spare > 0 and widths:
        widest = max(range(len(widths)), key=widths.__getitem__)
        widths[widest] += spare
    return widths


def build_rich_table(model: TableModel, *, console: Console) -> Table:
    """Rich table sized to ``console``.

    The checkbox column keeps a fixed width; data columns share the rest
    and cut long lines with an ellipsis.
    The footer lines become the table caption.
    """
    table_width = max(MIN_TABLE_WIDTH, console.width - 2)
    data_headers = model.columns[1:] if model.checkbox else model.columns
    # Each column costs two padding cells and one border; the table adds one more.
    borders = 3 * len(model.columns) + 1
    reserved = CHECKBOX_WIDTH if model.checkbox else 0
    widths = fit_widths(_natural_widths(model), table_width - borders - reserved)

    caption = Text("\n".join(model.footer), style="dim") if model.footer else None
    table = Table(
        title=Text(model.title, no_wrap=True, overflow="ellipsis"),
        caption=caption,
        caption_justify="left",
        width=table_width,
        show_lines=True,
        box=box.ROUNDED,
        border_style="blue",
        header_style="bold blue",
        title_style="bold blue",
    )
    if model.checkbox:
        table.add_column(Text(model.columns[0]), width=CHECKBOX_WIDTH, no_wrap=True, justify="center")
    for header, width in zip(data_headers, widths):
        table.add_column(
            Text(header),
            width=width,
            no_wrap=True,
            overflow="ellipsis",
        )
    for row in model.rows:
        table.add_row(*(Text(cell) for cell in row))
    return table


def render_view(view: TableView, *, title: str, console: Console, selectable: bool = True) -> None:
    model = table_model_from_view(view, title=title, selectable=selectable)
    console.print(build_rich_table(model, console=console))
