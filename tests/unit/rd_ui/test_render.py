"""Tests for flattening table views into Rich tables."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from rd_table.columns import Column
from rd_table.controller import TableController
from rd_ui.render import (
    CHECKED,
    PARTIAL,
    UNCHECKED,
    CHECKBOX_WIDTH,
    build_rich_table,
    fit_widths,
    pager_text,
    render_view,
    table_model_from_view,
    width_hint_chars,
)


pytestmark = pytest.mark.unit_ui


COLUMNS = [Column(key_path="name", title="Name"), Column(key_path="city", title="City")]


def _controller(count: int = 12, page_size: int = 5) -> TableController:
    rows = [{"id": i, "name": f"Guest {i}", "city": "Lyon" if i % 2 else "Oslo"} for i in range(1, count + 1)]
    return TableController(COLUMNS, rows, page_size=page_size)


def test_model_has_checkbox_column_and_sort_marker() -> None:
    controller = _controller()
    controller.toggle_sort("name")
    controller.toggle_row(1)
    model = table_model_from_view(controller.view, title="Guests")
    assert model.columns == [PARTIAL, "Name ▲", "City"]
    assert model.rows[0][0] == CHECKED
    assert model.rows[1][0] == UNCHECKED
    assert model.footer == ["Showing 1 to 5 of 12 results", "[1] 2 3 ›", "1 selected"]


def test_descending_marker_and_all_selected_header() -> None:
    controller = _controller(count=3)
    controller.set_sort("city", "desc")
    controller.select_all_visible()
    model = table_model_from_view(controller.view, title="Guests")
    assert model.columns == [CHECKED, "Name", "City ▼"]


def test_pager_text_on_middle_page() -> None:
    controller = _controller(count=40, page_size=5)
    view = controller.set_page(4)
    assert pager_text(view) == "‹ 2 3 [4] 5 6 ›"


def test_empty_and_loading_footers() -> None:
    controller = TableController(COLUMNS, [], loading=True)
    assert table_model_from_view(controller.view, title="t").footer == ["Loading…"]
    controller.set_loading(False)
    model = table_model_from_view(controller.view, title="t", selectable=False)
    assert model.columns == ["Name", "City"]
    assert model.footer == ["No data available"]


def test_build_rich_table_fits_console() -> None:
    console = Console(file=io.StringIO(), width=80)
    model = table_model_from_view(_controller().view, title="Guests")
    table = build_rich_table(model, console=console)
    assert len(table.columns) == 3
    assert table.row_count == 5
    assert table.width == 78
    assert table.columns[0].width == CHECKBOX_WIDTH
    assert str(table.caption) == "Showing 1 to 5 of 12 results\n[1] 2 3 ›"


def test_render_view_prints_rows_and_summary() -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=100)
    render_view(_controller().view, title="Guests", console=console)
    output = buffer.getvalue()
    assert "Guest 1" in output
    assert "Showing 1 to 5 of 12 results" in output


def test_narrow_console_keeps_checkboxes_and_truncates_data() -> None:
    rows = [{"id": i, "name": f"Guest {i} " + "x" * 60, "city": "Lyon"} for i in range(1, 4)]
    controller = TableController(COLUMNS, rows)
    controller.toggle_row(2)
    buffer = io.StringIO()
    render_view(controller.view, title="Guests", console=Console(file=buffer, width=50))
    lines = buffer.getvalue().splitlines()
    assert max(len(line.rstrip()) for line in lines) <= 48
    assert sum(CHECKED in line for line in lines) == 1
    assert sum(UNCHECKED in line for line in lines) == 2
    assert any("Guest 1" in line and "…" in line for line in lines)
    assert any("Lyon" in line for line in lines)


def test_fit_widths_gives_leftover_to_wide_columns() -> None:
    assert fit_widths([3, 20, 40], 80) == [3, 20, 57]
    assert fit_widths([3, 20, 40], 30) == [3, 13, 14]
    assert fit_widths([10, 10], 4, minimum=3) == [3, 3]


@pytest.mark.parametrize(
    ("hint", "chars"),
    [("100px", 12), ("180px", 22), ("12ch", 12), ("20", 20), ("10%", None), (None, None), ("8px", 4)],
)
def test_width_hints(hint, chars) -> None:
    assert width_hint_chars(hint) == chars


def test_model_carries_column_width_hints() -> None:
    columns = [Column(key_path="level", title="Level", width="100px"), Column(key_path="msg", title="Message")]
    controller = TableController(columns, [{"id": 1, "level": "info", "msg": "hello"}])
    model = table_model_from_view(controller.view, title="Log")
    assert model.checkbox is True
    assert model.width_hints == [12, None]
