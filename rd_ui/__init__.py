"""Terminal front end: Rich rendering and the ``rentdesk`` CLI."""

from rd_ui.render import TableModel, build_rich_table, render_view, table_model_from_view

__all__ = ["TableModel", "build_rich_table", "render_view", "table_model_from_view"]
