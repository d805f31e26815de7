from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Hashable, List, Optional

import typer

from rd_admin import VIEWS, AdminTable, audit_log_table, listings_table, load_rows, users_table
from rd_admin.views import text, value_at
from rd_common.errors import BulkActionPartialFailure, RDError
from rd_table.export import DirectoryFileSink, FileSink
from rd_ui.render import render_view
from rd_ui.wiring.dependencies import UIContext

SCOPES = ("filtered", "page", "all")

_INTEGER = re.compile(r"-?\d+")
_DECIMAL = re.compile(r"-?\d+\.\d+")


def parse_filters(values: List[str]) -> dict[str, Any]:
    """Turn ``key=value`` options into a filter mapping.

    Plain integer and decimal literals are compared as numbers; anything
    else, exponents and ``nan`` included, stays text.
    """
    filters: dict[str, Any] = {}
    for token in values:
        if "=" not in token:
            raise typer.BadParameter(f"Expected key=value, got {token!r}", param_hint="--filter")
        key, raw_value = token.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Missing filter key in {token!r}", param_hint="--filter")
        filters[key] = _coerce(raw_value.strip())
    return filters


def _coerce(value: str) -> Any:
    if _INTEGER.fullmatch(value):
        return int(value)
    if _DECIMAL.fullmatch(value):
        return float(value)
    return value


def _match_ids(table: AdminTable, raw_ids: List[str]) -> list[Hashable]:
    controller = table.controller
    known = {}
    for row in controller.rows:
        row_id = controller.row_id(row)
        if row_id is not None:
            known[str(row_id)] = row_id
    matched = [known[raw] for raw in raw_ids if raw in known]
    missing = [raw for raw in raw_ids if raw not in known]
    if missing:
        raise typer.BadParameter(f"Unknown row ids: {', '.join(missing)}", param_hint="--ids")
    return matched


def create_table_app(ctx: UIContext) -> typer.Typer:
    """Build the table Typer app (show/export/bulk)."""
    app = typer.Typer(help="Browse and export admin tables from JSON snapshots.", no_args_is_help=True)

    def _reporter(action: str) -> Callable[[Any], None]:
        def _report(row: Any) -> None:
            row_id = value_at(row, "id") or value_at(row, "_id")
            label = text(value_at(row, "name") or value_at(row, "title") or value_at(row, "action"))
            ctx.info(f"{action}: {row_id} {label}".rstrip())

        return _report

    def _build(view: str, rows_path: Path, sink: FileSink | None = None) -> AdminTable:
        if view not in VIEWS:
            ctx.error(f"Unknown view {view!r}; choose one of: {', '.join(sorted(VIEWS))}")
            raise typer.Exit(1)
        rows = load_rows(rows_path)
        settings = ctx.settings
        if view == "users":
            return users_table(
                rows,
                on_edit=_reporter("edit"),
                on_block=_reporter("block"),
                on_delete=_reporter("delete"),
                settings=settings,
            )
        if view == "listings":
            return listings_table(
                rows,
                on_edit=_reporter("edit"),
                on_approve=_reporter("approve"),
                on_reject=_reporter("reject"),
                on_delete=_reporter("delete"),
                settings=settings,
            )
        return audit_log_table(
            rows,
            on_details=_reporter("details"),
            on_clear=lambda ids: ctx.info(f"clear: {', '.join(str(i) for i in ids)}"),
            sink=sink,
            settings=settings,
        )

    def _apply_query(
        table: AdminTable,
        *,
        search: Optional[str],
        filters: List[str],
        sort: Optional[str],
        desc: bool,
        page_size: Optional[int],
        page: int,
    ) -> None:
        controller = table.controller
        for key, value in parse_filters(filters).items():
            controller.set_filter(key, value)
        if search:
            controller.set_search(search)
        if sort:
            controller.set_sort(sort, "desc" if desc else "asc")
        if page_size is not None:
            controller.set_page_size(page_size)
        controller.set_page(page)

    search_opt = typer.Option(None, "--search", "-s", help="Case-insensitive text to look for.")
    filter_opt = typer.Option([], "--filter", "-f", help="Exact-match filter as key=value; repeatable.")
    sort_opt = typer.Option(None, "--sort", help="Column key or dot path to sort by.")
    desc_opt = typer.Option(False, "--desc", help="Sort descending.")
    page_opt = typer.Option(1, "--page", "-p", help="Page number (clamped to the available pages).")
    size_opt = typer.Option(None, "--page-size", help="Rows per page; defaults to settings.")

    @app.command("show")
    def table_show(
        view: str = typer.Argument(..., help="users, listings or audit-log."),
        rows_path: Path = typer.Argument(..., help="JSON file holding the row snapshot."),
        search: Optional[str] = search_opt,
        filters: List[str] = filter_opt,
        sort: Optional[str] = sort_opt,
        desc: bool = desc_opt,
        page: int = page_opt,
        page_size: Optional[int] = size_opt,
        select: List[str] = typer.Option([], "--select", help="Row ids to mark as selected; repeatable."),
    ) -> None:
        """Render one page of an admin table."""
        try:
            table = _build(view, rows_path)
            _apply_query(table, search=search, filters=filters, sort=sort, desc=desc, page_size=page_size, page=page)
            for row_id in _match_ids(table, select):
                table.controller.toggle_row(row_id)
        except RDError as exc:
            ctx.error(str(exc))
            raise typer.Exit(1)
        render_view(table.controller.view, title=table.view.title, console=ctx.console)
        missing = table.controller.missing_columns()
        if missing:
            ctx.warning(f"No data for column(s): {', '.join(c.title for c in missing)}")

    @app.command("export")
    def table_export(
        view: str = typer.Argument(..., help="users, listings or audit-log."),
        rows_path: Path = typer.Argument(..., help="JSON file holding the row snapshot."),
        out: Path = typer.Option(Path("."), "--out", "-o", help="Directory to write the CSV into."),
        scope: str = typer.Option("filtered", "--scope", help="filtered, page or all."),
        filename: Optional[str] = typer.Option(None, "--filename", help="Override the dated file name."),
        search: Optional[str] = search_opt,
        filters: List[str] = filter_opt,
        sort: Optional[str] = sort_opt,
        desc: bool = desc_opt,
        page: int = page_opt,
        page_size: Optional[int] = size_opt,
    ) -> None:
        """Export rows of an admin table to CSV."""
        if scope not in SCOPES:
            ctx.error(f"Unknown scope {scope!r}; choose one of: {', '.join(SCOPES)}")
            raise typer.Exit(1)
        try:
            table = _build(view, rows_path)
            _apply_query(table, search=search, filters=filters, sort=sort, desc=desc, page_size=page_size, page=page)
            target = table.export(DirectoryFileSink(out), scope=scope, filename=filename)  # type: ignore[arg-type]
        except RDError as exc:
            ctx.error(str(exc))
            raise typer.Exit(1)
        ctx.success(f"Exported {len(table.controller.export_rows(scope))} rows to {target}")  # type: ignore[arg-type]

    @app.command("bulk")
    def table_bulk(
        view: str = typer.Argument(..., help="users, listings or audit-log."),
        rows_path: Path = typer.Argument(..., help="JSON file holding the row snapshot."),
        action: str = typer.Argument(..., help="Bulk action name (see --list)."),
        ids: List[str] = typer.Option([], "--ids", "-i", help="Row ids to act on; repeatable."),
        out: Path = typer.Option(Path("."), "--out", "-o", help="Directory for export actions."),
    ) -> None:
        """Select rows by id and run a bulk action on them."""
        try:
            table = _build(view, rows_path, sink=DirectoryFileSink(out))
            names = [entry.name for entry in table.controller.bulk_actions()]
            if action not in names:
                ctx.error(f"Unknown bulk action {action!r}; choose one of: {', '.join(names)}")
                raise typer.Exit(1)
            for row_id in _match_ids(table, ids):
                table.controller.toggle_row(row_id)
            if not table.controller.selected_ids():
                ctx.warning("Nothing selected.")
                return
            table.controller.run_bulk_action(action)
        except BulkActionPartialFailure as exc:
            ctx.error(f"{exc}: {', '.join(str(i) for i in exc.failed_ids)}")
            raise typer.Exit(1)
        except RDError as exc:
            ctx.error(str(exc))
            raise typer.Exit(1)
        ctx.success(f"Bulk {action} dispatched.")

    return app
