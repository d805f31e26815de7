"""
Command-line interface for rentdesk admin tables.

Renders, exports and bulk-edits Users, Listings and Audit Log snapshots
stored as JSON.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from rd_admin import VIEWS
from rd_ui.cli.commands.table import create_table_app
from rd_ui.wiring.dependencies import UIContext, configure_logging


def create_app(ctx_store: UIContext) -> typer.Typer:
    """Root Typer app bound to ``ctx_store``."""
    app = typer.Typer(help="Browse, export and bulk-edit rentdesk admin tables.", no_args_is_help=True)

    @app.callback(invoke_without_command=True)
    def entry(
        ctx: typer.Context,
        log_level: Optional[str] = typer.Option(None, "--log-level", help="Override RD_LOG_LEVEL."),
        json_logs: Optional[bool] = typer.Option(
            None,
            "--json-logs/--no-json-logs",
            help="Emit structured JSON logs (overrides RD_LOG_JSON).",
        ),
        settings: Optional[Path] = typer.Option(
            None,
            "--settings",
            help="JSON file with table settings; RD_TABLE_* variables fill the rest.",
        ),
    ) -> None:
        """Global options shared by every command."""
        configure_logging(level=log_level, json=json_logs, force=True)
        if settings is not None:
            ctx_store.settings_path = settings

        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    @app.command("views")
    def list_views() -> None:
        """List the available admin views and their filters."""
        for view in VIEWS.values():
            filters = ", ".join(
                f"{key}={'|'.join(view.filter_values(key))}" for key in view.filters
            )
            line = f"{view.name}: {view.title}"
            ctx_store.info(f"{line} ({filters})" if filters else line)

    app.add_typer(create_table_app(ctx_store), name="table")
    return app


# Initialize global context (lazy)
ctx_store = UIContext()
app = create_app(ctx_store)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
