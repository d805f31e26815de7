"""Audit log screen."""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Mapping

from rd_admin.views import AdminTable, AdminView, FilterOption, RowCallback, build_table, export_view, text, value_at
from rd_table.columns import Column
from rd_table.export import FileSink
from rd_table.formatters import format_date, format_datetime
from rd_table.settings import TableSettings

Row = Mapping[str, Any]
ClearCallback = Callable[[list[Hashable]], Any]

LEVEL_OPTIONS = [
    FilterOption("All Levels", ""),
    FilterOption("Info", "info"),
    FilterOption("Warning", "warning"),
    FilterOption("Error", "error"),
    FilterOption("Success", "success"),
]

ACTION_OPTIONS = [
    FilterOption("All Actions", ""),
    FilterOption("User Login", "user.login"),
    FilterOption("User Logout", "user.logout"),
    FilterOption("Listing Created", "listing.create"),
    FilterOption("Listing Updated", "listing.update"),
    FilterOption("Listing Deleted", "listing.delete"),
    FilterOption("Booking Created", "booking.create"),
    FilterOption("Booking Cancelled", "booking.cancel"),
    FilterOption("Payment Processed", "payment.process"),
    FilterOption("Admin Action", "admin.action"),
]


def _actor(log: Row) -> str:
    return text(value_at(log, "user.name"), "System")


def _details(log: Row) -> str:
    return text(value_at(log, "details") or value_at(log, "message"))


def _status(log: Row) -> str:
    return text(value_at(log, "status"), "completed")


def _action_cell(log: Row) -> str:
    action = text(value_at(log, "action"))
    resource = text(value_at(log, "resource"))
    return f"{action}\n{resource}" if resource else action


def _user_cell(log: Row) -> str:
    contact = text(value_at(log, "user.email")) or text(value_at(log, "ipAddress"))
    return f"{_actor(log)}\n{contact}" if contact else _actor(log)


AUDIT_LOG_VIEW = AdminView(
    name="audit-log",
    title="Audit Log",
    description="Track administrative and user activity across the platform",
    columns=[
        Column(key_path="level", title="Level", width="100px", render=lambda log: text(value_at(log, "level"), "info").capitalize()),
        Column(key_path="timestamp", title="Timestamp", width="180px", type="date", render=lambda log: format_datetime(value_at(log, "timestamp"))),
        Column(key_path="action", title="Action", render=_action_cell),
        Column(key_path="user.name", title="User", render=_user_cell),
        Column(key_path="details", title="Details", sortable=False, render=_details),
        Column(key_path="status", title="Status", render=_status),
    ],
    search_fields=["action", "resource", "user.name", "user.email", "details", "message", "ipAddress"],
    filters={"level": LEVEL_OPTIONS, "action": ACTION_OPTIONS},
    export_headers={
        "timestamp": "Timestamp",
        "level": "Level",
        "action": "Action",
        "user.name": "User",
        "details": "Details",
        "status": "Status",
    },
    export_getters={
        "timestamp": lambda log: format_date(value_at(log, "timestamp")),
        "user.name": _actor,
        "details": _details,
        "status": _status,
    },
    export_prefix="audit_logs",
)


def audit_log_table(
    rows: Iterable[Row] = (),
    *,
    on_details: RowCallback | None = None,
    on_clear: ClearCallback | None = None,
    sink: FileSink | None = None,
    settings: TableSettings | None = None,
) -> AdminTable:
    """Audit log screen.

    Bulk ``export`` writes the selected entries through ``sink``; bulk
    ``clear`` hands the selected ids to ``on_clear`` in one call.
    """
    table = build_table(
        AUDIT_LOG_VIEW,
        rows,
        settings=settings,
        row_actions={"details": on_details},
    )
    controller = table.controller

    def _export_selected(ids: list[Hashable]) -> Any:
        if sink is None:
            return None
        return export_view(controller, AUDIT_LOG_VIEW, sink, scope="selected")

    def _clear_selected(ids: list[Hashable]) -> Any:
        if on_clear is None:
            return None
        return on_clear(ids)

    controller.register_bulk_action("export", _export_selected, label="Export Selected", variant="primary")
    controller.register_bulk_action("clear", _clear_selected, label="Clear Selected", variant="danger")
    return table
