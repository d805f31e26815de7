"""Users management screen."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rd_admin.views import AdminTable, AdminView, FilterOption, RowCallback, apply_to_rows, build_table, text, value_at
from rd_table.columns import Column
from rd_table.formatters import format_currency, format_date
from rd_table.settings import TableSettings

Row = Mapping[str, Any]


def _user_cell(user: Row) -> str:
    name = text(value_at(user, "name"), "Unknown")
    email = text(value_at(user, "email"))
    return f"{name}\n{email}" if email else name


def _listings_cell(user: Row) -> str:
    return f"{value_at(user, 'listingsCount') or 0} ({value_at(user, 'activeListings') or 0} active)"


def _revenue_cell(user: Row) -> str:
    return f"{format_currency(value_at(user, 'totalRevenue') or 0)}\n{value_at(user, 'bookingsCount') or 0} bookings"


def _rating_cell(user: Row) -> str:
    rating = value_at(user, "averageRating")
    shown = f"{rating:.1f}" if isinstance(rating, (int, float)) and rating else "N/A"
    return f"{shown} ({value_at(user, 'reviewsCount') or 0} reviews)"


def _last_active_cell(user: Row) -> str:
    last_active = value_at(user, "lastActive")
    return format_date(last_active) if last_active else "Never"


def _is_blocked(user: Row) -> bool:
    return value_at(user, "status") == "blocked"


USERS_VIEW = AdminView(
    name="users",
    title="User Management",
    description="Manage and monitor user accounts, roles, and activities",
    columns=[
        Column(key_path="name", title="User", render=_user_cell),
        Column(key_path="role", title="Role"),
        Column(key_path="status", title="Status"),
        Column(key_path="listingsCount", title="Listings", render=_listings_cell),
        Column(key_path="totalRevenue", title="Revenue", type="currency", render=_revenue_cell),
        Column(key_path="averageRating", title="Rating", render=_rating_cell),
        Column(key_path="createdAt", title="Join Date", type="date"),
        Column(key_path="lastActive", title="Last Active", type="date", render=_last_active_cell),
    ],
    search_fields=["name", "email", "role"],
    filters={
        "role": [
            FilterOption("All Roles", ""),
            FilterOption("Guest", "guest"),
            FilterOption("Host", "host"),
            FilterOption("Admin", "admin"),
        ],
        "status": [
            FilterOption("All Statuses", ""),
            FilterOption("Active", "active"),
            FilterOption("Pending", "pending"),
            FilterOption("Blocked", "blocked"),
        ],
    },
    export_headers={
        "name": "Name",
        "email": "Email",
        "role": "Role",
        "status": "Status",
        "listingsCount": "Listings",
        "totalRevenue": "Revenue",
        "averageRating": "Rating",
        "createdAt": "Join Date",
    },
    export_getters={
        "listingsCount": lambda user: value_at(user, "listingsCount") or 0,
        "totalRevenue": lambda user: format_currency(value_at(user, "totalRevenue") or 0),
        "averageRating": lambda user: value_at(user, "averageRating") or 0,
        "createdAt": lambda user: format_date(value_at(user, "createdAt")),
    },
    export_prefix="users",
)


def users_table(
    rows: Iterable[Row] = (),
    *,
    on_edit: RowCallback | None = None,
    on_block: RowCallback | None = None,
    on_delete: RowCallback | None = None,
    settings: TableSettings | None = None,
) -> AdminTable:
    """Users screen; bulk block skips accounts that are already blocked."""
    table = build_table(
        USERS_VIEW,
        rows,
        settings=settings,
        row_actions={"edit": on_edit, "block": on_block, "delete": on_delete},
    )
    controller = table.controller
    controller.register_bulk_action(
        "block",
        lambda ids: apply_to_rows(controller, ids, on_block, action="block", skip=_is_blocked),
        label="Block Selected",
        variant="warning",
    )
    controller.register_bulk_action(
        "delete",
        lambda ids: apply_to_rows(controller, ids, on_delete, action="delete"),
        label="Delete Selected",
        variant="danger",
    )
    return table
