"""Listings moderation screen."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rd_admin.views import AdminTable, AdminView, FilterOption, RowCallback, apply_to_rows, build_table, text, value_at
from rd_table.columns import Column
from rd_table.formatters import format_currency, format_date
from rd_table.settings import TableSettings

Row = Mapping[str, Any]

LISTING_STATUSES = ("published", "draft", "pending", "rejected")


def _listing_cell(listing: Row) -> str:
    title = text(value_at(listing, "title"), "Untitled")
    address = text(value_at(listing, "location.address"))
    listing_id = text(value_at(listing, "_id") or value_at(listing, "id"))
    lines = [title]
    if address:
        lines.append(address)
    if listing_id:
        lines.append(f"ID: {listing_id[-8:]}")
    return "\n".join(lines)


def _host_cell(listing: Row) -> str:
    name = text(value_at(listing, "host.name"), "Unknown host")
    email = text(value_at(listing, "host.email"))
    return f"{name}\n{email}" if email else name


def _pricing_cell(listing: Row) -> str:
    price = value_at(listing, "pricing.basePrice") or 0
    unit = value_at(listing, "pricing.unit") or "day"
    return f"{format_currency(price)}\nper {unit}"


def _bookings_cell(listing: Row) -> str:
    bookings = value_at(listing, "bookingsCount") or 0
    rating = value_at(listing, "averageRating")
    if isinstance(rating, (int, float)) and rating:
        return f"{bookings} ({rating:.1f}★)"
    return str(bookings)


def _not_pending(listing: Row) -> bool:
    return value_at(listing, "status") != "pending"


LISTINGS_VIEW = AdminView(
    name="listings",
    title="Listing Management",
    description="Review, approve and moderate marketplace listings",
    columns=[
        Column(key_path="title", title="Listing", render=_listing_cell),
        Column(key_path="host.name", title="Host", render=_host_cell),
        Column(key_path="category", title="Category"),
        Column(key_path="status", title="Status"),
        Column(key_path="pricing.basePrice", title="Pricing", type="currency", render=_pricing_cell),
        Column(key_path="bookingsCount", title="Bookings", render=_bookings_cell),
        Column(key_path="createdAt", title="Created", type="date"),
    ],
    search_fields=["title", "location.address", "host.name", "category"],
    filters={
        "status": [FilterOption("All Statuses", "")]
        + [FilterOption(status.title(), status) for status in LISTING_STATUSES],
    },
    export_headers={
        "title": "Title",
        "host.name": "Host",
        "category": "Category",
        "status": "Status",
        "pricing.basePrice": "Price",
        "bookingsCount": "Bookings",
        "totalRevenue": "Revenue",
        "averageRating": "Rating",
        "createdAt": "Created",
    },
    export_getters={
        "pricing.basePrice": lambda listing: format_currency(value_at(listing, "pricing.basePrice") or 0),
        "bookingsCount": lambda listing: value_at(listing, "bookingsCount") or 0,
        "totalRevenue": lambda listing: format_currency(value_at(listing, "totalRevenue") or 0),
        "averageRating": lambda listing: value_at(listing, "averageRating") or 0,
        "createdAt": lambda listing: format_date(value_at(listing, "createdAt")),
    },
    export_prefix="listings",
)


def listings_table(
    rows: Iterable[Row] = (),
    *,
    on_edit: RowCallback | None = None,
    on_approve: RowCallback | None = None,
    on_reject: RowCallback | None = None,
    on_delete: RowCallback | None = None,
    settings: TableSettings | None = None,
) -> AdminTable:
    """Listings screen; bulk approve and reject only touch pending listings."""
    table = build_table(
        LISTINGS_VIEW,
        rows,
        settings=settings,
        row_actions={
            "edit": on_edit,
            "approve": on_approve,
            "reject": on_reject,
            "delete": on_delete,
        },
    )
    controller = table.controller
    controller.register_bulk_action(
        "approve",
        lambda ids: apply_to_rows(controller, ids, on_approve, action="approve", skip=_not_pending),
        label="Approve Selected",
        variant="success",
    )
    controller.register_bulk_action(
        "reject",
        lambda ids: apply_to_rows(controller, ids, on_reject, action="reject", skip=_not_pending),
        label="Reject Selected",
        variant="warning",
    )
    controller.register_bulk_action(
        "delete",
        lambda ids: apply_to_rows(controller, ids, on_delete, action="delete"),
        label="Delete Selected",
        variant="danger",
    )
    return table
