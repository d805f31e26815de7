"""Tests for the Users, Listings and Audit Log screens."""

from __future__ import annotations

import csv
import io
from types import SimpleNamespace

import pytest

from rd_admin import VIEWS, audit_log_table, listings_table, users_table
from rd_admin.views import apply_to_rows
from rd_common.errors import BulkActionPartialFailure, UnknownBulkActionError
from rd_table.export import MemoryFileSink


pytestmark = pytest.mark.unit_admin


USERS = [
    {
        "_id": "u1",
        "name": "Ana Lopez",
        "email": "ana@example.com",
        "role": "host",
        "status": "active",
        "listingsCount": 3,
        "activeListings": 2,
        "totalRevenue": 1234.5,
        "bookingsCount": 9,
        "averageRating": 4.75,
        "reviewsCount": 8,
        "createdAt": "2023-06-01T09:00:00Z",
    },
    {"_id": "u2", "name": "Ben", "email": "ben@example.com", "role": "guest", "status": "blocked"},
    {"_id": "u3", "name": "Cleo", "email": "cleo@corp.io", "role": "admin", "status": "active"},
]

LISTINGS = [
    {
        "_id": "64f0c0ffee0000000000aaaa",
        "title": "Canal Loft",
        "category": "apartment",
        "status": "pending",
        "host": {"name": "Ana", "email": "ana@example.com"},
        "location": {"address": "12 Canal St"},
        "pricing": {"basePrice": 120, "unit": "night"},
        "bookingsCount": 4,
        "averageRating": 4.5,
    },
    {"_id": "l2", "title": "Garden Shed", "category": "storage", "status": "published"},
    {"_id": "l3", "title": "Bike", "category": "vehicle", "status": "pending", "host": {"name": "Ben"}},
]

LOGS = [
    {
        "_id": "a1",
        "level": "error",
        "timestamp": "2024-05-01T12:30:00Z",
        "action": "payment.process",
        "resource": "booking/42",
        "user": {"name": "Ana", "email": "ana@example.com"},
        "details": 'Card declined, "insufficient funds"',
        "status": "failed",
    },
    {"_id": "a2", "level": "info", "timestamp": "2024-05-02T08:00:00Z", "action": "user.login", "message": "ok"},
]


class TestUsers:
    def test_cells_and_search(self) -> None:
        table = users_table(USERS)
        view = table.controller.view
        assert view.cells[0][0] == "Ana Lopez\nana@example.com"
        assert view.cells[0][3] == "3 (2 active)"
        assert view.cells[0][4] == "$1,234.50\n9 bookings"
        assert view.cells[0][5] == "4.8 (8 reviews)"
        assert view.cells[0][6] == "Jun 1, 2023"
        assert view.cells[1][7] == "Never"
        table.controller.set_search("CORP")
        assert table.controller.view.row_ids == ["u3"]

    def test_role_and_status_filters(self) -> None:
        assert USERS_FILTERS == {"role": ["guest", "host", "admin"], "status": ["active", "pending", "blocked"]}
        table = users_table(USERS)
        table.controller.set_filter("status", "active")
        table.controller.set_filter("role", "admin")
        assert table.controller.view.row_ids == ["u3"]

    def test_bulk_block_skips_already_blocked(self) -> None:
        blocked: list[str] = []
        table = users_table(USERS, on_block=lambda user: blocked.append(user["_id"]))
        table.controller.select_all_visible()
        done = table.controller.run_bulk_action("block")
        assert blocked == ["u1", "u3"]
        assert done == ["u1", "u3"]
        assert table.controller.selected_ids() == []

    def test_bulk_delete_partial_failure(self) -> None:
        def delete(user):
            if user["_id"] == "u2":
                raise RuntimeError("has bookings")

        table = users_table(USERS, on_delete=delete)
        table.controller.select_all_visible()
        with pytest.raises(BulkActionPartialFailure) as excinfo:
            table.controller.run_bulk_action("delete")
        assert excinfo.value.failed_ids == ["u2"]
        assert excinfo.value.context["succeeded"] == ["u1", "u3"]
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert table.controller.selected_ids() == []

    def test_row_actions(self) -> None:
        edited: list[str] = []
        table = users_table(USERS, on_edit=lambda user: edited.append(user["name"]))
        table.run_row_action("edit", "u2")
        assert edited == ["Ben"]
        assert table.run_row_action("edit", "missing") is None
        with pytest.raises(UnknownBulkActionError):
            table.run_row_action("block", "u1")

    def test_export_uses_screen_headers(self) -> None:
        table = users_table(USERS)
        sink = MemoryFileSink()
        name = table.export(sink, filename="users.csv")
        rows = list(csv.reader(io.StringIO(sink.files[name], newline="")))
        assert rows[0] == ["Name", "Email", "Role", "Status", "Listings", "Revenue", "Rating", "Join Date"]
        assert rows[1] == ["Ana Lopez", "ana@example.com", "host", "active", "3", "$1,234.50", "4.75", "Jun 1, 2023"]
        assert rows[2][4:] == ["0", "$0.00", "0", "N/A"]

    def test_object_rows_render_and_export(self) -> None:
        dee = SimpleNamespace(
            _id="u9", name="Dee", email="dee@example.com", role="guest", status="blocked",
            listingsCount=2, totalRevenue=50,
        )
        blocked: list[str] = []
        table = users_table([dee], on_block=lambda user: blocked.append(user._id))
        view = table.controller.view
        assert view.row_ids == ["u9"]
        assert view.cells[0][0] == "Dee\ndee@example.com"
        assert view.cells[0][3] == "2 (0 active)"
        assert view.cells[0][4] == "$50.00\n0 bookings"
        assert view.cells[0][7] == "Never"
        table.controller.select_all_visible()
        assert table.controller.run_bulk_action("block") == []
        assert blocked == []
        sink = MemoryFileSink()
        name = table.export(sink, filename="users.csv")
        rows = list(csv.reader(io.StringIO(sink.files[name], newline="")))
        assert rows[1] == ["Dee", "dee@example.com", "guest", "blocked", "2", "$50.00", "0", "N/A"]


USERS_FILTERS = {key: VIEWS["users"].filter_values(key) for key in VIEWS["users"].filters}


class TestListings:
    def test_cells(self) -> None:
        view = listings_table(LISTINGS).controller.view
        assert view.cells[0][0] == "Canal Loft\n12 Canal St\nID: 0000aaaa"
        assert view.cells[0][1] == "Ana\nana@example.com"
        assert view.cells[0][4] == "$120.00\nper night"
        assert view.cells[0][5] == "4 (4.5★)"
        assert view.cells[1][1] == "Unknown host"
        assert view.cells[1][4] == "$0.00\nper day"

    def test_search_by_host_and_address(self) -> None:
        table = listings_table(LISTINGS)
        table.controller.set_search("canal st")
        assert table.controller.view.row_ids == ["64f0c0ffee0000000000aaaa"]
        table.controller.set_search("ben")
        assert table.controller.view.row_ids == ["l3"]

    def test_sort_by_nested_price_puts_missing_first(self) -> None:
        table = listings_table(LISTINGS)
        table.controller.set_sort("pricing.basePrice", "asc")
        assert table.controller.view.row_ids == ["l2", "l3", "64f0c0ffee0000000000aaaa"]

    def test_bulk_approve_only_touches_pending(self) -> None:
        approved: list[str] = []
        table = listings_table(LISTINGS, on_approve=lambda listing: approved.append(listing["_id"]))
        table.controller.select_all_visible()
        table.controller.run_bulk_action("approve")
        assert approved == ["64f0c0ffee0000000000aaaa", "l3"]

    def test_status_filter_options(self) -> None:
        assert VIEWS["listings"].filter_values("status") == ["published", "draft", "pending", "rejected"]

    def test_object_rows_with_nested_objects(self) -> None:
        kayak = SimpleNamespace(
            _id="l9", title="Kayak", status="pending", host=SimpleNamespace(name="Eve"), pricing={"basePrice": 30}
        )
        approved: list[str] = []
        table = listings_table([kayak], on_approve=lambda listing: approved.append(listing._id))
        view = table.controller.view
        assert view.cells[0][0] == "Kayak\nID: l9"
        assert view.cells[0][1] == "Eve"
        assert view.cells[0][4] == "$30.00\nper day"
        table.controller.select_all_visible()
        table.controller.run_bulk_action("approve")
        assert approved == ["l9"]


class TestAuditLog:
    def test_cells_and_fallbacks(self) -> None:
        view = audit_log_table(LOGS).controller.view
        assert view.cells[0][0] == "Error"
        assert view.cells[0][1] == "May 1, 2024, 12:30 PM"
        assert view.cells[0][2] == "payment.process\nbooking/42"
        assert view.cells[0][3] == "Ana\nana@example.com"
        assert view.cells[1][3] == "System"
        assert view.cells[1][4] == "ok"
        assert view.cells[1][5] == "completed"

    def test_details_column_is_not_sortable(self) -> None:
        table = audit_log_table(LOGS)
        table.controller.toggle_sort("details")
        assert table.controller.sort.key is None

    def test_bulk_export_writes_selected_entries(self) -> None:
        sink = MemoryFileSink()
        table = audit_log_table(LOGS, sink=sink)
        table.controller.toggle_row("a1")
        table.controller.run_bulk_action("export")
        name, text = sink.last
        assert name.startswith("audit_logs_")
        rows = list(csv.reader(io.StringIO(text, newline="")))
        assert rows[0] == ["Timestamp", "Level", "Action", "User", "Details", "Status"]
        assert rows[1] == ["May 1, 2024", "error", "payment.process", "Ana", 'Card declined, "insufficient funds"', "failed"]
        assert len(rows) == 2
        assert table.controller.selected_ids() == []

    def test_bulk_clear_passes_all_ids_once(self) -> None:
        cleared: list[list] = []
        table = audit_log_table(LOGS, on_clear=cleared.append)
        table.controller.select_all_visible()
        table.controller.run_bulk_action("clear")
        assert cleared == [["a1", "a2"]]

    def test_level_filter(self) -> None:
        table = audit_log_table(LOGS)
        table.controller.set_filter("level", "info")
        assert table.controller.view.row_ids == ["a2"]


def test_apply_to_rows_without_callback_is_noop() -> None:
    table = users_table(USERS)
    assert apply_to_rows(table.controller, ["u1"], None, action="block") == []
