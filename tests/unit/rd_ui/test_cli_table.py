"""CLI behavior tests using Typer's CliRunner."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from rd_ui.cli.main import create_app
from rd_ui.wiring.dependencies import UIContext


pytestmark = pytest.mark.unit_ui

runner = CliRunner()

USERS = [
    {"_id": "u1", "name": "Ana", "email": "ana@example.com", "role": "host", "status": "active"},
    {"_id": "u2", "name": "Ben", "email": "ben@example.com", "role": "guest", "status": "blocked"},
    {"_id": "u3", "name": "Cleo", "email": "cleo@corp.io", "role": "guest", "status": "active"},
]


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    for name in ("RD_LOG_LEVEL", "RD_LOG_JSON", "RD_LOG_FILE", "RD_TABLE_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    # Wide console so Rich does not truncate cells.
    monkeypatch.setenv("COLUMNS", "200")
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    path = tmp_path / "users.json"
    path.write_text(json.dumps({"data": USERS}), encoding="utf-8")
    return path


@pytest.fixture
def app():
    return create_app(UIContext())


def test_show_renders_filtered_page(app, users_file: Path) -> None:
    result = runner.invoke(
        app,
        ["table", "show", "users", str(users_file), "--filter", "role=guest", "--sort", "name", "--desc"],
    )
    assert result.exit_code == 0, result.output
    assert "Cleo" in result.output
    assert "Ben" in result.output
    assert "Ana" not in result.output
    assert "Showing 1 to 2 of 2 results" in result.output


def test_show_filters_on_exponent_like_ids(app, tmp_path: Path) -> None:
    path = tmp_path / "users.json"
    rows = [
        {"_id": "12e4", "name": "Dana", "email": "dana@example.com", "role": "guest", "status": "active"},
        {"_id": "u2", "name": "Ben", "email": "ben@example.com", "role": "guest", "status": "active"},
    ]
    path.write_text(json.dumps(rows), encoding="utf-8")
    result = runner.invoke(app, ["table", "show", "users", str(path), "--filter", "_id=12e4"])
    assert result.exit_code == 0, result.output
    assert "Dana" in result.output
    assert "Ben" not in result.output
    assert "Showing 1 to 1 of 1 results" in result.output


def test_show_marks_selected_rows(app, users_file: Path) -> None:
    result = runner.invoke(app, ["table", "show", "users", str(users_file), "--select", "u1"])
    assert result.exit_code == 0, result.output
    assert "1 selected" in result.output


def test_show_unknown_view(app, users_file: Path) -> None:
    result = runner.invoke(app, ["table", "show", "bookings", str(users_file)])
    assert result.exit_code == 1
    assert "Unknown view" in result.output


def test_show_bad_json_reports_error(app, tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    result = runner.invoke(app, ["table", "show", "users", str(path)])
    assert result.exit_code == 1
    assert "Cannot read rows" in result.output


def test_export_writes_csv(app, users_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "exports"
    result = runner.invoke(
        app,
        ["table", "export", "users", str(users_file), "--out", str(out_dir), "--search", "corp", "--filename", "u.csv"],
    )
    assert result.exit_code == 0, result.output
    text = (out_dir / "u.csv").read_text(encoding="utf-8")
    assert text.splitlines()[0] == "Name,Email,Role,Status,Listings,Revenue,Rating,Join Date"
    assert text.splitlines()[1].startswith("Cleo,cleo@corp.io,guest,active")
    assert len(text.splitlines()) == 2


def test_export_rejects_unknown_scope(app, users_file: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["table", "export", "users", str(users_file), "--out", str(tmp_path), "--scope", "selected"])
    assert result.exit_code == 1
    assert "Unknown scope" in result.output


def test_bulk_block_reports_each_row(app, users_file: Path) -> None:
    result = runner.invoke(
        app,
        ["table", "bulk", "users", str(users_file), "block", "--ids", "u1", "--ids", "u2", "--ids", "u3"],
    )
    assert result.exit_code == 0, result.output
    assert "block: u1 Ana" in result.output
    assert "block: u3 Cleo" in result.output
    assert "block: u2" not in result.output


def test_bulk_unknown_action(app, users_file: Path) -> None:
    result = runner.invoke(app, ["table", "bulk", "users", str(users_file), "approve", "--ids", "u1"])
    assert result.exit_code == 1
    assert "Unknown bulk action" in result.output


def test_bulk_unknown_id_is_a_usage_error(app, users_file: Path) -> None:
    result = runner.invoke(app, ["table", "bulk", "users", str(users_file), "block", "--ids", "zz"])
    assert result.exit_code == 2


def test_settings_file_sets_page_size(app, users_file: Path, tmp_path: Path) -> None:
    settings = tmp_path / "table.json"
    settings.write_text(json.dumps({"page_size": 1}), encoding="utf-8")
    result = runner.invoke(app, ["--settings", str(settings), "table", "show", "users", str(users_file)])
    assert result.exit_code == 0, result.output
    assert "Showing 1 to 1 of 3 results" in result.output


def test_views_lists_screens(app) -> None:
    result = runner.invoke(app, ["views"])
    assert result.exit_code == 0
    assert "users: User Management" in result.output
    assert "audit-log: Audit Log" in result.output
