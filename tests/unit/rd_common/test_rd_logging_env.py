"""Tests for env parsing helpers and logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from rd_common.config.env import parse_bool_env, parse_int_env, parse_str_env
from rd_common.logging import configure_logging


pytestmark = pytest.mark.unit_common


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestParseEnv:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_truthy(self, value: str) -> None:
        assert parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["0", "off", "nope", ""])
    def test_falsy(self, value: str) -> None:
        assert parse_bool_env(value) is False

    def test_none_passthrough(self) -> None:
        assert parse_bool_env(None) is None
        assert parse_int_env(None) is None
        assert parse_str_env(None) is None

    def test_int_parsing(self) -> None:
        assert parse_int_env(" 25 ") == 25
        assert parse_int_env("2.5") is None

    def test_str_blank_is_unset_but_whitespace_survives(self) -> None:
        assert parse_str_env("") is None
        assert parse_str_env("\t") == "\t"


def test_configure_logging_reads_env(monkeypatch, restore_root_logger, tmp_path) -> None:
    log_file = tmp_path / "rd.log"
    monkeypatch.setenv("RD_LOG_LEVEL", "warning")
    monkeypatch.setenv("RD_LOG_FILE", str(log_file))
    monkeypatch.setenv("RD_LOG_JSON", "1")

    configure_logging(force=True)

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
    logging.getLogger("rd_table.test").warning("hello %s", "file")
    for handler in root.handlers:
        handler.flush()
    content = log_file.read_text()
    assert '"event": "hello file"' in content


def test_configure_logging_explicit_arguments_win(monkeypatch, restore_root_logger) -> None:
    monkeypatch.setenv("RD_LOG_LEVEL", "error")
    monkeypatch.delenv("RD_LOG_FILE", raising=False)
    configure_logging(level="debug", force=True)
    assert restore_root_logger.level == logging.DEBUG

    configure_logging(debug=True, level="error", force=True)
    assert restore_root_logger.level == logging.DEBUG
