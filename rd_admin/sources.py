"""Row snapshots read from JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from rd_common.errors import RowSourceError

logger = logging.getLogger(__name__)

_ENVELOPE_KEYS = ("data", "users", "listings", "logs", "items", "results")


def extract_rows(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare array or an API envelope such as ``{"data": [...]}``."""
    rows = payload
    if isinstance(payload, dict):
        for key in _ENVELOPE_KEYS:
            candidate = payload.get(key)
            if isinstance(candidate, list):
                rows = candidate
                break
            if isinstance(candidate, dict):
                return extract_rows(candidate)
        else:
            raise RowSourceError(
                "JSON object does not contain a row array",
                context={"keys": sorted(payload)},
            )
    if not isinstance(rows, list):
        raise RowSourceError(
            "Row snapshot must be a JSON array", context={"type": type(rows).__name__}
        )
    kept = [row for row in rows if isinstance(row, dict)]
    if len(kept) != len(rows):
        logger.warning("Skipped %d non-object rows", len(rows) - len(kept))
    return kept


def load_rows(path: Path) -> list[dict[str, Any]]:
    """Read a row snapshot from ``path``."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RowSourceError(f"Cannot read rows from {path}", context={"path": path}, cause=exc) from exc
    rows = extract_rows(payload)
    logger.debug("Loaded %d rows from %s", len(rows), path)
    return rows
