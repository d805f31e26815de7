"""Table engine configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, List, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from rd_common.config.env import parse_int_env, parse_str_env
from rd_common.errors import ConfigurationError


class TableSettings(BaseModel):
    """Defaults shared by every table controller."""

    page_size: int = Field(default=10, ge=1, description="Rows per page")
    window_size: int = Field(default=5, ge=1, description="Page numbers shown by the compact pager")
    placeholder: str = Field(default="-", description="Cell text for values that are missing")
    empty_message: str = Field(default="No data available", description="Shown when no rows match")
    id_fields: List[str] = Field(
        default_factory=lambda: ["id", "_id"],
        description="Row fields tried in order to find the row identifier",
    )
    csv_delimiter: str = Field(default=",", description="CSV field separator")
    csv_line_terminator: str = Field(default="\n", description="CSV record separator")

    @field_validator("csv_delimiter")
    @classmethod
    def _single_char_delimiter(cls, value: str) -> str:
        if len(value) != 1 or value in {'"', "\n", "\r"}:
            raise ValueError("csv_delimiter must be a single character other than a quote or newline")
        return value

    @field_validator("id_fields")
    @classmethod
    def _non_empty_id_fields(cls, value: List[str]) -> List[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        if not cleaned:
            raise ValueError("id_fields must name at least one field")
        return cleaned

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "TableSettings":
        """Build settings from ``RD_TABLE_*`` variables plus explicit overrides."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        page_size = parse_int_env(env.get("RD_TABLE_PAGE_SIZE"))
        if page_size is not None:
            values["page_size"] = page_size
        window_size = parse_int_env(env.get("RD_TABLE_WINDOW_SIZE"))
        if window_size is not None:
            values["window_size"] = window_size
        placeholder = parse_str_env(env.get("RD_TABLE_PLACEHOLDER"))
        if placeholder is not None:
            values["placeholder"] = placeholder
        delimiter = parse_str_env(env.get("RD_TABLE_CSV_DELIMITER"))
        if delimiter is not None:
            values["csv_delimiter"] = delimiter
        id_fields = parse_str_env(env.get("RD_TABLE_ID_FIELDS"))
        if id_fields is not None:
            values["id_fields"] = id_fields.split(",")
        values.update(overrides)
        return cls.validated(values)

    @classmethod
    def validated(cls, values: Mapping[str, Any]) -> "TableSettings":
        try:
            return cls.model_validate(dict(values))
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid table settings",
                context={"errors": [err["msg"] for err in exc.errors()]},
                cause=exc,
            ) from exc

    @classmethod
    def load(cls, path: Path) -> "TableSettings":
        """Load settings from a JSON file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"Cannot read table settings from {path}", context={"path": path}, cause=exc
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Table settings file must contain a JSON object", context={"path": path}
            )
        return cls.validated(data)

    def save(self, path: Path) -> None:
        Path(path).write_text(self.model_dump_json(indent=2), encoding="utf-8")
