"""CSV export helpers and file sinks."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Protocol

from rd_common.errors import ExportEncodingFailure
from rd_table.paths import is_absent, resolve_path

logger = logging.getLogger(__name__)

CellGetter = Callable[[Any], Any]


class FileSink(Protocol):
    """Receives generated export text; decides where and how it is saved."""

    def save(self, filename: str, text: str) -> Any: ...


@dataclass
class MemoryFileSink:
    """Keeps every export in memory (tests, previews, clipboard bridges)."""

    files: dict[str, str] = field(default_factory=dict)

    def save(self, filename: str, text: str) -> str:
        self.files[filename] = text
        return filename

    @property
    def last(self) -> tuple[str, str] | None:
        if not self.files:
            return None
        name = next(reversed(self.files))
        return name, self.files[name]


@dataclass
class DirectoryFileSink:
    """Writes exports as UTF-8 files under ``directory``."""

    directory: Path
    encoding: str = "utf-8"

    def save(self, filename: str, text: str) -> Path:
        target = Path(self.directory) / Path(filename).name
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding=self.encoding, newline="") as handle:
            handle.write(text)
        logger.info("Exported %s", target)
        return target


def default_export_filename(prefix: str, today: date | None = None) -> str:
    """``users`` -> ``users_2024-05-01.csv``."""
    day = today or date.today()
    return f"{prefix}_{day.isoformat()}.csv"


def _cell_text(value: Any) -> str:
    if is_absent(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _safe_cell(row: Any, key: str, getter: CellGetter | None) -> str:
    try:
        value = getter(row) if getter is not None else resolve_path(row, key)
        text = _cell_text(value)
        # Lone surrogates only fail once a sink encodes the file.
        text.encode("utf-8")
        return text
    except Exception as exc:
        failure = ExportEncodingFailure(
            f"Could not encode cell {key!r}", context={"column": key}, cause=exc
        )
        logger.warning("%s; writing an empty cell", failure, extra={"error": failure.to_dict()})
        return ""


def to_csv(
    rows: Iterable[Any],
    headers: Mapping[str, str],
    *,
    getters: Mapping[str, CellGetter] | None = None,
    delimiter: str = ",",
    line_terminator: str = "\n",
) -> str:
    """Serialize rows with minimal quoting.

    ``headers`` maps key paths (or getter names) to header titles, in output
    order. Fields holding the delimiter, a quote or a newline are quoted and
    embedded quotes doubled.
    """
    getters = getters or {}
    keys = list(headers)
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator=line_terminator,
    )
    writer.writerow([headers[key] for key in keys])
    for row in rows:
        writer.writerow([_safe_cell(row, key, getters.get(key)) for key in keys])
    return buffer.getvalue()


def export_csv(
    rows: Iterable[Any],
    headers: Mapping[str, str],
    sink: FileSink,
    filename: str,
    **options: Any,
) -> Any:
    """Render CSV and hand it to ``sink``; returns whatever the sink returns."""
    text = to_csv(rows, headers, **options)
    return sink.save(filename, text)
