"""Presentation formatters for typed columns and domain renderers."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any

from rd_table.paths import is_absent

NOT_AVAILABLE = "N/A"

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}


def coerce_datetime(value: Any) -> datetime | None:
    """Interpret ``value`` as an aware UTC-comparable datetime.

    Accepts ``datetime``/``date`` objects, ISO-8601 strings (``Z`` suffix
    included) and numeric POSIX timestamps in seconds. Naive values are
    taken as UTC. Returns None when the value is not a point in time.
    """
    if is_absent(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def format_date(value: Any, *, include_time: bool = False) -> str:
    """Format like ``Jan 5, 2024`` (or ``Jan 5, 2024, 03:04 PM``)."""
    if is_absent(value) or value == "":
        return NOT_AVAILABLE
    parsed = coerce_datetime(value)
    if parsed is None:
        return "Invalid Date"
    text = f"{parsed:%b} {parsed.day}, {parsed.year}"
    if include_time:
        text = f"{text}, {parsed:%I:%M %p}"
    return text


def format_datetime(value: Any) -> str:
    return format_date(value, include_time=True)


def format_currency(amount: Any, currency: str = "USD") -> str:
    """Format an amount with two decimals and thousands separators."""
    if is_absent(amount):
        return NOT_AVAILABLE
    number = _to_number(amount)
    if number is None or math.isnan(number):
        return "Invalid Amount"
    symbol = _CURRENCY_SYMBOLS.get(currency.upper())
    body = f"{abs(number):,.2f}"
    body = f"{symbol}{body}" if symbol else f"{currency.upper()} {body}"
    return f"-{body}" if number < 0 else body


def format_number(value: Any, decimals: int | None = None) -> str:
    if is_absent(value):
        return NOT_AVAILABLE
    number = _to_number(value)
    if number is None or math.isnan(number):
        return "Invalid Number"
    if decimals is not None:
        return f"{number:,.{decimals}f}"
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def format_status(status: Any) -> str:
    """``pending_review`` -> ``Pending Review``."""
    if is_absent(status) or not str(status):
        return "Unknown"
    return " ".join(word.capitalize() for word in str(status).split("_"))
