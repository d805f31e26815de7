"""Shared error taxonomy for rentdesk-tables."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class RDError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ColumnDefinitionError(RDError, ValueError):
    """A column was declared without enough information to render it."""


class MalformedColumnPath(RDError):
    """A column key path resolves to nothing on every row of a snapshot.

    Reported, never raised by the pipeline: cells fall back to a placeholder.
    """


class ExportEncodingFailure(RDError):
    """A cell value could not be stringified during CSV export."""


class UnknownBulkActionError(RDError, KeyError):
    """A bulk action was dispatched by a name that was never registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class BulkActionPartialFailure(RDError):
    """A bulk mutation collaborator failed for a subset of the ids."""

    def __init__(
        self,
        message: str,
        *,
        failed_ids: Iterable[Any],
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.failed_ids = list(failed_ids)
        merged = dict(context or {})
        merged.setdefault("failed_ids", self.failed_ids)
        super().__init__(message, context=merged, cause=cause)


class ConfigurationError(RDError, ValueError):
    """Failure due to invalid configuration."""


class RowSourceError(RDError):
    """Failure reading or decoding a row snapshot."""


T = TypeVar("T", bound=RDError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed RDError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: RDError) -> dict[str, Any]:
    """Convert an RDError to a flat reporting payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
