"""Public API surface for rd_common."""

from rd_common.errors import (
    BulkActionPartialFailure,
    ColumnDefinitionError,
    ConfigurationError,
    ExportEncodingFailure,
    MalformedColumnPath,
    RDError,
    RowSourceError,
    UnknownBulkActionError,
    error_to_payload,
    wrap_error,
)
from rd_common.logging import configure_logging

__all__ = [
    "BulkActionPartialFailure",
    "ColumnDefinitionError",
    "ConfigurationError",
    "ExportEncodingFailure",
    "MalformedColumnPath",
    "RDError",
    "RowSourceError",
    "UnknownBulkActionError",
    "configure_logging",
    "error_to_payload",
    "wrap_error",
]
