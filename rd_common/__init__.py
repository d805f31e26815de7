"""Shared helpers for rentdesk-tables."""

from rd_common.api import RDError, configure_logging

__all__ = ["configure_logging", "RDError"]
