"""Utility functions for time handling."""

from .timestamps import (
    add_months,
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "add_months",
    "parse_iso_datetime",
    "format_timestamp",
]
