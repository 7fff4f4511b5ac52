"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_utc,
    format_local_date,
    get_app_timezone,
    now_utc,
    parse_datetime,
)

__all__ = [
    "ensure_utc",
    "format_local_date",
    "get_app_timezone",
    "now_utc",
    "parse_datetime",
]
