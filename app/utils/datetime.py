"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Any, Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "America/Sao_Paulo"
_DISPLAY_DATE_FORMAT: Final[str] = "%d/%m/%Y"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)
_DATE_ONLY_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable (via
    the ``Settings`` class). If the provided value cannot be resolved, the
    default ``America/Sao_Paulo`` timezone is used as a fallback.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` to UTC, treating naive values as already in UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """Coerce database or payload values into an aware UTC datetime.

    Accepts ``datetime`` and ``date`` instances as well as ISO 8601 strings
    (including the trailing ``Z`` emitted by JavaScript clients). Returns
    ``None`` for empty or unparseable input.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def format_local_date(value: Any) -> str:
    """Return ``value`` formatted as ``dd/mm/yyyy`` in the application timezone.

    Date-only values (``date`` objects or ``YYYY-MM-DD`` strings) are calendar
    dates and are formatted as-is, without any timezone shift.
    Values that cannot be read as a date are returned as text.
    """

    if isinstance(value, date) and not isinstance(value, datetime):
        return value.strftime(_DISPLAY_DATE_FORMAT)
    if isinstance(value, str) and _DATE_ONLY_PATTERN.match(value.strip()):
        try:
            return date.fromisoformat(value.strip()).strftime(_DISPLAY_DATE_FORMAT)
        except ValueError:
            return value

    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.astimezone(get_app_timezone()).strftime(_DISPLAY_DATE_FORMAT)


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
