"""UTC-focused helpers and YYYYMMDD conversions."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_COMPACT_DATE = re.compile(r"^\d{8}$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_today_iso() -> str:
    return datetime.now(tz=timezone.utc).date().isoformat()


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def to_compact_date(value: str | None) -> str | None:
    """Accept ``YYYY-MM-DD`` or ``YYYYMMDD`` and return the wire form ``YYYYMMDD``."""
    if not value:
        return None
    value = value.strip()
    if _COMPACT_DATE.match(value):
        date(int(value[:4]), int(value[4:6]), int(value[6:]))
        return value
    parsed = date.fromisoformat(value)
    return parsed.strftime("%Y%m%d")


def format_yyyymmdd(value: object) -> object:
    if isinstance(value, str) and _COMPACT_DATE.match(value):
        return f"{value[:4]}-{value[4:6]}-{value[6:]}"
    return value


def parse_date_like(value: object) -> date | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    try:
        if _COMPACT_DATE.match(value):
            return date(int(value[:4]), int(value[4:6]), int(value[6:]))
        if _ISO_DATE.match(value):
            return date.fromisoformat(value)
    except ValueError:
        return None
    return None
