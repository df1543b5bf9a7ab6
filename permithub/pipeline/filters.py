"""Client-side filtering and sorting over aggregated records."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, Mapping

from permithub.common.errors import ValidationError
from permithub.common.models import Provenance, Record
from permithub.common.time_utils import parse_date_like

COMPLETION_WINDOWS = ("all", "6months", "h1", "h2", "year")


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def filter_records(
    records: Iterable[Record],
    *,
    provenance: Provenance | str | None = None,
    text: str | None = None,
    field_equals: Mapping[str, str] | None = None,
) -> list[Record]:
    wanted_provenance = Provenance(provenance).value if provenance else None
    needle = text.strip().lower() if text else None
    out = []
    for record in records:
        if wanted_provenance and record.get("provenance") != wanted_provenance:
            continue
        if field_equals and any(str(record.get(key, "")) != str(value) for key, value in field_equals.items()):
            continue
        if needle and not any(needle in str(value).lower() for value in record.values()):
            continue
        out.append(record)
    return out


def filter_by_completion(
    records: Iterable[Record],
    window: str,
    today: date,
    *,
    field: str = "useAprDay",
    year: int | None = None,
) -> list[Record]:
    """Keep records whose completion date falls inside ``window``.

    ``6months`` keeps everything due on or before six months from ``today``. The half-year and
    year windows use ``year`` (default: ``today.year``). Records without a readable date are
    dropped by every window except ``all``.
    """
    if window not in COMPLETION_WINDOWS:
        raise ValidationError(f"Unknown completion window {window!r}; expected one of {', '.join(COMPLETION_WINDOWS)}")
    records = list(records)
    if window == "all":
        return records

    year = year or today.year
    if window == "6months":
        limit = _add_months(today, 6)

        def keep(day: date) -> bool:
            return day <= limit

    elif window == "h1":

        def keep(day: date) -> bool:
            return date(year, 1, 1) <= day <= date(year, 6, 30)

    elif window == "h2":

        def keep(day: date) -> bool:
            return date(year, 7, 1) <= day <= date(year, 12, 31)

    else:

        def keep(day: date) -> bool:
            return day.year == year

    out = []
    for record in records:
        day = parse_date_like(record.get(field))
        if day is not None and keep(day):
            out.append(record)
    return out


def _sort_key(value: object) -> tuple:
    # Rank: dates, numbers, then text; missing values sort last regardless of direction.
    day = parse_date_like(value)
    if day is not None:
        return (0, day.toordinal(), "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, float(value), "")
    if isinstance(value, str):
        try:
            return (1, float(value.replace(",", "")), "")
        except ValueError:
            return (2, 0.0, value)
    return (2, 0.0, str(value))


def sort_records(records: Iterable[Record], field: str, direction: str = "asc") -> list[Record]:
    if direction not in ("asc", "desc"):
        raise ValidationError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    present = []
    missing = []
    for record in records:
        value = record.get(field)
        if value is None or value == "":
            missing.append(record)
        else:
            present.append(record)
    present.sort(key=lambda record: _sort_key(record[field]), reverse=direction == "desc")
    return present + missing
