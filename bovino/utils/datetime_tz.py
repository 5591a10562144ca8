from __future__ import annotations

from datetime import date, datetime

# Spanish month abbreviations, aligned with the web front end
_MON_ES = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]


def format_local_date(value: date | datetime | None) -> str | None:
    """Serialize to `YYYY-MM-DD` from the local calendar fields.

    Aware datetimes are NOT converted to UTC first; the calendar day the user
    picked is the day that goes on the wire.
    """
    if value is None:
        return None
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_local_date(value: date | datetime | str | None) -> date | None:
    """Parse a server date (`YYYY-MM-DD` or ISO datetime) into a calendar date.

    Only the leading date part of an ISO string is read, so
    `2024-03-15T00:00:00.000Z` stays on the 15th whatever the local offset.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def today() -> date:
    return date.today()


def format_day_month(d: date | None) -> str:
    """Return '05/oct' style labels used in option lists."""
    if d is None:
        return ""
    return f"{d.day:02d}/{_MON_ES[d.month - 1]}"
