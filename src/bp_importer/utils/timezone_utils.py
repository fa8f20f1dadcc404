"""
Timezone and datetime utilities.

Row timestamps are wall-clock values from the monitor; they are
interpreted either in a configured IANA zone or in the process's local
zone.
"""

from datetime import datetime, tzinfo

import pytz
from dateutil import tz


def resolve_timezone(timezone_str: str | None = None) -> tzinfo:
    """
    Resolve a timezone name, falling back to the process local zone.

    Args:
        timezone_str: IANA timezone name (e.g., "Europe/London") or None.

    Returns:
        tzinfo instance.
    """
    if timezone_str:
        return pytz.timezone(timezone_str)
    return tz.tzlocal()


def make_timezone_aware(dt: datetime, timezone_str: str | None = None) -> datetime:
    """
    Attach a timezone to a naive wall-clock datetime.

    Aware datetimes are returned unchanged.

    Args:
        dt: Datetime object (may be naive or aware).
        timezone_str: Timezone name; None means the process local zone.

    Returns:
        Timezone-aware datetime object.
    """
    if dt.tzinfo is not None:
        return dt

    zone = resolve_timezone(timezone_str)
    if isinstance(zone, pytz.BaseTzInfo):
        return zone.localize(dt)
    return dt.replace(tzinfo=zone)


def parse_local_datetime(
    date_str: str, time_str: str, fmt: str = "%Y-%m-%d %H:%M", timezone_str: str | None = None
) -> datetime:
    """
    Parse separate date and time fields with a fixed pattern.

    Args:
        date_str: Date string, e.g. "2025-07-28".
        time_str: Time string, e.g. "08:15".
        fmt: strptime pattern applied to "<date> <time>".
        timezone_str: Timezone for the wall-clock value.

    Returns:
        Timezone-aware datetime object.

    Raises:
        ValueError: If the combined string does not match the pattern.
    """
    dt = datetime.strptime(f"{date_str} {time_str}", fmt)
    return make_timezone_aware(dt, timezone_str)


def format_date_range(start: datetime, end: datetime, fmt: str = "%Y-%m-%d") -> str:
    """Render an inclusive date range label such as "2025-07-01 - 2025-07-28"."""
    return f"{start.strftime(fmt)} - {end.strftime(fmt)}"
