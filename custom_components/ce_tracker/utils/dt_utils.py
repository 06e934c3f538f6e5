# File: utils/dt_utils.py
"""Date and time utilities for CE Tracker.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ DIRECTIVE 1 - UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_now_local: Get current datetime in local timezone
    - dt_now_utc: Get current datetime in UTC
    - as_local: Timezone conversion
    - dt_at_local_hour: Local datetime at a given hour of a calendar day
    - dt_parse_date: Normalize date inputs to `datetime.date`
    - dt_parse_datetime: Normalize datetime inputs to aware `datetime`
    - date_in_window: Inclusive closed-interval membership
    - days_between: Whole days between two calendar dates
    - dt_add_months: Calendar-aware month arithmetic
    - dt_month_key: "YYYY-MM" bucket for monthly aggregation
    - dt_format_short: Short human readable date for reminder text
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are assumed to be in UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def dt_at_local_hour(day: date, hour: int, tz: ZoneInfo | None = None) -> datetime:
    """Return the local wall-clock datetime `hour`:00 on `day`.

    Built from the calendar date rather than by adding a timedelta to
    midnight, so a DST shift on that day does not move the reminder.

    Example:
        dt_at_local_hour(date(2026, 3, 8), 10) → 2026-03-08 10:00 local
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.combine(day, time(hour=hour), tzinfo=tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(
    value: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Safely normalize a date-like value into a `datetime.date`.

    Accepts:
    - "2025-04-07" (ISO date) or a full ISO datetime string
    - `datetime.date`
    - `datetime.datetime` (converted to local date)

    Returns:
        datetime.date or None if the value is empty or cannot be parsed.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return as_local(value, tz).date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value)
    except ValueError:
        pass

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        _LOGGER.debug("Unparseable date value: %s", value)
        return None
    return dt_parse_date(parsed, tz)


def dt_parse_datetime(
    value: str | date | datetime | None, tz: ZoneInfo | None = None
) -> datetime | None:
    """Normalize a datetime-like value into a timezone-aware `datetime`.

    Plain dates become local midnight; naive datetimes are assumed local.

    Returns:
        Aware datetime, or None if the value is empty or cannot be parsed.
    """
    if not value:
        return None

    tz_info = tz or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            result = datetime.fromisoformat(value)
        except ValueError:
            _LOGGER.debug("Unparseable datetime value: %s", value)
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)
    return result


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def date_in_window(on_date: date, start: date | None, end: date | None) -> bool:
    """Return True when `start <= on_date <= end` (closed interval).

    A missing bound never matches.
    """
    if start is None or end is None:
        return False
    return start <= on_date <= end


def days_between(start: date, end: date) -> int:
    """Whole calendar days from `start` to `end` (negative when end is earlier)."""
    return (end - start).days


def dt_add_months(day: date, months: int) -> date:
    """Add (or subtract) calendar months, clamping to the month's last day.

    Example:
        dt_add_months(date(2026, 8, 31), -6) → date(2026, 2, 28)
    """
    return day + relativedelta(months=months)


def dt_month_key(day: date) -> str:
    """Return the "YYYY-MM" aggregation key for a date."""
    return f"{day.year:04d}-{day.month:02d}"


# ==============================================================================
# Formatting
# ==============================================================================


def dt_format_short(value: date | datetime | None) -> str:
    """Format a date or datetime for reminder text.

    Examples:
        date(2026, 12, 31) → "Dec 31, 2026"
        datetime(2026, 4, 7, 14, 30, tzinfo=...) → "Apr 07, 2026 02:30 PM"
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return as_local(value).strftime("%b %d, %Y %I:%M %p")
    return value.strftime("%b %d, %Y")
