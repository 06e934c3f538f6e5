"""Tests for dt_utils - date parsing and calendar arithmetic.

Pure Python, no HA fixtures needed. The autouse fixture in conftest keeps the
default timezone at UTC.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from freezegun import freeze_time

from custom_components.ce_tracker.utils.dt_utils import (
    as_local,
    date_in_window,
    days_between,
    dt_add_months,
    dt_at_local_hour,
    dt_format_short,
    dt_month_key,
    dt_now_local,
    dt_now_utc,
    dt_parse_date,
    dt_parse_datetime,
    dt_today_local,
)

NEW_YORK = ZoneInfo("America/New_York")

# =============================================================================
# TEST: PARSING
# =============================================================================


class TestParsing:
    """Test date and datetime normalization."""

    def test_parse_iso_date(self) -> None:
        """ISO date strings become dates."""
        assert dt_parse_date("2026-04-07") == date(2026, 4, 7)

    def test_parse_iso_datetime_string_to_date(self) -> None:
        """Aware datetime strings are converted to the local date first."""
        assert dt_parse_date("2026-04-07T23:30:00-05:00") == date(2026, 4, 8)

    def test_parse_invalid_date(self) -> None:
        """Unparseable values return None."""
        assert dt_parse_date("next tuesday") is None
        assert dt_parse_date(None) is None
        assert dt_parse_date("") is None

    def test_parse_date_passthrough(self) -> None:
        """Date objects are returned unchanged."""
        assert dt_parse_date(date(2026, 1, 1)) == date(2026, 1, 1)

    def test_parse_datetime_from_date(self) -> None:
        """Plain dates become local midnight."""
        result = dt_parse_datetime(date(2026, 1, 1))
        assert result == datetime(2026, 1, 1, tzinfo=ZoneInfo("UTC"))

    def test_parse_naive_datetime_is_local(self) -> None:
        """Naive datetimes take the requested timezone."""
        result = dt_parse_datetime("2026-01-01T09:00:00", NEW_YORK)
        assert result is not None
        assert result.tzinfo == NEW_YORK
        assert result.hour == 9


# =============================================================================
# TEST: CALENDAR ARITHMETIC
# =============================================================================


class TestCalendar:
    """Test window membership and month arithmetic."""

    def test_window_is_inclusive(self) -> None:
        """Both bounds belong to the window."""
        start, end = date(2026, 1, 1), date(2026, 12, 31)
        assert date_in_window(start, start, end)
        assert date_in_window(end, start, end)
        assert not date_in_window(date(2027, 1, 1), start, end)

    def test_window_missing_bound(self) -> None:
        """A missing bound never matches."""
        assert not date_in_window(date(2026, 1, 1), None, date(2026, 12, 31))

    def test_days_between(self) -> None:
        """Negative when the end is earlier."""
        assert days_between(date(2026, 1, 1), date(2026, 1, 31)) == 30
        assert days_between(date(2026, 1, 31), date(2026, 1, 1)) == -30

    def test_add_months_clamps_day(self) -> None:
        """Month arithmetic clamps to the last day of the month."""
        assert dt_add_months(date(2026, 8, 31), -6) == date(2026, 2, 28)

    def test_month_key(self) -> None:
        """Keys are zero padded."""
        assert dt_month_key(date(2026, 3, 9)) == "2026-03"


# =============================================================================
# TEST: LOCAL WALL CLOCK
# =============================================================================


class TestWallClock:
    """Test local hour construction across DST."""

    def test_at_local_hour_on_dst_day(self) -> None:
        """The wall-clock hour is kept on the day clocks change."""
        result = dt_at_local_hour(date(2026, 3, 8), 10, NEW_YORK)
        assert (result.hour, result.minute) == (10, 0)
        assert result.utcoffset() == NEW_YORK.utcoffset(datetime(2026, 3, 8, 10))

    def test_as_local_naive_is_utc(self) -> None:
        """Naive datetimes are treated as UTC before conversion."""
        result = as_local(datetime(2026, 1, 1, 15), NEW_YORK)
        assert result.hour == 10

    def test_format_short(self) -> None:
        """Dates and datetimes format for reminder text."""
        assert dt_format_short(date(2026, 12, 31)) == "Dec 31, 2026"
        assert (
            dt_format_short(datetime(2026, 4, 7, 14, 30, tzinfo=UTC))
            == "Apr 07, 2026 02:30 PM"
        )
        assert dt_format_short(None) == ""


# =============================================================================
# TEST: CURRENT TIME
# =============================================================================


class TestCurrentTime:
    """Test the clock helpers against a frozen clock."""

    @freeze_time("2026-03-08 03:30:00", tz_offset=0)
    def test_today_depends_on_timezone(self) -> None:
        """Local 'today' lags UTC west of Greenwich late at night."""
        assert dt_today_local() == date(2026, 3, 8)
        assert dt_today_local(NEW_YORK) == date(2026, 3, 7)

    @freeze_time("2026-03-08 12:00:00", tz_offset=0)
    def test_now_is_aware(self) -> None:
        """Both clocks return timezone-aware datetimes for the same instant."""
        assert dt_now_utc() == datetime(2026, 3, 8, 12, tzinfo=UTC)
        local = dt_now_local(NEW_YORK)
        assert local.tzinfo is not None
        assert local == dt_now_utc()
