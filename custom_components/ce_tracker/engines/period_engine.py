"""Period Engine - Pure logic for renewal period resolution.

This engine provides stateless functions for:
- Finding the renewal period(s) containing a date (closed interval)
- Assigning completed activities to the period of their completion date
- Days remaining until a period or the next period ends
- Months-before-end anchors for long-range alerts

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

Period bounds are inclusive on both ends: an activity completed on the start
date or on the end date belongs to the period.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import date_in_window, days_between, dt_add_months, dt_parse_date

if TYPE_CHECKING:
    from ..type_defs import ActivityData, RenewalPeriodData


class PeriodEngine:
    """Pure logic engine for renewal period lookups.

    All methods are static - no instance state.
    """

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    @staticmethod
    def contains(period: RenewalPeriodData, on_date: date) -> bool:
        """Return True when `start <= on_date <= end`."""
        return date_in_window(
            on_date,
            dt_parse_date(period.get(const.DATA_RENEWAL_START)),
            dt_parse_date(period.get(const.DATA_RENEWAL_END)),
        )

    @staticmethod
    def current_periods(
        periods: Iterable[RenewalPeriodData], as_of: date
    ) -> list[RenewalPeriodData]:
        """Return every period whose closed interval contains `as_of`.

        Overlapping periods are all returned, in input order.
        """
        return [p for p in periods if PeriodEngine.contains(p, as_of)]

    @staticmethod
    def is_period_current(
        period: RenewalPeriodData,
        periods: Iterable[RenewalPeriodData],
        as_of: date,
    ) -> bool:
        """Return True if `period` is among the current periods for `as_of`."""
        period_id = period[const.DATA_INTERNAL_ID]
        return any(
            p[const.DATA_INTERNAL_ID] == period_id
            for p in PeriodEngine.current_periods(periods, as_of)
        )

    @staticmethod
    def find_period_for_date(
        periods: Iterable[RenewalPeriodData], on_date: date
    ) -> RenewalPeriodData | None:
        """Return the single period containing `on_date`.

        Returns None when no period matches or when several overlapping
        periods match (ambiguous).
        """
        matches = PeriodEngine.current_periods(periods, on_date)
        if len(matches) != 1:
            if matches:
                const.LOGGER.debug(
                    "DEBUG: %s overlapping periods contain %s, leaving unassigned",
                    len(matches),
                    on_date,
                )
            return None
        return matches[0]

    # =========================================================================
    # ACTIVITY ASSIGNMENT
    # =========================================================================

    @staticmethod
    def assign_activity_to_period(
        activity: ActivityData,
        periods_by_credential: Mapping[str, list[RenewalPeriodData]],
    ) -> str | None:
        """Resolve the renewal period id for a completed activity.

        Only completed activities with a completion date are eligible. The
        activity's credentials are checked in order and the first credential
        with a period containing the completion date wins.

        Returns:
            The period internal_id, or None (not an error) when nothing matches.
        """
        if not activity.get(const.DATA_ACTIVITY_COMPLETED):
            return None
        completion = dt_parse_date(activity.get(const.DATA_ACTIVITY_COMPLETION_DATE))
        if completion is None:
            return None

        for credential_id in activity.get(const.DATA_ACTIVITY_CREDENTIAL_IDS, []):
            period = PeriodEngine.find_period_for_date(
                periods_by_credential.get(credential_id, []), completion
            )
            if period is not None:
                return period[const.DATA_INTERNAL_ID]
        return None

    @staticmethod
    def assign_activities(
        activities: Iterable[ActivityData],
        periods_by_credential: Mapping[str, list[RenewalPeriodData]],
    ) -> dict[str, str | None]:
        """Bulk assignment; re-running over the same data yields the same map."""
        return {
            activity[const.DATA_INTERNAL_ID]: PeriodEngine.assign_activity_to_period(
                activity, periods_by_credential
            )
            for activity in activities
        }

    @staticmethod
    def group_by_credential(
        periods: Iterable[RenewalPeriodData],
    ) -> dict[str, list[RenewalPeriodData]]:
        """Index renewal periods by their credential id."""
        grouped: dict[str, list[RenewalPeriodData]] = {}
        for period in periods:
            grouped.setdefault(period[const.DATA_RENEWAL_CREDENTIAL_ID], []).append(
                period
            )
        return grouped

    # =========================================================================
    # TIME REMAINING
    # =========================================================================

    @staticmethod
    def days_until_period_end(
        period: RenewalPeriodData, today: date
    ) -> tuple[int, str]:
        """Return (days until end, period name) for a current period.

        Returns (-1, "") when the period does not contain `today`.
        """
        if not PeriodEngine.contains(period, today):
            return (const.SENTINEL_NO_PERIOD, const.SENTINEL_EMPTY)
        end = dt_parse_date(period[const.DATA_RENEWAL_END])
        return (days_between(today, end), period.get(const.DATA_RENEWAL_NAME, ""))  # type: ignore[arg-type]

    @staticmethod
    def time_until_next_expiration(
        periods: Iterable[RenewalPeriodData], today: date
    ) -> tuple[int, str]:
        """Return the soonest-ending current period as (days, name).

        Returns (-1, "") when no period contains `today`.
        """
        best: tuple[int, str] = (const.SENTINEL_NO_PERIOD, const.SENTINEL_EMPTY)
        for period in PeriodEngine.current_periods(periods, today):
            days, name = PeriodEngine.days_until_period_end(period, today)
            if best[0] == const.SENTINEL_NO_PERIOD or days < best[0]:
                best = (days, name)
        return best

    @staticmethod
    def months_before_period_end(period: RenewalPeriodData, months: int) -> date | None:
        """Return the date `months` calendar months before the period end.

        The sign of `months` is ignored: the result always looks back from
        the end date.
        """
        end = dt_parse_date(period.get(const.DATA_RENEWAL_END))
        if end is None:
            return None
        return dt_add_months(end, -abs(months))
