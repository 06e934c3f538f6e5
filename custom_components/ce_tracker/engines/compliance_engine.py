"""Compliance Engine - Pure logic for CE requirement calculations.

This engine provides stateless functions for:
- Remaining overall CE for a renewal period (in the credential's unit)
- Remaining CE per special category (in each category's unit)
- Clock hours earned by an activity for a credential
- Month-by-month earned totals for charts
- Progress percentages

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

Remainders are NOT clamped: a negative value means the requirement was
exceeded and lets callers show the surplus.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..type_defs import OverallCEResult
from ..utils.dt_utils import dt_month_key, dt_parse_date
from ..utils.math_utils import (
    calculate_percentage,
    convert_ce,
    resolve_hours_per_unit,
    to_clock_hours,
)
from .period_engine import PeriodEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityData,
        CategoryRemainders,
        CredentialData,
        MonthlyTotals,
        RenewalPeriodData,
        SpecialCategoryData,
    )


class ComplianceEngine:
    """Pure logic engine for CE compliance.

    All methods are static - no instance state.
    """

    # =========================================================================
    # ACTIVITY HELPERS
    # =========================================================================

    @staticmethod
    def counts_toward(activity: ActivityData, renewal_id: str) -> bool:
        """Return True if the activity is linked, completed and awards CE."""
        return (
            activity.get(const.DATA_ACTIVITY_RENEWAL_PERIOD_ID) == renewal_id
            and bool(activity.get(const.DATA_ACTIVITY_COMPLETED))
            and activity.get(const.DATA_ACTIVITY_AWARDED_AMOUNT, 0) > 0
        )

    @staticmethod
    def activity_clock_hours(
        activity: ActivityData, credential: CredentialData | None
    ) -> float:
        """Clock hours an activity earns toward a credential.

        Hour-based activities count their awarded amount. Unit-based
        activities prefer an explicit clock-hour figure, then the
        credential's ratio when it measures in units, then the default ratio.
        """
        amount = activity.get(const.DATA_ACTIVITY_AWARDED_AMOUNT, 0.0)
        if activity.get(const.DATA_ACTIVITY_UNIT) != const.UNIT_UNITS:
            return amount
        clock_hours = activity.get(const.DATA_ACTIVITY_CLOCK_HOURS_AWARDED, 0.0)
        if clock_hours > 0:
            return clock_hours
        ratio = None
        if (
            credential is not None
            and credential[const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT] == const.UNIT_UNITS
        ):
            ratio = credential[const.DATA_CREDENTIAL_HOURS_PER_UNIT]
        return to_clock_hours(amount, const.UNIT_UNITS, ratio)

    @staticmethod
    def _converted_amount(
        activity: ActivityData, to_unit: str, hours_per_unit: float
    ) -> float:
        return convert_ce(
            activity[const.DATA_ACTIVITY_AWARDED_AMOUNT],
            activity.get(const.DATA_ACTIVITY_UNIT),
            to_unit,
            hours_per_unit,
        )

    # =========================================================================
    # OVERALL REQUIREMENT
    # =========================================================================

    @staticmethod
    def earned_overall_ce(
        renewal: RenewalPeriodData,
        credential: CredentialData,
        activities: Iterable[ActivityData],
    ) -> float:
        """Sum of linked, completed CE converted into the credential's unit."""
        unit = credential[const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT]
        ratio = resolve_hours_per_unit(credential[const.DATA_CREDENTIAL_HOURS_PER_UNIT])
        renewal_id = renewal[const.DATA_INTERNAL_ID]
        return sum(
            ComplianceEngine._converted_amount(activity, unit, ratio)
            for activity in activities
            if ComplianceEngine.counts_toward(activity, renewal_id)
        )

    @staticmethod
    def remaining_overall_ce(
        renewal: RenewalPeriodData,
        credential: CredentialData | None,
        activities: Iterable[ActivityData],
        credential_periods: Iterable[RenewalPeriodData],
        today: date,
    ) -> OverallCEResult:
        """Remaining overall CE for a renewal period.

        Args:
            renewal: The renewal period being evaluated
            credential: The renewal's credential (None when unlinked)
            activities: Candidate activities (filtered here)
            credential_periods: Every period of the credential, for currency
            today: Local date used to decide whether the renewal is current

        Returns:
            OverallCEResult(remaining, is_current, unit). Returns
            (0, False, unit) when there is no credential or nothing is required.
        """
        if credential is None:
            return OverallCEResult(0.0, False, const.UNIT_HOURS)

        unit = credential[const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT]
        required = credential[const.DATA_CREDENTIAL_REQUIRED_CES]
        if required <= 0:
            return OverallCEResult(0.0, False, unit)

        earned = ComplianceEngine.earned_overall_ce(renewal, credential, activities)
        is_current = PeriodEngine.is_period_current(
            renewal, credential_periods, today
        )
        return OverallCEResult(required - earned, is_current, unit)

    @staticmethod
    def ce_progress_percentage(
        renewal: RenewalPeriodData,
        credential: CredentialData | None,
        activities: Iterable[ActivityData],
    ) -> float:
        """Earned CE as a percentage of the requirement, capped at 100."""
        if credential is None:
            return 0.0
        earned = ComplianceEngine.earned_overall_ce(renewal, credential, activities)
        return min(
            calculate_percentage(earned, credential[const.DATA_CREDENTIAL_REQUIRED_CES]),
            100.0,
        )

    # =========================================================================
    # SPECIAL CATEGORIES
    # =========================================================================

    @staticmethod
    def earned_special_category_ce(
        renewal: RenewalPeriodData,
        credential: CredentialData,
        category: SpecialCategoryData,
        activities: Iterable[ActivityData],
    ) -> float:
        """CE earned toward one category, in the category's unit."""
        unit = category[const.DATA_CATEGORY_MEASUREMENT_DEFAULT]
        ratio = resolve_hours_per_unit(credential[const.DATA_CREDENTIAL_HOURS_PER_UNIT])
        renewal_id = renewal[const.DATA_INTERNAL_ID]
        category_id = category[const.DATA_INTERNAL_ID]
        return sum(
            ComplianceEngine._converted_amount(activity, unit, ratio)
            for activity in activities
            if ComplianceEngine.counts_toward(activity, renewal_id)
            and activity.get(const.DATA_ACTIVITY_SPECIAL_CATEGORY_ID) == category_id
        )

    @staticmethod
    def remaining_special_category_ce(
        renewal: RenewalPeriodData | None,
        credential: CredentialData | None,
        categories: Iterable[SpecialCategoryData],
        activities: Iterable[ActivityData],
    ) -> CategoryRemainders:
        """Remaining CE per special category name.

        Only categories belonging to the credential with a positive
        requirement are included. Missing renewal or credential → {}.
        """
        if renewal is None or credential is None:
            return {}

        activity_list = list(activities)
        credential_id = credential[const.DATA_INTERNAL_ID]
        remaining: CategoryRemainders = {}
        for category in categories:
            if category.get(const.DATA_CATEGORY_CREDENTIAL_ID) != credential_id:
                continue
            required = category[const.DATA_CATEGORY_REQUIRED_HOURS]
            if required <= 0:
                continue
            earned = ComplianceEngine.earned_special_category_ce(
                renewal, credential, category, activity_list
            )
            remaining[category[const.DATA_CATEGORY_NAME]] = required - earned
        return remaining

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    @staticmethod
    def ce_earned_by_month(
        activities: Iterable[ActivityData],
        credentials: Iterable[CredentialData],
    ) -> MonthlyTotals:
        """Clock hours earned per completion month ("YYYY-MM"), oldest first.

        Unit-based activities use the first unit-measuring credential's ratio,
        or the default when no credential measures in units.
        """
        units_credential = next(
            (
                c
                for c in credentials
                if c[const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT] == const.UNIT_UNITS
            ),
            None,
        )
        totals: MonthlyTotals = {}
        for activity in activities:
            if not activity.get(const.DATA_ACTIVITY_COMPLETED):
                continue
            completed_on = dt_parse_date(activity.get(const.DATA_ACTIVITY_COMPLETION_DATE))
            if completed_on is None:
                continue
            key = dt_month_key(completed_on)
            totals[key] = totals.get(key, 0.0) + ComplianceEngine.activity_clock_hours(
                activity, units_credential
            )
        return dict(sorted(totals.items()))
