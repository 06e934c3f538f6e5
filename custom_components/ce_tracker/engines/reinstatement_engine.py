"""Reinstatement Engine - Pure logic for lapsed credential reinstatement.

This engine provides stateless functions for:
- Total extra CE required for reinstatement vs. CE earned toward it
- Required/earned maps per reinstatement special-category requirement
- Whether every category requirement is met and what is still outstanding

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

All results are in clock hours. Requirements stated in units are multiplied
by the credential's ratio when the credential measures in units.

Evaluation Flow:
    1. special_category_lists() builds required and earned maps keyed by
       requirement id (matching and conversion only)
    2. special_category_reinstatement_status() diffs the two maps
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .. import const
from ..type_defs import ReinstatementCategoryStatus, ReinstatementRequirement
from ..utils.math_utils import to_clock_hours
from .compliance_engine import ComplianceEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityData,
        CredentialData,
        OutstandingMap,
        ReinstatementData,
        RenewalPeriodData,
    )


class ReinstatementEngine:
    """Pure logic engine for reinstatement requirements.

    All methods are static - no instance state.
    """

    @staticmethod
    def _required_clock_hours(amount: float, credential: CredentialData) -> float:
        return to_clock_hours(
            amount,
            credential[const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT],
            credential[const.DATA_CREDENTIAL_HOURS_PER_UNIT],
        )

    @staticmethod
    def _completed_renewal_activities(
        renewal: RenewalPeriodData, activities: Iterable[ActivityData]
    ) -> list[ActivityData]:
        renewal_id = renewal[const.DATA_INTERNAL_ID]
        return [
            a
            for a in activities
            if a.get(const.DATA_ACTIVITY_RENEWAL_PERIOD_ID) == renewal_id
            and a.get(const.DATA_ACTIVITY_COMPLETED)
        ]

    # =========================================================================
    # OVERALL REINSTATEMENT HOURS
    # =========================================================================

    @staticmethod
    def reinstatement_requirement(
        renewal: RenewalPeriodData,
        credential: CredentialData | None,
        reinstatement: ReinstatementData | None,
        activities: Iterable[ActivityData],
    ) -> ReinstatementRequirement:
        """Return (required, earned) clock hours for reinstatement.

        Returns (0, 0) unless both the reinstatement and credential exist.

        Example:
            25 extra units at 10 hours/unit with one flagged 100 hour
            activity → ReinstatementRequirement(250.0, 100.0)
        """
        if reinstatement is None or credential is None:
            return ReinstatementRequirement(0.0, 0.0)

        required = ReinstatementEngine._required_clock_hours(
            reinstatement[const.DATA_REINSTATEMENT_TOTAL_EXTRA_CES], credential
        )
        earned = sum(
            ComplianceEngine.activity_clock_hours(activity, credential)
            for activity in ReinstatementEngine._completed_renewal_activities(
                renewal, activities
            )
            if activity.get(const.DATA_ACTIVITY_FOR_REINSTATEMENT)
        )
        return ReinstatementRequirement(required, earned)

    # =========================================================================
    # SPECIAL CATEGORY REQUIREMENTS
    # =========================================================================

    @staticmethod
    def special_category_lists(
        renewal: RenewalPeriodData,
        credential: CredentialData | None,
        reinstatement: ReinstatementData | None,
        activities: Iterable[ActivityData],
    ) -> tuple[dict[str, float], dict[str, float]]:
        """Build (required_by_rsc, earned_by_rsc) clock-hour maps.

        Requirements without a linked special category are skipped. Earned
        hours come from completed activities of the renewal tagged with the
        requirement's category.
        """
        required_hours: dict[str, float] = {}
        earned_hours: dict[str, float] = {}
        if reinstatement is None or credential is None:
            return required_hours, earned_hours

        tagged = [
            a
            for a in ReinstatementEngine._completed_renewal_activities(
                renewal, activities
            )
            if a.get(const.DATA_ACTIVITY_SPECIAL_CATEGORY_ID)
        ]

        for requirement in reinstatement[const.DATA_REINSTATEMENT_SPECIAL_CATS]:
            category_id = requirement.get(const.DATA_RSC_SPECIAL_CATEGORY_ID)
            if not category_id:
                continue
            rsc_id = requirement[const.DATA_INTERNAL_ID]
            required_hours[rsc_id] = ReinstatementEngine._required_clock_hours(
                requirement[const.DATA_RSC_CES_REQUIRED], credential
            )
            earned_hours[rsc_id] = sum(
                ComplianceEngine.activity_clock_hours(activity, credential)
                for activity in tagged
                if activity.get(const.DATA_ACTIVITY_SPECIAL_CATEGORY_ID) == category_id
            )
        return required_hours, earned_hours

    @staticmethod
    def special_category_reinstatement_status(
        renewal: RenewalPeriodData,
        credential: CredentialData | None,
        reinstatement: ReinstatementData | None,
        activities: Iterable[ActivityData],
    ) -> ReinstatementCategoryStatus:
        """Return (met, outstanding) for the category requirements.

        `met` is True when every requirement has earned >= required, which
        includes having no requirements at all. `outstanding` lists only
        positive remainders and is empty when `met` is True.
        """
        required_hours, earned_hours = ReinstatementEngine.special_category_lists(
            renewal, credential, reinstatement, activities
        )
        outstanding: OutstandingMap = {}
        for rsc_id, required in required_hours.items():
            remaining = required - earned_hours.get(rsc_id, 0.0)
            if remaining > 0:
                outstanding[rsc_id] = remaining
        return ReinstatementCategoryStatus(not outstanding, outstanding)
