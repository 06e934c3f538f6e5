"""Type definitions for CE Tracker data structures.

ARCHITECTURE DECISION: HYBRID APPROACH (TypedDict + dict[str, Any])
===================================================================

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   credentials, renewal periods, activities, special categories,
   reinstatement info, disciplinary actions and awards.

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   per-category remainders keyed by category name, outstanding reinstatement
   maps keyed by requirement id, month aggregations keyed by "YYYY-MM".

3. **NamedTuple / frozen dataclass for computed results** so engines hand back
   values that cannot be mutated by callers.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator. Only const.py and typing machinery.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Default substitution for missing or
invalid fields happens once in data_builders.normalize_* functions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, NamedTuple, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

CredentialId = str  # UUID string
RenewalPeriodId = str  # UUID string
ActivityId = str  # UUID string
SpecialCategoryId = str  # UUID string
ReinstatementSpecialCatId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Stored Entity Types
# =============================================================================


class CredentialData(TypedDict):
    """A professional license or certification."""

    internal_id: CredentialId
    name: str
    measurement_default: str  # const.UNIT_HOURS | const.UNIT_UNITS
    hours_per_unit: float
    required_ces: float
    special_category_ids: list[SpecialCategoryId]
    issuer_name: NotRequired[str]


class RenewalPeriodData(TypedDict):
    """A date-bounded cycle during which CE must be earned."""

    internal_id: RenewalPeriodId
    credential_id: CredentialId
    name: str
    start: ISODate
    end: ISODate
    application_window_start: NotRequired[ISODate | None]
    late_fee_date: NotRequired[ISODate | None]
    late_fee_amount: NotRequired[float]
    completed: bool
    reinstatement_id: NotRequired[str | None]


class ActivityData(TypedDict):
    """A CE activity (course, conference, live event...)."""

    internal_id: ActivityId
    title: str
    awarded_amount: float
    unit: str
    completed: bool
    completion_date: NotRequired[ISODate | None]
    credential_ids: list[CredentialId]
    renewal_period_id: NotRequired[RenewalPeriodId | None]
    special_category_id: NotRequired[SpecialCategoryId | None]
    for_reinstatement: bool
    expires: NotRequired[bool]
    expiration_date: NotRequired[ISODate | None]
    expiration_reminder: NotRequired[bool]
    is_live: NotRequired[bool]
    start_time: NotRequired[ISODatetime | None]
    clock_hours_awarded: NotRequired[float]
    eval_rating: NotRequired[int | None]


class SpecialCategoryData(TypedDict):
    """A named sub-requirement of a credential (e.g. Ethics)."""

    internal_id: SpecialCategoryId
    credential_id: CredentialId
    name: str
    required_hours: float
    measurement_default: str


class ReinstatementSpecialCatData(TypedDict):
    """Per-category CE requirement attached to a reinstatement."""

    internal_id: ReinstatementSpecialCatId
    special_category_id: SpecialCategoryId | None
    ces_required: float


class ReinstatementData(TypedDict):
    """Extra requirements for restoring a lapsed credential."""

    internal_id: str
    renewal_period_id: RenewalPeriodId
    total_extra_ces: float
    deadline: NotRequired[ISODate | None]
    special_cat_requirements: list[ReinstatementSpecialCatData]
    interview_scheduled: NotRequired[ISODatetime | None]
    additional_test_date: NotRequired[ISODatetime | None]


class DisciplinaryActionData(TypedDict):
    """A sanction against a credential with its own deadlines."""

    internal_id: str
    credential_id: CredentialId
    name: str
    action_type: str
    temporary_only: bool
    end_date: NotRequired[ISODate | None]
    community_service_deadline: NotRequired[ISODate | None]
    community_service_hours: NotRequired[float]
    community_service_completed_on: NotRequired[ISODate | None]
    fine_deadline: NotRequired[ISODate | None]
    fine_amount: NotRequired[float]
    fine_paid_on: NotRequired[ISODate | None]
    ce_deadline: NotRequired[ISODate | None]
    ce_hours: NotRequired[float]


class AwardData(TypedDict):
    """An achievement the user can earn."""

    internal_id: str
    name: str
    description: str
    notification_text: str
    criterion: str
    value: float
    date_earned: NotRequired[ISODatetime | None]


class DataSnapshot(TypedDict):
    """Everything the planner and calculators read in one pass."""

    credentials: dict[CredentialId, CredentialData]
    renewal_periods: dict[RenewalPeriodId, RenewalPeriodData]
    activities: dict[ActivityId, ActivityData]
    special_categories: dict[SpecialCategoryId, SpecialCategoryData]
    reinstatements: dict[str, ReinstatementData]
    disciplinary_actions: dict[str, DisciplinaryActionData]


# Dynamic structures
CategoryRemainders = dict[str, float]  # category name -> remaining CE
OutstandingMap = dict[ReinstatementSpecialCatId, float]
MonthlyTotals = dict[str, float]  # "YYYY-MM" -> clock hours
ComplianceSummary = dict[str, Any]


# =============================================================================
# Computed Results
# =============================================================================


class OverallCEResult(NamedTuple):
    """Remaining overall CE for a renewal, in the credential's unit."""

    remaining: float
    is_current: bool
    unit: str


class ReinstatementRequirement(NamedTuple):
    """Extra CE needed to reinstate, in clock hours."""

    required: float
    earned: float


class ReinstatementCategoryStatus(NamedTuple):
    """Whether every reinstatement category requirement is satisfied."""

    met: bool
    outstanding: OutstandingMap


@dataclass(frozen=True, slots=True)
class PlanEntry:
    """A single reminder to hand to the scheduling gateway.

    Never persisted; rebuilt on every replan.
    """

    stable_key: str
    title: str
    body: str
    trigger_time: datetime
    series_index: int
    notification_type: str
