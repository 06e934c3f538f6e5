"""Entity building and normalization helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Business rule validation of stored records
- Complete entity structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes user_input with DATA_* keys (may have missing fields)
- Generates internal_id (UUID) for new entities
- Applies field defaults (missing number → 0, missing flag → False,
  missing list → [], unknown unit → hours, non-positive ratio → 10.0)
- Returns a complete entity dict ready for storage

### Normalization
`normalize_data()` rebuilds every stored record through its builder so that
engines can rely on every key being present. Records that fail validation are
dropped with a warning instead of stopping setup.

Consumers:
- storage_manager.py (normalization on load)
- services.py / tests (record creation)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
import uuid

from . import const
from .type_defs import (
    ActivityData,
    AwardData,
    CredentialData,
    DisciplinaryActionData,
    ReinstatementData,
    ReinstatementSpecialCatData,
    RenewalPeriodData,
    SpecialCategoryData,
)
from .utils.dt_utils import dt_parse_date, dt_parse_datetime
from .utils.math_utils import resolve_hours_per_unit

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    This prevents bugs like list("abc") → ['a', 'b', 'c'].
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value else []
    return list(value) if value else []


def _normalize_unit(value: Any) -> str:
    """Return a known measurement unit, defaulting to hours."""
    if value in const.MEASUREMENT_UNITS:
        return value
    return const.UNIT_HOURS


def _normalize_date(value: Any) -> str | None:
    """Return an ISO date string or None."""
    parsed = dt_parse_date(value)
    return parsed.isoformat() if parsed else None


def _normalize_datetime(value: Any) -> str | None:
    """Return an ISO datetime string or None."""
    parsed = dt_parse_datetime(value)
    return parsed.isoformat() if parsed else None


def _normalize_optional_id(value: Any) -> str | None:
    return str(value) if value else None


def _non_negative(field: str, value: Any) -> float:
    """Coerce to float, rejecting negative amounts."""
    try:
        number = float(value) if value is not None else 0.0
    except (TypeError, ValueError) as err:
        raise EntityValidationError(
            field=field, translation_key=const.TRANS_KEY_INVALID_AMOUNT
        ) from err
    if number < 0:
        raise EntityValidationError(
            field=field,
            translation_key=const.TRANS_KEY_INVALID_AMOUNT,
            placeholders={"value": str(number)},
        )
    return number


def _field_getter(
    user_input: dict[str, Any], existing: dict[str, Any] | None
) -> Callable[[str, Any], Any]:
    """Return a lookup with priority user_input > existing > default."""

    def get_field(data_key: str, default: Any) -> Any:
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    return get_field


def _resolve_internal_id(
    user_input: dict[str, Any], existing: dict[str, Any] | None
) -> str:
    if existing is not None and existing.get(const.DATA_INTERNAL_ID):
        return str(existing[const.DATA_INTERNAL_ID])
    if user_input.get(const.DATA_INTERNAL_ID):
        return str(user_input[const.DATA_INTERNAL_ID])
    return str(uuid.uuid4())


def _required_name(get_field: Callable[[str, Any], Any], key: str) -> str:
    raw_name = get_field(key, "")
    name = str(raw_name).strip() if raw_name else ""
    if not name:
        raise EntityValidationError(
            field=key, translation_key=const.TRANS_KEY_INVALID_NAME
        )
    return name


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The DATA_* constant identifying the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(f"{translation_key}: {field}")


# ==============================================================================
# CREDENTIALS
# ==============================================================================


def build_credential(
    user_input: dict[str, Any],
    existing: CredentialData | None = None,
) -> CredentialData:
    """Build credential data for create or update operations.

    Raises:
        EntityValidationError: If the name is empty or required CE is negative
    """
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    return CredentialData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        name=_required_name(get_field, const.DATA_CREDENTIAL_NAME),
        measurement_default=_normalize_unit(
            get_field(const.DATA_CREDENTIAL_MEASUREMENT_DEFAULT, const.UNIT_HOURS)
        ),
        hours_per_unit=resolve_hours_per_unit(
            get_field(const.DATA_CREDENTIAL_HOURS_PER_UNIT, None)
        ),
        required_ces=_non_negative(
            const.DATA_CREDENTIAL_REQUIRED_CES,
            get_field(const.DATA_CREDENTIAL_REQUIRED_CES, const.DEFAULT_ZERO),
        ),
        special_category_ids=_normalize_list_field(
            get_field(const.DATA_CREDENTIAL_SPECIAL_CATEGORY_IDS, [])
        ),
        issuer_name=str(
            get_field(const.DATA_CREDENTIAL_ISSUER_NAME, const.SENTINEL_EMPTY) or ""
        ),
    )


# ==============================================================================
# RENEWAL PERIODS
# ==============================================================================


def build_renewal_period(
    user_input: dict[str, Any],
    existing: RenewalPeriodData | None = None,
) -> RenewalPeriodData:
    """Build renewal period data.

    Raises:
        EntityValidationError: If dates are missing or end precedes start
    """
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    start = dt_parse_date(get_field(const.DATA_RENEWAL_START, None))
    end = dt_parse_date(get_field(const.DATA_RENEWAL_END, None))
    if start is None:
        raise EntityValidationError(
            field=const.DATA_RENEWAL_START,
            translation_key=const.TRANS_KEY_INVALID_DATE,
        )
    if end is None or end < start:
        raise EntityValidationError(
            field=const.DATA_RENEWAL_END,
            translation_key=const.TRANS_KEY_END_BEFORE_START,
        )

    name = str(get_field(const.DATA_RENEWAL_NAME, "") or "").strip()

    return RenewalPeriodData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        credential_id=str(get_field(const.DATA_RENEWAL_CREDENTIAL_ID, "")),
        name=name or f"{start.isoformat()} - {end.isoformat()}",
        start=start.isoformat(),
        end=end.isoformat(),
        application_window_start=_normalize_date(
            get_field(const.DATA_RENEWAL_APPLICATION_WINDOW_START, None)
        ),
        late_fee_date=_normalize_date(
            get_field(const.DATA_RENEWAL_LATE_FEE_DATE, None)
        ),
        late_fee_amount=_non_negative(
            const.DATA_RENEWAL_LATE_FEE_AMOUNT,
            get_field(const.DATA_RENEWAL_LATE_FEE_AMOUNT, const.DEFAULT_ZERO),
        ),
        completed=bool(get_field(const.DATA_RENEWAL_COMPLETED, False)),
        reinstatement_id=_normalize_optional_id(
            get_field(const.DATA_RENEWAL_REINSTATEMENT_ID, None)
        ),
    )


# ==============================================================================
# ACTIVITIES
# ==============================================================================


def build_activity(
    user_input: dict[str, Any],
    existing: ActivityData | None = None,
) -> ActivityData:
    """Build CE activity data.

    Raises:
        EntityValidationError: If the title is empty or an amount is negative
    """
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    eval_rating = get_field(const.DATA_ACTIVITY_EVAL_RATING, None)

    return ActivityData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        title=_required_name(get_field, const.DATA_ACTIVITY_TITLE),
        awarded_amount=_non_negative(
            const.DATA_ACTIVITY_AWARDED_AMOUNT,
            get_field(const.DATA_ACTIVITY_AWARDED_AMOUNT, const.DEFAULT_ZERO),
        ),
        unit=_normalize_unit(get_field(const.DATA_ACTIVITY_UNIT, const.UNIT_HOURS)),
        completed=bool(get_field(const.DATA_ACTIVITY_COMPLETED, False)),
        completion_date=_normalize_date(
            get_field(const.DATA_ACTIVITY_COMPLETION_DATE, None)
        ),
        credential_ids=_normalize_list_field(
            get_field(const.DATA_ACTIVITY_CREDENTIAL_IDS, [])
        ),
        renewal_period_id=_normalize_optional_id(
            get_field(const.DATA_ACTIVITY_RENEWAL_PERIOD_ID, None)
        ),
        special_category_id=_normalize_optional_id(
            get_field(const.DATA_ACTIVITY_SPECIAL_CATEGORY_ID, None)
        ),
        for_reinstatement=bool(get_field(const.DATA_ACTIVITY_FOR_REINSTATEMENT, False)),
        expires=bool(get_field(const.DATA_ACTIVITY_EXPIRES, False)),
        expiration_date=_normalize_date(
            get_field(const.DATA_ACTIVITY_EXPIRATION_DATE, None)
        ),
        expiration_reminder=bool(
            get_field(const.DATA_ACTIVITY_EXPIRATION_REMINDER, False)
        ),
        is_live=bool(get_field(const.DATA_ACTIVITY_IS_LIVE, False)),
        start_time=_normalize_datetime(
            get_field(const.DATA_ACTIVITY_START_TIME, None)
        ),
        clock_hours_awarded=_non_negative(
            const.DATA_ACTIVITY_CLOCK_HOURS_AWARDED,
            get_field(const.DATA_ACTIVITY_CLOCK_HOURS_AWARDED, const.DEFAULT_ZERO),
        ),
        eval_rating=int(eval_rating) if eval_rating is not None else None,
    )


# ==============================================================================
# SPECIAL CATEGORIES
# ==============================================================================


def build_special_category(
    user_input: dict[str, Any],
    existing: SpecialCategoryData | None = None,
) -> SpecialCategoryData:
    """Build special category data."""
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    return SpecialCategoryData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        credential_id=str(get_field(const.DATA_CATEGORY_CREDENTIAL_ID, "")),
        name=_required_name(get_field, const.DATA_CATEGORY_NAME),
        required_hours=_non_negative(
            const.DATA_CATEGORY_REQUIRED_HOURS,
            get_field(const.DATA_CATEGORY_REQUIRED_HOURS, const.DEFAULT_ZERO),
        ),
        measurement_default=_normalize_unit(
            get_field(const.DATA_CATEGORY_MEASUREMENT_DEFAULT, const.UNIT_HOURS)
        ),
    )


# ==============================================================================
# REINSTATEMENTS
# ==============================================================================


def build_reinstatement_special_cat(
    user_input: dict[str, Any],
    existing: ReinstatementSpecialCatData | None = None,
) -> ReinstatementSpecialCatData:
    """Build one per-category reinstatement requirement."""
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    return ReinstatementSpecialCatData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        special_category_id=_normalize_optional_id(
            get_field(const.DATA_RSC_SPECIAL_CATEGORY_ID, None)
        ),
        ces_required=_non_negative(
            const.DATA_RSC_CES_REQUIRED,
            get_field(const.DATA_RSC_CES_REQUIRED, const.DEFAULT_ZERO),
        ),
    )


def build_reinstatement(
    user_input: dict[str, Any],
    existing: ReinstatementData | None = None,
) -> ReinstatementData:
    """Build reinstatement info including its category requirements."""
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    special_cats = [
        build_reinstatement_special_cat({}, existing=raw)
        for raw in _normalize_list_field(
            get_field(const.DATA_REINSTATEMENT_SPECIAL_CATS, [])
        )
    ]

    return ReinstatementData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        renewal_period_id=str(
            get_field(const.DATA_REINSTATEMENT_RENEWAL_PERIOD_ID, "")
        ),
        total_extra_ces=_non_negative(
            const.DATA_REINSTATEMENT_TOTAL_EXTRA_CES,
            get_field(const.DATA_REINSTATEMENT_TOTAL_EXTRA_CES, const.DEFAULT_ZERO),
        ),
        deadline=_normalize_date(get_field(const.DATA_REINSTATEMENT_DEADLINE, None)),
        special_cat_requirements=special_cats,
        interview_scheduled=_normalize_datetime(
            get_field(const.DATA_REINSTATEMENT_INTERVIEW_SCHEDULED, None)
        ),
        additional_test_date=_normalize_datetime(
            get_field(const.DATA_REINSTATEMENT_ADDITIONAL_TEST_DATE, None)
        ),
    )


# ==============================================================================
# DISCIPLINARY ACTIONS
# ==============================================================================


def build_disciplinary_action(
    user_input: dict[str, Any],
    existing: DisciplinaryActionData | None = None,
) -> DisciplinaryActionData:
    """Build disciplinary action data."""
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    return DisciplinaryActionData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        credential_id=str(get_field(const.DATA_DISCIPLINE_CREDENTIAL_ID, "")),
        name=_required_name(get_field, const.DATA_DISCIPLINE_NAME),
        action_type=str(get_field(const.DATA_DISCIPLINE_ACTION_TYPE, "") or ""),
        temporary_only=bool(get_field(const.DATA_DISCIPLINE_TEMPORARY_ONLY, False)),
        end_date=_normalize_date(get_field(const.DATA_DISCIPLINE_END_DATE, None)),
        community_service_deadline=_normalize_date(
            get_field(const.DATA_DISCIPLINE_SERVICE_DEADLINE, None)
        ),
        community_service_hours=_non_negative(
            const.DATA_DISCIPLINE_SERVICE_HOURS,
            get_field(const.DATA_DISCIPLINE_SERVICE_HOURS, const.DEFAULT_ZERO),
        ),
        community_service_completed_on=_normalize_date(
            get_field(const.DATA_DISCIPLINE_SERVICE_COMPLETED_ON, None)
        ),
        fine_deadline=_normalize_date(
            get_field(const.DATA_DISCIPLINE_FINE_DEADLINE, None)
        ),
        fine_amount=_non_negative(
            const.DATA_DISCIPLINE_FINE_AMOUNT,
            get_field(const.DATA_DISCIPLINE_FINE_AMOUNT, const.DEFAULT_ZERO),
        ),
        fine_paid_on=_normalize_date(
            get_field(const.DATA_DISCIPLINE_FINE_PAID_ON, None)
        ),
        ce_deadline=_normalize_date(get_field(const.DATA_DISCIPLINE_CE_DEADLINE, None)),
        ce_hours=_non_negative(
            const.DATA_DISCIPLINE_CE_HOURS,
            get_field(const.DATA_DISCIPLINE_CE_HOURS, const.DEFAULT_ZERO),
        ),
    )


# ==============================================================================
# AWARDS
# ==============================================================================


def build_award(
    user_input: dict[str, Any],
    existing: AwardData | None = None,
) -> AwardData:
    """Build award definition data."""
    get_field = _field_getter(user_input, existing)  # type: ignore[arg-type]

    return AwardData(
        internal_id=_resolve_internal_id(user_input, existing),  # type: ignore[arg-type]
        name=_required_name(get_field, const.DATA_AWARD_NAME),
        description=str(get_field(const.DATA_AWARD_DESCRIPTION, "") or ""),
        notification_text=str(
            get_field(const.DATA_AWARD_NOTIFICATION_TEXT, "") or ""
        ),
        criterion=str(
            get_field(const.DATA_AWARD_CRITERION, const.AWARD_CRITERION_COMPLETED)
        ),
        value=_non_negative(
            const.DATA_AWARD_VALUE,
            get_field(const.DATA_AWARD_VALUE, const.DEFAULT_ZERO),
        ),
        date_earned=_normalize_datetime(get_field(const.DATA_AWARD_DATE_EARNED, None)),
    )


# ==============================================================================
# BULK NORMALIZATION
# ==============================================================================

BUILDERS: dict[str, Callable[..., Any]] = {
    const.DATA_CREDENTIALS: build_credential,
    const.DATA_RENEWAL_PERIODS: build_renewal_period,
    const.DATA_ACTIVITIES: build_activity,
    const.DATA_SPECIAL_CATEGORIES: build_special_category,
    const.DATA_REINSTATEMENTS: build_reinstatement,
    const.DATA_DISCIPLINARY_ACTIONS: build_disciplinary_action,
    const.DATA_AWARDS: build_award,
}


def normalize_bucket(bucket: str, records: dict[str, Any] | None) -> dict[str, Any]:
    """Rebuild every record of one storage bucket with defaults applied.

    Records failing validation are dropped and logged.
    """
    builder = BUILDERS[bucket]
    normalized: dict[str, Any] = {}
    for record_id, raw in (records or {}).items():
        if not isinstance(raw, dict):
            continue
        seeded = {const.DATA_INTERNAL_ID: record_id, **raw}
        try:
            record = builder({}, existing=seeded)
        except EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: Dropping invalid %s record '%s': %s",
                bucket,
                record_id,
                err,
            )
            continue
        normalized[record[const.DATA_INTERNAL_ID]] = record
    return normalized


def normalize_data(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize every bucket of a loaded storage structure in place."""
    for bucket in const.DATA_BUCKETS:
        data[bucket] = normalize_bucket(bucket, data.get(bucket))
    data[const.DATA_NOTIFIED_AWARDS] = _normalize_list_field(
        data.get(const.DATA_NOTIFIED_AWARDS)
    )
    return data
