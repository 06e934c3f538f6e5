"""Compliance Manager - Period assignment and compliance summaries.

This manager handles:
- Linking completed activities to the renewal period of their completion date
- Building per-credential compliance summaries for sensors and services
- Record creation/deletion requested through services

ARCHITECTURE:
- ComplianceManager = STATEFUL orchestration (storage, events)
- PeriodEngine / ComplianceEngine / ReinstatementEngine = STATELESS math

Record changes emit DATA_CHANGED; assignments that change links emit
ACTIVITIES_ASSIGNED so the NotificationManager can look for new awards.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..engines.compliance_engine import ComplianceEngine
from ..engines.period_engine import PeriodEngine
from ..engines.reinstatement_engine import ReinstatementEngine
from ..utils.dt_utils import dt_today_local
from ..utils.math_utils import round_ce
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import CETrackerCoordinator
    from ..type_defs import ComplianceSummary, RenewalPeriodData


class ComplianceManager(BaseManager):
    """Manager for period assignment and compliance reporting.

    Responsibilities:
    - Keep activity → renewal period links up to date
    - Compute compliance summaries from storage snapshots
    - Create, update and delete stored records

    NOT responsible for:
    - Reminders or award notifications (NotificationManager)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: CETrackerCoordinator,
    ) -> None:
        """Initialize the ComplianceManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Re-run period assignment whenever records change."""
        self.listen(const.SIGNAL_SUFFIX_DATA_CHANGED, self._on_data_changed)

    async def _on_data_changed(self, payload: dict[str, Any]) -> None:
        """Relink activities if needed, then push fresh summaries to entities."""
        if payload.get("bucket") in (
            const.DATA_ACTIVITIES,
            const.DATA_RENEWAL_PERIODS,
            const.DATA_CREDENTIALS,
        ):
            self.assign_activities()
        self.coordinator.async_set_updated_data(
            self.build_coordinator_data(dt_today_local())
        )

    # =========================================================================
    # PERIOD ASSIGNMENT
    # =========================================================================

    def assign_activities(self) -> dict[str, str | None]:
        """Link completed activities to the period containing their completion date.

        An activity with no matching period (completion date moved, period
        deleted or resized) loses its link so it stops counting anywhere.

        Returns:
            Map of activity id → new period id (None when unlinked) for
            changed activities.
        """
        activities = self.storage.get_activities()
        periods_by_credential = PeriodEngine.group_by_credential(
            self.storage.get_renewal_periods().values()
        )
        assignments = PeriodEngine.assign_activities(
            activities.values(), periods_by_credential
        )

        changed: dict[str, str | None] = {}
        for activity_id, period_id in assignments.items():
            activity = activities[activity_id]
            if activity.get(const.DATA_ACTIVITY_RENEWAL_PERIOD_ID) != period_id:
                activity[const.DATA_ACTIVITY_RENEWAL_PERIOD_ID] = period_id
                changed[activity_id] = period_id

        if changed:
            const.LOGGER.debug(
                "DEBUG: Updated %s activity renewal period links", len(changed)
            )
            self.coordinator._persist()
        self.emit(const.SIGNAL_SUFFIX_ACTIVITIES_ASSIGNED, changed=list(changed))
        return changed

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    def renewal_summary(
        self, renewal: RenewalPeriodData, today: date
    ) -> ComplianceSummary:
        """Compliance figures for one renewal period."""
        credential_id = renewal[const.DATA_RENEWAL_CREDENTIAL_ID]
        credential = self.storage.get_credentials().get(credential_id)
        credential_periods = self.storage.fetch_renewal_periods(credential_id)
        activities = list(self.storage.get_activities().values())

        overall = ComplianceEngine.remaining_overall_ce(
            renewal, credential, activities, credential_periods, today
        )
        categories = ComplianceEngine.remaining_special_category_ce(
            renewal,
            credential,
            self.storage.fetch_special_categories(credential_id),
            activities,
        )
        days_left, _name = PeriodEngine.days_until_period_end(renewal, today)

        summary: ComplianceSummary = {
            const.SUMMARY_CREDENTIAL_ID: credential_id,
            const.SUMMARY_CREDENTIAL_NAME: (
                credential[const.DATA_CREDENTIAL_NAME] if credential else None
            ),
            const.SUMMARY_RENEWAL_PERIOD_ID: renewal[const.DATA_INTERNAL_ID],
            const.SUMMARY_RENEWAL_PERIOD_NAME: renewal[const.DATA_RENEWAL_NAME],
            const.SUMMARY_REMAINING: round_ce(overall.remaining),
            const.SUMMARY_EARNED: round_ce(
                ComplianceEngine.earned_overall_ce(renewal, credential, activities)
                if credential
                else 0.0
            ),
            const.SUMMARY_REQUIRED: (
                credential[const.DATA_CREDENTIAL_REQUIRED_CES] if credential else 0.0
            ),
            const.SUMMARY_IS_CURRENT: overall.is_current,
            const.SUMMARY_UNIT: overall.unit,
            const.SUMMARY_PROGRESS: ComplianceEngine.ce_progress_percentage(
                renewal, credential, activities
            ),
            const.SUMMARY_SPECIAL_CATEGORIES: {
                name: round_ce(value) for name, value in categories.items()
            },
            const.SUMMARY_DAYS_UNTIL_END: days_left,
        }

        reinstatement_id = renewal.get(const.DATA_RENEWAL_REINSTATEMENT_ID)
        reinstatement = (
            self.storage.get_reinstatements().get(reinstatement_id)
            if reinstatement_id
            else None
        )
        if reinstatement is not None:
            requirement = ReinstatementEngine.reinstatement_requirement(
                renewal, credential, reinstatement, activities
            )
            status = ReinstatementEngine.special_category_reinstatement_status(
                renewal, credential, reinstatement, activities
            )
            summary[const.SUMMARY_REINSTATEMENT] = {
                const.SUMMARY_REINSTATEMENT_REQUIRED: round_ce(requirement.required),
                const.SUMMARY_REINSTATEMENT_EARNED: round_ce(requirement.earned),
                const.SUMMARY_REINSTATEMENT_CATEGORIES_MET: status.met,
                const.SUMMARY_REINSTATEMENT_OUTSTANDING: {
                    rsc_id: round_ce(hours)
                    for rsc_id, hours in status.outstanding.items()
                },
            }
        return summary

    def credential_summaries(self, today: date) -> dict[str, ComplianceSummary]:
        """Summary per credential for its current (or latest) renewal period.

        Credentials without any renewal period are omitted.
        """
        summaries: dict[str, ComplianceSummary] = {}
        for credential_id in self.storage.get_credentials():
            periods = self.storage.fetch_renewal_periods(credential_id)
            if not periods:
                continue
            current = PeriodEngine.current_periods(periods, today)
            renewal = current[0] if current else periods[-1]
            summaries[credential_id] = self.renewal_summary(renewal, today)
        return summaries

    def build_coordinator_data(self, today: date) -> dict[str, Any]:
        """Everything the sensors read, computed in one pass."""
        days, name = PeriodEngine.time_until_next_expiration(
            self.storage.get_renewal_periods().values(), today
        )
        return {
            const.COORDINATOR_DATA_SUMMARIES: self.credential_summaries(today),
            const.COORDINATOR_DATA_NEXT_EXPIRATION: {
                const.SUMMARY_DAYS_UNTIL_END: days,
                const.SUMMARY_RENEWAL_PERIOD_NAME: name,
            },
            const.COORDINATOR_DATA_EARNED_BY_MONTH: ComplianceEngine.ce_earned_by_month(
                self.storage.get_activities().values(),
                self.storage.get_credentials().values(),
            ),
        }

    def compliance_for_renewal(self, renewal_id: str, today: date) -> ComplianceSummary:
        """Summary for a specific renewal period.

        Raises:
            HomeAssistantError: If the renewal period does not exist
        """
        renewal = self.storage.get_renewal_periods().get(renewal_id)
        if renewal is None:
            raise HomeAssistantError(const.ERROR_RENEWAL_NOT_FOUND_FMT.format(renewal_id))
        return self.renewal_summary(renewal, today)

    # =========================================================================
    # RECORD MANAGEMENT
    # =========================================================================

    def save_record(
        self, bucket: str, user_input: dict[str, Any], record_id: str | None = None
    ) -> dict[str, Any]:
        """Create or update a record in a storage bucket.

        Raises:
            HomeAssistantError: If updating a record that does not exist
            EntityValidationError: If the data fails validation
        """
        records = self.storage.data[bucket]
        existing = None
        if record_id is not None:
            existing = records.get(record_id)
            if existing is None:
                raise HomeAssistantError(
                    const.ERROR_RECORD_NOT_FOUND_FMT.format(record_id, bucket)
                )

        record = db.BUILDERS[bucket](user_input, existing=existing)
        records[record[const.DATA_INTERNAL_ID]] = record
        const.LOGGER.info(
            "INFO: %s %s record '%s'",
            "Updated" if existing else "Created",
            bucket,
            record[const.DATA_INTERNAL_ID],
        )
        self.coordinator._persist()
        self.emit(
            const.SIGNAL_SUFFIX_DATA_CHANGED,
            bucket=bucket,
            record_id=record[const.DATA_INTERNAL_ID],
        )
        return record

    def delete_record(self, bucket: str, record_id: str) -> None:
        """Delete a record from a storage bucket.

        Raises:
            HomeAssistantError: If the record does not exist
        """
        records = self.storage.data[bucket]
        if record_id not in records:
            raise HomeAssistantError(
                const.ERROR_RECORD_NOT_FOUND_FMT.format(record_id, bucket)
            )
        del records[record_id]
        const.LOGGER.info("INFO: Deleted %s record '%s'", bucket, record_id)
        self.coordinator._persist()
        self.emit(const.SIGNAL_SUFFIX_DATA_CHANGED, bucket=bucket, record_id=record_id)
