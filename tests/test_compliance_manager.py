"""Tests for ComplianceManager - period assignment, summaries and record CRUD.

Tests verify:
- Completed activities are linked to the renewal period of their completion
- Summaries combine the compliance, period and reinstatement engines
- Record creation/update/deletion persists and emits DATA_CHANGED
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any
from unittest.mock import MagicMock, patch

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
import pytest

from custom_components.ce_tracker import const
from custom_components.ce_tracker.data_builders import EntityValidationError
from custom_components.ce_tracker.managers.compliance_manager import (
    ComplianceManager,
)
from custom_components.ce_tracker.storage_manager import CETrackerStorageManager
from tests.helpers import make_reinstatement

# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
async def compliance_manager(
    hass: HomeAssistant,
    mock_coordinator: MagicMock,
    mock_storage_data: dict[str, Any],
) -> ComplianceManager:
    """Create ComplianceManager backed by a real storage manager."""
    storage = CETrackerStorageManager(hass)
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        await storage.async_initialize()
    mock_coordinator.storage_manager = storage

    manager = ComplianceManager(hass, mock_coordinator)
    # Mock the emit method to track events
    manager.emit = MagicMock()
    return manager


# ============================================================================
# Test Class: Period Assignment
# ============================================================================


class TestAssignActivities:
    """Tests for linking activities to renewal periods."""

    async def test_links_completed_activity(
        self, compliance_manager: ComplianceManager, mock_coordinator: MagicMock
    ) -> None:
        """The completed activity is linked and the change persisted."""
        changed = compliance_manager.assign_activities()

        assert changed == {"act-1": "rp-1"}
        activity = compliance_manager.storage.get_activities()["act-1"]
        assert activity[const.DATA_ACTIVITY_RENEWAL_PERIOD_ID] == "rp-1"
        mock_coordinator._persist.assert_called_once()
        compliance_manager.emit.assert_called_once_with(
            const.SIGNAL_SUFFIX_ACTIVITIES_ASSIGNED, changed=["act-1"]
        )

    async def test_second_pass_changes_nothing(
        self, compliance_manager: ComplianceManager, mock_coordinator: MagicMock
    ) -> None:
        """Assignment is idempotent; nothing is persisted the second time."""
        compliance_manager.assign_activities()
        mock_coordinator._persist.reset_mock()

        assert compliance_manager.assign_activities() == {}
        mock_coordinator._persist.assert_not_called()

    async def test_moved_completion_date_clears_link(
        self,
        compliance_manager: ComplianceManager,
        mock_coordinator: MagicMock,
        today: date,
    ) -> None:
        """An activity completed outside every period stops counting."""
        compliance_manager.assign_activities()
        mock_coordinator._persist.reset_mock()
        activity = compliance_manager.storage.get_activities()["act-1"]
        activity[const.DATA_ACTIVITY_COMPLETION_DATE] = (
            today - timedelta(days=2000)
        ).isoformat()

        assert compliance_manager.assign_activities() == {"act-1": None}
        assert activity[const.DATA_ACTIVITY_RENEWAL_PERIOD_ID] is None
        mock_coordinator._persist.assert_called_once()
        summary = compliance_manager.credential_summaries(today)["cred-1"]
        assert summary[const.SUMMARY_REMAINING] == 40

    async def test_deleted_period_clears_link(
        self, compliance_manager: ComplianceManager
    ) -> None:
        """Deleting the linked period unlinks its activities on the next pass."""
        compliance_manager.assign_activities()

        compliance_manager.delete_record(const.DATA_RENEWAL_PERIODS, "rp-1")

        assert compliance_manager.assign_activities() == {"act-1": None}
        activity = compliance_manager.storage.get_activities()["act-1"]
        assert activity[const.DATA_ACTIVITY_RENEWAL_PERIOD_ID] is None

    async def test_resized_period_clears_link(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """Moving the period start past the completion date unlinks it."""
        compliance_manager.assign_activities()

        compliance_manager.save_record(
            const.DATA_RENEWAL_PERIODS,
            {const.DATA_RENEWAL_START: today.isoformat()},
            record_id="rp-1",
        )

        assert compliance_manager.assign_activities() == {"act-1": None}


# ============================================================================
# Test Class: Summaries
# ============================================================================


class TestSummaries:
    """Tests for compliance summaries."""

    async def test_credential_summary(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """A 4 hour activity against 40 required leaves 36 remaining."""
        compliance_manager.assign_activities()
        summaries = compliance_manager.credential_summaries(today)

        summary = summaries["cred-1"]
        assert summary[const.SUMMARY_RENEWAL_PERIOD_ID] == "rp-1"
        assert summary[const.SUMMARY_REMAINING] == 36
        assert summary[const.SUMMARY_EARNED] == 4
        assert summary[const.SUMMARY_IS_CURRENT] is True
        assert summary[const.SUMMARY_UNIT] == const.UNIT_HOURS
        assert summary[const.SUMMARY_PROGRESS] == 10
        assert summary[const.SUMMARY_SPECIAL_CATEGORIES] == {"Ethics": 5.0}
        assert summary[const.SUMMARY_DAYS_UNTIL_END] == 60
        assert const.SUMMARY_REINSTATEMENT not in summary

    async def test_unlinked_activity_not_counted(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """Before assignment nothing counts toward the period."""
        summary = compliance_manager.credential_summaries(today)["cred-1"]
        assert summary[const.SUMMARY_REMAINING] == 40

    async def test_reinstatement_included(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """A linked reinstatement adds its requirement to the summary."""
        storage = compliance_manager.storage
        storage.get_reinstatements()["reinst-1"] = make_reinstatement(
            **{const.DATA_REINSTATEMENT_TOTAL_EXTRA_CES: 12}
        )
        storage.get_renewal_periods()["rp-1"][
            const.DATA_RENEWAL_REINSTATEMENT_ID
        ] = "reinst-1"

        summary = compliance_manager.compliance_for_renewal("rp-1", today)

        reinstatement = summary[const.SUMMARY_REINSTATEMENT]
        assert reinstatement[const.SUMMARY_REINSTATEMENT_REQUIRED] == 12
        assert reinstatement[const.SUMMARY_REINSTATEMENT_EARNED] == 0
        assert reinstatement[const.SUMMARY_REINSTATEMENT_CATEGORIES_MET] is True

    async def test_unknown_renewal_raises(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """Unknown renewal ids raise HomeAssistantError."""
        with pytest.raises(HomeAssistantError):
            compliance_manager.compliance_for_renewal("rp-missing", today)

    async def test_coordinator_data(
        self, compliance_manager: ComplianceManager, today: date
    ) -> None:
        """Coordinator data carries summaries, next expiration and monthly totals."""
        data = compliance_manager.build_coordinator_data(today)

        assert set(data[const.COORDINATOR_DATA_SUMMARIES]) == {"cred-1"}
        next_expiration = data[const.COORDINATOR_DATA_NEXT_EXPIRATION]
        assert next_expiration[const.SUMMARY_DAYS_UNTIL_END] == 60
        assert next_expiration[const.SUMMARY_RENEWAL_PERIOD_NAME] == (
            "2025-2026 Renewal"
        )
        assert sum(data[const.COORDINATOR_DATA_EARNED_BY_MONTH].values()) == 4


# ============================================================================
# Test Class: Record Management
# ============================================================================


class TestRecords:
    """Tests for save_record and delete_record."""

    async def test_create_record(
        self, compliance_manager: ComplianceManager, mock_coordinator: MagicMock
    ) -> None:
        """New records get an id, are persisted and announced."""
        record = compliance_manager.save_record(
            const.DATA_CREDENTIALS, {const.DATA_CREDENTIAL_NAME: "CPA"}
        )

        record_id = record[const.DATA_INTERNAL_ID]
        assert compliance_manager.storage.get_credentials()[record_id] is record
        mock_coordinator._persist.assert_called_once()
        compliance_manager.emit.assert_called_once_with(
            const.SIGNAL_SUFFIX_DATA_CHANGED,
            bucket=const.DATA_CREDENTIALS,
            record_id=record_id,
        )

    async def test_update_record(self, compliance_manager: ComplianceManager) -> None:
        """Updating merges over the existing record."""
        record = compliance_manager.save_record(
            const.DATA_CREDENTIALS,
            {const.DATA_CREDENTIAL_REQUIRED_CES: 24},
            record_id="cred-1",
        )
        assert record[const.DATA_INTERNAL_ID] == "cred-1"
        assert record[const.DATA_CREDENTIAL_REQUIRED_CES] == 24
        assert record[const.DATA_CREDENTIAL_NAME] == "RN License"

    async def test_update_unknown_record_raises(
        self, compliance_manager: ComplianceManager
    ) -> None:
        """Updating a missing record raises HomeAssistantError."""
        with pytest.raises(HomeAssistantError):
            compliance_manager.save_record(
                const.DATA_CREDENTIALS, {}, record_id="cred-missing"
            )

    async def test_invalid_record_not_stored(
        self, compliance_manager: ComplianceManager, mock_coordinator: MagicMock
    ) -> None:
        """Validation errors propagate and nothing is persisted."""
        with pytest.raises(EntityValidationError):
            compliance_manager.save_record(
                const.DATA_RENEWAL_PERIODS,
                {
                    const.DATA_RENEWAL_CREDENTIAL_ID: "cred-1",
                    const.DATA_RENEWAL_START: "2026-01-01",
                    const.DATA_RENEWAL_END: "2025-01-01",
                },
            )
        mock_coordinator._persist.assert_not_called()
        compliance_manager.emit.assert_not_called()

    async def test_delete_record(
        self, compliance_manager: ComplianceManager, mock_coordinator: MagicMock
    ) -> None:
        """Deleting removes the record and emits DATA_CHANGED."""
        compliance_manager.delete_record(const.DATA_SPECIAL_CATEGORIES, "cat-ethics")

        assert "cat-ethics" not in compliance_manager.storage.get_special_categories()
        mock_coordinator._persist.assert_called_once()
        compliance_manager.emit.assert_called_once_with(
            const.SIGNAL_SUFFIX_DATA_CHANGED,
            bucket=const.DATA_SPECIAL_CATEGORIES,
            record_id="cat-ethics",
        )

    async def test_delete_unknown_record_raises(
        self, compliance_manager: ComplianceManager
    ) -> None:
        """Deleting a missing record raises HomeAssistantError."""
        with pytest.raises(HomeAssistantError):
            compliance_manager.delete_record(const.DATA_ACTIVITIES, "act-missing")


async def test_new_activity_in_period_is_linked(
    compliance_manager: ComplianceManager, today: date
) -> None:
    """A saved activity is linked on the next assignment pass."""
    compliance_manager.save_record(
        const.DATA_ACTIVITIES,
        {
            const.DATA_INTERNAL_ID: "act-new",
            const.DATA_ACTIVITY_TITLE: "Pain Management",
            const.DATA_ACTIVITY_AWARDED_AMOUNT: 2,
            const.DATA_ACTIVITY_COMPLETED: True,
            const.DATA_ACTIVITY_COMPLETION_DATE: today - timedelta(days=1),
            const.DATA_ACTIVITY_CREDENTIAL_IDS: ["cred-1"],
        },
    )
    changed = compliance_manager.assign_activities()
    assert changed["act-new"] == "rp-1"
