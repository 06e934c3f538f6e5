"""Tests for NotificationManager - replans, authorization and award notices.

A recording gateway stands in for Home Assistant timers so the tests can
inspect exactly what was scheduled and cancelled.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
import pytest

from custom_components.ce_tracker import const
from custom_components.ce_tracker.managers.notification_manager import (
    NotificationManager,
)
from custom_components.ce_tracker.scheduling_gateway import SchedulingGateway
from custom_components.ce_tracker.storage_manager import CETrackerStorageManager
from custom_components.ce_tracker.type_defs import PlanEntry
from custom_components.ce_tracker.utils import dt_utils
from tests.helpers import make_award


class RecordingGateway(SchedulingGateway):
    """In-memory gateway that records every call."""

    def __init__(self, status: str = const.AUTH_STATUS_NOT_DETERMINED) -> None:
        self.status = status
        self.grant = const.AUTH_STATUS_AUTHORIZED
        self.authorization_requests = 0
        self.cancel_all_calls = 0
        self.cancelled: list[str] = []
        self.scheduled: dict[str, PlanEntry] = {}

    async def async_authorization_status(self) -> str:
        return self.status

    async def async_request_authorization(self) -> str:
        self.authorization_requests += 1
        self.status = self.grant
        return self.status

    async def async_schedule(self, entry: PlanEntry) -> str:
        self.scheduled[entry.stable_key] = entry
        return const.SCHEDULE_RESULT_SCHEDULED

    async def async_cancel(self, stable_key: str) -> None:
        self.cancelled.append(stable_key)
        self.scheduled.pop(stable_key, None)

    async def async_cancel_all(self, keep_prefix: str | None = None) -> None:
        self.cancel_all_calls += 1
        self.scheduled = {
            key: entry
            for key, entry in self.scheduled.items()
            if keep_prefix and key.startswith(keep_prefix)
        }

    def pending_keys(self) -> set[str]:
        return set(self.scheduled)

    def pending_entries(self) -> list[PlanEntry]:
        return sorted(self.scheduled.values(), key=lambda e: e.trigger_time)

    def state_of(self, stable_key: str) -> str:
        if stable_key in self.scheduled:
            return const.SCHEDULE_STATE_SCHEDULED
        if stable_key in self.cancelled:
            return const.SCHEDULE_STATE_CANCELLED
        return const.SCHEDULE_STATE_NOT_SCHEDULED


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def gateway() -> RecordingGateway:
    """Gateway whose authorization has not been requested yet."""
    return RecordingGateway()


@pytest.fixture
async def notification_manager(
    hass: HomeAssistant,
    mock_coordinator: MagicMock,
    mock_storage_data: dict[str, Any],
    gateway: RecordingGateway,
) -> NotificationManager:
    """Create NotificationManager with real storage and a recording gateway.

    async_setup is not called so no daily timer is registered.
    """
    storage = CETrackerStorageManager(hass)
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        await storage.async_initialize()
    mock_coordinator.storage_manager = storage

    manager = NotificationManager(hass, mock_coordinator, gateway)
    manager.emit = MagicMock()
    return manager


RENEWAL_KEYS = {
    "renewal:rp-1-renewal_ending.1",
    "renewal:rp-1-renewal_ending.2",
}


# ============================================================================
# Test Class: Replanning
# ============================================================================


class TestReplan:
    """Tests for async_replan."""

    async def test_replan_schedules_current_renewal(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """The current renewal gets its 30 and 7 day reminders."""
        scheduled = await notification_manager.async_replan()

        assert {entry.stable_key for entry in scheduled} == RENEWAL_KEYS
        assert gateway.pending_keys() == RENEWAL_KEYS
        assert gateway.cancel_all_calls == 1
        assert notification_manager.last_status == const.REPLAN_STATUS_COMPLETE
        notification_manager.emit.assert_called_once_with(
            const.SIGNAL_SUFFIX_REMINDERS_REPLANNED,
            status=const.REPLAN_STATUS_COMPLETE,
            scheduled=[entry.stable_key for entry in scheduled],
        )

    async def test_replan_is_idempotent(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """Two replans cancel first and end with the same pending set."""
        await notification_manager.async_replan()
        first = gateway.pending_keys()
        await notification_manager.async_replan()

        assert gateway.pending_keys() == first
        assert gateway.cancel_all_calls == 2

    async def test_authorization_requested_once(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """Undetermined authorization is requested on the first entry only."""
        await notification_manager.async_replan()
        assert gateway.authorization_requests == 1

    async def test_denied_reports_not_authorized(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """A denied request schedules nothing and reports not_authorized."""
        gateway.grant = const.AUTH_STATUS_DENIED

        scheduled = await notification_manager.async_replan()

        assert scheduled == []
        assert gateway.pending_keys() == set()
        assert notification_manager.last_status == const.REPLAN_STATUS_NOT_AUTHORIZED

    async def test_disabled_types_not_scheduled(
        self,
        notification_manager: NotificationManager,
        gateway: RecordingGateway,
        mock_coordinator: MagicMock,
    ) -> None:
        """Options can switch notification types off."""
        mock_coordinator.config_entry = MagicMock()
        mock_coordinator.config_entry.options = {
            const.CONF_ENABLED_NOTIFICATION_TYPES: [
                const.NOTIFICATION_UPCOMING_EXPIRATION
            ]
        }

        await notification_manager.async_replan()
        assert gateway.pending_keys() == set()

    async def test_changed_options_leave_no_stale_reminders(
        self,
        notification_manager: NotificationManager,
        gateway: RecordingGateway,
        mock_coordinator: MagicMock,
    ) -> None:
        """Replanning at the same moment with new options keeps only the new plan."""
        now = dt_utils.dt_now_local()
        with patch(
            "custom_components.ce_tracker.managers.notification_manager.dt_now_local",
            return_value=now,
        ):
            await notification_manager.async_replan()
            first = dict(gateway.scheduled)

            mock_coordinator.config_entry = MagicMock()
            mock_coordinator.config_entry.options = {
                const.CONF_PRIMARY_NOTICE_DAYS: 45,
                const.CONF_SECONDARY_NOTICE_DAYS: 7,
            }
            await notification_manager.async_replan()
            assert gateway.pending_keys() == RENEWAL_KEYS
            primary = "renewal:rp-1-renewal_ending.1"
            moved = first[primary].trigger_time - gateway.scheduled[primary].trigger_time
            assert moved.days == 15

            mock_coordinator.config_entry.options = {
                const.CONF_ENABLED_NOTIFICATION_TYPES: [
                    const.NOTIFICATION_INTERVIEW
                ]
            }
            await notification_manager.async_replan()
            assert gateway.pending_keys() == set()


# ============================================================================
# Test Class: Awards
# ============================================================================


class TestAwards:
    """Tests for award notifications."""

    async def test_new_award_notified_once(
        self,
        notification_manager: NotificationManager,
        gateway: RecordingGateway,
        mock_coordinator: MagicMock,
    ) -> None:
        """An earned award is dated, scheduled and never planned again."""
        storage = notification_manager.storage
        storage.get_awards()["award-1"] = make_award()

        earned = await notification_manager.async_notify_new_awards()

        assert earned == ["award-1"]
        assert storage.get_awards()["award-1"][const.DATA_AWARD_DATE_EARNED]
        assert storage.get_notified_awards() == {"award-1"}
        assert "award:award-1-achievement_earned.1" in gateway.pending_keys()
        mock_coordinator._persist.assert_called_once()

        # Clearing the date does not make it earnable while still notified
        storage.get_awards()["award-1"][const.DATA_AWARD_DATE_EARNED] = None
        assert await notification_manager.async_notify_new_awards() == []

    async def test_pending_award_survives_replan(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """A replan right after an award keeps the award notice pending."""
        storage = notification_manager.storage
        storage.get_awards()["award-1"] = make_award()
        await notification_manager.async_notify_new_awards()

        await notification_manager.async_replan()

        assert gateway.pending_keys() == RENEWAL_KEYS | {
            "award:award-1-achievement_earned.1"
        }
        assert storage.get_notified_awards() == {"award-1"}

    async def test_award_marked_when_not_authorized(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """Denied authorization still records the award as notified."""
        gateway.status = const.AUTH_STATUS_DENIED
        storage = notification_manager.storage
        storage.get_awards()["award-1"] = make_award()

        assert await notification_manager.async_notify_new_awards() == ["award-1"]
        assert gateway.pending_keys() == set()
        assert storage.get_notified_awards() == {"award-1"}

    async def test_nothing_new(
        self, notification_manager: NotificationManager, mock_coordinator: MagicMock
    ) -> None:
        """Without earnable awards nothing is persisted."""
        assert await notification_manager.async_notify_new_awards() == []
        mock_coordinator._persist.assert_not_called()

    async def test_cancel_award_notification(
        self, notification_manager: NotificationManager, gateway: RecordingGateway
    ) -> None:
        """Cancelling withdraws the reminder and makes the award earnable."""
        storage = notification_manager.storage
        storage.get_awards()["award-1"] = make_award()
        await notification_manager.async_notify_new_awards()

        await notification_manager.async_cancel_award_notification("award-1")

        assert gateway.cancelled == ["award:award-1-achievement_earned.1"]
        assert storage.get_notified_awards() == set()
        assert storage.get_awards()["award-1"][const.DATA_AWARD_DATE_EARNED] is None
        assert await notification_manager.async_notify_new_awards() == ["award-1"]

    async def test_cancel_unknown_award(
        self, notification_manager: NotificationManager
    ) -> None:
        """Unknown award ids raise HomeAssistantError."""
        with pytest.raises(HomeAssistantError):
            await notification_manager.async_cancel_award_notification("award-x")
