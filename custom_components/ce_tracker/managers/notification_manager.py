# File: notification_manager.py
"""Notification Manager for the CE Tracker integration.

This manager handles all outgoing reminder logic:
- Full replans of deadline reminders (cancel everything, plan, schedule)
- Authorization checks before anything is handed to the gateway
- Award notifications, planned outside the full replan
- The durable "already notified" award set

Separation of concerns:
- ReminderEngine = "The Planner" (pure PlanEntry lists)
- SchedulingGateway = "The Clock" (timers, cancellation, delivery)
- NotificationManager = "The Conductor" (ordering, locking, persistence)

Event-driven architecture:
- DATA_CHANGED → replan
- ACTIVITIES_ASSIGNED → look for newly earned awards
- Daily timer → replan so day-based leads roll forward
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_time_change

from .. import const
from ..engines.award_engine import AwardEngine
from ..engines.reminder_engine import ReminderEngine, ReminderSettings
from ..utils.dt_utils import dt_now_local, dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import CETrackerCoordinator
    from ..scheduling_gateway import SchedulingGateway
    from ..type_defs import PlanEntry


class NotificationManager(BaseManager):
    """Manager for reminder planning and award notifications.

    Responsibilities:
    - Serialize replans so two never interleave on the gateway
    - Request authorization at most once per schedule call
    - Keep the notified-award set consistent (single writer)

    NOT responsible for:
    - Computing compliance (ComplianceManager)
    - Delivering notifications (SchedulingGateway)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: CETrackerCoordinator,
        gateway: SchedulingGateway,
    ) -> None:
        """Initialize the NotificationManager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator
            gateway: Scheduling gateway that owns the delivery timers
        """
        super().__init__(hass, coordinator)
        self.gateway = gateway
        self.last_status: str = const.REPLAN_STATUS_IDLE
        self._replan_lock = asyncio.Lock()
        self._awards_lock = asyncio.Lock()

    async def async_setup(self) -> None:
        """Subscribe to data events and register the daily replan timer."""
        self.listen(const.SIGNAL_SUFFIX_DATA_CHANGED, self._on_data_changed)
        self.listen(
            const.SIGNAL_SUFFIX_ACTIVITIES_ASSIGNED, self._on_activities_assigned
        )

        # Day-based leads depend on "today", so plans are refreshed nightly
        self.coordinator.config_entry.async_on_unload(
            async_track_time_change(
                self.hass,
                self._on_daily_tick,
                hour=const.DAILY_REPLAN_HOUR,
                minute=const.DAILY_REPLAN_MINUTE,
                second=0,
            )
        )
        const.LOGGER.debug(
            "DEBUG: NotificationManager initialized for entry %s", self.entry_id
        )

    @property
    def settings(self) -> ReminderSettings:
        """Reminder settings resolved from the config entry options."""
        return ReminderSettings.from_options(self.coordinator.config_entry.options)

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    async def _on_data_changed(self, _payload: dict[str, Any]) -> None:
        await self.async_replan()

    async def _on_activities_assigned(self, _payload: dict[str, Any]) -> None:
        await self.async_notify_new_awards()

    @callback
    def _on_daily_tick(self, _now: datetime) -> None:
        const.LOGGER.debug("DEBUG: Daily reminder replan triggered")
        self.hass.async_create_task(self.async_replan())

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    async def async_schedule_entry(self, entry: PlanEntry) -> str:
        """Hand one entry to the gateway after checking authorization.

        An undetermined authorization is requested exactly once; a denial is
        reported as SCHEDULE_RESULT_NOT_AUTHORIZED rather than raised.
        """
        status = await self.gateway.async_authorization_status()
        if status == const.AUTH_STATUS_NOT_DETERMINED:
            status = await self.gateway.async_request_authorization()
        if status != const.AUTH_STATUS_AUTHORIZED:
            const.LOGGER.debug(
                "DEBUG: Not scheduling %s, authorization is %s",
                entry.stable_key,
                status,
            )
            return const.SCHEDULE_RESULT_NOT_AUTHORIZED
        return await self.gateway.async_schedule(entry)

    async def async_replan(self) -> list[PlanEntry]:
        """Cancel every pending deadline reminder and schedule a fresh plan.

        Replans are serialized; calling this again is how outdated reminders
        are withdrawn. Pending award notifications are left alone since the
        notified set means they would never be planned again.

        Returns:
            The entries the gateway accepted.
        """
        async with self._replan_lock:
            await self.gateway.async_cancel_all(
                keep_prefix=ReminderEngine.build_entity_uid(
                    const.OBJECT_TYPE_AWARD, ""
                )
            )

            entries = ReminderEngine.plan_all(
                self.storage.snapshot(), self.settings, dt_now_local()
            )

            scheduled: list[PlanEntry] = []
            not_authorized = False
            for entry in entries:
                result = await self.async_schedule_entry(entry)
                if result == const.SCHEDULE_RESULT_SCHEDULED:
                    scheduled.append(entry)
                elif result == const.SCHEDULE_RESULT_NOT_AUTHORIZED:
                    not_authorized = True

            self.last_status = (
                const.REPLAN_STATUS_NOT_AUTHORIZED
                if not_authorized and not scheduled
                else const.REPLAN_STATUS_COMPLETE
            )
            const.LOGGER.info(
                "INFO: Reminder replan finished: %s planned, %s scheduled (%s)",
                len(entries),
                len(scheduled),
                self.last_status,
            )

        self.emit(
            const.SIGNAL_SUFFIX_REMINDERS_REPLANNED,
            status=self.last_status,
            scheduled=[entry.stable_key for entry in scheduled],
        )
        return scheduled

    # =========================================================================
    # AWARDS
    # =========================================================================

    async def async_notify_new_awards(self) -> list[str]:
        """Record newly earned awards and schedule their notifications.

        Awards already in the notified set are never planned twice, even when
        the earlier notification could not be scheduled.

        Returns:
            Ids of the awards earned by this call.
        """
        async with self._awards_lock:
            notified = self.storage.get_notified_awards()
            awards = self.storage.get_awards()
            new_awards = AwardEngine.find_new_awards(
                awards.values(),
                self.storage.get_activities().values(),
                exclude_ids=notified,
            )
            if not new_awards:
                return []

            earned_at = dt_now_utc().isoformat()
            now = dt_now_local()
            earned_ids: list[str] = []
            for award in new_awards:
                award_id = award[const.DATA_INTERNAL_ID]
                award[const.DATA_AWARD_DATE_EARNED] = earned_at
                notified.add(award_id)
                earned_ids.append(award_id)
                result = await self.async_schedule_entry(
                    ReminderEngine.plan_award(award, now)
                )
                const.LOGGER.info(
                    "INFO: Award '%s' earned, notification %s",
                    award[const.DATA_AWARD_NAME],
                    result,
                )

            self.storage.set_notified_awards(notified)
            self.coordinator._persist()
        return earned_ids

    async def async_cancel_award_notification(self, award_id: str) -> None:
        """Withdraw an award notification and make the award earnable again.

        Raises:
            HomeAssistantError: If the award does not exist
        """
        async with self._awards_lock:
            award = self.storage.get_awards().get(award_id)
            if award is None:
                raise HomeAssistantError(const.ERROR_AWARD_NOT_FOUND_FMT.format(award_id))

            entry = ReminderEngine.plan_award(award, dt_now_local())
            previous_state = self.gateway.state_of(entry.stable_key)
            await self.gateway.async_cancel(entry.stable_key)

            notified = self.storage.get_notified_awards()
            notified.discard(award_id)
            self.storage.set_notified_awards(notified)
            award[const.DATA_AWARD_DATE_EARNED] = None
            self.coordinator._persist()
            const.LOGGER.info(
                "INFO: Award notification cancelled for '%s' (was %s)",
                award_id,
                previous_state,
            )
