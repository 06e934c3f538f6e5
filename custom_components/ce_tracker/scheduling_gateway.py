# File: scheduling_gateway.py
"""Scheduling gateway for CE Tracker reminders.

The gateway is the only place where planned reminders meet the outside world.
It owns delivery timers, cancellation, and the authorization state of the
notification target. Managers depend on the abstract SchedulingGateway so
tests can substitute an in-memory implementation.

Per-reminder state: not_scheduled → scheduled → (fired | cancelled)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_track_point_in_utc_time
from homeassistant.util import dt as dt_util

from . import const
from .notification_helper import async_send_notification, notify_service_available

if TYPE_CHECKING:
    from .type_defs import PlanEntry


class SchedulingGateway(ABC):
    """Interface the NotificationManager schedules through."""

    @abstractmethod
    async def async_authorization_status(self) -> str:
        """Return one of the const.AUTH_STATUS_* values."""

    @abstractmethod
    async def async_request_authorization(self) -> str:
        """Ask for authorization and return the resulting status."""

    @abstractmethod
    async def async_schedule(self, entry: PlanEntry) -> str:
        """Schedule a reminder and return a const.SCHEDULE_RESULT_* value.

        Scheduling an existing key replaces the previous reminder.
        """

    @abstractmethod
    async def async_cancel(self, stable_key: str) -> None:
        """Cancel one pending reminder (no-op for unknown keys)."""

    @abstractmethod
    async def async_cancel_all(self, keep_prefix: str | None = None) -> None:
        """Cancel every pending reminder whose key does not start with keep_prefix."""

    @abstractmethod
    def pending_keys(self) -> set[str]:
        """Return the keys of reminders that have not fired yet."""

    @abstractmethod
    def pending_entries(self) -> list[PlanEntry]:
        """Return pending reminders ordered by trigger time."""

    @abstractmethod
    def state_of(self, stable_key: str) -> str:
        """Return the const.SCHEDULE_STATE_* value for a key."""


class HassSchedulingGateway(SchedulingGateway):
    """Gateway backed by Home Assistant timers and notify services.

    Authorization is "not determined" until first requested; the request
    succeeds when the configured notify service exists. A denial is dropped
    as soon as the service shows up, so targets that register after setup
    (mobile_app notifiers) are picked up by the next replan.
    """

    def __init__(self, hass: HomeAssistant, notify_service: str) -> None:
        """Initialize the gateway for one notify target."""
        self.hass = hass
        self.notify_service = notify_service
        self._authorization: str | None = None
        self._unsubs: dict[str, CALLBACK_TYPE] = {}
        self._entries: dict[str, PlanEntry] = {}
        self._states: dict[str, str] = {}

    def state_of(self, stable_key: str) -> str:
        """Return the const.SCHEDULE_STATE_* value for a key."""
        return self._states.get(stable_key, const.SCHEDULE_STATE_NOT_SCHEDULED)

    async def async_authorization_status(self) -> str:
        """Return the cached authorization status."""
        if not self.notify_service:
            return const.AUTH_STATUS_DENIED
        if self._authorization == const.AUTH_STATUS_DENIED and (
            notify_service_available(self.hass, self.notify_service)
        ):
            const.LOGGER.debug(
                "DEBUG: Notify service '%s' is now available", self.notify_service
            )
            self._authorization = None
        return self._authorization or const.AUTH_STATUS_NOT_DETERMINED

    async def async_request_authorization(self) -> str:
        """Resolve authorization by checking the notify service exists."""
        if notify_service_available(self.hass, self.notify_service):
            self._authorization = const.AUTH_STATUS_AUTHORIZED
        else:
            self._authorization = const.AUTH_STATUS_DENIED
            const.LOGGER.warning(
                "WARNING: Notify service '%s' is not available, reminders will not "
                "be delivered",
                self.notify_service,
            )
        return self._authorization

    async def async_schedule(self, entry: PlanEntry) -> str:
        """Arm a timer that delivers the reminder at its trigger time."""
        trigger_utc = dt_util.as_utc(entry.trigger_time)
        if trigger_utc <= dt_util.utcnow():
            return const.SCHEDULE_RESULT_SKIPPED_PAST
        if await self.async_authorization_status() != const.AUTH_STATUS_AUTHORIZED:
            return const.SCHEDULE_RESULT_NOT_AUTHORIZED

        self._release(entry.stable_key)

        async def _async_fire(_now: datetime) -> None:
            self._unsubs.pop(entry.stable_key, None)
            self._entries.pop(entry.stable_key, None)
            self._states[entry.stable_key] = const.SCHEDULE_STATE_FIRED
            const.LOGGER.debug("DEBUG: Delivering reminder %s", entry.stable_key)
            await async_send_notification(
                self.hass,
                self.notify_service,
                entry.title,
                entry.body,
                notification_id=entry.stable_key,
            )

        self._unsubs[entry.stable_key] = async_track_point_in_utc_time(
            self.hass, _async_fire, trigger_utc
        )
        self._entries[entry.stable_key] = entry
        self._states[entry.stable_key] = const.SCHEDULE_STATE_SCHEDULED
        return const.SCHEDULE_RESULT_SCHEDULED

    def _release(self, stable_key: str) -> bool:
        unsub = self._unsubs.pop(stable_key, None)
        self._entries.pop(stable_key, None)
        if unsub is None:
            return False
        unsub()
        return True

    async def async_cancel(self, stable_key: str) -> None:
        """Cancel one pending reminder."""
        if self._release(stable_key):
            self._states[stable_key] = const.SCHEDULE_STATE_CANCELLED

    async def async_cancel_all(self, keep_prefix: str | None = None) -> None:
        """Cancel every pending reminder, optionally sparing one key prefix."""
        for stable_key in list(self._unsubs):
            if keep_prefix and stable_key.startswith(keep_prefix):
                continue
            await self.async_cancel(stable_key)

    def pending_keys(self) -> set[str]:
        """Return keys with an armed timer."""
        return set(self._unsubs)

    def pending_entries(self) -> list[PlanEntry]:
        """Return pending reminders ordered by trigger time."""
        return sorted(self._entries.values(), key=lambda e: e.trigger_time)
