# File: coordinator.py
"""Coordinator for the CE Tracker integration.

Owns the in-memory storage structure and the managers that operate on it.
Each refresh links completed activities to their renewal periods and
recomputes the compliance summaries that the sensors read.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import ComplianceManager, NotificationManager
from .scheduling_gateway import SchedulingGateway
from .storage_manager import CETrackerStorageManager
from .utils.dt_utils import dt_today_local


class CETrackerCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for the CE Tracker integration.

    `self._data` is the raw storage structure; `self.data` holds the computed
    summaries published to entities.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: CETrackerStorageManager,
        gateway: SchedulingGateway,
    ) -> None:
        """Initialize the CETrackerCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.storage_manager = storage_manager
        self._data: dict[str, Any] = storage_manager.data

        self.compliance_manager = ComplianceManager(hass, self)
        self.notification_manager = NotificationManager(hass, self, gateway)

    async def async_setup_managers(self) -> None:
        """Subscribe managers to events once the first refresh succeeded."""
        await self.compliance_manager.async_setup()
        await self.notification_manager.async_setup()

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update."""
        try:
            self.compliance_manager.assign_activities()
            return self.compliance_manager.build_coordinator_data(dt_today_local())
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating CE Tracker data: {err}") from err

    # -------------------------------------------------------------------------------------
    # Data accessors
    # -------------------------------------------------------------------------------------

    @property
    def credentials_data(self) -> dict[str, Any]:
        """Stored credentials keyed by internal id."""
        return self._data.get(const.DATA_CREDENTIALS, {})

    def summary_for(self, credential_id: str) -> dict[str, Any] | None:
        """Latest computed compliance summary for a credential."""
        if not self.data:
            return None
        return self.data.get(const.COORDINATOR_DATA_SUMMARIES, {}).get(credential_id)

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    def _persist(self) -> None:
        """Save to persistent storage."""
        self.storage_manager.set_data(self._data)
        self.hass.add_job(self.storage_manager.async_save)
