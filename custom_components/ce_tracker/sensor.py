# File: sensor.py
"""Sensors for the CE Tracker integration.

Sensors Defined in This File (2):

01. CredentialComplianceSensor - remaining CE for a credential's current period
02. NextRenewalExpirationSensor - days until the soonest current period ends

Credential sensors are added as credentials appear in storage; the platform
watches coordinator updates for new credential ids.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import UnitOfTime
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import CETrackerCoordinator
from .entity import CETrackerCoordinatorEntity, create_credential_device_info
from .managers.base_manager import get_event_signal


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for CE Tracker integration."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    coordinator: CETrackerCoordinator = data[const.COORDINATOR]

    known_credentials: set[str] = set()

    @callback
    def _async_add_credential_sensors() -> None:
        new_entities: list[SensorEntity] = []
        for credential_id, credential in coordinator.credentials_data.items():
            if credential_id in known_credentials:
                continue
            known_credentials.add(credential_id)
            new_entities.append(
                CredentialComplianceSensor(
                    coordinator,
                    entry,
                    credential_id,
                    credential[const.DATA_CREDENTIAL_NAME],
                )
            )
        if new_entities:
            const.LOGGER.debug(
                "DEBUG: Adding %s credential compliance sensors", len(new_entities)
            )
            async_add_entities(new_entities)

    _async_add_credential_sensors()
    entry.async_on_unload(coordinator.async_add_listener(_async_add_credential_sensors))

    async_add_entities([NextRenewalExpirationSensor(coordinator, entry)])


# ------------------------------------------------------------------------------------------
# CREDENTIAL SENSORS
# ------------------------------------------------------------------------------------------


class CredentialComplianceSensor(CETrackerCoordinatorEntity, SensorEntity):
    """Sensor for the CE still owed on a credential.

    State is the remaining overall CE for the credential's current renewal
    period (or its latest one when none is current), in the credential's
    measurement unit. Negative values mean the requirement was exceeded.
    """

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_COMPLIANCE
    _attr_icon = "mdi:school"

    def __init__(
        self,
        coordinator: CETrackerCoordinator,
        entry: ConfigEntry,
        credential_id: str,
        credential_name: str,
    ) -> None:
        """Initialize the sensor.

        Args:
            coordinator: CETrackerCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            credential_id: Internal id of the credential.
            credential_name: Display name of the credential.
        """
        super().__init__(coordinator)
        self._credential_id = credential_id
        self._attr_unique_id = (
            f"{entry.entry_id}_{credential_id}{const.SENSOR_UID_SUFFIX_COMPLIANCE}"
        )
        self._attr_state_class = SensorStateClass.MEASUREMENT
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_CREDENTIAL_NAME: credential_name,
        }
        self._attr_device_info = create_credential_device_info(
            credential_id, credential_name, entry
        )

    @property
    def available(self) -> bool:
        """Unavailable once the credential is deleted."""
        return (
            super().available
            and self._credential_id in self.coordinator.credentials_data
        )

    @property
    def native_value(self) -> float | None:
        """Return the remaining CE."""
        summary = self.coordinator.summary_for(self._credential_id)
        if summary is None:
            return None
        return summary[const.SUMMARY_REMAINING]

    @property
    def native_unit_of_measurement(self) -> str | None:
        """Return the credential's measurement unit."""
        summary = self.coordinator.summary_for(self._credential_id)
        if summary is None:
            return None
        return summary[const.SUMMARY_UNIT]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the rest of the compliance summary."""
        summary = self.coordinator.summary_for(self._credential_id)
        if summary is None:
            return {}
        attributes: dict[str, Any] = {
            const.ATTR_IS_CURRENT: summary[const.SUMMARY_IS_CURRENT],
            const.ATTR_RENEWAL_PERIOD: summary[const.SUMMARY_RENEWAL_PERIOD_NAME],
            const.ATTR_PROGRESS: summary[const.SUMMARY_PROGRESS],
            const.ATTR_SPECIAL_CATEGORIES: summary[const.SUMMARY_SPECIAL_CATEGORIES],
            const.ATTR_DAYS_UNTIL_END: summary[const.SUMMARY_DAYS_UNTIL_END],
            const.SUMMARY_EARNED: summary[const.SUMMARY_EARNED],
            const.SUMMARY_REQUIRED: summary[const.SUMMARY_REQUIRED],
        }
        if const.SUMMARY_REINSTATEMENT in summary:
            attributes[const.ATTR_REINSTATEMENT] = summary[const.SUMMARY_REINSTATEMENT]
        return attributes


# ------------------------------------------------------------------------------------------
# SYSTEM SENSORS
# ------------------------------------------------------------------------------------------


class NextRenewalExpirationSensor(CETrackerCoordinatorEntity, SensorEntity):
    """Days until the soonest current renewal period ends (-1 when none)."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_NEXT_EXPIRATION
    _attr_icon = "mdi:calendar-clock"
    _attr_native_unit_of_measurement = UnitOfTime.DAYS

    def __init__(self, coordinator: CETrackerCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_NEXT_EXPIRATION}"
        self._entry_id = entry.entry_id

    async def async_added_to_hass(self) -> None:
        """Refresh the reminder attributes whenever a replan finishes."""
        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                get_event_signal(
                    self._entry_id, const.SIGNAL_SUFFIX_REMINDERS_REPLANNED
                ),
                self._on_reminders_replanned,
            )
        )

    @callback
    def _on_reminders_replanned(self, _payload: dict[str, Any] | None = None) -> None:
        self.async_write_ha_state()

    @property
    def native_value(self) -> int | None:
        """Return the days left in the soonest-ending current period."""
        if not self.coordinator.data:
            return None
        return self.coordinator.data[const.COORDINATOR_DATA_NEXT_EXPIRATION][
            const.SUMMARY_DAYS_UNTIL_END
        ]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the period name, monthly CE totals and reminder status."""
        if not self.coordinator.data:
            return {}
        next_expiration = self.coordinator.data[const.COORDINATOR_DATA_NEXT_EXPIRATION]
        notification_manager = self.coordinator.notification_manager
        pending = notification_manager.gateway.pending_entries()
        return {
            const.ATTR_RENEWAL_PERIOD: next_expiration[
                const.SUMMARY_RENEWAL_PERIOD_NAME
            ],
            const.ATTR_EARNED_BY_MONTH: self.coordinator.data[
                const.COORDINATOR_DATA_EARNED_BY_MONTH
            ],
            const.ATTR_REPLAN_STATUS: notification_manager.last_status,
            const.ATTR_PENDING_REMINDERS: len(pending),
            const.ATTR_NEXT_REMINDER: (
                pending[0].trigger_time.isoformat() if pending else None
            ),
        }
