"""Base entity classes for CE Tracker integration."""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from . import const
from .coordinator import CETrackerCoordinator


def create_credential_device_info(
    credential_id: str, credential_name: str, entry: ConfigEntry
) -> DeviceInfo:
    """Group every entity of one credential under a single device."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, f"{entry.entry_id}_{credential_id}")},
        name=credential_name,
        manufacturer=const.DEVICE_MANUFACTURER,
    )


class CETrackerCoordinatorEntity(CoordinatorEntity[CETrackerCoordinator]):
    """Base entity class for CE Tracker sensors with typed coordinator access."""

    @property
    def coordinator(self) -> CETrackerCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: CETrackerCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
