"""Shared plumbing for the CE Tracker managers.

Managers talk to each other through dispatcher signals scoped to one config
entry, so two tracked license holders never see each other's events.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import CETrackerCoordinator
    from ..storage_manager import CETrackerStorageManager


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Return the dispatcher signal for `suffix` within one config entry."""
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


class BaseManager(ABC):
    """Compliance and notification managers share storage and signals here."""

    def __init__(self, hass: HomeAssistant, coordinator: CETrackerCoordinator) -> None:
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    @property
    def storage(self) -> CETrackerStorageManager:
        """Credential, period and activity records of this entry."""
        return self.coordinator.storage_manager

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send a SIGNAL_SUFFIX_* event with keyword payload to this entry."""
        const.LOGGER.debug(
            "DEBUG: Signal '%s' for entry %s (%s)",
            suffix,
            self.entry_id,
            ", ".join(payload),
        )
        async_dispatcher_send(
            self.hass, get_event_signal(self.entry_id, suffix), payload
        )

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Connect a handler that is dropped when the config entry unloads."""
        self.coordinator.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.entry_id, suffix), callback
            )
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Subscribe to signals and timers; called once per entry setup."""
