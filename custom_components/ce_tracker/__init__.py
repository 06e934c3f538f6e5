# File: __init__.py
"""Initialization file for the CE Tracker integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization for compliance summaries.
- Reminder scheduling through the Home Assistant scheduling gateway.
- Storage management for persistent data handling.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import CETrackerCoordinator
from .scheduling_gateway import HassSchedulingGateway
from .services import async_setup_services, async_unload_services
from .storage_manager import CETrackerStorageManager
from .utils import dt_utils


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for CE Tracker entry: %s", entry.entry_id)

    # Set the home assistant configured timezone for date/time operations
    # Must be done early before any components that use datetime helpers
    const.set_default_timezone(hass)
    dt_utils.set_default_timezone(dt_util.get_time_zone(hass.config.time_zone))

    # Initialize the storage manager to handle persistent data.
    storage_manager = CETrackerStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_initialize()

    gateway = HassSchedulingGateway(
        hass,
        entry.options.get(const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE),
    )

    # Create the data coordinator for managing updates and synchronization.
    coordinator = CETrackerCoordinator(hass, entry, storage_manager, gateway)

    try:
        # Perform the first refresh to link activities and build summaries.
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise

    await coordinator.async_setup_managers()

    # Store the coordinator and data manager in hass.data.
    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORAGE_MANAGER: storage_manager,
    }

    # Set up services required by the integration.
    async_setup_services(hass)

    # Forward the setup to supported platforms.
    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    # Options changes affect the update interval and the notify target.
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    # Cancel timers before the gateway goes away.
    entry.async_on_unload(lambda: hass.async_create_task(gateway.async_cancel_all()))

    # Initial plan; runs as a task so setup is not blocked on it.
    entry.async_create_task(
        hass,
        coordinator.notification_manager.async_replan(),
        f"{const.DOMAIN}_initial_replan",
    )

    const.LOGGER.info("INFO: CE Tracker setup complete for entry: %s", entry.entry_id)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading CE Tracker entry: %s", entry.entry_id)

    # Unload platforms
    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        # Await service unloading
        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing CE Tracker entry: %s", entry.entry_id)

    storage_manager = CETrackerStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_delete_storage()

    const.LOGGER.info("INFO: CE Tracker entry data cleared: %s", entry.entry_id)
