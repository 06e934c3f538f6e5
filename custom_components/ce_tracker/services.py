# File: services.py
"""Defines custom services for the CE Tracker integration.

These services allow direct actions through scripts or automations:
replanning reminders, relinking activities, award checks, compliance
queries and record management.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import CETrackerCoordinator
from .data_builders import EntityValidationError
from .utils.dt_utils import dt_today_local

# --- Service Schemas ---
EMPTY_SCHEMA = vol.Schema({})

CANCEL_AWARD_NOTIFICATION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_AWARD_ID): cv.string,
    }
)

GET_COMPLIANCE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_RENEWAL_PERIOD_ID): cv.string,
    }
)

SAVE_RECORD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_BUCKET): vol.In(const.RECORD_BUCKETS),
        vol.Required(const.FIELD_RECORD): dict,
        vol.Optional(const.FIELD_INTERNAL_ID): cv.string,
    }
)

DELETE_RECORD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_BUCKET): vol.In(const.RECORD_BUCKETS),
        vol.Required(const.FIELD_INTERNAL_ID): cv.string,
    }
)


def _get_coordinator(hass: HomeAssistant) -> CETrackerCoordinator:
    """Return the coordinator of the (single) loaded entry."""
    entries = hass.data.get(const.DOMAIN, {})
    if not entries:
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    entry_id = next(iter(entries))
    return entries[entry_id][const.COORDINATOR]


def async_setup_services(hass: HomeAssistant):
    """Register CE Tracker services."""

    async def handle_replan_reminders(call: ServiceCall) -> None:
        """Cancel and reschedule every reminder."""
        coordinator = _get_coordinator(hass)
        scheduled = await coordinator.notification_manager.async_replan()
        const.LOGGER.info(
            "INFO: Replan Reminders: %s reminders scheduled (%s)",
            len(scheduled),
            coordinator.notification_manager.last_status,
        )

    async def handle_assign_activities(call: ServiceCall) -> None:
        """Relink completed activities to renewal periods."""
        coordinator = _get_coordinator(hass)
        changed = coordinator.compliance_manager.assign_activities()
        const.LOGGER.info("INFO: Assign Activities: %s links updated", len(changed))
        await coordinator.async_request_refresh()

    async def handle_check_awards(call: ServiceCall) -> None:
        """Record newly earned awards and schedule their notifications."""
        coordinator = _get_coordinator(hass)
        earned = await coordinator.notification_manager.async_notify_new_awards()
        const.LOGGER.info("INFO: Check Awards: %s new awards", len(earned))

    async def handle_cancel_award_notification(call: ServiceCall) -> None:
        """Withdraw a pending award notification."""
        coordinator = _get_coordinator(hass)
        award_id = call.data[const.FIELD_AWARD_ID]
        await coordinator.notification_manager.async_cancel_award_notification(
            award_id
        )

    async def handle_get_compliance(call: ServiceCall) -> ServiceResponse:
        """Return compliance summaries (all credentials or one renewal period)."""
        coordinator = _get_coordinator(hass)
        today = dt_today_local()
        renewal_id = call.data.get(const.FIELD_RENEWAL_PERIOD_ID)
        if renewal_id:
            summary = coordinator.compliance_manager.compliance_for_renewal(
                renewal_id, today
            )
            return {const.COORDINATOR_DATA_SUMMARIES: [summary]}
        summaries = coordinator.compliance_manager.credential_summaries(today)
        return {const.COORDINATOR_DATA_SUMMARIES: list(summaries.values())}

    async def handle_save_record(call: ServiceCall) -> ServiceResponse:
        """Create or update a stored record."""
        coordinator = _get_coordinator(hass)
        bucket = call.data[const.FIELD_BUCKET]
        user_input: dict[str, Any] = dict(call.data[const.FIELD_RECORD])
        try:
            record = coordinator.compliance_manager.save_record(
                bucket, user_input, call.data.get(const.FIELD_INTERNAL_ID)
            )
        except EntityValidationError as err:
            const.LOGGER.warning("WARNING: Save Record: %s", err)
            raise ServiceValidationError(
                const.ERROR_INVALID_RECORD_FMT.format(bucket, err)
            ) from err
        return {const.FIELD_INTERNAL_ID: record[const.DATA_INTERNAL_ID]}

    async def handle_delete_record(call: ServiceCall) -> None:
        """Delete a stored record."""
        coordinator = _get_coordinator(hass)
        coordinator.compliance_manager.delete_record(
            call.data[const.FIELD_BUCKET], call.data[const.FIELD_INTERNAL_ID]
        )

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPLAN_REMINDERS,
        handle_replan_reminders,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ASSIGN_ACTIVITIES,
        handle_assign_activities,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CHECK_AWARDS,
        handle_check_awards,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CANCEL_AWARD_NOTIFICATION,
        handle_cancel_award_notification,
        schema=CANCEL_AWARD_NOTIFICATION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_COMPLIANCE,
        handle_get_compliance,
        schema=GET_COMPLIANCE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SAVE_RECORD,
        handle_save_record,
        schema=SAVE_RECORD_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_RECORD,
        handle_delete_record,
        schema=DELETE_RECORD_SCHEMA,
    )

    const.LOGGER.info("INFO: CE Tracker services have been registered successfully")


async def async_unload_services(hass: HomeAssistant):
    """Unregister CE Tracker services when unloading the integration."""
    for service in const.SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: CE Tracker services have been unregistered")
