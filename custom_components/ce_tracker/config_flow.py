# File: config_flow.py
"""Config flow for the CE Tracker integration.

A single instance is allowed. The user step collects the reminder settings,
which are stored as config entry options so the options flow can edit them.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .notification_helper import notify_service_available
from .options_flow import CETrackerOptionsFlowHandler


class CETrackerConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for CE Tracker."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Collect reminder settings and create the entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_reminder_options(user_input)
            options = fh.build_reminder_options_data(user_input)
            notify_service = options[const.CONF_NOTIFY_SERVICE]
            if notify_service and not notify_service_available(
                self.hass, notify_service
            ):
                errors[const.CONF_NOTIFY_SERVICE] = (
                    const.TRANS_KEY_CFOF_NOTIFY_SERVICE_NOT_FOUND
                )
            if not errors:
                const.LOGGER.info("INFO: Creating CE Tracker entry")
                return self.async_create_entry(
                    title=const.CE_TRACKER_TITLE, data={}, options=options
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_reminder_options_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return CETrackerOptionsFlowHandler(config_entry)
