# File: options_flow.py
"""Options Flow for the CE Tracker integration.

Edits the reminder settings. Saving new options triggers the update listener
registered in __init__.py, which reloads the entry so the coordinator interval
and the notify target pick up the change.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh
from .notification_helper import notify_service_available


class CETrackerOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for reminder settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry) -> None:
        """Initialize the options flow."""
        self._entry_options: dict[str, Any] = {}

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the reminder settings."""
        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_reminder_options(user_input)
            self._entry_options = fh.build_reminder_options_data(user_input)
            notify_service = self._entry_options[const.CONF_NOTIFY_SERVICE]
            if notify_service and not notify_service_available(
                self.hass, notify_service
            ):
                errors[const.CONF_NOTIFY_SERVICE] = (
                    const.TRANS_KEY_CFOF_NOTIFY_SERVICE_NOT_FOUND
                )
            if not errors:
                const.LOGGER.debug(
                    "DEBUG: Reminder options updated: %s", self._entry_options
                )
                return self.async_create_entry(title="", data=self._entry_options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_reminder_options_schema(
                user_input or dict(self.config_entry.options)
            ),
            errors=errors,
        )
