# File: flow_helpers.py
"""Helpers for the CE Tracker integration's Config and Options flow.

Provides the reminder settings schema shared by both flows, plus the
validate/build pair that turns form input into config entry options.

**Functions:**
- build_reminder_options_schema(default) -> vol.Schema
- validate_reminder_options(user_input) -> errors_dict
- build_reminder_options_data(user_input) -> options_dict

Validation returns an error dict (empty dict = no errors); the build function
is a pure data transformer.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.helpers import selector

from . import const


def build_reminder_options_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for reminder lead times, delivery and refresh interval."""
    default = default or {}

    def _days_selector() -> selector.NumberSelector:
        return selector.NumberSelector(
            selector.NumberSelectorConfig(
                mode=selector.NumberSelectorMode.BOX,
                min=0,
                max=365,
                step=1,
                unit_of_measurement="days",
            )
        )

    def _minutes_selector() -> selector.NumberSelector:
        return selector.NumberSelector(
            selector.NumberSelectorConfig(
                mode=selector.NumberSelectorMode.BOX,
                min=0,
                max=1440,
                step=5,
                unit_of_measurement="min",
            )
        )

    return vol.Schema(
        {
            vol.Required(
                const.CONF_PRIMARY_NOTICE_DAYS,
                default=default.get(
                    const.CONF_PRIMARY_NOTICE_DAYS, const.DEFAULT_PRIMARY_NOTICE_DAYS
                ),
            ): _days_selector(),
            vol.Required(
                const.CONF_SECONDARY_NOTICE_DAYS,
                default=default.get(
                    const.CONF_SECONDARY_NOTICE_DAYS,
                    const.DEFAULT_SECONDARY_NOTICE_DAYS,
                ),
            ): _days_selector(),
            vol.Required(
                const.CONF_LIVE_PRIMARY_MINUTES,
                default=default.get(
                    const.CONF_LIVE_PRIMARY_MINUTES, const.DEFAULT_LIVE_PRIMARY_MINUTES
                ),
            ): _minutes_selector(),
            vol.Required(
                const.CONF_LIVE_SECONDARY_MINUTES,
                default=default.get(
                    const.CONF_LIVE_SECONDARY_MINUTES,
                    const.DEFAULT_LIVE_SECONDARY_MINUTES,
                ),
            ): _minutes_selector(),
            vol.Required(
                const.CONF_TIME_OF_DAY,
                default=default.get(const.CONF_TIME_OF_DAY, const.DEFAULT_TIME_OF_DAY),
            ): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=list(const.TIME_OF_DAY_OPTIONS),
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key=const.CFOF_TIME_OF_DAY_TRANSLATION_KEY,
                )
            ),
            vol.Required(
                const.CONF_ENABLED_NOTIFICATION_TYPES,
                default=list(
                    default.get(
                        const.CONF_ENABLED_NOTIFICATION_TYPES, const.NOTIFICATION_TYPES
                    )
                ),
            ): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=list(const.NOTIFICATION_TYPES),
                    multiple=True,
                    mode=selector.SelectSelectorMode.LIST,
                    translation_key=const.CFOF_NOTIFICATION_TYPES_TRANSLATION_KEY,
                )
            ),
            vol.Optional(
                const.CONF_NOTIFY_SERVICE,
                default=default.get(
                    const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
                ),
            ): selector.TextSelector(
                selector.TextSelectorConfig(
                    multiline=False,
                )
            ),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=default.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
        }
    )


def validate_reminder_options(user_input: dict[str, Any]) -> dict[str, str]:
    """Check that secondary leads fall closer to the deadline than primary ones."""
    errors: dict[str, str] = {}
    if int(user_input.get(const.CONF_SECONDARY_NOTICE_DAYS, 0)) > int(
        user_input.get(const.CONF_PRIMARY_NOTICE_DAYS, 0)
    ):
        errors[const.CONF_SECONDARY_NOTICE_DAYS] = (
            const.TRANS_KEY_CFOF_SECONDARY_AFTER_PRIMARY
        )
    if int(user_input.get(const.CONF_LIVE_SECONDARY_MINUTES, 0)) > int(
        user_input.get(const.CONF_LIVE_PRIMARY_MINUTES, 0)
    ):
        errors[const.CONF_LIVE_SECONDARY_MINUTES] = (
            const.TRANS_KEY_CFOF_LIVE_SECONDARY_AFTER_PRIMARY
        )
    return errors


def build_reminder_options_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Normalize form input into config entry options.

    NumberSelector hands back floats; lead times and the interval are whole
    numbers.
    """
    return {
        const.CONF_PRIMARY_NOTICE_DAYS: int(user_input[const.CONF_PRIMARY_NOTICE_DAYS]),
        const.CONF_SECONDARY_NOTICE_DAYS: int(
            user_input[const.CONF_SECONDARY_NOTICE_DAYS]
        ),
        const.CONF_LIVE_PRIMARY_MINUTES: int(
            user_input[const.CONF_LIVE_PRIMARY_MINUTES]
        ),
        const.CONF_LIVE_SECONDARY_MINUTES: int(
            user_input[const.CONF_LIVE_SECONDARY_MINUTES]
        ),
        const.CONF_TIME_OF_DAY: user_input[const.CONF_TIME_OF_DAY],
        const.CONF_ENABLED_NOTIFICATION_TYPES: [
            notification_type
            for notification_type in const.NOTIFICATION_TYPES
            if notification_type
            in user_input.get(const.CONF_ENABLED_NOTIFICATION_TYPES, [])
        ],
        const.CONF_NOTIFY_SERVICE: str(
            user_input.get(const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE)
        ).strip(),
        const.CONF_UPDATE_INTERVAL: int(user_input[const.CONF_UPDATE_INTERVAL]),
    }
