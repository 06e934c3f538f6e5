"""Tests for CE Tracker config flow."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_mock_service,
)

from custom_components.ce_tracker import const

USER_INPUT = {
    const.CONF_PRIMARY_NOTICE_DAYS: 30.0,
    const.CONF_SECONDARY_NOTICE_DAYS: 7.0,
    const.CONF_LIVE_PRIMARY_MINUTES: 120.0,
    const.CONF_LIVE_SECONDARY_MINUTES: 30.0,
    const.CONF_TIME_OF_DAY: "evening",
    const.CONF_ENABLED_NOTIFICATION_TYPES: [
        const.NOTIFICATION_RENEWAL_ENDING,
        const.NOTIFICATION_UPCOMING_EXPIRATION,
    ],
    const.CONF_NOTIFY_SERVICE: " notify.mobile_app_phone ",
    const.CONF_UPDATE_INTERVAL: 15.0,
}


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """Test successful user config flow."""
    async_mock_service(hass, "notify", "mobile_app_phone")

    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == const.CONFIG_FLOW_STEP_USER

    with patch(
        "custom_components.ce_tracker.async_setup_entry",
        return_value=True,
    ) as mock_setup_entry:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"), user_input=USER_INPUT
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == const.CE_TRACKER_TITLE
    assert result.get("data") == {}
    options = result.get("options")
    assert options[const.CONF_PRIMARY_NOTICE_DAYS] == 30
    assert isinstance(options[const.CONF_PRIMARY_NOTICE_DAYS], int)
    assert options[const.CONF_NOTIFY_SERVICE] == "notify.mobile_app_phone"
    # Notification types keep the canonical order
    assert options[const.CONF_ENABLED_NOTIFICATION_TYPES] == [
        const.NOTIFICATION_UPCOMING_EXPIRATION,
        const.NOTIFICATION_RENEWAL_ENDING,
    ]
    assert len(mock_setup_entry.mock_calls) == 1


async def test_form_secondary_after_primary(hass: HomeAssistant) -> None:
    """Secondary lead days larger than primary ones are rejected."""
    async_mock_service(hass, "notify", "mobile_app_phone")
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    result = await hass.config_entries.flow.async_configure(
        result.get("flow_id"),
        user_input={**USER_INPUT, const.CONF_SECONDARY_NOTICE_DAYS: 45.0},
    )

    assert result.get("type") == FlowResultType.FORM
    assert result.get("errors") == {
        const.CONF_SECONDARY_NOTICE_DAYS: const.TRANS_KEY_CFOF_SECONDARY_AFTER_PRIMARY
    }


async def test_form_notify_service_not_found(hass: HomeAssistant) -> None:
    """Unknown notify services are rejected."""
    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    result = await hass.config_entries.flow.async_configure(
        result.get("flow_id"), user_input=USER_INPUT
    )

    assert result.get("type") == FlowResultType.FORM
    assert result.get("errors") == {
        const.CONF_NOTIFY_SERVICE: const.TRANS_KEY_CFOF_NOTIFY_SERVICE_NOT_FOUND
    }


async def test_single_instance_only(hass: HomeAssistant) -> None:
    """A second entry is not allowed."""
    MockConfigEntry(domain=const.DOMAIN, title=const.CE_TRACKER_TITLE).add_to_hass(
        hass
    )

    result = await hass.config_entries.flow.async_init(
        const.DOMAIN, context={"source": config_entries.SOURCE_USER}
    )

    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == const.ERROR_SINGLE_INSTANCE
