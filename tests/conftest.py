"""Shared fixtures for CE Tracker tests."""

from collections.abc import AsyncGenerator, Generator
from datetime import date, timedelta
from typing import Any
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.ce_tracker import const
from custom_components.ce_tracker.utils import dt_utils
from tests.helpers import make_activity, make_category, make_credential, make_renewal

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def utc_default_timezone() -> Generator[None]:
    """Run every test with the dt_utils default timezone reset to UTC.

    Integration setup switches it to the Home Assistant timezone, which would
    otherwise leak into the pure engine tests.
    """
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def today() -> date:
    """Return the current UTC date (default timezone in tests)."""
    return dt_utils.dt_today_local()


@pytest.fixture
def current_renewal(today: date) -> dict[str, Any]:
    """Return a renewal period that started 100 days ago and ends in 60 days."""
    return make_renewal(today - timedelta(days=100), today + timedelta(days=60))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry with default reminder options."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.CE_TRACKER_TITLE,
        data={},
        options={
            const.CONF_PRIMARY_NOTICE_DAYS: const.DEFAULT_PRIMARY_NOTICE_DAYS,
            const.CONF_SECONDARY_NOTICE_DAYS: const.DEFAULT_SECONDARY_NOTICE_DAYS,
            const.CONF_LIVE_PRIMARY_MINUTES: const.DEFAULT_LIVE_PRIMARY_MINUTES,
            const.CONF_LIVE_SECONDARY_MINUTES: const.DEFAULT_LIVE_SECONDARY_MINUTES,
            const.CONF_TIME_OF_DAY: const.DEFAULT_TIME_OF_DAY,
            const.CONF_ENABLED_NOTIFICATION_TYPES: list(const.NOTIFICATION_TYPES),
            const.CONF_NOTIFY_SERVICE: const.NOTIFY_PERSISTENT_NOTIFICATION,
            const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
        },
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data(current_renewal: dict[str, Any]) -> dict[str, Any]:
    """Return stored data with one credential, period and completed activity."""
    completion = dt_utils.dt_parse_date(current_renewal[const.DATA_RENEWAL_START])
    return {
        const.DATA_CREDENTIALS: {"cred-1": make_credential()},
        const.DATA_RENEWAL_PERIODS: {"rp-1": current_renewal},
        const.DATA_ACTIVITIES: {
            "act-1": make_activity(
                **{const.DATA_ACTIVITY_COMPLETION_DATE: completion + timedelta(days=5)}
            )
        },
        const.DATA_SPECIAL_CATEGORIES: {"cat-ethics": make_category()},
        const.DATA_REINSTATEMENTS: {},
        const.DATA_DISCIPLINARY_ACTIONS: {},
        const.DATA_AWARDS: {},
        const.DATA_NOTIFIED_AWARDS: [],
    }


@pytest.fixture
def mock_coordinator(mock_config_entry: MockConfigEntry) -> MagicMock:
    """Return a mock coordinator; tests attach a real storage manager."""
    coordinator = MagicMock()
    coordinator.config_entry = mock_config_entry
    coordinator._persist = MagicMock()  # pylint: disable=protected-access
    coordinator.async_set_updated_data = MagicMock()
    return coordinator


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> AsyncGenerator[MockConfigEntry]:
    """Set up the CE Tracker integration for testing with mocked storage.

    The entry is unloaded afterwards so reminder timers do not linger.
    """
    mock_config_entry.add_to_hass(hass)

    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    yield mock_config_entry

    if mock_config_entry.state is ConfigEntryState.LOADED:
        assert await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()
