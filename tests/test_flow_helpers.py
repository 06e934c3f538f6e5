"""Tests for flow_helpers - reminder option validation and normalization."""

from __future__ import annotations

import voluptuous as vol

from custom_components.ce_tracker import const
from custom_components.ce_tracker import flow_helpers as fh


def _input(**overrides) -> dict:
    return {
        const.CONF_PRIMARY_NOTICE_DAYS: 30,
        const.CONF_SECONDARY_NOTICE_DAYS: 7,
        const.CONF_LIVE_PRIMARY_MINUTES: 120,
        const.CONF_LIVE_SECONDARY_MINUTES: 30,
        const.CONF_TIME_OF_DAY: const.TIME_OF_DAY_MORNING,
        const.CONF_ENABLED_NOTIFICATION_TYPES: list(const.NOTIFICATION_TYPES),
        const.CONF_NOTIFY_SERVICE: "",
        const.CONF_UPDATE_INTERVAL: 60,
        **overrides,
    }


class TestValidateReminderOptions:
    """Test validate_reminder_options."""

    def test_defaults_valid(self) -> None:
        """Default lead times pass validation."""
        assert fh.validate_reminder_options(_input()) == {}

    def test_equal_leads_allowed(self) -> None:
        """Equal primary and secondary leads are allowed."""
        assert (
            fh.validate_reminder_options(
                _input(
                    **{
                        const.CONF_SECONDARY_NOTICE_DAYS: 30,
                        const.CONF_LIVE_SECONDARY_MINUTES: 120,
                    }
                )
            )
            == {}
        )

    def test_both_errors_reported(self) -> None:
        """Day and minute leads are checked independently."""
        errors = fh.validate_reminder_options(
            _input(
                **{
                    const.CONF_SECONDARY_NOTICE_DAYS: 31,
                    const.CONF_LIVE_SECONDARY_MINUTES: 121,
                }
            )
        )
        assert errors == {
            const.CONF_SECONDARY_NOTICE_DAYS: (
                const.TRANS_KEY_CFOF_SECONDARY_AFTER_PRIMARY
            ),
            const.CONF_LIVE_SECONDARY_MINUTES: (
                const.TRANS_KEY_CFOF_LIVE_SECONDARY_AFTER_PRIMARY
            ),
        }


class TestBuildReminderOptions:
    """Test build_reminder_options_data and the shared schema."""

    def test_numbers_become_ints(self) -> None:
        """NumberSelector floats are stored as ints."""
        options = fh.build_reminder_options_data(
            _input(**{const.CONF_PRIMARY_NOTICE_DAYS: 45.0})
        )
        assert options[const.CONF_PRIMARY_NOTICE_DAYS] == 45
        assert isinstance(options[const.CONF_PRIMARY_NOTICE_DAYS], int)

    def test_unknown_notification_types_dropped(self) -> None:
        """Only known notification types survive."""
        options = fh.build_reminder_options_data(
            _input(
                **{
                    const.CONF_ENABLED_NOTIFICATION_TYPES: [
                        "bogus",
                        const.NOTIFICATION_INTERVIEW,
                    ]
                }
            )
        )
        assert options[const.CONF_ENABLED_NOTIFICATION_TYPES] == [
            const.NOTIFICATION_INTERVIEW
        ]

    def test_schema_defaults(self) -> None:
        """An empty form is filled with the default settings."""
        schema = fh.build_reminder_options_schema()
        assert isinstance(schema, vol.Schema)
        data = schema({})
        assert data[const.CONF_PRIMARY_NOTICE_DAYS] == const.DEFAULT_PRIMARY_NOTICE_DAYS
        assert data[const.CONF_TIME_OF_DAY] == const.DEFAULT_TIME_OF_DAY
        assert data[const.CONF_NOTIFY_SERVICE] == const.DEFAULT_NOTIFY_SERVICE
