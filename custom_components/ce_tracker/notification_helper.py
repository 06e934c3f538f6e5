# File: notification_helper.py
"""Sends notifications using Home Assistant's notify services.

Reminders are delivered through the notify service configured in the options
flow ("notify.mobile_app_phone" or just "mobile_app_phone"). The special value
"persistent_notification" posts to the Home Assistant sidebar instead, using
the reminder key as notification id so a re-delivery replaces the old card.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components import persistent_notification
from homeassistant.core import HomeAssistant

from . import const


def split_notify_service(notify_service: str) -> tuple[str, str]:
    """Split "domain.service" (domain defaults to notify)."""
    if const.DISPLAY_DOT not in notify_service:
        return const.NOTIFY_DOMAIN, notify_service
    domain, service = notify_service.split(const.DISPLAY_DOT, 1)
    return domain, service


def notify_service_available(hass: HomeAssistant, notify_service: str) -> bool:
    """Return True if the configured target can receive notifications."""
    if not notify_service:
        return False
    if notify_service == const.NOTIFY_PERSISTENT_NOTIFICATION:
        return True
    domain, service = split_notify_service(notify_service)
    return hass.services.has_service(domain, service)


async def async_send_notification(
    hass: HomeAssistant,
    notify_service: str,
    title: str,
    message: str,
    notification_id: str | None = None,
    extra_data: dict[str, str] | None = None,
) -> None:
    """Send a notification using the specified notify service.

    Gracefully handles missing notification services: if the service doesn't
    exist, logs a warning and returns without raising an exception.
    """
    if notify_service == const.NOTIFY_PERSISTENT_NOTIFICATION:
        persistent_notification.async_create(
            hass, message, title=title, notification_id=notification_id
        )
        const.LOGGER.debug("DEBUG: Persistent notification created: %s", title)
        return

    domain, service = split_notify_service(notify_service)

    if not hass.services.has_service(domain, service):
        const.LOGGER.warning(
            "Notification service '%s.%s' not available - skipping notification. "
            "Configure the '%s' integration or pick another notify service in "
            "the CE Tracker options.",
            domain,
            service,
            domain,
        )
        return

    payload: dict[str, Any] = {const.NOTIFY_TITLE: title, const.NOTIFY_MESSAGE: message}

    if notification_id:
        data = payload.setdefault(const.NOTIFY_DATA, {})
        data[const.NOTIFY_TAG] = notification_id  # type: ignore[index]

    if extra_data:
        data = payload.setdefault(const.NOTIFY_DATA, {})
        data.update(extra_data)  # type: ignore[attr-defined]

    try:
        await hass.services.async_call(domain, service, payload, blocking=True)
        const.LOGGER.debug("DEBUG: Notification sent via '%s.%s'", domain, service)

    except Exception as err:  # pylint: disable=broad-exception-caught
        # Runs from timer callbacks; an escaping error would only surface as
        # "Task exception was never retrieved".
        const.LOGGER.error(
            "ERROR: Unexpected error sending notification via '%s.%s': %s. Payload: %s",
            domain,
            service,
            err,
            payload,
        )
