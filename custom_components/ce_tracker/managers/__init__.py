"""Managers for CE Tracker.

Managers own stateful orchestration; the math lives in the engines.
"""

from .base_manager import BaseManager
from .compliance_manager import ComplianceManager
from .notification_manager import NotificationManager

__all__ = [
    "BaseManager",
    "ComplianceManager",
    "NotificationManager",
]
