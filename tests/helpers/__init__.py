"""Test helpers for CE Tracker tests.

This module re-exports the record builders for convenient imports:

    from tests.helpers import make_activity, make_credential, make_renewal

See builders.py for the defaults each builder applies.
"""

from tests.helpers.builders import (
    make_activity,
    make_award,
    make_category,
    make_credential,
    make_reinstatement,
    make_renewal,
)

__all__ = [
    "make_activity",
    "make_award",
    "make_category",
    "make_credential",
    "make_reinstatement",
    "make_renewal",
]
