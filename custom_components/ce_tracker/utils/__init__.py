"""Pure Python utilities for CE Tracker.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ DIRECTIVE 1 - UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Date/time parsing, calendar arithmetic, local day helpers
    - math_utils: CE unit conversion, rounding, progress calculations

Usage:
    from . import dt_utils
    from .math_utils import to_clock_hours
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
