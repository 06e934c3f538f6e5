# File: utils/math_utils.py
"""Math and CE unit conversion utilities for CE Tracker.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ DIRECTIVE 1 - UTILS PURITY: NO `homeassistant.*` imports allowed.

Functions:
    - round_ce: Consistent rounding to configured precision
    - resolve_hours_per_unit: Ratio validation with silent default
    - to_clock_hours: Convert an amount in any unit to clock hours
    - from_clock_hours: Convert clock hours back into a unit
    - convert_ce: Convert between two units through clock hours
    - calculate_percentage: Progress percentage calculations
"""

from __future__ import annotations

import logging

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

DATA_FLOAT_PRECISION = 2

UNIT_HOURS = "hours"
UNIT_UNITS = "units"

DEFAULT_HOURS_PER_UNIT = 10.0


# ==============================================================================
# Rounding
# ==============================================================================


def round_ce(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a CE amount to the configured precision.

    Examples:
        round_ce(10.456) → 10.46
        round_ce(10.0) → 10.0
    """
    return round(value, precision)


# ==============================================================================
# Unit Conversion
# ==============================================================================


def resolve_hours_per_unit(hours_per_unit: float | None) -> float:
    """Return a usable clock-hours-per-unit ratio.

    Missing, zero, negative or non-numeric ratios fall back to
    DEFAULT_HOURS_PER_UNIT. This never raises.

    Examples:
        resolve_hours_per_unit(15) → 15.0
        resolve_hours_per_unit(0) → 10.0
        resolve_hours_per_unit(None) → 10.0
    """
    try:
        ratio = float(hours_per_unit)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        ratio = 0.0
    if ratio <= 0:
        if hours_per_unit is not None:
            _LOGGER.debug(
                "Invalid hours_per_unit %s, using %s", hours_per_unit, DEFAULT_HOURS_PER_UNIT
            )
        return DEFAULT_HOURS_PER_UNIT
    return ratio


def to_clock_hours(
    amount: float, unit: str | None, hours_per_unit: float | None
) -> float:
    """Convert a CE amount into clock hours.

    Hours pass through unchanged; units are multiplied by the ratio.
    Unknown units are treated as hours.

    Examples:
        to_clock_hours(2.5, "units", 10) → 25.0
        to_clock_hours(4, "hours", 10) → 4.0
    """
    if unit == UNIT_UNITS:
        return amount * resolve_hours_per_unit(hours_per_unit)
    return amount


def from_clock_hours(
    hours: float, unit: str | None, hours_per_unit: float | None
) -> float:
    """Convert clock hours into the given unit (inverse of to_clock_hours)."""
    if unit == UNIT_UNITS:
        return hours / resolve_hours_per_unit(hours_per_unit)
    return hours


def convert_ce(
    amount: float,
    from_unit: str | None,
    to_unit: str | None,
    hours_per_unit: float | None,
) -> float:
    """Convert an amount between units using one ratio.

    Identity when both units agree (unknown units count as hours).

    Examples:
        convert_ce(3, "hours", "units", 10) → 0.3
        convert_ce(0.3, "units", "hours", 10) → 3.0
    """
    source = from_unit if from_unit == UNIT_UNITS else UNIT_HOURS
    target = to_unit if to_unit == UNIT_UNITS else UNIT_HOURS
    if source == target:
        return amount
    return from_clock_hours(
        to_clock_hours(amount, source, hours_per_unit), target, hours_per_unit
    )


# ==============================================================================
# Progress Arithmetic
# ==============================================================================


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return round_ce((current / target) * 100, precision)
