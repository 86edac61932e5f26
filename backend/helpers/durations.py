"""
Lenient parsing of duration and limit arguments from admin commands.

Clients send these as numbers, numeric strings or garbage; anything that is
not a positive finite number is treated as absent so the caller can apply
its default.
"""

import math
from typing import Any, Optional


def parse_positive_number(value: Any) -> Optional[float]:
    """
    Parse a positive, finite number.

    Args:
        value: Raw argument (int, float, numeric string, anything else)

    Returns:
        The number (an int when whole), or None if missing, non-numeric, non-finite or <= 0
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return int(number) if number.is_integer() else number


def minutes_or_default(value: Any, default: int, maximum: Optional[int] = None) -> float:
    """Return the parsed duration in minutes capped at ``maximum``, or ``default`` when invalid."""
    minutes = parse_positive_number(value)
    if minutes is None:
        return default
    if maximum is not None and minutes > maximum:
        return maximum
    return minutes


def limit_or_default(value: Any, default: int, maximum: int) -> int:
    """Return a whole-number limit capped at ``maximum``, or ``default`` when invalid."""
    number = parse_positive_number(value)
    if number is None or number < 1:
        return default
    return min(int(number), maximum)
