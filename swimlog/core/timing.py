"""
Swim time and distance arithmetic.

Pure functions shared by the entry log and the HTTP layer. Times are
floats in seconds; distances are strings as entered ("100", "50y").
"""

import math
import re
from enum import Enum
from typing import Optional, Union


class Unit(Enum):
    """Pool length unit for distance pickers."""
    METERS = "m"
    YARDS = "y"


DISTANCES_METERS = ("50", "100", "200", "400", "800", "1500")
DISTANCES_YARDS = ("25", "50", "100", "200", "500", "1000", "1650")
EFFORT_OPTIONS = ("50%", "60%", "70%", "80%", "90%", "100%")

DEFAULT_EFFORT_PERCENT = 80

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_UNIT_SUFFIX = re.compile(r"[my]$", re.IGNORECASE)


def format_time(seconds: Optional[float]) -> str:
    """
    Format seconds for display.

    Under a minute: ``25.340``. A minute or more: ``1:03.450``.
    Missing, zero, or NaN values render as ``--``.
    """
    if not seconds or math.isnan(seconds):
        return "--"

    if seconds >= 60:
        minutes = int(seconds // 60)
        secs = f"{seconds % 60:.3f}".rjust(6, "0")
        return f"{minutes}:{secs}"
    return f"{seconds:.3f}"


def parse_time_input(text: Optional[str]) -> Optional[float]:
    """
    Parse a typed time into seconds.

    Accepts ``SS.mmm`` or ``M:SS.mmm``. Returns None for empty or
    unparsable input.
    """
    if not text:
        return None

    try:
        if ":" in text:
            minutes, secs = text.split(":")[:2]
            value = float(minutes) * 60 + float(secs)
        else:
            value = float(text)
    except ValueError:
        return None

    if math.isnan(value):
        return None
    return value


def parse_effort(effort: Union[str, int, None]) -> float:
    """Turn ``"80%"`` into 0.8. Anything unparsable (or zero) means 80%."""
    percent = 0
    if isinstance(effort, int):
        percent = effort
    elif isinstance(effort, str):
        match = _LEADING_INT.match(effort)
        if match:
            percent = int(match.group(1))
    return (percent or DEFAULT_EFFORT_PERCENT) / 100


def calculate_result_time(
    best_seconds: Optional[float],
    effort_fraction: float,
) -> Optional[float]:
    """
    Target time for a rep swum at the given effort.

    Each percent below 100 adds that share of the best time:
    90% effort on a 60.0 best gives 66.0.
    """
    if best_seconds is None or math.isnan(best_seconds):
        return None
    return best_seconds + best_seconds * (1 - effort_fraction)


def get_distance_value(distance):
    """Strip a trailing unit suffix: ``"100m"`` -> ``"100"``."""
    if not distance:
        return distance
    return _UNIT_SUFFIX.sub("", str(distance))


def distance_options(unit: Unit) -> tuple[str, ...]:
    if unit is Unit.YARDS:
        return DISTANCES_YARDS
    return DISTANCES_METERS
