"""
Telemetry Formatters
====================
Small pure functions turning telemetry values into display strings.

Every formatter accepts None, numbers or strings (telemetry producers are
inconsistent) and returns either a string or None. None means "nothing
to show"; formatters never raise on bad input.
"""
import math
import re
from typing import Any, Optional

from bharatqa.core.constants import ARROW

_NUMBER = re.compile(r"^[-+]?\d+(?:\.\d+)?$")
_HAS_LETTERS = re.compile(r"[A-Za-z]")


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a telemetry value to float.

    Accepts ints, floats and numeric strings with an optional trailing "%".
    Booleans, blanks, NaN, infinities and anything non-numeric give None.
    """
    if value is None or isinstance(value, bool):
        return None
    number = None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip().rstrip("%").strip()
        if _NUMBER.match(text):
            number = float(text)
    if number is None or not math.isfinite(number):
        return None
    return number


def _trim(number: float, places: int = 1) -> str:
    """90.0 -> '90', 84.25 -> '84.2'."""
    rounded = round(number, places)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{places}f}".rstrip("0").rstrip(".")


def format_percent(value: Any) -> Optional[str]:
    number = to_number(value)
    if number is None:
        return None
    return f"{_trim(number)}%"


def format_duration(seconds: Any) -> Optional[str]:
    """Seconds → 'Xm Ys'."""
    number = to_number(seconds)
    if number is None or number < 0:
        return None
    total = int(round(number))
    minutes, secs = divmod(total, 60)
    return f"{minutes}m {secs}s"


def format_bandwidth(value: Any, unit: str = "Mbps") -> Optional[str]:
    """
    Render a bandwidth value with exactly one unit suffix.

    "102" -> "102 Mbps", "102 Mbps" -> "102 Mbps", 5.5 -> "5.5 Mbps".
    Strings that already carry letters are assumed to include their unit.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = to_number(value)
        return None if number is None else f"{_trim(number, 2)} {unit}"
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _HAS_LETTERS.search(text):
            return text
        if _NUMBER.match(text) and to_number(text) is not None:
            return f"{text} {unit}"
    return None


def format_battery_range(start: Any, end: Any) -> Optional[str]:
    """'90% → 84%'; a missing end shows as '?'."""
    start_text = format_percent(start)
    if start_text is None:
        return None
    end_text = format_percent(end) or "?%"
    return f"{start_text} {ARROW} {end_text}"


def format_accuracy(meters: Any) -> Optional[str]:
    number = to_number(meters)
    if number is None:
        return None
    return f"{int(round(number))}m"


def format_coordinates(latitude: Any, longitude: Any) -> Optional[str]:
    lat = to_number(latitude)
    lng = to_number(longitude)
    # 0,0 is what the client sends when location was denied
    if lat is None or lng is None or (lat == 0 and lng == 0):
        return None
    return f"{lat:.4f}, {lng:.4f}"


def maps_link(latitude: Any, longitude: Any) -> Optional[str]:
    if format_coordinates(latitude, longitude) is None:
        return None
    return f"https://www.google.com/maps?q={to_number(latitude)},{to_number(longitude)}"
