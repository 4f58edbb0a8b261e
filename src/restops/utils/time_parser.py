"""Service hour helpers for revenue imports."""

import re
from datetime import time
from typing import Optional, Union

_HOUR_MINUTES = re.compile(r"^(\d{1,2}):(\d{1,2})$")
_HOUR_H_MINUTES = re.compile(r"^(\d{1,2})H(\d{1,2})$")
_HOUR_ONLY = re.compile(r"^(\d{1,2})H?$")

# Sales rung up after midnight belong to the late evening service.
LATE_NIGHT_LAST_HOUR = 3
LATE_NIGHT_MINUTES = 23 * 60


def format_hour(text: Optional[str]) -> str:
    """Normalise an hour to HH:MM.

    "7:00" -> "07:00", "7H30" -> "07:30", "7" and "7H" -> "07:00".
    Unrecognised values are returned upper-cased.
    """
    if not text:
        return ""
    value = text.strip().upper()

    for pattern in (_HOUR_MINUTES, _HOUR_H_MINUTES):
        match = pattern.match(value)
        if match:
            return f"{int(match.group(1)):02d}:{int(match.group(2)):02d}"

    match = _HOUR_ONLY.match(value)
    if match:
        return f"{int(match.group(1)):02d}:00"
    return value


def to_minutes(value: Union[str, time, None]) -> Optional[int]:
    """Minutes since midnight for "HH:MM[:SS]" text or a time."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]) * 60 + int(parts[1])
    except ValueError:
        return None


def hour_in_slot(hour: Union[str, time], start: Union[str, time], end: Union[str, time]) -> bool:
    """Return True when hour falls within the [start, end] service slot.

    Hours between 00:00 and 03:59 are treated as 23:00. A slot whose end is
    before its start wraps past midnight.
    """
    minutes = to_minutes(hour)
    start_minutes = to_minutes(start)
    end_minutes = to_minutes(end)
    if minutes is None or start_minutes is None or end_minutes is None:
        return False

    if minutes // 60 <= LATE_NIGHT_LAST_HOUR:
        minutes = LATE_NIGHT_MINUTES

    if end_minutes < start_minutes:
        return minutes >= start_minutes or minutes <= end_minutes
    return start_minutes <= minutes <= end_minutes
