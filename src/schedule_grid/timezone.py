"""Timezone display helper.

All activities are stored with time-slot labels in the organisation timezone
(UTC+1, CET). Users view the grid in one of four fixed offsets; only the
labels shown to them change, storage always uses the org labels.
"""

import re
from typing import Literal

from schedule_grid.errors import GridError

TimezoneOffset = Literal["UTC+0", "UTC+1", "UTC+2", "UTC+3"]

ORG_TIMEZONE: TimezoneOffset = "UTC+1"
# Where the org's calendar week turns over; follows CET/CEST
ORG_ZONE = "Europe/Paris"
DEFAULT_TIMEZONE: TimezoneOffset = "UTC+1"

# Offset from UTC in hours, per supported timezone
UTC_OFFSETS: dict[str, int] = {
    "UTC+0": 0,
    "UTC+1": 1,
    "UTC+2": 2,
    "UTC+3": 3,
}

TIMEZONE_SHORT: dict[str, str] = {
    "UTC+0": "GMT",
    "UTC+1": "CET",
    "UTC+2": "EET",
    "UTC+3": "MSK",
}

_SLOT_RE = re.compile(r"^(\d{1,2}):00 (AM|PM)$")


def hour_offset(user_timezone: str) -> int:
    """Hours the user timezone is ahead of the org timezone (UTC+0 -> -1)."""
    if user_timezone not in UTC_OFFSETS:
        raise GridError(f"Unknown timezone {user_timezone!r}. Valid: {list(UTC_OFFSETS)}")
    return UTC_OFFSETS[user_timezone] - UTC_OFFSETS[ORG_TIMEZONE]


def convert_hour_to_user_timezone(hour: int, user_timezone: str) -> int:
    return (hour + hour_offset(user_timezone)) % 24


def convert_hour_to_org_timezone(hour: int, user_timezone: str) -> int:
    return (hour - hour_offset(user_timezone)) % 24


def parse_hour(time_slot: str) -> int | None:
    """Convert "1:00 PM" to 13, "12:00 AM" to 0. None if the label is malformed."""
    match = _SLOT_RE.match(time_slot.strip())
    if not match:
        return None
    hour = int(match.group(1))
    period = match.group(2)
    if hour < 1 or hour > 12:
        return None
    if period == "AM" and hour == 12:
        return 0
    if period == "PM" and hour != 12:
        return hour + 12
    return hour


def format_hour(hour: int) -> str:
    """Format hour (0-23) as "X:00 AM/PM"."""
    hour = hour % 24
    if hour == 0:
        return "12:00 AM"
    if hour == 12:
        return "12:00 PM"
    if hour < 12:
        return f"{hour}:00 AM"
    return f"{hour - 12}:00 PM"


def convert_time_slot_to_user_timezone(time_slot: str, user_timezone: str) -> str:
    """Shift an org-timezone label into the user's timezone.

    "3:00 PM" with UTC+0 -> "2:00 PM". Malformed labels are returned unchanged.
    """
    hour = parse_hour(time_slot)
    if hour is None:
        return time_slot
    return format_hour(convert_hour_to_user_timezone(hour, user_timezone))


def timezone_short(user_timezone: str) -> str:
    return TIMEZONE_SHORT.get(user_timezone, user_timezone)
