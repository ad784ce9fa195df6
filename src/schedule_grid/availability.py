"""Availability overlay: how many players can make a given cell."""

from schedule_grid.models import PlayerSummary, PlayerWeeklyAvailability
from schedule_grid.timezone import parse_hour


def _is_available(availability: PlayerWeeklyAvailability, day_key: str, hour: int) -> bool:
    day_slots = availability.time_slots.get(day_key) or {}
    return day_slots.get(hour) is True


def count_available_players(
    availabilities: list[PlayerWeeklyAvailability], day: str, time_slot: str
) -> int:
    """Count players marked available at this day and hour.

    Args:
        availabilities: Weekly availability records for the displayed week.
        day: Day label ("Monday").
        time_slot: Org-timezone slot label ("3:00 PM").

    Returns:
        Number of players whose time_slots[day][hour] is True. 0 if the
        slot label can't be parsed.
    """
    hour = parse_hour(time_slot)
    if hour is None:
        return 0
    day_key = day.lower()
    return sum(1 for a in availabilities if _is_available(a, day_key, hour))


def available_players(
    availabilities: list[PlayerWeeklyAvailability], day: str, time_slot: str
) -> list[PlayerSummary]:
    """The players behind count_available_players, where the player join is present."""
    hour = parse_hour(time_slot)
    if hour is None:
        return []
    day_key = day.lower()
    return [
        a.player
        for a in availabilities
        if a.player is not None and _is_available(a, day_key, hour)
    ]
