"""Weekly schedule grid: 7 day columns x 12 one-hour rows.

Cells are addressed by (day, time_slot[, date]). A cell resolves to at most
one ScheduleActivity:

  - an activity with activity_date matches only that date + time_slot
    (one-off override inside the displayed week)
  - otherwise it matches day_of_week + time_slot (recurring weekly)

Dated activities take precedence over recurring ones on the same cell.
The backend does not promise uniqueness per cell; when several activities of
the same kind resolve to one cell the first one wins and a warning is logged.
"""

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, field_validator

from schedule_grid.errors import GridError
from schedule_grid.logging import get_logger
from schedule_grid.models import ScheduleActivity
from schedule_grid.timezone import ORG_ZONE, format_hour, parse_hour

log = get_logger(__name__)

DAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# 1:00 PM .. 11:00 PM, then midnight
TIME_SLOTS: tuple[str, ...] = tuple(format_hour(h) for h in range(13, 24)) + ("12:00 AM",)

_DATE_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-(.+)$")


class Cell(BaseModel):
    """One addressable grid cell. Hashable, so it can live in sets."""

    model_config = ConfigDict(frozen=True)

    day: str
    time_slot: str
    date: str | None = None  # YYYY-MM-DD of the displayed week

    @field_validator("day")
    @classmethod
    def _known_day(cls, value: str) -> str:
        if value not in DAYS:
            raise ValueError(f"Unknown day {value!r}")
        return value

    @field_validator("time_slot")
    @classmethod
    def _known_time_slot(cls, value: str) -> str:
        if value not in TIME_SLOTS:
            raise ValueError(f"Unknown time slot {value!r}")
        return value

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str | None) -> str | None:
        if value is not None:
            date.fromisoformat(value)
        return value

    @property
    def day_index(self) -> int:
        return DAYS.index(self.day)

    @property
    def time_index(self) -> int:
        return TIME_SLOTS.index(self.time_slot)

    @property
    def key(self) -> str:
        return cell_key(self)


def make_cell(day: str, time_slot: str, date_str: str | None = None) -> Cell:
    """Build a Cell, raising GridError instead of pydantic's ValidationError."""
    try:
        return Cell(day=day, time_slot=time_slot, date=date_str)
    except ValueError as e:
        raise GridError(f"Invalid cell ({day}, {time_slot}, {date_str}): {e}") from e


def cell_key(cell: Cell) -> str:
    """Selection-set key: "{date-or-day}-{time_slot}"."""
    return f"{cell.date or cell.day}-{cell.time_slot}"


def parse_cell_key(key: str) -> Cell:
    """Inverse of cell_key. The day of a dated key is derived from the date."""
    match = _DATE_PREFIX_RE.match(key)
    if match:
        date_str, time_slot = match.groups()
        try:
            weekday = date.fromisoformat(date_str).weekday()
        except ValueError as e:
            raise GridError(f"Malformed cell key {key!r}") from e
        return make_cell(DAYS[weekday], time_slot, date_str)

    day, sep, time_slot = key.partition("-")
    if not sep:
        raise GridError(f"Malformed cell key {key!r}")
    return make_cell(day, time_slot)


def time_slot_to_hour(time_slot: str) -> int:
    """Hour of a slot label: "1:00 PM" -> 13, "12:00 AM" -> 0."""
    hour = parse_hour(time_slot)
    if hour is None:
        raise GridError(f"Malformed time slot {time_slot!r}")
    return hour


def day_number(day: str) -> int:
    """Backend day_of_week for a day label (0 = Sunday, 1 = Monday, ...)."""
    if day not in DAYS:
        raise GridError(f"Unknown day {day!r}. Valid: {list(DAYS)}")
    return (DAYS.index(day) + 1) % 7


def day_name(number: int) -> str:
    """Day label for a backend day_of_week (0 = Sunday)."""
    if not 0 <= number <= 6:
        raise GridError(f"day_of_week must be 0-6, got {number}")
    return DAYS[(number - 1) % 7]


def org_today(now: datetime | None = None) -> date:
    """Today's date on the organisation's wall clock (Paris, with summer time).

    now defaults to the current instant; naive values are taken as UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(ORG_ZONE)).date()


def monday_of_week(week_offset: int = 0, today: date | None = None) -> date:
    """Monday of the week `week_offset` weeks after the one containing today."""
    today = today or org_today()
    return today - timedelta(days=today.weekday()) + timedelta(weeks=week_offset)


def week_dates(week_offset: int = 0, today: date | None = None) -> list[str]:
    """ISO dates Monday..Sunday of the displayed week."""
    monday = monday_of_week(week_offset, today)
    return [(monday + timedelta(days=i)).isoformat() for i in range(7)]


def _matches_dated(activity: ScheduleActivity, cell: Cell) -> bool:
    return (
        activity.activity_date is not None
        and activity.activity_date == cell.date
        and activity.time_slot == cell.time_slot
    )


def _matches_recurring(activity: ScheduleActivity, cell: Cell) -> bool:
    return (
        activity.activity_date is None
        and activity.day_of_week == day_number(cell.day)
        and activity.time_slot == cell.time_slot
    )


def find_activities(activities: list[ScheduleActivity], cell: Cell) -> list[ScheduleActivity]:
    """All activities resolving to a cell, dated ones first."""
    dated = [a for a in activities if _matches_dated(a, cell)]
    recurring = [a for a in activities if _matches_recurring(a, cell)]
    return dated + recurring


def find_activity(activities: list[ScheduleActivity], cell: Cell) -> ScheduleActivity | None:
    matches = find_activities(activities, cell)
    return matches[0] if matches else None


class ScheduleGrid:
    """The activity list joined against one displayed week.

    Built fresh from the board's activity list whenever it changes; holds no
    state of its own beyond that join.
    """

    def __init__(self, activities: list[ScheduleActivity], dates: list[str] | None = None) -> None:
        if dates is not None and len(dates) != len(DAYS):
            raise GridError(f"Expected {len(DAYS)} week dates, got {len(dates)}")
        self.activities = list(activities)
        self.dates = list(dates) if dates is not None else None
        self._by_cell: dict[Cell, ScheduleActivity] = {}
        self._cells = set(self.cells())

        for cell in self._cells:
            matches = find_activities(self.activities, cell)
            if not matches:
                continue
            self._by_cell[cell] = matches[0]
            # Several dated (or several recurring) matches is a double booking
            dated = [a for a in matches if a.activity_date is not None]
            recurring = [a for a in matches if a.activity_date is None]
            if len(dated) > 1 or len(recurring) > 1:
                log.warning(
                    "cell_double_booked",
                    cell=cell.key,
                    activity_ids=[a.id for a in matches],
                    kept=matches[0].id,
                )

    def cell(self, day_index: int, time_index: int) -> Cell:
        date_str = self.dates[day_index] if self.dates else None
        return Cell(day=DAYS[day_index], time_slot=TIME_SLOTS[time_index], date=date_str)

    def cells(self) -> list[Cell]:
        return [
            self.cell(d, t)
            for t in range(len(TIME_SLOTS))
            for d in range(len(DAYS))
        ]

    def locate(self, day: str, time_slot: str) -> Cell:
        """Cell of the displayed week for a day label and time slot."""
        target = make_cell(day, time_slot)
        return self.cell(target.day_index, target.time_index)

    def activity_at(self, cell: Cell) -> ScheduleActivity | None:
        if cell in self._cells:
            return self._by_cell.get(cell)
        # Cells from another week (or undated cells) fall back to a scan
        return find_activity(self.activities, cell)

    def is_occupied(self, cell: Cell) -> bool:
        return self.activity_at(cell) is not None

    def cells_in_rectangle(self, anchor: Cell, current: Cell) -> list[Cell]:
        """Every cell of the inclusive axis-aligned rectangle between two corners."""
        min_day = min(anchor.day_index, current.day_index)
        max_day = max(anchor.day_index, current.day_index)
        min_time = min(anchor.time_index, current.time_index)
        max_time = max(anchor.time_index, current.time_index)
        return [
            self.cell(d, t)
            for d in range(min_day, max_day + 1)
            for t in range(min_time, max_time + 1)
        ]

    def rows(self) -> list[tuple[str, list[tuple[Cell, ScheduleActivity | None]]]]:
        """Render order: one row per time slot, one (cell, activity) per day."""
        return [
            (
                time_slot,
                [
                    (cell, self.activity_at(cell))
                    for cell in (self.cell(d, t) for d in range(len(DAYS)))
                ],
            )
            for t, time_slot in enumerate(TIME_SLOTS)
        ]
