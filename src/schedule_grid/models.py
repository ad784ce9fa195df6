"""Pydantic models for schedule data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Field names follow the backend's JSON bodies (snake_case columns).
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ActivityType(str, Enum):
    PRACTICE = "practice"
    INDIVIDUAL_TRAINING = "individual_training"
    GROUP_TRAINING = "group_training"
    OFFICIAL_MATCH = "official_match"
    TOURNAMENT = "tournament"
    MEETING = "meeting"

    @property
    def display_name(self) -> str:
        return ACTIVITY_TYPE_NAMES[self]


ACTIVITY_TYPE_NAMES: dict[ActivityType, str] = {
    ActivityType.PRACTICE: "Practice",
    ActivityType.INDIVIDUAL_TRAINING: "Individual Training",
    ActivityType.GROUP_TRAINING: "Group Training",
    ActivityType.OFFICIAL_MATCH: "Official Match",
    ActivityType.TOURNAMENT: "Tournament",
    ActivityType.MEETING: "Team Meeting",
}


class ScheduleActivity(BaseModel):
    """A single scheduled team event occupying one grid cell.

    Either recurring (matched by day_of_week every displayed week) or dated
    (activity_date set, matched only on that calendar day).
    """

    id: str
    team_id: str
    type: ActivityType
    title: str
    description: str | None = None
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday, 1 = Monday, ...
    time_slot: str  # "3:00 PM"
    duration: int = Field(default=1, ge=1, le=6)  # hours
    activity_date: str | None = None  # "2026-10-19", overrides day_of_week
    created_by: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ActivityUpdate(BaseModel):
    """Body of PUT /api/schedule/:id."""

    type: ActivityType
    title: str
    description: str | None = None
    day_of_week: int = Field(ge=0, le=6)
    time_slot: str
    duration: int = Field(default=1, ge=1, le=6)
    activity_date: str | None = None


class ActivityDraft(ActivityUpdate):
    """Body of POST /api/schedule."""

    team_id: str


class PlayerSummary(BaseModel):
    id: str
    username: str | None = None
    in_game_name: str | None = None
    avatar_url: str | None = None

    @property
    def label(self) -> str:
        return self.in_game_name or self.username or self.id


class PlayerWeeklyAvailability(BaseModel):
    """One player's hourly availability for a week.

    time_slots maps a lowercase day name to {hour: available}, e.g.
    {"monday": {15: True, 16: False}}. JSON object keys arrive as strings and
    are coerced to int. A day whose value is null or not an object is kept as
    None and counts as no availability.
    """

    id: str | None = None
    player_id: str
    team_id: str | None = None
    week_start: str
    time_slots: dict[str, dict[int, bool] | None] = Field(default_factory=dict)
    notes: str | None = None
    player: PlayerSummary | None = None

    @field_validator("time_slots", mode="before")
    @classmethod
    def _drop_malformed_days(cls, value):
        if not isinstance(value, dict):
            return {}
        return {day: slots if isinstance(slots, dict) else None for day, slots in value.items()}


class ActivityResponse(BaseModel):
    """A player's attendance answer for one activity."""

    id: str
    activity_id: str
    player_id: str
    status: Literal["available", "unavailable", "maybe"]
    notes: str | None = None
    player: PlayerSummary | None = None


class Success(BaseModel):
    """A batch item whose request returned 2xx."""

    status: Literal["success"] = "success"
    activity_id: str
    activity: ScheduleActivity | None = None  # set for creates, None for deletes


class Failed(BaseModel):
    """A batch item whose request raised or returned non-2xx."""

    status: Literal["failed"] = "failed"
    reason: str
    activity_id: str | None = None  # set for deletes
    cell_key: str | None = None  # set for creates


RequestOutcome = Success | Failed


class BatchReport(BaseModel):
    """Per-item outcomes of one bulk create or bulk delete."""

    operation: Literal["create", "delete"]
    outcomes: list[Success | Failed] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[Success]:
        return [o for o in self.outcomes if isinstance(o, Success)]

    @property
    def failed(self) -> list[Failed]:
        return [o for o in self.outcomes if isinstance(o, Failed)]

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def created(self) -> list[ScheduleActivity]:
        return [o.activity for o in self.succeeded if o.activity is not None]

    @property
    def deleted_ids(self) -> set[str]:
        return {o.activity_id for o in self.succeeded}
