"""
Shared pytest fixtures for schedule grid tests.

Running tests:
    pytest tests/
"""
import itertools
import os
import sys
from datetime import date
from unittest.mock import MagicMock

import pytest

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from schedule_grid.board import BoardScope, ScheduleBoard
from schedule_grid.client import ScheduleClient
from schedule_grid.grid import ScheduleGrid, day_number, week_dates
from schedule_grid.models import ActivityDraft, ScheduleActivity

# Wednesday; the displayed week runs Monday 2026-10-12 .. Sunday 2026-10-18
TODAY = date(2026, 10, 14)
WEEK = week_dates(0, TODAY)
TEAM_ID = "team-1"


def make_activity(
    activity_id,
    day="Monday",
    time_slot="3:00 PM",
    activity_date=None,
    title="Practice",
    activity_type="practice",
):
    return ScheduleActivity(
        id=activity_id,
        team_id=TEAM_ID,
        type=activity_type,
        title=title,
        day_of_week=day_number(day),
        time_slot=time_slot,
        duration=1,
        activity_date=activity_date,
    )


def make_grid(*activities):
    return ScheduleGrid(list(activities), WEEK)


def echo_create(reject_slots=()):
    """side_effect for create_activity: echo the draft back with a fresh id.

    Drafts whose time_slot is in reject_slots raise instead.
    """
    counter = itertools.count(1)

    def _create(draft: ActivityDraft):
        if draft.time_slot in reject_slots:
            raise RuntimeError(f"rejected {draft.time_slot}")
        return ScheduleActivity(id=f"new-{next(counter)}", **draft.model_dump())

    return _create


@pytest.fixture
def client():
    """ScheduleClient stand-in with an empty schedule and no availability."""
    fake = MagicMock(spec=ScheduleClient)
    fake.list_activities.return_value = []
    fake.get_player_availability.return_value = []
    fake.list_responses.return_value = []
    fake.create_activity.side_effect = echo_create()
    fake.delete_activity.return_value = None
    return fake


@pytest.fixture
def confirm():
    """confirm() callback that accepts and records its prompts."""
    return MagicMock(return_value=True)


@pytest.fixture
def board(client, confirm):
    """Manager board for TEAM_ID, displaying the week of TODAY."""
    return ScheduleBoard(
        BoardScope(team_id=TEAM_ID, role="manager"),
        client,
        confirm=confirm,
        today=TODAY,
    )
