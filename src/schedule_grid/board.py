"""ScheduleBoard - the team schedule editor behind the weekly grid.

One controller serves both admin and manager views; BoardScope carries the
differences:

  - admin: starts read-only, edit mode must be switched on before painting,
    "practice" is pre-selected as the activity type
  - manager: always editable, no activity type until one is picked

The host wires pointer events once for the board's lifetime
(pointer_down / pointer_enter / pointer_up / focus_lost); the DragSelection
machine decides what each event means.

Local state is reconciled only from actual request outcomes: a failed create
adds nothing, a failed delete keeps its activity on the grid.
"""

import asyncio
from collections import Counter
from collections.abc import Callable
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from schedule_grid.availability import available_players, count_available_players
from schedule_grid.client import ScheduleClient
from schedule_grid.dispatcher import BulkDispatcher
from schedule_grid.errors import ValidationError
from schedule_grid.grid import Cell, ScheduleGrid, day_number, week_dates
from schedule_grid.logging import bind_board_context, get_logger
from schedule_grid.models import (
    ActivityDraft,
    ActivityResponse,
    ActivityType,
    ActivityUpdate,
    BatchReport,
    PlayerSummary,
    PlayerWeeklyAvailability,
    ScheduleActivity,
)
from schedule_grid.selection import DragSelection, PendingAction, SelectionMode
from schedule_grid.timezone import DEFAULT_TIMEZONE, convert_time_slot_to_user_timezone

log = get_logger(__name__)


class BoardScope(BaseModel):
    team_id: str
    role: Literal["admin", "manager"] = "manager"
    max_week_offset: int = Field(default=2, ge=0)


def _accept(message: str) -> bool:
    return True


class ScheduleBoard:
    """Weekly schedule editor for one team."""

    def __init__(
        self,
        scope: BoardScope,
        client: ScheduleClient,
        *,
        confirm: Callable[[str], bool] | None = None,
        user_timezone: str = DEFAULT_TIMEZONE,
        today: date | None = None,
    ) -> None:
        self.scope = scope
        self.client = client
        self.dispatcher = BulkDispatcher(client)
        self.confirm = confirm or _accept
        self.user_timezone = user_timezone
        self.today = today

        self.activities: list[ScheduleActivity] = []
        self.availabilities: list[PlayerWeeklyAvailability] = []
        self.week_offset = 0
        self.week_dates = week_dates(0, today)
        self.loading = False

        self.edit_mode = scope.role == "manager"
        self.selection = DragSelection()
        if scope.role == "admin":
            self.selection.activity_type = ActivityType.PRACTICE

        # Open "modals": a bulk-create awaiting title/description, a single-cell draft
        self.pending_bulk: PendingAction | None = None
        self.pending_draft: ActivityDraft | None = None
        self.last_report: BatchReport | None = None

        self._grid: ScheduleGrid | None = None

    # ------------------------------------------------------------------
    # Loading and derived views
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Fetch the team's activities and this week's player availability."""
        bind_board_context(self.scope.team_id, self.week_dates[0])
        self.loading = True
        try:
            activities = await asyncio.to_thread(
                self.client.list_activities, self.scope.team_id
            )
            self._set_activities(activities)
            await self.load_availability()
        finally:
            self.loading = False

    async def load_availability(self) -> None:
        self.availabilities = await asyncio.to_thread(
            self.client.get_player_availability, self.scope.team_id, self.week_dates[0]
        )

    @property
    def grid(self) -> ScheduleGrid:
        if self._grid is None:
            self._grid = ScheduleGrid(self.activities, self.week_dates)
        return self._grid

    def cell(self, day: str, time_slot: str) -> Cell:
        return self.grid.locate(day, time_slot)

    def _set_activities(self, activities: list[ScheduleActivity]) -> None:
        self.activities = list(activities)
        self._grid = None

    def available_count(self, day: str, time_slot: str) -> int:
        return count_available_players(self.availabilities, day, time_slot)

    def available_players(self, day: str, time_slot: str) -> list[PlayerSummary]:
        return available_players(self.availabilities, day, time_slot)

    def display_time_slot(self, time_slot: str) -> str:
        return convert_time_slot_to_user_timezone(time_slot, self.user_timezone)

    async def responses_for(
        self, activity_id: str
    ) -> tuple[list[ActivityResponse], dict[str, int]]:
        """Attendance answers for an activity, plus counts per status."""
        responses = await asyncio.to_thread(self.client.list_responses, activity_id)
        counts = Counter(r.status for r in responses)
        summary = {status: counts.get(status, 0) for status in ("available", "unavailable", "maybe")}
        return responses, summary

    # ------------------------------------------------------------------
    # Modes and navigation
    # ------------------------------------------------------------------

    def toggle_edit_mode(self) -> None:
        self.edit_mode = not self.edit_mode
        self.selection.set_mode(SelectionMode.CREATE)
        self.pending_bulk = None

    def toggle_delete_mode(self) -> None:
        if self.selection.mode == SelectionMode.DELETE:
            self.selection.set_mode(SelectionMode.CREATE)
        else:
            self.selection.set_mode(SelectionMode.DELETE)
            self.edit_mode = True
        self.pending_bulk = None

    @property
    def delete_mode(self) -> bool:
        return self.selection.mode == SelectionMode.DELETE

    def select_activity_type(self, activity_type: ActivityType | str | None) -> None:
        self.selection.activity_type = ActivityType(activity_type) if activity_type else None

    async def go_to_week(self, offset: int) -> bool:
        """Display another week. Returns False if the offset is out of range."""
        if not 0 <= offset <= self.scope.max_week_offset:
            return False
        self.selection.cancel()
        self.week_offset = offset
        self.week_dates = week_dates(offset, self.today)
        bind_board_context(self.scope.team_id, self.week_dates[0])
        self._grid = None
        await self.load_availability()
        return True

    async def next_week(self) -> bool:
        return await self.go_to_week(self.week_offset + 1)

    async def previous_week(self) -> bool:
        return await self.go_to_week(self.week_offset - 1)

    async def current_week(self) -> bool:
        return await self.go_to_week(0)

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, cell: Cell) -> bool:
        if not self.edit_mode or self.loading:
            return False
        return self.selection.press(self.grid, cell)

    def pointer_enter(self, cell: Cell) -> bool:
        return self.selection.enter(cell)

    def focus_lost(self) -> None:
        self.selection.cancel()

    async def pointer_up(self) -> BatchReport | None:
        """Finish a drag.

        CREATE: a drag opens the bulk-create confirmation (pending_bulk); a
        plain click on an empty cell opens the single-cell draft instead.
        DELETE: asks confirm() and runs the batch delete if accepted.

        Returns:
            The delete BatchReport when a delete batch ran, otherwise None.
        """
        action = self.selection.release()
        if action is None:
            return None

        if action.mode == SelectionMode.CREATE:
            if not action.was_drag and len(action.cells) == 1:
                self.open_add_draft(action.cells[0])
            else:
                self.pending_bulk = action
                log.info("bulk_create_pending", cells=len(action.cells))
            return None

        if not self.confirm(self._delete_prompt(action.activity_ids)):
            log.info("bulk_delete_declined", count=len(action.activity_ids))
            return None
        return await self._run_bulk_delete(action.activity_ids)

    def _delete_prompt(self, activity_ids: list[str]) -> str:
        if len(activity_ids) == 1:
            activity = self._find(activity_ids[0])
            if activity is not None:
                return f'Delete "{activity.title}"?'
        return f"Delete {len(activity_ids)} activities?"

    # ------------------------------------------------------------------
    # Bulk paths
    # ------------------------------------------------------------------

    def default_bulk_title(self) -> str:
        if self.pending_bulk and self.pending_bulk.activity_type:
            return self.pending_bulk.activity_type.display_name
        return "Activity"

    def cancel_bulk_create(self) -> None:
        self.pending_bulk = None

    async def confirm_bulk_create(
        self, title: str | None = None, description: str | None = None
    ) -> BatchReport | None:
        """Create one activity per pending cell.

        Args:
            title: Shared title; defaults to the activity type's display name.
            description: Shared description.

        Returns:
            BatchReport, or None when no bulk create was pending or another
            batch is still running (the pending cells stay open).
        """
        if self.loading:
            log.info("bulk_create_deferred", reason="batch_in_flight")
            return None
        action = self.pending_bulk
        if action is None or action.activity_type is None or not action.cells:
            return None
        title = title or self.default_bulk_title()
        # Close the modal before awaiting so a second confirm is a no-op
        self.pending_bulk = None

        self.loading = True
        try:
            report = await self.dispatcher.create_many(
                self.scope.team_id,
                action.cells,
                action.activity_type,
                title,
                description or None,
            )
        finally:
            self.loading = False

        self._set_activities(self.activities + report.created)
        self.last_report = report
        if self.scope.role == "manager":
            self.selection.activity_type = None
        return report

    async def _run_bulk_delete(self, activity_ids: list[str]) -> BatchReport:
        self.loading = True
        try:
            report = await self.dispatcher.delete_many(activity_ids)
        finally:
            self.loading = False

        deleted = report.deleted_ids
        self._set_activities([a for a in self.activities if a.id not in deleted])
        self.last_report = report
        if self.scope.role == "manager" and not report.failed:
            self.selection.set_mode(SelectionMode.CREATE)
        return report

    # ------------------------------------------------------------------
    # Single-item paths
    # ------------------------------------------------------------------

    def open_add_draft(self, cell: Cell) -> ActivityDraft | None:
        """Start a single-cell activity. None if no activity type is selected."""
        activity_type = self.selection.activity_type
        if activity_type is None and self.scope.role == "admin":
            activity_type = ActivityType.PRACTICE
        if activity_type is None:
            return None
        # Title is filled in by the user before add_activity()
        self.pending_draft = ActivityDraft.model_construct(
            team_id=self.scope.team_id,
            type=activity_type,
            title="",
            description=None,
            day_of_week=day_number(cell.day),
            time_slot=cell.time_slot,
            duration=1,
            activity_date=cell.date,
        )
        return self.pending_draft

    def close_add_draft(self) -> None:
        self.pending_draft = None

    async def add_activity(
        self,
        draft: ActivityDraft | None = None,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> ScheduleActivity:
        """Create one activity (the pending draft by default).

        Args:
            draft: Activity to create; defaults to pending_draft.
            title: Overrides the draft's title.
            description: Overrides the draft's description.

        Raises:
            ValidationError: Title or type missing; nothing is sent.
            ScheduleError: The request failed.
        """
        draft = draft or self.pending_draft
        if draft is None:
            raise ValidationError("No activity to create")
        overrides = {k: v for k, v in (("title", title), ("description", description)) if v}
        fields = {**draft.model_dump(), **overrides}
        _require_fields(fields.get("title"), fields.get("type"))
        draft = ActivityDraft.model_validate(fields)

        activity = await asyncio.to_thread(self.client.create_activity, draft)
        self._set_activities(self.activities + [activity])
        self.pending_draft = None
        log.info("activity_created", activity_id=activity.id, time_slot=activity.time_slot)
        return activity

    async def update_activity(
        self, activity_id: str, update: ActivityUpdate
    ) -> ScheduleActivity:
        """Save an edited activity and replace it in the local list.

        Raises:
            ValidationError: Title or type missing; nothing is sent.
            ScheduleError: The request failed.
        """
        _require_fields(update.title, update.type)
        activity = await asyncio.to_thread(self.client.update_activity, activity_id, update)
        self._set_activities(
            [activity if a.id == activity_id else a for a in self.activities]
        )
        log.info("activity_updated", activity_id=activity_id)
        return activity

    async def delete_activity(self, activity_id: str) -> bool:
        """Delete one activity after confirm(). Returns False if declined.

        Raises:
            ScheduleError: The request failed; the activity stays on the grid.
        """
        if not self.confirm(self._delete_prompt([activity_id])):
            return False
        await asyncio.to_thread(self.client.delete_activity, activity_id)
        self._set_activities([a for a in self.activities if a.id != activity_id])
        log.info("activity_deleted", activity_id=activity_id)
        return True

    def _find(self, activity_id: str) -> ScheduleActivity | None:
        return next((a for a in self.activities if a.id == activity_id), None)


def _require_fields(title: str | None, activity_type: ActivityType | str | None) -> None:
    missing = [name for name, value in (("title", title), ("type", activity_type)) if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
