"""Bulk dispatcher: one HTTP write per selected cell, all in flight at once.

Each request runs in a worker thread (the client is a blocking
requests.Session) and the batch waits on asyncio.gather. Every item ends as a
tagged outcome, Success or Failed(reason); no exception escapes a batch.
Requests are not ordered, retried or cancelled.
"""

import asyncio

from schedule_grid.client import ScheduleClient
from schedule_grid.grid import Cell, day_number
from schedule_grid.logging import get_logger
from schedule_grid.models import (
    ActivityDraft,
    ActivityType,
    BatchReport,
    Failed,
    Success,
)

log = get_logger(__name__)


def build_bulk_drafts(
    team_id: str,
    cells: list[Cell],
    activity_type: ActivityType,
    title: str,
    description: str | None = None,
) -> list[tuple[Cell, ActivityDraft]]:
    """One-hour drafts sharing type/title/description, one per cell."""
    return [
        (
            cell,
            ActivityDraft(
                team_id=team_id,
                type=activity_type,
                title=title,
                description=description,
                day_of_week=day_number(cell.day),
                time_slot=cell.time_slot,
                duration=1,
                activity_date=cell.date,
            ),
        )
        for cell in cells
    ]


class BulkDispatcher:
    def __init__(self, client: ScheduleClient) -> None:
        self.client = client

    async def _create_one(self, cell: Cell, draft: ActivityDraft) -> Success | Failed:
        try:
            activity = await asyncio.to_thread(self.client.create_activity, draft)
        except Exception as e:
            log.warning("bulk_create_item_failed", cell=cell.key, error=str(e))
            return Failed(reason=str(e) or type(e).__name__, cell_key=cell.key)
        return Success(activity_id=activity.id, activity=activity)

    async def _delete_one(self, activity_id: str) -> Success | Failed:
        try:
            await asyncio.to_thread(self.client.delete_activity, activity_id)
        except Exception as e:
            log.warning("bulk_delete_item_failed", activity_id=activity_id, error=str(e))
            return Failed(reason=str(e) or type(e).__name__, activity_id=activity_id)
        return Success(activity_id=activity_id)

    async def create_many(
        self,
        team_id: str,
        cells: list[Cell],
        activity_type: ActivityType,
        title: str,
        description: str | None = None,
    ) -> BatchReport:
        """POST one activity per cell concurrently.

        Args:
            team_id: Team the activities belong to.
            cells: Empty cells to fill; each becomes a dated one-hour activity.
            activity_type: Shared type.
            title: Shared title.
            description: Shared description.

        Returns:
            BatchReport with one outcome per cell, in cell order.
        """
        drafts = build_bulk_drafts(team_id, cells, activity_type, title, description)
        outcomes = await asyncio.gather(
            *(self._create_one(cell, draft) for cell, draft in drafts)
        )
        report = BatchReport(operation="create", outcomes=list(outcomes))
        log.info(
            "bulk_create_finished",
            team_id=team_id,
            requested=len(cells),
            created=len(report.succeeded),
            failed=report.failure_count,
        )
        return report

    async def delete_many(self, activity_ids: list[str]) -> BatchReport:
        """DELETE every activity id concurrently."""
        outcomes = await asyncio.gather(
            *(self._delete_one(activity_id) for activity_id in activity_ids)
        )
        report = BatchReport(operation="delete", outcomes=list(outcomes))
        log.info(
            "bulk_delete_finished",
            requested=len(activity_ids),
            deleted=len(report.succeeded),
            failed=report.failure_count,
        )
        return report
