"""
Unit tests for the bulk dispatcher.
"""
import asyncio

from conftest import TEAM_ID, WEEK, echo_create
from schedule_grid.dispatcher import BulkDispatcher, build_bulk_drafts
from schedule_grid.errors import PermanentError
from schedule_grid.grid import make_cell
from schedule_grid.models import ActivityType, Failed, Success


def _monday_cells(*slots):
    return [make_cell("Monday", slot, WEEK[0]) for slot in slots]


class TestBuildBulkDrafts:

    def test_drafts_are_dated_one_hour_activities(self):
        cells = _monday_cells("3:00 PM", "4:00 PM")

        drafts = build_bulk_drafts(TEAM_ID, cells, ActivityType.TOURNAMENT, "Cup", "Bring snacks")

        assert [cell for cell, _ in drafts] == cells
        for _, draft in drafts:
            assert draft.team_id == TEAM_ID
            assert draft.type == ActivityType.TOURNAMENT
            assert draft.title == "Cup"
            assert draft.description == "Bring snacks"
            assert draft.day_of_week == 1
            assert draft.duration == 1
            assert draft.activity_date == "2026-10-12"
        assert [d.time_slot for _, d in drafts] == ["3:00 PM", "4:00 PM"]


class TestCreateMany:

    def test_all_successes(self, client):
        cells = _monday_cells("3:00 PM", "4:00 PM", "5:00 PM")

        report = asyncio.run(
            BulkDispatcher(client).create_many(TEAM_ID, cells, ActivityType.PRACTICE, "Practice")
        )

        assert report.operation == "create"
        assert report.failure_count == 0
        assert len(report.created) == 3
        assert client.create_activity.call_count == 3

    def test_partial_failure_reports_each_item(self, client):
        # Arrange: 5 cells, the backend rejects 2 of them
        client.create_activity.side_effect = echo_create(reject_slots={"4:00 PM", "6:00 PM"})
        cells = _monday_cells("3:00 PM", "4:00 PM", "5:00 PM", "6:00 PM", "7:00 PM")

        # Act
        report = asyncio.run(
            BulkDispatcher(client).create_many(TEAM_ID, cells, ActivityType.PRACTICE, "Practice")
        )

        # Assert
        assert len(report.outcomes) == 5
        assert len(report.succeeded) == 3
        assert report.failure_count == 2
        assert {f.cell_key for f in report.failed} == {
            "2026-10-12-4:00 PM",
            "2026-10-12-6:00 PM",
        }
        assert all("rejected" in f.reason for f in report.failed)
        assert sorted(a.time_slot for a in report.created) == ["3:00 PM", "5:00 PM", "7:00 PM"]

    def test_outcomes_follow_cell_order(self, client):
        client.create_activity.side_effect = echo_create(reject_slots={"3:00 PM"})
        cells = _monday_cells("3:00 PM", "4:00 PM")

        report = asyncio.run(
            BulkDispatcher(client).create_many(TEAM_ID, cells, ActivityType.PRACTICE, "Practice")
        )

        assert isinstance(report.outcomes[0], Failed)
        assert isinstance(report.outcomes[1], Success)

    def test_empty_batch(self, client):
        report = asyncio.run(
            BulkDispatcher(client).create_many(TEAM_ID, [], ActivityType.PRACTICE, "Practice")
        )

        assert report.outcomes == []
        client.create_activity.assert_not_called()


class TestDeleteMany:

    def test_partial_failure_keeps_failed_ids_out_of_deleted(self, client):
        def _delete(activity_id):
            if activity_id == "b":
                raise PermanentError("DELETE /api/schedule/b returned 404: Not found", 404)

        client.delete_activity.side_effect = _delete

        report = asyncio.run(BulkDispatcher(client).delete_many(["a", "b", "c"]))

        assert report.operation == "delete"
        assert report.deleted_ids == {"a", "c"}
        assert report.failure_count == 1
        assert report.failed[0].activity_id == "b"
        assert "404" in report.failed[0].reason

    def test_exception_without_message_uses_type_name(self, client):
        client.delete_activity.side_effect = TimeoutError()

        report = asyncio.run(BulkDispatcher(client).delete_many(["a"]))

        assert report.failed[0].reason == "TimeoutError"
