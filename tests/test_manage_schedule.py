"""
Tests for scripts/manage_schedule.py.

The script is loaded by path (scripts/ is not a package). ScheduleClient is
patched to hand back the conftest client MagicMock, so main() runs the real
board against canned data.
"""
import asyncio
import importlib.util
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import echo_create, make_activity
from schedule_grid.errors import GridError, PermanentError
from schedule_grid.models import PlayerWeeklyAvailability

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "manage_schedule.py"


def _load_script():
    loader_info = importlib.util.spec_from_file_location("manage_schedule", SCRIPT_PATH)
    module = importlib.util.module_from_spec(loader_info)
    loader_info.loader.exec_module(module)
    return module


manage_schedule = _load_script()


@pytest.fixture
def run(monkeypatch, client):
    """Run main() with the given CLI arguments; returns the exit code."""
    monkeypatch.setattr(manage_schedule, "ScheduleClient", MagicMock(return_value=client))
    # Keep structlog on its test-wide setup; cached loggers must not point at
    # a per-test capture stream
    monkeypatch.setattr(manage_schedule, "setup_logging", MagicMock())

    def _run(*argv):
        monkeypatch.setattr(sys, "argv", ["manage_schedule.py", "--team", "team-1", *argv])
        args = manage_schedule._parse_args()
        return asyncio.run(manage_schedule.main(args))

    return _run


class TestParseCell:

    def test_day_and_slot_are_normalised(self, board):
        assert manage_schedule._parse_cell(board, "monday @ 3:00 pm") == board.cell(
            "Monday", "3:00 PM"
        )

    def test_missing_separator(self, board):
        with pytest.raises(GridError, match="DAY@SLOT"):
            manage_schedule._parse_cell(board, "Monday 3:00 PM")

    def test_slot_outside_grid(self, board):
        with pytest.raises(GridError):
            manage_schedule._parse_cell(board, "Monday@9:00 AM")


class TestShow:

    def test_table_shows_titles_and_headcounts(self, run, client, capsys):
        # Arrange
        client.list_activities.return_value = [
            make_activity("a1", day="Tuesday", time_slot="3:00 PM", title="Scrims"),
        ]
        client.get_player_availability.return_value = [
            PlayerWeeklyAvailability(
                player_id=p, week_start="2026-10-12", time_slots={"monday": {15: True}}
            )
            for p in ("p1", "p2")
        ]

        # Act
        code = run("--timezone", "UTC+1")

        # Assert
        out = capsys.readouterr().out
        three_pm = next(line for line in out.splitlines() if line.startswith("3:00 PM"))
        assert code == 0
        assert out.startswith("Time (CET)")
        assert "(2)" in three_pm
        assert "Scrims" in three_pm
        client.close.assert_called_once()

    def test_json_output(self, run, client, capsys):
        client.list_activities.return_value = [make_activity("a1")]

        code = run("--json")

        rows = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [r["id"] for r in rows] == ["a1"]
        assert rows[0]["type"] == "practice"

    def test_week_out_of_range(self, run, client):
        with pytest.raises(GridError, match="--week"):
            run("--week", "5")

        client.close.assert_called_once()


class TestPaint:

    def test_dry_run_sends_nothing(self, run, client, capsys):
        code = run("--paint", "Monday@3:00 PM", "Monday@5:00 PM", "--type", "practice")

        assert code == 0
        client.create_activity.assert_not_called()
        assert "[DRY-RUN] would create 3 activities" in capsys.readouterr().err

    def test_single_cell_dry_run(self, run, client, capsys):
        code = run("--paint", "Friday@8:00 PM", "Friday@8:00 PM", "--type", "meeting")

        assert code == 0
        client.create_activity.assert_not_called()
        assert "[DRY-RUN] would create 1 activity" in capsys.readouterr().err

    def test_execute_single_cell_uses_type_name(self, run, client):
        code = run(
            "--paint", "Friday@8:00 PM", "Friday@8:00 PM", "--type", "meeting", "--execute"
        )

        assert code == 0
        sent = client.create_activity.call_args.args[0]
        assert sent.title == "Team Meeting"
        assert sent.time_slot == "8:00 PM"

    def test_execute_with_failures_exits_one(self, run, client, capsys):
        client.create_activity.side_effect = echo_create(reject_slots={"4:00 PM"})

        code = run(
            "--paint", "Monday@3:00 PM", "Monday@5:00 PM",
            "--type", "practice", "--title", "Scrims", "--execute",
        )

        err = capsys.readouterr().err
        assert code == 1
        assert client.create_activity.call_count == 3
        assert "2 ok, 1 failed" in err
        assert "FAILED" in err

    def test_execute_all_created_exits_zero(self, run, client):
        code = run(
            "--paint", "Monday@3:00 PM", "Tuesday@4:00 PM", "--type", "practice", "--execute"
        )

        assert code == 0
        assert client.create_activity.call_count == 4

    def test_paint_needs_type(self, run, client):
        with pytest.raises(GridError, match="--type"):
            run("--paint", "Monday@3:00 PM", "Monday@5:00 PM")

        client.create_activity.assert_not_called()


class TestClear:

    @pytest.fixture(autouse=True)
    def two_activities(self, client):
        client.list_activities.return_value = [
            make_activity("a", day="Monday", time_slot="3:00 PM"),
            make_activity("b", day="Monday", time_slot="4:00 PM"),
        ]

    def test_dry_run_sends_nothing(self, run, client, capsys):
        code = run("--clear", "Monday@3:00 PM", "Monday@4:00 PM")

        assert code == 0
        client.delete_activity.assert_not_called()
        assert "[DRY-RUN] Delete 2 activities?" in capsys.readouterr().err

    def test_execute_with_failure_exits_one(self, run, client, capsys):
        def _delete(activity_id):
            if activity_id == "b":
                raise PermanentError("not found", 404)

        client.delete_activity.side_effect = _delete

        code = run("--clear", "Monday@3:00 PM", "Monday@4:00 PM", "--execute")

        assert code == 1
        assert client.delete_activity.call_count == 2
        assert "FAILED b: not found" in capsys.readouterr().err

    def test_clear_starting_on_empty_cell(self, run, client, capsys):
        code = run("--clear", "Sunday@3:00 PM", "Sunday@5:00 PM", "--execute")

        assert code == 0
        client.delete_activity.assert_not_called()
        assert "is empty" in capsys.readouterr().err
