"""Show or edit a team's weekly schedule grid from the command line.

Loads the team's activities and player availability, prints the week as a
table, and can paint or clear a rectangle of cells the same way a drag on the
schedule page does. Writes are dry-run unless --execute is given.

Run with: python scripts/manage_schedule.py --team <team-uuid>
Next week: python scripts/manage_schedule.py --team <team-uuid> --week 1
JSON:      python scripts/manage_schedule.py --team <team-uuid> --json
Paint:     python scripts/manage_schedule.py --team <team-uuid> \\
               --paint "Monday@3:00 PM" "Wednesday@5:00 PM" --type practice --execute
Clear:     python scripts/manage_schedule.py --team <team-uuid> \\
               --clear "Monday@3:00 PM" "Wednesday@5:00 PM" --execute

Cells are written DAY@SLOT with slots in the org timezone (1:00 PM .. 12:00 AM).

Exit codes:
  0 = success
  1 = error (message on stderr), or some writes in a batch failed
"""

import argparse
import asyncio
import json
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add src/ to path so the script runs from a plain checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from schedule_grid.board import BoardScope, ScheduleBoard  # noqa: E402
from schedule_grid.client import ScheduleClient  # noqa: E402
from schedule_grid.config import get_config  # noqa: E402
from schedule_grid.errors import GridError, ScheduleError  # noqa: E402
from schedule_grid.grid import DAYS, Cell  # noqa: E402
from schedule_grid.logging import clear_board_context, setup_logging  # noqa: E402
from schedule_grid.models import ActivityType, BatchReport  # noqa: E402
from schedule_grid.timezone import timezone_short  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Show or edit a team's weekly schedule grid.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--team", required=True, help="Team id (uuid).")
    parser.add_argument(
        "--role",
        choices=["admin", "manager"],
        default="manager",
        help="Board permission mode (default: manager).",
    )
    parser.add_argument(
        "--week",
        type=int,
        default=0,
        help="Week offset from the current week (default: 0).",
    )
    parser.add_argument(
        "--timezone",
        default=None,
        help="Display timezone, UTC+0 .. UTC+3 (default: SCHEDULE_USER_TIMEZONE).",
    )

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--paint",
        nargs=2,
        metavar=("FROM", "TO"),
        help="Create activities in every empty cell of the rectangle FROM..TO.",
    )
    action_group.add_argument(
        "--clear",
        nargs=2,
        metavar=("FROM", "TO"),
        help="Delete every activity in the rectangle FROM..TO.",
    )
    action_group.add_argument(
        "--json",
        action="store_true",
        help="Print the team's activities as JSON instead of a table.",
    )

    parser.add_argument(
        "--type",
        choices=[t.value for t in ActivityType],
        default=None,
        help="Activity type for --paint.",
    )
    parser.add_argument("--title", default=None, help="Title for --paint (default: type name).")
    parser.add_argument("--description", default=None, help="Description for --paint.")
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Send the writes. Without it --paint/--clear only show what would change.",
    )
    return parser.parse_args()


def _parse_cell(board: ScheduleBoard, text: str) -> Cell:
    """'Monday@3:00 PM' -> the cell of the displayed week."""
    day, sep, time_slot = text.partition("@")
    if not sep:
        raise GridError(f"Cell {text!r} must look like DAY@SLOT, e.g. 'Monday@3:00 PM'")
    return board.cell(day.strip().title(), time_slot.strip().upper())


def _format_grid(board: ScheduleBoard) -> str:
    """Format the displayed week as a table: one row per slot, one column per day.

    A cell shows the activity title, or the available-player count as (n).
    """
    tz = timezone_short(board.user_timezone)
    headers = [f"Time ({tz})"] + [
        f"{day[:3]} {date_str[5:]}" for day, date_str in zip(DAYS, board.week_dates)
    ]

    rows = []
    for time_slot, cells in board.grid.rows():
        row = [board.display_time_slot(time_slot)]
        for cell, activity in cells:
            if activity is not None:
                row.append(activity.title)
            else:
                count = board.available_count(cell.day, time_slot)
                row.append(f"({count})" if count else "")
        rows.append(row)

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [
        " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows
    ]
    return "\n".join([header_line, separator, *row_lines])


def _report(report: BatchReport) -> bool:
    """Print a batch summary. Returns True if every item succeeded."""
    _log(
        f"  {report.operation}: {len(report.succeeded)} ok, "
        f"{report.failure_count} failed"
    )
    for failed in report.failed:
        _log(f"    FAILED {failed.cell_key or failed.activity_id}: {failed.reason}")
    return report.failure_count == 0


async def _paint(board: ScheduleBoard, args: argparse.Namespace) -> bool:
    if args.type is None:
        raise GridError("--paint needs --type")
    if not board.edit_mode:
        board.toggle_edit_mode()
    board.select_activity_type(args.type)

    start, end = _parse_cell(board, args.paint[0]), _parse_cell(board, args.paint[1])
    if not board.pointer_down(start):
        _log(f"  {start.key} is already taken, nothing to paint")
        return True
    board.pointer_enter(end)
    await board.pointer_up()

    if board.pending_draft is not None:
        # Single cell: same path as clicking one empty cell
        if not args.execute:
            _log(f"  [DRY-RUN] would create 1 activity at {start.key}")
            board.close_add_draft()
            return True
        activity = await board.add_activity(
            title=args.title or ActivityType(args.type).display_name,
            description=args.description,
        )
        _log(f"  created {activity.id} at {start.key}")
        return True

    pending = board.pending_bulk
    if pending is None:
        _log("  no empty cells in that range")
        return True
    if not args.execute:
        _log(f"  [DRY-RUN] would create {pending.size} activities:")
        for cell in pending.cells:
            _log(f"    {cell.key}")
        board.cancel_bulk_create()
        return True

    report = await board.confirm_bulk_create(args.title, args.description)
    return report is None or _report(report)


async def _clear(board: ScheduleBoard, args: argparse.Namespace) -> bool:
    if not board.edit_mode:
        board.toggle_edit_mode()
    board.toggle_delete_mode()

    start, end = _parse_cell(board, args.clear[0]), _parse_cell(board, args.clear[1])
    if not board.pointer_down(start):
        _log(f"  {start.key} is empty; a clear must start on an activity")
        return True
    board.pointer_enter(end)
    report = await board.pointer_up()
    if report is None:
        return True
    return _report(report)


async def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    def _confirm(message: str) -> bool:
        prefix = "" if args.execute else "[DRY-RUN] "
        _log(f"  {prefix}{message}")
        return args.execute

    client = ScheduleClient(config=config)
    board = ScheduleBoard(
        BoardScope(
            team_id=args.team,
            role=args.role,
            max_week_offset=config.max_week_offset,
        ),
        client,
        confirm=_confirm,
        user_timezone=args.timezone or config.user_timezone,
    )

    _log(f"manage_schedule: loading team {args.team}")
    try:
        await board.load()
        if args.week and not await board.go_to_week(args.week):
            raise GridError(
                f"--week must be between 0 and {board.scope.max_week_offset}"
            )

        ok = True
        if args.paint:
            ok = await _paint(board, args)
        elif args.clear:
            ok = await _clear(board, args)

        if args.json:
            print(json.dumps([a.model_dump(mode="json") for a in board.activities], indent=2))
        else:
            print(_format_grid(board))
    finally:
        clear_board_context()
        client.close()

    _log("manage_schedule: done")
    return 0 if ok else 1


if __name__ == "__main__":
    args = _parse_args()
    try:
        sys.exit(asyncio.run(main(args)))
    except ScheduleError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
