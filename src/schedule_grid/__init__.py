"""Weekly team schedule grid for the esports team-management app.

Grid addressing, drag-selection, bulk create/delete against /api/schedule and
the player-availability overlay.
"""

from schedule_grid.board import BoardScope, ScheduleBoard
from schedule_grid.client import ScheduleClient
from schedule_grid.grid import DAYS, TIME_SLOTS, Cell, ScheduleGrid
from schedule_grid.models import ActivityType, BatchReport, ScheduleActivity
from schedule_grid.selection import DragSelection, SelectionMode

__all__ = [
    "ScheduleBoard",
    "BoardScope",
    "ScheduleClient",
    "ScheduleGrid",
    "Cell",
    "DAYS",
    "TIME_SLOTS",
    "DragSelection",
    "SelectionMode",
    "ActivityType",
    "ScheduleActivity",
    "BatchReport",
]
