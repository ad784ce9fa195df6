"""Drag-selection state machine for painting and clearing grid cells.

    IDLE --press(valid cell)--> ANCHORED --enter(other cell)--> SPANNING
      ^                             |                               |
      +-------- release() / cancel() ------------------------------+

Every enter() recomputes the rectangle between the anchor and the current
cell and rebuilds the selection from scratch. The grid is at most 7 x 12
cells, so that scan is cheap.

release() always drops back to IDLE before handing back the pending action,
so repeated pointer-up events after one drag yield at most one action.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from schedule_grid.grid import Cell, ScheduleGrid
from schedule_grid.logging import get_logger
from schedule_grid.models import ActivityType

log = get_logger(__name__)


class SelectionMode(str, Enum):
    CREATE = "create"  # paint empty cells
    DELETE = "delete"  # mark occupied cells


class DragState(str, Enum):
    IDLE = "idle"
    ANCHORED = "anchored"
    SPANNING = "spanning"


class PendingAction(BaseModel):
    """What a finished drag asks the board to do."""

    model_config = ConfigDict(frozen=True)

    mode: SelectionMode
    cells: list[Cell] = Field(default_factory=list)  # CREATE: empty cells to fill
    activity_ids: list[str] = Field(default_factory=list)  # DELETE: records to remove
    activity_type: ActivityType | None = None
    was_drag: bool = True  # False for press + release on the anchor cell

    @property
    def size(self) -> int:
        return len(self.cells) if self.mode == SelectionMode.CREATE else len(self.activity_ids)


class DragSelection:
    """Tracks one drag over a ScheduleGrid.

    The grid is captured at press time; the activity list doesn't change while
    the pointer is held down.
    """

    def __init__(self, mode: SelectionMode = SelectionMode.CREATE) -> None:
        self.mode = mode
        self.activity_type: ActivityType | None = None
        self.state = DragState.IDLE
        self.anchor: Cell | None = None
        self.current: Cell | None = None
        self._grid: ScheduleGrid | None = None
        self._selected: dict[str, Cell] = {}
        self._marked: dict[str, None] = {}

    @property
    def selected_keys(self) -> set[str]:
        """Keys of empty cells selected for creation."""
        return set(self._selected)

    @property
    def selected_cells(self) -> list[Cell]:
        return list(self._selected.values())

    @property
    def marked_ids(self) -> set[str]:
        """Activity ids marked for deletion."""
        return set(self._marked)

    @property
    def is_dragging(self) -> bool:
        return self.state != DragState.IDLE

    def set_mode(self, mode: SelectionMode) -> None:
        self.cancel()
        self.mode = mode

    def press(self, grid: ScheduleGrid, cell: Cell) -> bool:
        """Pointer-down on a cell. Returns True if a drag was anchored."""
        if self.state != DragState.IDLE:
            return False

        activity = grid.activity_at(cell)
        if self.mode == SelectionMode.CREATE:
            if self.activity_type is None:
                log.debug("press_ignored", reason="no_activity_type", cell=cell.key)
                return False
            if activity is not None:
                log.debug("press_ignored", reason="cell_occupied", cell=cell.key)
                return False
            self._selected = {cell.key: cell}
            self._marked = {}
        else:
            if activity is None:
                log.debug("press_ignored", reason="cell_empty", cell=cell.key)
                return False
            self._marked = {activity.id: None}
            self._selected = {}

        self._grid = grid
        self.anchor = cell
        self.current = cell
        self.state = DragState.ANCHORED
        return True

    def enter(self, cell: Cell) -> bool:
        """Pointer-enter on a cell while dragging. Returns True if the span was recomputed."""
        if self.state == DragState.IDLE or self.anchor is None or self._grid is None:
            return False

        self.current = cell
        if cell != self.anchor:
            self.state = DragState.SPANNING

        selected: dict[str, Cell] = {}
        marked: dict[str, None] = {}
        for span_cell in self._grid.cells_in_rectangle(self.anchor, cell):
            activity = self._grid.activity_at(span_cell)
            if self.mode == SelectionMode.CREATE:
                if activity is None:
                    selected[span_cell.key] = span_cell
            elif activity is not None:
                marked[activity.id] = None

        self._selected = selected
        self._marked = marked
        return True

    def release(self) -> PendingAction | None:
        """Pointer-up anywhere. Resets to IDLE and returns the action, if any."""
        if self.state == DragState.IDLE:
            return None

        was_drag = self.state == DragState.SPANNING
        action = None
        if self.mode == SelectionMode.CREATE and self._selected:
            action = PendingAction(
                mode=self.mode,
                cells=list(self._selected.values()),
                activity_type=self.activity_type,
                was_drag=was_drag,
            )
        elif self.mode == SelectionMode.DELETE and self._marked:
            action = PendingAction(
                mode=self.mode,
                activity_ids=list(self._marked),
                was_drag=was_drag,
            )

        self._reset()
        log.debug(
            "drag_released",
            mode=self.mode.value,
            size=action.size if action else 0,
            was_drag=was_drag,
        )
        return action

    def cancel(self) -> None:
        """Focus lost or mode switched: drop the drag and its selection."""
        if self.state != DragState.IDLE:
            log.debug("drag_cancelled", mode=self.mode.value)
        self._reset()

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.anchor = None
        self.current = None
        self._grid = None
        self._selected = {}
        self._marked = {}
