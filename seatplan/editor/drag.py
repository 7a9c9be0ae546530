"""
Pointer gesture handling for tables on the canvas.

A pointer-down only arms a drag. The table starts following the pointer
once it has travelled more than ``threshold`` screen pixels; releasing
before that counts as a click and selects the table. Pointer coordinates
are canvas-relative screen pixels, table coordinates are canvas units, so
every conversion divides by the zoom factor.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from seatplan.editor.layout import Layout, Table

DRAG_THRESHOLD = 5.0


class DragState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DRAGGING = "dragging"


class GestureAction(str, Enum):
    NONE = "none"
    SELECT = "select"
    DROP = "drop"


@dataclass
class GestureOutcome:
    action: GestureAction
    table: Optional[Table] = None


class DragController:
    def __init__(self, layout: Layout, threshold: float = DRAG_THRESHOLD):
        self.layout = layout
        self.threshold = threshold
        self.state = DragState.IDLE
        self.table_id: Optional[str] = None
        self.start: Optional[Tuple[float, float]] = None
        self.offset: Tuple[float, float] = (0.0, 0.0)

    def pointer_down(self, table_id: str, pointer_x: float, pointer_y: float, zoom: float = 1.0) -> bool:
        table = self.layout.find_by_id(table_id)
        if table is None:
            return False
        self.state = DragState.PENDING
        self.table_id = table_id
        self.start = (pointer_x, pointer_y)
        self.offset = (pointer_x / zoom - table.x, pointer_y / zoom - table.y)
        return True

    def pointer_move(self, pointer_x: float, pointer_y: float, zoom: float = 1.0) -> Optional[Table]:
        """Returns the moved table while dragging, otherwise None"""
        if self.state == DragState.IDLE:
            return None

        if self.state == DragState.PENDING:
            distance = math.hypot(pointer_x - self.start[0], pointer_y - self.start[1])
            if distance <= self.threshold:
                return None
            self.state = DragState.DRAGGING

        table = self.layout.find_by_id(self.table_id)
        if table is None:
            # deleted mid-gesture
            self.reset()
            return None
        table.move_to(pointer_x / zoom - self.offset[0], pointer_y / zoom - self.offset[1])
        return table

    def pointer_up(self) -> GestureOutcome:
        table = self.layout.find_by_id(self.table_id) if self.table_id else None
        if self.state == DragState.DRAGGING and table is not None:
            outcome = GestureOutcome(GestureAction.DROP, table)
        elif self.state == DragState.PENDING and table is not None:
            outcome = GestureOutcome(GestureAction.SELECT, table)
        else:
            outcome = GestureOutcome(GestureAction.NONE)
        self.reset()
        return outcome

    def pointer_leave(self) -> GestureOutcome:
        """Leaving the canvas ends the gesture where the table was last clamped"""
        return self.pointer_up()

    def reset(self) -> None:
        self.state = DragState.IDLE
        self.table_id = None
        self.start = None
        self.offset = (0.0, 0.0)
