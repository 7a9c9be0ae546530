"""
Canvas geometry for the seating layout
"""

import math
from typing import List, Tuple

CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 800
CANVAS_MARGIN = 50
SEAT_RADIUS = 60


def seat_position(table_x: float, table_y: float, angle: float, radius: float = SEAT_RADIUS) -> Tuple[float, float]:
    """Project a seat at ``angle`` degrees onto the circle around a table centre"""
    theta = math.radians(angle)
    return table_x + radius * math.cos(theta), table_y + radius * math.sin(theta)


def clamp_position(x: float, y: float) -> Tuple[float, float]:
    """Clamp a table centre to the drawable area of the canvas"""
    clamped_x = max(CANVAS_MARGIN, min(CANVAS_WIDTH - CANVAS_MARGIN, x))
    clamped_y = max(CANVAS_MARGIN, min(CANVAS_HEIGHT - CANVAS_MARGIN, y))
    return clamped_x, clamped_y


def even_angles(count: int) -> List[float]:
    return [(index * 360) / count for index in range(count)]
