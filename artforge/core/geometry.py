from __future__ import annotations
import math
import logging
from typing import Iterable, List, NamedTuple, Sequence, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from ..canvas.region import HandleDirection


logger = logging.getLogger(__name__)

GRID_SIZE = 20.0
ANGLE_STEP = 15.0
MIN_SIZE = 20.0


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    """An axis-aligned rectangle (x, y, width, height)."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_points(
        cls, p1: Tuple[float, float], p2: Tuple[float, float]
    ) -> "Rect":
        """
        Builds the rectangle spanned by two corner points, in any order.
        Used for rubber-band frames that may be dragged up or left.
        """
        x1, y1 = p1
        x2, y2 = p2
        return cls(min(x1, x2), min(y1, y2), abs(x1 - x2), abs(y1 - y2))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


def _round_half_up(value: float) -> float:
    # Halves round toward +inf, so 0.5 -> 1 and -0.5 -> 0.
    return math.floor(value + 0.5)


def snap_to_grid(value: float, grid_size: float = GRID_SIZE) -> float:
    """Rounds a coordinate to the nearest multiple of grid_size."""
    return _round_half_up(value / grid_size) * grid_size


def snap_size(
    size: Tuple[float, float], grid_size: float = GRID_SIZE
) -> Tuple[float, float]:
    """
    Snaps a (width, height) pair to the grid. Each axis is floored to one
    grid unit so a snapped size never collapses to zero.
    """
    width, height = size
    return (
        max(grid_size, snap_to_grid(width, grid_size)),
        max(grid_size, snap_to_grid(height, grid_size)),
    )


def normalize_angle(angle: float) -> float:
    """Wraps an angle in degrees into the range [0, 360)."""
    angle = angle % 360.0
    # A tiny negative input can produce exactly 360.0 after the modulo.
    if angle >= 360.0:
        angle -= 360.0
    return angle


def snap_angle(angle: float, step: float = ANGLE_STEP) -> float:
    """
    Normalizes an angle into [0, 360) and rounds it to the nearest
    multiple of `step` degrees.
    """
    snapped = _round_half_up(normalize_angle(angle) / step) * step
    return normalize_angle(snapped)


def compute_angle(
    center: Tuple[float, float], pointer: Tuple[float, float]
) -> float:
    """
    Returns the angle of the pointer around the center in degrees. The
    result is rotated by +90 degrees so a pointer straight above the
    center (in a Y-down canvas) reads as 0.
    """
    cx, cy = center
    px, py = pointer
    angle = math.degrees(math.atan2(py - cy, px - cx))
    return normalize_angle(angle + 90.0)


def resize_from_handle(
    direction: "HandleDirection",
    original: Rect,
    delta: Tuple[float, float],
    aspect_locked: bool = False,
    min_size: float = MIN_SIZE,
) -> Tuple[Point, Tuple[float, float]]:
    """
    Computes the new geometry of a box whose edge or corner handle was
    dragged by `delta`.

    Args:
        direction: The handle being dragged. Its n/s/e/w components decide
            which edges move.
        original: The box at the start of the resize.
        delta: The pointer offset (dx, dy) since the resize started.
        aspect_locked: If True, the cross-axis dimension is recomputed from
            the original width/height ratio.
        min_size: Lower bound applied to both dimensions.

    Returns:
        A (position, (width, height)) tuple. Moving the north or west edge
        shifts the position so that the opposite edge stays fixed.
    """
    dx, dy = delta
    x, y = original.x, original.y
    width, height = original.width, original.height
    aspect = (
        original.width / original.height if original.height > 0 else None
    )

    if direction.east:
        width = max(min_size, original.width + dx)
        if aspect_locked and aspect:
            height = width / aspect
    if direction.west:
        width = max(min_size, original.width - dx)
        if aspect_locked and aspect:
            height = width / aspect
        x = original.right - width
    if direction.south:
        height = max(min_size, original.height + dy)
        if aspect_locked and aspect:
            width = height * aspect
    if direction.north:
        height = max(min_size, original.height - dy)
        if aspect_locked and aspect:
            width = height * aspect
        y = original.bottom - height

    # A locked north/south drag may have changed the width after the west
    # edge was placed.
    if aspect_locked and direction.west:
        x = original.right - width

    return Point(x, y), (width, height)


def rect_intersects(a: Rect, b: Rect) -> bool:
    """
    True if the two rectangles overlap on both axes. Rectangles that only
    touch along an edge do not intersect.
    """
    return (
        a.x < b.x + b.width
        and b.x < a.x + a.width
        and a.y < b.y + b.height
        and b.y < a.y + a.height
    )


def _as_array(rects: Iterable[Sequence[float]]) -> np.ndarray:
    return np.asarray([tuple(r) for r in rects], dtype=float).reshape(-1, 4)


def bounding_box(rects: Iterable[Sequence[float]]) -> Rect:
    """
    Returns the union bounding box of the given (x, y, width, height)
    rectangles.
    """
    arr = _as_array(rects)
    if arr.shape[0] == 0:
        raise ValueError("Cannot compute a bounding box of zero rectangles.")
    min_x = float(arr[:, 0].min())
    min_y = float(arr[:, 1].min())
    max_x = float((arr[:, 0] + arr[:, 2]).max())
    max_y = float((arr[:, 1] + arr[:, 3]).max())
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def intersecting(rect: Rect, rects: Sequence[Sequence[float]]) -> List[int]:
    """
    Returns the indices of all rectangles in `rects` that intersect `rect`,
    using the same strict test as rect_intersects().
    """
    arr = _as_array(rects)
    if arr.shape[0] == 0:
        return []
    x, y, w, h = arr[:, 0], arr[:, 1], arr[:, 2], arr[:, 3]
    mask = (
        (rect.x < x + w)
        & (x < rect.x + rect.width)
        & (rect.y < y + h)
        & (y < rect.y + rect.height)
    )
    return [int(i) for i in np.flatnonzero(mask)]
