from __future__ import annotations
from enum import Enum, auto
from typing import Dict, Optional, Set, Tuple


class HandleDirection(str, Enum):
    """A resize handle, named by the compass edges it moves."""

    N = "n"
    S = "s"
    E = "e"
    W = "w"
    NE = "ne"
    NW = "nw"
    SE = "se"
    SW = "sw"

    @property
    def north(self) -> bool:
        return "n" in self.value

    @property
    def south(self) -> bool:
        return "s" in self.value

    @property
    def east(self) -> bool:
        return "e" in self.value

    @property
    def west(self) -> bool:
        return "w" in self.value


class ElementRegion(Enum):
    """Defines interactive regions around a selected component."""

    NONE = auto()
    BODY = auto()
    # Resize handles, centered on the edges and corners
    TOP_LEFT = auto()
    TOP_MIDDLE = auto()
    TOP_RIGHT = auto()
    MIDDLE_LEFT = auto()
    MIDDLE_RIGHT = auto()
    BOTTOM_LEFT = auto()
    BOTTOM_MIDDLE = auto()
    BOTTOM_RIGHT = auto()
    # Rotate handle, above the top edge
    ROTATE = auto()

    @property
    def direction(self) -> Optional[HandleDirection]:
        """The resize direction of a handle region, None otherwise."""
        return REGION_DIRECTIONS.get(self)


REGION_DIRECTIONS: Dict[ElementRegion, HandleDirection] = {
    ElementRegion.TOP_LEFT: HandleDirection.NW,
    ElementRegion.TOP_MIDDLE: HandleDirection.N,
    ElementRegion.TOP_RIGHT: HandleDirection.NE,
    ElementRegion.MIDDLE_LEFT: HandleDirection.W,
    ElementRegion.MIDDLE_RIGHT: HandleDirection.E,
    ElementRegion.BOTTOM_LEFT: HandleDirection.SW,
    ElementRegion.BOTTOM_MIDDLE: HandleDirection.S,
    ElementRegion.BOTTOM_RIGHT: HandleDirection.SE,
}

RESIZE_HANDLES: Set[ElementRegion] = set(REGION_DIRECTIONS)

CORNER_RESIZE_HANDLES: Set[ElementRegion] = {
    ElementRegion.TOP_LEFT,
    ElementRegion.TOP_RIGHT,
    ElementRegion.BOTTOM_LEFT,
    ElementRegion.BOTTOM_RIGHT,
}

MIDDLE_RESIZE_HANDLES: Set[ElementRegion] = (
    RESIZE_HANDLES - CORNER_RESIZE_HANDLES
)

# Distance between the top edge and the center of the rotate handle.
ROTATE_HANDLE_OFFSET = 20.0


def get_region_rect(
    region: ElementRegion,
    width: float,
    height: float,
    handle_size: float,
) -> Tuple[float, float, float, float]:
    """
    Calculates the rectangle (x, y, w, h) of a region relative to the
    top-left corner of a box of the given width and height. Handles are
    squares of `handle_size` centered on the point they control.
    """
    w, h = width, height
    hs = handle_size
    half = hs / 2.0

    anchors = {
        ElementRegion.TOP_LEFT: (0.0, 0.0),
        ElementRegion.TOP_MIDDLE: (w / 2, 0.0),
        ElementRegion.TOP_RIGHT: (w, 0.0),
        ElementRegion.MIDDLE_LEFT: (0.0, h / 2),
        ElementRegion.MIDDLE_RIGHT: (w, h / 2),
        ElementRegion.BOTTOM_LEFT: (0.0, h),
        ElementRegion.BOTTOM_MIDDLE: (w / 2, h),
        ElementRegion.BOTTOM_RIGHT: (w, h),
        ElementRegion.ROTATE: (w / 2, -ROTATE_HANDLE_OFFSET),
    }
    if region in anchors:
        cx, cy = anchors[region]
        return cx - half, cy - half, hs, hs

    if region == ElementRegion.BODY:
        return 0.0, 0.0, w, h

    return 0.0, 0.0, 0.0, 0.0  # For NONE


def check_region_hit(
    local_x: float,
    local_y: float,
    width: float,
    height: float,
    handle_size: float,
) -> ElementRegion:
    """
    Checks which interactive region is hit by a point given relative to
    the box's top-left corner. Handles take priority over the body.
    """
    for region in [ElementRegion.ROTATE, *REGION_DIRECTIONS]:
        rx, ry, rw, rh = get_region_rect(region, width, height, handle_size)
        if rx <= local_x < rx + rw and ry <= local_y < ry + rh:
            return region

    if 0 <= local_x < width and 0 <= local_y < height:
        return ElementRegion.BODY

    return ElementRegion.NONE
