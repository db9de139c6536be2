from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict
from ..core.geometry import Point, Rect
from ..core.node import Position
from .region import HandleDirection


class InteractionState(Enum):
    IDLE = auto()
    DRAGGING = auto()
    RESIZING = auto()
    ROTATING = auto()
    MARQUEE_SELECTING = auto()


# The dataclasses below live for one gesture only, from pointer-down to
# pointer-up, and are never persisted.


@dataclass
class DragState:
    origin: Point
    # Position of every dragged node when the drag started.
    originals: Dict[str, Position] = field(default_factory=dict)


@dataclass
class ResizeState:
    node_id: str
    direction: HandleDirection
    origin: Point
    original: Rect


@dataclass
class RotateState:
    node_id: str
    origin: Point


@dataclass
class SelectionRect:
    origin: Point
    rect: Rect
