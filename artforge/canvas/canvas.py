from __future__ import annotations
import math
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Union
from blinker import Signal
from ..config import CanvasConfig
from ..core.geometry import (
    Point,
    Rect,
    compute_angle,
    intersecting,
    resize_from_handle,
    snap_angle,
    snap_to_grid,
)
from ..core.node import ComponentNode, Position
from .dropdata import ComponentDrop, TemplateDrop, parse_drop_payload
from .gesture import (
    DragState,
    InteractionState,
    ResizeState,
    RotateState,
    SelectionRect,
)
from .region import ElementRegion, HandleDirection, check_region_hit

if TYPE_CHECKING:
    from ..core.doc import CanvasDoc

logger = logging.getLogger(__name__)

GestureState = Union[DragState, ResizeState, RotateState, SelectionRect]


class Canvas:
    """
    The pointer-driven interaction engine for a CanvasDoc.

    It receives pointer events in canvas coordinates from a host UI and
    turns them into drag, resize, rotate and marquee-select gestures.
    Only one gesture is active at a time; every gesture starts from IDLE
    on a press and returns to IDLE on release or when the pointer leaves
    the canvas.

    Geometry is committed through the document's regular update methods
    on every pointer move, so observers see intermediate states live.
    Nothing is reverted when a gesture ends.
    """

    BASE_HANDLE_SIZE = 8.0

    def __init__(
        self,
        doc: "CanvasDoc",
        config: Optional[CanvasConfig] = None,
        aspect_locked: Optional[bool] = None,
    ):
        self.doc = doc
        self.config = config or CanvasConfig()
        self.aspect_locked: bool = (
            self.config.aspect_locked
            if aspect_locked is None
            else aspect_locked
        )

        # --- Interaction State ---
        self._state: InteractionState = InteractionState.IDLE
        self._gesture: Optional[GestureState] = None

        # --- Signals ---
        self.state_changed = Signal()
        self.move_begin = Signal()
        self.move_end = Signal()
        self.resize_begin = Signal()
        self.resize_end = Signal()
        self.rotate_begin = Signal()
        self.rotate_end = Signal()
        self.template_dropped = Signal()

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def gesture(self) -> Optional[GestureState]:
        """The ephemeral state of the active gesture, if any."""
        return self._gesture

    @property
    def selection_rect(self) -> Optional[Rect]:
        """The marquee rectangle while marquee-selecting, for rendering."""
        if isinstance(self._gesture, SelectionRect):
            return self._gesture.rect
        return None

    def _enter(self, state: InteractionState, gesture: Optional[GestureState]):
        self._state = state
        self._gesture = gesture
        logger.debug(f"Canvas state -> {state.name}")
        self.state_changed.send(self, state=state)

    # --- Hit testing ---

    def hit_test(self, x: float, y: float) -> Optional[str]:
        """
        Returns the id of the top-most top-level component whose box
        contains the point, or None for the background.
        """
        for node in reversed(self.doc.components):
            nx, ny, w, h = node.rect
            if nx <= x < nx + w and ny <= y < ny + h:
                return node.id
        return None

    def _single_selected(self) -> Optional[ComponentNode]:
        """
        The selected node if exactly one top-level node is selected.
        Handles are not offered for nested nodes, whose boxes are
        relative to their parent.
        """
        selected = self.doc.selected_nodes
        if len(selected) != 1:
            return None
        if self.doc.find_parent_id(selected[0]) is not None:
            return None
        return self.doc.get_component(selected[0])

    def region_at(self, x: float, y: float) -> ElementRegion:
        """
        The handle or body region of the single selected top-level
        component under the point. With zero or several selected nodes,
        or a nested one, there are no handles and the result is NONE.
        """
        node = self._single_selected()
        if node is None:
            return ElementRegion.NONE
        nx, ny, w, h = node.rect
        return check_region_hit(x - nx, y - ny, w, h, self.BASE_HANDLE_SIZE)

    # --- Pointer-down ---

    def on_button_press(self, x: float, y: float, modifier: bool = False):
        """
        Generic pointer-down: finds what is under the pointer and starts
        the matching gesture. Handles of the selected node come first,
        then component bodies, then the background.
        """
        region = self.region_at(x, y)
        if region == ElementRegion.ROTATE:
            self.on_rotate_press(x, y)
            return
        direction = region.direction
        if direction is not None:
            self.on_handle_press(direction, x, y)
            return

        hit = self.hit_test(x, y)
        if hit is not None:
            self.on_node_press(hit, x, y, modifier)
        else:
            self.on_canvas_press(x, y, modifier)

    def on_node_press(
        self, node_id: str, x: float, y: float, modifier: bool = False
    ):
        """
        Pointer-down over a component body. With the modifier (ctrl/meta)
        held the id is toggled in the selection, otherwise the selection
        becomes just this id. A drag of the resulting selection starts.
        """
        if self._state != InteractionState.IDLE:
            logger.debug(f"Press ignored while {self._state.name}")
            return

        self.doc.select_node(node_id, additive=modifier)

        originals: Dict[str, Position] = {}
        for node in self.doc.get_selected_components():
            originals[node.id] = node.position

        self._enter(
            InteractionState.DRAGGING, DragState(Point(x, y), originals)
        )
        self.move_begin.send(self, ids=list(originals))

    def on_handle_press(self, direction: HandleDirection, x: float, y: float):
        """Starts a resize if one top-level component is selected."""
        if self._state != InteractionState.IDLE:
            return
        node = self._single_selected()
        if node is None:
            logger.debug("Resize needs one selected top-level component")
            return
        self._enter(
            InteractionState.RESIZING,
            ResizeState(node.id, direction, Point(x, y), Rect(*node.rect)),
        )
        self.resize_begin.send(self, ids=[node.id])

    def on_rotate_press(self, x: float, y: float):
        """Starts a rotation if one top-level component is selected."""
        if self._state != InteractionState.IDLE:
            return
        node = self._single_selected()
        if node is None:
            logger.debug("Rotate needs one selected top-level component")
            return
        self._enter(
            InteractionState.ROTATING, RotateState(node.id, Point(x, y))
        )
        self.rotate_begin.send(self, ids=[node.id])

    def on_canvas_press(self, x: float, y: float, modifier: bool = False):
        """
        Pointer-down on the background. Clears the selection and starts a
        marquee, unless the modifier is held, in which case nothing
        happens.
        """
        if self._state != InteractionState.IDLE or modifier:
            return
        self.doc.select_nodes([], additive=False)
        origin = Point(x, y)
        self._enter(
            InteractionState.MARQUEE_SELECTING,
            SelectionRect(origin, Rect(x, y, 0.0, 0.0)),
        )

    # --- Pointer-move ---

    def on_motion(self, x: float, y: float):
        """Advances the active gesture to the pointer position."""
        gesture = self._gesture
        if isinstance(gesture, DragState):
            self._drag(gesture, x, y)
        elif isinstance(gesture, ResizeState):
            self._resize(gesture, x, y)
        elif isinstance(gesture, RotateState):
            self._rotate(gesture, x, y)
        elif isinstance(gesture, SelectionRect):
            self._marquee(gesture, x, y)

    def _near_other_node(self, node_id: str, x: float, y: float) -> bool:
        threshold = self.config.proximity_threshold
        for other in self.doc.components:
            if other.id == node_id:
                continue
            dist = math.hypot(other.position.x - x, other.position.y - y)
            if dist < threshold:
                return True
        return False

    def drag_positions(
        self, gesture: DragState, x: float, y: float
    ) -> Dict[str, Position]:
        """
        Computes the candidate position of every dragged node for a
        pointer at (x, y), including grid and proximity snapping.
        """
        dx, dy = x - gesture.origin.x, y - gesture.origin.y
        grid = self.config.grid_size
        fine = self.config.proximity_grid

        positions: Dict[str, Position] = {}
        for node_id, original in gesture.originals.items():
            new_x, new_y = original.x + dx, original.y + dy
            if self.doc.snap_to_grid:
                new_x = snap_to_grid(new_x, grid)
                new_y = snap_to_grid(new_y, grid)
            if self._near_other_node(node_id, new_x, new_y):
                new_x = snap_to_grid(new_x, fine)
                new_y = snap_to_grid(new_y, fine)
            positions[node_id] = Position(new_x, new_y)
        return positions

    def _drag(self, gesture: DragState, x: float, y: float):
        positions = self.drag_positions(gesture, x, y)
        if not positions:
            return
        self.doc.update_components(
            {node_id: {"position": pos} for node_id, pos in positions.items()}
        )

    def _resize(self, gesture: ResizeState, x: float, y: float):
        delta = (x - gesture.origin.x, y - gesture.origin.y)
        position, (width, height) = resize_from_handle(
            gesture.direction,
            gesture.original,
            delta,
            aspect_locked=self.aspect_locked,
            min_size=self.config.min_size,
        )
        self.doc.update_component(
            gesture.node_id,
            {
                "position": Position(position.x, position.y),
                "size": {"width": width, "height": height},
            },
        )

    def _rotate(self, gesture: RotateState, x: float, y: float):
        node = self.doc.get_component(gesture.node_id)
        if node is None:
            return
        center = Rect(*node.rect).center
        angle = snap_angle(compute_angle(center, (x, y)))
        self.doc.update_component(gesture.node_id, {"rotation": angle})

    def _marquee(self, gesture: SelectionRect, x: float, y: float):
        gesture.rect = Rect.from_points(gesture.origin, (x, y))
        nodes = self.doc.components
        hits = intersecting(gesture.rect, [node.rect for node in nodes])
        self.doc.select_nodes([nodes[i].id for i in hits], additive=False)

    # --- Pointer-up ---

    def on_button_release(
        self, x: Optional[float] = None, y: Optional[float] = None
    ):
        """Ends the active gesture. Whatever was committed last stands."""
        self._settle()

    def on_motion_leave(self):
        """The pointer left the canvas. Ends the gesture like a release."""
        self._settle()

    def _settle(self):
        state = self._state
        if state == InteractionState.IDLE:
            return
        ids: List[str] = self.doc.selected_nodes
        if state == InteractionState.DRAGGING:
            self.move_end.send(self, ids=ids)
        elif state == InteractionState.RESIZING:
            self.resize_end.send(self, ids=ids)
        elif state == InteractionState.ROTATING:
            self.rotate_end.send(self, ids=ids)
        self._enter(InteractionState.IDLE, None)

    # --- Drop target ---

    def on_drop(
        self, payload: Optional[str], x: float, y: float
    ) -> Optional[ComponentNode]:
        """
        Handles a drop of drag data at (x, y). A component payload adds a
        new component at the drop point, snapped to the grid if snapping
        is on. A template payload is forwarded through `template_dropped`.
        Malformed payloads are ignored.
        """
        drop = parse_drop_payload(payload)
        if drop is None:
            return None

        if self.doc.snap_to_grid:
            grid = self.config.grid_size
            x, y = snap_to_grid(x, grid), snap_to_grid(y, grid)
        position = Position(x, y)

        if isinstance(drop, TemplateDrop):
            self.template_dropped.send(
                self, template_id=drop.template_id, position=position
            )
            return None

        assert isinstance(drop, ComponentDrop)
        return self.doc.on_add_component(drop.component_type, position)
