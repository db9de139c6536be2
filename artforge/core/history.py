import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Tuple
from blinker import Signal
from . import ops
from .node import ComponentNode

if TYPE_CHECKING:
    from .doc import CanvasDoc


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanvasSnapshot:
    id: str
    timestamp: datetime
    components: Tuple[ComponentNode, ...]
    description: str = ""


def _new_snapshot(
    components: List[ComponentNode], description: str
) -> CanvasSnapshot:
    return CanvasSnapshot(
        id=uuid.uuid4().hex,
        timestamp=datetime.now(),
        components=tuple(ops.clone(node) for node in components),
        description=description,
    )


@dataclass
class HistoryManager:
    """
    An in-memory list of component snapshots with a cursor.

    The snapshot under the cursor is the current state. undo() and redo()
    move the cursor and restore the snapshot into the document. Taking a
    new snapshot after an undo discards the snapshots after the cursor.
    """

    max_snapshots: int = 50
    snapshots: List[CanvasSnapshot] = field(default_factory=list)
    index: int = -1
    changed: Signal = field(default_factory=Signal, repr=False, compare=False)

    def snapshot(
        self, doc: "CanvasDoc", description: str = ""
    ) -> CanvasSnapshot:
        """Records the document's current components."""
        if self.index < len(self.snapshots) - 1:
            del self.snapshots[self.index + 1:]

        snap = _new_snapshot(doc.components, description)
        self.snapshots.append(snap)
        self.index += 1

        if len(self.snapshots) > self.max_snapshots:
            self.snapshots.pop(0)
            self.index -= 1

        logger.debug(
            f"Snapshot '{description}' taken "
            f"({self.index + 1}/{len(self.snapshots)})"
        )
        self.changed.send(self)
        return snap

    @property
    def current(self) -> Optional[CanvasSnapshot]:
        if 0 <= self.index < len(self.snapshots):
            return self.snapshots[self.index]
        return None

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    def _restore(self, doc: "CanvasDoc") -> CanvasSnapshot:
        snap = self.snapshots[self.index]
        doc.set_components(ops.clone(node) for node in snap.components)
        self.changed.send(self)
        return snap

    def undo(self, doc: "CanvasDoc") -> Optional[CanvasSnapshot]:
        if not self.can_undo():
            logger.debug("Nothing to undo")
            return None
        self.index -= 1
        snap = self._restore(doc)
        logger.info(f"Undo to '{snap.description}'")
        return snap

    def redo(self, doc: "CanvasDoc") -> Optional[CanvasSnapshot]:
        if not self.can_redo():
            logger.debug("Nothing to redo")
            return None
        self.index += 1
        snap = self._restore(doc)
        logger.info(f"Redo to '{snap.description}'")
        return snap

    def clear(self):
        self.snapshots = []
        self.index = -1
        self.changed.send(self)
