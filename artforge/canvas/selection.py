import logging
from typing import Iterable, List, Optional
from blinker import Signal


logger = logging.getLogger(__name__)


class SelectionManager:
    """
    Holds the ordered list of selected node ids.

    The ids are weak references: they are never resolved here, and ids of
    nodes that have since been deleted are tolerated until prune() is
    called.
    """

    def __init__(self):
        self._ids: List[str] = []
        # Fired with `ids=` whenever the selection actually changes.
        self.changed = Signal()

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(list(self._ids))

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._ids

    def contains(self, node_id: str) -> bool:
        return node_id in self._ids

    def _set(self, ids: Iterable[str]):
        new_ids: List[str] = []
        for node_id in ids:
            if node_id not in new_ids:
                new_ids.append(node_id)
        if new_ids == self._ids:
            return
        self._ids = new_ids
        logger.debug(f"Selection is now {new_ids}")
        self.changed.send(self, ids=list(new_ids))

    def select(self, node_id: Optional[str], additive: bool = False):
        """
        Selects a single node. With `additive`, the id is toggled in the
        current selection; otherwise the selection is replaced. Passing
        None clears a non-additive selection.
        """
        if node_id is None:
            if not additive:
                self.clear()
            return
        if additive:
            self.toggle(node_id)
        else:
            self._set([node_id])

    def select_many(self, ids: Iterable[str], additive: bool = False):
        """Replaces the selection, or extends it when `additive` is set."""
        if additive:
            self._set(self._ids + list(ids))
        else:
            self._set(ids)

    def toggle(self, node_id: str):
        if node_id in self._ids:
            self._set(i for i in self._ids if i != node_id)
        else:
            self._set(self._ids + [node_id])

    def clear(self):
        self._set([])

    def prune(self, existing: Iterable[str]):
        """Drops ids that are not in `existing`."""
        keep = set(existing)
        self._set(i for i in self._ids if i in keep)
