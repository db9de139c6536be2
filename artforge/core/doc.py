from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from blinker import Signal
from ..canvas.selection import SelectionManager
from . import ops
from .node import ComponentNode, ComponentType, Position, create_node
from .styles import check_breakpoint
from .validation import ValidationError, validate_all


logger = logging.getLogger(__name__)

MAX_RECENT_COLORS = 20
DEFAULT_RECENT_COLORS = ("#000000", "#ffffff", "#ff0000", "#00ff00", "#0000ff")

Path = Tuple[int, ...]


class CanvasDoc:
    """
    The editable canvas state: the list of top-level components, the
    selection and the canvas settings.

    A CanvasDoc is created explicitly and handed to whatever needs it; it
    is not a global. Observers subscribe to its blinker signals. Each node
    id is indexed to its path in the tree, so updating a node costs the
    depth of the node rather than the size of the tree.
    """

    def __init__(self, snap_to_grid: bool = True, grid_visible: bool = True):
        self._default_snap = snap_to_grid
        self._default_grid_visible = grid_visible
        self.selection = SelectionManager()

        # Signals
        # Fired once per logical change (a batch counts as one).
        self.changed = Signal()
        self.component_added = Signal()
        self.component_updated = Signal()
        self.component_removed = Signal()
        self.selection_changed = Signal()
        self.settings_changed = Signal()

        self.selection.changed.connect(self._on_selection_changed)
        self._init_state()

    def _init_state(self):
        self._components: List[ComponentNode] = []
        self._index: Dict[str, Path] = {}
        self.clipboard: List[ComponentNode] = []
        self.snap_to_grid: bool = self._default_snap
        self.grid_visible: bool = self._default_grid_visible
        self.zoom: float = 1.0
        self.active_breakpoint: str = "base"
        self.recent_colors: List[str] = list(DEFAULT_RECENT_COLORS)

    def reset(self):
        """
        Returns the document to its initial, empty state. Signal
        subscriptions are kept.
        """
        self._init_state()
        self.selection.clear()
        self.changed.send(self)

    def _on_selection_changed(self, sender, *, ids: List[str]):
        self.selection_changed.send(self, ids=ids)

    # --- Tree access ---

    @property
    def components(self) -> List[ComponentNode]:
        """The top-level components, in paint order."""
        return list(self._components)

    @property
    def selected_nodes(self) -> List[str]:
        return self.selection.ids

    def _reindex(self):
        index: Dict[str, Path] = {}
        for top, root in enumerate(self._components):
            self._index_subtree(index, root, (top,))
        self._index = index

    def _index_subtree(
        self, index: Dict[str, Path], node: ComponentNode, path: Path
    ):
        if node.id in index:
            # Ownership is by convention only; see add_component().
            logger.debug(f"Component id '{node.id}' is indexed twice")
        index[node.id] = path
        for i, child in enumerate(node.children):
            self._index_subtree(index, child, path + (i,))

    def _get(self, path: Path) -> Optional[ComponentNode]:
        if not path or path[0] >= len(self._components):
            return None
        return ops.get_by_path(self._components[path[0]], path[1:])

    def _put(self, path: Path, node: ComponentNode):
        top = path[0]
        self._components[top] = ops.replace_at_path(
            self._components[top], path[1:], node
        )

    def get_component(self, node_id: str) -> Optional[ComponentNode]:
        path = self._index.get(node_id)
        return self._get(path) if path is not None else None

    def has_component(self, node_id: str) -> bool:
        return node_id in self._index

    def find_parent_id(self, node_id: str) -> Optional[str]:
        """The id of the node's parent, or None for top-level/unknown ids."""
        path = self._index.get(node_id)
        if path is None or len(path) == 1:
            return None
        parent = self._get(path[:-1])
        return parent.id if parent else None

    def iter_components(self):
        """Yields every node in the document in pre-order."""
        for root in self._components:
            yield from ops.iter_nodes(root)

    # --- Structural changes ---

    def add_component(
        self, node: ComponentNode, parent_id: Optional[str] = None
    ) -> ComponentNode:
        """
        Adds a node at the top level, or as the last child of `parent_id`.

        Adding a node whose id is already present elsewhere is not
        prevented; a warning is logged and id lookups resolve to the
        newest occurrence.
        """
        if any(self.has_component(n.id) for n in ops.iter_nodes(node)):
            logger.warning(
                f"Component '{node.id}' (or a descendant) is already on "
                f"the canvas; it will be owned by two parents"
            )

        if parent_id is None:
            self._components.append(node)
        else:
            path = self._index.get(parent_id)
            if path is None:
                logger.warning(
                    f"Cannot add to unknown parent '{parent_id}', ignoring"
                )
                return node
            parent = self._get(path)
            assert parent is not None
            self._put(path, ops.add_child(parent, node))

        self._reindex()
        logger.debug(f"Added component '{node.id}' ({node.type})")
        self.component_added.send(self, node=node)
        self.changed.send(self)
        return node

    def on_add_component(
        self, component_type: ComponentType, position: Position
    ) -> ComponentNode:
        """Creates a default component of the given type at `position`."""
        return self.add_component(
            create_node(component_type, position=position)
        )

    def _detach(self, node_id: str) -> Optional[ComponentNode]:
        path = self._index.get(node_id)
        if path is None:
            return None
        node = self._get(path)
        if len(path) == 1:
            del self._components[path[0]]
        else:
            parent = self._get(path[:-1])
            assert parent is not None
            self._put(path[:-1], ops.remove_child(parent, node_id))
        return node

    def delete_component(self, node_id: str) -> Optional[ComponentNode]:
        """
        Removes a node and its whole subtree. Unknown ids are ignored.
        Returns the removed node.
        """
        node = self._detach(node_id)
        if node is None:
            logger.debug(f"delete_component: no component '{node_id}'")
            return None
        self._reindex()
        self.selection.prune(self._index.keys())
        self.component_removed.send(self, node=node)
        self.changed.send(self)
        return node

    def set_components(self, nodes: Iterable[ComponentNode]):
        self._components = list(nodes)
        self._reindex()
        self.selection.prune(self._index.keys())
        self.changed.send(self)

    def import_components(
        self, nodes: Sequence[ComponentNode]
    ) -> Dict[str, List[ValidationError]]:
        """
        Adds nodes produced outside the editor (generators, templates) at
        the top level. Every node is validated first; the errors are
        returned keyed by node id and the caller decides what to do.
        """
        report = validate_all(nodes)
        self._components.extend(nodes)
        self._reindex()
        for node in nodes:
            self.component_added.send(self, node=node)
        self.changed.send(self)
        return report

    # --- Updates ---

    def _apply(
        self, node_id: str, partial: Dict[str, Any]
    ) -> Optional[ComponentNode]:
        path = self._index.get(node_id)
        if path is None:
            logger.debug(f"update: no component '{node_id}', ignoring")
            return None
        node = self._get(path)
        assert node is not None
        new_node = ops.apply_update(node, partial)
        self._put(path, new_node)
        return new_node

    def update_component(
        self, node_id: str, partial: Dict[str, Any]
    ) -> Optional[ComponentNode]:
        """
        Applies a partial update (position, size, rotation, skew, props,
        styles, responsive_styles or metadata) to one node. Unknown ids
        are a no-op.
        """
        new_node = self._apply(node_id, partial)
        if new_node is None:
            return None
        self.component_updated.send(self, node=new_node)
        self.changed.send(self)
        return new_node

    def update_components(
        self, updates: Dict[str, Dict[str, Any]]
    ) -> List[ComponentNode]:
        """
        Applies several partial updates as one batch: all nodes change
        before any observer is told, and `changed` fires once.
        """
        updated = []
        for node_id, partial in updates.items():
            new_node = self._apply(node_id, partial)
            if new_node is not None:
                updated.append(new_node)
        if not updated:
            return updated
        for node in updated:
            self.component_updated.send(self, node=node)
        self.changed.send(self)
        return updated

    # --- Selection ---

    def select_node(self, node_id: Optional[str], additive: bool = False):
        self.selection.select(node_id, additive)

    def select_nodes(self, ids: Iterable[str], additive: bool = False):
        self.selection.select_many(ids, additive)

    def get_selected_components(self) -> List[ComponentNode]:
        """Resolves the selected ids, silently skipping stale ones."""
        result = []
        for node_id in self.selection:
            node = self.get_component(node_id)
            if node is not None:
                result.append(node)
        return result

    # --- Compound editing commands ---

    def _sibling_selection(self) -> Tuple[Optional[str], List[ComponentNode]]:
        nodes = self.get_selected_components()
        parents = {self.find_parent_id(n.id) for n in nodes}
        if len(parents) != 1:
            return None, []
        return parents.pop(), nodes

    def _replace_children(
        self, parent_id: Optional[str], children: Sequence[ComponentNode]
    ):
        if parent_id is None:
            self._components = list(children)
            return
        path = self._index[parent_id]
        parent = self._get(path)
        assert parent is not None
        self._put(
            path,
            replace(
                parent,
                children=tuple(children),
                metadata=parent.metadata.touched(),
            ),
        )

    def _siblings(self, parent_id: Optional[str]) -> List[ComponentNode]:
        if parent_id is None:
            return list(self._components)
        parent = self.get_component(parent_id)
        return list(parent.children) if parent else []

    def group_selected(self) -> Optional[ComponentNode]:
        """
        Wraps the selected nodes in a new container. All selected nodes
        must share the same parent and at least two must be selected.
        The new container is appended to that parent and selected.
        """
        parent_id, nodes = self._sibling_selection()
        if len(nodes) < 2:
            return None
        container = ops.group(nodes)
        grouped = {n.id for n in nodes}
        siblings = [
            n for n in self._siblings(parent_id) if n.id not in grouped
        ]
        self._replace_children(parent_id, siblings + [container])
        self._reindex()
        self.component_added.send(self, node=container)
        self.changed.send(self)
        self.selection.select(container.id)
        return container

    def ungroup_selected(self) -> List[ComponentNode]:
        """
        Replaces the single selected container by its children, placed at
        the container's index and translated into the parent's space.
        """
        nodes = self.get_selected_components()
        if len(nodes) != 1:
            return []
        container = nodes[0]
        if container.type != ComponentType.CONTAINER or not container.children:
            return []
        parent_id = self.find_parent_id(container.id)
        children = ops.ungroup(container)
        siblings = self._siblings(parent_id)
        at = next(i for i, n in enumerate(siblings) if n.id == container.id)
        siblings[at:at + 1] = children
        self._replace_children(parent_id, siblings)
        self._reindex()
        self.component_removed.send(self, node=container)
        self.changed.send(self)
        self.selection.select_many(c.id for c in children)
        return children

    def duplicate_selected(self) -> List[ComponentNode]:
        """
        Duplicates each selected node next to its original (same parent)
        and selects the copies.
        """
        copies = []
        for node in self.get_selected_components():
            copy = ops.duplicate(node)
            self.add_component(copy, self.find_parent_id(node.id))
            copies.append(copy)
        if copies:
            self.selection.select_many(c.id for c in copies)
        return copies

    def copy_selected(self) -> int:
        """Puts snapshots of the selected nodes on the clipboard."""
        self.clipboard = [ops.clone(n) for n in self.get_selected_components()]
        return len(self.clipboard)

    def paste(self) -> List[ComponentNode]:
        """
        Adds fresh duplicates of the clipboard content at the top level
        and selects them. The clipboard itself is left unchanged.
        """
        pasted = [ops.duplicate(node) for node in self.clipboard]
        for node in pasted:
            self.add_component(node)
        if pasted:
            self.selection.select_many(n.id for n in pasted)
        return pasted

    # --- Settings ---

    def set_snap_to_grid(self, snap: bool):
        if self.snap_to_grid == snap:
            return
        self.snap_to_grid = snap
        self.settings_changed.send(self)

    def set_active_breakpoint(self, breakpoint: str):
        check_breakpoint(breakpoint)
        if self.active_breakpoint == breakpoint:
            return
        self.active_breakpoint = breakpoint
        self.settings_changed.send(self)

    def add_recent_color(self, color: str):
        """
        Moves `color` to the front of the recent colors, dropping any
        case-insensitive duplicate and keeping at most 20 entries.
        """
        lowered = color.lower()
        rest = [c for c in self.recent_colors if c.lower() != lowered]
        self.recent_colors = ([color] + rest)[:MAX_RECENT_COLORS]
        self.settings_changed.send(self)

    def clear_recent_colors(self):
        self.recent_colors = []
        self.settings_changed.send(self)

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [node.to_dict() for node in self._components],
            "selectedNodes": self.selection.ids,
            "snapToGrid": self.snap_to_grid,
            "gridVisible": self.grid_visible,
            "zoom": self.zoom,
            "activeBreakpoint": self.active_breakpoint,
            "recentColors": list(self.recent_colors),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanvasDoc":
        doc = cls(
            snap_to_grid=data.get("snapToGrid", True),
            grid_visible=data.get("gridVisible", True),
        )
        doc.zoom = data.get("zoom", doc.zoom)
        doc.active_breakpoint = check_breakpoint(
            data.get("activeBreakpoint", doc.active_breakpoint)
        )
        doc.recent_colors = list(data.get("recentColors", doc.recent_colors))
        doc.set_components(
            ComponentNode.from_dict(c) for c in data.get("components", ())
        )
        doc.selection.select_many(
            i for i in data.get("selectedNodes", ()) if doc.has_component(i)
        )
        return doc
