"""
Copy-on-write operations on ComponentNode trees.

None of these functions mutate their arguments. Every operation that
changes a node returns a new node whose `metadata.modified` is refreshed;
untouched subtrees are shared between the old and the new tree.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from datetime import datetime
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from .geometry import bounding_box, normalize_angle
from .node import (
    ComponentNode,
    ComponentType,
    Position,
    Size,
    Skew,
    create_node,
    generate_id,
)


logger = logging.getLogger(__name__)

DUPLICATE_OFFSET = Position(20.0, 20.0)

PositionLike = Union[Position, Tuple[float, float]]


def _as_position(value: PositionLike) -> Position:
    if isinstance(value, Position):
        return value
    x, y = value
    return Position(x, y)


def _touch(node: ComponentNode, **changes: Any) -> ComponentNode:
    return replace(node, metadata=node.metadata.touched(), **changes)


def update_props(
    node: ComponentNode, updates: Dict[str, Any]
) -> ComponentNode:
    return _touch(node, props={**node.props, **updates})


def update_styles(
    node: ComponentNode, updates: Dict[str, Any]
) -> ComponentNode:
    return _touch(node, styles={**node.styles, **updates})


def update_responsive_styles(
    node: ComponentNode, breakpoint: str, updates: Dict[str, Any]
) -> ComponentNode:
    """Merges style overrides into a single breakpoint layer."""
    layers = dict(node.responsive_styles or {})
    layers[breakpoint] = {**layers.get(breakpoint, {}), **updates}
    return _touch(node, responsive_styles=layers)


def update_position(node: ComponentNode, **changes: float) -> ComponentNode:
    """Merges x and/or y into the node's position."""
    return _touch(node, position=replace(node.position, **changes))


def update_size(node: ComponentNode, **changes: float) -> ComponentNode:
    """Merges width and/or height into the node's size."""
    return _touch(node, size=replace(node.size, **changes))


def apply_rotation(node: ComponentNode, degrees: float) -> ComponentNode:
    return _touch(node, rotation=normalize_angle(degrees))


def apply_skew(node: ComponentNode, **changes: float) -> ComponentNode:
    """Merges x and/or y skew angles (degrees) into the node."""
    return _touch(node, skew=replace(node.skew, **changes))


def update_metadata(node: ComponentNode, **changes: Any) -> ComponentNode:
    """
    Changes metadata fields such as `locked`, `hidden` or `tags`. The
    modification time is refreshed regardless of what was passed.
    """
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"])
    metadata = replace(node.metadata, **changes).touched()
    return replace(node, metadata=metadata)


def iter_nodes(
    root: ComponentNode,
) -> Generator[ComponentNode, None, None]:
    """Yields the root and all of its descendants in pre-order."""
    yield root
    for child in root.children:
        yield from iter_nodes(child)


def add_child(parent: ComponentNode, child: ComponentNode) -> ComponentNode:
    """
    Returns a copy of `parent` with `child` appended to its children.

    Raises ValueError if the parent's id occurs in the child's subtree,
    since the parent would then become its own descendant.
    """
    if any(node.id == parent.id for node in iter_nodes(child)):
        raise ValueError(
            f"Cannot add '{child.id}' to '{parent.id}': "
            f"'{parent.id}' is part of the child's subtree."
        )
    return _touch(parent, children=parent.children + (child,))


def remove_child(parent: ComponentNode, child_id: str) -> ComponentNode:
    children = tuple(c for c in parent.children if c.id != child_id)
    if len(children) == len(parent.children):
        logger.debug(f"'{child_id}' is not a child of '{parent.id}'")
    return _touch(parent, children=children)


def find_by_id(root: ComponentNode, node_id: str) -> Optional[ComponentNode]:
    """Depth-first search for a node by id, including the root itself."""
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def find_path(root: ComponentNode, node_id: str) -> Optional[List[int]]:
    """
    Returns the list of child indices leading from root to the node with
    the given id, an empty list for the root itself, or None if absent.
    """
    if root.id == node_id:
        return []
    for index, child in enumerate(root.children):
        sub_path = find_path(child, node_id)
        if sub_path is not None:
            return [index] + sub_path
    return None


def get_by_path(
    root: ComponentNode, path: Sequence[int]
) -> Optional[ComponentNode]:
    current = root
    for index in path:
        if index < 0 or index >= len(current.children):
            return None
        current = current.children[index]
    return current


def replace_at_path(
    root: ComponentNode, path: Sequence[int], new_node: ComponentNode
) -> ComponentNode:
    """
    Rebuilds the chain of ancestors from root down to `path` so that the
    node at `path` becomes `new_node`. Siblings are shared, not copied.
    Ancestors are not marked as modified; only the replaced node is.
    """
    if not path:
        return new_node
    index, rest = path[0], path[1:]
    children = list(root.children)
    children[index] = replace_at_path(children[index], rest, new_node)
    return replace(root, children=tuple(children))


def depth(node: ComponentNode) -> int:
    """0 for a leaf, otherwise one more than the deepest child."""
    if not node.children:
        return 0
    return 1 + max(depth(child) for child in node.children)


def clone(node: ComponentNode) -> ComponentNode:
    """
    Deep structural copy that keeps every id and timestamp. Used for
    snapshots, not for creating new components.
    """
    return replace(
        node,
        props=_copy_value(node.props),
        styles=dict(node.styles),
        responsive_styles=_copy_value(node.responsive_styles),
        children=tuple(clone(child) for child in node.children),
    )


def _copy_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(v) for v in value]
    return value


def _regenerate(node: ComponentNode) -> ComponentNode:
    now = datetime.now()
    return replace(
        node,
        id=generate_id(),
        props=_copy_value(node.props),
        styles=dict(node.styles),
        responsive_styles=_copy_value(node.responsive_styles),
        metadata=replace(node.metadata, created=now, modified=now),
        children=tuple(_regenerate(child) for child in node.children),
    )


def duplicate(
    node: ComponentNode, offset: PositionLike = DUPLICATE_OFFSET
) -> ComponentNode:
    """
    Deep copy of a subtree in which every id is regenerated. The root is
    shifted by `offset`; descendants keep their parent-relative positions.
    """
    copy = _regenerate(node)
    return replace(copy, position=copy.position + _as_position(offset))


def group(nodes: Sequence[ComponentNode]) -> ComponentNode:
    """
    Wraps the given nodes in a new container sized to their union
    bounding box. Each node's position is re-expressed relative to the
    container's origin; rotation is not taken into account.
    """
    if not nodes:
        raise ValueError("Cannot group an empty list of components.")

    box = bounding_box(node.rect for node in nodes)
    origin = Position(box.x, box.y)
    container = create_node(
        ComponentType.CONTAINER,
        position=origin,
        size=Size(box.width, box.height),
    )
    children = tuple(
        _touch(node, position=node.position - origin) for node in nodes
    )
    logger.debug(f"Grouped {len(nodes)} component(s) into '{container.id}'")
    return replace(container, children=children)


def ungroup(
    group_node: ComponentNode,
    parent_offset: PositionLike = Position(),
) -> List[ComponentNode]:
    """
    Inverse of group(): returns the direct children of `group_node`
    translated back into the coordinate space of the group's parent.
    Grandchildren are left untouched.
    """
    shift = group_node.position + _as_position(parent_offset)
    return [
        _touch(child, position=child.position + shift)
        for child in group_node.children
    ]


def apply_update(
    node: ComponentNode, partial: Dict[str, Any]
) -> ComponentNode:
    """
    Applies a partial update as sent through the document's update
    interface. Recognized keys are position, size, rotation, skew, props,
    styles, responsive_styles and metadata; other keys are ignored with a
    warning.
    """
    for key, value in partial.items():
        if key == "position":
            node = update_position(node, **_fields(value, ("x", "y")))
        elif key == "size":
            node = update_size(node, **_fields(value, ("width", "height")))
        elif key == "rotation":
            node = apply_rotation(node, value)
        elif key == "skew":
            node = apply_skew(node, **_fields(value, ("x", "y")))
        elif key == "props":
            node = update_props(node, value)
        elif key == "styles":
            node = update_styles(node, value)
        elif key == "responsive_styles":
            for breakpoint, styles in value.items():
                node = update_responsive_styles(node, breakpoint, styles)
        elif key == "metadata":
            node = update_metadata(node, **value)
        else:
            logger.warning(f"Ignoring unknown update field '{key}'")
    return node


def _fields(value: Any, names: Tuple[str, str]) -> Dict[str, float]:
    """Accepts a dataclass, a mapping or a 2-tuple for a 2D value."""
    if isinstance(value, dict):
        return {k: v for k, v in value.items() if k in names}
    if isinstance(value, (Position, Size, Skew)):
        return {name: getattr(value, name) for name in names}
    first, second = value
    return {names[0]: first, names[1]: second}
