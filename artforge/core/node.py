from __future__ import annotations
import itertools
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Tuple,
    TypedDict,
    Union,
)
from .geometry import normalize_angle


logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
DEFAULT_AUTHOR = "system"
DEFAULT_SIZE = (100.0, 50.0)

PropValue = Union[str, int, float, bool, List[str]]


class ComponentType(str, Enum):
    CONTAINER = "container"
    TEXT = "text"
    BUTTON = "button"
    INPUT = "input"
    IMAGE = "image"
    CHART = "chart"
    CUSTOM = "custom"


class ComponentProps(TypedDict, total=False):
    """
    Well-known component properties. Nodes store a plain dict, so any
    component-specific key is allowed alongside these.
    """

    className: str
    children: str
    placeholder: str
    src: str
    alt: str
    href: str
    target: str
    disabled: bool
    required: bool


class ComponentStyles(TypedDict, total=False):
    """Well-known style properties; other CSS properties are allowed."""

    display: str
    position: str
    top: str
    left: str
    right: str
    bottom: str
    width: str
    height: str
    margin: str
    padding: str
    fontSize: str
    fontWeight: str
    fontFamily: str
    lineHeight: str
    textAlign: str
    color: str
    backgroundColor: str
    border: str
    borderRadius: str
    boxShadow: str
    opacity: str


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Size:
    width: float = DEFAULT_SIZE[0]
    height: float = DEFAULT_SIZE[1]


@dataclass(frozen=True)
class Skew:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Metadata:
    version: str = DEFAULT_VERSION
    created: datetime = field(default_factory=datetime.now)
    modified: datetime = field(default_factory=datetime.now)
    author: str = DEFAULT_AUTHOR
    description: str = ""
    tags: Tuple[str, ...] = ()
    locked: bool = False
    hidden: bool = False

    def touched(self) -> "Metadata":
        """Returns a copy with `modified` set to the current time."""
        return replace(self, modified=datetime.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "author": self.author,
            "description": self.description,
            "tags": list(self.tags),
            "locked": self.locked,
            "hidden": self.hidden,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Metadata":
        if not data:
            return create_default_metadata()
        now = datetime.now()
        return cls(
            version=data.get("version", DEFAULT_VERSION),
            created=_parse_timestamp(data.get("created"), now),
            modified=_parse_timestamp(data.get("modified"), now),
            author=data.get("author", DEFAULT_AUTHOR),
            description=data.get("description", ""),
            tags=tuple(data.get("tags") or ()),
            locked=bool(data.get("locked", False)),
            hidden=bool(data.get("hidden", False)),
        )


def _parse_timestamp(value: Any, default: datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as written by browser based tools.
        return datetime.fromtimestamp(value / 1000.0)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Ignoring unparsable timestamp {value!r}")
    return default


@dataclass(frozen=True)
class ComponentNode:
    """
    A node in the editable component tree.

    Nodes are immutable values: every operation in `artforge.core.ops`
    returns a new node instead of changing this one. Children are held in
    a tuple and are owned by their parent.
    """

    id: str
    type: ComponentType
    props: Dict[str, Any] = field(default_factory=dict)
    styles: Dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    rotation: float = 0.0
    skew: Skew = field(default_factory=Skew)
    children: Tuple["ComponentNode", ...] = ()
    responsive_styles: Optional[Dict[str, Dict[str, Any]]] = None
    metadata: Metadata = field(default_factory=Metadata)

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        """The (x, y, width, height) box in parent coordinates."""
        return (
            self.position.x,
            self.position.y,
            self.size.width,
            self.size.height,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes the node and its subtree to the exported state shape.
        """
        data: Dict[str, Any] = {
            "id": self.id,
            "type": getattr(self.type, "value", self.type),
            "props": dict(self.props),
            "children": [child.to_dict() for child in self.children],
            "position": {"x": self.position.x, "y": self.position.y},
            "size": {"width": self.size.width, "height": self.size.height},
            "rotation": self.rotation,
            "skew": {"x": self.skew.x, "y": self.skew.y},
            "styles": dict(self.styles),
            "metadata": self.metadata.to_dict(),
        }
        if self.responsive_styles is not None:
            data["responsiveStyles"] = {
                bp: dict(styles)
                for bp, styles in self.responsive_styles.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentNode":
        """
        Builds a node tree from its dictionary form.

        This is the import path for trees produced outside the editor.
        Missing positions and sizes default to zero; such nodes are
        expected to go through validation before they are used.
        """
        position = data.get("position") or {}
        size = data.get("size") or {}
        skew = data.get("skew") or {}
        return cls(
            id=data.get("id", ""),
            type=coerce_type(data.get("type")),
            props=dict(data.get("props") or {}),
            styles=dict(data.get("styles") or {}),
            position=Position(position.get("x", 0.0), position.get("y", 0.0)),
            size=Size(size.get("width", 0.0), size.get("height", 0.0)),
            rotation=normalize_angle(data.get("rotation") or 0.0),
            skew=Skew(skew.get("x", 0.0), skew.get("y", 0.0)),
            children=tuple(
                cls.from_dict(child) for child in data.get("children") or ()
            ),
            responsive_styles=data.get("responsiveStyles"),
            metadata=Metadata.from_dict(data.get("metadata")),
        )


def coerce_type(value: Any) -> Any:
    """
    Converts a string to a ComponentType. Unknown or missing values are
    passed through unchanged so validation can report them.
    """
    if isinstance(value, ComponentType):
        return value
    try:
        return ComponentType(value)
    except ValueError:
        return value


_id_counter = itertools.count()


def generate_id() -> str:
    """
    Generates a sortable, ULID-like component id. The millisecond
    timestamp orders ids by creation time and the process-wide counter
    keeps them unique within a session.
    """
    millis = int(time.time() * 1000)
    return f"component_{millis}_{next(_id_counter)}_{uuid.uuid4().hex[:9]}"


def create_default_metadata() -> Metadata:
    now = datetime.now()
    return Metadata(created=now, modified=now)


def create_node(
    type: Union[ComponentType, str],
    id: Optional[str] = None,
    props: Optional[Dict[str, Any]] = None,
    styles: Optional[Dict[str, Any]] = None,
    position: Optional[Position] = None,
    size: Optional[Size] = None,
    metadata: Optional[Metadata] = None,
) -> ComponentNode:
    """
    Creates a new ComponentNode, filling in defaults for everything not
    given: position (0, 0), size 100x50, no children, zero rotation and
    skew, and fresh metadata.
    """
    return ComponentNode(
        id=id or generate_id(),
        type=ComponentType(type),
        props=dict(props or {}),
        styles=dict(styles or {}),
        position=position or Position(),
        size=size or Size(*DEFAULT_SIZE),
        metadata=metadata or create_default_metadata(),
    )
