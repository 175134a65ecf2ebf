"""Document model for MindTree: nodes and their value types."""

import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Dict, Any


ROOT_ID = "root"
ROOT_TEXT = "Central Topic"
ROOT_POSITION = (400.0, 300.0)

DEFAULT_NODE_WIDTH = 150.0
DEFAULT_NODE_HEIGHT = 50.0


def generate_id() -> str:
    """Generate a new globally unique node identity."""
    return str(uuid.uuid4())


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"'{key}' must be a finite number, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class Position:
    """2D coordinate in document space."""
    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Any) -> "Position":
        if not isinstance(data, dict):
            raise ValueError("position must be an object")
        return cls(x=_number(data.get("x"), "x"), y=_number(data.get("y"), "y"))


@dataclass(frozen=True)
class Size:
    """Explicit node footprint overriding the layout default."""
    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Any) -> "Size":
        if not isinstance(data, dict):
            raise ValueError("size must be an object")
        width = data.get("width", DEFAULT_NODE_WIDTH)
        height = data.get("height", DEFAULT_NODE_HEIGHT)
        # Older documents stored a width-only size
        if height is None:
            height = DEFAULT_NODE_HEIGHT
        return cls(width=_number(width, "width"), height=_number(height, "height"))


@dataclass(frozen=True)
class NodeStyle:
    """Visual style of a node."""
    background_color: Optional[str] = None
    color: Optional[str] = None
    font_size: Optional[int] = None

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {}
        if self.background_color is not None:
            data["backgroundColor"] = self.background_color
        if self.color is not None:
            data["color"] = self.color
        if self.font_size is not None:
            data["fontSize"] = self.font_size
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "NodeStyle":
        if not isinstance(data, dict):
            raise ValueError("style must be an object")
        font_size = data.get("fontSize")
        return cls(
            background_color=data.get("backgroundColor"),
            color=data.get("color"),
            font_size=int(_number(font_size, "fontSize")) if font_size is not None else None,
        )


class EdgeType(Enum):
    """Shape of the connector drawn from a parent to a child."""
    CURVED = "curved"
    STRAIGHT = "straight"


@dataclass(frozen=True)
class EdgeStyle:
    """Style of a node's incoming edge."""
    type: EdgeType = EdgeType.CURVED
    dashed: bool = False

    def to_dict(self) -> dict:
        return {"type": self.type.value, "dashed": self.dashed}

    @classmethod
    def from_dict(cls, data: Any) -> "EdgeStyle":
        if not isinstance(data, dict):
            raise ValueError("edgeStyle must be an object")
        try:
            edge_type = EdgeType(data.get("type", EdgeType.CURVED.value))
        except ValueError as exc:
            raise ValueError(f"unknown edge type {data.get('type')!r}") from exc
        return cls(type=edge_type, dashed=bool(data.get("dashed", False)))


@dataclass(frozen=True)
class Node:
    """A node of the document tree.

    Nodes are immutable values. Every edit builds new nodes along the path
    from the edited node to the root and shares every other subtree.
    """
    id: str
    text: str
    position: Position = field(default_factory=Position)
    children: Tuple["Node", ...] = ()
    parent_id: Optional[str] = None
    is_collapsed: bool = False
    icon: Optional[str] = None
    style: Optional[NodeStyle] = None
    edge_style: Optional[EdgeStyle] = None
    size: Optional[Size] = None
    notes: Optional[str] = None
    edge_label: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ID

    def footprint(self, default: Optional[Size] = None) -> Size:
        """Return the explicit size or the default node footprint."""
        if self.size is not None:
            return self.size
        return default or Size()

    def with_children(self, children) -> "Node":
        return replace(self, children=tuple(children))

    def to_dict(self) -> dict:
        """Serialize the node and its subtree to JSON-ready data."""
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "position": self.position.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }
        if self.parent_id is not None:
            data["parentId"] = self.parent_id
        if self.is_collapsed:
            data["isCollapsed"] = True
        if self.icon is not None:
            data["icon"] = self.icon
        if self.style is not None:
            data["style"] = self.style.to_dict()
        if self.edge_style is not None:
            data["edgeStyle"] = self.edge_style.to_dict()
        if self.size is not None:
            data["size"] = self.size.to_dict()
        if self.notes is not None:
            data["notes"] = self.notes
        if self.edge_label is not None:
            data["edgeLabel"] = self.edge_label
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Node":
        """Deserialize a node and its subtree.

        Raises ValueError when required fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ValueError("node must be an object")
        node_id = data.get("id")
        text = data.get("text")
        if not isinstance(node_id, str) or not node_id:
            raise ValueError(f"node id must be a non-empty string, got {node_id!r}")
        if not isinstance(text, str):
            raise ValueError(f"node {node_id!r} text must be a string")
        children = data.get("children", [])
        if not isinstance(children, list):
            raise ValueError(f"node {node_id!r} children must be a list")

        return cls(
            id=node_id,
            text=text,
            position=Position.from_dict(data.get("position")),
            children=tuple(cls.from_dict(child) for child in children),
            parent_id=data.get("parentId"),
            is_collapsed=bool(data.get("isCollapsed", False)),
            icon=data.get("icon"),
            style=NodeStyle.from_dict(data["style"]) if data.get("style") is not None else None,
            edge_style=(
                EdgeStyle.from_dict(data["edgeStyle"]) if data.get("edgeStyle") is not None else None
            ),
            size=Size.from_dict(data["size"]) if data.get("size") is not None else None,
            notes=data.get("notes"),
            edge_label=data.get("edgeLabel"),
        )


def new_document() -> Node:
    """Create the initial document: a lone root node."""
    return Node(id=ROOT_ID, text=ROOT_TEXT, position=Position(*ROOT_POSITION))
