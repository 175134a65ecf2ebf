"""Typed edits of a single node's properties.

Each settable property has its own patch class carrying a value of the right
type, so an editor can only ask for combinations that make sense.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from mindtree.errors import PatchError
from mindtree.model import Node, NodeStyle, EdgeStyle, EdgeType, Size, Position


@dataclass(frozen=True)
class SetText:
    text: str


@dataclass(frozen=True)
class SetIcon:
    icon: Optional[str]


@dataclass(frozen=True)
class ToggleIcon:
    """Set the icon, or clear it when the node already shows it."""
    icon: str


@dataclass(frozen=True)
class SetStyle:
    """Merge the given style fields into the node's style."""
    background_color: Optional[str] = None
    color: Optional[str] = None
    font_size: Optional[int] = None


@dataclass(frozen=True)
class SetSize:
    """Set one or both dimensions; a missing one keeps its current value."""
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class SetNotes:
    notes: str


@dataclass(frozen=True)
class SetEdgeType:
    type: EdgeType


@dataclass(frozen=True)
class SetEdgeDashed:
    dashed: bool


@dataclass(frozen=True)
class ToggleEdgeDashed:
    pass


@dataclass(frozen=True)
class SetEdgeLabel:
    label: Optional[str]


@dataclass(frozen=True)
class SetCollapsed:
    collapsed: bool


@dataclass(frozen=True)
class ToggleCollapsed:
    pass


@dataclass(frozen=True)
class SetPosition:
    position: Position


NodePatch = Union[
    SetText, SetIcon, ToggleIcon, SetStyle, SetSize, SetNotes,
    SetEdgeType, SetEdgeDashed, ToggleEdgeDashed, SetEdgeLabel,
    SetCollapsed, ToggleCollapsed, SetPosition,
]

EDGE_PATCHES = (SetEdgeType, SetEdgeDashed, ToggleEdgeDashed, SetEdgeLabel)


def _positive(value: float, name: str) -> float:
    if value is None or value <= 0:
        raise PatchError(f"{name} must be positive, got {value!r}")
    return value


def apply_patch(node: Node, patch: NodePatch, default_size: Optional[Size] = None) -> Node:
    """Return `node` with `patch` applied.

    Edge patches leave the root untouched: it has no incoming edge.
    Raises PatchError for invalid values.
    """
    if isinstance(patch, EDGE_PATCHES) and node.is_root:
        return node

    if isinstance(patch, SetText):
        return replace(node, text=patch.text)

    elif isinstance(patch, SetIcon):
        return replace(node, icon=patch.icon)

    elif isinstance(patch, ToggleIcon):
        return replace(node, icon=None if node.icon == patch.icon else patch.icon)

    elif isinstance(patch, SetStyle):
        style = node.style or NodeStyle()
        if patch.font_size is not None:
            _positive(patch.font_size, "font size")
        return replace(node, style=NodeStyle(
            background_color=(
                patch.background_color if patch.background_color is not None
                else style.background_color
            ),
            color=patch.color if patch.color is not None else style.color,
            font_size=patch.font_size if patch.font_size is not None else style.font_size,
        ))

    elif isinstance(patch, SetSize):
        current = node.footprint(default_size)
        width = _positive(patch.width, "width") if patch.width is not None else current.width
        height = _positive(patch.height, "height") if patch.height is not None else current.height
        return replace(node, size=Size(width, height))

    elif isinstance(patch, SetNotes):
        return replace(node, notes=patch.notes)

    elif isinstance(patch, SetEdgeType):
        edge = node.edge_style or EdgeStyle()
        return replace(node, edge_style=replace(edge, type=patch.type))

    elif isinstance(patch, SetEdgeDashed):
        edge = node.edge_style or EdgeStyle()
        return replace(node, edge_style=replace(edge, dashed=patch.dashed))

    elif isinstance(patch, ToggleEdgeDashed):
        edge = node.edge_style or EdgeStyle()
        return replace(node, edge_style=replace(edge, dashed=not edge.dashed))

    elif isinstance(patch, SetEdgeLabel):
        return replace(node, edge_label=patch.label or None)

    elif isinstance(patch, SetCollapsed):
        return replace(node, is_collapsed=patch.collapsed)

    elif isinstance(patch, ToggleCollapsed):
        return replace(node, is_collapsed=not node.is_collapsed)

    elif isinstance(patch, SetPosition):
        return replace(node, position=patch.position)

    raise PatchError(f"unknown patch {patch!r}")
