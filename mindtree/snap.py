"""Alignment snapping for dragged nodes.

Each axis is handled on its own: the dragged node's leading edge, center and
trailing edge are compared with the same three reference points of every
other visible node, and the closest pair wins if it is within tolerance.
"""

from dataclasses import dataclass
from typing import Optional, Iterable, List, Tuple

from mindtree.model import Node, Position, Size
from mindtree.tree_ops import flatten_visible

SNAP_TOLERANCE = 5.0  # screen pixels


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in document space."""
    x: float
    y: float
    width: float
    height: float

    def anchors(self, axis: str) -> Tuple[float, float, float]:
        """Leading edge, center and trailing edge along `axis`."""
        if axis == "x":
            return (self.x, self.x + self.width / 2, self.x + self.width)
        return (self.y, self.y + self.height / 2, self.y + self.height)

    @classmethod
    def of_node(cls, node: Node, default_size: Optional[Size] = None) -> "Rect":
        size = node.footprint(default_size)
        return cls(node.position.x, node.position.y, size.width, size.height)


@dataclass(frozen=True)
class Guides:
    """Active alignment guide lines, one optional coordinate per axis."""
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.x is not None or self.y is not None


NO_GUIDES = Guides()


@dataclass(frozen=True)
class SnapResult:
    position: Position
    guides: Guides


def _snap_axis(own: Tuple[float, float, float],
               others: List[Tuple[float, float, float]],
               tolerance: float) -> Tuple[float, Optional[float]]:
    """Return (shift, guide) for one axis; shift is 0 when nothing snaps."""
    best: Optional[Tuple[float, float, float]] = None  # distance, shift, guide
    for anchors in others:
        for other in anchors:
            for mine in own:
                distance = abs(other - mine)
                if best is None or distance < best[0]:
                    best = (distance, other - mine, other)

    if best is None or best[0] >= tolerance:
        return 0.0, None
    return best[1], best[2]


def snap_position(position: Position, size: Size, others: Iterable[Rect],
                  zoom: float = 1.0, tolerance: float = SNAP_TOLERANCE) -> SnapResult:
    """Snap a dragged box against other boxes.

    `tolerance` is a screen-space distance, so it is divided by `zoom` to get
    the document-space tolerance.
    """
    if zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")

    others = list(others)
    dragged = Rect(position.x, position.y, size.width, size.height)
    limit = tolerance / zoom

    shift_x, guide_x = _snap_axis(dragged.anchors("x"), [r.anchors("x") for r in others], limit)
    shift_y, guide_y = _snap_axis(dragged.anchors("y"), [r.anchors("y") for r in others], limit)

    return SnapResult(
        position=Position(position.x + shift_x, position.y + shift_y),
        guides=Guides(guide_x, guide_y),
    )


class SnapEngine:
    """Snaps a node of a document against the other visible nodes."""

    def __init__(self, tolerance: float = SNAP_TOLERANCE,
                 default_size: Optional[Size] = None, enabled: bool = True):
        self.tolerance = tolerance
        self.default_size = default_size or Size()
        self.enabled = enabled

    def other_rects(self, tree: Node, node_id: str) -> List[Rect]:
        """Boxes of every visible node except `node_id`."""
        return [
            Rect.of_node(node, self.default_size)
            for node in flatten_visible(tree)
            if node.id != node_id
        ]

    def snap(self, tree: Node, node: Node, position: Position, zoom: float = 1.0) -> SnapResult:
        """Snap `node` moved to `position` against the rest of `tree`."""
        if not self.enabled:
            return SnapResult(position, NO_GUIDES)
        return snap_position(
            position,
            node.footprint(self.default_size),
            self.other_rects(tree, node.id),
            zoom=zoom,
            tolerance=self.tolerance,
        )
