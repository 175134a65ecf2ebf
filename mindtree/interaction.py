"""Pointer gestures: selection clicks and drag-to-move/reparent.

A drag runs through a small state machine:

    IDLE --pointer down on node--> PENDING_DRAG --moved past threshold--> DRAGGING
      ^                                 |                                    |
      +----------- pointer up ----------+------------ pointer up -----------+

Entering DRAGGING opens a coalesced history entry; every move overwrites
it and pointer up closes it, so a whole drag (including a final reparent
onto the drop target) is a single undo step. This class is the only caller
of `begin_coalescing`/`end_coalescing` and of `Editor.write_gesture`.
Ordinary editor commands are refused while the gesture is open, so Escape can
restore the pre-drag document without dropping anyone else's edit.

All points are in document space; converting from screen space is the
view's job. `zoom` is passed along so screen-space thresholds and snapping
tolerances stay constant on screen.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mindtree.editor import Editor
from mindtree.model import Node, Position
from mindtree.snap import SnapEngine, Rect, NO_GUIDES
from mindtree.tree_ops import is_descendant, set_position, can_reparent, reparent
from mindtree.undo import ActionType

logger = logging.getLogger(__name__)


class GestureState(Enum):
    IDLE = "idle"
    PENDING_DRAG = "pending_drag"
    DRAGGING = "dragging"


@dataclass
class DragGesture:
    """Bookkeeping for one pointer-down .. pointer-up sequence on a node."""
    node_id: str
    pointer_origin: Position
    node_origin: Position
    state: GestureState = GestureState.PENDING_DRAG
    base_document: Optional[Node] = None


class InteractionCoordinator:
    """Turns pointer events into editor and history operations."""

    def __init__(self, editor: Editor, snap_engine: Optional[SnapEngine] = None):
        self.editor = editor
        settings = editor.settings
        self.snap_engine = snap_engine or SnapEngine(
            tolerance=settings.snap_tolerance,
            default_size=settings.default_size,
            enabled=settings.snap_enabled,
        )
        self.drag_threshold = settings.drag_threshold
        self._gesture: Optional[DragGesture] = None

    @property
    def state(self) -> GestureState:
        return self._gesture.state if self._gesture else GestureState.IDLE

    @property
    def dragged_node_id(self) -> Optional[str]:
        if self._gesture and self._gesture.state == GestureState.DRAGGING:
            return self._gesture.node_id
        return None

    # ==================== Hit testing ====================

    def _contains(self, node: Node, point: Position) -> bool:
        rect = Rect.of_node(node, self.editor.settings.default_size)
        return (rect.x <= point.x <= rect.x + rect.width and
                rect.y <= point.y <= rect.y + rect.height)

    def node_at(self, point: Position, exclude: Optional[Node] = None) -> Optional[Node]:
        """Find the top-most visible node under `point`.

        With `exclude`, that node and its whole subtree are skipped, so the
        result is always a legal drop target for it.
        """
        # Later nodes in pre-order are drawn on top
        for node in reversed(self.editor.visible_nodes()):
            if exclude is not None and (node.id == exclude.id or is_descendant(node.id, exclude)):
                continue
            if self._contains(node, point):
                return node
        return None

    # ==================== Pointer events ====================

    def pointer_down(self, point: Position, shift: bool = False) -> Optional[str]:
        """Select the node under the pointer and arm a possible drag."""
        if self._gesture is not None:
            self.pointer_up()

        node = self.node_at(point)
        if node is None:
            if not shift:
                self.editor.clear_selection()
            return None

        if shift:
            self.editor.toggle_selection(node.id)
        else:
            self.editor.set_selection([node.id])

        self._gesture = DragGesture(
            node_id=node.id,
            pointer_origin=point,
            node_origin=node.position,
        )
        return node.id

    def pointer_move(self, point: Position, zoom: float = 1.0):
        """Advance the drag: cross the threshold, move, snap, find a drop target."""
        gesture = self._gesture
        if gesture is None:
            return

        dx = point.x - gesture.pointer_origin.x
        dy = point.y - gesture.pointer_origin.y

        if gesture.state == GestureState.PENDING_DRAG:
            # Threshold is in screen pixels
            if math.hypot(dx, dy) * zoom < self.drag_threshold:
                return
            if self.editor.find(gesture.node_id) is None:
                self._gesture = None
                return
            self.editor.history.begin_coalescing(ActionType.MOVE)
            gesture.base_document = self.editor.document
            gesture.state = GestureState.DRAGGING

        node = self.editor.find(gesture.node_id)
        if node is None:
            logger.debug("dragged node %s vanished mid-gesture", gesture.node_id)
            self._finish()
            return

        document = self.editor.document
        result = self.snap_engine.snap(document, node, gesture.node_origin.offset(dx, dy), zoom)

        target = self.node_at(point, exclude=node)
        self.editor.set_guides(result.guides)
        self.editor.set_drop_target(target.id if target is not None else None)
        self.editor.write_gesture(set_position(document, node.id, result.position), ActionType.MOVE)

    def pointer_up(self):
        """End the gesture, reparenting onto the drop target if there is one."""
        gesture = self._gesture
        if gesture is None:
            return
        if gesture.state == GestureState.PENDING_DRAG:
            # Never crossed the threshold: it was a click
            self._gesture = None
            return

        target_id = self.editor.drop_target_id
        document = self.editor.document
        if target_id is not None and can_reparent(document, gesture.node_id, target_id):
            self.editor.write_gesture(
                reparent(document, gesture.node_id, target_id), ActionType.REPARENT
            )
        self._finish()

    def blur(self):
        """Focus loss ends the gesture like a pointer up without a target."""
        if self._gesture is not None and self._gesture.state == GestureState.DRAGGING:
            self.editor.set_drop_target(None)
        self.pointer_up()

    def cancel(self):
        """Escape: abandon the gesture and restore the pre-drag document."""
        gesture = self._gesture
        if gesture is None:
            return
        if gesture.state == GestureState.DRAGGING and gesture.base_document is not None:
            self.editor.write_gesture(gesture.base_document, ActionType.MOVE)
            self._finish()
        else:
            self._gesture = None

    def _finish(self):
        if self.editor.history.is_coalescing:
            self.editor.history.end_coalescing()
        self._gesture = None
        self.editor.set_drop_target(None)
        self.editor.set_guides(NO_GUIDES)
        self.editor.notify()
