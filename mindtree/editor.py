"""The editor engine: one object owning the document history and UI state.

An `Editor` is created once at application start and handed to every
consumer. Views read `document`, `selection`, `drop_target_id` and `guides`
from it; every change goes through its commands, which commit new document
values to the `HistoryEngine`.
"""

import logging
from typing import Optional, List, Callable, Iterable

from mindtree.config import EditorSettings
from mindtree.model import Node, EdgeType, ROOT_ID
from mindtree.patches import (
    NodePatch, apply_patch, SetText, SetIcon, ToggleIcon, SetStyle, SetSize,
    SetNotes, SetEdgeType, SetEdgeDashed, SetEdgeLabel, ToggleCollapsed,
)
from mindtree.selection import Selection, Clipboard
from mindtree.session import SessionState, ViewState
from mindtree.snap import Guides, NO_GUIDES
from mindtree.tree_ops import (
    find_node, update_node, remove_nodes, append_child, add_child,
    deep_copy_with_new_ids, can_reparent, reparent, flatten_visible,
)
from mindtree.undo import HistoryEngine, ActionType

logger = logging.getLogger(__name__)


class Editor:
    """Command surface over the document, history, selection and clipboard."""

    def __init__(self, document: Optional[Node] = None,
                 settings: Optional[EditorSettings] = None):
        self.settings = settings or EditorSettings()
        self.history = HistoryEngine(document, max_entries=self.settings.max_history)
        self.selection = Selection()
        self.clipboard = Clipboard()

        # Transient view state, never persisted
        self.drop_target_id: Optional[str] = None
        self.guides: Guides = NO_GUIDES
        self.active_notes_node_id: Optional[str] = None

        self.view_state = ViewState()
        self.is_preview_mode = False

        # Callbacks
        self.on_changed: Optional[Callable[[], None]] = None

    # ==================== State ====================

    @property
    def document(self) -> Node:
        return self.history.document

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo and not self.history.is_coalescing

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo and not self.history.is_coalescing

    @property
    def can_copy(self) -> bool:
        return bool(self.selection)

    @property
    def can_cut(self) -> bool:
        return any(node_id != ROOT_ID for node_id in self.selection)

    @property
    def can_paste(self) -> bool:
        return not self.clipboard.is_empty and bool(self.selection)

    def find(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return find_node(self.document, node_id)

    def visible_nodes(self) -> List[Node]:
        return flatten_visible(self.document)

    def commit(self, document: Node, action_type: ActionType = ActionType.EDIT) -> bool:
        """Commit a new document as one undo step.

        Returns False (and records nothing) if the document did not change,
        or while a drag gesture owns the history.
        """
        if self.history.is_coalescing:
            logger.debug("commit of %s refused during an open gesture", action_type.value)
            return False
        if document is self.document:
            return False
        self.history.apply_operation(document, action_type)
        self.notify()
        return True

    def write_gesture(self, document: Node, action_type: ActionType = ActionType.MOVE):
        """Overwrite the open gesture's history entry.

        Only the interaction layer calls this, between `begin_coalescing` and
        `end_coalescing`.
        """
        self.history.apply_operation(document, action_type)
        self.notify()

    def notify(self):
        """Tell the view that something it renders changed."""
        if self.on_changed:
            self.on_changed()

    # ==================== History ====================

    def undo(self):
        """Undo the last step."""
        if self.history.undo():
            self.selection.clear()
            self.notify()

    def redo(self):
        """Redo the last undone step."""
        if self.history.redo():
            self.selection.clear()
            self.notify()

    # ==================== Selection ====================

    def set_selection(self, ids: Iterable[str]):
        self.selection.select(ids)
        self.notify()

    def toggle_selection(self, node_id: str):
        self.selection.toggle(node_id)
        self.notify()

    def clear_selection(self):
        if self.selection:
            self.selection.clear()
            self.notify()

    # ==================== Structure ====================

    def add_child(self, parent_id: str) -> Optional[str]:
        """Add a new child node and select it."""
        new_tree, new_id = add_child(self.document, parent_id, offset=self.settings.child_offset)
        if new_id is None:
            return None
        if not self.commit(new_tree, ActionType.ADD_CHILD):
            return None
        self.set_selection([new_id])
        return new_id

    def delete_selected(self):
        """Delete every selected node except the root."""
        ids = [node_id for node_id in self.selection if node_id != ROOT_ID]
        if not ids:
            return
        if not self.commit(remove_nodes(self.document, ids), ActionType.DELETE):
            return
        self.selection.clear()
        self.notify()

    def move_node(self, node_id: str, target_id: str) -> bool:
        """Reparent a node under `target_id` as one undo step.

        Moves that would put a node under itself or one of its descendants,
        or move the root, are rejected and leave the document unchanged.
        """
        if not can_reparent(self.document, node_id, target_id):
            logger.debug("move_node: cannot move %s under %s", node_id, target_id)
            return False
        return self.commit(reparent(self.document, node_id, target_id), ActionType.REPARENT)

    # ==================== Clipboard ====================

    def copy(self):
        """Copy the first selected node's subtree to the clipboard."""
        node = self.find(self.selection.first)
        if node is not None:
            self.clipboard.put(node)
            self.notify()

    def cut(self):
        """Copy the first selected node, then delete the whole selection."""
        ids = [node_id for node_id in self.selection if node_id != ROOT_ID]
        if not ids:
            return
        node = self.find(ids[0])
        if node is None:
            return
        if not self.commit(remove_nodes(self.document, ids), ActionType.CUT):
            return
        self.clipboard.put(node)
        self.selection.clear()
        self.notify()

    def paste(self) -> Optional[str]:
        """Paste a fresh copy of the clipboard under the first selected node.

        Returns the id of the pasted subtree's root. The clipboard is kept
        so the same content can be pasted again.
        """
        content = self.clipboard.get()
        target_id = self.selection.first
        if content is None or target_id is None or self.find(target_id) is None:
            return None
        pasted = deep_copy_with_new_ids(content, target_id)
        if not self.commit(append_child(self.document, target_id, pasted), ActionType.PASTE):
            return None
        return pasted.id

    # ==================== Node properties ====================

    def patch_node(self, node_id: str, *patches: NodePatch,
                   action_type: ActionType = ActionType.EDIT) -> bool:
        """Apply one or more patches to a node as a single undo step."""
        def transform(node: Node) -> Node:
            for patch in patches:
                node = apply_patch(node, patch, self.settings.default_size)
            return node

        return self.commit(update_node(self.document, node_id, transform), action_type)

    def set_text(self, node_id: str, text: str) -> bool:
        node = self.find(node_id)
        if node is None or node.text == text:
            return False
        return self.patch_node(node_id, SetText(text), action_type=ActionType.EDIT_TEXT)

    def toggle_collapse(self, node_id: str) -> bool:
        return self.patch_node(node_id, ToggleCollapsed(), action_type=ActionType.COLLAPSE)

    def set_edge_style(self, node_id: str, type: Optional[EdgeType] = None,
                       dashed: Optional[bool] = None) -> bool:
        """Change the shape and/or dash of a node's incoming edge."""
        if node_id == ROOT_ID:
            return False
        patches: List[NodePatch] = []
        if type is not None:
            patches.append(SetEdgeType(type))
        if dashed is not None:
            patches.append(SetEdgeDashed(dashed))
        if not patches:
            return False
        return self.patch_node(node_id, *patches, action_type=ActionType.EDGE_STYLE)

    def set_edge_label(self, node_id: str, label: Optional[str]) -> bool:
        if node_id == ROOT_ID:
            return False
        return self.patch_node(node_id, SetEdgeLabel(label), action_type=ActionType.EDGE_STYLE)

    def set_node_style(self, node_id: str, background_color: Optional[str] = None,
                       color: Optional[str] = None, font_size: Optional[int] = None) -> bool:
        patch = SetStyle(background_color=background_color, color=color, font_size=font_size)
        return self.patch_node(node_id, patch, action_type=ActionType.STYLE)

    def set_node_size(self, node_id: str, width: Optional[float] = None,
                      height: Optional[float] = None) -> bool:
        return self.patch_node(node_id, SetSize(width, height), action_type=ActionType.SIZE)

    def set_notes(self, node_id: str, notes: str) -> bool:
        return self.patch_node(node_id, SetNotes(notes), action_type=ActionType.NOTES)

    def set_icon(self, node_id: str, icon: Optional[str]) -> bool:
        return self.patch_node(node_id, SetIcon(icon), action_type=ActionType.ICON)

    def toggle_icon(self, node_id: str, icon: str) -> bool:
        """Pick an icon; picking the node's current icon removes it."""
        return self.patch_node(node_id, ToggleIcon(icon), action_type=ActionType.ICON)

    # ==================== View state ====================

    @property
    def active_notes_node(self) -> Optional[Node]:
        """Node whose notes panel is open; closes the panel if it is gone."""
        node = self.find(self.active_notes_node_id)
        if node is None and self.active_notes_node_id is not None:
            self.active_notes_node_id = None
        return node

    def toggle_notes_panel(self, node_id: Optional[str]):
        """Open the notes panel for a node, or close it if already open."""
        if node_id is not None and node_id == self.active_notes_node_id:
            self.active_notes_node_id = None
        else:
            self.active_notes_node_id = node_id
        self.notify()

    def set_drop_target(self, node_id: Optional[str]):
        self.drop_target_id = node_id

    def set_guides(self, guides: Guides):
        self.guides = guides

    def set_view_state(self, view_state: ViewState):
        self.view_state = view_state

    def toggle_preview_mode(self):
        self.is_preview_mode = not self.is_preview_mode
        self.selection.clear()
        self.notify()

    # ==================== Persistence ====================

    def snapshot(self) -> SessionState:
        """Durable state for the persistence layer."""
        return SessionState(
            history=list(self.history.history),
            current_index=self.history.current_index,
            selection=list(self.selection.ids),
            clipboard=self.clipboard.get(),
            view_state=self.view_state,
            is_preview_mode=self.is_preview_mode,
        )

    def load_session(self, state: SessionState):
        """Restore a saved session.

        History, cursor and clipboard are kept verbatim. Gesture and panel
        state is reset, and so is the selection, whose ids may be stale.
        """
        self.history.reset(state.history, state.current_index)
        self.clipboard = Clipboard(state.clipboard)
        self.selection.clear()
        self.drop_target_id = None
        self.guides = NO_GUIDES
        self.active_notes_node_id = None
        self.view_state = state.view_state
        self.is_preview_mode = state.is_preview_mode
        self.notify()

    @classmethod
    def from_session(cls, state: SessionState,
                     settings: Optional[EditorSettings] = None) -> "Editor":
        editor = cls(settings=settings)
        editor.load_session(state)
        return editor
