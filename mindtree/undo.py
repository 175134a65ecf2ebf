"""Undo/Redo history for MindTree.

The history is a list of immutable document snapshots with a cursor into it.
Committing while the cursor is not at the end drops the redo branch. While a
gesture is being coalesced, commits overwrite the entry at the cursor so the
whole gesture becomes a single undo step.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Callable, Sequence, Tuple

from mindtree.model import Node, new_document

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Kinds of undoable edits, used for menu and tooltip labels."""
    INITIAL = "initial"
    ADD_CHILD = "add_child"
    DELETE = "delete"
    CUT = "cut"
    PASTE = "paste"
    EDIT_TEXT = "edit_text"
    MOVE = "move"
    REPARENT = "reparent"
    STYLE = "style"
    EDGE_STYLE = "edge_style"
    SIZE = "size"
    NOTES = "notes"
    ICON = "icon"
    COLLAPSE = "collapse"
    EDIT = "edit"


DESCRIPTIONS = {
    ActionType.INITIAL: "Open document",
    ActionType.ADD_CHILD: "Add child node",
    ActionType.DELETE: "Delete nodes",
    ActionType.CUT: "Cut nodes",
    ActionType.PASTE: "Paste nodes",
    ActionType.EDIT_TEXT: "Edit node text",
    ActionType.MOVE: "Move node",
    ActionType.REPARENT: "Reparent node",
    ActionType.STYLE: "Change node style",
    ActionType.EDGE_STYLE: "Change edge style",
    ActionType.SIZE: "Resize node",
    ActionType.NOTES: "Edit notes",
    ActionType.ICON: "Change icon",
    ActionType.COLLAPSE: "Collapse/expand node",
    ActionType.EDIT: "Edit",
}


@dataclass(frozen=True)
class HistoryEntry:
    """One committed document snapshot."""
    document: Node
    action_type: ActionType = ActionType.EDIT

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self.action_type]


class HistoryEngine:
    """Owns the document history and is the only place it changes."""

    def __init__(self, initial: Optional[Node] = None, max_entries: int = 100):
        if max_entries < 2:
            raise ValueError("max_entries must allow at least one undo step")
        self.max_entries = max_entries
        self._entries: List[HistoryEntry] = [
            HistoryEntry(initial if initial is not None else new_document(), ActionType.INITIAL)
        ]
        self._current_index = 0
        self._is_coalescing = False

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    # ==================== State ====================

    @property
    def document(self) -> Node:
        """The committed document at the cursor."""
        return self._entries[self._current_index].document

    @property
    def history(self) -> Tuple[Node, ...]:
        return tuple(entry.document for entry in self._entries)

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def is_coalescing(self) -> bool:
        return self._is_coalescing

    @property
    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self._current_index > 0

    @property
    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self._current_index < len(self._entries) - 1

    @property
    def undo_description(self) -> str:
        """Get description of the step undo would revert."""
        if self.can_undo:
            return self._entries[self._current_index].description
        return ""

    @property
    def redo_description(self) -> str:
        """Get description of the step redo would reapply."""
        if self.can_redo:
            return self._entries[self._current_index + 1].description
        return ""

    def __len__(self) -> int:
        return len(self._entries)

    # ==================== Commits ====================

    def apply_operation(self, document: Node, action_type: ActionType = ActionType.EDIT):
        """Commit a new document.

        Outside a gesture this appends a new entry and discards any redo
        branch. During a gesture it overwrites the gesture's entry in place.
        """
        if self._is_coalescing:
            self._entries[self._current_index] = HistoryEntry(document, action_type)
        else:
            self._push(HistoryEntry(document, action_type))
        self._notify_changed()

    def begin_coalescing(self, action_type: ActionType = ActionType.MOVE):
        """Open a gesture: duplicate the current document as its write target."""
        if self._is_coalescing:
            logger.debug("begin_coalescing called during an open gesture; ignored")
            return
        self._push(HistoryEntry(self.document, action_type))
        self._is_coalescing = True
        self._notify_changed()

    def end_coalescing(self):
        """Close the gesture; its entry stays as exactly one undo step."""
        self._is_coalescing = False
        self._notify_changed()

    def _push(self, entry: HistoryEntry):
        del self._entries[self._current_index + 1:]
        self._entries.append(entry)
        self._current_index = len(self._entries) - 1

        # Trim history if needed
        while len(self._entries) > self.max_entries:
            self._entries.pop(0)
            self._current_index -= 1

    # ==================== Navigation ====================

    def undo(self) -> bool:
        """Step the cursor back. Returns False when there is nothing to undo."""
        if self._is_coalescing:
            logger.debug("undo ignored during an open gesture")
            return False
        if not self.can_undo:
            return False
        self._current_index -= 1
        self._notify_changed()
        return True

    def redo(self) -> bool:
        """Step the cursor forward. Returns False when there is nothing to redo."""
        if self._is_coalescing:
            logger.debug("redo ignored during an open gesture")
            return False
        if not self.can_redo:
            return False
        self._current_index += 1
        self._notify_changed()
        return True

    def reset(self, history: Sequence[Node], current_index: int):
        """Replace the whole log, e.g. after loading a saved session.

        The log is kept as given, even past `max_entries`; the next recorded
        operation trims it. The coalescing flag is always cleared and an
        out-of-range cursor is clamped into the log.
        """
        if not history:
            raise ValueError("history must contain at least one document")
        entries = [HistoryEntry(doc, ActionType.EDIT) for doc in history]
        entries[0] = HistoryEntry(history[0], ActionType.INITIAL)
        self._entries = entries
        self._current_index = max(0, min(current_index, len(entries) - 1))
        self._is_coalescing = False
        self._notify_changed()

    def clear(self, document: Optional[Node] = None):
        """Clear all history, keeping only `document` (or the current one)."""
        self.reset([document if document is not None else self.document], 0)

    def _notify_changed(self):
        """Notify that undo/redo state changed."""
        if self.on_state_changed:
            self.on_state_changed()
