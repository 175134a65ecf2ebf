"""Persisted session state and its load contract.

Only durable fields are written: the history, its cursor, the selection,
the clipboard and the view transform. Gesture and panel state
(coalescing flag, drop target, notes focus) is never persisted and is
ignored if an older file carries it.
"""

import json
import math
from dataclasses import dataclass, field
from typing import Optional, List, Any

from mindtree.errors import SessionError
from mindtree.model import Node, new_document
from mindtree.tree_ops import validate_tree


@dataclass(frozen=True)
class ViewState:
    """Camera pan and zoom."""
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "scale": self.scale}

    @classmethod
    def from_dict(cls, data: Any) -> "ViewState":
        if not isinstance(data, dict):
            raise SessionError("viewState must be an object")
        try:
            scale = float(data.get("scale", 1.0))
            view = cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)), scale=scale)
        except (TypeError, ValueError) as exc:
            raise SessionError(f"bad viewState: {exc}") from exc
        if not math.isfinite(view.scale) or view.scale <= 0:
            raise SessionError(f"viewState scale must be positive, got {view.scale}")
        return view


@dataclass
class SessionState:
    history: List[Node] = field(default_factory=lambda: [new_document()])
    current_index: int = 0
    selection: List[str] = field(default_factory=list)
    clipboard: Optional[Node] = None
    view_state: ViewState = field(default_factory=ViewState)
    is_preview_mode: bool = False

    @property
    def document(self) -> Node:
        return self.history[self.current_index]

    def to_dict(self) -> dict:
        return {
            "history": [doc.to_dict() for doc in self.history],
            "currentIndex": self.current_index,
            "selectedNodeIds": list(self.selection),
            "clipboard": self.clipboard.to_dict() if self.clipboard is not None else None,
            "viewState": self.view_state.to_dict(),
            "isPreviewMode": self.is_preview_mode,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SessionState":
        """Parse persisted state.

        Raises SessionError for anything that cannot be trusted; the caller
        falls back to a fresh session.
        """
        if not isinstance(data, dict):
            raise SessionError("session state must be an object")

        raw_history = data.get("history")
        if not isinstance(raw_history, list) or not raw_history:
            raise SessionError("history must be a non-empty list")
        try:
            history = [Node.from_dict(doc) for doc in raw_history]
            clipboard = Node.from_dict(data["clipboard"]) if data.get("clipboard") is not None else None
        except (TypeError, ValueError) as exc:
            raise SessionError(f"malformed node: {exc}") from exc

        for index, doc in enumerate(history):
            problems = validate_tree(doc)
            if problems:
                raise SessionError(f"history[{index}] is not a valid tree: {problems[0]}")

        current_index = data.get("currentIndex", len(history) - 1)
        if isinstance(current_index, bool) or not isinstance(current_index, int):
            raise SessionError(f"currentIndex must be an integer, got {current_index!r}")
        if not 0 <= current_index < len(history):
            raise SessionError(f"currentIndex {current_index} out of range")

        selection = data.get("selectedNodeIds", [])
        if not isinstance(selection, list) or not all(isinstance(i, str) for i in selection):
            raise SessionError("selectedNodeIds must be a list of strings")

        view_state = ViewState.from_dict(data["viewState"]) if data.get("viewState") is not None else ViewState()

        return cls(
            history=history,
            current_index=current_index,
            selection=selection,
            clipboard=clipboard,
            view_state=view_state,
            is_preview_mode=bool(data.get("isPreviewMode", False)),
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "SessionState":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise SessionError(f"invalid JSON: {exc}") from exc
        return cls.from_dict(data)
