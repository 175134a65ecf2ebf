"""Selection set and single-slot clipboard."""

from copy import deepcopy
from typing import Optional, List, Iterable, Tuple

from mindtree.model import Node
from mindtree.tree_ops import find_node


class Selection:
    """Ordered set of selected node ids.

    Insertion order is kept so that "the first selected node" (the copy
    source and paste target) is well defined.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: List[str] = []
        self.select(ids)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._ids)

    @property
    def first(self) -> Optional[str]:
        return self._ids[0] if self._ids else None

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._ids

    def __iter__(self):
        return iter(list(self._ids))

    def select(self, ids: Iterable[str]):
        """Replace the selection."""
        self._ids = list(dict.fromkeys(ids))

    def toggle(self, node_id: str):
        """Add or remove one id (shift-click)."""
        if node_id in self._ids:
            self._ids.remove(node_id)
        else:
            self._ids.append(node_id)

    def clear(self):
        self._ids = []

    def prune(self, document: Node):
        """Drop ids that no longer name a node of `document`."""
        self._ids = [node_id for node_id in self._ids if find_node(document, node_id) is not None]


class Clipboard:
    """Holds one subtree, independent of the live document."""

    def __init__(self, content: Optional[Node] = None):
        self._content = content

    @property
    def is_empty(self) -> bool:
        return self._content is None

    def put(self, subtree: Node):
        """Store a structural copy of `subtree`."""
        self._content = deepcopy(subtree)

    def get(self) -> Optional[Node]:
        return self._content

    def clear(self):
        self._content = None
