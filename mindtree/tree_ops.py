"""Pure structural algorithms over the document tree.

None of these functions mutate their input. Edits rebuild only the nodes on
the path from the edited node up to the root; every other subtree of the
result is the very same object as in the input tree.

Stale ids are expected (the UI may still reference a node that an undo just
removed), so lookups return None and edits return the input tree unchanged
instead of raising.
"""

import logging
from dataclasses import replace
from typing import Optional, List, Tuple, Iterator, Iterable, Callable, Set

from mindtree.model import Node, Position, ROOT_ID, generate_id

logger = logging.getLogger(__name__)

NEW_NODE_TEXT = "New Topic"
CHILD_OFFSET = (200.0, 0.0)
CHILD_SPACING = 70.0


# ==================== Lookup ====================

def iter_nodes(tree: Node) -> Iterator[Node]:
    """Yield every node in pre-order, ignoring collapse state."""
    yield tree
    for child in tree.children:
        yield from iter_nodes(child)


def find_node(tree: Node, node_id: str) -> Optional[Node]:
    """Depth-first search for a node by identity."""
    if tree.id == node_id:
        return tree
    for child in tree.children:
        found = find_node(child, node_id)
        if found is not None:
            return found
    return None


def find_parent(tree: Node, node_id: str) -> Optional[Node]:
    """Return the node whose children contain `node_id`."""
    for child in tree.children:
        if child.id == node_id:
            return tree
        found = find_parent(child, node_id)
        if found is not None:
            return found
    return None


def node_ids(tree: Node) -> List[str]:
    """All ids of the tree in pre-order."""
    return [node.id for node in iter_nodes(tree)]


def is_descendant(candidate_id: str, of_node: Node) -> bool:
    """True if `candidate_id` names a node strictly below `of_node`."""
    for child in of_node.children:
        if child.id == candidate_id or is_descendant(candidate_id, child):
            return True
    return False


def flatten_visible(tree: Node) -> List[Node]:
    """Pre-order list of nodes, not descending into collapsed nodes.

    A collapsed node is itself part of the result; its descendants are not.
    """
    result = [tree]
    if not tree.is_collapsed:
        for child in tree.children:
            result.extend(flatten_visible(child))
    return result


# ==================== Path-copy edits ====================

def _update(node: Node, node_id: str, transform: Callable[[Node], Node]) -> Optional[Node]:
    if node.id == node_id:
        return transform(node)
    for index, child in enumerate(node.children):
        updated = _update(child, node_id, transform)
        if updated is not None:
            children = node.children[:index] + (updated,) + node.children[index + 1:]
            return replace(node, children=children)
    return None


def update_node(tree: Node, node_id: str, transform: Callable[[Node], Node]) -> Node:
    """Apply `transform` to one node, rebuilding only its path to the root."""
    updated = _update(tree, node_id, transform)
    if updated is None:
        logger.debug("update_node: %s not found, tree unchanged", node_id)
        return tree
    return updated


def _remove(node: Node, ids: Set[str]) -> Node:
    changed = False
    kept = []
    for child in node.children:
        if child.id in ids:
            changed = True
            continue
        new_child = _remove(child, ids)
        if new_child is not child:
            changed = True
        kept.append(new_child)
    return replace(node, children=tuple(kept)) if changed else node


def remove_nodes(tree: Node, ids: Iterable[str]) -> Node:
    """Remove every node in `ids` together with its subtree.

    The root can never be removed; a request for it is ignored while the
    other ids are still honoured.
    """
    targets = set(ids)
    if tree.id in targets or ROOT_ID in targets:
        logger.debug("remove_nodes: ignoring request to remove the root")
        targets.discard(tree.id)
        targets.discard(ROOT_ID)
    if not targets:
        return tree
    return _remove(tree, targets)


def detach(tree: Node, node_id: str) -> Tuple[Node, Optional[Node]]:
    """Cut one node (with its subtree) out of the tree.

    Returns (tree_without_node, detached_subtree). Detaching the root or a
    missing node returns (tree, None).
    """
    if node_id == tree.id or node_id == ROOT_ID:
        logger.debug("detach: the root cannot be detached")
        return tree, None
    node = find_node(tree, node_id)
    if node is None:
        logger.debug("detach: %s not found", node_id)
        return tree, None
    return _remove(tree, {node_id}), node


def append_child(tree: Node, parent_id: str, child: Node) -> Node:
    """Append `child` as the last child of `parent_id`.

    The child's `parent_id` back-reference is rewritten to match.
    """
    def attach(parent: Node) -> Node:
        return parent.with_children(parent.children + (replace(child, parent_id=parent.id),))

    return update_node(tree, parent_id, attach)


def add_child(tree: Node, parent_id: str, text: str = NEW_NODE_TEXT,
              offset: Tuple[float, float] = CHILD_OFFSET) -> Tuple[Node, Optional[str]]:
    """Create a new child under `parent_id`.

    The node is placed to the right of its parent and below any existing
    siblings. Returns (new_tree, new_id); new_id is None if the parent is gone.
    """
    parent = find_node(tree, parent_id)
    if parent is None:
        logger.debug("add_child: parent %s not found", parent_id)
        return tree, None

    new_node = Node(
        id=generate_id(),
        text=text,
        position=parent.position.offset(offset[0], offset[1] + len(parent.children) * CHILD_SPACING),
        parent_id=parent_id,
    )
    return append_child(tree, parent_id, new_node), new_node.id


def deep_copy_with_new_ids(subtree: Node, parent_id: Optional[str] = None) -> Node:
    """Copy a subtree, minting a fresh id for every node in it.

    Each copied child's `parent_id` points at its copied parent. The copy's
    own `parent_id` is set to `parent_id` (the caller re-parents it anyway).
    """
    new_id = generate_id()
    children = tuple(deep_copy_with_new_ids(child, new_id) for child in subtree.children)
    return replace(subtree, id=new_id, parent_id=parent_id, children=children)


# ==================== Reparenting ====================

def can_reparent(tree: Node, node_id: str, target_id: str) -> bool:
    """Cycle-safety test for moving `node_id` under `target_id`."""
    if node_id == tree.id or node_id == ROOT_ID or node_id == target_id:
        return False
    node = find_node(tree, node_id)
    if node is None or find_node(tree, target_id) is None:
        return False
    return not is_descendant(target_id, node)


def reparent(tree: Node, node_id: str, target_id: str) -> Node:
    """Move a subtree under a new parent, keeping every identity.

    Returns the input tree when the move would create a cycle, touch the
    root, or reference a missing node. Dropping a node onto its current
    parent is a legal no-op and also returns the input tree.
    """
    if not can_reparent(tree, node_id, target_id):
        logger.debug("reparent: rejected moving %s under %s", node_id, target_id)
        return tree
    parent = find_parent(tree, node_id)
    if parent is not None and parent.id == target_id:
        return tree

    without, detached = detach(tree, node_id)
    if detached is None:
        return tree
    return append_child(without, target_id, detached)


def set_position(tree: Node, node_id: str, position: Position) -> Node:
    """Move one node in document space."""
    return update_node(tree, node_id, lambda node: replace(node, position=position))


# ==================== Validation ====================

def validate_tree(tree: Node) -> List[str]:
    """Check the structural invariants and describe every violation."""
    problems: List[str] = []
    if tree.id != ROOT_ID:
        problems.append(f"root id is {tree.id!r}, expected {ROOT_ID!r}")
    if tree.parent_id is not None:
        problems.append("root has a parent id")

    seen: Set[str] = set()

    def walk(node: Node) -> None:
        if node.id in seen:
            problems.append(f"duplicate id {node.id!r}")
        seen.add(node.id)
        for child in node.children:
            if child.id == ROOT_ID:
                problems.append("root sentinel used below the root")
            if child.parent_id != node.id:
                problems.append(
                    f"node {child.id!r} has parent id {child.parent_id!r}, expected {node.id!r}"
                )
            walk(child)

    walk(tree)
    return problems
