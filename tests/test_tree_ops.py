"""
Tests for mindtree.tree_ops module.
"""

from dataclasses import replace

from mindtree.model import Node, Position, ROOT_ID
from mindtree.tree_ops import (
    find_node, find_parent, node_ids, is_descendant, flatten_visible,
    update_node, remove_nodes, detach, append_child, add_child,
    deep_copy_with_new_ids, can_reparent, reparent, set_position, validate_tree,
)


class TestLookup:
    """Tests for tree queries."""

    def test_find_node(self, sibling_tree):
        """Nodes are found at any depth; unknown ids give None."""
        assert find_node(sibling_tree, "A1").text == "Alpha one"
        assert find_node(sibling_tree, ROOT_ID) is sibling_tree
        assert find_node(sibling_tree, "missing") is None

    def test_find_parent(self, sibling_tree):
        """The parent of a node is the node whose children hold it."""
        assert find_parent(sibling_tree, "A1").id == "A"
        assert find_parent(sibling_tree, "B").id == ROOT_ID
        assert find_parent(sibling_tree, ROOT_ID) is None

    def test_node_ids_pre_order(self, sibling_tree):
        """Ids are listed parent first, children in order."""
        assert node_ids(sibling_tree) == [ROOT_ID, "A", "A1", "B"]

    def test_is_descendant(self, chain_tree):
        """Only nodes strictly below count as descendants."""
        a = find_node(chain_tree, "A")

        assert is_descendant("B", chain_tree)
        assert is_descendant("B", a)
        assert not is_descendant("A", a)
        assert not is_descendant(ROOT_ID, a)

    def test_node_is_never_its_own_descendant(self, sibling_tree):
        """No node lists itself among its descendants."""
        for node_id in node_ids(sibling_tree):
            assert not is_descendant(node_id, find_node(sibling_tree, node_id))

    def test_flatten_visible_skips_collapsed_subtrees(self, sibling_tree):
        """A collapsed node is listed but its descendants are not."""
        collapsed = update_node(sibling_tree, "A", lambda n: replace(n, is_collapsed=True))

        assert [n.id for n in flatten_visible(sibling_tree)] == [ROOT_ID, "A", "A1", "B"]
        assert [n.id for n in flatten_visible(collapsed)] == [ROOT_ID, "A", "B"]


class TestPathCopy:
    """Tests for structural sharing of edits."""

    def test_update_shares_untouched_subtrees(self, sibling_tree):
        """Only the path to the edited node is rebuilt."""
        updated = update_node(sibling_tree, "A1", lambda n: replace(n, text="edited"))

        assert updated is not sibling_tree
        assert find_node(updated, "A1").text == "edited"
        assert find_node(sibling_tree, "A1").text == "Alpha one"
        assert find_node(updated, "A") is not find_node(sibling_tree, "A")
        assert find_node(updated, "B") is find_node(sibling_tree, "B")

    def test_update_missing_node_returns_input(self, sibling_tree):
        """A stale id is a no-op returning the very same tree."""
        assert update_node(sibling_tree, "gone", lambda n: replace(n, text="x")) is sibling_tree

    def test_set_position(self, sibling_tree):
        """set_position moves one node only."""
        moved = set_position(sibling_tree, "B", Position(1, 2))

        assert find_node(moved, "B").position == Position(1, 2)
        assert find_node(moved, "A") is find_node(sibling_tree, "A")


class TestRemove:
    """Tests for removing and detaching subtrees."""

    def test_remove_subtree(self, sibling_tree):
        """Removing a node takes its descendants with it."""
        result = remove_nodes(sibling_tree, ["A"])

        assert node_ids(result) == [ROOT_ID, "B"]
        assert result.children[0] is find_node(sibling_tree, "B")

    def test_remove_ignores_root_but_honours_others(self, sibling_tree):
        """The root survives a multi-delete that includes it."""
        result = remove_nodes(sibling_tree, [ROOT_ID, "B"])

        assert node_ids(result) == [ROOT_ID, "A", "A1"]

    def test_remove_only_root_is_no_op(self, sibling_tree):
        """Asking to delete just the root returns the input."""
        assert remove_nodes(sibling_tree, [ROOT_ID]) is sibling_tree

    def test_remove_missing_ids_is_no_op(self, sibling_tree):
        """Unknown ids leave the tree untouched."""
        assert remove_nodes(sibling_tree, ["ghost"]) is sibling_tree

    def test_detach(self, sibling_tree):
        """detach returns the pruned tree and the removed subtree."""
        pruned, detached = detach(sibling_tree, "A")

        assert detached is find_node(sibling_tree, "A")
        assert node_ids(pruned) == [ROOT_ID, "B"]

    def test_detach_root_or_missing(self, sibling_tree):
        """The root and unknown ids cannot be detached."""
        assert detach(sibling_tree, ROOT_ID) == (sibling_tree, None)
        assert detach(sibling_tree, "ghost") == (sibling_tree, None)


class TestAddChild:
    """Tests for creating nodes."""

    def test_add_child_places_right_of_parent(self, root_only):
        """New children sit to the right of the parent, stacked downwards."""
        tree, first = add_child(root_only, ROOT_ID)
        tree, second = add_child(tree, ROOT_ID)

        first_node = find_node(tree, first)
        second_node = find_node(tree, second)
        assert first_node.position == Position(600.0, 300.0)
        assert second_node.position == Position(600.0, 370.0)
        assert first_node.parent_id == ROOT_ID
        assert first_node.text == "New Topic"
        assert validate_tree(tree) == []

    def test_add_child_missing_parent(self, root_only):
        """Adding under an unknown parent changes nothing."""
        tree, new_id = add_child(root_only, "ghost")

        assert tree is root_only
        assert new_id is None

    def test_append_child_rewrites_parent_id(self, root_only):
        """The appended child points back at its new parent."""
        tree = append_child(root_only, ROOT_ID, Node(id="x", text="x", parent_id="elsewhere"))

        assert find_node(tree, "x").parent_id == ROOT_ID


class TestDeepCopy:
    """Tests for copying subtrees with fresh identities."""

    def test_all_ids_are_fresh(self, sibling_tree):
        """Every copied node gets an id unseen in the source."""
        source = find_node(sibling_tree, "A")
        copy = deep_copy_with_new_ids(source, ROOT_ID)

        assert set(node_ids(copy)).isdisjoint(node_ids(sibling_tree))
        assert copy.text == source.text
        assert copy.style == source.style
        assert copy.parent_id == ROOT_ID
        assert copy.children[0].parent_id == copy.id


class TestReparent:
    """Tests for moving subtrees."""

    def test_reparent_moves_subtree(self, chain_tree):
        """B moves from A to the root and keeps its identity."""
        result = reparent(chain_tree, "B", ROOT_ID)

        assert [c.id for c in result.children] == ["A", "B"]
        assert find_node(result, "A").children == ()
        assert find_node(result, "B").parent_id == ROOT_ID
        assert validate_tree(result) == []

    def test_reparent_onto_descendant_rejected(self, chain_tree):
        """Moving A under its own child would create a cycle."""
        assert not can_reparent(chain_tree, "A", "B")
        assert reparent(chain_tree, "A", "B") is chain_tree

    def test_reparent_onto_self_rejected(self, chain_tree):
        """A node cannot become its own parent."""
        assert not can_reparent(chain_tree, "A", "A")
        assert reparent(chain_tree, "A", "A") is chain_tree

    def test_reparent_root_rejected(self, chain_tree):
        """The root never moves."""
        assert not can_reparent(chain_tree, ROOT_ID, "B")
        assert reparent(chain_tree, ROOT_ID, "B") is chain_tree

    def test_reparent_missing_nodes_rejected(self, chain_tree):
        """Unknown ids on either side make the move a no-op."""
        assert reparent(chain_tree, "ghost", ROOT_ID) is chain_tree
        assert reparent(chain_tree, "B", "ghost") is chain_tree

    def test_reparent_onto_current_parent_is_no_op(self, chain_tree):
        """Dropping a node on its own parent returns the input tree."""
        assert can_reparent(chain_tree, "B", "A")
        assert reparent(chain_tree, "B", "A") is chain_tree


class TestValidate:
    """Tests for invariant checking."""

    def test_valid_tree(self, sibling_tree):
        """Fixture trees are consistent."""
        assert validate_tree(sibling_tree) == []

    def test_duplicate_ids_reported(self, root_only):
        """Two nodes with one id are flagged."""
        tree = append_child(root_only, ROOT_ID, Node(id="x", text="1"))
        tree = append_child(tree, ROOT_ID, Node(id="x", text="2"))

        assert any("duplicate" in problem for problem in validate_tree(tree))

    def test_wrong_parent_id_reported(self, root_only):
        """A child whose back-reference is wrong is flagged."""
        bad = root_only.with_children([Node(id="x", text="x", parent_id="nope")])

        assert validate_tree(bad)
