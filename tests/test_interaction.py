"""
Tests for mindtree.interaction module.
"""

import pytest

from mindtree.interaction import InteractionCoordinator, GestureState
from mindtree.model import Position, ROOT_ID
from mindtree.tree_ops import find_node, node_ids
from mindtree.undo import ActionType


@pytest.fixture
def coordinator(chain_editor):
    return InteractionCoordinator(chain_editor)


def _drag(coordinator, start, end, zoom=1.0):
    coordinator.pointer_down(Position(*start))
    coordinator.pointer_move(Position(*end), zoom=zoom)
    coordinator.pointer_up()


class TestClicks:
    """Tests for pointer presses that never become drags."""

    def test_click_selects(self, coordinator, chain_editor):
        """A click selects the node and records nothing."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_up()

        assert chain_editor.selection.ids == ("B",)
        assert not chain_editor.can_undo
        assert coordinator.state == GestureState.IDLE

    def test_shift_click_toggles(self, coordinator, chain_editor):
        """Shift adds to and removes from the selection."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_up()
        coordinator.pointer_down(Position(710, 310), shift=True)
        coordinator.pointer_up()
        assert chain_editor.selection.ids == ("B", "A")

        coordinator.pointer_down(Position(1010, 310), shift=True)
        coordinator.pointer_up()
        assert chain_editor.selection.ids == ("A",)

    def test_click_on_canvas_clears_selection(self, coordinator, chain_editor):
        """Pressing on empty space deselects everything."""
        chain_editor.set_selection(["A"])

        assert coordinator.pointer_down(Position(0, 0)) is None
        assert not chain_editor.selection
        assert coordinator.state == GestureState.IDLE

    def test_small_move_stays_a_click(self, coordinator, chain_editor):
        """Moving less than the threshold never starts a drag."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1013, 310))

        assert coordinator.state == GestureState.PENDING_DRAG
        coordinator.pointer_up()
        assert not chain_editor.can_undo

    def test_threshold_is_in_screen_pixels(self, coordinator):
        """At 2x zoom a 3 unit move is 6 screen pixels and starts a drag."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1013, 310), zoom=2.0)

        assert coordinator.state == GestureState.DRAGGING
        assert coordinator.dragged_node_id == "B"


class TestDragReparent:
    """Tests for drag-to-move and drag-to-reparent."""

    def test_drag_onto_root_reparents_in_one_step(self, coordinator, chain_editor, chain_tree):
        """Dropping B on the root makes it A's sibling; one undo reverts it."""
        _drag(coordinator, (1010, 310), (410, 310))

        doc = chain_editor.document
        assert [c.id for c in doc.children] == ["A", "B"]
        assert find_node(doc, "A").children == ()
        assert find_node(doc, "B").parent_id == ROOT_ID
        assert len(chain_editor.history) == 2
        assert chain_editor.history.entries[-1].action_type == ActionType.REPARENT

        chain_editor.undo()
        assert chain_editor.document is chain_tree

    def test_drag_without_target_moves_in_one_step(self, coordinator, chain_editor, chain_tree):
        """Many moves in one gesture are a single undo step."""
        coordinator.pointer_down(Position(1010, 310))
        for step in range(1, 6):
            coordinator.pointer_move(Position(1010 + step * 40, 310 + step * 40))
        coordinator.pointer_up()

        assert find_node(chain_editor.document, "B").position == Position(1200, 500)
        assert len(chain_editor.history) == 2
        assert not chain_editor.history.is_coalescing

        chain_editor.undo()
        assert chain_editor.document is chain_tree

    def test_history_locked_during_drag(self, coordinator, chain_editor):
        """Undo is unavailable while a drag is open."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1100, 400))

        assert chain_editor.history.is_coalescing
        assert not chain_editor.can_undo
        coordinator.pointer_up()
        assert chain_editor.can_undo

    def test_descendant_is_never_a_drop_target(self, coordinator, chain_editor):
        """Dragging A over its child B offers no target and keeps the tree."""
        coordinator.pointer_down(Position(710, 310))
        coordinator.pointer_move(Position(1010, 310))

        assert chain_editor.drop_target_id is None
        coordinator.pointer_up()

        assert node_ids(chain_editor.document) == [ROOT_ID, "A", "B"]
        assert find_node(chain_editor.document, "B").parent_id == "A"

    def test_drop_on_current_parent_keeps_structure(self, coordinator, chain_editor):
        """Dropping B back on A only moves it."""
        _drag(coordinator, (1010, 310), (710, 310))

        assert find_node(chain_editor.document, "B").parent_id == "A"
        assert find_node(chain_editor.document, "B").position == Position(700, 300)
        assert len(chain_editor.history) == 2

    def test_drop_target_and_guides_during_drag(self, coordinator, chain_editor):
        """The view sees a drop target and guides while dragging; both clear at the end."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1020, 313))

        assert chain_editor.guides.y == 300
        assert find_node(chain_editor.document, "B").position == Position(1010, 300)

        coordinator.pointer_move(Position(420, 320))
        assert chain_editor.drop_target_id == ROOT_ID

        coordinator.pointer_up()
        assert chain_editor.drop_target_id is None
        assert not chain_editor.guides.active

    def test_commands_refused_during_drag(self, coordinator, chain_editor, chain_tree):
        """A delete issued mid-drag is refused and never joins the move's undo step."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1100, 400))
        chain_editor.set_selection(["A"])
        chain_editor.delete_selected()

        assert node_ids(chain_editor.document) == [ROOT_ID, "A", "B"]
        assert len(chain_editor.history) == 2

        coordinator.pointer_up()
        chain_editor.set_selection(["A"])
        chain_editor.delete_selected()

        assert node_ids(chain_editor.document) == [ROOT_ID]
        assert len(chain_editor.history) == 3
        assert chain_editor.history.entries[-1].action_type == ActionType.DELETE

        chain_editor.undo()
        assert find_node(chain_editor.document, "B").position == Position(1090, 390)
        chain_editor.undo()
        assert chain_editor.document is chain_tree


class TestCancel:
    """Tests for abandoning a drag."""

    def test_cancel_restores_document(self, coordinator, chain_editor, chain_tree):
        """Escape puts the node back and skips the reparent."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(410, 310))
        coordinator.cancel()

        assert chain_editor.document is chain_tree
        assert coordinator.state == GestureState.IDLE
        assert not chain_editor.history.is_coalescing
        assert chain_editor.drop_target_id is None

    def test_cancel_keeps_edits_made_outside_the_drag(self, coordinator, chain_editor, chain_tree):
        """Notes saved mid-drag are refused; saved after Escape they are their own step."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(1100, 400))

        assert chain_editor.set_notes("A", "remember") is False
        coordinator.cancel()
        assert chain_editor.document is chain_tree

        assert chain_editor.set_notes("A", "remember") is True
        assert find_node(chain_editor.document, "A").notes == "remember"
        assert chain_editor.history.entries[-1].action_type == ActionType.NOTES

        chain_editor.undo()
        assert find_node(chain_editor.document, "A").notes == find_node(chain_tree, "A").notes
        assert find_node(chain_editor.document, "B").position == Position(1000, 300)

    def test_blur_ends_drag_without_reparent(self, coordinator, chain_editor):
        """Losing focus finishes the move but drops no node."""
        coordinator.pointer_down(Position(1010, 310))
        coordinator.pointer_move(Position(410, 310))
        coordinator.blur()

        assert find_node(chain_editor.document, "B").parent_id == "A"
        assert not chain_editor.history.is_coalescing
        assert coordinator.state == GestureState.IDLE

    def test_node_deleted_under_pending_drag(self, coordinator, chain_editor):
        """A pending drag on a node that vanished is dropped quietly."""
        coordinator.pointer_down(Position(1010, 310))
        chain_editor.set_selection(["B"])
        chain_editor.delete_selected()
        coordinator.pointer_move(Position(1100, 400))

        assert coordinator.state == GestureState.IDLE
        assert not chain_editor.history.is_coalescing
