"""
Tests for mindtree.undo module.
"""

import pytest

from mindtree.model import new_document
from mindtree.tree_ops import add_child
from mindtree.undo import HistoryEngine, ActionType


def _docs(count):
    """Distinct documents: root-only with 1..count children."""
    docs = []
    tree = new_document()
    for _ in range(count):
        tree, _ = add_child(tree, "root")
        docs.append(tree)
    return docs


class TestHistoryBasics:
    """Tests for committing and navigating history."""

    def test_initial_state(self):
        """A fresh engine holds one root-only document."""
        engine = HistoryEngine()

        assert len(engine) == 1
        assert engine.current_index == 0
        assert engine.document == new_document()
        assert not engine.can_undo
        assert not engine.can_redo
        assert not engine.is_coalescing

    def test_max_entries_must_allow_undo(self):
        """A one-entry log could never undo."""
        with pytest.raises(ValueError):
            HistoryEngine(max_entries=1)

    def test_apply_operation_appends(self):
        """Each commit adds one entry and moves the cursor."""
        d1, d2 = _docs(2)
        engine = HistoryEngine()
        engine.apply_operation(d1, ActionType.ADD_CHILD)
        engine.apply_operation(d2, ActionType.ADD_CHILD)

        assert len(engine) == 3
        assert engine.current_index == 2
        assert engine.document is d2

    def test_undo_redo_round_trip(self):
        """N undos followed by N redos return to the same document."""
        docs = _docs(5)
        engine = HistoryEngine()
        for doc in docs:
            engine.apply_operation(doc)
        before = engine.document

        for _ in range(5):
            assert engine.undo()
        assert engine.document == new_document()
        for _ in range(5):
            assert engine.redo()

        assert engine.document is before

    def test_undo_at_start_is_no_op(self):
        """Undo with nothing behind the cursor returns False."""
        engine = HistoryEngine()
        assert not engine.undo()
        assert engine.current_index == 0

    def test_redo_at_end_is_no_op(self):
        """Redo with nothing ahead returns False."""
        engine = HistoryEngine()
        engine.apply_operation(_docs(1)[0])
        assert not engine.redo()

    def test_redo_branch_lost_after_new_commit(self):
        """Committing after an undo discards the undone future."""
        d1, d2, d3 = _docs(3)
        engine = HistoryEngine()
        engine.apply_operation(d1)
        engine.apply_operation(d2)
        engine.undo()
        engine.apply_operation(d3)

        assert not engine.can_redo
        assert not engine.redo()
        assert engine.history == (new_document(), d1, d3)

    def test_descriptions(self):
        """Undo and redo labels follow the action types."""
        d1, = _docs(1)
        engine = HistoryEngine()
        engine.apply_operation(d1, ActionType.ADD_CHILD)

        assert engine.undo_description == "Add child node"
        assert engine.redo_description == ""
        engine.undo()
        assert engine.undo_description == ""
        assert engine.redo_description == "Add child node"

    def test_state_changed_callback(self):
        """Every commit and navigation notifies the listener."""
        calls = []
        engine = HistoryEngine()
        engine.on_state_changed = lambda: calls.append(engine.current_index)

        engine.apply_operation(_docs(1)[0])
        engine.undo()
        engine.redo()

        assert calls == [1, 0, 1]


class TestCoalescing:
    """Tests for gesture coalescing."""

    def test_coalesced_writes_make_one_entry(self):
        """Three writes inside one gesture leave exactly one new entry."""
        d1, d2, d3 = _docs(3)
        engine = HistoryEngine()
        engine.begin_coalescing()
        engine.apply_operation(d1)
        engine.apply_operation(d2)
        engine.apply_operation(d3)
        engine.end_coalescing()

        assert len(engine) == 2
        assert engine.document is d3
        engine.undo()
        assert engine.document == new_document()

    def test_begin_duplicates_current_document(self):
        """Opening a gesture pushes a copy of the current document."""
        engine = HistoryEngine()
        start = engine.document
        engine.begin_coalescing()

        assert len(engine) == 2
        assert engine.document is start
        assert engine.is_coalescing

    def test_begin_drops_redo_branch(self):
        """Starting a gesture after an undo discards the redo future."""
        d1, = _docs(1)
        engine = HistoryEngine()
        engine.apply_operation(d1)
        engine.undo()
        engine.begin_coalescing()

        assert not engine.can_redo
        assert len(engine) == 2

    def test_nested_begin_is_ignored(self):
        """A second begin inside a gesture does not push another entry."""
        engine = HistoryEngine()
        engine.begin_coalescing()
        engine.begin_coalescing()

        assert len(engine) == 2

    def test_undo_redo_ignored_while_coalescing(self):
        """History navigation waits for the gesture to close."""
        d1, d2 = _docs(2)
        engine = HistoryEngine()
        engine.apply_operation(d1)
        engine.begin_coalescing()
        engine.apply_operation(d2)

        assert not engine.undo()
        assert engine.document is d2
        engine.end_coalescing()
        assert engine.undo()
        assert engine.document is d1

    def test_writes_after_end_append_again(self):
        """Once the gesture closes, commits create new entries."""
        d1, d2 = _docs(2)
        engine = HistoryEngine()
        engine.begin_coalescing()
        engine.apply_operation(d1)
        engine.end_coalescing()
        engine.apply_operation(d2)

        assert len(engine) == 3


class TestTrimming:
    """Tests for the history size cap."""

    def test_oldest_entries_dropped(self):
        """The log never grows beyond max_entries."""
        docs = _docs(6)
        engine = HistoryEngine(max_entries=4)
        for doc in docs:
            engine.apply_operation(doc)

        assert len(engine) == 4
        assert engine.current_index == 3
        assert engine.history == tuple(docs[2:])
        assert engine.document is docs[-1]

    def test_reset_keeps_long_history_verbatim(self):
        """reset keeps a log longer than max_entries until the next operation."""
        docs = _docs(6)
        engine = HistoryEngine(max_entries=3)
        engine.begin_coalescing()
        engine.reset(docs[:5], 4)

        assert engine.history == tuple(docs[:5])
        assert engine.current_index == 4
        assert not engine.is_coalescing

        engine.apply_operation(docs[5])
        assert engine.history == tuple(docs[3:])
        assert engine.current_index == 2

    def test_reset_clamps_cursor(self):
        """An out-of-range cursor is clamped into the log."""
        docs = _docs(3)
        engine = HistoryEngine()
        engine.reset(docs, 9)
        assert engine.current_index == 2
        engine.reset(docs, -4)
        assert engine.current_index == 0

    def test_reset_rejects_empty_history(self):
        """A log always holds at least one document."""
        with pytest.raises(ValueError):
            HistoryEngine().reset([], 0)

    def test_clear_keeps_current_document(self):
        """clear leaves a single entry with the current document."""
        d1, d2 = _docs(2)
        engine = HistoryEngine()
        engine.apply_operation(d1)
        engine.apply_operation(d2)
        engine.clear()

        assert engine.history == (d2,)
        assert not engine.can_undo
