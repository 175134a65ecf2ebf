"""Shared fixtures for the MindTree test suite."""

import pytest

from mindtree.editor import Editor
from mindtree.model import Node, Position, NodeStyle, new_document
from mindtree.tree_ops import append_child


@pytest.fixture
def root_only():
    """A document holding only the root."""
    return new_document()


@pytest.fixture
def chain_tree(root_only):
    """root -> A -> B, laid out well apart so hit tests are unambiguous."""
    a = Node(id="A", text="Alpha", position=Position(700.0, 300.0))
    b = Node(id="B", text="Beta", position=Position(1000.0, 300.0))
    tree = append_child(root_only, "root", a)
    return append_child(tree, "A", b)


@pytest.fixture
def sibling_tree(root_only):
    """root with children A (which has child A1) and B."""
    a = Node(id="A", text="Alpha", position=Position(600.0, 200.0),
             style=NodeStyle(background_color="#ff0000"))
    a1 = Node(id="A1", text="Alpha one", position=Position(800.0, 200.0))
    b = Node(id="B", text="Beta", position=Position(600.0, 500.0))
    tree = append_child(root_only, "root", a)
    tree = append_child(tree, "A", a1)
    return append_child(tree, "root", b)


@pytest.fixture
def editor(sibling_tree):
    return Editor(sibling_tree)


@pytest.fixture
def chain_editor(chain_tree):
    return Editor(chain_tree)
