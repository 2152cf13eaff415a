"""Shared fixtures for the SemTreeLib test suite."""

import copy

import pytest

from semtreelib._common import config as config_module
from semtreelib.core.node import (
    add_attribute,
    add_child,
    create_collection,
    create_comment,
    create_field,
    create_record,
    create_value,
)


def build_sample_tree():
    """Build the four-node sample tree.

    Structure:
    root (collection)
    ├── A (field, "x")
    └── B (record)
        └── C (field, "y")
    """
    root = create_collection("root")
    add_child(root, create_field("A", "x"))
    b = create_record("B")
    add_child(b, create_field("C", "y"))
    add_child(root, b)
    return root


def build_library_tree():
    """Build a richer tree with attributes, comments and nested records.

    Structure:
    library (record, @city="Oslo")
    ├── #comment
    ├── book (record, @id=1)
    │   ├── title (field, "Dune")
    │   └── price (field, "9.99")
    ├── book (record, @id=2)
    │   ├── title (field, "Emma")
    │   └── price (field, "4.50")
    └── note (value, "open daily")
    """
    library = create_record("library")
    add_attribute(library, "city", "Oslo")
    add_child(library, create_comment("catalogue"))
    for book_id, title, price in ((1, "Dune", "9.99"), (2, "Emma", "4.50")):
        book = create_record("book")
        add_attribute(book, "id", book_id)
        add_child(book, create_field("title", title))
        add_child(book, create_field("price", price))
        add_child(library, book)
    add_child(library, create_value("note", "open daily"))
    return library


def walk(node):
    """Yield every node of a tree in pre-order."""
    yield node
    for child in node.children or []:
        yield from walk(child)


def assert_parent_links(node):
    """Assert every child points back at the node holding it."""
    for child in node.children or []:
        assert child.parent is node, f"{child.name} has a stale parent link"
        assert_parent_links(child)


@pytest.fixture
def sample_tree():
    return build_sample_tree()


@pytest.fixture
def library_tree():
    return build_library_tree()


@pytest.fixture(autouse=True)
def restore_global_defaults():
    """Keep tests from leaking registered configuration defaults."""
    saved = copy.deepcopy(config_module._global_defaults)
    yield
    config_module._global_defaults = saved
