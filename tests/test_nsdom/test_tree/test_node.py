"""Tests for the generic Node child sequence."""

import pytest

from nsdom.shared import ElementNotFoundError, IndexOutOfRangeError, InvalidArgumentError
from nsdom.tree import TEXT_NODE_TYPES, Element, Node, NodeType


class RecordingWriter:
    """Event writer stand-in that records every call it receives."""

    def __init__(self) -> None:
        self.events = []

    def __getattr__(self, name):
        def record(*args):
            self.events.append((name,) + args)
        return record


@pytest.fixture
def fragment() -> Node:
    """A fragment holding text, an element and a comment."""
    node = Node()
    node.add_child(NodeType.TEXT, "a")
    node.add_child(NodeType.ELEMENT, Element("", "b"))
    node.add_child(NodeType.COMMENT, "c")
    return node


class TestChildSequence:
    """Test adding, inserting and removing children."""

    def test_add_child_order_and_kinds(self, fragment: Node) -> None:
        """Test that children keep their kind and order."""
        assert fragment.get_child_count() == 3
        assert fragment.get_type(0) is NodeType.TEXT
        assert fragment.get_type(1) is NodeType.ELEMENT
        assert fragment.get_child(2) == "c"

    def test_add_element_sets_parent(self, fragment: Node) -> None:
        """Test that an attached element points back to its container."""
        element = fragment.get_element(1)

        assert element is not None
        assert element.get_parent() is fragment

    def test_insert_child(self, fragment: Node) -> None:
        """Test inserting shifts later children."""
        fragment.insert_child(1, NodeType.CDSECT, "raw")

        assert fragment.get_child_count() == 4
        assert fragment.get_type(1) is NodeType.CDSECT
        assert fragment.get_type(2) is NodeType.ELEMENT

    def test_insert_at_end(self, fragment: Node) -> None:
        """Test that index == count appends."""
        fragment.insert_child(3, NodeType.TEXT, "z")

        assert fragment.get_text(3) == "z"

    def test_insert_out_of_range(self, fragment: Node) -> None:
        """Test that inserting past the end is rejected."""
        with pytest.raises(IndexOutOfRangeError):
            fragment.insert_child(5, NodeType.TEXT, "z")
        with pytest.raises(IndexOutOfRangeError):
            fragment.insert_child(-1, NodeType.TEXT, "z")

    def test_remove_child_detaches_element(self, fragment: Node) -> None:
        """Test that removing an element clears its parent link."""
        element = fragment.get_element(1)
        fragment.remove_child(1)

        assert fragment.get_child_count() == 2
        assert element.get_parent() is None
        assert fragment.get_child(1) == "c"

    def test_remove_child_out_of_range(self, fragment: Node) -> None:
        """Test removing a missing index."""
        with pytest.raises(IndexOutOfRangeError, match=r"child index 3 out of range \[0, 3\)"):
            fragment.remove_child(3)

    def test_none_child_rejected(self) -> None:
        """Test that a None child is an argument error."""
        with pytest.raises(InvalidArgumentError, match="Child must not be None"):
            Node().add_child(NodeType.TEXT, None)  # type: ignore[arg-type]

    def test_element_kind_requires_element(self) -> None:
        """Test that ELEMENT children must be elements."""
        with pytest.raises(TypeError, match="Element children must be Element instances"):
            Node().add_child(NodeType.ELEMENT, "not an element")

    def test_text_kind_requires_string(self) -> None:
        """Test that non-element children must be strings."""
        with pytest.raises(TypeError, match="TEXT children must be strings"):
            Node().add_child(NodeType.TEXT, Element("", "a"))

    def test_document_kind_rejected(self) -> None:
        """Test that documents cannot be nested."""
        with pytest.raises(InvalidArgumentError):
            Node().add_child(NodeType.DOCUMENT, "x")


class TestTreeShape:
    """Test that attachment keeps the tree acyclic with one owner per element."""

    def test_element_cannot_contain_itself(self) -> None:
        """Test attaching an element below itself."""
        element = Element("", "a")

        with pytest.raises(InvalidArgumentError, match="cannot be attached below itself"):
            element.add_child(NodeType.ELEMENT, element)
        assert element.get_child_count() == 0

    def test_ancestor_cannot_become_child(self) -> None:
        """Test that a cycle through a descendant is rejected."""
        outer = Element("", "a")
        inner = Element("", "b")
        outer.add_child(NodeType.ELEMENT, inner)

        with pytest.raises(InvalidArgumentError, match="cannot be attached below itself"):
            inner.add_child(NodeType.ELEMENT, outer)
        assert inner.get_child_count() == 0
        assert outer.resolve_namespace("x") is None
        assert outer.get_document() is None

    def test_element_with_parent_rejected(self) -> None:
        """Test that an element is owned by one container only."""
        first = Element("", "p1")
        second = Element("", "p2")
        child = Element("", "c")
        first.add_child(NodeType.ELEMENT, child)

        with pytest.raises(InvalidArgumentError, match="already has a parent"):
            second.add_child(NodeType.ELEMENT, child)
        assert child.get_parent() is first
        assert second.get_child_count() == 0

    def test_moved_after_removal(self) -> None:
        """Test that a removed element can be attached elsewhere."""
        first = Element("", "p1")
        second = Element("", "p2")
        child = Element("", "c")
        first.add_child(NodeType.ELEMENT, child)

        first.remove_child(0)
        second.add_child(NodeType.ELEMENT, child)

        assert child.get_parent() is second
        assert first.get_child_count() == 0

    def test_clear_detaches_children(self) -> None:
        """Test that clearing an element releases its element children."""
        first = Element("", "p1")
        child = Element("", "c")
        second = Element("", "p2")
        first.add_child(NodeType.ELEMENT, child)

        first.clear()
        second.add_child(NodeType.ELEMENT, child)

        assert child.get_parent() is second


class TestChildAccess:
    """Test typed child accessors."""

    def test_text_kinds(self) -> None:
        """Test which kinds count as text."""
        assert TEXT_NODE_TYPES == {
            NodeType.TEXT,
            NodeType.IGNORABLE_WHITESPACE,
            NodeType.CDSECT,
        }

    def test_get_text_and_element(self, fragment: Node) -> None:
        """Test that typed accessors return None for other kinds."""
        assert fragment.is_text(0)
        assert fragment.get_text(0) == "a"
        assert fragment.get_element(0) is None
        assert not fragment.is_text(2)
        assert fragment.get_text(2) is None
        assert fragment.get_text(1) is None

    def test_get_type_out_of_range(self, fragment: Node) -> None:
        """Test typed accessors bounds-check their index."""
        with pytest.raises(IndexOutOfRangeError):
            fragment.get_type(-1)
        with pytest.raises(IndexOutOfRangeError):
            fragment.get_element(3)


class TestElementLookup:
    """Test finding element children by namespace and name."""

    @pytest.fixture
    def container(self) -> Node:
        node = Node()
        node.add_child(NodeType.ELEMENT, Element("urn:a", "item"))
        node.add_child(NodeType.TEXT, "gap")
        node.add_child(NodeType.ELEMENT, Element("urn:b", "item"))
        node.add_child(NodeType.ELEMENT, Element("", "other"))
        return node

    def test_index_of(self, container: Node) -> None:
        """Test namespace-qualified lookup."""
        assert container.index_of("urn:b", "item") == 2
        assert container.index_of("", "other") == 3
        assert container.index_of("", "item") == -1

    def test_index_of_wildcard_namespace(self, container: Node) -> None:
        """Test that None matches any namespace."""
        assert container.index_of(None, "item") == 0
        assert container.index_of(None, "item", 1) == 2
        assert container.index_of(None, "item", 3) == -1

    def test_get_element_by_name(self, container: Node) -> None:
        """Test fetching the first match."""
        element = container.get_element_by_name("urn:b", "item")

        assert element.get_namespace() == "urn:b"

    def test_get_element_by_name_missing(self, container: Node) -> None:
        """Test that a missing element raises ElementNotFoundError."""
        with pytest.raises(ElementNotFoundError, match=r"Element \{urn:c\}item not found"):
            container.get_element_by_name("urn:c", "item")

    def test_create_element_default(self) -> None:
        """Test that the default factory maps None to the empty namespace."""
        element = Node().create_element(None, "x")

        assert type(element) is Element
        assert element.get_namespace() == ""


class TestWriteChildren:
    """Test dispatch of children to writer events."""

    def test_write_dispatch(self) -> None:
        """Test that every kind maps to its writer event."""
        node = Node()
        node.add_child(NodeType.TEXT, "t")
        node.add_child(NodeType.IGNORABLE_WHITESPACE, " ")
        node.add_child(NodeType.CDSECT, "c")
        node.add_child(NodeType.ENTITY_REF, "foo")
        node.add_child(NodeType.PROCESSING_INSTRUCTION, "pi x")
        node.add_child(NodeType.COMMENT, "note")
        node.add_child(NodeType.DOCDECL, " a")
        node.add_child(NodeType.ELEMENT, Element("", "e"))
        writer = RecordingWriter()

        node.write(writer)

        assert writer.events == [
            ("text", "t"),
            ("ignorable_whitespace", " "),
            ("cdsect", "c"),
            ("entity_ref", "foo"),
            ("processing_instruction", "pi x"),
            ("comment", "note"),
            ("docdecl", " a"),
            ("start_tag", "", "e"),
            ("end_tag", "", "e"),
            ("flush",),
        ]
