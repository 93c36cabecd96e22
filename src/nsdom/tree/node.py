"""Generic node layer shared by elements and documents.

A ``Node`` owns an ordered sequence of heterogeneous children. Element
children are ``Element`` instances; every other child kind (text, CDATA,
comment, processing instruction, ...) is stored as its string content next to
its ``NodeType``.
"""

from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

from ..pull.events import NO_NAMESPACE, EventType
from ..shared import ElementNotFoundError, InvalidArgumentError, IndexOutOfRangeError
from ..shared.errors import check_index
from .protocols import EventWriter, PullReader

if TYPE_CHECKING:
    from .element import Element


class NodeType(Enum):
    """Kinds of node that can appear in a tree."""

    DOCUMENT = auto()
    ELEMENT = auto()
    TEXT = auto()
    CDSECT = auto()
    ENTITY_REF = auto()              # Content is the entity name
    IGNORABLE_WHITESPACE = auto()
    PROCESSING_INSTRUCTION = auto()
    COMMENT = auto()
    DOCDECL = auto()


TEXT_NODE_TYPES = frozenset({
    NodeType.TEXT,
    NodeType.IGNORABLE_WHITESPACE,
    NodeType.CDSECT,
})

_EVENT_NODE_TYPES: Dict[EventType, NodeType] = {
    EventType.TEXT: NodeType.TEXT,
    EventType.CDSECT: NodeType.CDSECT,
    EventType.ENTITY_REF: NodeType.TEXT,
    EventType.IGNORABLE_WHITESPACE: NodeType.IGNORABLE_WHITESPACE,
    EventType.PROCESSING_INSTRUCTION: NodeType.PROCESSING_INSTRUCTION,
    EventType.COMMENT: NodeType.COMMENT,
    EventType.DOCDECL: NodeType.DOCDECL,
}

# Writer method receiving each non-element child kind
_WRITER_METHODS: Dict[NodeType, str] = {
    NodeType.TEXT: "text",
    NodeType.IGNORABLE_WHITESPACE: "ignorable_whitespace",
    NodeType.CDSECT: "cdsect",
    NodeType.COMMENT: "comment",
    NodeType.ENTITY_REF: "entity_ref",
    NodeType.PROCESSING_INSTRUCTION: "processing_instruction",
    NodeType.DOCDECL: "docdecl",
}

ChildContent = Union["Element", str]


class Node:
    """Container of an ordered child sequence.

    Subclasses set ``node_type``; the base class is only used directly as a
    loose fragment container.
    """

    node_type: Optional[NodeType] = None

    def __init__(self) -> None:
        self.children: List[Tuple[NodeType, ChildContent]] = []

    def add_child(self, node_type: NodeType, child: ChildContent) -> None:
        """Append a child of the given kind."""
        self.insert_child(len(self.children), node_type, child)

    def insert_child(self, index: int, node_type: NodeType, child: ChildContent) -> None:
        """Insert a child of the given kind at ``index``.

        Raises:
            InvalidArgumentError: If ``child`` is None, ``node_type`` is DOCUMENT,
                or an element child already has a parent or is an ancestor of this node
            TypeError: If the child does not match its declared kind
            IndexOutOfRangeError: If ``index`` is outside ``[0, child count]``
        """
        if child is None:
            raise InvalidArgumentError("Child must not be None")
        if not isinstance(index, int) or not (0 <= index <= len(self.children)):
            raise IndexOutOfRangeError("child", index, len(self.children) + 1)

        if node_type is NodeType.ELEMENT:
            if not isinstance(child, Node) or child.node_type is not NodeType.ELEMENT:
                raise TypeError("Element children must be Element instances")
            self._check_attachable(child)
        elif node_type is NodeType.DOCUMENT:
            raise InvalidArgumentError("A document cannot be a child node")
        elif not isinstance(child, str):
            raise TypeError(f"{node_type.name} children must be strings")

        self.children.insert(index, (node_type, child))
        if node_type is NodeType.ELEMENT:
            child.set_parent(self)  # type: ignore[union-attr]

    def _check_attachable(self, child: "Element") -> None:
        """Reject an element that is already owned or that contains ``self``."""
        if child.get_parent() is not None:
            raise InvalidArgumentError(
                f"{child!r} already has a parent; remove it from its parent first"
            )
        node: Optional[Node] = self
        while node is not None:
            if node is child:
                raise InvalidArgumentError(f"{child!r} cannot be attached below itself")
            get_parent = getattr(node, "get_parent", None)
            node = get_parent() if get_parent is not None else None

    def remove_child(self, index: int) -> None:
        """Remove the child at ``index``; a removed element loses its parent."""
        check_index("child", index, len(self.children))
        node_type, child = self.children.pop(index)
        if node_type is NodeType.ELEMENT:
            child.set_parent(None)  # type: ignore[union-attr]

    def get_child(self, index: int) -> ChildContent:
        check_index("child", index, len(self.children))
        return self.children[index][1]

    def get_child_count(self) -> int:
        return len(self.children)

    def get_type(self, index: int) -> NodeType:
        check_index("child", index, len(self.children))
        return self.children[index][0]

    def is_text(self, index: int) -> bool:
        """Check whether child ``index`` is text, whitespace or CDATA."""
        return self.get_type(index) in TEXT_NODE_TYPES

    def get_text(self, index: int) -> Optional[str]:
        """Text of child ``index``, or None if it is not a text child."""
        if self.is_text(index):
            return self.children[index][1]  # type: ignore[return-value]
        return None

    def get_element(self, index: int) -> Optional["Element"]:
        """Child ``index`` if it is an element, None otherwise."""
        if self.get_type(index) is NodeType.ELEMENT:
            return self.children[index][1]  # type: ignore[return-value]
        return None

    def index_of(self, namespace: Optional[str], name: str, start_index: int = 0) -> int:
        """Index of the first element child matching namespace and name.

        A None namespace matches any namespace. Returns -1 if none matches.
        """
        for index in range(max(start_index, 0), len(self.children)):
            child = self.get_element(index)
            if (
                child is not None
                and child.get_name() == name
                and (namespace is None or namespace == child.get_namespace())
            ):
                return index
        return -1

    def get_element_by_name(self, namespace: Optional[str], name: str) -> "Element":
        """First element child matching namespace and name.

        Raises:
            ElementNotFoundError: If there is no such child
        """
        index = self.index_of(namespace, name)
        if index == -1:
            raise ElementNotFoundError(
                f"Element {{{namespace or ''}}}{name} not found in {self!r}"
            )
        return self.children[index][1]  # type: ignore[return-value]

    def create_element(self, namespace: Optional[str], name: str) -> "Element":
        """Default element factory."""
        from .element import Element

        return Element(namespace or NO_NAMESPACE, name)

    def parse(self, reader: PullReader) -> None:
        """Build children from ``reader`` until an END_TAG or END_DOCUMENT."""
        while True:
            event = reader.get_event_type()
            if event is EventType.START_TAG:
                child = self.create_element(reader.get_namespace(), reader.get_name() or "")
                self.add_child(NodeType.ELEMENT, child)
                child.parse(reader)
            elif event in (EventType.END_TAG, EventType.END_DOCUMENT):
                return
            else:
                text = reader.get_text()
                if text is not None:
                    self.add_child(_EVENT_NODE_TYPES[event], text)
                elif event is EventType.ENTITY_REF and reader.get_name() is not None:
                    self.add_child(NodeType.ENTITY_REF, reader.get_name())  # type: ignore[arg-type]
                reader.next_token()

    def write_children(self, writer: EventWriter) -> None:
        """Write every child to ``writer`` in order."""
        for node_type, child in self.children:
            if node_type is NodeType.ELEMENT:
                child.write(writer)  # type: ignore[union-attr]
            else:
                getattr(writer, _WRITER_METHODS[node_type])(child)

    def write(self, writer: EventWriter) -> None:
        """Write the children and flush ``writer``."""
        self.write_children(writer)
        writer.flush()
