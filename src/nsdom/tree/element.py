"""Namespace-aware element node.

An ``Element`` keeps its namespace and local name, an append-only list of
``(namespace, name, value)`` attributes, the prefix declarations made on the
element itself, and its children. The parent link is a weak reference used
for upward navigation only.

Elements should be obtained from ``create_element`` rather than by calling the
constructor, so that a document-wide factory can substitute specialized
element classes anywhere in the tree. Per-element setup belongs in ``init``.
"""

import weakref
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..pull.events import NO_NAMESPACE, EventType
from ..shared import InvalidArgumentError
from ..shared.errors import check_index
from .node import Node, NodeType
from .protocols import EventWriter, PullReader

if TYPE_CHECKING:
    from .document import Document


class Element(Node):
    """A tagged XML node with namespace, attributes and prefix declarations."""

    node_type = NodeType.ELEMENT

    def __init__(self, namespace: str = NO_NAMESPACE, name: Optional[str] = None) -> None:
        super().__init__()
        if namespace is None:
            raise InvalidArgumentError('Use "" for the empty namespace')
        self._namespace = namespace
        self._name = name
        self._attributes: List[Tuple[str, str, str]] = []
        self._prefixes: List[Tuple[Optional[str], str]] = []
        self._parent: Optional["weakref.ReferenceType[Node]"] = None

    def __repr__(self) -> str:
        if self._namespace:
            return f"<Element {{{self._namespace}}}{self._name}>"
        return f"<Element {self._name}>"

    def init(self) -> None:
        """Extension hook run after name, namespace, prefixes and attributes
        are set by ``parse`` and before the children are parsed."""

    def clear(self) -> None:
        """Remove all attributes and children; name, namespace and parent stay.

        Removed element children are detached and may be attached elsewhere.
        """
        for node_type, child in self.children:
            if node_type is NodeType.ELEMENT:
                child.set_parent(None)  # type: ignore[union-attr]
        self._attributes = []
        self.children = []

    def create_element(self, namespace: Optional[str], name: str) -> "Element":
        """Create an element through the root's factory.

        The request is forwarded to the parent when there is one, so the
        factory at the top of the tree decides which class is built.
        """
        parent = self.get_parent()
        if parent is None:
            return super().create_element(namespace, name)
        return parent.create_element(namespace, name)

    # ------------------------------------------------------------------
    # Attributes

    def get_attribute_count(self) -> int:
        return len(self._attributes)

    def get_attribute_namespace(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][0]

    def get_attribute_name(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][1]

    def get_attribute_value(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][2]

    def get_attribute(self, namespace: Optional[str], name: str) -> Optional[str]:
        """Value of the first attribute matching ``name`` and ``namespace``.

        A None namespace matches attributes in any namespace.
        """
        for attr_namespace, attr_name, value in self._attributes:
            if attr_name == name and (namespace is None or namespace == attr_namespace):
                return value
        return None

    def set_attribute(self, namespace: Optional[str], name: str, value: str) -> None:
        """Append an attribute.

        Existing attributes with the same namespace and name are kept, and
        ``get_attribute`` keeps returning the first one. Remove first (via
        ``clear``) when replacement is intended.
        """
        if name is None or value is None:
            raise InvalidArgumentError("Attribute name and value must not be None")
        self._attributes.append((namespace or NO_NAMESPACE, name, value))

    # ------------------------------------------------------------------
    # Namespace declarations

    def get_namespace_count(self) -> int:
        """Number of prefixes declared on this element, not counting ancestors."""
        return len(self._prefixes)

    def get_namespace_prefix(self, index: int) -> Optional[str]:
        check_index("namespace", index, len(self._prefixes))
        return self._prefixes[index][0]

    def get_namespace_uri(self, index: int) -> str:
        check_index("namespace", index, len(self._prefixes))
        return self._prefixes[index][1]

    def set_prefix(self, prefix: Optional[str], namespace: str) -> None:
        """Append a local prefix declaration; a None prefix declares the default namespace."""
        if namespace is None:
            raise InvalidArgumentError('Use "" for the empty namespace')
        self._prefixes.append((prefix, namespace))

    def resolve_namespace(self, prefix: Optional[str]) -> Optional[str]:
        """Namespace URI bound to ``prefix`` here or on the nearest ancestor."""
        for declared_prefix, namespace in self._prefixes:
            if declared_prefix == prefix:
                return namespace
        parent = self.get_parent_element()
        return parent.resolve_namespace(prefix) if parent is not None else None

    # ------------------------------------------------------------------
    # Identity and navigation

    def get_name(self) -> Optional[str]:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def get_namespace(self) -> str:
        return self._namespace

    def set_namespace(self, namespace: str) -> None:
        """Set the namespace URI.

        Raises:
            InvalidArgumentError: If ``namespace`` is None; pass "" for no namespace
        """
        if namespace is None:
            raise InvalidArgumentError('Use "" for the empty namespace')
        self._namespace = namespace

    def get_parent(self) -> Optional[Node]:
        return self._parent() if self._parent is not None else None

    def set_parent(self, parent: Optional[Node]) -> None:
        """Set the parent link.

        Called by the owning container when the element is attached. Calling
        it directly does not update any child list and can leave the tree
        inconsistent.
        """
        self._parent = weakref.ref(parent) if parent is not None else None

    def get_parent_element(self) -> Optional["Element"]:
        parent = self.get_parent()
        return parent if isinstance(parent, Element) else None

    def get_document(self) -> Optional["Document"]:
        """Document at the top of the parent chain, or None when detached."""
        parent = self.get_parent()
        while isinstance(parent, Element):
            parent = parent.get_parent()
        if parent is not None and parent.node_type is NodeType.DOCUMENT:
            return parent  # type: ignore[return-value]
        return None

    # ------------------------------------------------------------------
    # Parsing and writing

    def parse(self, reader: PullReader) -> None:
        """Build this element from a reader positioned at its START_TAG.

        On return the reader is positioned just past the matching END_TAG.
        Subclasses may override this to take full control of their subtree.

        Raises:
            StructuralMismatchError: If the end tag does not match this element
            XmlSyntaxError: For malformed input reported by the reader
        """
        self._name = reader.get_name()
        self._namespace = reader.get_namespace() or NO_NAMESPACE

        depth = reader.get_depth()
        for pos in range(reader.get_namespace_count(depth - 1), reader.get_namespace_count(depth)):
            self.set_prefix(reader.get_namespace_prefix(pos), reader.get_namespace_uri(pos))

        for index in range(reader.get_attribute_count()):
            self.set_attribute(
                reader.get_attribute_namespace(index),
                reader.get_attribute_name(index),
                reader.get_attribute_value(index),
            )

        self.init()

        if reader.is_empty_element_tag():
            reader.next_token()
        else:
            reader.next_token()
            super().parse(reader)
            if self.get_child_count() == 0:
                self.add_child(NodeType.IGNORABLE_WHITESPACE, "")

        reader.require(EventType.END_TAG, self.get_namespace(), self.get_name())
        reader.next_token()

    def write(self, writer: EventWriter) -> None:
        """Write this element and its subtree to ``writer``."""
        for prefix, namespace in self._prefixes:
            writer.set_prefix(prefix, namespace)

        writer.start_tag(self.get_namespace(), self.get_name())  # type: ignore[arg-type]
        for namespace, name, value in self._attributes:
            writer.attribute(namespace, name, value)

        self.write_children(writer)
        writer.end_tag(self.get_namespace(), self.get_name())  # type: ignore[arg-type]
