"""Document root node.

A ``Document`` holds at most one root element plus the comments, processing
instructions, doctype and whitespace around it. It also carries the
document-wide element factory every element in the tree defers to.
"""

from typing import Optional

from ..pull.events import NO_NAMESPACE, EventType
from ..shared import DocumentStructureError, XmlSyntaxError
from .element import Element
from .node import ChildContent, Node, NodeType
from .protocols import ElementFactory, EventWriter, PullReader


class Document(Node):
    """Root of an element tree.

    Args:
        element_factory: Optional callable ``(namespace, name) -> Element``
            used for every element created while parsing this document
    """

    node_type = NodeType.DOCUMENT

    def __init__(self, element_factory: Optional[ElementFactory] = None) -> None:
        super().__init__()
        self.element_factory = element_factory
        self._encoding: Optional[str] = None
        self._standalone: Optional[bool] = None
        self._root_index = -1

    def __repr__(self) -> str:
        return f"<Document root={self._root_index}>"

    def get_name(self) -> str:
        return "#document"

    def get_encoding(self) -> Optional[str]:
        return self._encoding

    def set_encoding(self, encoding: Optional[str]) -> None:
        self._encoding = encoding

    def get_standalone(self) -> Optional[bool]:
        return self._standalone

    def set_standalone(self, standalone: Optional[bool]) -> None:
        self._standalone = standalone

    def create_element(self, namespace: Optional[str], name: str) -> Element:
        """Create an element with the document's factory, or the default one."""
        if self.element_factory is None:
            return super().create_element(namespace, name)
        element = self.element_factory(namespace or NO_NAMESPACE, name)
        if not isinstance(element, Element):
            raise TypeError(
                f"element_factory must return an Element, got {type(element).__name__}"
            )
        return element

    def insert_child(self, index: int, node_type: NodeType, child: ChildContent) -> None:
        """Insert a child, keeping track of the single root element.

        Raises:
            DocumentStructureError: If a second element child is added
        """
        if node_type is NodeType.ELEMENT and self._root_index != -1:
            raise DocumentStructureError("Only one document root element allowed")

        super().insert_child(index, node_type, child)
        if node_type is NodeType.ELEMENT:
            self._root_index = index
        elif self._root_index >= index:
            self._root_index += 1

    def remove_child(self, index: int) -> None:
        super().remove_child(index)
        if index == self._root_index:
            self._root_index = -1
        elif index < self._root_index:
            self._root_index -= 1

    def get_root_element(self) -> Element:
        """The document's root element.

        Raises:
            DocumentStructureError: If the document has no root element
        """
        if self._root_index == -1:
            raise DocumentStructureError("Document has no root element")
        return self.children[self._root_index][1]  # type: ignore[return-value]

    def parse(self, reader: PullReader) -> None:
        """Build the document from a reader positioned at START_DOCUMENT."""
        reader.require(EventType.START_DOCUMENT, None, None)
        reader.next_token()

        self._encoding = reader.get_input_encoding()
        self._standalone = reader.get_standalone()

        super().parse(reader)

        if reader.get_event_type() is not EventType.END_DOCUMENT:
            raise XmlSyntaxError("Document end expected")

    def write(self, writer: EventWriter) -> None:
        """Write the XML declaration, all children and end the document."""
        writer.start_document(self._encoding, self._standalone)
        self.write_children(writer)
        writer.end_document()
