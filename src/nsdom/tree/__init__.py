"""Element tree for nsdom.

This module provides the in-memory tree that builds itself from a pull
reader and writes itself back to an event writer.

Key Components:
    Node: Ordered, heterogeneous child sequence shared by all containers
    Element: Namespace-aware element with attributes and prefix declarations
    Document: Tree root holding the single root element and the element factory
    PullReader, EventWriter: Protocols for the reader and writer collaborators
"""

from .document import Document
from .element import Element
from .node import TEXT_NODE_TYPES, Node, NodeType
from .protocols import ElementFactory, EventWriter, PullReader

__all__ = [
    "Document",
    "Element",
    "ElementFactory",
    "EventWriter",
    "Node",
    "NodeType",
    "PullReader",
    "TEXT_NODE_TYPES",
]
