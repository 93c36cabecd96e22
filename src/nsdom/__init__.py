"""nsdom: a small namespace-aware XML document object model.

Elements build themselves from a pull reader and write themselves to an
event writer, tracking prefix declarations, attribute identity and the
parent/child shape of the tree.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), to_string()
- Level 2: Tree classes - Document, Element with custom element factories
- Level 3: Collaborators - XmlPullReader and XmlWriter driven directly
"""

__version__ = "0.1.0"

from .api import (
    parse,
    parse_bytes,
    parse_element,
    parse_file,
    parse_string,
    to_string,
    write,
    write_file,
)
from .pull import NO_NAMESPACE, EventType, XmlPullReader
from .serialize import XmlWriter
from .shared import (
    DomConfig,
    NsdomError,
    ReaderConfig,
    StructuralMismatchError,
    WriterConfig,
    XmlSyntaxError,
)
from .tree import Document, Element, Node, NodeType

__all__ = [
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_bytes",
    "parse_element",
    "parse_file",
    "parse_string",
    "to_string",
    "write",
    "write_file",

    # Level 2: Tree classes
    "Document",
    "Element",
    "Node",
    "NodeType",

    # Level 3: Reader and writer
    "EventType",
    "NO_NAMESPACE",
    "XmlPullReader",
    "XmlWriter",

    # Configuration and errors
    "DomConfig",
    "ReaderConfig",
    "WriterConfig",
    "NsdomError",
    "StructuralMismatchError",
    "XmlSyntaxError",
]
