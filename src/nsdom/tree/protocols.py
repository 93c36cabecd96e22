"""Capability sets the tree consumes from its reader and writer collaborators.

``XmlPullReader`` and ``XmlWriter`` satisfy these protocols; any other
reader or writer exposing the same methods can drive the tree as well.
"""

from typing import TYPE_CHECKING, Callable, Optional, Protocol

from ..pull.events import EventType

if TYPE_CHECKING:
    from .element import Element


ElementFactory = Callable[[str, str], "Element"]


class PullReader(Protocol):
    """Namespace-aware pull cursor consumed by ``Node.parse``."""

    def get_event_type(self) -> EventType: ...

    def get_depth(self) -> int: ...

    def get_name(self) -> Optional[str]: ...

    def get_namespace(self) -> Optional[str]: ...

    def get_text(self) -> Optional[str]: ...

    def get_attribute_count(self) -> int: ...

    def get_attribute_namespace(self, index: int) -> str: ...

    def get_attribute_name(self, index: int) -> str: ...

    def get_attribute_value(self, index: int) -> str: ...

    def get_namespace_count(self, depth: int) -> int: ...

    def get_namespace_prefix(self, pos: int) -> Optional[str]: ...

    def get_namespace_uri(self, pos: int) -> str: ...

    def get_input_encoding(self) -> Optional[str]: ...

    def get_standalone(self) -> Optional[bool]: ...

    def is_empty_element_tag(self) -> bool: ...

    def require(self, event_type: EventType, namespace: Optional[str], name: Optional[str]) -> None: ...

    def next_token(self) -> EventType: ...


class EventWriter(Protocol):
    """Structural event sink consumed by ``Node.write``."""

    def start_document(self, encoding: Optional[str], standalone: Optional[bool]) -> None: ...

    def end_document(self) -> None: ...

    def set_prefix(self, prefix: Optional[str], namespace: str) -> None: ...

    def start_tag(self, namespace: Optional[str], name: str) -> None: ...

    def attribute(self, namespace: Optional[str], name: str, value: str) -> None: ...

    def end_tag(self, namespace: Optional[str], name: str) -> None: ...

    def text(self, text: str) -> None: ...

    def ignorable_whitespace(self, text: str) -> None: ...

    def cdsect(self, text: str) -> None: ...

    def entity_ref(self, name: str) -> None: ...

    def processing_instruction(self, text: str) -> None: ...

    def comment(self, text: str) -> None: ...

    def docdecl(self, text: str) -> None: ...

    def flush(self) -> None: ...
