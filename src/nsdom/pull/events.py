"""Event kinds and namespace constants shared by the reader, writer and tree."""

from enum import Enum, auto

NO_NAMESPACE = ""
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"


class EventType(Enum):
    """Events reported by the pull reader."""

    START_DOCUMENT = auto()
    END_DOCUMENT = auto()
    START_TAG = auto()
    END_TAG = auto()
    TEXT = auto()                    # Character data
    CDSECT = auto()                  # <![CDATA[ ... ]]>
    ENTITY_REF = auto()              # &name;
    IGNORABLE_WHITESPACE = auto()    # Whitespace outside the root element
    PROCESSING_INSTRUCTION = auto()  # <?target data?>
    COMMENT = auto()                 # <!-- ... -->
    DOCDECL = auto()                 # <!DOCTYPE ... >


TEXTUAL_EVENTS = frozenset({
    EventType.TEXT,
    EventType.CDSECT,
    EventType.ENTITY_REF,
})
