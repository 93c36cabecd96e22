"""Pull reader for nsdom.

Key Components:
    XmlPullReader: Strict namespace-aware pull cursor over XML text or bytes
    EventType: Enumeration of the events the reader reports
"""

from .events import (
    NO_NAMESPACE,
    XML_NAMESPACE,
    XMLNS_NAMESPACE,
    EventType,
)
from .reader import XmlPullReader

__all__ = [
    "NO_NAMESPACE",
    "XML_NAMESPACE",
    "XMLNS_NAMESPACE",
    "EventType",
    "XmlPullReader",
]
