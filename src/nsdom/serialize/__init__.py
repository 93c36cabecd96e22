"""Event writer for nsdom.

Key Components:
    XmlWriter: Namespace-aware writer turning structural events into XML text
"""

from .writer import XmlWriter, escape_attribute, escape_text

__all__ = [
    "XmlWriter",
    "escape_attribute",
    "escape_text",
]
