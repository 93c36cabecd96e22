"""Exception hierarchy for nsdom.

Every error raised by the reader, writer and tree layers derives from
``NsdomError``. Argument and index errors additionally derive from the
matching builtin so callers can catch them the usual Python way.
"""

from typing import List, Optional


class NsdomError(Exception):
    """Base exception for all nsdom errors."""


class XmlSyntaxError(NsdomError):
    """Malformed input detected by the pull reader.

    Attributes:
        line: 1-based line of the offending token, if known
        column: 1-based column of the offending token, if known
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class StructuralMismatchError(XmlSyntaxError):
    """An end tag does not match the start tag it closes."""

    def __init__(
        self,
        expected: str,
        found: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected end tag {expected}, found {found}", line, column)


class InvalidArgumentError(NsdomError, ValueError):
    """An argument has an illegal value, e.g. ``None`` for a namespace."""


class IndexOutOfRangeError(NsdomError, IndexError):
    """A positional accessor was called with an out-of-bounds index."""

    def __init__(self, what: str, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(f"{what} index {index} out of range [0, {count})")


class ElementNotFoundError(NsdomError, LookupError):
    """No child element with the requested namespace and name exists."""


class DocumentStructureError(NsdomError):
    """A document would end up with zero or more than one root element."""


class WriterStateError(NsdomError):
    """The event writer was driven in an order it cannot serialize."""


class ConfigError(NsdomError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def check_index(what: str, index: int, count: int) -> None:
    """Raise ``IndexOutOfRangeError`` unless ``0 <= index < count``."""
    if not isinstance(index, int) or not (0 <= index < count):
        raise IndexOutOfRangeError(what, index, count)
