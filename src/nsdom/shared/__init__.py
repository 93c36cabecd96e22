"""Shared utilities for nsdom.

This module provides the exception hierarchy, configuration objects and the
correlation-aware logger used across the reader, writer and tree layers.
"""

from .config import (
    DomConfig,
    ReaderConfig,
    WriterConfig,
)
from .errors import (
    ConfigError,
    ConfigValidationError,
    DocumentStructureError,
    ElementNotFoundError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    NsdomError,
    StructuralMismatchError,
    WriterStateError,
    XmlSyntaxError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DomConfig",
    "ReaderConfig",
    "WriterConfig",
    "ConfigError",
    "ConfigValidationError",
    "DocumentStructureError",
    "ElementNotFoundError",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "NsdomError",
    "StructuralMismatchError",
    "WriterStateError",
    "XmlSyntaxError",
    "CorrelationLogger",
    "get_logger",
]
