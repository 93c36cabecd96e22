"""Convenience API for parsing and serializing documents.

These functions wire the pull reader, the element tree and the event writer
together. Parsing either returns a complete tree or raises; a failed parse
never hands back a partially built document.
"""

import io
import time
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from ..character import codec_name
from ..pull import EventType, XmlPullReader
from ..serialize import XmlWriter
from ..shared import DomConfig, NsdomError, get_logger
from ..tree import Document, Element, ElementFactory, Node

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse(
    source: InputType,
    config: Optional[DomConfig] = None,
    element_factory: Optional[ElementFactory] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Parse a document from a string, bytes, a path or a file object.

    Args:
        source: XML content as str or bytes, a Path, or a text/binary file object
        config: Optional configuration; reader settings are used
        element_factory: Optional factory for every element of the document
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The parsed Document

    Examples:
        >>> document = parse('<root xmlns="urn:a"><item/></root>')
        >>> document.get_root_element().get_namespace()
        'urn:a'
    """
    if isinstance(source, str):
        return parse_string(source, config, element_factory, correlation_id)
    if isinstance(source, bytes):
        return parse_bytes(source, config, element_factory, correlation_id)
    if isinstance(source, Path):
        return parse_file(source, config, element_factory, correlation_id)
    if hasattr(source, "read"):
        content = source.read()
        if isinstance(content, bytes):
            return parse_bytes(content, config, element_factory, correlation_id)
        return parse_string(content, config, element_factory, correlation_id)
    raise TypeError(f"Unsupported input type: {type(source).__name__}")


def parse_string(
    text: str,
    config: Optional[DomConfig] = None,
    element_factory: Optional[ElementFactory] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Parse a document from text."""
    config = config or DomConfig()
    reader = XmlPullReader(text, config.reader, correlation_id=correlation_id)
    return _parse_document(reader, element_factory, correlation_id, len(text))


def parse_bytes(
    data: bytes,
    config: Optional[DomConfig] = None,
    element_factory: Optional[ElementFactory] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Parse a document from bytes, detecting the encoding."""
    config = config or DomConfig()
    reader = XmlPullReader.from_bytes(data, config.reader, correlation_id=correlation_id)
    return _parse_document(reader, element_factory, correlation_id, len(data))


def parse_file(
    path: Union[str, Path],
    config: Optional[DomConfig] = None,
    element_factory: Optional[ElementFactory] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Parse a document from a file, detecting the encoding."""
    logger = get_logger(__name__, correlation_id, "parse_file")
    path = Path(path)
    logger.debug("Reading XML file", extra={"path": str(path)})
    return parse_bytes(path.read_bytes(), config, element_factory, correlation_id)


def parse_element(
    text: str,
    config: Optional[DomConfig] = None,
    element_factory: Optional[ElementFactory] = None,
    correlation_id: Optional[str] = None,
) -> Element:
    """Parse the root element of a document without a Document container.

    The returned element is detached: ``get_parent()`` and ``get_document()``
    return None. Content around the root element is checked and dropped.
    """
    config = config or DomConfig()
    reader = XmlPullReader(text, config.reader, correlation_id=correlation_id)
    while reader.next_token() is not EventType.START_TAG:
        pass

    namespace = reader.get_namespace() or ""
    name = reader.get_name() or ""
    element = element_factory(namespace, name) if element_factory else Element(namespace, name)
    element.parse(reader)
    while reader.get_event_type() is not EventType.END_DOCUMENT:
        reader.next_token()
    return element


def to_string(
    node: Node,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None,
) -> str:
    """Serialize a Document or Element to a string."""
    output = io.StringIO()
    write(node, output, config, correlation_id)
    return output.getvalue()


def write(
    node: Node,
    output: TextIO,
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """Serialize a Document or Element to a text stream."""
    config = config or DomConfig()
    logger = get_logger(__name__, correlation_id, "write")
    start_time = time.time()

    writer = XmlWriter(output, config.writer, correlation_id=correlation_id)
    try:
        node.write(writer)
        writer.flush()
    except NsdomError as e:
        logger.warning(
            "Serialization failed",
            extra={"node": repr(node), "error_type": type(e).__name__, "error_message": str(e)}
        )
        raise

    logger.debug(
        "Serialization completed",
        extra={
            "node": repr(node),
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )


def write_file(
    document: Document,
    path: Union[str, Path],
    config: Optional[DomConfig] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """Serialize a document to a file in the document's encoding (UTF-8 by default).

    The document is serialized completely before the file is touched, so a
    failed serialization leaves no partial file. Characters the encoding
    cannot represent are written as character references.
    """
    encoding = codec_name(document.get_encoding() or "utf-8")
    data = to_string(document, config, correlation_id).encode(encoding, errors="xmlcharrefreplace")
    Path(path).write_bytes(data)


def _parse_document(
    reader: XmlPullReader,
    element_factory: Optional[ElementFactory],
    correlation_id: Optional[str],
    input_size: int,
) -> Document:
    logger = get_logger(__name__, correlation_id, "parse")
    start_time = time.time()
    logger.debug(
        "Starting parse operation",
        extra={"input_size": input_size, "has_element_factory": element_factory is not None}
    )

    document = Document(element_factory)
    try:
        document.parse(reader)
    except NsdomError as e:
        logger.warning(
            "Parse failed",
            extra={"error_type": type(e).__name__, "error_message": str(e)}
        )
        raise

    logger.info(
        "Parse completed",
        extra={
            "input_size": input_size,
            "child_count": document.get_child_count(),
            "encoding": document.get_encoding(),
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return document
