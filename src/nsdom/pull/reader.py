"""Namespace-aware XML pull reader.

This module implements a strict, non-validating XML tokenizer exposed as a
pull cursor: the caller inspects the current event and advances explicitly
with ``next_token`` (every event kind) or ``next`` (coalesced text, markup
declarations skipped). Namespace declarations are tracked per depth so a
consumer can read exactly the bindings introduced by the current tag.
"""

import bisect
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..character import EncodingDetector
from ..shared import (
    ReaderConfig,
    StructuralMismatchError,
    XmlSyntaxError,
    get_logger,
)
from ..shared.errors import check_index
from .events import (
    NO_NAMESPACE,
    TEXTUAL_EVENTS,
    XML_NAMESPACE,
    XMLNS_NAMESPACE,
    EventType,
)

_NAME_START = (
    r"A-Za-z_:\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    r"\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF"
    r"\uFDF0-\uFFFD\U00010000-\U000EFFFF"
)
_NAME_CHAR = _NAME_START + r"\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"
NAME_PATTERN = re.compile(f"[{_NAME_START}][{_NAME_CHAR}]*")
WHITESPACE_PATTERN = re.compile(r"[ \t\n]*")
REFERENCE_PATTERN = re.compile(f"&(#[0-9]+|#x[0-9a-fA-F]+|[{_NAME_START}][{_NAME_CHAR}]*);")
XML_DECLARATION_PATTERN = re.compile(r"<\?xml[ \t\n]+(.*?)\?>", re.DOTALL)
PSEUDO_ATTRIBUTE_PATTERN = re.compile(r"[ \t\n]*([a-z]+)[ \t\n]*=[ \t\n]*(\"[^\"]*\"|'[^']*')")

PREDEFINED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

_MAX_CODE_POINT = 0x10FFFF
_SURROGATES = range(0xD800, 0xE000)
_XML_DECLARATION_FIELDS = ("version", "encoding", "standalone")


@dataclass
class _OpenElement:
    """An element whose start tag has been read but not its end tag."""

    namespace: str
    prefix: Optional[str]
    name: str
    qname: str


class XmlPullReader:
    """Pull cursor over an XML document.

    The reader starts positioned at ``START_DOCUMENT``. Depth follows the
    XmlPull convention: a start tag and its end tag report the same depth,
    and the root element is at depth 1.
    """

    def __init__(
        self,
        text: str,
        config: Optional[ReaderConfig] = None,
        input_encoding: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the reader.

        Args:
            text: Complete document text
            config: Reader configuration, defaults to ``ReaderConfig()``
            input_encoding: Encoding the text was decoded from, if any
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or ReaderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "pull_reader")

        if text.startswith("\ufeff"):
            text = text[1:]
        self._text = text.replace("\r\n", "\n").replace("\r", "\n")
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", self._text)]
        self._pos = 0
        self._token_start = 0

        self._input_encoding = input_encoding
        self._xml_version: Optional[str] = None
        self._standalone: Optional[bool] = None

        self._elements: List[_OpenElement] = []
        self._ns_stack: List[Tuple[Optional[str], str]] = []
        self._ns_counts: List[int] = [0]
        self._root_seen = False
        self._doctype_seen = False
        self._pending_end = False

        self._reset_token()
        self._event = EventType.START_DOCUMENT
        self._read_xml_declaration()

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        config: Optional[ReaderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> "XmlPullReader":
        """Create a reader over encoded bytes, detecting their encoding.

        The input encoding reported afterwards is the name from the XML
        declaration when one was used, otherwise the detected codec.
        """
        text, result = EncodingDetector().decode(data)
        input_encoding = result.declared_encoding or result.encoding
        return cls(text, config, input_encoding=input_encoding, correlation_id=correlation_id)

    # ------------------------------------------------------------------
    # Current event state

    @property
    def event_type(self) -> EventType:
        return self._event

    def get_event_type(self) -> EventType:
        return self._event

    def get_depth(self) -> int:
        return len(self._elements)

    def get_name(self) -> Optional[str]:
        """Local name of the current tag, or the entity name at ENTITY_REF."""
        return self._name

    def get_namespace(self) -> Optional[str]:
        """Namespace URI of the current tag; ``""`` for no namespace."""
        return self._namespace

    def get_prefix(self) -> Optional[str]:
        return self._prefix

    def get_text(self) -> Optional[str]:
        """Text of the current textual, comment, PI or doctype event."""
        return self._text_value

    def is_whitespace(self) -> bool:
        """Check whether the current text event holds whitespace only."""
        if self._event not in (EventType.TEXT, EventType.IGNORABLE_WHITESPACE, EventType.CDSECT):
            raise XmlSyntaxError(f"is_whitespace() not applicable to {self._event.name}")
        return self._text_value is not None and not self._text_value.strip(" \t\n")

    def is_empty_element_tag(self) -> bool:
        """Check whether the current start tag is self-closing."""
        if self._event is not EventType.START_TAG:
            raise XmlSyntaxError("is_empty_element_tag() requires a START_TAG event")
        return self._is_empty

    def get_position(self) -> Tuple[int, int]:
        """Line and column (both 1-based) of the current token."""
        return self._line_column(self._token_start)

    def get_input_encoding(self) -> Optional[str]:
        return self._input_encoding

    def get_xml_version(self) -> Optional[str]:
        return self._xml_version

    def get_standalone(self) -> Optional[bool]:
        return self._standalone

    # ------------------------------------------------------------------
    # Attributes of the current start tag

    def get_attribute_count(self) -> int:
        return len(self._attributes)

    def get_attribute_namespace(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][0]

    def get_attribute_prefix(self, index: int) -> Optional[str]:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][1]

    def get_attribute_name(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][2]

    def get_attribute_value(self, index: int) -> str:
        check_index("attribute", index, len(self._attributes))
        return self._attributes[index][3]

    def get_attribute_value_by_name(self, namespace: Optional[str], name: str) -> Optional[str]:
        for attr_namespace, _, attr_name, value in self._attributes:
            if attr_name == name and (namespace is None or namespace == attr_namespace):
                return value
        return None

    # ------------------------------------------------------------------
    # Namespace declarations

    def get_namespace_count(self, depth: int) -> int:
        """Number of namespace bindings in scope at ``depth``."""
        check_index("depth", depth, self.get_depth() + 1)
        return self._ns_counts[depth]

    def get_namespace_prefix(self, pos: int) -> Optional[str]:
        """Prefix of binding ``pos``; ``None`` for a default namespace declaration."""
        check_index("namespace", pos, len(self._ns_stack))
        return self._ns_stack[pos][0]

    def get_namespace_uri(self, pos: int) -> str:
        check_index("namespace", pos, len(self._ns_stack))
        return self._ns_stack[pos][1]

    def get_namespace_for_prefix(self, prefix: Optional[str]) -> Optional[str]:
        """Resolve ``prefix`` against the bindings currently in scope."""
        if prefix == "xml":
            return XML_NAMESPACE
        if prefix == "xmlns":
            return XMLNS_NAMESPACE
        for bound_prefix, uri in reversed(self._ns_stack):
            if bound_prefix == prefix:
                return uri
        return NO_NAMESPACE if prefix is None else None

    # ------------------------------------------------------------------
    # Cursor movement

    def require(
        self,
        event_type: EventType,
        namespace: Optional[str],
        name: Optional[str],
    ) -> None:
        """Fail unless the current event matches type, namespace and name.

        ``None`` for namespace or name matches anything.

        Raises:
            StructuralMismatchError: If an END_TAG was required and not found
            XmlSyntaxError: For any other mismatch
        """
        if (
            event_type is self._event
            and (namespace is None or namespace == self._namespace)
            and (name is None or name == self._name)
        ):
            return

        expected = _describe(event_type, namespace, name)
        found = _describe(self._event, self._namespace, self._name)
        line, column = self.get_position()
        if event_type is EventType.END_TAG:
            error: XmlSyntaxError = StructuralMismatchError(expected, found, line, column)
        else:
            error = XmlSyntaxError(f"expected {expected}, found {found}", line, column)
        self._log_error(error)
        raise error

    def next_token(self) -> EventType:
        """Advance to the next token and return its event type."""
        if self._event is EventType.END_DOCUMENT:
            return self._event
        if self._event is EventType.END_TAG:
            self._pop_element()
        self._reset_token()

        if self._pending_end:
            self._pending_end = False
            self._set_end_tag(self._elements[-1])
            return self._event

        while True:
            self._token_start = self._pos
            if self._pos >= len(self._text):
                self._read_end_of_input()
            elif self._text.startswith("<", self._pos):
                self._read_markup()
            elif self._text.startswith("&", self._pos) and not self.config.expand_entities:
                self._read_entity_ref()
            else:
                self._read_text()
            if self._event is not None:
                return self._event

    def next(self) -> EventType:
        """Advance to the next START_TAG, END_TAG, TEXT or END_DOCUMENT.

        Adjacent text, CDATA sections and entity references are coalesced into
        one TEXT event; comments, processing instructions and the doctype are
        skipped. Whitespace outside the root element is skipped too.
        """
        while True:
            event = self.next_token()
            if event in TEXTUAL_EVENTS:
                break
            if event in (EventType.START_TAG, EventType.END_TAG, EventType.END_DOCUMENT):
                return event

        start = self._token_start
        parts = [self._resolved_text()]
        while not self._pending_end and self._at_textual_input():
            event = self.next_token()
            if event in TEXTUAL_EVENTS:
                parts.append(self._resolved_text())
        self._event = EventType.TEXT
        self._text_value = "".join(parts)
        self._name = None
        self._token_start = start
        return self._event

    # ------------------------------------------------------------------
    # Token readers

    def _reset_token(self) -> None:
        self._event: Optional[EventType] = None
        self._name: Optional[str] = None
        self._namespace: Optional[str] = None
        self._prefix: Optional[str] = None
        self._text_value: Optional[str] = None
        self._attributes: List[Tuple[str, Optional[str], str, str]] = []
        self._is_empty = False

    def _read_xml_declaration(self) -> None:
        match = XML_DECLARATION_PATTERN.match(self._text)
        if not match:
            return

        fields = {}
        body = match.group(1)
        end = 0
        for field_match in PSEUDO_ATTRIBUTE_PATTERN.finditer(body):
            if field_match.start() != end:
                break
            fields[field_match.group(1)] = field_match.group(2)[1:-1]
            end = field_match.end()
        if body[end:].strip(" \t\n") or list(fields) != [
            name for name in _XML_DECLARATION_FIELDS if name in fields
        ]:
            raise self._error("Malformed XML declaration", 0)
        if "version" not in fields:
            raise self._error("XML declaration requires a version", 0)

        self._xml_version = fields["version"]
        if "encoding" in fields and self._input_encoding is None:
            self._input_encoding = fields["encoding"]
        standalone = fields.get("standalone")
        if standalone is not None:
            if standalone not in ("yes", "no"):
                raise self._error("standalone must be 'yes' or 'no'", 0)
            self._standalone = standalone == "yes"
        self._pos = match.end()

    def _read_end_of_input(self) -> None:
        if self._elements:
            raise self._error(f"Unexpected end of document, <{self._elements[-1].qname}> not closed")
        if not self._root_seen:
            raise self._error("Document has no root element")
        self._event = EventType.END_DOCUMENT

    def _read_markup(self) -> None:
        text, pos = self._text, self._pos
        if text.startswith("</", pos):
            self._read_end_tag()
        elif text.startswith("<!--", pos):
            self._read_comment()
        elif text.startswith("<![CDATA[", pos):
            self._read_cdata()
        elif text.startswith("<!DOCTYPE", pos):
            self._read_doctype()
        elif text.startswith("<?", pos):
            self._read_processing_instruction()
        elif text.startswith("<!", pos):
            raise self._error("Unrecognized markup declaration")
        else:
            self._read_start_tag()

    def _read_start_tag(self) -> None:
        if self._root_seen and not self._elements:
            raise self._error("Only one root element is allowed")
        if len(self._elements) >= self.config.max_depth:
            raise self._error(f"Maximum element depth {self.config.max_depth} exceeded")

        self._pos += 1
        qname = self._read_name()
        raw_attributes: List[Tuple[str, str, int]] = []
        while True:
            had_space = self._skip_whitespace()
            if self._text.startswith("/>", self._pos):
                self._is_empty = True
                self._pos += 2
                break
            if self._text.startswith(">", self._pos):
                self._pos += 1
                break
            if self._pos >= len(self._text):
                raise self._error(f"Unterminated start tag <{qname}>")
            if not had_space:
                raise self._error("Whitespace required before attribute", self._pos)

            attr_start = self._pos
            attr_qname = self._read_name()
            if any(attr_qname == seen for seen, _, _ in raw_attributes):
                raise self._error(f"Duplicate attribute {attr_qname}", attr_start)
            self._skip_whitespace()
            self._expect("=")
            self._skip_whitespace()
            raw_attributes.append((attr_qname, self._read_attribute_value(), attr_start))

        self._root_seen = True
        self._push_element(qname, raw_attributes)
        self._event = EventType.START_TAG
        self._pending_end = self._is_empty

    def _push_element(self, qname: str, raw_attributes: List[Tuple[str, str, int]]) -> None:
        plain_attributes = []
        for attr_qname, value, attr_start in raw_attributes:
            if attr_qname == "xmlns":
                self._ns_stack.append((None, value))
            elif attr_qname.startswith("xmlns:"):
                prefix = attr_qname[6:]
                if not value:
                    raise self._error(f"Prefix {prefix} cannot be bound to an empty namespace", attr_start)
                if prefix == "xmlns" or (prefix == "xml") != (value == XML_NAMESPACE):
                    raise self._error(f"Illegal binding of reserved prefix {prefix}", attr_start)
                self._ns_stack.append((prefix, value))
            else:
                plain_attributes.append((attr_qname, value, attr_start))

        prefix, name = self._split_qname(qname, self._token_start + 1)
        namespace = self.get_namespace_for_prefix(prefix)
        if namespace is None:
            raise self._error(f"Undefined prefix {prefix} in <{qname}>")

        seen = set()
        for attr_qname, value, attr_start in plain_attributes:
            attr_prefix, attr_name = self._split_qname(attr_qname, attr_start)
            attr_namespace = NO_NAMESPACE
            if attr_prefix is not None:
                attr_namespace = self.get_namespace_for_prefix(attr_prefix)
                if attr_namespace is None:
                    raise self._error(f"Undefined prefix {attr_prefix} in attribute {attr_qname}", attr_start)
            if (attr_namespace, attr_name) in seen:
                raise self._error(f"Duplicate attribute {{{attr_namespace}}}{attr_name}", attr_start)
            seen.add((attr_namespace, attr_name))
            self._attributes.append((attr_namespace, attr_prefix, attr_name, value))

        self._ns_counts.append(len(self._ns_stack))
        self._elements.append(_OpenElement(namespace, prefix, name, qname))
        self._namespace, self._prefix, self._name = namespace, prefix, name

    def _pop_element(self) -> None:
        self._elements.pop()
        self._ns_counts.pop()
        del self._ns_stack[self._ns_counts[-1]:]

    def _read_end_tag(self) -> None:
        self._pos += 2
        qname = self._read_name()
        self._skip_whitespace()
        self._expect(">")
        if not self._elements:
            raise self._error(f"Unexpected end tag </{qname}>")

        top = self._elements[-1]
        if qname != top.qname:
            line, column = self._line_column(self._token_start)
            error = StructuralMismatchError(f"</{top.qname}>", f"</{qname}>", line, column)
            self._log_error(error)
            raise error
        self._set_end_tag(top)

    def _set_end_tag(self, element: _OpenElement) -> None:
        self._event = EventType.END_TAG
        self._namespace = element.namespace
        self._prefix = element.prefix
        self._name = element.name

    def _read_comment(self) -> None:
        start = self._pos + 4
        end = self._text.find("--", start)
        if end == -1:
            raise self._error("Unterminated comment")
        if not self._text.startswith("-->", end):
            raise self._error("'--' is not allowed inside a comment", end)
        self._pos = end + 3
        self._event = EventType.COMMENT
        self._text_value = self._text[start:end]

    def _read_cdata(self) -> None:
        if not self._elements:
            raise self._error("CDATA section outside the root element")
        start = self._pos + 9
        end = self._text.find("]]>", start)
        if end == -1:
            raise self._error("Unterminated CDATA section")
        self._pos = end + 3
        self._event = EventType.CDSECT
        self._text_value = self._text[start:end]

    def _read_doctype(self) -> None:
        if self._root_seen or self._doctype_seen:
            raise self._error("DOCTYPE declaration is only allowed once, before the root element")
        start = self._pos + 9
        pos = start
        quote: Optional[str] = None
        brackets = 0
        while pos < len(self._text):
            ch = self._text[pos]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "[":
                brackets += 1
            elif ch == "]":
                brackets -= 1
            elif ch == ">" and brackets <= 0:
                break
            pos += 1
        else:
            raise self._error("Unterminated DOCTYPE declaration")

        self._doctype_seen = True
        self._pos = pos + 1
        self._event = EventType.DOCDECL
        self._text_value = self._text[start:pos]

    def _read_processing_instruction(self) -> None:
        start = self._pos + 2
        target_match = NAME_PATTERN.match(self._text, start)
        if not target_match:
            raise self._error("Processing instruction requires a target")
        if target_match.group().lower() == "xml":
            raise self._error("XML declaration is only allowed at the start of the document")
        end = self._text.find("?>", start)
        if end == -1:
            raise self._error("Unterminated processing instruction")
        self._pos = end + 2
        self._event = EventType.PROCESSING_INSTRUCTION
        self._text_value = self._text[start:end]

    def _read_entity_ref(self) -> None:
        if not self._elements:
            raise self._error("Entity reference outside the root element")
        name, resolved = self._read_reference()
        self._event = EventType.ENTITY_REF
        self._name = name
        self._text_value = resolved

    def _read_text(self) -> None:
        text = self._text
        parts = []
        while self._pos < len(text):
            end = len(text)
            for stop in ("<", "&"):
                found = text.find(stop, self._pos)
                if found != -1 and found < end:
                    end = found
            chunk = text[self._pos:end]
            if "]]>" in chunk:
                raise self._error("']]>' is not allowed in text", self._pos + chunk.index("]]>"))
            parts.append(chunk)
            self._pos = end
            if not text.startswith("&", end) or not self.config.expand_entities:
                break

            ref_start = self._pos
            name, resolved = self._read_reference()
            if resolved is None:
                # Unknown entity: stop here so it is reported as its own event
                self._pos = ref_start
                break
            parts.append(resolved)

        value = "".join(parts)
        if not value:
            # Text run is empty only when an unknown entity starts it
            self._read_entity_ref()
            return

        if not self._elements:
            if value.strip(" \t\n"):
                raise self._error("Text is not allowed outside the root element", self._token_start)
            if not self.config.report_ignorable_whitespace:
                return
            self._event = EventType.IGNORABLE_WHITESPACE
        else:
            self._event = EventType.TEXT
        self._text_value = value

    def _read_reference(self) -> Tuple[str, Optional[str]]:
        """Read ``&...;`` at the cursor; returns its name and replacement text.

        The replacement is ``None`` for entities this reader cannot resolve.
        """
        match = REFERENCE_PATTERN.match(self._text, self._pos)
        if not match:
            raise self._error("Malformed entity reference")
        self._pos = match.end()
        name = match.group(1)

        if name.startswith("#"):
            code = int(name[2:], 16) if name.startswith("#x") else int(name[1:])
            if code == 0 or code > _MAX_CODE_POINT or code in _SURROGATES:
                raise self._error(f"Invalid character reference &{name};", match.start())
            return name, chr(code)

        if name in PREDEFINED_ENTITIES:
            return name, PREDEFINED_ENTITIES[name]
        if self.config.strict_entities:
            raise self._error(f"Undeclared entity &{name};", match.start())
        return name, None

    def _read_attribute_value(self) -> str:
        quote = self._text[self._pos:self._pos + 1]
        if quote not in ("'", '"'):
            raise self._error("Attribute value must be quoted")
        self._pos += 1

        parts = []
        while True:
            end = self._text.find(quote, self._pos)
            if end == -1:
                raise self._error("Unterminated attribute value")
            amp = self._text.find("&", self._pos, end)
            chunk_end = end if amp == -1 else amp
            chunk = self._text[self._pos:chunk_end]
            if "<" in chunk:
                raise self._error("'<' is not allowed in attribute values", self._pos + chunk.index("<"))
            parts.append(chunk.replace("\t", " ").replace("\n", " "))
            self._pos = chunk_end
            if amp == -1:
                self._pos += 1
                return "".join(parts)

            ref_start = self._pos
            name, resolved = self._read_reference()
            if resolved is None:
                raise self._error(f"Cannot resolve entity &{name}; in attribute value", ref_start)
            parts.append(resolved)

    def _read_name(self) -> str:
        match = NAME_PATTERN.match(self._text, self._pos)
        if not match:
            raise self._error("Name expected")
        self._pos = match.end()
        return match.group()

    def _split_qname(self, qname: str, offset: int) -> Tuple[Optional[str], str]:
        if ":" not in qname:
            return None, qname
        prefix, _, local = qname.partition(":")
        if not prefix or not local or ":" in local:
            raise self._error(f"Illegal qualified name {qname}", offset)
        return prefix, local

    def _skip_whitespace(self) -> bool:
        match = WHITESPACE_PATTERN.match(self._text, self._pos)
        self._pos = match.end()  # type: ignore[union-attr]
        return match.end() > match.start()  # type: ignore[union-attr]

    def _expect(self, literal: str) -> None:
        if not self._text.startswith(literal, self._pos):
            raise self._error(f"'{literal}' expected")
        self._pos += len(literal)

    def _at_textual_input(self) -> bool:
        """Check whether the unread input continues a run of text."""
        text, pos = self._text, self._pos
        if pos >= len(text) or not self._elements:
            return False
        if not text.startswith("<", pos):
            return True
        return (
            text.startswith("<![CDATA[", pos)
            or text.startswith("<!--", pos)
            or text.startswith("<?", pos)
        )

    def _resolved_text(self) -> str:
        if self._text_value is None:
            raise self._error(f"Unresolved entity reference &{self._name};", self._token_start)
        return self._text_value

    # ------------------------------------------------------------------
    # Diagnostics

    def _line_column(self, offset: int) -> Tuple[int, int]:
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    def _error(self, message: str, offset: Optional[int] = None) -> XmlSyntaxError:
        line, column = self._line_column(self._pos if offset is None else offset)
        error = XmlSyntaxError(message, line, column)
        self._log_error(error)
        return error

    def _log_error(self, error: XmlSyntaxError) -> None:
        self.logger.debug(
            "XML syntax error",
            extra={
                "error_message": error.message,
                "line": error.line,
                "column": error.column,
                "depth": self.get_depth(),
            }
        )


def _describe(event_type: Optional[EventType], namespace: Optional[str], name: Optional[str]) -> str:
    description = event_type.name if event_type else "nothing"
    if name is not None:
        description += f" {{{namespace or ''}}}{name}" if namespace else f" {name}"
    return description
