"""Namespace-aware XML event writer.

The writer turns structural events (start tag, attribute, text, end tag, ...)
into XML text on a ``TextIO`` sink. Prefix bindings requested with
``set_prefix`` are declared on the next start tag; namespaces that have no
binding in scope get generated prefixes declared inline.
"""

from typing import List, Optional, TextIO, Tuple

from ..pull.events import NO_NAMESPACE, XML_NAMESPACE
from ..shared import WriterConfig, WriterStateError, get_logger

_TEXT_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\r": "&#13;",
})

_ATTRIBUTE_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#9;",
    "\n": "&#10;",
    "\r": "&#13;",
}
_QUOTE_ESCAPES = {'"': "&quot;", "'": "&apos;"}


def escape_text(text: str) -> str:
    """Escape character data for use between tags."""
    return text.translate(_TEXT_ESCAPES)


def escape_attribute(value: str, quote_char: str = '"') -> str:
    """Escape an attribute value for the given quote character."""
    table = dict(_ATTRIBUTE_ESCAPES)
    table[quote_char] = _QUOTE_ESCAPES[quote_char]
    return value.translate(str.maketrans(table))


class XmlWriter:
    """Event writer producing XML text.

    Example:
        >>> out = io.StringIO()
        >>> writer = XmlWriter(out)
        >>> writer.set_prefix("x", "urn:x")
        >>> writer.start_tag("urn:x", "root")
        >>> writer.attribute("", "id", "1")
        >>> writer.end_tag("urn:x", "root")
        >>> out.getvalue()
        '<x:root xmlns:x="urn:x" id="1"/>'
    """

    def __init__(
        self,
        output: TextIO,
        config: Optional[WriterConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the writer.

        Args:
            output: Text sink receiving the serialized XML
            config: Writer configuration, defaults to ``WriterConfig()``
            correlation_id: Optional correlation ID for tracking requests
        """
        self.output = output
        self.config = config or WriterConfig()
        self.logger = get_logger(__name__, correlation_id, "xml_writer")

        # Open elements as (namespace, name, qualified name)
        self._elements: List[Tuple[str, str, str]] = []
        # Prefix bindings in scope; "" is the default namespace slot
        self._bindings: List[Tuple[str, str]] = [("xml", XML_NAMESPACE)]
        self._scope_starts: List[int] = []
        self._pending_bindings: List[Tuple[str, str]] = []
        self._tag_open = False
        self._auto_counter = 0

    def get_depth(self) -> int:
        return len(self._elements)

    def start_document(self, encoding: Optional[str] = None, standalone: Optional[bool] = None) -> None:
        """Write the XML declaration, if enabled."""
        if not self.config.xml_declaration:
            return
        q = self.config.quote_char
        declaration = f"<?xml version={q}1.0{q}"
        if encoding:
            declaration += f" encoding={q}{encoding}{q}"
        if standalone is not None:
            declaration += f" standalone={q}{'yes' if standalone else 'no'}{q}"
        self.output.write(declaration + "?>")

    def end_document(self) -> None:
        """Close every element still open and flush the sink."""
        while self._elements:
            namespace, name, _ = self._elements[-1]
            self.end_tag(namespace, name)
        self.flush()

    def set_prefix(self, prefix: Optional[str], namespace: str) -> None:
        """Bind ``prefix`` to ``namespace`` for the next start tag's scope.

        A ``None`` or empty prefix declares the default namespace.
        """
        self._close_start_tag()
        prefix = prefix or ""
        namespace = namespace or NO_NAMESPACE
        if prefix == "xml" or namespace == XML_NAMESPACE:
            if prefix == "xml" and namespace == XML_NAMESPACE:
                return
            raise self._state_error(f"Illegal binding of {prefix or 'default namespace'} to {namespace}")
        if prefix == "xmlns":
            raise self._state_error("The xmlns prefix cannot be declared")
        if prefix and not namespace:
            raise self._state_error(f"Prefix {prefix} cannot be bound to an empty namespace")
        if self._resolve(prefix) == namespace:
            return

        self._pending_bindings = [
            binding for binding in self._pending_bindings if binding[0] != prefix
        ]
        self._pending_bindings.append((prefix, namespace))

    def get_prefix(self, namespace: str, include_default: bool, create: bool) -> Optional[str]:
        """Find (or generate) a prefix bound to ``namespace`` in the current scope.

        Args:
            namespace: Namespace URI to look up
            include_default: Whether the default namespace ("") may be returned
            create: Whether to generate and declare a prefix if none is bound

        Returns:
            The prefix, "" for the default namespace, or None
        """
        if namespace == XML_NAMESPACE:
            return "xml"
        if namespace == NO_NAMESPACE:
            return "" if include_default and self._resolve("") == NO_NAMESPACE else None

        for prefix, uri in reversed(self._visible_bindings()):
            if uri == namespace and (include_default or prefix) and self._resolve(prefix) == namespace:
                return prefix

        if not create:
            return None
        return self._generate_prefix(namespace)

    def start_tag(self, namespace: Optional[str], name: str) -> None:
        """Open an element; pending prefix bindings are declared on it.

        An element in no namespace is written with ``xmlns=""`` whenever a
        default namespace is in scope. A pending default namespace binding on
        that element cannot be written alongside it and is dropped, so its
        descendants in that namespace are written with a generated prefix.
        """
        self._close_start_tag()
        namespace = namespace or NO_NAMESPACE

        scope_start = len(self._bindings)
        self._scope_starts.append(scope_start)
        self._bindings.extend(self._pending_bindings)
        self._pending_bindings = []

        if namespace == NO_NAMESPACE:
            if self._resolve("") != NO_NAMESPACE:
                # An element in no namespace must not sit under a default namespace
                self._bindings = [
                    binding for index, binding in enumerate(self._bindings)
                    if index < scope_start or binding[0] != ""
                ]
                self._bindings.append(("", NO_NAMESPACE))
            prefix: Optional[str] = ""
        else:
            prefix = self.get_prefix(namespace, True, False)
            if prefix is None:
                prefix = self._new_prefix()
                self._bindings.append((prefix, namespace))

        qname = f"{prefix}:{name}" if prefix else name
        self.output.write("<" + qname)
        for bound_prefix, uri in self._bindings[scope_start:]:
            self._write_declaration(bound_prefix, uri)

        self._elements.append((namespace, name, qname))
        self._tag_open = True

    def attribute(self, namespace: Optional[str], name: str, value: str) -> None:
        """Add an attribute to the start tag that is still open."""
        if not self._tag_open:
            raise self._state_error(f"attribute {name} written outside a start tag")
        namespace = namespace or NO_NAMESPACE

        qname = name
        if namespace != NO_NAMESPACE:
            prefix = self.get_prefix(namespace, False, True)
            qname = f"{prefix}:{name}"

        q = self.config.quote_char
        self.output.write(f" {qname}={q}{escape_attribute(value, q)}{q}")

    def end_tag(self, namespace: Optional[str], name: str) -> None:
        """Close the innermost open element, which must match ``namespace``/``name``."""
        if not self._elements:
            raise self._state_error(f"end tag {name} written with no open element")
        open_namespace, open_name, qname = self._elements[-1]
        if (namespace or NO_NAMESPACE) != open_namespace or name != open_name:
            raise self._state_error(
                f"end tag {{{namespace or ''}}}{name} does not match open element <{qname}>"
            )

        if self._tag_open and self.config.collapse_empty_elements:
            self.output.write("/>")
            self._tag_open = False
        else:
            self._close_start_tag()
            self.output.write(f"</{qname}>")

        self._elements.pop()
        del self._bindings[self._scope_starts.pop():]

    def text(self, text: str) -> None:
        self._close_start_tag()
        self.output.write(escape_text(text))

    def ignorable_whitespace(self, text: str) -> None:
        self.text(text)

    def cdsect(self, text: str) -> None:
        self._close_start_tag()
        self.output.write("<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>")

    def entity_ref(self, name: str) -> None:
        self._close_start_tag()
        self.output.write(f"&{name};")

    def processing_instruction(self, text: str) -> None:
        self._close_start_tag()
        if "?>" in text:
            raise self._state_error("'?>' is not allowed inside a processing instruction")
        self.output.write(f"<?{text}?>")

    def comment(self, text: str) -> None:
        self._close_start_tag()
        if "--" in text or text.endswith("-"):
            raise self._state_error("'--' is not allowed inside a comment")
        self.output.write(f"<!--{text}-->")

    def docdecl(self, text: str) -> None:
        self._close_start_tag()
        self.output.write(f"<!DOCTYPE{text}>")

    def flush(self) -> None:
        """Close a pending start tag and flush the underlying sink."""
        self._close_start_tag()
        flush = getattr(self.output, "flush", None)
        if flush is not None:
            flush()

    # ------------------------------------------------------------------

    def _close_start_tag(self) -> None:
        if self._tag_open:
            self.output.write(">")
            self._tag_open = False

    def _visible_bindings(self) -> List[Tuple[str, str]]:
        return self._bindings + self._pending_bindings

    def _resolve(self, prefix: str) -> Optional[str]:
        for bound_prefix, uri in reversed(self._visible_bindings()):
            if bound_prefix == prefix:
                return uri
        return NO_NAMESPACE if prefix == "" else None

    def _new_prefix(self) -> str:
        while True:
            prefix = f"{self.config.auto_prefix}{self._auto_counter}"
            self._auto_counter += 1
            if self._resolve(prefix) is None:
                return prefix

    def _generate_prefix(self, namespace: str) -> str:
        prefix = self._new_prefix()
        if self._tag_open:
            self._bindings.append((prefix, namespace))
            self._write_declaration(prefix, namespace)
        else:
            self._pending_bindings.append((prefix, namespace))
        return prefix

    def _write_declaration(self, prefix: str, namespace: str) -> None:
        q = self.config.quote_char
        attribute = f"xmlns:{prefix}" if prefix else "xmlns"
        self.output.write(f" {attribute}={q}{escape_attribute(namespace, q)}{q}")

    def _state_error(self, message: str) -> WriterStateError:
        error = WriterStateError(message)
        self.logger.debug(
            "Writer state error",
            extra={"error_message": message, "depth": self.get_depth()}
        )
        return error
