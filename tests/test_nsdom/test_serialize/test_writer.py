"""Tests for the namespace-aware event writer."""

import io

import pytest

from nsdom.pull import XML_NAMESPACE
from nsdom.serialize import XmlWriter, escape_attribute, escape_text
from nsdom.shared import WriterConfig, WriterStateError


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def writer(output: io.StringIO) -> XmlWriter:
    return XmlWriter(output)


class TestEscaping:
    """Test text and attribute escaping."""

    def test_escape_text(self) -> None:
        """Test markup characters in character data."""
        assert escape_text('a<b&c>"\'') == "a&lt;b&amp;c&gt;\"'"

    def test_escape_text_carriage_return(self) -> None:
        """Test that CR survives a parse as a character reference."""
        assert escape_text("a\rb") == "a&#13;b"

    def test_escape_attribute_double_quote(self) -> None:
        """Test attribute escaping with the default quote."""
        assert escape_attribute('x"y\'\t\n') == "x&quot;y'&#9;&#10;"

    def test_escape_attribute_single_quote(self) -> None:
        """Test attribute escaping with apostrophes as delimiters."""
        assert escape_attribute("it's \"ok\"", "'") == "it&apos;s \"ok\""


class TestTags:
    """Test tags, attributes and content."""

    def test_prefixed_root(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test an explicitly bound prefix."""
        writer.set_prefix("x", "urn:x")
        writer.start_tag("urn:x", "root")
        writer.attribute("", "id", "1")
        writer.end_tag("urn:x", "root")

        assert output.getvalue() == '<x:root xmlns:x="urn:x" id="1"/>'

    def test_default_namespace(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that children inherit the default namespace declaration."""
        writer.set_prefix(None, "urn:d")
        writer.start_tag("urn:d", "a")
        writer.start_tag("urn:d", "b")
        writer.end_tag("urn:d", "b")
        writer.end_tag("urn:d", "a")

        assert output.getvalue() == '<a xmlns="urn:d"><b/></a>'

    def test_no_namespace_under_default(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that a no-namespace child undeclares the default namespace."""
        writer.set_prefix(None, "urn:d")
        writer.start_tag("urn:d", "a")
        writer.start_tag("", "b")
        writer.end_tag("", "b")
        writer.start_tag("urn:d", "c")
        writer.end_tag("urn:d", "c")
        writer.end_tag("urn:d", "a")

        assert output.getvalue() == '<a xmlns="urn:d"><b xmlns=""/><c/></a>'

    def test_default_declaration_on_no_namespace_element(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that a no-namespace element cannot carry a default namespace."""
        writer.set_prefix(None, "urn:d")
        writer.start_tag("", "a")
        writer.start_tag("urn:d", "b")
        writer.end_tag("urn:d", "b")
        writer.end_tag("", "a")

        assert output.getvalue() == '<a xmlns=""><n0:b xmlns:n0="urn:d"/></a>'

    def test_generated_element_prefix(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that an unbound namespace gets a generated prefix."""
        writer.start_tag("urn:x", "a")
        writer.start_tag("urn:x", "b")
        writer.end_tag("urn:x", "b")
        writer.end_tag("urn:x", "a")

        assert output.getvalue() == '<n0:a xmlns:n0="urn:x"><n0:b/></n0:a>'

    def test_generated_attribute_prefix(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test an attribute namespace declared inline."""
        writer.start_tag("", "a")
        writer.attribute("urn:y", "k", "v")
        writer.attribute("urn:y", "j", "w")
        writer.end_tag("", "a")

        assert output.getvalue() == '<a xmlns:n0="urn:y" n0:k="v" n0:j="w"/>'

    def test_attribute_never_uses_default_namespace(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that a namespaced attribute needs a real prefix."""
        writer.set_prefix(None, "urn:d")
        writer.start_tag("urn:d", "a")
        writer.attribute("urn:d", "k", "v")
        writer.end_tag("urn:d", "a")

        assert output.getvalue() == '<a xmlns="urn:d" xmlns:n0="urn:d" n0:k="v"/>'

    def test_custom_auto_prefix(self, output: io.StringIO) -> None:
        """Test the configurable generated prefix stem."""
        writer = XmlWriter(output, WriterConfig(auto_prefix="ns"))
        writer.start_tag("urn:x", "a")
        writer.end_tag("urn:x", "a")

        assert output.getvalue() == '<ns0:a xmlns:ns0="urn:x"/>'

    def test_generated_prefix_skips_bound_names(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that generation avoids prefixes already in scope."""
        writer.set_prefix("n0", "urn:taken")
        writer.start_tag("urn:taken", "a")
        writer.start_tag("urn:x", "b")
        writer.end_tag("urn:x", "b")
        writer.end_tag("urn:taken", "a")

        assert output.getvalue() == (
            '<n0:a xmlns:n0="urn:taken"><n1:b xmlns:n1="urn:x"/></n0:a>'
        )

    def test_redundant_prefix_not_redeclared(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that a binding already in scope is not declared again."""
        writer.set_prefix("p", "urn:p")
        writer.start_tag("urn:p", "a")
        writer.set_prefix("p", "urn:p")
        writer.start_tag("urn:p", "b")
        writer.end_tag("urn:p", "b")
        writer.end_tag("urn:p", "a")

        assert output.getvalue() == '<p:a xmlns:p="urn:p"><p:b/></p:a>'

    def test_prefix_scope_ends_with_element(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that a child's bindings do not leak to its siblings."""
        writer.start_tag("", "root")
        writer.set_prefix("p", "urn:p")
        writer.start_tag("urn:p", "a")
        writer.end_tag("urn:p", "a")
        writer.start_tag("urn:p", "b")
        writer.end_tag("urn:p", "b")
        writer.end_tag("", "root")

        assert output.getvalue() == (
            '<root><p:a xmlns:p="urn:p"/><n0:b xmlns:n0="urn:p"/></root>'
        )

    def test_xml_namespace_attribute(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that the xml prefix is predeclared."""
        writer.start_tag("", "a")
        writer.attribute(XML_NAMESPACE, "lang", "en")
        writer.end_tag("", "a")

        assert output.getvalue() == '<a xml:lang="en"/>'

    def test_collapse_disabled(self, output: io.StringIO) -> None:
        """Test explicit end tags for empty elements."""
        writer = XmlWriter(output, WriterConfig(collapse_empty_elements=False))
        writer.start_tag("", "a")
        writer.end_tag("", "a")

        assert output.getvalue() == "<a></a>"

    def test_empty_text_prevents_collapse(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that writing empty text closes the start tag."""
        writer.start_tag("", "a")
        writer.text("")
        writer.end_tag("", "a")

        assert output.getvalue() == "<a></a>"

    def test_single_quote_config(self, output: io.StringIO) -> None:
        """Test apostrophe-delimited attributes."""
        writer = XmlWriter(output, WriterConfig(quote_char="'"))
        writer.start_tag("", "a")
        writer.attribute("", "k", "it's")
        writer.end_tag("", "a")

        assert output.getvalue() == "<a k='it&apos;s'/>"

    def test_content_events(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test every kind of content event."""
        writer.start_tag("", "a")
        writer.text("1 < 2")
        writer.cdsect("a]]>b")
        writer.entity_ref("foo")
        writer.processing_instruction("pi data")
        writer.comment(" note ")
        writer.ignorable_whitespace("\n")
        writer.end_tag("", "a")

        assert output.getvalue() == (
            "<a>1 &lt; 2<![CDATA[a]]]]><![CDATA[>b]]>&foo;<?pi data?><!-- note -->\n</a>"
        )

    def test_get_prefix(self, writer: XmlWriter) -> None:
        """Test prefix lookup with and without creation."""
        writer.set_prefix(None, "urn:d")
        writer.start_tag("urn:d", "a")

        assert writer.get_prefix("urn:d", True, False) == ""
        assert writer.get_prefix("urn:d", False, False) is None
        assert writer.get_prefix(XML_NAMESPACE, False, False) == "xml"
        assert writer.get_prefix("urn:none", True, False) is None
        assert writer.get_prefix("urn:none", True, True) == "n0"


class TestDocument:
    """Test document level events."""

    def test_declaration(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test the XML declaration with encoding and standalone."""
        writer.start_document("UTF-8", True)
        writer.start_tag("", "a")
        writer.end_document()

        assert output.getvalue() == '<?xml version="1.0" encoding="UTF-8" standalone="yes"?><a/>'

    def test_declaration_disabled(self, output: io.StringIO) -> None:
        """Test that the declaration can be omitted."""
        writer = XmlWriter(output, WriterConfig(xml_declaration=False))
        writer.start_document("UTF-8", None)
        writer.start_tag("", "a")
        writer.end_document()

        assert output.getvalue() == "<a/>"

    def test_end_document_closes_open_elements(
        self, writer: XmlWriter, output: io.StringIO
    ) -> None:
        """Test that end_document closes everything still open."""
        writer.start_tag("", "a")
        writer.start_tag("", "b")
        writer.text("t")
        writer.end_document()

        assert output.getvalue() == "<a><b>t</b></a>"
        assert writer.get_depth() == 0

    def test_docdecl(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test doctype output."""
        writer.docdecl(" a")

        assert output.getvalue() == "<!DOCTYPE a>"


class TestWriterErrors:
    """Test events the writer cannot serialize."""

    def test_attribute_outside_start_tag(self, writer: XmlWriter) -> None:
        """Test an attribute after content."""
        writer.start_tag("", "a")
        writer.text("x")

        with pytest.raises(WriterStateError, match="attribute k written outside a start tag"):
            writer.attribute("", "k", "v")

    def test_end_tag_mismatch(self, writer: XmlWriter) -> None:
        """Test closing the wrong element."""
        writer.start_tag("", "a")

        with pytest.raises(WriterStateError, match="does not match open element <a>"):
            writer.end_tag("", "b")

    def test_end_tag_without_open_element(self, writer: XmlWriter) -> None:
        """Test closing with nothing open."""
        with pytest.raises(WriterStateError, match="no open element"):
            writer.end_tag("", "a")

    @pytest.mark.parametrize("prefix, namespace", [
        ("xml", "urn:x"),
        ("p", XML_NAMESPACE),
        ("xmlns", "urn:x"),
        ("p", ""),
    ])
    def test_illegal_bindings(self, writer: XmlWriter, prefix: str, namespace: str) -> None:
        """Test reserved and empty prefix bindings."""
        with pytest.raises(WriterStateError):
            writer.set_prefix(prefix, namespace)

    def test_xml_binding_is_noop(self, writer: XmlWriter, output: io.StringIO) -> None:
        """Test that binding xml to its own namespace is accepted silently."""
        writer.set_prefix("xml", XML_NAMESPACE)
        writer.start_tag("", "a")
        writer.end_tag("", "a")

        assert output.getvalue() == "<a/>"

    @pytest.mark.parametrize("text", ["a--b", "trailing-"])
    def test_illegal_comment(self, writer: XmlWriter, text: str) -> None:
        """Test comment text that cannot be serialized."""
        with pytest.raises(WriterStateError):
            writer.comment(text)

    def test_illegal_processing_instruction(self, writer: XmlWriter) -> None:
        """Test PI text containing its terminator."""
        with pytest.raises(WriterStateError):
            writer.processing_instruction("pi a?>b")
