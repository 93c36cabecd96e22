"""Encoding detection for XML byte input.

This module implements the detection cascade the pull reader runs before
tokenizing bytes: BOM detection, the byte patterns of a leading ``<?xml``
in wider encodings, the XML declaration's ``encoding`` pseudo-attribute,
and a UTF-8 fallback. Decoding errors are reported as ``XmlSyntaxError``.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

from ..shared.errors import XmlSyntaxError

# Only the first bytes of a document may hold the XML declaration
DECLARATION_SCAN_LIMIT = 1024

# Declared encoding names mapped to the Python codec used to decode them
ENCODING_ALIASES = {
    "utf8": "utf-8",
    "utf16": "utf-16",
    "utf32": "utf-32",
    "iso-8859-1": "latin-1",
    "windows-1252": "cp1252",
}


def codec_name(encoding: str) -> str:
    """Python codec name for an encoding name as declared in a document."""
    return ENCODING_ALIASES.get(encoding.lower(), encoding.lower())


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    BYTE_PATTERN = "byte_pattern"
    XML_DECLARATION = "xml_declaration"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Detected encoding name (canonical form)
        confidence: Confidence score from 0.0 to 1.0
        method: Detection method used
        bom_length: Number of leading bytes taken up by a byte order mark
        issues: List of issues found during detection
        declared_encoding: Encoding name exactly as written in the XML declaration
    """
    encoding: str
    confidence: float
    method: DetectionMethod
    bom_length: int = 0
    issues: List[str] = field(default_factory=list)
    declared_encoding: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate confidence score range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}"
            )


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        if not data:
            return None

        # Check for UTF-32 BOMs first (longer patterns)
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    confidence=1.0,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )

        return None


class BytePatternDetector:
    """Detects BOM-less UTF-16/UTF-32 from the bytes of a leading ``<?``."""

    PATTERNS: ClassVar[Tuple[Tuple[bytes, str], ...]] = (
        (b"\x00\x00\x00\x3c", "utf-32-be"),
        (b"\x3c\x00\x00\x00", "utf-32-le"),
        (b"\x00\x3c\x00\x3f", "utf-16-be"),
        (b"\x3c\x00\x3f\x00", "utf-16-le"),
    )

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        for pattern, encoding in self.PATTERNS:
            if data.startswith(pattern):
                return EncodingResult(
                    encoding=encoding,
                    confidence=0.9,
                    method=DetectionMethod.BYTE_PATTERN,
                )
        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^<\?xml\s[^>]*?encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\'][^>]*?\?>'
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if declaration found, None otherwise

        Raises:
            XmlSyntaxError: If the declared encoding is unknown
        """
        if not data:
            return None

        match = self.XML_DECLARATION_PATTERN.search(data[:DECLARATION_SCAN_LIMIT])
        if not match:
            return None

        declared_encoding = match.group(1).decode("ascii")
        normalized_encoding = codec_name(declared_encoding)
        if not self._is_valid_encoding(normalized_encoding):
            raise XmlSyntaxError(f"Unsupported declared encoding: {declared_encoding}", 1, 1)

        return EncodingResult(
            encoding=normalized_encoding,
            confidence=0.9,
            method=DetectionMethod.XML_DECLARATION,
            declared_encoding=declared_encoding,
        )

    def _is_valid_encoding(self, encoding: str) -> bool:
        """Check if encoding is supported by Python codecs."""
        try:
            codecs.lookup(encoding)
        except LookupError:
            return False
        else:
            return True


class EncodingDetector:
    """Main encoding detection class.

    Implements a cascading detection strategy:
    1. BOM detection
    2. Byte pattern detection for BOM-less UTF-16/UTF-32
    3. XML declaration parsing
    4. Fallback to UTF-8
    """

    def __init__(self) -> None:
        """Initialize detection components."""
        self.bom_detector = BOMDetector()
        self.pattern_detector = BytePatternDetector()
        self.xml_parser = XMLDeclarationParser()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect encoding using multi-stage detection system.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult with detected encoding and metadata
        """
        bom_result = self.bom_detector.detect(data)
        if bom_result:
            return bom_result

        pattern_result = self.pattern_detector.detect(data)
        if pattern_result:
            return pattern_result

        xml_result = self.xml_parser.parse_declaration(data)
        if xml_result:
            return xml_result

        return EncodingResult(
            encoding="utf-8",
            confidence=0.8 if data else 1.0,
            method=DetectionMethod.FALLBACK,
        )

    def decode(self, data: bytes) -> Tuple[str, EncodingResult]:
        """Detect the encoding of ``data`` and decode it.

        Returns:
            Tuple of decoded text (BOM removed) and the detection result

        Raises:
            XmlSyntaxError: If the bytes are not valid in the detected encoding
        """
        result = self.detect(data)
        try:
            text = data[result.bom_length:].decode(result.encoding)
        except UnicodeDecodeError as e:
            raise XmlSyntaxError(
                f"Invalid {result.encoding} byte sequence at offset {e.start}"
            ) from e
        return text, result
