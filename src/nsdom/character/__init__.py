"""Character layer for nsdom: byte input encoding detection and decoding."""

from .encoding import (
    BOMDetector,
    BytePatternDetector,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    XMLDeclarationParser,
    codec_name,
)

__all__ = [
    "BOMDetector",
    "BytePatternDetector",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "XMLDeclarationParser",
    "codec_name",
]
