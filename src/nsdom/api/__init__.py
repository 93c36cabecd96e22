"""Convenience API: parse documents and serialize trees in one call."""

from .parser import (
    parse,
    parse_bytes,
    parse_element,
    parse_file,
    parse_string,
    to_string,
    write,
    write_file,
)

__all__ = [
    "parse",
    "parse_bytes",
    "parse_element",
    "parse_file",
    "parse_string",
    "to_string",
    "write",
    "write_file",
]
