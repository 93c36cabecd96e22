"""Configuration classes for nsdom.

This module provides configuration objects for the pull reader and the event
writer, and a combined immutable ``DomConfig`` used by the convenience API.
"""

import difflib
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .errors import ConfigValidationError

_QUOTE_CHARS = ('"', "'")
_COMPONENTS = ("reader", "writer")


@dataclass
class ReaderConfig:
    """Configuration for the namespace-aware pull reader."""

    expand_entities: bool = True            # Fold predefined/char refs into TEXT
    strict_entities: bool = False           # Unknown entity refs are errors
    max_depth: int = 1024
    report_ignorable_whitespace: bool = True  # Whitespace outside the root element

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")


@dataclass
class WriterConfig:
    """Configuration for the event writer."""

    xml_declaration: bool = True
    quote_char: str = '"'
    collapse_empty_elements: bool = True
    auto_prefix: str = "n"

    def __post_init__(self) -> None:
        """Validate writer configuration."""
        if self.quote_char not in _QUOTE_CHARS:
            raise ValueError("quote_char must be one of '\"' or \"'\"")
        if not self.auto_prefix or ":" in self.auto_prefix:
            raise ValueError("auto_prefix must be a non-empty name without ':'")
        if self.auto_prefix.lower().startswith("xml"):
            raise ValueError("auto_prefix must not start with 'xml'")


@dataclass(frozen=True)
class DomConfig:
    """Combined configuration for parsing and serializing documents.

    Immutable; use ``override`` to derive a modified copy.
    """

    reader: ReaderConfig = field(default_factory=ReaderConfig)
    writer: WriterConfig = field(default_factory=WriterConfig)
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the combined configuration."""
        try:
            self.reader.__post_init__()
            self.writer.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "DomConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; nested fields use ``component__field``

        Returns:
            New DomConfig instance with overrides applied

        Example:
            >>> config = DomConfig().override(writer__quote_char="'")
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                _check_key(component, _COMPONENTS)
                _check_key(field_name, getattr(self, component).__dataclass_fields__)
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                _check_key(key, self.__dataclass_fields__)
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            if component in nested_overrides:
                try:
                    new_fields[component] = replace(
                        getattr(self, component), **nested_overrides[component]
                    )
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=component) from e
        new_fields.update(top_level)

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "reader": dict(vars(self.reader)),
            "writer": dict(vars(self.writer)),
            "name": self.name,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        for key in data:
            _check_key(key, cls.__dataclass_fields__)

        components: Dict[str, Any] = {}
        for component, config_class in (("reader", ReaderConfig), ("writer", WriterConfig)):
            values = data.get(component) or {}
            for key in values:
                _check_key(key, config_class.__dataclass_fields__)
            try:
                components[component] = config_class(**values)
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return cls(name=data.get("name"), **components)

    @classmethod
    def from_json(cls, json_str: str) -> "DomConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)


def _check_key(key: str, known: Any) -> None:
    if key in known:
        return
    suggestions: List[str] = difflib.get_close_matches(key, list(known), n=3)
    raise ConfigValidationError(
        f"Unknown configuration field: {key}",
        field_name=key,
        suggestions=suggestions,
    )
