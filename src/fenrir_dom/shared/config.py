"""Configuration classes for the decode/lex/build pipeline.

Each pipeline stage has its own dataclass validated on construction, and
``ParserConfig`` bundles them into one immutable object that can be
overridden, serialized and restored.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional

_COMPONENTS = ("decoder", "lexer", "tree", "global_")


class DuplicateAttributePolicy(Enum):
    """How repeated attribute names inside one start tag are resolved."""

    KEEP_ALL = auto()    # Every occurrence kept in source order
    FIRST_WINS = auto()  # Later occurrences dropped
    LAST_WINS = auto()   # Position of the first occurrence, value of the last


class EndTagPolicy(Enum):
    """How the tree builder treats end tags."""

    LENIENT = auto()  # Pop the cursor regardless of the end tag's name
    STRICT = auto()   # Pop to the nearest open element with a matching name


@dataclass
class DecoderConfig:
    """Configuration for chunked transfer decoding."""

    require_terminator: bool = True
    allow_chunk_extensions: bool = True


@dataclass
class LexerConfig:
    """Configuration for HTML tokenization."""

    encoding: str = "utf-8"
    encoding_errors: str = "replace"
    duplicate_attributes: DuplicateAttributePolicy = DuplicateAttributePolicy.KEEP_ALL
    emit_trailing_text: bool = False

    def __post_init__(self) -> None:
        """Validate lexer configuration."""
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding!r}") from None
        if self.encoding_errors not in ("strict", "replace", "ignore"):
            raise ValueError(
                "encoding_errors must be 'strict', 'replace', or 'ignore'"
            )
        if not isinstance(self.duplicate_attributes, DuplicateAttributePolicy):
            raise ValueError("duplicate_attributes must be a DuplicateAttributePolicy")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    end_tag_policy: EndTagPolicy = EndTagPolicy.LENIENT

    def __post_init__(self) -> None:
        if not isinstance(self.end_tag_policy, EndTagPolicy):
            raise ValueError("end_tag_policy must be an EndTagPolicy")


@dataclass
class GlobalConfig:
    """Settings that apply across all pipeline stages."""

    logging_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True
    enable_diagnostics: bool = True
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for a parse call.

    Frozen so one instance can be shared between parser objects; use
    ``override`` to derive a modified copy.
    """

    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    lexer: LexerConfig = field(default_factory=LexerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-validate components, which may have been mutated after creation."""
        try:
            self.lexer.__post_init__()
            self.tree.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use a double underscore between component and field.

        Example:
            >>> config = ParserConfig()
            >>> strict = config.override(tree__end_tag_policy=EndTagPolicy.STRICT)
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component == "global":
                    component = "global_"
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format, enums by name."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary produced by ``to_dict``.

        Unknown keys are ignored; enum fields accept member names.
        """
        component_types = {
            "decoder": DecoderConfig,
            "lexer": LexerConfig,
            "tree": TreeConfig,
            "global_": GlobalConfig,
        }
        enum_fields = {
            "duplicate_attributes": DuplicateAttributePolicy,
            "end_tag_policy": EndTagPolicy,
        }

        kwargs: Dict[str, Any] = {}
        try:
            for component, component_type in component_types.items():
                values = data.get(component)
                if values is None:
                    continue
                field_values: Dict[str, Any] = {}
                for field_name in component_type.__dataclass_fields__:
                    if field_name not in values:
                        continue
                    value = values[field_name]
                    if field_name in enum_fields and isinstance(value, str):
                        value = enum_fields[field_name][value]
                    field_values[field_name] = value
                kwargs[component] = component_type(**field_values)
        except KeyError as e:
            raise ConfigValidationError(f"Unknown enum value: {e}") from e
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        for meta in ("name", "description"):
            if meta in data:
                kwargs[meta] = data[meta]
        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Lenient end tags, all duplicate attributes kept."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Name-verified end tags and strict UTF-8 decoding."""
        return cls(
            lexer=LexerConfig(encoding_errors="strict"),
            tree=TreeConfig(end_tag_policy=EndTagPolicy.STRICT),
            name="strict",
            description="Verify end tag names and reject undecodable bytes",
        )

    @classmethod
    def browser_like(cls) -> "ParserConfig":
        """Approximate the attribute and end tag handling of browser engines."""
        return cls(
            lexer=LexerConfig(duplicate_attributes=DuplicateAttributePolicy.FIRST_WINS),
            tree=TreeConfig(end_tag_policy=EndTagPolicy.STRICT),
            name="browser_like",
            description="First duplicate attribute wins, end tags matched by name",
        )
