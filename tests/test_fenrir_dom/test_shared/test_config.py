"""Tests for pipeline configuration."""

import dataclasses
import json

import pytest

from fenrir_dom.shared import (
    ConfigValidationError,
    DecoderConfig,
    DuplicateAttributePolicy,
    EndTagPolicy,
    GlobalConfig,
    LexerConfig,
    ParserConfig,
    TreeConfig,
)


class TestComponentConfigs:
    """Tests for per-stage configuration validation."""

    def test_defaults(self):
        """Test the default settings of every stage."""
        config = ParserConfig()

        assert config.decoder == DecoderConfig(True, True)
        assert config.lexer.encoding == "utf-8"
        assert config.lexer.encoding_errors == "replace"
        assert config.lexer.duplicate_attributes is DuplicateAttributePolicy.KEEP_ALL
        assert config.lexer.emit_trailing_text is False
        assert config.tree.end_tag_policy is EndTagPolicy.LENIENT
        assert config.global_.logging_level == "WARNING"

    def test_unknown_encoding(self):
        """Test that encodings are checked against the codec registry."""
        with pytest.raises(ValueError, match="Unknown encoding"):
            LexerConfig(encoding="not-a-codec")

    def test_invalid_error_handler(self):
        """Test that only the supported error handlers are accepted."""
        with pytest.raises(ValueError, match="encoding_errors"):
            LexerConfig(encoding_errors="backslashreplace")

    def test_policy_type_checked(self):
        """Test that policy fields must be enum members."""
        with pytest.raises(ValueError):
            LexerConfig(duplicate_attributes="first_wins")
        with pytest.raises(ValueError):
            TreeConfig(end_tag_policy="strict")

    def test_invalid_logging_level(self):
        """Test logging level validation."""
        with pytest.raises(ValueError, match="logging_level"):
            GlobalConfig(logging_level="LOUD")


class TestParserConfig:
    """Tests for the bundled configuration."""

    def test_frozen(self):
        """Test that the bundle cannot be reassigned."""
        config = ParserConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.name = "changed"

    def test_override_nested_field(self):
        """Test overriding a component field with double-underscore syntax."""
        config = ParserConfig()

        strict = config.override(tree__end_tag_policy=EndTagPolicy.STRICT)

        assert strict.tree.end_tag_policy is EndTagPolicy.STRICT
        assert config.tree.end_tag_policy is EndTagPolicy.LENIENT

    def test_override_global_alias(self):
        """Test that 'global' addresses the global_ component."""
        config = ParserConfig().override(global__logging_level="DEBUG")

        assert config.global_.logging_level == "DEBUG"

    def test_override_top_level(self):
        """Test overriding metadata fields."""
        config = ParserConfig().override(name="custom", description="d")

        assert config.name == "custom"
        assert config.description == "d"

    def test_override_unknown_component(self):
        """Test that unknown components are rejected."""
        with pytest.raises(ConfigValidationError) as excinfo:
            ParserConfig().override(renderer__width=80)

        assert excinfo.value.field_name == "renderer__width"

    def test_override_unknown_field(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(lexer__colour="red")

    def test_override_invalid_value(self):
        """Test that overridden values are validated."""
        with pytest.raises(ConfigValidationError, match="Unknown encoding"):
            ParserConfig().override(lexer__encoding="nope")

    def test_mutated_component_revalidated(self):
        """Test that an invalid component is caught when bundled."""
        lexer = LexerConfig()
        lexer.encoding_errors = "bogus"

        with pytest.raises(ConfigValidationError):
            ParserConfig(lexer=lexer)


class TestSerialization:
    """Tests for dictionary and JSON conversion."""

    def test_to_dict_uses_enum_names(self):
        """Test that enums are serialized by name."""
        data = ParserConfig.browser_like().to_dict()

        assert data["lexer"]["duplicate_attributes"] == "FIRST_WINS"
        assert data["tree"]["end_tag_policy"] == "STRICT"
        assert data["name"] == "browser_like"

    def test_json_round_trip(self):
        """Test that a preset survives JSON serialization."""
        original = ParserConfig.strict()

        restored = ParserConfig.from_json(original.to_json())

        assert restored == original

    def test_from_dict_partial(self):
        """Test that missing sections fall back to defaults."""
        config = ParserConfig.from_dict({"tree": {"end_tag_policy": "STRICT"}})

        assert config.tree.end_tag_policy is EndTagPolicy.STRICT
        assert config.lexer == LexerConfig()

    def test_from_dict_ignores_unknown_keys(self):
        """Test that unrecognized keys are skipped."""
        config = ParserConfig.from_dict({"lexer": {"colour": "red"}, "extra": 1})

        assert config.lexer == LexerConfig()

    def test_from_dict_unknown_enum(self):
        """Test that an unknown enum member name is a validation error."""
        with pytest.raises(ConfigValidationError, match="Unknown enum value"):
            ParserConfig.from_dict({"lexer": {"duplicate_attributes": "MIDDLE_WINS"}})

    def test_from_dict_invalid_value(self):
        """Test that component validation errors are wrapped."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"global_": {"logging_level": "LOUD"}})

    def test_from_json_invalid(self):
        """Test malformed and non-object JSON."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration JSON"):
            ParserConfig.from_json("{not json")
        with pytest.raises(ConfigValidationError, match="must be an object"):
            ParserConfig.from_json(json.dumps([1, 2]))


class TestPresets:
    """Tests for preset configurations."""

    def test_default(self):
        """Test the default preset."""
        config = ParserConfig.default()

        assert config.name == "default"
        assert config.tree.end_tag_policy is EndTagPolicy.LENIENT

    def test_strict(self):
        """Test the strict preset."""
        config = ParserConfig.strict()

        assert config.lexer.encoding_errors == "strict"
        assert config.tree.end_tag_policy is EndTagPolicy.STRICT

    def test_browser_like(self):
        """Test the browser-like preset."""
        config = ParserConfig.browser_like()

        assert config.lexer.duplicate_attributes is DuplicateAttributePolicy.FIRST_WINS
        assert config.tree.end_tag_policy is EndTagPolicy.STRICT
