"""HTML tokenization.

Key Components:
    HTMLLexer: Tag-level state machine producing tokens from document text
    AttributeListParser: Character-driven attribute-list sub-parser
    StartTag, EndTag, Text: Token variants
"""

from .attributes import (
    AttributeAction,
    AttributeListParser,
    AttributeState,
    parse_attribute_list,
    resolve_duplicates,
    transition,
)
from .lexer import (
    HTMLLexer,
    LexerState,
    LexResult,
    tokenize,
)
from .tokens import (
    Attribute,
    EndTag,
    StartTag,
    Text,
    Token,
    TokenType,
)

__all__ = [
    "AttributeAction",
    "AttributeListParser",
    "AttributeState",
    "parse_attribute_list",
    "resolve_duplicates",
    "transition",
    "HTMLLexer",
    "LexerState",
    "LexResult",
    "tokenize",
    "Attribute",
    "EndTag",
    "StartTag",
    "Text",
    "Token",
    "TokenType",
]
