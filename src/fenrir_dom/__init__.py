"""fenrir_dom.

Turns a raw HTTP response body into a simplified DOM tree: chunked transfer
decoding, a character-level HTML lexer and a cursor-based tree builder.

Entry points by input level:
- parse_html(): already-decoded HTML bytes or text
- parse_body(): a response body, optionally chunked
- parse_response(): a complete raw HTTP response
- FenrirParser: reusable parser bound to a ParserConfig
"""

__version__ = "0.1.0"
__author__ = "Fenrir DOM Team"

from .api import FenrirParser, ParseResult, parse_body, parse_html, parse_response
from .shared import (
    DecodeError,
    DuplicateAttributePolicy,
    EndTagPolicy,
    FenrirError,
    LexError,
    ParserConfig,
)
from .tree import Document, Node, NodeKind

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Pipeline functions
    "parse_html",
    "parse_body",
    "parse_response",
    "FenrirParser",

    # Results and tree
    "ParseResult",
    "Document",
    "Node",
    "NodeKind",

    # Configuration
    "ParserConfig",
    "DuplicateAttributePolicy",
    "EndTagPolicy",

    # Errors
    "FenrirError",
    "DecodeError",
    "LexError",
]
