"""Public API for fenrir_dom.

Provides pipeline functions, the reusable ``FenrirParser`` and adapters for
exporting documents to element-tree libraries.
"""

from .adapters import (
    ConversionResult,
    ElementTreeAdapter,
    IntegrationAdapter,
    LxmlAdapter,
    get_adapter,
)
from .parser import (
    FenrirParser,
    ParseResult,
    parse_body,
    parse_html,
    parse_response,
)

__all__ = [
    "ConversionResult",
    "ElementTreeAdapter",
    "IntegrationAdapter",
    "LxmlAdapter",
    "get_adapter",
    "FenrirParser",
    "ParseResult",
    "parse_body",
    "parse_html",
    "parse_response",
]
