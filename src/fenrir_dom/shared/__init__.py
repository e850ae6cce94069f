"""Shared utilities for the fenrir_dom pipeline.

Configuration objects, error types, diagnostics and logging helpers used by
every stage.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DecoderConfig,
    DuplicateAttributePolicy,
    EndTagPolicy,
    GlobalConfig,
    LexerConfig,
    ParserConfig,
    TreeConfig,
)
from .errors import (
    DecodeError,
    DecodeErrorKind,
    FenrirError,
    LexError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DecoderConfig",
    "DuplicateAttributePolicy",
    "EndTagPolicy",
    "GlobalConfig",
    "LexerConfig",
    "ParserConfig",
    "TreeConfig",
    "DecodeError",
    "DecodeErrorKind",
    "FenrirError",
    "LexError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
