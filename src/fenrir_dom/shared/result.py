"""Diagnostics and metrics collected while running the parsing pipeline."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()    # Tolerated irregularity, e.g. a stray end tag
    ERROR = auto()      # Stage aborted


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry describing something noteworthy in the input."""

    severity: DiagnosticSeverity
    message: str
    component: str
    offset: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "offset": self.offset,
            "details": self.details or {},
        }


@dataclass
class PerformanceMetrics:
    """Counters for one pass through the decode/lex/build pipeline."""

    processing_time_ms: float = 0.0
    bytes_decoded: int = 0
    chunks_decoded: int = 0
    characters_lexed: int = 0
    tokens_generated: int = 0
    nodes_created: int = 0
    end_tags_ignored: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters lexed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_lexed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms

    @property
    def nodes_per_token(self) -> float:
        if self.tokens_generated == 0:
            return 0.0
        return self.nodes_created / self.tokens_generated

    def merge(self, other: "PerformanceMetrics") -> None:
        """Accumulate another run's counters into this one."""
        self.processing_time_ms += other.processing_time_ms
        self.bytes_decoded += other.bytes_decoded
        self.chunks_decoded += other.chunks_decoded
        self.characters_lexed += other.characters_lexed
        self.tokens_generated += other.tokens_generated
        self.nodes_created += other.nodes_created
        self.end_tags_ignored += other.end_tags_ignored

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processing_time_ms": self.processing_time_ms,
            "bytes_decoded": self.bytes_decoded,
            "chunks_decoded": self.chunks_decoded,
            "characters_lexed": self.characters_lexed,
            "tokens_generated": self.tokens_generated,
            "nodes_created": self.nodes_created,
            "end_tags_ignored": self.end_tags_ignored,
        }
