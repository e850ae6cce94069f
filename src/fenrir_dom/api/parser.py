"""Pipeline entry points.

Three levels of input are accepted, matching what the HTTP layer has at hand:

- ``parse_html``: an already-decoded HTML buffer
- ``parse_body``: a response body, chunked or not
- ``parse_response``: a complete raw response including headers

Each call runs decode, lex and build synchronously and returns a fresh
``ParseResult``. ``DecodeError`` and ``LexError`` propagate to the caller and
no partial tree is returned.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fenrir_dom.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FenrirError,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from fenrir_dom.tokenization import HTMLLexer
from fenrir_dom.tokenization.lexer import LexerInput
from fenrir_dom.transfer import ChunkedDecoder, DecodeResult, split_response
from fenrir_dom.tree import Document, Node, TreeBuilder

PREVIEW_LENGTH = 100  # Max length for content preview in logs


@dataclass
class ParseResult:
    """Outcome of a successful pipeline run; the caller owns the document."""

    document: Document
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None
    chunked: bool = False
    decoded_length: Optional[int] = None

    @property
    def root(self) -> Node:
        return self.document.root

    @property
    def node_count(self) -> int:
        """Number of element nodes, excluding the root."""
        return len(self.document) - 1

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return [
            entry for entry in self.diagnostics
            if entry.severity is DiagnosticSeverity.WARNING
        ]

    def summary(self) -> Dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "chunked": self.chunked,
            "decoded_length": self.decoded_length,
            "node_count": self.node_count,
            "max_depth": self.document.max_depth,
            "warnings": len(self.warnings),
            "metrics": self.metrics.to_dict(),
        }


class FenrirParser:
    """Reusable parser bound to one configuration.

    Holds no per-document state between calls; only cumulative statistics
    are kept.

    Example:
        >>> parser = FenrirParser(ParserConfig.strict())
        >>> result = parser.parse_html(b"<div><p>hi</p></div>")
        >>> result.root.children[0].tag_name
        'div'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, "fenrir_parser")
        self.reset_statistics()

    def parse_html(
        self,
        data: LexerInput,
        correlation_id: Optional[str] = None
    ) -> ParseResult:
        """Lex and build a tree from decoded HTML."""
        return self._run(data, None, self._correlation_id(correlation_id))

    def parse_body(
        self,
        body: bytes,
        chunked: bool = False,
        correlation_id: Optional[str] = None
    ) -> ParseResult:
        """Parse a response body, decoding chunked framing first if needed."""
        cid = self._correlation_id(correlation_id)
        decoded: Optional[DecodeResult] = None
        try:
            if chunked:
                decoded = ChunkedDecoder(self.config.decoder, cid).decode(body)
        except FenrirError as e:
            self._record_failure(e, cid)
            raise
        return self._run(decoded.data if decoded is not None else body, decoded, cid)

    def parse_response(
        self,
        raw: bytes,
        correlation_id: Optional[str] = None
    ) -> ParseResult:
        """Parse a complete HTTP response, honoring ``Transfer-Encoding``."""
        parts = split_response(raw)
        self._logger.debug(
            "Split HTTP response",
            extra={
                "status_line": parts.status_line,
                "header_count": len(parts.headers),
                "chunked": parts.is_chunked,
            },
        )
        return self.parse_body(parts.body, parts.is_chunked, correlation_id)

    def reconfigure(self, **overrides: Any) -> None:
        """Replace the configuration with an overridden copy.

        Accepts the same keyword syntax as ``ParserConfig.override``.
        """
        self.config = self.config.override(**overrides)

    @property
    def statistics(self) -> Dict[str, Any]:
        return {
            "parses": self._parses,
            "failures": self._failures,
            "totals": self._totals.to_dict(),
        }

    def reset_statistics(self) -> None:
        self._parses = 0
        self._failures = 0
        self._totals = PerformanceMetrics()

    def _correlation_id(self, override: Optional[str]) -> Optional[str]:
        if override is not None:
            return override
        if self.correlation_id is not None:
            return self.correlation_id
        if self.config.global_.enable_correlation_tracking:
            return uuid.uuid4().hex
        return None

    def _run(
        self,
        data: LexerInput,
        decoded: Optional[DecodeResult],
        cid: Optional[str]
    ) -> ParseResult:
        start_time = time.time()
        logger = get_logger(__name__, cid, "pipeline")
        collect = self.config.global_.enable_diagnostics

        if logger.is_enabled_for(logging.DEBUG):
            logger.debug(
                "Starting parse",
                extra={"input_length": len(data), "preview": data[:PREVIEW_LENGTH]},
            )

        lexer = HTMLLexer(self.config.lexer, cid, collect_diagnostics=collect)
        builder = TreeBuilder(self.config.tree, cid, collect_diagnostics=collect)
        try:
            built = builder.build(lexer.iter_tokens(data))
        except FenrirError as e:
            self._record_failure(e, cid)
            raise

        metrics = PerformanceMetrics()
        if self.config.global_.enable_metrics:
            metrics.processing_time_ms = (time.time() - start_time) * 1000
            metrics.characters_lexed = lexer.character_count
            metrics.tokens_generated = built.tokens_consumed
            metrics.nodes_created = built.nodes_created
            metrics.end_tags_ignored = built.end_tags_ignored
            if decoded is not None:
                metrics.processing_time_ms += decoded.processing_time_ms
                metrics.bytes_decoded = decoded.length
                metrics.chunks_decoded = decoded.chunk_count

        result = ParseResult(
            document=built.document,
            metrics=metrics,
            diagnostics=lexer.diagnostics + built.diagnostics,
            correlation_id=cid,
            chunked=decoded is not None,
            decoded_length=decoded.length if decoded is not None else None,
        )

        self._parses += 1
        self._totals.merge(metrics)
        logger.info(
            "Parse complete",
            extra={
                "nodes": result.node_count,
                "warnings": len(result.warnings),
                "processing_time_ms": metrics.processing_time_ms,
            },
        )
        return result

    def _record_failure(self, error: FenrirError, cid: Optional[str]) -> None:
        self._failures += 1
        get_logger(__name__, cid, "pipeline").error(
            f"Parse aborted: {error}",
            extra={
                "error_type": type(error).__name__,
                "offset": error.offset,
            },
        )


def parse_html(
    data: LexerInput,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse decoded HTML into a document tree.

    Examples:
        >>> result = parse_html(b"<div>a<p>b</p>c</div>")
        >>> div = result.root.children[0]
        >>> div.text, div.children[0].text
        ('ac', 'b')
    """
    return FenrirParser(config).parse_html(data, correlation_id)


def parse_body(
    body: bytes,
    chunked: bool = False,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse a response body, chunk-decoding it first when ``chunked`` is set.

    Raises:
        DecodeError: If ``chunked`` is set and the framing is malformed.
        LexError: If the lexer cannot continue.
    """
    return FenrirParser(config).parse_body(body, chunked, correlation_id)


def parse_response(
    raw: bytes,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse a complete raw HTTP response."""
    return FenrirParser(config).parse_response(raw, correlation_id)
