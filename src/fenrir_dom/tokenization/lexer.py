"""Character-level HTML lexer.

Turns decoded document text into a flat sequence of start tag, end tag and
text tokens. There is no entity decoding and no raw-text handling for
script or style. Comments and declarations are lexed as ordinary tags.

Text is flushed when a ``<`` is seen. Text still pending when input ends is
dropped unless ``LexerConfig.emit_trailing_text`` is set, and a tag still
open when input ends produces no token.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Union

from fenrir_dom.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    LexError,
    LexerConfig,
    get_logger,
)

from .attributes import WHITESPACE, AttributeListParser, resolve_duplicates
from .tokens import Attribute, EndTag, StartTag, Text, Token

LexerInput = Union[str, bytes, bytearray, memoryview]


class LexerState(Enum):
    """Tag-level states of the lexer."""

    TEXT = auto()            # Between tags
    TAG_OPEN = auto()        # Just after '<'
    TAG_NAME = auto()        # Reading a start tag name
    END_TAG_NAME = auto()    # Reading an end tag name after '</'
    ATTRIBUTE_LIST = auto()  # Delegating to the attribute sub-parser


@dataclass
class LexResult:
    """Tokens from one lexer run with run statistics."""

    tokens: List[Token]
    character_count: int = 0
    processing_time_ms: float = 0.0
    unterminated_tag_offset: Optional[int] = None
    duplicates_dropped: int = 0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class HTMLLexer:
    """Converts document text into tokens.

    A lexer instance can be reused; every call to ``iter_tokens`` or
    ``tokenize`` starts from a clean state.
    """

    def __init__(
        self,
        config: Optional[LexerConfig] = None,
        correlation_id: Optional[str] = None,
        collect_diagnostics: bool = True
    ) -> None:
        self.config = config or LexerConfig()
        self.correlation_id = correlation_id
        self.collect_diagnostics = collect_diagnostics
        self._logger = get_logger(__name__, correlation_id, "html_lexer")
        self._reset_state()

    def _reset_state(self) -> None:
        self.state = LexerState.TEXT
        self.character_count = 0
        self.unterminated_tag_offset: Optional[int] = None
        self.duplicates_dropped = 0
        self.diagnostics: List[DiagnosticEntry] = []

    def decode_input(self, data: LexerInput) -> str:
        """Decode a byte buffer with the configured encoding.

        Raises:
            LexError: If ``encoding_errors`` is ``strict`` and the bytes are
                not valid in the configured encoding.
        """
        if isinstance(data, str):
            return data
        try:
            return bytes(data).decode(self.config.encoding, self.config.encoding_errors)
        except UnicodeDecodeError as e:
            raise LexError(
                f"Input is not valid {self.config.encoding}: {e.reason}", e.start
            ) from e

    def tokenize(self, data: LexerInput) -> LexResult:
        """Lex the whole input into a materialized token list."""
        start_time = time.time()
        tokens = list(self.iter_tokens(data))
        result = LexResult(
            tokens=tokens,
            character_count=self.character_count,
            processing_time_ms=(time.time() - start_time) * 1000,
            unterminated_tag_offset=self.unterminated_tag_offset,
            duplicates_dropped=self.duplicates_dropped,
            diagnostics=list(self.diagnostics),
        )
        self._logger.debug(
            "Tokenization complete",
            extra={
                "characters": result.character_count,
                "tokens": result.token_count,
                "unterminated_tag_offset": result.unterminated_tag_offset,
            },
        )
        return result

    def iter_tokens(self, data: LexerInput) -> Iterator[Token]:
        """Yield tokens one at a time as they are recognized."""
        self._reset_state()
        text = self.decode_input(data)
        self.character_count = len(text)

        pending: List[str] = []
        tag_name: List[str] = []
        attributes = AttributeListParser()
        text_start = 0
        tag_start = 0
        offset = 0

        try:
            for offset, char in enumerate(text):
                if self.state is LexerState.TEXT:
                    if char == "<":
                        if pending:
                            yield Text("".join(pending), text_start)
                            pending = []
                        tag_start = offset
                        self.state = LexerState.TAG_OPEN
                    else:
                        if not pending:
                            text_start = offset
                        pending.append(char)
                    continue

                if self.state is LexerState.TAG_OPEN:
                    if char == "/":
                        self.state = LexerState.END_TAG_NAME
                    else:
                        # Whatever follows '<' starts the name, even '>' or whitespace
                        tag_name.append(char)
                        self.state = LexerState.TAG_NAME
                    continue

                if self.state is LexerState.TAG_NAME:
                    if char in WHITESPACE:
                        attributes.reset()
                        self.state = LexerState.ATTRIBUTE_LIST
                    elif char == ">":
                        yield self._start_tag(tag_name, [], tag_start)
                        tag_name = []
                        self.state = LexerState.TEXT
                    else:
                        tag_name.append(char)

                elif self.state is LexerState.END_TAG_NAME:
                    if char == ">":
                        name = "".join(tag_name)
                        if name:
                            yield EndTag(name, tag_start)
                        else:
                            self._diagnose(
                                DiagnosticSeverity.WARNING,
                                "End tag without a name ignored",
                                tag_start,
                            )
                        tag_name = []
                        self.state = LexerState.TEXT
                    else:
                        tag_name.append(char)

                elif self.state is LexerState.ATTRIBUTE_LIST:
                    if attributes.feed(char):
                        yield self._start_tag(tag_name, attributes.attributes, tag_start)
                        tag_name = []
                        self.state = LexerState.TEXT
        except MemoryError as e:
            raise LexError(
                "Scratch buffer could not grow",
                self._byte_offset(data, text, offset),
            ) from e

        if self.state is LexerState.TEXT:
            if pending and self.config.emit_trailing_text:
                yield Text("".join(pending), text_start)
        else:
            # Minimal recovery: the partial tag is discarded, nothing synthesized
            self.unterminated_tag_offset = tag_start
            self._diagnose(
                DiagnosticSeverity.WARNING,
                "Input ended inside a tag; partial tag discarded",
                tag_start,
                {"state": self.state.name},
            )

    def _start_tag(
        self,
        name_chars: List[str],
        attributes: List[Attribute],
        offset: int
    ) -> StartTag:
        name = "".join(name_chars)
        resolved, dropped = resolve_duplicates(
            attributes, self.config.duplicate_attributes
        )
        if dropped:
            self.duplicates_dropped += dropped
            self._diagnose(
                DiagnosticSeverity.INFO,
                f"Dropped {dropped} duplicate attribute(s) on <{name}>",
                offset,
                {"policy": self.config.duplicate_attributes.name},
            )
        return StartTag(name, list(resolved), offset)

    def _byte_offset(self, data: LexerInput, text: str, offset: int) -> int:
        """Map a character offset back to the input's byte position.

        Exact whenever the input decoded without substitutions; text input
        has no byte form and keeps the character offset.
        """
        if isinstance(data, str):
            return offset
        return len(text[:offset].encode(self.config.encoding, "replace"))

    def _diagnose(
        self,
        severity: DiagnosticSeverity,
        message: str,
        offset: int,
        details: Optional[dict] = None
    ) -> None:
        if not self.collect_diagnostics:
            return
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component="html_lexer",
            offset=offset,
            details=details,
            correlation_id=self.correlation_id,
        ))
        self._logger.debug(message, extra={"offset": offset})


def tokenize(data: LexerInput, config: Optional[LexerConfig] = None) -> List[Token]:
    """Lex ``data`` and return the token list."""
    return HTMLLexer(config).tokenize(data).tokens
