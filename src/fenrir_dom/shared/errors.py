"""Exception types raised by the decoding and lexing stages.

Every error carries the byte (or character) offset at which the problem was
detected so callers can point at the offending input.
"""

from enum import Enum, auto
from typing import Optional


class DecodeErrorKind(Enum):
    """Distinct failure modes of chunked transfer decoding."""

    MALFORMED_SIZE = auto()      # Chunk-size field is empty or not hexadecimal
    TRUNCATED_CHUNK = auto()     # Declared size runs past the end of input
    MISSING_CRLF = auto()        # CRLF absent after size line or payload
    MISSING_TERMINATOR = auto()  # Input ended before the zero-length chunk


class FenrirError(Exception):
    """Base class for pipeline errors."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class DecodeError(FenrirError):
    """Chunked body framing is malformed."""

    def __init__(self, message: str, offset: int, kind: DecodeErrorKind) -> None:
        super().__init__(message, offset)
        self.kind = kind


class LexError(FenrirError):
    """The lexer could not continue, e.g. a scratch buffer could not grow."""
