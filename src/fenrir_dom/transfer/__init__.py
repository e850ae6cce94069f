"""Transfer-layer decoding for raw HTTP response bodies.

Key Components:
    ChunkedDecoder: Decodes ``Transfer-Encoding: chunked`` bodies
    split_response: Separates the header block from the body
    is_chunked: Detects chunked transfer coding from header pairs
"""

from .chunked import (
    ChunkedDecoder,
    DecodeResult,
    decode_chunked,
)
from .http import (
    ResponseParts,
    is_chunked,
    split_response,
)

__all__ = [
    "ChunkedDecoder",
    "DecodeResult",
    "decode_chunked",
    "ResponseParts",
    "is_chunked",
    "split_response",
]
