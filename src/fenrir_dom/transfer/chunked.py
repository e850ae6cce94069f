"""Chunked transfer-encoding decoder.

Decodes an HTTP/1.1 ``Transfer-Encoding: chunked`` body into one contiguous
byte string. The decoder checks every length against the input size before
slicing, so malformed framing is reported as a ``DecodeError`` and never leads
to reading beyond the buffer.
"""

import time
from dataclasses import dataclass
from typing import Optional

from fenrir_dom.shared import (
    DecodeError,
    DecodeErrorKind,
    DecoderConfig,
    get_logger,
)

CRLF = b"\r\n"
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_SIZE_PADDING = b" \t"


@dataclass
class DecodeResult:
    """Concatenated payload of all chunks."""

    data: bytes
    chunk_count: int = 0
    consumed: int = 0  # Bytes of input up to and including the zero-size line
    processing_time_ms: float = 0.0

    @property
    def length(self) -> int:
        return len(self.data)


class ChunkedDecoder:
    """Stateless decoder for chunked HTTP bodies.

    The input may be any object supporting ``len()``, ``find()`` and slicing
    with the semantics of ``bytes``.
    """

    def __init__(
        self,
        config: Optional[DecoderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or DecoderConfig()
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, "chunked_decoder")

    def decode(self, body: bytes) -> DecodeResult:
        """Decode a chunked body starting at its first chunk-size line.

        Raises:
            DecodeError: On a malformed size line, a chunk running past the
                end of input, a missing CRLF, or (when the terminator is
                required) input ending before the zero-size chunk.
        """
        start_time = time.time()
        end = len(body)
        output = bytearray()
        position = 0
        chunk_count = 0

        while True:
            if position >= end:
                if self.config.require_terminator:
                    raise DecodeError(
                        "Input ended before the terminating zero-size chunk",
                        position,
                        DecodeErrorKind.MISSING_TERMINATOR,
                    )
                self._logger.warning(
                    "Chunked body ended without a terminating chunk",
                    extra={"offset": position, "chunks": chunk_count},
                )
                break

            line_end = body.find(CRLF, position)
            if line_end == -1:
                raise DecodeError(
                    "Chunk-size line is not terminated by CRLF",
                    position,
                    DecodeErrorKind.MISSING_CRLF,
                )

            size = self._parse_size(body[position:line_end], position)
            data_start = line_end + len(CRLF)

            if size == 0:
                position = data_start
                break

            data_end = data_start + size
            if data_end > end:
                raise DecodeError(
                    f"Chunk declares {size} bytes but only "
                    f"{end - data_start} remain",
                    data_start,
                    DecodeErrorKind.TRUNCATED_CHUNK,
                )
            output += body[data_start:data_end]
            chunk_count += 1

            if data_end + len(CRLF) > end or body[data_end:data_end + len(CRLF)] != CRLF:
                raise DecodeError(
                    "Chunk payload is not followed by CRLF",
                    data_end,
                    DecodeErrorKind.MISSING_CRLF,
                )
            position = data_end + len(CRLF)

        result = DecodeResult(
            data=bytes(output),
            chunk_count=chunk_count,
            consumed=position,
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        self._logger.debug(
            "Decoded chunked body",
            extra={
                "chunks": chunk_count,
                "input_bytes": end,
                "output_bytes": result.length,
            },
        )
        return result

    def _parse_size(self, line: bytes, offset: int) -> int:
        """Parse the hexadecimal size field of a chunk-size line."""
        field = bytes(line)
        if self.config.allow_chunk_extensions:
            field = field.split(b";", 1)[0]
        field = field.strip(_SIZE_PADDING)

        if not field or any(byte not in _HEX_DIGITS for byte in field):
            raise DecodeError(
                f"Malformed chunk size {bytes(line)!r}",
                offset,
                DecodeErrorKind.MALFORMED_SIZE,
            )
        return int(field, 16)


def decode_chunked(
    body: bytes,
    config: Optional[DecoderConfig] = None,
    correlation_id: Optional[str] = None
) -> DecodeResult:
    """Decode a chunked body with a one-off ``ChunkedDecoder``."""
    return ChunkedDecoder(config, correlation_id).decode(body)
