"""Minimal HTTP response splitting.

Only what the pipeline needs to pick its entry point: locate the body and
tell whether it is chunked. Header values are not validated.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

HEADER_TERMINATOR = b"\r\n\r\n"


@dataclass
class ResponseParts:
    """Raw response split at the blank line ending the header block."""

    status_line: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def get_header(self, name: str) -> Optional[str]:
        """Return the first header value with a case-insensitive name match."""
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return None

    @property
    def is_chunked(self) -> bool:
        return is_chunked(self.headers)


def split_response(raw: bytes) -> ResponseParts:
    """Split a raw response into status line, headers and body.

    A response without a blank line is treated as headers only, with an empty
    body. Header lines without a colon are skipped.
    """
    head, separator, body = raw.partition(HEADER_TERMINATOR)
    if not separator:
        body = b""

    lines = head.decode("latin-1").split("\r\n")
    headers: List[Tuple[str, str]] = []
    for line in lines[1:]:
        name, colon, value = line.partition(":")
        if colon:
            headers.append((name.strip(), value.strip()))
    return ResponseParts(status_line=lines[0], headers=headers, body=body)


def is_chunked(headers: List[Tuple[str, str]]) -> bool:
    """Report whether a Transfer-Encoding header lists ``chunked``."""
    for name, value in headers:
        if name.lower() != "transfer-encoding":
            continue
        codings = [coding.strip().lower() for coding in value.split(",")]
        if "chunked" in codings:
            return True
    return False
