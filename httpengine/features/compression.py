"""
Response body compression.

Only gzip is supported, and only when it is the first encoding the client
lists in Accept-Encoding.
"""

"""
Copyright 2026 Chris Bunting
File: compression.py | Purpose: gzip negotiation and encoding for response bodies
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-12 - Chris Bunting: Initial implementation
"""

import gzip
import zlib
from typing import Optional, Sequence, Tuple

from ..core.errors import CompressionError

GZIP = "gzip"
SUPPORTED_ENCODINGS = frozenset({GZIP})
DEFAULT_COMPRESS_LEVEL = 6


def negotiate_encoding(accept_encoding: Sequence[str]) -> Optional[str]:
    """Return the encoding to apply, or None.

    Only the first advertised token is consulted: ("deflate", "gzip")
    negotiates nothing.
    """
    if not accept_encoding:
        return None
    first = accept_encoding[0].lower()
    return first if first in SUPPORTED_ENCODINGS else None


def gzip_compress(data: bytes) -> bytes:
    """Compress data into a single-member gzip stream.

    mtime is pinned to 0 so identical input yields identical output.

    Raises:
        CompressionError: If the underlying codec fails
    """
    try:
        return gzip.compress(data, compresslevel=DEFAULT_COMPRESS_LEVEL, mtime=0)
    except (zlib.error, OSError, ValueError) as e:
        raise CompressionError(GZIP, e) from e


def encode_body(data: bytes, accept_encoding: Sequence[str]) -> Tuple[bytes, Optional[str]]:
    """Encode a body according to the client's Accept-Encoding tokens.

    Returns:
        (body bytes, Content-Encoding value or None)
    """
    encoding = negotiate_encoding(accept_encoding)
    if encoding == GZIP:
        return gzip_compress(data), encoding
    return data, None
