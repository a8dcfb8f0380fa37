"""
Line and token level parsing of raw HTTP request buffers.

This module turns the bytes of a single read into text pieces:
- Strict UTF-8 decoding
- Line splitting on LF with an optional trailing CR
- Separation of request line, header block and body
- Tokenizing the request line and header lines

It knows nothing about which methods, paths or headers are valid; that is
the job of httpengine.core.request.
"""

from typing import List, NamedTuple, Optional, Tuple

from .errors import EncodingError, MissingMethod, MissingPath, MissingRequestLine, MissingVersion


class RawRequest(NamedTuple):
    """Text pieces of a request buffer.

    Attributes:
        request_line: First line of the buffer (may be empty)
        header_lines: Lines between the request line and the first blank line
        body: Text after the blank line, or None if there was no blank line
        text: The full decoded buffer
    """
    request_line: str
    header_lines: List[str]
    body: Optional[str]
    text: str


class HTTPParser:
    """Splits a decoded request buffer into request line, headers and body.

    Constants:
        ENCODING: Text encoding of request buffers
        HEADER_SEPARATOR: Separator between a header name and its value
    """
    ENCODING = "utf-8"
    HEADER_SEPARATOR = ":"

    def decode(self, data: bytes) -> str:
        """Decode raw request bytes.

        Raises:
            EncodingError: If the bytes are not valid UTF-8
        """
        try:
            return data.decode(self.ENCODING, errors="strict")
        except UnicodeDecodeError as e:
            raw = data.decode(self.ENCODING, errors="replace")
            raise EncodingError(raw, e) from e

    def split(self, text: str) -> RawRequest:
        """Split decoded text into its request line, header lines and body.

        The first line is always the request line, even when it is blank.
        The header block ends at the first blank line after it; everything
        following that line's terminator is the body.

        Raises:
            MissingRequestLine: If the text contains no line at all
        """
        lines: List[str] = []
        body: Optional[str] = None
        pos = 0
        while pos < len(text):
            end = text.find("\n", pos)
            if end == -1:
                line, pos = text[pos:], len(text)
            else:
                line, pos = text[pos:end], end + 1
            if line.endswith("\r"):
                line = line[:-1]
            if lines and not line:
                body = text[pos:]
                break
            lines.append(line)

        if not lines:
            raise MissingRequestLine()

        return RawRequest(lines[0], lines[1:], body, text)

    def parse(self, data: bytes) -> RawRequest:
        """Decode and split a raw buffer in one step."""
        return self.split(self.decode(data))


def split_request_line(line: str) -> Tuple[str, str, str]:
    """Split a request line into (method, path, version) tokens.

    Tokens are separated by any run of whitespace; tokens after the
    third are ignored.

    Raises:
        MissingMethod, MissingPath, MissingVersion: naming the first absent token
    """
    tokens = line.split()
    if len(tokens) < 1:
        raise MissingMethod(line)
    if len(tokens) < 2:
        raise MissingPath(line)
    if len(tokens) < 3:
        raise MissingVersion(line)
    return tokens[0], tokens[1], tokens[2]


def split_header_line(line: str) -> Optional[Tuple[str, str]]:
    """Split a header line into (name, value), both stripped.

    Returns None for lines without a separator; such lines are not headers
    the engine can recognise and are ignored by callers.
    """
    name, sep, value = line.partition(HTTPParser.HEADER_SEPARATOR)
    if not sep:
        return None
    return name.strip(), value.strip()
