"""
Typed request model: method, path, version, recognised headers and body.

Instances are frozen dataclasses built once per connection by
parse_request() and never mutated afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import EmptyHeaderValue, InvalidMethod, InvalidPath, InvalidVersion, MissingVersionNumber
from .http_parser import HTTPParser, split_header_line, split_request_line

VERSION_PREFIX = "HTTP/"


class RequestMethod(Enum):
    GET = "GET"
    POST = "POST"

    @classmethod
    def from_token(cls, token: str) -> "RequestMethod":
        """Match a method token case-insensitively.

        Raises:
            InvalidMethod: If the token is neither GET nor POST
        """
        try:
            return cls(token.upper())
        except ValueError:
            raise InvalidMethod(token) from None

    @property
    def has_body(self) -> bool:
        return self is RequestMethod.POST

    def __str__(self) -> str:
        return self.value


def parse_path(token: str) -> str:
    """Validate a request path. No normalization or decoding is applied."""
    if not token.startswith("/"):
        raise InvalidPath(token)
    return token


def parse_version(token: str) -> str:
    """Validate a protocol version token; it is returned verbatim."""
    if not token.startswith(VERSION_PREFIX):
        raise InvalidVersion(token)
    if not token[len(VERSION_PREFIX):]:
        raise MissingVersionNumber(token)
    return token


@dataclass(frozen=True)
class RequestLine:
    method: RequestMethod
    path: str
    version: str

    @classmethod
    def parse(cls, line: str) -> "RequestLine":
        method, path, version = split_request_line(line)
        return cls(
            method=RequestMethod.from_token(method),
            path=parse_path(path),
            version=parse_version(version),
        )

    @property
    def version_number(self) -> str:
        return self.version[len(VERSION_PREFIX):]

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.version}"


def parse_accept_encoding(value: str) -> Tuple[str, ...]:
    """Split an Accept-Encoding value into its ordered tokens.

    Commas and whitespace both separate tokens and quality parameters are
    dropped: "gzip;q=1.0, br" -> ("gzip", "br"), "gzip deflate" ->
    ("gzip", "deflate").
    """
    tokens = []
    for item in value.split(","):
        tokens.extend(item.split(";", 1)[0].split())
    return tuple(tokens)


@dataclass(frozen=True)
class RequestHeaders:
    """Snapshot of the headers the engine understands.

    Unknown headers are ignored. Header names match case-insensitively and
    the first occurrence of a recognised header wins.
    """
    host: Optional[str] = None
    user_agent: Optional[str] = None
    accept_encoding: Tuple[str, ...] = ()

    RECOGNISED = {
        "host": "Host",
        "user-agent": "User-Agent",
        "accept-encoding": "Accept-Encoding",
    }

    @classmethod
    def parse(cls, lines) -> "RequestHeaders":
        """Build headers from header lines, in any order.

        Raises:
            EmptyHeaderValue: If a recognised header has no value
        """
        found: Dict[str, str] = {}
        for line in lines:
            parts = split_header_line(line)
            if parts is None:
                continue
            name, value = parts
            key = name.lower()
            if key not in cls.RECOGNISED or key in found:
                continue
            if not value:
                raise EmptyHeaderValue(cls.RECOGNISED[key])
            found[key] = value

        accept_encoding = found.get("accept-encoding")
        return cls(
            host=found.get("host"),
            user_agent=found.get("user-agent"),
            accept_encoding=parse_accept_encoding(accept_encoding) if accept_encoding else (),
        )


@dataclass(frozen=True)
class HTTPRequest:
    """A parsed request.

    Attributes:
        line: The request line
        headers: Recognised headers
        body: Body text for methods that define one (POST), otherwise None
        text: The full decoded request, kept for diagnostics
    """
    line: RequestLine
    headers: RequestHeaders
    body: Optional[str] = None
    text: str = ""

    @property
    def method(self) -> RequestMethod:
        return self.line.method

    @property
    def path(self) -> str:
        return self.line.path


def parse_request(data: bytes, parser: Optional[HTTPParser] = None) -> HTTPRequest:
    """Parse the bytes of a single read into an HTTPRequest.

    Raises:
        HTTPParserError: Any decoding, framing, request line or header error
    """
    raw = (parser or HTTPParser()).parse(data)
    line = RequestLine.parse(raw.request_line)
    headers = RequestHeaders.parse(raw.header_lines)
    body = None
    if line.method.has_body:
        body = raw.body or ""
    return HTTPRequest(line=line, headers=headers, body=body, text=raw.text)
