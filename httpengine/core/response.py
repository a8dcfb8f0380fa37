"""
HTTP response model, builders and wire serialization.

Responses are built in two steps:

    HTTPResponse.new_builder(ResponseStatus.OK)          # HTTPResponseBuilder
        .with_body("hi", ContentType.TEXT_PLAIN, ("gzip",))  # BodyResponseBuilder
        .with_location("/tmp/x")
        .build()

Only the body-bearing builder offers with_location(), so a Location header
can never be attached to a response without a body.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from ..features.compression import encode_body

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


class ResponseStatus(Enum):
    OK = (200, "OK")
    CREATED = (201, "Created")
    BAD_REQUEST = (400, "Bad Request")
    NOT_FOUND = (404, "Not Found")
    INTERNAL_SERVER_ERROR = (500, "Internal Server Error")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def reason(self) -> str:
        return self.value[1]

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.code} {self.reason}"


class ContentType(Enum):
    TEXT_PLAIN = "text/plain"
    OCTET_STREAM = "application/octet-stream"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResponseHeader:
    content_type: ContentType
    content_length: int
    content_encoding: Optional[str] = None
    location: Optional[str] = None

    def lines(self) -> List[str]:
        """Header lines in wire order, without terminators."""
        lines = []
        if self.content_encoding is not None:
            lines.append(f"Content-Encoding: {self.content_encoding}")
        lines.append(f"Content-Type: {self.content_type}")
        lines.append(f"Content-Length: {self.content_length}")
        if self.location is not None:
            lines.append(f"Location: {self.location}")
        return lines


@dataclass(frozen=True)
class HTTPResponse:
    status: ResponseStatus
    header: Optional[ResponseHeader] = None
    body: Optional[bytes] = None

    def __post_init__(self):
        if self.body is not None:
            if self.header is None:
                raise ValueError("A response body requires a response header")
            if self.header.content_length != len(self.body):
                raise ValueError(
                    f"Content-Length {self.header.content_length} does not match "
                    f"body length {len(self.body)}"
                )

    @staticmethod
    def new_builder(status: ResponseStatus) -> "HTTPResponseBuilder":
        return HTTPResponseBuilder(status)

    def as_http_bytes(self) -> bytes:
        """Serialize to exact wire bytes."""
        head = self.status.status_line + CRLF
        if self.header is not None:
            head += "".join(line + CRLF for line in self.header.lines())
        head += CRLF
        return head.encode("utf-8") + (self.body or b"")

    def __bytes__(self) -> bytes:
        return self.as_http_bytes()


class HTTPResponseBuilder:
    """Builder for a response that has no body yet."""

    def __init__(self, status: ResponseStatus):
        self.status = status

    def with_body(
        self,
        content: Union[str, bytes],
        content_type: ContentType,
        accept_encoding: Sequence[str] = (),
    ) -> "BodyResponseBuilder":
        """Attach a body, compressing it if the client negotiated gzip.

        Content-Length is computed from the final (possibly compressed) bytes.

        Raises:
            CompressionError: If compression was negotiated and failed
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        body, encoding = encode_body(content, accept_encoding)
        header = ResponseHeader(
            content_type=content_type,
            content_length=len(body),
            content_encoding=encoding,
        )
        return BodyResponseBuilder(self.status, header, body)

    def build(self) -> HTTPResponse:
        return HTTPResponse(self.status)


class BodyResponseBuilder:
    """Builder for a response that already carries a body."""

    def __init__(self, status: ResponseStatus, header: ResponseHeader, body: bytes):
        self.status = status
        self.header = header
        self.body = body

    def with_location(self, location: str) -> "BodyResponseBuilder":
        header = ResponseHeader(
            content_type=self.header.content_type,
            content_length=self.header.content_length,
            content_encoding=self.header.content_encoding,
            location=location,
        )
        return BodyResponseBuilder(self.status, header, self.body)

    def build(self) -> HTTPResponse:
        return HTTPResponse(self.status, self.header, self.body)
