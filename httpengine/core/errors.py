"""
Error taxonomy for the HTTP engine.

Every failure the engine can surface is one of the classes below:
- HTTPParserError: the request bytes could not be turned into a request model
- ClientHandlerError: the connection itself failed (read, size limit, write)
- CompressionError: the response codec reported an error
- ServerConfigError: invalid server configuration

Resource failures on /files/ routes (missing file, unwritable path, no
serving directory) are not exceptions; the router answers them in-band.
"""

from typing import Optional


class HTTPEngineError(Exception):
    """Base class for all engine errors"""
    pass


class HTTPParserError(HTTPEngineError):
    """Custom exception for HTTP parsing errors"""
    pass


class MissingRequestLine(HTTPParserError):
    def __init__(self):
        super().__init__("Request has no request line")


class EncodingError(HTTPParserError):
    """Request bytes are not valid UTF-8.

    Attributes:
        raw: Lossy rendering of the received bytes, for diagnostics
        cause: The underlying UnicodeDecodeError
    """

    def __init__(self, raw: str, cause: UnicodeDecodeError):
        self.raw = raw
        self.cause = cause
        super().__init__(f"Can't decode request to UTF-8: '{raw}'\r\n{cause}")


class RequestLineError(HTTPParserError):
    """Syntax error in the request line. `line` is the offending text."""

    def __init__(self, line: str, message: str):
        self.line = line
        super().__init__(message)


class MissingMethod(RequestLineError):
    def __init__(self, line: str):
        super().__init__(line, f"'{line}' HTTP request line has no method")


class MissingPath(RequestLineError):
    def __init__(self, line: str):
        super().__init__(line, f"'{line}' HTTP request line has no path")


class MissingVersion(RequestLineError):
    def __init__(self, line: str):
        super().__init__(line, f"'{line}' HTTP request line has no version")


class InvalidMethod(RequestLineError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(token, f"'{token}' is not a valid HTTP method")


class InvalidPath(RequestLineError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(token, f"Invalid HTTP path: '{token}' does not start with '/'")


class InvalidVersion(RequestLineError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(token, f"Invalid HTTP version format, missing HTTP/ prefix: '{token}'")


class MissingVersionNumber(RequestLineError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(token, f"Missing HTTP version number: '{token}'")


class RequestHeaderError(HTTPParserError):
    """Semantic error in a recognised request header"""
    pass


class EmptyHeaderValue(RequestHeaderError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"'{name}' header is present but has an empty value")


class ClientHandlerError(HTTPEngineError):
    """Base class for connection-level failures"""
    pass


class RequestTooLarge(ClientHandlerError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Request is larger than the maximum buffer size ({limit} bytes)")


class UnreadableStream(ClientHandlerError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Stream cannot be read: {cause}")


class ReadTimeout(ClientHandlerError):
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"No request received within {timeout}s")


class ClientUnreachable(ClientHandlerError):
    """The response could not be written back to the peer.

    Attributes:
        cause: The underlying I/O error (or timeout)
        request: The request text that was being answered
    """

    def __init__(self, cause: Exception, request: Optional[str] = None):
        self.cause = cause
        self.request = request
        super().__init__(f"Can't respond to client to request: '{request}'\r\n{cause}")


class CompressionError(HTTPEngineError):
    def __init__(self, encoding: str, cause: Exception):
        self.encoding = encoding
        self.cause = cause
        super().__init__(f"Failed to {encoding}-encode response body: {cause}")


class ServerConfigError(HTTPEngineError, ValueError):
    """Custom exception for server configuration errors"""
    pass
