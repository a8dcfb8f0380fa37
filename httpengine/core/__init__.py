"""
Core server components
"""

from .errors import HTTPEngineError
from .http_parser import HTTPParser
from .request import HTTPRequest, RequestHeaders, RequestLine, RequestMethod, parse_request
from .response import ContentType, HTTPResponse, ResponseStatus
from .router import dispatch
from .request_handler import ConnectionHandler
from .config import ServerConfig
from .server_core import HTTPServer

# Expose public interface
__all__ = [
    "HTTPEngineError",
    "HTTPParser",
    "HTTPRequest",
    "RequestHeaders",
    "RequestLine",
    "RequestMethod",
    "parse_request",
    "ContentType",
    "HTTPResponse",
    "ResponseStatus",
    "dispatch",
    "ConnectionHandler",
    "ServerConfig",
    "HTTPServer",
]
