from .core import (
    ConnectionHandler, ContentType, HTTPEngineError, HTTPRequest, HTTPResponse, HTTPServer,
    ResponseStatus, ServerConfig, dispatch, parse_request
)

__version__ = '1.0.0'

__all__ = [
    # Server
    'HTTPServer',
    'ServerConfig',
    'ConnectionHandler',

    # Request/response pipeline
    'parse_request',
    'dispatch',
    'HTTPRequest',
    'HTTPResponse',
    'ResponseStatus',
    'ContentType',

    # Errors
    'HTTPEngineError',
]
