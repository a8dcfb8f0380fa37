"""
Utility functions for server configuration and operation.

This module provides core functionality for:
- Logging setup (JSON via python-json-logger, or plain text)
- Event loop setup with uvloop
- Server kwargs for asyncio.start_server
- Per-connection error reporting
"""

import asyncio
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from .errors import HTTPEngineError, RequestHeaderError, RequestLineError, ServerConfigError
from .response import ContentType, HTTPResponse, ResponseStatus

LOGGER_NAME = "httpengine"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level=logging.INFO, log_file=None, json_format=True):
    """Configure logging for the server.

    Args:
        level: Logging level name or number (default: INFO)
        log_file: Optional path to log file
        json_format: Emit one JSON object per record instead of plain text

    Returns:
        Configured logger instance
    """
    if json_format:
        formatter = JsonFormatter(JSON_FORMAT, datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT)

    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def setup_uvloop() -> bool:
    """Install the uvloop event loop policy.

    Returns:
        True if uvloop is in use, False on Windows where it is not supported

    Raises:
        ServerConfigError: If uvloop setup fails
    """
    if sys.platform == "win32":
        logger.warning("uvloop is not supported on Windows, using the default event loop")
        return False

    import uvloop

    try:
        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except Exception as e:
        logger.error(f"Failed to setup uvloop: {e}")
        raise ServerConfigError("Failed to initialize event loop") from e
    logger.info("Using uvloop event loop")
    return True


def get_server_kwargs(backlog: int = 2048) -> Dict[str, Any]:
    """Get asyncio.start_server kwargs.

    Returns:
        Dict with address reuse and backlog settings
    """
    return {
        "reuse_address": True,
        "backlog": backlog,
        "start_serving": True,
    }


def bad_request_response(error: HTTPEngineError) -> HTTPResponse:
    return (
        HTTPResponse.new_builder(ResponseStatus.BAD_REQUEST)
        .with_body(str(error), ContentType.TEXT_PLAIN)
        .build()
    )


async def handle_client_error(
    writer: asyncio.StreamWriter,
    error: Exception,
    client: str = "unknown",
    log: Optional[logging.Logger] = None,
) -> None:
    """Report a failed connection.

    Request line and header errors are answered in-band with a 400 before
    the connection is closed; every other failure is only logged.

    Args:
        writer: StreamWriter for the client connection
        error: Exception that ended the connection
        client: Peer address for the log record
        log: Optional logger instance, module logger if None
    """
    log = log or logger

    if not isinstance(error, HTTPEngineError):
        log.error("Unexpected error handling client %s: %s", client, error, exc_info=error)
        return

    log.warning(
        "Error handling client request: %s", error,
        extra={"client": client, "error_kind": type(error).__name__},
    )
    if not isinstance(error, (RequestLineError, RequestHeaderError)):
        return

    try:
        if not writer.is_closing():
            writer.write(bad_request_response(error).as_http_bytes())
            await writer.drain()
    except (ConnectionError, OSError) as e:
        log.debug("Could not send 400 to %s: %s", client, e)
