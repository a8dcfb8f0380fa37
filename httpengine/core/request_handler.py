"""
Per-connection request handling.

This module provides the core request handling functionality:
- A single bounded read of the request bytes
- Request parsing and validation
- Dispatch to the route table (off the event loop)
- Response serialization and write-back
- Access logging and request metrics
"""

"""
Copyright 2026 Chris Bunting
File: request_handler.py | Purpose: Read, parse, route and answer one connection
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-12 - Chris Bunting: Initial implementation
2026-10-13 - Chris Bunting: Added access log records and Prometheus metrics
2026-10-15 - Chris Bunting: Added read/write timeouts
"""

import asyncio
import functools
import logging
import uuid
from typing import Optional

from ..features.metrics import REQ_IN_FLIGHT, record_error, record_response
from .config import READ_BUFFER_SIZE
from .errors import ClientUnreachable, HTTPEngineError, ReadTimeout, RequestTooLarge, UnreadableStream
from .http_parser import HTTPParser
from .request import HTTPRequest, parse_request
from .response import HTTPResponse
from .router import dispatch

logger = logging.getLogger("httpengine.handler")


def _access_log_payload(method: str, path: str, status: int, length: int, duration: float,
                        client: str, request_id: str):
    return {
        "method": method,
        "path": path,
        "status": status,
        "length": length,
        "duration_s": round(duration, 6),
        "client": client,
        "request_id": request_id,
    }


class ConnectionHandler:
    """Handles one accepted connection: one request, one response.

    Attributes:
        directory: Serving directory for /files/ routes, or None
        buffer_size: Size of the single read; a read that fills it is rejected
        read_timeout: Seconds to wait for the request bytes
        write_timeout: Seconds to wait for the response to drain
    """

    def __init__(
        self,
        directory: Optional[str] = None,
        buffer_size: int = READ_BUFFER_SIZE,
        read_timeout: float = 10.0,
        write_timeout: float = 10.0,
        parser: Optional[HTTPParser] = None,
    ):
        self.directory = directory
        self.buffer_size = buffer_size
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.parser = parser or HTTPParser()

    async def handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> HTTPResponse:
        """Process a single HTTP request and write the response.

        Returns:
            The response that was sent, for caller-side inspection

        Raises:
            HTTPEngineError: If reading, parsing, encoding or writing fails.
                Nothing is written to the peer in that case.
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        peer = writer.get_extra_info("peername")
        client = f"{peer[0]}:{peer[1]}" if peer else "unknown"
        request_id = str(uuid.uuid4())

        REQ_IN_FLIGHT.inc()
        try:
            data = await self._read_request(reader)
            request = parse_request(data, self.parser)
            logger.info("%s command received", request.method,
                        extra={"client": client, "request_id": request_id})
            logger.debug("Raw request: %r", request.text)

            response = await self._dispatch(request)
            await self._respond(writer, response, request.text)
        except HTTPEngineError as e:
            record_error(e)
            raise
        finally:
            REQ_IN_FLIGHT.dec()

        duration = loop.time() - start_time
        record_response(str(request.method), response.status.code, duration)
        payload = _access_log_payload(
            str(request.method), request.path, response.status.code,
            len(response.body or b""), duration, client, request_id,
        )
        logger.info("%s %s %s", request.method, request.path, response.status.code, extra=payload)
        return response

    async def _read_request(self, reader: asyncio.StreamReader) -> bytes:
        """Read the request with one bounded read.

        Raises:
            ReadTimeout: If nothing arrives within read_timeout
            UnreadableStream: If the stream raises an I/O error
            RequestTooLarge: If the read fills the whole buffer
        """
        try:
            data = await asyncio.wait_for(reader.read(self.buffer_size), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            raise ReadTimeout(self.read_timeout) from None
        except (ConnectionError, OSError) as e:
            raise UnreadableStream(e) from e

        if len(data) == self.buffer_size:
            raise RequestTooLarge(self.buffer_size)
        return data

    async def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        # File routes do blocking disk I/O
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(dispatch, request, self.directory))

    async def _respond(self, writer: asyncio.StreamWriter, response: HTTPResponse, request_text: str) -> None:
        """Write the serialized response and wait for it to drain.

        Raises:
            ClientUnreachable: If the peer cannot be written to
        """
        payload = response.as_http_bytes()
        logger.debug("Responding with %r", payload)
        try:
            writer.write(payload)
            await asyncio.wait_for(writer.drain(), timeout=self.write_timeout)
        except asyncio.TimeoutError as e:
            raise ClientUnreachable(e, request_text) from e
        except (ConnectionError, OSError) as e:
            raise ClientUnreachable(e, request_text) from e
