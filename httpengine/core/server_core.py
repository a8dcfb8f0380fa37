"""
Core HTTP server implementation providing asynchronous connection handling.

This module implements the accept loop around ConnectionHandler:
- Asynchronous I/O using asyncio (uvloop when enabled)
- One task per accepted connection, limited by a semaphore
- Graceful shutdown on SIGINT/SIGTERM
- Per-connection error reporting that never affects other connections
"""

import asyncio
import logging
import signal
import sys
from typing import List, Optional, Set

from ..features.metrics import start_metrics_server
from .config import ServerConfig, parse_args
from .errors import ServerConfigError
from .request_handler import ConnectionHandler
from .server_utils import configure_logging, get_server_kwargs, handle_client_error, setup_uvloop

logger = logging.getLogger("httpengine.server")


class HTTPServer:
    """Asynchronous HTTP/1.1 server.

    Attributes:
        config: Validated server configuration
        host: Host address to bind to
        port: Port number to listen on (the bound port once started)
        directory: Serving directory for /files/ routes, or None
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.host = self.config.host
        self.port = self.config.port
        self.directory = self.config.directory
        self._server: Optional[asyncio.AbstractServer] = None
        self._shutdown_event: Optional[asyncio.Event] = None
        self._started: Optional[asyncio.Event] = None
        self._active_connections: Set[asyncio.Task] = set()
        self._request_semaphore: Optional[asyncio.Semaphore] = None

    def _ensure_primitives(self) -> None:
        # Bound to the running loop, so created lazily
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
            self._started = asyncio.Event()
            self._request_semaphore = asyncio.Semaphore(self.config.max_connections)

    async def start(self) -> None:
        """Start the server and serve until shutdown is requested.

        Raises:
            OSError: If server fails to bind to specified host/port
        """
        self._ensure_primitives()
        try:
            self._server = await asyncio.start_server(
                self._handle_client,
                self.host,
                self.port,
                **get_server_kwargs(self.config.backlog),
            )
        except OSError as e:
            logger.error("Server error: %s", e)
            raise

        sock = self._server.sockets[0] if self._server.sockets else None
        if sock is not None:
            self.port = sock.getsockname()[1]
        logger.info("Server started on http://%s:%s", self.host, self.port)
        if self.directory is not None:
            logger.info("Serving files from %s", self.directory)

        self._install_signal_handlers()
        self._started.set()
        async with self._server:
            await self._shutdown_event.wait()

    async def wait_started(self) -> None:
        self._ensure_primitives()
        await self._started.wait()

    def _install_signal_handlers(self) -> None:
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda: asyncio.ensure_future(self.shutdown()))
            except (NotImplementedError, RuntimeError, ValueError):
                # Not in the main thread
                logger.debug("Cannot install handler for %s", sig)

    def _remove_signal_handlers(self) -> None:
        if sys.platform == "win32":
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError, ValueError):
                pass

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Initiate graceful server shutdown.

        Stops accepting new connections and waits for existing connections
        to complete before shutting down the server.

        Args:
            timeout: Maximum time in seconds to wait for connections to close
        """
        logger.info("Initiating graceful shutdown...")
        self._ensure_primitives()
        self._remove_signal_handlers()

        if self._server is not None:
            self._server.close()

        tasks = list(self._active_connections)
        if tasks:
            logger.info("Waiting for %d active connections to complete...", len(tasks))
            done, pending = await asyncio.wait(tasks, timeout=timeout)
            if pending:
                logger.warning("Force closing %d connections that didn't complete in time", len(pending))
                for task in pending:
                    task.cancel()
                await asyncio.wait(pending, timeout=5.0)

        if self._server is not None:
            await self._server.wait_closed()
        self._shutdown_event.set()
        logger.info("Server shutdown complete")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Handle one accepted connection in its own task.

        Errors end this connection only; they are reported and the writer is
        always closed.
        """
        peer = writer.get_extra_info("peername")
        client = f"{peer[0]}:{peer[1]}" if peer else "unknown"

        async with self._request_semaphore:
            task = asyncio.current_task()
            if task is not None:
                self._active_connections.add(task)
            try:
                handler = ConnectionHandler(
                    directory=self.directory,
                    buffer_size=self.config.buffer_size,
                    read_timeout=self.config.read_timeout,
                    write_timeout=self.config.write_timeout,
                )
                await handler.handle(reader, writer)
            except Exception as e:
                await handle_client_error(writer, e, client)
            finally:
                if task is not None:
                    self._active_connections.discard(task)
                try:
                    writer.close()
                    await writer.wait_closed()
                except (ConnectionError, OSError) as e:
                    logger.debug("Error closing connection to %s: %s", client, e)

    def run(self) -> None:
        """Run the server until it is shut down."""
        if self.config.use_uvloop:
            setup_uvloop()
        asyncio.run(self.start())


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_args(argv)
    except ServerConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level, config.log_file, json_format=config.json_logs)

    try:
        if config.metrics_port is not None:
            start_metrics_server(config.metrics_port, config.host)
        HTTPServer(config).run()
    except (OSError, ServerConfigError) as e:
        logger.error("Failed to start server: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
