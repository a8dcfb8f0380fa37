"""
Server configuration and command line parsing.
"""

import argparse
import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import ServerConfigError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4221
READ_BUFFER_SIZE = 4096


@dataclass
class ServerConfig:
    """Server configuration settings.

    Attributes:
        host: Host address to bind to
        port: Port number to listen on
        directory: Serving directory for /files/ routes, None if not configured
        read_timeout: Seconds to wait for the request bytes
        write_timeout: Seconds to wait for the response to drain
        max_connections: Maximum number of simultaneous connections
        backlog: Listen backlog
        buffer_size: Size of the single request read
        metrics_port: Port for the Prometheus exporter, None to disable it
        log_level: Logging level name
        log_file: Optional extra log file
        json_logs: Emit JSON log records
        use_uvloop: Install the uvloop event loop policy
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    directory: Optional[str] = None
    read_timeout: float = 10.0
    write_timeout: float = 10.0
    max_connections: int = 1000
    backlog: int = 2048
    buffer_size: int = READ_BUFFER_SIZE
    metrics_port: Optional[int] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = True
    use_uvloop: bool = True

    def __post_init__(self):
        _check_port("Port", self.port)
        if self.metrics_port is not None:
            _check_port("Metrics port", self.metrics_port)

        for name in ("read_timeout", "write_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ServerConfigError(f"{name} must be a number")
            if value <= 0:
                raise ServerConfigError(f"{name} must be positive")

        for name in ("max_connections", "backlog", "buffer_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ServerConfigError(f"{name} must be an integer")
            if value < 1:
                raise ServerConfigError(f"{name} must be at least 1")

        level = logging.getLevelName(str(self.log_level).upper())
        if not isinstance(level, int):
            raise ServerConfigError(f"Unknown log level: {self.log_level}")
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            host=args.host,
            port=args.port,
            directory=args.directory,
            read_timeout=args.read_timeout,
            write_timeout=args.write_timeout,
            max_connections=args.max_connections,
            metrics_port=args.metrics_port,
            log_level=args.log_level,
            log_file=args.log_file,
            json_logs=not args.plain_logs,
            use_uvloop=not args.no_uvloop,
        )


def _check_port(label: str, port) -> None:
    if isinstance(port, bool) or not isinstance(port, int):
        raise ServerConfigError(f"{label} must be an integer")
    if port < 0 or port > 65535:
        raise ServerConfigError(f"{label} number must be between 0 and 65535")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpengine",
        description="Minimal HTTP/1.1 server with echo, user-agent and file routes",
    )
    parser.add_argument(
        "--directory",
        default=None,
        help="Serving directory for /files/ routes",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="Host address to bind to")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for a request (default: 10)",
    )
    parser.add_argument(
        "--write-timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for a response to be sent (default: 10)",
    )
    parser.add_argument(
        "--max-connections",
        type=int,
        default=1000,
        help="Maximum number of simultaneous connections",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--plain-logs", action="store_true", help="Plain text logs instead of JSON")
    parser.add_argument("--no-uvloop", action="store_true", help="Use the default asyncio event loop")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> ServerConfig:
    """Parse command line arguments into a validated ServerConfig."""
    return ServerConfig.from_args(build_arg_parser().parse_args(argv))
