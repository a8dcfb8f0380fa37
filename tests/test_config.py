#!/usr/bin/env python3
"""
Unit tests for server configuration, logging setup and error reporting
"""
import asyncio
import logging
import unittest

from pythonjsonlogger.json import JsonFormatter

from httpengine.core.config import ServerConfig, parse_args
from httpengine.core.errors import MissingMethod, RequestTooLarge, ServerConfigError
from httpengine.core.server_core import HTTPServer, main
from httpengine.core.server_utils import LOGGER_NAME, configure_logging, get_server_kwargs, handle_client_error


class DummyWriter:
    def __init__(self):
        self.buffer = bytearray()
        self.closed = False

    def write(self, data: bytes):
        self.buffer.extend(data)

    async def drain(self):
        await asyncio.sleep(0)

    def is_closing(self):
        return self.closed


class TestServerConfig(unittest.TestCase):
    def test_defaults(self):
        config = ServerConfig()
        self.assertEqual(config.host, "127.0.0.1")
        self.assertEqual(config.port, 4221)
        self.assertIsNone(config.directory)
        self.assertEqual(config.buffer_size, 4096)
        self.assertTrue(config.json_logs)

    def test_server_uses_config(self):
        server = HTTPServer(ServerConfig(host="0.0.0.0", port=8080, directory="/srv"))
        self.assertEqual(server.host, "0.0.0.0")
        self.assertEqual(server.port, 8080)
        self.assertEqual(server.directory, "/srv")

    def test_invalid_configuration(self):
        """Test server configuration validation"""
        with self.assertRaises(ServerConfigError) as cm:
            ServerConfig(port=65536)
        self.assertIn("Port number must be between 0 and 65535", str(cm.exception))

        with self.assertRaises(ServerConfigError):
            ServerConfig(port=-1)

        with self.assertRaises(ServerConfigError) as cm:
            ServerConfig(port="8000")
        self.assertIn("Port must be an integer", str(cm.exception))

        with self.assertRaises(ServerConfigError):
            ServerConfig(read_timeout=0)

        with self.assertRaises(ServerConfigError):
            ServerConfig(max_connections=0)

        with self.assertRaises(ServerConfigError):
            ServerConfig(metrics_port=70000)

        with self.assertRaises(ServerConfigError):
            ServerConfig(log_level="LOUD")

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            ServerConfig(backlog=0)

    def test_log_level_normalized(self):
        self.assertEqual(ServerConfig(log_level="debug").log_level, "DEBUG")

    def test_parse_args(self):
        config = parse_args([
            "--directory", "/tmp/files",
            "--port", "0",
            "--read-timeout", "2.5",
            "--metrics-port", "9100",
            "--plain-logs",
            "--no-uvloop",
        ])
        self.assertEqual(config.directory, "/tmp/files")
        self.assertEqual(config.port, 0)
        self.assertEqual(config.read_timeout, 2.5)
        self.assertEqual(config.metrics_port, 9100)
        self.assertFalse(config.json_logs)
        self.assertFalse(config.use_uvloop)

    def test_parse_args_without_directory(self):
        self.assertIsNone(parse_args([]).directory)

    def test_main_rejects_invalid_config(self):
        self.assertEqual(main(["--port", "70000"]), 2)

    def test_server_kwargs(self):
        kwargs = get_server_kwargs(backlog=16)
        self.assertEqual(kwargs["backlog"], 16)
        self.assertTrue(kwargs["reuse_address"])


class TestLoggingSetup(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_json_logging(self):
        logger = configure_logging(logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0].formatter, JsonFormatter)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_plain_logging(self):
        logger = configure_logging("INFO", json_format=False)
        self.assertNotIsInstance(logger.handlers[0].formatter, JsonFormatter)

    def test_reconfigure_does_not_duplicate_handlers(self):
        configure_logging()
        logger = configure_logging()
        self.assertEqual(len(logger.handlers), 1)

    def test_log_file(self):
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "server.log"
            logger = configure_logging(log_file=str(path))
            self.assertEqual(len(logger.handlers), 2)
            logger.getChild("test").info("hello file")
            for handler in logger.handlers:
                handler.flush()
            self.assertIn("hello file", path.read_text())
            self.tearDown()


class TestClientErrorReporting(unittest.TestCase):
    def setUp(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def tearDown(self):
        self.loop.close()

    def _report(self, error):
        writer = DummyWriter()
        self.loop.run_until_complete(handle_client_error(writer, error, "127.0.0.1:1"))
        return bytes(writer.buffer)

    def test_request_line_error_answered_with_400(self):
        data = self._report(MissingMethod(""))
        self.assertTrue(data.startswith(b"HTTP/1.1 400 Bad Request\r\nContent-Type: text/plain\r\n"))

    def test_framing_error_not_answered(self):
        self.assertEqual(self._report(RequestTooLarge(4096)), b"")

    def test_unexpected_error_not_answered(self):
        self.assertEqual(self._report(RuntimeError("boom")), b"")


if __name__ == '__main__':
    unittest.main()
