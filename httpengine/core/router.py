"""
Request routing.

Routes are an ordered table of (method, path prefix, handler) entries; the
first entry whose method and path match wins. Anything unmatched is a
404 with no body. Routing keeps no state between requests.

/files/ routes join the serving directory and the requested name with a
plain "/" and perform no traversal checks.
"""

"""
Copyright 2026 Chris Bunting
File: router.py | Purpose: Route table and handlers for the HTTP engine
@author Chris Bunting | @version 1.0.0

CHANGELOG:
2026-10-12 - Chris Bunting: Initial implementation
2026-10-14 - Chris Bunting: POST /files/ answers 201 with Location header
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .request import HTTPRequest, RequestMethod
from .response import ContentType, HTTPResponse, ResponseStatus

logger = logging.getLogger("httpengine.router")

ECHO_PREFIX = "/echo/"
USER_AGENT_PREFIX = "/user-agent"
FILES_PREFIX = "/files/"

Handler = Callable[[HTTPRequest, Optional[str]], HTTPResponse]


@dataclass(frozen=True)
class Route:
    method: RequestMethod
    path: str
    handler: Handler
    exact: bool = False

    def matches(self, request: HTTPRequest) -> bool:
        if request.method is not self.method:
            return False
        if self.exact:
            return request.path == self.path
        return request.path.startswith(self.path)


def _text(status: ResponseStatus, content: str, request: HTTPRequest) -> HTTPResponse:
    return (
        HTTPResponse.new_builder(status)
        .with_body(content, ContentType.TEXT_PLAIN, request.headers.accept_encoding)
        .build()
    )


def not_found() -> HTTPResponse:
    return HTTPResponse.new_builder(ResponseStatus.NOT_FOUND).build()


def file_path(directory: str, name: str) -> str:
    return f"{directory}/{name}"


def handle_root(request: HTTPRequest, directory: Optional[str]) -> HTTPResponse:
    return HTTPResponse.new_builder(ResponseStatus.OK).build()


def handle_echo(request: HTTPRequest, directory: Optional[str]) -> HTTPResponse:
    # /echo/abc/def echoes "abc"
    content = request.path[len(ECHO_PREFIX):].split("/", 1)[0]
    return _text(ResponseStatus.OK, content, request)


def handle_user_agent(request: HTTPRequest, directory: Optional[str]) -> HTTPResponse:
    user_agent = request.headers.user_agent
    if user_agent is None:
        return _text(ResponseStatus.BAD_REQUEST, "Missing User-Agent header", request)
    return _text(ResponseStatus.OK, user_agent, request)


def handle_read_file(request: HTTPRequest, directory: Optional[str]) -> HTTPResponse:
    name = request.path[len(FILES_PREFIX):]
    if not name:
        return _text(ResponseStatus.BAD_REQUEST, "File asked but no filename provided", request)
    if directory is None:
        logger.info("File '%s' requested but no serving directory is configured", name)
        return not_found()

    path = file_path(directory, name)
    try:
        with open(path, "rb") as f:
            content = f.read()
    except (OSError, ValueError) as e:
        logger.info("Cannot read '%s': %s", path, e)
        return not_found()

    return (
        HTTPResponse.new_builder(ResponseStatus.OK)
        .with_body(content, ContentType.OCTET_STREAM, request.headers.accept_encoding)
        .build()
    )


def handle_write_file(request: HTTPRequest, directory: Optional[str]) -> HTTPResponse:
    name = request.path[len(FILES_PREFIX):]
    if not name:
        return _text(ResponseStatus.BAD_REQUEST, "No filepath specified", request)
    if directory is None:
        logger.info("File path found in request but no serving directory is configured")
        return not_found()

    path = file_path(directory, name)
    logger.info("Writing request body to %s", path)
    try:
        with open(path, "wb") as f:
            f.write((request.body or "").encode("utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Failed to write '%s': %s", path, e)
        return _text(ResponseStatus.INTERNAL_SERVER_ERROR, "Failed to write file", request)

    return (
        HTTPResponse.new_builder(ResponseStatus.CREATED)
        .with_body("Resource created successfully", ContentType.TEXT_PLAIN,
                   request.headers.accept_encoding)
        .with_location(path)
        .build()
    )


ROUTES: Tuple[Route, ...] = (
    Route(RequestMethod.GET, "/", handle_root, exact=True),
    Route(RequestMethod.GET, ECHO_PREFIX, handle_echo),
    Route(RequestMethod.GET, USER_AGENT_PREFIX, handle_user_agent),
    Route(RequestMethod.GET, FILES_PREFIX, handle_read_file),
    Route(RequestMethod.POST, FILES_PREFIX, handle_write_file),
)


def dispatch(request: HTTPRequest, directory: Optional[str] = None,
             routes: Tuple[Route, ...] = ROUTES) -> HTTPResponse:
    """Resolve a request to exactly one response."""
    for route in routes:
        if route.matches(request):
            logger.debug("%s %s matched %s", request.method, request.path, route.handler.__name__)
            return route.handler(request, directory)
    logger.info("'%s' is not found", request.path)
    return not_found()
