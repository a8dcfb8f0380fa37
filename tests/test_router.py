"""
Test suite for the route table
"""
import gzip

import pytest

from httpengine.core.request import RequestMethod, parse_request
from httpengine.core.response import ContentType, HTTPResponse, ResponseStatus
from httpengine.core.router import ROUTES, Route, dispatch


def request(raw: str):
    return parse_request(raw.encode("utf-8"))


def test_root():
    response = dispatch(request("GET / HTTP/1.1\r\nUser-Agent: x\r\nAccept-Encoding: gzip\r\n\r\n"))
    assert response.as_http_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"


@pytest.mark.parametrize(
    "path, body",
    [
        ("/echo/abc", b"abc"),
        ("/echo/", b""),
        ("/echo/abc/def", b"abc"),
        ("/echo/%20x", b"%20x"),
    ],
)
def test_echo(path, body):
    response = dispatch(request(f"GET {path} HTTP/1.1\r\n\r\n"))
    assert response.status is ResponseStatus.OK
    assert response.header.content_type is ContentType.TEXT_PLAIN
    assert response.body == body
    assert response.header.content_length == len(body)


def test_echo_gzip():
    response = dispatch(request("GET /echo/abc HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n"))
    assert response.header.content_encoding == "gzip"
    assert gzip.decompress(response.body) == b"abc"
    assert response.header.content_length == len(response.body)


def test_echo_gzip_whitespace_separated():
    response = dispatch(request("GET /echo/abc HTTP/1.1\r\nAccept-Encoding: gzip deflate\r\n\r\n"))
    assert response.header.content_encoding == "gzip"
    assert gzip.decompress(response.body) == b"abc"


def test_echo_gzip_not_first_token():
    response = dispatch(request("GET /echo/abc HTTP/1.1\r\nAccept-Encoding: br, gzip\r\n\r\n"))
    assert response.header.content_encoding is None
    assert response.body == b"abc"


def test_user_agent():
    response = dispatch(request("GET /user-agent HTTP/1.1\r\nUser-Agent: Foo\r\n\r\n"))
    assert response.as_http_bytes() == (
        b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 3\r\n\r\nFoo"
    )


def test_user_agent_missing():
    response = dispatch(request("GET /user-agent HTTP/1.1\r\nHost: a\r\n\r\n"))
    assert response.status is ResponseStatus.BAD_REQUEST
    assert response.body == b"Missing User-Agent header"


def test_get_file(serving_dir):
    (serving_dir / "data.bin").write_bytes(b"\x00binary\xff")
    response = dispatch(request("GET /files/data.bin HTTP/1.1\r\n\r\n"), str(serving_dir))
    assert response.status is ResponseStatus.OK
    assert response.header.content_type is ContentType.OCTET_STREAM
    assert response.body == b"\x00binary\xff"


def test_get_file_without_directory():
    response = dispatch(request("GET /files/data.bin HTTP/1.1\r\n\r\n"))
    assert response.as_http_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_get_missing_file(serving_dir):
    response = dispatch(request("GET /files/nope HTTP/1.1\r\n\r\n"), str(serving_dir))
    assert response.as_http_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_get_file_without_name(serving_dir):
    response = dispatch(request("GET /files/ HTTP/1.1\r\n\r\n"), str(serving_dir))
    assert response.status is ResponseStatus.BAD_REQUEST
    assert response.body == b"File asked but no filename provided"


def test_post_then_get_file(serving_dir):
    directory = str(serving_dir)
    created = dispatch(request("POST /files/x HTTP/1.1\r\nHost: a\r\n\r\nhello"), directory)

    assert created.status is ResponseStatus.CREATED
    assert created.header.location == f"{directory}/x"
    assert created.body == b"Resource created successfully"
    assert (serving_dir / "x").read_bytes() == b"hello"

    fetched = dispatch(request("GET /files/x HTTP/1.1\r\n\r\n"), directory)
    assert fetched.status is ResponseStatus.OK
    assert fetched.header.content_type is ContentType.OCTET_STREAM
    assert fetched.body == b"hello"


def test_post_overwrites_existing_file(serving_dir):
    (serving_dir / "x").write_text("old")
    dispatch(request("POST /files/x HTTP/1.1\r\n\r\nnew"), str(serving_dir))
    assert (serving_dir / "x").read_text() == "new"


def test_post_without_name_checked_before_directory():
    response = dispatch(request("POST /files/ HTTP/1.1\r\n\r\nhello"))
    assert response.status is ResponseStatus.BAD_REQUEST
    assert response.body == b"No filepath specified"


def test_post_without_directory():
    response = dispatch(request("POST /files/x HTTP/1.1\r\n\r\nhello"))
    assert response.as_http_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_post_write_failure(serving_dir):
    missing = str(serving_dir / "does-not-exist")
    response = dispatch(request("POST /files/x HTTP/1.1\r\n\r\nhello"), missing)
    assert response.status is ResponseStatus.INTERNAL_SERVER_ERROR
    assert response.body == b"Failed to write file"


def test_get_file_with_nul_in_name(serving_dir):
    response = dispatch(request("GET /files/a\x00b HTTP/1.1\r\n\r\n"), str(serving_dir))
    assert response.as_http_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_post_file_with_nul_in_name(serving_dir):
    response = dispatch(request("POST /files/a\x00b HTTP/1.1\r\n\r\nhello"), str(serving_dir))
    assert response.status is ResponseStatus.INTERNAL_SERVER_ERROR
    assert response.body == b"Failed to write file"
    assert list(serving_dir.iterdir()) == []


def test_file_names_are_joined_as_is(serving_dir, tmp_path):
    """Names are concatenated onto the directory without sanitization"""
    response = dispatch(request("POST /files/../escaped HTTP/1.1\r\n\r\nout"), str(serving_dir))
    assert response.status is ResponseStatus.CREATED
    assert (tmp_path / "escaped").read_text() == "out"


@pytest.mark.parametrize(
    "raw",
    [
        "GET /unknown HTTP/1.1\r\n\r\n",
        "GET /echo HTTP/1.1\r\n\r\n",
        "POST / HTTP/1.1\r\n\r\n",
        "POST /echo/abc HTTP/1.1\r\n\r\n",
        "POST /user-agent HTTP/1.1\r\nUser-Agent: x\r\n\r\n",
    ],
)
def test_unmatched_is_not_found(raw):
    assert dispatch(request(raw)).as_http_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"


def test_route_table_order():
    assert [(r.method, r.path) for r in ROUTES] == [
        (RequestMethod.GET, "/"),
        (RequestMethod.GET, "/echo/"),
        (RequestMethod.GET, "/user-agent"),
        (RequestMethod.GET, "/files/"),
        (RequestMethod.POST, "/files/"),
    ]


def test_first_matching_route_wins():
    def first(req, directory):
        return HTTPResponse.new_builder(ResponseStatus.CREATED).build()

    def second(req, directory):
        return HTTPResponse.new_builder(ResponseStatus.OK).build()

    routes = (
        Route(RequestMethod.GET, "/a", first),
        Route(RequestMethod.GET, "/a/b", second),
    )
    response = dispatch(request("GET /a/b HTTP/1.1\r\n\r\n"), routes=routes)
    assert response.status is ResponseStatus.CREATED
