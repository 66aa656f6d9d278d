import pytest

from swiftchat.http_request import HttpParseError, HttpRequest, url_decode


def _raw(head: str, body: str = "") -> str:
    return head + "\r\n\r\n" + body


def test_request_line_and_query():
    req = HttpRequest.parse(_raw("GET /api/rooms?name=lobby&limit=10 HTTP/1.1\r\nHost: localhost"))
    assert req.method == "GET"
    assert req.path == "/api/rooms"
    assert req.version == "HTTP/1.1"
    assert req.query_params == {"name": "lobby", "limit": "10"}
    assert req.has_query_param("name")
    assert req.query_param("missing") is None


def test_query_values_are_decoded():
    req = HttpRequest.parse(_raw("GET /search?q=hello+world&tag=a%2Fb&=x&flag HTTP/1.1"))
    assert req.query_param("q") == "hello world"
    assert req.query_param("tag") == "a/b"
    assert "" not in req.query_params
    assert not req.has_query_param("flag")


def test_headers_ignore_case_and_are_trimmed():
    req = HttpRequest.parse(_raw("GET / HTTP/1.1\r\nContent-Type: \t application/json \r\nX-Thing:1"))
    assert req.header("content-type") == "application/json"
    assert req.has_header("CONTENT-TYPE")
    assert req.header("x-thing") == "1"
    assert req.header("Missing") is None
    assert not req.has_header("Missing")


def test_later_header_overrides_earlier():
    req = HttpRequest.parse(_raw("GET / HTTP/1.1\r\nAccept: a\r\naccept: b"))
    assert req.header("Accept") == "b"
    assert len(req.headers) == 1


def test_lines_without_colon_are_ignored():
    req = HttpRequest.parse(_raw("GET / HTTP/1.1\r\nnot a header\r\nHost: localhost"))
    assert list(req.headers) == ["Host"]


def test_cookies():
    req = HttpRequest.parse(_raw("GET / HTTP/1.1\r\nCookie: session=token; theme=dark;bad; =x"))
    assert req.cookie("session") == "token"
    assert req.cookie("theme") == "dark"
    assert req.has_cookie("session")
    assert not req.has_cookie("bad")
    assert req.cookie("missing") is None


def test_body_read_by_content_length():
    req = HttpRequest.parse(_raw("POST /api/messages HTTP/1.1\r\nContent-Length: 5", "helloEXTRA"))
    assert req.body == "hello"


def test_body_is_empty_without_content_length():
    req = HttpRequest.parse(_raw("POST / HTTP/1.1", "ignored"))
    assert req.body == ""


def test_bytes_input_and_byte_length():
    body = "héllo".encode("utf-8")
    raw = b"POST / HTTP/1.1\r\nContent-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
    req = HttpRequest.parse(raw)
    assert req.body == "héllo"


def test_incomplete_body_raises():
    with pytest.raises(HttpParseError):
        HttpRequest.parse(_raw("POST / HTTP/1.1\r\nContent-Length: 10", "short"))


def test_invalid_content_length_raises():
    with pytest.raises(HttpParseError):
        HttpRequest.parse(_raw("POST / HTTP/1.1\r\nContent-Length: abc", "x"))


def test_missing_separator_raises():
    with pytest.raises(HttpParseError):
        HttpRequest.parse("GET / HTTP/1.1\r\nHost: localhost\r\n")


def test_malformed_request_line_raises():
    with pytest.raises(HttpParseError):
        HttpRequest.parse(_raw("GET /only-two"))


def test_empty_request_raises():
    with pytest.raises(HttpParseError):
        HttpRequest.parse("\r\n\r\n")


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        HttpRequest.parse("")


@pytest.mark.parametrize(
    ("encoded", "decoded"),
    [
        ("plain", "plain"),
        ("a+b", "a b"),
        ("%41%42", "AB"),
        ("100%zz", "100%zz"),
        ("end%4", "end%4"),
        ("%E4%BD%A0", "你"),
    ],
)
def test_url_decode(encoded, decoded):
    assert url_decode(encoded) == decoded