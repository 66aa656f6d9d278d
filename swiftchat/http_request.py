"""Parsing of raw HTTP/1.x requests."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_HEAD_END = b"\r\n\r\n"
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_CONTENT_LENGTH = re.compile(r"\s*([+-]?)(\d+)")


class HttpParseError(ValueError):
    """Raised when a raw request cannot be parsed."""


def url_decode(text: str) -> str:
    """Decode ``%XX`` escapes and ``+`` in a URL component.

    A ``%`` not followed by two hex digits is kept as it is.
    """
    raw = text.encode("utf-8")
    out = bytearray()
    pos = 0
    while pos < len(raw):
        byte = raw[pos]
        if (
            byte == ord("%")
            and pos + 2 < len(raw)
            and raw[pos + 1] in _HEX_DIGITS
            and raw[pos + 2] in _HEX_DIGITS
        ):
            out.append(int(raw[pos + 1 : pos + 3], 16))
            pos += 3
            continue
        out.append(ord(" ") if byte == ord("+") else byte)
        pos += 1
    return out.decode("utf-8", errors="replace")


class _Headers(Mapping[str, str]):
    """A mapping of header values whose keys ignore case."""

    def __init__(self) -> None:
        self._items: dict[str, tuple[str, str]] = {}

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()][1]

    def __setitem__(self, key: str, value: str) -> None:
        lowered = key.lower()
        original = self._items[lowered][0] if lowered in self._items else key
        self._items[lowered] = (original, value)

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return repr(dict(self.items()))


@dataclass
class HttpRequest:
    """A parsed HTTP request; build one with :meth:`parse`."""

    method: str = ""
    path: str = ""
    version: str = ""
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=_Headers)
    query_params: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw_request: str | bytes) -> HttpRequest:
        """Parse a complete raw request; raises HttpParseError if it is malformed."""
        raw = raw_request.encode("utf-8") if isinstance(raw_request, str) else bytes(raw_request)

        head_end = raw.find(_HEAD_END)
        if head_end < 0:
            logger.error("Malformed request: missing header/body separator")
            raise HttpParseError("missing header/body separator")

        head = raw[:head_end].decode("utf-8", errors="replace")
        lines = head.split("\n")
        request_line = lines[0].removesuffix("\r") if head else ""
        if not head or not lines[0]:
            logger.error("Failed to read request line or request is empty")
            raise HttpParseError("empty request line")

        parts = request_line.split()
        if len(parts) < 3:
            logger.error("Malformed request line: %s", request_line)
            raise HttpParseError(f"malformed request line: {request_line!r}")

        request = cls(method=parts[0], path=parts[1], version=parts[2])
        path, sep, query = request.path.partition("?")
        if sep:
            request.query_params = _parse_query(query)
            request.path = path

        headers = _Headers()
        for line in lines[1:]:
            line = line.removesuffix("\r")
            if not line:
                continue
            key, sep, value = line.partition(":")
            if sep:
                headers[key.strip(" \t")] = value.strip(" \t")
        request.headers = headers

        cookie_header = request.header("Cookie")
        if cookie_header is not None:
            request.cookies = _parse_cookies(cookie_header)

        length_header = request.header("Content-Length")
        if length_header is not None:
            match = _CONTENT_LENGTH.match(length_header)
            if match is None:
                logger.error("Invalid Content-Length value: %r", length_header)
                raise HttpParseError(f"invalid Content-Length: {length_header!r}")
            body_start = head_end + len(_HEAD_END)
            available = len(raw) - body_start
            length = int(match.group(2))
            if match.group(1) == "-" and length > 0 or length > available:
                logger.error(
                    "Incomplete request body. Expected %s bytes, but only %d available.",
                    length_header,
                    available,
                )
                raise HttpParseError("incomplete request body")
            request.body = raw[body_start : body_start + length].decode(
                "utf-8", errors="replace"
            )

        return request

    def has_header(self, key: str) -> bool:
        """Whether the header is present, ignoring case."""
        return key in self.headers

    def header(self, key: str) -> str | None:
        """The value of a header, ignoring case, or None."""
        return self.headers.get(key)

    def has_query_param(self, key: str) -> bool:
        """Whether the query parameter is present."""
        return key in self.query_params

    def query_param(self, key: str) -> str | None:
        """The value of a query parameter, or None."""
        return self.query_params.get(key)

    def has_cookie(self, key: str) -> bool:
        """Whether the cookie is present."""
        return key in self.cookies

    def cookie(self, key: str) -> str | None:
        """The value of a cookie, or None."""
        return self.cookies.get(key)


def _parse_query(query: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        key = url_decode(key)
        if key:
            params[key] = url_decode(value)
    return params


def _parse_cookies(text: str) -> dict[str, str]:
    cookies: dict[str, str] = {}
    for pair in text.split(";"):
        key, sep, value = pair.lstrip(" \t").partition("=")
        if sep and key:
            cookies[key] = value
    return cookies