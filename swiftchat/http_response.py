"""HTTP responses built step by step and written out as raw bytes."""

from __future__ import annotations

import json
import time
from email.utils import formatdate
from typing import Any

_STATUS_TEXTS: dict[int, str] = {
    200: "OK",
    201: "Created",
    302: "Found",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    500: "Internal Server Error",
}


def status_text(code: int) -> str:
    """The reason phrase for a status code, or ``Unknown``."""
    return _STATUS_TEXTS.get(code, "Unknown")


def http_date(when: float | None = None) -> str:
    """An HTTP date (``Thu, 01 Jan 1970 00:00:00 GMT``) for an epoch time, default now."""
    return formatdate(time.time() if when is None else when, usegmt=True)


class HttpResponse:
    """An HTTP/1.1 response; the ``with_*`` methods change it and return it."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body = b""
        self.headers: dict[str, str] = {
            "Server": "SwiftChat/1.0",
            "Date": http_date(),
            "Connection": "close",
        }

    def with_status(self, code: int) -> HttpResponse:
        """Set the status code."""
        self.status_code = code
        return self

    def with_header(self, key: str, value: str) -> HttpResponse:
        """Set a header, replacing any earlier value."""
        self.headers[key] = value
        return self

    def with_body(self, body: str | bytes, content_type: str = "text/plain") -> HttpResponse:
        """Set the body and its content type; text is encoded as UTF-8."""
        self.body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self.headers["Content-Type"] = content_type
        return self

    def with_json_body(self, data: Any) -> HttpResponse:
        """Set a compact JSON body."""
        text = json.dumps(data, separators=(",", ":"), ensure_ascii=False, sort_keys=True)
        return self.with_body(text, "application/json; charset=utf-8")

    @classmethod
    def ok(cls, body: str | bytes = "OK") -> HttpResponse:
        """200 with a plain-text body."""
        return cls().with_status(200).with_body(body)

    @classmethod
    def created(cls, body: str = "Created") -> HttpResponse:
        """201 with ``{"message": body}``."""
        return cls().with_status(201).with_json_body({"message": body})

    @classmethod
    def _error(cls, code: int, message: str) -> HttpResponse:
        return cls().with_status(code).with_json_body({"error": message})

    @classmethod
    def bad_request(cls, message: str = "Bad Request") -> HttpResponse:
        """400 with ``{"error": message}``."""
        return cls._error(400, message)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> HttpResponse:
        """401 with ``{"error": message}``."""
        return cls._error(401, message)

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> HttpResponse:
        """403 with ``{"error": message}``."""
        return cls._error(403, message)

    @classmethod
    def not_found(cls, message: str = "Not Found") -> HttpResponse:
        """404 with ``{"error": message}``."""
        return cls._error(404, message)

    @classmethod
    def internal_error(cls, message: str = "Internal Server Error") -> HttpResponse:
        """500 with ``{"error": message}``."""
        return cls._error(500, message)

    @classmethod
    def no_content(cls) -> HttpResponse:
        """204 with an empty body."""
        return cls().with_status(204).with_body("")

    def serialize(self) -> bytes:
        """The response as it is sent on the wire."""
        lines = [
            f"HTTP/1.1 {self.status_code} {status_text(self.status_code)}",
            f"Content-Length: {len(self.body)}",
        ]
        lines.extend(
            f"{key}: {value}"
            for key, value in self.headers.items()
            if key.lower() != "content-length"
        )
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body