"""Chat room and message storage on SQLite and a small threaded HTTP/1.1 server."""

__version__ = "0.1.0"