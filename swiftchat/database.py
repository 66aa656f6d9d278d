"""SQLite connection holding the chat schema."""

from __future__ import annotations

import logging
import sqlite3
import threading
from os import PathLike
from types import TracebackType

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when the database cannot be opened or a statement fails."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id               TEXT    PRIMARY KEY,
    username         TEXT    UNIQUE NOT NULL,
    password_hash    TEXT    NOT NULL,
    created_at       INTEGER NOT NULL,
    is_online        INTEGER DEFAULT 0,
    last_active_time INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS rooms (
    id          TEXT    PRIMARY KEY,
    name        TEXT    UNIQUE NOT NULL,
    description TEXT    DEFAULT '',
    creator_id  TEXT    NOT NULL REFERENCES users (id),
    created_at  INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS room_members (
    room_id   TEXT    NOT NULL REFERENCES rooms (id),
    user_id   TEXT    NOT NULL REFERENCES users (id),
    joined_at INTEGER NOT NULL,
    PRIMARY KEY (room_id, user_id)
);

CREATE TABLE IF NOT EXISTS messages (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id   TEXT    NOT NULL REFERENCES rooms (id),
    user_id   TEXT    NOT NULL REFERENCES users (id),
    content   TEXT    NOT NULL,
    timestamp INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_users_username ON users (username);
CREATE INDEX IF NOT EXISTS idx_rooms_name ON rooms (name);
"""


class DatabaseConnection:
    """An open SQLite database with the chat tables created.

    The ``lock`` is re-entrant and guards every use of ``connection``,
    so one instance may be shared between threads.
    """

    def __init__(self, db_path: str | PathLike[str]) -> None:
        self.db_path = str(db_path)
        self.lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None
        with self.lock:
            try:
                self._conn = sqlite3.connect(
                    self.db_path, check_same_thread=False, isolation_level=None
                )
            except sqlite3.Error as exc:
                logger.error("Opening %s failed: %s", self.db_path, exc)
                raise DatabaseError(f"can't open database {self.db_path!r}: {exc}") from exc
            logger.info("Database %s opened", self.db_path)
        try:
            self.execute_script(_SCHEMA)
        except DatabaseError:
            logger.error("Schema setup failed for %s", self.db_path)
            self.close()
            raise
        logger.info("Schema ready in %s", self.db_path)

    def is_connected(self) -> bool:
        """Whether the database is still open."""
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying SQLite connection; raises if it has been closed."""
        if self._conn is None:
            raise DatabaseError("database is not connected")
        return self._conn

    def execute_script(self, sql: str) -> None:
        """Run one or more SQL statements without parameters."""
        with self.lock:
            try:
                self.connection.executescript(sql)
            except sqlite3.Error as exc:
                logger.error("Statement failed: %s", exc)
                raise DatabaseError(str(exc)) from exc

    def close(self) -> None:
        """Close the database; closing twice does nothing."""
        with self.lock:
            if self._conn is not None:
                logger.info("Closing database %s", self.db_path)
                self._conn.close()
                self._conn = None

    def __enter__(self) -> DatabaseConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()