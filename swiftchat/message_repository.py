"""Storage and retrieval of chat messages."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from swiftchat.database import DatabaseConnection, DatabaseError

logger = logging.getLogger(__name__)


class MessageRepository:
    """Reads and writes rows of the ``messages`` table."""

    def __init__(self, db: DatabaseConnection) -> None:
        self._db = db

    def save_message(self, room_id: str, user_id: str, content: str, timestamp: int) -> int:
        """Store a message and return its new id."""
        with self._db.lock:
            try:
                cursor = self._db.connection.execute(
                    "INSERT INTO messages (room_id, user_id, content, timestamp) "
                    "VALUES (?, ?, ?, ?);",
                    (room_id, user_id, content, timestamp),
                )
            except sqlite3.Error as exc:
                logger.error("Failed to save message: %s", exc)
                raise DatabaseError(str(exc)) from exc
            return int(cursor.lastrowid)

    def get_messages(
        self, room_id: str, limit: int = 50, before_timestamp: int = 0
    ) -> list[dict[str, Any]]:
        """Messages of a room in ascending time order, with their senders.

        A positive ``before_timestamp`` keeps only messages at or after that
        time; a positive ``limit`` caps the number returned.
        """
        sql = (
            "SELECT m.id, m.content, m.timestamp, u.id, u.username "
            "FROM messages m "
            "JOIN users u ON m.user_id = u.id "
            "WHERE m.room_id = ?"
        )
        params: list[Any] = [room_id]
        if before_timestamp > 0:
            sql += " AND m.timestamp >= ?"
            params.append(before_timestamp)
        sql += " ORDER BY m.timestamp ASC"
        if limit > 0:
            sql += " LIMIT ?"
            params.append(limit)

        with self._db.lock:
            try:
                rows = self._db.connection.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                logger.error("Failed to load messages: %s", exc)
                raise DatabaseError(str(exc)) from exc

        return [
            {
                "id": message_id,
                "content": content,
                "timestamp": timestamp,
                "sender": {"id": sender_id, "username": username},
            }
            for message_id, content, timestamp, sender_id, username in rows
        ]