"""Storage of chat rooms and their members."""

from __future__ import annotations

import logging
import secrets
import sqlite3
import time
from typing import Any, Sequence

from swiftchat.database import DatabaseConnection, DatabaseError

logger = logging.getLogger(__name__)


class RoomRepository:
    """Reads and writes the ``rooms`` and ``room_members`` tables."""

    def __init__(self, db: DatabaseConnection) -> None:
        self._db = db

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._db.lock:
            try:
                return self._db.connection.execute(sql, params)
            except sqlite3.Error as exc:
                logger.error("SQL error: %s", exc)
                raise DatabaseError(str(exc)) from exc

    def create_room(self, name: str, creator_id: str) -> dict[str, Any]:
        """Create a room and return it; a duplicate name raises DatabaseError."""
        with self._db.lock:
            room_id = self.generate_room_id()
            try:
                self._execute(
                    "INSERT INTO rooms (id, name, creator_id, created_at) VALUES (?, ?, ?, ?);",
                    (room_id, name, creator_id, time.time_ns()),
                )
            except DatabaseError:
                logger.error("Failed to create room %r, possibly due to duplicate name", name)
                raise
            room = self.get_room_by_id(room_id)
        if room is None:
            raise DatabaseError(f"room {room_id!r} vanished after creation")
        return room

    def delete_room(self, room_id: str) -> None:
        """Delete a room by id; deleting an unknown room does nothing."""
        self._execute("DELETE FROM rooms WHERE id = ?;", (room_id,))

    def room_exists(self, room_id: str) -> bool:
        """Whether a room with this id exists."""
        (count,) = self._execute("SELECT COUNT(*) FROM rooms WHERE id = ?;", (room_id,)).fetchone()
        return count > 0

    def update_room(self, room_id: str, name: str, description: str) -> None:
        """Set the name and description of a room."""
        self._execute(
            "UPDATE rooms SET name = ?, description = ? WHERE id = ?;",
            (name, description, room_id),
        )

    def get_rooms(self) -> list[str]:
        """Names of all rooms."""
        return [name for (name,) in self._execute("SELECT name FROM rooms;").fetchall()]

    def get_all_rooms(self) -> list[dict[str, Any]]:
        """All rooms with their member counts, newest first."""
        rows = self._execute(
            "SELECT id, name, description, creator_id, created_at, "
            "(SELECT COUNT(*) FROM room_members WHERE room_id = rooms.id) AS member_count "
            "FROM rooms ORDER BY created_at DESC;"
        ).fetchall()
        return [
            {
                "id": room_id,
                "name": name,
                "description": description or "",
                "creator_id": creator_id,
                "created_at": created_at,
                "member_count": member_count,
            }
            for room_id, name, description, creator_id, created_at, member_count in rows
        ]

    def get_room_by_id(self, room_id: str) -> dict[str, Any] | None:
        """The room with this id, or None if there is none."""
        row = self._execute(
            "SELECT id, name, description, creator_id, created_at FROM rooms WHERE id = ?;",
            (room_id,),
        ).fetchone()
        if row is None:
            return None
        found_id, name, description, creator_id, created_at = row
        return {
            "roomid": found_id,
            "name": name,
            "description": description or "",
            "creator_id": creator_id,
            "created_at": created_at,
        }

    def get_room_id_by_name(self, room_name: str) -> str | None:
        """The id of the room with this name, or None if there is none."""
        row = self._execute("SELECT id FROM rooms WHERE name = ?;", (room_name,)).fetchone()
        if row is None:
            logger.warning("No room found with name: %r", room_name)
            return None
        return row[0]

    def is_room_creator(self, room_id: str, user_id: str) -> bool:
        """Whether the user created the room."""
        (count,) = self._execute(
            "SELECT COUNT(*) FROM rooms WHERE id = ? AND creator_id = ?;",
            (room_id, user_id),
        ).fetchone()
        return count > 0

    def get_room_members(self, room_id: str) -> list[dict[str, Any]]:
        """Members of a room with their online state and join time."""
        rows = self._execute(
            "SELECT u.id, u.username, u.is_online, rm.joined_at FROM room_members rm "
            "JOIN users u ON rm.user_id = u.id WHERE rm.room_id = ?;",
            (room_id,),
        ).fetchall()
        return [
            {
                "id": user_id,
                "username": username,
                "is_online": bool(is_online and is_online > 0),
                "joined_at": joined_at,
            }
            for user_id, username, is_online, joined_at in rows
        ]

    def add_room_member(self, room_id: str, user_id: str) -> None:
        """Add a user to a room; adding an existing member does nothing."""
        self._execute(
            "INSERT OR IGNORE INTO room_members (room_id, user_id, joined_at) VALUES (?, ?, ?);",
            (room_id, user_id, time.time_ns()),
        )

    def remove_room_member(self, room_id: str, user_id: str) -> None:
        """Remove a user from a room."""
        self._execute(
            "DELETE FROM room_members WHERE room_id = ? AND user_id = ?;",
            (room_id, user_id),
        )

    def generate_room_id(self) -> str:
        """A fresh random room id of the form ``room_`` plus eight hex digits."""
        return "room_" + secrets.token_hex(4)