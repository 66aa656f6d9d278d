"""One entry point to the chat database and its repositories."""

from __future__ import annotations

from os import PathLike
from types import TracebackType
from typing import Any

from swiftchat.database import DatabaseConnection
from swiftchat.message_repository import MessageRepository
from swiftchat.room_repository import RoomRepository


class DatabaseManager:
    """Owns a database connection and the room and message repositories on it.

    Opening fails with DatabaseError if the database cannot be opened or its
    tables cannot be created.
    """

    def __init__(self, db_path: str | PathLike[str]) -> None:
        self._conn = DatabaseConnection(db_path)
        self.rooms = RoomRepository(self._conn)
        self.messages = MessageRepository(self._conn)

    def is_connected(self) -> bool:
        """Whether the underlying database is still open."""
        return self._conn.is_connected()

    def close(self) -> None:
        """Close the database; closing twice does nothing."""
        self._conn.close()

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # Rooms

    def create_room(self, name: str, creator_id: str) -> dict[str, Any]:
        """Create a room and return it."""
        return self.rooms.create_room(name, creator_id)

    def delete_room(self, room_id: str) -> None:
        """Delete a room by id."""
        self.rooms.delete_room(room_id)

    def room_exists(self, room_id: str) -> bool:
        """Whether a room with this id exists."""
        return self.rooms.room_exists(room_id)

    def get_rooms(self) -> list[str]:
        """Names of all rooms."""
        return self.rooms.get_rooms()

    def get_all_rooms(self) -> list[dict[str, Any]]:
        """All rooms with their member counts, newest first."""
        return self.rooms.get_all_rooms()

    def get_room_by_id(self, room_id: str) -> dict[str, Any] | None:
        """The room with this id, or None."""
        return self.rooms.get_room_by_id(room_id)

    def get_room_id_by_name(self, room_name: str) -> str | None:
        """The id of the room with this name, or None."""
        return self.rooms.get_room_id_by_name(room_name)

    def generate_room_id(self) -> str:
        """A fresh random room id."""
        return self.rooms.generate_room_id()

    def update_room(self, room_id: str, name: str, description: str) -> None:
        """Set the name and description of a room."""
        self.rooms.update_room(room_id, name, description)

    def is_room_creator(self, room_id: str, user_id: str) -> bool:
        """Whether the user created the room."""
        return self.rooms.is_room_creator(room_id, user_id)

    # Room members

    def get_room_members(self, room_id: str) -> list[dict[str, Any]]:
        """Members of a room."""
        return self.rooms.get_room_members(room_id)

    def add_room_member(self, room_id: str, user_id: str) -> None:
        """Add a user to a room."""
        self.rooms.add_room_member(room_id, user_id)

    def remove_room_member(self, room_id: str, user_id: str) -> None:
        """Remove a user from a room."""
        self.rooms.remove_room_member(room_id, user_id)

    # Messages

    def save_message(self, room_id: str, user_id: str, content: str, timestamp: int) -> int:
        """Store a message and return its id."""
        return self.messages.save_message(room_id, user_id, content, timestamp)

    def get_messages(
        self, room_id: str, limit: int = 50, before_timestamp: int = 0
    ) -> list[dict[str, Any]]:
        """Messages of a room in ascending time order."""
        return self.messages.get_messages(room_id, limit, before_timestamp)