"""Chat user record and its JSON form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass
class User:
    """A chat user as stored and exchanged by the server."""

    id: str = ""
    username: str = ""
    password: str = ""
    is_online: bool = False
    last_active_time: int = 0

    def to_json(self) -> dict[str, Any]:
        """The user as a JSON-ready dictionary."""
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "is_online": self.is_online,
            "last_active_time": self.last_active_time,
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> User:
        """Build a user from a JSON object.

        ``username``, ``password`` and ``is_online`` are required; a missing
        one raises KeyError and a value of the wrong type raises TypeError.
        ``id`` defaults to an empty string and ``last_active_time`` to 0.
        """
        username = data["username"]
        password = data["password"]
        is_online = data["is_online"]
        user_id = data.get("id", "")
        last_active_time = data.get("last_active_time", 0)

        for field, value in (("id", user_id), ("username", username), ("password", password)):
            if not isinstance(value, str):
                raise TypeError(f"{field!r} must be a string, not {type(value).__name__}")
        if not isinstance(is_online, bool):
            raise TypeError(f"'is_online' must be a boolean, not {type(is_online).__name__}")
        if isinstance(last_active_time, bool) or not isinstance(last_active_time, int):
            raise TypeError(
                f"'last_active_time' must be an integer, not {type(last_active_time).__name__}"
            )

        return cls(
            id=user_id,
            username=username,
            password=password,
            is_online=is_online,
            last_active_time=last_active_time,
        )