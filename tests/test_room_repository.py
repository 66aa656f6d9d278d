import re

import pytest

from swiftchat.database import DatabaseConnection, DatabaseError
from swiftchat.room_repository import RoomRepository


@pytest.fixture
def db():
    conn = DatabaseConnection(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def repo(db):
    return RoomRepository(db)


def add_user(db, user_id, username, is_online=0):
    db.connection.execute(
        "INSERT INTO users (id, username, password_hash, created_at, is_online) "
        "VALUES (?, ?, ?, ?, ?);",
        (user_id, username, "hash", 1, is_online),
    )


def test_create_room_returns_stored_room(repo):
    room = repo.create_room("lobby", "u1")
    assert room["name"] == "lobby"
    assert room["creator_id"] == "u1"
    assert room["description"] == ""
    assert room["created_at"] > 0
    assert repo.get_room_by_id(room["roomid"]) == room


def test_create_room_duplicate_name_raises(repo):
    repo.create_room("lobby", "u1")
    with pytest.raises(DatabaseError):
        repo.create_room("lobby", "u2")


def test_room_exists_and_delete(repo):
    room = repo.create_room("games", "u1")
    assert repo.room_exists(room["roomid"]) is True
    repo.delete_room(room["roomid"])
    assert repo.room_exists(room["roomid"]) is False
    assert repo.get_room_by_id(room["roomid"]) is None


def test_room_exists_unknown(repo):
    assert repo.room_exists("room_missing") is False


def test_update_room(repo):
    room = repo.create_room("old", "u1")
    repo.update_room(room["roomid"], "new", "a better name")
    updated = repo.get_room_by_id(room["roomid"])
    assert updated["name"] == "new"
    assert updated["description"] == "a better name"
    assert updated["created_at"] == room["created_at"]


def test_get_rooms_lists_names(repo):
    repo.create_room("alpha", "u1")
    repo.create_room("beta", "u1")
    assert sorted(repo.get_rooms()) == ["alpha", "beta"]


def test_get_all_rooms_newest_first_with_member_count(db, repo):
    first = repo.create_room("first", "u1")
    second = repo.create_room("second", "u1")
    db.connection.execute("UPDATE rooms SET created_at = 100 WHERE id = ?;", (first["roomid"],))
    db.connection.execute("UPDATE rooms SET created_at = 200 WHERE id = ?;", (second["roomid"],))
    add_user(db, "u1", "alice")
    add_user(db, "u2", "bob")
    repo.add_room_member(first["roomid"], "u1")
    repo.add_room_member(first["roomid"], "u2")

    rooms = repo.get_all_rooms()
    assert [r["id"] for r in rooms] == [second["roomid"], first["roomid"]]
    assert [r["member_count"] for r in rooms] == [0, 2]
    assert rooms[1]["name"] == "first"


def test_get_room_id_by_name(repo):
    room = repo.create_room("music", "u1")
    assert repo.get_room_id_by_name("music") == room["roomid"]
    assert repo.get_room_id_by_name("nothing") is None


def test_is_room_creator(repo):
    room = repo.create_room("mine", "u1")
    assert repo.is_room_creator(room["roomid"], "u1") is True
    assert repo.is_room_creator(room["roomid"], "u2") is False


def test_members_add_remove(db, repo):
    add_user(db, "u1", "alice", is_online=1)
    add_user(db, "u2", "bob", is_online=0)
    room = repo.create_room("chat", "u1")
    repo.add_room_member(room["roomid"], "u1")
    repo.add_room_member(room["roomid"], "u2")
    repo.add_room_member(room["roomid"], "u1")

    members = {m["id"]: m for m in repo.get_room_members(room["roomid"])}
    assert set(members) == {"u1", "u2"}
    assert members["u1"]["username"] == "alice"
    assert members["u1"]["is_online"] is True
    assert members["u2"]["is_online"] is False
    assert members["u1"]["joined_at"] > 0

    repo.remove_room_member(room["roomid"], "u1")
    assert [m["id"] for m in repo.get_room_members(room["roomid"])] == ["u2"]


def test_generate_room_id_format(repo):
    ids = {repo.generate_room_id() for _ in range(20)}
    assert all(re.fullmatch(r"room_[0-9a-f]{8}", room_id) for room_id in ids)
    assert len(ids) > 1


def test_closed_database_raises(db, repo):
    db.close()
    with pytest.raises(DatabaseError):
        repo.room_exists("room_x")