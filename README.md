# swiftchat

Building blocks for a small chat service, using only the standard library.

- `swiftchat.database`: `DatabaseConnection` opens an SQLite database and
  creates the `users`, `rooms`, `room_members` and `messages` tables.
- `swiftchat.room_repository`: `RoomRepository` creates, updates, lists and
  deletes rooms and manages their members.
- `swiftchat.message_repository`: `MessageRepository` stores and reads
  messages.
- `swiftchat.database_manager`: `DatabaseManager` opens a database and offers
  the room and message operations behind one object.
- `swiftchat.user`: the `User` dataclass and its JSON form.
- `swiftchat.http_request`: `HttpRequest.parse` and `url_decode`.
- `swiftchat.http_response`: `HttpResponse`, `status_text` and `http_date`.
- `swiftchat.http_server`: `HttpServer`, `Route` and the `MIME_TYPES` table.

Install with `pip install .`; the tests need the `test` extra
(`pip install .[test]`) and run with `pytest`.

## Storage

Every failing SQLite statement, and a database that cannot be opened, raises
`swiftchat.database.DatabaseError`. A `DatabaseConnection` carries a
re-entrant `lock` and may be shared between threads; its `connection`
property is the underlying `sqlite3.Connection`.

```python
from swiftchat.database import DatabaseConnection
from swiftchat.message_repository import MessageRepository
from swiftchat.room_repository import RoomRepository

with DatabaseConnection("chat.db") as db:
    password_hash = "placeholder"
    db.connection.execute(
        "INSERT INTO users (id, username, password_hash, created_at) VALUES (?, ?, ?, ?)",
        ("user_1", "alice", password_hash, 0),
    )

    rooms = RoomRepository(db)
    messages = MessageRepository(db)

    room = rooms.create_room("general", "user_1")
    room_id = room["roomid"]
    rooms.add_room_member(room_id, "user_1")
    message_id = messages.save_message(room_id, "user_1", "hello", 1700000000000)

    for message in messages.get_messages(room_id):
        print(message["sender"]["username"], message["content"])
```

Rooms:

- `create_room(name, creator_id)` returns the new room as
  `{"roomid", "name", "description", "creator_id", "created_at"}`; a name
  already in use raises `DatabaseError`. Room ids are `room_` followed by
  eight hex digits (`generate_room_id()`).
- `get_room_by_id(room_id)` returns the same shape, or `None`;
  `get_room_id_by_name(name)` returns the id or `None`.
- `get_rooms()` lists room names; `get_all_rooms()` lists rooms newest first
  as `{"id", "name", "description", "creator_id", "created_at",
  "member_count"}`.
- `room_exists`, `is_room_creator`, `update_room(room_id, name,
  description)` and `delete_room`.
- `add_room_member` (adding an existing member does nothing),
  `remove_room_member`, and `get_room_members(room_id)`, which returns
  `{"id", "username", "is_online", "joined_at"}` for each member.
- `created_at` and `joined_at` are set from the clock in nanoseconds since
  the epoch.

Messages:

- `save_message(room_id, user_id, content, timestamp)` returns the new
  message id.
- `get_messages(room_id, limit=50, before_timestamp=0)` returns messages
  oldest first as `{"id", "content", "timestamp", "sender": {"id",
  "username"}}`. A positive `limit` caps how many; a positive
  `before_timestamp` keeps only messages at or after that time.

Members and message senders are joined against the `users` table, so only
users that have a row there appear in `get_room_members` and `get_messages`.

`DatabaseManager(db_path)` opens the database and exposes the same room and
message methods directly, plus its `rooms` and `messages` repositories,
`is_connected()`, `close()` and use as a context manager:

```python
from swiftchat.database_manager import DatabaseManager

with DatabaseManager("chat.db") as db:
    room = db.create_room("random", "user_1")
    print(db.get_all_rooms())
```

`User` holds `id`, `username`, `password`, `is_online` and
`last_active_time`. `User.to_json()` gives a dictionary of those fields;
`User.from_json(data)` requires `username`, `password` and `is_online`
(raising `KeyError` when one is missing and `TypeError` for a value of the
wrong type) and defaults `id` to `""` and `last_active_time` to `0`.

## Parsing requests

```python
from swiftchat.http_request import HttpParseError, HttpRequest

raw = (
    "GET /api/rooms?name=general HTTP/1.1\r\n"
    "Host: localhost\r\n"
    "Cookie: session=token\r\n"
    "\r\n"
)
request = HttpRequest.parse(raw)
request.method                 # "GET"
request.path                   # "/api/rooms"
request.query_param("name")    # "general"
request.header("host")         # "localhost"
request.cookie("session")      # "token"
```

`parse` takes `str` or `bytes`. Header names are matched without regard to
case. Query keys and values are decoded with `url_decode` (`%XX` escapes and
`+` as a space). The body is read as exactly `Content-Length` bytes. A
request without the blank line ending its headers, with an empty or
malformed request line, with an invalid `Content-Length`, or with a body
shorter than its `Content-Length` raises `HttpParseError`.

## Building responses

```python
from swiftchat.http_response import HttpResponse

response = HttpResponse.ok("pong").with_header("X-Trace", "abc")
raw = response.serialize()   # bytes: status line, Content-Length, headers, body

error = HttpResponse.not_found("Room not found")   # 404, body {"error":"Room not found"}
```

Every response starts with `Server`, `Date` and `Connection: close` headers.
The chained setters are `with_status`, `with_header`, `with_body(body,
content_type="text/plain")` and `with_json_body`, which writes compact JSON
with sorted keys. The shortcuts are `ok`, `created`, `bad_request`,
`unauthorized`, `forbidden`, `not_found`, `internal_error` and `no_content`.
`Content-Length` is always computed from the body when serializing.
`status_text(code)` gives the reason phrase (or `Unknown`) and
`http_date(when=None)` formats an HTTP date.

## Serving HTTP

```python
import threading

from swiftchat.http_response import HttpResponse
from swiftchat.http_server import HttpServer, Route

with HttpServer(8080, 4, "127.0.0.1") as server:
    server.static_dir = "./public"
    server.add_route(
        Route(path="/ping", method="GET", handler=lambda request: HttpResponse.ok("pong"))
    )
    thread = threading.Thread(target=server.run)
    thread.start()
    ...
    server.stop()
    thread.join()
```

`HttpServer(port, thread_count=None, host="0.0.0.0")` binds and listens at
once; port `0` picks a free port, available afterwards as `server.port`.
`run()` accepts connections until `stop()` and hands each to a worker thread,
which reads a single request of up to 8 KiB, answers it and closes the
connection. Routes match on exact method and path, the first registered
winning. A route with `use_auth_middleware=True` is sent through
`server.middleware(request, handler)` when a middleware is set.

`OPTIONS` requests get a CORS preflight answer, and every response carries
CORS headers. `GET` requests that match no route are served from
`static_dir` (default `./static`, `/` mapping to `index.html`, content type
from `MIME_TYPES`); paths containing `..` are refused with 403 and missing
files get 404. Anything else gets 404, an unparsable request 400, and a
handler that raises 500.

## What is not included

- No user accounts: nothing here creates, looks up or checks users, or
  tracks whether they are online; rows in the `users` table have to be
  written directly through `DatabaseConnection.connection`.
- No authentication: no token handling and no middleware are supplied;
  `HttpServer.middleware` is only a hook.
- No chat API endpoints, no WebSocket support, and no command-line program
  to start a server; routes are registered from your own code.