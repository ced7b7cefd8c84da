# tinyredis

tinyredis is a small in-memory key-value server. It speaks the Redis
serialization protocol (RESP). Clients send each command as a RESP array of
bulk strings, for example `*1\r\n$4\r\nPING\r\n`. Command names are not
case-sensitive.

## Running

```
pip install .
tinyredis
```

The command takes no options. You can also start it with
`python -m tinyredis.main`.

At startup the server looks for a file named `redis.conf` in the current
directory:

- If the file is missing, the server listens on `0.0.0.0:6379`.
- If the file exists, only the settings written in it are used. A missing
  `bind` becomes an empty host, which means all interfaces. A missing `port`
  becomes `0`, so the operating system picks a port.

Log lines go to standard output and to a daily file in `logs/`, for example
`logs/godis-2024-01-31.log`. The directory is created if it does not exist.

To stop the server, send SIGINT (Ctrl-C), SIGTERM, SIGQUIT or SIGHUP. The
server then stops accepting connections, disconnects its clients and exits.
If the address cannot be bound, the error is logged and the command exits
with status 1.

## Configuration

`redis.conf` holds one `key value` pair per line. Lines that start with `#`
are ignored, and keys are not case-sensitive. The server reads these keys:

| key              | type                     |
|------------------|--------------------------|
| `bind`           | string                   |
| `port`           | integer                  |
| `databases`      | integer (0 means 16)     |
| `appendOnly`     | `yes` means true         |
| `appendFilename` | string                   |
| `maxclients`     | integer                  |
| `requirepass`    | string                   |
| `peers`          | comma-separated list     |
| `self`           | string                   |

An integer that cannot be parsed is ignored. All keys are stored in
`tinyredis.config.properties`, but the server only acts on `bind`, `port` and
`databases`.

Example:

```
bind 127.0.0.1
port 6380
databases 4
```

## Commands

- `PING`: replies `+PONG`.
- `SELECT index`: switches the client to another logical database.
- `GET key`: returns the value, or nil if the key does not exist.
- `SET key value`: stores the value.
- `SETNX key value`: stores the value only if the key does not exist. Replies
  `1` if it stored the value, `0` otherwise.
- `GETSET key value`: stores the new value and returns the old one, or nil.
- `STRLEN key`: returns the length of the value, or nil if the key does not
  exist.
- `DEL key [key ...]`: returns how many of the keys it deleted.
- `EXISTS key [key ...]`: returns how many of the keys exist.
- `TYPE key`: replies `string` or `none`.
- `RENAME src dst`: renames the key. Fails with `No such entity` if `src` is
  missing.
- `RENAMENX src dst`: renames the key only if `dst` does not exist. Replies
  `1` if it renamed the key, `0` otherwise.
- `KEYS pattern`: returns the matching keys. Patterns support `*`, `?`,
  `[abc]`, `[a-c]`, `[^a]` and `\` escapes.
- `FLUSHDB`: deletes every key in the selected database.

Any other command gets an `Err unknown command` error. A wrong number of
arguments gets a `wrong number of arguments` error.

## What it does not do

- Data lives only in memory. Nothing is written to disk, and all keys are lost
  when the server stops.
- `requirepass` is not checked. Every client can run every command.
- `maxclients` is not enforced.
- `peers` and `self` are read but do nothing. There is no clustering.
- Keys do not expire.
- Values are plain strings only. There are no lists, hashes or sets.

## Using it as a library

You can use the building blocks directly from Python.

Match keys against a pattern:

```python
from tinyredis.wildcard import compile_pattern

compile_pattern("user:*").is_match("user:42")   # True
```

Encode a reply in RESP:

```python
from tinyredis.reply import MultiBulkReply

MultiBulkReply([b"a", b"bc"]).to_bytes()  # b"*2\r\n$1\r\na\r\n$2\r\nbc\r\n"
```

Parse a RESP byte stream. When the stream ends, the last payload carries an
`EOFError` in `err`:

```python
import io
from tinyredis.parser import parse_stream

for payload in parse_stream(io.BytesIO(b"*1\r\n$4\r\nPING\r\n")):
    print(payload.data, payload.err)
```

Run commands without a network. The client can be any object with a
`db_index` attribute:

```python
from types import SimpleNamespace
from tinyredis.database import Database

db = Database()
client = SimpleNamespace(db_index=0)
db.exec(client, [b"SET", b"k", b"v"]).to_bytes()  # b"+OK\r\n"
db.exec(client, [b"GET", b"k"]).to_bytes()        # b"$1\r\nv\r\n"
```

Other pieces you can use:

- `tinyredis.db.DB` is a single keyspace.
- `tinyredis.syncdict.SyncDict` is the thread-safe dictionary behind each
  keyspace.
- `tinyredis.handler.RespHandler` serves RESP over a socket. Pass it a
  `db=` argument to use another backend, such as
  `tinyredis.database.EchoDatabase`, which replies to every command with its
  own arguments.
- `tinyredis.server.listen_and_serve` accepts connections on a listening
  socket and gives each one to a handler in its own thread. It runs until a
  `threading.Event` is set.
- `tinyredis.server.EchoHandler` is a handler that writes every line it
  receives back to the client.