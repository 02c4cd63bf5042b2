# svckit

A set of small building blocks for writing web services.

| Module | What it does |
| --- | --- |
| `svckit.env` | Loads `.env` content and files into the process environment |
| `svckit.envconf` | Reads environment variables into a dataclass |
| `svckit.hostutil` | Builds `host:port` addresses and fills in a default port |
| `svckit.httpd` | A WSGI HTTP server that you run, unbind and stop |
| `svckit.idgen` | UUID, condensed UUID and short ID generators |
| `svckit.slog` | A structured console logger |
| `svckit.route` | JSON route handlers that record errors for middleware |
| `svckit.router` | A small WSGI router with middleware support |

## Installation

```
pip install svckit
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "svckit[test]"
pytest
```

## Loading .env files

```python
from svckit import env

env.auto_load("LOG_LEVEL=info\n")
```

`auto_load` applies the default content first. It then reads `.env.<selector>.local` and after that
`.env.local` from the working directory. A missing file is skipped. If no selector is passed, it is
taken from the `ENV` variable, and it falls back to `dev` when `ENV` is empty. You can pass your own
`env.Loader(setter, getwd, file_reader)` to decide where values are written and how files are read.

Lines take the form `KEY=value`. Everything from the first `#` onwards is a comment. A value may be
wrapped in one pair of single or double quotes. Lines with no `=` or no key are ignored.

## Typed configuration

```python
from dataclasses import dataclass
from svckit.envconf import env_field, parse

@dataclass
class Settings:
    port: str = env_field("PORT", "8080")
    debug: bool = env_field("DEBUG", False)

settings = parse(Settings)                     # reads os.environ
settings = parse(Settings, {"DEBUG": "yes"})   # or any mapping
```

The supported field types are `str`, `bool`, `int` and `float`. Boolean fields accept `on`, `yes`,
`off` and `no`, and also the usual `true`/`false`, `1`/`0` and `t`/`f` spellings. A field whose
variable is unset keeps its default. If it has no default, it gets the zero value of its type. A
value that cannot be converted raises `EnvConfigError`.

## Host addresses

```python
from svckit.hostutil import compose_address, compose_address_list, new_host_port

compose_address("server:", "", "8080")          # "server:8080"
compose_address("server:1234", "9090", "8080")  # "server:1234"
compose_address_list("a;b:9000", "", "8080")    # ["a:8080", "b:9000"]
new_host_port("", "", "8080")                   # HostPort(host="", port="8080")
```

A port written in the address wins over `port`, and `port` wins over `default_port`. An empty
`default_port` raises `ValueError`.

## HTTP server

```python
from svckit.httpd import Config, Server
from svckit.router import Router

router = Router()
server = Server(Config(interface="127.0.0.1", port="8080"), router)
print(server.address())
server.run()   # blocks; call server.stop() or server.unbind() from another thread
```

The socket is bound when the `Server` is created. An empty port picks a free one. `stop()` waits up
to the shutdown timeout for serving to finish, and calling it a second time is harmless. `unbind()`
closes the listening socket, and raises `ServerError` if the socket is already closed. A timeout of
0 means the default value, and `DISABLED_TIMEOUT` turns a timeout off.

## Routes and the router

```python
from dataclasses import dataclass
from svckit.route import handle, handle_void
from svckit.router import Router

@dataclass
class In:
    id: str
    name: str

def create(ctx, payload: In) -> dict:
    ctx.created()
    return {"id": payload.id}

def middleware(exchange):
    exchange.headers["X-Served-By"] = "svckit"
    exchange.next()

router = Router(middleware)
router.post("/items", handle(create, In))
router.delete("/items/:id", handle_void(lambda ctx: ctx.no_content()))
router.get_routes()   # [RouteInfo("POST", "/items"), RouteInfo("DELETE", "/items/:id")]
```

`handle`, `handle_in`, `handle_out` and `handle_void` decode the JSON request body and call your
function with a `Context`. When there is a result, they write it as JSON with the content type
`application/json; charset=utf-8`. If the body is not valid JSON, or your function raises, the
error is recorded on the exchange (`exchange.errors`, `exchange.last_error`) and the chain is
aborted. No error status or body is written, so middleware that runs after `exchange.next()` can
decide how to respond. A decoding failure is recorded as a `BadJSONError`.

Path parameters are written `:name`, and a catch-all parameter `*name` can only be the last
segment. Requests that match no route get `404 page not found`.

## IDs and logging

```python
from svckit.idgen import CondensedUUIDGenerator, ShortIDGenerator, UUIDGenerator
from svckit import slog

UUIDGenerator().generate_id()            # canonical UUID string
CondensedUUIDGenerator().generate_id()   # 26 lowercase base32 characters
ShortIDGenerator().generate_id()         # short URL-friendly ID

slog.info().field("user", "alice").msg("signed in")
# 2024-01-01T00:00:00Z INF signed in user=alice

with slog.with_context() as logger:
    slog.from_context().warn().msg("inside")
```

`from_context()` returns a logger that writes nothing when no logger has been set with
`with_context`.

## What the package does not do

There is no command-line program, and there is no storage or database layer. The server speaks
plain HTTP only, without TLS. The package ships no test helpers for repositories or for checking
mappings.