"""
conftest.py - Shared test fixtures for jsonbody

Provides isolated Settings (no .env lookup), a recording downstream ASGI app,
a factory for TestClients wrapping JSONBodyMiddleware, a FastAPI app with the
middleware installed globally, and helpers for driving the middleware at the
raw ASGI level.

Called by: all test files via pytest autodiscovery
Depends on: jsonbody
"""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from jsonbody import JSONBody, JSONBodyMiddleware, ResponseWriter, Settings
from jsonbody.dependencies import get_json_body, get_response_writer

POST_SCHEMA = """{
    "title": "",        // required string
    "upvotes": 0,
    "?public": false,   // optional boolean
    "comments": [""],
    "author": {"name": ""},
    "metadata": {},
    "tags": []
}"""

VALID_POST = {
    "title": "Hello",
    "upvotes": 3,
    "comments": ["first", "second"],
    "author": {"name": "Ada"},
    "metadata": {"anything": [1, "two"]},
    "tags": [],
}


class RecordingApp:
    """Downstream ASGI app that records each call and answers 200 {"ok": true}."""

    def __init__(self):
        self.calls = []

    async def __call__(self, scope, receive, send):
        self.calls.append((scope, receive, send))
        await send.write_json(200, {"ok": True})

    @property
    def called(self) -> bool:
        return bool(self.calls)


def make_scope(method="POST", headers=None, path="/"):
    """Build a minimal ASGI http scope."""
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }


def body_receive(*chunks: bytes):
    """An ASGI receive callable yielding the given chunks, then disconnect."""
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive():
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def settings() -> Settings:
    """Default settings, ignoring any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture()
def downstream() -> RecordingApp:
    return RecordingApp()


@pytest.fixture()
def make_client(downstream, settings):
    """Factory: TestClient for JSONBodyMiddleware wrapping the recording app."""

    def _make(schemas=None, schema=None, app=None, **overrides):
        cfg = settings.model_copy(update=overrides) if overrides else settings
        mw = JSONBodyMiddleware(app or downstream, schemas, schema=schema, settings=cfg)
        return TestClient(mw)

    return _make


@pytest.fixture()
def api(settings) -> FastAPI:
    """FastAPI app with the middleware installed globally; POST is schema-checked."""
    app = FastAPI()
    app.add_middleware(JSONBodyMiddleware, schemas={"POST": POST_SCHEMA}, settings=settings)

    @app.post("/posts")
    async def create_post(body: JSONBody = Depends(get_json_body)):
        return {
            "title": body.get_str("title"),
            "public": body.get_bool("public", False),
            "tags": body.get_array("tags"),
        }

    @app.put("/raw")
    async def raw(request: Request):
        return {"raw": (await request.body()).decode(), "parsed": await request.json()}

    @app.put("/written")
    async def written(writer: ResponseWriter = Depends(get_response_writer)):
        await writer.write_json(201, {"created": True})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


@pytest.fixture()
def client(api) -> TestClient:
    with TestClient(api) as c:
        yield c
