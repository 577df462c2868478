"""
body.py - Read access to an already decoded request body

JSONBody is what the downstream app receives in place of the request's body
stream. It holds the decoded document in memory and, when awaited as an ASGI
receive callable, replays the original bytes so code that reads the raw body
(Starlette's request.body() / request.json()) still sees what the client sent.

Business Rules:
- The decoded value is never re-parsed and never changes once constructed
- Reading the raw stream has no effect on the decoded value
- Typed getters check the JSON kind and raise JSONTypeError on mismatch

Called by: jsonbody/middleware.py, jsonbody/dependencies.py, route handlers
Depends on: jsonbody/validate.py (MISSING, json_kind), jsonbody/exceptions.py
"""

from __future__ import annotations

from typing import Any, Union

from starlette.types import Message, Receive, Scope

from .exceptions import JSONTypeError
from .validate import MISSING, json_kind

JSONValue = Union[None, bool, int, float, str, dict[str, Any], list[Any]]

SCOPE_KEY = "jsonbody.body"

_NO_DEFAULT = object()


class JSONBody:
    """The decoded request body plus a replay of its raw bytes."""

    def __init__(self, raw: bytes, value: Any = MISSING, receive: Receive | None = None):
        self.raw = raw
        self._value = value
        self._receive = receive
        self._replayed = False

    def __repr__(self) -> str:
        return f"JSONBody({self._value!r})"

    @property
    def json(self) -> JSONValue:
        """The decoded document, or MISSING when the request had no body."""
        return self._value

    @property
    def present(self) -> bool:
        return self._value is not MISSING

    async def __call__(self) -> Message:
        if not self._replayed:
            self._replayed = True
            return {"type": "http.request", "body": self.raw, "more_body": False}
        if self._receive is not None:
            return await self._receive()
        return {"type": "http.disconnect"}

    # ── Typed access ────────────────────────────────────────────────

    def as_object(self) -> dict[str, Any]:
        """The whole body as a mapping. Raises JSONTypeError if it is not an object."""
        if not isinstance(self._value, dict):
            raise JSONTypeError(
                f"request body is of type {json_kind(self._value) if self.present else 'missing'}, not object"
            )
        return self._value

    def get_str(self, key: str, default: Any = _NO_DEFAULT) -> str:
        return self._get(key, "string", default)

    def get_bool(self, key: str, default: Any = _NO_DEFAULT) -> bool:
        return self._get(key, "boolean", default)

    def get_number(self, key: str, default: Any = _NO_DEFAULT) -> int | float:
        return self._get(key, "number", default)

    def get_object(self, key: str, default: Any = _NO_DEFAULT) -> dict[str, Any]:
        return self._get(key, "object", default)

    def get_array(self, key: str, default: Any = _NO_DEFAULT) -> list[Any]:
        return self._get(key, "array", default)

    def _get(self, key: str, kind: str, default: Any) -> Any:
        root = self.as_object()
        if key not in root:
            if default is _NO_DEFAULT:
                raise KeyError(key)
            return default
        value = root[key]
        actual = json_kind(value)
        if actual != kind:
            raise JSONTypeError(f"value for key '{key}' is of type {actual}, not {kind}")
        return value


def body_from_scope(scope: Scope) -> JSONBody:
    """Return the JSONBody the middleware stored on this request's scope."""
    try:
        return scope[SCOPE_KEY]
    except KeyError:
        raise LookupError("no JSON body on this request; is JSONBodyMiddleware installed?") from None
