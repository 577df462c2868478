"""
writer.py - Write-once JSON response helper

ResponseWriter wraps the ASGI send callable handed to the downstream app. Its
write_json / write_errors helpers encode a value, set the JSON content type
and send status plus body in one go, and refuse to run a second time.

Business Rules:
- At most one successful write per request; a second call raises AlreadyWrittenError
- A value that cannot be encoded raises EncodeError and sends nothing
- A transport failure raises TransportWriteError and leaves the writer unwritten,
  so the caller may retry; if the start message already went out, the retry
  sends only the body and the first status and headers stand
- Raw ASGI messages pass straight through until a response has been written;
  after that they are dropped, and a finished raw response also counts as the write

Called by: jsonbody/middleware.py, jsonbody/dependencies.py, route handlers
Depends on: jsonbody/schemas/errors.py, jsonbody/exceptions.py
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger
from starlette.types import Message, Scope, Send

from .exceptions import AlreadyWrittenError, EncodeError, TransportWriteError
from .schemas.errors import ErrorEnvelope

JSON_MEDIA_TYPE = "application/json"

SCOPE_KEY = "jsonbody.writer"


class ResponseWriter:
    """A single-use JSON response writer around an ASGI send callable."""

    def __init__(self, send: Send):
        self._send = send
        self.started = False
        self.written = False

    async def __call__(self, message: Message) -> None:
        if self.written:
            logger.warning("jsonbody: dropped {} sent after the response was written", message["type"])
            return
        await self._send(message)
        if message["type"] == "http.response.start":
            self.started = True
        elif message["type"] == "http.response.body" and not message.get("more_body", False):
            self.written = True

    async def write_json(self, status_code: int, value: Any) -> None:
        """Encode value as JSON and send it as the whole response.

        After a failed body send, call again with the same value: the start
        message (status, content-length) is not repeated.
        """
        if self.written:
            raise AlreadyWrittenError()

        try:
            payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning("jsonbody: failed to encode body: {}", e)
            raise EncodeError() from e
        body = payload.encode("utf-8")

        headers = [
            (b"content-type", JSON_MEDIA_TYPE.encode("latin-1")),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        try:
            if not self.started:
                await self._send({"type": "http.response.start", "status": status_code, "headers": headers})
                self.started = True
            await self._send({"type": "http.response.body", "body": body, "more_body": False})
        except Exception as e:
            logger.opt(exception=e).error("jsonbody: failed to write body")
            raise TransportWriteError() from e

        self.written = True

    async def write_errors(self, status_code: int, *messages: str) -> None:
        """Send {"errors": [...messages]} as the whole response."""
        envelope = ErrorEnvelope(errors=list(messages))
        await self.write_json(status_code, envelope.model_dump())


def writer_from_scope(scope: Scope) -> ResponseWriter:
    """Return the ResponseWriter the middleware stored on this request's scope."""
    try:
        return scope[SCOPE_KEY]
    except KeyError:
        raise LookupError("no response writer on this request; is JSONBodyMiddleware installed?") from None
