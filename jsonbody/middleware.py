"""
middleware.py - JSON request body gatekeeper

JSONBodyMiddleware sits in front of an ASGI app. For every HTTP request it
checks the declared content type, reads and decodes the body once, validates
it against the schema registered for the request method, and only then calls
the downstream app, with a JSONBody in place of the body stream and a
ResponseWriter in place of send. Any failure is answered here and the
downstream app never runs.

    app.add_middleware(JSONBodyMiddleware, schemas={"POST": '{"title": "", "?tags": [""]}'})

or per route, with a plain handler:

    Route("/posts", JSONBodyMiddleware(json_handler(create_post), schema=POST_SCHEMA),
          methods=["POST"])

Business Rules:
- Schemas are parsed in the constructor; a bad schema raises SchemaError at startup
- A schema may be JSON text, an already decoded document (dict/list) or a Template;
  anything else raises TypeError in the constructor
- A method with no schema accepts any JSON body, or none at all
- With a schema, a non-JSON Content-Type is a 400 and the body is not read
- A missing Content-Type is only rejected when settings.require_content_type is set
- A body that is not valid JSON is a 400, with or without a schema
- A failed read (including a client disconnect) is a 500 with no body
- Validation failures return every mismatch, not just the first
- The downstream app is called exactly once, and only for accepted requests

Called by: the host application (Starlette / FastAPI)
Depends on: template.py, validate.py, body.py, writer.py, config.py, exceptions.py
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Mapping

from loguru import logger
from starlette.requests import ClientDisconnect, Request
from starlette.types import ASGIApp, Receive, Scope, Send

from . import body as body_module
from . import writer as writer_module
from .body import JSONBody, body_from_scope
from .config import Settings, get_settings
from .exceptions import (
    ContentTypeError,
    DecodeError,
    JSONBodyError,
    TransportReadError,
    TransportWriteError,
    ValidationError,
)
from .template import TEMPLATE_NODES, Template, build_template, parse_schema
from .validate import MISSING, validate
from .writer import JSON_MEDIA_TYPE, ResponseWriter, writer_from_scope


def _as_template(schema: Any) -> Template | None:
    """Accept schema text, an already decoded schema document, or a Template."""
    if schema is None or isinstance(schema, (str, bytes)):
        return parse_schema(schema)
    if isinstance(schema, TEMPLATE_NODES):
        return schema
    if isinstance(schema, (dict, list, bool, int, float)):
        return build_template(schema)
    raise TypeError(f"unsupported schema of type {type(schema).__name__}")


class JSONBodyMiddleware:
    """ASGI middleware that decodes and validates JSON request bodies."""

    def __init__(
        self,
        app: ASGIApp,
        schemas: Mapping[str, Any] | None = None,
        *,
        schema: Any = None,
        settings: Settings | None = None,
    ) -> None:
        if app is None:
            raise TypeError("JSONBodyMiddleware requires a downstream app")
        self.app = app
        self.settings = settings or get_settings()
        self._schemas: dict[str, Template | None] = {
            method.upper(): _as_template(text) for method, text in (schemas or {}).items()
        }
        self._default = _as_template(schema)

    def schema_for(self, method: str) -> Template | None:
        """The template requests with this method are validated against (None = anything)."""
        method = method.upper()
        if method in self._schemas:
            return self._schemas[method]
        return self._default

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        writer = ResponseWriter(send)
        template = self.schema_for(request.method)

        try:
            if template is not None:
                self._check_content_type(request)
            raw = await _read_body(request)
            value = _decode(raw)
            errs = validate(template, value)
            if errs:
                raise ValidationError(errs)
        except TransportReadError as e:
            logger.opt(exception=e.__cause__ or e).error(
                "jsonbody: failed to read body for {} {}", request.method, request.url.path
            )
            await self._reject_server_fault(writer)
            return
        except ValidationError as e:
            logger.info(
                "jsonbody: rejected {} {}: {} schema errors", request.method, request.url.path, len(e.errors)
            )
            await self._reject(writer, *e.errors)
            return
        except JSONBodyError as e:
            logger.info("jsonbody: rejected {} {}: {}", request.method, request.url.path, e.user_message)
            await self._reject(writer, e.user_message)
            return

        jsonbody = JSONBody(raw, value, receive)
        scope = {**scope, body_module.SCOPE_KEY: jsonbody, writer_module.SCOPE_KEY: writer}
        await self.app(scope, jsonbody, writer)

    def _check_content_type(self, request: Request) -> None:
        content_type = request.headers.get("content-type")
        if content_type is None:
            if self.settings.require_content_type:
                raise ContentTypeError()
            return
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type != JSON_MEDIA_TYPE:
            raise ContentTypeError()

    async def _reject(self, writer: ResponseWriter, *messages: str) -> None:
        try:
            await writer.write_errors(self.settings.error_status, *messages)
        except TransportWriteError:
            # already logged by the writer; the client is gone
            pass

    async def _reject_server_fault(self, writer: ResponseWriter) -> None:
        try:
            await writer({"type": "http.response.start", "status": self.settings.server_error_status, "headers": []})
            await writer({"type": "http.response.body", "body": b"", "more_body": False})
        except Exception as e:
            logger.opt(exception=e).warning("jsonbody: failed to send server error response")


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as e:
        raise TransportReadError("client disconnected before the body was read") from e
    except Exception as e:
        raise TransportReadError() from e


def _no_constants(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _decode(raw: bytes) -> Any:
    """Decode the raw body; an empty body decodes to MISSING."""
    if not raw:
        return MISSING
    try:
        return json.loads(raw.decode("utf-8"), parse_constant=_no_constants)
    except (ValueError, RecursionError) as e:
        logger.debug("jsonbody: failed to decode body: {}", e)
        raise DecodeError() from e


# ── Handler adapter ─────────────────────────────────────────────────


Handler = Callable[[Request, JSONBody, ResponseWriter], Awaitable[None]]


class json_handler:
    """Adapt ``async def handler(request, body, writer)`` into the downstream ASGI app.

    If the handler returns without writing anything, an empty 200 response is
    sent, like a plain HTTP handler that never set a status.
    """

    def __init__(self, func: Handler) -> None:
        self.func = func

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        writer = writer_from_scope(scope)
        request = Request(scope, receive, writer)
        await self.func(request, body_from_scope(scope), writer)
        if not writer.started:
            await writer({"type": "http.response.start", "status": 200, "headers": []})
            await writer({"type": "http.response.body", "body": b"", "more_body": False})
