"""
dependencies.py - FastAPI dependencies for routes behind JSONBodyMiddleware

Lets ordinary FastAPI route functions reach the decoded body and the
write-once writer without touching the ASGI scope.

    @app.post("/posts")
    async def create_post(body: JSONBody = Depends(get_json_body)):
        return {"title": body.get_str("title")}

Business Rules:
- get_json_body raises 500 if the middleware is not installed (a wiring bug)
- get_response_writer likewise; once a route has written through it, whatever
  the route returns is dropped instead of sent a second time

Called by: route functions via Depends()
Depends on: jsonbody/body.py, jsonbody/writer.py
"""

from fastapi import HTTPException, Request
from loguru import logger

from .body import JSONBody, body_from_scope
from .writer import ResponseWriter, writer_from_scope


def get_json_body(request: Request) -> JSONBody:
    """Dependency: the JSONBody decoded by JSONBodyMiddleware for this request."""
    try:
        return body_from_scope(request.scope)
    except LookupError as e:
        logger.error("jsonbody: {}", e)
        raise HTTPException(500, "Request body unavailable")


def get_response_writer(request: Request) -> ResponseWriter:
    """Dependency: the write-once ResponseWriter for this request."""
    try:
        return writer_from_scope(request.scope)
    except LookupError as e:
        logger.error("jsonbody: {}", e)
        raise HTTPException(500, "Response writer unavailable")
