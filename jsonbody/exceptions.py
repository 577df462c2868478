"""
exceptions.py - Error taxonomy for the request pipeline, body accessor and writer

Every error carries the HTTP status it maps to and the message a client sees.
The middleware turns request-side errors into a {"errors": [...]} response;
handler-side errors (AlreadyWrittenError, EncodeError, JSONTypeError) are
raised to the route that caused them.

Business Rules:
- Errors about the request itself are 400s
- A failed body read is a 500 and is answered with an empty body
- SchemaError is raised at construction time, never per request
- ValidationError keeps the full list of mismatches, in schema order

Called by: jsonbody/middleware.py, jsonbody/writer.py, jsonbody/body.py, jsonbody/template.py
Depends on: nothing
"""

from __future__ import annotations


class JSONBodyError(Exception):
    """Base class for jsonbody errors with HTTP metadata."""

    status_code: int = 500
    user_message: str = "an unexpected error occurred"

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        super().__init__(message or self.user_message)
        if status_code is not None:
            self.status_code = status_code
        if message is not None:
            self.user_message = message


class SchemaError(JSONBodyError):
    """Raised at configuration time when a schema document cannot be parsed."""

    user_message = "failed to decode schema"


class ContentTypeError(JSONBodyError):
    """Raised when a request with a schema does not declare a JSON body."""

    status_code = 400
    user_message = "content type must be application/json"


class DecodeError(JSONBodyError):
    """Raised when the request body is present but is not valid JSON."""

    status_code = 400
    user_message = "expected a JSON body"


class TransportReadError(JSONBodyError):
    """Raised when the request body could not be read from the transport."""

    user_message = "failed to read request body"


class TransportWriteError(JSONBodyError):
    """Raised when the response could not be sent over the transport."""

    user_message = "sending the response body failed"


class ValidationError(JSONBodyError):
    """Raised when the decoded body does not match the schema."""

    status_code = 400
    user_message = "request body does not match schema"

    def __init__(self, errors: list[str], *, status_code: int | None = None):
        super().__init__(status_code=status_code)
        self.errors = list(errors)

    def __str__(self) -> str:
        return "; ".join(self.errors)


class AlreadyWrittenError(JSONBodyError):
    """Raised when a response body has already been written once."""

    user_message = "response has already been written and cannot be written again"


class EncodeError(JSONBodyError):
    """Raised when a response value cannot be encoded as JSON."""

    user_message = "encoding the response body as JSON failed"


class JSONTypeError(JSONBodyError, TypeError):
    """Raised when a decoded value is not of the kind a handler asked for."""

    status_code = 400
    user_message = "value has the wrong JSON type"


__all__ = [
    "AlreadyWrittenError",
    "ContentTypeError",
    "DecodeError",
    "EncodeError",
    "JSONBodyError",
    "JSONTypeError",
    "SchemaError",
    "TransportReadError",
    "TransportWriteError",
    "ValidationError",
]
