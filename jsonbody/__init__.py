"""
jsonbody - JSON request body validation and write-once JSON responses for ASGI apps
"""

from .body import JSONBody, JSONValue, body_from_scope
from .config import Settings, get_settings
from .exceptions import (
    AlreadyWrittenError,
    ContentTypeError,
    DecodeError,
    EncodeError,
    JSONBodyError,
    JSONTypeError,
    SchemaError,
    TransportReadError,
    TransportWriteError,
    ValidationError,
)
from .middleware import JSONBodyMiddleware, json_handler
from .template import Template, load_schema, parse_schema
from .validate import MISSING, validate
from .writer import ResponseWriter, writer_from_scope

__version__ = "0.1.0"

__all__ = [
    "AlreadyWrittenError",
    "ContentTypeError",
    "DecodeError",
    "EncodeError",
    "JSONBody",
    "JSONBodyError",
    "JSONBodyMiddleware",
    "JSONTypeError",
    "JSONValue",
    "MISSING",
    "ResponseWriter",
    "SchemaError",
    "Settings",
    "Template",
    "TransportReadError",
    "TransportWriteError",
    "ValidationError",
    "body_from_scope",
    "get_settings",
    "json_handler",
    "load_schema",
    "parse_schema",
    "validate",
    "writer_from_scope",
]
