"""
template.py - Schema documents parsed into structural templates

A schema is a sample request body. Every key in it must be present in real
bodies (unless the key starts with "?"), and every value must have the same
JSON kind as the sample value. Arrays need one sample element, which every
element of the real array is checked against. An empty object or array means
"present, any contents". A null sample value means "present, any kind".

    {
        "title": "",          // string, required
        "upvotes": 0,         // number, required
        "?public": false,     // boolean, optional
        "comments": [""],     // array of strings
        "author": {"name": ""},
        "metadata": {},       // any object
        "tags": []            // any array
    }

Line comments like the ones above are stripped before parsing.

Business Rules:
- Empty or missing schema text means "accept anything, including no body"
- Malformed schema text raises SchemaError; treat it as fatal at startup
- Templates are frozen and safe to share between concurrent requests

Called by: jsonbody/middleware.py, jsonbody/validate.py
Depends on: jsonbody/exceptions.py
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from loguru import logger

from .exceptions import SchemaError

OPTIONAL_MARKER = "?"


# ── Template nodes ──────────────────────────────────────────────────


@dataclass(frozen=True)
class StringNode:
    kind = "string"


@dataclass(frozen=True)
class BooleanNode:
    kind = "boolean"


@dataclass(frozen=True)
class NumberNode:
    kind = "number"


@dataclass(frozen=True)
class AnyNode:
    kind = "any"


@dataclass(frozen=True)
class Field:
    name: str
    template: "Template"
    optional: bool = False


@dataclass(frozen=True)
class ObjectNode:
    """An object template. No fields means any object is accepted."""

    fields: tuple[Field, ...] = ()
    kind = "object"

    @property
    def empty(self) -> bool:
        return not self.fields


@dataclass(frozen=True)
class ArrayNode:
    """An array template. element=None means any array is accepted."""

    element: "Template | None" = None
    kind = "array"

    @property
    def empty(self) -> bool:
        return self.element is None


Template = Union[StringNode, BooleanNode, NumberNode, AnyNode, ObjectNode, ArrayNode]

TEMPLATE_NODES = (StringNode, BooleanNode, NumberNode, AnyNode, ObjectNode, ArrayNode)


# ── Parsing ─────────────────────────────────────────────────────────


def parse_schema(schema_text: str | bytes | None) -> Template | None:
    """Parse schema JSON text into a Template.

    Returns None for the "no schema" sentinel (None or blank text).
    Raises SchemaError if the text is not valid JSON.
    """
    if schema_text is None:
        return None
    if isinstance(schema_text, bytes):
        try:
            schema_text = schema_text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SchemaError(f"failed to decode schema: {e}") from e
    if not schema_text.strip():
        return None

    try:
        document = json.loads(strip_comments(schema_text))
    except json.JSONDecodeError as e:
        logger.error("jsonbody: failed to decode schema: {}", e)
        raise SchemaError(f"failed to decode schema: {e}") from e

    return build_template(document)


def load_schema(path: str | Path) -> Template | None:
    """Read a schema file (UTF-8) and parse it."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError(f"failed to read schema file {path}: {e}") from e
    return parse_schema(text)


def build_template(document: Any) -> Template:
    """Convert an already decoded schema document into a Template."""
    if isinstance(document, bool):
        return BooleanNode()
    if isinstance(document, (int, float)):
        return NumberNode()
    if isinstance(document, str):
        return StringNode()
    if document is None:
        return AnyNode()
    if isinstance(document, list):
        if not document:
            return ArrayNode()
        return ArrayNode(element=build_template(document[0]))
    if isinstance(document, dict):
        fields = []
        for key, value in document.items():
            if not isinstance(key, str):
                raise SchemaError(f"schema keys must be strings, got {key!r}")
            optional = key.startswith(OPTIONAL_MARKER)
            if optional:
                key = key[len(OPTIONAL_MARKER):]
            fields.append(Field(name=key, template=build_template(value), optional=optional))
        return ObjectNode(fields=tuple(fields))
    raise SchemaError(f"unsupported schema value of type {type(document).__name__}")


def strip_comments(text: str) -> str:
    """Remove // line comments that are not inside string literals."""
    out = []
    in_string = False
    escaped = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == "/" and i + 1 < n and text[i + 1] == "/":
            # skip to end of line, keep the newline
            while i < n and text[i] != "\n":
                i += 1
            continue
        else:
            out.append(ch)
        i += 1
    return "".join(out)
