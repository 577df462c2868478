"""
validate.py - Structural validation of decoded JSON bodies

Compares a decoded request body against a Template and returns one
human-readable message per mismatch. Only key presence and JSON value kind
are checked; values, ranges and formats are not.

Business Rules:
- No template: always valid, even with no body
- Template but no body: a single "expected a JSON body" error
- Keys only in the body are ignored; the schema is not a closed set
- Optional keys ("?name" in the schema) may be absent, but are checked when present
- Every element of a real array is checked against the first schema element
- Errors follow schema key order, so results are deterministic

Called by: jsonbody/middleware.py
Depends on: jsonbody/template.py
"""

from __future__ import annotations

from typing import Any

from .template import AnyNode, ArrayNode, ObjectNode, Template

EXPECTED_BODY = "expected a JSON body"


class _Missing:
    """Sentinel for "no request body was supplied"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def json_kind(value: Any) -> str:
    """Name the JSON kind of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def validate(template: Template | None, actual: Any) -> list[str]:
    """Return the list of mismatches between template and actual (empty if valid)."""
    if template is None:
        return []
    if actual is MISSING:
        return [EXPECTED_BODY]

    errs: list[str] = []
    _validate_value("", template, actual, errs)
    return errs


def _validate_value(key: str, expected: Template, actual: Any, errs: list[str]) -> None:
    if isinstance(expected, AnyNode):
        return

    if json_kind(actual) != expected.kind:
        errs.append(_type_error(key, expected.kind))
        return

    if isinstance(expected, ObjectNode):
        _validate_object(key, expected, actual, errs)
    elif isinstance(expected, ArrayNode):
        _validate_array(key, expected, actual, errs)


def _validate_object(key: str, expected: ObjectNode, actual: dict, errs: list[str]) -> None:
    if expected.empty:
        return

    for field in expected.fields:
        path = f"{key}.{field.name}" if key else field.name
        if field.name not in actual:
            if not field.optional:
                errs.append(f"expected key '{path}' missing")
            continue
        _validate_value(path, field.template, actual[field.name], errs)


def _validate_array(key: str, expected: ArrayNode, actual: list, errs: list[str]) -> None:
    if expected.empty:
        return

    for i, item in enumerate(actual):
        _validate_value(f"{key}[{i}]", expected.element, item, errs)


def _type_error(key: str, kind: str) -> str:
    if not key:
        return f"request body expected to be of type {kind}"
    return f"value for key '{key}' expected to be of type {kind}"


__all__ = ["EXPECTED_BODY", "MISSING", "json_kind", "validate"]
