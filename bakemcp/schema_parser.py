"""Assemble tool input schemas and classify schema fragments.

Handles:
- Per-parameter schemas (missing schema accepts anything)
- JSON request body under a single "body" property
- Required list (parameters + body)
- Classification of arbitrary fragments into a closed set of kinds,
  so renderers never have to guess at malformed input
"""

from __future__ import annotations

import enum
from typing import Any

from .models import Operation

# Placeholder for a parameter declared without a schema
ANY_SCHEMA: dict[str, Any] = {}


class SchemaKind(enum.Enum):
    """Shape of a schema fragment, as far as validator synthesis cares."""

    ENUM = "enum"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    RECORD = "record"
    EMPTY_OBJECT = "empty_object"
    UNKNOWN = "unknown"


_PRIMITIVE_KINDS: dict[str, SchemaKind] = {
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    # Integer is validated as a plain number; no range constraint is added
    "integer": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
}


def build_input_schema(op: Operation) -> dict[str, Any]:
    """Merge parameter schemas and the request body into one object schema."""
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param in op.parameters:
        properties[param.name] = param.schema if param.schema is not None else dict(ANY_SCHEMA)
        if param.required:
            required.append(param.name)

    if op.request_body is not None:
        properties["body"] = op.request_body.schema if op.request_body.schema is not None else dict(ANY_SCHEMA)
        if op.request_body.required:
            required.append("body")

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def enum_values(schema: Any) -> list[Any] | None:
    """Non-empty enum list of *schema*, or None."""
    if not isinstance(schema, dict):
        return None
    values = schema.get("enum")
    if isinstance(values, list) and values:
        return values
    return None


def object_properties(schema: Any) -> dict[str, Any]:
    """Declared properties of an object schema ({} when absent or malformed)."""
    if not isinstance(schema, dict):
        return {}
    props = schema.get("properties")
    return props if isinstance(props, dict) else {}


def required_set(schema: Any) -> set[str]:
    """Names listed in a schema's required array, ignoring non-strings."""
    if not isinstance(schema, dict):
        return set()
    required = schema.get("required")
    if not isinstance(required, list):
        return set()
    return {r for r in required if isinstance(r, str)}


def array_items(schema: dict[str, Any]) -> dict[str, Any] | None:
    items = schema.get("items")
    return items if isinstance(items, dict) else None


def classify_schema(schema: Any) -> SchemaKind:
    """Map any schema fragment to exactly one SchemaKind.

    Enum is checked before type. Anything unrecognized, including
    non-dict fragments and OpenAPI 3.1 type lists, is UNKNOWN.
    """
    if not isinstance(schema, dict):
        return SchemaKind.UNKNOWN

    if enum_values(schema) is not None:
        return SchemaKind.ENUM

    schema_type = schema.get("type")
    if not isinstance(schema_type, str):
        return SchemaKind.UNKNOWN
    if schema_type in _PRIMITIVE_KINDS:
        return _PRIMITIVE_KINDS[schema_type]
    if schema_type == "array":
        return SchemaKind.ARRAY
    if schema_type == "object":
        if object_properties(schema):
            return SchemaKind.OBJECT
        if "additionalProperties" in schema:
            return SchemaKind.RECORD
        return SchemaKind.EMPTY_OBJECT

    return SchemaKind.UNKNOWN
