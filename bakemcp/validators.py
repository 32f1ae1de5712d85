"""Render schemas as zod validator source text.

Every SchemaKind has an output, so rendering never fails: fragments the
classifier does not recognize become z.any(). Object fields are emitted
sorted by name.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import structlog

from .js import js_string, property_key, stringify_literal
from .models import Tool
from .schema_parser import (
    SchemaKind,
    array_items,
    classify_schema,
    enum_values,
    object_properties,
    required_set,
)

logger = structlog.get_logger(__name__)

DEFAULT_MAX_DEPTH = 32

# Indent of the first nested object's fields inside the top-level z.object
_NESTED_INDENT = 6

_PRIMITIVES: dict[SchemaKind, str] = {
    SchemaKind.STRING: "z.string()",
    SchemaKind.NUMBER: "z.number()",
    SchemaKind.BOOLEAN: "z.boolean()",
    SchemaKind.RECORD: "z.record(z.any())",
    SchemaKind.EMPTY_OBJECT: "z.object({})",
    SchemaKind.UNKNOWN: "z.any()",
}


class ZodField(NamedTuple):
    name: str
    zod: str
    required: bool


def schema_to_zod(
    schema: Any,
    inner_indent: int = _NESTED_INDENT,
    *,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Render one schema fragment as a zod expression."""
    if depth > max_depth:
        logger.debug("Schema nesting limit reached", max_depth=max_depth)
        return "z.any()"

    kind = classify_schema(schema)

    if kind is SchemaKind.ENUM:
        values = ", ".join(js_string(stringify_literal(v)) for v in enum_values(schema))
        return f"z.enum([{values}])"

    if kind is SchemaKind.ARRAY:
        items = array_items(schema)
        if items is None:
            return "z.array(z.any())"
        inner = schema_to_zod(items, inner_indent, depth=depth + 1, max_depth=max_depth)
        return f"z.array({inner})"

    if kind is SchemaKind.OBJECT:
        return _object_to_zod(schema, inner_indent, depth, max_depth)

    return _PRIMITIVES[kind]


def _object_to_zod(schema: dict[str, Any], inner_indent: int, depth: int, max_depth: int) -> str:
    props = object_properties(schema)
    required = required_set(schema)
    pad = " " * inner_indent
    close_pad = " " * (inner_indent - 2)

    lines = []
    for name in sorted(props):
        zod = schema_to_zod(props[name], inner_indent + 2, depth=depth + 1, max_depth=max_depth)
        if name not in required:
            zod += ".optional()"
        lines.append(f"{pad}{property_key(name)}: {zod},")

    body = "\n".join(lines)
    return f"z.object({{\n{body}\n{close_pad}}})"


def collect_fields(tool: Tool, max_depth: int = DEFAULT_MAX_DEPTH) -> list[ZodField]:
    """Top-level validator fields: parameters plus flattened body properties."""
    fields = [
        ZodField(
            name=p.name,
            zod=schema_to_zod(p.schema, max_depth=max_depth),
            required=p.required,
        )
        for p in tool.params
    ]

    if tool.body is not None and tool.body.schema is not None:
        param_names = {p.name for p in tool.params}
        body_required = required_set(tool.body.schema)
        props = object_properties(tool.body.schema)
        for name in sorted(props):
            if name in param_names:
                logger.debug("Body property shadowed by parameter", tool=tool.name, field=name)
                continue
            fields.append(ZodField(
                name=name,
                zod=schema_to_zod(props[name], max_depth=max_depth),
                required=name in body_required,
            ))

    return sorted(fields, key=lambda f: f.name)


def build_zod_schema(tool: Tool, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render the tool's full argument validator."""
    fields = collect_fields(tool, max_depth)
    if not fields:
        return "z.object({})"

    lines = []
    for f in fields:
        zod = f.zod if f.required else f"{f.zod}.optional()"
        lines.append(f"    {property_key(f.name)}: {zod},")
    body = "\n".join(lines)
    return f"z.object({{\n{body}\n  }})"
