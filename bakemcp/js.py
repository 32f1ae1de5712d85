"""Helpers for emitting JavaScript literals and identifiers."""

from __future__ import annotations

import json
import re
from typing import Any

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Words that cannot be bound by `const { x } = ...` in an ES module
JS_RESERVED_WORDS = frozenset({
    "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "export",
    "extends", "false", "finally", "for", "function", "if", "implements",
    "import", "in", "instanceof", "interface", "let", "new", "null",
    "package", "private", "protected", "public", "return", "static",
    "super", "switch", "this", "throw", "true", "try", "typeof", "var",
    "void", "while", "with", "yield", "arguments", "eval", "undefined",
})


def js_string(value: str) -> str:
    """Double-quoted JS string literal."""
    return json.dumps(value, ensure_ascii=False)


def is_identifier(name: str) -> bool:
    """True if *name* can be used as a property name without quotes."""
    return bool(_IDENTIFIER.match(name))


def property_key(name: str) -> str:
    """Object-literal key for *name*, quoted only when needed."""
    if name == "__proto__":
        # A literal __proto__ key sets the prototype instead of a property
        return f"[{js_string(name)}]"
    return name if is_identifier(name) else js_string(name)


def member(obj: str, name: str) -> str:
    """Property access expression: obj.name or obj["name"]."""
    return f"{obj}.{name}" if is_identifier(name) else f"{obj}[{js_string(name)}]"


def template_text(text: str) -> str:
    """Escape literal text for the inside of a template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def stringify_literal(value: Any) -> str:
    """Render a JSON value the way it reads in source (true, 1, 1.5, null)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
