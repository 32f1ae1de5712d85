"""Derive unique, identifier-safe MCP tool names from operations.

Pattern: sanitized operationId, else {method}_{path}
  - operationId getUser                 -> get_user
  - POST /items (no operationId)        -> post_items
  - GET  /users/{id}/posts              -> get_users_id_posts
  - GET  /                              -> get

Names are resolved over the whole ordered operation list in three passes:

  1. primary name (operationId first, path fallback)
  2. path-based fallback for names that collide or end in _<digits>
     (the _1, _2 suffixes SpringDoc and Swagger Codegen append when
     operationIds clash upstream)
  3. counter suffixes (_2, _3, ...) for anything still repeated
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Sequence

import structlog

from .models import Operation

logger = structlog.get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENT = re.compile(r"[^A-Za-z0-9_]+")
_NUMERIC_SUFFIX = re.compile(r"_[0-9]+$")


def _snake(value: str) -> str:
    name = _CAMEL_BOUNDARY.sub(r"\1_\2", value)
    name = _NON_IDENT.sub("_", name)
    return name.strip("_").lower()


def sanitize_name(value: str) -> str:
    """Convert an arbitrary string to a lowercase snake_case identifier."""
    return _snake(value) or "op"


def _path_to_name(path: str) -> str:
    """/users/{id}/posts -> users_id_posts"""
    path = path.replace("/", "_").replace("{", "").replace("}", "")
    return _snake(path)


def path_based_name(method: str, path: str) -> str:
    """Build a tool name from HTTP method and path, ignoring operationId."""
    method_part = sanitize_name(method.lower())
    path_part = _path_to_name(path)
    if not path_part:
        return method_part
    return f"{method_part}_{path_part}"


def primary_name(op: Operation) -> str:
    """operationId-based name when available, path-based otherwise."""
    if op.operation_id:
        return sanitize_name(op.operation_id)
    return path_based_name(op.method, op.path)


def has_numeric_suffix(name: str) -> bool:
    return bool(_NUMERIC_SUFFIX.search(name))


def _deduplicate(names: list[str]) -> list[str]:
    """Append _2, _3, ... to repeated names, first occurrence unchanged."""
    taken = set(names)
    counters: dict[str, int] = {}
    result: list[str] = []
    for name in names:
        if name not in counters:
            counters[name] = 1
            result.append(name)
            continue
        counter = counters[name] + 1
        while f"{name}_{counter}" in taken:
            counter += 1
        counters[name] = counter
        candidate = f"{name}_{counter}"
        taken.add(candidate)
        result.append(candidate)
    return result


def resolve_tool_names(operations: Sequence[Operation]) -> list[str]:
    """Return one unique tool name per operation, in input order."""
    names = [primary_name(op) for op in operations]

    counts = Counter(names)
    fallback: list[str] = []
    for op, name in zip(operations, names):
        if counts[name] > 1 or has_numeric_suffix(name):
            renamed = path_based_name(op.method, op.path)
            logger.debug("Falling back to path-based name", name=name, renamed=renamed)
            fallback.append(renamed)
        else:
            fallback.append(name)

    return _deduplicate(fallback)
