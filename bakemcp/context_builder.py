"""Build Tool descriptors and the Jinja2 template context for index.js.

Names are resolved over the full operation list before any tool is
built; per-tool validator and execute text is rendered afterwards.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence

import structlog

from .config import GeneratorSettings
from .exceptions import NoOperationsError
from .invocation import build_execute_fn
from .models import Operation, Tool
from .naming import primary_name, resolve_tool_names
from .schema_parser import build_input_schema
from .validators import build_zod_schema

logger = structlog.get_logger(__name__)


def _make_description(op: Operation) -> str:
    """Tool description: the operation summary, else "METHOD /path"."""
    if op.summary:
        return op.summary
    return f"{op.method.upper()} {op.path}"


def operation_to_tool(op: Operation, base_url: str, name: str | None = None) -> Tool:
    """Convert one operation to one tool.

    Without *name* the tool gets its primary name; set-wide disambiguation
    is the job of build_tools().
    """
    return Tool(
        name=name or primary_name(op),
        description=_make_description(op),
        input_schema=build_input_schema(op),
        params=list(op.parameters),
        body=op.request_body,
        method=op.method.upper(),
        path=op.path,
        base_url=base_url,
    )


def build_tools(operations: Sequence[Operation], base_url: str) -> list[Tool]:
    """Map each operation to a uniquely named tool, preserving order."""
    if not operations:
        raise NoOperationsError()

    tools = [operation_to_tool(op, base_url) for op in operations]
    names = resolve_tool_names(operations)
    tools = [
        tool if tool.name == name else dataclasses.replace(tool, name=name)
        for tool, name in zip(tools, names)
    ]

    logger.debug("Resolved tool names", count=len(tools))
    return tools


def build_tool_context(tool: Tool, max_depth: int) -> dict[str, Any]:
    """Template fields for one server.addTool() call."""
    return {
        "name": tool.name,
        "description": tool.description,
        "parameters": build_zod_schema(tool, max_depth=max_depth),
        "execute": build_execute_fn(tool),
    }


def build_context(tools: Sequence[Tool], settings: GeneratorSettings | None = None) -> dict[str, Any]:
    """Build the full template context for index.js.j2."""
    settings = settings or GeneratorSettings()
    # All tools share the base URL of the document they came from
    base_url = tools[0].base_url if tools else ""

    return {
        "tools": [build_tool_context(t, settings.max_schema_depth) for t in tools],
        "tool_count": len(tools),
        "base_url": base_url,
        "base_url_env": settings.base_url_env,
        "project_name": settings.project_name,
        "project_version": settings.project_version,
    }
