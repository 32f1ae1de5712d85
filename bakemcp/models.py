"""Normalized operation model consumed by the generator and the tools it derives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Parameter:
    """One operation parameter (path, query or header)."""

    name: str
    location: str  # path, query, header
    required: bool = False
    schema: dict[str, Any] | None = None


@dataclass(frozen=True)
class RequestBody:
    """JSON request body of an operation."""

    required: bool = False
    schema: dict[str, Any] | None = None


@dataclass(frozen=True)
class Operation:
    """One (path, method) endpoint from the API description."""

    path: str
    method: str
    operation_id: str | None = None
    summary: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    request_body: RequestBody | None = None


@dataclass(frozen=True)
class Tool:
    """One generated MCP tool, derived from one Operation."""

    name: str
    description: str
    input_schema: dict[str, Any]
    params: list[Parameter]
    body: RequestBody | None
    method: str  # GET, POST, …
    path: str
    base_url: str

    def params_in(self, location: str) -> list[Parameter]:
        """Parameters at *location*, in declaration order."""
        return [p for p in self.params if p.location == location]


@dataclass(frozen=True)
class ParseResult:
    """Operations and base origin extracted from an OpenAPI document."""

    operations: list[Operation]
    base_url: str = ""
