"""Shared fixtures for bakemcp tests.

Operation fixtures mirror what the loader hands the generator; the JSON
documents under fixtures/ exercise the loader and the CLI end to end.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from bakemcp.models import Operation, Parameter, RequestBody, Tool
from bakemcp.context_builder import operation_to_tool

FIXTURES_DIR = Path(__file__).parent / "fixtures"
MINIMAL_SPEC_PATH = FIXTURES_DIR / "openapi3-minimal.json"
COMPLEX_SPEC_PATH = FIXTURES_DIR / "openapi3-complex.json"

BASE_URL = "http://localhost:8080"


# ---------------------------------------------------------------------------
# OpenAPI documents
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_spec_path() -> Path:
    return MINIMAL_SPEC_PATH


@pytest.fixture
def complex_spec_path() -> Path:
    return COMPLEX_SPEC_PATH


@pytest.fixture
def minimal_spec() -> dict[str, Any]:
    """Single GET /ping operation."""
    with open(MINIMAL_SPEC_PATH) as f:
        return json.load(f)


@pytest.fixture
def complex_spec() -> dict[str, Any]:
    """Shop API: refs, enums, nested bodies, path-level and header params."""
    with open(COMPLEX_SPEC_PATH) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Tool builders
# ---------------------------------------------------------------------------

@pytest.fixture
def make_tool() -> Callable[..., Tool]:
    """Return a callable that builds a Tool the way the generator does.

    Usage in tests::

        tool = make_tool("/users/{id}", "GET", params=[...])
    """
    def _make_tool(
        path: str = "/ping",
        method: str = "GET",
        params: list[Parameter] | None = None,
        body: RequestBody | None = None,
        operation_id: str | None = "ping",
        summary: str | None = None,
    ) -> Tool:
        op = Operation(
            path=path,
            method=method,
            operation_id=operation_id,
            summary=summary,
            parameters=params or [],
            request_body=body,
        )
        return operation_to_tool(op, BASE_URL)
    return _make_tool


@pytest.fixture
def product_body() -> RequestBody:
    """Body requiring name, with an optional nested dimensions object."""
    return RequestBody(
        required=True,
        schema={
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string"},
                "price": {"type": "number"},
                "dimensions": {
                    "type": "object",
                    "required": ["width"],
                    "properties": {
                        "width": {"type": "number"},
                        "height": {"type": "number"},
                    },
                },
            },
        },
    )
