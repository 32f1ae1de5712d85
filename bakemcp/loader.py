"""Load an OpenAPI 3.x document and normalize it into operations.

Reads JSON or YAML from a file path or an http(s) URL, resolves local
$ref pointers and extracts one Operation per (path, method).
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import httpx
import structlog
import yaml

from .exceptions import InvalidSpecError, SpecNotFoundError, UnsupportedSpecVersionError
from .models import Operation, Parameter, ParseResult, RequestBody

logger = structlog.get_logger(__name__)

# OpenAPI path-item fields that hold operations, in document-spec order
_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_PARAM_LOCATIONS = {"path", "query", "header"}

_JSON_MEDIA_TYPE = "application/json"


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def fetch_spec(url: str, client: httpx.Client | None = None, timeout: float = 15.0) -> str:
    """GET the document at *url* and return its text."""
    try:
        if client is not None:
            resp = client.get(url)
            resp.raise_for_status()
            return resp.text
        with httpx.Client(timeout=timeout, follow_redirects=True) as owned:
            resp = owned.get(url)
            resp.raise_for_status()
            return resp.text
    except httpx.HTTPError as e:
        raise InvalidSpecError(f"cannot fetch {url}: {e}") from e


def read_spec_text(
    source: str | Path,
    client: httpx.Client | None = None,
    timeout: float = 15.0,
) -> str:
    """Raw document text from a URL or a file path."""
    if _is_url(source):
        return fetch_spec(str(source), client=client, timeout=timeout)

    path = Path(source)
    if not path.exists():
        raise SpecNotFoundError(f"input file not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecNotFoundError(f"cannot read input: {e}") from e


def decode_spec(text: str) -> dict[str, Any]:
    """Decode JSON, falling back to YAML."""
    try:
        spec = json.loads(text)
    except json.JSONDecodeError:
        try:
            spec = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InvalidSpecError(f"invalid OpenAPI: {e}") from e

    if not isinstance(spec, dict):
        raise InvalidSpecError("invalid OpenAPI: document root must be an object")
    return spec


def load_spec(
    source: str | Path,
    client: httpx.Client | None = None,
    timeout: float = 15.0,
) -> dict[str, Any]:
    """Load the OpenAPI document at *source* (path or URL)."""
    spec = decode_spec(read_spec_text(source, client=client, timeout=timeout))
    logger.debug("Loaded OpenAPI document", source=str(source))
    return spec


def check_version(spec: dict[str, Any]) -> str:
    """Return the document's OpenAPI version, rejecting anything before 3."""
    version = spec.get("openapi")
    # Unquoted YAML versions decode as numbers
    if isinstance(version, (int, float)) and not isinstance(version, bool):
        version = str(version)
    if not isinstance(version, str) or not version or version.startswith("2"):
        raise UnsupportedSpecVersionError()
    return version


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    paths = spec.get("paths") or {}
    return paths if isinstance(paths, dict) else {}


def resolve_ref(spec: dict[str, Any], ref: str) -> Any:
    """Resolve a local $ref pointer in the spec."""
    if not ref.startswith("#/"):
        raise InvalidSpecError(f"invalid OpenAPI: unsupported $ref {ref!r}")
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        try:
            node = node[part]
        except (KeyError, TypeError) as e:
            raise InvalidSpecError(f"invalid OpenAPI: unresolved $ref {ref!r}") from e
    return node


def resolve_refs(spec: dict[str, Any], node: Any, _stack: tuple[str, ...] = ()) -> Any:
    """Return a copy of *node* with every local $ref inlined.

    A reference back into a schema already being expanded becomes {},
    which later renders as a permissive validator.
    """
    if isinstance(node, list):
        return [resolve_refs(spec, item, _stack) for item in node]
    if not isinstance(node, dict):
        return copy.copy(node)

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in _stack:
            logger.debug("Cyclic $ref replaced by empty schema", ref=ref)
            return {}
        return resolve_refs(spec, resolve_ref(spec, ref), _stack + (ref,))

    return {key: resolve_refs(spec, value, _stack) for key, value in node.items()}


def get_base_url(spec: dict[str, Any]) -> str:
    """First server URL, with server variables set to their defaults."""
    servers = spec.get("servers")
    if not isinstance(servers, list) or not servers or not isinstance(servers[0], dict):
        return ""
    server = servers[0]
    url = server.get("url")
    if not isinstance(url, str):
        return ""

    variables = server.get("variables")
    if isinstance(variables, dict):
        for name, variable in variables.items():
            if isinstance(variable, dict) and "default" in variable:
                url = url.replace("{" + name + "}", str(variable["default"]))
    return url.rstrip("/")


def _parse_parameters(path_level: Any, op_level: Any) -> list[Parameter]:
    """Merge path-item and operation parameters; the operation wins on (name, in)."""
    merged: dict[tuple[str, str], Parameter] = {}
    for raw in list(path_level or []) + list(op_level or []):
        if not isinstance(raw, dict):
            continue
        name = raw.get("name")
        location = raw.get("in")
        if not isinstance(name, str) or location not in _PARAM_LOCATIONS:
            logger.debug("Skipping parameter", name=name, location=location)
            continue
        schema = raw.get("schema")
        merged[(name, location)] = Parameter(
            name=name,
            location=location,
            # Path parameters are always required
            required=bool(raw.get("required", False)) or location == "path",
            schema=schema if isinstance(schema, dict) else None,
        )
    return list(merged.values())


def _parse_request_body(raw: Any) -> RequestBody | None:
    """JSON request body, or None when the operation takes no JSON."""
    if not isinstance(raw, dict):
        return None
    content = raw.get("content")
    if not isinstance(content, dict):
        return None
    for media_type, media in content.items():
        if str(media_type).split(";")[0].strip().lower() != _JSON_MEDIA_TYPE:
            continue
        schema = media.get("schema") if isinstance(media, dict) else None
        if not isinstance(schema, dict):
            return None
        return RequestBody(required=bool(raw.get("required", False)), schema=schema)
    return None


def parse_spec(spec: dict[str, Any]) -> ParseResult:
    """Extract operations and the base URL from a decoded OpenAPI 3.x document."""
    check_version(spec)
    operations: list[Operation] = []

    for path, raw_item in sorted(get_paths(spec).items()):
        path_item = resolve_refs(spec, raw_item)
        if not isinstance(path_item, dict):
            continue

        for method in _METHODS:
            op = path_item.get(method)
            if not isinstance(op, dict):
                continue

            operation_id = op.get("operationId")
            summary = op.get("summary")
            operations.append(Operation(
                path=path,
                method=method.upper(),
                operation_id=operation_id if isinstance(operation_id, str) and operation_id else None,
                summary=summary if isinstance(summary, str) and summary else None,
                parameters=_parse_parameters(path_item.get("parameters"), op.get("parameters")),
                request_body=_parse_request_body(op.get("requestBody")),
            ))

    base_url = get_base_url(spec)
    logger.info("Parsed OpenAPI document", operations=len(operations), base_url=base_url)
    return ParseResult(operations=operations, base_url=base_url)


def load_operations(
    source: str | Path,
    client: httpx.Client | None = None,
    timeout: float = 15.0,
) -> ParseResult:
    """Load and parse in one step."""
    return parse_spec(load_spec(source, client=client, timeout=timeout))
