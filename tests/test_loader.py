"""Tests for the loader module."""

import json

import httpx
import pytest

from bakemcp.exceptions import InvalidSpecError, SpecNotFoundError, UnsupportedSpecVersionError
from bakemcp.loader import (
    check_version,
    decode_spec,
    fetch_spec,
    get_base_url,
    load_operations,
    load_spec,
    parse_spec,
    resolve_refs,
)


def _doc(paths, **extra):
    return {"openapi": "3.0.0", "info": {"title": "t", "version": "1"}, "paths": paths, **extra}


def _mock_client(status=200, text=""):
    def handler(request):
        return httpx.Response(status, text=text)
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestLoadSpec:
    """Test reading documents from disk and over HTTP."""

    def test_load_json_file(self, minimal_spec_path):
        spec = load_spec(minimal_spec_path)
        assert spec["openapi"] == "3.0.3"
        assert "/ping" in spec["paths"]

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "api.yaml"
        path.write_text(
            "openapi: 3.0.0\n"
            "info: {title: t, version: '1'}\n"
            "paths:\n"
            "  /ping:\n"
            "    get:\n"
            "      operationId: ping\n"
        )
        result = load_operations(path)
        assert [op.operation_id for op in result.operations] == ["ping"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecNotFoundError):
            load_spec(tmp_path / "nope.json")

    def test_fetch_from_url(self, minimal_spec):
        client = _mock_client(text=json.dumps(minimal_spec))
        spec = load_spec("https://example.com/openapi.json", client=client)
        assert spec["info"]["title"] == "Ping API"

    def test_fetch_http_error(self):
        with pytest.raises(InvalidSpecError):
            fetch_spec("https://example.com/openapi.json", client=_mock_client(status=404))


class TestDecodeSpec:
    def test_invalid_text(self):
        with pytest.raises(InvalidSpecError):
            decode_spec("{not: [valid")

    def test_non_object_root(self):
        with pytest.raises(InvalidSpecError):
            decode_spec("[1, 2, 3]")
        with pytest.raises(InvalidSpecError):
            decode_spec("just a string")


class TestCheckVersion:
    """Only OpenAPI 3.x is accepted."""

    def test_accepts_3x(self):
        assert check_version({"openapi": "3.1.0"}) == "3.1.0"

    def test_numeric_yaml_version(self):
        assert check_version({"openapi": 3.1}) == "3.1"

    def test_rejects_swagger_2(self):
        with pytest.raises(UnsupportedSpecVersionError):
            check_version({"swagger": "2.0", "paths": {}})

    def test_rejects_openapi_2(self):
        with pytest.raises(UnsupportedSpecVersionError):
            check_version({"openapi": "2.0"})

    def test_rejects_missing_version(self):
        with pytest.raises(UnsupportedSpecVersionError):
            check_version({"paths": {}})


class TestBaseUrl:
    def test_trailing_slash_trimmed(self, minimal_spec):
        assert get_base_url(minimal_spec) == "http://localhost:8080"

    def test_server_variables_substituted(self, complex_spec):
        assert get_base_url(complex_spec) == "https://api.shop.example.com/v1"

    def test_no_servers(self):
        assert get_base_url(_doc({})) == ""
        assert get_base_url(_doc({}, servers=[])) == ""


class TestResolveRefs:
    """Test local $ref inlining."""

    def test_nested_refs_inlined(self, complex_spec):
        node = {"$ref": "#/components/schemas/Order"}
        order = resolve_refs(complex_spec, node)
        assert order["properties"]["items"]["items"]["required"] == ["productId", "quantity"]

    def test_source_not_mutated(self, complex_spec):
        resolve_refs(complex_spec, complex_spec["paths"]["/products"])
        assert complex_spec["paths"]["/products"]["post"]["requestBody"]["content"][
            "application/json"]["schema"] == {"$ref": "#/components/schemas/Product"}

    def test_cycle_becomes_empty_schema(self):
        spec = {"components": {"schemas": {"Node": {
            "type": "object",
            "properties": {"child": {"$ref": "#/components/schemas/Node"}},
        }}}}
        node = resolve_refs(spec, {"$ref": "#/components/schemas/Node"})
        assert node["properties"]["child"] == {}

    def test_escaped_pointer(self):
        spec = {"defs": {"a/b": {"type": "string"}}}
        assert resolve_refs(spec, {"$ref": "#/defs/a~1b"}) == {"type": "string"}

    def test_dangling_ref(self):
        with pytest.raises(InvalidSpecError):
            resolve_refs({}, {"$ref": "#/components/schemas/Missing"})

    def test_external_ref_rejected(self):
        with pytest.raises(InvalidSpecError):
            resolve_refs({}, {"$ref": "other.yaml#/Thing"})


class TestParseSpec:
    """Test operation extraction."""

    def test_minimal(self, minimal_spec):
        result = parse_spec(minimal_spec)
        assert result.base_url == "http://localhost:8080"
        assert len(result.operations) == 1
        op = result.operations[0]
        assert (op.path, op.method, op.operation_id, op.summary) == ("/ping", "GET", "ping", "Ping")
        assert op.parameters == []
        assert op.request_body is None

    def test_complex_operation_count(self, complex_spec):
        assert len(parse_spec(complex_spec).operations) == 12

    def test_paths_sorted_methods_in_document_order(self):
        op = {"responses": {}}
        spec = _doc({"/b": {"post": op, "get": op}, "/a": {"delete": op}})
        pairs = [(o.path, o.method) for o in parse_spec(spec).operations]
        assert pairs == [("/a", "DELETE"), ("/b", "GET"), ("/b", "POST")]

    def test_non_operation_keys_ignored(self):
        spec = _doc({"/a": {"summary": "x", "servers": [], "get": {}}})
        assert [o.method for o in parse_spec(spec).operations] == ["GET"]

    def test_empty_paths(self):
        assert parse_spec(_doc({})).operations == []

    def test_version_checked(self):
        with pytest.raises(UnsupportedSpecVersionError):
            parse_spec({"swagger": "2.0", "paths": {"/a": {"get": {}}}})

    def test_path_level_params_merged(self, complex_spec):
        ops = [o for o in parse_spec(complex_spec).operations if o.path == "/products/{productId}"]
        assert [o.method for o in ops] == ["GET", "PUT", "DELETE"]
        for op in ops:
            assert [p.name for p in op.parameters] == ["productId"]
            assert op.parameters[0].required

    def test_operation_param_overrides_path_level(self):
        spec = _doc({"/a": {
            "parameters": [{"name": "q", "in": "query", "schema": {"type": "string"}}],
            "get": {"parameters": [{"name": "q", "in": "query", "required": True, "schema": {"type": "integer"}}]},
        }})
        params = parse_spec(spec).operations[0].parameters
        assert len(params) == 1
        assert params[0].required
        assert params[0].schema == {"type": "integer"}

    def test_cookie_params_dropped(self, complex_spec):
        op = next(o for o in parse_spec(complex_spec).operations if o.operation_id == "listOrders")
        assert [p.name for p in op.parameters] == ["status"]
        assert op.parameters[0].schema == {"type": "string", "enum": ["pending", "shipped", "delivered"]}

    def test_header_params_kept(self, complex_spec):
        op = next(o for o in parse_spec(complex_spec).operations if o.operation_id == "createOrder")
        assert [(p.name, p.location) for p in op.parameters] == [("X-Idempotency-Key", "header")]

    def test_path_params_forced_required(self):
        spec = _doc({"/a/{id}": {"get": {"parameters": [{"name": "id", "in": "path"}]}}})
        assert parse_spec(spec).operations[0].parameters[0].required

    def test_body_ref_resolved(self, complex_spec):
        op = next(o for o in parse_spec(complex_spec).operations if o.operation_id == "createProduct")
        assert op.request_body.required
        assert op.request_body.schema["required"] == ["name", "price"]
        assert op.request_body.schema["properties"]["dimensions"]["required"] == ["width"]

    def test_json_media_type_with_charset(self, complex_spec):
        op = next(o for o in parse_spec(complex_spec).operations if o.operation_id == "updateProduct")
        assert op.request_body is not None
        assert not op.request_body.required
        assert set(op.request_body.schema["properties"]) == {"name", "price"}

    def test_non_json_body_ignored(self):
        spec = _doc({"/upload": {"post": {"requestBody": {
            "required": True,
            "content": {"multipart/form-data": {"schema": {"type": "object"}}},
        }}}})
        assert parse_spec(spec).operations[0].request_body is None

    def test_missing_summary_and_operation_id(self, complex_spec):
        op = next(o for o in parse_spec(complex_spec).operations if o.path == "/customers/{customerId}/orders")
        assert op.operation_id is None
        assert op.summary is None
