"""
Unit tests for API Introspection Module

Tests:
- Schema analyzer: OpenAPI parsing, operation indexing, parameter $ref resolution
- Api catalog: filtering, keyword search, operation description
- Spec loader: reading local JSON documents
"""

import json
import pytest

from oas_insight.introspection.schema_analyzer import (
    ApiCatalog,
    Operation,
    Parameter,
    SchemaAnalyzer,
    build_query_param_hints,
)
from oas_insight.introspection.spec_loader import load_openapi_spec


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def sample_openapi_spec():
    """Sample OpenAPI 3.0 specification"""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Store Admin API",
            "version": "2.0.0",
        },
        "servers": [{"url": "https://store.example.com"}],
        "components": {
            "parameters": {
                "limit": {
                    "name": "limit",
                    "in": "query",
                    "schema": {"type": "integer"},
                    "description": "Page size",
                },
            },
            "requestBodies": {
                "CreateProduct": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/CreateProduct"}
                        }
                    }
                }
            },
            "schemas": {
                "DateFilter": {
                    "type": "object",
                    "properties": {
                        "$gte": {"type": "string"},
                        "$lte": {"type": "string"},
                    },
                },
                "CreateProduct": {
                    "type": "object",
                    "required": ["title", "options"],
                    "properties": {
                        "title": {"type": "string", "example": "Shirt"},
                        "status": {"type": "string", "enum": ["draft", "published"]},
                        "created_at": {"type": "string", "readOnly": True},
                        "options": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "required": ["title"],
                                "properties": {"title": {"type": "string"}},
                            },
                        },
                    },
                },
            },
        },
        "paths": {
            "/admin/orders": {
                "get": {
                    "operationId": "AdminGetOrders",
                    "summary": "List Orders",
                    "tags": ["Orders"],
                    "parameters": [
                        {"$ref": "#/components/parameters/limit"},
                        {
                            "name": "created_at",
                            "in": "query",
                            "schema": {"$ref": "#/components/schemas/DateFilter"},
                        },
                        {
                            "name": "status",
                            "in": "query",
                            "schema": {"type": "object", "properties": {"$eq": {"type": "string"}}},
                        },
                    ],
                },
            },
            "/admin/orders/{id}": {
                "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                "get": {
                    "operationId": "AdminGetOrdersId",
                    "summary": "Get an Order",
                    "tags": ["Orders"],
                    "parameters": [{"name": "x-request-id", "in": "header", "schema": {"type": "string"}}],
                },
                "delete": {
                    "summary": "Delete an Order",
                    "tags": ["Orders"],
                },
            },
            "/admin/products": {
                "post": {
                    "operationId": "AdminPostProducts",
                    "summary": "Create Product",
                    "tags": ["Products"],
                    "requestBody": {"$ref": "#/components/requestBodies/CreateProduct"},
                },
                "get": {
                    "operationId": "AdminGetProducts",
                    "summary": "List Products",
                    "description": "Retrieve a list of products with inventory data.",
                    "tags": ["Products"],
                },
            },
        },
    }


@pytest.fixture
def catalog(sample_openapi_spec):
    return SchemaAnalyzer().analyze_openapi_spec(sample_openapi_spec)


# ============================================================================
# TEST: SchemaAnalyzer
# ============================================================================


class TestSchemaAnalyzer:
    """Tests for SchemaAnalyzer class"""

    def test_analyze_openapi_spec_basic(self, catalog):
        """Test basic OpenAPI spec analysis"""
        assert catalog.title == "Store Admin API"
        assert catalog.version == "2.0.0"
        assert catalog.base_url == "https://store.example.com"
        assert len(catalog.operations) == 5

    def test_missing_operation_id_is_generated(self, catalog):
        """Test fallback operationId for operations without one"""
        op = catalog.get_operation("DELETE_/admin/orders/{id}")
        assert op is not None
        assert op.method == "delete"

    def test_path_level_parameters_come_first(self, catalog):
        """Test merging path-level and operation-level parameters"""
        op = catalog.get_operation("AdminGetOrdersId")
        assert [p.name for p in op.parameters] == ["id", "x-request-id"]
        assert op.params_in("path")[0].required is True

    def test_parameter_refs_are_resolved(self, catalog):
        """Test components.parameters and components.schemas resolution"""
        op = catalog.get_operation("AdminGetOrders")
        limit, created_at, _ = op.parameters

        assert limit.name == "limit"
        assert limit.type == "integer"
        assert limit.description == "Page size"
        assert created_at.type == "object"

    def test_malformed_parameters_are_skipped(self):
        """Test parameters without a name"""
        spec = {"paths": {"/x": {"get": {"parameters": [{"in": "query"}, "bad"]}}}}
        catalog = SchemaAnalyzer().analyze_openapi_spec(spec)
        assert catalog.get_operation("GET_/x").parameters == []

    def test_empty_spec(self):
        catalog = SchemaAnalyzer().analyze_openapi_spec({})
        assert catalog.title == "Unknown API"
        assert catalog.operations == {}

    def test_unknown_operation(self, catalog):
        assert catalog.get_operation("Nope") is None

    def test_catalog_to_dict(self, catalog):
        data = catalog.to_dict()
        assert data["title"] == "Store Admin API"
        assert len(data["operations"]) == 5
        assert data["operations"][0]["operation_id"] == "AdminGetOrders"


class TestOperationFiltering:
    """Tests for filtering and search"""

    def test_filter_by_tag(self, catalog):
        ops = catalog.filter_operations(tags=["products"])
        # Methods are indexed in get, post, ... order within a path
        assert [op.operation_id for op in ops] == ["AdminGetProducts", "AdminPostProducts"]

    def test_filter_by_method(self, catalog):
        ops = catalog.filter_operations(methods=["GET"])
        assert len(ops) == 3
        assert all(op.method == "get" for op in ops)

    def test_filter_without_criteria_returns_all(self, catalog):
        assert len(catalog.filter_operations()) == 5

    def test_search_ranks_matches(self, catalog):
        ops = catalog.search("list orders")
        assert ops[0].operation_id == "AdminGetOrders"

    def test_search_uses_description(self, catalog):
        ops = catalog.search("inventory")
        assert [op.operation_id for op in ops] == ["AdminGetProducts"]

    def test_search_without_hits(self, catalog):
        assert catalog.search("shipping zones") == []

    def test_search_limit_and_method_filter(self, catalog):
        ops = catalog.search("order", methods=["get"], limit=1)
        assert len(ops) == 1
        assert ops[0].method == "get"


class TestDescribeOperation:
    """Tests for operation descriptions"""

    def test_body_metadata(self, catalog):
        described = catalog.describe_operation("AdminPostProducts")

        assert described.request_body_schema == {"$ref": "#/components/schemas/CreateProduct"}
        assert described.body.required == ["title", "options", "options[].title"]
        assert described.body.enums == {"status": ["draft", "published"]}
        assert described.body.examples == {"title": "Shirt"}
        assert described.body.read_only_fields == ["created_at"]

    def test_operation_without_body(self, catalog):
        described = catalog.describe_operation("AdminGetOrdersId")

        assert described.request_body_schema is None
        assert described.body.required == []
        assert described.operation.example_path == "/admin/orders/:id"
        assert described.example_url is None

    def test_query_param_hints(self, catalog):
        described = catalog.describe_operation("AdminGetOrders")
        hints = {h.name: h for h in described.query_param_hints}

        assert set(hints) == {"created_at", "status"}
        assert hints["created_at"].operators == ["$gte", "$lte"]
        assert hints["created_at"].example.startswith("created_at[$gte]=")
        assert hints["status"].example == "status[$eq]=value"
        assert described.example_url.startswith("/admin/orders?created_at[$gte]=")
        assert "&status[$eq]=value" in described.example_url

    def test_unknown_operation_raises(self, catalog):
        with pytest.raises(ValueError, match="Unknown operationId: Nope"):
            catalog.describe_operation("Nope")

    def test_to_dict(self, catalog):
        data = catalog.describe_operation("AdminPostProducts").to_dict()

        assert data["operation_id"] == "AdminPostProducts"
        assert data["method"] == "post"
        assert data["required_body_fields"] == ["title", "options", "options[].title"]
        assert data["read_only_body_fields"] == ["created_at"]
        assert data["path_params"] == []

    def test_hints_ignore_scalar_query_params(self):
        op = Operation(
            operation_id="x",
            method="get",
            path="/x",
            parameters=[Parameter(name="q", location="query", schema={"type": "string"})],
        )
        assert build_query_param_hints(op) == []

    def test_depth_limit_is_passed_to_walker(self, sample_openapi_spec):
        catalog = SchemaAnalyzer(max_depth=0).analyze_openapi_spec(sample_openapi_spec)
        described = catalog.describe_operation("AdminPostProducts")
        # The root is walked, nested option fields are cut off
        assert described.body.required == ["title", "options"]


# ============================================================================
# TEST: load_openapi_spec
# ============================================================================


class TestSpecLoader:
    """Tests for spec loading"""

    def test_load_spec(self, tmp_path, sample_openapi_spec):
        spec_file = tmp_path / "oas.json"
        spec_file.write_text(json.dumps(sample_openapi_spec))

        spec = load_openapi_spec(spec_file)
        assert spec["info"]["title"] == "Store Admin API"
        assert isinstance(SchemaAnalyzer().analyze_openapi_spec(spec), ApiCatalog)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_openapi_spec(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        spec_file = tmp_path / "broken.json"
        spec_file.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_openapi_spec(spec_file)

    def test_non_object_root(self, tmp_path):
        spec_file = tmp_path / "list.json"
        spec_file.write_text("[1, 2]")
        with pytest.raises(ValueError, match="must be an object"):
            load_openapi_spec(str(spec_file))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
