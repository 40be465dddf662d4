"""
API Introspection Module

Reads OpenAPI documents and extracts what a caller needs to use an endpoint
without endpoint-specific code.
Supports:
- Operation indexing, filtering and keyword search
- Single-hop $ref resolution against components.schemas
- allOf/oneOf/anyOf/array flattening into field-path metadata
- Circular reference protection
"""

from .schema_resolver import resolve_schema, schema_ref_name
from .schema_walker import (
    BodyMetadata,
    FieldMetadata,
    SchemaWalker,
    collect_body_metadata,
)
from .schema_analyzer import (
    ApiCatalog,
    Operation,
    OperationSchema,
    Parameter,
    QueryParamHint,
    SchemaAnalyzer,
    build_query_param_hints,
)
from .spec_loader import load_openapi_spec

__all__ = [
    "resolve_schema",
    "schema_ref_name",
    "BodyMetadata",
    "FieldMetadata",
    "SchemaWalker",
    "collect_body_metadata",
    "ApiCatalog",
    "Operation",
    "OperationSchema",
    "Parameter",
    "QueryParamHint",
    "SchemaAnalyzer",
    "build_query_param_hints",
    "load_openapi_spec",
]
