"""
Schema Analyzer - Indexes OpenAPI operations and describes their schemas.

Supports:
- OpenAPI 3.x path/operation indexing
- Path-level + operation-level parameters
- $ref resolution for components.parameters and components.requestBodies
- Tag/method filtering and keyword search
- Request body metadata (required, read-only, enum, example) per field path
"""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Optional
import logging
import re

from .schema_resolver import resolve_schema
from .schema_walker import BodyMetadata, DEFAULT_MAX_DEPTH, collect_body_metadata

logger = logging.getLogger(__name__)

HTTP_METHODS = ["get", "post", "put", "patch", "delete", "head", "options"]
JSON_CONTENT_TYPE = "application/json"

STOPWORDS = {
    "a", "about", "an", "and", "for", "from", "get", "gets", "give", "list",
    "lists", "me", "of", "or", "show", "shows", "tell", "the", "to", "what",
    "when", "where", "which", "with",
}

PATH_PLACEHOLDER = re.compile(r"\{(.*?)\}")
NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalize_token(token: str) -> str:
    return NON_ALNUM.sub("", token.lower())


def _resolve_component(spec: Dict[str, Any], node: Any, section: str) -> Any:
    """Resolve a #/components/<section>/<name> reference, one hop"""
    if not isinstance(node, dict) or not isinstance(node.get("$ref"), str):
        return node
    prefix = f"#/components/{section}/"
    ref = node["$ref"]
    if not ref.startswith(prefix):
        return node
    resolved = ((spec.get("components") or {}).get(section) or {}).get(ref[len(prefix):])
    if resolved is None:
        logger.warning(f"Unresolved reference: {ref}")
        return node
    return resolved


@dataclass
class Parameter:
    """A single operation parameter"""
    name: str
    location: str  # "path", "query", "header", "cookie"
    required: bool = False
    description: str = ""
    schema: Dict[str, Any] = dataclass_field(default_factory=dict)

    @property
    def type(self) -> Optional[str]:
        return self.schema.get("type")

    def to_dict(self) -> Dict[str, Any]:
        """Short summary used in operation listings"""
        return {
            "name": self.name,
            "in": self.location,
            "required": self.required,
            "type": self.type,
            "description": self.description,
        }


@dataclass
class QueryParamHint:
    """Filter operators accepted by an object-typed query parameter"""
    name: str
    operators: List[str] = dataclass_field(default_factory=list)
    example: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "operators": self.operators, "example": self.example}


@dataclass
class Operation:
    """A single API operation"""
    operation_id: str
    method: str  # lowercase: "get", "post", ...
    path: str
    summary: str = ""
    description: str = ""
    tags: List[str] = dataclass_field(default_factory=list)
    parameters: List[Parameter] = dataclass_field(default_factory=list)
    request_body: Optional[Dict[str, Any]] = None

    def params_in(self, location: str) -> List[Parameter]:
        return [p for p in self.parameters if p.location == location]

    @property
    def example_path(self) -> str:
        """Path with {id} placeholders written as :id"""
        return PATH_PLACEHOLDER.sub(r":\1", self.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "operation_id": self.operation_id,
            "method": self.method,
            "path": self.path,
            "summary": self.summary,
            "tags": self.tags,
            "path_params": [p.to_dict() for p in self.params_in("path")],
            "query_params": [p.to_dict() for p in self.params_in("query")],
        }


@dataclass
class OperationSchema:
    """Parameter and body schemas of one operation, with body field metadata"""
    operation: Operation
    request_body_schema: Optional[Any] = None
    query_param_hints: List[QueryParamHint] = dataclass_field(default_factory=list)
    body: BodyMetadata = dataclass_field(default_factory=BodyMetadata)

    @property
    def example_url(self) -> Optional[str]:
        examples = [hint.example for hint in self.query_param_hints if hint.example]
        if not examples:
            return None
        return f"{self.operation.example_path}?{'&'.join(examples)}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        op = self.operation
        return {
            "operation_id": op.operation_id,
            "method": op.method,
            "path": op.path,
            "example_path": op.example_path,
            "example_url": self.example_url,
            "summary": op.summary,
            "description": op.description,
            "tags": op.tags,
            "path_params": [p.to_dict() for p in op.params_in("path")],
            "query_params": [p.to_dict() for p in op.params_in("query")],
            "header_params": [p.to_dict() for p in op.params_in("header")],
            "request_body_schema": self.request_body_schema,
            "query_param_hints": [h.to_dict() for h in self.query_param_hints],
            "body_field_examples": self.body.examples,
            "body_field_enums": self.body.enums,
            "required_body_fields": self.body.required,
            "read_only_body_fields": self.body.read_only_fields,
        }


@dataclass
class ApiCatalog:
    """Indexed operations of one OpenAPI document"""
    spec: Dict[str, Any] = dataclass_field(default_factory=dict, repr=False)
    title: str = ""
    version: str = ""
    base_url: str = ""
    operations: Dict[str, Operation] = dataclass_field(default_factory=dict)
    max_depth: int = DEFAULT_MAX_DEPTH

    def get_operation(self, operation_id: str) -> Optional[Operation]:
        """Get operation by operationId"""
        return self.operations.get(operation_id)

    def filter_operations(
        self,
        tags: Optional[List[str]] = None,
        methods: Optional[List[str]] = None,
    ) -> List[Operation]:
        """
        Filter operations by tag and HTTP method (both case-insensitive)

        Args:
            tags: Keep operations carrying at least one of these tags
            methods: Keep operations using one of these methods

        Returns:
            Matching operations in document order
        """
        tag_set = {t.lower() for t in tags or []}
        method_set = {m.lower() for m in methods or []}

        result = []
        for op in self.operations.values():
            if tag_set and not any(t.lower() in tag_set for t in op.tags):
                continue
            if method_set and op.method not in method_set:
                continue
            result.append(op)
        return result

    def search(
        self,
        query: str,
        tags: Optional[List[str]] = None,
        methods: Optional[List[str]] = None,
        limit: int = 10,
    ) -> List[Operation]:
        """
        Keyword search across operationId, summary, description, path and tags

        Each query token found in an operation scores 1; the whole query
        appearing in the summary or operationId adds 2 more each.
        """
        q = query.lower().strip()
        tokens = [_normalize_token(t) for t in q.split()]
        tokens = [t for t in tokens if t]
        significant = [t for t in tokens if t not in STOPWORDS]
        tokens = significant or tokens

        scored = []
        for op in self.filter_operations(tags=tags, methods=methods):
            haystack = " \n ".join(
                [op.operation_id, op.summary, op.description, op.path, *op.tags]
            ).lower()
            score = sum(1 for token in tokens if token in haystack)
            if q and q in op.summary.lower():
                score += 2
            if q and _normalize_token(q) in op.operation_id.lower():
                score += 2
            if tokens and score == 0:
                continue
            scored.append((score, op))

        scored.sort(key=lambda item: (-item[0], item[1].operation_id.casefold()))
        return [op for _, op in scored[:limit]]

    def describe_operation(self, operation_id: str) -> OperationSchema:
        """
        Describe parameters and request body of an operation

        Raises:
            ValueError: If the operationId is unknown
        """
        op = self.get_operation(operation_id)
        if op is None:
            raise ValueError(f"Unknown operationId: {operation_id}")

        body_schema = None
        if op.request_body:
            content = op.request_body.get("content", {})
            body_schema = content.get(JSON_CONTENT_TYPE, {}).get("schema")

        body = BodyMetadata()
        if body_schema is not None:
            body = collect_body_metadata(self.spec, body_schema, max_depth=self.max_depth)

        return OperationSchema(
            operation=op,
            request_body_schema=body_schema,
            query_param_hints=build_query_param_hints(op),
            body=body,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "title": self.title,
            "version": self.version,
            "base_url": self.base_url,
            "operations": [op.to_dict() for op in self.operations.values()],
        }


def build_query_param_hints(operation: Operation) -> List[QueryParamHint]:
    """
    Describe the filter operators of object-typed query parameters

    A parameter like created_at with properties $gte/$lte gets a range example
    (created_at[$gte]=...&created_at[$lte]=...).
    """
    hints = []
    for param in operation.params_in("query"):
        properties = param.schema.get("properties") if param.type == "object" else None
        if not isinstance(properties, dict):
            continue

        operators = [key for key in properties if key.startswith("$")]
        example = None
        if "$gte" in operators or "$lte" in operators:
            example = (
                f"{param.name}[$gte]=2025-01-01T00:00:00Z"
                f"&{param.name}[$lte]=2025-12-31T23:59:59Z"
            )
        elif "$eq" in operators:
            example = f"{param.name}[$eq]=value"
        hints.append(QueryParamHint(name=param.name, operators=operators, example=example))
    return hints


class SchemaAnalyzer:
    """Analyzes OpenAPI documents and indexes their operations"""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def analyze_openapi_spec(self, spec: Dict[str, Any]) -> ApiCatalog:
        """
        Analyze OpenAPI 3.x specification

        Args:
            spec: OpenAPI spec dictionary (parsed from JSON)

        Returns:
            ApiCatalog with indexed operations
        """
        catalog = ApiCatalog(spec=spec, max_depth=self.max_depth)
        catalog.title = spec.get("info", {}).get("title", "Unknown API")
        catalog.version = spec.get("info", {}).get("version", "")

        servers = spec.get("servers", [])
        if servers:
            catalog.base_url = servers[0].get("url", "")

        paths = spec.get("paths", {}) or {}
        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            for op in self._process_path(spec, path, path_item):
                if op.operation_id in catalog.operations:
                    logger.warning(f"Duplicate operationId '{op.operation_id}' at {op.method.upper()} {path}")
                catalog.operations[op.operation_id] = op

        logger.info(f"Analyzed {len(catalog.operations)} operations")
        return catalog

    def _process_path(self, spec: Dict[str, Any], path: str, path_item: Dict[str, Any]) -> List[Operation]:
        """Build the operations of a single path"""
        shared_params = path_item.get("parameters") or []
        operations = []

        for method in HTTP_METHODS:
            raw = path_item.get(method)
            if not isinstance(raw, dict):
                continue

            params = [
                self._create_parameter(spec, p)
                for p in [*shared_params, *(raw.get("parameters") or [])]
            ]
            tags = raw.get("tags")
            request_body = _resolve_component(spec, raw.get("requestBody"), "requestBodies")

            operations.append(Operation(
                operation_id=str(raw.get("operationId") or f"{method.upper()}_{path}"),
                method=method,
                path=path,
                summary=raw.get("summary") if isinstance(raw.get("summary"), str) else "",
                description=raw.get("description") if isinstance(raw.get("description"), str) else "",
                tags=list(tags) if isinstance(tags, list) else [],
                parameters=[p for p in params if p is not None],
                request_body=request_body if isinstance(request_body, dict) else None,
            ))

        return operations

    def _create_parameter(self, spec: Dict[str, Any], raw: Any) -> Optional[Parameter]:
        """Create a Parameter from a (possibly referenced) parameter object"""
        resolved = _resolve_component(spec, raw, "parameters")
        if not isinstance(resolved, dict) or "name" not in resolved:
            logger.debug(f"Skipping malformed parameter: {raw}")
            return None

        return Parameter(
            name=resolved["name"],
            location=resolved.get("in", "query"),
            required=bool(resolved.get("required", False)),
            description=resolved.get("description", ""),
            schema=resolve_schema(spec, resolved.get("schema") or {}),
        )
