"""
Schema Walker - Flattens composed JSON Schemas into field-path metadata

Supports:
- $ref resolution (chained, one hop per step)
- Nested object properties (customer.address.city)
- Arrays, marked with a [] suffix (items[].sku)
- allOf (merged shape, shared required set)
- oneOf/anyOf (independent alternatives)
- Circular reference and depth protection
"""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import logging

from .schema_resolver import resolve_schema, schema_ref_name

logger = logging.getLogger(__name__)

ARRAY_SUFFIX = "[]"
DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class BodyMetadata:
    """Validation metadata of a request body, keyed by field path"""

    examples: Dict[str, Any] = dataclass_field(default_factory=dict)
    enums: Dict[str, List[Any]] = dataclass_field(default_factory=dict)
    required: List[str] = dataclass_field(default_factory=list)
    read_only_fields: List[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "examples": dict(self.examples),
            "enums": {k: list(v) for k, v in self.enums.items()},
            "required": list(self.required),
            "read_only_fields": list(self.read_only_fields),
        }


@dataclass
class FieldMetadata:
    """
    Accumulator filled during a single walk

    Singular fields keep the first value written at a path; enum values are
    unioned across every branch that declares them.
    """

    examples: Dict[str, Any] = dataclass_field(default_factory=dict)
    enums: Dict[str, List[Any]] = dataclass_field(default_factory=dict)
    required: Dict[str, None] = dataclass_field(default_factory=dict)  # ordered set
    read_only_fields: Dict[str, None] = dataclass_field(default_factory=dict)  # ordered set

    def mark_required(self, path: str) -> None:
        self.required.setdefault(path, None)

    def record(self, node: Any, path: str) -> None:
        """Record example, enum and readOnly data declared directly on a node"""
        if not isinstance(node, dict):
            return

        if "example" in node:
            self.examples.setdefault(path, node["example"])
        elif isinstance(node.get("examples"), list) and node["examples"]:
            self.examples.setdefault(path, node["examples"][0])

        enum_values = node.get("enum")
        if isinstance(enum_values, list) and enum_values:
            known = self.enums.setdefault(path, [])
            for value in enum_values:
                if not any(_same_enum_value(value, seen) for seen in known):
                    known.append(value)

        if node.get("readOnly") is True:
            self.read_only_fields.setdefault(path, None)

    def freeze(self) -> BodyMetadata:
        return BodyMetadata(
            examples=dict(self.examples),
            enums={k: list(v) for k, v in self.enums.items()},
            required=list(self.required),
            read_only_fields=list(self.read_only_fields),
        )


def _same_enum_value(a: Any, b: Any) -> bool:
    # True == 1 in Python, but they are distinct enum members
    return isinstance(a, bool) == isinstance(b, bool) and a == b


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class SchemaWalker:
    """
    Walks a (possibly referenced or composed) schema and collects metadata

    Usage:
    ```python
    walker = SchemaWalker(spec)
    meta = walker.collect(spec["components"]["schemas"]["CreateOrder"])
    print(meta.required)  # ["email", "items[].variant_id"]
    ```
    """

    def __init__(
        self,
        spec: Dict[str, Any],
        max_depth: int = DEFAULT_MAX_DEPTH,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize SchemaWalker

        Args:
            spec: OpenAPI document providing components.schemas
            max_depth: Recursion ceiling; deeper branches are truncated
            log: Logger to use instead of the module logger
        """
        self.spec = spec
        self.max_depth = max_depth
        self.log = log or logger

    def collect(self, schema: Any) -> BodyMetadata:
        """Walk a schema from the root and return its metadata"""
        meta = FieldMetadata()
        self._visit(schema, "", frozenset(), meta, 0, frozenset())
        return meta.freeze()

    def _dereference(
        self, schema: Any, active_refs: FrozenSet[str]
    ) -> Tuple[Any, FrozenSet[str]]:
        """
        Follow $ref hops until a concrete node is reached

        Returns:
            (node, refs expanded on this branch); node is None when the chain
            re-enters a component already being expanded
        """
        node = schema
        refs = active_refs
        while True:
            name = schema_ref_name(node)
            if name is None:
                return node, refs
            if name in refs:
                self.log.warning(f"Circular reference detected: #/components/schemas/{name}")
                return None, refs
            resolved = resolve_schema(self.spec, node)
            if resolved is node:
                self.log.debug(f"Unresolved reference: {node.get('$ref')}")
                return node, refs
            refs = refs | {name}
            node = resolved

    def _visit(
        self,
        schema: Any,
        path: str,
        inherited_required: FrozenSet[str],
        meta: FieldMetadata,
        depth: int,
        active_refs: FrozenSet[str],
    ) -> None:
        if depth > self.max_depth:
            self.log.warning(f"Schema depth limit ({self.max_depth}) reached at '{path or '<root>'}'")
            return

        node, refs = self._dereference(schema, active_refs)
        if not isinstance(node, dict):
            return

        declared = [name for name in _as_list(node.get("required")) if isinstance(name, str)]
        current_required = inherited_required | frozenset(declared)

        self._walk_properties(node, path, current_required, meta, depth, refs)
        self._walk_array_items(node, path, inherited_required, meta, depth, refs)
        self._walk_all_of(node, path, current_required, meta, depth, refs)
        self._walk_alternatives(node, path, inherited_required, meta, depth, refs)

    def _walk_properties(self, node, path, current_required, meta, depth, refs) -> None:
        properties = node.get("properties")
        if not isinstance(properties, dict):
            return

        for key, value in properties.items():
            next_path = _join(path, key)
            if key in current_required:
                meta.mark_required(next_path)

            resolved, child_refs = self._dereference(value, refs)
            if resolved is None:
                continue
            meta.record(resolved, next_path)
            self._visit(resolved, next_path, current_required, meta, depth + 1, child_refs)

    def _walk_array_items(self, node, path, inherited_required, meta, depth, refs) -> None:
        # Item requiredness does not depend on the array's own required list
        if node.get("type") != "array" or node.get("items") is None:
            return

        array_path = f"{path}{ARRAY_SUFFIX}"
        meta.record(node, array_path)
        self._visit(node["items"], array_path, inherited_required, meta, depth + 1, refs)

    def _walk_all_of(self, node, path, current_required, meta, depth, refs) -> None:
        for child in _as_list(node.get("allOf")):
            self._visit(child, path, current_required, meta, depth + 1, refs)

    def _walk_alternatives(self, node, path, inherited_required, meta, depth, refs) -> None:
        # Each oneOf/anyOf branch is its own shape: the parent's required list
        # does not apply to it
        for keyword in ("oneOf", "anyOf"):
            for child in _as_list(node.get(keyword)):
                self._visit(child, path, inherited_required, meta, depth + 1, refs)


def collect_body_metadata(
    spec: Dict[str, Any],
    schema: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    log: Optional[logging.Logger] = None,
) -> BodyMetadata:
    """
    Collect examples, enums, required and read-only field paths of a schema

    Args:
        spec: OpenAPI document providing components.schemas
        schema: Schema node, typically a request body schema

    Returns:
        BodyMetadata keyed by dotted field path
    """
    return SchemaWalker(spec, max_depth=max_depth, log=log).collect(schema)
