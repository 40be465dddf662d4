"""Single-hop $ref resolution against components.schemas."""

import re
from typing import Any, Dict, Optional

SCHEMA_REF_PATTERN = re.compile(r"^#/components/schemas/(.+)$")


def schema_ref_name(node: Any) -> Optional[str]:
    """
    Get the component name referenced by a node

    Returns:
        "Product" for {"$ref": "#/components/schemas/Product"},
        None for anything that is not an internal schema reference
    """
    if not isinstance(node, dict):
        return None
    ref = node.get("$ref")
    if not isinstance(ref, str):
        return None
    match = SCHEMA_REF_PATTERN.match(ref)
    return match.group(1) if match else None


def resolve_schema(spec: Dict[str, Any], node: Any) -> Any:
    """
    Resolve one level of #/components/schemas/<name> reference

    Args:
        spec: OpenAPI document providing components.schemas
        node: Schema node (may be anything)

    Returns:
        The referenced schema, or the node unchanged when it is not a
        reference or the referenced name is absent
    """
    name = schema_ref_name(node)
    if name is None:
        return node

    components = spec.get("components") if isinstance(spec, dict) else None
    schemas = components.get("schemas") if isinstance(components, dict) else None
    if not isinstance(schemas, dict):
        return node

    resolved = schemas.get(name)
    return node if resolved is None else resolved
