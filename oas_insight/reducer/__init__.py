"""
Response Reducer Module

Turns arbitrary JSON list responses into grouped counts without
endpoint-specific code.
Supports:
- Dotted path expressions with [] expansion tokens
- Fallback group-by paths
- Key normalization
- Pagination completeness hints
"""

from .path_expression import (
    PathSegment,
    tokenize,
    parse_path,
    resolve_path,
    extract_expanded_values,
)
from .aggregator import (
    ArrayResolutionError,
    GroupCount,
    ReduceOptions,
    ReduceResult,
    build_normalizer,
    is_incomplete,
    reduce_response,
    to_atomic_values,
)

__all__ = [
    "PathSegment",
    "tokenize",
    "parse_path",
    "resolve_path",
    "extract_expanded_values",
    "ArrayResolutionError",
    "GroupCount",
    "ReduceOptions",
    "ReduceResult",
    "build_normalizer",
    "is_incomplete",
    "reduce_response",
    "to_atomic_values",
]
