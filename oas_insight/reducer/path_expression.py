"""
Path Expression - Evaluates dotted paths over arbitrary JSON documents

Supports:
- Dotted object nesting (data.items)
- Expansion tokens (shipping_methods[].name iterates the array)
- Numeric list indexes (items.0.sku)
- Tolerant evaluation (missing keys and scalars never raise)
"""

from dataclasses import dataclass
from typing import Any, List

EXPAND_SUFFIX = "[]"


@dataclass(frozen=True)
class PathSegment:
    """A single step of a path expression"""

    key: str  # Empty key means "the current value itself"
    expand: bool = False  # True when the raw token ended with []

    @classmethod
    def from_token(cls, token: str) -> "PathSegment":
        """Build a segment from a raw token such as 'lines[]'"""
        if token.endswith(EXPAND_SUFFIX):
            return cls(key=token[: -len(EXPAND_SUFFIX)], expand=True)
        return cls(key=token, expand=False)


def tokenize(path: str) -> List[str]:
    """
    Split a dotted path into trimmed, non-empty tokens

    Args:
        path: Dotted path (e.g., "data.orders[].status")

    Returns:
        Ordered list of tokens
    """
    if not path:
        return []
    return [token.strip() for token in path.split(".") if token.strip()]


def parse_path(path: str) -> List[PathSegment]:
    """Tokenize a path and mark its expansion segments"""
    return [PathSegment.from_token(token) for token in tokenize(path)]


def _step(container: Any, key: str) -> Any:
    """Look up one key in a mapping, or one index in a list. None when absent."""
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, list) and key.isascii() and key.isdigit():
        index = int(key)
        if index < len(container):
            return container[index]
    return None


def resolve_path(root: Any, path: str) -> Any:
    """
    Resolve a non-expanding path to a single value

    Args:
        root: JSON document
        path: Dotted path; [] suffixes are not interpreted here

    Returns:
        The value at the path, root itself for an empty path,
        or None as soon as a segment cannot be followed
    """
    tokens = tokenize(path)
    if not tokens:
        return root

    current = root
    for token in tokens:
        if not isinstance(current, (dict, list)):
            return None
        current = _step(current, token)
    return current


def _lookup(candidate: Any, key: str) -> Any:
    if not key:
        return candidate
    return _step(candidate, key)


def extract_expanded_values(root: Any, path: str) -> List[Any]:
    """
    Extract every value reachable through a path, expanding [] segments

    A segment like 'lines[]' looks up 'lines' on each candidate and splices the
    elements of the array into the next candidate list. Plain segments push
    the looked-up value as-is, None included.

    Args:
        root: JSON document (usually one element of a response array)
        path: Dotted path with optional expansion tokens

    Returns:
        List of leaf values ([root] for an empty path)
    """
    candidates: List[Any] = [root]

    for segment in parse_path(path):
        next_candidates: List[Any] = []
        for candidate in candidates:
            if candidate is None:
                continue

            value = _lookup(candidate, segment.key)
            if segment.expand:
                if isinstance(value, list):
                    next_candidates.extend(value)
            else:
                next_candidates.append(value)

        candidates = next_candidates
        if not candidates:
            break

    return candidates


__all__ = [
    "PathSegment",
    "tokenize",
    "parse_path",
    "resolve_path",
    "extract_expanded_values",
]
