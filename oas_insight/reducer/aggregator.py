"""
Group-By Aggregator - Reduces list responses into grouped counts

Supports:
- Array extraction from any response envelope (orders, data.items)
- Multi-level group-by paths with expansion tokens (lines[].product.name)
- Ordered fallback group-by paths when the primary yields nothing
- Key normalization strategies (lower-trim, none)
- Pagination completeness heuristics (count/limit/offset metadata)
"""

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Callable, Dict, List, Optional
import json
import logging

from .path_expression import extract_expanded_values, resolve_path

logger = logging.getLogger(__name__)

Normalizer = Callable[[str], str]

NORMALIZE_LOWER_TRIM = "lower-trim"
NORMALIZE_NONE = "none"
DEFAULT_TOP_N = 10
NO_VALUES_NOTE = "No groupBy values extracted from any provided path"


class ArrayResolutionError(ValueError):
    """Raised when the configured array path does not resolve to a list"""

    def __init__(self, array_path: str, found: Any = None):
        self.array_path = array_path
        self.found_type = type(found).__name__
        super().__init__(
            f"arrayPath '{array_path}' did not resolve to an array (found {self.found_type})"
        )


@dataclass
class ReduceOptions:
    """Options for a single reduce call"""

    array_path: str  # Path to the list inside the response (e.g., "orders")
    group_by_path: Optional[str] = None  # Primary group-by path, may contain []
    fallback_group_by: List[str] = dataclass_field(default_factory=list)
    normalize: str = NORMALIZE_NONE  # "lower-trim" or "none"
    top_n: int = DEFAULT_TOP_N

    def candidate_paths(self) -> List[str]:
        """Primary path followed by fallbacks, empty entries removed"""
        paths = [self.group_by_path, *self.fallback_group_by]
        return [path for path in paths if path]


@dataclass
class GroupCount:
    """Count of items sharing one group key"""

    key: str
    count: int
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {"key": self.key, "count": self.count, "percent": self.percent}


@dataclass
class ReduceResult:
    """Grouped counts for one response"""

    array_path: str
    group_by_path_used: Optional[str] = None
    groups: List[GroupCount] = dataclass_field(default_factory=list)
    top: List[GroupCount] = dataclass_field(default_factory=list)
    total: int = 0
    missing: int = 0
    multi_valued: bool = False
    incomplete: bool = False
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "array_path": self.array_path,
            "group_by_path_used": self.group_by_path_used,
            "groups": [g.to_dict() for g in self.groups],
            "top": [g.to_dict() for g in self.top],
            "total": self.total,
            "missing": self.missing,
            "multi_valued": self.multi_valued,
            "incomplete": self.incomplete,
            "note": self.note,
        }


def _lower_trim(value: str) -> str:
    return value.lower().strip()


def _identity(value: str) -> str:
    return value


NORMALIZERS: Dict[str, Normalizer] = {
    NORMALIZE_LOWER_TRIM: _lower_trim,
    NORMALIZE_NONE: _identity,
}


def build_normalizer(kind: Optional[str], log: Optional[logging.Logger] = None) -> Normalizer:
    """
    Get the normalizer function for a strategy name

    Unknown strategies fall back to identity.
    """
    if kind is None:
        return _identity
    normalizer = NORMALIZERS.get(kind)
    if normalizer is None:
        (log or logger).warning(f"Unknown normalize strategy '{kind}', using 'none'")
        return _identity
    return normalizer


def _stringify_scalar(value: Any) -> str:
    """Render a JSON scalar the way it appears in JSON text"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str, ensure_ascii=False)


def to_atomic_values(raw_values: List[Any]) -> List[str]:
    """
    Coerce extracted values into group keys

    Precedence:
    - Scalars (str/int/float/bool) are stringified
    - Objects use 'name' if it is a string, else 'id' if it is a string,
      else their JSON serialization
    - Lists use their JSON serialization
    - None is discarded
    """
    atomic: List[str] = []
    for value in raw_values:
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            atomic.append(_stringify_scalar(value))
        elif isinstance(value, dict):
            if isinstance(value.get("name"), str):
                atomic.append(value["name"])
            elif isinstance(value.get("id"), str):
                atomic.append(value["id"])
            else:
                atomic.append(_dump(value))
        elif isinstance(value, list):
            atomic.append(_dump(value))
    return atomic


def _numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def is_incomplete(response: Any, returned: int) -> bool:
    """
    Guess whether a paginated response holds only part of the collection

    Prefers a false "might be incomplete" over a false "complete": a page that
    exactly fills the limit is reported as incomplete.
    """
    if not isinstance(response, dict):
        return False

    count = _numeric(response.get("count"))
    limit = _numeric(response.get("limit"))
    offset = _numeric(response.get("offset")) or 0

    if count is not None and offset + returned < count:
        return True
    if limit is not None and returned == limit:
        return True
    return False


def _sort_key(item):
    key, count = item
    return (-count, key.casefold(), key)


def reduce_response(
    response: Any,
    options: ReduceOptions,
    log: Optional[logging.Logger] = None,
) -> ReduceResult:
    """
    Group the items of a list response by a path expression

    Args:
        response: Parsed JSON response body
        options: Array path, group-by paths and presentation options
        log: Logger to use instead of the module logger

    Returns:
        ReduceResult with groups sorted by count

    Raises:
        ArrayResolutionError: If options.array_path is not a list
    """
    log = log or logger
    normalizer = build_normalizer(options.normalize, log)

    items = resolve_path(response, options.array_path)
    if not isinstance(items, list):
        raise ArrayResolutionError(options.array_path, items)

    used_path: Optional[str] = None
    counts: Dict[str, int] = {}
    missing = 0
    multi_valued = False

    for path in options.candidate_paths():
        counts = {}
        missing = 0
        multi_valued = False

        for item in items:
            atomic = to_atomic_values(extract_expanded_values(item, path))
            if not atomic:
                missing += 1
                continue
            if len(atomic) > 1:
                multi_valued = True
            for value in atomic:
                key = normalizer(value)
                counts[key] = counts.get(key, 0) + 1

        if counts:
            used_path = path
            break
        log.debug(f"Group-by path '{path}' yielded no values, trying next candidate")

    total = len(items)
    groups = [
        GroupCount(key=key, count=count, percent=(count / total * 100) if total else 0)
        for key, count in sorted(counts.items(), key=_sort_key)
    ]

    result = ReduceResult(
        array_path=options.array_path,
        group_by_path_used=used_path,
        groups=groups,
        top=groups[: max(options.top_n, 0)],
        total=total,
        missing=missing,
        multi_valued=multi_valued,
        incomplete=is_incomplete(response, total),
        note=None if used_path else NO_VALUES_NOTE,
    )

    log.info(
        f"Reduced {total} items at '{options.array_path}' into {len(groups)} groups "
        f"(path: {used_path}, missing: {missing}, incomplete: {result.incomplete})"
    )
    return result
