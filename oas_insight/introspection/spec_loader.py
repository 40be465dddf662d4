"""
Spec Loader - Reads local OpenAPI documents.

Only JSON documents on the local filesystem are supported; remote specs
and external $refs are out of scope.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


def load_openapi_spec(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load an OpenAPI specification from a JSON file

    Args:
        file_path: Path to the JSON document

    Returns:
        Parsed OpenAPI document

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or not a JSON object
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"OpenAPI spec not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            spec = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(spec, dict):
        raise ValueError(f"OpenAPI spec root must be an object: {path}")

    if "paths" not in spec:
        logger.warning(f"Spec {path} has no 'paths' section")

    logger.debug(f"Loaded OpenAPI spec from {path} ({spec.get('openapi', 'unknown version')})")
    return spec
