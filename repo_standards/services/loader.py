"""
Loading of the master standards document and its companion README.

This is the only place the compiler touches the filesystem for input. The
result is passed explicitly to validation and projection; nothing is cached
at module level.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from repo_standards.core.errors import DocumentLoadError
from repo_standards.domain.models import MasterDocument

logger = logging.getLogger(__name__)


def load_json_document(path: str | Path) -> dict[str, Any]:
    """
    Read and parse a JSON object from disk.

    Args:
        path: Path to a JSON document (the master or a projected artifact)

    Returns:
        The parsed JSON object (untyped, exactly as authored)

    Raises:
        DocumentLoadError: If the file is missing, is not valid JSON, or is
                           not a JSON object
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentLoadError(f"File not found: {path}", details={"path": str(path)})

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DocumentLoadError(
            f"Failed to parse {path.name} as JSON",
            details={"path": str(path), "line": e.lineno, "column": e.colno, "error": e.msg},
        ) from e

    if not isinstance(raw, dict):
        raise DocumentLoadError(
            f"{path.name} must contain a JSON object",
            details={"path": str(path), "type": type(raw).__name__},
        )

    return raw


def load_master(path: str | Path) -> dict[str, Any]:
    """Read the master document (standards.json)."""
    raw = load_json_document(path)
    logger.debug("Loaded master document from %s", path)
    return raw


def parse_master(raw: dict[str, Any]) -> MasterDocument:
    """
    Convert a raw master document into the typed model.

    Raises:
        DocumentLoadError: If the document does not conform to the schema
    """
    try:
        return MasterDocument.model_validate(raw)
    except PydanticValidationError as e:
        raise DocumentLoadError(
            "Master document does not conform to the standards schema",
            details={
                "error_count": e.error_count(),
                "errors": [
                    {"loc": list(error["loc"]), "msg": error["msg"]} for error in e.errors()
                ],
            },
        ) from e


def load_readme(path: str | Path) -> str | None:
    """Read README text for the documentation consistency check, if present."""
    path = Path(path)
    if not path.is_file():
        logger.warning("README not found at %s; skipping documentation check", path)
        return None
    return path.read_text(encoding="utf-8")
