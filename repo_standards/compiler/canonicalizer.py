"""
JSON Canonicalization for deterministic artifact output.

Ensures that every compiled standards artifact is byte-for-byte identical for
the same inputs by enforcing consistent key ordering at every depth.

This is CRITICAL for:
- Reproducible builds (artifacts committed or published must not churn)
- Checksums in the publish manifest
- Consumers diffing artifacts between releases
"""

import json
from typing import Any

from repo_standards.domain.models import StandardsModel


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON object.

    This function ensures:
    - All dictionary keys are sorted lexicographically
    - Nested structures are recursively canonicalized
    - Standards models are dumped with their wire (camelCase) names first

    Args:
        obj: Python object (dict, list, model, or primitive) to canonicalize

    Returns:
        Canonicalized version with sorted keys at all levels

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}})
        {'a': {'b': 3, 'c': 2}, 'z': 1}

    Note:
        Arrays preserve their input order. Checklist items keep the order
        in which they were authored in the master document.
    """
    if isinstance(obj, StandardsModel):
        return canonicalize_json(obj.to_json_dict())

    if isinstance(obj, dict):
        return {k: canonicalize_json(v) for k, v in sorted(obj.items())}

    elif isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]

    else:
        # Primitives (str, int, float, bool, None) pass through unchanged
        return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a compact canonical JSON string.

    Useful for hashing and for comparing outputs.

    Example:
        >>> to_canonical_json_string({"version": 2, "stack": "go"})
        '{"stack":"go","version":2}'
    """
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_canonical_json_pretty(obj: Any) -> str:
    """
    Convert a Python object to a pretty-printed canonical JSON string.

    This is the form persisted as an artifact: sorted keys, 2-space
    indentation and a single trailing newline.

    Example:
        >>> print(to_canonical_json_pretty({"version": 2, "stack": "go"}), end="")
        {
          "stack": "go",
          "version": 2
        }
    """
    canonical = canonicalize_json(obj)

    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False) + "\n"
