"""
Pytest configuration and shared fixtures.

Provides:
- A small master document built in memory (fresh copy per test)
- Matching README text for the documentation version check
- Helpers writing both to a temporary directory
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add package to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402 (import after path setup)

README_TEXT = """# Standards

Top-level field version — schema version (currently `2`).

- `1` — Initial schema.
- `2` — Schema version aligned to package major version 2.

Consumers should ignore unknown fields for forward compatibility.
"""


def build_master_document() -> dict[str, Any]:
    return {
        "$schema": "./standards.schema.json",
        "version": 2,
        "meta": {
            "defaultCoverageThreshold": 0.8,
            "coverageThresholdUnit": "ratio",
            "migrationGuide": [
                {
                    "step": 1,
                    "title": "Lint first",
                    "description": "Add a linter before anything else.",
                    "focusIds": ["lint"],
                }
            ],
        },
        "ciSystems": ["azure-devops", "github-actions"],
        "stacks": {
            "typescript-js": {"label": "TypeScript / JavaScript", "languageFamily": "javascript"},
            "python": {"label": "Python", "languageFamily": "python"},
            "rust": {"label": "Rust", "languageFamily": "rust"},
            "go": {"label": "Go", "languageFamily": "go"},
        },
        "checklist": {
            "core": [
                {
                    "id": "lint",
                    "label": "Linting",
                    "description": "Run a linter on every change.",
                    "enforcement": "required",
                    "severity": "error",
                    "executionStage": "ci-pr",
                    "appliesTo": {"stacks": ["python", "typescript-js"]},
                    "ciHints": {"github-actions": {"job": "lint"}},
                    "stackHints": {
                        "python": {"exampleTools": ["ruff"], "verification": "ruff check ."},
                        "typescript-js": {"exampleTools": ["eslint"]},
                    },
                },
                {
                    "id": "toolchain-pinning",
                    "label": "Toolchain pinning",
                    "description": "Pin the toolchain version.",
                    "enforcement": "required",
                    "severity": "error",
                    "executionStage": "pre-commit",
                    "appliesTo": {"stacks": ["go", "rust"]},
                    "stackHints": {
                        "go": {"requiredFiles": ["go.mod"]},
                        "rust": {"requiredFiles": ["rust-toolchain.toml"]},
                    },
                },
            ],
            "recommended": [
                {
                    "id": "type-check",
                    "label": "Type checking",
                    "description": "Check types in CI.",
                    "enforcement": "recommended",
                    "severity": "warn",
                    "executionStage": "ci-pr",
                    "appliesTo": {"stacks": ["python"], "ciSystems": ["github-actions"]},
                    "stackHints": {"python": {"exampleTools": ["mypy"]}},
                }
            ],
            "optionalEnhancements": [
                {
                    "id": "release",
                    "label": "Automated releases",
                    "description": "Release from CI.",
                    "enforcement": "optional",
                    "severity": "info",
                    "executionStage": "release",
                    "appliesTo": {
                        "stacks": ["python", "typescript-js"],
                        "ciSystems": ["azure-devops"],
                    },
                    "ciHints": {"azure-devops": {"stage": "Release"}},
                }
            ],
        },
    }


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def master_document() -> dict[str, Any]:
    """Fresh, valid master document; tests may mutate it freely."""
    return build_master_document()


@pytest.fixture
def readme_text() -> str:
    return README_TEXT


@pytest.fixture
def standards_files(tmp_path: Path, master_document: dict[str, Any]) -> dict[str, Path]:
    """Master document and README written to a temporary directory."""
    master_path = tmp_path / "config" / "standards.json"
    master_path.parent.mkdir()
    master_path.write_text(json.dumps(master_document, indent=2), encoding="utf-8")

    readme_path = tmp_path / "README.md"
    readme_path.write_text(README_TEXT, encoding="utf-8")

    return {"master": master_path, "readme": readme_path, "root": tmp_path}
