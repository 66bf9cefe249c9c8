"""
Checklist compiler for the repository standards.

This package provides deterministic compilation of the master standards
document into per-stack and per-CI-system artifacts.

Key Components:
- validator: Multi-rule integrity validation of the master document
- projector: Stack/CI-scoped views of the checklist
- canonicalizer: Ensures deterministic JSON output
- compiler: Validate-then-project build of every artifact

Design Principles:
- Determinism: Same input produces byte-for-byte identical output
- Exhaustive validation: every rule runs, findings are aggregated
- Explicit inputs: the master document is always passed in, never loaded ambiently
"""

from repo_standards.compiler.canonicalizer import canonicalize_json
from repo_standards.compiler.compiler import compile_standards
from repo_standards.compiler.projector import project
from repo_standards.compiler.validator import validate

__all__ = [
    "compile_standards",
    "project",
    "validate",
    "canonicalize_json",
]
