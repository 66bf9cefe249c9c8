"""
Bazel detection at a repository root.

Only root-level markers are checked; BUILD files in subdirectories are
ignored so vendored dependencies do not cause false positives. Bazel itself
does not need to be installed.
"""

from pathlib import Path
from typing import Any

BZLMOD_MARKERS = ("MODULE.bazel",)
WORKSPACE_MARKERS = ("WORKSPACE.bazel", "WORKSPACE")
# Present in Bazel repos but not sufficient for detection
OPTIONAL_MARKERS = (".bazelrc", ".bazelversion")


def detect_bazel(repo_root: str | Path) -> dict[str, Any]:
    """
    Probe a repository root for Bazel markers.

    Returns:
        ``{"detected": bool, "mode": "bzlmod" | "workspace" | None,
        "markers": [...]}``
    """
    root = Path(repo_root)
    markers: list[str] = []
    mode = None

    for marker in BZLMOD_MARKERS:
        if (root / marker).exists():
            markers.append(marker)
            mode = "bzlmod"

    if mode is None:
        for marker in WORKSPACE_MARKERS:
            if (root / marker).exists():
                markers.append(marker)
                mode = "workspace"
                break

    markers.extend(marker for marker in OPTIONAL_MARKERS if (root / marker).exists())

    return {"detected": mode is not None, "mode": mode, "markers": markers}
