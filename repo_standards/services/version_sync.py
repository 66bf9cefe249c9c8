"""
Schema version sync for releases.

Moves the master document's schema ``version`` (and the README references to
it) forward to the major component of a package version. The version never
moves backwards: a target at or below the current version is a no-op.
"""

import json
import logging
import re
from pathlib import Path

from repo_standards import __version__
from repo_standards.compiler.canonicalizer import to_canonical_json_pretty
from repo_standards.core.errors import VersionSyncError

logger = logging.getLogger(__name__)

README_CURRENT_LINE = re.compile(r"version\s+—\s+schema version \(currently `\d+`\)")
README_LIST_ANCHOR = "Consumers should ignore unknown fields for forward compatibility."


def parse_major(version: str) -> int:
    """
    Extract the major component of a semantic version string.

    Raises:
        VersionSyncError: If the major component is not an integer
    """
    head = version.strip().lstrip("v").split(".")[0]
    try:
        return int(head)
    except ValueError as e:
        raise VersionSyncError(
            f"Unable to parse major version from {version!r}", details={"version": version}
        ) from e


def update_readme(readme: str, major: int) -> str:
    """Point the README's current-version line and version list at ``major``."""
    if README_CURRENT_LINE.search(readme):
        readme = README_CURRENT_LINE.sub(
            f"version — schema version (currently `{major}`)", readme, count=1
        )
    else:
        logger.warning("README current schema version line not found; skipping update")

    if f"- `{major}` —" not in readme:
        if README_LIST_ANCHOR in readme:
            entry = f"- `{major}` — Schema version aligned to package major version {major}."
            readme = readme.replace(README_LIST_ANCHOR, f"{entry}\n\n{README_LIST_ANCHOR}", 1)
        else:
            logger.warning("README schema version list anchor not found; skipping list update")

    return readme


def sync_standards_version(
    master_path: str | Path,
    readme_path: str | Path | None = None,
    version: str | None = None,
) -> int | None:
    """
    Raise the master schema version to the package major version.

    Args:
        master_path: Path to standards.json
        readme_path: Path to README.md (skipped when missing)
        version: Package version; defaults to the installed package version

    Returns:
        The new schema version, or None when no update was needed

    Raises:
        VersionSyncError: If the version cannot be parsed or the master
                          document cannot be read
    """
    target = parse_major(version or __version__)
    master_path = Path(master_path)

    try:
        master = json.loads(master_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise VersionSyncError(
            f"Cannot read master document {master_path}",
            details={"path": str(master_path), "error": str(e)},
        ) from e

    current = master.get("version")
    if isinstance(current, int) and target <= current:
        logger.info("Schema version %s already >= %s; no update needed", current, target)
        return None

    master["version"] = target
    master_path.write_text(to_canonical_json_pretty(master), encoding="utf-8")
    logger.info("Updated schema version to %s", target)

    if readme_path is None or not Path(readme_path).is_file():
        logger.warning("README not found; skipping README update")
        return target

    readme_path = Path(readme_path)
    readme_path.write_text(
        update_readme(readme_path.read_text(encoding="utf-8"), target), encoding="utf-8"
    )
    logger.info("Updated README schema version references")
    return target
