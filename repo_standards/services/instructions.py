"""
Markdown rendering of projected standards artifacts.

Turns one projected artifact (e.g. ``standards.python.github-actions.json``)
into ``instructions.python.github-actions.md``: high-level guidance, 2-5
bullets per checklist item, for whoever brings a repository into compliance.
Also renders the checklist count snippet embedded in the README.
"""

from pathlib import PurePath
from typing import Any

from repo_standards.domain.enums import ChecklistSection

MAX_BULLETS = 5
MAX_INLINE_NOTES = 150
MAX_OPTIONAL_FILES = 3

SECTION_TITLES = {
    ChecklistSection.CORE: "Core Requirements",
    ChecklistSection.RECOMMENDED: "Recommended Practices",
    ChecklistSection.OPTIONAL_ENHANCEMENTS: "Optional Enhancements",
}


def instructions_filename(artifact_name: str) -> str:
    """
    Derive the markdown file name from an artifact file name.

    Example:
        >>> instructions_filename("config/standards.python.json")
        'instructions.python.md'
    """
    stem = PurePath(artifact_name).name.removesuffix(".json")
    if stem.startswith("standards."):
        stem = "instructions." + stem.removeprefix("standards.")
    return f"{stem}.md"


def item_bullets(item: dict[str, Any]) -> list[str]:
    """Build up to five guidance bullets for one projected item."""
    bullets = [item["description"]]
    hints = item.get("stack") or {}

    if hints.get("verification"):
        bullets.append(f"Verify with: {hints['verification']}")

    required = ", ".join(hints.get("requiredFiles") or [])
    any_of = ", ".join(hints.get("anyOfFiles") or [])
    if required and any_of:
        bullets.append(f"Ensure {required} exists, and at least one of {any_of} is present.")
    elif required:
        bullets.append(f"Ensure {required} exists in the repository.")
    elif any_of:
        bullets.append(f"Ensure at least one of {any_of} is present.")

    if hints.get("requiredScripts"):
        scripts = ", ".join(f"`{s}`" for s in hints["requiredScripts"])
        bullets.append(f"Define a {scripts} script or equivalent command.")

    machine_check = hints.get("machineCheck")
    if machine_check:
        prefix = f"{machine_check['description']} " if machine_check.get("description") else ""
        exit_code = machine_check.get("expectExitCode", 0)
        bullets.append(f"{prefix}Run `{machine_check['command']}` (expect exit code {exit_code}).")

    tools = ", ".join(hints.get("exampleTools") or [])
    configs = ", ".join(hints.get("exampleConfigFiles") or [])
    if tools and configs:
        bullets.append(f"Common tools: {tools}. Example config files: {configs}.")
    elif tools:
        bullets.append(f"Common tools: {tools}.")
    elif configs:
        bullets.append(f"Example config files: {configs}.")

    if hints.get("pinningNotes"):
        bullets.append(hints["pinningNotes"])

    optional_files = hints.get("optionalFiles") or []
    if optional_files:
        more = " and others" if len(optional_files) > MAX_OPTIONAL_FILES else ""
        bullets.append(
            f"Consider adding {', '.join(optional_files[:MAX_OPTIONAL_FILES])}{more} if applicable."
        )

    bazel = hints.get("bazelHints") or {}
    if bazel.get("commands"):
        bullets.append(f"Bazel commands: {', '.join(f'`{c}`' for c in bazel['commands'])}.")
    if bazel.get("recommendedTargets"):
        bullets.append(f"Recommended Bazel targets: {', '.join(bazel['recommendedTargets'])}.")
    if bazel.get("notes"):
        bullets.append(bazel["notes"])

    notes = hints.get("notes")
    if notes and len(notes) < MAX_INLINE_NOTES:
        bullets.append(notes)

    return bullets[:MAX_BULLETS]


def render_section(title: str, items: list[dict[str, Any]]) -> str:
    if not items:
        return ""

    lines = [f"## {title}", ""]
    for item in items:
        lines.append(f"### {item['label']}")
        lines.append("")
        lines.extend(f"- {bullet}" for bullet in item_bullets(item))
        lines.append("")
    return "\n".join(lines)


def render_instructions(projected: dict[str, Any], source: str) -> str:
    """
    Render the instructions markdown for a projected artifact.

    Args:
        projected: Projected artifact (wire format, camelCase keys)
        source: Artifact path shown in the header

    Returns:
        Markdown document
    """
    checklist = projected.get("checklist", {})
    lines = [
        "# Repository Standards Instructions",
        "",
        f"> Auto-generated from `{source}`",
        f"> Stack: {projected['stackLabel']} | CI: {', '.join(projected['ciSystems'])}",
        "",
        "This document provides high-level guidance for bringing a repository into "
        "compliance with the defined standards.",
        "",
    ]
    for section, title in SECTION_TITLES.items():
        lines.append(render_section(title, checklist.get(section.value, [])))

    return "\n".join(lines)


def render_readme_counts(master: dict[str, Any]) -> str:
    """
    Render the checklist count snippet for the README.

    Example:
        >>> render_readme_counts(
        ...     {"checklist": {"core": [1, 2], "recommended": [3], "optionalEnhancements": []}}
        ... )
        '**2 core** (required), **1 recommended**, **0 optional enhancements**'
    """
    checklist = master.get("checklist", {})
    core = len(checklist.get(ChecklistSection.CORE.value, []))
    recommended = len(checklist.get(ChecklistSection.RECOMMENDED.value, []))
    optional = len(checklist.get(ChecklistSection.OPTIONAL_ENHANCEMENTS.value, []))
    return (
        f"**{core} core** (required), **{recommended} recommended**, "
        f"**{optional} optional enhancements**"
    )
