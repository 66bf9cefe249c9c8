"""
Projection of the master standards document onto one stack and CI system.

A projection keeps only the checklist items that apply to the requested
stack (and CI system, when given) and flattens per-stack / per-CI hint blocks
to the single relevant entry. It is a pure function of
(master document, stack, ci): no I/O, no shared state.
"""

import logging

from repo_standards.core.errors import UnknownTargetError
from repo_standards.domain.enums import ChecklistSection
from repo_standards.domain.models import (
    ChecklistItem,
    MasterDocument,
    ProjectedChecklist,
    ProjectedDocument,
    ProjectedItem,
)

logger = logging.getLogger(__name__)

# Short names accepted by the command line for the canonical stack ids
STACK_ALIASES = {
    "dotnet": "csharp-dotnet",
    "csharp": "csharp-dotnet",
    "ts": "typescript-js",
    "js": "typescript-js",
    "py": "python",
    "rs": "rust",
    "golang": "go",
}


def resolve_stack_alias(raw: str) -> str:
    """
    Map a user-supplied stack name to its canonical id.

    Unknown names are returned lower-cased but otherwise unchanged, so that
    the projector rejects them with a proper error instead of guessing.

    Example:
        >>> resolve_stack_alias("TS")
        'typescript-js'
        >>> resolve_stack_alias("cobol")
        'cobol'
    """
    name = raw.strip().lower()
    return STACK_ALIASES.get(name, name)


def project(master: MasterDocument, stack: str, ci: str | None = None) -> ProjectedDocument:
    """
    Project the master document onto a stack and, optionally, a CI system.

    Args:
        master: A validated master document
        stack: Declared stack id (a key of ``master.stacks``)
        ci: Optional declared CI system id (a member of ``master.ci_systems``)

    Returns:
        ProjectedDocument carrying the master's version and meta unmodified,
        the stack label, the (narrowed) CI system list and the filtered
        checklist sections in master order.

    Raises:
        UnknownTargetError: If ``stack`` or ``ci`` is not declared by the master
    """
    _require_declared_target(master, stack, ci)

    sections = {
        section: _project_section(master.checklist.section(section), stack, ci)
        for section in ChecklistSection
    }

    stack_meta = master.stacks.get(stack)
    fields = {
        "version": master.version,
        "stack": stack,
        "stack_label": stack_meta.label if stack_meta else stack,
        "ci_systems": [ci] if ci else list(master.ci_systems),
        "checklist": ProjectedChecklist(
            core=sections[ChecklistSection.CORE],
            recommended=sections[ChecklistSection.RECOMMENDED],
            optional_enhancements=sections[ChecklistSection.OPTIONAL_ENHANCEMENTS],
        ),
    }
    if master.meta is not None:
        fields["meta"] = master.meta

    logger.debug(
        "Projected standards for stack=%s ci=%s: %d core, %d recommended, %d optional",
        stack,
        ci or "*",
        len(sections[ChecklistSection.CORE]),
        len(sections[ChecklistSection.RECOMMENDED]),
        len(sections[ChecklistSection.OPTIONAL_ENHANCEMENTS]),
    )

    return ProjectedDocument(**fields)


def applies(item: ChecklistItem, stack: str, ci: str | None = None) -> bool:
    """
    Decide whether an item belongs to the (stack, ci) projection.

    An item without a CI restriction applies to every CI system.
    """
    if stack not in item.applies_to.stacks:
        return False
    if ci is not None and item.applies_to.ci_systems is not None:
        return ci in item.applies_to.ci_systems
    return True


def _require_declared_target(master: MasterDocument, stack: str, ci: str | None) -> None:
    if stack not in master.stacks:
        raise UnknownTargetError(
            f"Unknown stack '{stack}'",
            details={"stack": stack, "valid_stacks": list(master.stacks)},
        )
    if ci is not None and ci not in master.ci_systems:
        raise UnknownTargetError(
            f"Unknown CI system '{ci}'",
            details={"ci_system": ci, "valid_ci_systems": list(master.ci_systems)},
        )


def _project_section(
    items: list[ChecklistItem], stack: str, ci: str | None
) -> list[ProjectedItem]:
    return [_project_item(item, stack, ci) for item in items if applies(item, stack, ci)]


def _project_item(item: ChecklistItem, stack: str, ci: str | None) -> ProjectedItem:
    """
    Re-shape an applicable item.

    Only fields that are actually present are passed to the model, so the
    dumped artifact never contains empty hint structures.
    """
    fields = {"id": item.id, "label": item.label, "description": item.description}

    if item.ci_hints is not None:
        if ci is None:
            fields["ci_hints"] = dict(item.ci_hints)
        elif ci in item.ci_hints:
            fields["ci_hints"] = {ci: item.ci_hints[ci]}

    stack_hint = (item.stack_hints or {}).get(stack)
    if stack_hint is not None:
        fields["stack"] = stack_hint

    return ProjectedItem(**fields)
