"""
Integrity validation for the master standards document.

Runs an ordered battery of independent rules over the RAW parsed document and
concatenates their findings. Validation is exhaustive: every rule always runs,
and no rule stops at its first problem.

Rules:
1. Schema conformance against the document model
2. Checklist id uniqueness across all sections
3. Migration guide focusIds resolve to checklist ids
4. appliesTo.stacks reference declared stacks
5. ciHints keys are declared CI systems
6. Coverage threshold lies in [0, 1] when its unit is "ratio"
7. Every item declares a known executionStage
8. README schema version references match (only when README text is given)
9. Declared enforcement/severity match the item's section
10. Schema version equals the expected package major (only when given)

Each rule is a pure function ``(document) -> list[Finding]``. Rules 2-10 read
the document defensively and skip sub-structures they cannot interpret;
reporting malformed structure is the job of rule 1 alone.
"""

import re
from collections.abc import Callable, Iterator
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from repo_standards.domain.enums import (
    COVERAGE_UNIT_RATIO,
    SECTION_ENFORCEMENT,
    ChecklistSection,
    ExecutionStage,
    FindingKind,
)
from repo_standards.domain.findings import Finding, ValidationReport
from repo_standards.domain.models import MasterDocument

Rule = Callable[[dict[str, Any]], list[Finding]]

VALID_EXECUTION_STAGES = frozenset(stage.value for stage in ExecutionStage)

# Matches the README line that states the current schema version.
_README_CURRENT_VERSION = re.compile(r"version.*\(currently `(\d+)`\)", re.IGNORECASE)


def validate(
    master: dict[str, Any] | MasterDocument,
    readme: str | None = None,
    expected_version: int | None = None,
) -> ValidationReport:
    """
    Validate a master document and aggregate all findings.

    Args:
        master: Parsed master document (raw mapping, or an already typed model)
        readme: Optional rendered documentation to check for version drift
        expected_version: Optional schema version the document must declare
                          (the consuming package's major version)

    Returns:
        ValidationReport; ``valid`` is True iff no rule produced a finding

    Example:
        >>> report = validate({"version": 2})
        >>> report.valid
        False
    """
    if isinstance(master, MasterDocument):
        document: Any = master.to_json_dict()
    else:
        document = master

    rules: list[Rule] = [
        check_schema,
        check_unique_ids,
        check_migration_references,
        check_stack_references,
        check_ci_hint_keys,
        check_coverage_threshold,
        check_execution_stages,
    ]
    if readme is not None:
        rules.append(lambda doc: check_readme_version(doc, readme))
    rules.append(check_section_enforcement)
    if expected_version is not None:
        rules.append(lambda doc: check_schema_version(doc, expected_version))

    findings: list[Finding] = []
    for rule in rules:
        findings.extend(rule(document))

    return ValidationReport.from_findings(findings)


# =============================================================================
# Rules
# =============================================================================


def check_schema(document: Any) -> list[Finding]:
    """Rule 1: the document validates against the master document model."""
    try:
        MasterDocument.model_validate(document)
    except PydanticValidationError as exc:
        return [
            Finding(
                kind=FindingKind.SCHEMA,
                message=f"{_format_loc(error['loc'])}: {error['msg']}",
                subject=_item_id_at(document, error["loc"]),
                path=_format_loc(error["loc"]),
            )
            for error in exc.errors()
        ]
    return []


def check_unique_ids(document: Any) -> list[Finding]:
    """Rule 2: no checklist id repeats across the three sections."""
    locations: dict[str, list[str]] = {}
    for path, item in _iter_items(document):
        item_id = item.get("id")
        if isinstance(item_id, str):
            locations.setdefault(item_id, []).append(path)

    return [
        Finding(
            kind=FindingKind.DUPLICATE_ID,
            message=(
                f'Duplicate checklist ID "{item_id}" found {len(paths)} times '
                f"({', '.join(paths)})"
            ),
            subject=item_id,
            path=paths[1],
        )
        for item_id, paths in locations.items()
        if len(paths) > 1
    ]


def check_migration_references(document: Any) -> list[Finding]:
    """Rule 3: every migrationGuide focusId names an existing checklist item."""
    known_ids = {
        item["id"] for _, item in _iter_items(document) if isinstance(item.get("id"), str)
    }
    guide = _as_list(_as_dict(_as_dict(document).get("meta")).get("migrationGuide"))
    findings = []

    for step_index, step in enumerate(guide):
        step = _as_dict(step)
        for focus_index, focus_id in enumerate(_as_list(step.get("focusIds"))):
            if isinstance(focus_id, str) and focus_id not in known_ids:
                findings.append(
                    Finding(
                        kind=FindingKind.MIGRATION_REFERENCE,
                        message=(
                            f'migrationGuide step {step.get("step", step_index + 1)} focusId '
                            f'"{focus_id}" does not reference a valid checklist ID'
                        ),
                        subject=str(focus_id),
                        path=f"meta.migrationGuide[{step_index}].focusIds[{focus_index}]",
                    )
                )
    return findings


def check_stack_references(document: Any) -> list[Finding]:
    """Rule 4: appliesTo.stacks only references declared stack keys."""
    declared = set(_as_dict(_as_dict(document).get("stacks")))
    findings = []

    for path, item in _iter_items(document):
        stacks = _as_list(_as_dict(item.get("appliesTo")).get("stacks"))
        for index, stack in enumerate(stacks):
            if isinstance(stack, str) and stack not in declared:
                findings.append(
                    Finding(
                        kind=FindingKind.STACK_REFERENCE,
                        message=(
                            f'Item "{item.get("id")}" references unknown stack "{stack}" '
                            "in appliesTo.stacks"
                        ),
                        subject=str(item.get("id")),
                        path=f"{path}.appliesTo.stacks[{index}]",
                    )
                )
    return findings


def check_ci_hint_keys(document: Any) -> list[Finding]:
    """Rule 5: ciHints keys are a subset of the declared ciSystems."""
    declared = {ci for ci in _as_list(_as_dict(document).get("ciSystems")) if isinstance(ci, str)}
    findings = []

    for path, item in _iter_items(document):
        for ci_key in _as_dict(item.get("ciHints")):
            if ci_key not in declared:
                findings.append(
                    Finding(
                        kind=FindingKind.CI_HINT_KEY,
                        message=(
                            f'Item "{item.get("id")}" has ciHints key "{ci_key}" not in ciSystems'
                        ),
                        subject=str(item.get("id")),
                        path=f"{path}.ciHints.{ci_key}",
                    )
                )
    return findings


def check_coverage_threshold(document: Any) -> list[Finding]:
    """Rule 6: a "ratio" coverage threshold must lie in [0, 1]."""
    meta = _as_dict(_as_dict(document).get("meta"))
    threshold = meta.get("defaultCoverageThreshold")
    unit = meta.get("coverageThresholdUnit")

    if unit != COVERAGE_UNIT_RATIO or not _is_number(threshold):
        return []

    if 0 <= threshold <= 1:
        return []

    return [
        Finding(
            kind=FindingKind.COVERAGE_THRESHOLD,
            message=(
                f"defaultCoverageThreshold is {threshold} but coverageThresholdUnit is "
                '"ratio" (must be 0-1)'
            ),
            subject="defaultCoverageThreshold",
            path="meta.defaultCoverageThreshold",
        )
    ]


def check_execution_stages(document: Any) -> list[Finding]:
    """Rule 7: every item declares an executionStage from the fixed set."""
    findings = []

    for path, item in _iter_items(document):
        stage = item.get("executionStage")
        if stage is None:
            message = f'Item "{item.get("id")}" is missing executionStage'
        elif not isinstance(stage, str) or stage not in VALID_EXECUTION_STAGES:
            message = f'Item "{item.get("id")}" has invalid executionStage "{stage}"'
        else:
            continue
        findings.append(
            Finding(
                kind=FindingKind.EXECUTION_STAGE,
                message=message,
                subject=str(item.get("id")),
                path=f"{path}.executionStage",
            )
        )
    return findings


def check_readme_version(document: Any, readme: str) -> list[Finding]:
    """Rule 8: README names the current schema version and lists it."""
    version = _as_dict(document).get("version")
    findings = []

    current = _README_CURRENT_VERSION.search(readme)
    if current is None:
        findings.append(
            Finding(
                kind=FindingKind.DOCUMENTATION_VERSION,
                message="README.md missing current schema version reference",
                subject="README.md",
            )
        )
    elif current.group(1) != str(version):
        findings.append(
            Finding(
                kind=FindingKind.DOCUMENTATION_VERSION,
                message=(
                    f"README.md current schema version ({current.group(1)}) does not match "
                    f"standards.json ({version})"
                ),
                subject="README.md",
            )
        )

    listed = re.compile(rf"-\s*`{re.escape(str(version))}`\s*—")
    if not listed.search(readme):
        findings.append(
            Finding(
                kind=FindingKind.DOCUMENTATION_VERSION,
                message=f"README.md schema version list does not include current version {version}",
                subject="README.md",
            )
        )

    return findings


def check_section_enforcement(document: Any) -> list[Finding]:
    """Rule 9: declared enforcement/severity match the item's section."""
    findings = []
    checklist = _as_dict(_as_dict(document).get("checklist"))

    for section in ChecklistSection:
        enforcement, severity = SECTION_ENFORCEMENT[section]
        for index, item in enumerate(_as_list(checklist.get(section.value))):
            item = _as_dict(item)
            for field, expected in (("enforcement", enforcement), ("severity", severity)):
                declared = item.get(field)
                if declared is not None and declared != expected.value:
                    findings.append(
                        Finding(
                            kind=FindingKind.SECTION_ENFORCEMENT,
                            message=(
                                f'Item "{item.get("id")}" in {section.value} declares '
                                f'{field} "{declared}" (expected "{expected.value}")'
                            ),
                            subject=str(item.get("id")),
                            path=f"checklist.{section.value}[{index}].{field}",
                        )
                    )
    return findings


def check_schema_version(document: Any, expected_version: int) -> list[Finding]:
    """Rule 10: schema version equals the consuming package's major version."""
    version = _as_dict(document).get("version")
    if version == expected_version and not isinstance(version, bool):
        return []
    return [
        Finding(
            kind=FindingKind.SCHEMA_VERSION,
            message=(
                f"standards.json schema version ({version}) does not match package major "
                f"version ({expected_version}); run `repo-standards sync-version`"
            ),
            subject="version",
            path="version",
        )
    ]


# =============================================================================
# Helpers
# =============================================================================


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _iter_items(document: Any) -> Iterator[tuple[str, dict]]:
    """Yield (path, item) for every well-formed item, in document order."""
    checklist = _as_dict(_as_dict(document).get("checklist"))
    for section in ChecklistSection:
        for index, item in enumerate(_as_list(checklist.get(section.value))):
            if isinstance(item, dict):
                yield f"checklist.{section.value}[{index}]", item


def _format_loc(loc: tuple) -> str:
    """Render a Pydantic error location as checklist.core[0].appliesTo."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "/"


def _item_id_at(document: Any, loc: tuple) -> str | None:
    """Return the id of the checklist item an error location points into, if any."""
    if len(loc) < 3 or loc[0] != "checklist":
        return None
    section = _as_list(_as_dict(_as_dict(document).get("checklist")).get(loc[1]))
    index = loc[2]
    if not isinstance(index, int) or index >= len(section):
        return None
    item_id = _as_dict(section[index]).get("id")
    return item_id if isinstance(item_id, str) else None
