"""
Typed shape of the master standards document and its projections.

Field names are snake_case in Python and camelCase on the wire (the master
JSON file and every generated artifact). Unknown fields are rejected so that
schema conformance catches typos in hand-edited documents.

Artifacts are dumped with ``exclude_unset=True``: a field that was absent from
the master document stays absent in every artifact derived from it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel

from repo_standards.domain.enums import ChecklistSection, Enforcement, Severity


class StandardsModel(BaseModel):
    """Base model: camelCase aliases, strict about unknown fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-ready dict using wire names, keeping only provided fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# =============================================================================
# Hint blocks
# =============================================================================


class BazelHints(StandardsModel):
    """Bazel execution hints; commands are real invocations, not assumed labels."""

    commands: list[str] | None = None
    recommended_targets: list[str] | None = None
    notes: str | None = None


class MachineCheck(StandardsModel):
    command: str
    expect_exit_code: int | None = None
    description: str | None = None


class StackHints(StandardsModel):
    """Per-stack guidance attached to a checklist item."""

    example_tools: list[str] | None = None
    example_config_files: list[str] | None = None
    notes: str | None = None
    verification: str | None = None
    required_files: list[str] | None = None
    optional_files: list[str] | None = None
    any_of_files: list[str] | None = None
    required_scripts: list[str] | None = None
    pinning_notes: str | None = None
    machine_check: MachineCheck | None = None
    bazel_hints: BazelHints | None = None


class CiHint(StandardsModel):
    stage: str | None = None
    job: str | None = None
    notes: str | None = None


# =============================================================================
# Checklist items
# =============================================================================


class AppliesTo(StandardsModel):
    stacks: list[str] = Field(min_length=1)
    ci_systems: list[str] | None = None


class ChecklistItem(StandardsModel):
    """One compliance requirement of the master document."""

    id: str = Field(min_length=1)
    label: str
    description: str
    enforcement: Enforcement | None = None
    severity: Severity | None = None
    # Membership in ExecutionStage is a semantic rule, reported by the validator
    execution_stage: str | None = None
    applies_to: AppliesTo
    ci_hints: dict[str, CiHint] | None = None
    stack_hints: dict[str, StackHints] | None = None


class Checklist(StandardsModel):
    core: list[ChecklistItem]
    recommended: list[ChecklistItem]
    optional_enhancements: list[ChecklistItem]

    def section(self, section: ChecklistSection) -> list[ChecklistItem]:
        if section is ChecklistSection.CORE:
            return self.core
        if section is ChecklistSection.RECOMMENDED:
            return self.recommended
        return self.optional_enhancements


# =============================================================================
# Meta block
# =============================================================================


class MigrationStep(StandardsModel):
    step: int
    title: str
    description: str
    focus_ids: list[str] | None = None
    notes: str | None = None


class ComplexityChecks(StandardsModel):
    enabled_by_default: bool | None = None
    description: str | None = None


class QualityGatePolicy(StandardsModel):
    prefer_soft_fail_on_legacy: bool | None = None
    description: str | None = None


class BazelDetectionRules(StandardsModel):
    root_markers: list[str] | None = None
    optional_markers: list[str] | None = None
    notes: str | None = None


class BazelOptOut(StandardsModel):
    description: str | None = None
    config_path: str | None = None


class BazelCiContract(StandardsModel):
    version_pinning: str | None = None
    config_flag: str | None = None
    deterministic_flags: list[str] | None = None
    remote_cache: str | None = None


class BazelIntegration(StandardsModel):
    description: str | None = None
    detection_rules: BazelDetectionRules | None = None
    opt_out: BazelOptOut | None = None
    target_conventions: dict[str, str] | None = None
    ci_contract: BazelCiContract | None = None
    advisory_notice: str | None = None


class Meta(StandardsModel):
    """Document-wide policy: coverage threshold, quality gates, migration guidance."""

    default_coverage_threshold: StrictInt | StrictFloat | None = None
    coverage_threshold_unit: str | None = None
    coverage_threshold_description: str | None = None
    complexity_checks: ComplexityChecks | None = None
    quality_gate_policy: QualityGatePolicy | None = None
    migration_guide: list[MigrationStep] | None = None
    bazel_integration: BazelIntegration | None = None


# =============================================================================
# Master document
# =============================================================================


class StackMeta(StandardsModel):
    label: str
    language_family: str


class MasterDocument(StandardsModel):
    """Root aggregate of the standards document."""

    schema_ref: str | None = Field(default=None, alias="$schema")
    version: int = Field(gt=0, strict=True)
    meta: Meta | None = None
    ci_systems: list[str]
    stacks: dict[str, StackMeta]
    checklist: Checklist

    def iter_items(self) -> Iterator[tuple[ChecklistSection, ChecklistItem]]:
        """Yield every checklist item with its section, in document order."""
        for section in ChecklistSection:
            for item in self.checklist.section(section):
                yield section, item

    def item_ids(self) -> list[str]:
        return [item.id for _, item in self.iter_items()]


# =============================================================================
# Projected document
# =============================================================================


class ProjectedItem(StandardsModel):
    id: str
    label: str
    description: str
    ci_hints: dict[str, CiHint] | None = None
    # Single hint block for the projected stack
    stack: StackHints | None = None


class ProjectedChecklist(StandardsModel):
    core: list[ProjectedItem]
    recommended: list[ProjectedItem]
    optional_enhancements: list[ProjectedItem]

    def section(self, section: ChecklistSection) -> list[ProjectedItem]:
        if section is ChecklistSection.CORE:
            return self.core
        if section is ChecklistSection.RECOMMENDED:
            return self.recommended
        return self.optional_enhancements


class ProjectedDocument(StandardsModel):
    """Per-stack (optionally per-CI) view of the master document."""

    version: int
    stack: str
    stack_label: str
    ci_systems: list[str]
    meta: Meta | None = None
    checklist: ProjectedChecklist


JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def master_json_schema() -> dict[str, Any]:
    """JSON schema of the master document, as published next to standards.json."""
    schema = MasterDocument.model_json_schema(by_alias=True)
    return {**schema, "$schema": JSON_SCHEMA_DIALECT, "title": "Repository Standards"}
