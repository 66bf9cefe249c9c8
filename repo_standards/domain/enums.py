"""
Domain enums for the standards document.

These enums provide type-safe representations of the enumerated values used
in the master document and in validation findings.
"""

from enum import Enum


class Enforcement(str, Enum):
    """Enforcement level of a checklist item."""

    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


class Severity(str, Enum):
    """Severity reported when a checklist item is violated."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class ExecutionStage(str, Enum):
    """Point in the delivery lifecycle where a checklist item is executed."""

    PRE_COMMIT = "pre-commit"
    PRE_PUSH = "pre-push"
    CI_PR = "ci-pr"
    CI_MAIN = "ci-main"
    RELEASE = "release"
    NIGHTLY = "nightly"


class ChecklistSection(str, Enum):
    """
    Checklist sections of the master document.

    Declaration order is the order sections are processed and emitted.
    """

    CORE = "core"
    RECOMMENDED = "recommended"
    OPTIONAL_ENHANCEMENTS = "optionalEnhancements"


class FindingKind(str, Enum):
    """Validator rule that produced a finding."""

    SCHEMA = "schema"
    DUPLICATE_ID = "duplicate_id"
    MIGRATION_REFERENCE = "migration_reference"
    STACK_REFERENCE = "stack_reference"
    CI_HINT_KEY = "ci_hint_key"
    COVERAGE_THRESHOLD = "coverage_threshold"
    EXECUTION_STAGE = "execution_stage"
    DOCUMENTATION_VERSION = "documentation_version"
    SECTION_ENFORCEMENT = "section_enforcement"
    SCHEMA_VERSION = "schema_version"


class ArtifactBackend(str, Enum):
    """Storage backend for compiled artifacts."""

    FILESYSTEM = "filesystem"
    S3 = "s3"


# Locked enforcement/severity pairs per checklist section
SECTION_ENFORCEMENT = {
    ChecklistSection.CORE: (Enforcement.REQUIRED, Severity.ERROR),
    ChecklistSection.RECOMMENDED: (Enforcement.RECOMMENDED, Severity.WARN),
    ChecklistSection.OPTIONAL_ENHANCEMENTS: (Enforcement.OPTIONAL, Severity.INFO),
}

COVERAGE_UNIT_RATIO = "ratio"
