"""Validation findings and the aggregated validation report."""

from __future__ import annotations

from pydantic import BaseModel, Field

from repo_standards.domain.enums import FindingKind


class Finding(BaseModel):
    """One integrity problem reported by a validator rule."""

    kind: FindingKind = Field(..., description="Rule that produced the finding")
    message: str = Field(..., description="Self-describing, human-readable message")
    subject: str | None = Field(
        default=None,
        description="Offending identifier (checklist id, stack id, CI system, ...)",
    )
    path: str | None = Field(
        default=None,
        description="JSON-path-ish pointer to the offending field (e.g. checklist.core[0].id)",
    )

    def __str__(self) -> str:
        return self.message


class ValidationReport(BaseModel):
    valid: bool
    findings: list[Finding] = Field(default_factory=list)

    @classmethod
    def from_findings(cls, findings: list[Finding]) -> ValidationReport:
        return cls(valid=not findings, findings=findings)

    def messages(self) -> list[str]:
        return [finding.message for finding in self.findings]

    def of_kind(self, kind: FindingKind) -> list[Finding]:
        return [finding for finding in self.findings if finding.kind == kind]
