"""
Tests for the validate-then-project artifact build.

These tests verify:
- The full artifact set is produced, in a stable order
- Artifacts are canonical and byte-for-byte reproducible
- Invalid documents never produce artifacts
- Stack / CI subsets can be requested explicitly
"""

import pytest

from repo_standards.compiler import compile_standards
from repo_standards.compiler.canonicalizer import to_canonical_json_string
from repo_standards.compiler.compiler import MASTER_ARTIFACT, artifact_name
from repo_standards.core.errors import StandardsValidationError, UnknownTargetError
from repo_standards.core.observability import metrics


class TestArtifactName:
    @pytest.mark.anyio
    async def test_stack_artifact(self):
        assert artifact_name("python") == "standards.python.json"

    @pytest.mark.anyio
    async def test_stack_ci_artifact(self):
        assert artifact_name("go", "azure-devops") == "standards.go.azure-devops.json"


class TestCompileStandards:
    @pytest.mark.anyio
    async def test_produces_master_stack_and_stack_ci_artifacts(self, master_document):
        artifacts = compile_standards(master_document)

        stacks = ["typescript-js", "python", "rust", "go"]
        ci_systems = ["azure-devops", "github-actions"]
        expected = (
            [MASTER_ARTIFACT]
            + [f"standards.{s}.json" for s in stacks]
            + [f"standards.{s}.{c}.json" for s in stacks for c in ci_systems]
        )
        assert list(artifacts) == expected

    @pytest.mark.anyio
    async def test_master_artifact_is_canonical_copy(self, master_document):
        artifacts = compile_standards(master_document)

        master = artifacts[MASTER_ARTIFACT]
        assert master == master_document
        assert list(master.keys()) == sorted(master_document.keys())

    @pytest.mark.anyio
    async def test_projection_artifacts_use_wire_names(self, master_document):
        projected = compile_standards(master_document)["standards.python.github-actions.json"]

        assert projected["stack"] == "python"
        assert projected["stackLabel"] == "Python"
        assert projected["ciSystems"] == ["github-actions"]
        assert set(projected["checklist"]) == {"core", "recommended", "optionalEnhancements"}

    @pytest.mark.anyio
    async def test_build_is_reproducible(self, master_document):
        first = compile_standards(master_document)
        second = compile_standards(dict(reversed(list(master_document.items()))))

        assert {k: to_canonical_json_string(v) for k, v in first.items()} == {
            k: to_canonical_json_string(v) for k, v in second.items()
        }

    @pytest.mark.anyio
    async def test_subset_of_targets(self, master_document):
        artifacts = compile_standards(master_document, stacks=["go"], ci_systems=["github-actions"])

        assert list(artifacts) == [
            MASTER_ARTIFACT,
            "standards.go.json",
            "standards.go.github-actions.json",
        ]

    @pytest.mark.anyio
    async def test_unknown_target_is_rejected(self, master_document):
        with pytest.raises(UnknownTargetError):
            compile_standards(master_document, stacks=["cobol"])

    @pytest.mark.anyio
    async def test_invalid_document_raises_with_findings(self, master_document):
        master_document["meta"]["defaultCoverageThreshold"] = 1.4

        with pytest.raises(StandardsValidationError) as exc:
            compile_standards(master_document)

        findings = exc.value.details["findings"]
        assert [f["kind"] for f in findings] == ["coverage_threshold"]

    @pytest.mark.anyio
    async def test_readme_and_version_checks_are_applied(self, master_document, readme_text):
        with pytest.raises(StandardsValidationError) as exc:
            compile_standards(master_document, readme=readme_text, expected_version=3)

        assert [f["kind"] for f in exc.value.details["findings"]] == ["schema_version"]

    @pytest.mark.anyio
    async def test_records_build_metrics(self, master_document):
        registry = metrics.registry
        builds = {"status": "success"}
        before = registry.get_sample_value("standards_build_duration_seconds_count", builds) or 0

        compile_standards(master_document)

        after = registry.get_sample_value("standards_build_duration_seconds_count", builds)
        assert after == before + 1
        assert registry.get_sample_value("standards_projections_total", {"scope": "stack_ci"}) >= 8
