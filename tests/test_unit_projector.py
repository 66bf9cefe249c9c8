"""
Unit tests for stack / CI projection.

Tests verify:
- Only applicable items are kept, in master order
- Stack hints are flattened to the projected stack
- CI hints are narrowed (or omitted) for CI projections
- Unknown stacks and CI systems are rejected
- Projections are deterministic
"""

import pytest

from repo_standards.compiler.canonicalizer import canonicalize_json, to_canonical_json_string
from repo_standards.compiler.projector import applies, project, resolve_stack_alias
from repo_standards.core.errors import UnknownTargetError
from repo_standards.domain.enums import ChecklistSection
from repo_standards.domain.models import MasterDocument


@pytest.fixture
def master(master_document) -> MasterDocument:
    return MasterDocument.model_validate(master_document)


def _ids(projected, section: ChecklistSection) -> list[str]:
    return [item.id for item in projected.checklist.section(section)]


class TestStackProjection:
    @pytest.mark.anyio
    async def test_keeps_only_items_for_the_stack(self, master):
        projected = project(master, "python")

        assert _ids(projected, ChecklistSection.CORE) == ["lint"]
        assert _ids(projected, ChecklistSection.RECOMMENDED) == ["type-check"]
        assert _ids(projected, ChecklistSection.OPTIONAL_ENHANCEMENTS) == ["release"]

    @pytest.mark.anyio
    async def test_every_projected_item_applies_to_the_stack(self, master):
        for stack in master.stacks:
            projected = project(master, stack)
            projected_ids = {
                item.id
                for section in ChecklistSection
                for item in projected.checklist.section(section)
            }
            expected = {item.id for _, item in master.iter_items() if applies(item, stack)}
            assert projected_ids == expected

    @pytest.mark.anyio
    async def test_header_fields(self, master):
        projected = project(master, "python")

        assert projected.version == 2
        assert projected.stack == "python"
        assert projected.stack_label == "Python"
        assert projected.ci_systems == ["azure-devops", "github-actions"]
        assert projected.meta == master.meta

    @pytest.mark.anyio
    async def test_flattens_stack_hints_to_projected_stack(self, master):
        projected = project(master, "python")
        lint = projected.checklist.core[0]

        assert lint.stack.example_tools == ["ruff"]
        assert "stackHints" not in canonicalize_json(lint)

    @pytest.mark.anyio
    async def test_item_without_hints_for_stack_has_no_stack_field(self, master):
        projected = project(master, "typescript-js")
        release = projected.checklist.optional_enhancements[0]

        assert release.id == "release"
        assert "stack" not in canonicalize_json(release)

    @pytest.mark.anyio
    async def test_stack_projection_keeps_all_ci_hints(self, master):
        projected = project(master, "python")

        assert set(projected.checklist.core[0].ci_hints) == {"github-actions"}
        assert set(projected.checklist.optional_enhancements[0].ci_hints) == {"azure-devops"}

    @pytest.mark.anyio
    async def test_stack_without_items_has_empty_sections(self, master_document):
        master_document["stacks"]["csharp-dotnet"] = {
            "label": "C# / .NET",
            "languageFamily": "dotnet",
        }
        projected = project(MasterDocument.model_validate(master_document), "csharp-dotnet")

        for section in ChecklistSection:
            assert projected.checklist.section(section) == []

    @pytest.mark.anyio
    @pytest.mark.parametrize("threshold", [1, 0, 0.8])
    async def test_meta_copied_without_numeric_coercion(self, master_document, threshold):
        master_document["meta"]["defaultCoverageThreshold"] = threshold
        projected = canonicalize_json(
            project(MasterDocument.model_validate(master_document), "python")
        )

        assert projected["meta"] == canonicalize_json(master_document["meta"])
        assert to_canonical_json_string(projected["meta"]["defaultCoverageThreshold"]) == str(
            threshold
        )

    @pytest.mark.anyio
    async def test_meta_omitted_when_master_has_none(self, master_document):
        del master_document["meta"]
        projected = project(MasterDocument.model_validate(master_document), "go")

        assert "meta" not in canonicalize_json(projected)


class TestGoRustCoreItem:
    """A core item applicable to {go, rust} with no CI restriction."""

    @pytest.fixture
    def go_rust_master(self) -> MasterDocument:
        return MasterDocument.model_validate(
            {
                "version": 2,
                "ciSystems": ["github-actions"],
                "stacks": {
                    "go": {"label": "Go", "languageFamily": "go"},
                    "rust": {"label": "Rust", "languageFamily": "rust"},
                    "python": {"label": "Python", "languageFamily": "python"},
                },
                "checklist": {
                    "core": [
                        {
                            "id": "vet",
                            "label": "Vet",
                            "description": "Run static checks.",
                            "appliesTo": {"stacks": ["go", "rust"]},
                            "stackHints": {
                                "go": {"verification": "go vet ./..."},
                                "rust": {"verification": "cargo check"},
                            },
                        }
                    ],
                    "recommended": [],
                    "optionalEnhancements": [],
                },
            }
        )

    @pytest.mark.anyio
    async def test_appears_in_go_projection_with_go_hints(self, go_rust_master):
        projected = canonicalize_json(project(go_rust_master, "go"))

        assert projected["checklist"]["core"] == [
            {
                "description": "Run static checks.",
                "id": "vet",
                "label": "Vet",
                "stack": {"verification": "go vet ./..."},
            }
        ]

    @pytest.mark.anyio
    async def test_python_projection_has_empty_core(self, go_rust_master):
        projected = project(go_rust_master, "python")

        assert projected.checklist.core == []


class TestCiProjection:
    @pytest.mark.anyio
    async def test_narrows_ci_systems(self, master):
        projected = project(master, "python", "github-actions")

        assert projected.ci_systems == ["github-actions"]

    @pytest.mark.anyio
    async def test_excludes_items_restricted_to_other_ci(self, master):
        projected = project(master, "python", "github-actions")

        assert _ids(projected, ChecklistSection.RECOMMENDED) == ["type-check"]
        assert _ids(projected, ChecklistSection.OPTIONAL_ENHANCEMENTS) == []

        projected = project(master, "python", "azure-devops")

        assert _ids(projected, ChecklistSection.RECOMMENDED) == []
        assert _ids(projected, ChecklistSection.OPTIONAL_ENHANCEMENTS) == ["release"]

    @pytest.mark.anyio
    async def test_unrestricted_items_apply_to_every_ci(self, master):
        for ci in master.ci_systems:
            assert _ids(project(master, "python", ci), ChecklistSection.CORE) == ["lint"]

    @pytest.mark.anyio
    async def test_keeps_only_matching_ci_hint(self, master):
        lint = project(master, "python", "github-actions").checklist.core[0]

        assert canonicalize_json(lint)["ciHints"] == {"github-actions": {"job": "lint"}}

    @pytest.mark.anyio
    async def test_omits_ci_hints_without_entry_for_ci(self, master):
        lint = project(master, "python", "azure-devops").checklist.core[0]

        assert "ciHints" not in canonicalize_json(lint)


class TestUnknownTargets:
    @pytest.mark.anyio
    async def test_unknown_stack(self, master):
        with pytest.raises(UnknownTargetError) as exc:
            project(master, "cobol")

        assert "cobol" in exc.value.message
        assert exc.value.details["valid_stacks"] == ["typescript-js", "python", "rust", "go"]

    @pytest.mark.anyio
    async def test_unknown_ci_system(self, master):
        with pytest.raises(UnknownTargetError) as exc:
            project(master, "python", "jenkins")

        assert exc.value.details["ci_system"] == "jenkins"

    @pytest.mark.anyio
    async def test_aliases_are_not_resolved_by_projector(self, master):
        with pytest.raises(UnknownTargetError):
            project(master, "py")


class TestDeterminism:
    @pytest.mark.anyio
    async def test_repeated_projection_is_identical(self, master):
        first = to_canonical_json_string(project(master, "python", "github-actions"))
        second = to_canonical_json_string(project(master, "python", "github-actions"))

        assert first == second

    @pytest.mark.anyio
    async def test_independent_of_key_insertion_order(self, master_document):
        reordered = {key: master_document[key] for key in reversed(list(master_document))}

        first = project(MasterDocument.model_validate(master_document), "python")
        second = project(MasterDocument.model_validate(reordered), "python")

        assert to_canonical_json_string(first) == to_canonical_json_string(second)


class TestStackAliases:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("ts", "typescript-js"),
            ("JS", "typescript-js"),
            ("dotnet", "csharp-dotnet"),
            ("csharp", "csharp-dotnet"),
            ("py", "python"),
            ("golang", "go"),
            (" rust ", "rust"),
            ("Cobol", "cobol"),
        ],
    )
    async def test_resolve_stack_alias(self, raw, expected):
        assert resolve_stack_alias(raw) == expected
