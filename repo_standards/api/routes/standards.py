"""
Read-only standards endpoints.

Serves the master document, its declared stacks and CI systems, the
validation report, and stack / (stack, CI) projections in canonical form.
Stack aliases (``ts``, ``dotnet``, ...) are accepted in paths.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from repo_standards import __version__
from repo_standards.api.schemas.standards import (
    CiSystemListResponse,
    StackListResponse,
    StackSummary,
)
from repo_standards.compiler.canonicalizer import canonicalize_json
from repo_standards.compiler.compiler import run_validation
from repo_standards.compiler.projector import project, resolve_stack_alias
from repo_standards.core.dependencies import Master, MasterRaw, Readme, ValidMaster
from repo_standards.domain.findings import ValidationReport
from repo_standards.services.version_sync import parse_major

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/standards", tags=["standards"])


@router.get("")
def get_master_document(raw: MasterRaw) -> JSONResponse:
    """The master document in canonical form."""
    return JSONResponse(content=canonicalize_json(raw))


@router.get("/stacks", response_model=StackListResponse, response_model_by_alias=True)
def list_stacks(master: Master) -> StackListResponse:
    """Declared stacks, in declaration order."""
    return StackListResponse(
        stacks=[
            StackSummary(id=stack_id, label=meta.label, language_family=meta.language_family)
            for stack_id, meta in master.stacks.items()
        ]
    )


@router.get("/ci-systems", response_model=CiSystemListResponse, response_model_by_alias=True)
def list_ci_systems(master: Master) -> CiSystemListResponse:
    return CiSystemListResponse(ci_systems=master.ci_systems)


@router.get("/validation", response_model=ValidationReport)
def get_validation_report(raw: MasterRaw, readme: Readme) -> ValidationReport:
    """
    Run every validation rule against the current master document.

    Always 200: an invalid document is reported through ``valid`` and
    ``findings``, not through the status code.
    """
    return run_validation(raw, readme=readme, expected_version=parse_major(__version__))


@router.get("/{stack}")
def get_stack_projection(stack: str, master: ValidMaster) -> JSONResponse:
    """Projection of the checklist onto one stack."""
    projected = project(master, resolve_stack_alias(stack))
    return JSONResponse(content=canonicalize_json(projected))


@router.get("/{stack}/{ci}")
def get_stack_ci_projection(stack: str, ci: str, master: ValidMaster) -> JSONResponse:
    """Projection of the checklist onto one stack and CI system."""
    projected = project(master, resolve_stack_alias(stack), ci)
    return JSONResponse(content=canonicalize_json(projected))
