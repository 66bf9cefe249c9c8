"""
Main Compiler for the repository standards artifacts.

Compiles the master standards document into the full set of deterministic
artifacts consumed downstream:

- ``standards.json``: the master, unmodified except for canonical key order
- ``standards.<stack>.json``: one projection per stack
- ``standards.<stack>.<ci>.json``: one projection per (stack, CI system)

The compiler never produces an artifact from a broken document: validation
runs first and any finding aborts the build.
"""

import json
import logging
import time
from typing import Any

from repo_standards.compiler.canonicalizer import canonicalize_json
from repo_standards.compiler.projector import project
from repo_standards.compiler.validator import validate
from repo_standards.core.errors import StandardsValidationError
from repo_standards.domain.findings import ValidationReport
from repo_standards.domain.models import MasterDocument
from repo_standards.services.loader import parse_master

logger = logging.getLogger(__name__)

MASTER_ARTIFACT = "standards.json"


def artifact_name(stack: str, ci: str | None = None) -> str:
    """
    Name of the artifact file for a projection.

    Example:
        >>> artifact_name("python", "github-actions")
        'standards.python.github-actions.json'
    """
    ci_suffix = f".{ci}" if ci else ""
    return f"standards.{stack}{ci_suffix}.json"


def run_validation(
    raw: dict[str, Any],
    readme: str | None = None,
    expected_version: int | None = None,
) -> ValidationReport:
    """
    Validate the master document, logging and recording metrics for the run.

    Args:
        raw: Parsed master document
        readme: Optional README text for the documentation version check
        expected_version: Optional schema version the document must declare

    Returns:
        The aggregated ValidationReport
    """
    report = validate(raw, readme=readme, expected_version=expected_version)

    if report.valid:
        logger.info("Master document passed validation")
    else:
        logger.warning(
            "Master document failed validation with %d finding(s)",
            len(report.findings),
            extra={"finding_kinds": sorted({f.kind.value for f in report.findings})},
        )

    _record_validation_metrics(report)
    return report


def validated_master(
    raw: dict[str, Any],
    readme: str | None = None,
    expected_version: int | None = None,
) -> MasterDocument:
    """
    Validate the master document and return its typed model.

    Every path that emits a projection goes through here, so nothing is ever
    projected from a document with findings.

    Raises:
        StandardsValidationError: If validation produced any finding
    """
    report = run_validation(raw, readme=readme, expected_version=expected_version)
    if not report.valid:
        raise StandardsValidationError(
            f"Master document has {len(report.findings)} validation finding(s)",
            details={"findings": [f.model_dump(mode="json") for f in report.findings]},
        )
    return parse_master(raw)


def compile_standards(
    raw: dict[str, Any],
    stacks: list[str] | None = None,
    ci_systems: list[str] | None = None,
    readme: str | None = None,
    expected_version: int | None = None,
) -> dict[str, Any]:
    """
    Compile the master document into canonical artifacts.

    This is the main entry point for building. It:
    1. Validates the raw master document (all rules)
    2. Parses it into the typed model
    3. Projects every requested stack, then every (stack, CI) pair
    4. Canonicalizes every artifact

    Args:
        raw: Parsed master document
        stacks: Stacks to project (defaults to every declared stack, in
                declaration order)
        ci_systems: CI systems to project (defaults to every declared CI system)
        readme: Optional README text for the documentation version check
        expected_version: Optional schema version the document must declare

    Returns:
        Ordered mapping of artifact name -> canonical document

    Raises:
        StandardsValidationError: If validation produced any finding
        UnknownTargetError: If a requested stack or CI system is not declared
    """
    start_time = time.time()
    logger.info("Starting standards build")

    try:
        master = validated_master(raw, readme=readme, expected_version=expected_version)
        target_stacks = list(master.stacks) if stacks is None else stacks
        target_ci_systems = list(master.ci_systems) if ci_systems is None else ci_systems

        artifacts: dict[str, Any] = {MASTER_ARTIFACT: canonicalize_json(raw)}

        for stack in target_stacks:
            artifacts[artifact_name(stack)] = canonicalize_json(project(master, stack))

        for stack in target_stacks:
            for ci in target_ci_systems:
                artifacts[artifact_name(stack, ci)] = canonicalize_json(project(master, stack, ci))

        duration = time.time() - start_time
        total_bytes = sum(len(json.dumps(doc).encode("utf-8")) for doc in artifacts.values())
        logger.info(
            "Compiled %d artifacts for %d stacks x %d CI systems in %.3fs (%d bytes)",
            len(artifacts),
            len(target_stacks),
            len(target_ci_systems),
            duration,
            total_bytes,
        )
        _record_build_metrics(
            "success", duration, len(target_stacks), len(target_stacks) * len(target_ci_systems)
        )

        return artifacts

    except Exception:
        _record_build_metrics("error", time.time() - start_time, 0, 0)
        raise


def _record_validation_metrics(report: ValidationReport) -> None:
    """Record validation metrics; metrics failures never break validation."""
    try:
        from repo_standards.core.observability import metrics

        metrics.validations_total.labels(result="valid" if report.valid else "invalid").inc()
        for finding in report.findings:
            metrics.findings_total.labels(kind=finding.kind.value).inc()
    except Exception:
        logger.debug("Failed to record validation metrics", exc_info=True)


def _record_build_metrics(
    status: str, duration: float, stack_projections: int, ci_projections: int
) -> None:
    """Record build metrics; metrics failures never break a build."""
    try:
        from repo_standards.core.observability import metrics

        metrics.build_duration_seconds.labels(status=status).observe(duration)
        if stack_projections:
            metrics.projections_total.labels(scope="stack").inc(stack_projections)
        if ci_projections:
            metrics.projections_total.labels(scope="stack_ci").inc(ci_projections)
    except Exception:
        logger.debug("Failed to record build metrics", exc_info=True)
