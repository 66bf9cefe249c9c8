"""
Command line interface for the repository standards compiler.

Usage:
    repo-standards validate [--master PATH] [--readme PATH]
    repo-standards build [--out DIR] [--backend filesystem|s3]
    repo-standards show STACK [CI]
    repo-standards instructions INPUT [--out PATH]
    repo-standards counts
    repo-standards sync-version [VERSION]
    repo-standards schema [--out PATH]
    repo-standards detect-bazel [DIR]

Paths default to the values in settings (STANDARDS_MASTER_PATH,
STANDARDS_README_PATH, ARTIFACT_FILESYSTEM_DIR). Results go to stdout, logs
go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from repo_standards import __version__
from repo_standards.compiler.canonicalizer import to_canonical_json_pretty
from repo_standards.compiler.compiler import compile_standards, run_validation, validated_master
from repo_standards.compiler.projector import project, resolve_stack_alias
from repo_standards.core.config import settings
from repo_standards.core.errors import StandardsError, StandardsValidationError
from repo_standards.core.observability import (
    configure_structured_logging,
    generate_run_id,
    set_run_id,
)
from repo_standards.domain.enums import ArtifactBackend
from repo_standards.domain.models import master_json_schema
from repo_standards.services.artifact_publisher import get_backend, publish_artifacts
from repo_standards.services.bazel_detection import detect_bazel
from repo_standards.services.instructions import (
    instructions_filename,
    render_instructions,
    render_readme_counts,
)
from repo_standards.services.loader import (
    load_json_document,
    load_master,
    load_readme,
)
from repo_standards.services.version_sync import parse_major, sync_standards_version

logger = logging.getLogger(__name__)


def log_error(msg: str) -> None:
    print(f"[ERROR] {msg}", file=sys.stderr)


def log_success(msg: str) -> None:
    print(f"[OK] {msg}")


def _print_findings(error: StandardsValidationError) -> None:
    log_error(error.message)
    for finding in error.details.get("findings", []):
        print(f"  - [{finding['kind']}] {finding['message']}", file=sys.stderr)


def cmd_validate(args: argparse.Namespace) -> int:
    raw = load_master(args.master)
    readme = load_readme(args.readme)
    report = run_validation(raw, readme=readme, expected_version=parse_major(__version__))

    if not report.valid:
        log_error(f"{args.master} has {len(report.findings)} validation finding(s):")
        for finding in report.findings:
            print(f"  - [{finding.kind.value}] {finding.message}", file=sys.stderr)
        return 1

    log_success(f"{args.master} is valid")
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    raw = load_master(args.master)
    readme = load_readme(args.readme)

    try:
        artifacts = compile_standards(
            raw, readme=readme, expected_version=parse_major(__version__)
        )
    except StandardsValidationError as e:
        _print_findings(e)
        return 1

    backend = get_backend(args.backend, out_dir=args.out)
    manifest = publish_artifacts(artifacts, version=raw["version"], backend=backend)

    for name, entry in manifest.items():
        print(f"{name}  {entry['checksum']}  {entry['uri']}")
    log_success(f"Built {len(manifest)} artifacts")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    try:
        master = validated_master(
            load_master(args.master), expected_version=parse_major(__version__)
        )
    except StandardsValidationError as e:
        _print_findings(e)
        return 1

    projected = project(master, resolve_stack_alias(args.stack), args.ci)
    sys.stdout.write(to_canonical_json_pretty(projected))
    return 0


def cmd_instructions(args: argparse.Namespace) -> int:
    source = Path(args.input)
    projected = load_json_document(source)
    out = Path(args.out) if args.out else source.with_name(instructions_filename(source.name))

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render_instructions(projected, source.as_posix()), encoding="utf-8")
    log_success(f"Generated {out}")
    return 0


def cmd_counts(args: argparse.Namespace) -> int:
    print(render_readme_counts(load_master(args.master)))
    return 0


def cmd_sync_version(args: argparse.Namespace) -> int:
    updated = sync_standards_version(args.master, args.readme, version=args.version)
    if updated is None:
        log_success("Schema version already up to date")
    else:
        log_success(f"Schema version updated to {updated}")
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    text = to_canonical_json_pretty(master_json_schema())
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
        log_success(f"Schema written to {args.out}")
    else:
        sys.stdout.write(text)
    return 0


def cmd_detect_bazel(args: argparse.Namespace) -> int:
    result = detect_bazel(Path(args.dir).resolve())
    print(json.dumps(result, indent=2))
    return 0


COMMANDS = {
    "validate": cmd_validate,
    "build": cmd_build,
    "show": cmd_show,
    "instructions": cmd_instructions,
    "counts": cmd_counts,
    "sync-version": cmd_sync_version,
    "schema": cmd_schema,
    "detect-bazel": cmd_detect_bazel,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-standards",
        description="Validate and compile the repository standards checklist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        help="Log level (overrides APP_LOG_LEVEL)",
    )

    paths = argparse.ArgumentParser(add_help=False)
    paths.add_argument(
        "--master",
        default=settings.standards_master_path,
        help="Path to the master standards.json",
    )
    paths.add_argument(
        "--readme",
        default=settings.standards_readme_path,
        help="Path to the README checked for the schema version",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("validate", parents=[paths], help="Validate the master document")

    build_parser_ = subparsers.add_parser("build", parents=[paths], help="Build all artifacts")
    build_parser_.add_argument(
        "--out",
        default=settings.artifact_filesystem_dir,
        help="Output directory for the filesystem backend",
    )
    build_parser_.add_argument(
        "--backend",
        choices=[b.value for b in ArtifactBackend],
        help="Artifact backend (overrides ARTIFACT_BACKEND)",
    )

    show_parser = subparsers.add_parser(
        "show", parents=[paths], help="Print one projection as canonical JSON"
    )
    show_parser.add_argument("stack", help="Stack id or alias (e.g. python, ts, dotnet)")
    show_parser.add_argument("ci", nargs="?", help="Optional CI system id")

    instructions_parser = subparsers.add_parser(
        "instructions", help="Render instructions markdown for a projected artifact"
    )
    instructions_parser.add_argument("input", help="Projected artifact (standards.<stack>.json)")
    instructions_parser.add_argument("--out", help="Output markdown path")

    subparsers.add_parser("counts", parents=[paths], help="Print the README checklist counts")

    sync_parser = subparsers.add_parser(
        "sync-version", parents=[paths], help="Raise the schema version to the package major"
    )
    sync_parser.add_argument(
        "version", nargs="?", help=f"Package version (default: {__version__})"
    )

    schema_parser = subparsers.add_parser("schema", help="Export the master document JSON schema")
    schema_parser.add_argument("--out", help="Output path (default: stdout)")

    bazel_parser = subparsers.add_parser("detect-bazel", help="Probe a repository for Bazel")
    bazel_parser.add_argument("dir", nargs="?", default=".", help="Repository root")

    return parser


def configure_logging(level: str | None) -> None:
    level = (level or settings.app_log_level).upper()
    if settings.observability_structured_logs:
        configure_structured_logging(level)
    else:
        logging.basicConfig(level=getattr(logging, level, logging.INFO), stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    set_run_id(generate_run_id())

    try:
        return COMMANDS[args.command](args)
    except StandardsError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        log_error(e.message)
        if e.details:
            print(json.dumps(e.details, indent=2, default=str), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
