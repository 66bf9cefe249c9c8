"""
FastAPI dependency injection utilities.

The API never caches the master document: every request reads it from the
configured path, so edits show up without a restart. Tests override
``get_master_raw`` through ``app.dependency_overrides``.
"""

from typing import Annotated, Any

from fastapi import Depends

from repo_standards import __version__
from repo_standards.compiler.compiler import validated_master
from repo_standards.core.config import settings
from repo_standards.domain.models import MasterDocument
from repo_standards.services.loader import load_master, load_readme, parse_master
from repo_standards.services.version_sync import parse_major


def get_master_raw() -> dict[str, Any]:
    """Master document exactly as authored."""
    return load_master(settings.standards_master_path)


def get_readme() -> str | None:
    return load_readme(settings.standards_readme_path)


MasterRaw = Annotated[dict[str, Any], Depends(get_master_raw)]
Readme = Annotated[str | None, Depends(get_readme)]


def get_master(raw: MasterRaw) -> MasterDocument:
    """Typed master document; a non-conforming document surfaces as DocumentLoadError."""
    return parse_master(raw)


Master = Annotated[MasterDocument, Depends(get_master)]


def get_valid_master(raw: MasterRaw) -> MasterDocument:
    """Typed master document that passed every integrity rule; findings surface as 422."""
    return validated_master(raw, expected_version=parse_major(__version__))


ValidMaster = Annotated[MasterDocument, Depends(get_valid_master)]
