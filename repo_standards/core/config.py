"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Set `ENV_FILE` to point at
a local env file during development; it is never auto-discovered.

Settings only provide DEFAULT locations to the command line and the API. The
compiler itself never reads settings: every core operation receives the master
document as an argument.
"""

import os
from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from repo_standards.domain.enums import ArtifactBackend


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with optional support
    for an explicit env file.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "repo-standards"
    app_log_level: str = "INFO"

    # Observability
    observability_structured_logs: bool = True

    # Master document and companion documentation
    standards_master_path: str = "config/standards.json"
    standards_readme_path: str = "README.md"

    # Artifact storage backend: 'filesystem' or 's3'
    artifact_backend: ArtifactBackend = ArtifactBackend.FILESYSTEM

    # Local directory to store artifacts when backend is 'filesystem'
    artifact_filesystem_dir: str = "dist/config"

    # S3-compatible storage configuration (for MinIO or AWS S3)
    s3_endpoint_url: str | None = None
    s3_bucket_name: str = "repo-standards-artifacts"
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_region: str = "us-east-1"
    s3_force_path_style: bool = True

    # S3 key prefix; {VERSION} is replaced by the master schema version
    artifact_prefix: str = "standards/v{VERSION}/"

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("artifact_backend", mode="before")
    @classmethod
    def validate_artifact_backend(cls, v: str | ArtifactBackend) -> ArtifactBackend:
        """Accept the backend name case-insensitively."""
        if isinstance(v, ArtifactBackend):
            return v
        try:
            return ArtifactBackend(v.strip().lower())
        except ValueError:
            raise ValueError(
                f"artifact_backend must be one of {[b.value for b in ArtifactBackend]}, got '{v}'"
            )

    @field_validator("app_log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"app_log_level must be a standard logging level, got '{v}'")
        return level

    @field_validator("artifact_prefix")
    @classmethod
    def validate_artifact_prefix(cls, v: str) -> str:
        """Versioned artifacts must not overwrite each other in the bucket."""
        if "{VERSION}" not in v:
            raise ValueError("artifact_prefix must contain the {VERSION} placeholder")
        return v

    def prefix_for_version(self, version: int) -> str:
        """Resolve the S3 key prefix for a schema version."""
        return self.artifact_prefix.replace("{VERSION}", str(version))


settings = Settings()
