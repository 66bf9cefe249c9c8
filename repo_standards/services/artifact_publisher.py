"""
Artifact Publisher Service

Persists compiled standards artifacts to a local directory or to S3-compatible
storage, and returns a manifest of what was written.

Every artifact is serialized through the canonicalizer immediately before it
is written, so the persisted bytes are always the canonical form. The
manifest records a SHA-256 checksum per artifact, which makes reproducible
builds easy to verify: two builds of the same master produce identical
checksums.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Protocol

from repo_standards.compiler.canonicalizer import to_canonical_json_pretty
from repo_standards.core.config import Settings, settings
from repo_standards.core.errors import PublishError
from repo_standards.domain.enums import ArtifactBackend

logger = logging.getLogger(__name__)


class ArtifactBackendProtocol(Protocol):
    def publish(self, name: str, data: bytes, version: int) -> str: ...


def serialize_artifact(document: Any) -> bytes:
    """
    Serialize an artifact to deterministic JSON bytes.

    Args:
        document: Artifact document (canonicalized again here, which is a no-op
                  for documents that already are canonical)

    Returns:
        UTF-8 encoded, pretty-printed JSON with sorted keys and a trailing newline
    """
    return to_canonical_json_pretty(document).encode("utf-8")


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum of data.

    Returns:
        SHA-256 checksum in format: sha256:<lowercase-hex>
    """
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


class FilesystemBackend:
    """
    Filesystem storage backend for standards artifacts.

    Writes every artifact flat into one output directory (dist/config by
    default), which is the layout package consumers read.
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def publish(self, name: str, data: bytes, version: int) -> str:
        """
        Write artifact data to the output directory.

        Returns:
            File URI (file://absolute/path)
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        artifact_path = self.base_dir / name

        try:
            artifact_path.write_bytes(data)
        except OSError as e:
            raise PublishError(
                f"Failed to write artifact {name}",
                details={"path": str(artifact_path), "error": str(e)},
            ) from e

        logger.info("Published artifact to filesystem: %s (%d bytes)", artifact_path, len(data))

        return f"file://{artifact_path.resolve()}"


class S3Backend:
    """
    S3-compatible storage backend for standards artifacts.

    Supports AWS S3 and S3-compatible services like MinIO. Artifacts are
    stored under a versioned prefix (``standards/v{VERSION}/`` by default).
    """

    def __init__(self, config: Settings | None = None, client: Any = None):
        self.config = config or settings
        self._client = client

    def _get_client(self):
        """Get or create boto3 S3 client."""
        if self._client is None:
            try:
                import boto3
                from botocore.config import Config as BotoConfig
            except ImportError as e:
                raise PublishError(
                    "boto3 is required for the S3 backend but not installed",
                    details={"backend": "s3", "fix": "pip install 'repo-standards[s3]'"},
                ) from e

            client_args: dict[str, Any] = {
                "service_name": "s3",
                "region_name": self.config.s3_region,
            }

            # Endpoint URL for MinIO or non-AWS S3
            if self.config.s3_endpoint_url:
                client_args["endpoint_url"] = self.config.s3_endpoint_url

            if self.config.s3_access_key_id and self.config.s3_secret_access_key:
                client_args["aws_access_key_id"] = self.config.s3_access_key_id
                client_args["aws_secret_access_key"] = self.config.s3_secret_access_key

            if self.config.s3_force_path_style:
                client_args["config"] = BotoConfig(
                    signature_version="s3v4",
                    s3={"addressing_style": "path"},
                )

            self._client = boto3.client(**client_args)

        return self._client

    def object_key(self, name: str, version: int) -> str:
        prefix = self.config.prefix_for_version(version)
        return f"{prefix}{name}".strip("/")

    def publish(self, name: str, data: bytes, version: int) -> str:
        """
        Upload artifact data to S3-compatible storage.

        Returns:
            S3 URI (s3://bucket/key)
        """
        client = self._get_client()
        key = self.object_key(name, version)
        bucket = self.config.s3_bucket_name

        try:
            client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType="application/json",
            )
        except Exception as e:
            logger.error("S3 upload failed for %s: %s", key, e)
            raise PublishError(
                "Failed to publish artifact to S3",
                details={"bucket": bucket, "key": key, "error": str(e)},
            ) from e

        s3_uri = f"s3://{bucket}/{key}"

        logger.info("Published artifact to S3: %s (%d bytes)", s3_uri, len(data))

        return s3_uri


def get_backend(
    backend: ArtifactBackend | str | None = None,
    config: Settings | None = None,
    out_dir: str | Path | None = None,
) -> ArtifactBackendProtocol:
    """
    Build the configured artifact backend.

    Args:
        backend: Backend name; defaults to ``config.artifact_backend``
        config: Settings to read defaults from
        out_dir: Output directory override for the filesystem backend

    Raises:
        PublishError: If the backend name is unknown
    """
    config = config or settings
    try:
        kind = ArtifactBackend(backend) if backend is not None else config.artifact_backend
    except ValueError as e:
        raise PublishError(
            f"Unknown artifact backend '{backend}'",
            details={"backend": backend, "valid_backends": [b.value for b in ArtifactBackend]},
        ) from e

    if kind is ArtifactBackend.S3:
        return S3Backend(config)
    return FilesystemBackend(out_dir or config.artifact_filesystem_dir)


def publish_artifacts(
    artifacts: dict[str, Any],
    version: int,
    backend: ArtifactBackendProtocol | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Persist every compiled artifact.

    Args:
        artifacts: Mapping of artifact name -> document (from compile_standards)
        version: Master schema version (used for versioned storage prefixes)
        backend: Storage backend; defaults to the configured one

    Returns:
        Manifest mapping artifact name -> {"uri", "checksum", "bytes"}

    Raises:
        PublishError: If any artifact cannot be written
    """
    backend = backend or get_backend()
    manifest: dict[str, dict[str, Any]] = {}

    for name, document in artifacts.items():
        data = serialize_artifact(document)
        uri = backend.publish(name, data, version)
        manifest[name] = {"uri": uri, "checksum": compute_checksum(data), "bytes": len(data)}
        _record_artifact_metrics(len(data))

    logger.info("Published %d artifacts", len(manifest))
    return manifest


def _record_artifact_metrics(size: int) -> None:
    try:
        from repo_standards.core.observability import metrics

        metrics.artifact_bytes.observe(size)
    except Exception:
        logger.debug("Failed to record artifact metrics", exc_info=True)
