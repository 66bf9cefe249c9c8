"""
Unit tests for the Artifact Publisher Service.

Tests verify:
- Deterministic serialization and checksum computation
- Filesystem backend publishing
- S3 backend publishing and error handling
- Backend selection from settings
- Manifest contents
"""

import hashlib
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from repo_standards.core.config import Settings
from repo_standards.core.errors import PublishError
from repo_standards.services.artifact_publisher import (
    FilesystemBackend,
    S3Backend,
    compute_checksum,
    get_backend,
    publish_artifacts,
    serialize_artifact,
)

# =============================================================================
# Serialization and checksums
# =============================================================================


class TestSerialization:
    @pytest.mark.anyio
    async def test_serialization_is_canonical_pretty_json(self):
        data = serialize_artifact({"version": 2, "stack": "go"})

        assert data == b'{\n  "stack": "go",\n  "version": 2\n}\n'

    @pytest.mark.anyio
    async def test_serialization_ignores_key_order(self):
        assert serialize_artifact({"a": 1, "b": 2}) == serialize_artifact({"b": 2, "a": 1})

    @pytest.mark.anyio
    async def test_checksum_format(self):
        data = b"standards"

        assert compute_checksum(data) == f"sha256:{hashlib.sha256(data).hexdigest()}"


# =============================================================================
# Filesystem backend
# =============================================================================


class TestFilesystemBackend:
    @pytest.mark.anyio
    async def test_writes_file_and_returns_uri(self, tmp_path):
        backend = FilesystemBackend(tmp_path / "dist" / "config")

        uri = backend.publish("standards.go.json", b"{}\n", version=2)

        path = tmp_path / "dist" / "config" / "standards.go.json"
        assert path.read_bytes() == b"{}\n"
        assert uri == f"file://{path.resolve()}"

    @pytest.mark.anyio
    async def test_write_failure_raises_publish_error(self, tmp_path):
        blocker = tmp_path / "standards.go.json"
        blocker.mkdir()

        with pytest.raises(PublishError) as exc:
            FilesystemBackend(tmp_path).publish("standards.go.json", b"{}", version=2)

        assert exc.value.details["path"] == str(blocker)


# =============================================================================
# S3 backend
# =============================================================================


class TestS3Backend:
    @pytest.fixture
    def s3_settings(self) -> Settings:
        return Settings(
            artifact_backend="s3",
            s3_bucket_name="standards-bucket",
            artifact_prefix="published/v{VERSION}/",
        )

    @pytest.mark.anyio
    async def test_object_key_uses_versioned_prefix(self, s3_settings):
        backend = S3Backend(s3_settings, client=MagicMock())

        assert backend.object_key("standards.json", 2) == "published/v2/standards.json"

    @pytest.mark.anyio
    async def test_publish_uploads_and_returns_uri(self, s3_settings):
        client = MagicMock()
        backend = S3Backend(s3_settings, client=client)

        uri = backend.publish("standards.python.json", b"{}\n", version=2)

        assert uri == "s3://standards-bucket/published/v2/standards.python.json"
        client.put_object.assert_called_once_with(
            Bucket="standards-bucket",
            Key="published/v2/standards.python.json",
            Body=b"{}\n",
            ContentType="application/json",
        )

    @pytest.mark.anyio
    async def test_upload_failure_raises_publish_error(self, s3_settings):
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        backend = S3Backend(s3_settings, client=client)

        with pytest.raises(PublishError) as exc:
            backend.publish("standards.json", b"{}", version=2)

        assert exc.value.details["bucket"] == "standards-bucket"
        assert "AccessDenied" in exc.value.details["error"]


# =============================================================================
# Backend selection
# =============================================================================


class TestGetBackend:
    @pytest.mark.anyio
    async def test_defaults_to_filesystem(self, tmp_path):
        config = Settings(artifact_filesystem_dir=str(tmp_path))

        backend = get_backend(config=config)

        assert isinstance(backend, FilesystemBackend)
        assert backend.base_dir == tmp_path

    @pytest.mark.anyio
    async def test_out_dir_overrides_settings(self, tmp_path):
        backend = get_backend("filesystem", config=Settings(), out_dir=tmp_path)

        assert backend.base_dir == tmp_path

    @pytest.mark.anyio
    async def test_s3_from_settings(self):
        backend = get_backend(config=Settings(artifact_backend="S3"))

        assert isinstance(backend, S3Backend)

    @pytest.mark.anyio
    async def test_unknown_backend(self):
        with pytest.raises(PublishError) as exc:
            get_backend("ftp", config=Settings())

        assert exc.value.details["valid_backends"] == ["filesystem", "s3"]


# =============================================================================
# publish_artifacts
# =============================================================================


class TestPublishArtifacts:
    @pytest.mark.anyio
    async def test_manifest_lists_every_artifact(self, tmp_path):
        artifacts = {
            "standards.json": {"version": 2},
            "standards.go.json": {"stack": "go", "version": 2},
        }

        manifest = publish_artifacts(artifacts, version=2, backend=FilesystemBackend(tmp_path))

        assert list(manifest) == ["standards.json", "standards.go.json"]
        for name, entry in manifest.items():
            data = (tmp_path / name).read_bytes()
            assert entry["checksum"] == compute_checksum(data)
            assert entry["bytes"] == len(data)
            assert entry["uri"].startswith("file://")
            assert json.loads(data) == artifacts[name]

    @pytest.mark.anyio
    async def test_republishing_yields_identical_checksums(self, tmp_path):
        artifacts = {"standards.json": {"b": 1, "a": [1, 2]}}

        first = publish_artifacts(artifacts, version=2, backend=FilesystemBackend(tmp_path / "a"))
        second = publish_artifacts(artifacts, version=2, backend=FilesystemBackend(tmp_path / "b"))

        assert first["standards.json"]["checksum"] == second["standards.json"]["checksum"]

    @pytest.mark.anyio
    async def test_backend_errors_propagate(self):
        backend = MagicMock()
        backend.publish.side_effect = PublishError("boom")

        with pytest.raises(PublishError):
            publish_artifacts({"standards.json": {}}, version=2, backend=backend)
