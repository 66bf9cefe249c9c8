"""
Unit tests for the error hierarchy and HTTP status mapping.
"""

import pytest

from repo_standards.core.errors import (
    DocumentLoadError,
    PublishError,
    StandardsError,
    StandardsValidationError,
    UnknownTargetError,
    VersionSyncError,
    get_status_code,
)


class TestStandardsError:
    @pytest.mark.anyio
    async def test_message_and_details(self):
        error = UnknownTargetError("Unknown stack 'cobol'", details={"stack": "cobol"})

        assert str(error) == "Unknown stack 'cobol'"
        assert error.message == "Unknown stack 'cobol'"
        assert error.details == {"stack": "cobol"}

    @pytest.mark.anyio
    async def test_details_default_to_empty_dict(self):
        assert PublishError("boom").details == {}

    @pytest.mark.anyio
    async def test_all_errors_share_base(self):
        for cls in (
            DocumentLoadError,
            StandardsValidationError,
            UnknownTargetError,
            PublishError,
            VersionSyncError,
        ):
            assert issubclass(cls, StandardsError)


class TestStatusCodes:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (DocumentLoadError("x"), 400),
            (StandardsValidationError("x"), 422),
            (UnknownTargetError("x"), 404),
            (PublishError("x"), 502),
            (VersionSyncError("x"), 400),
            (StandardsError("x"), 500),
            (RuntimeError("x"), 500),
        ],
    )
    async def test_get_status_code(self, error, status_code):
        assert get_status_code(error) == status_code
