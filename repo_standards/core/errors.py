"""
Domain-specific exceptions for the repository standards compiler.

These exceptions represent contract violations and fatal load problems. They
are mapped to exit codes by the command line and to HTTP status codes by the
API layer. Semantic problems inside a well-formed master document are NOT
raised one by one: they are collected as validation findings.
"""

from typing import Any


class StandardsError(Exception):
    """Base exception for all repository standards errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DocumentLoadError(StandardsError):
    """
    Raised when the master document cannot be loaded.

    Examples:
    - Master file does not exist
    - File content is not valid JSON
    - Document does not conform to the master schema

    HTTP Status: 400 Bad Request
    """

    pass


class StandardsValidationError(StandardsError):
    """
    Raised when a build is refused because validation produced findings.

    The findings are available under ``details["findings"]``.

    HTTP Status: 422 Unprocessable Entity
    """

    pass


class UnknownTargetError(StandardsError):
    """
    Raised when a projection is requested for an undeclared stack or CI system.

    This is a caller contract violation, not a data-quality finding.

    HTTP Status: 404 Not Found
    """

    pass


class PublishError(StandardsError):
    """
    Raised when a compiled artifact cannot be persisted.

    Examples:
    - S3 upload failed
    - boto3 missing for the S3 backend
    - Unknown artifact backend configured

    HTTP Status: 502 Bad Gateway
    """

    pass


class VersionSyncError(StandardsError):
    """
    Raised when the schema version cannot be synchronized.

    Examples:
    - Release version string has no numeric major component
    - Master document file is missing

    HTTP Status: 400 Bad Request
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    DocumentLoadError: 400,
    StandardsValidationError: 422,
    UnknownTargetError: 404,
    PublishError: 502,
    VersionSyncError: 400,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
