"""
Custom Exception Classes for ContentHub

This module defines custom exceptions for consistent error responses
across routes and services.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned alongside error messages."""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    STORAGE_ERROR = "STORAGE_ERROR"
    CONTENT_MUTATION_FAILED = "CONTENT_MUTATION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ContentHubError(Exception):
    """Base exception class for all ContentHub exceptions"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(ContentHubError):
    """Raised when the caller is not authenticated"""

    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Authentication required", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details or {})


class AuthorizationError(ContentHubError):
    """Raised when the caller lacks permission for an action"""

    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(ContentHubError):
    """Base class for resource not found errors"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ContentNotFoundError(ResourceNotFoundError):
    """Raised when a class, gallery or news item is not found"""

    def __init__(self, kind: str = "Content", content_id: Any | None = None):
        super().__init__(resource_type=kind, resource_id=content_id)


class CommentNotFoundError(ResourceNotFoundError):
    """Raised when a comment is not found"""

    def __init__(self, comment_id: Any | None = None):
        super().__init__(resource_type="Comment", resource_id=comment_id)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(ContentHubError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class InvalidFileTypeError(ValidationError):
    """Raised when an uploaded file is not an accepted image"""

    def __init__(self, file_type: str | None, allowed_types: list[str]):
        super().__init__(
            message=f"File type '{file_type}' is not allowed",
            details={"file_type": file_type, "allowed_types": allowed_types},
        )


# ============================================================================
# Storage & Mutation Exceptions
# ============================================================================


class StorageError(ContentHubError):
    """Raised when an object storage operation fails"""

    error_code = ErrorCode.STORAGE_ERROR

    def __init__(self, message: str, bucket: str | None = None, paths: list[str] | None = None):
        details: dict[str, Any] = {}
        if bucket:
            details["bucket"] = bucket
        if paths:
            details["paths"] = paths
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)


class ContentMutationError(ContentHubError):
    """Raised when a create/update/delete flow cannot complete"""

    error_code = ErrorCode.CONTENT_MUTATION_FAILED

    def __init__(self, message: str, step: str | None = None):
        details = {"step": step} if step else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
