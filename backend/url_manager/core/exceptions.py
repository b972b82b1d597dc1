"""Application exception hierarchy following RFC 7807 Problem Details."""

from typing import Any
from uuid import UUID

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception following RFC 7807.

    All custom exceptions should inherit from this class.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.error_detail = detail or {}

        super().__init__(
            status_code=status_code,
            detail={
                "type": f"https://api.urls.local/errors/{error_code}",
                "title": error_code.replace("_", " ").title(),
                "status": status_code,
                "detail": message,
                "instance": None,  # Will be set by exception handler
                **self.error_detail,
            },
        )


# ============================================================================
# Authentication & Authorization Exceptions (401, 403)
# ============================================================================


class AuthenticationError(AppException):
    """Caller is not authenticated."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="authentication_required",
            message=message,
        )


class TokenExpiredError(AppException):
    """JWT token has expired."""

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="token_expired",
            message=message,
        )


class InvalidTokenError(AppException):
    """JWT token is invalid."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="invalid_token",
            message=message,
        )


class PermissionDeniedError(AppException):
    """Token lacks the required permission."""

    def __init__(
        self,
        message: str = "Permission denied",
        required_permission: str | None = None,
    ) -> None:
        detail = {}
        if required_permission:
            detail["required_permission"] = required_permission

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
            detail=detail,
        )


# ============================================================================
# Resource Exceptions (404, 409)
# ============================================================================


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(
        self,
        resource: str,
        identifier: str | UUID | None = None,
    ) -> None:
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="not_found",
            message=message,
            detail={"resource": resource},
        )


class AlreadyExistsError(AppException):
    """Resource already exists (conflict)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str,
        error_code: str = "already_exists",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            message=f"{resource} with {field}='{value}' already exists",
            detail={"resource": resource, "field": field, "value": value},
        )


# ============================================================================
# Validation Exceptions (400, 422)
# ============================================================================


class ValidationError(AppException):
    """Request validation error."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        error_code: str = "validation_error",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
            detail={"errors": errors or []},
        )


# ============================================================================
# Storage Exceptions (503)
# ============================================================================


class DatabaseError(AppException):
    """Database connection or query error."""

    def __init__(self, message: str = "Database error occurred") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="database_error",
            message=message,
        )
