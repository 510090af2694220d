"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error envelopes across REST and service layers
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ConflictError - State conflicts (duplicates, no-op mutations)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Group name must be at least 3 characters")

    # Raise with error code for client handling
    raise ValidationError("Email already used", error_code="EMAIL_TAKEN")

    # Raise with additional details
    raise NotFoundError(
        "User not found",
        error_code="USER_NOT_FOUND",
        details={"user_id": 42},
    )

Note:
    Service methods decorated with core.services.service_operation convert
    these into ServiceResult failures; callers never see them raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, ids, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Names below the minimum length
    - Unsupported message types
    - Duplicate usernames, emails or community names

    Example:
        raise ValidationError("Name already taken", error_code="NAME_TAKEN")
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        group = Group.objects.filter(id=group_id).first()
        if not group:
            raise NotFoundError(
                f"Group with ID {group_id} not found",
                error_code="GROUP_NOT_FOUND",
                details={"group_id": group_id},
            )
    """

    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when a user lacks permission for an operation.

    Note:
        For authentication failures (missing/invalid token), DRF's
        NotAuthenticated applies. This is for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for mutations that would be no-ops, such as adding users who are
    already members or promoting someone who is already an admin.
    """

    default_error_code: str = "CONFLICT"
