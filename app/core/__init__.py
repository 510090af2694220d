"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling
    - service_operation: Converts domain exceptions into ServiceResult failures

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts (duplicates, etc.)

Note:
    Django models are NOT imported here to avoid AppRegistryNotReady errors.
    Import them directly from core.models.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .services import BaseService, ServiceResult, service_operation

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    "service_operation",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
]
