"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities
- service_operation: Decorator converting domain exceptions into results

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Returned to callers for expected failures
    - BaseApplicationError subclasses: Raised inside a service body and
      converted to ServiceResult at the boundary by @service_operation
    - Anything else: Unexpected (database errors, bugs), propagates

Usage:
    from core.services import BaseService, ServiceResult, service_operation

    class GroupService(BaseService):
        @classmethod
        @service_operation
        def rename(cls, group_id: int, name: str) -> ServiceResult[Group]:
            group = Group.objects.filter(id=group_id).first()
            if group is None:
                raise NotFoundError("Group not found", error_code="GROUP_NOT_FOUND")

            with cls.atomic():
                group.name = name
                group.save(update_fields=["name", "updated_at"])

            cls.get_logger().info(f"Renamed group {group.id}")
            return ServiceResult.success(group)

    # In view
    result = GroupService.rename(group_id, name)
    if result.success:
        return Response(GroupSerializer(result.data).data)
    return Response(result.to_response(), status=400)

Related:
    - core.exceptions: Domain error taxonomy
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from .exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(group)

        # Failure case
        return ServiceResult.failure("Not a member", "NOT_MEMBER")

        # Check result
        result = VisibilityService.history(conversation, user)
        if result.success:
            messages = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure("Group not found", "GROUP_NOT_FOUND")
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from a domain exception.

        Args:
            exc: The caught application error

        Returns:
            ServiceResult carrying the exception's message and error code
        """
        errors = exc.details or None
        return cls(
            success=False,
            error=exc.message,
            error_code=exc.error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to the API envelope.

        Returns:
            Dict with ``status`` plus either ``data`` or ``msg``/``error_code``
        """
        if self.success:
            return {"status": True, "data": self.data}

        response: dict[str, Any] = {
            "status": False,
            "msg": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response


def service_operation(func: Callable[..., ServiceResult]) -> Callable[..., ServiceResult]:
    """
    Convert domain exceptions raised by a service method into failures.

    Service bodies raise ``BaseApplicationError`` subclasses wherever a rule
    is violated; this decorator is the single place they become
    ``ServiceResult.failure``. Raising from inside ``cls.atomic()`` rolls the
    transaction back before the failure is returned.

    Apply below ``@classmethod``:

        @classmethod
        @service_operation
        def add_members(cls, ...): ...
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> ServiceResult:
        try:
            return func(*args, **kwargs)
        except BaseApplicationError as exc:
            owner = args[0] if args and isinstance(args[0], type) else None
            logger = (
                owner.get_logger()
                if owner is not None and issubclass(owner, BaseService)
                else logging.getLogger(func.__module__)
            )
            logger.debug(f"{func.__qualname__} rejected: {exc}")
            return ServiceResult.from_exception(exc)

    return wrapper


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Example:
            with cls.atomic():
                membership.delete()
                Message.objects.create(...)
                # If the message fails, the membership is restored
        """
        with transaction.atomic():
            yield
