"""
Authentication services.

This module provides the AuthService class for account registration,
email/password login, user discovery and avatar selection.

Related files:
    - models.py: User
    - views.py: REST endpoints delegating here

Security:
    - Passwords hashed with Django's configured hasher
    - Login failures use one message for unknown email and bad password
    - Tokens issued by djangorestframework-simplejwt
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import MIN_NAME_LENGTH, User
from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService, ServiceResult, service_operation

if TYPE_CHECKING:
    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService(BaseService):
    """
    Centralized account business logic.

    Usage:
        from authentication.services import AuthService

        result = AuthService.register("ada", "ada@example.com", "s3cretpass")
        if result.success:
            user = result.data["user"]

        result = AuthService.login("ada@example.com", "s3cretpass")
        access = result.data["access"]
    """

    @staticmethod
    def issue_tokens(user: User) -> dict[str, str]:
        """Return a fresh JWT access/refresh pair for ``user``."""
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}

    @classmethod
    @service_operation
    def register(cls, username: str, email: str, password: str) -> ServiceResult[dict]:
        """
        Create an account and log it in.

        Args:
            username: Display name, unique, at least three characters
            email: Login email, unique
            password: Plain password, at least eight characters

        Returns:
            ServiceResult with ``{"user", "access", "refresh"}``

        Error codes:
            NAME_TOO_SHORT, PASSWORD_TOO_SHORT, USERNAME_TAKEN, EMAIL_TAKEN
        """
        username = (username or "").strip()
        email = (email or "").strip()

        if len(username) < MIN_NAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_NAME_LENGTH} characters",
                error_code="NAME_TOO_SHORT",
            )
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                error_code="PASSWORD_TOO_SHORT",
            )
        if User.objects.filter(name=username).exists():
            raise ValidationError("Username already used", error_code="USERNAME_TAKEN")
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError("Email already used", error_code="EMAIL_TAKEN")

        user = User.objects.create_user(email=email, name=username, password=password)
        logger.info(f"User registered: {user.id}")
        return ServiceResult.success({"user": user, **cls.issue_tokens(user)})

    @classmethod
    @service_operation
    def login(cls, email: str, password: str) -> ServiceResult[dict]:
        """
        Authenticate by email and password.

        Error codes:
            INVALID_CREDENTIALS: Unknown email, wrong password or inactive account
        """
        user = User.objects.filter(email__iexact=(email or "").strip()).first()
        if user is None or not user.is_active or not user.check_password(password or ""):
            raise ValidationError(
                "Incorrect Username or Password",
                error_code="INVALID_CREDENTIALS",
            )

        logger.info(f"User logged in: {user.id}")
        return ServiceResult.success({"user": user, **cls.issue_tokens(user)})

    @staticmethod
    def list_other_users(user_id: int) -> QuerySet[User]:
        """All active users except ``user_id``, for the contact picker."""
        return User.objects.filter(is_active=True).exclude(id=user_id).order_by("name")

    @classmethod
    @service_operation
    def search_by_email(cls, email: str) -> ServiceResult[User]:
        """
        Look up a single user by exact email.

        Error codes:
            USER_NOT_FOUND
        """
        user = User.objects.filter(email__iexact=(email or "").strip(), is_active=True).first()
        if user is None:
            raise NotFoundError("User does not exist", error_code="USER_NOT_FOUND")
        return ServiceResult.success(user)

    @classmethod
    @service_operation
    def set_avatar(cls, user_id: int, image: str) -> ServiceResult[User]:
        """
        Store the user's avatar string as given.

        Error codes:
            USER_NOT_FOUND, AVATAR_REQUIRED
        """
        if not image:
            raise ValidationError("An avatar image is required", error_code="AVATAR_REQUIRED")

        updated = User.objects.filter(id=user_id).update(avatar=image)
        if not updated:
            raise NotFoundError("User does not exist", error_code="USER_NOT_FOUND")

        logger.debug(f"Avatar set for user {user_id}")
        return ServiceResult.success(User.objects.get(id=user_id))
