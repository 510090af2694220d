"""
Authentication models.

This module defines the account model shared by every chat surface:
- User: Email-based login with a unique display name, an avatar and a
  persisted online flag

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: AuthService business logic (register, login, avatar)

Security:
    - User passwords hashed with Django's configured password hasher
    - Avatars are stored verbatim (base64 data URL or remote URL)
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager

# Display names shorter than this are rejected at registration
MIN_NAME_LENGTH = 3


class User(AbstractBaseUser, PermissionsMixin):
    """
    Chat user identified by email for login and by name for display.

    Fields:
        email: Login identifier, unique
        name: Public display name, unique (the "username" of the chat)
        avatar: Opaque avatar string; empty until the user picks one
        is_online: Whether a realtime connection is currently registered
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email='ada@example.com',
            name='ada',
            password='securepassword'
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )
    name = models.CharField(
        unique=True,
        max_length=50,
        help_text="Display name shown to other users",
    )
    avatar = models.TextField(
        blank=True,
        default="",
        help_text="Avatar image as a data URL or remote URL",
    )

    # Presence flag mirrored from the realtime registry
    is_online = models.BooleanField(
        default=False,
        help_text="Whether the user currently has a live chat connection",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    @property
    def is_avatar_set(self) -> bool:
        """Whether the user has chosen an avatar."""
        return bool(self.avatar)
