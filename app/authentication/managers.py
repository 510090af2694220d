"""
Custom user manager for email-based authentication.

This module provides the UserManager class that handles user creation
with email as the login identifier and a required display name.

Related files:
    - models.py: User model that uses this manager

Security:
    - Passwords are automatically hashed via set_password()
    - Email addresses are normalized (lowercase domain)
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model with email-based authentication.

    Usage:
        user = User.objects.create_user(
            email='ada@example.com',
            name='ada',
            password='securepassword'
        )

        admin = User.objects.create_superuser(
            email='root@example.com',
            name='root',
            password='adminpassword'
        )
    """

    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular user with the given email and password.

        Args:
            email: User's email address (required)
            password: User's password
            **extra_fields: Additional fields to set on the user (name, avatar)

        Returns:
            User: The created user instance

        Raises:
            ValueError: If email or name is not provided
        """
        if not email:
            raise ValueError("The Email field must be set")
        if not extra_fields.get("name"):
            raise ValueError("The Name field must be set")

        email = self.normalize_email(email)

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save a superuser with the given email and password.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)
