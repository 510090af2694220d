"""
Factory Boy factories for authentication models.

Provides realistic test data generation for:
- User: Custom user model with email-based authentication and unique name

Usage:
    from authentication.tests.factories import UserFactory

    # Create a user with default values
    user = UserFactory()

    # Create a user with a chosen display name
    user = UserFactory(name="ada")

    # Create an online user
    user = UserFactory(is_online=True)
"""

import factory

from authentication.models import User

DEFAULT_PASSWORD = "TestPass123!"


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active users with a unique email and display name.
    The password is always DEFAULT_PASSWORD unless given.

    Examples:
        # Basic user
        user = UserFactory()

        # User with an avatar
        user = UserFactory(avatar="data:image/svg+xml;base64,PHN2Zz4=")

        # Inactive user (deactivated)
        user = UserFactory(is_active=False)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Sequence(lambda n: f"user{n:03d}")
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", DEFAULT_PASSWORD)
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )
