"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures
- API client helpers for anonymous and authenticated requests

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get(f"/api/v1/auth/users/{user.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient

from authentication.models import User
from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory(name="ada", email="ada@example.com")


@pytest.fixture
def other_user(db):
    """Create a second user for discovery tests."""
    return UserFactory(name="grace", email="grace@example.com")


@pytest.fixture
def superuser(db):
    """Create a superuser with admin privileges."""
    return User.objects.create_superuser(
        email="admin@example.com",
        name="admin",
        password="AdminPass123!",
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an API client authenticated as ``user``."""
    api_client.force_authenticate(user=user)
    return api_client
