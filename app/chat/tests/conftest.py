"""
Test configuration and fixtures for chat tests.

This module provides:
- Named users for readable scenarios (alice, bob, carol, dave)
- A group created through GroupService (alice admin; bob and carol members)
- A community created through CommunityService (alice admin)
- API client helpers for authenticated requests

Usage:
    def test_example(group, bob_client):
        response = bob_client.get(f"/api/v1/groups/{group.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from chat.services import CommunityService, GroupService


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(name="alice", email="alice@example.com")


@pytest.fixture
def bob(db):
    return UserFactory(name="bob", email="bob@example.com")


@pytest.fixture
def carol(db):
    return UserFactory(name="carol", email="carol@example.com")


@pytest.fixture
def dave(db):
    """A user outside every fixture conversation."""
    return UserFactory(name="dave", email="dave@example.com")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def group(alice, bob, carol):
    """
    Group created by alice with bob and carol.

    Created through the service, so it carries the "created this group"
    system message and alice's last-seen.
    """
    result = GroupService.create_group(
        creator=alice, name="Project Team", member_ids=[bob.id, carol.id]
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def community(alice):
    """Community owned by alice; alice is its only member."""
    result = CommunityService.create_community(admin=alice, name="Gardening")
    assert result.success, result.error
    return result.data


# =============================================================================
# API Client Fixtures
# =============================================================================


def _client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def alice_client(alice):
    return _client_for(alice)


@pytest.fixture
def bob_client(bob):
    return _client_for(bob)


@pytest.fixture
def dave_client(dave):
    return _client_for(dave)


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()
