"""
Tests for chat models.

Covers:
- Single-destination constraint on Message
- One membership row per user per conversation
- last_seen_or_epoch sentinel
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from authentication.tests.factories import UserFactory
from chat.models import EPOCH, Message, MessageType
from chat.tests.factories import (
    CommunityFactory,
    CommunityMembershipFactory,
    GroupFactory,
    GroupMembershipFactory,
    GroupMessageFactory,
)


class TestMessageDestination:
    """Every message has exactly one of recipient, group and community."""

    def test_rejects_message_without_destination(self, db):
        """
        Why it matters: A message with no destination is visible to nobody
        and would break every history query.
        """
        with pytest.raises(IntegrityError):
            Message.objects.create(sender=UserFactory(), content="lost")

    def test_rejects_message_with_two_destinations(self, db):
        with pytest.raises(IntegrityError):
            Message.objects.create(
                sender=UserFactory(),
                recipient=UserFactory(),
                group=GroupFactory(),
                content="ambiguous",
            )

    def test_accepts_single_destination(self, db):
        message = Message.objects.create(
            sender=UserFactory(), community=CommunityFactory(), content="hello"
        )

        assert message.message_type == MessageType.TEXT
        assert message.read is False

    def test_is_system_message(self, db):
        message = GroupMessageFactory(message_type=MessageType.SYSTEM, content="created this group")

        assert message.is_system_message is True

    def test_str_truncates_long_content(self, db):
        message = GroupMessageFactory(content="x" * 80)

        assert str(message).endswith("...")


class TestMemberships:
    def test_group_membership_unique_per_user(self, db):
        membership = GroupMembershipFactory()

        with pytest.raises(IntegrityError):
            GroupMembershipFactory(group=membership.group, user=membership.user)

    def test_community_membership_unique_per_user(self, db):
        membership = CommunityMembershipFactory()

        with pytest.raises(IntegrityError):
            CommunityMembershipFactory(community=membership.community, user=membership.user)

    def test_last_seen_defaults_to_epoch(self, db):
        membership = GroupMembershipFactory()

        assert membership.last_seen_at is None
        assert membership.last_seen_or_epoch == EPOCH

    def test_last_seen_used_when_set(self, db):
        seen = timezone.now() - timedelta(hours=1)
        membership = GroupMembershipFactory(last_seen_at=seen)

        assert membership.last_seen_or_epoch == seen

    def test_admin_ids(self, db):
        group = GroupFactory()
        admin = GroupMembershipFactory(group=group, is_admin=True)
        GroupMembershipFactory(group=group)

        assert group.admin_ids() == {admin.user_id}
