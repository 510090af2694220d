"""
Tests for the conversation variants.
"""

import pytest

from chat.conversations import (
    CommunityConversation,
    DirectConversation,
    GroupConversation,
    unknown_conversation,
)


class TestDirectConversation:
    def test_involves_both_parties(self):
        conversation = DirectConversation(1, 2)

        assert conversation.involves(1)
        assert conversation.involves(2)
        assert not conversation.involves(3)

    def test_counterpart_of(self):
        conversation = DirectConversation(1, 2)

        assert conversation.counterpart_of(1) == 2
        assert conversation.counterpart_of(2) == 1


class TestRooms:
    def test_room_names(self):
        assert GroupConversation(5).room == "group_5"
        assert CommunityConversation(5).room == "community_5"

    def test_variants_are_hashable_values(self):
        assert {GroupConversation(1), GroupConversation(1)} == {GroupConversation(1)}
        assert GroupConversation(1) != CommunityConversation(1)


def test_unknown_conversation_is_type_error():
    error = unknown_conversation("group_1")

    assert isinstance(error, TypeError)
    assert "str" in str(error)


def test_variants_are_frozen():
    with pytest.raises(AttributeError):
        GroupConversation(1).group_id = 2
