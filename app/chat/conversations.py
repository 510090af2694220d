"""
Conversation variants.

The three conversation kinds share no base model, so code that must treat
them uniformly (history, unread counts, read marking, realtime rooms)
receives one of these frozen dataclasses and dispatches on its type:

    DirectConversation(user_id, peer_id)
    GroupConversation(group_id)
    CommunityConversation(community_id)

References are plain integer ids; model instances are resolved by the
service that consumes the variant.

Usage:
    from chat.conversations import GroupConversation

    result = VisibilityService.unread_count(GroupConversation(group.id), user)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DirectConversation:
    """The unordered pair of two users, seen from ``user_id``."""

    user_id: int
    peer_id: int

    def involves(self, user_id: int) -> bool:
        return user_id in (self.user_id, self.peer_id)

    def counterpart_of(self, user_id: int) -> int:
        return self.peer_id if user_id == self.user_id else self.user_id


@dataclass(frozen=True)
class GroupConversation:
    group_id: int

    @property
    def room(self) -> str:
        return f"group_{self.group_id}"


@dataclass(frozen=True)
class CommunityConversation:
    community_id: int

    @property
    def room(self) -> str:
        return f"community_{self.community_id}"


Conversation = Union[DirectConversation, GroupConversation, CommunityConversation]


def unknown_conversation(conversation: object) -> TypeError:
    """Error for a value outside the three conversation variants."""
    return TypeError(f"Unsupported conversation type: {type(conversation).__name__}")
