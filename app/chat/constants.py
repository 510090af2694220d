"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message content limits and user-sendable message types
- Group and community naming rules
- System message texts emitted by governance actions
- Realtime event names and WebSocket close codes

Import example:
    from chat.constants import MESSAGE_CONFIG, SOCKET_EVENTS
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # System is reserved for governance messages
    USER_MESSAGE_TYPES: Final[tuple] = ("text", "image", "video", "document")


# =============================================================================
# Conversation Configuration
# =============================================================================


class CONVERSATION_CONFIG:
    """Naming rules shared by groups and communities."""

    MIN_NAME_LENGTH: Final[int] = 3
    MAX_NAME_LENGTH: Final[int] = 100


# =============================================================================
# System Messages
# =============================================================================


class SYSTEM_MESSAGES:
    """
    Texts of messages synthesized by group governance.

    The acting user is the sender; clients render "<sender> <text>".
    """

    GROUP_CREATED: Final[str] = "created this group"
    MEMBERS_ADDED: Final[str] = "added {names}"
    MEMBER_LEFT: Final[str] = "left the group"
    MEMBER_REMOVED: Final[str] = "removed {name}"
    ADMIN_ASSIGNED: Final[str] = "made {name} an admin"
    ADMIN_DISMISSED: Final[str] = "dismissed {name} as admin"
    ADMIN_AUTO_ASSIGNED: Final[str] = "was automatically assigned as the new admin"


# =============================================================================
# Realtime Configuration
# =============================================================================


class SOCKET_EVENTS:
    """
    Event names on the chat WebSocket.

    Spelling of the *-recieve events is part of the client contract.
    """

    # Client -> server
    ADD_USER: Final[str] = "add-user"
    JOIN_GROUP: Final[str] = "join-group"
    JOIN_COMMUNITY: Final[str] = "join-community"
    LEAVE_GROUP: Final[str] = "leave-group"
    LEAVE_COMMUNITY: Final[str] = "leave-community"
    SEND_MSG: Final[str] = "send-msg"
    SEND_GROUP_MSG: Final[str] = "send-group-msg"
    SEND_COMMUNITY_MSG: Final[str] = "send-community-msg"

    # Server -> client
    MSG_RECEIVE: Final[str] = "msg-recieve"
    GROUP_MSG_RECEIVE: Final[str] = "group-msg-recieve"
    COMMUNITY_MSG_RECEIVE: Final[str] = "community-msg-recieve"
    USER_ONLINE: Final[str] = "user-online"
    USER_OFFLINE: Final[str] = "user-offline"


class WS_CLOSE_CODES:
    """Application close codes for the chat WebSocket."""

    UNAUTHENTICATED: Final[int] = 4001
