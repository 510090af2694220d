"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on direct messages, groups, communities and presence.

Services:
    VisibilityService: Visible history, unread counts and read marking for
        any conversation variant
    MessageService: Sending messages and building the direct contact list
    GroupService: Group lifecycle and governance (members, admins,
        automatic admin succession)
    CommunityService: Community lifecycle (create, discover, join, leave)
    PresenceService: Persisted online flag

Design Principles:
    - Services are stateless (use class methods)
    - Rule violations raise chat/core exceptions inside the method body and
      leave it as ServiceResult.failure() through @service_operation
    - Governance mutations run in one transaction with the group row locked,
      so a removal and the admin succession it triggers commit together
    - System messages are generated for every group governance action and
      fanned out to the group room after commit

Usage:
    from chat.conversations import GroupConversation
    from chat.services import GroupService, VisibilityService

    result = GroupService.create_group(creator=user, name="Team", member_ids=[2, 3])
    if result.success:
        group = result.data

    result = VisibilityService.unread_count(GroupConversation(group.id), other_user)
    unread = result.data
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from chat.constants import CONVERSATION_CONFIG, MESSAGE_CONFIG, SYSTEM_MESSAGES
from chat.conversations import (
    CommunityConversation,
    DirectConversation,
    GroupConversation,
    unknown_conversation,
)
from chat.exceptions import NotMemberError, UnauthorizedActionError
from chat.models import (
    Community,
    CommunityMembership,
    Group,
    GroupMembership,
    Message,
    MessageType,
)
from chat.realtime import broadcast_group_message
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.services import BaseService, ServiceResult, service_operation

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from authentication.models import User
    from chat.conversations import Conversation
    from chat.models import Membership


# =============================================================================
# Summaries
# =============================================================================


@dataclass
class ContactSummary:
    """Direct-message counterpart with the latest exchanged message."""

    user: User
    last_message: str
    last_message_time: datetime
    last_message_sender: int
    last_message_read: bool
    unread_count: int = 0


@dataclass
class GroupSummary:
    """A group as listed for one of its members."""

    group: Group
    member_ids: list[int] = field(default_factory=list)
    admin_ids: list[int] = field(default_factory=list)
    last_message: str | None = None
    last_message_time: datetime | None = None
    last_message_sender: int | None = None
    last_message_sender_name: str | None = None
    unread_count: int = 0


@dataclass
class CommunitySummary:
    """A community as listed for any user, joined or not."""

    community: Community
    is_member: bool
    member_count: int
    last_message: str | None = None
    last_message_time: datetime | None = None
    last_message_sender_name: str | None = None
    unread_count: int = 0


# =============================================================================
# Shared validation
# =============================================================================


def validate_conversation_name(name: str | None) -> str:
    """Strip and length-check a group or community name."""
    name = (name or "").strip()
    if len(name) < CONVERSATION_CONFIG.MIN_NAME_LENGTH:
        raise ValidationError(
            f"Name must be at least {CONVERSATION_CONFIG.MIN_NAME_LENGTH} characters",
            error_code="NAME_TOO_SHORT",
        )
    if len(name) > CONVERSATION_CONFIG.MAX_NAME_LENGTH:
        raise ValidationError(
            f"Name must be at most {CONVERSATION_CONFIG.MAX_NAME_LENGTH} characters",
            error_code="NAME_TOO_LONG",
        )
    return name


def _resolve_users(user_ids) -> list[User]:
    """Load users for ``user_ids`` in the given order, failing on unknown ids."""
    User = get_user_model()
    ordered_ids = list(dict.fromkeys(user_ids))
    users = User.objects.in_bulk(ordered_ids)
    missing = [user_id for user_id in ordered_ids if user_id not in users]
    if missing:
        raise NotFoundError(
            "User does not exist",
            error_code="USER_NOT_FOUND",
            details={"user_ids": missing},
        )
    return [users[user_id] for user_id in ordered_ids]


# =============================================================================
# VisibilityService
# =============================================================================


class VisibilityService(BaseService):
    """
    Decides which messages a user may see and which of them are unread.

    Rules by variant:
        Direct: everything between the pair; unread is the read flag on
            messages from the counterpart; marking read flips that flag
        Group/Community: only messages created at or after the member's
            joined_at; unread is other members' messages newer than
            last_seen_at (epoch when unset); marking read moves last_seen_at

    Methods:
        history: Visible messages, oldest first
        unread_count: Number of unread visible messages
        mark_read: Mark the conversation read for the user
        is_member: Whether the user may currently post to the conversation
    """

    @staticmethod
    def _membership_model(conversation: Conversation):
        if isinstance(conversation, GroupConversation):
            return GroupMembership, {"group_id": conversation.group_id}, "group"
        elif isinstance(conversation, CommunityConversation):
            return CommunityMembership, {"community_id": conversation.community_id}, "community"
        else:
            raise unknown_conversation(conversation)

    @classmethod
    def get_membership(cls, conversation: Conversation, user_id: int) -> Membership:
        """
        Membership row of ``user_id`` in a group or community.

        Raises:
            NotMemberError: The user has no membership
        """
        model, lookup, label = cls._membership_model(conversation)
        membership = model.objects.filter(user_id=user_id, **lookup).first()
        if membership is None:
            raise NotMemberError(f"You are not a member of this {label}")
        return membership

    @staticmethod
    def _room_messages(conversation: Conversation) -> QuerySet[Message]:
        if isinstance(conversation, GroupConversation):
            return Message.objects.filter(group_id=conversation.group_id)
        elif isinstance(conversation, CommunityConversation):
            return Message.objects.filter(community_id=conversation.community_id)
        else:
            raise unknown_conversation(conversation)

    @staticmethod
    def _direct_peer(conversation: DirectConversation, user_id: int) -> int:
        if not conversation.involves(user_id):
            raise NotMemberError("You are not part of this conversation")
        return conversation.counterpart_of(user_id)

    @classmethod
    def visible_messages(cls, conversation: Conversation, user_id: int) -> QuerySet[Message]:
        """
        Unordered queryset of the messages ``user_id`` may see.

        Raises:
            NotMemberError: The user is outside the conversation
        """
        if isinstance(conversation, DirectConversation):
            peer_id = cls._direct_peer(conversation, user_id)
            return Message.objects.filter(
                Q(sender_id=user_id, recipient_id=peer_id)
                | Q(sender_id=peer_id, recipient_id=user_id)
            )
        elif isinstance(conversation, (GroupConversation, CommunityConversation)):
            membership = cls.get_membership(conversation, user_id)
            return cls._room_messages(conversation).filter(
                created_at__gte=membership.joined_at
            )
        else:
            raise unknown_conversation(conversation)

    @staticmethod
    def count_unread_since(messages: QuerySet[Message], membership: Membership) -> int:
        """Count other members' messages in ``messages`` newer than last seen."""
        return (
            messages.filter(created_at__gt=membership.last_seen_or_epoch)
            .exclude(sender_id=membership.user_id)
            .count()
        )

    @classmethod
    @service_operation
    def history(cls, conversation: Conversation, user: User) -> ServiceResult[list[Message]]:
        """
        Visible messages for ``user``, ascending by update time.

        Returns:
            ServiceResult with a list of Message (sender preloaded)

        Error codes:
            NOT_MEMBER: User is outside the conversation
        """
        messages = (
            cls.visible_messages(conversation, user.id)
            .select_related("sender")
            .order_by("updated_at", "id")
        )
        result = list(messages)
        cls.get_logger().debug(f"History for user {user.id}: {len(result)} messages")
        return ServiceResult.success(result)

    @classmethod
    @service_operation
    def unread_count(cls, conversation: Conversation, user: User) -> ServiceResult[int]:
        """
        Unread messages for ``user``.

        Error codes:
            NOT_MEMBER: User is outside the conversation
        """
        if isinstance(conversation, DirectConversation):
            peer_id = cls._direct_peer(conversation, user.id)
            count = Message.objects.filter(
                sender_id=peer_id, recipient_id=user.id, read=False
            ).count()
        elif isinstance(conversation, (GroupConversation, CommunityConversation)):
            membership = cls.get_membership(conversation, user.id)
            visible = cls._room_messages(conversation).filter(
                created_at__gte=membership.joined_at
            )
            count = cls.count_unread_since(visible, membership)
        else:
            raise unknown_conversation(conversation)

        return ServiceResult.success(count)

    @classmethod
    @service_operation
    def mark_read(cls, conversation: Conversation, user: User) -> ServiceResult[int]:
        """
        Mark everything currently visible as read.

        Safe to repeat: direct messages already read are not matched again and
        last_seen_at is overwritten in a single-row UPDATE (last write wins).

        Returns:
            ServiceResult with the number of rows updated

        Error codes:
            NOT_MEMBER: User is outside the conversation
        """
        if isinstance(conversation, DirectConversation):
            peer_id = cls._direct_peer(conversation, user.id)
            updated = Message.objects.filter(
                sender_id=peer_id, recipient_id=user.id, read=False
            ).update(read=True)
        elif isinstance(conversation, (GroupConversation, CommunityConversation)):
            model, lookup, label = cls._membership_model(conversation)
            updated = model.objects.filter(user_id=user.id, **lookup).update(
                last_seen_at=timezone.now()
            )
            if not updated:
                raise NotMemberError(f"You are not a member of this {label}")
        else:
            raise unknown_conversation(conversation)

        cls.get_logger().debug(f"User {user.id} marked {conversation} read ({updated})")
        return ServiceResult.success(updated)

    @classmethod
    def is_member(cls, conversation: Conversation, user_id: int) -> bool:
        """Whether ``user_id`` currently belongs to ``conversation``."""
        if isinstance(conversation, DirectConversation):
            return conversation.involves(user_id)
        model, lookup, _ = cls._membership_model(conversation)
        return model.objects.filter(user_id=user_id, **lookup).exists()


# =============================================================================
# MessageService
# =============================================================================


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        send_direct: Store a direct message
        send_to_group: Store a group message (members only)
        send_to_community: Store a community message (members only)
        get_contacts: Direct-message counterparts with last message and unread
    """

    @staticmethod
    def _validate(content: str, message_type: str) -> str:
        if message_type not in MESSAGE_CONFIG.USER_MESSAGE_TYPES:
            raise ValidationError(
                f"Unsupported message type: {message_type}",
                error_code="INVALID_MESSAGE_TYPE",
            )
        if content is None or len(content.strip()) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            raise ValidationError("Message content is required", error_code="EMPTY_MESSAGE")
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            raise ValidationError(
                f"Message exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code="MESSAGE_TOO_LONG",
            )
        return content

    @classmethod
    @service_operation
    def send_direct(
        cls,
        sender: User,
        recipient_id: int,
        content: str,
        message_type: str = MessageType.TEXT,
        file_url: str = "",
        file_name: str = "",
    ) -> ServiceResult[Message]:
        """
        Store a direct message.

        Error codes:
            INVALID_MESSAGE_TYPE, EMPTY_MESSAGE, MESSAGE_TOO_LONG
            USER_NOT_FOUND: Recipient does not exist
            CANNOT_MESSAGE_SELF: Recipient is the sender
        """
        content = cls._validate(content, message_type)
        if recipient_id == sender.id:
            raise ValidationError(
                "You cannot send a message to yourself",
                error_code="CANNOT_MESSAGE_SELF",
            )
        (recipient,) = _resolve_users([recipient_id])

        message = Message.objects.create(
            sender=sender,
            recipient=recipient,
            content=content,
            message_type=message_type,
            file_url=file_url or "",
            file_name=file_name or "",
        )

        cls.get_logger().info(f"Direct message {message.id} from {sender.id} to {recipient.id}")
        return ServiceResult.success(message)

    @classmethod
    @service_operation
    def send_to_group(
        cls,
        sender: User,
        group_id: int,
        content: str,
        message_type: str = MessageType.TEXT,
        file_url: str = "",
        file_name: str = "",
    ) -> ServiceResult[Message]:
        """
        Store a group message.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, plus content validation codes
        """
        content = cls._validate(content, message_type)
        if not Group.objects.filter(id=group_id).exists():
            raise NotFoundError("Group not found", error_code="GROUP_NOT_FOUND")
        VisibilityService.get_membership(GroupConversation(group_id), sender.id)

        message = Message.objects.create(
            sender=sender,
            group_id=group_id,
            content=content,
            message_type=message_type,
            file_url=file_url or "",
            file_name=file_name or "",
        )

        cls.get_logger().info(f"Group message {message.id} from {sender.id} in group {group_id}")
        return ServiceResult.success(message)

    @classmethod
    @service_operation
    def send_to_community(
        cls,
        sender: User,
        community_id: int,
        content: str,
        message_type: str = MessageType.TEXT,
        file_url: str = "",
        file_name: str = "",
    ) -> ServiceResult[Message]:
        """
        Store a community message.

        Error codes:
            COMMUNITY_NOT_FOUND, NOT_MEMBER, plus content validation codes
        """
        content = cls._validate(content, message_type)
        if not Community.objects.filter(id=community_id).exists():
            raise NotFoundError("Community not found", error_code="COMMUNITY_NOT_FOUND")
        VisibilityService.get_membership(CommunityConversation(community_id), sender.id)

        message = Message.objects.create(
            sender=sender,
            community_id=community_id,
            content=content,
            message_type=message_type,
            file_url=file_url or "",
            file_name=file_name or "",
        )

        cls.get_logger().info(
            f"Community message {message.id} from {sender.id} in community {community_id}"
        )
        return ServiceResult.success(message)

    @classmethod
    def get_contacts(cls, user: User) -> list[ContactSummary]:
        """
        Everyone ``user`` has exchanged direct messages with, newest first.

        Each contact carries the latest message in either direction and the
        number of unread messages the contact sent to ``user``.
        """
        messages = (
            Message.objects.filter(Q(sender=user) | Q(recipient=user))
            .filter(recipient__isnull=False)
            .select_related("sender", "recipient")
            .order_by("-created_at", "-id")
        )

        contacts: dict[int, ContactSummary] = {}
        for message in messages:
            other = message.recipient if message.sender_id == user.id else message.sender
            contact = contacts.get(other.id)
            if contact is None:
                contact = ContactSummary(
                    user=other,
                    last_message=message.content,
                    last_message_time=message.created_at,
                    last_message_sender=message.sender_id,
                    last_message_read=message.read,
                )
                contacts[other.id] = contact
            if message.sender_id == other.id and not message.read:
                contact.unread_count += 1

        return list(contacts.values())

    @classmethod
    def _create_system_message(cls, group: Group, actor: User, text: str) -> Message:
        """
        Internal: Record a governance event in the group.

        System messages have:
        - sender = the acting user (rendered as "<sender> <text>")
        - message_type = SYSTEM
        - no attachment

        Must be called inside the governance transaction; the room broadcast
        is deferred until it commits.
        """
        message = Message.objects.create(
            sender=actor,
            group=group,
            message_type=MessageType.SYSTEM,
            content=text,
        )
        broadcast_group_message(message)
        return message


# =============================================================================
# GroupService
# =============================================================================


class GroupService(BaseService):
    """
    Service for group lifecycle and governance.

    Every admin is a member (the admin flag lives on the membership row), and
    a group with members always has at least one admin: when a removal or
    dismissal leaves none, a random remaining member is promoted in the same
    transaction.

    Methods:
        create_group: Create a group administered by its creator
        get_user_groups: Groups of a user with last message and unread count
        get_details: Members and admins (members only)
        update_info: Rename or change description/avatar (admins only)
        add_members: Add users (admins only)
        remove_member: Remove a member, or leave when operator == target
        assign_admin: Promote a member (admins only)
        remove_admin: Dismiss an admin (admins only)
    """

    @staticmethod
    def _lock_group(group_id: int) -> Group:
        """Fetch the group with its row locked for the current transaction."""
        group = Group.objects.select_for_update().filter(id=group_id).first()
        if group is None:
            raise NotFoundError(
                "Group not found",
                error_code="GROUP_NOT_FOUND",
                details={"group_id": group_id},
            )
        return group

    @staticmethod
    def _require_admin(group: Group, operator: User) -> GroupMembership:
        membership = group.memberships.filter(user=operator).first()
        if membership is None:
            raise NotMemberError("You are not a member of this group")
        if not membership.is_admin:
            raise UnauthorizedActionError("Only group admins can do this")
        return membership

    @staticmethod
    def _target_membership(group: Group, user_id: int) -> GroupMembership:
        membership = group.memberships.select_related("user").filter(user_id=user_id).first()
        if membership is None:
            raise NotFoundError(
                "User is not a member of this group",
                error_code="MEMBER_NOT_FOUND",
                details={"user_id": user_id},
            )
        return membership

    @classmethod
    def _ensure_admin_succession(
        cls, group: Group, dismissed_user_id: int | None = None
    ) -> GroupMembership | None:
        """
        Internal: Promote a random member if the group has members but no admin.

        The pick is uniform over the remaining members, except that a
        dismissed admin is only eligible when nobody else is left, so
        remove-admin never hands the role straight back.
        Called within the governance transaction.

        Returns:
            The promoted membership, or None if no promotion was needed
        """
        if group.memberships.filter(is_admin=True).exists():
            return None

        candidates = list(group.memberships.select_related("user"))
        if not candidates:
            cls.get_logger().info(f"Group {group.id} has no members left")
            return None

        pool = [m for m in candidates if m.user_id != dismissed_user_id] or candidates
        chosen = random.choice(pool)
        chosen.is_admin = True
        chosen.save(update_fields=["is_admin", "updated_at"])

        MessageService._create_system_message(
            group, chosen.user, SYSTEM_MESSAGES.ADMIN_AUTO_ASSIGNED
        )
        cls.get_logger().info(
            f"Auto-assigned user {chosen.user_id} as admin of group {group.id}"
        )
        return chosen

    @classmethod
    @service_operation
    def create_group(
        cls,
        creator: User,
        name: str,
        member_ids=(),
        description: str = "",
        avatar: str = "",
    ) -> ServiceResult[Group]:
        """
        Create a group administered by ``creator``.

        Members are ``creator`` plus ``member_ids`` (duplicates ignored). The
        creator's last-seen is set to now; other members start unread.

        Error codes:
            NAME_TOO_SHORT, NAME_TOO_LONG
            USER_NOT_FOUND: A requested member does not exist
        """
        name = validate_conversation_name(name)
        others = _resolve_users(user_id for user_id in member_ids if user_id != creator.id)

        with cls.atomic():
            now = timezone.now()
            group = Group.objects.create(
                name=name,
                description=description or "",
                avatar=avatar or "",
            )
            GroupMembership.objects.create(
                group=group,
                user=creator,
                is_admin=True,
                joined_at=now,
                last_seen_at=now,
            )
            GroupMembership.objects.bulk_create(
                [GroupMembership(group=group, user=user, joined_at=now) for user in others]
            )
            MessageService._create_system_message(group, creator, SYSTEM_MESSAGES.GROUP_CREATED)

        cls.get_logger().info(
            f"Created group {group.id} by user {creator.id} with {len(others) + 1} members"
        )
        return ServiceResult.success(group)

    @classmethod
    def get_user_groups(cls, user: User) -> list[GroupSummary]:
        """
        Groups ``user`` belongs to, most recent activity first.

        The last message is taken from the part of the history the user can
        see; system messages are prefixed with "You" or the actor's name.
        """
        memberships = (
            GroupMembership.objects.filter(user=user)
            .select_related("group")
            .prefetch_related("group__memberships")
        )

        summaries = []
        for membership in memberships:
            group = membership.group
            visible = Message.objects.filter(group=group, created_at__gte=membership.joined_at)
            last = visible.select_related("sender").order_by("-created_at", "-id").first()

            summary = GroupSummary(
                group=group,
                member_ids=[m.user_id for m in group.memberships.all()],
                admin_ids=[m.user_id for m in group.memberships.all() if m.is_admin],
                unread_count=VisibilityService.count_unread_since(visible, membership),
            )
            if last is not None:
                content = last.content
                if last.is_system_message:
                    actor = "You" if last.sender_id == user.id else last.sender.name
                    content = f"{actor} {last.content}"
                summary.last_message = content
                summary.last_message_time = last.created_at
                summary.last_message_sender = last.sender_id
                summary.last_message_sender_name = last.sender.name
            summaries.append(summary)

        summaries.sort(
            key=lambda s: s.last_message_time or s.group.updated_at,
            reverse=True,
        )
        return summaries

    @classmethod
    @service_operation
    def get_details(cls, group_id: int, user: User) -> ServiceResult[Group]:
        """
        Group with members (and their join dates) for one of its members.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER
        """
        group = (
            Group.objects.prefetch_related("memberships__user")
            .filter(id=group_id)
            .first()
        )
        if group is None:
            raise NotFoundError("Group not found", error_code="GROUP_NOT_FOUND")
        VisibilityService.get_membership(GroupConversation(group.id), user.id)
        return ServiceResult.success(group)

    @classmethod
    @service_operation
    def update_info(
        cls,
        group_id: int,
        operator: User,
        name: str | None = None,
        description: str | None = None,
        avatar: str | None = None,
    ) -> ServiceResult[Group]:
        """
        Change name, description or avatar. Omitted fields stay unchanged.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, PERMISSION_DENIED, NAME_TOO_SHORT
        """
        with cls.atomic():
            group = cls._lock_group(group_id)
            cls._require_admin(group, operator)

            update_fields = ["updated_at"]
            if name is not None:
                group.name = validate_conversation_name(name)
                update_fields.append("name")
            if description is not None:
                group.description = description
                update_fields.append("description")
            if avatar is not None:
                group.avatar = avatar
                update_fields.append("avatar")
            group.save(update_fields=update_fields)

        cls.get_logger().info(f"Updated group {group.id} info by user {operator.id}")
        return ServiceResult.success(group)

    @classmethod
    @service_operation
    def add_members(cls, group_id: int, operator: User, member_ids) -> ServiceResult[Group]:
        """
        Add users to the group.

        Users already in the group are skipped. New members get no last-seen
        entry, so the history they can see starts unread. One system message
        names every added user.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, PERMISSION_DENIED, USER_NOT_FOUND
            ALREADY_MEMBERS: Every requested user is already a member
        """
        with cls.atomic():
            group = cls._lock_group(group_id)
            cls._require_admin(group, operator)

            existing = set(group.memberships.values_list("user_id", flat=True))
            new_ids = [user_id for user_id in member_ids if user_id not in existing]
            if not new_ids:
                raise ConflictError(
                    "All users are already members.",
                    error_code="ALREADY_MEMBERS",
                )
            users = _resolve_users(new_ids)

            now = timezone.now()
            GroupMembership.objects.bulk_create(
                [GroupMembership(group=group, user=user, joined_at=now) for user in users]
            )
            names = ", ".join(user.name for user in users)
            MessageService._create_system_message(
                group, operator, SYSTEM_MESSAGES.MEMBERS_ADDED.format(names=names)
            )

        cls.get_logger().info(
            f"Added {len(users)} members to group {group.id} by user {operator.id}"
        )
        return ServiceResult.success(group)

    @classmethod
    @service_operation
    def remove_member(cls, group_id: int, operator: User, user_id: int) -> ServiceResult[Group]:
        """
        Remove ``user_id`` from the group, or leave when it is the operator.

        Membership, adminship and last-seen go together. If that leaves
        members but no admin, a random member is promoted.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, PERMISSION_DENIED, MEMBER_NOT_FOUND
        """
        leaving = operator.id == user_id

        with cls.atomic():
            group = cls._lock_group(group_id)
            if leaving:
                target = VisibilityService.get_membership(GroupConversation(group.id), operator.id)
                text = SYSTEM_MESSAGES.MEMBER_LEFT
            else:
                cls._require_admin(group, operator)
                target = cls._target_membership(group, user_id)
                text = SYSTEM_MESSAGES.MEMBER_REMOVED.format(name=target.user.name)

            target.delete()
            MessageService._create_system_message(group, operator, text)
            cls._ensure_admin_succession(group)

        if leaving:
            cls.get_logger().info(f"User {operator.id} left group {group.id}")
        else:
            cls.get_logger().info(
                f"Removed user {user_id} from group {group.id} by user {operator.id}"
            )
        return ServiceResult.success(group)

    @classmethod
    @service_operation
    def assign_admin(cls, group_id: int, operator: User, user_id: int) -> ServiceResult[Group]:
        """
        Promote a member to admin.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, PERMISSION_DENIED, MEMBER_NOT_FOUND
            ALREADY_ADMIN: Target is already an admin
        """
        with cls.atomic():
            group = cls._lock_group(group_id)
            cls._require_admin(group, operator)
            target = cls._target_membership(group, user_id)
            if target.is_admin:
                raise ConflictError("User is already an admin", error_code="ALREADY_ADMIN")

            target.is_admin = True
            target.save(update_fields=["is_admin", "updated_at"])
            MessageService._create_system_message(
                group, operator, SYSTEM_MESSAGES.ADMIN_ASSIGNED.format(name=target.user.name)
            )

        cls.get_logger().info(
            f"User {user_id} made admin of group {group.id} by user {operator.id}"
        )
        return ServiceResult.success(group)

    @classmethod
    @service_operation
    def remove_admin(cls, group_id: int, operator: User, user_id: int) -> ServiceResult[Group]:
        """
        Dismiss an admin. Admins may dismiss themselves.

        If no admin remains, another member is promoted at random.

        Error codes:
            GROUP_NOT_FOUND, NOT_MEMBER, PERMISSION_DENIED, MEMBER_NOT_FOUND
            NOT_ADMIN: Target is not an admin
        """
        with cls.atomic():
            group = cls._lock_group(group_id)
            cls._require_admin(group, operator)
            target = cls._target_membership(group, user_id)
            if not target.is_admin:
                raise ConflictError("User is not an admin", error_code="NOT_ADMIN")

            target.is_admin = False
            target.save(update_fields=["is_admin", "updated_at"])
            MessageService._create_system_message(
                group, operator, SYSTEM_MESSAGES.ADMIN_DISMISSED.format(name=target.user.name)
            )
            cls._ensure_admin_succession(group, dismissed_user_id=target.user_id)

        cls.get_logger().info(
            f"User {user_id} dismissed as admin of group {group.id} by user {operator.id}"
        )
        return ServiceResult.success(group)


# =============================================================================
# CommunityService
# =============================================================================


class CommunityService(BaseService):
    """
    Service for community lifecycle.

    A community's admin is fixed at creation and is independent of the member
    list: joining or leaving never changes it.

    Methods:
        create_community: Create a community; the admin is its first member
        list_communities: Every community with membership flag and unread
        get_details: Community with members
        update_info: Rename or change description/avatar (admin only)
        join: Add the user if absent
        leave: Remove the user's membership and last-seen
    """

    @staticmethod
    def _get_community(community_id: int) -> Community:
        community = Community.objects.filter(id=community_id).first()
        if community is None:
            raise NotFoundError(
                "Community not found",
                error_code="COMMUNITY_NOT_FOUND",
                details={"community_id": community_id},
            )
        return community

    @staticmethod
    def _check_name_available(name: str, exclude_id: int | None = None) -> None:
        taken = Community.objects.filter(name=name)
        if exclude_id is not None:
            taken = taken.exclude(id=exclude_id)
        if taken.exists():
            raise ValidationError(
                "A community with this name already exists",
                error_code="NAME_TAKEN",
            )

    @classmethod
    @service_operation
    def create_community(
        cls,
        admin: User,
        name: str,
        description: str = "",
        avatar: str = "",
    ) -> ServiceResult[Community]:
        """
        Create a community owned by ``admin``.

        Error codes:
            NAME_TOO_SHORT, NAME_TOO_LONG, NAME_TAKEN
        """
        name = validate_conversation_name(name)
        cls._check_name_available(name)

        with cls.atomic():
            now = timezone.now()
            community = Community.objects.create(
                name=name,
                description=description or "",
                avatar=avatar or "",
                admin=admin,
            )
            CommunityMembership.objects.create(
                community=community,
                user=admin,
                joined_at=now,
                last_seen_at=now,
            )

        cls.get_logger().info(f"Created community {community.id} by user {admin.id}")
        return ServiceResult.success(community)

    @classmethod
    def list_communities(cls, user: User) -> list[CommunitySummary]:
        """
        Every community sorted by name, joined or discoverable.

        Last message and unread count are only computed for communities the
        user belongs to; for the rest they stay empty and zero.
        """
        communities = Community.objects.annotate(
            member_total=Count("memberships")
        ).order_by("name")
        memberships = {
            m.community_id: m for m in CommunityMembership.objects.filter(user=user)
        }

        summaries = []
        for community in communities:
            membership = memberships.get(community.id)
            summary = CommunitySummary(
                community=community,
                is_member=membership is not None,
                member_count=community.member_total,
            )
            if membership is not None:
                visible = Message.objects.filter(
                    community=community, created_at__gte=membership.joined_at
                )
                last = visible.select_related("sender").order_by("-created_at", "-id").first()
                if last is not None:
                    summary.last_message = last.content
                    summary.last_message_time = last.created_at
                    summary.last_message_sender_name = last.sender.name
                summary.unread_count = VisibilityService.count_unread_since(visible, membership)
            summaries.append(summary)

        return summaries

    @classmethod
    @service_operation
    def get_details(cls, community_id: int) -> ServiceResult[Community]:
        """
        Community with members, visible to any user.

        Error codes:
            COMMUNITY_NOT_FOUND
        """
        community = (
            Community.objects.select_related("admin")
            .prefetch_related("memberships__user")
            .filter(id=community_id)
            .first()
        )
        if community is None:
            raise NotFoundError("Community not found", error_code="COMMUNITY_NOT_FOUND")
        return ServiceResult.success(community)

    @classmethod
    @service_operation
    def update_info(
        cls,
        community_id: int,
        operator: User,
        name: str | None = None,
        description: str | None = None,
        avatar: str | None = None,
    ) -> ServiceResult[Community]:
        """
        Change name, description or avatar. Only the admin may do this.

        Error codes:
            COMMUNITY_NOT_FOUND, PERMISSION_DENIED, NAME_TOO_SHORT, NAME_TAKEN
        """
        community = cls._get_community(community_id)
        if community.admin_id != operator.id:
            raise UnauthorizedActionError("Only the community admin can do this")

        update_fields = ["updated_at"]
        if name is not None:
            name = validate_conversation_name(name)
            cls._check_name_available(name, exclude_id=community.id)
            community.name = name
            update_fields.append("name")
        if description is not None:
            community.description = description
            update_fields.append("description")
        if avatar is not None:
            community.avatar = avatar
            update_fields.append("avatar")
        community.save(update_fields=update_fields)

        cls.get_logger().info(f"Updated community {community.id} info by user {operator.id}")
        return ServiceResult.success(community)

    @classmethod
    @service_operation
    def join(cls, community_id: int, user: User) -> ServiceResult[Community]:
        """
        Add ``user`` if absent.

        A repeated join keeps the original joined_at, so history that was
        visible stays visible and nothing older becomes visible.

        Error codes:
            COMMUNITY_NOT_FOUND
        """
        community = cls._get_community(community_id)
        now = timezone.now()
        _, created = CommunityMembership.objects.get_or_create(
            community=community,
            user=user,
            defaults={"joined_at": now, "last_seen_at": now},
        )

        if created:
            cls.get_logger().info(f"User {user.id} joined community {community.id}")
        return ServiceResult.success(community)

    @classmethod
    @service_operation
    def leave(cls, community_id: int, user: User) -> ServiceResult[Community]:
        """
        Remove ``user``'s membership and last-seen. Adminship is untouched.

        Error codes:
            COMMUNITY_NOT_FOUND, NOT_MEMBER
        """
        community = cls._get_community(community_id)
        deleted, _ = CommunityMembership.objects.filter(
            community=community, user=user
        ).delete()
        if not deleted:
            raise NotMemberError("You are not a member of this community")

        cls.get_logger().info(f"User {user.id} left community {community.id}")
        return ServiceResult.success(community)


# =============================================================================
# PresenceService
# =============================================================================


class PresenceService(BaseService):
    """
    Persisted online flag on the user row.

    The live user-to-connection mapping is chat.presence.PresenceRegistry;
    this service only mirrors it into the database for REST consumers.
    """

    @classmethod
    def set_online(cls, user_id: int, online: bool) -> bool:
        """Set the flag. Returns False if the user does not exist."""
        User = get_user_model()
        updated = User.objects.filter(id=user_id).update(is_online=online)
        cls.get_logger().debug(f"User {user_id} online={online}")
        return bool(updated)

    @classmethod
    def reset_all(cls) -> int:
        """Mark every user offline. Returns the number of users changed."""
        User = get_user_model()
        updated = User.objects.filter(is_online=True).update(is_online=False)
        cls.get_logger().info(f"Reset online flag for {updated} users")
        return updated
