"""
Serializers for chat API.

This module provides serializers for the chat system:
- Request payloads for direct, group and community endpoints
- Message history items
- Group and community representations and list summaries

Design Decisions:
    - Field names follow the chat client's camelCase contract; model and
      service attributes stay snake_case and are mapped with ``source=``
    - Request and response serializers are separate
    - The actor of a request is sent in the payload (``from``, ``admin``,
      ``operatorId``, ``userId``); views check it against request.user
    - Summary serializers read the dataclasses built by the services
"""

from __future__ import annotations

from rest_framework import serializers

from chat.models import Community, Group, Message


class FromFieldMixin:
    """
    Adds the ``from`` field, which cannot be declared as a class attribute.

    Validated data carries it as ``sender_id``.
    """

    def get_fields(self):
        fields = super().get_fields()
        fields["from"] = serializers.IntegerField(source="sender_id")
        return fields


# =============================================================================
# Request Serializers
# =============================================================================


class MessageContentSerializer(serializers.Serializer):
    """Content fields shared by every send endpoint."""

    message = serializers.CharField(
        source="content",
        allow_blank=True,
        trim_whitespace=False,
    )
    messageType = serializers.CharField(source="message_type", default="text")
    fileUrl = serializers.CharField(
        source="file_url",
        required=False,
        allow_blank=True,
        default="",
    )
    fileName = serializers.CharField(
        source="file_name",
        required=False,
        allow_blank=True,
        default="",
    )


class DirectMessageCreateSerializer(FromFieldMixin, MessageContentSerializer):
    """``{from, to, message, messageType, fileUrl, fileName}``"""

    to = serializers.IntegerField(source="recipient_id")


class DirectPairSerializer(FromFieldMixin, serializers.Serializer):
    """``{from, to}`` for direct history and read marking."""

    to = serializers.IntegerField(source="recipient_id")


class GroupMessageCreateSerializer(FromFieldMixin, MessageContentSerializer):
    groupId = serializers.IntegerField(source="group_id")


class CommunityMessageCreateSerializer(FromFieldMixin, MessageContentSerializer):
    communityId = serializers.IntegerField(source="community_id")


class GroupMemberRequestSerializer(serializers.Serializer):
    """``{groupId, userId}`` for history and read marking."""

    groupId = serializers.IntegerField(source="group_id")
    userId = serializers.IntegerField(source="user_id")


class CommunityMemberRequestSerializer(serializers.Serializer):
    """``{communityId, userId}`` for join, leave, history and read marking."""

    communityId = serializers.IntegerField(source="community_id")
    userId = serializers.IntegerField(source="user_id")


class GroupCreateSerializer(serializers.Serializer):
    """``{name, members, admin, avatar, description}``"""

    name = serializers.CharField(allow_blank=True)
    members = serializers.ListField(
        child=serializers.IntegerField(),
        source="member_ids",
        default=list,
    )
    admin = serializers.IntegerField(source="admin_id")
    avatar = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


class InfoUpdateFieldsSerializer(serializers.Serializer):
    """Optional fields of update-info; omitted keys are left unchanged."""

    operatorId = serializers.IntegerField(source="operator_id")
    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    avatar = serializers.CharField(required=False, allow_blank=True)


class GroupUpdateInfoSerializer(InfoUpdateFieldsSerializer):
    groupId = serializers.IntegerField(source="group_id")


class CommunityUpdateInfoSerializer(InfoUpdateFieldsSerializer):
    communityId = serializers.IntegerField(source="community_id")


class GroupAddMembersSerializer(serializers.Serializer):
    """``{groupId, operatorId, members}``"""

    groupId = serializers.IntegerField(source="group_id")
    operatorId = serializers.IntegerField(source="operator_id")
    members = serializers.ListField(
        child=serializers.IntegerField(),
        source="member_ids",
        allow_empty=False,
    )


class GroupTargetSerializer(serializers.Serializer):
    """``{groupId, operatorId, userId}`` for remove-member and admin changes."""

    groupId = serializers.IntegerField(source="group_id")
    operatorId = serializers.IntegerField(source="operator_id")
    userId = serializers.IntegerField(source="user_id")


class CommunityCreateSerializer(serializers.Serializer):
    """``{name, description, admin, avatar}``"""

    name = serializers.CharField(allow_blank=True)
    admin = serializers.IntegerField(source="admin_id")
    avatar = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


# =============================================================================
# Message Serializers
# =============================================================================


class ViewerMessageSerializer(serializers.ModelSerializer):
    """
    Base for history items; ``fromSelf`` is relative to ``context["user"]``.
    """

    fromSelf = serializers.SerializerMethodField()
    message = serializers.CharField(source="content", read_only=True)
    messageType = serializers.CharField(source="message_type", read_only=True)
    fileUrl = serializers.CharField(source="file_url", read_only=True)
    fileName = serializers.CharField(source="file_name", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    def get_fromSelf(self, obj: Message) -> bool:
        return obj.sender_id == self.context["user"].id


class DirectMessageSerializer(ViewerMessageSerializer):
    class Meta:
        model = Message
        fields = [
            "id",
            "fromSelf",
            "message",
            "messageType",
            "fileUrl",
            "fileName",
            "createdAt",
            "read",
        ]
        read_only_fields = fields


class RoomMessageSerializer(ViewerMessageSerializer):
    """Group or community history item, with sender identity."""

    senderId = serializers.IntegerField(source="sender_id", read_only=True)
    senderName = serializers.CharField(source="sender.name", read_only=True)
    senderAvatar = serializers.CharField(source="sender.avatar", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "fromSelf",
            "senderId",
            "senderName",
            "senderAvatar",
            "message",
            "messageType",
            "fileUrl",
            "fileName",
            "createdAt",
        ]
        read_only_fields = fields


class ContactSerializer(serializers.Serializer):
    """Reads chat.services.ContactSummary."""

    id = serializers.IntegerField(source="user.id")
    name = serializers.CharField(source="user.name")
    email = serializers.EmailField(source="user.email")
    avatar = serializers.CharField(source="user.avatar")
    isOnline = serializers.BooleanField(source="user.is_online")
    lastMessage = serializers.CharField(source="last_message")
    lastMessageTime = serializers.DateTimeField(source="last_message_time")
    lastMessageSender = serializers.IntegerField(source="last_message_sender")
    lastMessageRead = serializers.BooleanField(source="last_message_read")
    unreadCount = serializers.IntegerField(source="unread_count")


# =============================================================================
# Group Serializers
# =============================================================================


class MemberSerializer(serializers.Serializer):
    """A membership row rendered as the member user plus join time."""

    id = serializers.IntegerField(source="user.id")
    name = serializers.CharField(source="user.name")
    email = serializers.EmailField(source="user.email")
    avatar = serializers.CharField(source="user.avatar")
    isOnline = serializers.BooleanField(source="user.is_online")
    joinedAt = serializers.DateTimeField(source="joined_at")


class GroupMemberSerializer(MemberSerializer):
    isAdmin = serializers.BooleanField(source="is_admin")


class GroupSerializer(serializers.ModelSerializer):
    """Group with members; expects ``memberships__user`` to be prefetched."""

    members = GroupMemberSerializer(source="memberships", many=True, read_only=True)
    admins = serializers.SerializerMethodField()
    isGroup = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Group
        fields = [
            "id",
            "name",
            "description",
            "avatar",
            "admins",
            "members",
            "isGroup",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_admins(self, obj: Group) -> list[int]:
        return [m.user_id for m in obj.memberships.all() if m.is_admin]

    def get_isGroup(self, obj: Group) -> bool:
        return True


class GroupSummarySerializer(serializers.Serializer):
    """Reads chat.services.GroupSummary."""

    id = serializers.IntegerField(source="group.id")
    name = serializers.CharField(source="group.name")
    description = serializers.CharField(source="group.description")
    avatar = serializers.CharField(source="group.avatar")
    admins = serializers.ListField(source="admin_ids", child=serializers.IntegerField())
    members = serializers.ListField(source="member_ids", child=serializers.IntegerField())
    lastMessage = serializers.CharField(source="last_message", allow_null=True)
    lastMessageTime = serializers.DateTimeField(source="last_message_time", allow_null=True)
    lastMessageSender = serializers.IntegerField(source="last_message_sender", allow_null=True)
    lastMessageSenderName = serializers.CharField(
        source="last_message_sender_name", allow_null=True
    )
    unreadCount = serializers.IntegerField(source="unread_count")
    isGroup = serializers.SerializerMethodField()

    def get_isGroup(self, obj) -> bool:
        return True


# =============================================================================
# Community Serializers
# =============================================================================


class CommunitySerializer(serializers.ModelSerializer):
    """Community with members; expects ``memberships__user`` prefetched."""

    admin = serializers.IntegerField(source="admin_id", read_only=True)
    members = MemberSerializer(source="memberships", many=True, read_only=True)
    memberCount = serializers.SerializerMethodField()
    isCommunity = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Community
        fields = [
            "id",
            "name",
            "description",
            "avatar",
            "admin",
            "members",
            "memberCount",
            "isCommunity",
            "createdAt",
        ]
        read_only_fields = fields

    def get_memberCount(self, obj: Community) -> int:
        return len(obj.memberships.all())

    def get_isCommunity(self, obj: Community) -> bool:
        return True


class CommunitySummarySerializer(serializers.Serializer):
    """Reads chat.services.CommunitySummary."""

    id = serializers.IntegerField(source="community.id")
    name = serializers.CharField(source="community.name")
    description = serializers.CharField(source="community.description")
    avatar = serializers.CharField(source="community.avatar")
    admin = serializers.IntegerField(source="community.admin_id")
    isMember = serializers.BooleanField(source="is_member")
    memberCount = serializers.IntegerField(source="member_count")
    lastMessage = serializers.CharField(source="last_message", allow_null=True)
    lastMessageTime = serializers.DateTimeField(source="last_message_time", allow_null=True)
    lastMessageSenderName = serializers.CharField(
        source="last_message_sender_name", allow_null=True
    )
    unreadCount = serializers.IntegerField(source="unread_count")
    isCommunity = serializers.SerializerMethodField()

    def get_isCommunity(self, obj) -> bool:
        return True
