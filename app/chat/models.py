"""
Chat system models.

This module defines the data models for the three conversation kinds:
- Direct messages between two users (no membership record, implicit pair)
- Groups: closed, admin-governed, members added by admins
- Communities: open-join, globally unique name, one owning admin

Models:
    Group: Admin-governed conversation container
    GroupMembership: User in a group with join time, last-seen time, admin flag
    Community: Open-join conversation container with a fixed admin
    CommunityMembership: User in a community with join time and last-seen time
    Message: One message addressed to exactly one destination

Design Decisions:
    - Group adminship is a flag on the membership row, so every admin is a
      member by construction and removing a member removes their adminship
    - Community admin is a plain foreign key, independent of membership
    - last_seen_at is nullable; NULL means "never seen" and compares as epoch
    - Leaving deletes the membership row; rejoining creates a fresh one with
      a new joined_at, which bounds the visible history
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import BaseModel

# Sentinel for members without a last-seen entry
EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


class MessageType(models.TextChoices):
    """
    Content kind of a message.

    SYSTEM is reserved for messages synthesized by governance actions.
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    DOCUMENT = "document", "Document"
    SYSTEM = "system", "System"


class Group(BaseModel):
    """
    A closed, admin-governed conversation.

    Fields:
        name: Display name (not unique)
        description: Free text shown in group details
        avatar: Opaque avatar string

    Relationships:
        memberships: GroupMembership rows (join time, last seen, admin flag)
        members: Users through GroupMembership
        messages: Messages addressed to this group
    """

    name = models.CharField(
        max_length=100,
        help_text="Group display name",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Group description",
    )
    avatar = models.TextField(
        blank=True,
        default="",
        help_text="Group avatar as a data URL or remote URL",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="GroupMembership",
        related_name="chat_groups",
        help_text="Current members of the group",
    )

    class Meta:
        db_table = "chat_group"
        ordering = ["-updated_at"]

    def __str__(self) -> str:
        return f"Group: {self.name}"

    def admin_ids(self) -> set[int]:
        """Ids of members holding the admin flag."""
        return set(
            self.memberships.filter(is_admin=True).values_list("user_id", flat=True)
        )


class Community(BaseModel):
    """
    An open-join conversation with a single owning admin.

    The admin is fixed at creation and is never required to remain a member.

    Fields:
        name: Globally unique display name
        description: Free text shown in community details
        avatar: Opaque avatar string
        admin: User who created and owns the community
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Community name (globally unique)",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Community description",
    )
    avatar = models.TextField(
        blank=True,
        default="",
        help_text="Community avatar as a data URL or remote URL",
    )
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_communities",
        help_text="Owning admin (independent of membership)",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="CommunityMembership",
        related_name="chat_communities",
        help_text="Current members of the community",
    )

    class Meta:
        db_table = "chat_community"
        verbose_name_plural = "communities"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"Community: {self.name}"


class Membership(BaseModel):
    """
    Shared fields of group and community membership rows.

    Fields:
        joined_at: When the user joined; history before it is invisible
        last_seen_at: When the user last marked the conversation read
    """

    joined_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user joined this conversation",
    )
    last_seen_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the user marked this conversation read (null = never)",
    )

    class Meta:
        abstract = True

    @property
    def last_seen_or_epoch(self) -> datetime:
        return self.last_seen_at or EPOCH


class GroupMembership(Membership):
    """
    A user's membership in a group.

    Constraints:
        - UniqueConstraint(group, user): at most one row per member, which
          also caps last-seen entries at one per member
    """

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Group this membership belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_memberships",
        help_text="Member user",
    )
    is_admin = models.BooleanField(
        default=False,
        help_text="Whether this member administers the group",
    )

    class Meta:
        db_table = "chat_group_membership"
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["group", "user"],
                name="unique_group_membership",
            ),
        ]
        indexes = [
            models.Index(
                fields=["group", "is_admin"],
                name="chat_gmem_admin_idx",
            ),
        ]

    def __str__(self) -> str:
        role = " (admin)" if self.is_admin else ""
        return f"GroupMembership: {self.user_id} in {self.group_id}{role}"


class CommunityMembership(Membership):
    """
    A user's membership in a community.

    Constraints:
        - UniqueConstraint(community, user): duplicate joins keep the first row
    """

    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Community this membership belongs to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="community_memberships",
        help_text="Member user",
    )

    class Meta:
        db_table = "chat_community_membership"
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["community", "user"],
                name="unique_community_membership",
            ),
        ]

    def __str__(self) -> str:
        return f"CommunityMembership: {self.user_id} in {self.community_id}"


class Message(BaseModel):
    """
    A message addressed to exactly one destination.

    Destinations:
        recipient: Direct message to another user
        group: Message in a group
        community: Message in a community

    Fields:
        sender: Author (the acting user for system messages)
        message_type: Content kind (text, image, video, document, system)
        content: Text body, caption, or system event text
        file_url: Optional attachment reference
        file_name: Optional attachment display name
        read: Whether the recipient has read it (direct messages only)

    Constraints:
        - CheckConstraint: exactly one of recipient/group/community is set
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="received_messages",
        help_text="Recipient of a direct message",
    )
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
        help_text="Group this message was sent to",
    )
    community = models.ForeignKey(
        Community,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
        help_text="Community this message was sent to",
    )
    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Content kind",
    )
    content = models.TextField(
        help_text="Message text or system event text",
    )
    file_url = models.TextField(
        blank=True,
        default="",
        help_text="Attachment URL for image/video/document messages",
    )
    file_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Attachment display name",
    )
    read = models.BooleanField(
        default=False,
        help_text="Read flag for direct messages",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(recipient__isnull=False, group__isnull=True, community__isnull=True)
                    | Q(recipient__isnull=True, group__isnull=False, community__isnull=True)
                    | Q(recipient__isnull=True, group__isnull=True, community__isnull=False)
                ),
                name="message_single_destination",
            ),
        ]
        indexes = [
            models.Index(
                fields=["sender", "recipient", "read"],
                name="chat_msg_direct_idx",
            ),
            models.Index(
                fields=["group", "created_at"],
                name="chat_msg_group_idx",
            ),
            models.Index(
                fields=["community", "created_at"],
                name="chat_msg_community_idx",
            ),
        ]

    def __str__(self) -> str:
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"

    @property
    def is_system_message(self) -> bool:
        return self.message_type == MessageType.SYSTEM
