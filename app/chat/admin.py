"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Group management with inline memberships
- Community management with inline memberships
- Message moderation
"""

from django.contrib import admin

from chat.models import Community, CommunityMembership, Group, GroupMembership, Message


class GroupMembershipInline(admin.TabularInline):
    """Inline display of members in group admin."""

    model = GroupMembership
    extra = 0
    readonly_fields = ["joined_at", "last_seen_at"]
    raw_id_fields = ["user"]


class CommunityMembershipInline(admin.TabularInline):
    """Inline display of members in community admin."""

    model = CommunityMembership
    extra = 0
    readonly_fields = ["joined_at", "last_seen_at"]
    raw_id_fields = ["user"]


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Group model."""

    list_display = ["id", "name", "member_count", "created_at", "updated_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [GroupMembershipInline]
    ordering = ["-updated_at"]

    @admin.display(description="Members")
    def member_count(self, obj: Group) -> int:
        return obj.memberships.count()


@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    """Admin interface for Community model."""

    list_display = ["id", "name", "admin", "created_at"]
    search_fields = ["name", "admin__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["admin"]
    inlines = [CommunityMembershipInline]
    ordering = ["name"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "sender",
        "destination",
        "message_type",
        "content_preview",
        "read",
        "created_at",
    ]
    list_filter = ["message_type", "read", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["sender", "recipient", "group", "community"]
    ordering = ["-created_at"]

    @admin.display(description="To")
    def destination(self, obj: Message) -> str:
        if obj.group_id:
            return f"group {obj.group_id}"
        if obj.community_id:
            return f"community {obj.community_id}"
        return f"user {obj.recipient_id}"

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
