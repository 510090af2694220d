"""
Chat application configuration.

This app provides the chat system with:
- Direct messages between two users
- Admin-governed groups with automatic admin succession
- Open-join communities
- Join-gated history and unread counts
- Realtime fan-out over Django Channels
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        """Create the per-process presence registry used by ChatConsumer."""
        from chat.presence import PresenceRegistry

        self.presence = PresenceRegistry()
