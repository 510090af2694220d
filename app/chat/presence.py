"""
In-process registry of online users.

Maps each online user to the channel name of their most recent socket and
back. A user has at most one entry: registering a second socket replaces
the first, and the older socket stops receiving direct messages.

The registry lives on the chat AppConfig (one per ASGI process) and is
handed to ChatConsumer through ``as_asgi(presence=...)``. Running several
ASGI workers means several registries; direct delivery then only reaches
users connected to the same worker.

Usage:
    from django.apps import apps

    presence = apps.get_app_config("chat").presence
    presence.register(user.id, self.channel_name)
    channel = presence.channel_for(peer_id)
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Bidirectional user id <-> channel name map."""

    def __init__(self):
        self._lock = threading.Lock()
        self._channels: dict[int, str] = {}
        self._users: dict[str, int] = {}

    def register(self, user_id: int, channel_name: str) -> str | None:
        """
        Record ``channel_name`` as the live socket of ``user_id``.

        Returns:
            The channel it replaced, if any
        """
        with self._lock:
            previous = self._channels.get(user_id)
            if previous is not None and previous != channel_name:
                self._users.pop(previous, None)
            stale_user = self._users.get(channel_name)
            if stale_user is not None and stale_user != user_id:
                self._channels.pop(stale_user, None)
            self._channels[user_id] = channel_name
            self._users[channel_name] = user_id

        if previous is not None and previous != channel_name:
            logger.debug(f"User {user_id} replaced socket {previous}")
            return previous
        return None

    def channel_for(self, user_id: int) -> str | None:
        return self._channels.get(user_id)

    def unregister_channel(self, channel_name: str) -> int | None:
        """
        Drop the entry owned by ``channel_name``.

        A channel that was already replaced by a newer socket owns nothing,
        so this returns None and leaves the newer entry alone.
        """
        with self._lock:
            user_id = self._users.pop(channel_name, None)
            if user_id is not None and self._channels.get(user_id) == channel_name:
                del self._channels[user_id]
        return user_id

    def clear(self) -> None:
        with self._lock:
            self._channels.clear()
            self._users.clear()
