"""
Tests for PresenceRegistry.

Verifies:
- Last registration wins
- A channel reused by another user moves to that user
- A replaced channel cannot evict the newer one
"""

from chat.presence import PresenceRegistry


class TestRegister:
    def test_register_and_lookup(self):
        presence = PresenceRegistry()

        assert presence.register(1, "chan-a") is None
        assert presence.channel_for(1) == "chan-a"
        assert presence.channel_for(2) is None

    def test_second_socket_replaces_first(self):
        """
        Why it matters: Direct messages go to the most recent connection.
        """
        presence = PresenceRegistry()
        presence.register(1, "chan-a")

        replaced = presence.register(1, "chan-b")

        assert replaced == "chan-a"
        assert presence.channel_for(1) == "chan-b"
        assert presence.unregister_channel("chan-a") is None

    def test_channel_reused_by_another_user(self):
        presence = PresenceRegistry()
        presence.register(1, "chan-a")

        presence.register(2, "chan-a")

        assert presence.channel_for(1) is None
        assert presence.unregister_channel("chan-a") == 2


class TestUnregister:
    def test_unregister_returns_user(self):
        presence = PresenceRegistry()
        presence.register(1, "chan-a")

        assert presence.unregister_channel("chan-a") == 1
        assert presence.channel_for(1) is None

    def test_stale_channel_does_not_evict_newer_socket(self):
        """
        Why it matters: Closing an old tab must not mark the user offline
        while a newer tab is still connected.
        """
        presence = PresenceRegistry()
        presence.register(1, "chan-a")
        presence.register(1, "chan-b")

        assert presence.unregister_channel("chan-a") is None
        assert presence.channel_for(1) == "chan-b"

    def test_unknown_channel(self):
        assert PresenceRegistry().unregister_channel("nope") is None

    def test_clear(self):
        presence = PresenceRegistry()
        presence.register(1, "chan-a")
        presence.register(2, "chan-b")

        presence.clear()

        assert presence.channel_for(1) is None
        assert presence.channel_for(2) is None
        assert presence.unregister_channel("chan-a") is None
