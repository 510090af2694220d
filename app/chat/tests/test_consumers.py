"""
Tests for ChatConsumer over a real ASGI stack.

Connections go through JWTAuthMiddleware with a token in the query string,
and each test gets its own PresenceRegistry. The channel layer is the
in-memory layer configured in the root conftest.

This module tests:
- Authentication on connect
- Presence announcements (user-online / user-offline)
- Room joins restricted to members
- Direct, group and community relay with the sender excluded
"""

import asyncio

import pytest
import pytest_asyncio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import AccessToken

from chat.consumers import ChatConsumer
from chat.middleware import JWTAuthMiddleware
from chat.presence import PresenceRegistry
from chat.services import CommunityService, GroupService

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


@pytest.fixture
def registry():
    return PresenceRegistry()


@pytest.fixture(autouse=True)
def _flush_channel_layer():
    layer = get_channel_layer()
    async_to_sync(layer.flush)()
    yield
    async_to_sync(layer.flush)()


@pytest_asyncio.fixture
async def open_socket(registry):
    """
    Factory connecting a user and closing every socket at teardown.

    Usage:
        ws = await open_socket(alice)
    """
    application = JWTAuthMiddleware(ChatConsumer.as_asgi(presence=registry))
    opened = []

    async def _open(user, announce=False):
        token = str(AccessToken.for_user(user))
        communicator = WebsocketCommunicator(application, f"/ws/chat/?token={token}")
        connected, _ = await communicator.connect()
        assert connected
        opened.append(communicator)
        if announce:
            await communicator.send_json_to({"event": "add-user", "data": user.id})
            await wait_until(lambda: registry.channel_for(user.id) is not None)
        return communicator

    yield _open

    for communicator in opened:
        if not communicator.future.done():
            await communicator.disconnect()


async def wait_until(predicate, timeout=2):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


async def wait_for_room(room, size):
    """Block until ``size`` sockets have joined ``room`` in the channel layer."""
    layer = get_channel_layer()
    await wait_until(lambda: len(layer.groups.get(room, {})) == size)


# =============================================================================
# Connection
# =============================================================================


class TestConnect:
    async def test_authenticated_user_connects(self, open_socket, alice):
        ws = await open_socket(alice)

        assert await ws.receive_nothing()

    async def test_missing_token_is_rejected(self, registry):
        communicator = WebsocketCommunicator(
            JWTAuthMiddleware(ChatConsumer.as_asgi(presence=registry)), "/ws/chat/"
        )

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001

    async def test_invalid_token_is_rejected(self, registry):
        communicator = WebsocketCommunicator(
            JWTAuthMiddleware(ChatConsumer.as_asgi(presence=registry)),
            "/ws/chat/?token=not-a-jwt",
        )

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001


# =============================================================================
# Presence
# =============================================================================


class TestPresence:
    """Tests for add-user and disconnect handling."""

    async def test_add_user_broadcasts_online_to_others(self, open_socket, registry, alice, bob):
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)

        await bob_ws.send_json_to({"event": "add-user", "data": bob.id})

        assert await alice_ws.receive_json_from() == {"event": "user-online", "data": bob.id}
        assert await bob_ws.receive_nothing()
        assert registry.channel_for(bob.id) is not None
        await database_sync_to_async(bob.refresh_from_db)()
        assert bob.is_online is True

    async def test_add_user_for_someone_else_is_ignored(self, open_socket, registry, alice, bob):
        """
        Why it matters: A socket must not be able to receive another user's
        direct messages by announcing their id.
        """
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)

        await bob_ws.send_json_to({"event": "add-user", "data": alice.id})

        assert await alice_ws.receive_nothing()
        assert registry.channel_for(alice.id) is None
        assert registry.channel_for(bob.id) is None

    async def test_disconnect_broadcasts_offline(self, open_socket, registry, alice, bob):
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob, announce=True)
        assert (await alice_ws.receive_json_from())["event"] == "user-online"

        await bob_ws.disconnect()

        assert await alice_ws.receive_json_from() == {"event": "user-offline", "data": bob.id}
        assert registry.channel_for(bob.id) is None
        await database_sync_to_async(bob.refresh_from_db)()
        assert bob.is_online is False

    async def test_replaced_socket_disconnect_keeps_user_online(
        self, open_socket, registry, alice, bob
    ):
        alice_ws = await open_socket(alice)
        first = await open_socket(bob, announce=True)
        second = await open_socket(bob)
        await second.send_json_to({"event": "add-user", "data": bob.id})
        await alice_ws.receive_json_from()
        await alice_ws.receive_json_from()

        await first.disconnect()

        assert await alice_ws.receive_nothing()
        assert registry.channel_for(bob.id) is not None

    async def test_unknown_event_is_ignored(self, open_socket, alice):
        ws = await open_socket(alice)

        await ws.send_json_to({"event": "dance", "data": None})

        assert await ws.receive_nothing()


# =============================================================================
# Direct relay
# =============================================================================


class TestDirectRelay:
    async def test_delivered_to_recipient_socket(self, open_socket, alice, bob):
        bob_ws = await open_socket(bob, announce=True)
        alice_ws = await open_socket(alice)
        payload = {"from": alice.id, "to": bob.id, "msg": "hi bob"}

        await alice_ws.send_json_to({"event": "send-msg", "data": payload})

        assert await bob_ws.receive_json_from() == {"event": "msg-recieve", "data": payload}
        assert await alice_ws.receive_nothing()

    async def test_offline_recipient_gets_nothing(self, open_socket, alice, bob):
        bob_ws = await open_socket(bob)
        alice_ws = await open_socket(alice)

        await alice_ws.send_json_to(
            {"event": "send-msg", "data": {"from": alice.id, "to": bob.id, "msg": "hello?"}}
        )

        assert await bob_ws.receive_nothing()

    async def test_forged_sender_is_dropped(self, open_socket, alice, bob, carol):
        bob_ws = await open_socket(bob, announce=True)
        alice_ws = await open_socket(alice)

        await alice_ws.send_json_to(
            {"event": "send-msg", "data": {"from": carol.id, "to": bob.id, "msg": "it's carol"}}
        )

        assert await bob_ws.receive_nothing()


# =============================================================================
# Room relay
# =============================================================================


class TestGroupRelay:
    """Tests for join-group and send-group-msg."""

    async def _join_all(self, group, sockets):
        for ws in sockets:
            await ws.send_json_to({"event": "join-group", "data": group.id})
        await wait_for_room(f"group_{group.id}", len(sockets))

    async def test_members_receive_sender_excluded(self, open_socket, group, alice, bob, carol):
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        carol_ws = await open_socket(carol)
        await self._join_all(group, [alice_ws, bob_ws, carol_ws])
        payload = {"groupId": group.id, "from": alice.id, "msg": "standup in 5"}

        await alice_ws.send_json_to({"event": "send-group-msg", "data": payload})

        expected = {"event": "group-msg-recieve", "data": payload}
        assert await bob_ws.receive_json_from() == expected
        assert await carol_ws.receive_json_from() == expected
        assert await alice_ws.receive_nothing()

    async def test_non_member_cannot_join_room(self, open_socket, group, alice, bob, dave):
        dave_ws = await open_socket(dave)
        await dave_ws.send_json_to({"event": "join-group", "data": group.id})
        assert await dave_ws.receive_nothing()
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        await self._join_all(group, [alice_ws, bob_ws])

        await alice_ws.send_json_to(
            {"event": "send-group-msg", "data": {"groupId": group.id, "from": alice.id, "msg": "hi"}}
        )

        assert (await bob_ws.receive_json_from())["data"]["msg"] == "hi"
        assert await dave_ws.receive_nothing()

    async def test_non_member_cannot_send(self, open_socket, group, bob, dave):
        bob_ws = await open_socket(bob)
        await self._join_all(group, [bob_ws])
        dave_ws = await open_socket(dave)

        await dave_ws.send_json_to(
            {"event": "send-group-msg", "data": {"groupId": group.id, "from": dave.id, "msg": "spam"}}
        )

        assert await bob_ws.receive_nothing()

    async def test_removed_member_stops_receiving(self, open_socket, group, alice, bob, carol):
        """
        Why it matters: Removal over REST must cut off realtime delivery
        even though the removed user's socket joined the room earlier.
        """
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        carol_ws = await open_socket(carol)
        await self._join_all(group, [alice_ws, bob_ws, carol_ws])

        await database_sync_to_async(GroupService.remove_member)(group.id, alice, bob.id)
        removal = await alice_ws.receive_json_from()
        assert removal["data"]["msg"] == "removed bob"
        assert (await carol_ws.receive_json_from())["data"]["msg"] == "removed bob"
        await wait_for_room(f"group_{group.id}", 2)

        await alice_ws.send_json_to(
            {
                "event": "send-group-msg",
                "data": {"groupId": group.id, "from": alice.id, "msg": "after bob left"},
            }
        )

        assert (await carol_ws.receive_json_from())["data"]["msg"] == "after bob left"
        assert await bob_ws.receive_nothing()

    async def test_removed_member_can_no_longer_send(self, open_socket, group, alice, bob):
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        await self._join_all(group, [alice_ws, bob_ws])

        await database_sync_to_async(GroupService.remove_member)(group.id, alice, bob.id)
        removal = await alice_ws.receive_json_from()
        assert removal["event"] == "group-msg-recieve"
        assert removal["data"]["msg"] == "removed bob"

        await bob_ws.send_json_to(
            {"event": "send-group-msg", "data": {"groupId": group.id, "from": bob.id, "msg": "wait"}}
        )

        assert await alice_ws.receive_nothing()
        assert await bob_ws.receive_nothing()

    async def test_leave_group_stops_delivery(self, open_socket, group, alice, bob):
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        await self._join_all(group, [alice_ws, bob_ws])

        await bob_ws.send_json_to({"event": "leave-group", "data": group.id})
        await wait_for_room(f"group_{group.id}", 1)
        await alice_ws.send_json_to(
            {"event": "send-group-msg", "data": {"groupId": group.id, "from": alice.id, "msg": "bye"}}
        )

        assert await bob_ws.receive_nothing()


class TestCommunityRelay:
    async def test_members_receive(self, open_socket, community, alice, bob):
        await database_sync_to_async(CommunityService.join)(community.id, bob)
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        for ws in (alice_ws, bob_ws):
            await ws.send_json_to({"event": "join-community", "data": community.id})
        await wait_for_room(f"community_{community.id}", 2)
        payload = {"communityId": community.id, "from": bob.id, "msg": "tomatoes are up"}

        await bob_ws.send_json_to({"event": "send-community-msg", "data": payload})

        assert await alice_ws.receive_json_from() == {
            "event": "community-msg-recieve",
            "data": payload,
        }
        assert await bob_ws.receive_nothing()

    async def test_outsider_cannot_join(self, open_socket, community, bob):
        bob_ws = await open_socket(bob)

        await bob_ws.send_json_to({"event": "join-community", "data": community.id})

        assert await bob_ws.receive_nothing()
        assert not get_channel_layer().groups.get(f"community_{community.id}")

    async def test_member_who_left_stops_receiving(self, open_socket, community, alice, bob):
        await database_sync_to_async(CommunityService.join)(community.id, bob)
        alice_ws = await open_socket(alice)
        bob_ws = await open_socket(bob)
        for ws in (alice_ws, bob_ws):
            await ws.send_json_to({"event": "join-community", "data": community.id})
        await wait_for_room(f"community_{community.id}", 2)

        await database_sync_to_async(CommunityService.leave)(community.id, bob)
        await alice_ws.send_json_to(
            {
                "event": "send-community-msg",
                "data": {"communityId": community.id, "from": alice.id, "msg": "members only"},
            }
        )

        assert await bob_ws.receive_nothing()
        await wait_for_room(f"community_{community.id}", 1)
