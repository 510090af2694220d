"""
WebSocket consumer for the chat application.

One connection per client carries presence, room membership and message
relay for every conversation the user takes part in.

Consumers:
    ChatConsumer: Handles the multiplexed chat WebSocket

Authentication:
    Users are authenticated via JWT (query string or subprotocol).
    JWTAuthMiddleware attaches the user to self.scope["user"]; anonymous
    connections are closed with code 4001.

Frames:
    Both directions use {"event": <name>, "data": <payload>}.

Events (from client):
    - add-user: Announce presence (data: user id)
    - join-group / leave-group: Enter or leave a group room (data: group id)
    - join-community / leave-community: Same for communities
    - send-msg: Relay a direct message to the recipient's socket
    - send-group-msg / send-community-msg: Relay to a room, sender excluded

Events (to client):
    - msg-recieve, group-msg-recieve, community-msg-recieve
    - user-online, user-offline

Invalid or unauthorized client events are dropped without a reply.
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.apps import apps
from django.contrib.auth.models import AnonymousUser

from chat.constants import SOCKET_EVENTS, WS_CLOSE_CODES
from chat.conversations import CommunityConversation, GroupConversation
from chat.presence import PresenceRegistry
from chat.realtime import PRESENCE_ROOM, event_message
from chat.services import PresenceService, VisibilityService

logger = logging.getLogger(__name__)


def _as_id(value) -> int | None:
    """Coerce a client-supplied id; None when it is not an integer."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat.

    Handles:
        - Connection authentication
        - Presence (user-online / user-offline) through a PresenceRegistry
        - Joining/leaving group and community rooms (members only)
        - Relaying direct, group and community messages

    Attributes:
        presence: Registry shared by every connection of this process
        user_id: Id announced through add-user and registered in presence
        rooms: Rooms this connection has joined, mapped to their conversation
    """

    presence: PresenceRegistry | None = None

    def __init__(self, *args, presence: PresenceRegistry | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        if presence is None:
            presence = apps.get_app_config("chat").presence
        self.presence = presence
        self.user_id: int | None = None
        self.rooms: dict[str, GroupConversation | CommunityConversation] = {}

    async def connect(self):
        """
        Handle WebSocket connection.

        Rejects anonymous users, otherwise subscribes to the presence room
        and accepts.
        """
        user = self.scope.get("user")

        if not user or isinstance(user, AnonymousUser):
            logger.warning("Rejected unauthenticated chat connection")
            await self.close(code=WS_CLOSE_CODES.UNAUTHENTICATED)
            return

        await self.channel_layer.group_add(PRESENCE_ROOM, self.channel_name)
        await self.accept()
        logger.info(f"User {user.id} connected to chat")

    async def disconnect(self, close_code):
        """
        Handle WebSocket disconnection.

        If this connection is still the user's registered one, the user goes
        offline and everyone else is told. A connection that was replaced by
        a newer one leaves the user online.
        """
        user_id = self.presence.unregister_channel(self.channel_name)
        if user_id is not None:
            await self._set_online(user_id, False)
            await self._broadcast_presence(SOCKET_EVENTS.USER_OFFLINE, user_id)
            logger.info(f"User {user_id} went offline")

        for room in [*self.rooms, PRESENCE_ROOM]:
            await self.channel_layer.group_discard(room, self.channel_name)
        self.rooms.clear()

    async def receive_json(self, content, **kwargs):
        """
        Dispatch a client frame.

        Expected frame format:
            {"event": "add-user", "data": 7}
            {"event": "join-group", "data": 3}
            {"event": "send-group-msg", "data": {"groupId": 3, "from": 7, "msg": "Hi"}}
        """
        if not isinstance(content, dict):
            return

        handler = self._handlers().get(content.get("event"))
        if handler is None:
            logger.debug(f"Ignoring unknown chat event {content.get('event')!r}")
            return
        await handler(content.get("data"))

    def _handlers(self) -> dict:
        return {
            SOCKET_EVENTS.ADD_USER: self._handle_add_user,
            SOCKET_EVENTS.JOIN_GROUP: self._handle_join_group,
            SOCKET_EVENTS.JOIN_COMMUNITY: self._handle_join_community,
            SOCKET_EVENTS.LEAVE_GROUP: self._handle_leave_group,
            SOCKET_EVENTS.LEAVE_COMMUNITY: self._handle_leave_community,
            SOCKET_EVENTS.SEND_MSG: self._handle_send_msg,
            SOCKET_EVENTS.SEND_GROUP_MSG: self._handle_send_group_msg,
            SOCKET_EVENTS.SEND_COMMUNITY_MSG: self._handle_send_community_msg,
        }

    @property
    def _user(self):
        return self.scope["user"]

    # -------------------------------------------------------------------------
    # Presence
    # -------------------------------------------------------------------------

    async def _handle_add_user(self, data):
        user_id = _as_id(data)
        if user_id != self._user.id:
            logger.warning(f"User {self._user.id} tried to announce presence as {data!r}")
            return

        self.presence.register(user_id, self.channel_name)
        self.user_id = user_id
        await self._set_online(user_id, True)
        await self._broadcast_presence(SOCKET_EVENTS.USER_ONLINE, user_id)
        logger.debug(f"User {user_id} online on {self.channel_name}")

    async def _broadcast_presence(self, event: str, user_id: int):
        await self.channel_layer.group_send(
            PRESENCE_ROOM,
            event_message(event, user_id, sender_channel=self.channel_name),
        )

    # -------------------------------------------------------------------------
    # Rooms
    # -------------------------------------------------------------------------

    async def _join(self, conversation):
        if not await self._is_member(conversation):
            logger.warning(f"User {self._user.id} denied joining {conversation.room}")
            return
        await self.channel_layer.group_add(conversation.room, self.channel_name)
        self.rooms[conversation.room] = conversation

    async def _leave(self, conversation):
        await self.channel_layer.group_discard(conversation.room, self.channel_name)
        self.rooms.pop(conversation.room, None)

    async def _handle_join_group(self, data):
        group_id = _as_id(data)
        if group_id is not None:
            await self._join(GroupConversation(group_id))

    async def _handle_join_community(self, data):
        community_id = _as_id(data)
        if community_id is not None:
            await self._join(CommunityConversation(community_id))

    async def _handle_leave_group(self, data):
        group_id = _as_id(data)
        if group_id is not None:
            await self._leave(GroupConversation(group_id))

    async def _handle_leave_community(self, data):
        community_id = _as_id(data)
        if community_id is not None:
            await self._leave(CommunityConversation(community_id))

    # -------------------------------------------------------------------------
    # Relay
    # -------------------------------------------------------------------------

    def _from_self(self, data) -> bool:
        return isinstance(data, dict) and _as_id(data.get("from")) == self._user.id

    async def _handle_send_msg(self, data):
        """Deliver to the recipient's live socket; dropped when offline."""
        if not self._from_self(data):
            return
        channel = self.presence.channel_for(_as_id(data.get("to")))
        if channel is None:
            return
        await self.channel_layer.send(
            channel,
            event_message(SOCKET_EVENTS.MSG_RECEIVE, data, sender_channel=self.channel_name),
        )

    async def _relay_to_room(self, conversation, event: str, data):
        # Membership can change after join, so re-check on every emit
        if not await self._is_member(conversation):
            logger.warning(f"User {self._user.id} denied sending to {conversation.room}")
            return
        await self.channel_layer.group_send(
            conversation.room,
            event_message(
                event, data, sender_channel=self.channel_name, room=conversation.room
            ),
        )

    async def _handle_send_group_msg(self, data):
        if not self._from_self(data):
            return
        group_id = _as_id(data.get("groupId"))
        if group_id is not None:
            await self._relay_to_room(
                GroupConversation(group_id), SOCKET_EVENTS.GROUP_MSG_RECEIVE, data
            )

    async def _handle_send_community_msg(self, data):
        if not self._from_self(data):
            return
        community_id = _as_id(data.get("communityId"))
        if community_id is not None:
            await self._relay_to_room(
                CommunityConversation(community_id), SOCKET_EVENTS.COMMUNITY_MSG_RECEIVE, data
            )

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards the event to the WebSocket client unless this connection
        produced it. Room events are re-checked against the receiver's
        membership: a user removed or departed over REST is dropped from the
        room on the first event that reaches them.
        """
        if event.get("sender_channel") == self.channel_name:
            return

        conversation = self.rooms.get(event.get("room"))
        if conversation is not None and not await self._is_member(conversation):
            logger.info(f"User {self._user.id} no longer a member, leaving {conversation.room}")
            await self._leave(conversation)
            return

        await self.send_json({"event": event["event"], "data": event["data"]})

    # -------------------------------------------------------------------------
    # Database access
    # -------------------------------------------------------------------------

    @database_sync_to_async
    def _is_member(self, conversation) -> bool:
        return VisibilityService.is_member(conversation, self._user.id)

    @database_sync_to_async
    def _set_online(self, user_id: int, online: bool) -> bool:
        return PresenceService.set_online(user_id, online)
