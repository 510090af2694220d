"""
Channel-layer helpers shared by the REST services and the WebSocket consumer.

Every realtime event travels through the channel layer as

    {"type": "chat.event", "event": <name>, "data": <payload>,
     "sender_channel": <channel name or None>, "room": <room or None>}

which ChatConsumer.chat_event forwards to its socket as
``{"event": ..., "data": ...}``, skipping the connection named in
``sender_channel``. Events carrying a group or community ``room`` are only
forwarded while the receiving user is still a member.

Rooms:
    presence                 every connection (user-online / user-offline)
    group_<id>               sockets that joined the group
    community_<id>           sockets that joined the community

Usage:
    from chat.realtime import broadcast_group_message

    # inside a transaction; the event goes out after commit
    broadcast_group_message(system_message)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from chat.constants import SOCKET_EVENTS
from chat.conversations import GroupConversation

if TYPE_CHECKING:
    from chat.models import Message

logger = logging.getLogger(__name__)

PRESENCE_ROOM = "presence"
EVENT_TYPE = "chat.event"


def event_message(
    event: str, data, sender_channel: str | None = None, room: str | None = None
) -> dict:
    """Build a channel-layer message for ChatConsumer.chat_event."""
    return {
        "type": EVENT_TYPE,
        "event": event,
        "data": data,
        "sender_channel": sender_channel,
        "room": room,
    }


def message_payload(message: Message) -> dict:
    """
    Client payload for a group or community message.

    Matches what clients relay through send-group-msg / send-community-msg
    so both paths render the same way.
    """
    payload = {
        "from": message.sender_id,
        "senderName": message.sender.name,
        "senderAvatar": message.sender.avatar,
        "msg": message.content,
        "messageType": message.message_type,
        "fileUrl": message.file_url,
        "fileName": message.file_name,
        "createdAt": message.created_at.isoformat(),
    }
    if message.group_id is not None:
        payload["groupId"] = message.group_id
    if message.community_id is not None:
        payload["communityId"] = message.community_id
    return payload


def send_to_room(room: str, event: str, data) -> None:
    """Synchronously push one event to every socket in ``room``."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"No channel layer configured, dropping {event} for {room}")
        return
    async_to_sync(channel_layer.group_send)(room, event_message(event, data, room=room))


def broadcast_group_message(message: Message) -> None:
    """
    Fan a stored group message out to its room once the transaction commits.

    Nothing is sent if the surrounding transaction rolls back.
    """
    room = GroupConversation(message.group_id).room
    data = message_payload(message)
    transaction.on_commit(
        lambda: send_to_room(room, SOCKET_EVENTS.GROUP_MSG_RECEIVE, data)
    )
