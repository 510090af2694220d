"""
Chat app for real-time messaging.

This app handles:
- Direct messages, groups and communities
- Group governance (members, admins, automatic succession)
- Join-gated history and unread counts
- WebSocket presence and message fan-out

Related apps:
    - authentication: User model, JWT issuance
    - core: ServiceResult, BaseService, exception taxonomy

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import GroupService, MessageService

    result = GroupService.create_group(creator=user, name="Team", member_ids=[2, 3])
    group = result.data

    result = MessageService.send_to_group(sender=user, group_id=group.id, content="Hi")
"""
