"""
API views for chat.

This module provides REST API endpoints for the chat system:
- Direct messages: send, history, contacts, mark read
- Groups: create, list, details, update info, membership and admin changes,
  messages, history, mark read
- Communities: create, list, details, update info, join, leave, messages,
  history, mark read

URL Structure (mounted at /api/v1/):
    messages/direct/                      POST
    messages/direct/history/              POST
    messages/direct/contacts/{user_id}/   GET
    messages/direct/mark-read/            POST
    groups/create/                        POST
    groups/user/{user_id}/                GET
    groups/{group_id}/                    GET
    groups/update-info/                   POST
    groups/add-members/                   POST
    groups/remove-member/                 POST
    groups/assign-admin/                  POST
    groups/remove-admin/                  POST
    groups/messages/                      POST
    groups/messages/history/              POST
    groups/mark-read/                     POST
    communities/...                       same shape as groups, plus join/leave

Design Decisions:
    - Every endpoint requires JWT authentication
    - The acting user id carried in the payload or URL must equal
      request.user; a mismatch is rejected before the service runs
    - All operations use the service layer; failed results are rendered
      through core.responses.failure_response
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.conversations import CommunityConversation, DirectConversation, GroupConversation
from chat.serializers import (
    CommunityCreateSerializer,
    CommunityMemberRequestSerializer,
    CommunityMessageCreateSerializer,
    CommunitySerializer,
    CommunitySummarySerializer,
    CommunityUpdateInfoSerializer,
    ContactSerializer,
    DirectMessageCreateSerializer,
    DirectMessageSerializer,
    DirectPairSerializer,
    GroupAddMembersSerializer,
    GroupCreateSerializer,
    GroupMemberRequestSerializer,
    GroupMessageCreateSerializer,
    GroupSerializer,
    GroupSummarySerializer,
    GroupTargetSerializer,
    GroupUpdateInfoSerializer,
    RoomMessageSerializer,
)
from chat.services import (
    CommunityService,
    GroupService,
    MessageService,
    VisibilityService,
)
from core.responses import actor_mismatch_response, failure_response

MESSAGE_ADDED = "Message added successfully."


class ChatAPIView(APIView):
    """Base view: authenticated, payload validated by ``serializer_class``."""

    permission_classes = [IsAuthenticated]
    serializer_class = None

    def validated(self, request) -> dict:
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @staticmethod
    def is_actor(request, user_id: int) -> bool:
        return user_id == request.user.id


def _update_fields(data: dict) -> dict:
    return {key: data[key] for key in ("name", "description", "avatar") if key in data}


# =============================================================================
# Direct Messages
# =============================================================================


class DirectMessageView(ChatAPIView):
    """
    POST: Send a direct message.

    Request body:
        {"from": 1, "to": 2, "message": "Hi", "messageType": "text",
         "fileUrl": "", "fileName": ""}

    Returns:
        {"msg": "Message added successfully."}
    """

    serializer_class = DirectMessageCreateSerializer

    @extend_schema(summary="Send direct message", request=DirectMessageCreateSerializer, tags=["Chat - Direct"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data.pop("sender_id")):
            return actor_mismatch_response()

        result = MessageService.send_direct(sender=request.user, **data)
        if not result.success:
            return failure_response(result)

        return Response({"msg": MESSAGE_ADDED}, status=status.HTTP_201_CREATED)


class DirectHistoryView(ChatAPIView):
    """
    POST: Messages between ``from`` (the caller) and ``to``, oldest first.
    """

    serializer_class = DirectPairSerializer

    @extend_schema(
        summary="Direct message history",
        request=DirectPairSerializer,
        responses={200: DirectMessageSerializer(many=True)},
        tags=["Chat - Direct"],
    )
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["sender_id"]):
            return actor_mismatch_response()

        conversation = DirectConversation(request.user.id, data["recipient_id"])
        result = VisibilityService.history(conversation, request.user)
        if not result.success:
            return failure_response(result)

        serializer = DirectMessageSerializer(result.data, many=True, context={"user": request.user})
        return Response(serializer.data)


class ContactsView(ChatAPIView):
    """GET: Direct-message counterparts of the caller, newest first."""

    @extend_schema(summary="Direct contacts", responses={200: ContactSerializer(many=True)}, tags=["Chat - Direct"])
    def get(self, request, user_id):
        if not self.is_actor(request, user_id):
            return actor_mismatch_response()

        contacts = MessageService.get_contacts(request.user)
        return Response(ContactSerializer(contacts, many=True).data)


class DirectMarkReadView(ChatAPIView):
    """
    POST: Mark messages sent by ``from`` to ``to`` (the caller) as read.

    Returns:
        {"msg": "Messages marked as read", "updated": 3}
    """

    serializer_class = DirectPairSerializer

    @extend_schema(summary="Mark direct messages read", request=DirectPairSerializer, tags=["Chat - Direct"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["recipient_id"]):
            return actor_mismatch_response()

        conversation = DirectConversation(request.user.id, data["sender_id"])
        result = VisibilityService.mark_read(conversation, request.user)
        if not result.success:
            return failure_response(result)

        return Response({"msg": "Messages marked as read", "updated": result.data})


# =============================================================================
# Groups
# =============================================================================


class GroupCreateView(ChatAPIView):
    """
    POST: Create a group administered by the caller.

    Request body:
        {"name": "Team", "members": [2, 3], "admin": 1,
         "avatar": "", "description": ""}

    Returns:
        {"status": true, "group": {...}}
    """

    serializer_class = GroupCreateSerializer

    @extend_schema(summary="Create group", request=GroupCreateSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data.pop("admin_id")):
            return actor_mismatch_response()

        result = GroupService.create_group(creator=request.user, **data)
        if not result.success:
            return failure_response(result)

        return Response(
            {"status": True, "group": GroupSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class UserGroupsView(ChatAPIView):
    """GET: Groups of the caller with last message and unread count."""

    @extend_schema(summary="List user groups", responses={200: GroupSummarySerializer(many=True)}, tags=["Chat - Groups"])
    def get(self, request, user_id):
        if not self.is_actor(request, user_id):
            return actor_mismatch_response()

        summaries = GroupService.get_user_groups(request.user)
        return Response(GroupSummarySerializer(summaries, many=True).data)


class GroupDetailView(ChatAPIView):
    """GET: Group with members and admins (members only)."""

    @extend_schema(summary="Group details", tags=["Chat - Groups"])
    def get(self, request, group_id):
        result = GroupService.get_details(group_id, request.user)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "group": GroupSerializer(result.data).data})


class GroupUpdateInfoView(ChatAPIView):
    """POST: Change name, description or avatar (admins only)."""

    serializer_class = GroupUpdateInfoSerializer

    @extend_schema(summary="Update group info", request=GroupUpdateInfoSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["operator_id"]):
            return actor_mismatch_response()

        result = GroupService.update_info(
            data["group_id"], request.user, **_update_fields(data)
        )
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "group": GroupSerializer(result.data).data})


class GroupAddMembersView(ChatAPIView):
    """POST: Add users to a group (admins only)."""

    serializer_class = GroupAddMembersSerializer

    @extend_schema(summary="Add group members", request=GroupAddMembersSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["operator_id"]):
            return actor_mismatch_response()

        result = GroupService.add_members(data["group_id"], request.user, data["member_ids"])
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "group": GroupSerializer(result.data).data})


class GroupTargetView(ChatAPIView):
    """Base for governance actions on one member: ``{groupId, operatorId, userId}``."""

    serializer_class = GroupTargetSerializer
    operation = None

    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["operator_id"]):
            return actor_mismatch_response()

        result = self.operation(data["group_id"], request.user, data["user_id"])
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "group": GroupSerializer(result.data).data})


class GroupRemoveMemberView(GroupTargetView):
    """POST: Remove a member (admins), or leave (operatorId == userId)."""

    operation = staticmethod(GroupService.remove_member)

    @extend_schema(summary="Remove group member", request=GroupTargetSerializer, tags=["Chat - Groups"])
    def post(self, request):
        return super().post(request)


class GroupAssignAdminView(GroupTargetView):
    """POST: Promote a member to admin (admins only)."""

    operation = staticmethod(GroupService.assign_admin)

    @extend_schema(summary="Assign group admin", request=GroupTargetSerializer, tags=["Chat - Groups"])
    def post(self, request):
        return super().post(request)


class GroupRemoveAdminView(GroupTargetView):
    """POST: Dismiss an admin (admins only)."""

    operation = staticmethod(GroupService.remove_admin)

    @extend_schema(summary="Remove group admin", request=GroupTargetSerializer, tags=["Chat - Groups"])
    def post(self, request):
        return super().post(request)


class GroupMessageView(ChatAPIView):
    """POST: Store a group message (members only)."""

    serializer_class = GroupMessageCreateSerializer

    @extend_schema(summary="Send group message", request=GroupMessageCreateSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data.pop("sender_id")):
            return actor_mismatch_response()

        result = MessageService.send_to_group(sender=request.user, **data)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "msg": MESSAGE_ADDED}, status=status.HTTP_201_CREATED)


class GroupHistoryView(ChatAPIView):
    """POST: Group messages visible to the caller, oldest first."""

    serializer_class = GroupMemberRequestSerializer

    @extend_schema(summary="Group message history", request=GroupMemberRequestSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["user_id"]):
            return actor_mismatch_response()

        result = VisibilityService.history(GroupConversation(data["group_id"]), request.user)
        if not result.success:
            return failure_response(result)

        messages = RoomMessageSerializer(result.data, many=True, context={"user": request.user})
        return Response({"status": True, "messages": messages.data})


class GroupMarkReadView(ChatAPIView):
    """POST: Set the caller's last-seen in the group to now."""

    serializer_class = GroupMemberRequestSerializer

    @extend_schema(summary="Mark group read", request=GroupMemberRequestSerializer, tags=["Chat - Groups"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["user_id"]):
            return actor_mismatch_response()

        result = VisibilityService.mark_read(GroupConversation(data["group_id"]), request.user)
        if not result.success:
            return failure_response(result)

        return Response({"status": True})


# =============================================================================
# Communities
# =============================================================================


class CommunityCreateView(ChatAPIView):
    """
    POST: Create a community owned by the caller.

    Request body:
        {"name": "Gardening", "description": "", "admin": 1, "avatar": ""}
    """

    serializer_class = CommunityCreateSerializer

    @extend_schema(summary="Create community", request=CommunityCreateSerializer, tags=["Chat - Communities"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data.pop("admin_id")):
            return actor_mismatch_response()

        result = CommunityService.create_community(admin=request.user, **data)
        if not result.success:
            return failure_response(result)

        return Response(
            {"status": True, "community": CommunitySerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class AllCommunitiesView(ChatAPIView):
    """GET: Every community, with membership flag and unread for the caller."""

    @extend_schema(
        summary="List communities",
        responses={200: CommunitySummarySerializer(many=True)},
        tags=["Chat - Communities"],
    )
    def get(self, request, user_id):
        if not self.is_actor(request, user_id):
            return actor_mismatch_response()

        summaries = CommunityService.list_communities(request.user)
        return Response(CommunitySummarySerializer(summaries, many=True).data)


class CommunityDetailView(ChatAPIView):
    """GET: Community with members."""

    @extend_schema(summary="Community details", tags=["Chat - Communities"])
    def get(self, request, community_id):
        result = CommunityService.get_details(community_id)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "community": CommunitySerializer(result.data).data})


class CommunityUpdateInfoView(ChatAPIView):
    """POST: Change name, description or avatar (community admin only)."""

    serializer_class = CommunityUpdateInfoSerializer

    @extend_schema(summary="Update community info", request=CommunityUpdateInfoSerializer, tags=["Chat - Communities"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["operator_id"]):
            return actor_mismatch_response()

        result = CommunityService.update_info(
            data["community_id"], request.user, **_update_fields(data)
        )
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "community": CommunitySerializer(result.data).data})


class CommunityMembershipView(ChatAPIView):
    """Base for join and leave: ``{communityId, userId}``."""

    serializer_class = CommunityMemberRequestSerializer
    operation = None

    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["user_id"]):
            return actor_mismatch_response()

        result = self.operation(data["community_id"], request.user)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "community": CommunitySerializer(result.data).data})


class CommunityJoinView(CommunityMembershipView):
    """POST: Join a community (no-op if already a member)."""

    operation = staticmethod(CommunityService.join)

    @extend_schema(summary="Join community", request=CommunityMemberRequestSerializer, tags=["Chat - Communities"])
    def post(self, request):
        return super().post(request)


class CommunityLeaveView(CommunityMembershipView):
    """POST: Leave a community."""

    operation = staticmethod(CommunityService.leave)

    @extend_schema(summary="Leave community", request=CommunityMemberRequestSerializer, tags=["Chat - Communities"])
    def post(self, request):
        return super().post(request)


class CommunityMessageView(ChatAPIView):
    """POST: Store a community message (members only)."""

    serializer_class = CommunityMessageCreateSerializer

    @extend_schema(summary="Send community message", request=CommunityMessageCreateSerializer, tags=["Chat - Communities"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data.pop("sender_id")):
            return actor_mismatch_response()

        result = MessageService.send_to_community(sender=request.user, **data)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "msg": MESSAGE_ADDED}, status=status.HTTP_201_CREATED)


class CommunityHistoryView(ChatAPIView):
    """POST: Community messages visible to the caller, oldest first."""

    serializer_class = CommunityMemberRequestSerializer

    @extend_schema(summary="Community message history", request=CommunityMemberRequestSerializer, tags=["Chat - Communities"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["user_id"]):
            return actor_mismatch_response()

        conversation = CommunityConversation(data["community_id"])
        result = VisibilityService.history(conversation, request.user)
        if not result.success:
            return failure_response(result)

        messages = RoomMessageSerializer(result.data, many=True, context={"user": request.user})
        return Response({"status": True, "messages": messages.data})


class CommunityMarkReadView(ChatAPIView):
    """POST: Set the caller's last-seen in the community to now."""

    serializer_class = CommunityMemberRequestSerializer

    @extend_schema(summary="Mark community read", request=CommunityMemberRequestSerializer, tags=["Chat - Communities"])
    def post(self, request):
        data = self.validated(request)
        if not self.is_actor(request, data["user_id"]):
            return actor_mismatch_response()

        conversation = CommunityConversation(data["community_id"])
        result = VisibilityService.mark_read(conversation, request.user)
        if not result.success:
            return failure_response(result)

        return Response({"status": True})
