"""
URL configuration for chat app.

Mounted at /api/v1/ by config/urls.py.

URL structure:
    messages/direct/...   Direct messages
    groups/...            Group lifecycle, governance and messages
    communities/...       Community lifecycle and messages
"""

from django.urls import path

from chat import views

app_name = "chat"

urlpatterns = [
    # Direct messages
    path("messages/direct/", views.DirectMessageView.as_view(), name="direct-send"),
    path("messages/direct/history/", views.DirectHistoryView.as_view(), name="direct-history"),
    path(
        "messages/direct/contacts/<int:user_id>/",
        views.ContactsView.as_view(),
        name="direct-contacts",
    ),
    path("messages/direct/mark-read/", views.DirectMarkReadView.as_view(), name="direct-mark-read"),
    # Groups
    path("groups/create/", views.GroupCreateView.as_view(), name="group-create"),
    path("groups/user/<int:user_id>/", views.UserGroupsView.as_view(), name="group-list"),
    path("groups/update-info/", views.GroupUpdateInfoView.as_view(), name="group-update-info"),
    path("groups/add-members/", views.GroupAddMembersView.as_view(), name="group-add-members"),
    path("groups/remove-member/", views.GroupRemoveMemberView.as_view(), name="group-remove-member"),
    path("groups/assign-admin/", views.GroupAssignAdminView.as_view(), name="group-assign-admin"),
    path("groups/remove-admin/", views.GroupRemoveAdminView.as_view(), name="group-remove-admin"),
    path("groups/messages/", views.GroupMessageView.as_view(), name="group-send"),
    path("groups/messages/history/", views.GroupHistoryView.as_view(), name="group-history"),
    path("groups/mark-read/", views.GroupMarkReadView.as_view(), name="group-mark-read"),
    path("groups/<int:group_id>/", views.GroupDetailView.as_view(), name="group-detail"),
    # Communities
    path("communities/create/", views.CommunityCreateView.as_view(), name="community-create"),
    path("communities/all/<int:user_id>/", views.AllCommunitiesView.as_view(), name="community-list"),
    path(
        "communities/update-info/",
        views.CommunityUpdateInfoView.as_view(),
        name="community-update-info",
    ),
    path("communities/join/", views.CommunityJoinView.as_view(), name="community-join"),
    path("communities/leave/", views.CommunityLeaveView.as_view(), name="community-leave"),
    path("communities/messages/", views.CommunityMessageView.as_view(), name="community-send"),
    path(
        "communities/messages/history/",
        views.CommunityHistoryView.as_view(),
        name="community-history",
    ),
    path("communities/mark-read/", views.CommunityMarkReadView.as_view(), name="community-mark-read"),
    path(
        "communities/<int:community_id>/",
        views.CommunityDetailView.as_view(),
        name="community-detail",
    ),
]
