"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/            - Create an account
    /api/v1/auth/login/               - Email/password login
    /api/v1/auth/token/refresh/       - Refresh an access token
    /api/v1/auth/users/<id>/          - Every user except <id>
    /api/v1/auth/search/<email>/      - Look up one user by email
    /api/v1/auth/avatar/<id>/         - Set the caller's avatar
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import (
    AllUsersView,
    LoginView,
    RegisterView,
    SearchUserView,
    SetAvatarView,
)

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("users/<int:user_id>/", AllUsersView.as_view(), name="all-users"),
    path("search/<str:email>/", SearchUserView.as_view(), name="search"),
    path("avatar/<int:user_id>/", SetAvatarView.as_view(), name="set-avatar"),
]
