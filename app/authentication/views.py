"""
Authentication views.

This module provides API views for:
- Registration and login (public, return a JWT pair)
- Contact discovery (all other users, search by email)
- Avatar selection

URL structure (mounted at /api/v1/auth/):
    register/               POST  Create an account
    login/                  POST  Email/password login
    users/<id>/             GET   Every user except <id>
    search/<email>/         GET   Exact email lookup
    avatar/<id>/            POST  Set the avatar of <id> (must be the caller)

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AuthService)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    AvatarSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
)
from authentication.services import AuthService
from core.responses import actor_mismatch_response, failure_response


def _session_payload(data: dict) -> dict:
    return {
        "status": True,
        "user": UserSerializer(data["user"]).data,
        "access": data["access"],
        "refresh": data["refresh"],
    }


class RegisterView(APIView):
    """
    POST: Create an account.

    Request body:
        {"username": "ada", "email": "ada@example.com", "password": "..."}

    Returns:
        {"status": true, "user": {...}, "access": "...", "refresh": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register",
        request=RegisterSerializer,
        tags=["Auth"],
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.register(**serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(_session_payload(result.data), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST: Log in with email and password.

    Returns:
        {"status": true, "user": {...}, "access": "...", "refresh": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=LoginSerializer,
        tags=["Auth"],
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.login(**serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(_session_payload(result.data))


class AllUsersView(APIView):
    """GET: Every user except the one in the URL, for the contact picker."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="List other users", responses={200: UserSerializer(many=True)}, tags=["Auth - Users"])
    def get(self, request, user_id):
        users = AuthService.list_other_users(user_id)
        return Response(UserSerializer(users, many=True).data)


class SearchUserView(APIView):
    """GET: Look up one user by exact email."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Search user by email", tags=["Auth - Users"])
    def get(self, request, email):
        result = AuthService.search_by_email(email)
        if not result.success:
            return failure_response(result)

        return Response({"status": True, "user": UserSerializer(result.data).data})


class SetAvatarView(APIView):
    """
    POST: Set the caller's avatar.

    Request body:
        {"image": "data:image/svg+xml;base64,..."}

    Returns:
        {"isSet": true, "image": "..."}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Set avatar", request=AvatarSerializer, tags=["Auth - Users"])
    def post(self, request, user_id):
        if user_id != request.user.id:
            return actor_mismatch_response()

        serializer = AvatarSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.set_avatar(user_id, serializer.validated_data["image"])
        if not result.success:
            return failure_response(result)

        return Response({"isSet": True, "image": result.data.avatar})
