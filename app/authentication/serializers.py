"""
Serializers for authentication endpoints.

This module provides DRF serializers for:
- User (public representation used by every chat response)
- Registration and login payloads
- Avatar selection payload

Security:
    - Password fields are write-only
    - Email is only exposed to authenticated callers
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Public user representation.

    Field names follow the chat client's camelCase contract.
    """

    isAvatarImageSet = serializers.BooleanField(source="is_avatar_set", read_only=True)
    isOnline = serializers.BooleanField(source="is_online", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "name", "avatar", "isAvatarImageSet", "isOnline"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Registration payload: ``{username, email, password}``."""

    username = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class LoginSerializer(serializers.Serializer):
    """Login payload: ``{email, password}``."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class AvatarSerializer(serializers.Serializer):
    """Avatar payload: ``{image}`` holding a data URL or remote URL."""

    image = serializers.CharField()
