"""
Authentication application.

This app provides chat accounts: registration, email/password login with
JWT tokens, user discovery and avatar selection.

Key components:
    - User model: Email login, unique display name, avatar, online flag
    - AuthService: Business logic for account operations

Usage:
    from authentication.models import User
    from authentication.services import AuthService
"""
