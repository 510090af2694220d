"""
Tests for the application exception taxonomy.
"""

from chat.exceptions import NotMemberError, UnauthorizedActionError
from core.exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class TestBaseApplicationError:
    def test_defaults_code_and_details(self):
        exc = NotFoundError("User does not exist")

        assert exc.message == "User does not exist"
        assert exc.error_code == "NOT_FOUND"
        assert exc.details == {}

    def test_explicit_code_and_details(self):
        exc = ValidationError("Bad", error_code="NAME_TAKEN", details={"field": "name"})

        assert exc.error_code == "NAME_TAKEN"
        assert exc.details == {"field": "name"}

    def test_str_includes_code(self):
        assert str(ValidationError("Bad input")) == "[VALIDATION_ERROR] Bad input"


class TestChatErrors:
    """Chat errors extend the permission branch of the taxonomy."""

    def test_not_member_error(self):
        exc = NotMemberError("You are not a member of this group")

        assert isinstance(exc, PermissionDeniedError)
        assert isinstance(exc, BaseApplicationError)
        assert exc.error_code == "NOT_MEMBER"

    def test_unauthorized_action_error(self):
        assert UnauthorizedActionError("Only admins").error_code == "PERMISSION_DENIED"
