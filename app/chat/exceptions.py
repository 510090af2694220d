"""
Chat-specific domain errors.

These extend the core taxonomy with the two failures that only make sense
for conversations:

    NotMemberError - Caller has no membership in the target conversation
    UnauthorizedActionError - Caller is a member but not an admin

Usage:
    from chat.exceptions import NotMemberError

    if membership is None:
        raise NotMemberError("You are not a member of this group")

Note:
    Service methods convert these into ServiceResult failures through
    core.services.service_operation. Socket handlers drop them silently.
"""

from core.exceptions import PermissionDeniedError


class NotMemberError(PermissionDeniedError):
    """Raised when the caller is not a member of the conversation."""

    default_error_code: str = "NOT_MEMBER"


class UnauthorizedActionError(PermissionDeniedError):
    """Raised when a non-admin attempts a governance action."""

    default_error_code: str = "PERMISSION_DENIED"
