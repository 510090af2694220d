"""
Response helpers shared by the REST views.

Every failed ServiceResult is returned with the same envelope:

    {"status": false, "msg": "...", "error_code": "..."}

The HTTP status is derived from the error code so views do not repeat the
mapping.

Usage:
    result = GroupService.add_members(group_id, request.user, member_ids)
    if not result.success:
        return failure_response(result)
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from core.services import ServiceResult

FORBIDDEN_CODES = frozenset({"NOT_MEMBER", "PERMISSION_DENIED", "ACTOR_MISMATCH"})


def status_for(error_code: str | None) -> int:
    """Map a service error code to an HTTP status."""
    if error_code in FORBIDDEN_CODES:
        return status.HTTP_403_FORBIDDEN
    if error_code and (error_code == "NOT_FOUND" or error_code.endswith("_NOT_FOUND")):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def failure_response(result: ServiceResult) -> Response:
    """Render a failed ServiceResult in the API envelope."""
    return Response(result.to_response(), status=status_for(result.error_code))


def actor_mismatch_response() -> Response:
    """Reject a payload whose actor id is not the authenticated user."""
    return Response(
        {
            "status": False,
            "msg": "You can only act as yourself",
            "error_code": "ACTOR_MISMATCH",
        },
        status=status.HTTP_403_FORBIDDEN,
    )
