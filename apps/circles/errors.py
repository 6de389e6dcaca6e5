"""
Translation of circles service errors into HTTP responses.

Every domain error maps to exactly one status code so clients can rely on
it. Errors outside the circles hierarchy are left to DRF and Django.
"""

from rest_framework import status
from rest_framework.response import Response

from apps.circles.services.exceptions import (
    AlreadyMemberError,
    CannotLeaveAsLastAdminError,
    CannotRemoveLastAdminError,
    CircleNotFoundError,
    InvalidInvitationRequestError,
    InvalidRoleError,
    InvalidSharingPreferenceError,
    InvitationExpiredError,
    InvitationInvalidError,
    InvitationNotFoundError,
    MemberNotFoundError,
    NotCircleAdminError,
    NotCircleMemberError,
    SharingPreferenceNotFoundError,
    UserNotFoundError,
)


ERROR_STATUS = {
    # Authorization
    NotCircleMemberError: status.HTTP_403_FORBIDDEN,
    NotCircleAdminError: status.HTTP_403_FORBIDDEN,

    # Not found
    CircleNotFoundError: status.HTTP_404_NOT_FOUND,
    MemberNotFoundError: status.HTTP_404_NOT_FOUND,
    InvitationNotFoundError: status.HTTP_404_NOT_FOUND,
    SharingPreferenceNotFoundError: status.HTTP_404_NOT_FOUND,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,

    # Conflict
    AlreadyMemberError: status.HTTP_409_CONFLICT,

    # Gone
    InvitationExpiredError: status.HTTP_410_GONE,

    # Bad request
    CannotRemoveLastAdminError: status.HTTP_400_BAD_REQUEST,
    CannotLeaveAsLastAdminError: status.HTTP_400_BAD_REQUEST,
    InvitationInvalidError: status.HTTP_400_BAD_REQUEST,
    InvalidRoleError: status.HTTP_400_BAD_REQUEST,
    InvalidSharingPreferenceError: status.HTTP_400_BAD_REQUEST,
    InvalidInvitationRequestError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc):
    """Return the HTTP status for a circles service error."""
    for error_class in type(exc).__mro__:
        if error_class in ERROR_STATUS:
            return ERROR_STATUS[error_class]
    return status.HTTP_400_BAD_REQUEST


def error_response(exc):
    return Response({'error': str(exc), 'code': exc.code}, status=status_for(exc))
