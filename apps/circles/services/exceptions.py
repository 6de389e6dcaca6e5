"""
Domain-specific exceptions for the circles app.

These exceptions represent business rule violations. They never wrap
database errors; views translate them into HTTP responses.
"""


class CirclesServiceError(Exception):
    """Base exception for all circles service errors."""

    code = 'circles_error'
    default_message = 'Circle operation failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


# Authorization

class NotCircleMemberError(CirclesServiceError):
    """Raised when the caller does not belong to the circle."""

    code = 'not_circle_member'
    default_message = 'Not a member of this circle'


class NotCircleAdminError(CirclesServiceError):
    """Raised when the caller lacks admin standing in the circle."""

    code = 'not_circle_admin'
    default_message = 'Admin privileges required'


# Not found

class CircleNotFoundError(CirclesServiceError):
    code = 'circle_not_found'
    default_message = 'Circle not found'


class MemberNotFoundError(CirclesServiceError):
    code = 'circle_member_not_found'
    default_message = 'Circle member not found'


class InvitationNotFoundError(CirclesServiceError):
    code = 'invitation_not_found'
    default_message = 'Invitation not found'


class SharingPreferenceNotFoundError(CirclesServiceError):
    code = 'sharing_preference_not_found'
    default_message = 'Sharing preference not found'


class UserNotFoundError(CirclesServiceError):
    """Raised when a referenced user account does not exist."""

    code = 'user_not_found'
    default_message = 'User not found'


# Conflicts and invariants

class AlreadyMemberError(CirclesServiceError):
    """Raised when the user already belongs to the circle."""

    code = 'already_member'
    default_message = 'Already a member of this circle'


class CannotRemoveLastAdminError(CirclesServiceError):
    """Raised when a removal or demotion would leave the circle without an admin."""

    code = 'cannot_remove_last_admin'
    default_message = 'Cannot remove the last admin from circle'


class CannotLeaveAsLastAdminError(CirclesServiceError):
    """Raised when the only admin tries to leave."""

    code = 'cannot_leave_as_last_admin'
    default_message = 'Cannot leave circle as the last admin'


# Invitations

class InvitationExpiredError(CirclesServiceError):
    code = 'invitation_expired'
    default_message = 'Invitation has expired'


class InvitationInvalidError(CirclesServiceError):
    """Raised for used up, revoked, accepted or misaddressed invitations."""

    code = 'invitation_invalid'
    default_message = 'Invitation is not valid'


# Input validation

class InvalidRoleError(CirclesServiceError):
    code = 'invalid_role'
    default_message = 'Invalid member role'


class InvalidSharingPreferenceError(CirclesServiceError):
    code = 'invalid_sharing_preference'
    default_message = 'Invalid sharing preference value'


class InvalidInvitationRequestError(CirclesServiceError):
    code = 'invalid_invitation_request'
    default_message = 'Invalid invitation request'
