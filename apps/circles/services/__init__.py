"""
Circles app services layer.

The service holds every multi-step workflow and enforces the rules a single
entity cannot see (membership uniqueness, at least one admin per circle,
invitation validity). Storage is reached only through a CircleRepository.
"""

from .exceptions import (
    CirclesServiceError,
    NotCircleMemberError,
    NotCircleAdminError,
    CircleNotFoundError,
    MemberNotFoundError,
    InvitationNotFoundError,
    SharingPreferenceNotFoundError,
    UserNotFoundError,
    AlreadyMemberError,
    CannotRemoveLastAdminError,
    CannotLeaveAsLastAdminError,
    InvitationExpiredError,
    InvitationInvalidError,
    InvalidRoleError,
    InvalidSharingPreferenceError,
    InvalidInvitationRequestError,
)

from .commands import (
    CreateCircleCommand,
    UpdateCircleCommand,
    DeleteCircleCommand,
    AddMemberCommand,
    RemoveMemberCommand,
    UpdateMemberRoleCommand,
    UpdateNicknameCommand,
    LeaveCircleCommand,
    UpdateSharingPreferenceCommand,
    CreateInvitationCommand,
    AcceptInvitationCommand,
    RevokeInvitationCommand,
    GetCircleQuery,
    ListUserCirclesQuery,
    ListCircleMembersQuery,
    GetSharingPreferenceQuery,
    ListUserInvitationsQuery,
    ListPendingInvitationsQuery,
    GetInvitationByCodeQuery,
)

from .circle_service import CircleService


__all__ = [
    # Exceptions
    'CirclesServiceError',
    'NotCircleMemberError',
    'NotCircleAdminError',
    'CircleNotFoundError',
    'MemberNotFoundError',
    'InvitationNotFoundError',
    'SharingPreferenceNotFoundError',
    'UserNotFoundError',
    'AlreadyMemberError',
    'CannotRemoveLastAdminError',
    'CannotLeaveAsLastAdminError',
    'InvitationExpiredError',
    'InvitationInvalidError',
    'InvalidRoleError',
    'InvalidSharingPreferenceError',
    'InvalidInvitationRequestError',

    # Commands
    'CreateCircleCommand',
    'UpdateCircleCommand',
    'DeleteCircleCommand',
    'AddMemberCommand',
    'RemoveMemberCommand',
    'UpdateMemberRoleCommand',
    'UpdateNicknameCommand',
    'LeaveCircleCommand',
    'UpdateSharingPreferenceCommand',
    'CreateInvitationCommand',
    'AcceptInvitationCommand',
    'RevokeInvitationCommand',

    # Queries
    'GetCircleQuery',
    'ListUserCirclesQuery',
    'ListCircleMembersQuery',
    'GetSharingPreferenceQuery',
    'ListUserInvitationsQuery',
    'ListPendingInvitationsQuery',
    'GetInvitationByCodeQuery',

    # Service
    'CircleService',
]
