"""
Command and query objects accepted by ``CircleService``.

Transport adapters build one of these per request. ``user_id`` is always the
authenticated caller; ``member_id`` is the user being acted upon.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID


# Commands

@dataclass(frozen=True)
class CreateCircleCommand:
    name: str
    created_by: UUID
    description: Optional[str] = None


@dataclass(frozen=True)
class UpdateCircleCommand:
    circle_id: UUID
    user_id: UUID
    name: str = ''
    description: Optional[str] = None
    avatar: Optional[str] = None


@dataclass(frozen=True)
class DeleteCircleCommand:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class AddMemberCommand:
    circle_id: UUID
    user_id: UUID
    member_id: UUID
    role: str


@dataclass(frozen=True)
class RemoveMemberCommand:
    circle_id: UUID
    user_id: UUID
    member_id: UUID


@dataclass(frozen=True)
class UpdateMemberRoleCommand:
    circle_id: UUID
    user_id: UUID
    member_id: UUID
    role: str


@dataclass(frozen=True)
class UpdateNicknameCommand:
    circle_id: UUID
    user_id: UUID
    nickname: Optional[str] = None


@dataclass(frozen=True)
class LeaveCircleCommand:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class UpdateSharingPreferenceCommand:
    """Sparse patch: ``None`` means leave the field as it is."""

    circle_id: UUID
    user_id: UUID
    privacy_level: Optional[str] = None
    share_timezone: Optional[bool] = None
    share_availability: Optional[bool] = None
    share_location: Optional[bool] = None
    location_precision: Optional[str] = None
    share_activity: Optional[bool] = None


@dataclass(frozen=True)
class CreateInvitationCommand:
    circle_id: UUID
    inviter_id: UUID
    type: str
    invitee_id: Optional[UUID] = None
    max_uses: Optional[int] = None
    expires_in: Optional[timedelta] = None


@dataclass(frozen=True)
class AcceptInvitationCommand:
    code: str
    user_id: UUID


@dataclass(frozen=True)
class RevokeInvitationCommand:
    invitation_id: UUID
    user_id: UUID


# Queries

@dataclass(frozen=True)
class GetCircleQuery:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class ListUserCirclesQuery:
    user_id: UUID
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class ListCircleMembersQuery:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class GetSharingPreferenceQuery:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class ListUserInvitationsQuery:
    user_id: UUID


@dataclass(frozen=True)
class ListPendingInvitationsQuery:
    circle_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class GetInvitationByCodeQuery:
    code: str
