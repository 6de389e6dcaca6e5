"""
Circle service.

Orchestrates every membership, sharing and invitation workflow. Storage is
reached only through the injected ``CircleRepository``.
"""

import logging
from typing import List, Optional, Tuple, Type
from uuid import UUID

from django.conf import settings
from django.utils import timezone

from apps.circles.models import (
    Circle,
    CircleInvitation,
    CircleMember,
    InvitationType,
    MemberRole,
    SharingPreference,
    is_valid_location_precision,
    is_valid_privacy_level,
    is_valid_role,
)

from .commands import (
    AcceptInvitationCommand,
    AddMemberCommand,
    CreateCircleCommand,
    CreateInvitationCommand,
    DeleteCircleCommand,
    GetCircleQuery,
    GetInvitationByCodeQuery,
    GetSharingPreferenceQuery,
    LeaveCircleCommand,
    ListCircleMembersQuery,
    ListPendingInvitationsQuery,
    ListUserCirclesQuery,
    ListUserInvitationsQuery,
    RemoveMemberCommand,
    RevokeInvitationCommand,
    UpdateCircleCommand,
    UpdateMemberRoleCommand,
    UpdateNicknameCommand,
    UpdateSharingPreferenceCommand,
)
from .exceptions import (
    AlreadyMemberError,
    CannotLeaveAsLastAdminError,
    CannotRemoveLastAdminError,
    CirclesServiceError,
    InvalidInvitationRequestError,
    InvalidRoleError,
    InvalidSharingPreferenceError,
    InvitationExpiredError,
    InvitationInvalidError,
    MemberNotFoundError,
    NotCircleAdminError,
    NotCircleMemberError,
    SharingPreferenceNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = (
    'privacy_level',
    'share_timezone',
    'share_availability',
    'share_location',
    'location_precision',
    'share_activity',
)


class CircleService:
    """Stateless orchestrator for the circles core."""

    def __init__(self, repository):
        self.repo = repository

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_member(self, circle_id: UUID, user_id: UUID) -> None:
        if not self.repo.is_member(circle_id, user_id):
            raise NotCircleMemberError()

    def _require_admin(self, circle_id: UUID, user_id: UUID) -> None:
        if not self.repo.is_admin(circle_id, user_id):
            raise NotCircleAdminError()

    def _ensure_another_admin(self, circle_id: UUID, error_class: Type[CirclesServiceError]) -> None:
        """
        Raise ``error_class`` unless the circle has at least two admins.

        Members are re-listed (and locked) every time instead of trusting a
        stored counter.
        """
        members = self.repo.list_members(circle_id, lock=True)
        admin_count = sum(1 for member in members if member.is_admin())
        if admin_count <= 1:
            raise error_class()

    def _create_default_preference(self, circle_id: UUID, user_id: UUID) -> Optional[SharingPreference]:
        """Best effort: a failure is logged and never aborts the caller."""
        preference = SharingPreference.default(circle_id=circle_id, user_id=user_id)
        try:
            self.repo.create_sharing_preference(preference)
        except Exception:
            logger.exception(
                f"Failed to create sharing preference for user {user_id} in circle {circle_id}"
            )
            return None
        return preference

    # =========================================================================
    # Circles
    # =========================================================================

    def create_circle(self, cmd: CreateCircleCommand) -> Circle:
        """
        Create a circle and make its creator the first admin.

        Steps:
        1. Create the circle
        2. Add the creator as an admin member
        3. Create the creator's default sharing preference (best effort)

        Args:
            cmd: CreateCircleCommand

        Returns:
            Created Circle instance
        """
        with self.repo.atomic():
            circle = Circle(
                name=cmd.name,
                description=cmd.description,
                created_by_id=cmd.created_by,
            )
            self.repo.create_circle(circle)

            member = CircleMember(
                circle_id=circle.id,
                user_id=cmd.created_by,
                role=MemberRole.ADMIN,
            )
            self.repo.add_member(member)

            self._create_default_preference(circle.id, cmd.created_by)

        logger.info(f"Circle {circle.id} created by user {cmd.created_by}")
        return circle

    def get_circle(self, query: GetCircleQuery) -> Circle:
        """
        Return a circle the caller belongs to.

        Raises:
            NotCircleMemberError: If the caller is not a member
            CircleNotFoundError: If the circle doesn't exist
        """
        self._require_member(query.circle_id, query.user_id)
        return self.repo.get_circle(query.circle_id)

    def list_user_circles(self, query: ListUserCirclesQuery) -> Tuple[List[Circle], int]:
        """
        Return ``(circles, total)`` for the caller.

        A limit outside (0, CIRCLES_MAX_PAGE_SIZE] falls back to the default
        page size.
        """
        default_limit = getattr(settings, 'CIRCLES_DEFAULT_PAGE_SIZE', 20)
        max_limit = getattr(settings, 'CIRCLES_MAX_PAGE_SIZE', 100)

        limit = query.limit
        if limit is None or limit <= 0 or limit > max_limit:
            limit = default_limit
        offset = max(query.offset or 0, 0)

        circles = self.repo.list_circles_by_user(query.user_id, limit, offset)
        total = self.repo.count_circles_by_user(query.user_id)
        return circles, total

    def update_circle(self, cmd: UpdateCircleCommand) -> Circle:
        """
        Update circle details (admin only).

        An empty name keeps the current name.

        Raises:
            NotCircleAdminError: If the caller is not an admin
            CircleNotFoundError: If the circle doesn't exist
        """
        self._require_admin(cmd.circle_id, cmd.user_id)

        circle = self.repo.get_circle(cmd.circle_id)
        circle.update(cmd.name, cmd.description)
        if cmd.avatar is not None:
            circle.set_avatar(cmd.avatar)

        self.repo.update_circle(circle)
        return circle

    def delete_circle(self, cmd: DeleteCircleCommand) -> None:
        """Delete a circle (admin only); members, invitations and preferences go with it."""
        self._require_admin(cmd.circle_id, cmd.user_id)

        self.repo.delete_circle(cmd.circle_id)
        logger.info(f"Circle {cmd.circle_id} deleted by user {cmd.user_id}")

    # =========================================================================
    # Membership
    # =========================================================================

    def add_member(self, cmd: AddMemberCommand) -> CircleMember:
        """
        Add a user to a circle (admin only).

        Args:
            cmd: AddMemberCommand

        Returns:
            Created CircleMember instance

        Raises:
            InvalidRoleError: If the role is unknown
            NotCircleAdminError: If the caller is not an admin
            UserNotFoundError: If no user has the given member_id
            AlreadyMemberError: If the user already belongs to the circle
        """
        if not is_valid_role(cmd.role):
            raise InvalidRoleError()

        with self.repo.atomic():
            self._require_admin(cmd.circle_id, cmd.user_id)

            if not self.repo.user_exists(cmd.member_id):
                raise UserNotFoundError()

            if self.repo.is_member(cmd.circle_id, cmd.member_id):
                raise AlreadyMemberError()

            member = CircleMember(
                circle_id=cmd.circle_id,
                user_id=cmd.member_id,
                role=cmd.role,
            )
            self.repo.add_member(member)

            self._create_default_preference(cmd.circle_id, cmd.member_id)

        logger.info(f"Member {cmd.member_id} added to circle {cmd.circle_id}")
        return member

    def remove_member(self, cmd: RemoveMemberCommand) -> None:
        """
        Remove a member from a circle (admin only).

        Removing an admin requires another admin to remain.

        Raises:
            NotCircleAdminError: If the caller is not an admin
            MemberNotFoundError: If the target is not a member
            CannotRemoveLastAdminError: If the target is the only admin
        """
        with self.repo.atomic():
            self._require_admin(cmd.circle_id, cmd.user_id)

            member = self.repo.get_member(cmd.circle_id, cmd.member_id)
            if member.is_admin():
                self._ensure_another_admin(cmd.circle_id, CannotRemoveLastAdminError)

            self.repo.remove_member(cmd.circle_id, cmd.member_id)

        logger.info(f"Member {cmd.member_id} removed from circle {cmd.circle_id} by user {cmd.user_id}")

    def list_members(self, query: ListCircleMembersQuery) -> List[CircleMember]:
        """Return every member of a circle the caller belongs to."""
        self._require_member(query.circle_id, query.user_id)
        return self.repo.list_members(query.circle_id)

    def update_member_role(self, cmd: UpdateMemberRoleCommand) -> CircleMember:
        """
        Change a member's role (admin only).

        Demoting an admin requires another admin to remain.

        Raises:
            InvalidRoleError: If the role is unknown
            NotCircleAdminError: If the caller is not an admin
            MemberNotFoundError: If the target is not a member
            CannotRemoveLastAdminError: If the target is the only admin
        """
        if not is_valid_role(cmd.role):
            raise InvalidRoleError()

        with self.repo.atomic():
            self._require_admin(cmd.circle_id, cmd.user_id)

            member = self.repo.get_member(cmd.circle_id, cmd.member_id)
            if member.is_admin() and cmd.role != MemberRole.ADMIN:
                self._ensure_another_admin(cmd.circle_id, CannotRemoveLastAdminError)

            member.set_role(cmd.role)
            self.repo.update_member(member)

        logger.info(f"Member {cmd.member_id} in circle {cmd.circle_id} is now {cmd.role}")
        return member

    def update_nickname(self, cmd: UpdateNicknameCommand) -> CircleMember:
        """Set the caller's circle-scoped nickname; ``None`` or '' clears it."""
        try:
            member = self.repo.get_member(cmd.circle_id, cmd.user_id)
        except MemberNotFoundError:
            raise NotCircleMemberError()

        member.set_nickname(cmd.nickname or None)
        self.repo.update_member(member)
        return member

    def leave_circle(self, cmd: LeaveCircleCommand) -> None:
        """
        Remove the caller from a circle.

        Raises:
            MemberNotFoundError: If the caller is not a member
            CannotLeaveAsLastAdminError: If the caller is the only admin
        """
        with self.repo.atomic():
            member = self.repo.get_member(cmd.circle_id, cmd.user_id)
            if member.is_admin():
                self._ensure_another_admin(cmd.circle_id, CannotLeaveAsLastAdminError)

            self.repo.remove_member(cmd.circle_id, cmd.user_id)

        logger.info(f"User {cmd.user_id} left circle {cmd.circle_id}")

    def is_member(self, circle_id: UUID, user_id: UUID) -> bool:
        return self.repo.is_member(circle_id, user_id)

    # =========================================================================
    # Sharing preferences
    # =========================================================================

    def get_sharing_preference(self, query: GetSharingPreferenceQuery) -> SharingPreference:
        return self.repo.get_sharing_preference(query.circle_id, query.user_id)

    def update_sharing_preference(self, cmd: UpdateSharingPreferenceCommand) -> SharingPreference:
        """
        Patch the caller's sharing preference for one circle.

        Only fields given as non-None change. A missing row is created with
        defaults first.

        Raises:
            InvalidSharingPreferenceError: If a privacy level or precision is unknown
            CircleNotFoundError: If the circle doesn't exist
        """
        if cmd.privacy_level is not None and not is_valid_privacy_level(cmd.privacy_level):
            raise InvalidSharingPreferenceError(f"Invalid privacy level: {cmd.privacy_level}")
        if cmd.location_precision is not None and not is_valid_location_precision(cmd.location_precision):
            raise InvalidSharingPreferenceError(
                f"Invalid location precision: {cmd.location_precision}"
            )

        with self.repo.atomic():
            self.repo.get_circle(cmd.circle_id)

            try:
                preference = self.repo.get_sharing_preference(cmd.circle_id, cmd.user_id)
            except SharingPreferenceNotFoundError:
                preference = SharingPreference.default(circle_id=cmd.circle_id, user_id=cmd.user_id)
                self.repo.create_sharing_preference(preference)

            for field in PREFERENCE_FIELDS:
                value = getattr(cmd, field)
                if value is not None:
                    setattr(preference, field, value)

            self.repo.update_sharing_preference(preference)

        return preference

    # =========================================================================
    # Invitations
    # =========================================================================

    def create_invitation(self, cmd: CreateInvitationCommand) -> CircleInvitation:
        """
        Create a direct or link invitation (admin only).

        A direct invitation without an invitee is issued as a link.

        Args:
            cmd: CreateInvitationCommand

        Returns:
            Created CircleInvitation instance

        Raises:
            InvalidInvitationRequestError: If the type or max_uses is invalid
            NotCircleAdminError: If the inviter is not an admin
            UserNotFoundError: If a direct invitee does not exist
        """
        if cmd.type not in InvitationType.values:
            raise InvalidInvitationRequestError(f"Invalid invitation type: {cmd.type}")
        if cmd.max_uses is not None and cmd.max_uses < 1:
            raise InvalidInvitationRequestError("max_uses must be at least 1")

        self._require_admin(cmd.circle_id, cmd.inviter_id)

        expires_at = None
        if cmd.expires_in is not None:
            expires_at = timezone.now() + cmd.expires_in

        if cmd.type == InvitationType.DIRECT and cmd.invitee_id is not None:
            if not self.repo.user_exists(cmd.invitee_id):
                raise UserNotFoundError()
            invitation = CircleInvitation.direct(
                circle_id=cmd.circle_id,
                inviter_id=cmd.inviter_id,
                invitee_id=cmd.invitee_id,
                expires_at=expires_at,
            )
        else:
            invitation = CircleInvitation.link(
                circle_id=cmd.circle_id,
                inviter_id=cmd.inviter_id,
                max_uses=cmd.max_uses,
                expires_at=expires_at,
            )

        self.repo.create_invitation(invitation)

        logger.info(f"Invitation {invitation.id} created for circle {cmd.circle_id}")
        return invitation

    def accept_invitation(self, cmd: AcceptInvitationCommand) -> Circle:
        """
        Join a circle with an invitation code.

        The invitation row stays locked until the membership and the use
        count are written, so concurrent acceptances cannot overrun max_uses.

        Args:
            cmd: AcceptInvitationCommand

        Returns:
            The joined Circle

        Raises:
            InvitationNotFoundError: If no invitation has this code
            InvitationExpiredError: If the invitation is past its expiry
            InvitationInvalidError: If it is used up, closed or addressed to someone else
            AlreadyMemberError: If the user already belongs to the circle
        """
        with self.repo.atomic():
            invitation = self.repo.get_invitation_by_code(cmd.code, lock=True)

            if not invitation.is_valid():
                if invitation.is_expired():
                    raise InvitationExpiredError()
                raise InvitationInvalidError()

            if invitation.is_direct() and str(invitation.invitee_id) != str(cmd.user_id):
                raise InvitationInvalidError("Invitation is addressed to another user")

            if self.repo.is_member(invitation.circle_id, cmd.user_id):
                raise AlreadyMemberError()

            # Invitations never grant admin
            member = CircleMember(
                circle_id=invitation.circle_id,
                user_id=cmd.user_id,
                role=MemberRole.MEMBER,
            )
            self.repo.add_member(member)

            self._create_default_preference(invitation.circle_id, cmd.user_id)

            invitation.accept()
            self.repo.update_invitation(invitation)

            circle = self.repo.get_circle(invitation.circle_id)

        logger.info(f"Invitation {invitation.id} accepted by user {cmd.user_id}")
        return circle

    def revoke_invitation(self, cmd: RevokeInvitationCommand) -> CircleInvitation:
        """
        Revoke an invitation (admin only).

        Revoking is unconditional, so repeating it is harmless.
        """
        invitation = self.repo.get_invitation_by_id(cmd.invitation_id)
        self._require_admin(invitation.circle_id, cmd.user_id)

        invitation.revoke()
        self.repo.update_invitation(invitation)

        logger.info(f"Invitation {cmd.invitation_id} revoked by user {cmd.user_id}")
        return invitation

    def list_pending_invitations(self, query: ListPendingInvitationsQuery) -> List[CircleInvitation]:
        self._require_admin(query.circle_id, query.user_id)
        return self.repo.list_pending_invitations(query.circle_id)

    def list_user_invitations(self, query: ListUserInvitationsQuery) -> List[CircleInvitation]:
        return self.repo.list_user_invitations(query.user_id)

    def get_invitation_by_code(self, query: GetInvitationByCodeQuery) -> CircleInvitation:
        return self.repo.get_invitation_by_code(query.code)

    def delete_expired_invitations(self) -> int:
        """Sweep pending invitations past their expiry; returns the number deleted."""
        deleted = self.repo.delete_expired_invitations()
        logger.info(f"Deleted {deleted} expired invitations")
        return deleted
