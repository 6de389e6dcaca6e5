"""
Django ORM adapter for the circles persistence port.

Race safety comes from the database: unique constraints on
(circle, user) pairs and on invitation codes, plus ``select_for_update``
row locks for reads made inside ``atomic()``.
"""

import logging
from typing import ContextManager, List, Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.circles.models import (
    Circle,
    CircleInvitation,
    CircleMember,
    InvitationStatus,
    MemberRole,
    SharingPreference,
    generate_invite_code,
)
from apps.circles.services.exceptions import (
    AlreadyMemberError,
    CircleNotFoundError,
    InvitationNotFoundError,
    MemberNotFoundError,
    SharingPreferenceNotFoundError,
)

from .base import CircleRepository

logger = logging.getLogger(__name__)


class DjangoCircleRepository(CircleRepository):
    """CircleRepository backed by the default Django database."""

    def __init__(self, using: Optional[str] = None):
        self.using = using

    def atomic(self) -> ContextManager:
        return transaction.atomic(using=self.using)

    def _manager(self, model):
        if self.using:
            return model.objects.using(self.using)
        return model.objects

    # --- Users ---

    def user_exists(self, user_id: UUID) -> bool:
        return self._manager(get_user_model()).filter(id=user_id).exists()

    # --- Circles ---

    def create_circle(self, circle: Circle) -> None:
        circle.save(force_insert=True, using=self.using)

    def get_circle(self, circle_id: UUID) -> Circle:
        try:
            return self._manager(Circle).get(id=circle_id)
        except Circle.DoesNotExist:
            raise CircleNotFoundError(f"Circle with ID {circle_id} not found")

    def update_circle(self, circle: Circle) -> None:
        circle.save(
            update_fields=['name', 'description', 'avatar', 'updated_at'],
            using=self.using,
        )

    def delete_circle(self, circle_id: UUID) -> None:
        # Members, invitations and preferences go with it via on_delete=CASCADE
        self._manager(Circle).filter(id=circle_id).delete()

    def list_circles_by_user(self, user_id: UUID, limit: int, offset: int) -> List[Circle]:
        return list(
            self._manager(Circle)
            .filter(members__user_id=user_id)
            .order_by('-updated_at')[offset:offset + limit]
        )

    def count_circles_by_user(self, user_id: UUID) -> int:
        return self._manager(Circle).filter(members__user_id=user_id).count()

    # --- Members ---

    def add_member(self, member: CircleMember) -> None:
        try:
            # Savepoint keeps an outer transaction usable after a constraint hit
            with transaction.atomic(using=self.using):
                member.save(force_insert=True, using=self.using)
        except IntegrityError:
            if self.is_member(member.circle_id, member.user_id):
                raise AlreadyMemberError()
            raise

    def get_member(self, circle_id: UUID, user_id: UUID) -> CircleMember:
        try:
            return self._manager(CircleMember).get(circle_id=circle_id, user_id=user_id)
        except CircleMember.DoesNotExist:
            raise MemberNotFoundError()

    def update_member(self, member: CircleMember) -> None:
        member.save(update_fields=['role', 'nickname', 'updated_at'], using=self.using)

    def remove_member(self, circle_id: UUID, user_id: UUID) -> None:
        self._manager(CircleMember).filter(circle_id=circle_id, user_id=user_id).delete()

    def list_members(self, circle_id: UUID, lock: bool = False) -> List[CircleMember]:
        queryset = self._manager(CircleMember).filter(circle_id=circle_id)
        if lock:
            queryset = queryset.select_for_update()
        return list(queryset.order_by('joined_at'))

    def count_members(self, circle_id: UUID) -> int:
        return self._manager(CircleMember).filter(circle_id=circle_id).count()

    def is_member(self, circle_id: UUID, user_id: UUID) -> bool:
        return self._manager(CircleMember).filter(circle_id=circle_id, user_id=user_id).exists()

    def is_admin(self, circle_id: UUID, user_id: UUID) -> bool:
        return self._manager(CircleMember).filter(
            circle_id=circle_id,
            user_id=user_id,
            role=MemberRole.ADMIN,
        ).exists()

    # --- Sharing preferences ---

    def create_sharing_preference(self, preference: SharingPreference) -> None:
        with transaction.atomic(using=self.using):
            preference.save(force_insert=True, using=self.using)

    def get_sharing_preference(self, circle_id: UUID, user_id: UUID) -> SharingPreference:
        try:
            return self._manager(SharingPreference).get(circle_id=circle_id, user_id=user_id)
        except SharingPreference.DoesNotExist:
            raise SharingPreferenceNotFoundError()

    def update_sharing_preference(self, preference: SharingPreference) -> None:
        preference.save(
            update_fields=[
                'privacy_level',
                'share_timezone',
                'share_availability',
                'share_location',
                'location_precision',
                'share_activity',
                'updated_at',
            ],
            using=self.using,
        )

    def list_sharing_preferences(self, user_id: UUID) -> List[SharingPreference]:
        return list(self._manager(SharingPreference).filter(user_id=user_id))

    # --- Invitations ---

    def create_invitation(self, invitation: CircleInvitation) -> None:
        """
        Insert the invitation, drawing a fresh code on collision.

        Raises:
            RuntimeError: If no unique code was found within the retry limit
        """
        max_retries = getattr(settings, 'CIRCLES_INVITE_CODE_MAX_RETRIES', 5)

        for attempt in range(max_retries):
            try:
                with transaction.atomic(using=self.using):
                    invitation.save(force_insert=True, using=self.using)
                return
            except IntegrityError:
                if not self._manager(CircleInvitation).filter(code=invitation.code).exists():
                    raise
                logger.warning(
                    f"Invite code collision for circle {invitation.circle_id}, retrying (attempt {attempt + 1})"
                )
                invitation.code = generate_invite_code()

        raise RuntimeError(
            f"Failed to generate unique invite code after {max_retries} attempts"
        )

    def get_invitation_by_id(self, invitation_id: UUID) -> CircleInvitation:
        try:
            return self._manager(CircleInvitation).get(id=invitation_id)
        except CircleInvitation.DoesNotExist:
            raise InvitationNotFoundError()

    def get_invitation_by_code(self, code: str, lock: bool = False) -> CircleInvitation:
        queryset = self._manager(CircleInvitation)
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(code=code)
        except CircleInvitation.DoesNotExist:
            raise InvitationNotFoundError()

    def update_invitation(self, invitation: CircleInvitation) -> None:
        invitation.save(update_fields=['status', 'use_count', 'updated_at'], using=self.using)

    def list_pending_invitations(self, circle_id: UUID) -> List[CircleInvitation]:
        return list(
            self._manager(CircleInvitation)
            .filter(circle_id=circle_id, status=InvitationStatus.PENDING)
            .order_by('-created_at')
        )

    def list_user_invitations(self, user_id: UUID) -> List[CircleInvitation]:
        return list(
            self._manager(CircleInvitation)
            .filter(invitee_id=user_id, status=InvitationStatus.PENDING)
            .order_by('-created_at')
        )

    def delete_expired_invitations(self) -> int:
        deleted, _ = self._manager(CircleInvitation).filter(
            status=InvitationStatus.PENDING,
            expires_at__lt=timezone.now(),
        ).delete()
        return deleted
