# ==========================================
# apps/circles/models.py
# ==========================================

import secrets
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

INVITE_CODE_LENGTH = 22


class MemberRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MEMBER = 'member', 'Member'


class InvitationType(models.TextChoices):
    DIRECT = 'direct', 'Direct'
    LINK = 'link', 'Link'


class InvitationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    EXPIRED = 'expired', 'Expired'
    REVOKED = 'revoked', 'Revoked'


class PrivacyLevel(models.TextChoices):
    BASIC = 'basic', 'Basic'            # online/offline, timezone
    STATUS = 'status', 'Status'         # at home, at work, commuting
    ACTIVITY = 'activity', 'Activity'   # current activity, free time
    LOCATION = 'location', 'Location'   # real-time location


class LocationPrecision(models.TextChoices):
    COUNTRY = 'country', 'Country'
    CITY = 'city', 'City'
    NEIGHBORHOOD = 'neighborhood', 'Neighborhood'
    EXACT = 'exact', 'Exact'


def generate_invite_code():
    """16 random bytes, urlsafe base64, cut to 22 characters."""
    return secrets.token_urlsafe(16)[:INVITE_CODE_LENGTH]


def is_valid_role(role):
    return role in MemberRole.values


def is_valid_privacy_level(level):
    return level in PrivacyLevel.values


def is_valid_location_precision(precision):
    return precision in LocationPrecision.values


class Circle(models.Model):
    """A named group of users sharing presence, location and messages."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)
    avatar = models.URLField(max_length=500, null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_circles',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'circles'
        indexes = [
            models.Index(fields=['created_by', 'created_at'], name='circles_creator_created_idx'),
        ]
        ordering = ['-updated_at']

    def __str__(self):
        return self.name

    def update(self, name, description):
        """
        Apply new details.

        An empty name leaves the current name in place; the description is
        always replaced, so passing None clears it.
        """
        if name:
            self.name = name
        self.description = description

    def set_avatar(self, avatar):
        self.avatar = avatar


class CircleMember(models.Model):
    """A user's participation in a circle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    circle = models.ForeignKey(Circle, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='circle_memberships',
    )
    role = models.CharField(max_length=20, choices=MemberRole.choices, default=MemberRole.MEMBER)
    nickname = models.CharField(max_length=100, null=True, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'circle_members'
        constraints = [
            models.UniqueConstraint(fields=['circle', 'user'], name='unique_circle_member'),
        ]
        indexes = [
            models.Index(fields=['circle', 'role'], name='circle_members_role_idx'),
            models.Index(fields=['user', 'joined_at'], name='circle_members_user_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user_id} in {self.circle_id} ({self.role})"

    def is_admin(self):
        return self.role == MemberRole.ADMIN

    def set_role(self, role):
        self.role = role

    def set_nickname(self, nickname):
        self.nickname = nickname


class CircleInvitation(models.Model):
    """
    Token granting circle membership.

    Direct and link invitations share one table; ``type`` tells them apart.
    A direct invitation is bound to ``invitee`` and is single-use. A link
    invitation has no invitee and may be capped with ``max_uses``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    circle = models.ForeignKey(Circle, on_delete=models.CASCADE, related_name='invitations')
    inviter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_circle_invitations',
    )
    invitee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='received_circle_invitations',
    )
    type = models.CharField(max_length=10, choices=InvitationType.choices)
    code = models.CharField(max_length=INVITE_CODE_LENGTH, unique=True, editable=False)
    status = models.CharField(
        max_length=10,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING,
    )
    max_uses = models.PositiveIntegerField(null=True, blank=True)
    use_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'circle_invitations'
        indexes = [
            models.Index(fields=['circle', 'status'], name='circle_inv_circle_status_idx'),
            models.Index(fields=['invitee', 'status'], name='circle_inv_invitee_status_idx'),
            models.Index(fields=['status', 'expires_at'], name='circle_inv_expiry_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} invitation to {self.circle_id} ({self.status})"

    @classmethod
    def direct(cls, *, circle_id, inviter_id, invitee_id, expires_at=None):
        return cls(
            circle_id=circle_id,
            inviter_id=inviter_id,
            invitee_id=invitee_id,
            type=InvitationType.DIRECT,
            code=generate_invite_code(),
            status=InvitationStatus.PENDING,
            use_count=0,
            expires_at=expires_at,
        )

    @classmethod
    def link(cls, *, circle_id, inviter_id, max_uses=None, expires_at=None):
        return cls(
            circle_id=circle_id,
            inviter_id=inviter_id,
            invitee_id=None,
            type=InvitationType.LINK,
            code=generate_invite_code(),
            status=InvitationStatus.PENDING,
            max_uses=max_uses,
            use_count=0,
            expires_at=expires_at,
        )

    def is_direct(self):
        return self.type == InvitationType.DIRECT

    def is_valid(self):
        """Pending, not past expiry and not used up."""
        if self.status != InvitationStatus.PENDING:
            return False
        if self.expires_at is not None and timezone.now() > self.expires_at:
            return False
        if self.max_uses is not None and self.use_count >= self.max_uses:
            return False
        return True

    def is_expired(self):
        if self.status == InvitationStatus.EXPIRED:
            return True
        return self.expires_at is not None and timezone.now() > self.expires_at

    def accept(self):
        """Record one use; close the invitation once it cannot be used again."""
        self.use_count += 1
        if self.is_direct() or (self.max_uses is not None and self.use_count >= self.max_uses):
            self.status = InvitationStatus.ACCEPTED

    def revoke(self):
        self.status = InvitationStatus.REVOKED


class SharingPreference(models.Model):
    """What a user exposes to one circle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    circle = models.ForeignKey(Circle, on_delete=models.CASCADE, related_name='sharing_preferences')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='circle_sharing_preferences',
    )
    privacy_level = models.CharField(
        max_length=20,
        choices=PrivacyLevel.choices,
        default=PrivacyLevel.BASIC,
    )
    share_timezone = models.BooleanField(default=True)
    share_availability = models.BooleanField(default=True)
    share_location = models.BooleanField(default=False)
    location_precision = models.CharField(
        max_length=20,
        choices=LocationPrecision.choices,
        default=LocationPrecision.CITY,
    )
    share_activity = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'circle_sharing_preferences'
        constraints = [
            models.UniqueConstraint(fields=['circle', 'user'], name='unique_circle_sharing_preference'),
        ]

    def __str__(self):
        return f"{self.user_id} sharing in {self.circle_id}"

    @classmethod
    def default(cls, *, circle_id, user_id):
        return cls(
            circle_id=circle_id,
            user_id=user_id,
            privacy_level=PrivacyLevel.BASIC,
            share_timezone=True,
            share_availability=True,
            share_location=False,
            location_precision=LocationPrecision.CITY,
            share_activity=False,
        )

    def set_privacy_level(self, level):
        self.privacy_level = level

    def set_location_sharing(self, share, precision):
        self.share_location = share
        self.location_precision = precision
