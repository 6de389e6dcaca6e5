from rest_framework import serializers

from .models import (
    Circle,
    CircleInvitation,
    CircleMember,
    InvitationType,
    LocationPrecision,
    MemberRole,
    PrivacyLevel,
    SharingPreference,
)


# =============================================================================
# Output serializers
# =============================================================================

class CircleSerializer(serializers.ModelSerializer):
    """Main serializer for circles."""

    class Meta:
        model = Circle
        fields = [
            'id',
            'name',
            'description',
            'avatar',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CircleMemberSerializer(serializers.ModelSerializer):
    """Member of a circle with role and nickname."""

    class Meta:
        model = CircleMember
        fields = ['id', 'circle', 'user', 'role', 'nickname', 'joined_at', 'updated_at']
        read_only_fields = fields


class SharingPreferenceSerializer(serializers.ModelSerializer):

    class Meta:
        model = SharingPreference
        fields = [
            'id',
            'circle',
            'user',
            'privacy_level',
            'share_timezone',
            'share_availability',
            'share_location',
            'location_precision',
            'share_activity',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class CircleInvitationSerializer(serializers.ModelSerializer):
    """Invitation including its code; only shown to admins and invitees."""

    class Meta:
        model = CircleInvitation
        fields = [
            'id',
            'circle',
            'inviter',
            'invitee',
            'type',
            'code',
            'status',
            'max_uses',
            'use_count',
            'expires_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# Input serializers
# =============================================================================

class CircleCreateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=1, max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_null=True, allow_blank=True)


class CircleUpdateSerializer(serializers.Serializer):
    """Blank name keeps the current one; description is always replaced."""

    name = serializers.CharField(max_length=100, allow_blank=True, default='')
    description = serializers.CharField(max_length=500, allow_null=True, default=None)
    avatar = serializers.URLField(max_length=500, allow_null=True, default=None)


class AddMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=MemberRole.choices, default=MemberRole.MEMBER)


class UpdateMemberRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=MemberRole.choices)


class UpdateNicknameSerializer(serializers.Serializer):
    nickname = serializers.CharField(max_length=100, allow_null=True, allow_blank=True)


class SharingPreferenceUpdateSerializer(serializers.Serializer):
    """Every field is optional; omitted fields stay unchanged."""

    privacy_level = serializers.ChoiceField(choices=PrivacyLevel.choices, required=False)
    share_timezone = serializers.BooleanField(required=False)
    share_availability = serializers.BooleanField(required=False)
    share_location = serializers.BooleanField(required=False)
    location_precision = serializers.ChoiceField(choices=LocationPrecision.choices, required=False)
    share_activity = serializers.BooleanField(required=False)


class CreateInvitationSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=InvitationType.choices)
    invitee_id = serializers.UUIDField(required=False, allow_null=True)
    max_uses = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expires_in_hours = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class JoinCircleSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=22)
