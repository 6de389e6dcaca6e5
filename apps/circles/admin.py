# ==========================================
# apps/circles/admin.py
# ==========================================

from django.contrib import admin
from apps.circles.models import Circle, CircleInvitation, CircleMember, SharingPreference


class CircleMemberInline(admin.TabularInline):
    """
    Inline admin for circle members.

    Membership and roles change only through the API so the last-admin rule
    holds; the inline edits nicknames only.
    """
    model = CircleMember
    extra = 0
    can_delete = False
    fields = ['user', 'role', 'nickname', 'joined_at']
    readonly_fields = ['user', 'role', 'joined_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Circle)
class CircleAdmin(admin.ModelAdmin):
    """Admin interface for Circles."""

    list_display = ['name', 'created_by', 'member_count', 'created_at', 'updated_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'created_by__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CircleMemberInline]
    date_hierarchy = 'created_at'
    ordering = ['-updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'avatar', 'created_by')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def member_count(self, obj):
        return obj.members.count()
    member_count.short_description = 'Members'


@admin.register(CircleInvitation)
class CircleInvitationAdmin(admin.ModelAdmin):
    """Admin interface for invitations."""

    list_display = ['code', 'circle', 'type', 'status', 'invitee', 'use_count', 'max_uses', 'expires_at']
    list_filter = ['type', 'status', 'created_at']
    search_fields = ['code', 'circle__name', 'invitee__email', 'inviter__email']
    readonly_fields = ['code', 'use_count', 'created_at', 'updated_at']
    ordering = ['-created_at']

    actions = ['revoke_invitations']

    def revoke_invitations(self, request, queryset):
        """Revoke selected invitations."""
        for invitation in queryset:
            invitation.revoke()
            invitation.save(update_fields=['status', 'updated_at'])
        self.message_user(request, f"Revoked {queryset.count()} invitations")
    revoke_invitations.short_description = "Revoke invitations"

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('circle', 'inviter', 'invitee')


@admin.register(SharingPreference)
class SharingPreferenceAdmin(admin.ModelAdmin):
    list_display = ['user', 'circle', 'privacy_level', 'share_location', 'location_precision', 'updated_at']
    list_filter = ['privacy_level', 'share_location', 'location_precision']
    search_fields = ['user__email', 'circle__name']
    readonly_fields = ['created_at', 'updated_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'circle')
