import uuid
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.circles.models import (
    Circle,
    CircleInvitation,
    CircleMember,
    InvitationStatus,
    MemberRole,
    SharingPreference,
)
from apps.circles.services import CreateCircleCommand


def detail_url(name, circle, **kwargs):
    return reverse(f'circles:circle-{name}', kwargs={'pk': circle.id, **kwargs})


# =============================================================================
# Circle CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestCircleList:
    """Tests for GET /api/circles/"""

    def test_list_returns_user_circles(self, owner_client, circle):
        response = owner_client.get(reverse('circles:circle-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == circle.name

    def test_list_excludes_other_circles(self, outsider_client, circle):
        response = outsider_client.get(reverse('circles:circle-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 0
        assert response.data['results'] == []

    def test_list_paginates(self, owner_client, service, owner):
        for i in range(3):
            service.create_circle(CreateCircleCommand(name=f'Circle {i}', created_by=owner.id))

        response = owner_client.get(reverse('circles:circle-list'), {'limit': 2, 'offset': 0})

        assert response.data['count'] == 3
        assert len(response.data['results']) == 2

    def test_list_ignores_garbage_limit(self, owner_client, circle):
        response = owner_client.get(reverse('circles:circle-list'), {'limit': 'lots'})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_list_unauthenticated(self, api_client):
        response = api_client.get(reverse('circles:circle-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCircleCreate:
    """Tests for POST /api/circles/"""

    def test_create_circle(self, owner_client, owner):
        response = owner_client.post(
            reverse('circles:circle-list'),
            {'name': 'Neighbours', 'description': 'Street 12'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Neighbours'

        circle = Circle.objects.get(id=response.data['id'])
        assert circle.created_by == owner
        assert CircleMember.objects.get(circle=circle, user=owner).role == MemberRole.ADMIN

    def test_create_circle_requires_name(self, owner_client):
        response = owner_client.post(reverse('circles:circle-list'), {'description': 'x'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCircleDetail:
    """Tests for GET/PUT/DELETE /api/circles/{id}/"""

    def test_retrieve_as_member(self, member_client, circle_with_members):
        response = member_client.get(detail_url('detail', circle_with_members))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(circle_with_members.id)

    def test_retrieve_as_outsider(self, outsider_client, circle):
        response = outsider_client.get(detail_url('detail', circle))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_circle_member'
        assert response.data['error'] == 'Not a member of this circle'

    def test_malformed_id(self, owner_client):
        response = owner_client.get('/api/circles/not-a-uuid/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_as_admin(self, owner_client, circle):
        response = owner_client.put(
            detail_url('detail', circle),
            {'name': 'Renamed', 'description': 'New description'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        circle.refresh_from_db()
        assert circle.name == 'Renamed'
        assert circle.description == 'New description'

    def test_update_blank_name_keeps_name(self, owner_client, circle):
        response = owner_client.put(detail_url('detail', circle), {'name': ''}, format='json')

        assert response.status_code == status.HTTP_200_OK
        circle.refresh_from_db()
        assert circle.name == 'Family'
        assert circle.description is None

    def test_update_as_member(self, member_client, circle_with_members):
        response = member_client.put(detail_url('detail', circle_with_members), {'name': 'Mine'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_circle_admin'

    def test_delete_as_admin(self, owner_client, circle):
        response = owner_client.delete(detail_url('detail', circle))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Circle.objects.filter(id=circle.id).exists()


# =============================================================================
# Membership Tests
# =============================================================================

@pytest.mark.django_db
class TestMembers:

    def test_list_members(self, member_client, circle_with_members):
        response = member_client.get(detail_url('members', circle_with_members))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_add_member(self, owner_client, circle, outsider):
        response = owner_client.post(
            detail_url('members', circle),
            {'user_id': str(outsider.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['role'] == MemberRole.MEMBER
        assert CircleMember.objects.filter(circle=circle, user=outsider).exists()

    def test_add_existing_member_conflicts(self, owner_client, circle_with_members, member_user):
        response = owner_client.post(
            detail_url('members', circle_with_members),
            {'user_id': str(member_user.id), 'role': 'member'},
            format='json',
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'already_member'

    def test_add_unknown_user(self, owner_client, circle):
        response = owner_client.post(
            detail_url('members', circle),
            {'user_id': str(uuid.uuid4())},
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'user_not_found'
        assert CircleMember.objects.filter(circle=circle).count() == 1

    def test_add_member_bad_role(self, owner_client, circle, outsider):
        response = owner_client.post(
            detail_url('members', circle),
            {'user_id': str(outsider.id), 'role': 'owner'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_remove_member(self, owner_client, circle_with_members, member_user):
        response = owner_client.delete(detail_url('remove-member', circle_with_members, member_id=member_user.id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CircleMember.objects.filter(circle=circle_with_members, user=member_user).exists()

    def test_remove_last_admin(self, owner_client, circle, owner):
        response = owner_client.delete(detail_url('remove-member', circle, member_id=owner.id))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'cannot_remove_last_admin'

    def test_remove_unknown_member(self, owner_client, circle, outsider):
        response = owner_client.delete(detail_url('remove-member', circle, member_id=outsider.id))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_role(self, owner_client, circle_with_members, member_user):
        response = owner_client.patch(
            detail_url('member-role', circle_with_members, member_id=member_user.id),
            {'role': 'admin'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['role'] == MemberRole.ADMIN

    def test_update_nickname(self, member_client, circle_with_members, member_user):
        response = member_client.patch(
            detail_url('nickname', circle_with_members),
            {'nickname': 'Little brother'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert CircleMember.objects.get(circle=circle_with_members, user=member_user).nickname == 'Little brother'

    def test_leave(self, member_client, circle_with_members, member_user):
        response = member_client.post(detail_url('leave', circle_with_members))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CircleMember.objects.filter(circle=circle_with_members, user=member_user).exists()

    def test_last_admin_cannot_leave(self, owner_client, circle):
        response = owner_client.post(detail_url('leave', circle))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'cannot_leave_as_last_admin'


# =============================================================================
# Sharing Preference Tests
# =============================================================================

@pytest.mark.django_db
class TestSharing:

    def test_get_preference(self, owner_client, circle):
        response = owner_client.get(detail_url('sharing', circle))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['privacy_level'] == 'basic'
        assert response.data['share_location'] is False

    def test_patch_preference(self, owner_client, circle, owner):
        response = owner_client.patch(
            detail_url('sharing', circle),
            {'share_location': True, 'location_precision': 'exact'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        preference = SharingPreference.objects.get(circle=circle, user=owner)
        assert preference.share_location is True
        assert preference.location_precision == 'exact'
        assert preference.share_timezone is True

    def test_patch_rejects_unknown_level(self, owner_client, circle):
        response = owner_client.patch(detail_url('sharing', circle), {'privacy_level': 'all'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_patch_unknown_circle(self, owner_client, owner):
        response = owner_client.patch(
            reverse('circles:circle-sharing', kwargs={'pk': uuid.uuid4()}),
            {'share_location': True},
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'circle_not_found'
        assert not SharingPreference.objects.filter(user=owner).exists()


# =============================================================================
# Invitation Tests
# =============================================================================

@pytest.mark.django_db
class TestInvitations:

    def test_create_link(self, owner_client, circle):
        response = owner_client.post(
            detail_url('invitations', circle),
            {'type': 'link', 'max_uses': 5, 'expires_in_hours': 48},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['type'] == 'link'
        assert len(response.data['code']) == 22
        assert response.data['max_uses'] == 5

    def test_create_direct(self, owner_client, circle, member_user):
        response = owner_client.post(
            detail_url('invitations', circle),
            {'type': 'direct', 'invitee_id': str(member_user.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert str(response.data['invitee']) == str(member_user.id)

    def test_create_direct_unknown_invitee(self, owner_client, circle):
        response = owner_client.post(
            detail_url('invitations', circle),
            {'type': 'direct', 'invitee_id': str(uuid.uuid4())},
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'user_not_found'
        assert not CircleInvitation.objects.filter(circle=circle).exists()

    def test_member_cannot_invite(self, member_client, circle_with_members):
        response = member_client.post(detail_url('invitations', circle_with_members), {'type': 'link'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_zero_max_uses_rejected(self, owner_client, circle):
        response = owner_client.post(
            detail_url('invitations', circle),
            {'type': 'link', 'max_uses': 0},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_pending(self, owner_client, circle, owner):
        CircleInvitation.link(circle_id=circle.id, inviter_id=owner.id).save()

        response = owner_client.get(detail_url('invitations', circle))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_join_with_code(self, member_client, circle, owner, member_user):
        invitation = CircleInvitation.link(circle_id=circle.id, inviter_id=owner.id)
        invitation.save()

        response = member_client.post(reverse('circles:circle-join'), {'code': invitation.code}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(circle.id)
        assert CircleMember.objects.filter(circle=circle, user=member_user, role=MemberRole.MEMBER).exists()

    def test_join_unknown_code(self, member_client):
        response = member_client.post(reverse('circles:circle-join'), {'code': 'nope'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'invitation_not_found'

    def test_join_expired(self, member_client, circle, owner):
        invitation = CircleInvitation.link(
            circle_id=circle.id,
            inviter_id=owner.id,
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        invitation.save()

        response = member_client.post(reverse('circles:circle-join'), {'code': invitation.code}, format='json')

        assert response.status_code == status.HTTP_410_GONE
        assert response.data['code'] == 'invitation_expired'

    def test_join_as_member(self, owner_client, circle, owner):
        invitation = CircleInvitation.link(circle_id=circle.id, inviter_id=owner.id)
        invitation.save()

        response = owner_client.post(reverse('circles:circle-join'), {'code': invitation.code}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_my_invitations(self, member_client, circle, owner, member_user):
        invitation = CircleInvitation.direct(circle_id=circle.id, inviter_id=owner.id, invitee_id=member_user.id)
        invitation.save()

        response = member_client.get(reverse('circles:circle-my-invitations'))

        assert response.status_code == status.HTTP_200_OK
        assert [item['id'] for item in response.data] == [str(invitation.id)]

    def test_revoke(self, owner_client, circle, owner):
        invitation = CircleInvitation.link(circle_id=circle.id, inviter_id=owner.id)
        invitation.save()
        url = reverse('circles:circle-revoke-invitation', kwargs={'invitation_id': invitation.id})

        first = owner_client.post(url)
        second = owner_client.post(url)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        invitation.refresh_from_db()
        assert invitation.status == InvitationStatus.REVOKED

    def test_revoke_unknown(self, owner_client):
        url = reverse('circles:circle-revoke-invitation', kwargs={'invitation_id': uuid.uuid4()})
        response = owner_client.post(url)
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Project-level endpoints
# =============================================================================

@pytest.mark.django_db
class TestProjectEndpoints:

    def test_health_check(self, api_client):
        response = api_client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'ok'

    def test_obtain_token_and_use_it(self, api_client, owner, circle):
        response = api_client.post(
            reverse('token_obtain_pair'),
            {'email': 'owner@example.com', 'password': 'TestPass123!'},
            format='json',
        )
        assert response.status_code == status.HTTP_200_OK

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = api_client.get(reverse('circles:circle-list'))
        assert response.data['count'] == 1
