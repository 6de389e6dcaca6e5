import pytest
from django.contrib import admin
from django.test import Client, RequestFactory
from django.urls import reverse

from apps.accounts.models import User
from apps.circles.admin import CircleMemberInline
from apps.circles.models import Circle, CircleMember, MemberRole


@pytest.fixture
def staff_user(db):
    return User.objects.create_superuser(email='staff@example.com', password='TestPass123!')


@pytest.fixture
def staff_client(staff_user):
    client = Client()
    client.force_login(staff_user)
    return client


@pytest.fixture
def member_inline():
    return CircleMemberInline(Circle, admin.site)


@pytest.mark.django_db
class TestCircleMemberInline:

    def test_roles_and_users_are_read_only(self, member_inline, staff_user, circle):
        request = RequestFactory().get('/')
        request.user = staff_user

        readonly = member_inline.get_readonly_fields(request, circle)

        assert 'role' in readonly
        assert 'user' in readonly

    def test_members_cannot_be_added_or_deleted(self, member_inline, staff_user, circle):
        request = RequestFactory().get('/')
        request.user = staff_user

        assert not member_inline.has_add_permission(request, circle)
        assert not member_inline.get_formset(request, circle).can_delete

    def test_change_page_renders_without_role_inputs(self, staff_client, circle_with_members, settings):
        settings.STORAGES = {
            **settings.STORAGES,
            'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
        }

        response = staff_client.get(reverse('admin:circles_circle_change', args=[circle_with_members.id]))

        assert response.status_code == 200
        content = response.content.decode()
        assert 'name="members-0-role"' not in content
        assert 'name="members-0-DELETE"' not in content
        assert CircleMember.objects.filter(circle=circle_with_members, role=MemberRole.ADMIN).count() == 2
