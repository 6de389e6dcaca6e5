import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.circles.models import CircleMember, MemberRole
from apps.circles.repositories import DjangoCircleRepository
from apps.circles.services import CircleService, CreateCircleCommand


def auth_client(user):
    """Return an API client carrying a JWT for ``user``."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def repository():
    return DjangoCircleRepository()


@pytest.fixture
def service(repository):
    """CircleService wired to the Django ORM repository."""
    return CircleService(repository)


@pytest.fixture
def owner(db):
    """Create and return the user who creates circles."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Circle Owner',
    )


@pytest.fixture
def second_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Second Admin',
    )


@pytest.fixture
def member_user(db):
    """Create and return a plain member."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Circle Member',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in any circle."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def make_user(db):
    """Factory for extra users."""
    counter = {'n': 0}

    def _make_user(**kwargs):
        counter['n'] += 1
        return User.objects.create_user(
            email=kwargs.pop('email', f"user{counter['n']}@example.com"),
            password='TestPass123!',
            **kwargs,
        )
    return _make_user


@pytest.fixture
def circle(service, owner):
    """Circle created through the service; ``owner`` is its only admin."""
    return service.create_circle(CreateCircleCommand(
        name='Family',
        description='Close family',
        created_by=owner.id,
    ))


@pytest.fixture
def circle_with_members(circle, second_admin, member_user):
    """Circle with owner and second_admin as admins and member_user as member."""
    CircleMember.objects.create(circle=circle, user=second_admin, role=MemberRole.ADMIN)
    CircleMember.objects.create(circle=circle, user=member_user, role=MemberRole.MEMBER)
    return circle


@pytest.fixture
def owner_client(owner):
    """Return API client authenticated as the circle owner."""
    return auth_client(owner)


@pytest.fixture
def member_client(member_user):
    return auth_client(member_user)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as a non-member."""
    return auth_client(outsider)
