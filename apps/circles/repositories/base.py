"""
Persistence port for the circles core.

The service talks to storage only through this interface. Implementations
must make membership uniqueness and invitation use counting race-safe
(unique constraints, row locks) since the service checks and then acts.
"""

import abc
from typing import ContextManager, List
from uuid import UUID

from apps.circles.models import Circle, CircleInvitation, CircleMember, SharingPreference


class CircleRepository(abc.ABC):
    """Contract for circle, member, preference and invitation storage."""

    @abc.abstractmethod
    def atomic(self) -> ContextManager:
        """Return a context manager grouping the enclosed calls into one transaction."""

    # --- Users ---

    @abc.abstractmethod
    def user_exists(self, user_id: UUID) -> bool:
        """Return True if a user account with this id exists."""

    # --- Circles ---

    @abc.abstractmethod
    def create_circle(self, circle: Circle) -> None:
        """Persist a new circle."""

    @abc.abstractmethod
    def get_circle(self, circle_id: UUID) -> Circle:
        """Return the circle or raise CircleNotFoundError."""

    @abc.abstractmethod
    def update_circle(self, circle: Circle) -> None:
        """Persist changes to an existing circle."""

    @abc.abstractmethod
    def delete_circle(self, circle_id: UUID) -> None:
        """Delete a circle with its members, invitations and preferences."""

    @abc.abstractmethod
    def list_circles_by_user(self, user_id: UUID, limit: int, offset: int) -> List[Circle]:
        """Return one page of circles the user belongs to, most recently updated first."""

    @abc.abstractmethod
    def count_circles_by_user(self, user_id: UUID) -> int:
        """Return how many circles the user belongs to."""

    # --- Members ---

    @abc.abstractmethod
    def add_member(self, member: CircleMember) -> None:
        """Persist a membership or raise AlreadyMemberError on a duplicate pair."""

    @abc.abstractmethod
    def get_member(self, circle_id: UUID, user_id: UUID) -> CircleMember:
        """Return the membership or raise MemberNotFoundError."""

    @abc.abstractmethod
    def update_member(self, member: CircleMember) -> None:
        """Persist role or nickname changes."""

    @abc.abstractmethod
    def remove_member(self, circle_id: UUID, user_id: UUID) -> None:
        """Delete the membership."""

    @abc.abstractmethod
    def list_members(self, circle_id: UUID, lock: bool = False) -> List[CircleMember]:
        """
        Return every member of the circle.

        With ``lock=True`` the rows stay locked until the surrounding
        transaction ends.
        """

    @abc.abstractmethod
    def count_members(self, circle_id: UUID) -> int:
        """Return the member count of the circle."""

    @abc.abstractmethod
    def is_member(self, circle_id: UUID, user_id: UUID) -> bool:
        """Return True if the user belongs to the circle."""

    @abc.abstractmethod
    def is_admin(self, circle_id: UUID, user_id: UUID) -> bool:
        """Return True if the user is an admin of the circle."""

    # --- Sharing preferences ---

    @abc.abstractmethod
    def create_sharing_preference(self, preference: SharingPreference) -> None:
        """Persist a new preference row."""

    @abc.abstractmethod
    def get_sharing_preference(self, circle_id: UUID, user_id: UUID) -> SharingPreference:
        """Return the preference or raise SharingPreferenceNotFoundError."""

    @abc.abstractmethod
    def update_sharing_preference(self, preference: SharingPreference) -> None:
        """Persist preference changes."""

    @abc.abstractmethod
    def list_sharing_preferences(self, user_id: UUID) -> List[SharingPreference]:
        """Return all of a user's preference rows."""

    # --- Invitations ---

    @abc.abstractmethod
    def create_invitation(self, invitation: CircleInvitation) -> None:
        """Persist a new invitation."""

    @abc.abstractmethod
    def get_invitation_by_id(self, invitation_id: UUID) -> CircleInvitation:
        """Return the invitation or raise InvitationNotFoundError."""

    @abc.abstractmethod
    def get_invitation_by_code(self, code: str, lock: bool = False) -> CircleInvitation:
        """Return the invitation or raise InvitationNotFoundError."""

    @abc.abstractmethod
    def update_invitation(self, invitation: CircleInvitation) -> None:
        """Persist status and use count."""

    @abc.abstractmethod
    def list_pending_invitations(self, circle_id: UUID) -> List[CircleInvitation]:
        """Return pending invitations of a circle, newest first."""

    @abc.abstractmethod
    def list_user_invitations(self, user_id: UUID) -> List[CircleInvitation]:
        """Return pending invitations addressed to the user, newest first."""

    @abc.abstractmethod
    def delete_expired_invitations(self) -> int:
        """Delete pending invitations past their expiry and return how many went."""
