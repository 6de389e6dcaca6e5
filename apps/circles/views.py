from datetime import timedelta

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .errors import error_response
from .repositories import DjangoCircleRepository
from .serializers import (
    AddMemberSerializer,
    CircleCreateSerializer,
    CircleInvitationSerializer,
    CircleMemberSerializer,
    CircleSerializer,
    CircleUpdateSerializer,
    CreateInvitationSerializer,
    JoinCircleSerializer,
    SharingPreferenceSerializer,
    SharingPreferenceUpdateSerializer,
    UpdateMemberRoleSerializer,
    UpdateNicknameSerializer,
)
from .services import (
    AcceptInvitationCommand,
    AddMemberCommand,
    CircleService,
    CirclesServiceError,
    CreateCircleCommand,
    CreateInvitationCommand,
    DeleteCircleCommand,
    GetCircleQuery,
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

UUID_PATTERN = r'[0-9a-fA-F-]{36}'


def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


class CircleViewSet(viewsets.ViewSet):
    """
    Circles API.

    All business rules live in CircleService; these views only parse
    input, call the service and serialize the result.

    list: Circles the user belongs to (paginated with limit/offset)
    create: Create a circle; the creator becomes admin
    retrieve: Circle details (members only)
    update: Update name, description and avatar (admin only)
    destroy: Delete the circle (admin only)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = UUID_PATTERN

    def get_service(self):
        return CircleService(DjangoCircleRepository())

    def handle_exception(self, exc):
        if isinstance(exc, CirclesServiceError):
            return error_response(exc)
        return super().handle_exception(exc)

    # =========================================================================
    # Circles
    # =========================================================================

    @extend_schema(
        parameters=[
            OpenApiParameter('limit', int, description='Page size, 1-100 (default 20)'),
            OpenApiParameter('offset', int, description='Number of circles to skip'),
        ],
        responses={200: CircleSerializer(many=True)},
        tags=['circles'],
    )
    def list(self, request):
        circles, total = self.get_service().list_user_circles(ListUserCirclesQuery(
            user_id=request.user.id,
            limit=_int_param(request, 'limit', 20),
            offset=_int_param(request, 'offset', 0),
        ))
        return Response({
            'count': total,
            'results': CircleSerializer(circles, many=True).data,
        })

    @extend_schema(request=CircleCreateSerializer, responses={201: CircleSerializer}, tags=['circles'])
    def create(self, request):
        serializer = CircleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        circle = self.get_service().create_circle(CreateCircleCommand(
            name=serializer.validated_data['name'],
            description=serializer.validated_data.get('description') or None,
            created_by=request.user.id,
        ))
        return Response(CircleSerializer(circle).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: CircleSerializer}, tags=['circles'])
    def retrieve(self, request, pk=None):
        circle = self.get_service().get_circle(GetCircleQuery(circle_id=pk, user_id=request.user.id))
        return Response(CircleSerializer(circle).data)

    @extend_schema(request=CircleUpdateSerializer, responses={200: CircleSerializer}, tags=['circles'])
    def update(self, request, pk=None):
        serializer = CircleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        circle = self.get_service().update_circle(UpdateCircleCommand(
            circle_id=pk,
            user_id=request.user.id,
            name=serializer.validated_data['name'],
            description=serializer.validated_data['description'],
            avatar=serializer.validated_data['avatar'],
        ))
        return Response(CircleSerializer(circle).data)

    @extend_schema(responses={204: None}, tags=['circles'])
    def destroy(self, request, pk=None):
        self.get_service().delete_circle(DeleteCircleCommand(circle_id=pk, user_id=request.user.id))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Members
    # =========================================================================

    @extend_schema(request=AddMemberSerializer, responses={200: CircleMemberSerializer(many=True)}, tags=['circles'])
    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        """GET lists members (members only); POST adds one (admin only)."""
        service = self.get_service()

        if request.method == 'GET':
            members = service.list_members(ListCircleMembersQuery(circle_id=pk, user_id=request.user.id))
            return Response(CircleMemberSerializer(members, many=True).data)

        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = service.add_member(AddMemberCommand(
            circle_id=pk,
            user_id=request.user.id,
            member_id=serializer.validated_data['user_id'],
            role=serializer.validated_data['role'],
        ))
        return Response(CircleMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={204: None}, tags=['circles'])
    @action(detail=True, methods=['delete'], url_path=r'members/(?P<member_id>' + UUID_PATTERN + r')')
    def remove_member(self, request, pk=None, member_id=None):
        """Remove a member (admin only)."""
        self.get_service().remove_member(RemoveMemberCommand(
            circle_id=pk,
            user_id=request.user.id,
            member_id=member_id,
        ))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=UpdateMemberRoleSerializer, responses={200: CircleMemberSerializer}, tags=['circles'])
    @action(detail=True, methods=['patch'], url_path=r'members/(?P<member_id>' + UUID_PATTERN + r')/role')
    def member_role(self, request, pk=None, member_id=None):
        """Change a member's role (admin only)."""
        serializer = UpdateMemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = self.get_service().update_member_role(UpdateMemberRoleCommand(
            circle_id=pk,
            user_id=request.user.id,
            member_id=member_id,
            role=serializer.validated_data['role'],
        ))
        return Response(CircleMemberSerializer(member).data)

    @extend_schema(request=UpdateNicknameSerializer, responses={200: CircleMemberSerializer}, tags=['circles'])
    @action(detail=True, methods=['patch'])
    def nickname(self, request, pk=None):
        serializer = UpdateNicknameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = self.get_service().update_nickname(UpdateNicknameCommand(
            circle_id=pk,
            user_id=request.user.id,
            nickname=serializer.validated_data['nickname'],
        ))
        return Response(CircleMemberSerializer(member).data)

    @extend_schema(request=None, responses={204: None}, tags=['circles'])
    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        self.get_service().leave_circle(LeaveCircleCommand(circle_id=pk, user_id=request.user.id))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Sharing preferences
    # =========================================================================

    @extend_schema(
        request=SharingPreferenceUpdateSerializer,
        responses={200: SharingPreferenceSerializer},
        tags=['circles'],
    )
    @action(detail=True, methods=['get', 'patch'])
    def sharing(self, request, pk=None):
        """The caller's own sharing preference for this circle."""
        service = self.get_service()

        if request.method == 'GET':
            preference = service.get_sharing_preference(
                GetSharingPreferenceQuery(circle_id=pk, user_id=request.user.id)
            )
            return Response(SharingPreferenceSerializer(preference).data)

        serializer = SharingPreferenceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        preference = service.update_sharing_preference(UpdateSharingPreferenceCommand(
            circle_id=pk,
            user_id=request.user.id,
            **serializer.validated_data,
        ))
        return Response(SharingPreferenceSerializer(preference).data)

    # =========================================================================
    # Invitations
    # =========================================================================

    @extend_schema(
        request=CreateInvitationSerializer,
        responses={201: CircleInvitationSerializer},
        tags=['circles'],
    )
    @action(detail=True, methods=['get', 'post'])
    def invitations(self, request, pk=None):
        """GET lists pending invitations; POST creates one. Admin only."""
        service = self.get_service()

        if request.method == 'GET':
            invitations = service.list_pending_invitations(
                ListPendingInvitationsQuery(circle_id=pk, user_id=request.user.id)
            )
            return Response(CircleInvitationSerializer(invitations, many=True).data)

        serializer = CreateInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        expires_in = None
        if data.get('expires_in_hours'):
            expires_in = timedelta(hours=data['expires_in_hours'])

        invitation = service.create_invitation(CreateInvitationCommand(
            circle_id=pk,
            inviter_id=request.user.id,
            type=data['type'],
            invitee_id=data.get('invitee_id'),
            max_uses=data.get('max_uses'),
            expires_in=expires_in,
        ))
        return Response(CircleInvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=JoinCircleSerializer, responses={200: CircleSerializer}, tags=['circles'])
    @action(detail=False, methods=['post'])
    def join(self, request):
        """Accept an invitation by code and join its circle."""
        serializer = JoinCircleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        circle = self.get_service().accept_invitation(AcceptInvitationCommand(
            code=serializer.validated_data['code'],
            user_id=request.user.id,
        ))
        return Response(CircleSerializer(circle).data)

    @extend_schema(responses={200: CircleInvitationSerializer(many=True)}, tags=['circles'])
    @action(detail=False, methods=['get'], url_path='invitations/mine')
    def my_invitations(self, request):
        """Pending direct invitations addressed to the caller."""
        invitations = self.get_service().list_user_invitations(
            ListUserInvitationsQuery(user_id=request.user.id)
        )
        return Response(CircleInvitationSerializer(invitations, many=True).data)

    @extend_schema(request=None, responses={200: CircleInvitationSerializer}, tags=['circles'])
    @action(detail=False, methods=['post'], url_path=r'invitations/(?P<invitation_id>' + UUID_PATTERN + r')/revoke')
    def revoke_invitation(self, request, invitation_id=None):
        """Revoke an invitation (admin only). Safe to repeat."""
        invitation = self.get_service().revoke_invitation(RevokeInvitationCommand(
            invitation_id=invitation_id,
            user_id=request.user.id,
        ))
        return Response(CircleInvitationSerializer(invitation).data)
