"""
Projects API Views - REST API endpoints.

This module provides REST API views using Django Rest Framework:
- Projects with member management and status reports
- Ticket workflow (statuses, priorities)
- Tickets and comments, authorized through their policies
- Project status overview for the status page and widget

All views return JSON responses.
API URL namespace: api:v1:projects:*
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from ..dashboards import project_status_overview, project_status_series
from ..models import Project, Ticket, TicketComment, TicketPriority, TicketStatus
from ..policies import TicketCommentPermission, TicketPermission, TicketPolicy
from .serializers import (
    ProjectListSerializer,
    ProjectMemberSerializer,
    ProjectSerializer,
    ProjectStatusSerializer,
    StatusReportQuerySerializer,
    TicketCommentSerializer,
    TicketHistorySerializer,
    TicketListSerializer,
    TicketPrioritySerializer,
    TicketSerializer,
    TicketStatusSerializer,
    UserSummarySerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()


class ReadOrModelPermissions(permissions.DjangoModelPermissions):
    """Any authenticated user may read; writes need the model permission."""

    authenticated_users_only = True


# ============================================================================
# PROJECT VIEWSET
# ============================================================================

class ProjectViewSet(viewsets.ModelViewSet):
    """
    ViewSet for projects.

    Provides:
    - list: GET /api/v1/projects/projects/
    - retrieve: GET /api/v1/projects/projects/{id}/
    - create / update / destroy (model permissions)

    Custom actions:
    - members: POST /api/v1/projects/projects/{id}/members/
    - remove_member: DELETE /api/v1/projects/projects/{id}/members/{user_id}/
    - status_report: GET /api/v1/projects/projects/{id}/status-report/?type=weekly|overall
    - pin / unpin: POST /api/v1/projects/projects/{id}/pin/

    Non super admins only see projects they are a member of.
    """

    permission_classes = [ReadOrModelPermissions]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'description', 'ticket_prefix']
    ordering_fields = ['name', 'start_date', 'end_date', 'created_at']

    # Actions checking ``change_project`` themselves
    member_actions = ('members', 'remove_member', 'pin', 'unpin', 'status_report')

    def get_permissions(self):
        if self.action in self.member_actions:
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        return (
            Project.objects.visible_to(self.request.user)
            .annotate(members_count=Count('memberships', distinct=True))
            .pinned_first()
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return ProjectListSerializer
        return ProjectSerializer

    def _require_change_permission(self):
        if not self.request.user.has_perm('projects.change_project'):
            raise PermissionDenied('You do not have permission to manage this project.')

    @action(detail=True, methods=['post'], url_path='members')
    def members(self, request, pk=None):
        """
        Add a member to the project.

        POST /api/v1/projects/projects/{id}/members/  {"user_id": <id>}

        Returns:
            201: Member added (assignment email queued)
            200: User was already a member
        """
        project = self.get_object()
        self._require_change_permission()
        serializer = ProjectMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']

        created = project.add_member(user, added_by=request.user)
        return Response(
            {'added': created, 'user': UserSummarySerializer(user).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @action(detail=True, methods=['delete'], url_path=r'members/(?P<user_id>\d+)')
    def remove_member(self, request, pk=None, user_id=None):
        """
        Remove a member from the project.

        DELETE /api/v1/projects/projects/{id}/members/{user_id}/

        Returns:
            204: Member removed
            404: User is not a member
        """
        project = self.get_object()
        self._require_change_permission()
        user = get_object_or_404(User, pk=user_id)
        if not project.remove_member(user, removed_by=request.user):
            return Response(
                {'detail': 'User is not a member of this project.'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='status-report')
    def status_report(self, request, pk=None):
        """
        Planned vs actual series for one project.

        GET /api/v1/projects/projects/{id}/status-report/?type=weekly|overall

        Only projects with both a start and an end date have a report.
        """
        project = self.get_object()
        if project.start_date is None or project.end_date is None:
            raise NotFound('Project has no timeline.')
        query = StatusReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        report_type = query.validated_data['type']
        return Response({
            'project': project.pk,
            'type': report_type,
            'periods': project_status_series(project, report_type),
        })

    @action(detail=True, methods=['post'])
    def pin(self, request, pk=None):
        project = self.get_object()
        self._require_change_permission()
        project.pin()
        return Response(ProjectSerializer(project).data)

    @action(detail=True, methods=['post'])
    def unpin(self, request, pk=None):
        project = self.get_object()
        self._require_change_permission()
        project.unpin()
        return Response(ProjectSerializer(project).data)


class ProjectStatusView(APIView):
    """
    Status page / widget data.

    GET /api/v1/projects/status/
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        overview = project_status_overview(request.user)
        return Response(ProjectStatusSerializer(overview, many=True).data)


# ============================================================================
# WORKFLOW VIEWSETS
# ============================================================================

class TicketStatusViewSet(viewsets.ModelViewSet):
    """Ticket statuses of the projects the user can see."""

    serializer_class = TicketStatusSerializer
    permission_classes = [ReadOrModelPermissions]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['project', 'is_completed']

    def get_queryset(self):
        projects = Project.objects.visible_to(self.request.user)
        return TicketStatus.objects.filter(project__in=projects).order_by('project', 'sort_order', 'name')


class TicketPriorityViewSet(viewsets.ModelViewSet):
    queryset = TicketPriority.objects.all()
    serializer_class = TicketPrioritySerializer
    permission_classes = [ReadOrModelPermissions]


# ============================================================================
# TICKET VIEWSETS
# ============================================================================

class TicketViewSet(viewsets.ModelViewSet):
    """
    ViewSet for tickets.

    Authorization follows TicketPolicy: listing needs ``view_any_ticket``;
    viewing needs assignment, authorship or project membership; editing needs
    authorship or assignment.

    Custom actions:
    - history: GET /api/v1/projects/tickets/{id}/history/
    """

    permission_classes = [permissions.IsAuthenticated, TicketPermission]
    policy_actions = {'history': 'view'}
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['project', 'status', 'priority']
    search_fields = ['name', 'description', 'uuid']
    ordering_fields = ['id', 'due_date', 'created_at', 'updated_at']
    ordering = ['id']

    def get_queryset(self):
        tickets = Ticket.objects.select_related('project', 'status', 'priority', 'created_by')
        if self.action == 'list':
            return tickets.visible_to(self.request.user)
        return tickets

    def get_serializer_class(self):
        if self.action == 'list':
            return TicketListSerializer
        return TicketSerializer

    def perform_create(self, serializer):
        ticket = serializer.save(created_by=self.request.user)
        logger.info("Ticket created: %s by user %s", ticket.uuid, self.request.user.pk)

    def perform_update(self, serializer):
        serializer.instance._changed_by = self.request.user
        serializer.save()

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        ticket = self.get_object()
        serializer = TicketHistorySerializer(ticket.histories.select_related('status', 'user'), many=True)
        return Response(serializer.data)


class TicketCommentViewSet(viewsets.ModelViewSet):
    """
    ViewSet for ticket comments.

    Authors (and super admins) edit and delete their comments; viewing a
    comment follows the ticket's view rule.
    """

    serializer_class = TicketCommentSerializer
    permission_classes = [permissions.IsAuthenticated, TicketCommentPermission]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['ticket']

    def get_queryset(self):
        comments = TicketComment.objects.select_related('ticket__project', 'user')
        if self.action == 'list':
            visible = Ticket.objects.visible_to(self.request.user)
            return comments.filter(ticket__in=visible)
        return comments

    def perform_create(self, serializer):
        ticket = serializer.validated_data['ticket']
        if not TicketPolicy().allows('view', self.request.user, ticket):
            raise PermissionDenied('You cannot comment on this ticket.')
        serializer.save(user=self.request.user)

    def perform_update(self, serializer):
        # Comments cannot move between tickets
        serializer.save(ticket=serializer.instance.ticket)
