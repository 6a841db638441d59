"""
External Dashboard Views - read-only project dashboard for clients.

Visitors open ``/external/<token>/``, log in with the link's password and
get a session flag (``external_authenticated_<token>``). Every other
endpoint requires that flag.

Endpoints:
- login / logout
- overview: tickets per status, recent tickets, widget stats, current status
- tickets: filtered ticket list (status, priority, search), 10 per page
- activities: ticket history, newest first, 10 per page
- status-report: weekly or overall planned vs actual series
- gantt / gantt refresh / gantt export

URL Namespace: external:*
"""

import logging

from django.http import Http404
from django.urls import reverse
from rest_framework import permissions, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from .api.serializers import (
    ExternalLoginSerializer,
    ExternalTicketFilterSerializer,
    ExternalTicketSerializer,
    StatusReportQuerySerializer,
    TicketHistorySerializer,
    TicketListSerializer,
    TicketPrioritySerializer,
    TicketStatusSerializer,
)
from .dashboards import ExternalDashboard
from .models import ExternalAccess

logger = logging.getLogger(__name__)


def session_key(token):
    return f'external_authenticated_{token}'


def status_session_key(token):
    return f'external_status_{token}'


def get_active_access(token):
    access = (
        ExternalAccess.objects.select_related('project')
        .filter(access_token=token, is_active=True)
        .first()
    )
    if access is None:
        raise Http404('External access not found')
    return access


class ExternalPagination(PageNumberPagination):
    page_size = 10


class ExternalView(APIView):
    """Base view resolving the access link and enforcing the session flag."""

    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    requires_session = True

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        token = kwargs['token']
        self.access = get_active_access(token)
        if self.requires_session and not request.session.get(session_key(token)):
            raise PermissionDenied({
                'detail': 'Authentication required.',
                'login_url': reverse('external:login', kwargs={'token': token}),
            })
        self.dashboard = ExternalDashboard(self.access)

    def paginate(self, request, queryset, serializer_class):
        paginator = ExternalPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(serializer_class(page, many=True).data)


# ============================================================================
# SESSION
# ============================================================================

class ExternalLoginView(ExternalView):
    """
    POST /external/<token>/login/  {"password": "..."}

    Returns:
        200: Session flag set
        403: Wrong password
        404: Unknown or inactive link
    """

    requires_session = False

    def post(self, request, token):
        serializer = ExternalLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not self.access.check_password(serializer.validated_data['password']):
            logger.warning("External dashboard login failed for project %s", self.access.project_id)
            return Response({'detail': 'Invalid password.'}, status=status.HTTP_403_FORBIDDEN)

        request.session[session_key(token)] = True
        logger.info("External dashboard login for project %s", self.access.project_id)
        return Response({
            'authenticated': True,
            'project': {'id': self.access.project_id, 'name': self.access.project.name},
        })


class ExternalLogoutView(ExternalView):
    """POST /external/<token>/logout/"""

    requires_session = False

    def post(self, request, token):
        request.session.pop(session_key(token), None)
        request.session.flush()
        return Response({'authenticated': False})


# ============================================================================
# DASHBOARD
# ============================================================================

class ExternalDashboardView(ExternalView):
    """GET /external/<token>/ - overview, widget stats and current status."""

    def get(self, request, token):
        self.access.touch()
        dashboard = self.dashboard
        project = dashboard.project

        previous = request.session.get(status_session_key(token))
        current = dashboard.current_status(previous=previous)
        request.session[status_session_key(token)] = current['current']

        return Response({
            'project': {
                'id': project.pk,
                'name': project.name,
                'description': project.description,
                'start_date': project.start_date,
                'end_date': project.end_date,
            },
            'statuses': TicketStatusSerializer(dashboard.statuses(), many=True).data,
            'priorities': TicketPrioritySerializer(dashboard.priorities(), many=True).data,
            'tickets_by_status': dashboard.tickets_by_status(),
            'recent_tickets': TicketListSerializer(dashboard.recent_tickets(), many=True).data,
            'stats': dashboard.stats(),
            'project_status': current,
        })


class ExternalTicketListView(ExternalView):
    """GET /external/<token>/tickets/?status=&priority=&search=&page="""

    def get(self, request, token):
        query = ExternalTicketFilterSerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        tickets = self.dashboard.filter_tickets(**query.validated_data)
        return self.paginate(request, tickets, ExternalTicketSerializer)


class ExternalActivityView(ExternalView):
    """GET /external/<token>/activities/?page="""

    def get(self, request, token):
        return self.paginate(request, self.dashboard.activities(), TicketHistorySerializer)


class ExternalStatusReportView(ExternalView):
    """GET /external/<token>/status-report/?type=weekly|overall"""

    def get(self, request, token):
        query = StatusReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        report_type = query.validated_data['type']
        previous = request.session.get(status_session_key(token))
        current = self.dashboard.current_status(previous=previous)
        request.session[status_session_key(token)] = current['current']
        return Response({
            'type': report_type,
            'project_status': current,
            'periods': self.dashboard.status_series(report_type),
        })


# ============================================================================
# GANTT
# ============================================================================

class ExternalGanttView(ExternalView):
    """GET /external/<token>/gantt/ (cached)"""

    def get(self, request, token):
        return Response(self.dashboard.gantt_data())


class ExternalGanttRefreshView(ExternalView):
    """POST /external/<token>/gantt/refresh/ - rebuild the cached gantt data"""

    def post(self, request, token):
        return Response(self.dashboard.refresh_gantt())


class ExternalGanttExportView(ExternalView):
    """GET /external/<token>/gantt/export/"""

    def get(self, request, token):
        payload = self.dashboard.export_gantt()
        if not payload['success']:
            return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(payload)
