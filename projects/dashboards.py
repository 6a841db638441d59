"""
Dashboard view data for projects.

This module builds the data behind two surfaces:
- Project status page and widget: actual vs planned progress of every
  project a user can see, plus a monthly or weekly series per project
- External dashboard: the read-only view a client reaches through an
  ExternalAccess link (stats, ticket lists, activity, status, gantt)

Completion is judged two ways. The status page counts tickets whose status
is named like a done column; the external dashboard counts tickets in a
status flagged ``is_completed``.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .gantt import project_gantt_data
from .models import Project, TicketHistory, TicketPriority, TicketStatus
from .progress import COMPLETED_STATUS_NAMES, compute_progress
from .timeline import OVERALL, status_series

logger = logging.getLogger(__name__)

DEFAULT_STATUS_COLOR = '#6B7280'
RECENT_TICKETS_LIMIT = 10
TREND_MONTHS = 6


def _gantt_cache_timeout():
    return getattr(settings, 'TRACKBOARD_GANTT_CACHE_TIMEOUT', 300)


def _status_report_max_months():
    return getattr(settings, 'TRACKBOARD_STATUS_REPORT_MAX_MONTHS', 12)


def completion_dates(tickets) -> List[date]:
    """Local day each ticket was last updated, used as its completion day."""
    return [
        timezone.localdate(updated_at)
        for updated_at in tickets.values_list('updated_at', flat=True)
    ]


# ============================================================================
# PROJECT STATUS PAGE / WIDGET
# ============================================================================

def visible_projects(user):
    """Projects with a full timeline the user may see on the status page."""
    return Project.objects.with_timeline().visible_to(user).order_by('name', 'id')


def project_status_overview(user, today: Optional[date] = None) -> List[dict]:
    """Actual vs planned progress of every visible project."""
    today = today or timezone.localdate()
    projects = visible_projects(user).annotate(
        total_tickets=Count('tickets', distinct=True),
        completed_tickets=Count(
            'tickets',
            filter=Q(tickets__status__name__in=COMPLETED_STATUS_NAMES),
            distinct=True,
        ),
    )
    overview = []
    for project in projects:
        progress = compute_progress(
            total=project.total_tickets,
            completed=project.completed_tickets,
            start=project.start_date,
            end=project.end_date,
            today=today,
        )
        overview.append({'id': project.pk, 'name': project.name, **progress.as_dict()})
    return overview


def project_status_series(project, report_type: str = OVERALL, today: Optional[date] = None) -> List[dict]:
    """
    Series for the status page chart of one project.

    Monthly series are capped at ``TRACKBOARD_STATUS_REPORT_MAX_MONTHS``.
    Errors are logged and give an empty series.
    """
    today = today or timezone.localdate()
    try:
        tickets = project.tickets.all()
        series = status_series(
            report_type,
            project.start_date,
            project.end_date,
            today,
            completion_dates(tickets.completed_by_name()),
            tickets.count(),
            max_months=_status_report_max_months(),
        )
    except Exception as e:
        logger.error("Error loading project status data: %s", e)
        return []
    logger.info(
        "Project status data generated: project=%s type=%s periods=%d",
        project.pk, report_type, len(series),
    )
    return series


# ============================================================================
# EXTERNAL DASHBOARD
# ============================================================================

def gantt_cache_key(project_id) -> str:
    return f'external_gantt_{project_id}'


class ExternalDashboard:
    """Read-only dashboard data for one ExternalAccess link."""

    def __init__(self, access, now: Optional[datetime] = None):
        self.access = access
        self.project = access.project
        self.now = now or timezone.now()

    @property
    def today(self) -> date:
        return timezone.localdate(self.now)

    @property
    def tickets(self):
        return self.project.tickets.all()

    # Lookups -------------------------------------------------------------

    def statuses(self):
        return TicketStatus.objects.filter(project=self.project).order_by('sort_order', 'name')

    def priorities(self):
        return TicketPriority.objects.order_by('name')

    # Overview ------------------------------------------------------------

    def tickets_by_status(self) -> List[dict]:
        statuses = (
            TicketStatus.objects.filter(project=self.project)
            .annotate(ticket_count=Count('tickets'))
            .order_by('name', 'id')
        )
        return [
            {
                'status_name': status.name,
                'color': status.color or DEFAULT_STATUS_COLOR,
                'count': status.ticket_count,
            }
            for status in statuses
        ]

    def recent_tickets(self):
        return (
            self.tickets.select_related('status', 'priority')
            .order_by('-updated_at', '-id')[:RECENT_TICKETS_LIMIT]
        )

    def remaining_days(self) -> Optional[int]:
        """Signed whole days until the end date; None without an end date."""
        if not self.project.end_date:
            return None
        end_at = timezone.make_aware(datetime.combine(self.project.end_date, time.min))
        return int((end_at - self.now).total_seconds() / 86400)

    def monthly_trend(self) -> dict:
        since = self.now - relativedelta(months=TREND_MONTHS)
        rows = (
            self.tickets.filter(created_at__gte=since)
            .annotate(month=TruncMonth('created_at'))
            .values('month')
            .annotate(count=Count('id'))
            .order_by('month')
        )
        return {row['month'].strftime('%Y-%m'): row['count'] for row in rows}

    def stats(self) -> dict:
        week_ago = self.now - timedelta(days=7)
        tickets = self.tickets
        return {
            'total_team': self.project.members.count(),
            'total_tickets': tickets.count(),
            'remaining_days': self.remaining_days(),
            'progress_percentage': self.project.progress_percentage,
            'completed_tickets': tickets.completed().count(),
            'in_progress_tickets': tickets.in_progress().count(),
            'overdue_tickets': tickets.overdue(self.now).count(),
            'new_tickets_this_week': tickets.filter(created_at__gte=week_ago).count(),
            'completed_this_week': tickets.completed_by_name().filter(updated_at__gte=week_ago).count(),
            'monthly_trend': self.monthly_trend(),
        }

    # Lists ---------------------------------------------------------------

    def filter_tickets(self, status=None, priority=None, search=None):
        """Project tickets narrowed by status id, priority id and search term."""
        tickets = self.tickets.select_related('status', 'priority').prefetch_related('assignees')
        if status:
            tickets = tickets.filter(status_id=status)
        if priority:
            tickets = tickets.filter(priority_id=priority)
        return tickets.search(search).order_by('id')

    def activities(self):
        return (
            TicketHistory.objects.filter(ticket__project=self.project)
            .select_related('ticket', 'status', 'user')
            .order_by('-created_at', '-id')
        )

    # Status --------------------------------------------------------------

    def current_status(self, previous: Optional[str] = None) -> dict:
        """
        Actual vs planned progress right now.

        ``previous`` is the status reported on the visitor's last load.
        """
        tickets = self.tickets
        progress = compute_progress(
            total=tickets.count(),
            completed=tickets.completed().count(),
            start=self.project.start_date,
            end=self.project.end_date,
            today=self.today,
        )
        return {
            **progress.as_dict(),
            'previous': previous,
            'current': progress.status,
        }

    def status_series(self, report_type: str = OVERALL) -> List[dict]:
        try:
            tickets = self.tickets
            return status_series(
                report_type,
                self.project.start_date,
                self.project.end_date,
                self.today,
                completion_dates(tickets.completed()),
                tickets.count(),
            )
        except Exception as e:
            logger.error("Error loading project status data: %s", e)
            return []

    # Gantt ---------------------------------------------------------------

    def gantt_data(self) -> dict:
        return cache.get_or_set(
            gantt_cache_key(self.project.pk),
            lambda: project_gantt_data(self.project, self.now),
            _gantt_cache_timeout(),
        )

    def refresh_gantt(self) -> dict:
        logger.info("Gantt data refresh requested for project: %s", self.project.pk)
        cache.delete(gantt_cache_key(self.project.pk))
        return self.gantt_data()

    def export_gantt(self) -> dict:
        try:
            data = self.gantt_data()
            logger.info("Gantt chart export requested for project: %s", self.project.pk)
            return {
                'success': True,
                'data': data,
                'project_name': self.project.name,
                'export_timestamp': timezone.now().isoformat(),
            }
        except Exception as e:
            logger.error("Error exporting gantt data: %s", e)
            return {
                'success': False,
                'message': 'Failed to export gantt data',
            }
