"""
Gantt chart data for a project's tickets.

Produces the ``{'data': [...], 'links': []}`` payload the timeline chart
consumes. Ticket progress is the position of its status in the project's
ordered workflow, so the last column reads as 100%.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from django.utils import timezone

from .progress import status_position_progress

logger = logging.getLogger(__name__)

CHART_DATE_FORMAT = '%d-%m-%Y %H:%M'
DETAIL_DATE_FORMAT = '%b %d, %Y'
NAME_MAX_LENGTH = 50

OVERDUE_COLOR = '#ef4444'
DEFAULT_BAR_COLOR = '#3b82f6'
DEFAULT_BADGE_COLOR = '#6B7280'
TEXT_COLOR = '#ffffff'

# Days before the due date a ticket without start date is drawn from
DEFAULT_TICKET_SPAN_DAYS = 7


def empty_gantt():
    return {'data': [], 'links': []}


def truncate_name(name: str, length: int = NAME_MAX_LENGTH) -> str:
    if len(name) > length:
        return name[:length] + '...'
    return name


def _naive_local(moment: datetime) -> datetime:
    if timezone.is_aware(moment):
        return timezone.localtime(moment).replace(tzinfo=None)
    return moment


def workflow_positions(workflow: Sequence) -> dict:
    """Map status names to their first position in the ordered workflow."""
    positions = {}
    for index, status in enumerate(workflow):
        positions.setdefault(status.name, index)
    return positions


def ticket_progress(status, positions: dict, count: int) -> float:
    """Fraction (0..1) of the workflow a ticket in ``status`` has covered."""
    if status is None or not status.name:
        return 0.0
    position = positions.get(status.name)
    return status_position_progress(position, count) / 100


def ticket_to_task(ticket, positions: dict, count: int, now: datetime) -> dict:
    start = ticket.start_date or (ticket.due_date - timedelta(days=DEFAULT_TICKET_SPAN_DAYS))
    start_at = datetime.combine(start, time.min)
    end_at = datetime.combine(ticket.due_date, time.min)
    if end_at <= start_at:
        end_at = start_at + timedelta(days=1)

    progress = ticket_progress(ticket.status, positions, count)
    is_overdue = end_at < now and progress < 1

    status = ticket.status
    priority = ticket.priority
    status_name = status.name if status else 'Unknown'
    status_color = status.color if status and status.color else None

    if is_overdue:
        color = OVERDUE_COLOR
    else:
        color = status_color or DEFAULT_BAR_COLOR

    return {
        'id': str(ticket.pk),
        'text': truncate_name(ticket.name or 'Untitled Ticket'),
        'start_date': start_at.strftime(CHART_DATE_FORMAT),
        'end_date': end_at.strftime(CHART_DATE_FORMAT),
        'duration': max(1, (end_at - start_at).days),
        'progress': max(0.0, min(1.0, progress)),
        'type': 'task',
        'readonly': True,
        'color': color,
        'textColor': TEXT_COLOR,
        'status': status_name,
        'is_overdue': is_overdue,
        'ticket_details': {
            'id': ticket.pk,
            'uuid': ticket.uuid,
            'name': ticket.name,
            'description': ticket.description or 'No description available',
            'status': {
                'name': status_name,
                'color': status_color or DEFAULT_BADGE_COLOR,
            },
            'priority': {
                'name': priority.name if priority else 'Normal',
                'color': (priority.color if priority else None) or DEFAULT_BADGE_COLOR,
            },
            'start_date': start_at.strftime(DETAIL_DATE_FORMAT),
            'due_date': end_at.strftime(DETAIL_DATE_FORMAT),
            'progress_percentage': int(progress * 100),
            'is_overdue': is_overdue,
            'assignees': [
                {'name': user.name, 'email': user.email}
                for user in ticket.assignees.all()
            ],
        },
    }


def build_gantt_data(tickets: Iterable, workflow: Sequence, now: Optional[datetime] = None) -> dict:
    """
    Convert ``tickets`` into gantt tasks.

    Tickets without a due date are left out; the rest are ordered by due
    date. A ticket that fails to convert is logged and skipped.
    """
    now = _naive_local(now or timezone.now())
    try:
        workflow = list(workflow)
        positions = workflow_positions(workflow)
        dated = sorted(
            (ticket for ticket in tickets if ticket.due_date),
            key=lambda ticket: (ticket.due_date, ticket.pk),
        )
    except Exception as e:
        logger.error("Error generating gantt data: %s", e)
        return empty_gantt()

    tasks = []
    for ticket in dated:
        try:
            tasks.append(ticket_to_task(ticket, positions, len(workflow), now))
        except Exception as e:
            logger.error("Error processing ticket %s: %s", ticket.pk, e)
    return {'data': tasks, 'links': []}


def project_gantt_data(project, now: Optional[datetime] = None) -> dict:
    """Gantt data for every dated ticket of ``project``."""
    tickets = (
        project.tickets.filter(due_date__isnull=False)
        .select_related('status', 'priority')
        .prefetch_related('assignees')
        .order_by('due_date', 'id')
    )
    workflow = project.ticket_statuses.order_by('sort_order', 'id')
    return build_gantt_data(tickets, workflow, now)
