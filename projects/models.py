"""
Projects Models - Projects, members and tickets.

This module defines models for ticket-based project tracking:
- Projects: Time-boxed work with a member list and a ticket workflow
- ProjectMember: Membership rows (who works on which project)
- TicketStatus: Per-project workflow columns, ordered by sort_order
- TicketPriority: Global priority levels
- Tickets: Units of work with assignees, start and due dates
- TicketHistory: Status transitions, shown as recent activity
- TicketComment: Discussion on a ticket
- ExternalAccess: Password-protected read-only dashboard links for clients
"""

import secrets

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.db.models import Max, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel
from core.roles import is_super_admin

from .progress import COMPLETED_STATUS_NAMES, IN_PROGRESS_STATUS_NAMES, actual_progress


# Permission families mirroring the admin-panel permission set
TICKET_PERMISSIONS = [
    ('view_any_ticket', 'Can view any ticket'),
    ('delete_any_ticket', 'Can bulk delete tickets'),
    ('force_delete_ticket', 'Can permanently delete ticket'),
    ('force_delete_any_ticket', 'Can permanently bulk delete tickets'),
    ('restore_ticket', 'Can restore ticket'),
    ('restore_any_ticket', 'Can bulk restore tickets'),
    ('replicate_ticket', 'Can replicate ticket'),
    ('reorder_ticket', 'Can reorder tickets'),
]

TICKET_COMMENT_PERMISSIONS = [
    ('view_any_ticketcomment', 'Can view any ticket comment'),
    ('delete_any_ticketcomment', 'Can bulk delete ticket comments'),
    ('force_delete_ticketcomment', 'Can permanently delete ticket comment'),
    ('force_delete_any_ticketcomment', 'Can permanently bulk delete ticket comments'),
    ('restore_ticketcomment', 'Can restore ticket comment'),
    ('restore_any_ticketcomment', 'Can bulk restore ticket comments'),
    ('replicate_ticketcomment', 'Can replicate ticket comment'),
    ('reorder_ticketcomment', 'Can reorder ticket comments'),
]


# ============================================================================
# PROJECTS
# ============================================================================

class ProjectQuerySet(models.QuerySet):

    def with_timeline(self):
        """Projects that have both a start and an end date."""
        return self.filter(start_date__isnull=False, end_date__isnull=False)

    def visible_to(self, user):
        """Super admins see every project; everyone else their memberships."""
        if is_super_admin(user):
            return self
        if user is None or not user.is_authenticated:
            return self.none()
        return self.filter(members=user).distinct()

    def pinned_first(self):
        return self.order_by(models.F('pinned_date').desc(nulls_last=True), 'name')


class Project(TimestampedModel):
    """
    A project groups tickets, members and a ticket workflow.

    Progress is measured as the share of tickets whose status is marked
    ``is_completed``; the planned progress comes from the start/end window.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    ticket_prefix = models.CharField(
        max_length=10,
        help_text=_('Prefix used for ticket identifiers, e.g. "TEST" gives TEST-1')
    )
    color = models.CharField(
        max_length=7,
        blank=True,
        default='',
        help_text=_('Hex color code for the project badge')
    )

    # Timeline
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    pinned_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_('When the project was pinned to the top of lists')
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='ProjectMember',
        related_name='projects',
        blank=True,
    )

    objects = ProjectQuerySet.as_manager()

    class Meta:
        verbose_name = _('Project')
        verbose_name_plural = _('Projects')
        ordering = ['name']
        indexes = [
            models.Index(fields=['pinned_date'], name='idx_projects_pinned'),
            models.Index(fields=['start_date', 'end_date'], name='idx_projects_dates'),
        ]

    def __str__(self):
        return self.name

    @property
    def is_pinned(self):
        return self.pinned_date is not None

    def pin(self):
        self.pinned_date = timezone.now()
        self.save(update_fields=['pinned_date', 'updated_at'])

    def unpin(self):
        self.pinned_date = None
        self.save(update_fields=['pinned_date', 'updated_at'])

    @property
    def progress_percentage(self):
        """Share of tickets in a completed status, rounded to 1 decimal."""
        total = self.tickets.count()
        completed = self.tickets.completed().count()
        return actual_progress(completed, total)

    def is_member(self, user):
        if user is None or not user.pk:
            return False
        return self.memberships.filter(user=user).exists()

    def add_member(self, user, added_by=None):
        """
        Add ``user`` to the project.

        Dispatches ``project_member_attached`` when both the new
        member and the acting user are known. Returns False when the user was
        already a member.
        """
        from .signals import project_member_attached

        membership, created = ProjectMember.objects.get_or_create(project=self, user=user)
        if created and added_by is not None:
            project_member_attached.send(
                sender=Project, project=self, user=user, assigned_by=added_by
            )
        return created

    def remove_member(self, user, removed_by=None):
        """Remove ``user`` from the project; returns False when not a member."""
        from .signals import project_member_detached

        deleted, _rows = ProjectMember.objects.filter(project=self, user=user).delete()
        if deleted and removed_by is not None:
            project_member_detached.send(
                sender=Project, project=self, user=user, removed_by=removed_by
            )
        return bool(deleted)


class ProjectMember(models.Model):
    """Membership of a user in a project."""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='project_memberships'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Project Member')
        verbose_name_plural = _('Project Members')
        constraints = [
            models.UniqueConstraint(fields=['project', 'user'], name='uniq_project_member'),
        ]
        indexes = [
            models.Index(fields=['project', 'user'], name='idx_project_members_proj_user'),
            models.Index(fields=['user'], name='idx_project_members_user'),
        ]

    def __str__(self):
        return f"{self.user} @ {self.project}"


# ============================================================================
# TICKET WORKFLOW
# ============================================================================

class TicketStatus(models.Model):
    """A column of a project's ticket workflow."""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='ticket_statuses'
    )
    name = models.CharField(max_length=100)
    color = models.CharField(max_length=7, default='#6B7280')
    sort_order = models.PositiveIntegerField(default=0)
    is_completed = models.BooleanField(
        default=False,
        help_text=_('Tickets in this status count as done')
    )

    class Meta:
        verbose_name = _('Ticket Status')
        verbose_name_plural = _('Ticket Statuses')
        ordering = ['sort_order', 'name']
        indexes = [
            models.Index(fields=['project', 'sort_order'], name='idx_ticket_statuses_proj_sort'),
            models.Index(fields=['project', 'is_completed'], name='idx_ticket_statuses_proj_done'),
        ]

    def __str__(self):
        return self.name


class TicketPriority(models.Model):
    """Global priority level."""

    name = models.CharField(max_length=50, unique=True)
    color = models.CharField(max_length=7, default='#6B7280')

    class Meta:
        verbose_name = _('Ticket Priority')
        verbose_name_plural = _('Ticket Priorities')
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='idx_ticket_priorities_name'),
        ]

    def __str__(self):
        return self.name


# ============================================================================
# TICKETS
# ============================================================================

class TicketQuerySet(models.QuerySet):

    def completed(self):
        """Tickets in a status flagged ``is_completed``."""
        return self.filter(status__is_completed=True)

    def completed_by_name(self):
        """Tickets whose status is named like a done column."""
        return self.filter(status__name__in=COMPLETED_STATUS_NAMES)

    def open(self):
        return self.exclude(status__is_completed=True)

    def in_progress(self):
        return self.filter(status__name__in=IN_PROGRESS_STATUS_NAMES)

    def overdue(self, now=None):
        now = now or timezone.now()
        return self.filter(due_date__lt=timezone.localdate(now), status__is_completed=False)

    def search(self, term):
        if not term:
            return self
        return self.filter(
            Q(name__icontains=term) |
            Q(description__icontains=term) |
            Q(uuid__icontains=term)
        )

    def visible_to(self, user):
        """Tickets a user may view: assigned, created, or in a member project."""
        if is_super_admin(user):
            return self
        if user is None or not user.is_authenticated:
            return self.none()
        return self.filter(
            Q(assignees=user) | Q(created_by=user) | Q(project__members=user)
        ).distinct()


class Ticket(TimestampedModel):
    """A unit of work inside a project."""

    uuid = models.CharField(
        max_length=30,
        unique=True,
        editable=False,
        help_text=_('Human readable identifier: <prefix>-<number>')
    )
    number = models.PositiveIntegerField(editable=False)

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tickets'
    )
    status = models.ForeignKey(
        TicketStatus,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets'
    )
    priority = models.ForeignKey(
        TicketPriority,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tickets'
    )

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tickets'
    )
    assignees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='assigned_tickets',
        blank=True,
    )

    objects = TicketQuerySet.as_manager()

    class Meta:
        verbose_name = _('Ticket')
        verbose_name_plural = _('Tickets')
        ordering = ['id']
        permissions = TICKET_PERMISSIONS
        constraints = [
            models.UniqueConstraint(fields=['project', 'number'], name='uniq_ticket_project_number'),
        ]
        indexes = [
            models.Index(fields=['project', 'status'], name='idx_tickets_project_status'),
            models.Index(fields=['status', 'created_at'], name='idx_tickets_status_created'),
            models.Index(fields=['project', 'created_at'], name='idx_tickets_project_created'),
            models.Index(fields=['project', 'updated_at'], name='idx_tickets_project_updated'),
            models.Index(fields=['due_date'], name='idx_tickets_due_date'),
            models.Index(fields=['priority'], name='idx_tickets_priority'),
            models.Index(fields=['created_by'], name='idx_tickets_created_by'),
        ]

    def __str__(self):
        return f"{self.uuid} {self.name}"

    def save(self, *args, **kwargs):
        if not self.number:
            last = Ticket.objects.filter(project_id=self.project_id).aggregate(
                last=Max('number')
            )['last']
            self.number = (last or 0) + 1
        if not self.uuid:
            self.uuid = f"{self.project.ticket_prefix}-{self.number}"
        super().save(*args, **kwargs)

    @property
    def is_completed(self):
        return bool(self.status and self.status.is_completed)

    @property
    def is_overdue(self):
        if not self.due_date or self.is_completed:
            return False
        return self.due_date < timezone.localdate()

    def is_assigned_to(self, user):
        if user is None or not user.pk:
            return False
        return self.assignees.filter(pk=user.pk).exists()


class TicketHistory(models.Model):
    """A status transition of a ticket."""

    ticket = models.ForeignKey(
        Ticket,
        on_delete=models.CASCADE,
        related_name='histories'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ticket_histories'
    )
    status = models.ForeignKey(
        TicketStatus,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='histories'
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = _('Ticket History')
        verbose_name_plural = _('Ticket Histories')
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.ticket.uuid} -> {self.status or '-'}"


class TicketComment(TimestampedModel):
    """A comment on a ticket."""

    ticket = models.ForeignKey(
        Ticket,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ticket_comments'
    )
    comment = models.TextField()

    class Meta:
        verbose_name = _('Ticket Comment')
        verbose_name_plural = _('Ticket Comments')
        ordering = ['created_at']
        permissions = TICKET_COMMENT_PERMISSIONS

    def __str__(self):
        return f"Comment by {self.user} on {self.ticket.uuid}"


# ============================================================================
# EXTERNAL ACCESS
# ============================================================================

def generate_access_token():
    return secrets.token_urlsafe(32)


class ExternalAccess(TimestampedModel):
    """
    Read-only dashboard access for people outside the organisation.

    The link carries ``access_token``; the visitor also needs the password.
    """

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='external_accesses'
    )
    access_token = models.CharField(
        max_length=64,
        unique=True,
        default=generate_access_token,
        editable=False
    )
    password = models.CharField(max_length=128)
    is_active = models.BooleanField(default=True)
    last_accessed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('External Access')
        verbose_name_plural = _('External Accesses')
        ordering = ['-created_at']

    def __str__(self):
        return f"External access to {self.project}"

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    def touch(self):
        """Record a dashboard visit."""
        self.last_accessed_at = timezone.now()
        self.save(update_fields=['last_accessed_at', 'updated_at'])
