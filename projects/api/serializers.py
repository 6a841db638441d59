"""
Projects Serializers - DRF serializers for API endpoints.

This module provides serializers for:
- Projects and their members
- Ticket statuses and priorities
- Tickets, ticket history and comments
- Status page rows and report parameters
- External dashboard login and lists
"""

from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..models import (
    Project,
    Ticket,
    TicketComment,
    TicketHistory,
    TicketPriority,
    TicketStatus,
)
from ..progress import ProgressStatus
from ..timeline import OVERALL, REPORT_TYPES

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user representation for nested fields."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


# ============================================================================
# PROJECT SERIALIZERS
# ============================================================================

class ProjectListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for project listings."""

    members_count = serializers.IntegerField(read_only=True)
    is_pinned = serializers.BooleanField(read_only=True)

    class Meta:
        model = Project
        fields = [
            'id',
            'name',
            'ticket_prefix',
            'color',
            'start_date',
            'end_date',
            'is_pinned',
            'members_count',
        ]


class ProjectSerializer(serializers.ModelSerializer):
    """Full serializer for project detail and writes."""

    members = UserSummarySerializer(many=True, read_only=True)
    progress_percentage = serializers.FloatField(read_only=True)
    is_pinned = serializers.BooleanField(read_only=True)

    class Meta:
        model = Project
        fields = [
            'id',
            'name',
            'description',
            'ticket_prefix',
            'color',
            'start_date',
            'end_date',
            'pinned_date',
            'is_pinned',
            'progress_percentage',
            'members',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['pinned_date', 'created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({
                'end_date': _('End date cannot be before the start date.')
            })
        return attrs


class ProjectMemberSerializer(serializers.Serializer):
    """Payload for adding a member to a project."""

    user_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        source='user',
    )


# ============================================================================
# WORKFLOW SERIALIZERS
# ============================================================================

class TicketStatusSerializer(serializers.ModelSerializer):

    class Meta:
        model = TicketStatus
        fields = ['id', 'project', 'name', 'color', 'sort_order', 'is_completed']


class TicketPrioritySerializer(serializers.ModelSerializer):

    class Meta:
        model = TicketPriority
        fields = ['id', 'name', 'color']


# ============================================================================
# TICKET SERIALIZERS
# ============================================================================

class TicketListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for ticket listings."""

    status_name = serializers.CharField(source='status.name', read_only=True, default=None)
    priority_name = serializers.CharField(source='priority.name', read_only=True, default=None)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ticket
        fields = [
            'id',
            'uuid',
            'project',
            'name',
            'status',
            'status_name',
            'priority',
            'priority_name',
            'start_date',
            'due_date',
            'is_overdue',
            'updated_at',
        ]


class TicketSerializer(serializers.ModelSerializer):
    """Full ticket serializer; assignees are written as ``assignee_ids``."""

    assignees = UserSummarySerializer(many=True, read_only=True)
    assignee_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        source='assignees',
        many=True,
        write_only=True,
        required=False,
    )
    created_by = UserSummarySerializer(read_only=True)
    status_detail = TicketStatusSerializer(source='status', read_only=True)
    priority_detail = TicketPrioritySerializer(source='priority', read_only=True)
    is_completed = serializers.BooleanField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ticket
        fields = [
            'id',
            'uuid',
            'number',
            'project',
            'name',
            'description',
            'status',
            'status_detail',
            'priority',
            'priority_detail',
            'start_date',
            'due_date',
            'assignees',
            'assignee_ids',
            'created_by',
            'is_completed',
            'is_overdue',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['uuid', 'number', 'created_at', 'updated_at']

    def validate_project(self, project):
        if self.instance is not None and project.pk != self.instance.project_id:
            raise serializers.ValidationError(_('Tickets cannot be moved to another project.'))
        return project

    def validate(self, attrs):
        project = attrs.get('project', getattr(self.instance, 'project', None))
        status = attrs.get('status')
        if status is not None and project is not None and status.project_id != project.pk:
            raise serializers.ValidationError({
                'status': _('Status does not belong to the ticket project.')
            })
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        due = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if start and due and due < start:
            raise serializers.ValidationError({
                'due_date': _('Due date cannot be before the start date.')
            })
        return attrs


class TicketHistorySerializer(serializers.ModelSerializer):
    ticket_uuid = serializers.CharField(source='ticket.uuid', read_only=True)
    ticket_name = serializers.CharField(source='ticket.name', read_only=True)
    status_name = serializers.CharField(source='status.name', read_only=True, default=None)
    user_name = serializers.CharField(source='user.name', read_only=True, default=None)

    class Meta:
        model = TicketHistory
        fields = ['id', 'ticket', 'ticket_uuid', 'ticket_name', 'status', 'status_name', 'user_name', 'created_at']
        read_only_fields = fields


class TicketCommentSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = TicketComment
        fields = ['id', 'ticket', 'user', 'comment', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


# ============================================================================
# STATUS REPORTS
# ============================================================================

class ProjectStatusSerializer(serializers.Serializer):
    """One row of the project status overview."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    actual = serializers.FloatField()
    planned = serializers.FloatField()
    deviation = serializers.FloatField()
    status = serializers.ChoiceField(choices=ProgressStatus.CHOICES)


class StatusReportQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=REPORT_TYPES, default=OVERALL)


# ============================================================================
# EXTERNAL DASHBOARD
# ============================================================================

class ExternalLoginSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class ExternalTicketFilterSerializer(serializers.Serializer):
    status = serializers.IntegerField(required=False, allow_null=True)
    priority = serializers.IntegerField(required=False, allow_null=True)
    search = serializers.CharField(required=False, allow_blank=True, default='')


class ExternalTicketSerializer(TicketListSerializer):
    """Ticket row shown to external visitors."""

    assignees = UserSummarySerializer(many=True, read_only=True)

    class Meta(TicketListSerializer.Meta):
        fields = TicketListSerializer.Meta.fields + ['description', 'assignees']
