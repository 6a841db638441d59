"""
Projects Admin - Django admin configuration.

Provides admin interface for:
- Projects (with members inline and member count)
- Ticket statuses and priorities
- Tickets, ticket history and comments
- External dashboard access links
"""

from django import forms
from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import (
    ExternalAccess,
    Project,
    ProjectMember,
    Ticket,
    TicketComment,
    TicketHistory,
    TicketPriority,
    TicketStatus,
)


def color_swatch(color):
    if not color:
        return '-'
    return format_html(
        '<span style="display:inline-block;width:12px;height:12px;'
        'border-radius:2px;background:{};"></span> {}',
        color,
        color
    )


# ============================================================================
# PROJECTS
# ============================================================================

class ProjectMemberForm(forms.ModelForm):
    """Existing memberships are removed and re-added, never reassigned."""

    class Meta:
        model = ProjectMember
        fields = ['user']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.fields['user'].disabled = True


class ProjectMemberInline(admin.TabularInline):
    """Inline admin for project members."""
    model = ProjectMember
    form = ProjectMemberForm
    extra = 0
    fields = ['user', 'created_at']
    readonly_fields = ['created_at']
    autocomplete_fields = ['user']


class TicketStatusInline(admin.TabularInline):
    """Inline admin for the project's ticket workflow."""
    model = TicketStatus
    extra = 0
    fields = ['name', 'color', 'sort_order', 'is_completed']
    ordering = ['sort_order']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin for projects."""

    list_display = [
        'name',
        'ticket_prefix',
        'start_date',
        'end_date',
        'member_count',
        'progress_display',
        'pinned_badge',
    ]
    list_filter = ['start_date', 'end_date']
    search_fields = ['name', 'description', 'ticket_prefix']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [TicketStatusInline, ProjectMemberInline]
    actions = ['pin_projects', 'unpin_projects']

    fieldsets = (
        (_('Basic Info'), {
            'fields': ('name', 'description', 'ticket_prefix', 'color')
        }),
        (_('Timeline'), {
            'fields': ('start_date', 'end_date', 'pinned_date')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            members_count=Count('memberships', distinct=True)
        )

    def member_count(self, obj):
        return obj.members_count
    member_count.short_description = _('Members')
    member_count.admin_order_field = 'members_count'

    def progress_display(self, obj):
        return f"{obj.progress_percentage}%"
    progress_display.short_description = _('Progress')

    def pinned_badge(self, obj):
        if obj.is_pinned:
            return format_html('<span style="color: orange;">● {}</span>', _('Pinned'))
        return '-'
    pinned_badge.short_description = _('Pinned')

    def save_formset(self, request, form, formset, change):
        """Route member changes through add_member/remove_member."""
        if formset.model is not ProjectMember:
            return super().save_formset(request, form, formset, change)

        project = form.instance
        memberships = formset.save(commit=False)
        for membership in formset.deleted_objects:
            project.remove_member(membership.user, removed_by=request.user)
        for membership in memberships:
            if membership.pk is None:
                project.add_member(membership.user, added_by=request.user)

    @admin.action(description=_('Pin selected projects'))
    def pin_projects(self, request, queryset):
        for project in queryset:
            project.pin()

    @admin.action(description=_('Unpin selected projects'))
    def unpin_projects(self, request, queryset):
        for project in queryset:
            project.unpin()


# ============================================================================
# WORKFLOW
# ============================================================================

@admin.register(TicketStatus)
class TicketStatusAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'sort_order', 'is_completed', 'color_display']
    list_filter = ['is_completed', 'project']
    search_fields = ['name', 'project__name']
    ordering = ['project', 'sort_order']

    def color_display(self, obj):
        return color_swatch(obj.color)
    color_display.short_description = _('Color')


@admin.register(TicketPriority)
class TicketPriorityAdmin(admin.ModelAdmin):
    list_display = ['name', 'color_display']
    search_fields = ['name']

    def color_display(self, obj):
        return color_swatch(obj.color)
    color_display.short_description = _('Color')


# ============================================================================
# TICKETS
# ============================================================================

class TicketCommentInline(admin.StackedInline):
    model = TicketComment
    extra = 0
    fields = ['user', 'comment', 'created_at']
    readonly_fields = ['created_at']


class TicketHistoryInline(admin.TabularInline):
    model = TicketHistory
    extra = 0
    fields = ['status', 'user', 'created_at']
    readonly_fields = ['status', 'user', 'created_at']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    """Admin for tickets."""

    list_display = [
        'uuid',
        'name',
        'project',
        'status',
        'priority',
        'due_date',
        'overdue_badge',
        'created_by',
    ]
    list_filter = ['project', 'status__is_completed', 'priority']
    search_fields = ['uuid', 'name', 'description']
    readonly_fields = ['uuid', 'number', 'created_at', 'updated_at']
    filter_horizontal = ['assignees']
    date_hierarchy = 'created_at'
    list_select_related = ['project', 'status', 'priority', 'created_by']
    inlines = [TicketCommentInline, TicketHistoryInline]

    fieldsets = (
        (_('Basic Info'), {
            'fields': ('uuid', 'number', 'project', 'name', 'description')
        }),
        (_('Workflow'), {
            'fields': ('status', 'priority', 'assignees')
        }),
        (_('Schedule'), {
            'fields': ('start_date', 'due_date')
        }),
        (_('Tracking'), {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def overdue_badge(self, obj):
        if obj.is_overdue:
            return format_html('<span style="color: red;">● {}</span>', _('Overdue'))
        return '-'
    overdue_badge.short_description = _('Overdue')

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        obj._changed_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(TicketComment)
class TicketCommentAdmin(admin.ModelAdmin):
    list_display = ['ticket', 'user', 'created_at']
    search_fields = ['ticket__uuid', 'comment', 'user__email']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['ticket', 'user']


# ============================================================================
# EXTERNAL ACCESS
# ============================================================================

@admin.register(ExternalAccess)
class ExternalAccessAdmin(admin.ModelAdmin):
    """Admin for external dashboard links."""

    list_display = ['project', 'access_token', 'is_active', 'last_accessed_at', 'created_at']
    list_filter = ['is_active']
    search_fields = ['project__name', 'access_token']
    readonly_fields = ['access_token', 'last_accessed_at', 'created_at', 'updated_at']
    exclude = ['password']
    actions = ['deactivate']

    @admin.action(description=_('Deactivate selected links'))
    def deactivate(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, _('%(count)d link(s) deactivated.') % {'count': updated})
