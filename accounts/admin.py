from django import forms
from django.contrib import admin, messages
from django.contrib.admin.helpers import ActionForm
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.utils.translation import gettext_lazy as _

from .forms import UserChangeForm, UserCreationForm
from .models import User
from .roles import AssignmentMode, bulk_assign_roles


class RoleActionForm(ActionForm):
    """Action bar with a role picker for the bulk role actions."""

    roles = forms.ModelMultipleChoiceField(
        queryset=Group.objects.order_by('name'),
        required=False,
        label=_('Roles'),
    )


class EmailVerifiedFilter(admin.SimpleListFilter):
    title = _('email verified')
    parameter_name = 'email_verified'

    def lookups(self, request, model_admin):
        return [('yes', _('Verified')), ('no', _('Unverified'))]

    def queryset(self, request, queryset):
        if self.value() == 'yes':
            return queryset.verified()
        if self.value() == 'no':
            return queryset.unverified()
        return queryset


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    User admin with statistics columns and bulk actions.

    Bulk actions:
    - verify / unverify email addresses
    - assign roles, adding to or replacing the current roles
    """

    list_display = [
        'email',
        'name',
        'email_verified_display',
        'roles_display',
        'projects_count',
        'created_tickets_count',
        'assigned_tickets_count',
        'is_active',
        'created_at',
    ]
    list_filter = [EmailVerifiedFilter, 'groups', 'is_staff', 'is_superuser', 'is_active']
    search_fields = ['email', 'name']
    ordering = ['name', 'email']
    action_form = RoleActionForm
    form = UserChangeForm
    add_form = UserCreationForm

    fieldsets = [
        (None, {
            'fields': ['email', 'password']
        }),
        ('Personal Info', {
            'fields': ['name', 'google_id']
        }),
        ('Verification', {
            'fields': ['email_verified_at']
        }),
        ('Permissions', {
            'fields': ['is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at', 'last_login'],
            'classes': ['collapse']
        }),
    ]
    add_fieldsets = [
        (None, {
            'classes': ['wide'],
            'fields': ['email', 'name', 'password1', 'password2'],
        }),
    ]

    readonly_fields = ['created_at', 'updated_at', 'last_login']
    actions = ['verify_emails', 'unverify_emails', 'assign_roles_add', 'assign_roles_replace']

    def get_queryset(self, request):
        return super().get_queryset(request).with_statistics().prefetch_related('groups')

    def email_verified_display(self, obj):
        return obj.has_verified_email()
    email_verified_display.boolean = True
    email_verified_display.short_description = 'Verified'

    def roles_display(self, obj):
        return ', '.join(group.name for group in obj.groups.all()) or '-'
    roles_display.short_description = 'Roles'

    def projects_count(self, obj):
        return obj.projects_count
    projects_count.short_description = 'Projects'
    projects_count.admin_order_field = 'projects_count'

    def created_tickets_count(self, obj):
        return obj.created_tickets_count
    created_tickets_count.short_description = 'Created tickets'
    created_tickets_count.admin_order_field = 'created_tickets_count'

    def assigned_tickets_count(self, obj):
        return obj.assigned_tickets_count
    assigned_tickets_count.short_description = 'Assigned tickets'
    assigned_tickets_count.admin_order_field = 'assigned_tickets_count'

    def verify_emails(self, request, queryset):
        count = sum(1 for user in queryset if user.mark_email_as_verified())
        self.message_user(request, f'Verified {count} email addresses')
    verify_emails.short_description = 'Mark email as verified'

    def unverify_emails(self, request, queryset):
        count = sum(1 for user in queryset if user.mark_email_as_unverified())
        self.message_user(request, f'Unverified {count} email addresses')
    unverify_emails.short_description = 'Mark email as unverified'

    def _assign_roles(self, request, queryset, mode):
        roles = list(Group.objects.filter(pk__in=request.POST.getlist('roles')))
        if not roles and mode == AssignmentMode.ADD:
            self.message_user(request, 'Select at least one role', level=messages.WARNING)
            return
        count = bulk_assign_roles(queryset, roles, mode)
        self.message_user(request, f'Updated roles of {count} users')

    def assign_roles_add(self, request, queryset):
        self._assign_roles(request, queryset, AssignmentMode.ADD)
    assign_roles_add.short_description = 'Add selected roles'

    def assign_roles_replace(self, request, queryset):
        self._assign_roles(request, queryset, AssignmentMode.REPLACE)
    assign_roles_replace.short_description = 'Replace roles with selected roles'
