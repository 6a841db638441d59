"""
Accounts Filters - Django Filter classes for the user list

Supports:
- Search by name/email
- Role membership (any of the given role ids)
- Email verification state
- Project membership, created tickets and assigned tickets
"""

import django_filters
from django.contrib.auth.models import Group
from django.db.models import Q

from .models import User


class UserFilter(django_filters.FilterSet):
    """Filter for users."""

    search = django_filters.CharFilter(method='filter_search')
    roles = django_filters.ModelMultipleChoiceFilter(
        field_name='groups',
        queryset=Group.objects.all(),
    )
    email_verified = django_filters.BooleanFilter(method='filter_email_verified')
    has_projects = django_filters.BooleanFilter(method='filter_has_projects')
    has_assigned_tickets = django_filters.BooleanFilter(method='filter_has_assigned_tickets')
    has_created_tickets = django_filters.BooleanFilter(method='filter_has_created_tickets')
    project = django_filters.NumberFilter(field_name='projects__id')

    class Meta:
        model = User
        fields = [
            'search',
            'roles',
            'email_verified',
            'has_projects',
            'has_assigned_tickets',
            'has_created_tickets',
            'project',
            'is_active',
        ]

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(email__icontains=value))

    def filter_email_verified(self, queryset, name, value):
        return queryset.filter(email_verified_at__isnull=not value)

    def filter_has_projects(self, queryset, name, value):
        if value:
            return queryset.filter(projects__isnull=False).distinct()
        return queryset.filter(projects__isnull=True)

    def filter_has_assigned_tickets(self, queryset, name, value):
        if value:
            return queryset.filter(assigned_tickets__isnull=False).distinct()
        return queryset.filter(assigned_tickets__isnull=True)

    def filter_has_created_tickets(self, queryset, name, value):
        if value:
            return queryset.filter(created_tickets__isnull=False).distinct()
        return queryset.filter(created_tickets__isnull=True)
