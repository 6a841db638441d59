"""
Accounts API Views - REST API endpoints for users and roles.

Provides:
- users: list / retrieve / create / update / destroy
- users/me: the caller's profile
- users/change-password: change the caller's password
- users/bulk-assign-roles: add or replace roles of many users
- users/{id}/verify-email, users/{id}/unverify-email
- users/statistics: verification and activity counts
- roles: list roles

Creating users is limited to super admins and holders of ``accounts.add_user``.
"""

import logging

from django.contrib.auth.models import Group
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.roles import is_super_admin

from ..filters import UserFilter
from ..models import User
from ..roles import bulk_assign_roles as assign_roles_in_bulk
from .serializers import (
    BulkRoleAssignmentSerializer,
    PasswordChangeSerializer,
    RoleSerializer,
    UserCreateSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


class IsSuperAdmin(permissions.BasePermission):
    message = 'Only super admins can perform this action.'

    def has_permission(self, request, view):
        return is_super_admin(request.user)


class UserPermissions(permissions.DjangoModelPermissions):
    """Reads need authentication; writes need the matching user permission."""

    authenticated_users_only = True


class UserViewSet(viewsets.ModelViewSet):
    """ViewSet for users."""

    permission_classes = [UserPermissions]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = UserFilter
    ordering_fields = ['name', 'email', 'created_at', 'projects_count']
    ordering = ['name', 'email']

    own_actions = ('me', 'change_password')
    admin_actions = ('bulk_assign_roles', 'verify_email', 'unverify_email', 'statistics')

    def get_permissions(self):
        if self.action in self.own_actions:
            return [permissions.IsAuthenticated()]
        if self.action in self.admin_actions:
            return [permissions.IsAuthenticated(), IsSuperAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        return User.objects.with_statistics().prefetch_related('groups')

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("User created: %s by %s", user.pk, self.request.user.pk)

    def perform_destroy(self, instance):
        logger.info("User deleted: %s by %s", instance.pk, self.request.user.pk)
        instance.delete()

    @action(detail=False, methods=['get'])
    def me(self, request):
        user = self.get_queryset().get(pk=request.user.pk)
        return Response(UserSerializer(user).data)

    @action(detail=False, methods=['post'], url_path='change-password')
    def change_password(self, request):
        serializer = PasswordChangeSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Password changed for user %s", request.user.pk)
        return Response({'detail': 'Password updated.'})

    @action(detail=False, methods=['post'], url_path='bulk-assign-roles')
    def bulk_assign_roles(self, request):
        serializer = BulkRoleAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        count = assign_roles_in_bulk(data['users'], data['roles'], data['mode'])
        return Response({'updated': count, 'mode': data['mode']})

    @action(detail=True, methods=['post'], url_path='verify-email')
    def verify_email(self, request, pk=None):
        user = self.get_object()
        changed = user.mark_email_as_verified()
        return Response({'changed': changed, 'email_verified_at': user.email_verified_at})

    @action(detail=True, methods=['post'], url_path='unverify-email')
    def unverify_email(self, request, pk=None):
        user = self.get_object()
        changed = user.mark_email_as_unverified()
        return Response({'changed': changed, 'email_verified_at': user.email_verified_at})

    @action(detail=False, methods=['get'])
    def statistics(self, request):
        users = User.objects.all()
        return Response({
            'total': users.count(),
            'verified': users.verified().count(),
            'unverified': users.unverified().count(),
            'recently_verified': users.recently_verified().count(),
            'with_projects': users.filter(projects__isnull=False).distinct().count(),
            'with_assigned_tickets': users.filter(assigned_tickets__isnull=False).distinct().count(),
            'with_created_tickets': users.filter(created_tickets__isnull=False).distinct().count(),
        }, status=status.HTTP_200_OK)


class RoleViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Group.objects.order_by('name')
    serializer_class = RoleSerializer
    permission_classes = [permissions.IsAuthenticated]
