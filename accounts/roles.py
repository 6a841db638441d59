"""
Role & Permission Management

Roles are Django ``Group`` rows; permissions are Django ``Permission`` rows
referenced either as ``"app_label.codename"`` or by bare codename.

This module provides:
- Role lookup and creation
- Per-user role assignment, removal and sync
- Bulk role assignment in ``add`` or ``replace`` mode
- Direct permission grants/revocations for users and roles
"""

import logging
from typing import Iterable, List, Union

from django.contrib.auth.models import Group, Permission
from django.db import models, transaction
from django.utils.translation import gettext_lazy as _

from core.roles import clear_role_cache

from .exceptions import PermissionDoesNotExist, RoleDoesNotExist

logger = logging.getLogger(__name__)

RoleRef = Union[Group, str, int]
PermissionRef = Union[Permission, str]


class AssignmentMode(models.TextChoices):
    ADD = 'add', _('Add to existing roles')
    REPLACE = 'replace', _('Replace existing roles')


# ============================================================================
# LOOKUPS
# ============================================================================

def resolve_roles(roles: Iterable[RoleRef]) -> List[Group]:
    """Resolve groups, names or primary keys to ``Group`` instances."""
    resolved = []
    for role in roles:
        if isinstance(role, Group):
            resolved.append(role)
            continue
        lookup = {'pk': role} if isinstance(role, int) else {'name': role}
        try:
            resolved.append(Group.objects.get(**lookup))
        except Group.DoesNotExist:
            raise RoleDoesNotExist(role) from None
    return resolved


def resolve_permissions(perms: Iterable[PermissionRef]) -> List[Permission]:
    """Resolve ``Permission`` instances, ``app.codename`` or bare codenames."""
    resolved = []
    for perm in perms:
        if isinstance(perm, Permission):
            resolved.append(perm)
            continue
        queryset = Permission.objects.select_related('content_type')
        if '.' in perm:
            app_label, codename = perm.split('.', 1)
            queryset = queryset.filter(content_type__app_label=app_label, codename=codename)
        else:
            queryset = queryset.filter(codename=perm)
        found = queryset.first()
        if found is None:
            raise PermissionDoesNotExist(perm)
        resolved.append(found)
    return resolved


def reset_permission_cache(user) -> None:
    """Drop the per-instance caches Django and ``core.roles`` keep on users."""
    for attr in ('_perm_cache', '_user_perm_cache', '_group_perm_cache'):
        if hasattr(user, attr):
            delattr(user, attr)
    clear_role_cache(user)


# ============================================================================
# ROLES
# ============================================================================

def create_role(name: str, permissions: Iterable[PermissionRef] = ()) -> Group:
    role, created = Group.objects.get_or_create(name=name)
    if permissions:
        role.permissions.add(*resolve_permissions(permissions))
    if created:
        logger.info("Role created: %s", name)
    return role


def assign_roles(user, *roles: RoleRef) -> None:
    user.groups.add(*resolve_roles(roles))
    reset_permission_cache(user)


def remove_roles(user, *roles: RoleRef) -> None:
    user.groups.remove(*resolve_roles(roles))
    reset_permission_cache(user)


def sync_roles(user, roles: Iterable[RoleRef]) -> None:
    """Make ``roles`` the user's exact role set."""
    user.groups.set(resolve_roles(roles))
    reset_permission_cache(user)


@transaction.atomic
def bulk_assign_roles(users: Iterable, roles: Iterable[RoleRef], mode: str = AssignmentMode.ADD) -> int:
    """
    Assign ``roles`` to every user in ``users``.

    Modes:
    - add: union with the roles each user already has (no duplicates)
    - replace: the roles become each user's exact role set; an empty role
      list removes every role

    Returns the number of users updated.
    """
    if mode not in AssignmentMode.values:
        raise ValueError(f'Unknown role assignment mode: {mode!r}')

    groups = resolve_roles(roles)
    count = 0
    for user in users:
        if mode == AssignmentMode.REPLACE:
            user.groups.set(groups)
        else:
            user.groups.add(*groups)
        reset_permission_cache(user)
        count += 1

    logger.info(
        "Bulk role assignment: mode=%s roles=%s users=%d",
        mode,
        [group.name for group in groups],
        count,
    )
    return count


# ============================================================================
# PERMISSIONS
# ============================================================================

def give_permissions_to_role(role: RoleRef, *perms: PermissionRef) -> Group:
    group = resolve_roles([role])[0]
    group.permissions.add(*resolve_permissions(perms))
    return group


def revoke_permissions_from_role(role: RoleRef, *perms: PermissionRef) -> Group:
    group = resolve_roles([role])[0]
    group.permissions.remove(*resolve_permissions(perms))
    return group


def give_permissions_to_user(user, *perms: PermissionRef) -> None:
    user.user_permissions.add(*resolve_permissions(perms))
    reset_permission_cache(user)


def revoke_permissions_from_user(user, *perms: PermissionRef) -> None:
    user.user_permissions.remove(*resolve_permissions(perms))
    reset_permission_cache(user)


def sync_user_permissions(user, perms: Iterable[PermissionRef]) -> None:
    user.user_permissions.set(resolve_permissions(perms))
    reset_permission_cache(user)


def users_with_permission(perm: PermissionRef):
    """Users holding ``perm`` directly or through one of their roles."""
    from django.contrib.auth import get_user_model

    permission = resolve_permissions([perm])[0]
    User = get_user_model()
    return User.objects.filter(
        models.Q(user_permissions=permission) | models.Q(groups__permissions=permission)
    ).distinct()
