"""
Role helpers.

Roles are Django groups. The super admin role (``settings.SUPER_ADMIN_ROLE``)
and Django superusers bypass every policy check.
"""

from typing import Iterable, Union

from django.conf import settings


def super_admin_role() -> str:
    return getattr(settings, 'SUPER_ADMIN_ROLE', 'super_admin')


def user_role_names(user) -> set:
    """Return the set of role names held by ``user`` (cached on the instance)."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return set()
    cached = getattr(user, '_role_names_cache', None)
    if cached is None:
        cached = set(user.groups.values_list('name', flat=True))
        user._role_names_cache = cached
    return cached


def clear_role_cache(user) -> None:
    if hasattr(user, '_role_names_cache'):
        del user._role_names_cache


def has_role(user, roles: Union[str, Iterable[str]]) -> bool:
    """True when ``user`` holds at least one of ``roles``."""
    if isinstance(roles, str):
        roles = [roles]
    held = user_role_names(user)
    return any(role in held for role in roles)


def is_super_admin(user) -> bool:
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    if getattr(user, 'is_superuser', False):
        return True
    return has_role(user, super_admin_role())
