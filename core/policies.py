"""
Base policy class.

A policy groups the authorization rules for one model. Each ability is a
method taking the user (and the object for object-level abilities) and
returning a bool. Super admins are granted every ability before the method
runs.
"""

from typing import Any, FrozenSet

from .roles import is_super_admin


class BasePolicy:
    """Common plumbing for model policies."""

    # app_label.codename suffix, e.g. "ticket" or "ticketcomment"
    permission_suffix: str = ''
    app_label: str = ''

    # Abilities that do not need an object instance
    model_abilities: FrozenSet[str] = frozenset()

    def allows(self, ability: str, user, obj: Any = None) -> bool:
        if user is None or not getattr(user, 'is_authenticated', False):
            return False
        if is_super_admin(user):
            return True
        check = getattr(self, ability, None)
        if check is None:
            raise AttributeError(f'{self.__class__.__name__} has no ability {ability!r}')
        if ability in self.model_abilities:
            return bool(check(user))
        return bool(check(user, obj))

    def has_permission(self, user, codename: str) -> bool:
        """Check the named Django permission, e.g. ``view_any_ticket``."""
        return user.has_perm(f'{self.app_label}.{codename}')
