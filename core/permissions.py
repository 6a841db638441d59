"""
Core Permissions - Policy-backed DRF permission classes for Trackboard

Authorization rules live in plain policy classes (see ``projects.policies``).
This module adapts them to Django REST Framework and writes an audit line for
every denied check.

USAGE:
    from core.permissions import policy_permission
    from projects.policies import TicketPolicy

    class TicketViewSet(viewsets.ModelViewSet):
        permission_classes = [IsAuthenticated, policy_permission(TicketPolicy)]

Viewset actions map to policy abilities through ``ACTION_ABILITIES``; views
may add entries for custom actions with a ``policy_actions`` dict.
"""

import logging
from typing import Any, Dict, Optional, Type

from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

logger = logging.getLogger('security.policies')


ACTION_ABILITIES: Dict[str, str] = {
    'list': 'view_any',
    'create': 'create',
    'retrieve': 'view',
    'update': 'update',
    'partial_update': 'update',
    'destroy': 'delete',
}


class PolicyPermission(permissions.BasePermission):
    """
    Delegate view- and object-level checks to a policy instance.

    Abilities listed in the policy's ``model_abilities`` are checked once per
    request (``has_permission``); every other ability needs the object and is
    checked in ``has_object_permission``.
    """

    policy_class: Optional[Type] = None
    message = 'You do not have permission to perform this action.'

    def __init__(self):
        self.policy = self.policy_class() if self.policy_class else None

    def _ability_for(self, view: APIView) -> Optional[str]:
        action = getattr(view, 'action', None)
        custom = getattr(view, 'policy_actions', {}) or {}
        if action in custom:
            return custom[action]
        return ACTION_ABILITIES.get(action)

    def has_permission(self, request: Request, view: APIView) -> bool:
        if self.policy is None:
            return True
        ability = self._ability_for(view)
        if ability is None or ability not in self.policy.model_abilities:
            return True
        result = self.policy.allows(ability, request.user)
        self._log_check(request, view, None, ability, result)
        return result

    def has_object_permission(self, request: Request, view: APIView, obj: Any) -> bool:
        if self.policy is None:
            return True
        ability = self._ability_for(view)
        if ability is None or ability in self.policy.model_abilities:
            return True
        result = self.policy.allows(ability, request.user, obj)
        self._log_check(request, view, obj, ability, result)
        return result

    def _log_check(
        self,
        request: Request,
        view: APIView,
        obj: Any,
        ability: str,
        result: bool
    ) -> None:
        """Log denied checks for security auditing."""
        if result:
            return
        user_id = getattr(request.user, 'id', None) if request.user else None
        object_id = getattr(obj, 'pk', None) if obj is not None else None
        object_type = obj.__class__.__name__ if obj is not None else None
        logger.warning(
            "POLICY_DENIED: user=%s policy=%s ability=%s view=%s object=%s:%s",
            user_id,
            self.policy.__class__.__name__,
            ability,
            view.__class__.__name__,
            object_type,
            object_id,
        )


def policy_permission(policy_class: Type) -> Type[PolicyPermission]:
    """
    Factory creating a DRF permission class bound to ``policy_class``.

    Usage:
        TicketPermission = policy_permission(TicketPolicy)
    """
    return type(
        f'{policy_class.__name__}Permission',
        (PolicyPermission,),
        {'policy_class': policy_class}
    )
