"""
Ticket and ticket comment policies.

Ownership rules decide who may view and edit a ticket or comment; every
other ability maps to a named permission such as ``delete_any_ticket``.
Super admins pass every check (see ``core.policies.BasePolicy``).
"""

from core.permissions import policy_permission
from core.policies import BasePolicy
from core.roles import is_super_admin


class PermissionAbilitiesMixin:
    """Abilities that only require the matching ``<ability>_<suffix>`` permission."""

    def _can(self, user, ability):
        return self.has_permission(user, f'{ability}_{self.permission_suffix}')

    def view_any(self, user):
        return self._can(user, 'view_any')

    def create(self, user):
        return self._can(user, 'add')

    def delete(self, user, obj):
        return self._can(user, 'delete')

    def delete_any(self, user):
        return self._can(user, 'delete_any')

    def force_delete(self, user, obj):
        return self._can(user, 'force_delete')

    def force_delete_any(self, user):
        return self._can(user, 'force_delete_any')

    def restore(self, user, obj):
        return self._can(user, 'restore')

    def restore_any(self, user):
        return self._can(user, 'restore_any')

    def replicate(self, user, obj):
        return self._can(user, 'replicate')

    def reorder(self, user):
        return self._can(user, 'reorder')


MODEL_ABILITIES = frozenset({
    'view_any', 'create', 'delete_any', 'force_delete_any', 'restore_any', 'reorder',
})


class TicketPolicy(PermissionAbilitiesMixin, BasePolicy):
    app_label = 'projects'
    permission_suffix = 'ticket'
    model_abilities = MODEL_ABILITIES

    def view(self, user, ticket):
        if is_super_admin(user):
            return True
        if ticket.is_assigned_to(user):
            return True
        if ticket.created_by_id == user.pk:
            return True
        return ticket.project.is_member(user)

    def update(self, user, ticket):
        if is_super_admin(user):
            return True
        if ticket.created_by_id == user.pk:
            return True
        return ticket.is_assigned_to(user)


class TicketCommentPolicy(PermissionAbilitiesMixin, BasePolicy):
    app_label = 'projects'
    permission_suffix = 'ticketcomment'
    model_abilities = MODEL_ABILITIES

    def view(self, user, comment):
        return TicketPolicy().allows('view', user, comment.ticket)

    def update(self, user, comment):
        return comment.user_id == user.pk or is_super_admin(user)

    def delete(self, user, comment):
        return comment.user_id == user.pk or is_super_admin(user)


TicketPermission = policy_permission(TicketPolicy)
TicketCommentPermission = policy_permission(TicketCommentPolicy)
