"""
Accounts Authentication Backends

- RoleModelBackend: model backend where the super admin role holds every
  permission, mirroring Django's superuser flag for role-based admins.
"""

from django.contrib.auth.backends import ModelBackend

from core.roles import is_super_admin


class RoleModelBackend(ModelBackend):
    """Model backend granting all permissions to active super admins."""

    def has_perm(self, user_obj, perm, obj=None):
        if user_obj.is_active and is_super_admin(user_obj):
            return True
        return super().has_perm(user_obj, perm, obj=obj)

    def has_module_perms(self, user_obj, app_label):
        if user_obj.is_active and is_super_admin(user_obj):
            return True
        return super().has_module_perms(user_obj, app_label)
