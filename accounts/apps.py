"""
Accounts app configuration.

Users, roles (Django groups), named permissions and email verification.
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for the accounts app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'accounts'
    verbose_name = 'Users & Roles'

    def ready(self):
        """Import signal handlers when app is ready."""
        import accounts.signals  # noqa: F401
