"""
Projects app configuration.

This app manages projects and their tickets:
- Project timeline (start/end dates) and members
- Per-project ticket workflow (statuses) and global priorities
- Ticket history, comments and external dashboard links
"""

from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    """Configuration for the projects app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'projects'
    verbose_name = 'Projects'

    def ready(self):
        """Import signal handlers when app is ready."""
        import projects.signals  # noqa: F401
