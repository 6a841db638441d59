"""
Trackboard Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration (settings module set in pyproject.toml)
- factory_boy factories for users, projects, workflow and tickets
- Shared fixtures for API clients, roles and a standard ticket workflow

RUNNING TESTS:
# Run all tests
pytest -v

# Run by app
pytest projects/tests -v
pytest accounts/tests -v

# Run by marker
pytest -m security -v
pytest -m workflow -v
"""

from datetime import timedelta

import factory
import pytest
from django.conf import settings
from django.contrib.auth.models import Group
from django.utils import timezone
from factory.django import DjangoModelFactory


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for verified users."""

    class Meta:
        model = 'accounts.User'
        django_get_or_create = ('email',)
        skip_postgeneration_save = True

    name = factory.Faker('name')
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.django.Password('testpass123')
    is_active = True
    email_verified_at = factory.LazyFunction(timezone.now)


class UnverifiedUserFactory(UserFactory):
    """Factory for users who have not verified their email address."""

    email_verified_at = None


class SuperAdminFactory(UserFactory):
    """Factory for users holding the super admin role."""

    @factory.post_generation
    def super_admin_role(obj, create, extracted, **kwargs):
        if not create:
            return
        role, _ = Group.objects.get_or_create(name=settings.SUPER_ADMIN_ROLE)
        obj.groups.add(role)


class RoleFactory(DjangoModelFactory):
    """Factory for roles (Django groups)."""

    class Meta:
        model = Group
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"role_{n}")


# ============================================================================
# PROJECT FACTORIES
# ============================================================================

class ProjectFactory(DjangoModelFactory):
    """Factory for projects running from 30 days ago to 30 days ahead."""

    class Meta:
        model = 'projects.Project'
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"Project {n}")
    description = factory.Faker('paragraph')
    ticket_prefix = factory.Sequence(lambda n: f"P{n}")
    color = '#3b82f6'
    start_date = factory.LazyFunction(lambda: timezone.localdate() - timedelta(days=30))
    end_date = factory.LazyFunction(lambda: timezone.localdate() + timedelta(days=30))

    @factory.post_generation
    def members(obj, create, extracted, **kwargs):
        if not create or not extracted:
            return
        for user in extracted:
            obj.add_member(user)


class TicketStatusFactory(DjangoModelFactory):

    class Meta:
        model = 'projects.TicketStatus'

    project = factory.SubFactory(ProjectFactory)
    name = factory.Sequence(lambda n: f"Status {n}")
    color = '#6B7280'
    sort_order = factory.Sequence(lambda n: n)
    is_completed = False


class TicketPriorityFactory(DjangoModelFactory):

    class Meta:
        model = 'projects.TicketPriority'
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Priority {n}")
    color = '#f59e0b'


class TicketFactory(DjangoModelFactory):
    """Factory for tickets; pass ``status`` from the ticket's own project."""

    class Meta:
        model = 'projects.Ticket'
        skip_postgeneration_save = True

    project = factory.SubFactory(ProjectFactory)
    status = None
    priority = None
    name = factory.Faker('sentence', nb_words=4)
    description = factory.Faker('paragraph')
    created_by = factory.SubFactory(UserFactory)

    @factory.post_generation
    def assignees(obj, create, extracted, **kwargs):
        if not create or not extracted:
            return
        obj.assignees.add(*extracted)


class TicketCommentFactory(DjangoModelFactory):

    class Meta:
        model = 'projects.TicketComment'

    ticket = factory.SubFactory(TicketFactory)
    user = factory.SubFactory(UserFactory)
    comment = factory.Faker('sentence')


class ExternalAccessFactory(DjangoModelFactory):
    """Factory for external dashboard links; the password is ``client-pass``."""

    class Meta:
        model = 'projects.ExternalAccess'
        skip_postgeneration_save = True

    project = factory.SubFactory(ProjectFactory)
    is_active = True

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        obj.set_password(extracted or 'client-pass')
        if create:
            obj.save(update_fields=['password'])


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def project_factory(db):
    return ProjectFactory


@pytest.fixture
def ticket_factory(db):
    return TicketFactory


@pytest.fixture
def ticket_status_factory(db):
    return TicketStatusFactory


# ============================================================================
# USERS & CLIENTS
# ============================================================================

@pytest.fixture
def user(db):
    """A regular verified user."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    return UserFactory()


@pytest.fixture
def super_admin(db):
    """A user holding the super admin role."""
    return SuperAdminFactory()


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_api_client(db, api_client, user):
    """Provide a DRF API client authenticated as ``user``."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def super_admin_api_client(db, super_admin):
    """Provide a DRF API client authenticated as ``super_admin``."""
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=super_admin)
    return client


# ============================================================================
# PROJECT WORKFLOW
# ============================================================================

@pytest.fixture
def project(db, user):
    """A project with ``user`` as its only member."""
    project = ProjectFactory(name='Website Redesign', ticket_prefix='WEB')
    project.add_member(user)
    return project


@pytest.fixture
def workflow(db, project):
    """
    Standard four-column workflow for ``project``.

    Returns a dict keyed by status name: To Do, In Progress, Review, Done.
    Only Done is flagged as completed.
    """
    statuses = {}
    for order, (name, color, completed) in enumerate([
        ('To Do', '#6B7280', False),
        ('In Progress', '#3b82f6', False),
        ('Review', '#f59e0b', False),
        ('Done', '#10b981', True),
    ]):
        statuses[name] = TicketStatusFactory(
            project=project,
            name=name,
            color=color,
            sort_order=order,
            is_completed=completed,
        )
    return statuses


@pytest.fixture
def priority(db):
    return TicketPriorityFactory(name='High', color='#ef4444')


@pytest.fixture
def external_access(db, project):
    return ExternalAccessFactory(project=project)


@pytest.fixture
def grant_permissions():
    """Grant named permissions (``app.codename``) directly to a user."""
    from accounts.roles import give_permissions_to_user

    def grant(user, *perms):
        give_permissions_to_user(user, *perms)
        return user
    return grant


@pytest.fixture(autouse=True)
def clear_cache():
    """Cached gantt data must not leak between tests."""
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()
