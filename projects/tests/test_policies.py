"""
Policy Tests - who may view, edit and manage tickets and comments.

Tests are marked with @pytest.mark.security for easy categorization.
"""

import pytest
from django.contrib.auth.models import AnonymousUser

from conftest import ProjectFactory, TicketCommentFactory, TicketFactory, UserFactory
from projects.policies import TicketCommentPolicy, TicketPolicy


@pytest.fixture
def outsider(db):
    return UserFactory()


@pytest.fixture
def ticket(project, user):
    return TicketFactory(project=project)


# ============================================================================
# TICKET POLICY
# ============================================================================

@pytest.mark.security
@pytest.mark.django_db
class TestTicketView:

    def test_project_member_can_view(self, ticket, user):
        assert TicketPolicy().allows('view', user, ticket)

    def test_assignee_can_view(self, outsider):
        ticket = TicketFactory(project=ProjectFactory(), assignees=[outsider])
        assert TicketPolicy().allows('view', outsider, ticket)

    def test_creator_can_view(self, outsider):
        ticket = TicketFactory(project=ProjectFactory(), created_by=outsider)
        assert TicketPolicy().allows('view', outsider, ticket)

    def test_outsider_cannot_view(self, ticket, outsider):
        assert not TicketPolicy().allows('view', outsider, ticket)

    def test_super_admin_can_view(self, ticket, super_admin):
        assert TicketPolicy().allows('view', super_admin, ticket)

    def test_anonymous_cannot_view(self, ticket):
        assert not TicketPolicy().allows('view', AnonymousUser(), ticket)


@pytest.mark.security
@pytest.mark.django_db
class TestTicketUpdate:

    def test_member_alone_cannot_update(self, ticket, user):
        assert not TicketPolicy().allows('update', user, ticket)

    def test_creator_and_assignee_can_update(self, project, user, outsider):
        ticket = TicketFactory(project=project, created_by=outsider, assignees=[user])
        assert TicketPolicy().allows('update', outsider, ticket)
        assert TicketPolicy().allows('update', user, ticket)

    def test_super_admin_can_update(self, ticket, super_admin):
        assert TicketPolicy().allows('update', super_admin, ticket)


@pytest.mark.security
@pytest.mark.django_db
class TestTicketNamedPermissions:

    @pytest.mark.parametrize('ability,codename', [
        ('view_any', 'view_any_ticket'),
        ('create', 'add_ticket'),
        ('delete_any', 'delete_any_ticket'),
        ('force_delete_any', 'force_delete_any_ticket'),
        ('restore_any', 'restore_any_ticket'),
        ('reorder', 'reorder_ticket'),
    ])
    def test_model_abilities_need_permission(self, user, grant_permissions, ability, codename):
        policy = TicketPolicy()
        assert not policy.allows(ability, user)

        grant_permissions(user, f'projects.{codename}')
        assert policy.allows(ability, user)

    @pytest.mark.parametrize('ability,codename', [
        ('delete', 'delete_ticket'),
        ('force_delete', 'force_delete_ticket'),
        ('restore', 'restore_ticket'),
        ('replicate', 'replicate_ticket'),
    ])
    def test_object_abilities_need_permission(self, ticket, user, grant_permissions, ability, codename):
        policy = TicketPolicy()
        assert not policy.allows(ability, user, ticket)

        grant_permissions(user, f'projects.{codename}')
        assert policy.allows(ability, user, ticket)

    def test_super_admin_bypasses_named_permissions(self, ticket, super_admin):
        policy = TicketPolicy()
        assert policy.allows('force_delete', super_admin, ticket)
        assert policy.allows('reorder', super_admin)

    def test_unknown_ability(self, ticket, user):
        with pytest.raises(AttributeError):
            TicketPolicy().allows('archive', user, ticket)


# ============================================================================
# TICKET COMMENT POLICY
# ============================================================================

@pytest.mark.security
@pytest.mark.django_db
class TestTicketCommentPolicy:

    def test_view_follows_ticket(self, ticket, user, outsider):
        comment = TicketCommentFactory(ticket=ticket, user=user)
        assert TicketCommentPolicy().allows('view', user, comment)
        assert not TicketCommentPolicy().allows('view', outsider, comment)

    def test_author_can_edit_and_delete(self, ticket, user):
        comment = TicketCommentFactory(ticket=ticket, user=user)
        assert TicketCommentPolicy().allows('update', user, comment)
        assert TicketCommentPolicy().allows('delete', user, comment)

    def test_other_member_cannot_edit(self, project, ticket, outsider):
        project.add_member(outsider)
        comment = TicketCommentFactory(ticket=ticket)
        assert TicketCommentPolicy().allows('view', outsider, comment)
        assert not TicketCommentPolicy().allows('update', outsider, comment)
        assert not TicketCommentPolicy().allows('delete', outsider, comment)

    def test_super_admin_can_delete_any_comment(self, ticket, super_admin):
        comment = TicketCommentFactory(ticket=ticket)
        assert TicketCommentPolicy().allows('delete', super_admin, comment)

    def test_bulk_abilities_need_permission(self, user, grant_permissions):
        policy = TicketCommentPolicy()
        assert not policy.allows('delete_any', user)
        grant_permissions(user, 'projects.delete_any_ticketcomment')
        assert policy.allows('delete_any', user)
