"""
Accounts API Tests - user administration endpoints.

Covers:
- User creation restricted to holders of accounts.add_user
- Own profile and password change
- Super admin actions: bulk role assignment, verification, statistics
- User list filters
"""

import pytest
from django.urls import reverse
from rest_framework import status

from conftest import ProjectFactory, RoleFactory, TicketFactory, UnverifiedUserFactory, UserFactory


@pytest.mark.security
@pytest.mark.django_db
class TestUserCreation:

    payload = {
        'name': 'Dewi Lestari',
        'email': 'dewi@example.com',
        'password': 'Str0ng-Passw0rd!',
    }

    def test_regular_user_cannot_create(self, authenticated_api_client):
        response = authenticated_api_client.post(reverse('v1:accounts:user-list'), self.payload)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_holder_of_add_user_can_create(self, authenticated_api_client, user, grant_permissions):
        grant_permissions(user, 'accounts.add_user')
        role = RoleFactory(name='developer')

        response = authenticated_api_client.post(
            reverse('v1:accounts:user-list'),
            {**self.payload, 'roles': [role.pk]},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'dewi@example.com'
        assert response.data['roles'] == ['developer']
        assert 'password' not in response.data

    def test_super_admin_can_create(self, super_admin_api_client):
        response = super_admin_api_client.post(reverse('v1:accounts:user-list'), self.payload)
        assert response.status_code == status.HTTP_201_CREATED

    def test_weak_password_rejected(self, super_admin_api_client):
        response = super_admin_api_client.post(
            reverse('v1:accounts:user-list'), {**self.payload, 'password': '123'}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data


@pytest.mark.django_db
class TestOwnAccount:

    def test_me(self, authenticated_api_client, user, project):
        response = authenticated_api_client.get(reverse('v1:accounts:user-me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['email_verified'] is True
        assert response.data['projects_count'] == 1

    def test_change_password(self, authenticated_api_client, user):
        response = authenticated_api_client.post(reverse('v1:accounts:user-change-password'), {
            'current_password': 'testpass123',
            'new_password': 'An0ther-Str0ng-One',
            'new_password_confirmation': 'An0ther-Str0ng-One',
        })

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.check_password('An0ther-Str0ng-One')

    def test_wrong_current_password(self, authenticated_api_client):
        response = authenticated_api_client.post(reverse('v1:accounts:user-change-password'), {
            'current_password': 'wrong',
            'new_password': 'An0ther-Str0ng-One',
            'new_password_confirmation': 'An0ther-Str0ng-One',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'current_password' in response.data

    def test_confirmation_mismatch(self, authenticated_api_client):
        response = authenticated_api_client.post(reverse('v1:accounts:user-change-password'), {
            'current_password': 'testpass123',
            'new_password': 'An0ther-Str0ng-One',
            'new_password_confirmation': 'Something-Else-1',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'new_password_confirmation' in response.data


@pytest.mark.security
@pytest.mark.django_db
class TestAdminActions:

    def test_bulk_assign_requires_super_admin(self, authenticated_api_client, user):
        role = RoleFactory()
        response = authenticated_api_client.post(
            reverse('v1:accounts:user-bulk-assign-roles'),
            {'users': [user.pk], 'roles': [role.pk]},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bulk_assign_add_and_replace(self, super_admin_api_client):
        first, second = RoleFactory(name='developer'), RoleFactory(name='qa')
        target = UserFactory()
        url = reverse('v1:accounts:user-bulk-assign-roles')

        response = super_admin_api_client.post(
            url, {'users': [target.pk], 'roles': [first.pk]}, format='json'
        )
        assert response.data == {'updated': 1, 'mode': 'add'}

        super_admin_api_client.post(
            url, {'users': [target.pk], 'roles': [second.pk], 'mode': 'replace'}, format='json'
        )
        assert target.get_role_names() == ['qa']

    def test_bulk_add_needs_a_role(self, super_admin_api_client):
        response = super_admin_api_client.post(
            reverse('v1:accounts:user-bulk-assign-roles'),
            {'users': [UserFactory().pk], 'roles': []},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'roles' in response.data

    def test_verify_and_unverify(self, super_admin_api_client):
        target = UnverifiedUserFactory()
        verify = reverse('v1:accounts:user-verify-email', kwargs={'pk': target.pk})
        unverify = reverse('v1:accounts:user-unverify-email', kwargs={'pk': target.pk})

        assert super_admin_api_client.post(verify).data['changed'] is True
        assert super_admin_api_client.post(verify).data['changed'] is False
        assert super_admin_api_client.post(unverify).data['changed'] is True

        target.refresh_from_db()
        assert target.email_verified_at is None

    def test_statistics(self, super_admin_api_client, super_admin):
        member = UserFactory()
        UnverifiedUserFactory()
        project = ProjectFactory(members=[member])
        TicketFactory(project=project, created_by=member, assignees=[member])

        response = super_admin_api_client.get(reverse('v1:accounts:user-statistics'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 3
        assert response.data['verified'] == 2
        assert response.data['unverified'] == 1
        assert response.data['with_projects'] == 1
        assert response.data['with_assigned_tickets'] == 1
        assert response.data['with_created_tickets'] == 1


@pytest.mark.django_db
class TestUserFilters:

    @pytest.fixture
    def people(self, db):
        developer = RoleFactory(name='developer')
        ana = UserFactory(name='Ana Developer', email='ana@example.com')
        ana.groups.add(developer)
        bob = UnverifiedUserFactory(name='Bob Tester', email='bob@example.com')
        project = ProjectFactory(members=[ana])
        TicketFactory(project=project, created_by=bob, assignees=[ana])
        return {'ana': ana, 'bob': bob, 'developer': developer}

    def _emails(self, client, **params):
        response = client.get(reverse('v1:accounts:user-list'), params)
        return [row['email'] for row in response.data['results']]

    def test_search(self, super_admin_api_client, people):
        assert self._emails(super_admin_api_client, search='tester') == ['bob@example.com']

    def test_role(self, super_admin_api_client, people):
        emails = self._emails(super_admin_api_client, roles=people['developer'].pk)
        assert emails == ['ana@example.com']

    def test_email_verified(self, super_admin_api_client, people):
        assert self._emails(super_admin_api_client, email_verified='false') == ['bob@example.com']

    def test_has_projects(self, super_admin_api_client, people):
        assert self._emails(super_admin_api_client, has_projects='true') == ['ana@example.com']

    def test_has_assigned_tickets(self, super_admin_api_client, people):
        assert self._emails(super_admin_api_client, has_assigned_tickets='true') == ['ana@example.com']

        unassigned = self._emails(super_admin_api_client, has_assigned_tickets='false')
        assert 'bob@example.com' in unassigned
        assert 'ana@example.com' not in unassigned

    def test_has_created_tickets(self, super_admin_api_client, people):
        assert self._emails(super_admin_api_client, has_created_tickets='true') == ['bob@example.com']

        non_creators = self._emails(super_admin_api_client, has_created_tickets='false')
        assert 'ana@example.com' in non_creators
        assert 'bob@example.com' not in non_creators
