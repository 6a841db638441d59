"""
External Dashboard View Tests - password gate and read-only client endpoints.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from conftest import ExternalAccessFactory, TicketFactory
from projects.progress import ProgressStatus


def external_url(name, access):
    return reverse(f'external:{name}', kwargs={'token': access.access_token})


@pytest.fixture
def logged_in_client(api_client, external_access):
    response = api_client.post(external_url('login', external_access), {'password': 'client-pass'})
    assert response.status_code == status.HTTP_200_OK
    return api_client


# ============================================================================
# SESSION
# ============================================================================

@pytest.mark.security
@pytest.mark.django_db
class TestExternalLogin:

    def test_unknown_token(self, api_client):
        url = reverse('external:login', kwargs={'token': 'does-not-exist'})
        response = api_client.post(url, {'password': 'client-pass'})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_inactive_link(self, api_client, project):
        access = ExternalAccessFactory(project=project, is_active=False)
        response = api_client.post(external_url('login', access), {'password': 'client-pass'})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_wrong_password(self, api_client, external_access):
        response = api_client.post(external_url('login', external_access), {'password': 'nope'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['detail'] == 'Invalid password.'

    def test_login_sets_session_flag(self, api_client, external_access):
        response = api_client.post(
            external_url('login', external_access), {'password': 'client-pass'}
        )

        assert response.data['authenticated'] is True
        assert response.data['project']['name'] == 'Website Redesign'
        key = f'external_authenticated_{external_access.access_token}'
        assert api_client.session[key] is True

    def test_dashboard_requires_login(self, api_client, external_access):
        response = api_client.get(external_url('dashboard', external_access))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['login_url'] == external_url('login', external_access)

    def test_session_is_per_link(self, logged_in_client, project):
        other = ExternalAccessFactory(project=project)
        response = logged_in_client.get(external_url('dashboard', other))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_logout(self, logged_in_client, external_access):
        logged_in_client.post(external_url('logout', external_access))
        response = logged_in_client.get(external_url('dashboard', external_access))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# ============================================================================
# DASHBOARD DATA
# ============================================================================

@pytest.mark.django_db
class TestExternalDashboardViews:

    @pytest.fixture
    def tickets(self, project, workflow):
        today = timezone.localdate()
        created = [
            TicketFactory(project=project, status=workflow['Done'], name='Kickoff'),
            TicketFactory(
                project=project, status=workflow['In Progress'], name='Wireframes',
                due_date=today + timedelta(days=2),
            ),
        ]
        created += [
            TicketFactory(project=project, status=workflow['To Do'], name=f'Page {n}')
            for n in range(10)
        ]
        return created

    def test_dashboard(self, logged_in_client, external_access, tickets):
        response = logged_in_client.get(external_url('dashboard', external_access))

        assert response.status_code == status.HTTP_200_OK
        data = response.data
        assert data['project']['name'] == 'Website Redesign'
        assert [s['name'] for s in data['statuses']] == ['To Do', 'In Progress', 'Review', 'Done']
        assert len(data['recent_tickets']) == 10
        assert data['stats']['total_tickets'] == 12
        assert data['project_status']['previous'] is None
        assert data['project_status']['current'] == ProgressStatus.DELAY

        external_access.refresh_from_db()
        assert external_access.last_accessed_at is not None

    def test_previous_status_remembered(self, logged_in_client, external_access, tickets):
        logged_in_client.get(external_url('dashboard', external_access))
        response = logged_in_client.get(external_url('dashboard', external_access))
        assert response.data['project_status']['previous'] == ProgressStatus.DELAY

    def test_ticket_list_paginated_and_filtered(self, logged_in_client, external_access, tickets, workflow):
        url = external_url('tickets', external_access)

        first_page = logged_in_client.get(url)
        assert first_page.data['count'] == 12
        assert len(first_page.data['results']) == 10

        filtered = logged_in_client.get(url, {'status': workflow['In Progress'].pk})
        assert [row['name'] for row in filtered.data['results']] == ['Wireframes']

        searched = logged_in_client.get(url, {'search': 'kickoff'})
        assert searched.data['count'] == 1

    def test_activities(self, logged_in_client, external_access, tickets):
        response = logged_in_client.get(external_url('activities', external_access))

        assert response.data['count'] == 12
        assert response.data['results'][0]['ticket_name'] == 'Page 9'

    def test_status_report(self, logged_in_client, external_access, tickets):
        url = external_url('status_report', external_access)

        overall = logged_in_client.get(url)
        weekly = logged_in_client.get(url, {'type': 'weekly'})

        assert overall.data['type'] == 'overall'
        assert 'month_start' in overall.data['periods'][0]
        assert 'week_start' in weekly.data['periods'][0]
        assert logged_in_client.get(url, {'type': 'yearly'}).status_code == status.HTTP_400_BAD_REQUEST

    def test_gantt(self, logged_in_client, external_access, tickets):
        response = logged_in_client.get(external_url('gantt', external_access))

        assert response.status_code == status.HTTP_200_OK
        assert [task['text'] for task in response.data['data']] == ['Wireframes']

    def test_gantt_refresh(self, logged_in_client, external_access, project, workflow, tickets):
        logged_in_client.get(external_url('gantt', external_access))
        TicketFactory(
            project=project, status=workflow['To Do'], name='Launch',
            due_date=timezone.localdate() + timedelta(days=20),
        )

        response = logged_in_client.post(external_url('gantt_refresh', external_access))

        assert [task['text'] for task in response.data['data']] == ['Wireframes', 'Launch']

    def test_gantt_export(self, logged_in_client, external_access, tickets):
        response = logged_in_client.get(external_url('gantt_export', external_access))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['project_name'] == 'Website Redesign'

    def test_gantt_export_failure(self, logged_in_client, external_access):
        with patch('projects.dashboards.project_gantt_data', side_effect=RuntimeError('boom')):
            response = logged_in_client.get(external_url('gantt_export', external_access))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'success': False, 'message': 'Failed to export gantt data'}
