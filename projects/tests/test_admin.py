"""
Project Admin Tests - changelists, pinning and member management.
"""

import pytest
from django.core import mail
from django.urls import reverse

from conftest import ProjectFactory, TicketFactory, UserFactory


@pytest.mark.django_db
class TestProjectAdmin:

    def test_changelist(self, admin_client, project, workflow):
        TicketFactory(project=project, status=workflow['Done'])
        response = admin_client.get(reverse('admin:projects_project_changelist'))

        assert response.status_code == 200
        assert b'Website Redesign' in response.content
        assert b'100.0%' in response.content

    def test_pin_action(self, admin_client):
        project = ProjectFactory()
        admin_client.post(reverse('admin:projects_project_changelist'), {
            'action': 'pin_projects',
            '_selected_action': [project.pk],
        })
        project.refresh_from_db()
        assert project.is_pinned

    def test_ticket_changelist(self, admin_client, project):
        TicketFactory(project=project, name='Admin visible ticket')
        response = admin_client.get(reverse('admin:projects_ticket_changelist'))
        assert b'Admin visible ticket' in response.content

    def _change_data(self, project, membership, **overrides):
        data = {
            'name': project.name,
            'description': project.description,
            'ticket_prefix': project.ticket_prefix,
            'color': project.color,
            'start_date': project.start_date.isoformat(),
            'end_date': project.end_date.isoformat(),
            'pinned_date_0': '',
            'pinned_date_1': '',
            'ticket_statuses-TOTAL_FORMS': '0',
            'ticket_statuses-INITIAL_FORMS': '0',
            'memberships-TOTAL_FORMS': '1',
            'memberships-INITIAL_FORMS': '1',
            'memberships-0-id': membership.pk,
            'memberships-0-project': project.pk,
            'memberships-0-user': membership.user_id,
        }
        data.update(overrides)
        return data

    def test_adding_member_inline_sends_email(
        self, admin_client, project, django_capture_on_commit_callbacks
    ):
        newcomer = UserFactory(email='inline@example.com')
        url = reverse('admin:projects_project_change', args=[project.pk])
        data = self._change_data(project, project.memberships.get(), **{
            'memberships-TOTAL_FORMS': '2',
            'memberships-1-project': project.pk,
            'memberships-1-user': newcomer.pk,
        })

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(url, data)

        assert response.status_code == 302
        assert project.is_member(newcomer)
        assert [message.to for message in mail.outbox] == [['inline@example.com']]

    def test_existing_member_row_cannot_be_reassigned(
        self, admin_client, project, user, django_capture_on_commit_callbacks
    ):
        stranger = UserFactory()
        membership = project.memberships.get()
        url = reverse('admin:projects_project_change', args=[project.pk])
        data = self._change_data(project, membership, **{'memberships-0-user': stranger.pk})

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(url, data)

        assert response.status_code == 302
        membership.refresh_from_db()
        assert membership.user == user
        assert not project.is_member(stranger)
        assert mail.outbox == []
