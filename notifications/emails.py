"""
Email messages sent by Trackboard.

Each message class renders a plain text body and an HTML alternative from
templates under ``notifications/emails/`` and returns a ready-to-send
``EmailMultiAlternatives``.
"""

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.urls import reverse


def absolute_url(path):
    return settings.SITE_URL.rstrip('/') + path


class ProjectAssignmentNotification:
    """Tells a user they were added to a project, and by whom."""

    template_name = 'notifications/emails/project_assignment'

    def __init__(self, project, assigned_user, assigned_by):
        self.project = project
        self.assigned_user = assigned_user
        self.assigned_by = assigned_by

    @property
    def subject(self):
        return f"Anda telah ditambahkan ke project: {self.project.name}"

    @property
    def project_url(self):
        return absolute_url(reverse('admin:projects_project_change', args=[self.project.pk]))

    def get_context(self):
        return {
            'project': self.project,
            'assigned_user': self.assigned_user,
            'assigned_by': self.assigned_by,
            'project_url': self.project_url,
        }

    def build(self):
        context = self.get_context()
        text_body = render_to_string(f'{self.template_name}.txt', context)
        html_body = render_to_string(f'{self.template_name}.html', context)

        message = EmailMultiAlternatives(
            subject=self.subject,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[self.assigned_user.email],
        )
        message.attach_alternative(html_body, 'text/html')
        return message

    def send(self):
        return self.build().send(fail_silently=False)
