"""
Celery Tasks for outgoing email.

Mail is rendered and sent from the ``emails`` queue so request handlers never
wait on the mail server. Tasks retry with exponential backoff; a task whose
project or users were deleted in the meantime gives up and reports why.
"""

import logging

from celery import shared_task
from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)
User = get_user_model()


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=60,
    retry_backoff_max=600,
    retry_jitter=False,
)
def send_project_assignment_email(self, project_id: int, user_id: int, assigned_by_id: int) -> str:
    """
    Send the "added to project" email.

    Args:
        project_id: Project the user was added to
        user_id: The new member (recipient)
        assigned_by_id: The user who added them

    Returns:
        Status string describing the outcome
    """
    from projects.models import Project

    from .emails import ProjectAssignmentNotification

    try:
        project = Project.objects.get(pk=project_id)
    except Project.DoesNotExist:
        logger.warning("Project %s not found for assignment email", project_id)
        return f"Project {project_id} not found"

    users = User.objects.in_bulk([user_id, assigned_by_id])
    if user_id not in users:
        logger.warning("User %s not found for assignment email", user_id)
        return f"User {user_id} not found"
    if assigned_by_id not in users:
        logger.warning("User %s not found for assignment email", assigned_by_id)
        return f"User {assigned_by_id} not found"

    recipient = users[user_id]
    try:
        ProjectAssignmentNotification(project, recipient, users[assigned_by_id]).send()
    except Exception as e:
        logger.error("Failed to send assignment email to %s: %s", recipient.email, e)
        raise

    logger.info("Assignment email sent to %s for project %s", recipient.email, project_id)
    return f"Assignment email sent to {recipient.email}"
