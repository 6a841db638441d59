"""
Projects Signal Handlers - Membership events and ticket history.

This module defines and connects:
- project_member_attached / project_member_detached: sent by
  Project.add_member / remove_member when the acting user is known
- attached → queue the project assignment email once the transaction commits
- pre_save/post_save on Ticket → record a TicketHistory row on creation and
  on every status change

Views set ``ticket._changed_by`` to credit the acting user in the history;
without it the ticket creator is used.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import Signal, receiver

from .models import Ticket, TicketHistory

logger = logging.getLogger(__name__)

# Sent with project, user and assigned_by
project_member_attached = Signal()

# Sent with project, user and removed_by
project_member_detached = Signal()


@receiver(project_member_attached)
def queue_assignment_email(sender, project, user, assigned_by, **kwargs):
    """Queue the "added to project" email after the membership is committed."""
    from notifications.tasks import send_project_assignment_email

    logger.info(
        "User %s added to project %s by %s",
        user.pk, project.pk, assigned_by.pk,
    )
    transaction.on_commit(
        lambda: send_project_assignment_email.delay(project.pk, user.pk, assigned_by.pk)
    )


@receiver(project_member_detached)
def log_member_removed(sender, project, user, removed_by, **kwargs):
    logger.info(
        "User %s removed from project %s by %s",
        user.pk, project.pk, removed_by.pk,
    )


@receiver(pre_save, sender=Ticket)
def track_status_change(sender, instance, **kwargs):
    """Remember the stored status so post_save can tell whether it changed."""
    if not instance.pk:
        instance._previous_status_id = None
        return
    instance._previous_status_id = (
        Ticket.objects.filter(pk=instance.pk)
        .values_list('status_id', flat=True)
        .first()
    )


@receiver(post_save, sender=Ticket)
def record_status_history(sender, instance, created, **kwargs):
    if not created and instance.status_id == getattr(instance, '_previous_status_id', None):
        return
    if created and instance.status_id is None:
        return
    TicketHistory.objects.create(
        ticket=instance,
        status_id=instance.status_id,
        user=getattr(instance, '_changed_by', None) or instance.created_by,
    )
