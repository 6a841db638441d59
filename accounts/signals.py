"""
Accounts Signal Handlers

- pre_save on User: reset email verification when the address changes
"""

from django.db.models.signals import pre_save
from django.dispatch import receiver

from .models import User


@receiver(pre_save, sender=User)
def reset_verification_on_email_change(sender, instance, **kwargs):
    """
    Clear ``email_verified_at`` when the email address changes.

    A save that changes the address and sets a new verification timestamp at
    the same time keeps the new timestamp.
    """
    if not instance.pk:
        return
    try:
        old_instance = User.objects.only('email', 'email_verified_at').get(pk=instance.pk)
    except User.DoesNotExist:
        return

    if old_instance.email == instance.email:
        return
    if instance.email_verified_at != old_instance.email_verified_at:
        return
    instance.email_verified_at = None
