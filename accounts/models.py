"""
Accounts Models - Users of the tracking application.

This module defines:
- User: email-identified account with email verification state
- UserQuerySet: statistics annotations and verification filters

Roles are Django groups (see ``accounts.roles``); named permissions are
Django permissions attached to groups or directly to users.
"""

from datetime import timedelta

from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Count
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserQuerySet(models.QuerySet):
    """QuerySet helpers for users."""

    def with_statistics(self):
        """
        Annotate per-user counts used by the user admin and API.

        - projects_count: projects the user is a member of
        - created_tickets_count: tickets the user created
        - assigned_tickets_count: tickets the user is assigned to
        """
        return self.annotate(
            projects_count=Count('projects', distinct=True),
            created_tickets_count=Count('created_tickets', distinct=True),
            assigned_tickets_count=Count('assigned_tickets', distinct=True),
        )

    def verified(self):
        return self.filter(email_verified_at__isnull=False)

    def unverified(self):
        return self.filter(email_verified_at__isnull=True)

    def recently_verified(self, days=7):
        since = timezone.now() - timedelta(days=days)
        return self.filter(email_verified_at__gte=since).order_by('-email_verified_at')

    def with_role(self, role_name):
        return self.filter(groups__name=role_name).distinct()


class UserManager(BaseUserManager.from_queryset(UserQuerySet)):
    """Manager creating users identified by email."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError(_('The email address must be set'))
        email = self.normalize_email(email)
        if extra_fields.get('google_id') and not extra_fields.get('email_verified_at'):
            # OAuth providers have already verified the address
            extra_fields['email_verified_at'] = timezone.now()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('email_verified_at', timezone.now())

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Application user.

    The email address is the login identifier. ``email_verified_at`` records
    when the address was verified and is reset when the address changes.
    """

    username = None

    name = models.CharField(
        max_length=255,
        help_text=_('Display name')
    )
    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text=_('Email address (used for login)')
    )
    email_verified_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text=_('When the email address was verified')
    )
    google_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text=_('Google account identifier for OAuth logins')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['name', 'email']

    def __str__(self):
        return self.name or self.email

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else self.email

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None

    def mark_email_as_verified(self) -> bool:
        """
        Verify the email address.

        Already-verified users keep their original timestamp; returns True
        only when the state changed.
        """
        if self.has_verified_email():
            return False
        self.email_verified_at = timezone.now()
        self.save(update_fields=['email_verified_at', 'updated_at'])
        return True

    def mark_email_as_unverified(self) -> bool:
        if not self.has_verified_email():
            return False
        self.email_verified_at = None
        self.save(update_fields=['email_verified_at', 'updated_at'])
        return True

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def has_role(self, roles) -> bool:
        from core.roles import has_role
        return has_role(self, roles)

    @property
    def is_super_admin(self) -> bool:
        from core.roles import is_super_admin
        return is_super_admin(self)

    def get_role_names(self):
        return list(self.groups.order_by('name').values_list('name', flat=True))
