"""
Accounts Models - Users and Candidate Profiles

A single ``User`` model serves every role on the marketplace. Candidates get
a ``CandidateProfile``; agency staff are linked to their agency through
``agencies.AgencyMember``.
"""

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Marketplace user account.

    Email is the login identifier; ``username`` is kept as a display handle.
    """

    class Role(models.TextChoices):
        CANDIDATE = 'CANDIDATE', _('Candidate')
        AGENCY = 'AGENCY', _('Agency')
        ADMIN = 'ADMIN', _('Administrator')

    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        help_text=_('Public identifier for this user')
    )
    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text=_('Email address (used for login)')
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CANDIDATE,
        db_index=True,
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')

    def __str__(self):
        return self.email

    @property
    def is_candidate(self) -> bool:
        return self.role == self.Role.CANDIDATE

    @property
    def is_agency_user(self) -> bool:
        return self.role == self.Role.AGENCY


class CandidateProfile(models.Model):
    """Public profile of a job seeker; the subject of applications."""

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='candidate_profile'
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=30, blank=True)
    headline = models.CharField(max_length=200, blank=True)
    summary = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Candidate Profile')
        verbose_name_plural = _('Candidate Profiles')
        ordering = ['-created_at']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
