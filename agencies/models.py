"""
Agencies Models

An ``Agency`` is the recruiting organization that owns positions. Users join
an agency through ``AgencyMember``; OWNER and MANAGER members may administer
the agency's pipeline.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Agency(models.Model):
    """Recruiting organization posting positions."""

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Agency')
        verbose_name_plural = _('Agencies')
        ordering = ['name']

    def __str__(self):
        return self.name


class AgencyMember(models.Model):
    """Membership of a user in an agency."""

    class Role(models.TextChoices):
        OWNER = 'OWNER', _('Owner')
        MANAGER = 'MANAGER', _('Manager')
        MEMBER = 'MEMBER', _('Member')

    MANAGING_ROLES = (Role.OWNER, Role.MANAGER)

    agency = models.ForeignKey(
        Agency,
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='agency_memberships'
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.MEMBER,
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Agency Member')
        verbose_name_plural = _('Agency Members')
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(
                fields=['agency', 'user'],
                name='unique_agency_membership'
            ),
        ]

    def __str__(self):
        return f"{self.user} @ {self.agency} ({self.role})"

    @property
    def can_manage(self) -> bool:
        return self.role in self.MANAGING_ROLES
