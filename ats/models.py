"""
ATS Models - Positions, Applications and Interviews

Ownership chain used for authorization:
    Interview -> Application -> Position -> Agency

Applications are never hard-deleted in the normal flow; they move through
statuses. Interviews are append-only per application: rescheduling creates a
new row.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Position(models.Model):
    """Job opening posted by an agency."""

    class PositionStatus(models.TextChoices):
        DRAFT = 'DRAFT', _('Draft')
        OPEN = 'OPEN', _('Open')
        CLOSED = 'CLOSED', _('Closed')

    class Visibility(models.TextChoices):
        PUBLIC = 'PUBLIC', _('Public')
        PRIVATE = 'PRIVATE', _('Private')

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    agency = models.ForeignKey(
        'agencies.Agency',
        on_delete=models.CASCADE,
        related_name='positions'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=PositionStatus.choices,
        default=PositionStatus.OPEN,
        db_index=True,
    )
    visibility = models.CharField(
        max_length=20,
        choices=Visibility.choices,
        default=Visibility.PUBLIC,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='positions_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Position')
        verbose_name_plural = _('Positions')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['agency', 'status'], name='ats_pos_agency_status_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_open(self) -> bool:
        return self.status == self.PositionStatus.OPEN


class Application(models.Model):
    """
    A candidate's submission to a position.

    At most one application exists per (candidate, position) pair.
    """

    class ApplicationStatus(models.TextChoices):
        APPLIED = 'APPLIED', _('Applied')
        REVIEWING = 'REVIEWING', _('Reviewing')
        INTERVIEW = 'INTERVIEW', _('Interview')
        OFFER = 'OFFER', _('Offer')
        HIRED = 'HIRED', _('Hired')
        REJECTED = 'REJECTED', _('Rejected')
        WITHDRAWN = 'WITHDRAWN', _('Withdrawn')

    TERMINAL_STATUSES = {ApplicationStatus.HIRED, ApplicationStatus.REJECTED,
                         ApplicationStatus.WITHDRAWN}

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    candidate = models.ForeignKey(
        'accounts.CandidateProfile',
        on_delete=models.CASCADE,
        related_name='applications'
    )
    position = models.ForeignKey(
        Position,
        on_delete=models.CASCADE,
        related_name='applications'
    )
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.APPLIED,
        db_index=True,
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Application')
        verbose_name_plural = _('Applications')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['candidate', 'position'],
                name='unique_application_per_candidate_position'
            ),
        ]
        indexes = [
            models.Index(fields=['position', 'status'], name='ats_app_position_status_idx'),
        ]

    def __str__(self):
        return f"{self.candidate} -> {self.position} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


class Interview(models.Model):
    """A scheduled meeting tied to one application."""

    class InterviewMode(models.TextChoices):
        REMOTE = 'REMOTE', _('Remote')
        IN_PERSON = 'IN_PERSON', _('In person')
        PHONE = 'PHONE', _('Phone')

    class InterviewStatus(models.TextChoices):
        SCHEDULED = 'SCHEDULED', _('Scheduled')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELED = 'CANCELED', _('Canceled')

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    application = models.ForeignKey(
        Application,
        on_delete=models.CASCADE,
        related_name='interviews'
    )
    scheduled_at = models.DateTimeField()
    mode = models.CharField(max_length=20, choices=InterviewMode.choices)
    location = models.CharField(
        max_length=500,
        blank=True,
        help_text=_('Meeting URL for remote interviews, address for in-person ones')
    )
    details = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=InterviewStatus.choices,
        default=InterviewStatus.SCHEDULED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Interview')
        verbose_name_plural = _('Interviews')
        ordering = ['scheduled_at']
        indexes = [
            models.Index(fields=['application', 'scheduled_at'], name='ats_int_app_scheduled_idx'),
        ]

    def __str__(self):
        return f"Interview for {self.application_id} at {self.scheduled_at:%Y-%m-%d %H:%M}"
