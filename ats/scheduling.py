"""
ATS Interview Scheduling

``InterviewSchedulingService.schedule_interview`` is the one multi-write
operation of the ATS:

1. Inside a single database transaction: verify that the requesting agency
   owns the application's position, create the Interview and move the
   Application to INTERVIEW. Readers see both writes or neither.
2. After the transaction: notify the candidate (stored notification plus a
   live push when online), push ``pipeline:application_updated`` to online
   agency members and queue the invitation e-mail on commit.

Step 2 is best-effort. Its failures are logged and never undo step 1.

Scheduling is not idempotent: each call creates a new Interview row, which
is how rescheduling is recorded.
"""

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict

from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.exceptions import ValidationError

from accounts.principal import AuthenticatedPrincipal
from api.exceptions import ResourceNotFoundError, TransactionFailedError
from notifications.models import Notification
from notifications.services import NotificationService

from .models import Application, Interview
from .services import broadcast_pipeline_update
from .tasks import send_interview_invitation_email

logger = logging.getLogger(__name__)

InterviewMode = Interview.InterviewMode

# Spellings sent by older clients
MODE_ALIASES = {
    'INPERSON': InterviewMode.IN_PERSON,
}


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def parse_scheduled_at(value: Any) -> datetime:
    """
    Parse the interview start time.

    Accepts an aware or naive ``datetime`` or an ISO-8601 string; naive
    values are taken as UTC.

    Raises:
        ValidationError: If the value is missing or not a valid point in time
    """
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parse_datetime(value.strip())
        except ValueError:
            parsed = None

    if parsed is None:
        raise ValidationError({'scheduledAt': ['Enter a valid ISO-8601 date and time.']})

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def normalize_mode(value: Any) -> str:
    """
    Raises:
        ValidationError: If the mode is missing or unknown
    """
    mode = MODE_ALIASES.get(value, value)
    if mode not in InterviewMode.values:
        raise ValidationError({
            'mode': [f"Invalid interview mode '{value}'. Allowed: {', '.join(InterviewMode.values)}."]
        })
    return mode


def interview_message(agency_name: str, position_title: str) -> str:
    return f"You have an interview with {agency_name} for the {position_title} position."


def interview_status_link(application_id) -> str:
    return f"/dashboard/candidate/applications/{application_id}/status"


# =============================================================================
# INTERVIEW SCHEDULING SERVICE
# =============================================================================

class InterviewSchedulingService:
    """
    Schedules interviews and fans the change out to the people concerned.
    """

    def __init__(self, notification_service: NotificationService, send_invitations: bool = True):
        self.notification_service = notification_service
        self.send_invitations = send_invitations

    def schedule_interview(
        self,
        principal: AuthenticatedPrincipal,
        application_id,
        scheduled_at,
        mode,
        location: str = '',
        details: str = '',
    ) -> Interview:
        """
        Schedule an interview for one of the agency's applications.

        Args:
            principal: Caller; must be a member of the owning agency
            application_id: Application to interview for
            scheduled_at: Start time (datetime or ISO-8601 string)
            mode: One of ``Interview.InterviewMode``
            location: Meeting URL or address
            details: Free-text instructions for the candidate

        Returns:
            The created Interview

        Raises:
            ValidationError: Malformed input; raised before any write
            PermissionDeniedError: Caller is not an agency member
            ResourceNotFoundError: Application missing or owned by another agency
            TransactionFailedError: The database aborted the transaction
        """
        agency_id = principal.require_agency()
        scheduled_at = parse_scheduled_at(scheduled_at)
        mode = normalize_mode(mode)

        try:
            with transaction.atomic():
                application = (
                    Application.objects
                    .select_for_update(of=('self',))
                    .select_related('position__agency', 'candidate')
                    .filter(pk=application_id, position__agency_id=agency_id)
                    .first()
                )
                if application is None:
                    logger.warning(
                        f"SECURITY: Agency {agency_id} (user {principal.user_id}) attempted to schedule "
                        f"an interview for application {application_id} it does not own"
                    )
                    raise ResourceNotFoundError(
                        detail="Application not found or you do not have permission to modify it.",
                        resource_type='Application',
                    )

                interview = Interview.objects.create(
                    application=application,
                    scheduled_at=scheduled_at,
                    mode=mode,
                    location=location or '',
                    details=details or '',
                )

                application.status = Application.ApplicationStatus.INTERVIEW
                application.save(update_fields=['status', 'updated_at'])
        except DatabaseError as e:
            logger.exception(f"Transaction failed while scheduling interview for application {application_id}")
            raise TransactionFailedError() from e

        logger.info(f"Interview scheduled: {interview.id} for application {application.id}")

        self._fan_out(application, interview)
        return interview

    def _fan_out(self, application: Application, interview: Interview) -> Dict[str, Any]:
        """Best-effort side effects of a committed scheduling call."""
        outcome = {'candidate_notified': False, 'members_reached': 0, 'invitation_queued': False}
        agency = application.position.agency

        try:
            result = self.notification_service.create_notification(
                user_id=application.candidate.user_id,
                message=interview_message(agency.name, application.position.title),
                link=interview_status_link(application.id),
                notification_type=Notification.NotificationType.GENERIC,
            )
            outcome['candidate_notified'] = True
            if result.error_message:
                logger.warning(f"Interview {interview.id}: candidate notification stored but not pushed")
        except Exception:
            logger.exception(f"Failed to notify candidate about interview {interview.id}")

        try:
            outcome['members_reached'] = broadcast_pipeline_update(self.notification_service, application)
        except Exception:
            logger.exception(f"Failed to push pipeline update for interview {interview.id}")

        if self.send_invitations:
            # Queued once the enclosing transaction, if any, commits
            transaction.on_commit(lambda: self._queue_invitation(interview.id))
            outcome['invitation_queued'] = True

        return outcome

    def _queue_invitation(self, interview_id: int) -> None:
        try:
            send_interview_invitation_email.delay(interview_id)
        except Exception:
            logger.exception(f"Failed to queue invitation e-mail for interview {interview_id}")
