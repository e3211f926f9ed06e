"""
ATS Services - Positions and Applications

Business operations behind the ATS API. Every operation takes the caller's
``AuthenticatedPrincipal`` explicitly. Ownership failures are reported as
``ResourceNotFoundError`` so that rows owned by other agencies are
indistinguishable from missing ones.
"""

import logging
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction

from accounts.models import CandidateProfile
from accounts.principal import AuthenticatedPrincipal
from agencies.services import get_member_user_ids
from api.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from notifications.models import Notification
from notifications.realtime import PIPELINE_APPLICATION_UPDATED
from notifications.services import NotificationService

from .models import Application, Position

logger = logging.getLogger(__name__)

ApplicationStatus = Application.ApplicationStatus

CANDIDATE_APPLICATIONS_LINK = '/dashboard/candidate/applications'


def application_event_payload(application: Application) -> Dict[str, Any]:
    """Payload of ``pipeline:application_updated`` events."""
    return {
        'jobId': application.position_id,
        'application': {
            'id': application.id,
            'status': application.status,
            'positionId': application.position_id,
            'candidateId': application.candidate_id,
        },
    }


def broadcast_pipeline_update(notification_service: NotificationService, application: Application) -> int:
    """Tell online members of the owning agency that an application changed."""
    member_ids = get_member_user_ids(application.position.agency_id)
    return notification_service.emit_to_users(
        member_ids,
        PIPELINE_APPLICATION_UPDATED,
        application_event_payload(application),
    )


# =============================================================================
# POSITIONS
# =============================================================================

class PositionService:
    """Agency-side management of positions."""

    @staticmethod
    def agency_positions(principal: AuthenticatedPrincipal):
        agency_id = principal.require_agency()
        return Position.objects.filter(agency_id=agency_id)

    @staticmethod
    def open_positions():
        """Positions candidates may browse and apply to."""
        return Position.objects.filter(
            status=Position.PositionStatus.OPEN,
            visibility=Position.Visibility.PUBLIC,
        ).select_related('agency')

    @staticmethod
    def create_position(principal: AuthenticatedPrincipal, **fields) -> Position:
        agency_id = principal.require_agency()
        position = Position.objects.create(
            agency_id=agency_id,
            created_by_id=principal.user_id,
            **fields
        )
        logger.info(f"Position created: {position.id} by agency {agency_id}")
        return position

    @staticmethod
    def get_agency_position(principal: AuthenticatedPrincipal, position_id) -> Position:
        agency_id = principal.require_agency()
        position = Position.objects.filter(pk=position_id, agency_id=agency_id).first()
        if position is None:
            raise ResourceNotFoundError(
                detail="Position not found or does not belong to this agency.",
                resource_type='Position',
            )
        return position


# =============================================================================
# APPLICATIONS
# =============================================================================

class ApplicationService:
    """
    Candidate applications and the agency pipeline.
    """

    def __init__(self, notification_service: NotificationService):
        self.notification_service = notification_service

    def apply(self, principal: AuthenticatedPrincipal, position_id) -> Application:
        """
        Candidate applies to an open position.

        Raises:
            PermissionDeniedError: If the caller has no candidate profile
            ResourceNotFoundError: If the position is not open for applications
            ResourceAlreadyExistsError: On a second application to the same position
        """
        candidate_id = principal.require_candidate()

        position = PositionService.open_positions().filter(pk=position_id).first()
        if position is None:
            raise ResourceNotFoundError(resource_type='Position', resource_id=position_id)

        return self._create(
            candidate_id=candidate_id,
            position=position,
            status=ApplicationStatus.APPLIED,
            duplicate_message="You have already applied for this position.",
        )

    def add_to_pipeline(self, principal: AuthenticatedPrincipal, position_id, candidate_id) -> Application:
        """
        Agency adds a candidate to one of its own positions.

        Raises:
            ResourceNotFoundError: If the position is not owned by the agency
                or the candidate does not exist
            ResourceAlreadyExistsError: If the candidate is already in the pipeline
        """
        position = PositionService.get_agency_position(principal, position_id)

        if not CandidateProfile.objects.filter(pk=candidate_id).exists():
            raise ResourceNotFoundError(resource_type='Candidate', resource_id=candidate_id)

        return self._create(
            candidate_id=candidate_id,
            position=position,
            status=ApplicationStatus.REVIEWING,
            duplicate_message="This candidate has already been added to this job pipeline.",
        )

    def _create(self, candidate_id, position: Position, status: str, duplicate_message: str) -> Application:
        if Application.objects.filter(candidate_id=candidate_id, position=position).exists():
            raise ResourceAlreadyExistsError(detail=duplicate_message, resource_type='Application')

        try:
            with transaction.atomic():
                application = Application.objects.create(
                    candidate_id=candidate_id,
                    position=position,
                    status=status,
                )
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same pair
            raise ResourceAlreadyExistsError(detail=duplicate_message, resource_type='Application') from e

        logger.info(
            f"Application created: {application.id} for candidate {candidate_id} "
            f"on position {position.id} ({status})"
        )
        return application

    def get_application_details(self, principal: AuthenticatedPrincipal, application_id) -> Application:
        """
        Application of one of the caller's positions, with candidate and position.

        Raises:
            ResourceNotFoundError: If missing or owned by another agency
        """
        agency_id = principal.require_agency()
        application = (
            Application.objects
            .select_related('position__agency', 'candidate__user')
            .prefetch_related('interviews')
            .filter(pk=application_id, position__agency_id=agency_id)
            .first()
        )
        if application is None:
            raise ResourceNotFoundError(
                detail="Application not found or you do not have permission to view it.",
                resource_type='Application',
            )
        return application

    def update_application(
        self,
        principal: AuthenticatedPrincipal,
        application_id,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Application:
        """
        Change the status and/or notes of an application.

        When the status changes the candidate is notified and online agency
        members receive a pipeline update; both are best-effort.
        """
        agency_id = principal.require_agency()

        with transaction.atomic():
            application = (
                Application.objects
                .select_for_update(of=('self',))
                .select_related('position', 'candidate')
                .filter(pk=application_id, position__agency_id=agency_id)
                .first()
            )
            if application is None:
                raise ResourceNotFoundError(
                    detail="Application not found or you do not have permission to update it.",
                    resource_type='Application',
                )

            previous_status = application.status
            update_fields = ['updated_at']
            if status is not None:
                application.status = status
                update_fields.append('status')
            if notes is not None:
                application.notes = notes
                update_fields.append('notes')
            application.save(update_fields=update_fields)

        if status is not None and status != previous_status:
            logger.info(
                f"Application {application.id} moved from {previous_status} to {status} "
                f"by user {principal.user_id}"
            )
            self._notify_status_change(application)

        return application

    def _notify_status_change(self, application: Application):
        try:
            self.notification_service.create_notification(
                user_id=application.candidate.user_id,
                message=f'Your application for "{application.position.title}" was updated to {application.status}.',
                link=CANDIDATE_APPLICATIONS_LINK,
                notification_type=Notification.NotificationType.GENERIC,
            )
        except Exception:
            logger.exception(f"Failed to notify candidate about application {application.id}")

        try:
            broadcast_pipeline_update(self.notification_service, application)
        except Exception:
            logger.exception(f"Failed to broadcast pipeline update for application {application.id}")

    # ==================== LISTINGS ====================

    @staticmethod
    def candidate_applications(principal: AuthenticatedPrincipal):
        candidate_id = principal.require_candidate()
        return (
            Application.objects
            .filter(candidate_id=candidate_id)
            .select_related('position__agency')
            .prefetch_related('interviews')
        )

    @staticmethod
    def agency_applications(principal: AuthenticatedPrincipal):
        agency_id = principal.require_agency()
        return (
            Application.objects
            .filter(position__agency_id=agency_id)
            .select_related('position', 'candidate__user')
            .prefetch_related('interviews')
        )

    @staticmethod
    def get_interview_pipeline(principal: AuthenticatedPrincipal, position_id=None) -> Dict[str, List]:
        """
        Applications of the agency currently in the INTERVIEW stage.

        Returns:
            Dict with ``scheduled`` and ``unscheduled`` application lists
            (split on whether any interview exists) and ``jobs_in_pipeline``,
            the distinct positions involved.
        """
        agency_id = principal.require_agency()
        queryset = (
            Application.objects
            .filter(position__agency_id=agency_id, status=ApplicationStatus.INTERVIEW)
            .select_related('position', 'candidate__user')
            .prefetch_related('interviews')
            .order_by('-created_at', '-id')
        )
        if position_id:
            queryset = queryset.filter(position_id=position_id)

        applications = list(queryset)

        jobs_in_pipeline = []
        seen = set()
        for application in applications:
            if application.position_id not in seen:
                seen.add(application.position_id)
                jobs_in_pipeline.append({'id': application.position_id, 'title': application.position.title})

        return {
            'scheduled': [a for a in applications if a.interviews.all()],
            'unscheduled': [a for a in applications if not a.interviews.all()],
            'jobs_in_pipeline': jobs_in_pipeline,
        }
