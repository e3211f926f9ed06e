"""
ATS Views - REST API ViewSets for positions, applications and interviews

Views translate HTTP into service calls: they validate input with the
serializers, resolve the caller into an ``AuthenticatedPrincipal`` and hand
both to ``ats.services`` / ``ats.scheduling``.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins
from rest_framework.decorators import action
from rest_framework.response import Response

from api.base import APIResponse, PrincipalViewSet
from api.exceptions import ResourceNotFoundError
from notifications.services import get_notification_service

from .filters import ApplicationFilter, InterviewFilter, PositionFilter
from .models import Interview
from .scheduling import InterviewSchedulingService
from .serializers import (
    AddToPipelineSerializer,
    ApplicationSerializer,
    ApplicationUpdateSerializer,
    ApplySerializer,
    CandidateApplicationSerializer,
    InterviewPipelineQuerySerializer,
    InterviewPipelineSerializer,
    InterviewSerializer,
    PositionSerializer,
    ScheduleInterviewSerializer,
)
from .services import ApplicationService, PositionService

logger = logging.getLogger(__name__)


# ==================== POSITIONS ====================

class PositionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    PrincipalViewSet,
):
    """
    ViewSet for the agency's own positions.

    list / retrieve / create / update: agency members only
    open: public, open positions for candidates to browse
    """
    serializer_class = PositionSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = PositionFilter
    search_fields = ['title', 'description']
    ordering_fields = ['created_at', 'title']
    ordering = ['-created_at']

    def get_queryset(self):
        if self.action == 'open':
            return PositionService.open_positions()
        return PositionService.agency_positions(self.get_principal()).select_related('agency')

    def perform_create(self, serializer):
        serializer.instance = PositionService.create_position(
            self.get_principal(),
            **serializer.validated_data
        )

    @action(detail=False, methods=['get'])
    def open(self, request):
        """Open, public positions."""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(PositionSerializer(page, many=True).data)
        return Response(PositionSerializer(queryset, many=True).data)


# ==================== APPLICATIONS ====================

class ApplicationViewSet(
    mixins.ListModelMixin,
    PrincipalViewSet,
):
    """
    ViewSet for applications.

    Agency members see the applications of their positions; candidates see
    their own.

    Actions:
    - apply: candidate applies to an open position
    - pipeline: agency adds a candidate to one of its positions
    - schedule_interview: agency schedules an interview
    - interview_pipeline: agency's applications in the INTERVIEW stage
    """
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ApplicationFilter
    ordering_fields = ['created_at', 'updated_at', 'status']
    ordering = ['-created_at']

    def get_application_service(self) -> ApplicationService:
        return ApplicationService(get_notification_service())

    def get_scheduling_service(self) -> InterviewSchedulingService:
        return InterviewSchedulingService(get_notification_service())

    def get_queryset(self):
        principal = self.get_principal()
        if principal.is_agency_member:
            return ApplicationService.agency_applications(principal)
        return ApplicationService.candidate_applications(principal)

    def get_serializer_class(self):
        if self.get_principal().is_agency_member:
            return ApplicationSerializer
        return CandidateApplicationSerializer

    def retrieve(self, request, pk=None):
        principal = self.get_principal()
        if principal.is_agency_member:
            application = self.get_application_service().get_application_details(principal, pk)
            return APIResponse.success(data=ApplicationSerializer(application).data)

        application = ApplicationService.candidate_applications(principal).filter(pk=pk).first()
        if application is None:
            raise ResourceNotFoundError(resource_type='Application', resource_id=pk)
        return APIResponse.success(data=CandidateApplicationSerializer(application).data)

    def partial_update(self, request, pk=None):
        serializer = ApplicationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = self.get_application_service().update_application(
            self.get_principal(),
            pk,
            **serializer.validated_data
        )
        return APIResponse.success(data=ApplicationSerializer(application).data)

    @action(detail=False, methods=['post'])
    def apply(self, request):
        """Candidate applies to a position."""
        serializer = ApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = self.get_application_service().apply(
            self.get_principal(),
            serializer.validated_data['position_id'],
        )
        return APIResponse.created(data=CandidateApplicationSerializer(application).data)

    @action(detail=False, methods=['post'])
    def pipeline(self, request):
        """Agency adds a candidate to the pipeline of one of its positions."""
        serializer = AddToPipelineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = self.get_application_service().add_to_pipeline(
            self.get_principal(),
            serializer.validated_data['position_id'],
            serializer.validated_data['candidate_id'],
        )
        return APIResponse.created(data=ApplicationSerializer(application).data)

    @action(detail=True, methods=['post'], url_path='schedule-interview')
    def schedule_interview(self, request, pk=None):
        """Schedule an interview for an application of the caller's agency."""
        serializer = ScheduleInterviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        interview = self.get_scheduling_service().schedule_interview(
            self.get_principal(),
            pk,
            **serializer.validated_data
        )
        return APIResponse.created(data=InterviewSerializer(interview).data)

    @action(detail=False, methods=['get'], url_path='interview-pipeline')
    def interview_pipeline(self, request):
        """Applications in the interview stage, split by scheduling state."""
        params = InterviewPipelineQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        pipeline = ApplicationService.get_interview_pipeline(
            self.get_principal(),
            position_id=params.validated_data.get('position'),
        )
        return APIResponse.success(data=InterviewPipelineSerializer(pipeline).data)


# ==================== INTERVIEWS ====================

class InterviewViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    PrincipalViewSet,
):
    """
    Read-only ViewSet for interviews visible to the caller.
    """
    serializer_class = InterviewSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = InterviewFilter
    ordering_fields = ['scheduled_at', 'created_at']
    ordering = ['scheduled_at']

    def get_queryset(self):
        principal = self.get_principal()
        queryset = Interview.objects.select_related('application')
        if principal.is_agency_member:
            return queryset.filter(application__position__agency_id=principal.agency_id)
        if principal.is_candidate:
            return queryset.filter(application__candidate_id=principal.candidate_id)
        return queryset.none()
