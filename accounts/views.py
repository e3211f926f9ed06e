"""
Accounts Views - self-service registration

Endpoints:
- POST /api/auth/register/candidate/  create a candidate account
- POST /api/auth/register/agency/     create an agency and its owner

Both respond with the new account and a JWT token pair, so the client is
signed in straight away.
"""

from rest_framework import permissions, views

from api.base import APIResponse
from notifications.services import get_notification_service

from .authentication import generate_tokens_for_user
from .serializers import (
    AgencyRegistrationSerializer,
    AgencySummarySerializer,
    CandidateRegistrationSerializer,
    UserSerializer,
)
from .services import RegistrationService


class RegistrationView(views.APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get_registration_service(self) -> RegistrationService:
        return RegistrationService(get_notification_service())


class CandidateRegisterView(RegistrationView):
    """POST: Create a candidate account with its profile."""

    def post(self, request):
        serializer = CandidateRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = self.get_registration_service().register_candidate(**serializer.validated_data)

        return APIResponse.created(
            data={
                'user': UserSerializer(user).data,
                'tokens': generate_tokens_for_user(user),
            },
            message='Registration successful.',
        )


class AgencyRegisterView(RegistrationView):
    """POST: Create an agency together with its owner account."""

    def post(self, request):
        serializer = AgencyRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = self.get_registration_service().register_agency(**serializer.validated_data)

        return APIResponse.created(
            data={
                'user': UserSerializer(registration.owner).data,
                'agency': AgencySummarySerializer(registration.agency).data,
                'tokens': generate_tokens_for_user(registration.owner),
            },
            message='Registration successful.',
        )
