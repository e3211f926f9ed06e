"""
PPALink Test Configuration - pytest fixtures and factories

This module provides:
- factory_boy factories for users, candidates, agencies, positions,
  applications, interviews, notifications and messages
- Factory fixtures (``*_factory``) and DRF API clients
- Real-time test doubles: an isolated presence registry and a gateway that
  records emitted events instead of publishing them

RUNNING TESTS:
# Run all tests
pytest -v

# Run by app
pytest ats -v
pytest notifications -v

# Run by marker
pytest -m integration -v
pytest -m websocket -v
"""

import uuid
from datetime import timedelta

import factory
import pytest
from django.apps import apps
from django.utils import timezone
from factory.django import DjangoModelFactory

from accounts.principal import AuthenticatedPrincipal
from notifications.presence import PresenceRegistry
from notifications.realtime import NotificationDeliveryError, RealtimeGateway
from notifications.services import NotificationService


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for the marketplace User model."""

    class Meta:
        model = 'accounts.User'
        django_get_or_create = ('email',)

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    password = factory.django.Password('testpass123')
    role = 'CANDIDATE'
    is_active = True


class AgencyUserFactory(UserFactory):
    """User working for an agency."""

    role = 'AGENCY'


class CandidateProfileFactory(DjangoModelFactory):
    """Factory for CandidateProfile."""

    class Meta:
        model = 'accounts.CandidateProfile'

    user = factory.SubFactory(UserFactory, role='CANDIDATE')
    first_name = factory.LazyAttribute(lambda o: o.user.first_name or 'Ada')
    last_name = factory.LazyAttribute(lambda o: o.user.last_name or 'Lovelace')
    headline = factory.Faker('job')


# ============================================================================
# AGENCY FACTORIES
# ============================================================================

class AgencyFactory(DjangoModelFactory):
    """Factory for Agency."""

    class Meta:
        model = 'agencies.Agency'

    name = factory.Sequence(lambda n: f"Agency {n}")
    description = factory.Faker('catch_phrase')
    website = factory.Faker('url')


class AgencyMemberFactory(DjangoModelFactory):
    """Factory for AgencyMember (OWNER by default)."""

    class Meta:
        model = 'agencies.AgencyMember'

    agency = factory.SubFactory(AgencyFactory)
    user = factory.SubFactory(AgencyUserFactory)
    role = 'OWNER'


# ============================================================================
# ATS FACTORIES
# ============================================================================

class PositionFactory(DjangoModelFactory):
    """Factory for Position."""

    class Meta:
        model = 'ats.Position'

    agency = factory.SubFactory(AgencyFactory)
    title = factory.Faker('job')
    description = factory.Faker('paragraph')
    status = 'OPEN'
    visibility = 'PUBLIC'


class ApplicationFactory(DjangoModelFactory):
    """Factory for Application."""

    class Meta:
        model = 'ats.Application'

    candidate = factory.SubFactory(CandidateProfileFactory)
    position = factory.SubFactory(PositionFactory)
    status = 'APPLIED'


class InterviewFactory(DjangoModelFactory):
    """Factory for Interview."""

    class Meta:
        model = 'ats.Interview'

    application = factory.SubFactory(ApplicationFactory, status='INTERVIEW')
    scheduled_at = factory.LazyFunction(lambda: timezone.now() + timedelta(days=3))
    mode = 'REMOTE'
    location = 'https://meet.example/abc'


# ============================================================================
# NOTIFICATION FACTORIES
# ============================================================================

class NotificationFactory(DjangoModelFactory):
    """Factory for Notification."""

    class Meta:
        model = 'notifications.Notification'

    recipient = factory.SubFactory(UserFactory)
    message = factory.Faker('sentence')
    link = '/dashboard'
    notification_type = 'GENERIC'
    is_read = False


class MessageFactory(DjangoModelFactory):
    """Factory for a direct Message."""

    class Meta:
        model = 'messaging.Message'

    sender = factory.SubFactory(UserFactory)
    recipient = factory.SubFactory(UserFactory)
    body = factory.Faker('sentence')
    is_read = False


# ============================================================================
# REAL-TIME TEST DOUBLES
# ============================================================================

class RecordingGateway(RealtimeGateway):
    """Gateway that records events instead of publishing them."""

    def __init__(self, fail=False):
        super().__init__(channel_layer=None)
        self.fail = fail
        self.emitted = []
        self.broadcasts = []

    def emit(self, channel_names, event, payload):
        if self.fail:
            raise NotificationDeliveryError("channel layer unavailable")
        channel_names = list(channel_names)
        for channel_name in channel_names:
            self.emitted.append((channel_name, event, payload))
        return len(channel_names)

    def broadcast(self, group, event, payload):
        if self.fail:
            raise NotificationDeliveryError("channel layer unavailable")
        self.broadcasts.append((group, event, payload))

    def events_for(self, channel_name):
        return [(event, payload) for name, event, payload in self.emitted if name == channel_name]


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def agency_user_factory(db):
    return AgencyUserFactory


@pytest.fixture
def candidate_profile_factory(db):
    return CandidateProfileFactory


@pytest.fixture
def agency_factory(db):
    return AgencyFactory


@pytest.fixture
def agency_member_factory(db):
    return AgencyMemberFactory


@pytest.fixture
def position_factory(db):
    return PositionFactory


@pytest.fixture
def application_factory(db):
    return ApplicationFactory


@pytest.fixture
def interview_factory(db):
    return InterviewFactory


@pytest.fixture
def notification_factory(db):
    return NotificationFactory


@pytest.fixture
def message_factory(db):
    return MessageFactory


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def presence_registry():
    """An empty presence registry owned by the test."""
    return PresenceRegistry()


@pytest.fixture
def recording_gateway():
    return RecordingGateway()


@pytest.fixture
def notification_service(presence_registry, recording_gateway):
    return NotificationService(presence=presence_registry, gateway=recording_gateway)


@pytest.fixture(autouse=True)
def reset_app_presence_registry():
    """Keep the process-wide registry from leaking between tests."""
    yield
    apps.get_app_config('notifications').presence_registry.clear()


# ============================================================================
# MARKETPLACE FIXTURES
# ============================================================================

@pytest.fixture
def agency_member(db):
    """OWNER of a freshly created agency."""
    return AgencyMemberFactory()


@pytest.fixture
def agency_principal(agency_member):
    return AuthenticatedPrincipal.from_user(agency_member.user)


@pytest.fixture
def candidate_profile(db):
    return CandidateProfileFactory()


@pytest.fixture
def candidate_principal(candidate_profile):
    return AuthenticatedPrincipal.from_user(candidate_profile.user)


@pytest.fixture
def scheduling_scenario(db):
    """
    Two agencies and one application:

    - AG1 owns position P1; AG2 owns nothing relevant
    - C1 applied to P1, producing application A1 in status APPLIED
    """
    ag1 = AgencyFactory(name='Acme Talent')
    ag2 = AgencyFactory(name='Rival Staffing')
    ag1_owner = AgencyMemberFactory(agency=ag1, role='OWNER')
    ag1_manager = AgencyMemberFactory(agency=ag1, role='MANAGER')
    ag2_owner = AgencyMemberFactory(agency=ag2, role='OWNER')
    p1 = PositionFactory(agency=ag1, title='Backend Engineer')
    c1 = CandidateProfileFactory(first_name='Chidi', last_name='Okafor')
    a1 = ApplicationFactory(candidate=c1, position=p1, status='APPLIED')

    return {
        'AG1': ag1,
        'AG2': ag2,
        'P1': p1,
        'C1': c1,
        'A1': a1,
        'ag1_owner': ag1_owner,
        'ag1_manager': ag1_manager,
        'ag2_owner': ag2_owner,
        'ag1_principal': AuthenticatedPrincipal.from_user(ag1_owner.user),
        'ag2_principal': AuthenticatedPrincipal.from_user(ag2_owner.user),
    }


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def agency_api_client(api_client, agency_member):
    """API client authenticated as an agency owner."""
    api_client.force_authenticate(user=agency_member.user)
    return api_client


@pytest.fixture
def candidate_api_client(api_client, candidate_profile):
    """API client authenticated as a candidate."""
    api_client.force_authenticate(user=candidate_profile.user)
    return api_client
