"""
Tests for MessagingService.

USAGE:
    pytest messaging/tests/test_services.py -v
"""

from unittest import mock

import pytest
from rest_framework.exceptions import ValidationError

from accounts.principal import AuthenticatedPrincipal
from api.exceptions import ResourceNotFoundError
from messaging.models import Message
from messaging.services import MessagingService, display_name
from notifications.models import Notification
from notifications.realtime import MESSAGES_READ, NEW_MESSAGE, NEW_MESSAGE_NOTIFICATION


@pytest.fixture
def messaging_service(notification_service):
    return MessagingService(notification_service)


@pytest.fixture
def pair(scheduling_scenario):
    """Agency owner of 'Acme Talent' and candidate Chidi Okafor."""
    return {
        'agency_user': scheduling_scenario['ag1_owner'].user,
        'agency_principal': scheduling_scenario['ag1_principal'],
        'candidate_user': scheduling_scenario['C1'].user,
        'candidate_principal': AuthenticatedPrincipal.from_user(scheduling_scenario['C1'].user),
    }


@pytest.mark.django_db
class TestSendMessage:

    def test_message_is_stored(self, messaging_service, pair):
        message = messaging_service.send_message(
            pair['agency_principal'], pair['candidate_user'].id, 'Are you available on Friday?'
        )

        stored = Message.objects.get(pk=message.pk)
        assert stored.sender_id == pair['agency_user'].id
        assert stored.recipient_id == pair['candidate_user'].id
        assert stored.body == 'Are you available on Friday?'
        assert stored.is_read is False

    def test_recipient_gets_message_notification(self, messaging_service, pair):
        messaging_service.send_message(pair['agency_principal'], pair['candidate_user'].id, 'Hello')

        notification = Notification.objects.get(recipient=pair['candidate_user'])
        assert notification.notification_type == Notification.NotificationType.MESSAGE
        assert notification.message == 'You have a new message from Acme Talent'
        assert notification.link == f"/inbox?with={pair['agency_user'].id}"
        assert notification.meta == {'lastMessage': 'Hello', 'fromId': pair['agency_user'].id}

    def test_online_recipient_gets_live_events(
        self, messaging_service, pair, presence_registry, recording_gateway
    ):
        presence_registry.register(pair['candidate_user'].id, 'ws.candidate')

        message = messaging_service.send_message(pair['agency_principal'], pair['candidate_user'].id, 'Hello')

        events = recording_gateway.events_for('ws.candidate')
        assert [event for event, _ in events] == [NEW_MESSAGE, NEW_MESSAGE_NOTIFICATION]
        assert events[0][1]['id'] == message.id
        assert events[0][1]['fromId'] == pair['agency_user'].id

    def test_offline_recipient_gets_stored_notification_only(
        self, messaging_service, pair, recording_gateway
    ):
        messaging_service.send_message(pair['agency_principal'], pair['candidate_user'].id, 'Hello')

        assert recording_gateway.emitted == []
        assert Notification.objects.filter(recipient=pair['candidate_user']).count() == 1

    def test_sender_name_for_candidate(self, messaging_service, pair):
        messaging_service.send_message(pair['candidate_principal'], pair['agency_user'].id, 'Thanks!')

        notification = Notification.objects.get(recipient=pair['agency_user'])
        assert notification.message == 'You have a new message from Chidi Okafor'

    def test_cannot_message_self(self, messaging_service, pair):
        with pytest.raises(ValidationError):
            messaging_service.send_message(pair['agency_principal'], pair['agency_user'].id, 'Me')

        assert Message.objects.count() == 0

    def test_unknown_recipient(self, messaging_service, pair):
        with pytest.raises(ResourceNotFoundError):
            messaging_service.send_message(pair['agency_principal'], 999999, 'Hello?')

    def test_inactive_recipient(self, messaging_service, pair):
        recipient = pair['candidate_user']
        recipient.is_active = False
        recipient.save(update_fields=['is_active'])

        with pytest.raises(ResourceNotFoundError):
            messaging_service.send_message(pair['agency_principal'], recipient.id, 'Hello?')

    def test_notification_failure_keeps_message(self, messaging_service, notification_service, pair, caplog):
        with mock.patch.object(
            notification_service, 'create_notification', side_effect=RuntimeError('db hiccup')
        ):
            message = messaging_service.send_message(
                pair['agency_principal'], pair['candidate_user'].id, 'Hello'
            )

        assert Message.objects.filter(pk=message.pk).exists()
        assert f'Failed to notify user {pair["candidate_user"].id} about message {message.id}' in caplog.text


@pytest.mark.django_db
class TestConversations:

    def test_conversation_in_both_directions(self, messaging_service, pair, message_factory):
        agency_user, candidate_user = pair['agency_user'], pair['candidate_user']
        first = message_factory(sender=agency_user, recipient=candidate_user, body='Hi')
        second = message_factory(sender=candidate_user, recipient=agency_user, body='Hello')
        message_factory(sender=agency_user, body='Someone else')

        thread = messaging_service.get_conversation(pair['agency_principal'], candidate_user.id)

        assert [m.id for m in thread] == [first.id, second.id]

    def test_conversation_with_unknown_user(self, messaging_service, pair):
        with pytest.raises(ResourceNotFoundError):
            messaging_service.get_conversation(pair['agency_principal'], 999999)

    def test_inbox_has_one_entry_per_partner(self, messaging_service, pair, message_factory, user_factory):
        agency_user, candidate_user = pair['agency_user'], pair['candidate_user']
        other = user_factory()
        message_factory(sender=agency_user, recipient=candidate_user, body='Old')
        message_factory(sender=other, recipient=agency_user, body='From other')
        latest = message_factory(sender=candidate_user, recipient=agency_user, body='Newest')

        inbox = messaging_service.get_conversations(pair['agency_principal'])

        assert [entry.other_user.id for entry in inbox] == [candidate_user.id, other.id]
        assert inbox[0].last_message.id == latest.id
        assert inbox[0].unread_count == 1
        assert inbox[1].unread_count == 1

    def test_empty_inbox(self, messaging_service, pair):
        assert messaging_service.get_conversations(pair['agency_principal']) == []

    def test_mark_conversation_as_read(
        self, messaging_service, pair, message_factory, presence_registry, recording_gateway
    ):
        agency_user, candidate_user = pair['agency_user'], pair['candidate_user']
        message_factory(sender=candidate_user, recipient=agency_user)
        message_factory(sender=candidate_user, recipient=agency_user)
        mine = message_factory(sender=agency_user, recipient=candidate_user)
        presence_registry.register(candidate_user.id, 'ws.candidate')

        count = messaging_service.mark_conversation_as_read(pair['agency_principal'], candidate_user.id)

        assert count == 2
        assert not Message.objects.filter(recipient=agency_user, is_read=False).exists()
        mine.refresh_from_db()
        assert mine.is_read is False
        assert recording_gateway.events_for('ws.candidate') == [
            (MESSAGES_READ, {'readerId': agency_user.id, 'count': 2}),
        ]

    def test_mark_read_with_nothing_unread_is_silent(
        self, messaging_service, pair, presence_registry, recording_gateway
    ):
        presence_registry.register(pair['candidate_user'].id, 'ws.candidate')

        count = messaging_service.mark_conversation_as_read(
            pair['agency_principal'], pair['candidate_user'].id
        )

        assert count == 0
        assert recording_gateway.emitted == []


@pytest.mark.django_db
class TestDisplayName:

    def test_candidate_profile_name(self, candidate_profile):
        assert display_name(candidate_profile.user) == candidate_profile.full_name

    def test_agency_name(self, agency_member):
        assert display_name(agency_member.user) == agency_member.agency.name

    def test_falls_back_to_email(self, user_factory):
        user = user_factory()
        assert display_name(user) == user.email
