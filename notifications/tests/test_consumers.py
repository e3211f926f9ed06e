"""
WebSocket tests for the real-time consumer.

USAGE:
    pytest notifications/tests/test_consumers.py -v
    pytest -m websocket -v
"""

import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from accounts.authentication import JWTAuthMiddleware, generate_tokens_for_user
from notifications.consumers import RealtimeConsumer
from notifications.presence import PresenceRegistry
from notifications.realtime import RealtimeGateway
from notifications.services import NotificationService


@pytest.fixture
def registry():
    return PresenceRegistry()


@pytest.fixture
def ws_user(transactional_db):
    from conftest import UserFactory
    return UserFactory()


@pytest.fixture
def unread_notification(ws_user):
    from conftest import NotificationFactory
    return NotificationFactory(recipient=ws_user, notification_type='MESSAGE')


def make_communicator(registry, user=None, path='/ws/realtime/'):
    communicator = WebsocketCommunicator(RealtimeConsumer.as_asgi(presence_registry=registry), path)
    if user is not None:
        communicator.scope['user'] = user
    return communicator


async def connect(communicator):
    """Connect and consume the greeting frames."""
    connected, _ = await communicator.connect()
    assert connected
    greeting = await communicator.receive_json_from()
    online = await communicator.receive_json_from()
    return greeting, online


@pytest.mark.websocket
@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestRealtimeConnection:

    async def test_anonymous_connection_is_rejected(self, registry):
        communicator = make_communicator(registry, AnonymousUser())

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001
        assert len(registry) == 0

    async def test_connect_registers_presence(self, registry, ws_user, unread_notification):
        communicator = make_communicator(registry, ws_user)

        greeting, online = await connect(communicator)

        assert greeting == {
            'event': 'connection_established',
            'data': {'userId': ws_user.id, 'unread': {'MESSAGE': 1}},
        }
        assert online['event'] == 'online_users'
        assert ws_user.id in online['data']
        assert registry.is_online(ws_user.id)

        await communicator.disconnect()
        assert registry.is_online(ws_user.id) is False

    async def test_injected_registry_replaces_app_registry(self, registry, ws_user):
        from django.apps import apps
        app_registry = apps.get_app_config('notifications').presence_registry
        communicator = make_communicator(registry, ws_user)

        await connect(communicator)

        assert registry.is_online(ws_user.id)
        assert app_registry.is_online(ws_user.id) is False
        await communicator.disconnect()

    async def test_jwt_query_string_authentication(self, registry, ws_user):
        token = generate_tokens_for_user(ws_user)['access_token']
        communicator = WebsocketCommunicator(
            JWTAuthMiddleware(RealtimeConsumer.as_asgi(presence_registry=registry)),
            f'/ws/realtime/?token={token}',
        )

        greeting, _ = await connect(communicator)

        assert greeting['data']['userId'] == ws_user.id
        await communicator.disconnect()

    async def test_invalid_token_is_rejected(self, registry):
        communicator = WebsocketCommunicator(
            JWTAuthMiddleware(RealtimeConsumer.as_asgi(presence_registry=registry)),
            '/ws/realtime/?token=not-a-jwt',
        )
        communicator.scope['user'] = AnonymousUser()

        connected, code = await communicator.connect()

        assert connected is False
        assert code == 4001


@pytest.mark.websocket
@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestRealtimeMessages:

    async def test_ping(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'ping'})

        assert await communicator.receive_json_from() == {'event': 'pong', 'data': {}}
        await communicator.disconnect()

    async def test_invalid_json(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_to(text_data='{not json')

        assert await communicator.receive_json_from() == {'event': 'error', 'data': {'message': 'Invalid JSON'}}
        await communicator.disconnect()

    async def test_unknown_message_type(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'dance'})

        response = await communicator.receive_json_from()
        assert response['event'] == 'error'
        assert 'dance' in response['data']['message']
        await communicator.disconnect()

    async def test_mark_read(self, registry, ws_user, unread_notification):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'mark_read', 'notification_id': unread_notification.id})

        assert await communicator.receive_json_from() == {
            'event': 'mark_read_response',
            'data': {'notificationId': unread_notification.id, 'success': True},
        }

        await communicator.send_json_to({'type': 'get_unread_status'})
        assert await communicator.receive_json_from() == {'event': 'unread_status', 'data': {}}
        await communicator.disconnect()

    async def test_mark_read_requires_id(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'mark_read'})

        response = await communicator.receive_json_from()
        assert response == {'event': 'error', 'data': {'message': 'notification_id is required'}}
        await communicator.disconnect()

    async def test_mark_read_rejects_non_integer_id(self, registry, ws_user, unread_notification):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'mark_read', 'notification_id': 'abc'})

        response = await communicator.receive_json_from()
        assert response == {'event': 'error', 'data': {'message': 'notification_id must be an integer'}}

        # The connection survives and the notification is untouched
        await communicator.send_json_to({'type': 'get_unread_status'})
        assert await communicator.receive_json_from() == {'event': 'unread_status', 'data': {'MESSAGE': 1}}
        await communicator.disconnect()

    async def test_mark_read_accepts_numeric_string(self, registry, ws_user, unread_notification):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'mark_read', 'notification_id': str(unread_notification.id)})

        assert await communicator.receive_json_from() == {
            'event': 'mark_read_response',
            'data': {'notificationId': unread_notification.id, 'success': True},
        }
        await communicator.disconnect()

    async def test_mark_all_read(self, registry, ws_user, unread_notification):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)

        await communicator.send_json_to({'type': 'mark_all_read'})

        assert await communicator.receive_json_from() == {'event': 'mark_all_read_response', 'data': {'count': 1}}
        await communicator.disconnect()


@pytest.mark.websocket
@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestRealtimeDelivery:

    async def test_gateway_event_is_relayed(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)
        channel_name = registry.lookup(ws_user.id)[0]

        await get_channel_layer().send(
            channel_name,
            RealtimeGateway.build_message('pipeline:application_updated', {'jobId': 3}),
        )

        assert await communicator.receive_json_from() == {
            'event': 'pipeline:application_updated',
            'data': {'jobId': 3},
        }
        await communicator.disconnect()

    async def test_notification_reaches_connected_user(self, registry, ws_user):
        communicator = make_communicator(registry, ws_user)
        await connect(communicator)
        service = NotificationService(presence=registry, gateway=RealtimeGateway())

        result = await database_sync_to_async(service.create_notification)(
            user_id=ws_user.id,
            message='You have an interview with Acme Talent for the Backend Engineer position.',
        )

        frame = await communicator.receive_json_from()
        assert frame['event'] == 'new_notification'
        assert frame['data']['id'] == result.notification.id
        assert 'Acme Talent' in frame['data']['message']
        await communicator.disconnect()
