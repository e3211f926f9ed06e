"""
Tests for the real-time gateway.
"""

from unittest import mock

import pytest

from notifications.realtime import (
    REALTIME_MESSAGE_TYPE,
    NotificationDeliveryError,
    RealtimeGateway,
)


@pytest.fixture
def channel_layer():
    layer = mock.Mock()
    layer.send = mock.AsyncMock()
    layer.group_send = mock.AsyncMock()
    return layer


class TestRealtimeGateway:

    def test_build_message(self):
        assert RealtimeGateway.build_message('pong', {'a': 1}) == {
            'type': REALTIME_MESSAGE_TYPE,
            'event': 'pong',
            'data': {'a': 1},
        }

    def test_emit_sends_to_each_connection(self, channel_layer):
        gateway = RealtimeGateway(channel_layer=channel_layer)

        sent = gateway.emit(['ws.a', 'ws.b'], 'new_notification', {'id': 7})

        assert sent == 2
        channel_layer.send.assert_has_awaits([
            mock.call('ws.a', {'type': 'realtime.event', 'event': 'new_notification', 'data': {'id': 7}}),
            mock.call('ws.b', {'type': 'realtime.event', 'event': 'new_notification', 'data': {'id': 7}}),
        ])

    def test_emit_wraps_layer_errors(self, channel_layer):
        channel_layer.send.side_effect = ConnectionError('redis is down')
        gateway = RealtimeGateway(channel_layer=channel_layer)

        with pytest.raises(NotificationDeliveryError) as exc_info:
            gateway.emit(['ws.a'], 'new_notification', {})

        assert 'redis is down' in str(exc_info.value)

    def test_emit_without_layer(self):
        gateway = RealtimeGateway()

        with mock.patch('notifications.realtime.get_channel_layer', return_value=None):
            with pytest.raises(NotificationDeliveryError):
                gateway.emit(['ws.a'], 'new_notification', {})

    def test_broadcast(self, channel_layer):
        gateway = RealtimeGateway(channel_layer=channel_layer)

        gateway.broadcast('presence', 'online_users', [1, 2])

        channel_layer.group_send.assert_awaited_once_with(
            'presence',
            {'type': 'realtime.event', 'event': 'online_users', 'data': [1, 2]},
        )

    def test_default_layer_is_resolved_lazily(self):
        gateway = RealtimeGateway()

        with mock.patch('notifications.realtime.get_channel_layer') as get_layer:
            assert gateway.channel_layer is get_layer.return_value
            assert gateway.channel_layer is get_layer.return_value

        get_layer.assert_called_once_with('default')
