"""
Real-time gateway: publishes named events onto the Channels layer.

Events are addressed either to specific connections (channel names taken
from the presence registry) or to a group. Delivery is at-most-once; the
durable notification row is the delivery guarantee.

Every frame reaching a consumer has the shape::

    {'type': 'realtime.event', 'event': <event name>, 'data': <payload>}
"""

import logging
from typing import Any, Dict, Iterable

from asgiref.sync import async_to_sync
from channels.layers import DEFAULT_CHANNEL_LAYER, get_channel_layer

logger = logging.getLogger(__name__)

REALTIME_MESSAGE_TYPE = 'realtime.event'

# Event names understood by the frontend
NEW_NOTIFICATION = 'new_notification'
NEW_MESSAGE_NOTIFICATION = 'new_message_notification'
NEW_QUIZ_NOTIFICATION = 'new_quiz_notification'
PIPELINE_APPLICATION_UPDATED = 'pipeline:application_updated'
NEW_MESSAGE = 'new_message'
MESSAGES_READ = 'messages_read'
ADMIN_NEW_SIGNUP = 'admin:new_signup'
ONLINE_USERS = 'online_users'

PRESENCE_GROUP = 'presence'


class NotificationDeliveryError(Exception):
    """A live push could not be handed to the channel layer."""


class RealtimeGateway:
    """Thin publisher over a Channels layer."""

    def __init__(self, channel_layer=None, alias: str = DEFAULT_CHANNEL_LAYER):
        self._channel_layer = channel_layer
        self.alias = alias

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer(self.alias)
        return self._channel_layer

    @staticmethod
    def build_message(event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {'type': REALTIME_MESSAGE_TYPE, 'event': event, 'data': payload}

    def emit(self, channel_names: Iterable[str], event: str, payload: Dict[str, Any]) -> int:
        """
        Send one event to each connection.

        Returns:
            Number of connections the event was handed to

        Raises:
            NotificationDeliveryError: If no layer is configured or a send fails
        """
        layer = self.channel_layer
        if layer is None:
            raise NotificationDeliveryError("No channel layer is configured.")

        message = self.build_message(event, payload)
        sent = 0
        for channel_name in channel_names:
            try:
                async_to_sync(layer.send)(channel_name, message)
            except Exception as e:
                raise NotificationDeliveryError(
                    f"Failed to emit '{event}' to {channel_name}: {e}"
                ) from e
            sent += 1
        return sent

    def broadcast(self, group: str, event: str, payload: Dict[str, Any]) -> None:
        """Send one event to every connection in a group."""
        layer = self.channel_layer
        if layer is None:
            raise NotificationDeliveryError("No channel layer is configured.")

        try:
            async_to_sync(layer.group_send)(group, self.build_message(event, payload))
        except Exception as e:
            raise NotificationDeliveryError(
                f"Failed to broadcast '{event}' to group {group}: {e}"
            ) from e
