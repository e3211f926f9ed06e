"""
WebSocket Consumer for Real-Time Delivery.

One connection per browser tab. On connect the connection is recorded in the
presence registry so that services can address it; on disconnect it is
removed. All frames sent to the client have the shape
``{"event": <name>, "data": <payload>}``.
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.apps import apps
from django.core.serializers.json import DjangoJSONEncoder

from .realtime import ONLINE_USERS, PRESENCE_GROUP, RealtimeGateway

logger = logging.getLogger(__name__)


class RealtimeConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer feeding notifications and pipeline updates to a user.
    """

    # Defaults to the registry owned by the notifications app.
    presence_registry = None

    def __init__(self, *args, presence_registry=None, **kwargs):
        super().__init__(*args, **kwargs)
        if presence_registry is not None:
            self.presence_registry = presence_registry

    def get_presence_registry(self):
        if self.presence_registry is None:
            self.presence_registry = apps.get_app_config('notifications').presence_registry
        return self.presence_registry

    async def connect(self):
        """Handle WebSocket connection."""
        self.user = self.scope.get('user')

        if not self.user or not self.user.is_authenticated:
            await self.close(code=4001)
            return

        await self.channel_layer.group_add(PRESENCE_GROUP, self.channel_name)
        await self.accept()

        self.get_presence_registry().register(self.user.id, self.channel_name)

        unread_status = await self.get_unread_status()
        await self.send_event('connection_established', {
            'userId': self.user.id,
            'unread': unread_status,
        })
        await self.broadcast_online_users()

        logger.info(f"User {self.user.id} connected ({self.channel_name})")

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        user = getattr(self, 'user', None)
        if not user or not user.is_authenticated:
            return

        self.get_presence_registry().unregister(user.id, self.channel_name)
        await self.channel_layer.group_discard(PRESENCE_GROUP, self.channel_name)
        await self.broadcast_online_users()

        logger.info(f"User {user.id} disconnected ({self.channel_name}, code={close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages."""
        if not text_data:
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_event('error', {'message': 'Invalid JSON'})
            return

        message_type = data.get('type') if isinstance(data, dict) else None

        if message_type == 'ping':
            await self.send_event('pong', {})
        elif message_type == 'mark_read':
            await self.handle_mark_read(data)
        elif message_type == 'mark_all_read':
            count = await self.mark_all_read(data.get('notification_type'))
            await self.send_event('mark_all_read_response', {'count': count})
        elif message_type == 'get_unread_status':
            await self.send_event('unread_status', await self.get_unread_status())
        else:
            await self.send_event('error', {'message': f'Unknown message type: {message_type}'})

    async def handle_mark_read(self, data):
        """Mark a notification as read."""
        notification_id = data.get('notification_id')
        if notification_id in (None, ''):
            await self.send_event('error', {'message': 'notification_id is required'})
            return

        try:
            notification_id = int(notification_id)
        except (TypeError, ValueError):
            await self.send_event('error', {'message': 'notification_id must be an integer'})
            return

        success = await self.mark_notification_read(notification_id)
        await self.send_event('mark_read_response', {
            'notificationId': notification_id,
            'success': success,
        })

    # ==================== CHANNEL LAYER HANDLERS ====================

    async def realtime_event(self, event):
        """Relay an event published through the real-time gateway."""
        await self.send_event(event['event'], event.get('data'))

    # ==================== HELPERS ====================

    async def send_event(self, event: str, data):
        await self.send(text_data=json.dumps({'event': event, 'data': data}, cls=DjangoJSONEncoder))

    async def broadcast_online_users(self):
        online = self.get_presence_registry().online_user_ids()
        await self.channel_layer.group_send(
            PRESENCE_GROUP,
            RealtimeGateway.build_message(ONLINE_USERS, online),
        )

    @database_sync_to_async
    def get_unread_status(self):
        from .services import get_notification_service
        return get_notification_service().get_unread_status(self.get_principal())

    @database_sync_to_async
    def mark_notification_read(self, notification_id) -> bool:
        from api.exceptions import ResourceNotFoundError
        from .services import get_notification_service

        try:
            get_notification_service().mark_as_read(self.get_principal(), notification_id)
        except ResourceNotFoundError:
            return False
        return True

    @database_sync_to_async
    def mark_all_read(self, notification_type=None) -> int:
        from .services import get_notification_service
        return get_notification_service().mark_all_as_read(self.get_principal(), notification_type)

    def get_principal(self):
        from accounts.principal import AuthenticatedPrincipal
        return AuthenticatedPrincipal.from_user(self.user)
