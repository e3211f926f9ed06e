"""
Notification Services

``NotificationService`` persists notifications and pushes them live to
recipients that are currently connected. It receives its presence registry
and real-time gateway explicitly; ``get_notification_service()`` wires the
process-wide instances for views and tasks.

Delivery semantics:
- The notification row is always written first.
- A live event is emitted only when the recipient is present, to each of
  the recipient's connections. There is no retry: a failed push is logged
  and the stored row remains the delivery guarantee.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from django.apps import apps
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from accounts.principal import AuthenticatedPrincipal
from api.exceptions import ResourceNotFoundError

from .models import Notification
from .presence import PresenceRegistry
from .realtime import (
    NEW_MESSAGE_NOTIFICATION,
    NEW_NOTIFICATION,
    NEW_QUIZ_NOTIFICATION,
    NotificationDeliveryError,
    RealtimeGateway,
)

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType

EVENT_BY_TYPE = {
    NotificationType.MESSAGE: NEW_MESSAGE_NOTIFICATION,
    NotificationType.NEW_QUIZ: NEW_QUIZ_NOTIFICATION,
}

RECENT_NOTIFICATIONS_LIMIT = 20


def event_name_for(notification_type: str) -> str:
    """Real-time event name used for a notification type."""
    return EVENT_BY_TYPE.get(notification_type, NEW_NOTIFICATION)


@dataclass
class NotificationResult:
    """Outcome of creating one notification."""

    notification: Notification
    delivered_to: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def delivered_live(self) -> bool:
        return bool(self.delivered_to)


class NotificationService:
    """
    Create, deliver and query in-app notifications.
    """

    def __init__(self, presence: PresenceRegistry, gateway: RealtimeGateway):
        self.presence = presence
        self.gateway = gateway

    # ==================== FAN-OUT ====================

    def create_notification(
        self,
        user_id: int,
        message: str,
        link: str = '',
        notification_type: str = NotificationType.GENERIC,
        meta: Dict[str, Any] = None,
    ) -> NotificationResult:
        """
        Persist a notification, then push it if the recipient is online.

        Args:
            user_id: Recipient user id
            message: Text shown to the user
            link: Optional deep link into the frontend
            notification_type: One of ``Notification.NotificationType``
            meta: Extra JSON data stored with the row

        Returns:
            NotificationResult with the stored row and the connections reached
        """
        # Savepoint: a failed insert must not poison an enclosing transaction
        with transaction.atomic():
            notification = Notification.objects.create(
                recipient_id=user_id,
                message=message,
                link=link or '',
                notification_type=notification_type,
                meta=meta or {},
            )

        result = NotificationResult(notification=notification)

        channel_names = self.presence.lookup(user_id)
        if not channel_names:
            logger.debug(f"User {user_id} offline; notification {notification.id} stored only")
            return result

        event = event_name_for(notification_type)
        try:
            self.gateway.emit(channel_names, event, notification.to_payload())
        except NotificationDeliveryError as e:
            result.error_message = str(e)
            logger.error(f"Live delivery of notification {notification.id} failed: {e}")
            return result

        result.delivered_to = channel_names
        return result

    def emit_to_users(self, user_ids: Iterable[int], event: str, payload: Dict[str, Any]) -> int:
        """
        Push an event to every live connection of the given users.

        Offline users are skipped. Returns the number of connections reached.
        """
        channel_names = []
        for user_id in user_ids:
            channel_names.extend(self.presence.lookup(user_id))

        if not channel_names:
            return 0

        try:
            return self.gateway.emit(channel_names, event, payload)
        except NotificationDeliveryError as e:
            logger.error(f"Live delivery of '{event}' failed: {e}")
            return 0

    # ==================== QUERIES ====================

    def list_notifications(
        self,
        principal: AuthenticatedPrincipal,
        notification_type: str = None,
    ) -> List[Notification]:
        """Most recent notifications of the caller, newest first."""
        queryset = Notification.objects.filter(recipient_id=principal.user_id)
        if notification_type:
            queryset = queryset.filter(notification_type=notification_type)
        return list(queryset.order_by('-created_at', '-id')[:RECENT_NOTIFICATIONS_LIMIT])

    def mark_as_read(self, principal: AuthenticatedPrincipal, notification_id: int) -> Notification:
        """
        Mark one of the caller's notifications as read.

        Raises:
            ResourceNotFoundError: If the notification does not exist or
                belongs to another user
        """
        notification = Notification.objects.filter(
            pk=notification_id,
            recipient_id=principal.user_id,
        ).first()
        if notification is None:
            raise ResourceNotFoundError(resource_type='Notification', resource_id=notification_id)

        notification.mark_as_read()
        return notification

    def mark_all_as_read(self, principal: AuthenticatedPrincipal, notification_type: str = None) -> int:
        """Mark all unread notifications of the caller as read; returns the count."""
        queryset = Notification.objects.filter(recipient_id=principal.user_id, is_read=False)
        if notification_type:
            queryset = queryset.filter(notification_type=notification_type)
        return queryset.update(is_read=True, read_at=timezone.now())

    def get_unread_status(self, principal: AuthenticatedPrincipal) -> Dict[str, int]:
        """Unread counts keyed by notification type (types with none are omitted)."""
        rows = (
            Notification.objects
            .filter(recipient_id=principal.user_id, is_read=False)
            .values('notification_type')
            .annotate(count=Count('id'))
            .order_by()
        )
        return {row['notification_type']: row['count'] for row in rows}


def get_presence_registry() -> PresenceRegistry:
    """The process-wide presence registry owned by the notifications app."""
    return apps.get_app_config('notifications').presence_registry


def get_notification_service() -> NotificationService:
    """Notification service wired to the process presence registry and layer."""
    return NotificationService(
        presence=get_presence_registry(),
        gateway=RealtimeGateway(),
    )
