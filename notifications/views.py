"""
Notification API views.

Endpoints:
- GET  /api/notifications/               latest notifications (``?type=``)
- POST /api/notifications/{id}/read/     mark one as read
- POST /api/notifications/read-all/      mark all as read (``?type=``)
- GET  /api/notifications/unread-status/ unread counts by type
"""

import logging

from rest_framework.decorators import action

from api.base import APIResponse, PrincipalViewSet

from .serializers import NotificationFilterSerializer, NotificationSerializer
from .services import get_notification_service

logger = logging.getLogger(__name__)


class NotificationViewSet(PrincipalViewSet):
    """
    ViewSet for the caller's notifications.
    """

    serializer_class = NotificationSerializer

    def get_notification_type(self):
        params = NotificationFilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return params.validated_data.get('type')

    def list(self, request):
        notifications = get_notification_service().list_notifications(
            self.get_principal(),
            notification_type=self.get_notification_type(),
        )
        return APIResponse.success(data=NotificationSerializer(notifications, many=True).data)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark a notification as read."""
        notification = get_notification_service().mark_as_read(self.get_principal(), pk)
        return APIResponse.success(
            data=NotificationSerializer(notification).data,
            message='Notification marked as read.',
        )

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        """Mark all notifications as read."""
        count = get_notification_service().mark_all_as_read(
            self.get_principal(),
            notification_type=self.get_notification_type(),
        )
        return APIResponse.success(data={'count': count}, message=f'{count} notifications marked as read.')

    @action(detail=False, methods=['get'], url_path='unread-status')
    def unread_status(self, request):
        """Unread notification counts grouped by type."""
        return APIResponse.success(data=get_notification_service().get_unread_status(self.get_principal()))
