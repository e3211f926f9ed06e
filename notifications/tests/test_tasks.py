"""
Tests for notification Celery tasks (executed eagerly).
"""

import pytest

from notifications.models import Notification
from notifications.tasks import send_notification_task


@pytest.mark.django_db
class TestSendNotificationTask:

    def test_creates_notification(self, user_factory):
        user = user_factory()

        result = send_notification_task.delay(user.id, 'Your profile was approved', link='/profile').get()

        assert result['success'] is True
        assert result['delivered_live'] is False
        notification = Notification.objects.get(pk=result['notification_id'])
        assert notification.recipient_id == user.id
        assert notification.link == '/profile'

    def test_unknown_recipient(self):
        result = send_notification_task.delay(987654, 'Nobody home').get()

        assert result == {'success': False, 'recipient_id': 987654, 'error': 'Recipient not found'}
        assert Notification.objects.count() == 0
