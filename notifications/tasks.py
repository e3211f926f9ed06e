"""
Celery Tasks for Notification System.

Deferred fan-out for callers that should not create notifications inline.
Live delivery only reaches connections registered in the process that runs
the task; offline delivery through the stored row is unaffected.
"""

import logging
from typing import Any, Dict

from celery import shared_task
from django.contrib.auth import get_user_model
from django.db import DatabaseError

logger = logging.getLogger(__name__)
User = get_user_model()


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    retry_backoff_max=600,
    queue='notifications'
)
def send_notification_task(
    self,
    recipient_id: int,
    message: str,
    link: str = '',
    notification_type: str = 'GENERIC',
    meta: dict = None,
) -> Dict[str, Any]:
    """
    Celery task to create and deliver a notification asynchronously.

    Args:
        recipient_id: ID of the user to notify
        message: Notification message
        link: Optional deep link
        notification_type: Notification type
        meta: Extra JSON data stored with the notification

    Returns:
        Dict with results of the send operation
    """
    from .services import get_notification_service

    if not User.objects.filter(pk=recipient_id).exists():
        logger.warning(f"Notification recipient {recipient_id} not found")
        return {
            'success': False,
            'recipient_id': recipient_id,
            'error': 'Recipient not found',
        }

    result = get_notification_service().create_notification(
        user_id=recipient_id,
        message=message,
        link=link,
        notification_type=notification_type,
        meta=meta,
    )

    return {
        'success': True,
        'recipient_id': recipient_id,
        'notification_id': result.notification.id,
        'delivered_live': result.delivered_live,
        'error': result.error_message,
    }
