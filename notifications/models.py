"""
Notification Models

A ``Notification`` is the durable record of something a user should see. The
row is written before any live delivery is attempted, so it remains
retrievable through the list endpoint when the user is offline.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """In-app notification owned by its recipient."""

    class NotificationType(models.TextChoices):
        GENERIC = 'GENERIC', _('Generic')
        MESSAGE = 'MESSAGE', _('Message')
        NEW_QUIZ = 'NEW_QUIZ', _('New quiz')

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    message = models.TextField()
    link = models.CharField(max_length=500, blank=True)
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.GENERIC,
        db_index=True,
    )
    meta = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', '-created_at'], name='notif_recipient_created_idx'),
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.notification_type} for {self.recipient_id}: {self.message[:50]}"

    def mark_as_read(self):
        """Mark notification as read."""
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])

    def to_payload(self) -> dict:
        """JSON-safe representation pushed over the real-time channel."""
        return {
            'id': self.id,
            'uuid': str(self.uuid),
            'userId': self.recipient_id,
            'message': self.message,
            'link': self.link or None,
            'type': self.notification_type,
            'meta': self.meta or {},
            'read': self.is_read,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
