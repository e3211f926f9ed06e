"""
Messaging Models

Direct messages between two users. A conversation is not stored on its own:
it is the set of messages exchanged by a pair of users, in either direction.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Message(models.Model):
    """One message from ``sender`` to ``recipient``."""

    uuid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages'
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_messages'
    )
    body = models.TextField()

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Message')
        verbose_name_plural = _('Messages')
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['sender', 'recipient', 'created_at'], name='msg_pair_created_idx'),
            models.Index(fields=['recipient', 'is_read'], name='msg_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.sender_id} -> {self.recipient_id}: {self.body[:50]}"

    def to_payload(self) -> dict:
        """JSON-safe representation pushed over the real-time channel."""
        return {
            'id': self.id,
            'uuid': str(self.uuid),
            'fromId': self.sender_id,
            'toId': self.recipient_id,
            'body': self.body,
            'read': self.is_read,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
