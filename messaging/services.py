"""
Messaging Services

``MessagingService`` stores direct messages and tells the recipient about
them. Sending is a two-step operation:

1. The message row is written in its own transaction.
2. Best-effort fan-out: the message is pushed live to the recipient's open
   connections and a MESSAGE notification is created for them. Failures are
   logged and never undo step 1.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.principal import AuthenticatedPrincipal
from api.exceptions import ResourceNotFoundError
from notifications.models import Notification
from notifications.realtime import MESSAGES_READ, NEW_MESSAGE
from notifications.services import NotificationService

from .models import Message

logger = logging.getLogger(__name__)
User = get_user_model()


def display_name(user) -> str:
    """Name shown to the other participant: profile name, agency name or email."""
    profile = getattr(user, 'candidate_profile', None)
    if profile is not None and profile.full_name:
        return profile.full_name

    membership = user.agency_memberships.select_related('agency').first()
    if membership is not None:
        return membership.agency.name

    return user.email


def inbox_link(other_user_id: int) -> str:
    return f"/inbox?with={other_user_id}"


@dataclass
class ConversationSummary:
    """Inbox entry: the other participant and the latest message exchanged."""

    other_user: Any
    last_message: Message
    unread_count: int = 0


class MessagingService:
    """
    Send and read direct messages between users.
    """

    def __init__(self, notification_service: NotificationService):
        self.notification_service = notification_service

    def send_message(self, principal: AuthenticatedPrincipal, to_id, body: str) -> Message:
        """
        Store a message from the caller and notify the recipient.

        Raises:
            ValidationError: If the caller writes to themselves
            ResourceNotFoundError: If the recipient does not exist or is inactive
        """
        if to_id == principal.user_id:
            raise ValidationError({'to_id': ["You cannot send a message to yourself."]})

        recipient = self._get_user(to_id)

        with transaction.atomic():
            message = Message.objects.create(
                sender_id=principal.user_id,
                recipient=recipient,
                body=body,
            )

        logger.info(f"Message {message.id} sent from user {principal.user_id} to user {recipient.id}")
        self._fan_out(message)
        return message

    def _fan_out(self, message: Message) -> Dict[str, Any]:
        outcome = {'pushed': 0, 'notified': False}

        try:
            outcome['pushed'] = self.notification_service.emit_to_users(
                [message.recipient_id], NEW_MESSAGE, message.to_payload()
            )
        except Exception:
            logger.exception(f"Failed to push message {message.id}")

        try:
            self.notification_service.create_notification(
                user_id=message.recipient_id,
                message=f"You have a new message from {display_name(message.sender)}",
                link=inbox_link(message.sender_id),
                notification_type=Notification.NotificationType.MESSAGE,
                meta={'lastMessage': message.body, 'fromId': message.sender_id},
            )
            outcome['notified'] = True
        except Exception:
            logger.exception(f"Failed to notify user {message.recipient_id} about message {message.id}")

        return outcome

    def get_conversation(self, principal: AuthenticatedPrincipal, other_user_id) -> List[Message]:
        """
        Messages exchanged by the caller and another user, oldest first.

        Raises:
            ResourceNotFoundError: If the other user does not exist
        """
        other = self._get_user(other_user_id)
        return list(
            Message.objects
            .filter(
                Q(sender_id=principal.user_id, recipient=other) |
                Q(sender=other, recipient_id=principal.user_id)
            )
            .order_by('created_at', 'id')
        )

    def get_conversations(self, principal: AuthenticatedPrincipal) -> List[ConversationSummary]:
        """Inbox of the caller: one entry per conversation partner, most recent first."""
        user_id = principal.user_id
        messages = (
            Message.objects
            .filter(Q(sender_id=user_id) | Q(recipient_id=user_id))
            .select_related('sender__candidate_profile', 'recipient__candidate_profile')
            .order_by('-created_at', '-id')
        )

        unread = dict(
            Message.objects
            .filter(recipient_id=user_id, is_read=False)
            .values('sender_id')
            .annotate(count=Count('id'))
            .order_by()
            .values_list('sender_id', 'count')
        )

        conversations: Dict[int, ConversationSummary] = {}
        for message in messages:
            other = message.recipient if message.sender_id == user_id else message.sender
            if other.id not in conversations:
                conversations[other.id] = ConversationSummary(
                    other_user=other,
                    last_message=message,
                    unread_count=unread.get(other.id, 0),
                )
        return list(conversations.values())

    def mark_conversation_as_read(self, principal: AuthenticatedPrincipal, other_user_id) -> int:
        """
        Mark every unread message from ``other_user_id`` to the caller as read.

        The sender is told live when at least one message changed.

        Raises:
            ResourceNotFoundError: If the other user does not exist
        """
        other = self._get_user(other_user_id)
        count = (
            Message.objects
            .filter(sender=other, recipient_id=principal.user_id, is_read=False)
            .update(is_read=True, read_at=timezone.now())
        )

        if count:
            self.notification_service.emit_to_users(
                [other.id],
                MESSAGES_READ,
                {'readerId': principal.user_id, 'count': count},
            )
        return count

    @staticmethod
    def _get_user(user_id):
        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            raise ResourceNotFoundError(resource_type='User', resource_id=user_id)
        return user
