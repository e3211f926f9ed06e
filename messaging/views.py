"""
Messaging API views.

Endpoints:
- POST /api/messages/                      send a message (``to_id``, ``body``)
- GET  /api/conversations/                 inbox, one entry per partner
- GET  /api/conversations/{user_id}/       thread with one user, oldest first
- POST /api/conversations/{user_id}/read/  mark that thread as read
"""

from rest_framework.decorators import action

from api.base import APIResponse, PrincipalViewSet
from notifications.services import get_notification_service

from .serializers import ConversationSerializer, MessageSerializer, SendMessageSerializer
from .services import MessagingService


class MessagingViewSet(PrincipalViewSet):

    def get_messaging_service(self) -> MessagingService:
        return MessagingService(get_notification_service())


class MessageViewSet(MessagingViewSet):
    """Send direct messages."""

    serializer_class = SendMessageSerializer

    def create(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = self.get_messaging_service().send_message(
            self.get_principal(),
            serializer.validated_data['to_id'],
            serializer.validated_data['body'],
        )
        return APIResponse.created(data=MessageSerializer(message).data)


class ConversationViewSet(MessagingViewSet):
    """
    Conversations of the caller, addressed by the other participant's user id.
    """

    serializer_class = MessageSerializer

    def list(self, request):
        conversations = self.get_messaging_service().get_conversations(self.get_principal())
        return APIResponse.success(data=ConversationSerializer(conversations, many=True).data)

    def retrieve(self, request, pk=None):
        messages = self.get_messaging_service().get_conversation(self.get_principal(), pk)
        return APIResponse.success(data=MessageSerializer(messages, many=True).data)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark messages from this user as read."""
        count = self.get_messaging_service().mark_conversation_as_read(self.get_principal(), pk)
        return APIResponse.success(data={'count': count}, message='Messages marked as read.')
