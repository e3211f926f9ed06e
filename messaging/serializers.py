"""
Messaging serializers.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Message
from .services import display_name


class ParticipantSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = get_user_model()
        fields = ['id', 'email', 'role', 'name']
        read_only_fields = fields

    def get_name(self, obj):
        return display_name(obj)


class MessageSerializer(serializers.ModelSerializer):
    read = serializers.BooleanField(source='is_read', read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'uuid', 'sender', 'recipient', 'body', 'read', 'read_at', 'created_at']
        read_only_fields = fields


class ConversationSerializer(serializers.Serializer):
    other_user = ParticipantSerializer(read_only=True)
    last_message = MessageSerializer(read_only=True)
    unread_count = serializers.IntegerField(read_only=True)


class SendMessageSerializer(serializers.Serializer):
    to_id = serializers.IntegerField(min_value=1)
    body = serializers.CharField(max_length=5000)
