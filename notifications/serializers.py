"""
Notification serializers.
"""

from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read-only representation of a notification."""

    type = serializers.CharField(source='notification_type', read_only=True)
    read = serializers.BooleanField(source='is_read', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'uuid', 'message', 'link', 'type', 'meta', 'read', 'read_at', 'created_at']
        read_only_fields = fields


class NotificationFilterSerializer(serializers.Serializer):
    """Optional ``type`` query parameter accepted by list and read-all."""

    type = serializers.ChoiceField(
        choices=Notification.NotificationType.choices,
        required=False,
    )
