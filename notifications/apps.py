"""
Notifications App Configuration.
"""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for the notifications app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'notifications'
    verbose_name = 'Notifications'

    def ready(self):
        """Create the presence registry shared by consumers and services."""
        from .presence import PresenceRegistry

        self.presence_registry = PresenceRegistry()
