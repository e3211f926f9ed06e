from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['recipient', 'notification_type', 'short_message', 'is_read', 'created_at']
    list_filter = ['notification_type', 'is_read']
    search_fields = ['message', 'recipient__email']
    raw_id_fields = ['recipient']
    readonly_fields = ['uuid', 'created_at', 'read_at']

    @admin.display(description='Message')
    def short_message(self, obj):
        return obj.message[:80]
