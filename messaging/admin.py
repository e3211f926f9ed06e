from django.contrib import admin

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['sender', 'recipient', 'short_body', 'is_read', 'created_at']
    list_filter = ['is_read']
    search_fields = ['body', 'sender__email', 'recipient__email']
    raw_id_fields = ['sender', 'recipient']
    readonly_fields = ['uuid', 'created_at', 'read_at']

    @admin.display(description='Body')
    def short_body(self, obj):
        return obj.body[:80]
