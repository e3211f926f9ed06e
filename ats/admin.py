from django.contrib import admin

from .models import Application, Interview, Position


@admin.register(Position)
class PositionAdmin(admin.ModelAdmin):
    list_display = ['title', 'agency', 'status', 'visibility', 'created_at']
    list_filter = ['status', 'visibility']
    search_fields = ['title', 'agency__name']
    raw_id_fields = ['agency', 'created_by']


class InterviewInline(admin.TabularInline):
    model = Interview
    extra = 0
    fields = ['scheduled_at', 'mode', 'location', 'status']


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['candidate', 'position', 'status', 'created_at', 'updated_at']
    list_filter = ['status']
    search_fields = ['candidate__first_name', 'candidate__last_name', 'position__title']
    raw_id_fields = ['candidate', 'position']
    inlines = [InterviewInline]


@admin.register(Interview)
class InterviewAdmin(admin.ModelAdmin):
    list_display = ['application', 'scheduled_at', 'mode', 'status', 'created_at']
    list_filter = ['mode', 'status']
    raw_id_fields = ['application']
