from django.contrib import admin

from .models import Agency, AgencyMember


class AgencyMemberInline(admin.TabularInline):
    model = AgencyMember
    extra = 0
    raw_id_fields = ['user']


@admin.register(Agency)
class AgencyAdmin(admin.ModelAdmin):
    list_display = ['name', 'website', 'created_at']
    search_fields = ['name']
    inlines = [AgencyMemberInline]
