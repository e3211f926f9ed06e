"""
ATS Filters - Django Filter classes for REST API filtering
"""

import django_filters

from .models import Application, Interview, Position


class PositionFilter(django_filters.FilterSet):
    """Filter for positions."""
    title = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Position
        fields = ['title', 'status', 'visibility']


class ApplicationFilter(django_filters.FilterSet):
    """Filter for applications by position and status."""
    position = django_filters.NumberFilter(field_name='position_id')
    status = django_filters.MultipleChoiceFilter(choices=Application.ApplicationStatus.choices)

    class Meta:
        model = Application
        fields = ['position', 'status']


class InterviewFilter(django_filters.FilterSet):
    """Filter for interviews."""
    application = django_filters.NumberFilter(field_name='application_id')
    scheduled_after = django_filters.IsoDateTimeFilter(field_name='scheduled_at', lookup_expr='gte')
    scheduled_before = django_filters.IsoDateTimeFilter(field_name='scheduled_at', lookup_expr='lte')

    class Meta:
        model = Interview
        fields = ['application', 'mode', 'status']
