"""
ATS API URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ApplicationViewSet, InterviewViewSet, PositionViewSet

app_name = 'ats'

router = DefaultRouter()
router.register(r'positions', PositionViewSet, basename='position')
router.register(r'applications', ApplicationViewSet, basename='application')
router.register(r'interviews', InterviewViewSet, basename='interview')

urlpatterns = [
    path('', include(router.urls)),
]
