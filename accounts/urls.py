"""
Accounts API URLs.
"""

from django.urls import path

from .views import AgencyRegisterView, CandidateRegisterView

app_name = 'accounts'

urlpatterns = [
    path('register/candidate/', CandidateRegisterView.as_view(), name='register-candidate'),
    path('register/agency/', AgencyRegisterView.as_view(), name='register-agency'),
]
