"""
API URLs - root routing for the REST API
"""
from django.urls import include, path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from accounts.authentication import RoleTokenObtainPairSerializer

urlpatterns = [
    # JWT Authentication endpoints
    path('auth/token/', TokenObtainPairView.as_view(serializer_class=RoleTokenObtainPairSerializer), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),
    path('auth/', include('accounts.urls')),

    path('', include('ats.urls')),
    path('', include('notifications.urls')),
    path('', include('messaging.urls')),
]

"""
API Endpoints Available:

Authentication:
- POST /api/auth/token/ - Get JWT access & refresh tokens
- POST /api/auth/token/refresh/ - Refresh access token
- POST /api/auth/token/verify/ - Verify token validity
- POST /api/auth/register/candidate/ - Register a candidate (returns tokens)
- POST /api/auth/register/agency/ - Register an agency and its owner (returns tokens)

Positions:
- GET/POST /api/positions/ - Agency positions
- GET/PUT/PATCH /api/positions/{id}/ - Agency position detail
- GET /api/positions/open/ - Open public positions

Applications:
- GET /api/applications/ - Agency pipeline or candidate applications
- GET/PATCH /api/applications/{id}/ - Details / status and notes update
- POST /api/applications/apply/ - Candidate applies
- POST /api/applications/pipeline/ - Agency adds a candidate
- POST /api/applications/{id}/schedule-interview/ - Schedule an interview
- GET /api/applications/interview-pipeline/ - Interview stage overview

Interviews:
- GET /api/interviews/ - Interviews visible to the caller

Notifications:
- GET /api/notifications/ - Latest notifications
- POST /api/notifications/{id}/read/ - Mark as read
- POST /api/notifications/read-all/ - Mark all as read
- GET /api/notifications/unread-status/ - Unread counts by type

Messaging:
- POST /api/messages/ - Send a direct message
- GET /api/conversations/ - Inbox, one entry per conversation partner
- GET /api/conversations/{user_id}/ - Thread with one user
- POST /api/conversations/{user_id}/read/ - Mark a thread as read

WebSocket:
- ws/realtime/?token=<access token>
"""
