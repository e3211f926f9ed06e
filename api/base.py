"""
API Base Classes - Shared foundation for PPALink API views

This module provides:
- APIResponse: the standard success envelope
- PrincipalMixin: builds the ``AuthenticatedPrincipal`` handed to services
- PrincipalViewSet: authenticated viewset base using the mixin
"""

from typing import Any, Dict

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.principal import AuthenticatedPrincipal


# =============================================================================
# STANDARD RESPONSE HELPERS
# =============================================================================

class APIResponse:
    """
    Standardized success response.

    {
        "success": true,
        "data": {...} | [...],
        "message": str | null,
        "meta": {"timestamp": "ISO8601"}
    }
    """

    @staticmethod
    def success(
        data: Any = None,
        message: str = None,
        status_code: int = status.HTTP_200_OK,
        meta: Dict = None,
    ) -> Response:
        """Create a successful response."""
        response_meta = {'timestamp': timezone.now().isoformat()}
        if meta:
            response_meta.update(meta)

        return Response(
            {
                'success': True,
                'data': data,
                'message': message,
                'meta': response_meta,
            },
            status=status_code,
        )

    @staticmethod
    def created(data: Any = None, message: str = None) -> Response:
        return APIResponse.success(data=data, message=message, status_code=status.HTTP_201_CREATED)


# =============================================================================
# PRINCIPAL RESOLUTION
# =============================================================================

class PrincipalMixin:
    """
    Resolve the request user into an ``AuthenticatedPrincipal``.

    The principal is computed once per request and cached on the view.
    """

    _principal = None

    def get_principal(self) -> AuthenticatedPrincipal:
        if self._principal is None:
            self._principal = AuthenticatedPrincipal.from_user(self.request.user)
        return self._principal


class PrincipalViewSet(PrincipalMixin, viewsets.GenericViewSet):
    """Authenticated viewset whose actions delegate to principal-aware services."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r'[0-9]+'
