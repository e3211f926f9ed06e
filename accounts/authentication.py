"""
Accounts Authentication - JWT tokens for REST and WebSocket clients

This module implements:
- Role-aware JWT token pairs (custom claims on simplejwt tokens)
- Token helpers used by tests and management tooling
- Channels middleware authenticating WebSocket connections from ``?token=``
"""

import logging
from typing import Any, Dict
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

logger = logging.getLogger(__name__)
User = get_user_model()


class RoleRefreshToken(RefreshToken):
    """
    Refresh token carrying email and role claims.

    Access tokens derived from it copy the same claims.
    """

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token['email'] = user.email
        token['role'] = user.role
        return token


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token obtain serializer issuing ``RoleRefreshToken`` pairs."""

    token_class = RoleRefreshToken


def generate_tokens_for_user(user) -> Dict[str, Any]:
    """
    Convenience function to generate tokens for a user.

    Returns:
        Dict containing tokens and metadata
    """
    refresh = RoleRefreshToken.for_user(user)
    access = refresh.access_token

    return {
        'access_token': str(access),
        'refresh_token': str(refresh),
        'expires_in': int(access.lifetime.total_seconds()),
        'token_type': 'Bearer'
    }


@database_sync_to_async
def get_user_for_token(raw_token: str):
    """Resolve an access token to an active user, or AnonymousUser."""
    try:
        validated = AccessToken(raw_token)
    except TokenError as e:
        logger.warning(f"SECURITY: Rejected WebSocket token: {e}")
        return AnonymousUser()

    user_id = validated.get(api_settings.USER_ID_CLAIM)
    try:
        return User.objects.get(**{api_settings.USER_ID_FIELD: user_id}, is_active=True)
    except User.DoesNotExist:
        logger.warning(f"SECURITY: WebSocket token for unknown or inactive user {user_id}")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    """
    Authenticate WebSocket connections with a JWT access token.

    The token is read from the ``token`` query-string parameter. When it is
    absent the scope user set by the session middleware is left untouched.
    """

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get('query_string', b'').decode())
        token = query.get('token', [None])[0]

        if token:
            scope = dict(scope)
            scope['user'] = await get_user_for_token(token)

        return await super().__call__(scope, receive, send)
