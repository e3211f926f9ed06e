"""
Tests for JWT token helpers and WebSocket token resolution.
"""

import pytest
from asgiref.sync import async_to_sync
from django.contrib.auth.models import AnonymousUser
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from accounts.authentication import RoleRefreshToken, generate_tokens_for_user, get_user_for_token


@pytest.mark.django_db
class TestTokens:

    def test_role_claims(self, agency_user_factory):
        user = agency_user_factory()

        token = RoleRefreshToken.for_user(user)

        assert token['email'] == user.email
        assert token['role'] == 'AGENCY'
        assert token.access_token['role'] == 'AGENCY'

    def test_generate_tokens_for_user(self, user_factory):
        user = user_factory()

        tokens = generate_tokens_for_user(user)

        assert tokens['token_type'] == 'Bearer'
        assert tokens['expires_in'] > 0
        assert str(AccessToken(tokens['access_token'])['user_id']) == str(user.id)

    def test_obtain_pair_endpoint(self, api_client, user_factory):
        user = user_factory(email='jane@example.com')

        response = api_client.post('/api/auth/token/', {'email': 'jane@example.com', 'password': 'testpass123'})

        assert response.status_code == status.HTTP_200_OK
        assert AccessToken(response.data['access'])['role'] == user.role

    def test_obtain_pair_bad_password(self, api_client, user_factory):
        user_factory(email='jane@example.com')

        response = api_client.post('/api/auth/token/', {'email': 'jane@example.com', 'password': 'wrong'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db(transaction=True)
class TestGetUserForToken:

    def test_valid_token(self, user_factory):
        user = user_factory()
        token = generate_tokens_for_user(user)['access_token']

        assert async_to_sync(get_user_for_token)(token) == user

    def test_garbage_token(self, caplog):
        resolved = async_to_sync(get_user_for_token)('garbage')

        assert isinstance(resolved, AnonymousUser)
        assert 'SECURITY' in caplog.text

    def test_inactive_user(self, user_factory):
        user = user_factory(is_active=False)
        token = generate_tokens_for_user(user)['access_token']

        assert isinstance(async_to_sync(get_user_for_token)(token), AnonymousUser)
