# Copyright 2026 castline.fm
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Tests for authentication components.

Tests cover:
- User model and TokenPayload
- JWT utilities (create, decode, expiry, wrong secret)
- AuthService token verification against active users
- Bearer header and cookie transport through the API
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt as pyjwt

from castline.models.user import User, UserRole
from castline.services.auth_service import AuthService
from castline.utils.config import Config
from castline.utils.jwt import create_access_token, decode_token
from castline.web.dependencies import AUTH_COOKIE_NAME


class TestUserModel:
    """Tests for User Pydantic model."""

    def test_user_creation_with_defaults(self):
        """User can be created with minimal fields."""
        user = User(email="test@example.com")

        assert user.email == "test@example.com"
        assert user.role == UserRole.USER
        assert user.active is True
        assert user.name is None
        assert user.created_at is not None

    def test_user_id_is_valid_uuid(self):
        """Auto-generated user ID is a valid UUID."""
        user = User(email="test@example.com")
        # Should not raise
        uuid.UUID(user.id)

    def test_is_admin(self):
        assert User(email="a@example.com", role=UserRole.ADMIN).is_admin
        assert not User(email="b@example.com").is_admin


class TestJwtUtilities:
    """Tests for token encoding and decoding."""

    def test_round_trip(self):
        token = create_access_token("user-1", "secret", expires_days=1)

        payload = decode_token(token, "secret")

        assert payload.sub == "user-1"
        assert payload.exp > payload.iat

    def test_wrong_secret_is_rejected(self):
        token = create_access_token("user-1", "secret")

        assert decode_token(token, "other-secret") is None

    def test_expired_token_is_rejected(self):
        """Tokens past their exp claim decode to None."""
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = pyjwt.encode({"sub": "user-1", "iat": past, "exp": past + timedelta(days=1)}, "secret")

        assert decode_token(token, "secret") is None

    def test_garbage_is_rejected(self):
        assert decode_token("not.a.token", "secret") is None

    def test_login_service_id_claim(self):
        """Tokens from the login service carry the user id in ``id``."""
        now = datetime.now(timezone.utc)
        token = pyjwt.encode({"id": "user-7", "iat": now, "exp": now + timedelta(days=90)}, "secret")

        assert decode_token(token, "secret").sub == "user-7"

    def test_token_without_subject_is_rejected(self):
        now = datetime.now(timezone.utc)
        token = pyjwt.encode({"iat": now, "exp": now + timedelta(days=1)}, "secret")

        assert decode_token(token, "secret") is None


class TestAuthService:
    """Tests for AuthService."""

    def test_current_user_from_token(self, state, alice):
        token = state.auth_service.create_jwt(alice)

        user = state.auth_service.get_current_user(token)

        assert user.id == alice.id

    def test_missing_token(self, state):
        assert state.auth_service.get_current_user(None) is None
        assert state.auth_service.get_current_user("") is None

    def test_deactivated_user_is_rejected(self, state, alice):
        """A token outlives the account but no longer authenticates."""
        token = state.auth_service.create_jwt(alice)
        state.user_service.deactivate_me(alice)

        assert state.auth_service.get_current_user(token) is None

    def test_random_secret_when_unset(self, tmp_path, repos):
        """Without a configured secret a per-process key is generated."""
        service = AuthService(Config(database_path=tmp_path / "x.db"), repos.user)

        assert len(service.jwt_secret_key) == 64


class TestRequestAuthentication:
    """Tests for token transport on protected routes."""

    def test_bearer_header(self, client, auth_headers, alice):
        response = client.get("/users/me", headers=auth_headers(alice))

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == alice.id

    def test_cookie_fallback(self, client, state, alice):
        client.cookies.set(AUTH_COOKIE_NAME, state.auth_service.create_jwt(alice))

        response = client.get("/users/me")

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "alice@example.com"

    def test_missing_token_is_401(self, client):
        response = client.get("/podcasts")

        assert response.status_code == 401
        assert response.json()["status"] == "fail"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_is_401(self, client):
        response = client.get("/users/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_deactivated_user_is_401(self, client, state, auth_headers, alice):
        headers = auth_headers(alice)
        state.user_service.deactivate_me(alice)

        response = client.get("/users/me", headers=headers)

        assert response.status_code == 401

    def test_non_admin_is_403(self, client, auth_headers, alice):
        response = client.get("/users/admin", headers=auth_headers(alice))

        assert response.status_code == 403
        assert response.json() == {"status": "fail", "message": "You do not have permission to perform this action"}

    def test_admin_is_allowed(self, client, auth_headers, admin):
        response = client.get("/users/admin", headers=auth_headers(admin))

        assert response.status_code == 200
