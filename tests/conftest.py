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

"""Shared fixtures: a fully wired application state on a temporary SQLite database."""

import pytest
from fastapi.testclient import TestClient

from castline.models.user import UserRole
from castline.utils.config import Config
from castline.web.app import create_app
from castline.web.dependencies import build_app_state

WAV_AUDIO = {
    "secure_url": "https://res.cloudinary.com/demo/video/upload/v1/podcasts/episode.wav",
    "duration": 61.5,
    "public_id": "podcasts/episode",
    "bytes": 123456,
}


@pytest.fixture
def config(tmp_path):
    """Config pointing at a temporary database with dummy credentials."""
    return Config(
        database_path=tmp_path / "test.db",
        jwt_secret_key="test-secret",
        cloud_name="demo",
        cloud_api_key="api-key",
        cloud_api_secret="api-secret",
        agora_app_id="agora-app",
        agora_app_certificate="agora-cert",
    )


@pytest.fixture
def state(config):
    """Application state with real repositories and services."""
    return build_app_state(config)


@pytest.fixture
def repos(state):
    return state.repositories


@pytest.fixture
def make_user(state):
    """Factory creating users through the user service."""

    def _make(email, name=None, role=UserRole.USER, **profile):
        return state.user_service.create_user(email=email, name=name, role=role, **profile)

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "Alice", country="Spain")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob", country="France")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", "Admin", role=UserRole.ADMIN)


@pytest.fixture
def client(state):
    """TestClient for the full application."""
    return TestClient(create_app(app_state=state))


@pytest.fixture
def auth_headers(state):
    """Build an Authorization header for a user."""

    def _headers(user):
        return {"Authorization": f"Bearer {state.auth_service.create_jwt(user)}"}

    return _headers


@pytest.fixture
def wav_audio():
    """Upload result of a .wav file as returned by the media host."""
    return dict(WAV_AUDIO)
