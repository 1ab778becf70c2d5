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
Unit tests for PodcastService.

Tests cover:
- Audio descriptor validation on create
- Category references
- Ownership rules for update and delete
- Hosted audio cleanup after delete
- Search term validation
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from castline.utils.exceptions import InvalidInputError, MediaUploadError, NotFoundError


@pytest.fixture
def service(state):
    return state.podcast_service


@pytest.fixture
def podcast(service, alice, wav_audio):
    return service.create_podcast(alice.id, "Late Night Jazz", wav_audio, description="Smooth tunes")


class TestCreatePodcast:
    def test_wav_upload_is_accepted(self, service, alice, wav_audio):
        created = service.create_podcast(alice.id, "Episode One", wav_audio)

        assert created["audio"]["url"] == wav_audio["secure_url"]
        assert created["audio"]["duration"] == 61.5
        assert created["audio"]["public_id"] == "podcasts/episode"
        assert created["created_by"]["id"] == alice.id

    def test_upload_metadata_is_not_persisted(self, service, alice, wav_audio):
        created = service.create_podcast(alice.id, "Episode One", wav_audio)

        assert set(created["audio"]) == {"url", "duration", "public_id"}

    def test_non_audio_upload_is_rejected(self, service, alice, repos):
        pdf = {"secure_url": "https://res.cloudinary.com/demo/raw/upload/v1/notes.pdf"}

        with pytest.raises(InvalidInputError, match="Not audio"):
            service.create_podcast(alice.id, "Notes", pdf)

        assert repos.podcast.count(repos.podcast.query()) == 0

    def test_missing_audio_is_rejected(self, service, alice):
        with pytest.raises(InvalidInputError, match="provide the audio object"):
            service.create_podcast(alice.id, "Silence", None)

    def test_unknown_category_is_rejected(self, service, alice, wav_audio):
        with pytest.raises(InvalidInputError, match="no category with this name"):
            service.create_podcast(alice.id, "Episode", wav_audio, category="Nope")

    def test_known_category_is_accepted(self, state, service, alice, wav_audio):
        state.category_service.create_category("Music")

        created = service.create_podcast(alice.id, "Episode", wav_audio, category="Music")

        assert created["category"] == "Music"


class TestOwnership:
    def test_owner_updates(self, service, alice, podcast):
        updated = service.update_podcast(alice.id, podcast["id"], {"title": "Early Morning Jazz"})

        assert updated["title"] == "Early Morning Jazz"

    def test_non_owner_update_is_not_found_and_row_unchanged(self, service, bob, podcast):
        with pytest.raises(NotFoundError):
            service.update_podcast(bob.id, podcast["id"], {"title": "Mine Now"})

        assert service.get_podcast(podcast["id"])["title"] == "Late Night Jazz"

    def test_owner_and_audio_cannot_be_changed(self, service, alice, bob, podcast):
        updated = service.update_podcast(
            alice.id,
            podcast["id"],
            {"created_by": bob.id, "audio": {"secure_url": "https://x/y.mp3"}, "description": "New"},
        )

        assert updated["created_by"]["id"] == alice.id
        assert updated["audio"]["url"] == podcast["audio"]["url"]
        assert updated["description"] == "New"

    def test_update_with_unknown_category_is_rejected(self, service, alice, podcast):
        with pytest.raises(InvalidInputError):
            service.update_podcast(alice.id, podcast["id"], {"category": "Nope"})

    def test_non_owner_delete_is_not_found(self, service, bob, podcast):
        with pytest.raises(NotFoundError):
            asyncio.run(service.delete_podcast(bob.id, podcast["id"]))

        assert service.get_podcast(podcast["id"])["id"] == podcast["id"]

    def test_get_missing_podcast(self, service):
        with pytest.raises(NotFoundError, match="Not found"):
            service.get_podcast("missing")


class TestDeleteCleanup:
    def test_delete_removes_hosted_audio(self, state, service, alice, podcast):
        state.media_service.destroy_audio = AsyncMock(return_value=None)

        deleted = asyncio.run(service.delete_podcast(alice.id, podcast["id"]))

        assert deleted["id"] == podcast["id"]
        state.media_service.destroy_audio.assert_awaited_once_with("podcasts/episode")

    def test_cleanup_failure_is_logged_not_raised(self, state, service, alice, podcast):
        state.media_service.destroy_audio = AsyncMock(side_effect=MediaUploadError("boom"))

        with capture_logs() as logs:
            asyncio.run(service.delete_podcast(alice.id, podcast["id"]))

        assert any(entry["event"] == "podcast_audio_cleanup_failed" for entry in logs)
        with pytest.raises(NotFoundError):
            service.get_podcast(podcast["id"])


class TestSearchAndListing:
    def test_empty_search_term_is_rejected(self, service):
        for term in (None, "", "   "):
            with pytest.raises(InvalidInputError, match="check search param"):
                service.search_podcasts(term)

    def test_search_finds_by_description(self, service, podcast):
        assert [p["id"] for p in service.search_podcasts("smooth")] == [podcast["id"]]

    def test_list_mine_only_returns_own_podcasts(self, service, alice, bob, wav_audio, podcast):
        service.create_podcast(bob.id, "Bob Talks", wav_audio)

        listing = service.list_podcasts({}, owner_id=alice.id)

        assert listing.docs_count == 1
        assert [p["id"] for p in listing.documents] == [podcast["id"]]
