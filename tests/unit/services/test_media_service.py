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

"""Unit tests for MediaService (Cloudinary calls are patched)."""

import asyncio
import io
from unittest.mock import patch

import pytest
from PIL import Image

from castline.services.media_service import MediaService, is_audio_url
from castline.utils.config import Config
from castline.utils.exceptions import InvalidInputError, MediaUploadError


def png_bytes(mode="RGB"):
    buffer = io.BytesIO()
    Image.new(mode, (16, 16), color=(200, 10, 10) if mode == "RGB" else 128).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def media(config):
    return MediaService(config)


@pytest.fixture
def unconfigured(tmp_path):
    return MediaService(Config(database_path=tmp_path / "x.db"))


class TestAudioUrls:
    @pytest.mark.parametrize(
        "url",
        [
            "https://cdn.example.com/a.wav",
            "https://cdn.example.com/a.MP3",
            "https://cdn.example.com/path/a.m4a?version=3",
            "https://cdn.example.com/a.flac",
        ],
    )
    def test_audio_extensions(self, url):
        assert is_audio_url(url)

    @pytest.mark.parametrize(
        "url",
        ["https://cdn.example.com/a.pdf", "https://cdn.example.com/wav", "https://cdn.example.com/a.wav.png"],
    )
    def test_other_extensions(self, url):
        assert not is_audio_url(url)

    def test_normalize_keeps_persisted_fields(self, media, wav_audio):
        asset = media.normalize_audio(wav_audio)

        assert asset.url == wav_audio["secure_url"]
        assert asset.duration == 61.5
        assert asset.public_id == "podcasts/episode"

    def test_normalize_rejects_empty_descriptor(self, media):
        with pytest.raises(InvalidInputError):
            media.normalize_audio({})


class TestProfilePhoto:
    def test_transcode_to_webp(self, media):
        webp = media.transcode_photo(png_bytes())

        with Image.open(io.BytesIO(webp)) as image:
            assert image.format == "WEBP"
            assert image.size == (16, 16)

    def test_transcode_palette_image(self, media):
        webp = media.transcode_photo(png_bytes(mode="L"))

        assert webp[:4] == b"RIFF"

    def test_transcode_rejects_non_image(self, media):
        with pytest.raises(MediaUploadError):
            media.transcode_photo(b"definitely not an image")

    def test_upload_returns_secure_url(self, media):
        result = {"secure_url": "https://res.cloudinary.com/demo/image/upload/p.webp", "public_id": "p"}

        with patch("cloudinary.uploader.upload", return_value=result) as upload:
            url = asyncio.run(media.upload_profile_photo(png_bytes()))

        assert url == result["secure_url"]
        kwargs = upload.call_args.kwargs
        assert kwargs["folder"] == "userPhotos"
        assert kwargs["format"] == "webp"
        assert kwargs["api_secret"] == "api-secret"

    def test_upload_failure_raises(self, media):
        with patch("cloudinary.uploader.upload", side_effect=RuntimeError("timeout")):
            with pytest.raises(MediaUploadError, match="Could not upload"):
                asyncio.run(media.upload_profile_photo(png_bytes()))

    def test_upload_requires_credentials(self, unconfigured):
        with pytest.raises(MediaUploadError, match="not configured"):
            asyncio.run(unconfigured.upload_profile_photo(png_bytes()))


class TestDestroyAudio:
    def test_destroy_uses_video_resource_type(self, media):
        with patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            asyncio.run(media.destroy_audio("podcasts/episode"))

        assert destroy.call_args.args == ("podcasts/episode",)
        assert destroy.call_args.kwargs["resource_type"] == "video"

    def test_destroy_not_found_raises(self, media):
        with patch("cloudinary.uploader.destroy", return_value={"result": "not found"}):
            with pytest.raises(MediaUploadError):
                asyncio.run(media.destroy_audio("gone"))


class TestUploadSignature:
    def test_signature_does_not_leak_secret(self, media):
        signature = media.create_upload_signature()

        assert set(signature) == {"timestamp", "signature", "cloudName", "apiKey"}
        assert signature["cloudName"] == "demo"
        assert signature["apiKey"] == "api-key"
        assert "api-secret" not in str(signature)

    def test_signature_requires_credentials(self, unconfigured):
        with pytest.raises(MediaUploadError):
            unconfigured.create_upload_signature()
