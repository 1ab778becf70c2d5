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
Media host (Cloudinary) adapter.

Responsibilities:
- Transcode profile photos to WebP and upload them
- Validate audio descriptors produced by direct client uploads
- Delete hosted audio when its podcast is removed
- Sign parameters for direct client uploads

Audio is never proxied through this service: clients upload it straight to
Cloudinary with a signature from ``create_upload_signature`` and send back the
resulting descriptor.

The Cloudinary SDK is blocking, so network calls run in a worker thread.
Credentials are passed per call from Config.
"""

import asyncio
import io
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import cloudinary.uploader
import cloudinary.utils
from PIL import Image
from structlog import get_logger

from ..models.podcast import AudioAsset
from ..utils.config import Config
from ..utils.exceptions import InvalidInputError, MediaUploadError

logger = get_logger(__name__)

AUDIO_EXTENSIONS = ("wav", "mp3", "mp4", "wma", "flac", "m4a")
AUDIO_URL_PATTERN = re.compile(r"\.(%s)$" % "|".join(AUDIO_EXTENSIONS), re.IGNORECASE)

# Cloudinary stores audio under the "video" resource type
AUDIO_RESOURCE_TYPE = "video"


def is_audio_url(url: str) -> bool:
    """True if the URL path ends in an allowed audio extension."""
    return bool(AUDIO_URL_PATTERN.search(urlparse(url).path))


class MediaService:
    """Cloudinary uploads, deletions and signatures."""

    def __init__(self, config: Config):
        self.config = config

    def _credentials(self) -> Dict[str, str]:
        if not self.config.media_configured:
            raise MediaUploadError("Media host is not configured")
        return {
            "cloud_name": self.config.cloud_name,
            "api_key": self.config.cloud_api_key,
            "api_secret": self.config.cloud_api_secret,
        }

    # =========================================================================
    # Profile photos
    # =========================================================================

    def transcode_photo(self, buffer: bytes) -> bytes:
        """
        Re-encode an image as lossy WebP.

        Raises:
            MediaUploadError: If the buffer is not a readable image
        """
        try:
            with Image.open(io.BytesIO(buffer)) as image:
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA" if "transparency" in image.info else "RGB")
                output = io.BytesIO()
                image.save(output, format="WEBP", quality=self.config.photo_quality)
        except (OSError, ValueError) as e:
            raise MediaUploadError("Could not process the uploaded photo", error=str(e)) from e

        return output.getvalue()

    async def upload_profile_photo(self, buffer: bytes) -> str:
        """
        Transcode and upload a profile photo.

        Returns:
            Hosted ``secure_url`` of the uploaded image

        Raises:
            MediaUploadError: On transcode or upload failure
        """
        credentials = self._credentials()
        webp = self.transcode_photo(buffer)

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                io.BytesIO(webp),
                folder=self.config.photo_folder,
                resource_type="image",
                format="webp",
                **credentials,
            )
        except Exception as e:
            logger.error("profile_photo_upload_failed", error=str(e))
            raise MediaUploadError("Could not upload the photo", error=str(e)) from e

        logger.info("Uploaded profile photo", public_id=result.get("public_id"), size=len(webp))
        return result["secure_url"]

    # =========================================================================
    # Audio
    # =========================================================================

    def normalize_audio(self, descriptor: Optional[Dict[str, Any]]) -> AudioAsset:
        """
        Validate a client upload descriptor and keep only what we persist.

        Args:
            descriptor: Media host upload result ({secure_url, duration, public_id, ...})

        Raises:
            InvalidInputError: If the descriptor is missing or not audio
        """
        if not descriptor:
            raise InvalidInputError("Please, provide the audio object")

        url = descriptor.get("secure_url") or descriptor.get("url")
        if not url or not is_audio_url(url):
            raise InvalidInputError("Not audio, make sure that you uploaded an audio", url=url)

        return AudioAsset(
            url=url,
            duration=descriptor.get("duration"),
            public_id=descriptor.get("public_id"),
        )

    async def destroy_audio(self, public_id: str) -> None:
        """
        Delete a hosted audio file.

        Raises:
            MediaUploadError: If the media host did not confirm the deletion
        """
        credentials = self._credentials()

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                resource_type=AUDIO_RESOURCE_TYPE,
                invalidate=True,
                **credentials,
            )
        except Exception as e:
            raise MediaUploadError("Could not delete hosted audio", public_id=public_id, error=str(e)) from e

        if result.get("result") != "ok":
            raise MediaUploadError("Could not delete hosted audio", public_id=public_id, result=result.get("result"))

        logger.info("Deleted hosted audio", public_id=public_id)

    # =========================================================================
    # Direct upload signatures
    # =========================================================================

    def create_upload_signature(self) -> Dict[str, Any]:
        """
        Sign a timestamp for a direct client upload.

        Returns:
            {"timestamp", "signature", "cloudName", "apiKey"}; the secret is never included
        """
        credentials = self._credentials()
        timestamp = int(time.time())
        signature = cloudinary.utils.api_sign_request({"timestamp": timestamp}, credentials["api_secret"])

        return {
            "timestamp": timestamp,
            "signature": signature,
            "cloudName": credentials["cloud_name"],
            "apiKey": credentials["api_key"],
        }
