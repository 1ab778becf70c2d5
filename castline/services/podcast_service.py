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
Podcast service - business logic for podcast CRUD and search.

Ownership rules:
- The owner is always the authenticated creator and never changes
- Update and delete match on id AND owner; anything else is "not found"
"""

from typing import Any, Dict, List, Mapping, Optional

from structlog import get_logger

from ..models.podcast import Podcast
from ..repositories.podcast_repository import UPDATABLE_FIELDS, PodcastRepository
from ..utils.exceptions import MediaUploadError, NotFoundError
from .category_service import CategoryService
from .listing import SEARCH_LIMIT, Listing, require_search_term, run_listing
from .media_service import MediaService

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "Not found"


class PodcastService:
    """
    Service for podcast management operations.

    Handles business logic and validation; persistence is delegated to the
    repository and media host calls to MediaService.
    """

    def __init__(
        self,
        podcast_repository: PodcastRepository,
        category_service: CategoryService,
        media_service: MediaService,
        default_page_limit: int = 100,
    ):
        """
        Initialize podcast service.

        Args:
            podcast_repository: Repository for podcast persistence
            category_service: Validates category references
            media_service: Audio validation and cleanup
            default_page_limit: Page size when the client gives none
        """
        self.podcast_repository = podcast_repository
        self.category_service = category_service
        self.media_service = media_service
        self.default_page_limit = default_page_limit

    def list_podcasts(self, params: Mapping[str, str], owner_id: Optional[str] = None) -> Listing:
        """
        List podcasts with client query features applied.

        Args:
            params: Raw query parameters (filters, sort, fields, page, limit)
            owner_id: Only podcasts created by this user
        """
        return run_listing(
            self.podcast_repository,
            lambda: self.podcast_repository.query(owner_id=owner_id),
            params,
            self.default_page_limit,
        )

    def get_podcast(self, podcast_id: str) -> Dict[str, Any]:
        podcast = self.podcast_repository.get(podcast_id)
        if not podcast:
            raise NotFoundError(NOT_FOUND_MESSAGE, podcast_id=podcast_id)
        return podcast

    def create_podcast(
        self,
        owner_id: str,
        title: str,
        audio: Optional[Dict[str, Any]],
        description: str = "",
        category: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a podcast owned by ``owner_id``.

        Raises:
            InvalidInputError: Unknown category, missing or non-audio descriptor
        """
        if category:
            self.category_service.ensure_exists(category)

        asset = self.media_service.normalize_audio(audio)

        podcast = Podcast(
            title=title,
            description=description or "",
            category=category,
            image=image,
            audio=asset,
            created_by=owner_id,
        )
        return self.podcast_repository.create(podcast)

    def update_podcast(self, owner_id: str, podcast_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the mutable fields of an owned podcast.

        Ownership and audio cannot be changed; such keys are dropped.

        Raises:
            InvalidInputError: Unknown category
            NotFoundError: Podcast missing or owned by someone else
        """
        updates = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
        if updates.get("category"):
            self.category_service.ensure_exists(updates["category"])

        podcast = self.podcast_repository.update_owned(podcast_id, owner_id, updates)
        if not podcast:
            raise NotFoundError(NOT_FOUND_MESSAGE, podcast_id=podcast_id)

        logger.info("Updated podcast", podcast_id=podcast_id, fields=sorted(updates))
        return podcast

    async def delete_podcast(self, owner_id: str, podcast_id: str) -> Dict[str, Any]:
        """
        Delete an owned podcast, then try to remove its hosted audio.

        A failed cleanup is logged as ``podcast_audio_cleanup_failed`` and
        does not affect the result.

        Raises:
            NotFoundError: Podcast missing or owned by someone else
        """
        podcast = self.podcast_repository.delete_owned(podcast_id, owner_id)
        if not podcast:
            raise NotFoundError(NOT_FOUND_MESSAGE, podcast_id=podcast_id)

        public_id = podcast["audio"].get("public_id")
        if public_id:
            try:
                await self.media_service.destroy_audio(public_id)
            except MediaUploadError as e:
                logger.warning(
                    "podcast_audio_cleanup_failed",
                    podcast_id=podcast_id,
                    public_id=public_id,
                    error=str(e),
                )

        return podcast

    def search_podcasts(self, term: Optional[str]) -> List[Dict[str, Any]]:
        """
        Full-text search, at most 10 results ordered by relevance.

        Raises:
            InvalidInputError: If the term is empty
        """
        return self.podcast_repository.search(require_search_term(term), limit=SEARCH_LIMIT)

    def create_upload_signature(self) -> Dict[str, Any]:
        return self.media_service.create_upload_signature()
