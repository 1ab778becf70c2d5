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
Abstract repository interface for podcast persistence.

Podcast documents are returned with the owner populated:
    {"id": ..., "title": ..., "audio": {"url", "duration", "public_id"},
     "created_by": {"id", "name", "photo", "country", "language"}, ...}
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.pending_query import PendingQuery
from ..models.podcast import Podcast

# Fields an owner may change after creation. created_by and audio are not here.
UPDATABLE_FIELDS = frozenset({"title", "description", "category", "image"})


class PodcastRepository(ABC):
    """Abstract repository for podcast persistence operations."""

    @abstractmethod
    def query(self, owner_id: Optional[str] = None) -> PendingQuery:
        """
        Start a pending query over podcasts.

        Args:
            owner_id: Restrict to podcasts created by this user
        """
        pass

    @abstractmethod
    def find(self, query: PendingQuery) -> List[Dict[str, Any]]:
        """Execute a pending query and return podcast documents."""
        pass

    @abstractmethod
    def count(self, query: PendingQuery) -> int:
        """Count podcasts matching the query conditions (ignores paging)."""
        pass

    @abstractmethod
    def get(self, podcast_id: str) -> Optional[Dict[str, Any]]:
        """Get podcast document by id."""
        pass

    @abstractmethod
    def create(self, podcast: Podcast) -> Dict[str, Any]:
        """Insert a podcast and return its document."""
        pass

    @abstractmethod
    def update_owned(self, podcast_id: str, owner_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update a podcast only if ``owner_id`` created it.

        Identifier and ownership are matched in the same statement, so an
        unauthorized or racing update simply matches nothing.

        Returns:
            Updated document, or None if no podcast matched both id and owner
        """
        pass

    @abstractmethod
    def delete_owned(self, podcast_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        """
        Delete a podcast only if ``owner_id`` created it.

        Returns:
            The removed document, or None if nothing matched
        """
        pass

    @abstractmethod
    def search(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Full-text search ordered by descending relevance.

        The relevance score is used for ordering only and is not returned.
        """
        pass
