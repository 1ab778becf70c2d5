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
Abstract repository interface for follow edges between users.
"""

from abc import ABC, abstractmethod
from typing import List, Set

from ..models.user import Follow


class FollowRepository(ABC):
    """
    Abstract repository for follow edge persistence.

    An edge is unique per (follower_id, following_id) pair.
    """

    @abstractmethod
    def add(self, follow: Follow) -> Follow:
        """
        Add a follow edge.

        Raises:
            DuplicateError: If the edge already exists
        """
        pass

    @abstractmethod
    def remove(self, follower_id: str, following_id: str) -> bool:
        """
        Remove a follow edge.

        Returns:
            True if the edge was removed, False if not found
        """
        pass

    @abstractmethod
    def exists(self, follower_id: str, following_id: str) -> bool:
        """Check whether ``follower_id`` follows ``following_id``."""
        pass

    @abstractmethod
    def get_followed_among(self, follower_id: str, user_ids: List[str]) -> Set[str]:
        """
        Which of ``user_ids`` does ``follower_id`` follow.

        Must be answered with a single store query regardless of len(user_ids).

        Returns:
            Subset of ``user_ids``
        """
        pass
