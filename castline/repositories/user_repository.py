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
Abstract repository interface for user persistence.

Listing methods return PendingQuery objects that callers refine (see
QueryFeatures) and hand back to ``find``/``count`` for execution. Documents
are plain dicts so that field projection can drop keys.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.pending_query import PendingQuery
from ..models.user import User

# Fields a user may change on their own profile
SELF_UPDATABLE_FIELDS = frozenset({"name", "email", "language", "country", "user_type", "photo"})

# Fields an admin may change on any account (never passwords)
ADMIN_UPDATABLE_FIELDS = SELF_UPDATABLE_FIELDS | {"role", "active"}


class UserRepository(ABC):
    """
    Abstract repository for user persistence operations.

    Implementations must provide thread-safe access to user data.
    """

    @abstractmethod
    def query(self, active_only: bool = True) -> PendingQuery:
        """
        Start a pending query over users.

        Args:
            active_only: Hide soft-deleted users

        Returns:
            Unexecuted PendingQuery
        """
        pass

    @abstractmethod
    def query_followers(self, user_id: str) -> PendingQuery:
        """Pending query over active users who follow ``user_id``."""
        pass

    @abstractmethod
    def query_following(self, user_id: str) -> PendingQuery:
        """Pending query over active users followed by ``user_id``."""
        pass

    @abstractmethod
    def query_not_followed_by(self, user_id: str) -> PendingQuery:
        """Pending query over active users ``user_id`` does not follow (excluding themselves)."""
        pass

    @abstractmethod
    def find(self, query: PendingQuery) -> List[Dict[str, Any]]:
        """
        Execute a pending query.

        Raises:
            QueryError: If the query referenced unknown fields
        """
        pass

    @abstractmethod
    def count(self, query: PendingQuery) -> int:
        """Count rows matching the query conditions (ignores paging)."""
        pass

    @abstractmethod
    def get_by_id(self, user_id: str, active_only: bool = True) -> Optional[User]:
        """
        Get user by internal UUID (primary key).

        Args:
            user_id: Internal UUID of the user
            active_only: Return None for soft-deleted users

        Returns:
            User if found, None otherwise
        """
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        pass

    @abstractmethod
    def create(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateError: If the email is already registered
        """
        pass

    @abstractmethod
    def update(self, user_id: str, fields: Dict[str, Any], active_only: bool = True) -> Optional[User]:
        """
        Update the given fields of a user.

        Args:
            user_id: Internal UUID of the user
            fields: Column values; keys must be in ADMIN_UPDATABLE_FIELDS
            active_only: Do not touch soft-deleted users

        Returns:
            The updated user, or None if no user matched
        """
        pass

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """
        Physically delete user by ID.

        Returns:
            True if user was deleted, False if not found
        """
        pass

    @abstractmethod
    def search(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Active users whose name or email contains ``term`` (case-insensitive)."""
        pass
