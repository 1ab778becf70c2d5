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
SQLite implementation of the follow edge repository.

Design principles:
- Raw SQL with parameter binding (no ORM)
- Thread-safe via connection-per-operation
"""

from pathlib import Path
from typing import List, Set

from structlog import get_logger

from ..models.user import Follow
from .database import SqliteConnectionMixin
from .follow_repository import FollowRepository

logger = get_logger(__name__)


class SqliteFollowRepository(SqliteConnectionMixin, FollowRepository):
    """
    SQLite-based follow edge repository.

    Thread-safety: Uses context manager for per-operation connections.
    """

    def __init__(self, db_path: str):
        """
        Initialize SQLite follow repository.

        Args:
            db_path: Path to SQLite database file (e.g., "./data/castline.db")
        """
        self.db_path = Path(db_path)
        logger.info("Initialized SQLite follow repository", db_path=str(self.db_path))

    def add(self, follow: Follow) -> Follow:
        """Add a follow edge."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO follows (id, follower_id, following_id, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    follow.id,
                    follow.follower_id,
                    follow.following_id,
                    follow.created_at.isoformat(),
                ),
            )

        logger.debug("Added follow", follower_id=follow.follower_id, following_id=follow.following_id)
        return follow

    def remove(self, follower_id: str, following_id: str) -> bool:
        """Remove a follow edge."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                DELETE FROM follows
                WHERE follower_id = ? AND following_id = ?
                """,
                (follower_id, following_id),
            )

            removed = cursor.rowcount > 0
            if removed:
                logger.debug("Removed follow", follower_id=follower_id, following_id=following_id)
            return removed

    def exists(self, follower_id: str, following_id: str) -> bool:
        """Check whether a follow edge exists."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT 1 FROM follows
                WHERE follower_id = ? AND following_id = ?
                LIMIT 1
                """,
                (follower_id, following_id),
            )
            return cursor.fetchone() is not None

    def get_followed_among(self, follower_id: str, user_ids: List[str]) -> Set[str]:
        """Single IN query over the candidate ids."""
        if not user_ids:
            return set()

        placeholders = ", ".join("?" for _ in user_ids)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT following_id FROM follows
                WHERE follower_id = ? AND following_id IN ({placeholders})
                """,
                [follower_id, *user_ids],
            )
            return {row["following_id"] for row in cursor.fetchall()}
