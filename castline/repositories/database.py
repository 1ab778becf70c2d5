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
SQLite database setup and repository factory.

Design principles:
- Raw SQL with parameter binding (no ORM)
- One connection per operation (thread-safe, no shared cursors)
- Every sqlite3 error leaves the repository layer as StoreError

Usage:
    from castline.repositories.database import create_repositories

    repos = create_repositories(config)
    user_repo = repos.user
    podcast_repo = repos.podcast
"""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Union

from structlog import get_logger

from ..utils.exceptions import DuplicateError, StoreError
from .category_repository import CategoryRepository
from .follow_repository import FollowRepository
from .podcast_repository import PodcastRepository
from .user_repository import UserRepository

if TYPE_CHECKING:
    from ..utils.config import Config

logger = get_logger(__name__)


SCHEMA_SQL = """
-- ========================================================================
-- USERS TABLE
-- ========================================================================
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY NOT NULL,
    email TEXT NOT NULL UNIQUE,
    name TEXT NULL,
    photo TEXT NULL,
    country TEXT NULL,
    language TEXT NULL,
    user_type TEXT NULL,
    role TEXT NOT NULL DEFAULT 'user',
    password_reset_token TEXT NULL,
    password_reset_expires TIMESTAMP NULL,
    active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (role IN ('user', 'admin')),
    CHECK (length(email) > 0)
);

CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_users_active ON users(active);

-- ========================================================================
-- FOLLOWS TABLE (directional follower -> following edges)
-- ========================================================================
CREATE TABLE IF NOT EXISTS follows (
    id TEXT PRIMARY KEY NOT NULL,
    follower_id TEXT NOT NULL,
    following_id TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (follower_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (following_id) REFERENCES users(id) ON DELETE CASCADE,
    UNIQUE(follower_id, following_id),
    CHECK (follower_id != following_id)
);

CREATE INDEX IF NOT EXISTS idx_follows_following ON follows(following_id);

-- ========================================================================
-- CATEGORIES TABLE
-- ========================================================================
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL UNIQUE,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CHECK (length(name) > 0)
);

-- ========================================================================
-- PODCASTS TABLE
-- ========================================================================
CREATE TABLE IF NOT EXISTS podcasts (
    id TEXT PRIMARY KEY NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    title TEXT NOT NULL,
    slug TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    category TEXT NULL,
    image TEXT NULL,
    audio_url TEXT NOT NULL,
    audio_duration REAL NULL,
    audio_public_id TEXT NULL,
    created_by TEXT NOT NULL,
    FOREIGN KEY (created_by) REFERENCES users(id) ON DELETE CASCADE,
    CHECK (length(title) > 0),
    CHECK (length(audio_url) > 0)
);

CREATE INDEX IF NOT EXISTS idx_podcasts_created_by ON podcasts(created_by);
CREATE INDEX IF NOT EXISTS idx_podcasts_created_at ON podcasts(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_podcasts_category ON podcasts(category);

-- Full-text index kept in sync by the podcast repository (no triggers)
CREATE VIRTUAL TABLE IF NOT EXISTS podcasts_fts USING fts5(
    podcast_id UNINDEXED,
    title,
    description,
    category
);
"""


class SqliteConnectionMixin:
    """Connection handling shared by the SQLite repositories."""

    db_path: Path

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with proper setup.

        Features:
        - Row factory for dict-like access
        - Foreign keys enabled
        - Automatic commit/rollback
        - sqlite3 errors rewrapped as StoreError
        """
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")

        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DuplicateError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def initialize_database(db_path: Union[str, Path]) -> None:
    """Create database file and schema if not exists (idempotent)."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")  # Write-Ahead Logging
        conn.execute("PRAGMA synchronous = NORMAL")
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()

    logger.debug("Database schema initialized", db_path=str(path))


@dataclass
class Repositories:
    """Container for all repository instances."""

    user: UserRepository
    follow: FollowRepository
    podcast: PodcastRepository
    category: CategoryRepository


def create_repositories(config: "Config") -> Repositories:
    """
    Create repository instances based on configuration.

    Args:
        config: Application configuration

    Returns:
        Repositories container with all repository instances
    """
    from .sqlite_category_repository import SqliteCategoryRepository
    from .sqlite_follow_repository import SqliteFollowRepository
    from .sqlite_podcast_repository import SqlitePodcastRepository
    from .sqlite_user_repository import SqliteUserRepository

    db_path = str(config.database_path)
    initialize_database(db_path)

    logger.info("Using SQLite database", db_path=db_path)

    return Repositories(
        user=SqliteUserRepository(db_path=db_path),
        follow=SqliteFollowRepository(db_path=db_path),
        podcast=SqlitePodcastRepository(db_path=db_path),
        category=SqliteCategoryRepository(db_path=db_path),
    )
