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
SQLite implementation of podcast repository.

Design principles:
- Raw SQL with parameter binding (no ORM)
- Thread-safe via connection-per-operation
- Owner populated with a LEFT JOIN on users
- podcasts_fts is maintained here in the same transaction as the row it indexes

Relevance:
    bm25() returns lower-is-better scores, so search orders ascending. Title
    matches weigh most, then category, then description.
"""

import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from structlog import get_logger

from ..core.pending_query import FieldSpec, PendingQuery, QuerySchema
from ..models.podcast import Podcast
from ..utils.slug import generate_slug
from .database import SqliteConnectionMixin
from .podcast_repository import UPDATABLE_FIELDS, PodcastRepository

logger = get_logger(__name__)

PODCAST_SELECT = """
SELECT
    p.id, p.title, p.slug, p.description, p.category, p.image,
    p.audio_url, p.audio_duration, p.audio_public_id,
    p.created_by, p.created_at, p.updated_at,
    u.name AS owner_name, u.photo AS owner_photo,
    u.country AS owner_country, u.language AS owner_language
"""

PODCAST_FROM = "podcasts p LEFT JOIN users u ON u.id = p.created_by"

# Column weights: podcast_id (unindexed), title, description, category
BM25_RANK = "bm25(podcasts_fts, 0.0, 10.0, 1.0, 2.0)"

PODCAST_SCHEMA = QuerySchema.build(
    "podcast",
    [
        FieldSpec("id", "p.id"),
        FieldSpec("title", "p.title"),
        FieldSpec("slug", "p.slug"),
        FieldSpec("description", "p.description", sortable=False),
        FieldSpec("category", "p.category"),
        FieldSpec("image", "p.image", filterable=False, sortable=False),
        FieldSpec("audio", "p.audio_url", filterable=False, sortable=False),
        FieldSpec("audio.url", "p.audio_url", filterable=False, sortable=False),
        FieldSpec("audio.duration", "p.audio_duration", kind=float),
        FieldSpec("created_by", "p.created_by"),
        FieldSpec("created_at", "p.created_at", kind=datetime),
        FieldSpec("updated_at", "p.updated_at", kind=datetime),
    ],
    id_column="p.id",
)


def build_match_expression(term: str) -> Optional[str]:
    """
    Turn free text into an FTS5 MATCH expression.

    Each word becomes a quoted string token joined with OR, so punctuation in
    the input can never be parsed as FTS5 syntax.
    """
    tokens = re.findall(r"\w+", term)
    if not tokens:
        return None
    return " OR ".join(f'"{token}"' for token in tokens)


class SqlitePodcastRepository(SqliteConnectionMixin, PodcastRepository):
    """
    SQLite-based podcast repository.

    Thread-safety: Uses context manager for per-operation connections.
    """

    def __init__(self, db_path: str):
        """
        Initialize SQLite podcast repository.

        Args:
            db_path: Path to SQLite database file (e.g., "./data/castline.db")
        """
        self.db_path = Path(db_path)
        logger.info("Initialized SQLite podcast repository", db_path=str(self.db_path))

    # ============================================================================
    # Pending queries
    # ============================================================================

    def query(self, owner_id: Optional[str] = None) -> PendingQuery:
        if owner_id is None:
            return PendingQuery(PODCAST_SCHEMA)
        return PendingQuery(PODCAST_SCHEMA, ["p.created_by = ?"], [owner_id])

    def find(self, query: PendingQuery) -> List[Dict[str, Any]]:
        sql, params = query.compile(f"{PODCAST_SELECT} FROM {PODCAST_FROM}")

        with self._get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [query.project(self._row_to_document(row)) for row in rows]

    def count(self, query: PendingQuery) -> int:
        sql, params = query.compile_count(PODCAST_FROM)

        with self._get_connection() as conn:
            row = conn.execute(sql, params).fetchone()
            return row["count"] if row else 0

    # ============================================================================
    # Single-record operations
    # ============================================================================

    def get(self, podcast_id: str) -> Optional[Dict[str, Any]]:
        with self._get_connection() as conn:
            return self._fetch_document(conn, podcast_id)

    def create(self, podcast: Podcast) -> Dict[str, Any]:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO podcasts (
                    id, created_at, updated_at, title, slug, description, category, image,
                    audio_url, audio_duration, audio_public_id, created_by
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    podcast.id,
                    podcast.created_at.isoformat(),
                    podcast.updated_at.isoformat(),
                    podcast.title,
                    podcast.slug,
                    podcast.description,
                    podcast.category,
                    podcast.image,
                    podcast.audio.url,
                    podcast.audio.duration,
                    podcast.audio.public_id,
                    podcast.created_by,
                ),
            )
            self._index(conn, podcast.id, podcast.title, podcast.description, podcast.category)
            document = self._fetch_document(conn, podcast.id)

        logger.info("Created podcast", podcast_id=podcast.id, owner_id=podcast.created_by)
        return document

    def update_owned(self, podcast_id: str, owner_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        update_fields = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "title" in update_fields:
            update_fields["slug"] = generate_slug(update_fields["title"])

        set_clause = ", ".join([f"{name} = ?" for name in update_fields] + ["updated_at = ?"])
        values = list(update_fields.values()) + [datetime.now(timezone.utc).isoformat()]

        with self._get_connection() as conn:
            cursor = conn.execute(
                f"""
                UPDATE podcasts
                SET {set_clause}
                WHERE id = ? AND created_by = ?
                """,
                values + [podcast_id, owner_id],
            )
            if cursor.rowcount == 0:
                return None

            document = self._fetch_document(conn, podcast_id)
            self._index(conn, podcast_id, document["title"], document["description"], document["category"])

        logger.debug("Updated podcast", podcast_id=podcast_id, fields=sorted(update_fields))
        return document

    def delete_owned(self, podcast_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        with self._get_connection() as conn:
            document = self._fetch_document(conn, podcast_id)
            cursor = conn.execute(
                "DELETE FROM podcasts WHERE id = ? AND created_by = ?",
                (podcast_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None

            conn.execute("DELETE FROM podcasts_fts WHERE podcast_id = ?", (podcast_id,))

        logger.info("Deleted podcast", podcast_id=podcast_id, owner_id=owner_id)
        return document

    def search(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        match = build_match_expression(term)
        if match is None:
            return []

        with self._get_connection() as conn:
            rows = conn.execute(
                f"""
                {PODCAST_SELECT}
                FROM podcasts_fts
                JOIN podcasts p ON p.id = podcasts_fts.podcast_id
                LEFT JOIN users u ON u.id = p.created_by
                WHERE podcasts_fts MATCH ?
                ORDER BY {BM25_RANK} ASC, p.id ASC
                LIMIT ?
                """,
                (match, limit),
            ).fetchall()

        return [self._row_to_document(row) for row in rows]

    # ============================================================================
    # Helpers
    # ============================================================================

    def _index(
        self,
        conn: sqlite3.Connection,
        podcast_id: str,
        title: str,
        description: Optional[str],
        category: Optional[str],
    ) -> None:
        """Replace the full-text entry of a podcast."""
        conn.execute("DELETE FROM podcasts_fts WHERE podcast_id = ?", (podcast_id,))
        conn.execute(
            "INSERT INTO podcasts_fts (podcast_id, title, description, category) VALUES (?, ?, ?, ?)",
            (podcast_id, title, description or "", category or ""),
        )

    def _fetch_document(self, conn: sqlite3.Connection, podcast_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            f"{PODCAST_SELECT} FROM {PODCAST_FROM} WHERE p.id = ?",
            (podcast_id,),
        ).fetchone()
        return self._row_to_document(row) if row else None

    def _row_to_document(self, row: sqlite3.Row) -> Dict[str, Any]:
        """Convert a joined row into a podcast document with nested audio and owner."""
        return {
            "id": row["id"],
            "title": row["title"],
            "slug": row["slug"],
            "description": row["description"],
            "category": row["category"],
            "image": row["image"],
            "audio": {
                "url": row["audio_url"],
                "duration": row["audio_duration"],
                "public_id": row["audio_public_id"],
            },
            "created_by": {
                "id": row["created_by"],
                "name": row["owner_name"],
                "photo": row["owner_photo"],
                "country": row["owner_country"],
                "language": row["owner_language"],
            },
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
