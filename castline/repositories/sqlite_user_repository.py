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
SQLite implementation of user repository.

Design principles:
- Raw SQL with parameter binding (no ORM)
- Follows the same patterns as SqlitePodcastRepository
- Thread-safe via connection-per-operation
- Relationship queries use id subqueries so every listing shares one FROM clause
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from structlog import get_logger

from ..core.pending_query import FieldSpec, PendingQuery, QuerySchema
from ..models.user import User, UserRole
from .database import SqliteConnectionMixin
from .user_repository import ADMIN_UPDATABLE_FIELDS, UserRepository

logger = get_logger(__name__)

USER_COLUMNS = (
    "u.id, u.email, u.name, u.photo, u.country, u.language, u.user_type, u.role, "
    "u.password_reset_token, u.password_reset_expires, u.active, u.created_at"
)

USER_SCHEMA = QuerySchema.build(
    "user",
    [
        FieldSpec("id", "u.id"),
        FieldSpec("email", "u.email"),
        FieldSpec("name", "u.name"),
        FieldSpec("photo", "u.photo", filterable=False, sortable=False),
        FieldSpec("country", "u.country"),
        FieldSpec("language", "u.language"),
        FieldSpec("user_type", "u.user_type"),
        FieldSpec("role", "u.role"),
        FieldSpec("active", "u.active", kind=bool),
        FieldSpec("created_at", "u.created_at", kind=datetime),
        FieldSpec("password_reset_token", "u.password_reset_token", filterable=False, sortable=False),
        FieldSpec("password_reset_expires", "u.password_reset_expires", filterable=False, sortable=False),
    ],
    id_column="u.id",
    internal_fields=frozenset({"password_reset_token", "password_reset_expires"}),
)

ACTIVE_CONDITION = "u.active = 1"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqliteUserRepository(SqliteConnectionMixin, UserRepository):
    """
    SQLite-based user repository.

    Thread-safety: Uses context manager for per-operation connections.
    """

    def __init__(self, db_path: str):
        """
        Initialize SQLite user repository.

        Args:
            db_path: Path to SQLite database file (e.g., "./data/castline.db")
        """
        self.db_path = Path(db_path)
        logger.info("Initialized SQLite user repository", db_path=str(self.db_path))

    # ============================================================================
    # Pending queries
    # ============================================================================

    def query(self, active_only: bool = True) -> PendingQuery:
        return PendingQuery(USER_SCHEMA, [ACTIVE_CONDITION] if active_only else [])

    def query_followers(self, user_id: str) -> PendingQuery:
        return PendingQuery(
            USER_SCHEMA,
            [ACTIVE_CONDITION, "u.id IN (SELECT follower_id FROM follows WHERE following_id = ?)"],
            [user_id],
        )

    def query_following(self, user_id: str) -> PendingQuery:
        return PendingQuery(
            USER_SCHEMA,
            [ACTIVE_CONDITION, "u.id IN (SELECT following_id FROM follows WHERE follower_id = ?)"],
            [user_id],
        )

    def query_not_followed_by(self, user_id: str) -> PendingQuery:
        return PendingQuery(
            USER_SCHEMA,
            [
                ACTIVE_CONDITION,
                "u.id != ?",
                "u.id NOT IN (SELECT following_id FROM follows WHERE follower_id = ?)",
            ],
            [user_id, user_id],
        )

    def find(self, query: PendingQuery) -> List[Dict[str, Any]]:
        sql, params = query.compile(f"SELECT {USER_COLUMNS} FROM users u")

        with self._get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [query.project(self._row_to_document(row)) for row in rows]

    def count(self, query: PendingQuery) -> int:
        sql, params = query.compile_count("users u")

        with self._get_connection() as conn:
            row = conn.execute(sql, params).fetchone()
            return row["count"] if row else 0

    # ============================================================================
    # Single-record operations
    # ============================================================================

    def get_by_id(self, user_id: str, active_only: bool = True) -> Optional[User]:
        """Get user by internal UUID (primary key)."""
        sql = f"SELECT {USER_COLUMNS} FROM users u WHERE u.id = ?"
        if active_only:
            sql += f" AND {ACTIVE_CONDITION}"

        with self._get_connection() as conn:
            row = conn.execute(sql, (user_id,)).fetchone()
            return self._row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users u WHERE u.email = ?",
                (email,),
            ).fetchone()
            return self._row_to_user(row) if row else None

    def create(self, user: User) -> User:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, name, photo, country, language, user_type, role,
                    password_reset_token, password_reset_expires, active, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user.id,
                    user.email,
                    user.name,
                    user.photo,
                    user.country,
                    user.language,
                    user.user_type,
                    user.role.value,
                    user.password_reset_token,
                    user.password_reset_expires.isoformat() if user.password_reset_expires else None,
                    1 if user.active else 0,
                    user.created_at.isoformat(),
                ),
            )

        logger.info("Created user", user_id=user.id, role=user.role.value)
        return user

    def update(self, user_id: str, fields: Dict[str, Any], active_only: bool = True) -> Optional[User]:
        update_fields = {k: v for k, v in fields.items() if k in ADMIN_UPDATABLE_FIELDS}
        ignored = set(fields) - set(update_fields)
        if ignored:
            logger.warning("Ignoring non-updatable user fields", user_id=user_id, fields=sorted(ignored))

        if "active" in update_fields:
            update_fields["active"] = 1 if update_fields["active"] else 0
        if isinstance(update_fields.get("role"), UserRole):
            update_fields["role"] = update_fields["role"].value

        where = "id = ?" + (" AND active = 1" if active_only else "")

        with self._get_connection() as conn:
            if update_fields:
                set_clause = ", ".join(f"{name} = ?" for name in update_fields)
                cursor = conn.execute(
                    f"UPDATE users SET {set_clause} WHERE {where}",
                    list(update_fields.values()) + [user_id],
                )
                if cursor.rowcount == 0:
                    return None
                logger.debug("Updated user", user_id=user_id, fields=sorted(update_fields))

            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users u WHERE u.{where}",
                (user_id,),
            ).fetchone()
            return self._row_to_user(row) if row else None

    def delete(self, user_id: str) -> bool:
        """Delete user by ID."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("Deleted user", user_id=user_id)
            return deleted

    def search(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        pattern = f"%{_escape_like(term.lower())}%"

        with self._get_connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {USER_COLUMNS}
                FROM users u
                WHERE {ACTIVE_CONDITION}
                  AND (lower(u.name) LIKE ? ESCAPE '\\' OR lower(u.email) LIKE ? ESCAPE '\\')
                ORDER BY u.name ASC, u.id ASC
                LIMIT ?
                """,
                (pattern, pattern, limit),
            ).fetchall()

        return [self._row_to_document(row) for row in rows]

    # ============================================================================
    # Row conversion
    # ============================================================================

    def _row_to_document(self, row: sqlite3.Row) -> Dict[str, Any]:
        document = dict(row)
        document["active"] = bool(document["active"])
        return document

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Convert database row to User model."""
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            photo=row["photo"],
            country=row["country"],
            language=row["language"],
            user_type=row["user_type"],
            role=UserRole(row["role"]),
            password_reset_token=row["password_reset_token"],
            password_reset_expires=(
                datetime.fromisoformat(row["password_reset_expires"]) if row["password_reset_expires"] else None
            ),
            active=bool(row["active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
