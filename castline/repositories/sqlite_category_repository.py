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

"""SQLite implementation of category repository."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from structlog import get_logger

from ..models.podcast import Category
from .category_repository import CategoryRepository
from .database import SqliteConnectionMixin

logger = get_logger(__name__)


class SqliteCategoryRepository(SqliteConnectionMixin, CategoryRepository):
    def __init__(self, db_path: str):
        self.db_path = Path(db_path)
        logger.info("Initialized SQLite category repository", db_path=str(self.db_path))

    def get_by_name(self, name: str) -> Optional[Category]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT id, name, created_at FROM categories WHERE name = ?",
                (name,),
            ).fetchone()
            return self._row_to_category(row) if row else None

    def get_all(self) -> List[Category]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT id, name, created_at FROM categories ORDER BY name ASC").fetchall()
            return [self._row_to_category(row) for row in rows]

    def save(self, category: Category) -> Category:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO categories (id, name, created_at) VALUES (?, ?, ?)",
                (category.id, category.name, category.created_at.isoformat()),
            )

        logger.info("Created category", name=category.name)
        return category

    def _row_to_category(self, row: sqlite3.Row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
