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
Repository layer for data persistence.

Abstract interfaces live beside their SQLite implementations; services depend
on the interfaces only.
"""

from .category_repository import CategoryRepository
from .database import Repositories, create_repositories, initialize_database
from .follow_repository import FollowRepository
from .podcast_repository import PodcastRepository
from .sqlite_category_repository import SqliteCategoryRepository
from .sqlite_follow_repository import SqliteFollowRepository
from .sqlite_podcast_repository import SqlitePodcastRepository
from .sqlite_user_repository import SqliteUserRepository
from .user_repository import UserRepository

__all__ = [
    "CategoryRepository",
    "FollowRepository",
    "PodcastRepository",
    "UserRepository",
    "Repositories",
    "create_repositories",
    "initialize_database",
    "SqliteCategoryRepository",
    "SqliteFollowRepository",
    "SqlitePodcastRepository",
    "SqliteUserRepository",
]
