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

"""Category management and validation of category references."""

from typing import List

from structlog import get_logger

from ..models.podcast import Category
from ..repositories.category_repository import CategoryRepository
from ..utils.exceptions import InvalidInputError

logger = get_logger(__name__)

UNKNOWN_CATEGORY_MESSAGE = "There is no category with this name"


class CategoryService:
    def __init__(self, category_repository: CategoryRepository):
        self.category_repository = category_repository

    def list_categories(self) -> List[Category]:
        return self.category_repository.get_all()

    def create_category(self, name: str) -> Category:
        name = name.strip()
        if not name:
            raise InvalidInputError("Please, provide the category name")
        if self.category_repository.get_by_name(name):
            raise InvalidInputError("Category already exists", name=name)

        return self.category_repository.save(Category(name=name))

    def ensure_exists(self, name: str) -> None:
        """Raise InvalidInputError unless a category called ``name`` exists."""
        if not self.category_repository.get_by_name(name):
            raise InvalidInputError(UNKNOWN_CATEGORY_MESSAGE, category=name)
