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

"""Abstract repository interface for podcast categories (looked up by name)."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.podcast import Category


class CategoryRepository(ABC):
    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        pass

    @abstractmethod
    def get_all(self) -> List[Category]:
        pass

    @abstractmethod
    def save(self, category: Category) -> Category:
        """
        Insert a category.

        Raises:
            DuplicateError: If the name is taken
        """
        pass
