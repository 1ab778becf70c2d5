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
Query string features for listing endpoints.

Composes client-controlled filtering, sorting, field selection and
pagination onto a PendingQuery. Nothing is executed here; the caller hands
the resulting query to a repository.

Recognized parameters:
    sort=title,-created_at      multi-key sort, '-' for descending
    fields=title,audio          sparse field selection (id always kept)
    page=2&limit=20             pagination (defaults: page 1, limit 100, at most 500)
    <field>=<value>             equality filter
    <field>[gte|gt|lte|lt]=<v>  comparison filter

Usage:
    features = QueryFeatures(repo.query(), request.query_params).filter().sort().limit_fields().paginate()
    documents = repo.find(features.query)
"""

import re
from typing import List, Mapping, Optional

from .pending_query import PendingQuery

CONTROL_PARAMS = frozenset({"page", "sort", "limit", "fields"})
COMPARISON_KEY = re.compile(r"^(?P<field>[\w.]+)\[(?P<op>gte|gt|lte|lt)\]$")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class QueryFeatures:
    """Chainable composer of query string features onto a pending query."""

    def __init__(self, query: PendingQuery, params: Mapping[str, str], default_limit: int = DEFAULT_LIMIT):
        """
        Args:
            query: Pending query to mutate
            params: Raw request parameters (e.g. ``request.query_params``)
            default_limit: Page size used when ``limit`` is absent or invalid
        """
        self.query = query
        self.params = dict(params)
        self.default_limit = default_limit
        self.page = DEFAULT_PAGE
        self.limit = default_limit

    def filter(self) -> "QueryFeatures":
        filters = {key: value for key, value in self.params.items() if key not in CONTROL_PARAMS}

        for key, value in filters.items():
            match = COMPARISON_KEY.match(key)
            if match:
                self.query.where(match.group("field"), value, op=match.group("op"))
            else:
                self.query.where(key, value)

        return self

    def sort(self) -> "QueryFeatures":
        sort_by = self.params.get("sort")
        if sort_by:
            self.query.sort(_split_list(sort_by))
        else:
            self.query.sort(list(self.query.schema.default_sort))
        return self

    def limit_fields(self) -> "QueryFeatures":
        fields = self.params.get("fields")
        if fields:
            self.query.select(_split_list(fields))
        else:
            self.query.exclude(self.query.schema.internal_fields)
        return self

    def paginate(self) -> "QueryFeatures":
        self.page = _positive_int(self.params.get("page"), DEFAULT_PAGE)
        self.limit = min(_positive_int(self.params.get("limit"), self.default_limit), MAX_LIMIT)

        self.query.skip((self.page - 1) * self.limit).limit(self.limit)
        return self
