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

"""Shared execution of composed listings and search term validation."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

from ..core.pending_query import PendingQuery
from ..core.query_features import QueryFeatures
from ..utils.exceptions import InvalidInputError


@dataclass
class Listing:
    """One page of documents plus the number of documents matching the filters."""

    documents: List[Dict[str, Any]]
    docs_count: int
    page: int
    limit: int


def run_listing(
    repository: Any,
    make_query: Callable[[], PendingQuery],
    params: Mapping[str, str],
    default_limit: int,
    hidden_fields: FrozenSet[str] = frozenset(),
) -> Listing:
    """
    Apply all query features to one pending query and only the filters to a
    second, so ``docs_count`` never depends on page, limit, sort or fields.

    Args:
        repository: Repository exposing ``find`` and ``count``
        make_query: Factory for fresh pending queries with the base conditions
        params: Raw request query parameters
        default_limit: Page size when the client gives none
        hidden_fields: Document keys removed even if explicitly selected
    """
    features = QueryFeatures(make_query(), params, default_limit).filter().sort().limit_fields().paginate()
    if hidden_fields:
        features.query.exclude(hidden_fields)

    documents = repository.find(features.query)
    docs_count = repository.count(QueryFeatures(make_query(), params, default_limit).filter().query)

    return Listing(documents=documents, docs_count=docs_count, page=features.page, limit=features.limit)


SEARCH_LIMIT = 10
SEARCH_PARAM_MESSAGE = "Please, check search param"


def require_search_term(term: Optional[str]) -> str:
    """Return the stripped search term, or raise InvalidInputError if it is empty."""
    if term is None or not term.strip():
        raise InvalidInputError(SEARCH_PARAM_MESSAGE)
    return term.strip()
