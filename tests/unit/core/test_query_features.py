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
Unit tests for QueryFeatures and PendingQuery.

Tests cover:
- Filter translation (equality, comparison operators, control params ignored)
- Deferred errors for unknown fields and bad values
- Sorting with the identifier tiebreaker
- Field selection and internal field exclusion
- Pagination defaults and fallbacks
- Executed against SQLite: comparison semantics, docsCount, page concatenation
"""

from datetime import datetime, timedelta, timezone

import pytest

from castline.core.pending_query import FieldSpec, PendingQuery, QuerySchema, coerce_value
from castline.core.query_features import DEFAULT_LIMIT, MAX_LIMIT, QueryFeatures
from castline.models.podcast import AudioAsset, Podcast
from castline.services.listing import run_listing
from castline.utils.exceptions import QueryError

SCHEMA = QuerySchema.build(
    "item",
    [
        FieldSpec("id", "i.id"),
        FieldSpec("name", "i.name"),
        FieldSpec("duration", "i.duration", kind=float),
        FieldSpec("plays", "i.plays", kind=int),
        FieldSpec("secret", "i.secret", filterable=False, sortable=False),
        FieldSpec("created_at", "i.created_at"),
    ],
    id_column="i.id",
    internal_fields=frozenset({"secret"}),
)


def compose(params, **kwargs):
    return QueryFeatures(PendingQuery(SCHEMA), params, **kwargs)


class TestFilter:
    def test_equality_and_comparison_filters(self):
        query = compose({"name": "abc", "duration[gte]": "10", "plays[lt]": "5"}).filter().query

        where, params = query.where_clause()

        assert where == "WHERE (i.name = ?) AND (i.duration >= ?) AND (i.plays < ?)"
        assert params == ["abc", 10.0, 5]

    @pytest.mark.parametrize("op,sql", [("gte", ">="), ("gt", ">"), ("lte", "<="), ("lt", "<")])
    def test_each_comparison_operator(self, op, sql):
        query = compose({f"duration[{op}]": "1.5"}).filter().query

        assert query.where_clause() == (f"WHERE (i.duration {sql} ?)", [1.5])

    def test_control_params_are_not_filters(self):
        query = compose({"page": "2", "limit": "5", "sort": "name", "fields": "name"}).filter().query

        assert query.where_clause() == ("", [])
        assert query.errors == []

    def test_unknown_field_fails_only_on_execution(self):
        query = compose({"nope": "1"}).filter().query

        # Composing does not raise
        assert query.errors

        with pytest.raises(QueryError):
            query.compile("SELECT * FROM items i")

    def test_non_filterable_field_is_rejected(self):
        query = compose({"secret": "x"}).filter().query

        with pytest.raises(QueryError, match="secret"):
            query.validate()

    def test_uncoercible_value_is_rejected(self):
        query = compose({"plays[gte]": "many"}).filter().query

        with pytest.raises(QueryError, match="plays"):
            query.validate()

    def test_offset_timestamps_are_normalized_to_utc(self):
        assert coerce_value(datetime, "2026-03-01T17:30:00+05:00") == "2026-03-01T12:30:00+00:00"
        assert coerce_value(datetime, "2026-03-01T12:30:00") == "2026-03-01T12:30:00+00:00"


class TestSort:
    def test_multi_key_sort_with_tiebreaker(self):
        query = compose({"sort": "name,-duration"}).sort().query

        assert query.order_clause() == "ORDER BY i.name ASC, i.duration DESC, i.id ASC"

    def test_default_sort(self):
        query = compose({}).sort().query

        assert query.order_clause() == "ORDER BY i.created_at DESC, i.id ASC"

    def test_unknown_sort_key_is_rejected(self):
        query = compose({"sort": "-bogus"}).sort().query

        with pytest.raises(QueryError):
            query.validate()


class TestLimitFields:
    def test_selected_fields_keep_id(self):
        query = compose({"fields": "name"}).limit_fields().query

        projected = query.project({"id": "1", "name": "a", "duration": 3.0, "secret": "s"})

        assert projected == {"id": "1", "name": "a"}

    def test_internal_fields_hidden_by_default(self):
        query = compose({}).limit_fields().query

        projected = query.project({"id": "1", "name": "a", "secret": "s"})

        assert projected == {"id": "1", "name": "a"}


class TestPaginate:
    def test_defaults(self):
        features = compose({}).paginate()

        assert (features.page, features.limit) == (1, DEFAULT_LIMIT)
        assert features.query.limit_clause() == ("LIMIT ? OFFSET ?", [DEFAULT_LIMIT, 0])

    def test_skip_and_take(self):
        features = compose({"page": "3", "limit": "20"}).paginate()

        assert features.query.limit_clause() == ("LIMIT ? OFFSET ?", [20, 40])

    @pytest.mark.parametrize("page,limit", [("0", "-5"), ("abc", "x"), ("-1", "0")])
    def test_invalid_values_fall_back_to_defaults(self, page, limit):
        features = compose({"page": page, "limit": limit}, default_limit=25).paginate()

        assert (features.page, features.limit) == (1, 25)

    def test_limit_is_capped(self):
        features = compose({"limit": "100000"}).paginate()

        assert features.limit == MAX_LIMIT
        assert features.query.limit_clause() == ("LIMIT ? OFFSET ?", [MAX_LIMIT, 0])

    def test_chain_returns_pending_query_without_executing(self):
        features = compose({"name": "x", "sort": "name", "fields": "name", "page": "2", "limit": "1"})

        result = features.filter().sort().limit_fields().paginate()

        assert result is features
        assert isinstance(result.query, PendingQuery)


# =============================================================================
# Executed against SQLite podcasts
# =============================================================================


@pytest.fixture
def podcasts(repos, alice):
    """Seven podcasts, one without a duration."""
    durations = [5.0, 10.0, 15.0, 20.0, 25.0, 30.0, None]
    created = []
    for index, duration in enumerate(durations):
        podcast = Podcast(
            title=f"Episode {index}",
            audio=AudioAsset(url=f"https://cdn.example.com/{index}.mp3", duration=duration),
            created_by=alice.id,
        )
        created.append(repos.podcast.create(podcast))
    return created


class TestExecutedQueries:
    def test_gte_matches_exactly_rows_at_or_above(self, repos, podcasts):
        params = {"audio.duration[gte]": "20"}
        query = QueryFeatures(repos.podcast.query(), params).filter().query

        durations = sorted(p["audio"]["duration"] for p in repos.podcast.find(query))

        assert durations == [20.0, 25.0, 30.0]

    def test_comparison_never_matches_missing_values(self, repos, podcasts):
        query = QueryFeatures(repos.podcast.query(), {"audio.duration[lt]": "1000"}).filter().query

        results = repos.podcast.find(query)

        assert len(results) == 6
        assert all(p["audio"]["duration"] is not None for p in results)

    @pytest.mark.parametrize("page,limit", [("1", "2"), ("2", "2"), ("4", "2"), ("1", "100")])
    def test_docs_count_ignores_page_and_limit(self, repos, podcasts, page, limit):
        params = {"audio.duration[gt]": "5", "page": page, "limit": limit}

        listing = run_listing(repos.podcast, repos.podcast.query, params, DEFAULT_LIMIT)

        assert listing.docs_count == 5
        assert len(listing.documents) <= int(limit)

    def test_pages_concatenate_to_full_ordered_set(self, repos, podcasts):
        full = run_listing(repos.podcast, repos.podcast.query, {"sort": "-audio.duration"}, DEFAULT_LIMIT)

        paged = []
        for page in range(1, 5):
            params = {"sort": "-audio.duration", "page": str(page), "limit": "2"}
            paged.extend(run_listing(repos.podcast, repos.podcast.query, params, DEFAULT_LIMIT).documents)

        assert [p["id"] for p in paged] == [p["id"] for p in full.documents]
        assert len({p["id"] for p in paged}) == len(podcasts)

    def test_fields_projection_on_nested_documents(self, repos, podcasts):
        listing = run_listing(repos.podcast, repos.podcast.query, {"fields": "title,audio.duration"}, DEFAULT_LIMIT)

        assert set(listing.documents[0]) == {"id", "title", "audio"}

    def test_created_at_filter_with_non_utc_offset(self, repos, podcasts):
        """An offset timestamp selects the same instant as its UTC form."""
        hour_ago = (datetime.now(timezone.utc) - timedelta(hours=1)).astimezone(timezone(timedelta(hours=5)))
        hour_ahead = (datetime.now(timezone.utc) + timedelta(hours=1)).astimezone(timezone(timedelta(hours=-5)))

        since = run_listing(repos.podcast, repos.podcast.query, {"created_at[gte]": hour_ago.isoformat()}, DEFAULT_LIMIT)
        future = run_listing(
            repos.podcast, repos.podcast.query, {"created_at[gte]": hour_ahead.isoformat()}, DEFAULT_LIMIT
        )

        assert since.docs_count == len(podcasts)
        assert future.docs_count == 0
