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

"""Unit tests for RelationshipAnnotator."""

from typing import List, Set

from castline.core.relationship_annotator import IS_FOLLOWED_KEY, RelationshipAnnotator
from castline.models.user import Follow
from castline.repositories.follow_repository import FollowRepository


class CountingFollowRepository(FollowRepository):
    """In-memory follow edges that count store round-trips."""

    def __init__(self, edges):
        self.edges = set(edges)
        self.calls = 0

    def add(self, follow: Follow) -> Follow:
        self.calls += 1
        self.edges.add((follow.follower_id, follow.following_id))
        return follow

    def remove(self, follower_id: str, following_id: str) -> bool:
        self.calls += 1
        return bool(self.edges.discard((follower_id, following_id)))

    def exists(self, follower_id: str, following_id: str) -> bool:
        self.calls += 1
        return (follower_id, following_id) in self.edges

    def get_followed_among(self, follower_id: str, user_ids: List[str]) -> Set[str]:
        self.calls += 1
        return {uid for uid in user_ids if (follower_id, uid) in self.edges}


class TestAnnotate:
    def test_flags_followed_users(self):
        repo = CountingFollowRepository({("me", "u1"), ("me", "u3"), ("other", "u2")})
        annotator = RelationshipAnnotator(repo)
        users = [{"id": "u1"}, {"id": "u2"}, {"id": "u3"}]

        result = annotator.annotate(users, "me")

        assert [u[IS_FOLLOWED_KEY] for u in result] == [True, False, True]

    def test_single_round_trip_for_many_users(self):
        repo = CountingFollowRepository({("me", "u5")})
        annotator = RelationshipAnnotator(repo)
        users = [{"id": f"u{i}"} for i in range(50)]

        annotator.annotate(users, "me")

        assert repo.calls == 1

    def test_empty_list_costs_nothing(self):
        repo = CountingFollowRepository(set())

        assert RelationshipAnnotator(repo).annotate([], "me") == []
        assert repo.calls == 0

    def test_inputs_are_not_mutated(self):
        annotator = RelationshipAnnotator(CountingFollowRepository({("me", "u1")}))
        users = [{"id": "u1", "name": "A"}]

        result = annotator.annotate(users, "me")

        assert users == [{"id": "u1", "name": "A"}]
        assert result == [{"id": "u1", "name": "A", IS_FOLLOWED_KEY: True}]


class TestAnnotateOne:
    def test_single_existence_check(self):
        repo = CountingFollowRepository({("me", "u1")})

        result = RelationshipAnnotator(repo).annotate_one({"id": "u1"}, "me")

        assert result[IS_FOLLOWED_KEY] is True
        assert repo.calls == 1
