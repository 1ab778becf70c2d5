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

"""Decorates user documents with whether the acting user follows them."""

from typing import Any, Dict, List

from ..repositories.follow_repository import FollowRepository

IS_FOLLOWED_KEY = "isFollowed"


class RelationshipAnnotator:
    """
    Adds the derived ``isFollowed`` flag to user documents.

    A batch of N users costs one follow lookup, never N. Input documents are
    left untouched; annotated copies are returned.
    """

    def __init__(self, follow_repository: FollowRepository):
        self.follow_repository = follow_repository

    def annotate(self, users: List[Dict[str, Any]], acting_user_id: str) -> List[Dict[str, Any]]:
        if not users:
            return []

        user_ids = [user["id"] for user in users]
        followed = self.follow_repository.get_followed_among(acting_user_id, user_ids)

        return [{**user, IS_FOLLOWED_KEY: user["id"] in followed} for user in users]

    def annotate_one(self, user: Dict[str, Any], acting_user_id: str) -> Dict[str, Any]:
        is_followed = self.follow_repository.exists(acting_user_id, user["id"])
        return {**user, IS_FOLLOWED_KEY: is_followed}
