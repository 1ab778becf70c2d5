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
Follower service for managing user-to-user follow relationships.

Handles the business logic for following and unfollowing users and for
listing either side of the relationship.
"""

from typing import Mapping

from structlog import get_logger

from ..core.relationship_annotator import RelationshipAnnotator
from ..models.user import Follow
from ..repositories.follow_repository import FollowRepository
from ..repositories.user_repository import UserRepository
from ..utils.exceptions import DuplicateError, InvalidInputError, NotFoundError
from .listing import Listing, run_listing
from .user_service import PRIVATE_USER_FIELDS, USER_NOT_FOUND_MESSAGE

logger = get_logger(__name__)


class AlreadyFollowingError(InvalidInputError):
    """Raised when the user already follows the target."""

    pass


class NotFollowingError(NotFoundError):
    """Raised when the user does not follow the target."""

    pass


class FollowerService:
    """
    Service for managing follow relationships.

    Handles business logic and validation for follow/unfollow operations.
    """

    def __init__(
        self,
        follow_repository: FollowRepository,
        user_repository: UserRepository,
        annotator: RelationshipAnnotator,
        default_page_limit: int = 100,
    ):
        """
        Initialize the follower service.

        Args:
            follow_repository: Repository for follow edge persistence
            user_repository: Repository for user data (for validation and listings)
            annotator: Adds ``isFollowed`` to listed users
            default_page_limit: Page size when the client gives none
        """
        self.follow_repository = follow_repository
        self.user_repository = user_repository
        self.annotator = annotator
        self.default_page_limit = default_page_limit

        logger.info("FollowerService initialized")

    def follow(self, user_id: str, target_id: str) -> Follow:
        """
        User follows another user.

        Args:
            user_id: ID of the acting user
            target_id: ID of the user to follow

        Returns:
            The created Follow edge

        Raises:
            InvalidInputError: If the user tries to follow themselves
            NotFoundError: If the target doesn't exist or is inactive
            AlreadyFollowingError: If the user already follows the target
        """
        if user_id == target_id:
            raise InvalidInputError("You cannot follow yourself")

        if not self.user_repository.get_by_id(target_id):
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=target_id)

        if self.follow_repository.exists(user_id, target_id):
            raise AlreadyFollowingError("You already follow this user", user_id=target_id)

        try:
            saved = self.follow_repository.add(Follow(follower_id=user_id, following_id=target_id))
        except DuplicateError as e:
            # Handle race condition where another request created the edge
            raise AlreadyFollowingError("You already follow this user", user_id=target_id) from e

        logger.info("User followed user", follower_id=user_id, following_id=target_id)
        return saved

    def unfollow(self, user_id: str, target_id: str) -> None:
        """
        User unfollows another user.

        Raises:
            NotFollowingError: If the user doesn't follow the target
        """
        if not self.follow_repository.remove(user_id, target_id):
            raise NotFollowingError("You do not follow this user", user_id=target_id)

        logger.info("User unfollowed user", follower_id=user_id, following_id=target_id)

    def list_following(self, acting_user_id: str, user_id: str, params: Mapping[str, str]) -> Listing:
        """Users followed by ``user_id``, annotated relative to the acting user."""
        self._require_user(user_id)
        return self._annotated_listing(
            acting_user_id,
            lambda: self.user_repository.query_following(user_id),
            params,
        )

    def list_followers(self, acting_user_id: str, user_id: str, params: Mapping[str, str]) -> Listing:
        """Users following ``user_id``, annotated relative to the acting user."""
        self._require_user(user_id)
        return self._annotated_listing(
            acting_user_id,
            lambda: self.user_repository.query_followers(user_id),
            params,
        )

    def _require_user(self, user_id: str) -> None:
        if not self.user_repository.get_by_id(user_id):
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user_id)

    def _annotated_listing(self, acting_user_id: str, make_query, params: Mapping[str, str]) -> Listing:
        listing = run_listing(
            self.user_repository,
            make_query,
            params,
            self.default_page_limit,
            hidden_fields=PRIVATE_USER_FIELDS,
        )
        listing.documents = self.annotator.annotate(listing.documents, acting_user_id)
        return listing
