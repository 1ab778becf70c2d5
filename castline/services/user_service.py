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
User service - profiles, discovery, search and account administration.

Public views never include PRIVATE_USER_FIELDS. The acting user's own record
and the admin views include everything except password reset state, which
belongs to the login service.
"""

from typing import Any, Dict, List, Mapping, Optional

from structlog import get_logger

from ..core.relationship_annotator import RelationshipAnnotator
from ..models.user import User, UserRole
from ..repositories.user_repository import ADMIN_UPDATABLE_FIELDS, SELF_UPDATABLE_FIELDS, UserRepository
from ..utils.exceptions import InvalidInputError, NotFoundError
from .listing import SEARCH_LIMIT, Listing, require_search_term, run_listing
from .media_service import MediaService

logger = get_logger(__name__)

PRIVATE_USER_FIELDS = frozenset({"role", "password_reset_token", "password_reset_expires", "active"})
RESET_FIELDS = frozenset({"password_reset_token", "password_reset_expires"})
PASSWORD_FIELDS = frozenset({"password", "password_confirm"})
# Stored NOT NULL; a null in an update body leaves them unchanged
REQUIRED_USER_FIELDS = frozenset({"email", "role", "active"})

USER_NOT_FOUND_MESSAGE = "There is no user with that ID"
PASSWORD_UPDATE_MESSAGE = "This route is not for password updates. Please use /updateMyPassword"


def _allowed_updates(fields: Dict[str, Any], allowed: frozenset) -> Dict[str, Any]:
    return {
        key: value
        for key, value in fields.items()
        if key in allowed and not (value is None and key in REQUIRED_USER_FIELDS)
    }


def public_document(user: User) -> Dict[str, Any]:
    return user.model_dump(mode="json", exclude=set(PRIVATE_USER_FIELDS))


def account_document(user: User) -> Dict[str, Any]:
    return user.model_dump(mode="json", exclude=set(RESET_FIELDS))


class UserService:
    """Business logic for user profiles and administration."""

    def __init__(
        self,
        user_repository: UserRepository,
        annotator: RelationshipAnnotator,
        media_service: MediaService,
        default_page_limit: int = 100,
    ):
        self.user_repository = user_repository
        self.annotator = annotator
        self.media_service = media_service
        self.default_page_limit = default_page_limit

    # =========================================================================
    # Public views
    # =========================================================================

    def list_users(self, acting_user_id: str, params: Mapping[str, str]) -> Listing:
        """Active users with query features applied, annotated with ``isFollowed``."""
        listing = run_listing(
            self.user_repository,
            lambda: self.user_repository.query(),
            params,
            self.default_page_limit,
            hidden_fields=PRIVATE_USER_FIELDS,
        )
        listing.documents = self.annotator.annotate(listing.documents, acting_user_id)
        return listing

    def get_user(self, acting_user_id: str, user_id: str) -> Dict[str, Any]:
        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user_id)
        return self.annotator.annotate_one(public_document(user), acting_user_id)

    def discover_users(self, acting_user_id: str, params: Mapping[str, str]) -> Listing:
        """Active users the acting user does not follow yet (never themselves)."""
        listing = run_listing(
            self.user_repository,
            lambda: self.user_repository.query_not_followed_by(acting_user_id),
            params,
            self.default_page_limit,
            hidden_fields=PRIVATE_USER_FIELDS,
        )
        listing.documents = self.annotator.annotate(listing.documents, acting_user_id)
        return listing

    def search_users(self, acting_user_id: str, term: Optional[str]) -> List[Dict[str, Any]]:
        """
        Case-insensitive name/email search, at most 10 results.

        Raises:
            InvalidInputError: If the term is empty
        """
        users = self.user_repository.search(require_search_term(term), limit=SEARCH_LIMIT)
        documents = [{k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS} for user in users]
        return self.annotator.annotate(documents, acting_user_id)

    # =========================================================================
    # Self service
    # =========================================================================

    def get_me(self, user: User) -> Dict[str, Any]:
        return account_document(user)

    async def update_me(self, user: User, fields: Dict[str, Any], photo: Optional[bytes] = None) -> Dict[str, Any]:
        """
        Update the acting user's profile.

        Args:
            user: Acting user
            fields: Submitted values; anything outside the profile allow-list is dropped
            photo: Raw uploaded image, transcoded and hosted before saving

        Raises:
            InvalidInputError: If a password field was submitted
            MediaUploadError: If the photo could not be processed or uploaded
        """
        if PASSWORD_FIELDS & set(fields):
            raise InvalidInputError(PASSWORD_UPDATE_MESSAGE)

        updates = _allowed_updates(fields, SELF_UPDATABLE_FIELDS)
        if photo:
            updates["photo"] = await self.media_service.upload_profile_photo(photo)

        updated = self.user_repository.update(user.id, updates)
        if not updated:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user.id)

        logger.info("Updated profile", user_id=user.id, fields=sorted(updates))
        return account_document(updated)

    def deactivate_me(self, user: User) -> None:
        """Soft-delete the acting user's account."""
        self.user_repository.update(user.id, {"active": False})
        logger.info("Deactivated account", user_id=user.id)

    # =========================================================================
    # Administration
    # =========================================================================

    def list_all_users(self, params: Mapping[str, str]) -> Listing:
        """Every account, including inactive ones and private fields."""
        return run_listing(
            self.user_repository,
            lambda: self.user_repository.query(active_only=False),
            params,
            self.default_page_limit,
        )

    def get_full_user(self, user_id: str) -> Dict[str, Any]:
        user = self.user_repository.get_by_id(user_id, active_only=False)
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user_id)
        return account_document(user)

    def create_user(
        self,
        email: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.USER,
        **profile: Any,
    ) -> User:
        """
        Create an account.

        Raises:
            InvalidInputError: If the email is empty or already registered
        """
        email = email.strip().lower()
        if not email:
            raise InvalidInputError("Please, provide an email")
        if self.user_repository.get_by_email(email):
            raise InvalidInputError("A user with this email already exists", email=email)

        profile = {key: value for key, value in profile.items() if key in SELF_UPDATABLE_FIELDS}
        return self.user_repository.create(User(email=email, name=name, role=role, **profile))

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if PASSWORD_FIELDS & set(fields):
            raise InvalidInputError(PASSWORD_UPDATE_MESSAGE)

        updates = _allowed_updates(fields, ADMIN_UPDATABLE_FIELDS)
        updated = self.user_repository.update(user_id, updates, active_only=False)
        if not updated:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user_id)
        return account_document(updated)

    def delete_user(self, user_id: str) -> None:
        """Physically remove an account and, by cascade, its podcasts and follow edges."""
        if not self.user_repository.delete(user_id):
            raise NotFoundError(USER_NOT_FOUND_MESSAGE, user_id=user_id)
