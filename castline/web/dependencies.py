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
FastAPI dependency injection for the castline web server.

This module provides the AppState container, its factory, and the
authentication dependencies used by route handlers.

Usage:
    from fastapi import Depends
    from castline.web.dependencies import AppState, get_app_state, require_auth

    @router.get("/podcasts")
    async def list_podcasts(state: AppState = Depends(get_app_state), user: User = Depends(require_auth)):
        ...
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from fastapi import Depends, HTTPException, Request

from ..utils.exceptions import ForbiddenError

if TYPE_CHECKING:
    from ..models.user import User
    from ..repositories.database import Repositories
    from ..services import AuthService, CategoryService, FollowerService, MediaService, PodcastService, UserService
    from ..utils.config import Config


@dataclass
class AppState:
    """
    Application state container for dependency injection.

    Built once at startup and read-only afterwards.

    Attributes:
        config: Application configuration
        repositories: SQLite repositories
        auth_service: JWT verification
        media_service: Cloudinary adapter
        category_service: Category management
        podcast_service: Podcast CRUD and search
        user_service: Profiles, discovery and administration
        follower_service: Follow relationships
    """

    config: "Config"
    repositories: "Repositories"
    auth_service: "AuthService"
    media_service: "MediaService"
    category_service: "CategoryService"
    podcast_service: "PodcastService"
    user_service: "UserService"
    follower_service: "FollowerService"


def build_app_state(config: "Config") -> AppState:
    """
    Wire repositories and services for ``config``.

    Shared by the web application factory and the CLI.
    """
    from ..core.relationship_annotator import RelationshipAnnotator
    from ..repositories.database import create_repositories
    from ..services import AuthService, CategoryService, FollowerService, MediaService, PodcastService, UserService

    repositories = create_repositories(config)
    annotator = RelationshipAnnotator(repositories.follow)
    media_service = MediaService(config)
    category_service = CategoryService(repositories.category)

    return AppState(
        config=config,
        repositories=repositories,
        auth_service=AuthService(config, repositories.user),
        media_service=media_service,
        category_service=category_service,
        podcast_service=PodcastService(
            repositories.podcast,
            category_service,
            media_service,
            default_page_limit=config.default_page_limit,
        ),
        user_service=UserService(
            repositories.user,
            annotator,
            media_service,
            default_page_limit=config.default_page_limit,
        ),
        follower_service=FollowerService(
            repositories.follow,
            repositories.user,
            annotator,
            default_page_limit=config.default_page_limit,
        ),
    )


def get_app_state(request: Request) -> AppState:
    """
    FastAPI dependency to get the application state.

    Args:
        request: FastAPI request object

    Returns:
        AppState instance with all services
    """
    return request.app.state.app_state


# Cookie name for authentication token
AUTH_COOKIE_NAME = "auth_token"


def _get_token_from_request(request: Request) -> Optional[str]:
    """Extract auth token from the Authorization header or cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return request.cookies.get(AUTH_COOKIE_NAME)


def get_current_user(
    request: Request,
    state: AppState = Depends(get_app_state),
) -> Optional["User"]:
    """
    FastAPI dependency to get the current user (optional).

    Returns:
        Active User if a valid token was sent, None otherwise
    """
    token = _get_token_from_request(request)
    return state.auth_service.get_current_user(token)


def require_auth(user: Optional["User"] = Depends(get_current_user)) -> "User":
    """
    FastAPI dependency that requires authentication.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or
            belongs to an inactive user
    """
    if not user:
        raise HTTPException(
            status_code=401,
            detail="You are not logged in! Please log in to get access.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def require_admin(user: "User" = Depends(require_auth)) -> "User":
    """
    FastAPI dependency that requires the admin role.

    Raises:
        ForbiddenError: 403 for non-admin users
    """
    if not user.is_admin:
        raise ForbiddenError("You do not have permission to perform this action", user_id=user.id)

    return user
