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
User, profile and follow API endpoints.

Static paths (search, discover, me, admin) are declared before ``/{user_id}``
so they are never captured as an id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from pydantic import BaseModel

from ...models.user import User, UserRole
from ...services.user_service import account_document
from ..dependencies import AppState, get_app_state, require_admin, require_auth
from ..responses import api_response, list_response, listing_response

router = APIRouter()


class CreateUserRequest(BaseModel):
    """Request body for the admin create-user endpoint."""

    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.USER
    photo: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None
    user_type: Optional[str] = None


class UpdateUserRequest(BaseModel):
    """Request body for the admin update-user endpoint. Only sent fields are changed."""

    name: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None
    user_type: Optional[str] = None
    role: Optional[UserRole] = None
    active: Optional[bool] = None
    # Accepted only to be rejected with a pointer to the password route
    password: Optional[str] = None
    password_confirm: Optional[str] = None


# =============================================================================
# Listing and lookup
# =============================================================================


@router.get("")
async def get_users(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """List active users, each flagged with ``isFollowed``."""
    listing = state.user_service.list_users(user.id, request.query_params)
    return listing_response(listing, "users")


@router.post("", status_code=201)
async def create_user(
    body: CreateUserRequest,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> dict:
    created = state.user_service.create_user(**body.model_dump())
    return api_response({"user": account_document(created)})


@router.get("/search")
async def search_users(
    s: Optional[str] = None,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Up to 10 active users whose name or email contains ``s``."""
    return list_response(state.user_service.search_users(user.id, s), "users")


@router.get("/discover")
async def discover_users(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Active users the caller does not follow yet."""
    listing = state.user_service.discover_users(user.id, request.query_params)
    return listing_response(listing, "users")


# =============================================================================
# Self service
# =============================================================================


@router.get("/me")
async def get_me(
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    return api_response({"user": state.user_service.get_me(user)})


@router.patch("/updateMe")
async def update_me(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    user_type: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    password_confirm: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """
    Update the caller's profile from a multipart form.

    An uploaded ``photo`` is converted to WebP and hosted; its URL is saved.
    """
    submitted = {
        "name": name,
        "email": email,
        "language": language,
        "country": country,
        "user_type": user_type,
        "password": password,
        "password_confirm": password_confirm,
    }
    fields = {key: value for key, value in submitted.items() if value is not None}
    buffer = await photo.read() if photo is not None else None

    updated = await state.user_service.update_me(user, fields, photo=buffer)
    return api_response({"user": updated})


@router.delete("/deleteMe", status_code=204)
async def delete_me(
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> Response:
    """Deactivate the caller's account."""
    state.user_service.deactivate_me(user)
    return Response(status_code=204)


@router.get("/me/following")
async def get_my_following(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    listing = state.follower_service.list_following(user.id, user.id, request.query_params)
    return listing_response(listing, "users")


@router.get("/me/followers")
async def get_my_followers(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    listing = state.follower_service.list_followers(user.id, user.id, request.query_params)
    return listing_response(listing, "users")


# =============================================================================
# Administration
# =============================================================================


@router.get("/admin")
async def admin_get_users(
    request: Request,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> dict:
    """Every account with all fields, including deactivated ones."""
    listing = state.user_service.list_all_users(request.query_params)
    return listing_response(listing, "users")


@router.get("/admin/{user_id}")
async def admin_get_user(
    user_id: str,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> dict:
    return api_response({"user": state.user_service.get_full_user(user_id)})


# =============================================================================
# Single user and follow relationships
# =============================================================================


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Public profile of an active user with ``isFollowed``."""
    return api_response({"user": state.user_service.get_user(user.id, user_id)})


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> dict:
    updated = state.user_service.update_user(user_id, body.model_dump(exclude_unset=True))
    return api_response({"user": updated})


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> Response:
    """Permanently delete an account."""
    state.user_service.delete_user(user_id)
    return Response(status_code=204)


@router.get("/{user_id}/following")
async def get_following(
    user_id: str,
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Users that ``user_id`` follows."""
    listing = state.follower_service.list_following(user.id, user_id, request.query_params)
    return listing_response(listing, "users")


@router.post("/{user_id}/following", status_code=201)
async def follow_user(
    user_id: str,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Follow ``user_id``."""
    follow = state.follower_service.follow(user.id, user_id)
    return api_response({"follow": follow.model_dump(mode="json")})


@router.delete("/{user_id}/following", status_code=204)
async def unfollow_user(
    user_id: str,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> Response:
    """Stop following ``user_id``."""
    state.follower_service.unfollow(user.id, user_id)
    return Response(status_code=204)


@router.get("/{user_id}/followers")
async def get_followers(
    user_id: str,
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Users that follow ``user_id``."""
    listing = state.follower_service.list_followers(user.id, user_id, request.query_params)
    return listing_response(listing, "users")
