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
Podcast API endpoints.

Listing endpoints accept the query features described in
castline.core.query_features (filters, sort, fields, page, limit).
Every endpoint requires authentication; mutations act on the caller's own
podcasts only.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ...models.user import User
from ..dependencies import AppState, get_app_state, require_auth
from ..responses import api_response, list_response, listing_response

router = APIRouter()


class CreatePodcastRequest(BaseModel):
    """Request body for creating a podcast.

    ``audio`` is the upload result returned by the media host to the client
    (secure_url, duration, public_id, ...).
    """

    title: str
    description: str = ""
    category: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[Dict[str, Any]] = None


class UpdatePodcastRequest(BaseModel):
    """Request body for updating a podcast. Only sent fields are changed."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None


@router.get("")
async def get_podcasts(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """
    List podcasts with their owners populated.

    Returns:
        Page of podcasts with ``results`` and ``docsCount``.
    """
    listing = state.podcast_service.list_podcasts(request.query_params)
    return listing_response(listing, "podcasts")


@router.get("/me")
async def get_my_podcasts(
    request: Request,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """List podcasts created by the authenticated user."""
    listing = state.podcast_service.list_podcasts(request.query_params, owner_id=user.id)
    return listing_response(listing, "podcasts")


@router.get("/search")
async def search_podcasts(
    s: Optional[str] = None,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """
    Full-text search over title, description and category.

    Args:
        s: Search term (required, non-empty)

    Returns:
        Up to 10 podcasts, most relevant first.
    """
    podcasts = state.podcast_service.search_podcasts(s)
    return list_response(podcasts, "podcasts")


@router.post("/upload-signature")
async def create_upload_signature(
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Signed parameters for uploading audio directly to the media host."""
    return api_response(state.podcast_service.create_upload_signature())


@router.post("", status_code=201)
async def create_podcast(
    body: CreatePodcastRequest,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """
    Create a podcast owned by the authenticated user.

    Returns:
        The created podcast.
    """
    podcast = state.podcast_service.create_podcast(
        owner_id=user.id,
        title=body.title,
        audio=body.audio,
        description=body.description,
        category=body.category,
        image=body.image,
    )
    return api_response({"podcast": podcast})


@router.get("/{podcast_id}")
async def get_podcast(
    podcast_id: str,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    return api_response({"podcast": state.podcast_service.get_podcast(podcast_id)})


@router.patch("/{podcast_id}")
async def update_podcast(
    podcast_id: str,
    body: UpdatePodcastRequest,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Update one of the authenticated user's podcasts (404 for anyone else's)."""
    podcast = state.podcast_service.update_podcast(user.id, podcast_id, body.model_dump(exclude_unset=True))
    return api_response({"podcast": podcast})


@router.delete("/{podcast_id}")
async def delete_podcast(
    podcast_id: str,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """Delete one of the authenticated user's podcasts and its hosted audio."""
    await state.podcast_service.delete_podcast(user.id, podcast_id)
    return api_response(message="Podcast is deleted")
