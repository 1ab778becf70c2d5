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

"""Category API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...models.user import User
from ..dependencies import AppState, get_app_state, require_admin, require_auth
from ..responses import api_response, list_response

router = APIRouter()


class CreateCategoryRequest(BaseModel):
    name: str


@router.get("")
async def get_categories(
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    categories = state.category_service.list_categories()
    return list_response([c.model_dump(mode="json") for c in categories], "categories")


@router.post("", status_code=201)
async def create_category(
    body: CreateCategoryRequest,
    state: AppState = Depends(get_app_state),
    admin: User = Depends(require_admin),
) -> dict:
    category = state.category_service.create_category(body.name)
    return api_response({"category": category.model_dump(mode="json")})
