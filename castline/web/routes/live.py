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

"""Live audio room endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...models.user import User
from ...services.rtc_token_service import generate_rtc_token
from ..dependencies import AppState, get_app_state, require_auth
from ..responses import api_response

router = APIRouter()


class TokenRequest(BaseModel):
    """Request body for an RTC token."""

    channel: str = Field(..., min_length=1)
    is_publisher: bool = False


@router.post("/token")
async def create_token(
    body: TokenRequest,
    state: AppState = Depends(get_app_state),
    user: User = Depends(require_auth),
) -> dict:
    """
    Issue an RTC token for a channel.

    Returns:
        {"token": "..."}, or {"token": null} if the token could not be built.
    """
    token = generate_rtc_token(state.config, body.channel, body.is_publisher)
    return api_response({"token": token})
