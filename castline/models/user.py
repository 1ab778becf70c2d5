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

"""User accounts, token claims and follow relationships."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Account roles. Admins can manage other accounts and categories."""

    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """
    User account.

    Users are soft-deleted through ``active``; an inactive user is hidden from
    every public query and cannot authenticate.

    Attributes:
        id: Internal UUID for the user
        email: User's email address (unique)
        name: Display name
        photo: Hosted profile photo URL
        country: Free-form country name
        language: Preferred language
        user_type: Free-form account type chosen by the user (e.g. "listener")
        role: Authorization role
        password_reset_token: Pending reset token (managed by the login service)
        password_reset_expires: Expiry of the pending reset token
        active: False once the user deleted their account
        created_at: When the account was created
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None
    user_type: Optional[str] = None
    role: UserRole = UserRole.USER
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class TokenPayload(BaseModel):
    """
    JWT token payload claims.

    Attributes:
        sub: Subject - the user ID
        exp: Expiration time
        iat: Issued at time
    """

    sub: str  # user_id
    exp: datetime
    iat: datetime


class Follow(BaseModel):
    """
    Directional follow edge between two users.

    Attributes:
        id: Internal UUID for the relationship
        follower_id: ID of the user who follows
        following_id: ID of the user being followed
        created_at: When the follow happened
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    follower_id: str
    following_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
