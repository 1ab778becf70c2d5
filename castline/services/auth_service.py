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
Authentication service.

Password login and signup live in a separate service that shares the JWT
secret. This service only issues tokens (for the CLI) and resolves a bearer
token to an active user.
"""

import secrets
from typing import Optional

from structlog import get_logger

from ..models.user import TokenPayload, User
from ..repositories.user_repository import UserRepository
from ..utils.config import Config
from ..utils.jwt import create_access_token, decode_token

logger = get_logger(__name__)


class AuthService:
    """Issues and verifies access tokens for active users."""

    def __init__(self, config: Config, user_repository: UserRepository):
        self.user_repository = user_repository
        self.jwt_algorithm = config.jwt_algorithm
        self.jwt_expire_days = config.jwt_expire_days
        self.jwt_secret_key = config.jwt_secret_key

        if not self.jwt_secret_key:
            # Tokens signed with a generated key are rejected by the login service and die on restart
            logger.warning("JWT_SECRET_KEY not set, generating random key for this session")
            self.jwt_secret_key = secrets.token_hex(32)

    def create_jwt(self, user: User) -> str:
        return create_access_token(
            user_id=user.id,
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            expires_days=self.jwt_expire_days,
        )

    def verify_jwt(self, token: str) -> Optional[TokenPayload]:
        return decode_token(token, self.jwt_secret_key, self.jwt_algorithm)

    def get_current_user(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a bearer token to its user.

        Returns:
            The user if the token verifies and the account is still active,
            None otherwise
        """
        payload = self.verify_jwt(token) if token else None
        if payload is None:
            return None

        user = self.user_repository.get_by_id(payload.sub)
        if user is None:
            logger.debug("Token subject is unknown or inactive", user_id=payload.sub)
        return user
