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
Access token encoding and decoding.

Two issuers share the signing secret: the login service, whose tokens carry
the user id in an ``id`` claim, and the ``castline create-user`` command,
which uses the registered ``sub`` claim. Both decode to the same
TokenPayload.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from structlog import get_logger

from ..models.user import TokenPayload

logger = get_logger(__name__)

SUBJECT_CLAIMS = ("sub", "id")


def create_access_token(
    user_id: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_days: int = 30,
    now: Optional[datetime] = None,
) -> str:
    """
    Sign a token for ``user_id`` valid for ``expires_days``.

    Args:
        user_id: The user's unique identifier (UUID)
        secret_key: Shared signing secret
        algorithm: JWT signing algorithm (default: HS256)
        expires_days: Lifetime in days (default: 30)
        now: Issue time (defaults to the current UTC time)
    """
    issued_at = now or datetime.now(timezone.utc)
    claims = TokenPayload(sub=user_id, iat=issued_at, exp=issued_at + timedelta(days=expires_days))

    return jwt.encode(claims.model_dump(), secret_key, algorithm=algorithm)


def _subject(claims: Dict[str, Any]) -> Optional[str]:
    for name in SUBJECT_CLAIMS:
        value = claims.get(name)
        if value:
            return str(value)
    return None


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """
    Verify a token and return its claims.

    Returns:
        TokenPayload, or None if the signature, expiry or subject is invalid
    """
    try:
        claims = jwt.decode(token, secret_key, algorithms=[algorithm], options={"require": ["exp", "iat"]})
    except jwt.ExpiredSignatureError:
        logger.debug("Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug("Invalid token", error=str(e))
        return None

    subject = _subject(claims)
    if subject is None:
        logger.debug("Token has no subject claim")
        return None

    return TokenPayload(
        sub=subject,
        iat=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
        exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
