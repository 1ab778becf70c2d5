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

"""Agora RTC tokens for live audio rooms."""

import time
from typing import Optional

from agora_token_builder import RtcTokenBuilder
from structlog import get_logger

from ..utils.config import Config

logger = get_logger(__name__)

# Agora RTC roles
ROLE_PUBLISHER = 1
ROLE_SUBSCRIBER = 2

# uid 0 lets any user id join with the token
ANY_UID = 0


def generate_rtc_token(
    config: Config,
    channel: str,
    is_publisher: bool,
    now: Optional[int] = None,
) -> Optional[str]:
    """
    Build an RTC token for ``channel`` valid for ``config.rtc_token_ttl_seconds``.

    Args:
        config: Application configuration (Agora app id and certificate)
        channel: Channel name
        is_publisher: Publisher role if True, subscriber otherwise
        now: Current unix time (defaults to time.time())

    Returns:
        Token string, or None if it could not be built
    """
    if not config.agora_app_id or not config.agora_app_certificate:
        logger.error("rtc_token_failed", channel=channel, error="Agora credentials are not configured")
        return None

    issued_at = int(time.time()) if now is None else now
    expire_at = issued_at + config.rtc_token_ttl_seconds
    role = ROLE_PUBLISHER if is_publisher else ROLE_SUBSCRIBER

    try:
        return RtcTokenBuilder.buildTokenWithUid(
            config.agora_app_id,
            config.agora_app_certificate,
            channel,
            ANY_UID,
            role,
            expire_at,
        )
    except Exception as e:
        logger.error("rtc_token_failed", channel=channel, role=role, error=str(e))
        return None
