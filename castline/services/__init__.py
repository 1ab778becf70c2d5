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
Service layer for castline.

Services hold the business rules and raise castline exceptions; they are
shared by the web routes and the CLI.
"""

from .auth_service import AuthService
from .category_service import CategoryService
from .follower_service import AlreadyFollowingError, FollowerService, NotFollowingError
from .listing import Listing, run_listing
from .media_service import MediaService
from .podcast_service import PodcastService
from .rtc_token_service import generate_rtc_token
from .user_service import UserService

__all__ = [
    "AuthService",
    "CategoryService",
    "FollowerService",
    "AlreadyFollowingError",
    "NotFollowingError",
    "Listing",
    "run_listing",
    "MediaService",
    "PodcastService",
    "UserService",
    "generate_rtc_token",
]
