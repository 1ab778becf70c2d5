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
Route modules for the castline web server.

- health: Health check endpoints
- users: Users, profiles, follows and account administration
- podcasts: Podcast CRUD, search and upload signatures
- categories: Podcast categories
- live: Live audio room tokens
"""

from . import categories, health, live, podcasts, users

__all__ = ["health", "users", "podcasts", "categories", "live"]
