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

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class AudioAsset(BaseModel):
    """Normalized descriptor of an audio file hosted on the media host."""

    url: str
    duration: Optional[float] = None  # seconds
    public_id: Optional[str] = None  # media host identifier, used for cleanup


class Podcast(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    title: str
    slug: str = ""  # URL-safe identifier (generated from title if empty)
    description: str = ""
    category: Optional[str] = None  # Category name, validated before save
    image: Optional[str] = None

    audio: AudioAsset
    created_by: str  # Owner user id, immutable after creation

    @model_validator(mode="after")
    def ensure_slug(self) -> "Podcast":
        """Auto-generate slug from title if not provided."""
        if not self.slug and self.title:
            from castline.utils.slug import generate_slug

            self.slug = generate_slug(self.title)
        return self


class Category(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
