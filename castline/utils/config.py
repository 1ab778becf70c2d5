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

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Config(BaseModel):
    # Storage
    database_path: Path = Path("./data/castline.db")

    # JWT authentication
    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30

    # Cloudinary media host
    cloud_name: str = ""
    cloud_api_key: str = ""
    cloud_api_secret: str = ""
    photo_folder: str = "userPhotos"
    photo_quality: int = 20

    # Agora live audio
    agora_app_id: str = ""
    agora_app_certificate: str = ""
    rtc_token_ttl_seconds: int = 18000  # 5 hours

    # Listing
    default_page_limit: int = 100

    # Web
    cors_origins: List[str] = [
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",
    ]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._ensure_directories()

    def _ensure_directories(self):
        """Create the database directory if it doesn't exist"""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def media_configured(self) -> bool:
        """True when all Cloudinary credentials are present"""
        return bool(self.cloud_name and self.cloud_api_key and self.cloud_api_secret)


def load_config(env_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and .env file"""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    cors_origins = os.getenv("CORS_ORIGINS")

    config_data = {
        "database_path": Path(os.getenv("DATABASE_PATH", "./data/castline.db")),
        "jwt_secret_key": os.getenv("JWT_SECRET_KEY", ""),
        "jwt_algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
        "jwt_expire_days": int(os.getenv("JWT_EXPIRE_DAYS", "30")),
        "cloud_name": os.getenv("CLOUD_NAME", ""),
        "cloud_api_key": os.getenv("CLOUD_API_KEY", ""),
        "cloud_api_secret": os.getenv("CLOUD_API_SECRET", ""),
        "photo_folder": os.getenv("PHOTO_FOLDER", "userPhotos"),
        "photo_quality": int(os.getenv("PHOTO_QUALITY", "20")),
        "agora_app_id": os.getenv("AGORA_APP_ID", ""),
        "agora_app_certificate": os.getenv("AGORA_APP_CERTIFICATE", ""),
        "rtc_token_ttl_seconds": int(os.getenv("RTC_TOKEN_TTL_SECONDS", "18000")),
        "default_page_limit": int(os.getenv("DEFAULT_PAGE_LIMIT", "100")),
    }

    if cors_origins:
        config_data["cors_origins"] = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

    return Config(**config_data)
