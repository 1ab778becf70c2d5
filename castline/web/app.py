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
FastAPI application factory for the castline web server.

This module creates and configures the FastAPI application with:
- Dependency injection for services (shared with the CLI)
- The single route table (one router per resource)
- Logging and CORS middleware
- Error envelopes for application, HTTP and validation errors

Usage:
    from castline.web.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

from ..utils.config import Config, load_config
from ..utils.exceptions import CastlineError
from .dependencies import AppState, build_app_state
from .middleware import LoggingMiddleware
from .responses import error_response
from .routes import categories, health, live, podcasts, users

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as a fail/error envelope."""

    @app.exception_handler(CastlineError)
    async def castline_error_handler(request: Request, exc: CastlineError):
        if exc.status_code >= 500:
            logger.error("request_error", error=str(exc), error_type=type(exc).__name__)
        else:
            logger.info("request_rejected", error=str(exc), error_type=type(exc).__name__, status_code=exc.status_code)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))


def create_app(config: Optional[Config] = None, app_state: Optional[AppState] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Optional Config object. If not provided, loads from environment.
        app_state: Pre-built state (tests); built from ``config`` otherwise.

    Returns:
        Configured FastAPI application instance.
    """
    if app_state is None:
        if config is None:
            config = load_config()
        app_state = build_app_state(config)
    config = app_state.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown."""
        logger.info("Starting castline web server", database=str(config.database_path))
        if not config.media_configured:
            logger.warning("Cloudinary credentials missing, media uploads will fail")

        yield

        logger.info("Shutting down castline web server")

    app = FastAPI(
        title="castline",
        description="Podcast and social audio API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Available to dependencies before lifespan runs (TestClient without context)
    app.state.app_state = app_state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    # Route table
    app.include_router(health.router, tags=["health"])
    app.include_router(categories.router, prefix="/categories", tags=["categories"])
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(podcasts.router, prefix="/podcasts", tags=["podcasts"])
    app.include_router(live.router, prefix="/live", tags=["live"])

    logger.info("FastAPI application created successfully")

    return app
