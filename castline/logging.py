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

"""Structured logging configuration for castline.

Environment Variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
    LOG_FORMAT: console, json, cloudwatch or auto. Default: auto
    LOG_FILE: Also write to this file (rotated at 100MB). Default: unset

Example:
    from structlog import get_logger

    from castline.logging import configure_structlog

    configure_structlog()
    logger = get_logger(__name__)
    logger.info("Podcast created", podcast_id="...", owner_id="...")
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

LOG_FORMATS = ("console", "json", "cloudwatch")

LOG_FILE_MAX_BYTES = 100 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# structlog key -> CloudWatch Logs Insights key
CLOUDWATCH_RENAMES = {"event": "message", "timestamp": "@timestamp"}


def _cloudwatch_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    for source, target in CLOUDWATCH_RENAMES.items():
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def get_log_level() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def get_log_format() -> str:
    """Resolve LOG_FORMAT; 'auto' means console on a TTY, JSON elsewhere. Unknown values mean JSON."""
    requested = os.getenv("LOG_FORMAT", "auto").lower()
    if requested == "auto":
        return "console" if sys.stderr.isatty() else "json"
    return requested if requested in LOG_FORMATS else "json"


def _build_processors(log_format: str) -> List[Any]:
    processors: List[Any] = [
        # request_id and friends, bound by LoggingMiddleware
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "console":
        processors.append(ConsoleRenderer(colors=True))
        return processors

    processors.append(structlog.processors.format_exc_info)
    if log_format == "cloudwatch":
        processors.append(_cloudwatch_processor)
    processors.append(JSONRenderer())
    return processors


def _stdlib_logger_factory(log_file: str, log_level: int) -> Any:
    """Route structlog through the root logger to stderr and a rotating file."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in (
        logging.StreamHandler(sys.stderr),
        RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS),
    ):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return structlog.stdlib.LoggerFactory()


def configure_structlog() -> None:
    """Configure structlog once at startup (the CLI entry point does this)."""
    log_level = get_log_level()
    log_file = os.getenv("LOG_FILE")

    if log_file:
        logger_factory = _stdlib_logger_factory(log_file, log_level)
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=_build_processors(get_log_format()),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )