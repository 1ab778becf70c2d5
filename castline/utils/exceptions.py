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
Custom exception classes for the castline application.

Every application error carries the HTTP status it should be rendered with,
so services can raise domain errors without knowing about the web layer and
the FastAPI exception handler can map them uniformly.

Example:
    try:
        podcast_service.delete_podcast(user.id, podcast_id)
    except NotFoundError as e:
        logger.info("Nothing to delete", error=e.message)
"""


class CastlineError(Exception):
    """
    Base exception for all castline application errors.

    Attributes:
        message: Human-readable error message (returned to API clients)
        context: Optional dict of additional error context (ids, fields, etc.)
        status_code: HTTP status used when the error reaches the web layer

    Example:
        raise CastlineError("Failed to save podcast", podcast_id="abc")
    """

    status_code = 500

    def __init__(self, message: str, **context):
        """
        Initialize CastlineError.

        Args:
            message: Human-readable error message
            **context: Optional keyword arguments for error context
        """
        super().__init__(message)
        self.message = message
        self.context = context if context else {}

    def __str__(self):
        """Return string representation of error."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self):
        """Return detailed representation for debugging."""
        name = type(self).__name__
        if self.context:
            return f"{name}(message={self.message!r}, context={self.context!r})"
        return f"{name}(message={self.message!r})"


class InvalidInputError(CastlineError):
    """Bad or missing client input (empty search term, unknown category, non-audio upload)."""

    status_code = 400


class MediaUploadError(InvalidInputError):
    """Raised when a media asset cannot be transcoded, uploaded or is not configured."""

    pass


class StoreError(CastlineError):
    """
    Any failure raised by the document store.

    Store exceptions are rewrapped here with their original message. This
    collapses malformed identifiers and store outages into one client-visible
    category (400).
    """

    status_code = 400


class QueryError(StoreError):
    """A pending query referenced an unknown field or carried an uncoercible value."""

    pass


class DuplicateError(StoreError):
    """A uniqueness constraint was violated (duplicate email, follow edge or category)."""

    pass


class NotFoundError(CastlineError):
    """Target does not exist, or exists but is not owned by the acting user."""

    status_code = 404


class ForbiddenError(CastlineError):
    """Acting user lacks the role required for the operation."""

    status_code = 403


__all__ = [
    "CastlineError",
    "InvalidInputError",
    "MediaUploadError",
    "StoreError",
    "QueryError",
    "DuplicateError",
    "NotFoundError",
    "ForbiddenError",
]
